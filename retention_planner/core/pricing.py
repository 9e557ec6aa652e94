"""
Backup storage pricing.

Fixed per-GB monthly prices for long-term retention backup storage by
redundancy tier. No dynamic fetching.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Dict, Union


class StorageRedundancy(str, Enum):
    """Replication scheme for stored backups."""
    LRS = "LRS"          # Locally redundant
    ZRS = "ZRS"          # Zone redundant
    RA_GRS = "RA-GRS"    # Read-access geo redundant
    RA_GZRS = "RA-GZRS"  # Read-access geo-zone redundant


@dataclass(frozen=True)
class RedundancyPricing:
    """Storage price for a single redundancy tier."""
    price_per_gb_month: Decimal


@dataclass(frozen=True)
class PricingTable:
    """Fixed pricing table for supported redundancy tiers."""
    prices: Dict[StorageRedundancy, RedundancyPricing]

    def get_pricing(self, redundancy: Union[StorageRedundancy, str]) -> RedundancyPricing:
        """Get pricing for a redundancy tier.

        Args:
            redundancy: Tier enum member or its name, e.g. "RA-GRS"

        Returns:
            RedundancyPricing for the tier

        Raises:
            ValueError: If the tier is not supported
        """
        tier = _parse_redundancy(redundancy)
        if tier not in self.prices:
            raise ValueError(f"Unsupported redundancy tier: {redundancy}")
        return self.prices[tier]


PRICING_TABLE = PricingTable({
    StorageRedundancy.LRS: RedundancyPricing(Decimal("0.025")),
    StorageRedundancy.ZRS: RedundancyPricing(Decimal("0.025")),
    StorageRedundancy.RA_GRS: RedundancyPricing(Decimal("0.05")),
    StorageRedundancy.RA_GZRS: RedundancyPricing(Decimal("0.05")),
})

# Price used for databases without a configured redundancy tier
FALLBACK_STORAGE_PRICE = 0.025


def _parse_redundancy(redundancy: Union[StorageRedundancy, str]) -> StorageRedundancy:
    if isinstance(redundancy, StorageRedundancy):
        return redundancy
    try:
        return StorageRedundancy(str(redundancy).upper())
    except ValueError:
        raise ValueError(f"Unsupported redundancy tier: {redundancy}")


def get_storage_price(redundancy: Union[StorageRedundancy, str]) -> float:
    """Return the $/GB/month backup storage price for a redundancy tier.

    Raises:
        ValueError: If the tier is not supported
    """
    return float(PRICING_TABLE.get_pricing(redundancy).price_per_gb_month)
