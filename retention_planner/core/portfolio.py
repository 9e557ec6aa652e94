"""
Multi-database cost projection.

Applies the cost engine to every database in a portfolio and combines the
results into per-database breakdowns and a shared timeline.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Union

from .calculator import (
    CostBreakdown,
    CostParameters,
    RetentionSettings,
    TimelineDataset,
    TimelineSeries,
    TOTAL_COST_LABEL,
    XAxisInterval,
    calculate_current_cost_breakdown,
    generate_timeline_data,
)
from .pricing import FALLBACK_STORAGE_PRICE, StorageRedundancy, get_storage_price

logger = logging.getLogger(__name__)

PORTFOLIO_TOTAL_LABEL = "Total All Databases"


@dataclass(frozen=True)
class DatabaseConfig:
    """A database whose backups are being planned."""
    name: str
    db_size: float  # GB
    growth_rate: float  # Percent per year
    retention: RetentionSettings
    region: str = "eastus"
    redundancy: Optional[StorageRedundancy] = StorageRedundancy.LRS


@dataclass(frozen=True)
class PortfolioSummary:
    """Current cost of every database and of the portfolio as a whole."""
    breakdowns: Dict[str, CostBreakdown]
    total_monthly_cost: float
    total_yearly_cost: float


def resolve_storage_price(database: DatabaseConfig, override: Optional[float] = None) -> float:
    """Pick the storage price for a database.

    An explicit override wins, then the redundancy tier price, then the
    fallback price.
    """
    if override is not None:
        return override
    if database.redundancy is None:
        return FALLBACK_STORAGE_PRICE
    return get_storage_price(database.redundancy)


def _check_unique_names(databases: Sequence[DatabaseConfig]) -> None:
    seen = set()
    for database in databases:
        if database.name in seen:
            raise ValueError(f"Duplicate database name: {database.name}")
        seen.add(database.name)


def calculate_portfolio_breakdowns(
    databases: Sequence[DatabaseConfig],
    storage_price: Optional[float] = None
) -> Dict[str, CostBreakdown]:
    """Calculate the current cost breakdown of each database.

    Args:
        databases: Databases to price
        storage_price: Optional price overriding every database's tier price

    Returns:
        Breakdowns keyed by database name, in input order

    Raises:
        ValueError: If two databases share a name
    """
    _check_unique_names(databases)

    breakdowns = {}
    for database in databases:
        price = resolve_storage_price(database, storage_price)
        logger.debug("Pricing %s at %s per GB/month", database.name, price)
        breakdowns[database.name] = calculate_current_cost_breakdown(CostParameters(
            db_size=database.db_size,
            growth_rate=database.growth_rate,
            retention=database.retention,
            storage_price=price
        ))
    return breakdowns


def summarize_portfolio(
    databases: Sequence[DatabaseConfig],
    storage_price: Optional[float] = None
) -> PortfolioSummary:
    """Calculate per-database breakdowns and portfolio totals."""
    breakdowns = calculate_portfolio_breakdowns(databases, storage_price)
    total_monthly = sum(b.total_monthly_cost for b in breakdowns.values())

    return PortfolioSummary(
        breakdowns=breakdowns,
        total_monthly_cost=total_monthly,
        total_yearly_cost=total_monthly * 12
    )


def generate_portfolio_timeline(
    databases: Sequence[DatabaseConfig],
    timeline_years: float,
    x_axis_interval: Union[XAxisInterval, str] = XAxisInterval.MONTHLY,
    storage_price: Optional[float] = None
) -> TimelineSeries:
    """Project the total backup cost of every database on a shared timeline.

    Produces one dataset per database, labeled with the database name and
    holding its total cost, followed by a dataset summing all databases.
    A database retaining no backups contributes a series of zeros.

    Raises:
        ValueError: If two databases share a name or the interval is unknown
    """
    _check_unique_names(databases)
    if not databases:
        return TimelineSeries(labels=(), datasets=())

    labels: tuple = ()
    datasets: List[TimelineDataset] = []
    for database in databases:
        series = generate_timeline_data(
            database.db_size,
            database.growth_rate,
            database.retention,
            resolve_storage_price(database, storage_price),
            timeline_years,
            x_axis_interval
        )
        labels = series.labels

        total = series.get_dataset(TOTAL_COST_LABEL)
        data = total.data if total is not None else (0.0,) * len(series.labels)
        datasets.append(TimelineDataset(database.name, data))

    combined = tuple(sum(points) for points in zip(*(d.data for d in datasets)))
    datasets.append(TimelineDataset(PORTFOLIO_TOTAL_LABEL, combined))

    logger.debug(
        "Generated portfolio timeline for %d databases over %d points",
        len(databases), len(labels)
    )
    return TimelineSeries(labels=labels, datasets=tuple(datasets))
