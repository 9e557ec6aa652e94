"""
Configuration management and loading.

Loads a portfolio of databases and timeline settings from YAML.
"""

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Tuple

import yaml

from retention_planner.core.calculator import RetentionSettings, XAxisInterval
from retention_planner.core.portfolio import DatabaseConfig
from retention_planner.core.pricing import StorageRedundancy

logger = logging.getLogger(__name__)

DEFAULT_TIMELINE_YEARS = 2.0
MAX_TIMELINE_YEARS = 100.0


@dataclass(frozen=True)
class TimelineConfig:
    """Timeline length and point spacing."""
    years: float = DEFAULT_TIMELINE_YEARS
    interval: XAxisInterval = XAxisInterval.MONTHLY

    def __post_init__(self):
        """Validate timeline length is positive and bounded."""
        if not math.isfinite(self.years) or self.years <= 0:
            raise ValueError("timeline years must be finite and > 0")
        if self.years > MAX_TIMELINE_YEARS:
            raise ValueError(f"timeline years must be <= {MAX_TIMELINE_YEARS:g}")


@dataclass(frozen=True)
class PlannerConfig:
    """Complete planner configuration."""
    databases: Tuple[DatabaseConfig, ...]
    timeline: TimelineConfig
    storage_price: Optional[float] = None


def load_planner_config(path: str) -> PlannerConfig:
    """Load and validate planner configuration from YAML file.

    Strict validation ensures a typo in a retention count or size is
    reported instead of silently producing a wrong projection.

    Args:
        path: Path to YAML configuration file

    Returns:
        Validated PlannerConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If configuration is invalid
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Planner config file not found: {path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in config file {path}: {e}")

    if not raw_config:
        raise ValueError("Configuration file is empty")
    if not isinstance(raw_config, dict):
        raise ValueError("Configuration must be a dictionary")

    allowed_top_keys = {'databases', 'timeline', 'storage_price'}
    unknown_keys = set(raw_config.keys()) - allowed_top_keys
    if unknown_keys:
        raise ValueError(f"Unknown configuration keys: {unknown_keys}")

    # Parse and validate databases
    if 'databases' not in raw_config:
        raise ValueError("Missing required 'databases' section")

    databases_data = raw_config['databases']
    if not isinstance(databases_data, list) or not databases_data:
        raise ValueError("'databases' must be a non-empty list")

    databases = []
    names = set()
    for index, database_data in enumerate(databases_data):
        database = _parse_database(database_data, f"databases[{index}]")
        if database.name in names:
            raise ValueError(f"Duplicate database name: {database.name}")
        names.add(database.name)
        databases.append(database)

    timeline = _parse_timeline(raw_config.get('timeline', {}))

    storage_price = raw_config.get('storage_price')
    if storage_price is not None:
        if not _is_number(storage_price) or not math.isfinite(storage_price) or storage_price < 0:
            raise ValueError("'storage_price' must be >= 0")
        storage_price = float(storage_price)

    logger.info("Loaded %d databases from %s", len(databases), config_path)

    return PlannerConfig(
        databases=tuple(databases),
        timeline=timeline,
        storage_price=storage_price
    )


def _is_number(value) -> bool:
    # bool is an int subclass but never a valid size or count
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _parse_database(data: Dict, path: str) -> DatabaseConfig:
    """Parse and validate a single database entry.

    Args:
        data: Database configuration data
        path: Path for error messages

    Returns:
        Validated DatabaseConfig

    Raises:
        ValueError: If configuration is invalid
    """
    if not isinstance(data, dict):
        raise ValueError(f"{path} must be a dictionary")

    allowed_keys = {'name', 'db_size', 'growth_rate', 'region', 'redundancy', 'retention'}
    unknown_keys = set(data.keys()) - allowed_keys
    if unknown_keys:
        raise ValueError(f"Unknown keys in {path}: {unknown_keys}")

    if 'name' not in data:
        raise ValueError(f"Missing required 'name' in {path}")
    name = data['name']
    if not isinstance(name, str) or not name.strip():
        raise ValueError(f"'name' in {path} must be a non-empty string")

    if 'db_size' not in data:
        raise ValueError(f"Missing required 'db_size' in {path}")
    db_size = data['db_size']
    if not _is_number(db_size) or not math.isfinite(db_size) or db_size <= 0:
        raise ValueError(f"'db_size' in {path} must be > 0")

    growth_rate = data.get('growth_rate', 0)
    if not _is_number(growth_rate) or not math.isfinite(growth_rate):
        raise ValueError(f"'growth_rate' in {path} must be a finite number")

    region = data.get('region', "eastus")
    if not isinstance(region, str):
        raise ValueError(f"'region' in {path} must be a string")

    redundancy: Optional[StorageRedundancy] = StorageRedundancy.LRS
    if 'redundancy' in data:
        redundancy_str = data['redundancy']
        if redundancy_str is None:
            # Explicit null means no tier; the fallback price applies
            redundancy = None
        elif not isinstance(redundancy_str, str):
            raise ValueError(f"'redundancy' in {path} must be a string")
        else:
            try:
                redundancy = StorageRedundancy(redundancy_str.upper())
            except ValueError:
                valid_tiers = [tier.value for tier in StorageRedundancy]
                raise ValueError(f"'redundancy' in {path} must be one of: {valid_tiers}")

    retention = _parse_retention(data.get('retention', {}), f"{path}.retention")

    return DatabaseConfig(
        name=name,
        db_size=float(db_size),
        growth_rate=float(growth_rate),
        retention=retention,
        region=region,
        redundancy=redundancy
    )


def _parse_retention(data: Dict, path: str) -> RetentionSettings:
    """Parse and validate retention counts, defaulting each to zero."""
    if not isinstance(data, dict):
        raise ValueError(f"'{path}' must be a dictionary")

    allowed_keys = {'weekly', 'monthly', 'yearly'}
    unknown_keys = set(data.keys()) - allowed_keys
    if unknown_keys:
        raise ValueError(f"Unknown keys in {path}: {unknown_keys}")

    counts = {}
    for key in ('weekly', 'monthly', 'yearly'):
        value = data.get(key, 0)
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            raise ValueError(f"'{key}' in {path} must be a non-negative integer")
        counts[key] = value

    return RetentionSettings(**counts)


def _parse_timeline(data: Dict) -> TimelineConfig:
    """Parse and validate the timeline section."""
    if not isinstance(data, dict):
        raise ValueError("'timeline' must be a dictionary")

    allowed_keys = {'years', 'interval'}
    unknown_keys = set(data.keys()) - allowed_keys
    if unknown_keys:
        raise ValueError(f"Unknown timeline keys: {unknown_keys}")

    years = data.get('years', DEFAULT_TIMELINE_YEARS)
    if not _is_number(years):
        raise ValueError("'years' in timeline must be a number")

    interval_str = data.get('interval', XAxisInterval.MONTHLY.value)
    if not isinstance(interval_str, str):
        raise ValueError("'interval' in timeline must be a string")

    try:
        interval = XAxisInterval(interval_str.lower())
    except ValueError:
        valid_intervals = [interval.value for interval in XAxisInterval]
        raise ValueError(f"'interval' in timeline must be one of: {valid_intervals}")

    return TimelineConfig(years=float(years), interval=interval)
