"""
Unit tests for configuration loading and validation.

Tests strict validation and error handling for planner configs.
"""

import os
import tempfile
from pathlib import Path

import pytest
import yaml

from retention_planner.config.loader import (
    DEFAULT_TIMELINE_YEARS,
    MAX_TIMELINE_YEARS,
    PlannerConfig,
    TimelineConfig,
    load_planner_config,
)
from retention_planner.core.calculator import RetentionSettings, XAxisInterval
from retention_planner.core.portfolio import resolve_storage_price
from retention_planner.core.pricing import FALLBACK_STORAGE_PRICE, StorageRedundancy

SAMPLE_CONFIG = Path(__file__).resolve().parent.parent / "sample_portfolio.yaml"


class TestConfigLoading:
    """Test configuration loading and validation."""

    def setup_method(self):
        """Set up test environment."""
        self.temp_dir = tempfile.mkdtemp()

    def teardown_method(self):
        """Clean up test environment."""
        import shutil
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _write_config(self, config_data, filename: str = "config.yaml") -> str:
        """Write configuration data to temporary file."""
        config_path = os.path.join(self.temp_dir, filename)
        with open(config_path, 'w', encoding='utf-8') as f:
            yaml.dump(config_data, f)
        return config_path

    def _database(self, **overrides) -> dict:
        """Build a valid database entry with overrides."""
        database = {
            "name": "orders",
            "db_size": 100,
            "growth_rate": 10,
            "retention": {"weekly": 4, "monthly": 12, "yearly": 5}
        }
        database.update(overrides)
        return database

    def test_valid_config_loads_correctly(self):
        """Test that a valid configuration loads correctly."""
        config_data = {
            "databases": [
                self._database(region="westeurope", redundancy="RA-GRS"),
                {"name": "audit", "db_size": 20.5}
            ],
            "timeline": {"years": 3, "interval": "quarterly"},
            "storage_price": 0.04
        }

        config = load_planner_config(self._write_config(config_data))

        assert isinstance(config, PlannerConfig)
        assert len(config.databases) == 2

        orders = config.databases[0]
        assert orders.name == "orders"
        assert orders.db_size == 100.0
        assert orders.growth_rate == 10.0
        assert orders.region == "westeurope"
        assert orders.redundancy == StorageRedundancy.RA_GRS
        assert orders.retention == RetentionSettings(weekly=4, monthly=12, yearly=5)

        assert config.timeline == TimelineConfig(years=3.0, interval=XAxisInterval.QUARTERLY)
        assert config.storage_price == 0.04

    def test_optional_fields_use_defaults(self):
        """Test defaults for omitted optional fields."""
        config_data = {"databases": [{"name": "audit", "db_size": 20}]}

        config = load_planner_config(self._write_config(config_data))

        audit = config.databases[0]
        assert audit.growth_rate == 0.0
        assert audit.region == "eastus"
        assert audit.redundancy == StorageRedundancy.LRS
        assert audit.retention == RetentionSettings(weekly=0, monthly=0, yearly=0)
        assert config.timeline.years == DEFAULT_TIMELINE_YEARS
        assert config.timeline.interval == XAxisInterval.MONTHLY
        assert config.storage_price is None

    def test_partial_retention_defaults_to_zero(self):
        """Test that omitted retention counts default to zero."""
        config_data = {"databases": [self._database(retention={"monthly": 6})]}

        config = load_planner_config(self._write_config(config_data))

        assert config.databases[0].retention == RetentionSettings(monthly=6)

    def test_case_insensitive_enums(self):
        """Test redundancy and interval accept any case."""
        config_data = {
            "databases": [self._database(redundancy="ra-gzrs")],
            "timeline": {"interval": "Weekly"}
        }

        config = load_planner_config(self._write_config(config_data))

        assert config.databases[0].redundancy == StorageRedundancy.RA_GZRS
        assert config.timeline.interval == XAxisInterval.WEEKLY

    def test_sample_config_loads(self):
        """Test the bundled sample portfolio is valid."""
        config = load_planner_config(str(SAMPLE_CONFIG))

        assert [d.name for d in config.databases] == ["orders", "analytics", "audit-log"]
        assert config.timeline.interval == XAxisInterval.QUARTERLY

    def test_missing_file_raises_error(self):
        """Test that missing config file raises error."""
        with pytest.raises(FileNotFoundError, match="Planner config file not found"):
            load_planner_config("nonexistent.yaml")

    def test_empty_config_raises_error(self):
        """Test that empty config file raises error."""
        config_path = self._write_config({})

        with pytest.raises(ValueError, match="Configuration file is empty"):
            load_planner_config(config_path)

    def test_non_mapping_config_raises_error(self):
        """Test that a top-level list is rejected."""
        config_path = self._write_config(["orders"])

        with pytest.raises(ValueError, match="Configuration must be a dictionary"):
            load_planner_config(config_path)

    def test_invalid_yaml_raises_error(self):
        """Test that invalid YAML raises error."""
        config_path = os.path.join(self.temp_dir, "invalid.yaml")
        with open(config_path, 'w') as f:
            f.write("invalid: yaml: content: [")

        with pytest.raises(yaml.YAMLError):
            load_planner_config(config_path)

    def test_unknown_top_level_key_raises_error(self):
        """Test that unknown top-level keys are rejected."""
        config_data = {"databases": [self._database()], "currency": "EUR"}

        with pytest.raises(ValueError, match="Unknown configuration keys"):
            load_planner_config(self._write_config(config_data))

    def test_missing_databases_raises_error(self):
        """Test that missing databases section raises error."""
        config_data = {"timeline": {"years": 1}}

        with pytest.raises(ValueError, match="Missing required 'databases' section"):
            load_planner_config(self._write_config(config_data))

    def test_empty_databases_raises_error(self):
        """Test that an empty databases list raises error."""
        config_data = {"databases": []}

        with pytest.raises(ValueError, match="'databases' must be a non-empty list"):
            load_planner_config(self._write_config(config_data))

    def test_database_must_be_mapping(self):
        """Test that database entries must be dictionaries."""
        config_data = {"databases": ["orders"]}

        with pytest.raises(ValueError, match=r"databases\[0\] must be a dictionary"):
            load_planner_config(self._write_config(config_data))

    def test_unknown_database_key_raises_error(self):
        """Test that unknown database keys are rejected."""
        config_data = {"databases": [self._database(tier="hot")]}

        with pytest.raises(ValueError, match=r"Unknown keys in databases\[0\]"):
            load_planner_config(self._write_config(config_data))

    def test_missing_name_raises_error(self):
        """Test that a database without a name raises error."""
        database = self._database()
        del database["name"]

        with pytest.raises(ValueError, match="Missing required 'name'"):
            load_planner_config(self._write_config({"databases": [database]}))

    def test_missing_db_size_raises_error(self):
        """Test that a database without a size raises error."""
        database = self._database()
        del database["db_size"]

        with pytest.raises(ValueError, match="Missing required 'db_size'"):
            load_planner_config(self._write_config({"databases": [database]}))

    @pytest.mark.parametrize("db_size", [0, -5, "large", True])
    def test_invalid_db_size_raises_error(self, db_size):
        """Test that sizes must be positive numbers."""
        config_data = {"databases": [self._database(db_size=db_size)]}

        with pytest.raises(ValueError, match="'db_size' in databases\\[0\\] must be > 0"):
            load_planner_config(self._write_config(config_data))

    def test_invalid_growth_rate_raises_error(self):
        """Test that growth rate must be numeric."""
        config_data = {"databases": [self._database(growth_rate="fast")]}

        with pytest.raises(ValueError, match="'growth_rate' .* must be a finite number"):
            load_planner_config(self._write_config(config_data))

    def test_negative_growth_rate_is_allowed(self):
        """Test that shrinking databases are valid."""
        config_data = {"databases": [self._database(growth_rate=-5)]}

        config = load_planner_config(self._write_config(config_data))

        assert config.databases[0].growth_rate == -5.0

    @pytest.mark.parametrize("count", [-1, 2.5, "four", True])
    def test_invalid_retention_count_raises_error(self, count):
        """Test that retention counts must be non-negative integers."""
        config_data = {"databases": [self._database(retention={"weekly": count})]}

        with pytest.raises(ValueError, match="'weekly' .* must be a non-negative integer"):
            load_planner_config(self._write_config(config_data))

    def test_unknown_retention_key_raises_error(self):
        """Test that unknown retention cadences are rejected."""
        config_data = {"databases": [self._database(retention={"daily": 7})]}

        with pytest.raises(ValueError, match=r"Unknown keys in databases\[0\]\.retention"):
            load_planner_config(self._write_config(config_data))

    def test_invalid_redundancy_raises_error(self):
        """Test that invalid redundancy tier raises error."""
        config_data = {"databases": [self._database(redundancy="tape")]}

        with pytest.raises(ValueError, match="'redundancy' .* must be one of"):
            load_planner_config(self._write_config(config_data))

    def test_null_redundancy_means_no_tier(self):
        """Test that an explicit null tier uses the fallback price."""
        config_data = {"databases": [self._database(redundancy=None)]}

        config = load_planner_config(self._write_config(config_data))

        database = config.databases[0]
        assert database.redundancy is None
        assert resolve_storage_price(database) == FALLBACK_STORAGE_PRICE

    def test_duplicate_names_raise_error(self):
        """Test that database names must be unique."""
        config_data = {"databases": [self._database(), self._database()]}

        with pytest.raises(ValueError, match="Duplicate database name: orders"):
            load_planner_config(self._write_config(config_data))

    def test_unknown_timeline_key_raises_error(self):
        """Test that unknown timeline keys are rejected."""
        config_data = {"databases": [self._database()], "timeline": {"months": 6}}

        with pytest.raises(ValueError, match="Unknown timeline keys"):
            load_planner_config(self._write_config(config_data))

    def test_non_positive_years_raises_error(self):
        """Test that timeline length must be positive."""
        config_data = {"databases": [self._database()], "timeline": {"years": 0}}

        with pytest.raises(ValueError, match="timeline years must be finite and > 0"):
            load_planner_config(self._write_config(config_data))

    def test_invalid_interval_raises_error(self):
        """Test that invalid interval raises error."""
        config_data = {"databases": [self._database()], "timeline": {"interval": "daily"}}

        with pytest.raises(ValueError, match="'interval' in timeline must be one of"):
            load_planner_config(self._write_config(config_data))

    def test_negative_storage_price_raises_error(self):
        """Test that storage price override cannot be negative."""
        config_data = {"databases": [self._database()], "storage_price": -0.01}

        with pytest.raises(ValueError, match="'storage_price' must be >= 0"):
            load_planner_config(self._write_config(config_data))

    @pytest.mark.parametrize("years", [float("inf"), float("nan")])
    def test_non_finite_years_raises_error(self, years):
        """Test that an unbounded timeline is rejected."""
        config_data = {"databases": [self._database()], "timeline": {"years": years}}

        with pytest.raises(ValueError, match="timeline years must be finite and > 0"):
            load_planner_config(self._write_config(config_data))

    def test_years_above_maximum_raises_error(self):
        """Test that timelines longer than the maximum are rejected."""
        config_data = {"databases": [self._database()], "timeline": {"years": MAX_TIMELINE_YEARS + 1}}

        with pytest.raises(ValueError, match="timeline years must be <= 100"):
            load_planner_config(self._write_config(config_data))

    @pytest.mark.parametrize("db_size", [float("inf"), float("nan")])
    def test_non_finite_db_size_raises_error(self, db_size):
        """Test that sizes must be finite."""
        config_data = {"databases": [self._database(db_size=db_size)]}

        with pytest.raises(ValueError, match="'db_size' in databases\\[0\\] must be > 0"):
            load_planner_config(self._write_config(config_data))

    @pytest.mark.parametrize("growth_rate", [float("inf"), float("-inf"), float("nan")])
    def test_non_finite_growth_rate_raises_error(self, growth_rate):
        """Test that growth rates must be finite."""
        config_data = {"databases": [self._database(growth_rate=growth_rate)]}

        with pytest.raises(ValueError, match="'growth_rate' .* must be a finite number"):
            load_planner_config(self._write_config(config_data))

    @pytest.mark.parametrize("storage_price", [float("inf"), float("nan")])
    def test_non_finite_storage_price_raises_error(self, storage_price):
        """Test that the storage price override must be finite."""
        config_data = {"databases": [self._database()], "storage_price": storage_price}

        with pytest.raises(ValueError, match="'storage_price' must be >= 0"):
            load_planner_config(self._write_config(config_data))


class TestTimelineConfig:
    """Test timeline configuration validation."""

    def test_defaults(self):
        """Test default timeline settings."""
        timeline = TimelineConfig()
        assert timeline.years == 2.0
        assert timeline.interval == XAxisInterval.MONTHLY

    def test_negative_years_raise_error(self):
        """Test that negative years are rejected."""
        with pytest.raises(ValueError, match="timeline years must be finite and > 0"):
            TimelineConfig(years=-1)

    def test_nan_years_raise_error(self):
        """Test that NaN years are rejected."""
        with pytest.raises(ValueError, match="timeline years must be finite and > 0"):
            TimelineConfig(years=float("nan"))
