"""
Backup retention cost projection.

Computes the storage cost of weekly, monthly and yearly database backups:
a fast steady-state estimate, an exact point-in-time cost that ages every
retained backup back from the current database size, and a labeled time
series suitable for charting.

All functions are pure. They perform no validation and never raise for
numeric edge cases; NaN and infinity propagate through the results.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Tuple, Union

WEEKS_PER_MONTH = 4.33

TOTAL_COST_LABEL = "Total Cost"
WEEKLY_BACKUPS_LABEL = "Weekly Backups"
MONTHLY_BACKUPS_LABEL = "Monthly Backups"
YEARLY_BACKUPS_LABEL = "Yearly Backups"


class XAxisInterval(str, Enum):
    """Spacing of points on a cost timeline."""
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


# Grid step in months for each interval
_STEP_MONTHS = {
    XAxisInterval.WEEKLY: 0.25,
    XAxisInterval.MONTHLY: 1,
    XAxisInterval.QUARTERLY: 3,
    XAxisInterval.YEARLY: 12,
}


@dataclass(frozen=True)
class RetentionSettings:
    """Number of backups of each cadence kept before expiry."""
    weekly: int = 0
    monthly: int = 0
    yearly: int = 0

    @property
    def has_any_backups(self) -> bool:
        return self.weekly > 0 or self.monthly > 0 or self.yearly > 0


@dataclass(frozen=True)
class CostParameters:
    """Inputs for a steady-state cost estimate."""
    db_size: float  # GB
    growth_rate: float  # Percent per year
    retention: RetentionSettings
    storage_price: float  # $ per GB per month


@dataclass(frozen=True)
class CostBreakdown:
    """Monthly cost per backup class with monthly and yearly totals."""
    weekly_backup_cost: float
    monthly_backup_cost: float
    yearly_backup_cost: float
    total_monthly_cost: float
    total_yearly_cost: float


@dataclass(frozen=True)
class TimelineCosts:
    """Monthly cost of each backup class at one point in time."""
    weekly: float
    monthly: float
    yearly: float
    total: float


@dataclass(frozen=True)
class TimelineDataset:
    """One named series of costs, aligned to the series labels."""
    label: str
    data: Tuple[float, ...]


@dataclass(frozen=True)
class TimelineSeries:
    """Labeled cost datasets over a time grid."""
    labels: Tuple[str, ...]
    datasets: Tuple[TimelineDataset, ...]

    def get_dataset(self, label: str) -> Optional[TimelineDataset]:
        """Return the dataset with the given label, or None if absent."""
        for dataset in self.datasets:
            if dataset.label == label:
                return dataset
        return None


def compound_factor(rate: float, exponent: float) -> float:
    """Return ``(1 + rate) ** exponent`` with IEEE semantics.

    Where ``math.pow`` would raise, the IEEE result (inf or nan) is
    returned instead. A NaN exponent, or a base of +-1 with an infinite
    exponent, yields nan where C ``pow`` returns 1.
    """
    base = 1 + rate
    if math.isnan(exponent) or (abs(base) == 1 and math.isinf(exponent)):
        return math.nan
    if base == 0 and exponent < 0:
        return math.inf
    if base < 0 and math.isfinite(exponent) and not float(exponent).is_integer():
        return math.nan
    try:
        return math.pow(base, exponent)
    except OverflowError:
        if base < 0 and float(exponent) % 2 == 1:
            return -math.inf
        return math.inf


def _indices_below(bound: float) -> Iterator[int]:
    """Yield 0, 1, 2, ... while the index is below ``bound``.

    Unlike ``range`` this accepts fractional and NaN bounds.
    """
    index = 0
    while index < bound:
        yield index
        index += 1


def calculate_current_cost_breakdown(params: CostParameters) -> CostBreakdown:
    """Estimate today's steady-state monthly cost of retained backups.

    Each class is priced at an average backup size halfway between the
    current size and the size implied by linear growth over the class's
    retention window. This is an approximation for display and differs
    from the exact summation in :func:`calculate_cost_at_month`.

    Args:
        params: Database size, annual growth percent, retention and price

    Returns:
        CostBreakdown with per-class and total costs
    """
    db_size = params.db_size
    retention = params.retention
    storage_price = params.storage_price
    monthly_growth_rate = params.growth_rate / 100 / 12

    average_weekly_size = db_size + db_size * monthly_growth_rate * (retention.weekly / WEEKS_PER_MONTH) / 2
    average_monthly_size = db_size + db_size * monthly_growth_rate * retention.monthly / 2
    average_yearly_size = db_size + db_size * monthly_growth_rate * (retention.yearly * 12) / 2

    weekly_cost = average_weekly_size * retention.weekly * storage_price
    monthly_cost = average_monthly_size * retention.monthly * storage_price
    yearly_cost = average_yearly_size * retention.yearly * storage_price

    total_monthly = weekly_cost + monthly_cost + yearly_cost

    return CostBreakdown(
        weekly_backup_cost=weekly_cost,
        monthly_backup_cost=monthly_cost,
        yearly_backup_cost=yearly_cost,
        total_monthly_cost=total_monthly,
        total_yearly_cost=total_monthly * 12
    )


def calculate_cost_at_month(
    current_month: float,
    current_db_size: float,
    retention: RetentionSettings,
    storage_price: float,
    monthly_growth_rate: float
) -> TimelineCosts:
    """Calculate the exact monthly storage cost at a point in the timeline.

    Every backup still inside its retention window is priced individually,
    with its size compounded backwards from ``current_db_size`` by its age.
    Backups that would predate month 0 are not counted.

    Args:
        current_month: Months since the first backup, may be fractional
        current_db_size: Database size at ``current_month``
        retention: Retained backup counts per class
        storage_price: Cost per GB per month
        monthly_growth_rate: Growth per month as a fraction, not a percent

    Returns:
        TimelineCosts for the given month
    """
    weekly_cost = 0.0
    monthly_cost = 0.0
    yearly_cost = 0.0

    if retention.weekly > 0:
        weeks_to_calculate = min(current_month * WEEKS_PER_MONTH, retention.weekly)
        # A partial trailing week still counts as a backup
        for week in _indices_below(weeks_to_calculate):
            age_months = math.floor(week / WEEKS_PER_MONTH)
            backup_size = current_db_size * compound_factor(monthly_growth_rate, -age_months)
            weekly_cost += backup_size * storage_price

    if retention.monthly > 0:
        for retention_month in _indices_below(retention.monthly):
            if current_month - retention_month >= 0:
                backup_size = current_db_size * compound_factor(monthly_growth_rate, -retention_month)
                monthly_cost += backup_size * storage_price

    if retention.yearly > 0:
        for retention_year in _indices_below(retention.yearly):
            if current_month - retention_year * 12 >= 0:
                backup_size = current_db_size * compound_factor(monthly_growth_rate, -(retention_year * 12))
                yearly_cost += backup_size * storage_price

    return TimelineCosts(
        weekly=weekly_cost,
        monthly=monthly_cost,
        yearly=yearly_cost,
        total=weekly_cost + monthly_cost + yearly_cost
    )


def timeline_months(timeline_years: float, x_axis_interval: Union[XAxisInterval, str]) -> List[float]:
    """Return the month offsets of every point on the timeline grid.

    Raises:
        ValueError: If the interval is not a known XAxisInterval
    """
    step = _STEP_MONTHS[XAxisInterval(x_axis_interval)]
    months = timeline_years * 12

    grid = []
    month = 0
    while month <= months:
        grid.append(month)
        # Round each step to keep 0.25 increments from drifting
        month = round(month + step, 2)
    return grid


def format_timeline_label(month: float, x_axis_interval: Union[XAxisInterval, str]) -> str:
    """Format the axis label for a grid month."""
    interval = XAxisInterval(x_axis_interval)
    if interval is XAxisInterval.WEEKLY:
        return f"Week {math.floor(month * WEEKS_PER_MONTH)}"
    if interval is XAxisInterval.YEARLY:
        return f"Year {math.floor(month / 12)}"
    if interval is XAxisInterval.QUARTERLY:
        return f"Q{math.floor(month / 3)}"
    if float(month).is_integer():
        return f"Month {int(month)}"
    return f"Month {month}"


def generate_timeline_data(
    initial_db_size: float,
    annual_growth_rate: float,
    retention: RetentionSettings,
    storage_price: float,
    timeline_years: float,
    x_axis_interval: Union[XAxisInterval, str] = XAxisInterval.MONTHLY
) -> TimelineSeries:
    """Generate cost series over a timeline for charting.

    The database grows from ``initial_db_size`` by compounding the monthly
    equivalent of ``annual_growth_rate``. A "Total Cost" dataset is included
    when any backups are retained, followed by one dataset per backup class
    with a nonzero retention count.

    Args:
        initial_db_size: Database size at month 0 in GB
        annual_growth_rate: Growth percent per year
        retention: Retained backup counts per class
        storage_price: Cost per GB per month
        timeline_years: Length of the timeline in years
        x_axis_interval: Spacing of points on the timeline

    Returns:
        TimelineSeries with labels and the active datasets

    Raises:
        ValueError: If the interval is not a known XAxisInterval
    """
    interval = XAxisInterval(x_axis_interval)
    monthly_growth_rate = annual_growth_rate / 100 / 12

    labels = []
    total_data = []
    weekly_data = []
    monthly_data = []
    yearly_data = []

    for month in timeline_months(timeline_years, interval):
        current_size = initial_db_size * compound_factor(monthly_growth_rate, month)
        costs = calculate_cost_at_month(
            month,
            current_size,
            retention,
            storage_price,
            monthly_growth_rate
        )

        labels.append(format_timeline_label(month, interval))
        total_data.append(costs.total)
        weekly_data.append(costs.weekly)
        monthly_data.append(costs.monthly)
        yearly_data.append(costs.yearly)

    datasets = []
    if retention.has_any_backups:
        datasets.append(TimelineDataset(TOTAL_COST_LABEL, tuple(total_data)))
    if retention.weekly > 0:
        datasets.append(TimelineDataset(WEEKLY_BACKUPS_LABEL, tuple(weekly_data)))
    if retention.monthly > 0:
        datasets.append(TimelineDataset(MONTHLY_BACKUPS_LABEL, tuple(monthly_data)))
    if retention.yearly > 0:
        datasets.append(TimelineDataset(YEARLY_BACKUPS_LABEL, tuple(yearly_data)))

    return TimelineSeries(labels=tuple(labels), datasets=tuple(datasets))
