"""
CLI interface for the backup retention planner.

Provides command-line access to cost breakdowns and timelines.
"""

import logging
import math
import sys
from typing import Optional

import typer
import yaml
from rich.console import Console
from rich.table import Table

from retention_planner.common.logging import configure_logging
from retention_planner.config.loader import MAX_TIMELINE_YEARS, load_planner_config
from retention_planner.core.calculator import (
    CostBreakdown,
    CostParameters,
    RetentionSettings,
    TimelineSeries,
    XAxisInterval,
    calculate_current_cost_breakdown,
    generate_timeline_data,
)
from retention_planner.core.portfolio import generate_portfolio_timeline, summarize_portfolio
from retention_planner.core.pricing import StorageRedundancy, get_storage_price

app = typer.Typer()
console = Console()
logger = logging.getLogger(__name__)

EXIT_CODE_OK = 0
EXIT_CODE_ERROR = 1


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging"
    )
):
    """Backup Retention Planner CLI."""
    configure_logging("DEBUG" if verbose else None)
    if ctx.invoked_subcommand is None:
        console.print("Backup Retention Planner - Use --help to see available commands")


def _require_finite(value: float) -> float:
    """Reject NaN, which passes range checks."""
    if not math.isfinite(value):
        raise typer.BadParameter("must be a finite number")
    return value


def _resolve_price(price: Optional[float], redundancy: StorageRedundancy) -> float:
    """Use an explicit price when given, otherwise the tier price."""
    if price is not None:
        return price
    return get_storage_price(redundancy)


@app.command()
def breakdown(
    size: float = typer.Option(..., "--size", "-s", help="Database size in GB"),
    growth: float = typer.Option(0.0, "--growth", "-g", help="Annual growth rate in percent"),
    weekly: int = typer.Option(0, "--weekly", "-w", min=0, help="Weekly backups retained"),
    monthly: int = typer.Option(0, "--monthly", "-m", min=0, help="Monthly backups retained"),
    yearly: int = typer.Option(0, "--yearly", "-y", min=0, help="Yearly backups retained"),
    price: Optional[float] = typer.Option(
        None,
        "--price",
        "-p",
        min=0,
        help="Storage price per GB/month, overrides the redundancy tier price"
    ),
    redundancy: StorageRedundancy = typer.Option(
        StorageRedundancy.LRS,
        "--redundancy",
        "-r",
        help="Backup storage redundancy tier"
    )
):
    """Show the current monthly cost of a retention policy."""
    storage_price = _resolve_price(price, redundancy)
    result = calculate_current_cost_breakdown(CostParameters(
        db_size=size,
        growth_rate=growth,
        retention=RetentionSettings(weekly=weekly, monthly=monthly, yearly=yearly),
        storage_price=storage_price
    ))
    _display_breakdown(result, storage_price)
    sys.exit(EXIT_CODE_OK)


@app.command()
def timeline(
    size: float = typer.Option(..., "--size", "-s", help="Initial database size in GB"),
    growth: float = typer.Option(0.0, "--growth", "-g", help="Annual growth rate in percent"),
    weekly: int = typer.Option(0, "--weekly", "-w", min=0, help="Weekly backups retained"),
    monthly: int = typer.Option(0, "--monthly", "-m", min=0, help="Monthly backups retained"),
    yearly: int = typer.Option(0, "--yearly", "-y", min=0, help="Yearly backups retained"),
    price: Optional[float] = typer.Option(
        None,
        "--price",
        "-p",
        min=0,
        help="Storage price per GB/month, overrides the redundancy tier price"
    ),
    redundancy: StorageRedundancy = typer.Option(
        StorageRedundancy.LRS,
        "--redundancy",
        "-r",
        help="Backup storage redundancy tier"
    ),
    years: float = typer.Option(
        2.0,
        "--years",
        min=0.01,
        max=MAX_TIMELINE_YEARS,
        callback=_require_finite,
        help="Timeline length in years"
    ),
    interval: XAxisInterval = typer.Option(
        XAxisInterval.MONTHLY,
        "--interval",
        "-i",
        help="Spacing of timeline points"
    )
):
    """Project monthly backup cost over a timeline."""
    retention = RetentionSettings(weekly=weekly, monthly=monthly, yearly=yearly)
    series = generate_timeline_data(
        size,
        growth,
        retention,
        _resolve_price(price, redundancy),
        years,
        interval
    )

    if not series.datasets:
        console.print("\n[bold yellow]No backups retained[/]")
        console.print("Set --weekly, --monthly or --yearly to project costs.\n")
        sys.exit(EXIT_CODE_OK)

    _display_timeline(series, "Backup Cost Timeline")
    sys.exit(EXIT_CODE_OK)


@app.command()
def portfolio(
    config_path: str = typer.Argument(..., help="Path to the planner YAML config"),
    show_timeline: bool = typer.Option(
        False,
        "--timeline",
        "-t",
        help="Also show the combined cost timeline"
    )
):
    """Show costs for every database in a config file."""
    try:
        config = load_planner_config(config_path)
        summary = summarize_portfolio(config.databases, config.storage_price)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        logger.debug("Failed to load portfolio from %s", config_path, exc_info=True)
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_ERROR)

    table = Table(title="Portfolio Backup Costs")
    table.add_column("Database")
    table.add_column("Weekly", justify="right")
    table.add_column("Monthly", justify="right")
    table.add_column("Yearly", justify="right")
    table.add_column("Total/month", justify="right")
    for name, costs in summary.breakdowns.items():
        table.add_row(
            name,
            _format_currency(costs.weekly_backup_cost),
            _format_currency(costs.monthly_backup_cost),
            _format_currency(costs.yearly_backup_cost),
            _format_currency(costs.total_monthly_cost)
        )
    console.print(table)
    console.print(f"Portfolio monthly cost: {_format_currency(summary.total_monthly_cost)}")
    console.print(f"Portfolio yearly cost: {_format_currency(summary.total_yearly_cost)}")

    if show_timeline:
        series = generate_portfolio_timeline(
            config.databases,
            config.timeline.years,
            config.timeline.interval,
            config.storage_price
        )
        _display_timeline(series, "Portfolio Cost Timeline")

    sys.exit(EXIT_CODE_OK)


def _format_currency(amount: float) -> str:
    """Format currency with proper symbols and formatting."""
    if amount < 0:
        return f"-${abs(amount):,.2f}"
    return f"${amount:,.2f}"


def _display_breakdown(result: CostBreakdown, storage_price: float):
    """Display a cost breakdown as a table followed by totals."""
    console.print(f"\n[bold]Backup Cost Breakdown[/bold] (storage at {_format_currency(storage_price)}/GB/month)")
    console.print("-" * 40)

    table = Table()
    table.add_column("Backup type")
    table.add_column("Cost/month", justify="right")
    table.add_row("Weekly", _format_currency(result.weekly_backup_cost))
    table.add_row("Monthly", _format_currency(result.monthly_backup_cost))
    table.add_row("Yearly", _format_currency(result.yearly_backup_cost))
    console.print(table)

    console.print(f"Total monthly cost: {_format_currency(result.total_monthly_cost)}")
    console.print(f"Total yearly cost: {_format_currency(result.total_yearly_cost)}")


def _display_timeline(series: TimelineSeries, title: str):
    """Display one row per timeline point and one column per dataset."""
    table = Table(title=title)
    table.add_column("Point")
    for dataset in series.datasets:
        table.add_column(dataset.label, justify="right")

    for index, label in enumerate(series.labels):
        table.add_row(label, *(_format_currency(d.data[index]) for d in series.datasets))
    console.print(table)


if __name__ == "__main__":
    app()
