# ==============================================================================
# Report Commands
# ==============================================================================
"""
Funnel and campaign report commands for the funnel CLI.

Reports read PostgreSQL by default, or an exported JSON dataset when
--data is given.
"""

from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from funnelcore.cli.shared import (
    BOX_WIDTH,
    C,
    I,
    _box_bottom,
    _box_header,
    _box_line,
    _empty_line,
    _section_header,
    build_filter,
    fail,
    get_report_service,
    parse_timestamp,
)
from funnelcore.core.models import FunnelReport, RankedEntity, ReportWindow
from funnelcore.core.periods import REPORT_PERIODS, report_window
from funnelcore.exceptions import FunnelError

# ==============================================================================
# Shared Options
# ==============================================================================

PeriodOption = Annotated[
    str,
    typer.Option("--period", "-p", help=f"Report period: {', '.join(REPORT_PERIODS)}"),
]
StartOption = Annotated[
    Optional[str], typer.Option("--start", help="Window start (ISO date or datetime)")
]
EndOption = Annotated[Optional[str], typer.Option("--end", help="Window end (ISO date or datetime)")]
KindOption = Annotated[
    Optional[str], typer.Option("--kind", "-k", help="Only product or service entities")
]
CampaignOption = Annotated[Optional[str], typer.Option("--campaign", help="UTM campaign filter")]
SourceOption = Annotated[Optional[str], typer.Option("--source", help="UTM source filter")]
MediumOption = Annotated[Optional[str], typer.Option("--medium", help="UTM medium filter")]
DataOption = Annotated[
    Optional[Path],
    typer.Option("--data", "-d", help="Read an exported JSON dataset instead of PostgreSQL"),
]
JsonOption = Annotated[bool, typer.Option("--json", "-j", help="Output as JSON for scripting")]


def _resolve_window(period: str, start: str | None, end: str | None) -> ReportWindow:
    """Explicit --start/--end win over --period."""
    now = datetime.now(timezone.utc)
    if start is None and end is None:
        return report_window(period, now)
    window_start = parse_timestamp(start) if start else report_window(period, now).start
    window_end = parse_timestamp(end, end_of_day=True) if end else now
    return ReportWindow.model_construct(start=window_start, end=window_end)


def _money(value: Decimal) -> str:
    return f"{value:,.2f}"


def _ranked_table(title: str, rows: list[RankedEntity]) -> Table:
    table = Table(title=title, show_header=True, header_style="bold", title_justify="left")
    table.add_column("Entity")
    table.add_column("Category")
    table.add_column("Views", justify="right")
    table.add_column("Carts", justify="right")
    table.add_column("Booked", justify="right")
    table.add_column("Revenue", justify="right")
    table.add_column("Conv %", justify="right")
    for row in rows:
        metric = row.metric
        table.add_row(
            row.name,
            row.category,
            f"{metric.views:,}",
            f"{metric.add_to_carts:,}",
            f"{metric.transactions_booked:,}",
            _money(metric.revenue),
            f"{metric.conversion_rate:.1f}",
        )
    return table


def _print_report(report: FunnelReport) -> None:
    W = BOX_WIDTH
    INNER = W - 2
    summary = report.summary

    print()
    print(_box_header(f"FUNNEL REPORT {report.tenant_id}", W))
    window = f"{report.window.start:%Y-%m-%d %H:%M} {I.ARROW} {report.window.end:%Y-%m-%d %H:%M}"
    print(_box_line(f"  {C.DIM}{window}{C.RESET}", W))
    print(_empty_line(W))

    print(_box_line(f"  {'Views':<30}{summary.total_views:>12,}", W))
    print(_box_line(f"  {'  -> Added to Cart':<30}{summary.total_add_to_carts:>12,}", W))
    print(_box_line(f"  {'  -> Transactions Booked':<30}{summary.total_transactions_booked:>12,}", W))
    print(
        _box_line(
            f"  {'  -> Completed and Paid':<30}{summary.total_transactions_completed:>12,}", W
        )
    )
    print(_box_line(f"  {'Revenue':<30}{_money(summary.total_revenue):>12}", W))
    print(_box_line("  " + "─" * (INNER - 4), W))
    print(_box_line(f"  {'View to Cart':<30}{summary.overall_view_to_cart_rate:>11.1f}%", W))
    print(
        _box_line(
            f"  {'Cart to Transaction':<30}{summary.overall_cart_to_transaction_rate:>11.1f}%", W
        )
    )
    print(_box_line(f"  {'Conversion Rate':<30}{summary.overall_conversion_rate:>11.1f}%", W))
    print(_box_line(f"  {'Cart Abandonment':<30}{summary.abandoned_cart_rate:>11.1f}%", W))
    print(_empty_line(W))

    if report.views_series:
        print(_section_header(f"Views by {report.granularity.value}", W))
        for point in report.views_series:
            print(_box_line(f"  {point.date_key:<30}{point.value:>12,}", W))
        print(_empty_line(W))

    if report.missing_entities:
        print(
            _box_line(
                f"  {C.BRIGHT_YELLOW}{I.WARN} {len(report.missing_entities)} entities "
                f"no longer in catalog{C.RESET}",
                W,
            )
        )
        print(_empty_line(W))
    print(_box_bottom(W))
    print()

    console = Console()
    rankings = report.rankings
    for title, rows in (
        ("Best Sellers", rankings.best_sellers),
        ("Most Viewed", rankings.most_viewed),
        ("Opportunity", rankings.opportunity),
        ("Underperforming", rankings.underperforming),
    ):
        if rows:
            console.print(_ranked_table(title, rows))
            print()


# ==============================================================================
# Commands
# ==============================================================================


def show_report(
    tenant_id: Annotated[str, typer.Argument(help="Tenant to report on")],
    period: PeriodOption = "month",
    start: StartOption = None,
    end: EndOption = None,
    granularity: Annotated[
        str, typer.Option("--granularity", "-g", help="Views series bucket: day, week, month")
    ] = "day",
    limit: Annotated[
        Optional[int], typer.Option("--limit", "-n", help="Entries per ranked list")
    ] = None,
    kind: KindOption = None,
    campaign: CampaignOption = None,
    source: SourceOption = None,
    medium: MediumOption = None,
    data_file: DataOption = None,
    json_output: JsonOption = False,
) -> None:
    """Show the conversion funnel report for a tenant.

    Examples:
        funnel report shop-1                          # This month
        funnel report shop-1 -p week -g day           # Last 7 days
        funnel report shop-1 --start 2024-01-01 --end 2024-03-31 -g month
        funnel report shop-1 --kind service --json
        funnel report shop-1 --data export.json       # Offline dataset
    """
    report_filter = build_filter(kind, campaign, source, medium)
    try:
        window = _resolve_window(period, start, end)
        service = get_report_service(data_file)
        report = service.compute_funnel_report(
            tenant_id, window.start, window.end, granularity, report_filter, limit
        )
    except FunnelError as e:
        fail(e, json_output)

    if json_output:
        print(report.model_dump_json(indent=2))
        return
    _print_report(report)


def show_campaigns(
    tenant_id: Annotated[str, typer.Argument(help="Tenant to report on")],
    period: PeriodOption = "month",
    start: StartOption = None,
    end: EndOption = None,
    kind: KindOption = None,
    data_file: DataOption = None,
    json_output: JsonOption = False,
) -> None:
    """Show funnel metrics per marketing campaign.

    Examples:
        funnel campaigns shop-1
        funnel campaigns shop-1 -p all --json
    """
    report_filter = build_filter(kind, None, None, None)
    try:
        window = _resolve_window(period, start, end)
        service = get_report_service(data_file)
        report = service.compute_campaign_report(
            tenant_id, window.start, window.end, report_filter
        )
    except FunnelError as e:
        fail(e, json_output)

    if json_output:
        print(report.model_dump_json(indent=2))
        return

    if not report.campaigns:
        print(f"\n  {C.BRIGHT_YELLOW}{I.WARN} No tagged traffic for '{tenant_id}'{C.RESET}\n")
        return

    table = Table(
        title=f"Campaigns: {tenant_id}", show_header=True, header_style="bold", title_justify="left"
    )
    table.add_column("Campaign")
    table.add_column("Views", justify="right")
    table.add_column("Carts", justify="right")
    table.add_column("Orders", justify="right")
    table.add_column("Revenue", justify="right")
    table.add_column("Conv %", justify="right")
    for metric in report.campaigns:
        table.add_row(
            metric.key,
            f"{metric.views:,}",
            f"{metric.add_to_carts:,}",
            f"{metric.transactions:,}",
            _money(metric.revenue),
            f"{metric.conversion_rate:.1f}",
        )
    print()
    Console().print(table)
    print(
        f"  {C.BOLD}Total:{C.RESET} {report.total_views:,} views, "
        f"{report.total_transactions:,} orders, {_money(report.total_revenue)} revenue"
    )
    print()
