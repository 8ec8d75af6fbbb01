# ==============================================================================
# Series and Rollup Commands
# ==============================================================================
"""
Chart utilities for the funnel CLI.

Both commands read JSON files exported by dashboards or by
`funnel report --json`:
- rebucket: a list of {"date_key", "value"} points
- rollup: a list of per-tenant summaries
"""

from pathlib import Path
from typing import Annotated

import typer
from pydantic import TypeAdapter, ValidationError
from rich.console import Console
from rich.table import Table

from funnelcore.cli.shared import C, I, fail, load_json_file
from funnelcore.core.models import TimeSeriesPoint
from funnelcore.core.rollup import TenantSummary, rollup_tenants
from funnelcore.core.timeseries import rebucket_time_series
from funnelcore.exceptions import InputError
from funnelcore.utils.config import get_settings

_POINTS = TypeAdapter(list[TimeSeriesPoint])
_SUMMARIES = TypeAdapter(list[TenantSummary])

FileArgument = Annotated[Path, typer.Argument(help="JSON input file")]
JsonOption = Annotated[bool, typer.Option("--json", "-j", help="Output as JSON for scripting")]


# ==============================================================================
# Commands
# ==============================================================================


def rebucket(
    input_file: FileArgument,
    granularity: Annotated[
        str, typer.Option("--granularity", "-g", help="Target bucket: day, week, month")
    ] = "week",
    json_output: JsonOption = False,
) -> None:
    """Regroup a daily series into week or month buckets.

    Values are summed per bucket; weeks start on Monday and months on the 1st.

    Examples:
        funnel rebucket views.json -g month
        funnel rebucket views.json -g week --json
    """
    try:
        points = _POINTS.validate_python(load_json_file(input_file))
        buckets = rebucket_time_series(points, granularity)
    except ValidationError as e:
        fail(f"Invalid series in {input_file}: {e.error_count()} errors", json_output)
    except InputError as e:
        fail(e, json_output)

    if json_output:
        print(_POINTS.dump_json(buckets, indent=2).decode())
        return

    table = Table(title=f"Series by {granularity.lower()}", show_header=True, header_style="bold")
    table.add_column("Bucket")
    table.add_column("Value", justify="right")
    for point in buckets:
        table.add_row(point.date_key, f"{point.value:,}")
    print()
    Console().print(table)
    print(f"  {C.BOLD}Total:{C.RESET} {sum(p.value for p in buckets):,}")
    print()


def rollup(
    input_file: FileArgument,
    json_output: JsonOption = False,
) -> None:
    """Combine per-tenant summaries into cross-tenant totals.

    Revenue is only summed within a currency; with mixed currencies the
    per-currency totals are shown and tenants are ranked by transactions.

    Examples:
        funnel rollup tenants.json
        funnel rollup tenants.json --json
    """
    try:
        summaries = _SUMMARIES.validate_python(load_json_file(input_file))
    except ValidationError as e:
        fail(f"Invalid summaries in {input_file}: {e.error_count()} errors", json_output)

    result = rollup_tenants(summaries, get_settings().default_currency)

    if json_output:
        print(result.model_dump_json(indent=2))
        return

    table = Table(title="Tenant Rollup", show_header=True, header_style="bold")
    table.add_column("Tenant")
    table.add_column("Currency")
    table.add_column("Revenue", justify="right")
    table.add_column("Share %", justify="right")
    table.add_column("Transactions", justify="right")
    table.add_column("Views", justify="right")
    table.add_column("Conv %", justify="right")
    for tenant in result.ranked_tenants():
        table.add_row(
            tenant.name,
            tenant.currency,
            f"{tenant.revenue:,.2f}",
            f"{tenant.revenue_share:.1f}",
            f"{tenant.transaction_count:,}",
            f"{tenant.views:,}",
            f"{tenant.conversion_rate:.1f}",
        )
    print()
    Console().print(table)

    if result.has_mixed_currencies:
        print(f"  {C.BRIGHT_YELLOW}{I.WARN} Mixed currencies, revenue not summed:{C.RESET}")
        for currency, revenue in result.revenue_by_currency.items():
            print(f"    {I.BULLET} {currency}: {revenue:,.2f}")
    else:
        total = f"{result.total_revenue:,.2f} {result.primary_currency}"
        print(f"  {C.BOLD}Revenue:{C.RESET}      {total}")
    print(f"  {C.BOLD}Transactions:{C.RESET} {result.totals.transaction_count:,}")
    print(f"  {C.BOLD}Conversion:{C.RESET}   {result.conversion_rate:.1f}%")
    print()
