# ==============================================================================
# Funnel Analytics CLI
# ==============================================================================
"""
Command-line interface for session-attributed funnel analytics.

Usage:
    funnel --help
    funnel report shop-1 --period month
    funnel campaigns shop-1 --json
    funnel rebucket views.json --granularity month
    funnel rollup tenants.json
    funnel config show
    funnel db init
"""

import logging
import os

import typer

from funnelcore.utils.config import get_settings

# ==============================================================================
# App Configuration
# ==============================================================================
# Set consistent terminal width for help output formatting
if "COLUMNS" not in os.environ:
    os.environ["COLUMNS"] = "115"

app = typer.Typer(
    name="funnel",
    help="Session-attributed conversion funnel analytics",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@app.callback()
def configure_logging(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Session-attributed conversion funnel analytics."""
    settings = get_settings()
    level = logging.DEBUG if verbose or settings.debug else settings.log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


# Report commands are imported from funnelcore.cli.report
from funnelcore.cli.report import show_campaigns, show_report

app.command("report")(show_report)
app.command("campaigns")(show_campaigns)

# Chart utilities are imported from funnelcore.cli.series
from funnelcore.cli.series import rebucket, rollup

app.command("rebucket")(rebucket)
app.command("rollup")(rollup)

config_app = typer.Typer(
    help="Configuration management",
    no_args_is_help=True,
)
app.add_typer(config_app, name="config")

from funnelcore.cli.config import config_show

config_app.command("show")(config_show)

db_app = typer.Typer(
    help="Database operations",
    no_args_is_help=True,
)
app.add_typer(db_app, name="db")

from funnelcore.cli.db import db_check, db_init

db_app.command("init")(db_init)
db_app.command("check")(db_check)


# ==============================================================================
# Entry Point
# ==============================================================================


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
