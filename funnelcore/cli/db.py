# ==============================================================================
# Database Commands
# ==============================================================================
"""
Database commands for the funnel CLI.
"""

from typing import Annotated

import psycopg2
import typer

from funnelcore.cli.shared import C, I
from funnelcore.utils.config import get_settings


# ==============================================================================
# Commands
# ==============================================================================


def db_init() -> None:
    """Create the funnel schema and tables if they do not exist.

    Safe to run repeatedly; existing tables are left untouched.

    Examples:
        funnel db init
    """
    from funnelcore.utils.db import ensure_schema

    settings = get_settings()
    try:
        ensure_schema(settings.postgres)
    except (psycopg2.Error, RuntimeError) as e:
        print(f"{C.BRIGHT_RED}{I.CROSS} Schema initialization failed: {e}{C.RESET}")
        raise typer.Exit(1)
    print(
        f"{C.BRIGHT_GREEN}{I.CHECK} Schema '{settings.postgres.schema_name}' is ready{C.RESET}"
    )


def db_check(
    quiet: Annotated[bool, typer.Option("--quiet", "-q", help="Only set the exit code")] = False,
) -> None:
    """Check that PostgreSQL is reachable.

    Examples:
        funnel db check
    """
    from funnelcore.utils.db import check_db_connection

    settings = get_settings()
    host = settings.postgres.host
    if check_db_connection(settings.postgres):
        if not quiet:
            print(f"{C.BRIGHT_GREEN}{I.CHECK} PostgreSQL reachable at {host}{C.RESET}")
        return
    if not quiet:
        print(f"{C.BRIGHT_RED}{I.CROSS} PostgreSQL unreachable at {host}{C.RESET}")
    raise typer.Exit(1)
