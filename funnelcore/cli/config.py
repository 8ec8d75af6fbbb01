# ==============================================================================
# Config Commands
# ==============================================================================
"""
Configuration commands for the funnel CLI.
"""

import json
from typing import Annotated

import typer

from funnelcore.cli.shared import C
from funnelcore.utils.config import get_settings


# ==============================================================================
# Commands
# ==============================================================================


def config_show(
    json_output: Annotated[
        bool, typer.Option("--json", "-j", help="Output configuration as JSON")
    ] = False,
) -> None:
    """Display current configuration (includes secrets in JSON mode)."""
    settings = get_settings()

    if json_output:
        config = {
            "postgresql": {
                "host": settings.postgres.host,
                "port": settings.postgres.port,
                "database": settings.postgres.database,
                "schema": settings.postgres.schema_name,
                "user": settings.postgres.user,
                "password": settings.postgres.password,
                "sslmode": settings.postgres.sslmode,
            },
            "valkey": {
                "host": settings.valkey.host,
                "port": settings.valkey.port,
                "ssl_enabled": settings.valkey.ssl,
                "password": settings.valkey.password,
            },
            "report": settings.report.model_dump(),
            "rate_limit": settings.rate_limit.model_dump(),
            "default_currency": settings.default_currency,
            "log_level": settings.log_level,
        }
        print(json.dumps(config, indent=2))
        return

    print()
    print(f"{C.BOLD}Configuration{C.RESET}")
    print()

    print(f"{C.CYAN}PostgreSQL{C.RESET}")
    print(f"  Host:       {C.WHITE}{settings.postgres.host}{C.RESET}")
    print(f"  Port:       {C.WHITE}{settings.postgres.port}{C.RESET}")
    print(f"  Database:   {C.WHITE}{settings.postgres.database}{C.RESET}")
    print(f"  Schema:     {C.WHITE}{settings.postgres.schema_name}{C.RESET}")
    print(f"  User:       {C.WHITE}{settings.postgres.user}{C.RESET}")
    print(f"  SSL:        {C.WHITE}{settings.postgres.sslmode}{C.RESET}")
    print()

    print(f"{C.CYAN}Valkey{C.RESET}")
    print(f"  Host:       {C.WHITE}{settings.valkey.host}{C.RESET}")
    print(f"  Port:       {C.WHITE}{settings.valkey.port}{C.RESET}")
    valkey_ssl = "enabled" if settings.valkey.ssl else "disabled"
    print(f"  SSL:        {C.WHITE}{valkey_ssl}{C.RESET}")
    print()

    report = settings.report
    print(f"{C.CYAN}Reports{C.RESET}")
    print(f"  Limit:      {C.WHITE}{report.default_limit}{C.RESET}")
    print(
        f"  Opportunity:{C.WHITE} >= {report.opportunity_min_views} views, "
        f"< {report.opportunity_max_conversion_rate}% conversion{C.RESET}"
    )
    cache = f"{report.cache_ttl_seconds}s TTL" if report.cache_enabled else "disabled"
    print(f"  Cache:      {C.WHITE}{cache}{C.RESET}")
    print(f"  Currency:   {C.WHITE}{settings.default_currency}{C.RESET}")
    print()

    print(f"{C.CYAN}Rate Limit{C.RESET}")
    print(
        f"  Window:     {C.WHITE}{settings.rate_limit.max_requests} requests / "
        f"{settings.rate_limit.window_seconds:g}s{C.RESET}"
    )
    print()
