# ==============================================================================
# Report Services
# ==============================================================================
"""
Report services and their default wiring.

get_funnel_report_service() builds a service backed by the PostgreSQL
repositories, wrapped in the Valkey report cache when REPORT_CACHE_ENABLED
is set.
"""

from funnelcore.services.cached import CachedFunnelReportService, report_cache_key
from funnelcore.services.funnel_report import FunnelReportService
from funnelcore.utils.config import Settings, get_settings


def get_funnel_report_service(
    settings: Settings | None = None,
) -> FunnelReportService | CachedFunnelReportService:
    """
    Build a report service from settings.

    Args:
        settings: Application settings. If None, uses get_settings().

    Returns:
        FunnelReportService, or CachedFunnelReportService when caching is enabled
    """
    from funnelcore.infrastructure.repositories import (
        PostgreSQLCatalogRepository,
        PostgreSQLEventRepository,
        PostgreSQLTransactionRepository,
    )

    settings = settings or get_settings()
    service = FunnelReportService(
        PostgreSQLEventRepository(settings.postgres),
        PostgreSQLTransactionRepository(settings.postgres),
        PostgreSQLCatalogRepository(settings.postgres),
        settings.report,
    )
    if not settings.report.cache_enabled:
        return service

    from funnelcore.infrastructure.cache import ValkeyCache

    return CachedFunnelReportService(service, ValkeyCache(settings.valkey.url))


__all__ = [
    "CachedFunnelReportService",
    "FunnelReportService",
    "get_funnel_report_service",
    "report_cache_key",
]
