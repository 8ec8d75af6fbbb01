# ==============================================================================
# Cached Funnel Report Service
# ==============================================================================
"""
Caller-side report cache.

Reports are pure functions of the stored data, so a computed report can be
reused until its TTL expires. Staleness inside the TTL is accepted; callers
that write new activity can drop a tenant's reports with invalidate().

Cache failures never fail a report: they are logged and the report is
computed directly.
"""

import logging
from datetime import datetime

from pydantic import ValidationError
from redis.exceptions import RedisError

from funnelcore.base import Cache
from funnelcore.core.models import FunnelReport, Granularity, ReportFilter, TenantId
from funnelcore.core.timeseries import parse_granularity
from funnelcore.services.funnel_report import FunnelReportService

logger = logging.getLogger(__name__)

KEY_PREFIX = "funnel:report"


def report_cache_key(
    tenant_id: TenantId,
    window_start: datetime,
    window_end: datetime,
    granularity: Granularity,
    entity_filter: ReportFilter | None,
    limit: int,
) -> str:
    """Build the cache key of one report request."""
    filter_key = (entity_filter or ReportFilter()).cache_key()
    return ":".join(
        [
            KEY_PREFIX,
            tenant_id,
            window_start.isoformat(),
            window_end.isoformat(),
            granularity.value,
            filter_key,
            str(limit),
        ]
    )


class CachedFunnelReportService:
    """
    Wraps FunnelReportService with a TTL cache.

    Args:
        service: Service computing reports on a miss
        cache: Cache implementation (e.g. ValkeyCache)
        ttl_seconds: Time-to-live of cached reports (default: settings.cache_ttl_seconds)
    """

    def __init__(
        self,
        service: FunnelReportService,
        cache: Cache,
        ttl_seconds: int | None = None,
    ):
        self._service = service
        self._cache = cache
        self._ttl = ttl_seconds if ttl_seconds is not None else service.settings.cache_ttl_seconds

    def compute_funnel_report(
        self,
        tenant_id: TenantId,
        window_start: datetime,
        window_end: datetime,
        granularity: Granularity | str = Granularity.DAY,
        entity_filter: ReportFilter | None = None,
        limit: int | None = None,
    ) -> FunnelReport:
        """Return a cached report, computing and storing it on a miss."""
        target = parse_granularity(granularity)
        effective_limit = self._service.settings.default_limit if limit is None else limit
        key = report_cache_key(
            tenant_id, window_start, window_end, target, entity_filter, effective_limit
        )

        cached = self._get(key)
        if cached is not None:
            logger.debug("Report cache hit: %s", key)
            return cached

        report = self._service.compute_funnel_report(
            tenant_id, window_start, window_end, target, entity_filter, effective_limit
        )
        try:
            self._cache.set(key, report.model_dump(mode="json"), ttl_seconds=self._ttl)
        except RedisError as e:
            logger.warning("Failed to cache report %s: %s", key, e)
        return report

    def _get(self, key: str) -> FunnelReport | None:
        try:
            payload = self._cache.get(key)
        except RedisError as e:
            logger.warning("Report cache unavailable, computing directly: %s", e)
            return None
        if payload is None:
            return None
        try:
            return FunnelReport.model_validate(payload)
        except ValidationError as e:
            logger.warning("Discarding unreadable cached report %s: %s", key, e)
            return None

    def invalidate(self, tenant_id: TenantId) -> int:
        """
        Drop every cached report of a tenant.

        Returns:
            Number of keys deleted
        """
        deleted = self._cache.delete_pattern(f"{KEY_PREFIX}:{tenant_id}:*")
        logger.info("Invalidated %d cached reports for tenant %s", deleted, tenant_id)
        return deleted
