# ==============================================================================
# Funnel Report Service
# ==============================================================================
"""
On-demand funnel report computation for one tenant and one window.

Pipeline:
1. Validate inputs (InputError, before any store is touched)
2. Read events and transactions in parallel
3. Join them by session (AttributionJoiner)
4. Fold into per-entity metrics and a summary (FunnelAggregator)
5. Look up catalog metadata and build the ranked lists
6. Rebucket daily views to the requested granularity

Any store failure aborts the whole report with UpstreamUnavailable; a report
built from events without transactions (or the reverse) is never returned.
The service itself does not retry, that is left to the repositories.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime
from typing import Callable, TypeVar

from funnelcore.base.repositories import (
    CatalogRepository,
    EventRepository,
    TransactionRepository,
)
from funnelcore.core.aggregator import FunnelAggregator
from funnelcore.core.attribution import AttributionJoiner
from funnelcore.core.campaigns import campaign_breakdown
from funnelcore.core.models import (
    CampaignReport,
    FunnelReport,
    Granularity,
    ProductEvent,
    ReportFilter,
    ReportWindow,
    TenantId,
    Transaction,
)
from funnelcore.core.periods import ensure_aware
from funnelcore.core.ranking import RankingThresholds, rank_entities
from funnelcore.core.timeseries import parse_granularity, rebucket_time_series
from funnelcore.exceptions import InputError, UpstreamUnavailable
from funnelcore.utils.config import ReportSettings, get_settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


def build_window(window_start: datetime, window_end: datetime) -> ReportWindow:
    """
    Validate and build an inclusive report window.

    Naive bounds are read as UTC, matching how stored timestamps are loaded.

    Raises:
        InputError: If start is after end, or only one bound is timezone-aware
    """
    if (window_start.tzinfo is None) != (window_end.tzinfo is None):
        raise InputError("window_start and window_end must both be naive or both be aware")
    window_start = ensure_aware(window_start)
    window_end = ensure_aware(window_end)
    if window_start > window_end:
        raise InputError(
            f"Invalid window: start {window_start.isoformat()} is after end {window_end.isoformat()}"
        )
    return ReportWindow(start=window_start, end=window_end)


def validate_limit(limit: int) -> int:
    """Raises InputError unless limit is a positive integer."""
    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        raise InputError(f"Invalid limit: {limit!r} (must be a positive integer)")
    return limit


class FunnelReportService:
    """
    Computes funnel and campaign reports from the three read repositories.

    Stateless apart from its collaborators; one instance can serve any
    number of tenants and concurrent callers.
    """

    def __init__(
        self,
        event_repository: EventRepository,
        transaction_repository: TransactionRepository,
        catalog_repository: CatalogRepository,
        settings: ReportSettings | None = None,
    ):
        """
        Initialize the service.

        Args:
            event_repository: Source of view / add-to-cart events
            transaction_repository: Source of orders and bookings
            catalog_repository: Source of entity display metadata
            settings: Report defaults. If None, uses get_settings().report.
        """
        self._events = event_repository
        self._transactions = transaction_repository
        self._catalog = catalog_repository
        self._settings = settings or get_settings().report
        self._thresholds = RankingThresholds(
            opportunity_min_views=self._settings.opportunity_min_views,
            opportunity_max_conversion_rate=self._settings.opportunity_max_conversion_rate,
        )
        self._joiner = AttributionJoiner()
        self._aggregator = FunnelAggregator()

    @property
    def settings(self) -> ReportSettings:
        return self._settings

    # ==========================================================================
    # Store Access
    # ==========================================================================

    def _fetch_activity(
        self,
        tenant_id: TenantId,
        window: ReportWindow,
        report_filter: ReportFilter | None,
    ) -> tuple[list[ProductEvent], list[Transaction]]:
        """Read events and transactions concurrently; fail both if either fails."""
        workers = max(1, self._settings.fetch_workers)
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="funnel-fetch") as executor:
            futures: dict[str, Future] = {
                "events": executor.submit(
                    self._events.fetch_events, tenant_id, window, report_filter
                ),
                "transactions": executor.submit(
                    self._transactions.fetch_transactions, tenant_id, window, report_filter
                ),
            }
            results = {}
            for source, future in futures.items():
                try:
                    results[source] = future.result()
                except Exception as e:
                    for other in futures.values():
                        other.cancel()
                    logger.error("Failed to read %s for tenant %s: %s", source, tenant_id, e)
                    raise UpstreamUnavailable(source, str(e)) from e
        return results["events"], results["transactions"]

    def _read(self, source: str, tenant_id: TenantId, call: Callable[[], T]) -> T:
        try:
            return call()
        except Exception as e:
            logger.error("Failed to read %s for tenant %s: %s", source, tenant_id, e)
            raise UpstreamUnavailable(source, str(e)) from e

    # ==========================================================================
    # Reports
    # ==========================================================================

    def compute_funnel_report(
        self,
        tenant_id: TenantId,
        window_start: datetime,
        window_end: datetime,
        granularity: Granularity | str = Granularity.DAY,
        entity_filter: ReportFilter | None = None,
        limit: int | None = None,
    ) -> FunnelReport:
        """
        Compute the funnel report for one tenant and one inclusive window.

        Args:
            tenant_id: Tenant to report on
            window_start: First instant of the window (inclusive)
            window_end: Last instant of the window (inclusive)
            granularity: day, week or month, used for the views series
            entity_filter: Optional entity-kind / marketing-tag restriction
            limit: Entries per ranked list (default: settings.default_limit)

        Returns:
            FunnelReport

        Raises:
            InputError: On an invalid window, granularity or limit
            UpstreamUnavailable: If any store read fails
        """
        window = build_window(window_start, window_end)
        target = parse_granularity(granularity)
        limit = validate_limit(self._settings.default_limit if limit is None else limit)

        events, transactions = self._fetch_activity(tenant_id, window, entity_filter)

        attribution = self._joiner.join(events, transactions)
        aggregation = self._aggregator.aggregate(events, transactions, attribution)

        catalog = self._read(
            "catalog", tenant_id, lambda: self._catalog.fetch_catalog(aggregation.metrics.keys())
        )
        rankings, missing = rank_entities(aggregation.metrics, catalog, limit, self._thresholds)

        views_series = rebucket_time_series(self._aggregator.daily_views(events), target)

        logger.info(
            "Funnel report for tenant %s: %d events, %d transactions, %d entities",
            tenant_id,
            len(events),
            len(transactions),
            len(aggregation.metrics),
        )
        return FunnelReport(
            tenant_id=tenant_id,
            window=window,
            granularity=target,
            summary=aggregation.summary,
            entities=aggregation.metrics,
            rankings=rankings,
            views_series=views_series,
            missing_entities=missing,
        )

    def compute_campaign_report(
        self,
        tenant_id: TenantId,
        window_start: datetime,
        window_end: datetime,
        entity_filter: ReportFilter | None = None,
    ) -> CampaignReport:
        """
        Compute per-campaign funnel metrics for one tenant and one window.

        Raises:
            InputError: On an invalid window
            UpstreamUnavailable: If any store read fails
        """
        window = build_window(window_start, window_end)
        events, transactions = self._fetch_activity(tenant_id, window, entity_filter)
        campaigns = campaign_breakdown(events, transactions)
        logger.info("Campaign report for tenant %s: %d campaigns", tenant_id, len(campaigns))
        return CampaignReport(tenant_id=tenant_id, window=window, campaigns=campaigns)
