# ==============================================================================
# Core Domain Logic
# ==============================================================================
"""
Pure domain logic with no external dependencies beyond Pydantic.

This module contains:
- Domain models (ProductEvent, Transaction, EntityFunnelMetric, ...)
- Session attribution and funnel aggregation
- Ranked lists, time-series rebucketing and multi-tenant rollup

All code here works on in-memory data and is easily unit-testable.
"""

from funnelcore.core.aggregator import AggregationResult, FunnelAggregator
from funnelcore.core.attribution import AttributionJoiner, AttributionResult
from funnelcore.core.campaigns import campaign_breakdown
from funnelcore.core.ingest import classify_booking, classify_order
from funnelcore.core.models import (
    CompletionState,
    EntityFunnelMetric,
    EntityId,
    EntityKind,
    EntityMetadata,
    EventType,
    FunnelReport,
    FunnelSummary,
    Granularity,
    MarketingTags,
    ProductEvent,
    ReportFilter,
    ReportWindow,
    SessionAttribution,
    SessionId,
    TenantId,
    TimeSeriesPoint,
    Transaction,
    TransactionLine,
)
from funnelcore.core.periods import chart_window, report_window
from funnelcore.core.ranking import RankingThresholds, rank_entities
from funnelcore.core.rates import percent
from funnelcore.core.rollup import RollupResult, TenantSummary, rollup_tenants
from funnelcore.core.timeseries import rebucket_time_series

__all__ = [
    # Models
    "CompletionState",
    "EntityFunnelMetric",
    "EntityId",
    "EntityKind",
    "EntityMetadata",
    "EventType",
    "FunnelReport",
    "FunnelSummary",
    "Granularity",
    "MarketingTags",
    "ProductEvent",
    "ReportFilter",
    "ReportWindow",
    "SessionAttribution",
    "SessionId",
    "TenantId",
    "TimeSeriesPoint",
    "Transaction",
    "TransactionLine",
    # Pipeline stages
    "AggregationResult",
    "AttributionJoiner",
    "AttributionResult",
    "FunnelAggregator",
    "RankingThresholds",
    "rank_entities",
    # Utilities
    "RollupResult",
    "TenantSummary",
    "campaign_breakdown",
    "chart_window",
    "classify_booking",
    "classify_order",
    "percent",
    "rebucket_time_series",
    "report_window",
    "rollup_tenants",
]
