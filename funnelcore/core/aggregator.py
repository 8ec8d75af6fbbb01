# ==============================================================================
# Funnel Aggregator - Pure Domain Logic
# ==============================================================================
"""
Folds events, transactions and session attribution into funnel metrics.

Per entity:
- views / add_to_carts count raw events, including events without a session
- *_attributed_to_transaction count events whose session transacted that
  same entity
- transactions_booked sums line quantities over every transaction
- transactions_completed and revenue only use completed_paid transactions

Per window:
- transaction totals are reported both as a count of distinct transactions
  and as summed units
- abandoned-cart statistics over sessions that carted at least one entity
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Sequence

from funnelcore.core.attribution import AttributionResult
from funnelcore.core.models import (
    EntityFunnelMetric,
    EntityId,
    EventType,
    FunnelSummary,
    ProductEvent,
    TimeSeriesPoint,
    Transaction,
)

logger = logging.getLogger(__name__)


@dataclass
class AggregationResult:
    """Per-entity metrics (sorted by entity id) and the window summary."""

    metrics: dict[EntityId, EntityFunnelMetric] = field(default_factory=dict)
    summary: FunnelSummary = field(default_factory=FunnelSummary)


class FunnelAggregator:
    """
    Pure funnel aggregation.

    Single-threaded fold over already-fetched data; keeps no state
    between calls.
    """

    def aggregate(
        self,
        events: Sequence[ProductEvent],
        transactions: Sequence[Transaction],
        attribution: AttributionResult,
    ) -> AggregationResult:
        """
        Compute entity metrics and the window summary.

        Args:
            events: View and add-to-cart events
            transactions: Every booked transaction in the window
            attribution: Output of AttributionJoiner.join() for the same inputs

        Returns:
            AggregationResult
        """
        metrics: dict[EntityId, EntityFunnelMetric] = {}

        def metric_for(entity_id: EntityId) -> EntityFunnelMetric:
            metric = metrics.get(entity_id)
            if metric is None:
                metric = EntityFunnelMetric(entity_id=entity_id)
                metrics[entity_id] = metric
            return metric

        for event in events:
            metric = metric_for(event.entity_id)
            attributed = attribution.transacted(event.session_id, event.entity_id)
            if event.event_type == EventType.VIEW:
                metric.views += 1
                if attributed:
                    metric.views_attributed_to_transaction += 1
            elif event.event_type == EventType.ADD_TO_CART:
                metric.add_to_carts += 1
                if attributed:
                    metric.carts_attributed_to_transaction += 1

        completed_count = 0
        for transaction in transactions:
            completed = transaction.is_completed_paid
            if completed:
                completed_count += 1
            for line in transaction.lines:
                metric = metric_for(line.entity_id)
                metric.transactions_booked += line.quantity
                if completed:
                    metric.transactions_completed += line.quantity
                    metric.revenue += line.line_total

        ordered = {entity_id: metrics[entity_id] for entity_id in sorted(metrics)}
        summary = self.summarize(ordered, len(transactions), completed_count)
        summary.abandoned_carts, summary.converted_carts = self.abandoned_carts(attribution)

        logger.debug(
            "Aggregated %d events and %d transactions into %d entities",
            len(events),
            len(transactions),
            len(ordered),
        )
        return AggregationResult(metrics=ordered, summary=summary)

    def summarize(
        self,
        metrics: dict[EntityId, EntityFunnelMetric],
        transaction_count: int,
        completed_count: int,
    ) -> FunnelSummary:
        """Sum entity metrics into window totals."""
        summary = FunnelSummary(
            total_transactions_booked=transaction_count,
            total_transactions_completed=completed_count,
            unique_entities=len(metrics),
        )
        revenue = Decimal("0")
        for metric in metrics.values():
            summary.total_views += metric.views
            summary.total_add_to_carts += metric.add_to_carts
            summary.total_views_attributed += metric.views_attributed_to_transaction
            summary.total_carts_attributed += metric.carts_attributed_to_transaction
            summary.total_units_booked += metric.transactions_booked
            summary.total_units_completed += metric.transactions_completed
            revenue += metric.revenue
        summary.total_revenue = revenue
        return summary

    def abandoned_carts(self, attribution: AttributionResult) -> tuple[int, int]:
        """
        Count abandoned and converted cart sessions.

        A cart session converts when it placed any transaction, whichever
        entities that transaction contains.

        Returns:
            (abandoned, converted)
        """
        abandoned = 0
        converted = 0
        for session in attribution.cart_sessions:
            if attribution.has_transaction(session.session_id):
                converted += 1
            else:
                abandoned += 1
        return abandoned, converted

    def daily_views(self, events: Sequence[ProductEvent]) -> list[TimeSeriesPoint]:
        """Count view events per calendar day, ascending."""
        counts: dict[date, int] = {}
        for event in events:
            if event.event_type != EventType.VIEW:
                continue
            day = event.occurred_at.date()
            counts[day] = counts.get(day, 0) + 1
        return [
            TimeSeriesPoint(date_key=day.isoformat(), value=counts[day]) for day in sorted(counts)
        ]
