# ==============================================================================
# Tests for Funnel Aggregation
# ==============================================================================
"""
Unit tests for FunnelAggregator.

Tests cover:
- The single-entity view / cart / purchase example
- Booked vs completed_paid quantities and revenue
- Transaction counts vs unit totals in the summary
- Abandoned-cart statistics
- Zero-denominator rates
- Daily view series
"""

from decimal import Decimal

from factories import cart, order, view
from funnelcore.core.aggregator import FunnelAggregator
from funnelcore.core.attribution import AttributionJoiner
from funnelcore.core.models import CompletionState


def aggregate(events, transactions):
    attribution = AttributionJoiner().join(events, transactions)
    return FunnelAggregator().aggregate(events, transactions, attribution)


# ==============================================================================
# Entity Metrics
# ==============================================================================


class TestEntityMetrics:
    """Tests for per-entity counters and rates."""

    def test_single_purchase_example(self):
        result = aggregate(
            [view("P1", "S1"), cart("P1", "S1")],
            [order("T1", "S1", [("P1", 1, 10)], completed=True)],
        )
        p1 = result.metrics["P1"]
        assert p1.views == 1
        assert p1.add_to_carts == 1
        assert p1.view_to_cart_rate == 100.0
        assert p1.conversion_rate == 100.0
        assert p1.cart_to_transaction_rate == 100.0
        assert p1.transactions_booked == 1
        assert p1.transactions_completed == 1
        assert p1.revenue == Decimal("10")

    def test_cart_a_order_b_does_not_credit_a(self):
        result = aggregate(
            [cart("A", "S1")],
            [order("T1", "S1", [("B", 1, 10)])],
        )
        a = result.metrics["A"]
        assert a.add_to_carts == 1
        assert a.carts_attributed_to_transaction == 0
        assert a.cart_to_transaction_rate == 0.0
        assert result.summary.converted_carts == 1
        assert result.summary.abandoned_carts == 0

    def test_null_session_events_count_in_raw_totals_only(self):
        result = aggregate(
            [view("A"), view("A", "S1")],
            [order("T1", "S1", [("A", 1, 10)])],
        )
        a = result.metrics["A"]
        assert a.views == 2
        assert a.views_attributed_to_transaction == 1
        assert a.conversion_rate == 50.0

    def test_booked_quantity_counts_every_transaction(self):
        result = aggregate(
            [],
            [
                order("T1", "S1", [("A", 2, "3.00")], completed=True),
                order("T2", "S2", [("A", 3, "3.00")], completed=False),
            ],
        )
        a = result.metrics["A"]
        assert a.transactions_booked == 5
        assert a.transactions_completed == 2
        assert a.revenue == Decimal("6.00")

    def test_completed_revenue_never_exceeds_all_booked(self):
        transactions = [
            order("T1", "S1", [("A", 2, "9.99"), ("B", 1, "5.00")], completed=True),
            order("T2", "S2", [("A", 1, "9.99")], completed=False),
            order("T3", "S3", [("B", 4, "0.00")], completed=False),
        ]
        completed_revenue = aggregate([], transactions).summary.total_revenue
        as_if_completed = [
            t.model_copy(update={"completion_state": CompletionState.COMPLETED_PAID})
            for t in transactions
        ]
        all_revenue = aggregate([], as_if_completed).summary.total_revenue
        assert completed_revenue == Decimal("24.98")
        assert all_revenue == Decimal("34.97")
        assert completed_revenue <= all_revenue

    def test_zero_views_rates_are_zero(self):
        result = aggregate([], [order("T1", "S1", [("A", 1, 1)])])
        a = result.metrics["A"]
        assert a.views == 0
        assert a.view_to_cart_rate == 0.0
        assert a.conversion_rate == 0.0
        assert a.cart_to_transaction_rate == 0.0

    def test_metrics_sorted_by_entity_id(self):
        result = aggregate([view("c"), view("a"), view("b")], [])
        assert list(result.metrics) == ["a", "b", "c"]

    def test_rates_round_half_up(self):
        # 1/8 = 12.5%, 1/3 = 33.3%, 2/3 = 66.7%
        result = aggregate(
            [view("A")] * 8 + [cart("A")] + [view("B")] * 3 + [cart("B")] * 2,
            [],
        )
        assert result.metrics["A"].view_to_cart_rate == 12.5
        assert result.metrics["B"].view_to_cart_rate == 66.7


# ==============================================================================
# Summary
# ==============================================================================


class TestSummary:
    """Tests for window-level totals."""

    def test_counts_transactions_and_units_separately(self):
        result = aggregate(
            [],
            [
                order("T1", "S1", [("A", 2, 1), ("B", 3, 1)], completed=True),
                order("T2", "S2", [("A", 1, 1)], completed=False),
            ],
        )
        summary = result.summary
        assert summary.total_transactions_booked == 2
        assert summary.total_transactions_completed == 1
        assert summary.total_units_booked == 6
        assert summary.total_units_completed == 5
        assert summary.unique_entities == 2

    def test_overall_rates_use_session_matched_numerators(self):
        result = aggregate(
            [view("A", "S1"), view("A", "S2"), cart("A", "S1"), cart("A", "S2")],
            [order("T1", "S1", [("A", 1, 1)])],
        )
        summary = result.summary
        assert summary.total_views == 2
        assert summary.total_add_to_carts == 2
        assert summary.overall_view_to_cart_rate == 100.0
        assert summary.overall_cart_to_transaction_rate == 50.0
        assert summary.overall_conversion_rate == 50.0

    def test_empty_input(self):
        summary = aggregate([], []).summary
        assert summary.total_views == 0
        assert summary.total_revenue == Decimal("0")
        assert summary.overall_conversion_rate == 0.0


class TestAbandonedCarts:
    """Tests for abandoned-cart statistics."""

    def test_no_cart_sessions_rate_is_zero(self):
        summary = aggregate([view("A", "S1")], []).summary
        assert summary.total_cart_sessions == 0
        assert summary.abandoned_cart_rate == 0.0

    def test_abandoned_and_converted(self):
        summary = aggregate(
            [cart("A", "S1"), cart("A", "S2"), cart("B", "S2"), cart("A", "S3"), view("A", "S4")],
            [order("T1", "S1", [("A", 1, 1)]), order("T2", "S4", [("A", 1, 1)])],
        ).summary
        assert summary.abandoned_carts == 2
        assert summary.converted_carts == 1
        assert summary.abandoned_cart_rate == 66.7

    def test_anonymous_carts_are_ignored(self):
        summary = aggregate([cart("A")], []).summary
        assert summary.total_cart_sessions == 0


class TestDailyViews:
    """Tests for the daily view series."""

    def test_counts_views_per_day(self):
        points = FunnelAggregator().daily_views(
            [view("A", day=3), cart("A", day=3), view("B", day=1), view("A", day=3)]
        )
        assert [(p.date_key, p.value) for p in points] == [
            ("2024-01-01", 1),
            ("2024-01-03", 2),
        ]
