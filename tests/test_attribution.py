# ==============================================================================
# Tests for Session Attribution
# ==============================================================================
"""
Unit tests for AttributionJoiner.

Tests cover:
- Per-session viewed / carted / transacted sets
- Sessions that only appear on a transaction
- Events and transactions without a session id
- Per-entity crediting (cart A, order B)
"""

from factories import cart, order, view
from funnelcore.core.attribution import AttributionJoiner


class TestTransactedEntitiesBySession:
    """Tests for the session -> transacted entities map."""

    def test_unions_lines_across_transactions(self):
        joiner = AttributionJoiner()
        by_session = joiner.transacted_entities_by_session(
            [
                order("o1", "s1", [("a", 1, 5)]),
                order("o2", "s1", [("b", 1, 5), ("c", 2, 1)], completed=False),
            ]
        )
        assert by_session == {"s1": {"a", "b", "c"}}

    def test_skips_transactions_without_session(self):
        joiner = AttributionJoiner()
        assert joiner.transacted_entities_by_session([order("o1", None, [("a", 1, 5)])]) == {}


class TestJoin:
    """Tests for AttributionJoiner.join()."""

    def test_collects_viewed_and_carted(self):
        result = AttributionJoiner().join(
            [view("a", "s1"), view("b", "s1"), cart("a", "s1")],
            [],
        )
        session = result.sessions["s1"]
        assert session.viewed_entities == {"a", "b"}
        assert session.carted_entities == {"a"}
        assert session.transacted_entities == set()
        assert not result.has_transaction("s1")

    def test_null_session_events_are_excluded(self):
        result = AttributionJoiner().join([view("a"), cart("a")], [])
        assert result.sessions == {}
        assert result.cart_sessions == []

    def test_transaction_only_session_is_present(self):
        result = AttributionJoiner().join([], [order("o1", "s9", [("a", 1, 1)])])
        assert result.sessions["s9"].transacted_entities == {"a"}
        assert result.has_transaction("s9")

    def test_booked_transactions_count_for_attribution(self):
        result = AttributionJoiner().join(
            [view("a", "s1")], [order("o1", "s1", [("a", 1, 1)], completed=False)]
        )
        assert result.transacted("s1", "a")

    def test_cart_a_order_b_credits_only_b(self):
        result = AttributionJoiner().join(
            [cart("a", "s1")], [order("o1", "s1", [("b", 1, 1)])]
        )
        assert result.has_transaction("s1")
        assert not result.transacted("s1", "a")
        assert result.transacted("s1", "b")

    def test_transaction_without_lines_still_marks_session(self):
        result = AttributionJoiner().join([cart("a", "s1")], [order("o1", "s1", [])])
        assert result.has_transaction("s1")
        assert result.sessions["s1"].transacted_entities == set()
        assert not result.transacted("s1", "a")

    def test_transacted_with_none_session_is_false(self):
        result = AttributionJoiner().join([], [order("o1", "s1", [("a", 1, 1)])])
        assert not result.transacted(None, "a")

    def test_cart_sessions_in_first_seen_order(self):
        result = AttributionJoiner().join(
            [cart("a", "s2"), view("a", "s1"), cart("b", "s3")],
            [],
        )
        assert [s.session_id for s in result.cart_sessions] == ["s2", "s3"]
