# ==============================================================================
# Tests for Campaign Breakdown
# ==============================================================================
"""
Unit tests for campaign_breakdown().

Tests cover:
- Grouping by campaign / source / medium
- Crediting each completed transaction once per group
- Ignoring untagged events and unpaid transactions
- Ordering by revenue
"""

from decimal import Decimal

from factories import cart, order, view
from funnelcore.core.campaigns import campaign_breakdown
from funnelcore.core.models import MarketingTags

SPRING = MarketingTags(campaign="spring", source="newsletter", medium="email")
ADS = MarketingTags(source="google", medium="cpc")


class TestCampaignBreakdown:
    """Tests for campaign grouping and credit."""

    def test_groups_views_and_carts(self):
        result = campaign_breakdown(
            [view("a", "s1", tags=SPRING), cart("a", "s1", tags=SPRING), view("a", "s2", tags=ADS)],
            [],
        )
        by_key = {m.key: m for m in result}
        assert set(by_key) == {"spring_newsletter_email", "google_cpc"}
        assert by_key["spring_newsletter_email"].views == 1
        assert by_key["spring_newsletter_email"].add_to_carts == 1
        assert by_key["spring_newsletter_email"].view_to_cart_rate == 100.0

    def test_transaction_credited_once_per_group(self):
        result = campaign_breakdown(
            [
                view("a", "s1", tags=SPRING),
                view("b", "s1", tags=SPRING),
                cart("a", "s1", tags=SPRING),
            ],
            [order("o1", "s1", [("a", 2, "5.00")])],
        )
        assert len(result) == 1
        assert result[0].transactions == 1
        assert result[0].revenue == Decimal("10.00")
        assert result[0].conversion_rate == 50.0

    def test_unpaid_transactions_are_not_credited(self):
        result = campaign_breakdown(
            [view("a", "s1", tags=SPRING)],
            [order("o1", "s1", [("a", 1, "5.00")], completed=False)],
        )
        assert result[0].transactions == 0
        assert result[0].revenue == Decimal("0")

    def test_untagged_events_are_ignored(self):
        medium_only = MarketingTags(medium="email")
        assert campaign_breakdown([view("a", "s1"), view("a", "s2", tags=medium_only)], []) == []

    def test_sorted_by_revenue(self):
        result = campaign_breakdown(
            [view("a", "s1", tags=ADS), view("a", "s2", tags=SPRING)],
            [order("o1", "s1", [("a", 1, "1.00")]), order("o2", "s2", [("a", 1, "9.00")])],
        )
        assert [m.key for m in result] == ["spring_newsletter_email", "google_cpc"]
