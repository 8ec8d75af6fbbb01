# ==============================================================================
# Tests for Multi-Tenant Rollup
# ==============================================================================
"""
Unit tests for rollup_tenants().

Tests cover:
- Per-currency revenue and the mixed-currency flag
- Revenue shares within a currency group
- Count totals and derived rates
- Tenant ranking
"""

from decimal import Decimal

from funnelcore.core.rollup import TenantSummary, rollup_tenants


def tenant(tenant_id, currency, revenue, transactions=0, views=0):
    return TenantSummary(
        tenant_id=tenant_id,
        currency=currency,
        revenue=Decimal(str(revenue)),
        transaction_count=transactions,
        views=views,
    )


class TestCurrencies:
    """Tests for currency-safe revenue."""

    def test_mixed_currencies_are_not_summed(self):
        result = rollup_tenants([tenant("a", "USD", 100), tenant("b", "EUR", 50)])
        assert result.revenue_by_currency == {"USD": Decimal("100"), "EUR": Decimal("50")}
        assert result.has_mixed_currencies
        assert result.total_revenue is None
        assert result.average_order_value is None

    def test_single_currency_has_total(self):
        result = rollup_tenants([tenant("a", "USD", 100, 4), tenant("b", "USD", 50, 1)])
        assert not result.has_mixed_currencies
        assert result.total_revenue == Decimal("150")
        assert result.primary_currency == "USD"
        assert result.average_order_value == Decimal("30")

    def test_shares_are_within_currency_group(self):
        result = rollup_tenants(
            [tenant("a", "USD", 75), tenant("b", "EUR", 50), tenant("c", "USD", 25)]
        )
        shares = {t.tenant_id: t.revenue_share for t in result.tenants}
        assert shares == {"a": 75.0, "b": 100.0, "c": 25.0}

    def test_empty_input(self):
        result = rollup_tenants([])
        assert result.currencies == []
        assert result.primary_currency == "USD"
        assert result.total_revenue == Decimal("0")

    def test_missing_currency_uses_default(self):
        result = rollup_tenants(
            [tenant("a", None, 10, 1), tenant("b", "EUR", 5, 1)], default_currency="EUR"
        )
        assert result.currencies == ["EUR"]
        assert not result.has_mixed_currencies
        assert result.total_revenue == Decimal("15")
        assert result.tenants[0].currency == "EUR"

    def test_empty_input_reports_default_currency(self):
        assert rollup_tenants([], default_currency="GBP").primary_currency == "GBP"


class TestTotals:
    """Tests for currency-independent totals."""

    def test_counts_are_summed_across_currencies(self):
        result = rollup_tenants(
            [tenant("a", "USD", 1, transactions=3, views=60), tenant("b", "EUR", 1, 1, 40)]
        )
        assert result.totals.transaction_count == 4
        assert result.totals.views == 100
        assert result.conversion_rate == 4.0

    def test_transaction_and_view_shares(self):
        result = rollup_tenants(
            [tenant("a", "USD", 1, transactions=3, views=60), tenant("b", "EUR", 1, 1, 40)]
        )
        a = result.tenants[0]
        assert a.transaction_share == 75.0
        assert a.view_share == 60.0
        assert a.conversion_rate == 5.0

    def test_name_defaults_to_tenant_id(self):
        result = rollup_tenants([tenant("shop-1", "USD", 0)])
        assert result.tenants[0].name == "shop-1"
        assert result.tenants[0].average_order_value is None


class TestRanking:
    """Tests for ranked_tenants()."""

    def test_by_revenue_in_single_currency(self):
        result = rollup_tenants(
            [tenant("a", "USD", 10, 9), tenant("b", "USD", 30, 1), tenant("c", "USD", 30, 2)]
        )
        assert [t.tenant_id for t in result.ranked_tenants()] == ["b", "c", "a"]

    def test_by_transactions_when_mixed(self):
        result = rollup_tenants([tenant("a", "USD", 1000, 1), tenant("b", "EUR", 1, 5)])
        assert [t.tenant_id for t in result.ranked_tenants()] == ["b", "a"]
