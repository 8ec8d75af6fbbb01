# ==============================================================================
# Multi-Tenant Rollup
# ==============================================================================
"""
Combines per-tenant summaries into cross-tenant totals.

Counts (transactions, views, customers, entities) are summed across all
tenants. Revenue is only ever summed within one currency: the result always
carries a per-currency breakdown, and a single revenue total only when every
tenant shares the same currency. A tenant's revenue share is relative to its
same-currency peers.
"""

from decimal import Decimal
from typing import Iterable

from pydantic import BaseModel, Field, computed_field

from funnelcore.core.models import TenantId
from funnelcore.core.rates import percent

DEFAULT_CURRENCY = "USD"


class TenantSummary(BaseModel):
    """Headline metrics of one tenant over a window."""

    tenant_id: TenantId
    name: str = ""
    currency: str | None = None
    revenue: Decimal = Decimal("0")
    transaction_count: int = 0
    views: int = 0
    customers: int = 0
    entities: int = 0


class TenantShare(BaseModel):
    """A tenant's contribution to the rollup, for progress-bar style charts."""

    tenant_id: TenantId
    name: str
    currency: str
    revenue: Decimal
    transaction_count: int
    views: int
    revenue_share: float
    transaction_share: float
    view_share: float
    conversion_rate: float
    average_order_value: Decimal | None = None


class RollupTotals(BaseModel):
    """Currency-independent grand totals."""

    transaction_count: int = 0
    views: int = 0
    customers: int = 0
    entities: int = 0


class RollupResult(BaseModel):
    """
    Cross-tenant rollup.

    Attributes:
        totals: Summed counts across every tenant
        currencies: Distinct currencies, in first-seen order
        revenue_by_currency: Revenue summed per currency
        total_revenue: Single revenue total, None when currencies are mixed
        tenants: Per-tenant shares, in input order
        default_currency: Currency assumed for tenants that did not name one
    """

    totals: RollupTotals = Field(default_factory=RollupTotals)
    currencies: list[str] = Field(default_factory=list)
    revenue_by_currency: dict[str, Decimal] = Field(default_factory=dict)
    total_revenue: Decimal | None = None
    tenants: list[TenantShare] = Field(default_factory=list)
    default_currency: str = DEFAULT_CURRENCY

    @computed_field
    @property
    def has_mixed_currencies(self) -> bool:
        return len(self.currencies) > 1

    @computed_field
    @property
    def primary_currency(self) -> str:
        return self.currencies[0] if self.currencies else self.default_currency

    @computed_field
    @property
    def conversion_rate(self) -> float:
        return percent(self.totals.transaction_count, self.totals.views)

    @computed_field
    @property
    def average_order_value(self) -> Decimal | None:
        """Revenue per transaction; only meaningful within one currency."""
        if self.total_revenue is None or self.totals.transaction_count == 0:
            return None
        return self.total_revenue / self.totals.transaction_count

    def ranked_tenants(self) -> list[TenantShare]:
        """Tenants by revenue, or by transaction count when currencies are mixed."""
        if self.has_mixed_currencies:
            return sorted(self.tenants, key=lambda t: (-t.transaction_count, t.tenant_id))
        return sorted(self.tenants, key=lambda t: (-t.revenue, t.tenant_id))


def rollup_tenants(
    summaries: Iterable[TenantSummary], default_currency: str = DEFAULT_CURRENCY
) -> RollupResult:
    """
    Roll per-tenant summaries up into cross-tenant totals.

    Args:
        summaries: One summary per tenant
        default_currency: Currency of summaries that do not name one

    Returns:
        RollupResult with currency-safe revenue figures
    """
    summaries = [
        s if s.currency else s.model_copy(update={"currency": default_currency})
        for s in summaries
    ]
    totals = RollupTotals()
    revenue_by_currency: dict[str, Decimal] = {}

    for summary in summaries:
        totals.transaction_count += summary.transaction_count
        totals.views += summary.views
        totals.customers += summary.customers
        totals.entities += summary.entities
        revenue_by_currency[summary.currency] = (
            revenue_by_currency.get(summary.currency, Decimal("0")) + summary.revenue
        )

    currencies = list(revenue_by_currency)
    if len(currencies) > 1:
        total_revenue = None
    else:
        total_revenue = sum(revenue_by_currency.values(), Decimal("0"))

    shares = [
        TenantShare(
            tenant_id=summary.tenant_id,
            name=summary.name or summary.tenant_id,
            currency=summary.currency,
            revenue=summary.revenue,
            transaction_count=summary.transaction_count,
            views=summary.views,
            revenue_share=percent(summary.revenue, revenue_by_currency[summary.currency]),
            transaction_share=percent(summary.transaction_count, totals.transaction_count),
            view_share=percent(summary.views, totals.views),
            conversion_rate=percent(summary.transaction_count, summary.views),
            average_order_value=(
                summary.revenue / summary.transaction_count if summary.transaction_count else None
            ),
        )
        for summary in summaries
    ]

    return RollupResult(
        totals=totals,
        currencies=currencies,
        revenue_by_currency=revenue_by_currency,
        total_revenue=total_revenue,
        tenants=shares,
        default_currency=default_currency,
    )
