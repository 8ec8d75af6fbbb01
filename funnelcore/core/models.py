# ==============================================================================
# Funnel Domain Models
# ==============================================================================
"""
Pydantic models for storefront events, transactions and funnel metrics.

These models are used for:
- Typing the rows read from the event and transaction stores
- Carrying per-entity and per-window funnel metrics
- Serializing reports for the CLI and the report cache

This module is part of the core domain layer and has no external dependencies
beyond Pydantic.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import NewType

from pydantic import BaseModel, ConfigDict, Field, computed_field

from funnelcore.core.rates import percent

EntityId = NewType("EntityId", str)
SessionId = NewType("SessionId", str)
TenantId = NewType("TenantId", str)


class EventType(str, Enum):
    """Tracked storefront event types."""

    VIEW = "view"
    ADD_TO_CART = "add_to_cart"


class CompletionState(str, Enum):
    """Transaction completion state.

    BOOKED covers every transaction that exists; COMPLETED_PAID is the
    subset used for revenue recognition.
    """

    BOOKED = "booked"
    COMPLETED_PAID = "completed_paid"


class EntityKind(str, Enum):
    """Kind of catalog entity an event or line refers to."""

    PRODUCT = "product"
    SERVICE = "service"


class Granularity(str, Enum):
    """Time-series bucket size."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"


class MarketingTags(BaseModel):
    """UTM attributes attached to an event or a transaction."""

    model_config = ConfigDict(frozen=True)

    campaign: str | None = None
    source: str | None = None
    medium: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.campaign is None and self.source is None and self.medium is None

    def matches(self, predicate: "MarketingTags") -> bool:
        """True if every non-null field of *predicate* equals the same field here."""
        for field_name in ("campaign", "source", "medium"):
            wanted = getattr(predicate, field_name)
            if wanted is not None and getattr(self, field_name) != wanted:
                return False
        return True


class ProductEvent(BaseModel):
    """
    A single view or add-to-cart event.

    Attributes:
        entity_id: Product or service identifier
        event_type: view or add_to_cart
        session_id: Browser session identifier (None when unknown)
        occurred_at: When the event was recorded
        tags: Marketing attributes captured with the event
    """

    model_config = ConfigDict(frozen=True)

    entity_id: EntityId
    event_type: EventType
    session_id: SessionId | None = None
    occurred_at: datetime
    tags: MarketingTags | None = None


class TransactionLine(BaseModel):
    """One entity purchased or booked within a transaction."""

    model_config = ConfigDict(frozen=True)

    entity_id: EntityId
    quantity: int = Field(..., gt=0)
    unit_price: Decimal = Field(..., ge=0)

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class Transaction(BaseModel):
    """
    An order or appointment booking.

    Attributes:
        id: Transaction identifier
        session_id: Session the transaction was placed from (None when unknown)
        occurred_at: Creation time
        lines: Entities, quantities and unit prices
        completion_state: booked or completed_paid, derived at ingestion
        tags: Marketing attributes captured at checkout
    """

    model_config = ConfigDict(frozen=True)

    id: str
    session_id: SessionId | None = None
    occurred_at: datetime
    lines: list[TransactionLine] = Field(default_factory=list)
    completion_state: CompletionState = CompletionState.BOOKED
    tags: MarketingTags | None = None

    @property
    def is_completed_paid(self) -> bool:
        return self.completion_state == CompletionState.COMPLETED_PAID

    @property
    def total(self) -> Decimal:
        return sum((line.line_total for line in self.lines), Decimal("0"))

    @property
    def entity_ids(self) -> set[EntityId]:
        return {line.entity_id for line in self.lines}


class EntityMetadata(BaseModel):
    """Display attributes of a catalog entity."""

    entity_id: EntityId
    name: str
    kind: EntityKind = EntityKind.PRODUCT
    category: str = "Uncategorized"
    image: str | None = None


class SessionAttribution(BaseModel):
    """Entities a single session viewed, carted and transacted."""

    session_id: SessionId
    viewed_entities: set[EntityId] = Field(default_factory=set)
    carted_entities: set[EntityId] = Field(default_factory=set)
    transacted_entities: set[EntityId] = Field(default_factory=set)

    @property
    def has_cart(self) -> bool:
        return bool(self.carted_entities)


class EntityFunnelMetric(BaseModel):
    """Funnel counters for one entity over one report window."""

    entity_id: EntityId
    views: int = 0
    add_to_carts: int = 0
    views_attributed_to_transaction: int = 0
    carts_attributed_to_transaction: int = 0
    transactions_booked: int = 0
    transactions_completed: int = 0
    revenue: Decimal = Decimal("0")

    @computed_field
    @property
    def view_to_cart_rate(self) -> float:
        return percent(self.add_to_carts, self.views)

    @computed_field
    @property
    def cart_to_transaction_rate(self) -> float:
        return percent(self.carts_attributed_to_transaction, self.add_to_carts)

    @computed_field
    @property
    def conversion_rate(self) -> float:
        return percent(self.views_attributed_to_transaction, self.views)


class FunnelSummary(BaseModel):
    """Window-level totals, overall rates and abandoned-cart statistics."""

    total_views: int = 0
    total_add_to_carts: int = 0
    total_views_attributed: int = 0
    total_carts_attributed: int = 0
    total_transactions_booked: int = 0
    total_transactions_completed: int = 0
    total_units_booked: int = 0
    total_units_completed: int = 0
    total_revenue: Decimal = Decimal("0")
    unique_entities: int = 0

    abandoned_carts: int = 0
    converted_carts: int = 0

    @computed_field
    @property
    def total_cart_sessions(self) -> int:
        return self.abandoned_carts + self.converted_carts

    @computed_field
    @property
    def abandoned_cart_rate(self) -> float:
        return percent(self.abandoned_carts, self.total_cart_sessions)

    @computed_field
    @property
    def overall_view_to_cart_rate(self) -> float:
        return percent(self.total_add_to_carts, self.total_views)

    @computed_field
    @property
    def overall_cart_to_transaction_rate(self) -> float:
        return percent(self.total_carts_attributed, self.total_add_to_carts)

    @computed_field
    @property
    def overall_conversion_rate(self) -> float:
        return percent(self.total_views_attributed, self.total_views)


class TimeSeriesPoint(BaseModel):
    """A (date key, value) pair exchanged with the rebucketer."""

    model_config = ConfigDict(frozen=True)

    date_key: str
    value: int = 0


class ReportWindow(BaseModel):
    """Inclusive time window of a report."""

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime

    @property
    def start_date(self) -> date:
        return self.start.date()


class ReportFilter(BaseModel):
    """Optional restriction of a report to one entity kind and/or marketing tags."""

    model_config = ConfigDict(frozen=True)

    entity_kind: EntityKind | None = None
    tags: MarketingTags | None = None

    def cache_key(self) -> str:
        kind = self.entity_kind.value if self.entity_kind else "*"
        if self.tags is None:
            return f"{kind}:*:*:*"
        return ":".join(
            [kind, self.tags.campaign or "*", self.tags.source or "*", self.tags.medium or "*"]
        )


class RankedEntity(BaseModel):
    """An entity's funnel metrics joined with its catalog display data."""

    metric: EntityFunnelMetric
    name: str
    category: str
    image: str | None = None


class RankedLists(BaseModel):
    """The four ranked views of a report."""

    best_sellers: list[RankedEntity] = Field(default_factory=list)
    most_viewed: list[RankedEntity] = Field(default_factory=list)
    opportunity: list[RankedEntity] = Field(default_factory=list)
    underperforming: list[RankedEntity] = Field(default_factory=list)


class FunnelReport(BaseModel):
    """Complete funnel report for one tenant and one window."""

    tenant_id: TenantId
    window: ReportWindow
    granularity: Granularity
    summary: FunnelSummary
    entities: dict[EntityId, EntityFunnelMetric] = Field(default_factory=dict)
    rankings: RankedLists = Field(default_factory=RankedLists)
    views_series: list[TimeSeriesPoint] = Field(default_factory=list)
    missing_entities: list[EntityId] = Field(default_factory=list)


class CampaignFunnelMetric(BaseModel):
    """Funnel counters for one (campaign, source, medium) combination."""

    campaign: str | None = None
    source: str | None = None
    medium: str | None = None
    views: int = 0
    add_to_carts: int = 0
    transactions: int = 0
    revenue: Decimal = Decimal("0")

    @computed_field
    @property
    def key(self) -> str:
        if self.campaign:
            return f"{self.campaign}_{self.source or 'unknown'}_{self.medium or 'unknown'}"
        return f"{self.source or 'unknown'}_{self.medium or 'unknown'}"

    @computed_field
    @property
    def view_to_cart_rate(self) -> float:
        return percent(self.add_to_carts, self.views)

    @computed_field
    @property
    def cart_to_transaction_rate(self) -> float:
        return percent(self.transactions, self.add_to_carts)

    @computed_field
    @property
    def conversion_rate(self) -> float:
        return percent(self.transactions, self.views)


class CampaignReport(BaseModel):
    """Campaign breakdown for one tenant and one window."""

    tenant_id: TenantId
    window: ReportWindow
    campaigns: list[CampaignFunnelMetric] = Field(default_factory=list)

    @computed_field
    @property
    def total_views(self) -> int:
        return sum(c.views for c in self.campaigns)

    @computed_field
    @property
    def total_add_to_carts(self) -> int:
        return sum(c.add_to_carts for c in self.campaigns)

    @computed_field
    @property
    def total_transactions(self) -> int:
        return sum(c.transactions for c in self.campaigns)

    @computed_field
    @property
    def total_revenue(self) -> Decimal:
        return sum((c.revenue for c in self.campaigns), Decimal("0"))
