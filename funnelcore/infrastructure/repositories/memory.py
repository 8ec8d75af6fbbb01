# ==============================================================================
# In-Memory Repository Implementations
# ==============================================================================
"""
In-memory implementations of the read repositories.

Used by the CLI when reports are computed from exported JSON files and by
the test suite. Filtering mirrors the PostgreSQL repositories: the window
is inclusive at both ends, an entity-kind filter resolves kinds through the
catalog, and tag filters match each record's own tags.
"""

import logging
from typing import Any, Iterable

from funnelcore.base.repositories import (
    CatalogRepository,
    EventRepository,
    TransactionRepository,
)
from funnelcore.core.ingest import classify_booking, classify_order
from funnelcore.core.models import (
    EntityId,
    EntityKind,
    EntityMetadata,
    MarketingTags,
    ProductEvent,
    ReportFilter,
    ReportWindow,
    TenantId,
    Transaction,
    TransactionLine,
)
from funnelcore.core.periods import ensure_aware

logger = logging.getLogger(__name__)


def _in_window(occurred_at, window: ReportWindow) -> bool:
    return window.start <= occurred_at <= window.end


def _tags_match(tags: MarketingTags | None, report_filter: ReportFilter | None) -> bool:
    if report_filter is None or report_filter.tags is None:
        return True
    return (tags or MarketingTags()).matches(report_filter.tags)


class InMemoryCatalogRepository(CatalogRepository):
    """Catalog backed by a dict of entity id to metadata."""

    def __init__(self, entities: Iterable[EntityMetadata] = ()):
        self._entities: dict[EntityId, EntityMetadata] = {e.entity_id: e for e in entities}

    def add(self, entity: EntityMetadata) -> None:
        self._entities[entity.entity_id] = entity

    def remove(self, entity_id: EntityId) -> None:
        self._entities.pop(entity_id, None)

    def kind_of(self, entity_id: EntityId) -> EntityKind | None:
        entity = self._entities.get(entity_id)
        return entity.kind if entity else None

    def fetch_catalog(self, entity_ids: Iterable[EntityId]) -> dict[EntityId, EntityMetadata]:
        return {
            entity_id: self._entities[entity_id]
            for entity_id in set(entity_ids)
            if entity_id in self._entities
        }


class InMemoryEventRepository(EventRepository):
    """Events grouped by tenant."""

    def __init__(
        self,
        events: dict[TenantId, list[ProductEvent]] | None = None,
        catalog: InMemoryCatalogRepository | None = None,
    ):
        self._events: dict[TenantId, list[ProductEvent]] = {
            tenant_id: list(items) for tenant_id, items in (events or {}).items()
        }
        self._catalog = catalog or InMemoryCatalogRepository()

    def add(self, tenant_id: TenantId, event: ProductEvent) -> None:
        self._events.setdefault(tenant_id, []).append(event)

    def fetch_events(
        self,
        tenant_id: TenantId,
        window: ReportWindow,
        report_filter: ReportFilter | None = None,
    ) -> list[ProductEvent]:
        kind = report_filter.entity_kind if report_filter else None
        events = [
            event
            for event in self._events.get(tenant_id, [])
            if _in_window(event.occurred_at, window)
            and (kind is None or self._catalog.kind_of(event.entity_id) == kind)
            and _tags_match(event.tags, report_filter)
        ]
        logger.debug("Read %d events for tenant %s", len(events), tenant_id)
        return events


class InMemoryTransactionRepository(TransactionRepository):
    """Transactions grouped by tenant."""

    def __init__(
        self,
        transactions: dict[TenantId, list[Transaction]] | None = None,
        catalog: InMemoryCatalogRepository | None = None,
    ):
        self._transactions: dict[TenantId, list[Transaction]] = {
            tenant_id: list(items) for tenant_id, items in (transactions or {}).items()
        }
        self._catalog = catalog or InMemoryCatalogRepository()

    def add(self, tenant_id: TenantId, transaction: Transaction) -> None:
        self._transactions.setdefault(tenant_id, []).append(transaction)

    def fetch_transactions(
        self,
        tenant_id: TenantId,
        window: ReportWindow,
        report_filter: ReportFilter | None = None,
    ) -> list[Transaction]:
        kind = report_filter.entity_kind if report_filter else None
        result: list[Transaction] = []
        for txn in self._transactions.get(tenant_id, []):
            if not _in_window(txn.occurred_at, window) or not _tags_match(txn.tags, report_filter):
                continue
            if kind is not None:
                lines = [
                    line for line in txn.lines if self._catalog.kind_of(line.entity_id) == kind
                ]
                if not lines:
                    continue
                txn = txn.model_copy(update={"lines": lines})
            result.append(txn)
        logger.debug("Read %d transactions for tenant %s", len(result), tenant_id)
        return result


# ==============================================================================
# Dataset Loading
# ==============================================================================


def _event_from_record(record: dict[str, Any]) -> ProductEvent:
    event = ProductEvent.model_validate({k: v for k, v in record.items() if k != "tenant_id"})
    return event.model_copy(update={"occurred_at": ensure_aware(event.occurred_at)})


def _transaction_from_record(record: dict[str, Any]) -> Transaction:
    """
    Build a Transaction from an exported record.

    Records either carry a completion_state directly or the raw order /
    booking statuses, which are classified here the same way the PostgreSQL
    repository does.
    """
    state = record.get("completion_state")
    if state is None:
        if record.get("kind") == "booking":
            state = classify_booking(
                record.get("appointment_statuses", []), record.get("payment_status")
            )
        else:
            state = classify_order(record.get("status"), record.get("payment_status"))
    txn = Transaction(
        id=record["id"],
        session_id=record.get("session_id"),
        occurred_at=record["occurred_at"],
        lines=[TransactionLine.model_validate(line) for line in record.get("lines", [])],
        completion_state=state,
        tags=record.get("tags"),
    )
    return txn.model_copy(update={"occurred_at": ensure_aware(txn.occurred_at)})


def load_dataset(
    data: dict[str, Any],
) -> tuple[InMemoryEventRepository, InMemoryTransactionRepository, InMemoryCatalogRepository]:
    """
    Build in-memory repositories from an exported dataset.

    Expected shape::

        {
            "catalog": [{"entity_id": "p1", "name": "Mug", "kind": "product"}],
            "events": [{"tenant_id": "t1", "entity_id": "p1", "event_type": "view",
                        "session_id": "s1", "occurred_at": "2024-01-01T10:00:00Z"}],
            "transactions": [{"tenant_id": "t1", "id": "o1", "session_id": "s1",
                              "occurred_at": "2024-01-01T10:05:00Z",
                              "status": "DELIVERED", "payment_status": "PAID",
                              "lines": [{"entity_id": "p1", "quantity": 1,
                                         "unit_price": "12.50"}]}]
        }

    Naive timestamps are read as UTC.
    """
    catalog = InMemoryCatalogRepository(
        EntityMetadata.model_validate(entry) for entry in data.get("catalog", [])
    )
    events = InMemoryEventRepository(catalog=catalog)
    for record in data.get("events", []):
        events.add(record["tenant_id"], _event_from_record(record))
    transactions = InMemoryTransactionRepository(catalog=catalog)
    for record in data.get("transactions", []):
        transactions.add(record["tenant_id"], _transaction_from_record(record))
    logger.info(
        "Loaded dataset: %d catalog entries, %d events, %d transactions",
        len(data.get("catalog", [])),
        len(data.get("events", [])),
        len(data.get("transactions", [])),
    )
    return events, transactions, catalog
