# ==============================================================================
# PostgreSQL Repository Implementations
# ==============================================================================
"""
PostgreSQL implementations of the read repositories.

Provides:
- PostgreSQLEventRepository: tenant-scoped view / add-to-cart events
- PostgreSQLTransactionRepository: orders and bookings with lines, classified
  into booked / completed_paid while rows are read
- PostgreSQLCatalogRepository: entity display metadata

Reads retry transient connection errors (light retry). Anything still
failing after that propagates to the caller.
"""

import logging
from typing import Any, Iterable

import psycopg2

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
from funnelcore.utils.config import PostgresSettings, get_settings
from funnelcore.utils.retry import POSTGRES_RETRY_EXCEPTIONS, retry_light

logger = logging.getLogger(__name__)


def _tags(campaign: str | None, source: str | None, medium: str | None) -> MarketingTags | None:
    tags = MarketingTags(campaign=campaign, source=source, medium=medium)
    return None if tags.is_empty else tags


def _tag_conditions(
    alias: str, report_filter: ReportFilter | None, params: dict[str, Any]
) -> list[str]:
    conditions: list[str] = []
    if report_filter is None or report_filter.tags is None:
        return conditions
    for field_name in ("campaign", "source", "medium"):
        value = getattr(report_filter.tags, field_name)
        if value is not None:
            params[field_name] = value
            conditions.append(f"{alias}.utm_{field_name} = %({field_name})s")
    return conditions


class _PostgreSQLReader:
    """Connection handling shared by the read repositories."""

    def __init__(self, settings: PostgresSettings | None = None):
        """
        Initialize the repository.

        Args:
            settings: PostgreSQL settings. If None, uses get_settings().postgres.
        """
        self._settings = settings or get_settings().postgres
        self._conn: psycopg2.extensions.connection | None = None
        self._schema = self._settings.schema_name

    @property
    def schema(self) -> str:
        """Get the database schema name."""
        return self._schema

    def connect(self) -> None:
        """Establish connection to PostgreSQL."""
        self._conn = psycopg2.connect(self._settings.connection_string)
        self._conn.set_session(readonly=True, autocommit=True)
        logger.info("%s connected (schema=%s)", type(self).__name__, self._schema)

    def _query(self, sql: str, params: dict[str, Any]) -> list[tuple]:
        if self._conn is None or self._conn.closed:
            self.connect()
        try:
            with self._conn.cursor() as cur:
                cur.execute(sql, params)
                return cur.fetchall()
        except POSTGRES_RETRY_EXCEPTIONS:
            # Drop the broken connection so the next attempt reconnects
            self.close()
            raise

    def close(self) -> None:
        """Close connection and release resources."""
        if self._conn:
            try:
                self._conn.close()
                logger.info("%s connection closed", type(self).__name__)
            except psycopg2.Error as e:
                logger.warning("Error closing connection: %s", e)
            finally:
                self._conn = None


class PostgreSQLEventRepository(_PostgreSQLReader, EventRepository):
    """PostgreSQL implementation of EventRepository."""

    @retry_light(POSTGRES_RETRY_EXCEPTIONS, logger)
    def fetch_events(
        self,
        tenant_id: TenantId,
        window: ReportWindow,
        report_filter: ReportFilter | None = None,
    ) -> list[ProductEvent]:
        """
        Read events for a tenant within an inclusive window.

        An entity-kind filter joins the catalog; tag filters match the
        event's own UTM columns.
        """
        params: dict[str, Any] = {
            "tenant_id": tenant_id,
            "start": window.start,
            "end": window.end,
        }
        joins = ""
        conditions = [
            "e.tenant_id = %(tenant_id)s",
            "e.occurred_at BETWEEN %(start)s AND %(end)s",
        ]
        if report_filter is not None and report_filter.entity_kind is not None:
            joins = f"JOIN {self._schema}.entities en ON en.id = e.entity_id"
            conditions.append("en.kind = %(kind)s")
            params["kind"] = report_filter.entity_kind.value
        conditions.extend(_tag_conditions("e", report_filter, params))

        rows = self._query(
            f"""
            SELECT e.entity_id, e.event_type, e.session_id, e.occurred_at,
                   e.utm_campaign, e.utm_source, e.utm_medium
            FROM {self._schema}.product_events e
            {joins}
            WHERE {" AND ".join(conditions)}
            ORDER BY e.occurred_at, e.id
            """,
            params,
        )
        events = [
            ProductEvent(
                entity_id=entity_id,
                event_type=event_type,
                session_id=session_id,
                occurred_at=ensure_aware(occurred_at),
                tags=_tags(campaign, source, medium),
            )
            for entity_id, event_type, session_id, occurred_at, campaign, source, medium in rows
        ]
        logger.debug("Read %d events for tenant %s", len(events), tenant_id)
        return events


class PostgreSQLTransactionRepository(_PostgreSQLReader, TransactionRepository):
    """
    PostgreSQL implementation of TransactionRepository.

    Orders are completed_paid once delivered / picked up / ready and paid.
    Bookings are completed_paid once any appointment is completed and paid.
    """

    @retry_light(POSTGRES_RETRY_EXCEPTIONS, logger)
    def fetch_transactions(
        self,
        tenant_id: TenantId,
        window: ReportWindow,
        report_filter: ReportFilter | None = None,
    ) -> list[Transaction]:
        """Read transactions and their lines for a tenant within an inclusive window."""
        params: dict[str, Any] = {
            "tenant_id": tenant_id,
            "start": window.start,
            "end": window.end,
        }
        line_join = f"LEFT JOIN {self._schema}.transaction_lines l ON l.transaction_id = t.id"
        conditions = [
            "t.tenant_id = %(tenant_id)s",
            "t.occurred_at BETWEEN %(start)s AND %(end)s",
        ]
        if report_filter is not None and report_filter.entity_kind is not None:
            line_join = (
                f"JOIN {self._schema}.transaction_lines l ON l.transaction_id = t.id "
                f"JOIN {self._schema}.entities en ON en.id = l.entity_id AND en.kind = %(kind)s"
            )
            params["kind"] = report_filter.entity_kind.value
        conditions.extend(_tag_conditions("t", report_filter, params))

        rows = self._query(
            f"""
            SELECT t.id, t.session_id, t.occurred_at, t.kind, t.status, t.payment_status,
                   t.utm_campaign, t.utm_source, t.utm_medium,
                   l.entity_id, l.quantity, l.unit_price,
                   COALESCE(
                       (SELECT array_agg(a.status) FROM {self._schema}.appointments a
                        WHERE a.transaction_id = t.id),
                       ARRAY[]::TEXT[]
                   ) AS appointment_statuses
            FROM {self._schema}.transactions t
            {line_join}
            WHERE {" AND ".join(conditions)}
            ORDER BY t.occurred_at, t.id, l.line_no
            """,
            params,
        )
        transactions = self._build_transactions(rows)
        logger.debug("Read %d transactions for tenant %s", len(transactions), tenant_id)
        return transactions

    @staticmethod
    def _build_transactions(rows: Iterable[tuple]) -> list[Transaction]:
        headers: dict[str, dict[str, Any]] = {}
        lines: dict[str, list[TransactionLine]] = {}
        for (
            txn_id,
            session_id,
            occurred_at,
            kind,
            status,
            payment_status,
            campaign,
            source,
            medium,
            entity_id,
            quantity,
            unit_price,
            appointment_statuses,
        ) in rows:
            if txn_id not in headers:
                if kind == "booking":
                    state = classify_booking(appointment_statuses, payment_status)
                else:
                    state = classify_order(status, payment_status)
                headers[txn_id] = {
                    "id": txn_id,
                    "session_id": session_id,
                    "occurred_at": ensure_aware(occurred_at),
                    "completion_state": state,
                    "tags": _tags(campaign, source, medium),
                }
                lines[txn_id] = []
            if entity_id is not None:
                lines[txn_id].append(
                    TransactionLine(entity_id=entity_id, quantity=quantity, unit_price=unit_price)
                )
        return [Transaction(lines=lines[txn_id], **header) for txn_id, header in headers.items()]


class PostgreSQLCatalogRepository(_PostgreSQLReader, CatalogRepository):
    """PostgreSQL implementation of CatalogRepository."""

    @retry_light(POSTGRES_RETRY_EXCEPTIONS, logger)
    def fetch_catalog(self, entity_ids: Iterable[EntityId]) -> dict[EntityId, EntityMetadata]:
        """Look up display metadata for the given entity ids."""
        ids = sorted(set(entity_ids))
        if not ids:
            return {}
        rows = self._query(
            f"""
            SELECT id, name, kind, category, image
            FROM {self._schema}.entities
            WHERE id = ANY(%(ids)s)
            """,
            {"ids": ids},
        )
        return {
            entity_id: EntityMetadata(
                entity_id=entity_id,
                name=name,
                kind=EntityKind(kind),
                category=category or "Uncategorized",
                image=image,
            )
            for entity_id, name, kind, category, image in rows
        }
