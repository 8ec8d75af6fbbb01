# ==============================================================================
# Attribution Joiner - Pure Domain Logic
# ==============================================================================
"""
Links storefront events to transactions through the session identifier.

For every session seen in the window the joiner records which entities were
viewed, which were carted and which ended up in a transaction placed from
that session. Transactions of any completion state count here: attribution
measures intent, revenue recognition happens in the aggregator.

Events without a session id never enter an attribution set. They are still
counted in raw totals by the aggregator.
"""

from dataclasses import dataclass, field
from typing import Iterable

from funnelcore.core.models import (
    EntityId,
    EventType,
    ProductEvent,
    SessionAttribution,
    SessionId,
    Transaction,
)


@dataclass
class AttributionResult:
    """Output of AttributionJoiner.join().

    Attributes:
        sessions: Per-session attribution for every session with events or transactions
        sessions_with_transactions: Entities transacted per session, only for
            sessions that placed at least one transaction
    """

    sessions: dict[SessionId, SessionAttribution] = field(default_factory=dict)
    sessions_with_transactions: dict[SessionId, set[EntityId]] = field(default_factory=dict)

    def transacted(self, session_id: SessionId | None, entity_id: EntityId) -> bool:
        """True if *session_id* placed a transaction containing *entity_id*."""
        if session_id is None:
            return False
        return entity_id in self.sessions_with_transactions.get(session_id, ())

    def has_transaction(self, session_id: SessionId) -> bool:
        return session_id in self.sessions_with_transactions

    @property
    def cart_sessions(self) -> list[SessionAttribution]:
        """Sessions with at least one add-to-cart event, in first-seen order."""
        return [s for s in self.sessions.values() if s.has_cart]


class AttributionJoiner:
    """
    Pure session join.

    Works on in-memory lists only. No store access, no shared state, so
    a single instance can be reused across tenants and threads.
    """

    def transacted_entities_by_session(
        self, transactions: Iterable[Transaction]
    ) -> dict[SessionId, set[EntityId]]:
        """
        Union line entity ids per session.

        Args:
            transactions: Booked transactions (any completion state)

        Returns:
            Mapping of session id to the entities it transacted
        """
        by_session: dict[SessionId, set[EntityId]] = {}
        for transaction in transactions:
            if transaction.session_id is None:
                continue
            entities = by_session.setdefault(transaction.session_id, set())
            entities.update(line.entity_id for line in transaction.lines)
        return by_session

    def join(
        self, events: Iterable[ProductEvent], transactions: Iterable[Transaction]
    ) -> AttributionResult:
        """
        Build per-session attribution.

        Args:
            events: View and add-to-cart events for one tenant and window
            transactions: Transactions for the same tenant and window

        Returns:
            AttributionResult covering every session present in either input
        """
        with_transactions = self.transacted_entities_by_session(transactions)
        sessions: dict[SessionId, SessionAttribution] = {}

        for event in events:
            if event.session_id is None:
                continue
            attribution = sessions.get(event.session_id)
            if attribution is None:
                attribution = SessionAttribution(session_id=event.session_id)
                sessions[event.session_id] = attribution
            if event.event_type == EventType.VIEW:
                attribution.viewed_entities.add(event.entity_id)
            elif event.event_type == EventType.ADD_TO_CART:
                attribution.carted_entities.add(event.entity_id)

        for session_id in with_transactions:
            if session_id not in sessions:
                sessions[session_id] = SessionAttribution(session_id=session_id)

        for session_id, attribution in sessions.items():
            attribution.transacted_entities = set(with_transactions.get(session_id, ()))

        return AttributionResult(sessions=sessions, sessions_with_transactions=with_transactions)
