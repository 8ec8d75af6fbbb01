# ==============================================================================
# Test Data Builders
# ==============================================================================
"""
Small builders for events and transactions used across test modules.

All timestamps are UTC in 2024.
"""

from datetime import datetime, timezone
from decimal import Decimal

from funnelcore.core.models import (
    CompletionState,
    EventType,
    ProductEvent,
    Transaction,
    TransactionLine,
)


def at(day: int, hour: int = 12, month: int = 1) -> datetime:
    """A UTC timestamp in 2024."""
    return datetime(2024, month, day, hour, tzinfo=timezone.utc)


def view(entity_id, session_id=None, day=1, hour=12, tags=None) -> ProductEvent:
    return ProductEvent(
        entity_id=entity_id,
        event_type=EventType.VIEW,
        session_id=session_id,
        occurred_at=at(day, hour),
        tags=tags,
    )


def cart(entity_id, session_id=None, day=1, hour=12, tags=None) -> ProductEvent:
    return ProductEvent(
        entity_id=entity_id,
        event_type=EventType.ADD_TO_CART,
        session_id=session_id,
        occurred_at=at(day, hour),
        tags=tags,
    )


def order(
    txn_id,
    session_id,
    lines,
    completed=True,
    day=1,
    hour=13,
    tags=None,
) -> Transaction:
    """Build a transaction from (entity_id, quantity, unit_price) tuples."""
    return Transaction(
        id=txn_id,
        session_id=session_id,
        occurred_at=at(day, hour),
        lines=[
            TransactionLine(entity_id=entity_id, quantity=qty, unit_price=Decimal(str(price)))
            for entity_id, qty, price in lines
        ],
        completion_state=(
            CompletionState.COMPLETED_PAID if completed else CompletionState.BOOKED
        ),
        tags=tags,
    )
