# ==============================================================================
# Transaction Ingestion Helpers
# ==============================================================================
"""
Derives the two-state CompletionState from raw order and booking statuses.

Stores keep fulfilment and payment status as separate free-form strings.
These helpers collapse them once, when a transaction row is read, so the
aggregation code only ever compares enum values.
"""

from typing import Iterable

from funnelcore.core.models import CompletionState

COMPLETED_ORDER_STATUSES = frozenset({"DELIVERED", "PICKED_UP", "READY"})
COMPLETED_APPOINTMENT_STATUS = "COMPLETED"
PAID = "PAID"


def _norm(value: str | None) -> str:
    return (value or "").strip().upper()


def classify_order(status: str | None, payment_status: str | None) -> CompletionState:
    """
    Classify a product order.

    An order is completed_paid once it has been delivered, picked up or is
    ready for pickup, and has been paid.
    """
    if _norm(status) in COMPLETED_ORDER_STATUSES and _norm(payment_status) == PAID:
        return CompletionState.COMPLETED_PAID
    return CompletionState.BOOKED


def classify_booking(
    appointment_statuses: Iterable[str | None], payment_status: str | None
) -> CompletionState:
    """
    Classify a service booking.

    A booking is completed_paid when at least one of its appointments has
    been completed and the owning order has been paid.
    """
    completed = any(_norm(s) == COMPLETED_APPOINTMENT_STATUS for s in appointment_statuses)
    if completed and _norm(payment_status) == PAID:
        return CompletionState.COMPLETED_PAID
    return CompletionState.BOOKED
