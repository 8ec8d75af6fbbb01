# ==============================================================================
# Tests for Completion-State Classification
# ==============================================================================
"""Unit tests for classify_order() and classify_booking()."""

import pytest

from funnelcore.core.ingest import classify_booking, classify_order
from funnelcore.core.models import CompletionState

BOOKED = CompletionState.BOOKED
DONE = CompletionState.COMPLETED_PAID


class TestClassifyOrder:
    """Tests for product orders."""

    @pytest.mark.parametrize(
        "status, payment, expected",
        [
            ("DELIVERED", "PAID", DONE),
            ("PICKED_UP", "PAID", DONE),
            ("READY", "PAID", DONE),
            ("delivered", " paid ", DONE),
            ("DELIVERED", "PENDING", BOOKED),
            ("PENDING", "PAID", BOOKED),
            ("CANCELLED", "REFUNDED", BOOKED),
            (None, None, BOOKED),
        ],
    )
    def test_classification(self, status, payment, expected):
        assert classify_order(status, payment) == expected


class TestClassifyBooking:
    """Tests for service bookings."""

    def test_any_completed_appointment_and_paid(self):
        assert classify_booking(["SCHEDULED", "COMPLETED"], "PAID") == DONE

    def test_completed_but_unpaid(self):
        assert classify_booking(["COMPLETED"], "PENDING") == BOOKED

    def test_paid_but_not_completed(self):
        assert classify_booking(["SCHEDULED", None], "PAID") == BOOKED

    def test_no_appointments(self):
        assert classify_booking([], "PAID") == BOOKED
