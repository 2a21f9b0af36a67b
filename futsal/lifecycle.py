"""
Booking state machine.

    PENDING ──proof──▶ WAITING_PAYMENT ──approve──▶ PAID ──▶ COMPLETED
       │                    │  │
       │                    │  └──reject──▶ CANCELLED
       └──customer cancel───┴─────────────▶ CANCELLED

WAITING_PAYMENT → WAITING_PAYMENT is a re-upload of the proof.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID
from zoneinfo import ZoneInfo

from futsal.errors import AlreadyVerified, BadRequest, Forbidden
from futsal.models import BookingStatus, PaymentStatus
from futsal.slots import local_tz

VALID_TRANSITIONS: dict[BookingStatus, set[BookingStatus]] = {
    BookingStatus.PENDING: {BookingStatus.WAITING_PAYMENT, BookingStatus.CANCELLED},
    BookingStatus.WAITING_PAYMENT: {
        BookingStatus.WAITING_PAYMENT,
        BookingStatus.PAID,
        BookingStatus.CANCELLED,
    },
    BookingStatus.PAID: {BookingStatus.COMPLETED},
    BookingStatus.CANCELLED: set(),
    BookingStatus.COMPLETED: set(),
}

_DISPLAY_STATUS: dict[BookingStatus, dict[str, str]] = {
    BookingStatus.PAID: {"label": "Approved", "color": "success"},
    BookingStatus.PENDING: {"label": "Pending", "color": "warning"},
    BookingStatus.WAITING_PAYMENT: {"label": "Pending", "color": "warning"},
    BookingStatus.CANCELLED: {"label": "Cancelled", "color": "danger"},
    BookingStatus.COMPLETED: {"label": "Completed", "color": "info"},
}


def can_transition(old: BookingStatus, new: BookingStatus) -> bool:
    return new in VALID_TRANSITIONS.get(BookingStatus(old), set())


def assert_owner(booking_customer_id: UUID, customer_id: UUID) -> None:
    if booking_customer_id != customer_id:
        raise Forbidden("You do not have access to this booking")


def assert_can_cancel(status: BookingStatus) -> None:
    status = BookingStatus(status)
    if status == BookingStatus.CANCELLED:
        raise BadRequest("Booking has already been cancelled")
    if status == BookingStatus.PAID:
        raise BadRequest("A paid booking cannot be cancelled. Please contact an admin.")
    if status == BookingStatus.COMPLETED:
        raise BadRequest("A completed booking cannot be cancelled")


def assert_can_upload_proof(status: BookingStatus) -> None:
    status = BookingStatus(status)
    if status == BookingStatus.CANCELLED:
        raise BadRequest("Booking has already been cancelled")
    if status == BookingStatus.PAID:
        raise BadRequest("Booking has already been paid and verified")
    if status == BookingStatus.COMPLETED:
        raise BadRequest("Booking has already been completed")


def assert_can_verify(payment_status: PaymentStatus, booking_status: BookingStatus) -> None:
    if PaymentStatus(payment_status) != PaymentStatus.WAITING_VERIFICATION:
        raise AlreadyVerified(
            f"Payment has already been verified with status: {payment_status}"
        )
    if BookingStatus(booking_status) in {BookingStatus.CANCELLED, BookingStatus.COMPLETED}:
        raise BadRequest(f"Booking is {booking_status} and cannot be verified")


def verification_outcome(approved: bool) -> tuple[PaymentStatus, BookingStatus]:
    if approved:
        return PaymentStatus.APPROVED, BookingStatus.PAID
    return PaymentStatus.REJECTED, BookingStatus.CANCELLED


def initial_status(has_proof: bool) -> BookingStatus:
    return BookingStatus.WAITING_PAYMENT if has_proof else BookingStatus.PENDING


def display_status(status: BookingStatus | str) -> dict[str, str]:
    try:
        return dict(_DISPLAY_STATUS[BookingStatus(status)])
    except (KeyError, ValueError):
        return {"label": str(status), "color": "default"}


def booking_number(created_at: datetime, tz: ZoneInfo | None = None) -> str:
    """#YYMMDD (venue-local creation date) followed by the last four digits
    of the creation epoch millis."""
    millis = int(created_at.timestamp()) * 1000 + created_at.microsecond // 1000
    local = created_at.astimezone(tz or local_tz())
    return f"#{local:%y%m%d}{str(millis)[-4:]}"
