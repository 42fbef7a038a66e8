"""Booking status state machine and queue-number helpers."""

from datetime import date

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from queue_desk.core.domain_exceptions import DomainException
from queue_desk.core.error_codes import ErrorCode
from queue_desk.db.models import Booking

ACTIVE_STATUSES = ("pending", "confirmed", "in_progress")
TERMINAL_STATUSES = ("completed", "cancelled")
ALLOWED_TRANSITIONS = {
    "pending": {"confirmed", "in_progress", "cancelled"},
    "confirmed": {"in_progress", "cancelled"},
    "in_progress": {"completed", "cancelled"},
    "completed": set(),
    "cancelled": set(),
}


def can_transition(current_status: str, new_status: str) -> bool:
    return new_status in ALLOWED_TRANSITIONS.get(current_status, set())


def ensure_transition(booking: Booking, new_status: str) -> None:
    if not can_transition(booking.status, new_status):
        raise DomainException(
            code=ErrorCode.INVALID_STATUS,
            message=f"Cannot move a {booking.status} booking to {new_status}.",
        )


def max_queue_number(db: Session, branch_id: int, booking_date: date) -> int:
    """Highest queue number handed out in the partition, 0 when none."""
    current_max = db.scalar(
        select(func.max(Booking.queue_number))
        .where(Booking.branch_id == branch_id)
        .where(Booking.booking_date == booking_date)
    )
    return int(current_max or 0)


def next_queue_number(db: Session, branch_id: int, booking_date: date) -> int:
    return max_queue_number(db, branch_id, booking_date) + 1


def find_in_progress(db: Session, branch_id: int, booking_date: date) -> Booking | None:
    return db.scalar(
        select(Booking)
        .where(Booking.branch_id == branch_id)
        .where(Booking.booking_date == booking_date)
        .where(Booking.status == "in_progress")
        .order_by(Booking.id.asc())
    )
