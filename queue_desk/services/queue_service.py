"""Admin queue control for one branch on one day.

A partition is every booking sharing a branch and a date. The queue view of a
partition holds its pending, confirmed and in-progress bookings in time-slot
order. Each control below commits all of its updates in one transaction, so a
failure leaves the partition exactly as it was and the action can be retried.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from queue_desk.core.domain_exceptions import DomainException
from queue_desk.core.error_codes import ErrorCode
from queue_desk.db.models import Booking
from queue_desk.services.booking_service import booking_payload
from queue_desk.services.change_feed import ChangeFeed, publish_change
from queue_desk.services.lifecycle import (
    ACTIVE_STATUSES,
    ensure_transition,
    next_queue_number,
)

logger = logging.getLogger(__name__)


@dataclass
class QueueSnapshot:
    branch_id: int
    booking_date: date
    now_serving: Booking | None
    waiting: list[Booking] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.waiting) + (1 if self.now_serving is not None else 0)


@dataclass
class QueueAdvance:
    """Outcome of a call-next or skip: who left the chair and who took it."""

    finished: Booking | None = None
    called: Booking | None = None


@dataclass
class CustomerQueueStatus:
    branch_id: int
    booking_date: date
    now_serving: Booking | None
    queue: list[Booking]
    my_booking: Booking | None
    ahead_of_me: int | None


def list_partition_queue(db: Session, branch_id: int, booking_date: date) -> list[Booking]:
    """Active bookings of the partition, earliest slot first, ties by stored order."""
    return list(
        db.scalars(
            select(Booking)
            .options(joinedload(Booking.user))
            .where(Booking.branch_id == branch_id)
            .where(Booking.booking_date == booking_date)
            .where(Booking.status.in_(ACTIVE_STATUSES))
            .order_by(Booking.booking_time.asc(), Booking.id.asc())
        )
        .unique()
        .all()
    )


def split_queue(bookings: list[Booking]) -> tuple[Booking | None, list[Booking]]:
    """Separate the in-progress booking from the ones still waiting."""
    now_serving = next((booking for booking in bookings if booking.status == "in_progress"), None)
    waiting = [booking for booking in bookings if booking.status != "in_progress"]
    return now_serving, waiting


def get_queue_snapshot(db: Session, branch_id: int, booking_date: date) -> QueueSnapshot:
    now_serving, waiting = split_queue(list_partition_queue(db, branch_id, booking_date))
    return QueueSnapshot(
        branch_id=branch_id,
        booking_date=booking_date,
        now_serving=now_serving,
        waiting=waiting,
    )


@contextmanager
def _queue_transaction(db: Session) -> Iterator[None]:
    """Commit the wrapped updates together or roll all of them back."""
    try:
        yield
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DomainException(
            code=ErrorCode.QUEUE_CONFLICT,
            message="Queue number was taken by another update. Please retry."
        )
    except (DomainException, SQLAlchemyError):
        db.rollback()
        raise


def _publish(feed: ChangeFeed | None, bookings: list[Booking | None]) -> None:
    for booking in bookings:
        if booking is not None:
            publish_change(feed, "bookings", "update", booking.id, booking_payload(booking))


def assign_queue(
    db: Session,
    booking_id: int,
    *,
    feed: ChangeFeed | None = None,
) -> Booking:
    """Confirm a pending booking and give it the partition's next queue number."""
    booking = db.get(Booking, booking_id)
    if booking is None:
        raise DomainException(
            code=ErrorCode.BOOKING_NOT_FOUND,
            message="Booking not found."
        )

    if booking.queue_number is not None:
        raise DomainException(
            code=ErrorCode.QUEUE_ALREADY_ASSIGNED,
            message=f"Booking already holds queue number {booking.queue_number}."
        )
    ensure_transition(booking, "confirmed")

    with _queue_transaction(db):
        booking.queue_number = next_queue_number(db, booking.branch_id, booking.booking_date)
        booking.status = "confirmed"
    db.refresh(booking)

    logger.info(
        "Queue number assigned",
        extra={"booking_id": booking.id, "queue_number": booking.queue_number},
    )
    _publish(feed, [booking])
    return booking


def _finish_current(db: Session, current: Booking, final_status: str) -> None:
    ensure_transition(current, final_status)
    current.status = final_status
    db.flush()


def _call_next_in_session(db: Session, branch_id: int, booking_date: date) -> QueueAdvance:
    advance = QueueAdvance()
    now_serving, waiting = split_queue(list_partition_queue(db, branch_id, booking_date))

    if now_serving is not None:
        _finish_current(db, now_serving, "completed")
        advance.finished = now_serving

    if waiting:
        nxt = waiting[0]
        if nxt.queue_number is None:
            nxt.queue_number = next_queue_number(db, branch_id, booking_date)
        nxt.status = "in_progress"
        db.flush()
        advance.called = nxt

    return advance


def call_next(
    db: Session,
    branch_id: int,
    booking_date: date,
    *,
    feed: ChangeFeed | None = None,
) -> QueueAdvance:
    """Complete whoever is being served, then start the earliest waiting booking.

    Both updates land in one commit. With nobody serving and nobody waiting the
    call is a no-op and returns an empty ``QueueAdvance``.
    """
    with _queue_transaction(db):
        advance = _call_next_in_session(db, branch_id, booking_date)

    logger.info(
        "Queue advanced",
        extra={
            "branch_id": branch_id,
            "booking_date": booking_date.isoformat(),
            "finished_id": advance.finished.id if advance.finished else None,
            "called_id": advance.called.id if advance.called else None,
        },
    )
    _publish(feed, [advance.finished, advance.called])
    return advance


def _require_in_progress(db: Session, branch_id: int, booking_date: date) -> Booking:
    now_serving, _ = split_queue(list_partition_queue(db, branch_id, booking_date))
    if now_serving is None:
        raise DomainException(
            code=ErrorCode.NO_ACTIVE_BOOKING,
            message="No booking is currently in progress."
        )
    return now_serving


def skip_current(
    db: Session,
    branch_id: int,
    booking_date: date,
    *,
    feed: ChangeFeed | None = None,
) -> QueueAdvance:
    """Cancel the in-progress booking and call the next one, as one action."""
    current = _require_in_progress(db, branch_id, booking_date)

    with _queue_transaction(db):
        _finish_current(db, current, "cancelled")
        advance = _call_next_in_session(db, branch_id, booking_date)
    advance.finished = current

    logger.info(
        "Queue booking skipped",
        extra={
            "booking_id": current.id,
            "called_id": advance.called.id if advance.called else None,
        },
    )
    _publish(feed, [advance.finished, advance.called])
    return advance


def complete_current(
    db: Session,
    branch_id: int,
    booking_date: date,
    *,
    feed: ChangeFeed | None = None,
) -> Booking:
    """Complete the in-progress booking without calling the next one."""
    current = _require_in_progress(db, branch_id, booking_date)
    with _queue_transaction(db):
        _finish_current(db, current, "completed")

    logger.info("Queue booking completed", extra={"booking_id": current.id})
    _publish(feed, [current])
    return current


def find_customer_branch_id(db: Session, user_id: int, booking_date: date) -> int | None:
    """Branch of the customer's active numbered booking on ``booking_date``, if any."""
    return db.scalar(
        select(Booking.branch_id)
        .where(Booking.user_id == user_id)
        .where(Booking.booking_date == booking_date)
        .where(Booking.status.in_(ACTIVE_STATUSES))
        .where(Booking.queue_number.is_not(None))
        .order_by(Booking.queue_number.asc(), Booking.id.asc())
        .limit(1)
    )


def get_customer_queue_status(
    db: Session,
    user_id: int,
    branch_id: int,
    booking_date: date,
) -> CustomerQueueStatus:
    """The numbered queue of a partition as a customer sees it."""
    queue = sorted(
        (
            booking
            for booking in list_partition_queue(db, branch_id, booking_date)
            if booking.queue_number is not None
        ),
        key=lambda booking: booking.queue_number,
    )

    now_serving = next((booking for booking in queue if booking.status == "in_progress"), None)
    my_booking = next((booking for booking in queue if booking.user_id == user_id), None)

    ahead_of_me = None
    if my_booking is not None:
        ahead_of_me = sum(
            1
            for booking in queue
            if booking.queue_number < my_booking.queue_number and booking.status != "in_progress"
        )

    return CustomerQueueStatus(
        branch_id=branch_id,
        booking_date=booking_date,
        now_serving=now_serving,
        queue=queue,
        my_booking=my_booking,
        ahead_of_me=ahead_of_me,
    )
