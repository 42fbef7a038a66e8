"""Booking-related service helpers."""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from queue_desk.catalog import VariantConfig
from queue_desk.core.domain_exceptions import BookingValidationError, DomainException
from queue_desk.core.error_codes import ErrorCode
from queue_desk.db.models import BOOKING_STATUSES, Booking, Branch
from queue_desk.services.change_feed import ChangeFeed, publish_change
from queue_desk.services.lifecycle import (
    ensure_transition,
    find_in_progress,
    next_queue_number,
)

logger = logging.getLogger(__name__)

CUSTOMER_CANCELLABLE_STATUSES = {"pending", "confirmed"}


@dataclass(frozen=True)
class BookingQuote:
    service_type: str
    quantity: int
    unit_price: float
    total_cost: float
    duration_minutes: int


def quote_booking(variant: VariantConfig, service_type: str, quantity: int) -> BookingQuote:
    """Price and duration for ``quantity`` units of a catalog service."""
    entry = variant.require_service(service_type)
    duration = entry.duration * quantity if variant.duration_scales_with_quantity else entry.duration
    return BookingQuote(
        service_type=entry.code,
        quantity=quantity,
        unit_price=entry.price,
        total_cost=entry.price * quantity,
        duration_minutes=duration,
    )


def parse_time_slot(raw_slot: str) -> time:
    return datetime.strptime(raw_slot.strip(), "%H:%M").time()


def format_time_slot(value: time) -> str:
    return value.strftime("%H:%M")


def booking_payload(booking: Booking) -> dict:
    return {
        "id": booking.id,
        "user_id": booking.user_id,
        "branch_id": booking.branch_id,
        "service_type": booking.service_type,
        "booking_date": booking.booking_date.isoformat(),
        "booking_time": format_time_slot(booking.booking_time),
        "status": booking.status,
        "queue_number": booking.queue_number,
        "total_cost": booking.total_cost,
    }


def validate_booking_request(
    db: Session,
    variant: VariantConfig,
    branch_id: int | None,
    service_type: str | None,
    quantity: int | None,
    booking_date: date | None,
    booking_time: str | None,
    payment_method: str | None,
    today: date | None = None,
) -> dict[str, str]:
    """Collect field-level problems; an empty dict means the request may be saved."""
    today = today or date.today()
    errors: dict[str, str] = {}

    if branch_id is None:
        errors["branch_id"] = "Please select a branch"
    else:
        branch = db.get(Branch, branch_id)
        if branch is None or not branch.is_active:
            errors["branch_id"] = "Selected branch is not available"

    if not service_type:
        errors["service_type"] = "Please select a service"
    elif variant.get_service(service_type) is None:
        errors["service_type"] = "Selected service is not offered"

    if quantity is None or quantity < 1:
        errors["quantity"] = "Quantity must be at least 1"
    elif quantity > variant.max_quantity:
        errors["quantity"] = f"Quantity cannot exceed {variant.max_quantity}"

    if booking_date is None:
        errors["booking_date"] = "Please select a date"
    elif booking_date < today:
        errors["booking_date"] = "Date cannot be in the past"

    if not booking_time:
        errors["booking_time"] = "Please select a time"
    elif booking_time.strip() not in variant.time_slots:
        errors["booking_time"] = "Selected time is not an available slot"

    if not payment_method:
        errors["payment_method"] = "Please select a payment method"
    elif payment_method not in variant.payment_methods:
        errors["payment_method"] = "Selected payment method is not accepted"

    return errors


def create_booking(
    db: Session,
    variant: VariantConfig,
    user_id: int,
    branch_id: int | None,
    service_type: str | None,
    quantity: int | None,
    booking_date: date | None,
    booking_time: str | None,
    payment_method: str | None,
    notes: str | None = None,
    *,
    today: date | None = None,
    feed: ChangeFeed | None = None,
) -> Booking:
    """Validate and store a new pending booking without a queue number."""
    errors = validate_booking_request(
        db=db,
        variant=variant,
        branch_id=branch_id,
        service_type=service_type,
        quantity=quantity,
        booking_date=booking_date,
        booking_time=booking_time,
        payment_method=payment_method,
        today=today,
    )
    if errors:
        raise BookingValidationError(errors)

    quote = quote_booking(variant, service_type, quantity)

    try:
        booking = Booking(
            user_id=user_id,
            branch_id=branch_id,
            service_type=quote.service_type,
            quantity=quote.quantity,
            duration_minutes=quote.duration_minutes,
            booking_date=booking_date,
            booking_time=parse_time_slot(booking_time),
            total_cost=quote.total_cost,
            payment_method=payment_method,
            notes=(notes or "").strip() or None,
            status="pending",
            queue_number=None,
        )

        db.add(booking)
        db.commit()
        db.refresh(booking)
    except SQLAlchemyError:
        db.rollback()
        raise

    logger.info(
        "Booking created",
        extra={
            "booking_id": booking.id,
            "user_id": user_id,
        },
    )
    publish_change(feed, "bookings", "insert", booking.id, booking_payload(booking))
    return booking


def get_booking(db: Session, booking_id: int) -> Booking:
    booking = db.scalar(
        select(Booking)
        .options(joinedload(Booking.user), joinedload(Booking.branch))
        .where(Booking.id == booking_id)
    )
    if booking is None:
        raise DomainException(
            code=ErrorCode.BOOKING_NOT_FOUND,
            message="Booking not found."
        )
    return booking


def list_bookings(
    db: Session,
    branch_id: int | None = None,
    booking_date: date | None = None,
    status: str | None = None,
    user_id: int | None = None,
) -> list[Booking]:
    """Fetch bookings with their customer and branch, newest date first."""
    query = (
        select(Booking)
        .options(joinedload(Booking.user), joinedload(Booking.branch))
        .order_by(Booking.booking_date.desc(), Booking.booking_time.asc(), Booking.id.asc())
    )

    if branch_id is not None:
        query = query.where(Booking.branch_id == branch_id)
    if booking_date is not None:
        query = query.where(Booking.booking_date == booking_date)
    if status is not None and status != "all":
        query = query.where(Booking.status == status)
    if user_id is not None:
        query = query.where(Booking.user_id == user_id)

    return list(db.scalars(query).unique().all())


def list_user_bookings(db: Session, user_id: int) -> list[Booking]:
    return list_bookings(db=db, user_id=user_id)


def update_booking_status(
    db: Session,
    booking_id: int,
    new_status: str,
    *,
    feed: ChangeFeed | None = None,
) -> Booking:
    """Move a booking along the state machine from the admin bookings table.

    Confirming or starting a booking without a queue number hands it the next
    number in its partition; starting one is refused while another booking in
    the same partition is in progress.
    """
    if new_status not in BOOKING_STATUSES:
        raise DomainException(
            code=ErrorCode.INVALID_STATUS,
            message="Invalid status."
        )

    booking = get_booking(db, booking_id)
    ensure_transition(booking, new_status)

    if new_status == "in_progress":
        current = find_in_progress(db, booking.branch_id, booking.booking_date)
        if current is not None and current.id != booking.id:
            raise DomainException(
                code=ErrorCode.INVALID_STATUS,
                message="Another booking is already in progress for this branch and date."
            )

    try:
        if new_status in ("confirmed", "in_progress") and booking.queue_number is None:
            booking.queue_number = next_queue_number(db, booking.branch_id, booking.booking_date)
        booking.status = new_status

        db.commit()
        db.refresh(booking)
    except IntegrityError:
        db.rollback()
        raise DomainException(
            code=ErrorCode.QUEUE_CONFLICT,
            message="Queue number was taken by another update. Please retry."
        )
    except SQLAlchemyError:
        db.rollback()
        raise

    logger.info(
        "Booking status updated",
        extra={"booking_id": booking.id, "status": booking.status},
    )
    publish_change(feed, "bookings", "update", booking.id, booking_payload(booking))
    return booking


def cancel_own_booking(
    db: Session,
    user_id: int,
    booking_id: int,
    *,
    feed: ChangeFeed | None = None,
) -> Booking:
    booking = db.scalar(
        select(Booking)
        .where(Booking.id == booking_id)
        .where(Booking.user_id == user_id)
    )
    if booking is None:
        raise DomainException(
            code=ErrorCode.BOOKING_NOT_FOUND,
            message="Booking not found."
        )

    if booking.status not in CUSTOMER_CANCELLABLE_STATUSES:
        raise DomainException(
            code=ErrorCode.INVALID_STATUS,
            message="Only pending or confirmed bookings can be cancelled."
        )

    try:
        booking.status = "cancelled"
        db.commit()
        db.refresh(booking)
    except SQLAlchemyError:
        db.rollback()
        raise

    publish_change(feed, "bookings", "update", booking.id, booking_payload(booking))
    return booking


def delete_booking(
    db: Session,
    booking_id: int,
    *,
    feed: ChangeFeed | None = None,
) -> None:
    """Remove a booking outright. Irreversible."""
    booking = db.get(Booking, booking_id)
    if booking is None:
        raise DomainException(
            code=ErrorCode.BOOKING_NOT_FOUND,
            message="Booking not found."
        )

    payload = booking_payload(booking)
    try:
        db.delete(booking)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    logger.info("Booking deleted", extra={"booking_id": booking_id})
    publish_change(feed, "bookings", "delete", booking_id, payload)
