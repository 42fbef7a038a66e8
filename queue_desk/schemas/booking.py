from datetime import date, datetime

from pydantic import BaseModel

from queue_desk.catalog import VariantConfig
from queue_desk.db.models import Booking


class BookingCreateRequest(BaseModel):
    # Optional so that missing fields reach the field-level validator.
    branch_id: int | None = None
    service_type: str | None = None
    quantity: int | None = 1
    booking_date: date | None = None
    booking_time: str | None = None
    payment_method: str | None = None
    notes: str | None = None


class StatusUpdate(BaseModel):
    status: str


class BookingItem(BaseModel):
    id: int
    user_id: int
    customer_name: str | None = None
    customer_email: str | None = None
    branch_id: int
    branch_name: str | None = None
    service_type: str
    service_name: str
    quantity: int
    duration_minutes: int
    booking_date: date
    booking_time: str
    total_cost: float
    payment_method: str
    notes: str | None = None
    status: str
    queue_number: int | None = None
    created_at: datetime | None = None


class BookingQuoteResponse(BaseModel):
    service_type: str
    quantity: int
    unit_price: float
    total_cost: float
    duration_minutes: int


def to_booking_item(booking: Booking, variant: VariantConfig) -> BookingItem:
    user = booking.user
    branch = booking.branch
    return BookingItem(
        id=booking.id,
        user_id=booking.user_id,
        customer_name=user.full_name if user is not None else None,
        customer_email=user.email if user is not None else None,
        branch_id=booking.branch_id,
        branch_name=branch.name if branch is not None else None,
        service_type=booking.service_type,
        service_name=variant.service_name(booking.service_type),
        quantity=booking.quantity,
        duration_minutes=booking.duration_minutes,
        booking_date=booking.booking_date,
        booking_time=booking.booking_time.strftime("%H:%M"),
        total_cost=booking.total_cost,
        payment_method=booking.payment_method,
        notes=booking.notes,
        status=booking.status,
        queue_number=booking.queue_number,
        created_at=booking.created_at,
    )
