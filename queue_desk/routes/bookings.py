from datetime import date
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from queue_desk.core.context import AppContext, get_context
from queue_desk.core.security import require_admin, require_customer
from queue_desk.db.session import get_db
from queue_desk.schemas.booking import (
    BookingCreateRequest,
    BookingItem,
    StatusUpdate,
    to_booking_item,
)
from queue_desk.schemas.common import APIResponse
from queue_desk.services.auth_service import SessionInfo
from queue_desk.services.booking_service import (
    cancel_own_booking,
    create_booking,
    delete_booking,
    list_bookings,
    list_user_bookings,
    update_booking_status,
)
from queue_desk.services.listing_service import filter_bookings

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post("/", response_model=APIResponse[BookingItem], status_code=201)
def book(
    payload: BookingCreateRequest,
    session_info: SessionInfo = Depends(require_customer),
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
):
    booking = create_booking(
        db=db,
        variant=ctx.variant,
        user_id=session_info.user.id,
        branch_id=payload.branch_id,
        service_type=payload.service_type,
        quantity=payload.quantity,
        booking_date=payload.booking_date,
        booking_time=payload.booking_time,
        payment_method=payload.payment_method,
        notes=payload.notes,
        feed=ctx.feed,
    )
    return APIResponse(success=True, data=to_booking_item(booking, ctx.variant))


@router.get("/mine", response_model=APIResponse[List[BookingItem]])
def my_bookings(
    session_info: SessionInfo = Depends(require_customer),
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
):
    user_id = session_info.user.id
    items = ctx.cache.get_or_load(
        "bookings",
        ("mine", user_id),
        lambda: [to_booking_item(booking, ctx.variant) for booking in list_user_bookings(db, user_id)],
    )
    return APIResponse(success=True, data=items)


@router.patch("/{booking_id}/cancel", response_model=APIResponse[BookingItem])
def cancel(
    booking_id: int,
    session_info: SessionInfo = Depends(require_customer),
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
):
    booking = cancel_own_booking(
        db=db,
        user_id=session_info.user.id,
        booking_id=booking_id,
        feed=ctx.feed,
    )
    return APIResponse(success=True, data=to_booking_item(booking, ctx.variant))


@router.get("/", response_model=APIResponse[List[BookingItem]])
def all_bookings(
    search: str = "",
    status: str = "all",
    branch_id: int | None = None,
    booking_date: date | None = None,
    _: SessionInfo = Depends(require_admin),
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
):
    items = ctx.cache.get_or_load(
        "bookings",
        ("all", branch_id, booking_date),
        lambda: [
            to_booking_item(booking, ctx.variant)
            for booking in list_bookings(db=db, branch_id=branch_id, booking_date=booking_date)
        ],
    )
    return APIResponse(
        success=True,
        data=filter_bookings(items, search=search, status=status.lower()),
    )


@router.patch("/{booking_id}/status", response_model=APIResponse[BookingItem])
def update_status(
    booking_id: int,
    payload: StatusUpdate,
    _: SessionInfo = Depends(require_admin),
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
):
    booking = update_booking_status(
        db=db,
        booking_id=booking_id,
        new_status=payload.status.lower(),
        feed=ctx.feed,
    )
    return APIResponse(success=True, data=to_booking_item(booking, ctx.variant))


@router.delete("/{booking_id}", response_model=APIResponse[dict])
def remove(
    booking_id: int,
    _: SessionInfo = Depends(require_admin),
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
):
    delete_booking(db=db, booking_id=booking_id, feed=ctx.feed)
    return APIResponse(success=True, data={"booking_id": booking_id, "deleted": True})
