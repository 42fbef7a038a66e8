"""Queue control (admin) and queue status (customer) routes."""

from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from queue_desk.core.context import AppContext, get_context
from queue_desk.core.domain_exceptions import DomainException
from queue_desk.core.error_codes import ErrorCode
from queue_desk.core.security import require_admin, require_customer
from queue_desk.db.session import get_db
from queue_desk.schemas.booking import BookingItem, to_booking_item
from queue_desk.schemas.common import APIResponse
from queue_desk.schemas.queue import (
    CustomerQueueStatusResponse,
    QueueActionRequest,
    QueueAdvanceResponse,
    QueueSnapshotResponse,
)
from queue_desk.services.admin_service import get_branch, list_branches
from queue_desk.services.auth_service import SessionInfo
from queue_desk.services.queue_service import (
    QueueAdvance,
    assign_queue,
    call_next,
    complete_current,
    find_customer_branch_id,
    get_customer_queue_status,
    get_queue_snapshot,
    skip_current,
)

router = APIRouter(prefix="/queue", tags=["queue"])


def _resolve_branch_id(db: Session, branch_id: int | None) -> int:
    """Explicit branch, else the first active branch by name."""
    if branch_id is not None:
        return get_branch(db, branch_id).id

    branches = list_branches(db, active_only=True)
    if not branches:
        raise DomainException(
            code=ErrorCode.BRANCH_NOT_FOUND,
            message="No active branch is configured."
        )
    return branches[0].id


def _advance_response(advance: QueueAdvance, ctx: AppContext) -> QueueAdvanceResponse:
    return QueueAdvanceResponse(
        finished=to_booking_item(advance.finished, ctx.variant) if advance.finished else None,
        called=to_booking_item(advance.called, ctx.variant) if advance.called else None,
    )


@router.get("/", response_model=APIResponse[QueueSnapshotResponse])
def queue_snapshot(
    branch_id: int | None = None,
    booking_date: date | None = None,
    _: SessionInfo = Depends(require_admin),
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
):
    snapshot = get_queue_snapshot(
        db=db,
        branch_id=_resolve_branch_id(db, branch_id),
        booking_date=booking_date or date.today(),
    )
    return APIResponse(
        success=True,
        data=QueueSnapshotResponse(
            branch_id=snapshot.branch_id,
            booking_date=snapshot.booking_date,
            now_serving=(
                to_booking_item(snapshot.now_serving, ctx.variant)
                if snapshot.now_serving is not None
                else None
            ),
            waiting=[to_booking_item(booking, ctx.variant) for booking in snapshot.waiting],
            in_queue=len(snapshot.waiting),
            total=snapshot.total,
        ),
    )


@router.post("/{booking_id}/assign", response_model=APIResponse[BookingItem])
def assign(
    booking_id: int,
    _: SessionInfo = Depends(require_admin),
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
):
    booking = assign_queue(db=db, booking_id=booking_id, feed=ctx.feed)
    return APIResponse(success=True, data=to_booking_item(booking, ctx.variant))


@router.post("/call-next", response_model=APIResponse[QueueAdvanceResponse])
def next_in_line(
    payload: QueueActionRequest,
    _: SessionInfo = Depends(require_admin),
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
):
    advance = call_next(
        db=db,
        branch_id=get_branch(db, payload.branch_id).id,
        booking_date=payload.booking_date or date.today(),
        feed=ctx.feed,
    )
    return APIResponse(success=True, data=_advance_response(advance, ctx))


@router.post("/skip", response_model=APIResponse[QueueAdvanceResponse])
def skip(
    payload: QueueActionRequest,
    _: SessionInfo = Depends(require_admin),
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
):
    advance = skip_current(
        db=db,
        branch_id=get_branch(db, payload.branch_id).id,
        booking_date=payload.booking_date or date.today(),
        feed=ctx.feed,
    )
    return APIResponse(success=True, data=_advance_response(advance, ctx))


@router.post("/complete", response_model=APIResponse[BookingItem])
def complete(
    payload: QueueActionRequest,
    _: SessionInfo = Depends(require_admin),
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
):
    booking = complete_current(
        db=db,
        branch_id=get_branch(db, payload.branch_id).id,
        booking_date=payload.booking_date or date.today(),
        feed=ctx.feed,
    )
    return APIResponse(success=True, data=to_booking_item(booking, ctx.variant))


@router.get("/status", response_model=APIResponse[CustomerQueueStatusResponse])
def my_queue_status(
    branch_id: int | None = None,
    booking_date: date | None = None,
    session_info: SessionInfo = Depends(require_customer),
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
):
    user_id = session_info.user.id
    booking_date = booking_date or date.today()
    if branch_id is None:
        branch_id = find_customer_branch_id(db, user_id, booking_date)

    status = get_customer_queue_status(
        db=db,
        user_id=user_id,
        branch_id=_resolve_branch_id(db, branch_id),
        booking_date=booking_date,
    )
    return APIResponse(
        success=True,
        data=CustomerQueueStatusResponse(
            branch_id=status.branch_id,
            booking_date=status.booking_date,
            now_serving_number=status.now_serving.queue_number if status.now_serving else None,
            queue=[to_booking_item(booking, ctx.variant) for booking in status.queue],
            my_booking=to_booking_item(status.my_booking, ctx.variant) if status.my_booking else None,
            ahead_of_me=status.ahead_of_me,
        ),
    )
