"""Branch listing and administration routes."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from queue_desk.core.context import AppContext, get_context
from queue_desk.core.security import get_current_session, require_admin
from queue_desk.db.models import Branch
from queue_desk.db.session import get_db
from queue_desk.schemas.admin import BranchCreate, BranchItem, BranchUpdate
from queue_desk.schemas.common import APIResponse
from queue_desk.services.admin_service import (
    create_branch,
    delete_branch,
    list_branches,
    update_branch,
)
from queue_desk.services.auth_service import SessionInfo
from queue_desk.services.report_service import get_branch_booking_counts

router = APIRouter(prefix="/branches", tags=["branches"])


def _branch_item(branch: Branch, booking_count: int = 0) -> BranchItem:
    return BranchItem(
        id=branch.id,
        name=branch.name,
        address=branch.address,
        phone=branch.phone,
        is_active=branch.is_active,
        booking_count=booking_count,
    )


@router.get("/", response_model=APIResponse[List[BranchItem]])
def active_branches(
    _: SessionInfo = Depends(get_current_session),
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
):
    items = ctx.cache.get_or_load(
        "branches",
        ("active",),
        lambda: [_branch_item(branch) for branch in list_branches(db, active_only=True)],
    )
    return APIResponse(success=True, data=items)


@router.get("/manage", response_model=APIResponse[List[BranchItem]])
def manage_branches(
    _: SessionInfo = Depends(require_admin),
    db: Session = Depends(get_db),
):
    counts = get_branch_booking_counts(db)
    return APIResponse(
        success=True,
        data=[_branch_item(branch, counts.get(branch.id, 0)) for branch in list_branches(db)],
    )


@router.post("/", response_model=APIResponse[BranchItem], status_code=201)
def add_branch(
    payload: BranchCreate,
    _: SessionInfo = Depends(require_admin),
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
):
    branch = create_branch(
        db=db,
        name=payload.name,
        address=payload.address,
        phone=payload.phone,
        is_active=payload.is_active,
        feed=ctx.feed,
    )
    return APIResponse(success=True, data=_branch_item(branch))


@router.patch("/{branch_id}", response_model=APIResponse[BranchItem])
def edit_branch(
    branch_id: int,
    payload: BranchUpdate,
    _: SessionInfo = Depends(require_admin),
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
):
    branch = update_branch(
        db=db,
        branch_id=branch_id,
        changes=payload.model_dump(exclude_unset=True),
        feed=ctx.feed,
    )
    return APIResponse(success=True, data=_branch_item(branch))


@router.delete("/{branch_id}", response_model=APIResponse[dict])
def remove_branch(
    branch_id: int,
    _: SessionInfo = Depends(require_admin),
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
):
    delete_branch(db=db, branch_id=branch_id, feed=ctx.feed)
    return APIResponse(success=True, data={"branch_id": branch_id, "deleted": True})
