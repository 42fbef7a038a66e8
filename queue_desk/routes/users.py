"""Customer account management (admin only)."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from queue_desk.core.context import AppContext, get_context
from queue_desk.core.security import require_admin
from queue_desk.db.session import get_db
from queue_desk.schemas.admin import ProfileItem
from queue_desk.schemas.booking import BookingItem, to_booking_item
from queue_desk.schemas.common import APIResponse
from queue_desk.services.admin_service import delete_profile, get_profile, list_profiles
from queue_desk.services.auth_service import SessionInfo
from queue_desk.services.booking_service import list_user_bookings
from queue_desk.services.listing_service import filter_profiles

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/", response_model=APIResponse[List[ProfileItem]])
def list_users(
    search: str = "",
    role: str | None = "customer",
    _: SessionInfo = Depends(require_admin),
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
):
    items = ctx.cache.get_or_load(
        "user_profiles",
        ("list", role),
        lambda: [
            ProfileItem(
                id=profile.id,
                full_name=profile.full_name,
                email=profile.email,
                phone=profile.phone,
                role=profile.role,
                created_at=profile.created_at,
            )
            for profile in list_profiles(db, role=role)
        ],
    )
    return APIResponse(success=True, data=filter_profiles(items, search=search))


@router.get("/{user_id}/bookings", response_model=APIResponse[List[BookingItem]])
def user_bookings(
    user_id: int,
    _: SessionInfo = Depends(require_admin),
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
):
    profile = get_profile(db, user_id)
    return APIResponse(
        success=True,
        data=[to_booking_item(booking, ctx.variant) for booking in list_user_bookings(db, profile.id)],
    )


@router.delete("/{user_id}", response_model=APIResponse[dict])
def remove_user(
    user_id: int,
    _: SessionInfo = Depends(require_admin),
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
):
    delete_profile(db=db, user_id=user_id, feed=ctx.feed)
    return APIResponse(success=True, data={"user_id": user_id, "deleted": True})
