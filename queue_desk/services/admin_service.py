"""Branch and user administration."""

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from queue_desk.core.domain_exceptions import DomainException, InputValidationError
from queue_desk.core.error_codes import ErrorCode
from queue_desk.db.models import Booking, Branch, UserProfile
from queue_desk.services.change_feed import ChangeFeed, publish_change

logger = logging.getLogger(__name__)

BRANCH_FIELDS = ("name", "address", "phone", "is_active")


def _branch_payload(branch: Branch) -> dict:
    return {
        "id": branch.id,
        "name": branch.name,
        "address": branch.address,
        "phone": branch.phone,
        "is_active": branch.is_active,
    }


def _validate_branch(name: str | None, address: str | None) -> None:
    errors: dict[str, str] = {}
    if not (name or "").strip():
        errors["name"] = "Branch name is required"
    if not (address or "").strip():
        errors["address"] = "Branch address is required"
    if errors:
        raise InputValidationError(fields=errors, message="Branch details are invalid.")


def count_bookings_for_branch(db: Session, branch_id: int) -> int:
    return db.scalar(select(func.count(Booking.id)).where(Booking.branch_id == branch_id)) or 0


def count_bookings_for_user(db: Session, user_id: int) -> int:
    return db.scalar(select(func.count(Booking.id)).where(Booking.user_id == user_id)) or 0


def list_branches(db: Session, active_only: bool = False) -> list[Branch]:
    query = select(Branch).order_by(Branch.name.asc())
    if active_only:
        query = query.where(Branch.is_active.is_(True))
    return list(db.scalars(query).all())


def get_branch(db: Session, branch_id: int) -> Branch:
    branch = db.get(Branch, branch_id)
    if branch is None:
        raise DomainException(
            code=ErrorCode.BRANCH_NOT_FOUND,
            message="Branch not found."
        )
    return branch


def create_branch(
    db: Session,
    name: str,
    address: str,
    phone: str | None = None,
    is_active: bool = True,
    *,
    feed: ChangeFeed | None = None,
) -> Branch:
    _validate_branch(name, address)
    try:
        branch = Branch(
            name=name.strip(),
            address=address.strip(),
            phone=phone or None,
            is_active=is_active,
        )
        db.add(branch)
        db.commit()
        db.refresh(branch)
    except SQLAlchemyError:
        db.rollback()
        raise

    logger.info("Branch created", extra={"branch_id": branch.id})
    publish_change(feed, "branches", "insert", branch.id, _branch_payload(branch))
    return branch


def update_branch(
    db: Session,
    branch_id: int,
    changes: dict,
    *,
    feed: ChangeFeed | None = None,
) -> Branch:
    branch = get_branch(db, branch_id)
    updates = {key: value for key, value in changes.items() if key in BRANCH_FIELDS}
    _validate_branch(updates.get("name", branch.name), updates.get("address", branch.address))

    try:
        for key, value in updates.items():
            setattr(branch, key, value.strip() if isinstance(value, str) else value)
        db.commit()
        db.refresh(branch)
    except SQLAlchemyError:
        db.rollback()
        raise

    publish_change(feed, "branches", "update", branch.id, _branch_payload(branch))
    return branch


def delete_branch(
    db: Session,
    branch_id: int,
    *,
    feed: ChangeFeed | None = None,
) -> None:
    """Delete a branch that no booking references."""
    branch = get_branch(db, branch_id)
    if count_bookings_for_branch(db, branch_id) > 0:
        raise DomainException(
            code=ErrorCode.BRANCH_IN_USE,
            message="Cannot delete branch with existing bookings."
        )

    payload = _branch_payload(branch)
    try:
        db.delete(branch)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    logger.info("Branch deleted", extra={"branch_id": branch_id})
    publish_change(feed, "branches", "delete", branch_id, payload)


def list_profiles(db: Session, role: str | None = None) -> list[UserProfile]:
    query = select(UserProfile).order_by(UserProfile.created_at.desc(), UserProfile.id.desc())
    if role is not None:
        query = query.where(UserProfile.role == role)
    return list(db.scalars(query).all())


def get_profile(db: Session, user_id: int) -> UserProfile:
    profile = db.get(UserProfile, user_id)
    if profile is None:
        raise DomainException(
            code=ErrorCode.USER_NOT_FOUND,
            message="User not found."
        )
    return profile


def delete_profile(
    db: Session,
    user_id: int,
    *,
    feed: ChangeFeed | None = None,
) -> None:
    """Delete a user that no booking references, along with their sessions."""
    profile = get_profile(db, user_id)
    if count_bookings_for_user(db, user_id) > 0:
        raise DomainException(
            code=ErrorCode.USER_IN_USE,
            message="Cannot delete user with existing bookings."
        )

    try:
        db.delete(profile)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    logger.info("User deleted", extra={"user_id": user_id})
    publish_change(feed, "user_profiles", "delete", user_id, {"id": user_id})
