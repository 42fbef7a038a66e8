"""Bootstrap helpers for first-run defaults."""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session
from werkzeug.security import generate_password_hash

from queue_desk.core import config
from queue_desk.db.models import UserProfile

logger = logging.getLogger(__name__)


def ensure_admin_profile(
    db: Session,
    email: str | None = None,
    password: str | None = None,
    full_name: str | None = None,
) -> UserProfile | None:
    """Create the configured admin account when it does not exist yet.

    Sign-up only ever creates customers, so the first admin has to come from
    configuration. Returns ``None`` when no admin credentials are configured.
    """
    email = (email or config.ADMIN_EMAIL or "").strip().lower()
    password = password or config.ADMIN_PASSWORD
    if not email or not password:
        return None

    profile = db.scalar(select(UserProfile).where(UserProfile.email == email))
    if profile is not None:
        if profile.role != "admin":
            logger.warning("Bootstrap admin %s exists with role %s.", email, profile.role)
        return profile

    profile = UserProfile(
        full_name=full_name or config.ADMIN_NAME,
        email=email,
        role="admin",
        password_hash=generate_password_hash(password),
    )
    db.add(profile)
    db.commit()
    db.refresh(profile)
    logger.info("Bootstrap admin profile created", extra={"user_id": profile.id})
    return profile
