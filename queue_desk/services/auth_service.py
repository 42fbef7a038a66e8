"""Sign-up, sign-in and session resolution."""

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash, generate_password_hash

from queue_desk.core import config
from queue_desk.core.domain_exceptions import DomainException, InputValidationError
from queue_desk.core.error_codes import ErrorCode
from queue_desk.db.models import AuthSession, UserProfile
from queue_desk.services.change_feed import ChangeFeed, publish_change

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
MIN_NAME_LENGTH = 2


@dataclass(frozen=True)
class SessionInfo:
    token: str
    user: UserProfile
    role: str
    expires_at: datetime


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on round trip.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _open_session(db: Session, user: UserProfile) -> SessionInfo:
    expires_at = datetime.now(timezone.utc) + timedelta(hours=config.SESSION_TTL_HOURS)
    auth_session = AuthSession(
        token=secrets.token_urlsafe(32),
        user_id=user.id,
        expires_at=expires_at,
    )
    db.add(auth_session)
    db.commit()
    return SessionInfo(token=auth_session.token, user=user, role=user.role, expires_at=expires_at)


def sign_up(
    db: Session,
    email: str,
    password: str,
    full_name: str,
    phone: str | None = None,
    *,
    feed: ChangeFeed | None = None,
) -> SessionInfo:
    """Create a customer profile and sign it in."""
    fields: dict[str, str] = {}
    if "@" not in (email or ""):
        fields["email"] = "Invalid email address"
    if len(password or "") < MIN_PASSWORD_LENGTH:
        fields["password"] = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    if len((full_name or "").strip()) < MIN_NAME_LENGTH:
        fields["full_name"] = f"Name must be at least {MIN_NAME_LENGTH} characters"
    if fields:
        raise InputValidationError(fields=fields, message="Sign-up details are invalid.")

    normalized_email = _normalize_email(email)
    if db.scalar(select(UserProfile.id).where(UserProfile.email == normalized_email)) is not None:
        raise DomainException(
            code=ErrorCode.EMAIL_TAKEN,
            message="An account with this email already exists.",
        )

    try:
        user = UserProfile(
            full_name=full_name.strip(),
            email=normalized_email,
            phone=phone,
            role="customer",
            password_hash=generate_password_hash(password),
        )
        db.add(user)
        db.flush()
        session_info = _open_session(db, user)
    except IntegrityError:
        db.rollback()
        raise DomainException(
            code=ErrorCode.EMAIL_TAKEN,
            message="An account with this email already exists.",
        )
    except SQLAlchemyError:
        db.rollback()
        raise

    logger.info("User signed up", extra={"user_id": user.id})
    publish_change(
        feed,
        "user_profiles",
        "insert",
        user.id,
        {"id": user.id, "email": user.email, "full_name": user.full_name, "role": user.role},
    )
    return session_info


def sign_in(db: Session, email: str, password: str) -> SessionInfo:
    user = db.scalar(select(UserProfile).where(UserProfile.email == _normalize_email(email or "")))
    if user is None or not check_password_hash(user.password_hash, password or ""):
        raise DomainException(
            code=ErrorCode.INVALID_CREDENTIALS,
            message="Invalid email or password.",
        )

    try:
        session_info = _open_session(db, user)
    except SQLAlchemyError:
        db.rollback()
        raise

    logger.info("User signed in", extra={"user_id": user.id})
    return session_info


def sign_out(db: Session, token: str) -> None:
    try:
        db.execute(delete(AuthSession).where(AuthSession.token == token))
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise


def resolve_session(db: Session, token: str | None) -> SessionInfo | None:
    """Return the live session for ``token``, or ``None`` when absent or expired."""
    if not token:
        return None

    auth_session = db.scalar(select(AuthSession).where(AuthSession.token == token))
    if auth_session is None:
        return None

    expires_at = _as_utc(auth_session.expires_at)
    if expires_at <= datetime.now(timezone.utc):
        return None

    user = auth_session.user
    return SessionInfo(token=token, user=user, role=user.role, expires_at=expires_at)
