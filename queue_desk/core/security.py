"""Request authentication and role gating."""

import logging

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from queue_desk.db.session import get_db
from queue_desk.services.auth_service import SessionInfo, resolve_session

logger = logging.getLogger(__name__)

bearer = HTTPBearer(auto_error=False)


def get_current_session(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: Session = Depends(get_db),
) -> SessionInfo:
    token = credentials.credentials if credentials is not None else None
    session_info = resolve_session(db, token)
    if session_info is None:
        raise HTTPException(
            status_code=401,
            detail="Please sign in to continue.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return session_info


def require_role(role: str):
    """Dependency factory: a wrong role sees the same 404 as a missing page."""

    def _dependency(session_info: SessionInfo = Depends(get_current_session)) -> SessionInfo:
        if session_info.role != role:
            logger.info(
                "Role %s denied access to %s area",
                session_info.role,
                role,
                extra={"user_id": session_info.user.id},
            )
            raise HTTPException(status_code=404, detail="Not Found")
        return session_info

    return _dependency


require_customer = require_role("customer")
require_admin = require_role("admin")
