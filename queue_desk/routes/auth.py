"""Sign-up, sign-in and session routes."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from queue_desk.core.context import AppContext, get_context
from queue_desk.core.security import get_current_session
from queue_desk.db.session import get_db
from queue_desk.schemas.auth import SessionResponse, SessionUser, SignInRequest, SignUpRequest
from queue_desk.schemas.common import APIResponse
from queue_desk.services.auth_service import SessionInfo, sign_in, sign_out, sign_up

router = APIRouter(prefix="/auth", tags=["auth"])


def _session_response(session_info: SessionInfo) -> SessionResponse:
    user = session_info.user
    return SessionResponse(
        token=session_info.token,
        user=SessionUser(id=user.id, full_name=user.full_name, email=user.email, role=user.role),
        role=session_info.role,
        expires_at=session_info.expires_at,
    )


@router.post("/signup", response_model=APIResponse[SessionResponse], status_code=201)
def signup(
    payload: SignUpRequest,
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
):
    session_info = sign_up(
        db=db,
        email=payload.email,
        password=payload.password,
        full_name=payload.full_name,
        phone=payload.phone,
        feed=ctx.feed,
    )
    return APIResponse(success=True, data=_session_response(session_info))


@router.post("/signin", response_model=APIResponse[SessionResponse])
def signin(payload: SignInRequest, db: Session = Depends(get_db)):
    session_info = sign_in(db=db, email=payload.email, password=payload.password)
    return APIResponse(success=True, data=_session_response(session_info))


@router.post("/signout", response_model=APIResponse[dict])
def signout(
    session_info: SessionInfo = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    sign_out(db=db, token=session_info.token)
    return APIResponse(success=True, data={"signed_out": True})


@router.get("/session", response_model=APIResponse[SessionResponse])
def current_session(session_info: SessionInfo = Depends(get_current_session)):
    return APIResponse(success=True, data=_session_response(session_info))
