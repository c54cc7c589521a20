import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from fittrack.deps import get_auth_service, get_bearer_token, get_current_user, get_db
from fittrack.models.user import User
from fittrack.schemas.auth import (
    CheckEmailRequest,
    CheckEmailResponse,
    LoginRequest,
    SessionRead,
    SignUpRequest,
    UserRead,
)
from fittrack.services.auth import AuthService, AuthSession

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["auth"])


def _session_read(db: Session, session: AuthSession) -> SessionRead:
    user = db.query(User).filter(User.id == session.user_id).first()
    return SessionRead(
        access_token=session.access_token,
        expires_at=session.expires_at,
        user=UserRead.model_validate(user),
    )


@router.post("/auth/signup", response_model=SessionRead, status_code=status.HTTP_201_CREATED)
def sign_up(
    payload: SignUpRequest,
    db: Session = Depends(get_db),
    auth: AuthService = Depends(get_auth_service),
):
    session = auth.sign_up(db, payload.email, payload.password, timezone=payload.timezone)
    return _session_read(db, session)


@router.post("/auth/login", response_model=SessionRead)
def sign_in(
    payload: LoginRequest,
    db: Session = Depends(get_db),
    auth: AuthService = Depends(get_auth_service),
):
    session = auth.sign_in_with_password(db, payload.email, payload.password)
    return _session_read(db, session)


@router.post("/auth/logout")
def sign_out(
    token: str = Depends(get_bearer_token),
    auth: AuthService = Depends(get_auth_service),
):
    auth.sign_out(token)
    return {"success": True}


@router.get("/auth/session", response_model=SessionRead)
def current_session(
    token: str = Depends(get_bearer_token),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    auth: AuthService = Depends(get_auth_service),
):
    return _session_read(db, auth.get_session(db, token))


@router.post("/check-email", response_model=CheckEmailResponse)
def check_email(
    payload: CheckEmailRequest,
    db: Session = Depends(get_db),
    auth: AuthService = Depends(get_auth_service),
):
    """Whether an account already uses this email (sign-up form check)."""
    return CheckEmailResponse(exists=auth.email_exists(db, payload.email))
