"""
Auth/session service.

AuthService is the contract the rest of the app depends on; LocalAuthService
implements it over the users table with werkzeug password hashes and HS256
JWTs. Sign-out revokes the token id until the token would have expired.
"""
import datetime as dt
import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional
from uuid import uuid4

import jwt
from pydantic import BaseModel
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash, generate_password_hash

from fittrack.core.config import settings
from fittrack.core.errors import AuthError, ConflictError
from fittrack.models.user import User

logger = logging.getLogger(__name__)

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"

AuthStateCallback = Callable[[str, Optional["AuthSession"]], None]


class AuthSession(BaseModel):
    access_token: str
    expires_at: dt.datetime
    user_id: int
    email: str


class AuthService(ABC):
    @abstractmethod
    def sign_up(self, db: Session, email: str, password: str, timezone: Optional[str] = None) -> AuthSession:
        ...

    @abstractmethod
    def sign_in_with_password(self, db: Session, email: str, password: str) -> AuthSession:
        ...

    @abstractmethod
    def sign_out(self, token: str) -> None:
        ...

    @abstractmethod
    def get_session(self, db: Session, token: str) -> AuthSession:
        ...

    @abstractmethod
    def email_exists(self, db: Session, email: str) -> bool:
        ...

    @abstractmethod
    def on_auth_state_change(self, callback: AuthStateCallback) -> Callable[[], None]:
        ...


class LocalAuthService(AuthService):
    def __init__(self, secret_key: Optional[str] = None, expire_minutes: Optional[int] = None):
        self.secret_key = secret_key or settings.secret_key
        self.expire_minutes = expire_minutes or settings.access_token_expire_minutes
        # jti -> exp of signed-out tokens
        self._revoked: Dict[str, int] = {}
        self._listeners: Dict[str, AuthStateCallback] = {}
        self._lock = threading.Lock()

    # ---------- tokens ----------

    def _issue(self, user: User) -> AuthSession:
        now = dt.datetime.now(dt.timezone.utc)
        expires_at = now + dt.timedelta(minutes=self.expire_minutes)
        payload = {
            "sub": str(user.id),
            "email": user.email,
            "jti": uuid4().hex,
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        token = jwt.encode(payload, self.secret_key, algorithm="HS256")
        return AuthSession(access_token=token, expires_at=expires_at, user_id=user.id, email=user.email)

    def _decode(self, token: str) -> dict:
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=["HS256"])
        except jwt.ExpiredSignatureError:
            raise AuthError("Session expired")
        except jwt.InvalidTokenError:
            raise AuthError("Invalid token")
        with self._lock:
            if payload.get("jti") in self._revoked:
                raise AuthError("Session has been signed out")
        return payload

    def _notify(self, event: str, session: Optional[AuthSession]) -> None:
        with self._lock:
            listeners = list(self._listeners.values())
        for callback in listeners:
            try:
                callback(event, session)
            except Exception as e:
                logger.error(f"[AUTH] Auth state listener failed on {event}: {e}", exc_info=True)

    # ---------- AuthService ----------

    def sign_up(self, db: Session, email: str, password: str, timezone: Optional[str] = None) -> AuthSession:
        email = email.strip().lower()
        if self.email_exists(db, email):
            raise ConflictError("An account with this email already exists")

        user = User(email=email, password_hash=generate_password_hash(password), timezone=timezone)
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info(f"[AUTH] Signed up user_id={user.id}")

        session = self._issue(user)
        self._notify(SIGNED_IN, session)
        return session

    def sign_in_with_password(self, db: Session, email: str, password: str) -> AuthSession:
        user = db.query(User).filter(User.email == email.strip().lower()).first()
        if not user or not check_password_hash(user.password_hash, password):
            raise AuthError("Invalid email or password")

        session = self._issue(user)
        logger.info(f"[AUTH] Signed in user_id={user.id}")
        self._notify(SIGNED_IN, session)
        return session

    def sign_out(self, token: str) -> None:
        payload = self._decode(token)
        now = int(dt.datetime.now(dt.timezone.utc).timestamp())
        with self._lock:
            # expired tokens fail decode on their own
            for jti in [k for k, exp in self._revoked.items() if exp <= now]:
                del self._revoked[jti]
            self._revoked[payload["jti"]] = payload["exp"]
        logger.info(f"[AUTH] Signed out user_id={payload.get('sub')}")
        self._notify(SIGNED_OUT, None)

    def get_session(self, db: Session, token: str) -> AuthSession:
        payload = self._decode(token)
        user = db.query(User).filter(User.id == int(payload["sub"])).first()
        if not user:
            raise AuthError("User not found")
        return AuthSession(
            access_token=token,
            expires_at=dt.datetime.fromtimestamp(payload["exp"], tz=dt.timezone.utc),
            user_id=user.id,
            email=user.email,
        )

    def email_exists(self, db: Session, email: str) -> bool:
        return db.query(User.id).filter(User.email == email.strip().lower()).first() is not None

    def on_auth_state_change(self, callback: AuthStateCallback) -> Callable[[], None]:
        key = uuid4().hex
        with self._lock:
            self._listeners[key] = callback

        def unsubscribe() -> None:
            with self._lock:
                self._listeners.pop(key, None)

        return unsubscribe


auth_service = LocalAuthService()
