from collections.abc import Generator
from typing import Optional

import httpx
from fastapi import Depends, Header
from sqlalchemy.orm import Session

from fittrack.core.errors import AuthError
from fittrack.db.session import SessionLocal
from fittrack.models.user import User
from fittrack.services.auth import AuthService, auth_service
from fittrack.services.realtime import ChangeFeed, change_feed
from fittrack.services.webhooks import WebhookClient, webhook_client


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_auth_service() -> AuthService:
    return auth_service


def get_change_feed() -> ChangeFeed:
    return change_feed


def get_webhook_client() -> WebhookClient:
    return webhook_client


def get_http_transport() -> Optional[httpx.AsyncBaseTransport]:
    """Transport for outbound lookups (OpenFoodFacts); None = real network."""
    return None


def get_bearer_token(authorization: str = Header("", alias="Authorization")) -> str:
    """
    Token from "Authorization: Bearer <token>".
    Raises AuthError (401) if the header is missing or malformed.
    """
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthError("Missing Bearer token")
    return token.strip()


def get_current_user(
    token: str = Depends(get_bearer_token),
    db: Session = Depends(get_db),
    auth: AuthService = Depends(get_auth_service),
) -> User:
    session = auth.get_session(db, token)
    user = db.query(User).filter(User.id == session.user_id).first()
    if not user:
        raise AuthError("User not found")
    return user
