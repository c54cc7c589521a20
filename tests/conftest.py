"""
Shared fixtures: in-memory SQLite, a TestClient with the DB, auth, change feed
and webhook dependencies overridden, and mock transports for outbound HTTP.
All tests run without network access.
"""
import json
import os

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from fittrack import models  # noqa
from fittrack.core.config import Settings
from fittrack.db.base import Base
from fittrack.deps import (
    get_auth_service,
    get_change_feed,
    get_db,
    get_http_transport,
    get_webhook_client,
)
from fittrack.main import app
from fittrack.models.user import User
from fittrack.services.auth import LocalAuthService
from fittrack.services.realtime import ChangeFeed
from fittrack.services.webhooks import WebhookClient

PASSWORD = "Secret123!"

WEBHOOK_SETTINGS = Settings(
    n8n_onboarding_webhook_url="http://n8n.local/webhook/onboarding",
    n8n_meal_log_webhook_url="http://n8n.local/webhook/meal-log",
    n8n_recommendations_webhook_url="http://n8n.local/webhook/recommendations",
    n8n_ai_recommendations_webhook_url="http://n8n.local/webhook/ai-recommendations",
    n8n_chat_webhook_url="http://n8n.local/webhook/chat",
)


class FakeWorkflows:
    """
    Stands in for the n8n server: records every request and answers with
    the response registered for the URL path (default: {"success": true}).
    """

    def __init__(self):
        self.requests = []
        self.responses = {}

    def respond(self, path: str, status_code: int = 200, json_body=None, text=None):
        self.responses[path] = (status_code, json_body, text)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status_code, json_body, text = self.responses.get(
            request.url.path, (200, {"success": True}, None)
        )
        if text is not None:
            return httpx.Response(status_code, text=text)
        return httpx.Response(status_code, json=json_body)

    def payloads(self, path: str):
        return [json.loads(r.content) for r in self.requests if r.url.path == path]


class FakeOpenFoodFacts:
    """Answers product lookups from a dict of barcode -> product."""

    def __init__(self):
        self.products = {}
        self.calls = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        code = request.url.path.rsplit("/", 1)[-1]
        product = self.products.get(code)
        if product is None:
            return httpx.Response(404, json={"status": 0})
        return httpx.Response(200, json={"status": 1, "product": product})


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    Session = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = Session()
    yield session
    session.close()


@pytest.fixture
def workflows():
    return FakeWorkflows()


@pytest.fixture
def off():
    return FakeOpenFoodFacts()


@pytest.fixture
def webhook_client(workflows):
    return WebhookClient(config=WEBHOOK_SETTINGS, transport=httpx.MockTransport(workflows))


@pytest.fixture
def feed():
    return ChangeFeed()


@pytest.fixture
def auth():
    return LocalAuthService(secret_key="test-secret", expire_minutes=60)


@pytest.fixture
def client(engine, webhook_client, feed, auth, off):
    Session = sessionmaker(bind=engine, autocommit=False, autoflush=False)

    def override_get_db():
        session = Session()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_webhook_client] = lambda: webhook_client
    app.dependency_overrides[get_change_feed] = lambda: feed
    app.dependency_overrides[get_auth_service] = lambda: auth
    app.dependency_overrides[get_http_transport] = lambda: httpx.MockTransport(off)
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
    app.dependency_overrides.clear()


def sign_up(client, email="anna@fittrack.app", password=PASSWORD, timezone=None):
    resp = client.post(
        "/api/auth/signup",
        json={
            "email": email,
            "password": password,
            "confirm_password": password,
            "timezone": timezone,
        },
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.fixture
def session(client):
    return sign_up(client)


@pytest.fixture
def headers(session):
    return {"Authorization": f"Bearer {session['access_token']}"}


@pytest.fixture
def signup(client):
    def _signup(**kwargs):
        return sign_up(client, **kwargs)

    return _signup


@pytest.fixture
def user(db):
    row = User(email="unit@fittrack.app", password_hash="x", timezone="UTC")
    db.add(row)
    db.commit()
    db.refresh(row)
    return row
