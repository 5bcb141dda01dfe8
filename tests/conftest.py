"""Shared fixtures: explicit settings, mocked integrations, app client."""

from __future__ import annotations

import hashlib
import hmac
import json
import time
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from app.config import Settings, get_settings
from app.integrations import Integrations, get_integrations
from app.main import app
from app.routers import contact

WEBHOOK_SECRET = "whsec_test_secret"


def sign_payload(body: bytes, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    """Compute a valid stripe-signature header for `body`."""
    ts = int(time.time()) if timestamp is None else timestamp
    sig = hmac.new(secret.encode(), f"{ts}.".encode() + body, hashlib.sha256).hexdigest()
    return f"t={ts},v1={sig}"


def make_event(event_type: str, obj: dict, event_id: str = "evt_test_1") -> bytes:
    return json.dumps({"id": event_id, "type": event_type, "data": {"object": obj}}).encode()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        stripe_secret_key="sk_test_key",
        stripe_webhook_secret=WEBHOOK_SECRET,
        email_service_url="https://mail.example.test/send",
        email_api_key="mail-key",
        backend_api_url="https://backend.example.test",
        backend_api_key="backend-key",
        admin_email="admin@example.test",
        contact_email="contact@example.test",
    )


def _store() -> MagicMock:
    store = MagicMock()
    store.put = AsyncMock()
    return store


@pytest.fixture
def integrations(settings: Settings) -> Integrations:
    """Every integration configured, each one a mock."""
    return Integrations(
        settings=settings,
        stripe=AsyncMock(),
        email=AsyncMock(),
        backend=AsyncMock(),
        subscriptions=_store(),
        contacts=_store(),
    )


@pytest.fixture
def client(settings: Settings, integrations: Integrations):
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_integrations] = lambda: integrations
    contact.limiter.enabled = False
    try:
        with TestClient(app, raise_server_exceptions=False) as c:
            yield c
    finally:
        app.dependency_overrides.clear()
        contact.limiter.enabled = True
