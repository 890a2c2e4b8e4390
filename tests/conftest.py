
# tests/conftest.py

from typing import Any, Dict

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.signing import generate_signature
from main import create_app
from services.metrics import reset_metrics


TEST_SECRET = "pytest-pay302-secret"
TEST_APP_ID = "app-pytest-001"
TEST_API_URL = "https://gateway.example.test/api/v1/pay/orders"


# ---------------------------
# Environment
# ---------------------------

@pytest.fixture(autouse=True)
def pay302_env(monkeypatch):
    monkeypatch.setenv("ENV", "dev")
    monkeypatch.setenv("PAY302_APP_ID", TEST_APP_ID)
    monkeypatch.setenv("PAY302_SECRET", TEST_SECRET)
    monkeypatch.setenv("PAY302_API_URL", TEST_API_URL)
    monkeypatch.setenv("IS_DEBUG", "false")
    monkeypatch.delenv("PAY302_TIMESTAMP_TOLERANCE_S", raising=False)
    reset_metrics()
    yield
    reset_metrics()


# ---------------------------
# App + client
# ---------------------------

@pytest.fixture()
def app() -> FastAPI:
    return create_app()


@pytest.fixture()
def client(app: FastAPI) -> TestClient:
    # Needed so tests can assert 500s instead of pytest re-raising server exceptions
    return TestClient(app, raise_server_exceptions=False)


# ---------------------------
# Signing helpers
# ---------------------------

def signed(payload: Dict[str, Any], secret: str = TEST_SECRET) -> Dict[str, Any]:
    body = dict(payload)
    body["signature"] = generate_signature(body, secret)
    return body


def webhook_payload(**overrides: Any) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "extra": {"source": "web", "order_id": "ORDER_1762399109268"},
        "payment_order": "P302-000123",
        "payment_fee": 0,
        "payment_amount": 39.99,
        "payment_status": 1,
        "app_id": TEST_APP_ID,
    }
    payload.update(overrides)
    return payload
