from __future__ import annotations

import logging
import time

import pytest

from app.signing import generate_signature
from services.metrics import get_counter
from tests.conftest import TEST_SECRET, signed, webhook_payload


WEBHOOK_PATH = "/api/payment/checkout"


def test_valid_webhook_completed(client):
    body = signed(webhook_payload())
    r = client.post(WEBHOOK_PATH, json=body)
    assert r.status_code == 200, r.text
    j = r.json()
    assert j["success"] is True
    assert j["data"] == {
        "order_id": "ORDER_1762399109268",
        "payment_order": "P302-000123",
        "payment_status": 1,
        "is_payment_complete": True,
        "status_text": "COMPLETED",
    }
    assert "debug" not in j


@pytest.mark.parametrize(
    "status, text",
    [(0, "UNPAID"), (-1, "FAILED"), (-2, "TIMEOUT"), (7, "UNKNOWN")],
)
def test_valid_webhook_other_statuses(client, status, text):
    body = signed(webhook_payload(payment_status=status))
    r = client.post(WEBHOOK_PATH, json=body)
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert data["status_text"] == text
    assert data["is_payment_complete"] is False


def test_missing_extra_defaults_order_id(client):
    body = signed(webhook_payload(extra=None))
    r = client.post(WEBHOOK_PATH, json=body)
    assert r.status_code == 200, r.text
    assert r.json()["data"]["order_id"] == "UNKNOWN"


def test_invalid_signature_401(client):
    body = webhook_payload(signature="deadbeef")
    r = client.post(WEBHOOK_PATH, json=body)
    assert r.status_code == 401, r.text
    assert r.json()["detail"]["error"] == "INVALID_SIGNATURE"


def test_tampered_amount_401(client):
    body = signed(webhook_payload())
    body["payment_amount"] = 0.01
    r = client.post(WEBHOOK_PATH, json=body)
    assert r.status_code == 401, r.text


def test_tampered_nested_extra_401(client):
    body = signed(webhook_payload())
    body["extra"] = {"source": "web", "order_id": "SOMEONE_ELSES_ORDER"}
    r = client.post(WEBHOOK_PATH, json=body)
    assert r.status_code == 401, r.text


def test_wrong_secret_401(client):
    body = signed(webhook_payload(), secret="not-the-secret")
    r = client.post(WEBHOOK_PATH, json=body)
    assert r.status_code == 401, r.text


@pytest.mark.parametrize("missing", ["signature", "app_id", "payment_order"])
def test_missing_required_field_400(client, missing):
    body = signed(webhook_payload())
    body.pop(missing)
    r = client.post(WEBHOOK_PATH, json=body)
    assert r.status_code == 400, r.text
    assert r.json()["detail"]["error"] == "MISSING_REQUIRED_FIELDS"


def test_wrong_app_id_403(client):
    body = signed(webhook_payload(app_id="someone-else"))
    r = client.post(WEBHOOK_PATH, json=body)
    assert r.status_code == 403, r.text
    assert r.json()["detail"]["error"] == "INVALID_APP_ID"


@pytest.mark.parametrize("raw", [b"not json", b"[1, 2, 3]", b"\xff\xfe"])
def test_invalid_json_400(client, raw):
    r = client.post(WEBHOOK_PATH, content=raw, headers={"Content-Type": "application/json"})
    assert r.status_code == 400, r.text
    assert r.json()["detail"]["error"] == "INVALID_JSON"


def test_secret_not_configured_500(client, monkeypatch):
    monkeypatch.setenv("PAY302_SECRET", "   ")
    body = webhook_payload(signature="a" * 64)
    r = client.post(WEBHOOK_PATH, json=body)
    assert r.status_code == 500, r.text
    assert r.json()["detail"]["error"] == "WEBHOOK_SECRET_NOT_CONFIGURED"


def test_replay_window_enforced(client, monkeypatch):
    monkeypatch.setenv("PAY302_TIMESTAMP_TOLERANCE_S", "300")

    fresh = signed(webhook_payload(timestamp=int(time.time())))
    r = client.post(WEBHOOK_PATH, json=fresh)
    assert r.status_code == 200, r.text

    stale = signed(webhook_payload(timestamp=int(time.time()) - 600))
    r = client.post(WEBHOOK_PATH, json=stale)
    assert r.status_code == 401, r.text
    assert r.json()["detail"]["error"] == "INVALID_SIGNATURE"


def test_malformed_timestamp_rejected_not_500(client, monkeypatch):
    monkeypatch.setenv("PAY302_TIMESTAMP_TOLERANCE_S", "300")
    body = signed(webhook_payload(timestamp="yesterday"))
    r = client.post(WEBHOOK_PATH, json=body)
    assert r.status_code == 401, r.text


def test_debug_mode_echoes_redacted_payload(client, monkeypatch):
    monkeypatch.setenv("IS_DEBUG", "true")
    body = signed(webhook_payload())
    r = client.post(WEBHOOK_PATH, json=body)
    assert r.status_code == 200, r.text
    debug = r.json()["debug"]
    assert debug["signature_valid"] is True
    assert debug["received_data"]["signature"] == "[REDACTED]"
    assert debug["received_data"]["payment_order"] == "P302-000123"


def test_debug_flag_ignored_in_prod(client, monkeypatch):
    monkeypatch.setenv("ENV", "prod")
    monkeypatch.setenv("IS_DEBUG", "true")
    body = signed(webhook_payload())
    r = client.post(WEBHOOK_PATH, json=body)
    assert r.status_code == 200, r.text
    assert "debug" not in r.json()


def test_rejection_reason_logged_without_signature(client, caplog):
    caplog.set_level(logging.INFO, logger="pay302")
    good = signed(webhook_payload())
    tampered = {**good, "payment_amount": 1000}
    r = client.post(WEBHOOK_PATH, json=tampered)
    assert r.status_code == 401, r.text

    assert "webhook_signature_invalid reason=INVALID_SIGNATURE" in caplog.text
    assert generate_signature(tampered, TEST_SECRET) not in caplog.text
    assert good["signature"] not in caplog.text
    assert TEST_SECRET not in caplog.text


def test_counters_track_outcomes(client):
    client.post(WEBHOOK_PATH, json=signed(webhook_payload()))
    client.post(WEBHOOK_PATH, json=webhook_payload(signature="0" * 64))

    assert get_counter("signature_checks_total", result="valid", reason="none") == 1
    assert get_counter("signature_checks_total", result="invalid", reason="INVALID_SIGNATURE") == 1
    assert get_counter("webhook_events_total", status="COMPLETED", signature_valid="true") == 1

    text = client.get("/metrics").text
    assert 'signature_checks_total{reason="INVALID_SIGNATURE",result="invalid"} 1' in text


def test_webhook_info_get(client):
    r = client.get(WEBHOOK_PATH)
    assert r.status_code == 200, r.text
    assert "active" in r.json()["message"]
