


# routes/webhooks.py
from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request

from app.payments.status import PaymentStatus, is_complete, parse_status, status_text
from app.signing import SigningConfigError, Validator
from schemas import WebhookResult
from services.metrics import increment_signature_check, increment_webhook_event
from services.redaction import redact_dict, redact_text
from settings import Settings, get_settings, is_debug


router = APIRouter(prefix="/api/payment", tags=["webhooks"])
logger = logging.getLogger("pay302.webhooks")

REQUIRED_FIELDS = ("signature", "app_id", "payment_order")

_STATUS_EVENTS = {
    PaymentStatus.COMPLETED: (logging.INFO, "payment_completed"),
    PaymentStatus.UNPAID: (logging.INFO, "payment_unpaid"),
    PaymentStatus.FAILED: (logging.WARNING, "payment_failed"),
    PaymentStatus.TIMEOUT: (logging.WARNING, "payment_timeout"),
}


def _extract_order_refs(payload: dict[str, Any]) -> tuple[str, str]:
    """
    The merchant's own order id travels inside the signed `extra` object.
    """
    extra = payload.get("extra")
    if not isinstance(extra, dict):
        return "UNKNOWN", "unknown"
    order_id = str(extra.get("order_id") or "").strip() or "UNKNOWN"
    source = str(extra.get("source") or "").strip() or "unknown"
    return order_id, source


def _reject(status_code: int, error: str, *, payload: dict[str, Any] | None = None) -> HTTPException:
    payment_order = payload.get("payment_order") if payload else None
    logger.warning(
        "webhook_rejected reason=%s payment_order=%s",
        error,
        redact_text(str(payment_order or "")),
    )
    increment_webhook_event("rejected", signature_valid=False)
    return HTTPException(status_code=status_code, detail={"success": False, "error": error})


def _log_status(status: PaymentStatus | None, raw_status: Any, order_id: str, payment_order: str, payload: dict[str, Any]) -> None:
    if status is None:
        logger.warning(
            "payment_status_unknown order_id=%s payment_order=%s payment_status=%r",
            order_id,
            payment_order,
            raw_status,
        )
        return

    level, event = _STATUS_EVENTS[status]
    logger.log(
        level,
        "%s order_id=%s payment_order=%s amount=%s fee=%s",
        event,
        order_id,
        payment_order,
        payload.get("payment_amount"),
        payload.get("payment_fee"),
    )


@router.post("/checkout")
async def payment_webhook(req: Request, cfg: Settings = Depends(get_settings)):
    try:
        payload = await req.json()
    except ValueError:
        raise _reject(400, "INVALID_JSON")

    if not isinstance(payload, dict):
        raise _reject(400, "INVALID_JSON")

    if any(not payload.get(field) for field in REQUIRED_FIELDS):
        raise _reject(400, "MISSING_REQUIRED_FIELDS", payload=payload)

    if str(payload["app_id"]) != (cfg.PAY302_APP_ID or "").strip():
        raise _reject(403, "INVALID_APP_ID", payload=payload)

    try:
        validator = Validator(cfg.PAY302_SECRET)
    except SigningConfigError:
        logger.error("webhook_rejected reason=WEBHOOK_SECRET_NOT_CONFIGURED")
        raise HTTPException(status_code=500, detail={"success": False, "error": "WEBHOOK_SECRET_NOT_CONFIGURED"})

    sig_ok, sig_reason = validator.check(
        payload,
        payload["signature"],
        timestamp_tolerance=cfg.PAY302_TIMESTAMP_TOLERANCE_S,
    )
    increment_signature_check(sig_ok, sig_reason)

    if not sig_ok:
        # the specific reason stays in logs; the sender only learns the signature was rejected
        logger.warning(
            "webhook_signature_invalid reason=%s payment_order=%s",
            sig_reason,
            redact_text(str(payload["payment_order"])),
        )
        increment_webhook_event("rejected", signature_valid=False)
        raise HTTPException(status_code=401, detail={"success": False, "error": "INVALID_SIGNATURE"})

    order_id, source = _extract_order_refs(payload)
    payment_order = str(payload["payment_order"])
    raw_status = payload.get("payment_status")
    status = parse_status(raw_status)

    logger.info(
        "webhook_received signature_valid=true order_id=%s payment_order=%s status=%s source=%s",
        order_id,
        payment_order,
        status_text(raw_status),
        source,
    )
    _log_status(status, raw_status, order_id, payment_order, payload)
    increment_webhook_event(status_text(raw_status), signature_valid=True)

    result = WebhookResult(
        order_id=order_id,
        payment_order=payment_order,
        payment_status=raw_status,
        is_payment_complete=is_complete(raw_status),
        status_text=status_text(raw_status),
    )
    resp: dict[str, Any] = {
        "success": True,
        "message": "Webhook processed successfully",
        "data": result.model_dump(),
    }
    if is_debug(cfg):
        resp["debug"] = {"signature_valid": True, "received_data": redact_dict(payload)}
    return resp


@router.get("/checkout")
def payment_webhook_info():
    return {
        "message": "Payment webhook endpoint is active",
        "note": "This endpoint only accepts POST requests from the payment platform",
    }
