# routes/payments.py
from __future__ import annotations

import logging
from typing import Any, Iterator

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from app.gateway.client import GatewayClient, GatewayError
from app.signing import SigningConfigError
from schemas import CheckoutRequest, PaymentConfigResponse
from services.redaction import redact_text
from settings import Settings, get_settings

router = APIRouter(prefix="/api/payment", tags=["payments"])
logger = logging.getLogger("pay302.payments")


def get_gateway_client(cfg: Settings = Depends(get_settings)) -> Iterator[GatewayClient]:
    try:
        gateway = GatewayClient(cfg)
    except SigningConfigError:
        logger.error("payment_create_rejected reason=SIGNING_NOT_CONFIGURED")
        raise HTTPException(status_code=500, detail={"error": "SIGNING_NOT_CONFIGURED"})
    try:
        yield gateway
    finally:
        gateway.close()


def build_order_params(app_id: str, body: CheckoutRequest) -> dict[str, Any]:
    return {
        "app_id": app_id,
        "user_name": body.user_name,
        "email": str(body.email),
        "amount": body.amount,
        "back_url": body.back_url or "",
        "fail_url": body.fail_url or "",
        "suc_url": body.suc_url or "",
        "extra": body.extra or {},
    }


@router.post("/create")
def create_payment(body: CheckoutRequest, gateway: GatewayClient = Depends(get_gateway_client)):
    params = build_order_params(gateway.app_id, body)

    try:
        result = gateway.create_order(params)
    except GatewayError as exc:
        status = 500 if exc.code == "GATEWAY_NOT_CONFIGURED" else 502
        logger.error("payment_create_failed reason=%s", exc.code)
        raise HTTPException(status_code=status, detail={"error": exc.code})

    resp = result.response
    if not resp.ok:
        logger.error(
            "payment_create_failed reason=PAYMENT_API_FAILED gateway_status=%s email=%s",
            resp.status_code,
            redact_text(params["email"]),
        )
        return JSONResponse(
            status_code=resp.status_code,
            content={"error": "PAYMENT_API_FAILED", "details": resp.text},
        )

    gateway_body = resp.json if isinstance(resp.json, dict) else {}
    out: dict[str, Any] = {"success": True, **gateway_body}
    # never echo the signature outside debug mode
    out.pop("signature", None)
    if gateway.debug:
        out["signature"] = result.signature

    logger.info("payment_created email=%s amount=%s", redact_text(params["email"]), params["amount"])
    return out


@router.get("/create", response_model=PaymentConfigResponse)
def payment_config(cfg: Settings = Depends(get_settings)):
    return PaymentConfigResponse(
        api_url=(cfg.PAY302_API_URL or "").strip(),
        app_id=(cfg.PAY302_APP_ID or "").strip(),
    )
