# app/gateway/client.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from app.gateway.http import HttpClient, HttpResponse
from app.signing import Signer
from services.metrics import increment_gateway_request
from settings import Settings, is_debug

logger = logging.getLogger("pay302.gateway")


class GatewayError(RuntimeError):
    def __init__(self, code: str, message: str = ""):
        super().__init__(message or code)
        self.code = code


@dataclass(frozen=True)
class CreateOrderResult:
    response: HttpResponse
    signature: str


class GatewayClient:
    """
    Signs outgoing order-creation requests and posts them to the Pay302 API.
    The shared secret only keys the HMAC; it is never part of the payload.
    """

    def __init__(self, cfg: Settings, http: HttpClient | None = None):
        self.app_id = (cfg.PAY302_APP_ID or "").strip()
        self.api_url = (cfg.PAY302_API_URL or "").strip()
        self.debug = is_debug(cfg)
        # raises SigningConfigError on an empty secret
        self.signer = Signer(cfg.PAY302_SECRET)
        self.http = http or HttpClient(timeout_s=cfg.PAY302_HTTP_TIMEOUT_S)

    def create_order(self, params: dict[str, Any]) -> CreateOrderResult:
        if not self.api_url:
            raise GatewayError("GATEWAY_NOT_CONFIGURED", "PAY302_API_URL is not set")

        signature = self.signer.generate_signature(params)
        payload = {**params, "signature": signature}

        try:
            resp = self.http.post_json(self.api_url, json_body=payload, debug=self.debug)
        except httpx.HTTPError as exc:
            increment_gateway_request("transport_error")
            logger.warning("gateway_request_failed error=%s", type(exc).__name__)
            raise GatewayError("GATEWAY_UNAVAILABLE", str(exc)) from exc

        increment_gateway_request("ok" if resp.ok else "http_error")
        logger.info("gateway_order_created status=%s", resp.status_code)
        return CreateOrderResult(response=resp, signature=signature)

    def close(self) -> None:
        self.http.close()
