
# app/gateway/http.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from services.redaction import redact_dict

logger = logging.getLogger("pay302.gateway")


@dataclass
class HttpResponse:
    status_code: int
    json: Optional[Any]
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class HttpClient:
    def __init__(self, timeout_s: float = 20.0, follow_redirects: bool = True, transport: httpx.BaseTransport | None = None):
        self._client = httpx.Client(timeout=timeout_s, follow_redirects=follow_redirects, transport=transport)

    def post_json(
        self,
        url: str,
        *,
        json_body: dict[str, Any],
        headers: dict[str, str] | None = None,
        debug: bool = False,
    ) -> HttpResponse:
        h = {"Content-Type": "application/json"}
        h.update(headers or {})
        r = self._client.post(url, headers=h, json=json_body)
        if debug:
            self._debug_dump("POST", url, json_body, r)
        return self._wrap(r)

    def close(self) -> None:
        self._client.close()

    @staticmethod
    def _wrap(r: httpx.Response) -> HttpResponse:
        try:
            payload = r.json()
        except ValueError:
            payload = None
        return HttpResponse(status_code=r.status_code, json=payload, text=r.text)

    @staticmethod
    def _debug_dump(method: str, url: str, json_body: Any, r: httpx.Response) -> None:
        body = redact_dict(json_body) if isinstance(json_body, dict) else None
        logger.debug("gateway_http method=%s url=%s json=%s", method, url, body)
        logger.debug("gateway_http status=%s text=%s", r.status_code, r.text[:300])
