from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any


_EMAIL_RE = re.compile(r"\b([A-Za-z0-9._%+-])([A-Za-z0-9._%+-]*)(@[A-Za-z0-9.-]+\.[A-Za-z]{2,})\b")
_PHONE_RE = re.compile(r"\+\d{6,15}")
_HEX_DIGEST_RE = re.compile(r"\b[0-9a-fA-F]{64}\b")

# Field names whose values never reach a log line or a debug echo.
_SENSITIVE_KEY_MARKERS = (
    "secret",
    "signature",
    "sign",
    "token",
    "authorization",
    "password",
)

REDACTED = "[REDACTED]"


def _mask_email(match: re.Match) -> str:
    first = match.group(1)
    domain = match.group(3)
    return f"{first}***{domain}"


def _mask_phone(match: re.Match) -> str:
    value = match.group(0)
    if len(value) <= 8:
        return value
    return f"{value[:6]}****{value[-2:]}"


def redact_text(value: str) -> str:
    masked = _EMAIL_RE.sub(_mask_email, value)
    masked = _PHONE_RE.sub(_mask_phone, masked)
    # anything shaped like an HMAC-SHA256 hex digest
    masked = _HEX_DIGEST_RE.sub(REDACTED, masked)
    return masked


def is_sensitive_key(key: str) -> bool:
    key_l = (key or "").lower()
    return any(marker in key_l for marker in _SENSITIVE_KEY_MARKERS)


def redact_value(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, str):
        return redact_text(value)
    if isinstance(value, Mapping):
        return redact_dict(value)
    if isinstance(value, (list, tuple)):
        return [redact_value(v) for v in value]
    return value


def redact_dict(payload: Mapping[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for k, v in payload.items():
        if is_sensitive_key(str(k)):
            out[k] = REDACTED
        else:
            out[k] = redact_value(v)
    return out
