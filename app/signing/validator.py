# app/signing/validator.py
from __future__ import annotations

import hashlib
import hmac
import logging
import math
import re
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable, Optional

from app.signing.canonical import DEFAULT_EXCLUDE_KEYS, TIMESTAMP_KEY
from app.signing.errors import CanonicalizationError
from app.signing.signer import Secret, Signer, secret_bytes


logger = logging.getLogger("pay302.signing")

_INT_RE = re.compile(r"^[+-]?[0-9]+$")

# Failure reasons. validate() collapses all of them to False; they only show up
# in logs and counters.
STALE_TIMESTAMP = "STALE_TIMESTAMP"
INVALID_TIMESTAMP = "INVALID_TIMESTAMP"
MISSING_SIGNATURE = "MISSING_SIGNATURE"
INVALID_SIGNATURE = "INVALID_SIGNATURE"
CANONICALIZATION_FAILED = "CANONICALIZATION_FAILED"


def parse_timestamp(raw: Any) -> int:
    """
    Epoch seconds from an int, an integral finite float/Decimal, or a string
    of ASCII digits. Anything else raises ValueError.
    """
    if isinstance(raw, bool):
        raise ValueError("timestamp must be numeric")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        if not math.isfinite(raw) or not raw.is_integer():
            raise ValueError("timestamp must be whole epoch seconds")
        return int(raw)
    if isinstance(raw, Decimal):
        if not raw.is_finite() or raw != raw.to_integral_value():
            raise ValueError("timestamp must be whole epoch seconds")
        return int(raw)
    if isinstance(raw, str):
        text = raw.strip()
        if _INT_RE.match(text):
            return int(text)
    raise ValueError("timestamp is not parseable")


@dataclass(frozen=True)
class Validator:
    """
    Verifies signed parameter sets. Construction fails on an empty secret;
    after that every per-message problem resolves to False.
    """

    secret: Secret = field(repr=False)
    exclude_keys: frozenset[str] = DEFAULT_EXCLUDE_KEYS
    clock: Callable[[], float] = field(default=time.time, repr=False, compare=False)

    def __post_init__(self) -> None:
        signer = Signer(self.secret, frozenset(self.exclude_keys))
        object.__setattr__(self, "exclude_keys", signer.exclude_keys)
        object.__setattr__(self, "_signer", signer)

    @property
    def signer(self) -> Signer:
        return self._signer  # type: ignore[attr-defined]

    def generate_signature(self, params: Mapping[str, Any], timestamp: Optional[int] = None) -> str:
        return self.signer.generate_signature(params, timestamp)

    def check(
        self,
        params: Mapping[str, Any],
        signature: Any,
        timestamp_tolerance: Optional[int] = None,
    ) -> tuple[bool, str | None]:
        ok, reason = self._check(params, signature, timestamp_tolerance)
        if not ok:
            logger.warning("signature_check_failed reason=%s", reason)
        return ok, reason

    def validate(
        self,
        params: Mapping[str, Any],
        signature: Any,
        timestamp_tolerance: Optional[int] = None,
    ) -> bool:
        return self.check(params, signature, timestamp_tolerance)[0]

    def _check(
        self,
        params: Mapping[str, Any],
        signature: Any,
        timestamp_tolerance: Optional[int],
    ) -> tuple[bool, str | None]:
        if not isinstance(params, Mapping):
            return False, CANONICALIZATION_FAILED

        if timestamp_tolerance is not None:
            raw_ts = params.get(TIMESTAMP_KEY)
            if raw_ts is not None and raw_ts != "":
                try:
                    ts = parse_timestamp(raw_ts)
                except ValueError:
                    return False, INVALID_TIMESTAMP
                now = int(self.clock())
                if abs(now - ts) > timestamp_tolerance:
                    return False, STALE_TIMESTAMP

        if isinstance(signature, bytes):
            try:
                signature = signature.decode("ascii")
            except UnicodeDecodeError:
                return False, INVALID_SIGNATURE
        if signature is None or signature == "":
            return False, MISSING_SIGNATURE
        if not isinstance(signature, str):
            return False, INVALID_SIGNATURE

        try:
            expected = self.signer.generate_signature(params)
        except (CanonicalizationError, RecursionError, TypeError, ValueError):
            return False, CANONICALIZATION_FAILED

        try:
            matched = self._digests_match(expected, signature)
        except UnicodeEncodeError:
            return False, INVALID_SIGNATURE

        if not matched:
            return False, INVALID_SIGNATURE
        return True, None

    def _digests_match(self, expected: str, supplied: str) -> bool:
        # Both sides are MACed to fixed-size digests first, so the comparison
        # time does not depend on the supplied length or where it diverges.
        key = secret_bytes(self.secret)
        a = hmac.new(key, expected.encode("utf-8"), hashlib.sha256).digest()
        b = hmac.new(key, supplied.encode("utf-8"), hashlib.sha256).digest()
        return hmac.compare_digest(a, b)


def quick_validate(params: Mapping[str, Any], signature: Any, secret: Secret) -> bool:
    return Validator(secret).validate(params, signature)
