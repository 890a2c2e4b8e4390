# app/signing/signer.py
from __future__ import annotations

import hashlib
import hmac
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Union

from app.signing.canonical import DEFAULT_EXCLUDE_KEYS, canonicalize
from app.signing.errors import SigningConfigError


Secret = Union[str, bytes]

SIGNATURE_HEX_LENGTH = hashlib.sha256().digest_size * 2


def secret_bytes(secret: Secret) -> bytes:
    if isinstance(secret, bytes):
        return secret
    return secret.encode("utf-8")


def require_secret(secret: Any) -> Secret:
    if isinstance(secret, bytes):
        if not secret.strip():
            raise SigningConfigError("signing secret must not be empty")
        return secret
    if not isinstance(secret, str) or not secret.strip():
        raise SigningConfigError("signing secret must not be empty")
    return secret


def sign(canonical: str, secret: Secret) -> str:
    return hmac.new(secret_bytes(secret), canonical.encode("utf-8"), hashlib.sha256).hexdigest()


def generate_signature(
    params: Mapping[str, Any],
    secret: Secret,
    exclude_keys: Optional[Iterable[str]] = None,
    timestamp: Optional[int] = None,
) -> str:
    return sign(canonicalize(params, exclude_keys, timestamp), secret)


@dataclass(frozen=True)
class Signer:
    """
    Holds one shared secret. Immutable, safe to share between threads and tasks.
    """

    secret: Secret = field(repr=False)
    exclude_keys: frozenset[str] = DEFAULT_EXCLUDE_KEYS

    def __post_init__(self) -> None:
        require_secret(self.secret)
        object.__setattr__(self, "exclude_keys", frozenset(self.exclude_keys))

    def canonicalize(self, params: Mapping[str, Any], timestamp: Optional[int] = None) -> str:
        return canonicalize(params, self.exclude_keys, timestamp)

    def generate_signature(self, params: Mapping[str, Any], timestamp: Optional[int] = None) -> str:
        return sign(self.canonicalize(params, timestamp), self.secret)


def quick_sign(params: Mapping[str, Any], secret: Secret) -> str:
    return Signer(secret).generate_signature(params)
