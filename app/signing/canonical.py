# app/signing/canonical.py
from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Iterable, Optional
from urllib.parse import quote

from app.signing.errors import CanonicalizationError
from app.signing.values import normalize_value


DEFAULT_EXCLUDE_KEYS: frozenset[str] = frozenset({"sign", "signature"})

TIMESTAMP_KEY = "timestamp"

# Wire contract v1: spaces are percent-encoded as %20, never "+".
# Changing this breaks every signature over a value containing a space.
SPACE_ENCODING = "%20"

# Characters left as-is by JavaScript's encodeURIComponent, besides ASCII alphanumerics.
_COMPONENT_SAFE = "-_.!~*'()"


def is_empty(value: Any) -> bool:
    """
    None, "", [] and {} are empty. 0, False and whitespace-only strings are not.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple, Mapping)):
        return len(value) == 0
    return False


def encode_component(text: str) -> str:
    try:
        return quote(text, safe=_COMPONENT_SAFE, encoding="utf-8", errors="strict")
    except UnicodeEncodeError as exc:
        raise CanonicalizationError(f"value is not encodable as UTF-8: {exc.reason}") from exc


def filter_params(
    params: Mapping[str, Any],
    exclude_keys: Optional[Iterable[str]] = None,
) -> dict[str, Any]:
    excluded = DEFAULT_EXCLUDE_KEYS if exclude_keys is None else frozenset(exclude_keys)
    return {k: v for k, v in params.items() if k not in excluded and not is_empty(v)}


def canonicalize(
    params: Mapping[str, Any],
    exclude_keys: Optional[Iterable[str]] = None,
    timestamp: Optional[int] = None,
) -> str:
    """
    Build the signing string: drop excluded and empty fields, add the external
    timestamp when the params carry none, sort by key and join the
    percent-encoded key=value pairs with '&'.
    """
    if not isinstance(params, Mapping):
        raise CanonicalizationError(f"params must be a mapping, got {type(params).__name__}")

    filtered = filter_params(params, exclude_keys)
    for key in filtered:
        if not isinstance(key, str):
            raise CanonicalizationError(f"parameter names must be strings, got {type(key).__name__}")

    if timestamp is not None and TIMESTAMP_KEY not in filtered:
        filtered[TIMESTAMP_KEY] = timestamp

    pairs = []
    for key in sorted(filtered):
        value = normalize_value(filtered[key])
        pairs.append(f"{encode_component(key)}={encode_component(value)}")

    return "&".join(pairs)
