# app/signing/values.py
from __future__ import annotations

import json
import math
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Union

from app.signing.errors import CanonicalizationError


def _json_string(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def format_number(value: int | float | Decimal) -> str:
    """
    Render a number the way JavaScript's Number#toString does, so both sides
    of the integration produce the same text (39.99 -> "39.99", 1.0 -> "1",
    1e21 -> "1e+21", 1e-7 -> "1e-7").
    """
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        dec = Decimal(repr(value))
    elif isinstance(value, Decimal):
        if value.is_nan():
            return "NaN"
        if value.is_infinite():
            return "Infinity" if value > 0 else "-Infinity"
        dec = value
    else:
        dec = Decimal(int(value))

    if dec.is_zero():
        return "0"

    sign, digit_tuple, exponent = dec.as_tuple()
    raw_digits = "".join(str(d) for d in digit_tuple).lstrip("0")
    digits = raw_digits.rstrip("0")
    exponent = int(exponent) + (len(raw_digits) - len(digits))

    k = len(digits)
    n = exponent + k

    if k <= n <= 21:
        body = digits + "0" * (n - k)
    elif 0 < n <= 21:
        body = digits[:n] + "." + digits[n:]
    elif -6 < n <= 0:
        body = "0." + "0" * (-n) + digits
    else:
        e = n - 1
        mantissa = digits if k == 1 else digits[0] + "." + digits[1:]
        body = f"{mantissa}e{'+' if e >= 0 else '-'}{abs(e)}"

    return "-" + body if sign else body


# -----------------------
# Tagged value tree
# -----------------------
@dataclass(frozen=True)
class StringValue:
    value: str

    def render(self) -> str:
        return self.value

    def to_json(self) -> str:
        return _json_string(self.value)


@dataclass(frozen=True)
class NumberValue:
    value: Union[int, float, Decimal]

    def render(self) -> str:
        return format_number(self.value)

    def to_json(self) -> str:
        # JSON has no NaN/Infinity; JSON.stringify writes null for them
        if isinstance(self.value, (float, Decimal)) and not _is_finite(self.value):
            return "null"
        return format_number(self.value)


@dataclass(frozen=True)
class BooleanValue:
    value: bool

    def render(self) -> str:
        return "true" if self.value else "false"

    def to_json(self) -> str:
        return self.render()


@dataclass(frozen=True)
class NullValue:
    def render(self) -> str:
        return "null"

    def to_json(self) -> str:
        return "null"


@dataclass(frozen=True)
class MapValue:
    # (key, value) pairs, sorted by key
    items: tuple[tuple[str, "ParamValue"], ...]

    def render(self) -> str:
        return self.to_json()

    def to_json(self) -> str:
        inner = ",".join(f"{_json_string(k)}:{v.to_json()}" for k, v in self.items)
        return "{" + inner + "}"


@dataclass(frozen=True)
class ArrayValue:
    items: tuple["ParamValue", ...]

    def render(self) -> str:
        return self.to_json()

    def to_json(self) -> str:
        return "[" + ",".join(v.to_json() for v in self.items) + "]"


ParamValue = Union[StringValue, NumberValue, BooleanValue, NullValue, MapValue, ArrayValue]


def _is_finite(value: float | Decimal) -> bool:
    if isinstance(value, Decimal):
        return value.is_finite()
    return math.isfinite(value)


def to_value(raw: Any) -> ParamValue:
    """
    Build the immutable value tree for one parameter. Map keys are sorted at
    every depth; array order is kept. The caller's objects are not touched.
    """
    if raw is None:
        return NullValue()
    # bool is an int subclass, check it first
    if isinstance(raw, bool):
        return BooleanValue(raw)
    if isinstance(raw, (int, float, Decimal)):
        return NumberValue(raw)
    if isinstance(raw, str):
        return StringValue(raw)
    if isinstance(raw, Mapping):
        pairs = []
        for key, item in raw.items():
            if not isinstance(key, str):
                raise CanonicalizationError(f"map keys must be strings, got {type(key).__name__}")
            pairs.append((key, to_value(item)))
        pairs.sort(key=lambda kv: kv[0])
        return MapValue(tuple(pairs))
    if isinstance(raw, (list, tuple)):
        return ArrayValue(tuple(to_value(item) for item in raw))

    raise CanonicalizationError(f"unsupported parameter type: {type(raw).__name__}")


def normalize_value(raw: Any) -> str:
    return to_value(raw).render()
