# app/payments/status.py
from __future__ import annotations

from enum import IntEnum
from typing import Any


class PaymentStatus(IntEnum):
    COMPLETED = 1
    UNPAID = 0
    FAILED = -1
    TIMEOUT = -2


def parse_status(value: Any) -> PaymentStatus | None:
    # bool is an int subclass; True must not read as COMPLETED
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    try:
        return PaymentStatus(value)
    except ValueError:
        return None


def status_text(value: Any) -> str:
    status = parse_status(value)
    return status.name if status is not None else "UNKNOWN"


def is_complete(value: Any) -> bool:
    return parse_status(value) is PaymentStatus.COMPLETED
