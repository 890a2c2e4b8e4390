from __future__ import annotations

import logging
from contextvars import ContextVar


_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)


def set_request_id(value: str | None) -> None:
    _request_id.set(value)


def get_request_id() -> str | None:
    return _request_id.get()


class RequestIdFilter(logging.Filter):
    """Stamps the current request id onto every record as ``request_id``."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"
        return True


def configure_logging(level: str = "INFO") -> None:
    base = logging.getLogger("pay302")
    if not any(isinstance(f, RequestIdFilter) for h in base.handlers for f in h.filters):
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s request_id=%(request_id)s %(message)s")
        )
        handler.addFilter(RequestIdFilter())
        base.addHandler(handler)
    base.setLevel((level or "INFO").upper())
