from __future__ import annotations

import contextvars

request_id: contextvars.ContextVar[str | None] = contextvars.ContextVar("request_id", default=None)
service: contextvars.ContextVar[str | None] = contextvars.ContextVar("service", default=None)
connector: contextvars.ContextVar[str | None] = contextvars.ContextVar("connector", default=None)


def bind(**fields: str | None) -> None:
    if "request_id" in fields:
        request_id.set(fields["request_id"])
    if "service" in fields:
        service.set(fields["service"])
    if "connector" in fields:
        connector.set(fields["connector"])
