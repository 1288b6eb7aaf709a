# app/core/request_id.py
from __future__ import annotations

import contextvars
import uuid
from contextlib import contextmanager
from typing import Iterator, Optional

_request_id_ctx: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("request_id", default=None)


def set_request_id(request_id: Optional[str]) -> None:
    _request_id_ctx.set(request_id)


def get_request_id() -> Optional[str]:
    return _request_id_ctx.get()


def clear_request_id() -> None:
    _request_id_ctx.set(None)


def new_request_id() -> str:
    return uuid.uuid4().hex


@contextmanager
def with_request_id(request_id: Optional[str] = None) -> Iterator[str]:
    """
    Bind a request id for work that does not pass through the HTTP middleware,
    e.g. the CLI:

        with with_request_id():
            ... run entrypoint ...
    """
    previous = _request_id_ctx.get()
    rid = request_id or new_request_id()
    _request_id_ctx.set(rid)
    try:
        yield rid
    finally:
        _request_id_ctx.set(previous)
