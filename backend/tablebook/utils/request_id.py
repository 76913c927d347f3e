from __future__ import annotations

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

_request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)


def generate_request_id() -> str:
    return uuid.uuid4().hex


def get_request_id() -> Optional[str]:
    return _request_id_ctx.get()


@contextmanager
def request_id_scope(request_id: str | None = None) -> Iterator[str]:
    """Bind a request id (generated when missing) for the duration of the block."""
    value = request_id or generate_request_id()
    token = _request_id_ctx.set(value)
    try:
        yield value
    finally:
        _request_id_ctx.reset(token)
