"""Shared utilities."""

from __future__ import annotations

import asyncio
import math
from datetime import UTC, datetime
from functools import wraps
from typing import Awaitable, Callable, ParamSpec, TypeVar

_P = ParamSpec("_P")
_R = TypeVar("_R")


def async_threadable(fn: Callable[_P, _R]) -> Callable[_P, Awaitable[_R]]:
    """Decorator that wraps a sync function to run in a thread via asyncio.to_thread.

    The decorated function becomes async. Callers simply ``await func(...)``
    instead of ``await asyncio.to_thread(func, ...)``.
    """

    @wraps(fn)
    async def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        return await asyncio.to_thread(fn, *args, **kwargs)

    return wrapper  # type: ignore[return-value]


def utcnow() -> datetime:
    """Naive UTC timestamp, the form stored in DateTime columns."""
    return datetime.now(UTC).replace(tzinfo=None)


def safe_float(val: object) -> float | None:
    """Convert a provider value to a finite float, or None if missing/invalid."""
    if val is None or isinstance(val, bool):
        return None
    try:
        f = float(val)  # type: ignore[arg-type]  # Yahoo returns mixed types
    except (TypeError, ValueError):
        return None
    if math.isnan(f) or math.isinf(f):
        return None
    return f
