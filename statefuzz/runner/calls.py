"""Invoking caller-supplied closures, sync or async."""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import Any

from statefuzz.errors import ConfigurationError, InvariantCheckError


class AsyncClosureError(ConfigurationError):
    """A coroutine closure was handed to a synchronous run."""

    default_message = "Coroutine closure passed to a synchronous run"
    default_suggestions = ["Use run_async()/run_suite_async() for async closures"]


def call_sync(fn: Callable[..., Any], *args: Any) -> Any:
    result = fn(*args)
    if inspect.isawaitable(result):
        close = getattr(result, "close", None)
        if close is not None:
            close()
        raise AsyncClosureError(
            f"{getattr(fn, '__name__', fn)!s} returned an awaitable; use the async API"
        )
    return result


async def call_async(fn: Callable[..., Any], *args: Any) -> Any:
    result = fn(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


def failure_from_outcome(outcome: Any, label: str) -> BaseException | None:
    """Turn a check's return value into an error, or None if it passed.

    ``False`` and exception instances fail; everything else passes, so
    assert-style checks returning ``None`` are fine.
    """
    if outcome is False:
        return InvariantCheckError(f"{label} returned False")
    if isinstance(outcome, BaseException):
        return outcome
    return None
