"""
Bridges between raised exceptions and error chains.

``from_unknown`` turns any caught value into an AppError, ``try_catch`` /
``try_catch_async`` run code inside a boundary that returns a Result instead
of raising, and ``wrap_err`` / ``wrap_err_async`` add context to a failed
Result while passing successes through.

Architecture:
    ::

        fn() raises ───> map_error(exc) ───> Err(AppError)
        fn() returns ──────────────────────> Ok(value)

        from_unknown(value)
          AppError ............ returned as is
          BaseException ....... UnexpectedError(str(exc)), foreign traceback,
                                foreign cause converted recursively
          anything else ....... UnexpectedError(str(value))

Examples:
    >>> try_catch(lambda: 42)
    Ok(42)
    >>> try_catch(lambda: int("x")).unwrap_err().tag
    'UnexpectedError'
    >>> from_unknown("plain string").message
    'plain string'

Tags:
    exception-bridge, try-catch, error-conversion, errchain
"""

from __future__ import annotations

import traceback
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from errchain.errors import AppError, UnexpectedError
from errchain.logging import get_logger
from errchain.query import iter_chain
from errchain.result import Err, Ok, Result, ResultAsync

T = TypeVar("T")
E = TypeVar("E")

logger = get_logger(__name__)


def _foreign_trace(exc: BaseException) -> str | None:
    if exc.__traceback__ is None:
        return None
    lines = traceback.format_exception(type(exc), exc, exc.__traceback__, chain=False)
    return "".join(lines).rstrip("\n")


def _convert_link(value: Any, cause: AppError | None) -> AppError:
    if isinstance(value, BaseException):
        logger.debug("foreign_error_converted", error_type=type(value).__name__)
        return UnexpectedError(str(value), cause=cause, captured_trace=_foreign_trace(value))
    return UnexpectedError(str(value), cause=cause)


def from_unknown(value: Any) -> AppError:
    """
    Convert anything caught or rejected into an AppError.

    An AppError is returned unchanged (same object). A foreign exception
    becomes an UnexpectedError with its message and, when it was raised, its
    traceback; its cause link (``cause`` or ``__cause__``) is converted the
    same way, stopping at the first AppError, which is kept as is. Any other
    value becomes an UnexpectedError whose message is ``str(value)``.
    """
    if isinstance(value, AppError):
        return value

    links = []
    for link in iter_chain(value):
        links.append(link)
        if isinstance(link, AppError):
            break
    if not links:
        return UnexpectedError(str(value))

    node: AppError | None = None
    for link in reversed(links):
        node = link if isinstance(link, AppError) else _convert_link(link, node)
    return node


def try_catch(
    fn: Callable[[], T],
    map_error: Callable[[Exception], E] = from_unknown,
) -> Result[T, E]:
    """
    Execute a function and return a Result.

    Args:
        fn: Zero-argument callable that may raise
        map_error: Turns the caught exception into the Err value

    Returns:
        Ok(fn()) on return, Err(map_error(exc)) if fn raises
    """
    try:
        return Ok(fn())
    except Exception as exc:
        return Err(map_error(exc))


def try_catch_async(
    fn: Callable[[], Awaitable[T]],
    map_error: Callable[[Exception], E] = from_unknown,
) -> ResultAsync[T, E]:
    """
    Execute an async function and return a ResultAsync.

    ``fn`` is not called, and no coroutine is created, until the ResultAsync is
    first awaited. The operation then runs once to completion (or failure)
    before the Result settles, and every awaiter shares it. A ResultAsync that
    is never awaited never runs ``fn``. Cancellation is not contained:
    ``asyncio.CancelledError`` propagates to the awaiter.
    """

    async def run() -> Result[T, E]:
        try:
            return Ok(await fn())
        except Exception as exc:
            return Err(map_error(exc))

    return ResultAsync.defer(run)


def wrap_err(message: str) -> Callable[[Result[T, Any]], Result[T, AppError]]:
    """Adapter that wraps the error of a failed Result with context."""

    def adapt(result: Result[T, Any]) -> Result[T, AppError]:
        return result.map_err(lambda e: from_unknown(e).wrap(message))

    return adapt


def wrap_err_async(message: str) -> Callable[[ResultAsync[T, Any]], ResultAsync[T, AppError]]:
    """Adapter that wraps the error of a failed ResultAsync with context."""

    def adapt(result: ResultAsync[T, Any]) -> ResultAsync[T, AppError]:
        return result.map_err(lambda e: from_unknown(e).wrap(message))

    return adapt


__all__ = [
    "from_unknown",
    "try_catch",
    "try_catch_async",
    "wrap_err",
    "wrap_err_async",
]
