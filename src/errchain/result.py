"""
Result envelope for fallible computations without raising.

Provides ``Ok[T]`` / ``Err[E]`` for synchronous code and ``ResultAsync`` for
awaitable code. The error-chain helpers in :mod:`errchain.convert` are written
purely against this contract: ``is_ok`` / ``is_err``, ``map``, ``map_err``,
``and_then``, ``or_else`` and ``match``.

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                   Result[T, E] (alias)                       │
        ├─────────────────┬─────────────────┬─────────────────────────┤
        │     Ok[T]       │     Err[E]      │     ResultAsync[T, E]    │
        │   (Success)     │   (Failure)     │   (awaitable Result)     │
        ├─────────────────┼─────────────────┼─────────────────────────┤
        │ • value: T      │ • error: E      │ • map() / map_err()      │
        │ • map()         │ • map_err()     │ • and_then() / or_else() │
        │ • and_then()    │ • or_else()     │ • match()                │
        │ • match()       │ • match()       │ • await -> Result        │
        └─────────────────┴─────────────────┴─────────────────────────┘

Examples:
    Pattern matching:

    >>> from errchain.errors import NotFoundError
    >>> def find_user(user_id: str) -> Result[dict, NotFoundError]:
    ...     if user_id != "user-1":
    ...         return err(NotFoundError("User", user_id))
    ...     return ok({"id": user_id})
    >>> match find_user("user-9"):
    ...     case Ok(user):
    ...         print(user["id"])
    ...     case Err(error):
    ...         print(error.chain())
    [NotFoundError] User with id 'user-9' not found

    Chaining:

    >>> ok(10).map(lambda x: x * 2).and_then(lambda x: ok(x + 1)).unwrap()
    21

Guardrails:
    ❌ DON'T: Call unwrap() on a Result you have not checked
    ✅ DO: Use match(), unwrap_or() or pattern matching

    ❌ DON'T: Raise inside map()/and_then() callbacks
    ✅ DO: Return err(...) from and_then() when the step can fail

Tags:
    result-pattern, error-handling, functional-programming, async, errchain
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Generator
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from errchain.errors import AppError

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")
F = TypeVar("F")


class UnwrapError(Exception):
    """Raised when a value is unwrapped from the wrong side of a Result."""


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """
    Successful result containing a value.

    Examples:
        >>> Ok(42).is_ok()
        True
        >>> Ok(10).map(lambda x: x * 2).unwrap()
        20
        >>> Ok(5).match(lambda v: f"got {v}", lambda e: "failed")
        'got 5'
    """

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Get the value. Safe for Ok."""
        return self.value

    def unwrap_err(self) -> Any:
        raise UnwrapError(f"Called unwrap_err on Ok({self.value!r})")

    def unwrap_or(self, default: T) -> T:
        """Get value or default (always returns value for Ok)."""
        return self.value

    def unwrap_or_else(self, f: Callable[[Any], T]) -> T:
        return self.value

    def map(self, f: Callable[[T], U]) -> Ok[U]:
        """Transform the value if Ok."""
        return Ok(f(self.value))

    def map_err(self, f: Callable[[Any], F]) -> Ok[T]:
        """Transform error if Err (no-op for Ok)."""
        return self

    def and_then(self, f: Callable[[T], Result[U, E]]) -> Result[U, E]:
        """Chain to another Result-returning function."""
        return f(self.value)

    flat_map = and_then

    def or_else(self, f: Callable[[Any], Result[T, F]]) -> Ok[T]:
        """Return self if Ok, otherwise call f with error."""
        return self

    def inspect(self, f: Callable[[T], None]) -> Ok[T]:
        """Call f with value for side effects, return self."""
        f(self.value)
        return self

    def inspect_err(self, f: Callable[[Any], None]) -> Ok[T]:
        return self

    def match(self, on_ok: Callable[[T], U], on_err: Callable[[Any], U]) -> U:
        """Apply ``on_ok`` to the value."""
        return on_ok(self.value)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"ok": True, "value": self.value}

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """
    Failed result containing an error.

    ``map()`` and ``and_then()`` pass an Err through unchanged; ``map_err()``
    and ``or_else()`` are where errors get wrapped or recovered.

    Examples:
        >>> from errchain.errors import DatabaseError
        >>> failure = Err(DatabaseError("SELECT", "Timeout"))
        >>> failure.map(lambda x: x * 2).is_err()
        True
        >>> failure.map_err(lambda e: e.wrap("Failed to get user")).error.chain()
        '[AppError] Failed to get user -> [DatabaseError] SELECT: Timeout'
        >>> failure.unwrap_or("default")
        'default'
    """

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> Any:
        """Raise the error. Use only when you're sure it's Ok."""
        if isinstance(self.error, BaseException):
            raise self.error
        raise UnwrapError(f"Called unwrap on Err({self.error!r})")

    def unwrap_err(self) -> E:
        return self.error

    def unwrap_or(self, default: T) -> T:
        """Get default since this is Err."""
        return default

    def unwrap_or_else(self, f: Callable[[E], T]) -> T:
        """Call f with error to get value."""
        return f(self.error)

    def map(self, f: Callable[[Any], U]) -> Err[E]:
        """No-op for Err."""
        return self

    def map_err(self, f: Callable[[E], F]) -> Err[F]:
        """Transform the error."""
        return Err(f(self.error))

    def and_then(self, f: Callable[[Any], Result[U, E]]) -> Err[E]:
        """No-op for Err."""
        return self

    flat_map = and_then

    def or_else(self, f: Callable[[E], Result[T, F]]) -> Result[T, F]:
        """Call f with error to try recovery."""
        return f(self.error)

    def inspect(self, f: Callable[[Any], None]) -> Err[E]:
        return self

    def inspect_err(self, f: Callable[[E], None]) -> Err[E]:
        """Call f with error for side effects, return self."""
        f(self.error)
        return self

    def match(self, on_ok: Callable[[Any], U], on_err: Callable[[E], U]) -> U:
        """Apply ``on_err`` to the error."""
        return on_err(self.error)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        if isinstance(self.error, AppError):
            return {"ok": False, "error": self.error.to_dict()}
        return {
            "ok": False,
            "error": {
                "kind": type(self.error).__name__,
                "message": str(self.error),
            },
        }

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Ok[T] | Err[E]


def ok(value: T) -> Ok[T]:
    """Construct a successful Result."""
    return Ok(value)


def err(error: E) -> Err[E]:
    """Construct a failed Result."""
    return Err(error)


async def _settle(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class ResultAsync(Generic[T, E]):
    """
    Awaitable Result.

    Wraps an operation that produces a ``Result`` and offers the same
    combinators as ``Ok`` / ``Err``. Callbacks may be plain or async, and
    ``and_then`` / ``or_else`` callbacks may return a ``Result`` or another
    ``ResultAsync``.

    The operation starts on the first await and runs once as an asyncio task.
    Every awaiter, including concurrent ones and combinators built on the
    same instance, shares that task and receives the same settled ``Result``.

    Examples:
        >>> async def load() -> int:
        ...     return 21
        >>> async def main():
        ...     result = await ResultAsync.from_awaitable(load(), lambda exc: exc).map(lambda x: x * 2)
        ...     return result.unwrap()
    """

    __slots__ = ("_factory", "_task")

    def __init__(self, awaitable: Awaitable[Result[T, E]]):
        self._factory: Callable[[], Awaitable[Result[T, E]]] = lambda: awaitable
        self._task: asyncio.Future[Result[T, E]] | None = None

    @classmethod
    def defer(cls, factory: Callable[[], Awaitable[Result[T, E]]]) -> ResultAsync[T, E]:
        """Build a ResultAsync that calls ``factory`` only when first awaited."""
        pending = cls.__new__(cls)
        pending._factory = factory
        pending._task = None
        return pending

    @classmethod
    def from_awaitable(
        cls,
        awaitable: Awaitable[T],
        map_error: Callable[[Exception], E],
    ) -> ResultAsync[T, E]:
        """Settle ``awaitable`` into Ok, or Err(map_error(exc)) if it raises."""

        async def run() -> Result[T, E]:
            try:
                return Ok(await awaitable)
            except Exception as exc:
                return Err(map_error(exc))

        return cls.defer(run)

    @classmethod
    def from_result(cls, result: Result[T, E]) -> ResultAsync[T, E]:
        """Lift an already-settled Result."""

        async def run() -> Result[T, E]:
            return result

        return cls.defer(run)

    def __await__(self) -> Generator[Any, None, Result[T, E]]:
        if self._task is None:
            self._task = asyncio.ensure_future(self._factory())
        return self._task.__await__()

    def map(self, f: Callable[[T], U | Awaitable[U]]) -> ResultAsync[U, E]:
        async def run() -> Result[U, E]:
            result = await self
            if result.is_err():
                return result
            return Ok(await _settle(f(result.value)))

        return ResultAsync.defer(run)

    def map_err(self, f: Callable[[E], F | Awaitable[F]]) -> ResultAsync[T, F]:
        async def run() -> Result[T, F]:
            result = await self
            if result.is_ok():
                return result
            return Err(await _settle(f(result.error)))

        return ResultAsync.defer(run)

    def and_then(self, f: Callable[[T], Any]) -> ResultAsync[U, E]:
        async def run() -> Result[U, E]:
            result = await self
            if result.is_err():
                return result
            return await _settle(f(result.value))

        return ResultAsync.defer(run)

    def or_else(self, f: Callable[[E], Any]) -> ResultAsync[T, F]:
        async def run() -> Result[T, F]:
            result = await self
            if result.is_ok():
                return result
            return await _settle(f(result.error))

        return ResultAsync.defer(run)

    async def match(self, on_ok: Callable[[T], Any], on_err: Callable[[E], Any]) -> Any:
        """Await the result and apply the matching callback."""
        result = await self
        return await _settle(result.match(on_ok, on_err))

    async def is_ok(self) -> bool:
        return (await self).is_ok()

    async def is_err(self) -> bool:
        return (await self).is_err()

    async def unwrap_or(self, default: T) -> T:
        return (await self).unwrap_or(default)

    def __repr__(self) -> str:
        task = self._task
        if task is None or not task.done() or task.cancelled() or task.exception() is not None:
            return "ResultAsync(pending)"
        return f"ResultAsync({task.result()!r})"


__all__ = [
    "Result",
    "Ok",
    "Err",
    "ResultAsync",
    "UnwrapError",
    "ok",
    "err",
]
