"""
Chained error types for errchain.

Provides a base error node that wraps an earlier error as its cause, a closed
set of built-in kinds, and a factory for user-defined kinds. A chain is a
singly-linked list of nodes read head first: the most recent context at the
head, the original failure at the root.

Instead of one exception that loses the story of how a failure travelled up
the stack, every layer adds a node:

- **Kind:** What went wrong at this layer (NotFound, Database, Network, ...)
- **Message:** Human-readable description, fixed at construction
- **Cause:** The node this one wraps, if any
- **Captured trace:** Where the node was constructed (best effort)

Manifesto:
    - **Wrap, don't replace:** ``wrap()`` adds context and keeps the cause
    - **Query by kind:** ``is_kind()`` / ``as_kind()`` search the whole chain
    - **Immutable nodes:** Message, cause and kind never change after creation
    - **Serializable:** ``to_dict()`` is a stable, recursive logging record

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                          AppError                                │
        │        (kind, message, cause, captured_trace)                    │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  NotFoundError     ValidationError    DatabaseError              │
        │  (resource, id)    (field, reason)    (operation)                │
        │                                                                  │
        │  NetworkError      PermissionError    TimeoutError               │
        │  (url, status)     (action, resource) (operation, timeout_ms)    │
        │                                                                  │
        │  ConflictError     UnexpectedError    define_error(name, fn)     │
        │  (resource)        (fallback)         (props, user kind)         │
        └─────────────────────────────────────────────────────────────────┘

        head                                        root
        ┌──────────────┐ cause ┌──────────────┐ cause ┌───────────────┐
        │ [AppError]   │──────>│[NotFoundError]│──────>│[DatabaseError]│
        │ load profile │       │ User '123'    │       │ SELECT: ...   │
        └──────────────┘       └──────────────┘       └───────────────┘

Examples:
    Building and querying a chain:

    >>> db = DatabaseError("SELECT", "Connection refused")
    >>> error = NotFoundError("User", "123", cause=db).wrap("Failed to load user profile")
    >>> error.is_kind(ErrorKind.DATABASE)
    True
    >>> error.as_kind(NotFoundError).resource
    'User'
    >>> error.chain()
    "[AppError] Failed to load user profile -> [NotFoundError] User with id '123' not found -> [DatabaseError] SELECT: Connection refused"

    User-defined kinds:

    >>> RateLimitError = define_error(
    ...     "RateLimitError",
    ...     lambda p: f"Rate limited on {p['endpoint']}",
    ... )
    >>> RateLimitError({"endpoint": "/api/orders"}).tag
    'RateLimitError'

Guardrails:
    ❌ DON'T: Re-raise a bare string or generic Exception from a service layer
    ✅ DO: Return or raise an AppError subclass carrying the original as cause

    ❌ DON'T: Match on ``str(error)`` to find out what went wrong
    ✅ DO: Use ``is_kind()`` / ``as_kind()`` against the chain

Tags:
    error-handling, error-chaining, exception-hierarchy, errchain
"""

from __future__ import annotations

import inspect
import itertools
import traceback
import types
from collections.abc import Callable, Iterator, Mapping
from enum import Enum
from typing import Any, ClassVar

from errchain.settings import get_settings


class ErrorKind(str, Enum):
    """
    Closed set of built-in error kinds.

    The value of each member is the tag rendered by ``chain()``,
    ``full_stack()`` and ``to_dict()``. User-defined kinds are plain strings
    and live outside this enum.

    Attributes:
        APP: Context node produced by ``wrap()``
        NOT_FOUND: A looked-up resource does not exist
        VALIDATION: Input failed a field-level rule
        DATABASE: A database operation failed
        NETWORK: A remote call failed
        PERMISSION: The caller may not perform an action
        TIMEOUT: An operation exceeded its time budget elsewhere
        CONFLICT: A write collided with existing state
        UNEXPECTED: Fallback for anything not otherwise classified
    """

    APP = "AppError"
    NOT_FOUND = "NotFoundError"
    VALIDATION = "ValidationError"
    DATABASE = "DatabaseError"
    NETWORK = "NetworkError"
    PERMISSION = "PermissionError"
    TIMEOUT = "TimeoutError"
    CONFLICT = "ConflictError"
    UNEXPECTED = "UnexpectedError"


KindLike = ErrorKind | str | type


def kind_tag(kind: KindLike) -> str:
    """Render a kind, tag string, or AppError subclass as its tag string."""
    if isinstance(kind, type):
        kind = getattr(kind, "kind", kind.__name__)
    if isinstance(kind, ErrorKind):
        return kind.value
    return str(kind)


class AppError(Exception):
    """
    Base error node with a cause link.

    Every error in a chain is an AppError. The class-level ``kind`` decides
    which variant a node is; subclasses declare it with a class keyword
    (``class Foo(AppError, kind="Foo")``) or inherit their class name as the
    tag when they declare nothing.

    The cause is mirrored to ``__cause__`` so a raised AppError prints the
    chain in a native traceback as well.

    Examples:
        >>> error = AppError("Something failed")
        >>> error.tag
        'AppError'
        >>> error.cause is None
        True
        >>> error.wrap("Outer").root_cause() is error
        True
    """

    kind: ClassVar[ErrorKind | str] = ErrorKind.APP
    _display_name: ClassVar[str | None] = None

    def __init_subclass__(
        cls,
        *,
        kind: ErrorKind | str | None = None,
        display_name: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init_subclass__(**kwargs)
        if kind is not None:
            cls.kind = kind
        elif "kind" not in cls.__dict__:
            cls.kind = cls.__name__
        if display_name is not None:
            cls._display_name = display_name

    def __init__(
        self,
        message: str,
        *,
        cause: AppError | None = None,
        captured_trace: str | None = None,
    ):
        super().__init__(message)
        self._message = message
        self._cause = cause
        if cause is not None:
            self.__cause__ = cause
        self._captured_trace = captured_trace if captured_trace is not None else _capture_trace(self)

    # ── Identity ─────────────────────────────────────────────────

    @property
    def message(self) -> str:
        return self._message

    @property
    def cause(self) -> AppError | None:
        return self._cause

    @property
    def captured_trace(self) -> str | None:
        return self._captured_trace

    @property
    def tag(self) -> str:
        """String form of this node's kind."""
        return kind_tag(self.kind)

    @property
    def display_name(self) -> str:
        return self._display_name or self.tag

    # ── Chain building ───────────────────────────────────────────

    def wrap(self, message: str) -> AppError:
        """
        Wrap this error with additional context.

        Returns a new context node (kind ``APP``) whose cause is this error.
        The wrapped node is left untouched.
        """
        return AppError(message, cause=self)

    # ── Chain queries ────────────────────────────────────────────

    def is_kind(self, kind: KindLike) -> bool:
        """True if this node or any node in its cause chain has the given kind."""
        return self.as_kind(kind) is not None

    def as_kind(self, kind: KindLike) -> AppError | None:
        """Return the first node in the chain with the given kind, else None."""
        wanted = kind_tag(kind)
        for node in self:
            if node.tag == wanted:
                return node
        return None

    def has_tag(self, name: str) -> bool:
        """Same walk as ``is_kind`` but compares tag strings directly."""
        return any(node.tag == name for node in self)

    # ── Derived views ────────────────────────────────────────────

    def __iter__(self) -> Iterator[AppError]:
        current: AppError | None = self
        while current is not None:
            yield current
            current = current.cause

    def chain(self) -> str:
        """Get a one-line chain of ``[tag] message`` segments."""
        return " -> ".join(f"[{node.tag}] {node.message}" for node in self)

    def full_stack(self) -> str:
        """
        Get the captured traces of every node in the chain.

        Similar to Python's own "The above exception was the direct cause"
        output, but head first, with each cause introduced by ``Caused by:``.
        """
        stacks = []
        for depth, node in enumerate(self):
            prefix = "" if depth == 0 else "\nCaused by: "
            stacks.append(f"{prefix}[{node.tag}] {node.captured_trace or node.message}")
        return "".join(stacks)

    def root_cause(self) -> AppError:
        """Get the last node of the chain (self when there is no cause)."""
        current = self
        while current.cause is not None:
            current = current.cause
        return current

    def chain_list(self) -> list[AppError]:
        """Get all nodes in the chain, head first."""
        return list(self)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a recursive record for logging/serialization."""
        result: dict[str, Any] = {
            "kind": self.tag,
            "displayName": self.display_name,
            "message": self.message,
        }
        if self.captured_trace is not None:
            result["capturedTrace"] = self.captured_trace
        if self.cause is not None:
            result["cause"] = self.cause.to_dict()
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, kind={self.tag})"

    def __reduce__(self) -> tuple[Any, ...]:
        # Variant constructors take different arguments; restore from state.
        return _restore_error, (self.__class__, self.args, self.__dict__.copy())


def _restore_error(cls: type[AppError], args: tuple[Any, ...], state: dict[str, Any]) -> AppError:
    error = cls.__new__(cls, *args)
    error.__dict__.update(state)
    error.__cause__ = state.get("_cause")
    return error


def _is_construction_frame(frame: types.FrameType, error: AppError) -> bool:
    if frame.f_code is _capture_trace.__code__:
        return True
    return frame.f_code.co_name == "__init__" and frame.f_locals.get("self") is error


def _capture_trace(error: AppError) -> str | None:
    """Snapshot the call site that constructed ``error``, minus constructor frames."""
    settings = get_settings()
    if not settings.capture_trace:
        return None
    frames = itertools.dropwhile(
        lambda item: _is_construction_frame(item[0], error),
        traceback.walk_stack(inspect.currentframe()),
    )
    summary = traceback.StackSummary.extract(frames, limit=settings.trace_limit)
    summary.reverse()
    return (
        "Traceback (most recent call last):\n"
        + "".join(summary.format())
        + f"{error.display_name}: {error.message}"
    )


# =============================================================================
# BUILT-IN KINDS
# =============================================================================


class NotFoundError(AppError, kind=ErrorKind.NOT_FOUND):
    """A resource (optionally identified by ``id``) does not exist."""

    def __init__(self, resource: str, id: str | None = None, *, cause: AppError | None = None):
        self.resource = resource
        self.id = id
        message = f"{resource} with id '{id}' not found" if id else f"{resource} not found"
        super().__init__(message, cause=cause)


class ValidationError(AppError, kind=ErrorKind.VALIDATION):
    """A field failed validation."""

    def __init__(self, field: str, reason: str, *, cause: AppError | None = None):
        self.field = field
        self.reason = reason
        super().__init__(f"{field}: {reason}", cause=cause)


class DatabaseError(AppError, kind=ErrorKind.DATABASE):
    """Database query or transaction error."""

    def __init__(self, operation: str, message: str, *, cause: AppError | None = None):
        self.operation = operation
        super().__init__(f"{operation}: {message}", cause=cause)


class NetworkError(AppError, kind=ErrorKind.NETWORK):
    """
    Remote call failure.

    The message defaults to ``HTTP <status>`` when a status code is known and
    to ``Network error`` otherwise.
    """

    def __init__(
        self,
        url: str,
        status_code: int | None = None,
        message: str | None = None,
        *,
        cause: AppError | None = None,
    ):
        self.url = url
        self.status_code = status_code
        if message is None:
            message = f"HTTP {status_code}" if status_code else "Network error"
        super().__init__(f"{url}: {message}", cause=cause)


class PermissionError(AppError, kind=ErrorKind.PERMISSION):
    """Not allowed to perform ``action`` (optionally on ``resource``)."""

    def __init__(self, action: str, resource: str | None = None, *, cause: AppError | None = None):
        self.action = action
        self.resource = resource
        message = f"Cannot {action} on {resource}" if resource else f"Permission denied: {action}"
        super().__init__(message, cause=cause)


class TimeoutError(AppError, kind=ErrorKind.TIMEOUT):
    """Operation timed out (records a timeout that happened elsewhere)."""

    def __init__(self, operation: str, timeout_ms: int, *, cause: AppError | None = None):
        self.operation = operation
        self.timeout_ms = timeout_ms
        super().__init__(f"{operation} timed out after {timeout_ms}ms", cause=cause)


class ConflictError(AppError, kind=ErrorKind.CONFLICT):
    """Write conflicts with the current state of ``resource``."""

    def __init__(self, resource: str, message: str, *, cause: AppError | None = None):
        self.resource = resource
        super().__init__(f"{resource}: {message}", cause=cause)


class UnexpectedError(AppError, kind=ErrorKind.UNEXPECTED):
    """Fallback kind for failures that were never chain nodes."""

    def __init__(
        self,
        message: str,
        *,
        cause: AppError | None = None,
        captured_trace: str | None = None,
    ):
        super().__init__(message, cause=cause, captured_trace=captured_trace)


# =============================================================================
# USER-DEFINED KINDS
# =============================================================================


def define_error(
    name: str,
    message_factory: Callable[[Mapping[str, Any]], str],
    *,
    display_name: str | None = None,
) -> type[AppError]:
    """
    Create an error class for a user-defined kind.

    The returned class takes a property bag (and an optional ``cause``) and
    renders its message with ``message_factory``. Its tag is ``name``, so
    ``has_tag(name)`` finds it without holding a reference to the class.

    Examples:
        >>> PaymentFailed = define_error(
        ...     "PaymentFailedError",
        ...     lambda p: f"Payment failed: {p['reason']} ({p['code']})",
        ... )
        >>> error = PaymentFailed({"reason": "Card declined", "code": "DECLINED"})
        >>> error.message
        'Payment failed: Card declined (DECLINED)'
        >>> error.props["code"]
        'DECLINED'

    Args:
        name: Tag (and class name) of the new kind
        message_factory: Renders the message from the property bag
        display_name: Human label for ``to_dict()``; defaults to ``name``

    Returns:
        A new AppError subclass
    """

    def __init__(self, props: Mapping[str, Any] | None = None, *, cause: AppError | None = None):
        self.props = types.MappingProxyType(dict(props or {}))
        AppError.__init__(self, message_factory(self.props), cause=cause)

    def exec_body(namespace: dict[str, Any]) -> None:
        namespace["__module__"] = __name__
        namespace["__init__"] = __init__
        namespace["__doc__"] = f"User-defined error kind {name!r}."

    return types.new_class(
        name,
        (AppError,),
        {"kind": name, "display_name": display_name},
        exec_body,
    )


__all__ = [
    "ErrorKind",
    "KindLike",
    "kind_tag",
    "AppError",
    "NotFoundError",
    "ValidationError",
    "DatabaseError",
    "NetworkError",
    "PermissionError",
    "TimeoutError",
    "ConflictError",
    "UnexpectedError",
    "define_error",
]
