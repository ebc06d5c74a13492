"""
Standalone chain queries (``errors.Is`` / ``errors.As`` style).

The AppError methods only walk AppError chains. These functions accept any
value, so they also work on native exceptions that merely carry a cause:

- an explicit ``cause`` attribute (AppError, or a foreign exception that
  follows the same convention), else
- Python's own ``__cause__`` (set by ``raise ... from ...``).

Only exceptions are walked. A plain object with a ``cause`` attribute is a
single link.

Examples:
    >>> from errchain.errors import DatabaseError, ErrorKind
    >>> try:
    ...     try:
    ...         raise DatabaseError("SELECT", "Connection refused")
    ...     except DatabaseError as exc:
    ...         raise RuntimeError("handler failed") from exc
    ... except RuntimeError as outer:
    ...     is_error(outer, ErrorKind.DATABASE)
    True

Tags:
    error-chaining, chain-query, errchain
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from errchain.errors import AppError, KindLike, kind_tag
from errchain.logging import get_logger

logger = get_logger(__name__)


def cause_of(value: Any) -> Any | None:
    """Return the structural cause link of an exception, or None for anything else."""
    if not isinstance(value, BaseException):
        return None
    cause = getattr(value, "cause", None)
    if cause is not None:
        return cause
    return value.__cause__


def iter_chain(value: Any) -> Iterator[Any]:
    """
    Yield ``value`` and then every link reachable through its causes.

    Stops at the first object seen twice, so a foreign exception graph with a
    cycle cannot loop forever.
    """
    seen: set[int] = set()
    current = value
    while current is not None:
        if id(current) in seen:
            logger.warning(
                "error_chain_cycle",
                error_type=type(current).__name__,
                depth=len(seen),
            )
            return
        seen.add(id(current))
        yield current
        current = cause_of(current)


def as_error(value: Any, kind: KindLike) -> AppError | None:
    """
    Find the first AppError in the chain of ``value`` with the given kind.

    Args:
        value: Anything; non-errors simply never match
        kind: ErrorKind member, tag string, or AppError subclass

    Returns:
        The matching node (a reference into the chain), or None
    """
    wanted = kind_tag(kind)
    for link in iter_chain(value):
        if isinstance(link, AppError) and link.tag == wanted:
            return link
    return None


def is_error(value: Any, kind: KindLike) -> bool:
    """Check if ``value`` or anything in its cause chain is an AppError of ``kind``."""
    return as_error(value, kind) is not None


def has_tag(value: Any, name: str) -> bool:
    """Check the chain of ``value`` for a node whose tag string equals ``name``."""
    return is_error(value, name)


__all__ = [
    "cause_of",
    "iter_chain",
    "as_error",
    "is_error",
    "has_tag",
]
