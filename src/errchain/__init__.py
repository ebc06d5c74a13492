"""errchain -- Chained, typed errors with Result-based helpers.

Manifesto:
    A failure that travels through a repository, a service and a controller
    should arrive with every layer's context attached, and the caller should
    be able to ask "was a NotFound anywhere in here?" without parsing strings.
    ``errchain`` models errors as a chain of immutable nodes and answers
    exactly that question.

Architecture::

    errors.py      AppError chain node, ErrorKind, built-in kinds, define_error
    query.py       is_error / as_error / has_tag over any value with a cause
    result.py      Ok / Err / ResultAsync container
    convert.py     from_unknown, try_catch(_async), wrap_err(_async)
    logging.py     structlog setup + error-chain processor
    settings.py    ERRCHAIN_* settings (trace capture, logging)

Examples:
    >>> from errchain import DatabaseError, NotFoundError, ErrorKind
    >>> error = NotFoundError("User", "123", cause=DatabaseError("SELECT", "Connection refused"))
    >>> error.wrap("Failed to load user profile").is_kind(ErrorKind.DATABASE)
    True
"""

from errchain.convert import from_unknown, try_catch, try_catch_async, wrap_err, wrap_err_async
from errchain.errors import (
    AppError,
    ConflictError,
    DatabaseError,
    ErrorKind,
    NetworkError,
    NotFoundError,
    PermissionError,
    TimeoutError,
    UnexpectedError,
    ValidationError,
    define_error,
)
from errchain.logging import configure_logging, get_logger, log_error
from errchain.query import as_error, has_tag, is_error, iter_chain
from errchain.result import Err, Ok, Result, ResultAsync, UnwrapError, err, ok
from errchain.settings import ErrchainSettings, get_settings

__version__ = "0.1.0"

__all__ = [
    # Errors
    "AppError",
    "ConflictError",
    "DatabaseError",
    "ErrorKind",
    "NetworkError",
    "NotFoundError",
    "PermissionError",
    "TimeoutError",
    "UnexpectedError",
    "ValidationError",
    "define_error",
    # Queries
    "as_error",
    "has_tag",
    "is_error",
    "iter_chain",
    # Result
    "Err",
    "Ok",
    "Result",
    "ResultAsync",
    "UnwrapError",
    "err",
    "ok",
    # Conversion
    "from_unknown",
    "try_catch",
    "try_catch_async",
    "wrap_err",
    "wrap_err_async",
    # Logging / settings
    "ErrchainSettings",
    "configure_logging",
    "get_logger",
    "get_settings",
    "log_error",
]
