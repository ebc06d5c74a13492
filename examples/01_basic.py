#!/usr/bin/env python3
"""Error Chains — Wrapping Failures With Context and Querying by Kind.

================================================================================
WHAT IS AN ERROR CHAIN?
================================================================================

Every layer that sees a failure adds a node that points at the failure it
received::

    [AppError] Failed to load user profile          <- head (controller)
      -> [NotFoundError] User with id '123' not found   (service)
      -> [DatabaseError] SELECT: Connection refused     <- root (repository)

The head answers "what was I doing?", the root answers "what actually broke?",
and ``is_kind()`` / ``as_kind()`` answer "did X happen anywhere in between?".


================================================================================
EXAMPLE USAGE
================================================================================

Run this example:
    python examples/01_basic.py

See Also:
    - :mod:`errchain.errors` — AppError and built-in kinds
    - :mod:`errchain.query` — is_error / as_error over any exception
"""
from errchain import (
    DatabaseError,
    ErrorKind,
    NotFoundError,
    ValidationError,
    as_error,
    define_error,
    from_unknown,
    is_error,
    try_catch,
)


def main():
    print("=" * 60)
    print("Error Chain Examples")
    print("=" * 60)

    # === 1. Building a chain ===
    print("\n[1] Building a chain")

    db_error = DatabaseError("SELECT", "Connection refused")
    not_found = NotFoundError("User", "123", cause=db_error)
    error = not_found.wrap("Failed to load user profile")
    print(f"  {error.chain()}")
    print(f"  depth={len(error.chain_list())} root={error.root_cause().tag}")

    # === 2. Querying by kind ===
    print("\n[2] Querying by kind")

    for kind in (ErrorKind.NOT_FOUND, ErrorKind.DATABASE, ErrorKind.VALIDATION):
        print(f"  is_kind({kind.value}): {error.is_kind(kind)}")

    found = error.as_kind(NotFoundError)
    print(f"  as_kind(NotFoundError): resource={found.resource} id={found.id}")

    # === 3. Native exceptions ===
    print("\n[3] Native exceptions with a cause")

    try:
        try:
            raise ValidationError("email", "Invalid format")
        except ValidationError as exc:
            raise RuntimeError("signup failed") from exc
    except RuntimeError as outer:
        print(f"  is_error(RuntimeError, ValidationError): {is_error(outer, ValidationError)}")
        print(f"  as_error(...).field: {as_error(outer, ValidationError).field}")

    # === 4. User-defined kinds ===
    print("\n[4] User-defined kinds")

    RateLimitError = define_error(
        "RateLimitError",
        lambda p: f"Rate limited on {p['endpoint']}. Retry after {p['retry_after']}s",
    )
    limited = RateLimitError({"endpoint": "/api/orders", "retry_after": 60}).wrap("Order sync failed")
    print(f"  {limited.chain()}")
    print(f"  has_tag('RateLimitError'): {limited.has_tag('RateLimitError')}")

    # === 5. Converting unknown failures ===
    print("\n[5] Converting unknown failures")

    print(f"  from_unknown('plain string'): {from_unknown('plain string').chain()}")
    result = try_catch(lambda: int("forty-two"))
    print(f"  try_catch(int('forty-two')): {result.unwrap_err().chain()}")
    print(f"  try_catch(lambda: 42): {try_catch(lambda: 42)}")

    # === 6. Serialization ===
    print("\n[6] Serialization")

    record = error.to_dict()
    while record is not None:
        print(f"  {record['kind']}: {record['message']}")
        record = record.get("cause")


if __name__ == "__main__":
    main()
