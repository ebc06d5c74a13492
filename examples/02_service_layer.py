#!/usr/bin/env python3
"""Service Layer — Typed Errors From Repository to Controller.

A repository returns ``Result`` values carrying DatabaseErrors, a service
reclassifies and wraps them, and a controller maps the final chain to an API
response by asking which kinds occurred anywhere in it.

Run this example:
    python examples/02_service_layer.py
"""
import json
from dataclasses import asdict, dataclass, replace

from errchain import (
    AppError,
    DatabaseError,
    Err,
    NotFoundError,
    Ok,
    PermissionError,
    Result,
    ValidationError,
    configure_logging,
    define_error,
    err,
    get_logger,
    ok,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class User:
    id: str
    name: str
    role: str


@dataclass(frozen=True)
class Order:
    id: str
    user_id: str
    total: float
    status: str


# =============================================================================
# Custom domain errors
# =============================================================================


class InsufficientStockError(AppError):
    def __init__(self, product_id: str, requested: int, available: int, *, cause: AppError | None = None):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(f"Product {product_id}: requested {requested}, available {available}", cause=cause)


PaymentFailedError = define_error(
    "PaymentFailedError",
    lambda p: f"Payment failed: {p['reason']} ({p['code']})",
)


# =============================================================================
# Repository layer
# =============================================================================


USERS = {
    "user-1": User("user-1", "Alice", "admin"),
    "user-2": User("user-2", "Bob", "user"),
}
ORDERS = {
    "order-1": Order("order-1", "user-2", 99.99, "pending"),
    "order-2": Order("order-2", "user-2", 10.00, "shipped"),
}


def find_user(user_id: str) -> Result[User, DatabaseError]:
    if user_id == "db-fail":
        return err(DatabaseError("SELECT", "Connection pool exhausted"))
    if user_id in USERS:
        return ok(USERS[user_id])
    return err(DatabaseError("SELECT", "No rows returned"))


def find_order(order_id: str) -> Result[Order, DatabaseError]:
    if order_id in ORDERS:
        return ok(ORDERS[order_id])
    return err(DatabaseError("SELECT", "Order not found"))


# =============================================================================
# Service layer
# =============================================================================


def get_user(user_id: str) -> Result[User, AppError]:
    def reclassify(db_error: DatabaseError) -> AppError:
        if "No rows" in db_error.message:
            return NotFoundError("User", user_id, cause=db_error)
        return db_error

    return find_user(user_id).map_err(reclassify)


def get_order(order_id: str) -> Result[Order, AppError]:
    def reclassify(db_error: DatabaseError) -> AppError:
        if "not found" in db_error.message:
            return NotFoundError("Order", order_id, cause=db_error)
        return db_error

    return find_order(order_id).map_err(reclassify)


def check_can_modify(user: User, order: Order) -> Result[None, PermissionError]:
    if user.role == "admin" or order.user_id == user.id:
        return ok(None)
    return err(PermissionError("modify", f"order {order.id}"))


def cancel_order(order_id: str, user_id: str) -> Result[Order, AppError]:
    match get_user(user_id):
        case Err(error):
            return err(error.wrap(f"Failed to get user {user_id}"))
        case Ok(user):
            pass

    match get_order(order_id):
        case Err(error):
            return err(error.wrap(f"Failed to get order {order_id}"))
        case Ok(order):
            pass

    permission = check_can_modify(user, order)
    if permission.is_err():
        return permission

    if order.status == "shipped":
        return err(ValidationError("status", "Cannot cancel shipped orders"))

    return ok(replace(order, status="cancelled"))


# =============================================================================
# Controller layer
# =============================================================================


def to_response(error: AppError) -> dict:
    logger.warning("cancel_order_failed", error=error)

    if found := error.as_kind(NotFoundError):
        return {"success": False, "error": {"code": "NOT_FOUND", "message": f"{found.resource} not found", "details": {"id": found.id}}}
    if denied := error.as_kind(PermissionError):
        return {"success": False, "error": {"code": "FORBIDDEN", "message": denied.message}}
    if invalid := error.as_kind(ValidationError):
        return {"success": False, "error": {"code": "VALIDATION_ERROR", "message": invalid.message, "details": {"field": invalid.field}}}
    if error.is_kind(DatabaseError):
        return {"success": False, "error": {"code": "INTERNAL_ERROR", "message": "A database error occurred"}}
    return {"success": False, "error": {"code": "INTERNAL_ERROR", "message": "An unexpected error occurred"}}


def handle_cancel_order(order_id: str, user_id: str) -> dict:
    return cancel_order(order_id, user_id).match(
        lambda order: {"success": True, "data": asdict(order)},
        to_response,
    )


def main():
    configure_logging(level="INFO", json_format=False, service="orders")

    scenarios = [
        ("Admin cancels order", "order-1", "user-1"),
        ("Owner cancels own order", "order-1", "user-2"),
        ("Order not found", "order-999", "user-1"),
        ("User not found", "order-1", "user-999"),
        ("Database failure", "order-1", "db-fail"),
        ("Shipped order", "order-2", "user-2"),
    ]
    for number, (title, order_id, user_id) in enumerate(scenarios, start=1):
        print(f"\n{number}. {title}:")
        print(json.dumps(handle_cancel_order(order_id, user_id), indent=2))

    print("\n=== Custom Domain Errors ===\n")

    Err(PaymentFailedError({"reason": "Card declined", "code": "CARD_DECLINED"})).match(
        lambda _: print("Payment successful"),
        lambda e: print(f"Payment error: {e.props['reason']} (code: {e.props['code']}), tag: {e.tag}"),
    )
    Err(InsufficientStockError("prod-123", 5, 2)).match(
        lambda _: print("Stock OK"),
        lambda e: print(f"Stock error: need {e.requested}, have {e.available}, tag: {e.tag}"),
    )


if __name__ == "__main__":
    main()
