"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth
  2xxx: Account
  3xxx: Product
  4xxx: Order
  5xxx: Synchronization
  9xxx: System
"""

from typing import Any


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        self.details = details
        super().__init__(message)


# --- 1xxx: Auth ---

class EmailExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Email already registered", 409)


class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1002, "Invalid email or password", 401)


class InvalidRefreshTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Refresh token is invalid or expired", 401)


class AdminRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "Administrator account required", 403)


# --- 2xxx: Account ---

class AccountNotFoundError(AppError):
    def __init__(self, account_ref: str) -> None:
        super().__init__(
            2001,
            f"Account not found: {account_ref}",
            404,
            {"entity_type": "ACCOUNT", "id": account_ref},
        )


class ConcurrentModificationError(AppError):
    def __init__(self, account_id: str, expected_version: int) -> None:
        super().__init__(
            2002,
            f"Account {account_id} changed since version {expected_version}",
            409,
        )


class CartItemNotFoundError(AppError):
    def __init__(self, item_id: str) -> None:
        super().__init__(
            2003,
            f"Cart item not found: {item_id}",
            404,
            {"entity_type": "CART_ITEM", "id": item_id},
        )


class InvalidQuantityError(AppError):
    def __init__(self, quantity: int) -> None:
        super().__init__(2004, f"Quantity must be a positive integer, got {quantity}", 422)


# --- 3xxx: Product ---

class ProductNotFoundError(AppError):
    def __init__(self, product_ref: str) -> None:
        super().__init__(
            3001,
            f"Product not found: {product_ref}",
            404,
            {"entity_type": "PRODUCT", "id": product_ref},
        )


class DuplicateNameError(AppError):
    def __init__(self, name: str) -> None:
        super().__init__(3002, f"A product named {name!r} already exists", 409)


class InvalidPatchError(AppError):
    def __init__(self, fields: list[str]) -> None:
        super().__init__(
            3003,
            f"Fields not patchable: {', '.join(sorted(fields))}",
            422,
        )


class InvalidProductError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3004, f"Invalid product: {detail}", 422)


# --- 4xxx: Order ---

class OrderNotFoundError(AppError):
    def __init__(self, order_id: str) -> None:
        super().__init__(
            4001,
            f"Order not found: {order_id}",
            404,
            {"entity_type": "ORDER", "id": order_id},
        )


# --- 5xxx: Synchronization ---

class ReferenceMismatchError(AppError):
    def __init__(self, account_id: str, reference_id: str) -> None:
        super().__init__(
            5001,
            f"Account {account_id} does not hold reference {reference_id}",
            403,
        )


class PartialFailureError(AppError):
    """A multi-step operation committed some of its steps, reconciliation pending."""

    def __init__(self, operation: str, details: dict[str, Any]) -> None:
        super().__init__(
            5002,
            f"{operation} partially applied; reconciliation pending",
            202,
            details,
        )


# --- 9xxx: System ---

class StoreUnavailableError(AppError):
    def __init__(self, step: str, detail: str) -> None:
        super().__init__(9003, f"Store call {step} failed: {detail}", 503)


class StoreTimeoutError(AppError):
    def __init__(self, step: str, timeout: float) -> None:
        super().__init__(9004, f"Store call {step} timed out after {timeout}s", 504)
