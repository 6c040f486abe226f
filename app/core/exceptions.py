"""
Custom exception classes and error handlers
Provides consistent error responses across the storefront API
"""

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from typing import Any, Dict, List, Optional


class StorefrontException(HTTPException):
    """Base exception class for the storefront application"""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code


class BadRequestException(StorefrontException):
    """400 Bad Request"""

    def __init__(self, detail: str, error_code: str = "BAD_REQUEST"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code=error_code
        )


class UnauthorizedException(StorefrontException):
    """401 Unauthorized"""

    def __init__(self, detail: str = "Unauthorized", error_code: str = "UNAUTHORIZED"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code=error_code,
            headers={"WWW-Authenticate": "Bearer"}
        )


class NotFoundException(StorefrontException):
    """404 Not Found"""

    def __init__(self, detail: str = "Not found", error_code: str = "NOT_FOUND"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code=error_code
        )


class ConflictException(StorefrontException):
    """409 Conflict"""

    def __init__(self, detail: str, error_code: str = "CONFLICT"):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            error_code=error_code
        )


class ValidationException(StorefrontException):
    """422 Unprocessable Entity"""

    def __init__(self, detail: str, error_code: str = "VALIDATION_ERROR"):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
            error_code=error_code
        )


class NetworkError(StorefrontException):
    """503 - upstream unreachable, timed out or failing; safe to retry"""

    def __init__(
        self,
        detail: str = "Could not reach the store service. Please try again.",
        error_code: str = "NETWORK_ERROR"
    ):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=detail,
            error_code=error_code
        )


class PaymentError(StorefrontException):
    """402 - gateway failure or user cancellation; the order stays unpaid"""

    def __init__(self, detail: str, error_code: str = "PAYMENT_FAILED"):
        super().__init__(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail=detail,
            error_code=error_code
        )


class StorageError(Exception):
    """Cart storage could not be read or written"""


# Cart and discount exceptions
class InvalidCodeError(BadRequestException):
    """Promo code rejected"""

    def __init__(self, detail: str = "Invalid or expired promo code"):
        super().__init__(
            detail=detail,
            error_code="INVALID_PROMO_CODE"
        )


class InvalidAmountError(BadRequestException):
    """Points amount is not a positive number"""

    def __init__(self, detail: str = "Points to redeem must be greater than 0"):
        super().__init__(
            detail=detail,
            error_code="INVALID_AMOUNT"
        )


class InsufficientPointsError(BadRequestException):
    """More points requested than the customer holds"""

    def __init__(self, available: int, requested: int):
        super().__init__(
            detail=f"Insufficient Evolv points. Available: {available}, Requested: {requested}",
            error_code="INSUFFICIENT_POINTS"
        )
        self.available = available
        self.requested = requested


class InvalidQuantityError(ValidationException):
    """Quantity below zero"""

    def __init__(self, quantity: int):
        super().__init__(
            detail=f"Quantity cannot be negative (got {quantity})",
            error_code="INVALID_QUANTITY"
        )


class EmptyCartError(BadRequestException):
    """Checkout attempted without items"""

    def __init__(self, detail: str = "Your cart is empty"):
        super().__init__(
            detail=detail,
            error_code="EMPTY_CART"
        )


class CartItemNotFoundError(NotFoundException):
    """No line item for the given product and pack size"""

    def __init__(self, product_id: str, pack_size: int):
        super().__init__(
            detail=f"Cart item {product_id} (pack of {pack_size}) not found",
            error_code="CART_ITEM_NOT_FOUND"
        )


class OrderRejectedError(ValidationException):
    """Order service refused the order payload"""

    def __init__(self, detail: str = "Order failed"):
        super().__init__(
            detail=detail,
            error_code="ORDER_REJECTED"
        )


class CheckoutStateError(ConflictException):
    """Requested checkout step is not valid in the current state"""

    def __init__(self, current: str, requested: str, allowed: Optional[List[str]] = None):
        detail = f"Cannot move checkout from '{current}' to '{requested}'"
        if allowed:
            detail += f" (next steps: {', '.join(sorted(allowed))})"
        super().__init__(
            detail=detail,
            error_code="INVALID_CHECKOUT_STATE"
        )


class CheckoutInProgressError(ConflictException):
    """A submission or payment is already under way"""

    def __init__(self, detail: str = "A checkout is already in progress"):
        super().__init__(
            detail=detail,
            error_code="CHECKOUT_IN_PROGRESS"
        )


async def storefront_exception_handler(request: Request, exc: StorefrontException) -> JSONResponse:
    """Render storefront errors with their machine-readable code"""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.detail,
            "error_code": exc.error_code
        },
        headers=exc.headers
    )


async def storage_exception_handler(request: Request, exc: StorageError) -> JSONResponse:
    """Cart writes failed; the cart in memory was left unchanged"""
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "detail": "Your cart could not be saved. Please try again.",
            "error_code": "CART_UNAVAILABLE"
        }
    )
