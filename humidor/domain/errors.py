# humidor/domain/errors.py
"""
Exceptions raised by the checkout and order services.

Every ShopError carries the HTTP status the routers answer with and a stable
``code`` that clients can branch on.
"""
from decimal import Decimal
from typing import Any, Dict


class ShopError(Exception):
    status_code = 400
    code = "SHOP_ERROR"

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_detail(self) -> Dict[str, Any]:
        detail: Dict[str, Any] = {"error": self.message, "code": self.code}
        for key, value in self.context.items():
            detail[key] = str(value) if isinstance(value, Decimal) else value
        return detail


class NotFoundError(ShopError):
    status_code = 404
    code = "NOT_FOUND"


class EmptyCartError(ShopError):
    code = "EMPTY_CART"


class InvalidAddressError(ShopError):
    code = "INVALID_ADDRESS"


class InsufficientInventoryError(ShopError):
    status_code = 409
    code = "INSUFFICIENT_INVENTORY"


class PaymentError(ShopError):
    """The gateway answered and declined the charge."""

    status_code = 402
    code = "PAYMENT_DECLINED"


class GatewayCommunicationError(ShopError):
    """The gateway could not be reached or answered with garbage."""

    status_code = 502
    code = "PAYMENT_GATEWAY_UNAVAILABLE"


class PostPaymentOrderFailure(ShopError):
    """
    Money was captured but the order could not be recorded.

    Needs manual reconciliation: the gateway transaction id travels in the
    context and must never be dropped.
    """

    status_code = 500
    code = "POST_PAYMENT_ORDER_FAILURE"

    def __init__(self, message: str, *, transaction_id: str, amount: Decimal, user_id: int, reason: str):
        # reason and user_id are logged, never returned to the client
        super().__init__(message, transaction_id=transaction_id, amount=amount, payment_captured=True)
        self.transaction_id = transaction_id
        self.amount = amount
        self.user_id = user_id
        self.reason = reason


class InvalidTransitionError(ShopError):
    status_code = 409
    code = "INVALID_STATUS_TRANSITION"


class ConcurrencyConflictError(ShopError):
    status_code = 409
    code = "CONCURRENT_MODIFICATION"


class RateLimitExceededError(ShopError):
    status_code = 429
    code = "RATE_LIMITED"
