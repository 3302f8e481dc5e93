"""Typed checkout failures.

Each error carries a stable ``code`` for API clients, a human-readable
message and optional structured ``details`` (e.g. which product ran out).
"""


class CheckoutError(Exception):
    code = "checkout_failed"
    retryable = False

    def __init__(self, message: str, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidCartError(CheckoutError):
    """Malformed cart payload or a line referencing an unknown product."""

    code = "invalid_cart"

    def __init__(self, message: str = "Invalid cart items", details: dict | None = None, code: str | None = None):
        super().__init__(message, details)
        if code:
            self.code = code


class OutOfStockError(CheckoutError):
    code = "out_of_stock"

    def __init__(self, product_id: str, product_name: str, requested: int, available: int) -> None:
        super().__init__(
            f"Out of stock for {product_name}",
            {
                "product_id": product_id,
                "product_name": product_name,
                "requested": requested,
                "available": available,
            },
        )
        self.product_id = product_id
        self.product_name = product_name
        self.requested = requested
        self.available = available


class CouponError(CheckoutError):
    code = "coupon_rejected"

    def __init__(self, reason: str, message: str, coupon_code: str | None = None) -> None:
        super().__init__(message, {"reason": reason, "coupon_code": coupon_code})
        self.reason = reason


class PaymentVerificationError(CheckoutError):
    """The gateway record does not prove payment of the computed total."""

    code = "payment_verification_failed"

    def __init__(self, reason: str, details: dict | None = None) -> None:
        super().__init__("Payment verification failed", {"reason": reason, **(details or {})})
        self.reason = reason


class OrderNumberCollisionExhausted(CheckoutError):
    code = "order_number_unavailable"
    retryable = True

    def __init__(self, attempts: int) -> None:
        super().__init__(f"Could not allocate a unique order number after {attempts} attempts", {"attempts": attempts})
        self.attempts = attempts


class TransientCommitError(CheckoutError):
    """Storage-level write conflict; the whole commit may be retried."""

    code = "commit_conflict"
    retryable = True

    def __init__(self, message: str = "Order could not be saved due to a concurrent update") -> None:
        super().__init__(message)
