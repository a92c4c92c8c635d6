"""
Payment-related exceptions.
"""

from .base import StorefrontException


class PaymentException(StorefrontException):
    """Base exception for payment-related errors."""
    pass


class PaymentNotFoundException(PaymentException):
    """Raised when the payment record of an order is missing."""

    def __init__(self, order_id: int):
        super().__init__(
            f"Payment for order {order_id} not found",
            details={'order_id': order_id}
        )
        self.order_id = order_id


class MissingTransactionReferenceException(PaymentException):
    """Raised when checkout is submitted without a bank transfer reference."""

    def __init__(self):
        super().__init__(
            "Transaction ID/UTR is mandatory for verification",
            details={}
        )


class InvalidPaymentProofException(PaymentException):
    """Raised when an uploaded proof of payment is rejected."""

    def __init__(self, order_id: int, reason: str):
        super().__init__(
            f"Invalid proof of payment for order {order_id}: {reason}",
            details={'order_id': order_id, 'reason': reason}
        )
        self.order_id = order_id
        self.reason = reason
