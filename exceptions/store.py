"""
Persistence failures inside the verification workflow.
"""

from .base import StorefrontException


class StoreWriteFailureException(StorefrontException):
    """
    Raised when a status update of the verification workflow fails.

    Carries the step that failed so operators can reconcile the order.
    """

    def __init__(self, order_id: int, step: str, reason: str | None = None):
        message = f"Store write failed for order {order_id} at step '{step}'"
        if reason:
            message += f": {reason}"
        super().__init__(
            message,
            details={'order_id': order_id, 'step': step, 'reason': reason}
        )
        self.order_id = order_id
        self.step = step
        self.reason = reason
