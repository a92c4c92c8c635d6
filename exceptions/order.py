"""
Order-related exceptions.
"""

from .base import StorefrontException


class OrderException(StorefrontException):
    """Base exception for order-related errors."""
    pass


class OrderNotFoundException(OrderException):
    """Raised when order is not found in database."""

    def __init__(self, order_id: int):
        super().__init__(
            f"Order {order_id} not found",
            details={'order_id': order_id}
        )
        self.order_id = order_id


class OrderAlreadyProcessedException(OrderException):
    """
    Raised when an admin decision targets an order that is no longer pending.

    Expected, user-facing condition (double-click, retry, concurrent approval);
    never retried.
    """

    def __init__(self, order_id: int, current_state: str | None = None):
        message = f"Order {order_id} already processed"
        if current_state:
            message += f" (status: {current_state})"
        super().__init__(
            message,
            details={'order_id': order_id, 'current_state': current_state}
        )
        self.order_id = order_id
        self.current_state = current_state


class InvalidOrderStateException(OrderException):
    """Raised when order is in invalid state for requested operation."""

    def __init__(self, order_id: int, current_state: str, required_state: str):
        super().__init__(
            f"Order {order_id} is in state '{current_state}', required '{required_state}'",
            details={'order_id': order_id, 'current_state': current_state, 'required_state': required_state}
        )
        self.order_id = order_id
        self.current_state = current_state
        self.required_state = required_state


class EmptyOrderException(OrderException):
    """Raised when checkout is attempted without any line items."""

    def __init__(self, user_id: int):
        super().__init__(
            f"Cannot place an empty order for user {user_id}",
            details={'user_id': user_id}
        )
        self.user_id = user_id
