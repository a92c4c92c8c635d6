"""
User-related exceptions.
"""

from .base import StorefrontException


class UserException(StorefrontException):
    """Base exception for user-related errors."""
    pass


class UserNotFoundException(UserException):
    """Raised when the customer placing an order does not exist."""

    def __init__(self, user_id: int):
        super().__init__(
            f"User with ID {user_id} not found",
            details={'user_id': user_id}
        )
        self.user_id = user_id
