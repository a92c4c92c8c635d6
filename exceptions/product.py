"""
Product / inventory exceptions.
"""

from .base import StorefrontException


class ProductException(StorefrontException):
    """Base exception for product-related errors."""
    pass


class ProductNotFoundException(ProductException):
    """Raised when product is not found in database."""

    def __init__(self, product_id: int):
        super().__init__(
            f"Product {product_id} not found",
            details={'product_id': product_id}
        )
        self.product_id = product_id


class InvalidStockQuantityException(ProductException):
    """Raised when a stock adjustment quantity is not a positive integer."""

    def __init__(self, product_id: int, quantity):
        super().__init__(
            f"Invalid stock quantity for product {product_id}: {quantity}",
            details={'product_id': product_id, 'quantity': quantity}
        )
        self.product_id = product_id
        self.quantity = quantity


class ProductInUseException(ProductException):
    """Raised when deleting a product that is referenced by order line items."""

    def __init__(self, product_id: int):
        super().__init__(
            f"Product {product_id} is referenced by existing orders and cannot be deleted",
            details={'product_id': product_id}
        )
        self.product_id = product_id
