"""
Custom exceptions for the storefront.

This module provides a hierarchy of custom exceptions for consistent error handling
throughout the application.

Exception Hierarchy:
--------------------
StorefrontException (base)
├── OrderException
│   ├── OrderNotFoundException
│   ├── OrderAlreadyProcessedException
│   ├── InvalidOrderStateException
│   └── EmptyOrderException
├── PaymentException
│   ├── PaymentNotFoundException
│   ├── MissingTransactionReferenceException
│   └── InvalidPaymentProofException
├── ProductException
│   ├── ProductNotFoundException
│   ├── ProductInUseException
│   └── InvalidStockQuantityException
├── StoreWriteFailureException
├── DocumentException
│   ├── DocumentGenerationException
│   └── StorageUploadException
└── UserException
    └── UserNotFoundException

Usage:
------
Services raise specific exceptions:
    raise OrderNotFoundException(order_id=123)

The API router maps them to HTTP responses:
    try:
        await OrderVerificationService.process(order_id, decision, session)
    except StorefrontException as e:
        raise HTTPException(status_code=get_http_status(e), detail=str(e))
"""

from .base import StorefrontException
from .document import DocumentException, DocumentGenerationException, StorageUploadException
from .order import (
    OrderException,
    OrderNotFoundException,
    OrderAlreadyProcessedException,
    InvalidOrderStateException,
    EmptyOrderException,
)
from .payment import (
    PaymentException,
    PaymentNotFoundException,
    MissingTransactionReferenceException,
    InvalidPaymentProofException,
)
from .product import ProductException, ProductNotFoundException, ProductInUseException, InvalidStockQuantityException
from .store import StoreWriteFailureException
from .user import UserException, UserNotFoundException

__all__ = [
    # Base
    'StorefrontException',

    # Order
    'OrderException',
    'OrderNotFoundException',
    'OrderAlreadyProcessedException',
    'InvalidOrderStateException',
    'EmptyOrderException',

    # Payment
    'PaymentException',
    'PaymentNotFoundException',
    'MissingTransactionReferenceException',
    'InvalidPaymentProofException',

    # Product
    'ProductException',
    'ProductNotFoundException',
    'ProductInUseException',
    'InvalidStockQuantityException',

    # Store
    'StoreWriteFailureException',

    # Documents
    'DocumentException',
    'DocumentGenerationException',
    'StorageUploadException',

    # User
    'UserException',
    'UserNotFoundException',
]
