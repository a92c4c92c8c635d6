"""
Error Handler Utility for the HTTP API

Provides centralized error handling for API routes with:
- Automatic exception to HTTP status mapping
- Readable messages for arbitrary error objects
- Logging for debugging

Usage in routes:
    from utils.error_handler import handle_service_error

    try:
        result = await SomeService.some_method()
    except StorefrontException as e:
        status_code, message = handle_service_error(e)
        raise HTTPException(status_code=status_code, detail=message)
"""

import logging
from typing import Any

from exceptions import (
    StorefrontException,
    OrderNotFoundException,
    OrderAlreadyProcessedException,
    InvalidOrderStateException,
    EmptyOrderException,
    PaymentNotFoundException,
    MissingTransactionReferenceException,
    InvalidPaymentProofException,
    ProductNotFoundException,
    ProductInUseException,
    InvalidStockQuantityException,
    StoreWriteFailureException,
    DocumentException,
    UserNotFoundException,
)

# Exact type first, then the first matching base class (subclasses before bases)
ERROR_STATUS_MAPPING: dict[type[StorefrontException], int] = {
    # Order exceptions
    OrderNotFoundException: 404,
    OrderAlreadyProcessedException: 409,
    InvalidOrderStateException: 409,
    EmptyOrderException: 400,

    # Payment exceptions
    PaymentNotFoundException: 404,
    MissingTransactionReferenceException: 400,
    InvalidPaymentProofException: 400,

    # Product exceptions
    ProductNotFoundException: 404,
    ProductInUseException: 409,
    InvalidStockQuantityException: 400,

    # Persistence / documents
    StoreWriteFailureException: 500,
    DocumentException: 502,

    # User exceptions
    UserNotFoundException: 404,
}


def get_http_status(exception: Exception) -> int:
    """
    Map an exception to the HTTP status code returned to API callers.

    Unknown exceptions (including unmapped StorefrontException subclasses)
    map to 500.
    """
    status = ERROR_STATUS_MAPPING.get(type(exception))
    if status is not None:
        return status
    for exception_type, mapped_status in ERROR_STATUS_MAPPING.items():
        if isinstance(exception, exception_type):
            return mapped_status
    return 500


def describe_error(error: Any) -> str:
    """
    Convert any error-like object into a readable string.

    Handles exceptions, plain strings and dict-shaped error payloads
    (message/error_description/error/msg/hint keys, possibly nested,
    with optional details and code).

    Example:
        describe_error({"error": {"message": "duplicate key", "code": "23505"}})
        -> "duplicate key [Code: 23505]"
    """
    if error is None or error == "":
        return "Unknown error occurred"
    if isinstance(error, str):
        return error

    if isinstance(error, dict):
        extracted = _message_from_mapping(error)
        if extracted:
            return extracted

    if isinstance(error, BaseException):
        message = str(error)
        return message or f"An unexpected internal error occurred ({type(error).__name__})"

    if isinstance(error, dict):
        return str(error) if error else "Unspecified object error"
    return str(error)


def _message_from_mapping(obj: Any) -> str | None:
    if not isinstance(obj, dict):
        return None

    candidate = None
    for key in ("message", "error_description", "error", "msg", "hint"):
        if obj.get(key):
            candidate = obj[key]
            break

    if isinstance(candidate, str):
        result = candidate
        if isinstance(obj.get("details"), str) and obj["details"]:
            result += f" - {obj['details']}"
        if obj.get("code"):
            result += f" [Code: {obj['code']}]"
        return result

    # Recurse when the error is wrapped in another object
    if isinstance(candidate, dict):
        return _message_from_mapping(candidate)

    return None


def handle_service_error(exception: StorefrontException) -> tuple[int, str]:
    """
    Convert a service exception to (HTTP status, message).

    Expected client errors are logged at WARNING, server-side failures at ERROR.
    """
    status_code = get_http_status(exception)
    if status_code >= 500:
        logging.error(f"Service error handled: {type(exception).__name__} - {str(exception)}")
    else:
        logging.warning(f"Service error handled: {type(exception).__name__} - {str(exception)}")
    return status_code, exception.message


def handle_unexpected_error(exception: Exception) -> tuple[int, str]:
    """
    Handle unexpected exceptions (non-StorefrontException).

    Logs the full traceback and returns a 500 with a readable message.
    """
    logging.error(f"Unexpected error: {type(exception).__name__} - {str(exception)}", exc_info=True)
    return 500, describe_error(exception)
