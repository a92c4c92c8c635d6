"""
Tests for Error Handler Utility

Tests the mapping of storefront exceptions to HTTP status codes and the
conversion of arbitrary error objects to readable messages.
"""

import pytest

from exceptions import (
    StorefrontException,
    OrderNotFoundException,
    OrderAlreadyProcessedException,
    InvalidOrderStateException,
    EmptyOrderException,
    MissingTransactionReferenceException,
    InvalidPaymentProofException,
    ProductNotFoundException,
    ProductInUseException,
    StoreWriteFailureException,
    StorageUploadException,
    DocumentGenerationException,
    UserNotFoundException,
)
from utils.error_handler import describe_error, get_http_status, handle_service_error, handle_unexpected_error


class TestHttpStatusMapping:
    """Exception type -> HTTP status"""

    @pytest.mark.parametrize("exception,expected", [
        (OrderNotFoundException(order_id=1), 404),
        (OrderAlreadyProcessedException(order_id=1, current_state="approved"), 409),
        (InvalidOrderStateException(order_id=1, current_state="pending", required_state="approved"), 409),
        (EmptyOrderException(user_id=1), 400),
        (MissingTransactionReferenceException(), 400),
        (InvalidPaymentProofException(order_id=1, reason="file is empty"), 400),
        (ProductNotFoundException(product_id=1), 404),
        (ProductInUseException(product_id=1), 409),
        (UserNotFoundException(user_id=1), 404),
        (StoreWriteFailureException(order_id=1, step="update_order_status"), 500),
    ])
    def test_mapped_exceptions(self, exception, expected):
        assert get_http_status(exception) == expected

    def test_subclass_falls_back_to_base_mapping(self):
        """Document exceptions are mapped through their common base class"""
        assert get_http_status(StorageUploadException("labels/order_1.txt", "disk full")) == 502
        assert get_http_status(DocumentGenerationException(1, "invoice", "no lines")) == 502

    def test_unknown_exceptions_are_server_errors(self):
        assert get_http_status(ValueError("boom")) == 500
        assert get_http_status(StorefrontException("generic")) == 500


class TestHandleServiceError:

    def test_returns_status_and_message(self):
        exc = OrderAlreadyProcessedException(order_id=12, current_state="rejected")

        status_code, message = handle_service_error(exc)

        assert status_code == 409
        assert message == "Order 12 already processed (status: rejected)"

    def test_server_errors_logged_as_error(self, caplog):
        with caplog.at_level("WARNING"):
            handle_service_error(StoreWriteFailureException(order_id=3, step="commit", reason="disk I/O error"))
            handle_service_error(OrderNotFoundException(order_id=4))

        levels = {record.levelname for record in caplog.records if "Service error handled" in record.getMessage()}
        assert levels == {"ERROR", "WARNING"}

    def test_unexpected_error(self):
        assert handle_unexpected_error(RuntimeError("database is locked")) == (500, "database is locked")


class TestDescribeError:

    @pytest.mark.parametrize("error,expected", [
        (None, "Unknown error occurred"),
        ("", "Unknown error occurred"),
        ("plain text", "plain text"),
        ({"message": "row not found"}, "row not found"),
        ({"error_description": "token expired"}, "token expired"),
        ({"message": "upload failed", "details": "bucket missing", "code": "404"},
         "upload failed - bucket missing [Code: 404]"),
        ({"error": {"message": "duplicate key", "code": "23505"}}, "duplicate key [Code: 23505]"),
        ({}, "Unspecified object error"),
        ({"status": 503}, "{'status': 503}"),
        (42, "42"),
    ])
    def test_error_shapes(self, error, expected):
        assert describe_error(error) == expected

    def test_exception_message(self):
        assert describe_error(ValueError("bad quantity")) == "bad quantity"

    def test_exception_without_message(self):
        assert describe_error(KeyError()) == "An unexpected internal error occurred (KeyError)"
