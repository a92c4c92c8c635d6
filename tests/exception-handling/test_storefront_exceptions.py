"""
Tests for the storefront exception hierarchy.
"""
import pytest

from exceptions import (
    StorefrontException,
    OrderException,
    OrderNotFoundException,
    OrderAlreadyProcessedException,
    InvalidOrderStateException,
    PaymentException,
    MissingTransactionReferenceException,
    ProductException,
    InvalidStockQuantityException,
    StoreWriteFailureException,
    DocumentException,
    StorageUploadException,
    UserException,
    UserNotFoundException,
)


class TestOrderAlreadyProcessedException:

    def test_with_current_state(self):
        exc = OrderAlreadyProcessedException(order_id=5, current_state="approved")

        assert exc.order_id == 5
        assert exc.current_state == "approved"
        assert str(exc) == "Order 5 already processed (status: approved)"

    def test_without_current_state(self):
        exc = OrderAlreadyProcessedException(order_id=5)

        assert str(exc) == "Order 5 already processed"
        assert exc.details == {'order_id': 5, 'current_state': None}


class TestStoreWriteFailureException:

    def test_step_and_reason_in_message(self):
        exc = StoreWriteFailureException(order_id=3, step="update_payment_status", reason="database is locked")

        assert exc.step == "update_payment_status"
        assert "order 3" in str(exc)
        assert "update_payment_status" in str(exc)
        assert "database is locked" in str(exc)

    def test_repr_includes_details(self):
        exc = StoreWriteFailureException(order_id=3, step="commit")

        assert repr(exc).startswith("StoreWriteFailureException('Store write failed for order 3 at step 'commit''")
        assert "step=commit" in repr(exc)


class TestHierarchy:

    @pytest.mark.parametrize("exc,base", [
        (OrderNotFoundException(1), OrderException),
        (InvalidOrderStateException(1, "pending", "approved"), OrderException),
        (MissingTransactionReferenceException(), PaymentException),
        (InvalidStockQuantityException(1, -2), ProductException),
        (StorageUploadException("labels/order_1.txt", "disk full"), DocumentException),
        (UserNotFoundException(1), UserException),
    ])
    def test_domain_base_classes(self, exc, base):
        assert isinstance(exc, base)
        assert isinstance(exc, StorefrontException)

    def test_single_handler_catches_all(self):
        with pytest.raises(StorefrontException) as exc_info:
            raise StoreWriteFailureException(order_id=1, step="commit")
        assert exc_info.value.details['order_id'] == 1
