"""
Integration Tests for the invoice / shipping label follow-up task and the
retry job.
"""

from datetime import datetime, timedelta
from pathlib import Path

import pytest
from unittest.mock import AsyncMock, patch

from sqlalchemy import update

from db import session_commit
from models.order import Order
from services.document_fulfillment import DocumentFulfillmentService
from services.storage import set_storage_gateway
from repositories.order import OrderRepository
from jobs.document_retry_job import run_retry_cycle
from enums.document_status import DocumentStatus
from enums.order_status import OrderStatus
from enums.payment_status import PaymentStatus
from exceptions.document import StorageUploadException
from exceptions.order import InvalidOrderStateException, OrderNotFoundException


class FailingGateway:
    """Storage gateway that rejects every upload."""

    def __init__(self):
        self.calls = 0

    async def upload(self, file_bytes: bytes, content_type: str, destination_path: str) -> str:
        self.calls += 1
        raise StorageUploadException(destination_path, "bucket unavailable")


@pytest.fixture
def approved_order(seed_order):
    async def _seed(**kwargs):
        return await seed_order(status=OrderStatus.APPROVED, payment_status=PaymentStatus.VERIFIED, **kwargs)
    return _seed


class TestGenerateDocuments:

    @pytest.mark.asyncio
    async def test_generates_and_records_documents(self, test_session, approved_order, storage_gateway):
        # Arrange
        order_id, _ = await approved_order()

        # Act
        generated = await DocumentFulfillmentService.generate_documents(order_id, test_session)

        # Assert
        assert generated is True
        details = await OrderRepository.get_details(order_id, test_session)
        assert details.order.documents_status == DocumentStatus.GENERATED
        assert details.order.documents_attempts == 1
        assert details.invoice_number.startswith(f"INV-{datetime.now().year}-")
        assert details.invoice_url == f"https://cdn.test/storage/order_documents/invoices/order_{order_id}.txt"
        assert details.label_url == f"https://cdn.test/storage/order_documents/labels/order_{order_id}.txt"
        assert details.tracking_number == f"CHS{order_id:010d}"

        invoice_file = Path(storage_gateway.root) / "order_documents" / "invoices" / f"order_{order_id}.txt"
        assert details.invoice_number in invoice_file.read_text(encoding="utf-8")

    @pytest.mark.asyncio
    async def test_already_generated_is_noop(self, test_session, approved_order, storage_gateway):
        # Arrange
        order_id, _ = await approved_order()
        await DocumentFulfillmentService.generate_documents(order_id, test_session)

        # Act
        generated = await DocumentFulfillmentService.generate_documents(order_id, test_session)

        # Assert
        assert generated is True
        order = await OrderRepository.get_by_id(order_id, test_session)
        assert order.documents_attempts == 1

    @pytest.mark.asyncio
    async def test_pending_order_gets_no_documents(self, test_session, seed_order, storage_gateway):
        # Arrange
        order_id, _ = await seed_order()

        # Act
        generated = await DocumentFulfillmentService.generate_documents(order_id, test_session)

        # Assert
        assert generated is False
        order = await OrderRepository.get_by_id(order_id, test_session)
        assert order.documents_attempts == 0
        assert order.documents_status == DocumentStatus.NOT_REQUESTED

    @pytest.mark.asyncio
    async def test_upload_failure_is_recorded_on_order(self, test_session, approved_order):
        # Arrange
        order_id, _ = await approved_order()
        set_storage_gateway(FailingGateway())

        try:
            # Act
            generated = await DocumentFulfillmentService.generate_documents(order_id, test_session)
        finally:
            set_storage_gateway(None)

        # Assert
        assert generated is False
        details = await OrderRepository.get_details(order_id, test_session)
        assert details.order.status == OrderStatus.APPROVED
        assert details.order.documents_status == DocumentStatus.FAILED
        assert details.order.documents_attempts == 1
        assert "bucket unavailable" in details.order.documents_last_error
        assert details.invoice_number is None

    @pytest.mark.asyncio
    async def test_retry_after_failure_reuses_invoice_number(self, test_session, approved_order, storage_gateway):
        # Arrange
        order_id, _ = await approved_order()
        await DocumentFulfillmentService.generate_documents(order_id, test_session)
        first = await OrderRepository.get_details(order_id, test_session)
        await OrderRepository.update_documents_status(order_id, DocumentStatus.FAILED, test_session, error="lost")
        await session_commit(test_session)

        # Act
        generated = await DocumentFulfillmentService.generate_documents(order_id, test_session)

        # Assert
        assert generated is True
        second = await OrderRepository.get_details(order_id, test_session)
        assert second.invoice_number == first.invoice_number
        assert second.invoice_url == first.invoice_url
        assert second.order.documents_attempts == 2
        assert second.order.documents_last_error is None

    @pytest.mark.asyncio
    async def test_admins_notified_when_attempts_exhausted(self, test_session, approved_order):
        # Arrange
        order_id, _ = await approved_order()
        set_storage_gateway(FailingGateway())

        try:
            with patch('config.DOCUMENT_MAX_ATTEMPTS', 2), \
                    patch('services.document_fulfillment.NotificationService.documents_failed',
                          new_callable=AsyncMock) as mock_notify:
                # Act
                await DocumentFulfillmentService.generate_documents(order_id, test_session)
                mock_notify.assert_not_called()
                await DocumentFulfillmentService.generate_documents(order_id, test_session)
        finally:
            set_storage_gateway(None)

        # Assert
        mock_notify.assert_called_once()
        assert mock_notify.call_args.args[0] == order_id
        assert mock_notify.call_args.args[1] == 2


class TestManualRetry:

    @pytest.mark.asyncio
    async def test_retry_unknown_order(self, test_session):
        with pytest.raises(OrderNotFoundException):
            await DocumentFulfillmentService.retry(12345, test_session)

    @pytest.mark.asyncio
    async def test_retry_rejected_order(self, test_session, seed_order):
        order_id, _ = await seed_order(status=OrderStatus.REJECTED, payment_status=PaymentStatus.FAILED)

        with pytest.raises(InvalidOrderStateException):
            await DocumentFulfillmentService.retry(order_id, test_session)

    @pytest.mark.asyncio
    async def test_retry_returns_details(self, test_session, approved_order, storage_gateway):
        order_id, _ = await approved_order()

        details = await DocumentFulfillmentService.retry(order_id, test_session)

        assert details.order.documents_status == DocumentStatus.GENERATED
        assert details.label_url is not None


class TestScheduledTask:

    @pytest.mark.asyncio
    async def test_schedule_runs_in_background(self, test_session, approved_order, storage_gateway):
        # Arrange
        order_id, _ = await approved_order()

        # Act
        task = DocumentFulfillmentService.schedule(order_id)
        result = await task

        # Assert
        assert result is True
        order = await OrderRepository.get_by_id(order_id, test_session)
        assert order.documents_status == DocumentStatus.GENERATED


class TestRetryJob:

    @pytest.mark.asyncio
    async def test_cycle_retries_failed_and_stale_pending(self, test_session, approved_order, storage_gateway):
        # Arrange
        failed_id, _ = await approved_order()
        stale_id, _ = await approved_order()
        fresh_id, _ = await approved_order()
        await OrderRepository.update_documents_status(failed_id, DocumentStatus.FAILED, test_session,
                                                      error="timeout", increment_attempts=True)
        await OrderRepository.update_documents_status(fresh_id, DocumentStatus.PENDING, test_session)
        # Approved two hours ago and the follow-up task never finished
        await test_session.execute(
            update(Order).where(Order.id == stale_id).values(
                documents_status=DocumentStatus.PENDING,
                documents_updated_at=datetime.now() - timedelta(hours=2),
            )
        )
        await session_commit(test_session)

        # Act
        with patch('config.DOCUMENT_STALE_PENDING_SECONDS', 600):
            generated = await run_retry_cycle()

        # Assert
        assert generated == 2
        statuses = {
            order_id: (await OrderRepository.get_by_id(order_id, test_session)).documents_status
            for order_id in (failed_id, stale_id, fresh_id)
        }
        assert statuses[failed_id] == DocumentStatus.GENERATED
        assert statuses[stale_id] == DocumentStatus.GENERATED
        assert statuses[fresh_id] == DocumentStatus.PENDING

    @pytest.mark.asyncio
    async def test_cycle_skips_exhausted_orders(self, test_session, approved_order, storage_gateway):
        # Arrange
        order_id, _ = await approved_order()
        for _ in range(3):
            await OrderRepository.update_documents_status(order_id, DocumentStatus.FAILED, test_session,
                                                          error="timeout", increment_attempts=True)
        await session_commit(test_session)

        # Act
        with patch('config.DOCUMENT_MAX_ATTEMPTS', 3):
            generated = await run_retry_cycle()

        # Assert
        assert generated == 0
        order = await OrderRepository.get_by_id(order_id, test_session)
        assert order.documents_status == DocumentStatus.FAILED
