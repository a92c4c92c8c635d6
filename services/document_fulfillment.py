import asyncio
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

import config
from db import get_db_session, session_commit, session_rollback
from enums.document_status import DocumentStatus
from enums.order_status import OrderStatus
from exceptions.document import DocumentException
from exceptions.order import InvalidOrderStateException, OrderNotFoundException
from models.order import OrderDetailsDTO
from repositories.invoice import InvoiceRepository
from repositories.order import OrderRepository
from repositories.shipping_label import ShippingLabelRepository
from services.document import DocumentService
from services.notification import NotificationService
from services.storage import get_storage_gateway
from utils.error_handler import describe_error

logger = logging.getLogger(__name__)

DOCUMENT_CONTENT_TYPE = "text/plain; charset=utf-8"

# Orders past approval still need their paperwork
DOCUMENT_ELIGIBLE_STATUSES = (OrderStatus.APPROVED, OrderStatus.SHIPPED, OrderStatus.DELIVERED)


class DocumentFulfillmentService:
    """
    Invoice + shipping label follow-up of an approved order.

    Runs after the approval has been committed. Progress is tracked on the
    order (documents_status / documents_attempts / documents_last_error) so
    failed runs can be re-driven by DocumentRetryJob or by an admin.
    """

    # Strong references, otherwise pending tasks may be garbage collected
    _background_tasks: set[asyncio.Task] = set()

    @staticmethod
    def invoice_path(order_id: int) -> str:
        return f"{config.DOCUMENTS_BUCKET}/invoices/order_{order_id}.txt"

    @staticmethod
    def label_path(order_id: int) -> str:
        return f"{config.DOCUMENTS_BUCKET}/labels/order_{order_id}.txt"

    @staticmethod
    def schedule(order_id: int) -> asyncio.Task | None:
        """Start document generation for an order without waiting for it."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(f"No running event loop, documents for order {order_id} left to the retry job")
            return None

        task = loop.create_task(DocumentFulfillmentService._run(order_id))
        DocumentFulfillmentService._background_tasks.add(task)
        task.add_done_callback(DocumentFulfillmentService._background_tasks.discard)
        return task

    @staticmethod
    async def _run(order_id: int) -> bool:
        try:
            async with get_db_session() as session:
                return await DocumentFulfillmentService.generate_documents(order_id, session)
        except Exception as e:
            logger.error(f"Document task for order {order_id} crashed: {e}", exc_info=True)
            return False

    @staticmethod
    async def generate_documents(order_id: int, session: AsyncSession) -> bool:
        """
        Render, upload and record the invoice and shipping label of an order.

        Safe to call repeatedly: uploads go to fixed paths, records are
        upserted and an existing invoice number is reused.

        Returns:
            True if documents exist after the call, False otherwise
        """
        order = await OrderRepository.get_by_id(order_id, session)
        if order is None:
            logger.warning(f"Documents requested for unknown order {order_id}")
            return False
        if order.status not in DOCUMENT_ELIGIBLE_STATUSES:
            logger.info(f"Order {order_id} is {order.status.value}, no documents generated")
            return False
        if order.documents_status == DocumentStatus.GENERATED:
            logger.debug(f"Documents for order {order_id} already generated")
            return True

        attempt = (order.documents_attempts or 0) + 1
        await OrderRepository.update_documents_status(order_id, DocumentStatus.PENDING, session,
                                                      increment_attempts=True)
        await session_commit(session)

        try:
            details = await OrderRepository.get_details(order_id, session)
            existing_invoice = await InvoiceRepository.get_by_order_id(order_id, session)
            if existing_invoice is not None:
                invoice_number = existing_invoice.invoice_number
            else:
                invoice_number = await InvoiceRepository.get_next_invoice_number(session)
            details = details.model_copy(update={'invoice_number': invoice_number})

            invoice_bytes = DocumentService.render_invoice(details)
            label_bytes = DocumentService.render_shipping_label(details)

            gateway = get_storage_gateway()
            invoice_url = await gateway.upload(invoice_bytes, DOCUMENT_CONTENT_TYPE,
                                               DocumentFulfillmentService.invoice_path(order_id))
            label_url = await gateway.upload(label_bytes, DOCUMENT_CONTENT_TYPE,
                                             DocumentFulfillmentService.label_path(order_id))

            await InvoiceRepository.upsert(order_id, invoice_number, invoice_url, session)
            await ShippingLabelRepository.upsert(order_id, DocumentService.tracking_number(order_id),
                                                 label_url, session)
            await OrderRepository.update_documents_status(order_id, DocumentStatus.GENERATED, session)
            await session_commit(session)
        except (DocumentException, SQLAlchemyError) as e:
            await session_rollback(session)
            error = describe_error(e)
            logger.error(
                f"Document generation failed for order {order_id} "
                f"(attempt {attempt}/{config.DOCUMENT_MAX_ATTEMPTS}): {error}"
            )
            await OrderRepository.update_documents_status(order_id, DocumentStatus.FAILED, session,
                                                          error=error[:1000],
                                                          expected_status=DocumentStatus.PENDING)
            await session_commit(session)
            if attempt >= config.DOCUMENT_MAX_ATTEMPTS:
                await NotificationService.documents_failed(order_id, attempt, error)
            return False

        logger.info(f"Documents generated for order {order_id}: invoice {invoice_number}")
        return True

    @staticmethod
    async def retry(order_id: int, session: AsyncSession) -> OrderDetailsDTO:
        """
        Admin-triggered re-run, also after the retry job has given up.

        Raises:
            OrderNotFoundException: Order does not exist
            InvalidOrderStateException: Order was never approved
        """
        order = await OrderRepository.get_by_id(order_id, session)
        if order is None:
            raise OrderNotFoundException(order_id)
        if order.status not in DOCUMENT_ELIGIBLE_STATUSES:
            raise InvalidOrderStateException(order_id, order.status.value, OrderStatus.APPROVED.value)

        await DocumentFulfillmentService.generate_documents(order_id, session)
        return await OrderRepository.get_details(order_id, session)
