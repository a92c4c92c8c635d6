import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_commit, session_rollback
from enums.document_status import DocumentStatus
from enums.order_decision import OrderDecision
from enums.order_status import OrderStatus
from exceptions.base import StorefrontException
from exceptions.order import OrderAlreadyProcessedException, OrderNotFoundException
from exceptions.store import StoreWriteFailureException
from models.order import OrderActionResultDTO
from models.orderItem import OrderItemDTO
from models.product import StockAdjustmentDTO
from repositories.order import OrderRepository
from repositories.orderItem import OrderItemRepository
from repositories.payment import PaymentRepository
from services.document_fulfillment import DocumentFulfillmentService
from services.inventory import InventoryService
from services.notification import NotificationService
from utils.order_state_machine import OrderStateMachine
from utils.transaction_manager import TransactionManager

logger = logging.getLogger(__name__)


class OrderVerificationService:
    """
    Admin approval / rejection of manually verified bank transfers.

    An order leaves PENDING exactly once. The order status, the payment status
    and (on approval) the stock decrements are written in one transaction:

        1. order status   PENDING -> APPROVED | REJECTED  (compare-and-swap)
        2. payment status           VERIFIED | FAILED
        3. stock decrement per line item (approval only, one savepoint each)

    Invoice and shipping label are produced afterwards by
    DocumentFulfillmentService and never affect the decision.
    """

    @staticmethod
    async def process(order_id: int, decision: OrderDecision, session: AsyncSession) -> OrderActionResultDTO:
        """
        Apply an admin decision to a pending order.

        Args:
            order_id: Order ID
            decision: APPROVE or REJECT
            session: Database session (committed by this method)

        Returns:
            OrderActionResultDTO with the final statuses and stock adjustments

        Raises:
            OrderNotFoundException: Order does not exist
            OrderAlreadyProcessedException: Order is not pending (also when a
                concurrent call decided it first)
            StoreWriteFailureException: Order or payment status could not be
                written; nothing was persisted
        """
        order = await OrderRepository.get_by_id(order_id, session)
        if order is None:
            raise OrderNotFoundException(order_id)
        if order.status != OrderStatus.PENDING:
            raise OrderAlreadyProcessedException(order_id, order.status.value)

        items: list[OrderItemDTO] = []
        if decision == OrderDecision.APPROVE:
            items = await OrderItemRepository.get_by_order_id(order_id, session)

        order_status, payment_status = OrderStateMachine.outcome_for(decision)
        decided_at = datetime.now()
        status_values = {'decided_at': decided_at}
        if decision == OrderDecision.APPROVE:
            status_values['documents_status'] = DocumentStatus.PENDING
            status_values['documents_updated_at'] = decided_at

        # Step 1: order status
        try:
            transitioned = await OrderRepository.transition_status(
                order_id, OrderStatus.PENDING, order_status, session, **status_values
            )
        except SQLAlchemyError as e:
            raise await OrderVerificationService._store_write_failure(order_id, "update_order_status", e, session) from e

        if not transitioned:
            await session_rollback(session)
            current = await OrderRepository.get_by_id(order_id, session)
            current_state = current.status.value if current and current.status else None
            logger.info(f"Order {order_id} was decided by a concurrent request (status: {current_state})")
            raise OrderAlreadyProcessedException(order_id, current_state)

        # Step 2: paired payment status
        try:
            payment_updated = await PaymentRepository.update_status(order_id, payment_status, session)
        except SQLAlchemyError as e:
            raise await OrderVerificationService._store_write_failure(order_id, "update_payment_status", e, session) from e

        if not payment_updated:
            raise await OrderVerificationService._store_write_failure(
                order_id, "update_payment_status", "payment record missing", session
            )

        # Step 3: inventory
        stock_adjustments: list[StockAdjustmentDTO] = []
        skipped_product_ids: list[int] = []
        for index, item in enumerate(items):
            try:
                adjustment = await TransactionManager.execute_with_savepoint(
                    session,
                    lambda s, item=item: InventoryService.decrement(item.product_id, item.quantity, s),
                    savepoint_name=f"stock_item_{index}"
                )
                stock_adjustments.append(adjustment)
            except (StorefrontException, SQLAlchemyError) as e:
                logger.warning(
                    f"Stock not adjusted for order {order_id}, product {item.product_id} "
                    f"(quantity {item.quantity}): {e}"
                )
                skipped_product_ids.append(item.product_id)

        try:
            await session_commit(session)
        except SQLAlchemyError as e:
            raise await OrderVerificationService._store_write_failure(order_id, "commit", e, session) from e

        OrderStateMachine.validate_and_log_transition(order_id, OrderStatus.PENDING, order_status)
        for adjustment in stock_adjustments:
            logger.info(
                f"Order {order_id}: product {adjustment.product_id} stock -{adjustment.quantity} "
                f"-> {adjustment.new_stock}"
            )

        if skipped_product_ids:
            await NotificationService.stock_adjustment_skipped(order_id, skipped_product_ids)

        if decision == OrderDecision.APPROVE:
            DocumentFulfillmentService.schedule(order_id)

        return OrderActionResultDTO(
            order_id=order_id,
            decision=decision,
            order_status=order_status,
            payment_status=payment_status,
            stock_adjustments=stock_adjustments,
            skipped_product_ids=skipped_product_ids,
        )

    @staticmethod
    async def _store_write_failure(order_id: int,
                                   step: str,
                                   error: Exception | str,
                                   session: AsyncSession) -> StoreWriteFailureException:
        """Roll back, log, alert operators and build the exception to raise."""
        try:
            await session_rollback(session)
        except SQLAlchemyError as rollback_error:
            logger.critical(f"Order {order_id}: rollback after failed step '{step}' failed: {rollback_error}")

        reason = str(error)
        logger.error(f"STORE_WRITE_FAILURE: order {order_id}, step '{step}': {reason}")
        await NotificationService.store_write_failure(order_id, step, reason)
        return StoreWriteFailureException(order_id, step, reason)
