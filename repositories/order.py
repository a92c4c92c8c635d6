from datetime import datetime
import logging

from sqlalchemy import select, update, or_, and_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from db import session_execute, session_flush
from enums.document_status import DocumentStatus
from enums.order_status import OrderStatus
from models.order import Order, OrderDTO, OrderDetailsDTO, OrderLineDTO
from models.orderItem import OrderItem

logger = logging.getLogger(__name__)


class OrderRepository:
    @staticmethod
    async def create(order_dto: OrderDTO, session: AsyncSession) -> int:
        order = Order(**order_dto.model_dump(exclude_none=True))
        session.add(order)
        await session_flush(session)
        return order.id

    @staticmethod
    async def get_by_id(order_id: int, session: AsyncSession) -> OrderDTO | None:
        # populate_existing: field-scoped UPDATEs bypass the identity map
        stmt = select(Order).where(Order.id == order_id).execution_options(populate_existing=True)
        order = await session_execute(stmt, session)
        order = order.scalar()
        if order is not None:
            return OrderDTO.model_validate(order, from_attributes=True)
        else:
            return None

    @staticmethod
    async def transition_status(order_id: int,
                                from_status: OrderStatus,
                                to_status: OrderStatus,
                                session: AsyncSession,
                                **extra_values) -> bool:
        """
        Compare-and-swap status update.

        The UPDATE only matches while the order is still in from_status, so of
        two concurrent callers that both read the old status exactly one wins.

        Args:
            order_id: Order ID
            from_status: Status the order must currently have
            to_status: New status
            session: Database session
            **extra_values: Additional columns written in the same statement

        Returns:
            True if this call performed the transition, False otherwise
        """
        stmt = (
            update(Order)
            .where(Order.id == order_id, Order.status == from_status)
            .values(status=to_status, **extra_values)
            .execution_options(synchronize_session=False)
        )
        result = await session_execute(stmt, session)
        return result.rowcount == 1

    @staticmethod
    async def update_documents_status(order_id: int,
                                      status: DocumentStatus,
                                      session: AsyncSession,
                                      error: str | None = None,
                                      increment_attempts: bool = False,
                                      expected_status: DocumentStatus | None = None) -> bool:
        """
        Field-scoped update of the document follow-up state.

        With expected_status the write only happens while the order still has
        that documents_status, so a late failure cannot overwrite GENERATED.
        """
        values = {
            'documents_status': status,
            'documents_last_error': error,
            'documents_updated_at': datetime.now(),
        }
        if increment_attempts:
            values['documents_attempts'] = Order.documents_attempts + 1
        stmt = update(Order).where(Order.id == order_id)
        if expected_status is not None:
            stmt = stmt.where(Order.documents_status == expected_status)
        stmt = stmt.values(**values).execution_options(synchronize_session=False)
        result = await session_execute(stmt, session)
        return result.rowcount == 1

    @staticmethod
    async def get_documents_due_for_retry(max_attempts: int,
                                          stale_before: datetime,
                                          session: AsyncSession) -> list[int]:
        """
        Approved orders whose invoice/label still need to be produced.

        FAILED documents are retried until max_attempts. PENDING documents are
        only picked up once stale, so an in-flight first attempt is not raced.
        """
        stmt = (
            select(Order.id)
            .where(
                Order.status == OrderStatus.APPROVED,
                Order.documents_attempts < max_attempts,
                or_(
                    Order.documents_status == DocumentStatus.FAILED,
                    and_(
                        Order.documents_status == DocumentStatus.PENDING,
                        or_(Order.documents_updated_at.is_(None), Order.documents_updated_at <= stale_before)
                    )
                )
            )
            .order_by(Order.id)
        )
        result = await session_execute(stmt, session)
        return list(result.scalars().all())

    @staticmethod
    async def get_details(order_id: int, session: AsyncSession) -> OrderDetailsDTO | None:
        stmt = OrderRepository._details_query().where(Order.id == order_id)
        result = await session_execute(stmt, session)
        order = result.scalar_one_or_none()
        if order is None:
            return None
        return OrderRepository._to_details(order)

    @staticmethod
    async def get_all_details(session: AsyncSession,
                              status: OrderStatus | None = None,
                              user_id: int | None = None) -> list[OrderDetailsDTO]:
        """Newest first, optionally filtered by status (admin list) or owner (order history)."""
        stmt = OrderRepository._details_query().order_by(Order.created_at.desc(), Order.id.desc())
        if status is not None:
            stmt = stmt.where(Order.status == status)
        if user_id is not None:
            stmt = stmt.where(Order.user_id == user_id)
        result = await session_execute(stmt, session)
        return [OrderRepository._to_details(order) for order in result.scalars().all()]

    @staticmethod
    def _details_query():
        return select(Order).execution_options(populate_existing=True).options(
            selectinload(Order.items).selectinload(OrderItem.product),
            selectinload(Order.user),
            selectinload(Order.payment),
            selectinload(Order.invoice),
            selectinload(Order.shipping_label),
        )

    @staticmethod
    def _to_details(order: Order) -> OrderDetailsDTO:
        lines = [
            OrderLineDTO(
                product_id=item.product_id,
                product_name=item.product.name if item.product else f"Product {item.product_id}",
                quantity=item.quantity,
                price=item.price,
            )
            for item in order.items
        ]
        return OrderDetailsDTO(
            order=OrderDTO.model_validate(order, from_attributes=True),
            lines=lines,
            customer_name=order.user.full_name if order.user else None,
            customer_email=order.user.email if order.user else None,
            transaction_id=order.payment.transaction_id if order.payment else None,
            screenshot_url=order.payment.screenshot_url if order.payment else None,
            payment_status=order.payment.status if order.payment else None,
            invoice_number=order.invoice.invoice_number if order.invoice else None,
            invoice_url=order.invoice.invoice_url if order.invoice else None,
            tracking_number=order.shipping_label.tracking_number if order.shipping_label else None,
            label_url=order.shipping_label.label_url if order.shipping_label else None,
        )
