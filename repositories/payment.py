from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from enums.payment_status import PaymentStatus
from models.payment import Payment, PaymentDTO


class PaymentRepository:

    @staticmethod
    async def create(payment_dto: PaymentDTO, session: AsyncSession) -> int:
        payment = Payment(**payment_dto.model_dump(exclude_none=True))
        session.add(payment)
        await session_flush(session)
        return payment.id

    @staticmethod
    async def get_by_order_id(order_id: int, session: AsyncSession) -> PaymentDTO | None:
        stmt = select(Payment).where(Payment.order_id == order_id).execution_options(populate_existing=True)
        result = await session_execute(stmt, session)
        payment = result.scalar_one_or_none()
        if payment:
            return PaymentDTO.model_validate(payment, from_attributes=True)
        return None

    @staticmethod
    async def update_status(order_id: int, status: PaymentStatus, session: AsyncSession) -> bool:
        """
        Field-scoped status update of the payment belonging to an order.

        Only the verification workflow calls this, always together with the
        order status update for the same decision.

        Returns:
            True if a payment row was updated, False if the order has no payment
        """
        stmt = (
            update(Payment)
            .where(Payment.order_id == order_id)
            .values(status=status)
            .execution_options(synchronize_session=False)
        )
        result = await session_execute(stmt, session)
        return result.rowcount == 1

    @staticmethod
    async def update_screenshot_url(order_id: int, screenshot_url: str, session: AsyncSession) -> bool:
        """
        Attach a proof-of-payment URL while the payment is still pending.

        Returns:
            True if updated, False if the payment is missing or already decided
        """
        stmt = (
            update(Payment)
            .where(Payment.order_id == order_id, Payment.status == PaymentStatus.PENDING)
            .values(screenshot_url=screenshot_url)
            .execution_options(synchronize_session=False)
        )
        result = await session_execute(stmt, session)
        return result.rowcount == 1
