import logging

from sqlalchemy.ext.asyncio import AsyncSession

from db import session_commit
from enums.order_status import OrderStatus
from enums.payment_status import PaymentStatus
from exceptions.base import StorefrontException
from exceptions.order import EmptyOrderException
from exceptions.payment import MissingTransactionReferenceException
from exceptions.product import ProductNotFoundException
from exceptions.user import UserNotFoundException
from models.order import CheckoutRequestDTO, OrderDTO
from models.orderItem import OrderItemDTO
from models.payment import PaymentDTO, PaymentProofDTO
from repositories.order import OrderRepository
from repositories.orderItem import OrderItemRepository
from repositories.payment import PaymentRepository
from repositories.product import ProductRepository
from repositories.user import UserRepository
from services.payment import PaymentService

logger = logging.getLogger(__name__)


class CheckoutService:

    @staticmethod
    async def place_order(request: CheckoutRequestDTO,
                          session: AsyncSession,
                          payment_proof: PaymentProofDTO | None = None) -> OrderDTO:
        """
        Create a pending order with its line items and pending payment.

        Unit prices are taken from the products at checkout time. Stock is
        not reserved; it is only reduced when an admin approves the payment.
        A failing proof-of-payment upload is logged and does not fail the order.
        """
        if not request.items:
            raise EmptyOrderException(request.user_id)
        if not request.transaction_id:
            raise MissingTransactionReferenceException()

        user = await UserRepository.get_by_id(request.user_id, session)
        if user is None:
            raise UserNotFoundException(request.user_id)

        products = await ProductRepository.get_by_ids([item.product_id for item in request.items], session)
        for item in request.items:
            if item.product_id not in products:
                raise ProductNotFoundException(item.product_id)

        total_price = sum(products[item.product_id].price * item.quantity for item in request.items)

        order_id = await OrderRepository.create(OrderDTO(
            user_id=request.user_id,
            status=OrderStatus.PENDING,
            total_price=total_price,
            shipping_address=request.shipping_address,
            customer_mobile=request.customer_mobile,
        ), session)
        await OrderItemRepository.create_many([
            OrderItemDTO(
                order_id=order_id,
                product_id=item.product_id,
                quantity=item.quantity,
                price=products[item.product_id].price,
            )
            for item in request.items
        ], session)
        await PaymentRepository.create(PaymentDTO(
            order_id=order_id,
            transaction_id=request.transaction_id,
            status=PaymentStatus.PENDING,
        ), session)
        await session_commit(session)
        logger.info(f"Order {order_id} placed by user {request.user_id}: {len(request.items)} item(s), total {total_price:.2f}")

        if payment_proof is not None:
            try:
                await PaymentService.attach_proof(order_id, payment_proof, session)
            except StorefrontException as e:
                logger.warning(f"Proof of payment upload failed for order {order_id}, order kept: {e}")

        return await OrderRepository.get_by_id(order_id, session)
