import logging

from sqlalchemy.ext.asyncio import AsyncSession

from exceptions.user import UserNotFoundException
from models.order import OrderDetailsDTO
from repositories.order import OrderRepository
from repositories.user import UserRepository

logger = logging.getLogger(__name__)


class OrderService:

    @staticmethod
    async def get_user_orders(user_id: int, session: AsyncSession) -> list[OrderDetailsDTO]:
        """
        Order history of one customer, newest first.

        Each entry carries the payment status and, once the order is approved
        and its documents are generated, the invoice and shipping label URLs.

        Raises:
            UserNotFoundException: User does not exist
        """
        user = await UserRepository.get_by_id(user_id, session)
        if user is None:
            raise UserNotFoundException(user_id)

        orders = await OrderRepository.get_all_details(session, user_id=user_id)
        logger.debug(f"Loaded {len(orders)} order(s) for user {user_id}")
        return orders
