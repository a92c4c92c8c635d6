import logging

from sqlalchemy.ext.asyncio import AsyncSession

from exceptions.product import InvalidStockQuantityException, ProductNotFoundException
from models.product import StockAdjustmentDTO
from repositories.product import ProductRepository

logger = logging.getLogger(__name__)


class InventoryService:

    @staticmethod
    async def decrement(product_id: int, quantity: int, session: AsyncSession) -> StockAdjustmentDTO:
        """
        Reduce a product's stock by quantity, never below zero.

        The decrement is one atomic UPDATE; the caller owns the transaction.

        Raises:
            InvalidStockQuantityException: quantity is not a positive integer
            ProductNotFoundException: product does not exist
        """
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise InvalidStockQuantityException(product_id, quantity)

        new_stock = await ProductRepository.decrement_stock(product_id, quantity, session)
        if new_stock is None:
            raise ProductNotFoundException(product_id)

        if new_stock == 0:
            logger.info(f"Product {product_id} is out of stock after decrement of {quantity}")
        return StockAdjustmentDTO(product_id=product_id, quantity=quantity, new_stock=new_stock)
