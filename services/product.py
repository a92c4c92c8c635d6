import logging

from sqlalchemy.ext.asyncio import AsyncSession

from db import session_commit
from exceptions.product import ProductInUseException, ProductNotFoundException
from models.product import ProductCreateRequestDTO, ProductDTO, ProductUpdateRequestDTO
from repositories.orderItem import OrderItemRepository
from repositories.product import ProductRepository

logger = logging.getLogger(__name__)


class ProductService:
    """
    Catalog management.

    Stock is set once at creation. Afterwards only the verification
    workflow changes it (floored decrement on approval).
    """

    @staticmethod
    async def create(request: ProductCreateRequestDTO, session: AsyncSession) -> ProductDTO:
        product_id = await ProductRepository.create(ProductDTO(**request.model_dump()), session)
        await session_commit(session)
        logger.info(f"Product {product_id} '{request.name}' created (price {request.price:.2f}, stock {request.stock})")
        return await ProductRepository.get_by_id(product_id, session)

    @staticmethod
    async def update(product_id: int, request: ProductUpdateRequestDTO, session: AsyncSession) -> ProductDTO:
        values = request.model_dump(exclude_unset=True)
        if 'name' in values and values['name'] is not None:
            values['name'] = values['name'].strip()
        # Explicit nulls are ignored, the columns are NOT NULL
        values = {key: value for key, value in values.items() if value is not None}

        if not values:
            product = await ProductRepository.get_by_id(product_id, session)
            if product is None:
                raise ProductNotFoundException(product_id)
            return product

        if not await ProductRepository.update(product_id, values, session):
            raise ProductNotFoundException(product_id)
        await session_commit(session)
        logger.info(f"Product {product_id} updated: {', '.join(sorted(values))}")
        return await ProductRepository.get_by_id(product_id, session)

    @staticmethod
    async def get(product_id: int, session: AsyncSession) -> ProductDTO:
        product = await ProductRepository.get_by_id(product_id, session)
        if product is None:
            raise ProductNotFoundException(product_id)
        return product

    @staticmethod
    async def get_all(session: AsyncSession) -> list[ProductDTO]:
        """Newest first."""
        return await ProductRepository.get_all(session)

    @staticmethod
    async def delete(product_id: int, session: AsyncSession) -> None:
        """
        Remove a product from the catalog.

        Products that appear on any order stay, line items keep a reference
        to them for invoices and the order history.
        """
        if await ProductRepository.get_by_id(product_id, session) is None:
            raise ProductNotFoundException(product_id)
        if await OrderItemRepository.exists_for_product(product_id, session):
            raise ProductInUseException(product_id)

        await ProductRepository.delete(product_id, session)
        await session_commit(session)
        logger.info(f"Product {product_id} deleted")
