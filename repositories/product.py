from sqlalchemy import select, update, delete, case
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from models.product import Product, ProductDTO


class ProductRepository:

    @staticmethod
    async def create(product_dto: ProductDTO, session: AsyncSession) -> int:
        product = Product(**product_dto.model_dump(exclude_none=True))
        session.add(product)
        await session_flush(session)
        return product.id

    @staticmethod
    async def get_by_id(product_id: int, session: AsyncSession) -> ProductDTO | None:
        stmt = select(Product).where(Product.id == product_id).execution_options(populate_existing=True)
        product = await session_execute(stmt, session)
        product = product.scalar()
        if product is not None:
            return ProductDTO.model_validate(product, from_attributes=True)
        return None

    @staticmethod
    async def get_by_ids(product_ids: list[int], session: AsyncSession) -> dict[int, ProductDTO]:
        """
        Batch load products for multiple ids (eliminates N+1 queries).

        Returns:
            Dict mapping product_id -> ProductDTO (unknown ids are absent)
        """
        if not product_ids:
            return {}

        stmt = select(Product).where(Product.id.in_(product_ids))
        result = await session_execute(stmt, session)
        return {product.id: ProductDTO.model_validate(product, from_attributes=True)
                for product in result.scalars().all()}

    @staticmethod
    async def get_all(session: AsyncSession) -> list[ProductDTO]:
        stmt = select(Product).order_by(Product.created_at.desc(), Product.id.desc())
        result = await session_execute(stmt, session)
        return [ProductDTO.model_validate(product, from_attributes=True) for product in result.scalars().all()]

    @staticmethod
    async def update(product_id: int, values: dict, session: AsyncSession) -> bool:
        """
        Field-scoped catalog update (name, description, price, images).

        Returns:
            True if the product exists and was updated
        """
        stmt = (
            update(Product)
            .where(Product.id == product_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await session_execute(stmt, session)
        return result.rowcount == 1

    @staticmethod
    async def delete(product_id: int, session: AsyncSession) -> bool:
        stmt = delete(Product).where(Product.id == product_id).execution_options(synchronize_session=False)
        result = await session_execute(stmt, session)
        return result.rowcount == 1

    @staticmethod
    async def decrement_stock(product_id: int, quantity: int, session: AsyncSession) -> int | None:
        """
        Atomically decrement stock, floored at zero.

        Single conditional UPDATE ... RETURNING, so concurrent decrements on the
        same product serialize in the database instead of racing through a
        read-modify-write in Python.

        Returns:
            New stock value, or None if the product does not exist
        """
        stmt = (
            update(Product)
            .where(Product.id == product_id)
            .values(stock=case((Product.stock > quantity, Product.stock - quantity), else_=0))
            .returning(Product.stock)
            .execution_options(synchronize_session=False)
        )
        result = await session_execute(stmt, session)
        return result.scalar_one_or_none()
