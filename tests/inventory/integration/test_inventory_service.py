"""
Integration Tests for InventoryService.decrement()
"""

import pytest

from db import session_commit
from services.inventory import InventoryService
from repositories.product import ProductRepository
from models.product import ProductDTO
from exceptions.product import InvalidStockQuantityException, ProductNotFoundException


async def create_product(session, stock: int) -> int:
    product_id = await ProductRepository.create(ProductDTO(name="Road Bike", price=25000.0, stock=stock), session)
    await session_commit(session)
    return product_id


class TestDecrement:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("stock,quantity,expected", [
        (5, 3, 2),
        (5, 5, 0),
        (2, 5, 0),
        (0, 1, 0),
    ])
    async def test_floored_decrement(self, test_session, stock, quantity, expected):
        # Arrange
        product_id = await create_product(test_session, stock)

        # Act
        adjustment = await InventoryService.decrement(product_id, quantity, test_session)
        await session_commit(test_session)

        # Assert
        assert adjustment.new_stock == expected
        assert adjustment.quantity == quantity
        product = await ProductRepository.get_by_id(product_id, test_session)
        assert product.stock == expected

    @pytest.mark.asyncio
    async def test_unknown_product(self, test_session):
        with pytest.raises(ProductNotFoundException) as exc_info:
            await InventoryService.decrement(999, 1, test_session)
        assert exc_info.value.product_id == 999

    @pytest.mark.asyncio
    @pytest.mark.parametrize("quantity", [0, -2, 1.5, True])
    async def test_invalid_quantity_has_no_effect(self, test_session, quantity):
        # Arrange
        product_id = await create_product(test_session, 5)

        # Act & Assert
        with pytest.raises(InvalidStockQuantityException):
            await InventoryService.decrement(product_id, quantity, test_session)

        product = await ProductRepository.get_by_id(product_id, test_session)
        assert product.stock == 5
