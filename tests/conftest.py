"""
Pytest configuration and fixtures for tests.

This file is automatically loaded by pytest and provides shared fixtures
and configuration for all tests.
"""

import os
import sys
from itertools import count

import pytest
import pytest_asyncio

# Set required environment variables before importing app modules
# These are required for config.py to load properly
os.environ.setdefault('RUNTIME_ENVIRONMENT', 'TEST')
os.environ.setdefault('DB_URL', 'sqlite+aiosqlite:///:memory:')
os.environ.setdefault('TOKEN', '')
os.environ.setdefault('ADMIN_ID_LIST', '')
os.environ.setdefault('ADMIN_API_TOKEN', '')
os.environ.setdefault('DOCUMENT_RETRY_JOB_ENABLED', 'false')
os.environ.setdefault('DOCUMENT_MAX_ATTEMPTS', '3')

# Add parent directory to Python path so tests can import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

_emails = count(1)


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """
    File-backed SQLite database bound as the application engine.

    File-backed (not :memory:) so that separate sessions use separate
    connections and really contend for the database lock.
    """
    import db

    engine = db.configure_engine(f"sqlite+aiosqlite:///{tmp_path / 'storefront_test.db'}")
    await db.create_db_and_tables()

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def test_session(test_engine):
    """Session on the test database."""
    from db import get_db_session

    async with get_db_session() as session:
        yield session


@pytest.fixture
def storage_gateway(tmp_path):
    """Local storage gateway writing into the test's tmp directory."""
    from services.storage import LocalStorageGateway, set_storage_gateway

    gateway = LocalStorageGateway(root=tmp_path / "storage", public_url="https://cdn.test/storage")
    set_storage_gateway(gateway)
    yield gateway
    set_storage_gateway(None)


# ============================================================================
# Seed Helpers
# ============================================================================

@pytest.fixture
def seed_order(test_session):
    """
    Factory creating a user, products and an order with its payment.

    Usage:
        order_id, product_ids = await seed_order(items=[(5, 3)])
    items is a list of (product stock, ordered quantity).
    """
    from db import session_commit
    from enums.order_status import OrderStatus
    from enums.payment_status import PaymentStatus
    from models.order import OrderDTO
    from models.orderItem import OrderItemDTO
    from models.payment import PaymentDTO
    from models.product import ProductDTO
    from models.user import UserDTO
    from repositories.order import OrderRepository
    from repositories.orderItem import OrderItemRepository
    from repositories.payment import PaymentRepository
    from repositories.product import ProductRepository
    from repositories.user import UserRepository

    async def _seed(items=((5, 3),),
                    price: float = 1499.0,
                    status: OrderStatus = OrderStatus.PENDING,
                    payment_status: PaymentStatus = PaymentStatus.PENDING,
                    with_payment: bool = True):
        user_id = await UserRepository.create(UserDTO(
            email=f"rider{next(_emails)}@example.com",
            full_name="Asha Rao",
            address="12 MG Road, Bengaluru",
        ), test_session)

        product_ids = []
        for index, (stock, _) in enumerate(items):
            product_ids.append(await ProductRepository.create(ProductDTO(
                name=f"Trail Bike {index + 1}",
                description="Hardtail mountain bike",
                price=price,
                stock=stock,
            ), test_session))

        order_id = await OrderRepository.create(OrderDTO(
            user_id=user_id,
            status=status,
            total_price=sum(price * quantity for _, quantity in items),
            shipping_address="221B Residency Road, Bengaluru 560025",
            customer_mobile="9876543210",
        ), test_session)
        await OrderItemRepository.create_many([
            OrderItemDTO(order_id=order_id, product_id=product_id, quantity=quantity, price=price)
            for product_id, (_, quantity) in zip(product_ids, items)
        ], test_session)
        if with_payment:
            await PaymentRepository.create(PaymentDTO(
                order_id=order_id,
                transaction_id="UTR402912345678",
                status=payment_status,
            ), test_session)
        await session_commit(test_session)
        return order_id, product_ids

    return _seed


@pytest.fixture
def no_document_task():
    """Keep the post-approval document task from running in the background."""
    from unittest.mock import patch

    with patch('services.order_verification.DocumentFulfillmentService.schedule') as mock_schedule:
        yield mock_schedule
