"""
Integration Tests for the product catalog

Covers ProductService and the /api/products and /api/admin/products endpoints.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from unittest.mock import patch

from app import app
from services.product import ProductService
from repositories.product import ProductRepository
from models.product import ProductCreateRequestDTO, ProductUpdateRequestDTO
from exceptions.product import ProductInUseException, ProductNotFoundException


@pytest_asyncio.fixture
async def client(test_engine):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


def helmet_payload(**overrides) -> dict:
    payload = {
        "name": "Helmet",
        "description": "MIPS road helmet",
        "price": 2500.0,
        "stock": 8,
        "images": ["https://cdn.test/storage/products/helmet-1.jpg"],
    }
    payload.update(overrides)
    return payload


class TestProductService:

    @pytest.mark.asyncio
    async def test_create_and_get(self, test_session):
        # Act
        product = await ProductService.create(ProductCreateRequestDTO(**helmet_payload(name="  Helmet  ")), test_session)

        # Assert
        loaded = await ProductService.get(product.id, test_session)
        assert loaded.name == "Helmet"
        assert loaded.stock == 8
        assert loaded.images == ["https://cdn.test/storage/products/helmet-1.jpg"]

    @pytest.mark.asyncio
    async def test_update_leaves_stock_alone(self, test_session):
        # Arrange
        product = await ProductService.create(ProductCreateRequestDTO(**helmet_payload()), test_session)

        # Act
        updated = await ProductService.update(
            product.id, ProductUpdateRequestDTO(price=2299.0, images=[]), test_session
        )

        # Assert
        assert updated.price == 2299.0
        assert updated.images == []
        assert updated.name == "Helmet"
        assert updated.stock == 8

    @pytest.mark.asyncio
    async def test_update_unknown_product(self, test_session):
        with pytest.raises(ProductNotFoundException):
            await ProductService.update(999, ProductUpdateRequestDTO(name="Ghost"), test_session)

    @pytest.mark.asyncio
    async def test_list_newest_first(self, test_session):
        first = await ProductService.create(ProductCreateRequestDTO(**helmet_payload(name="Bell")), test_session)
        second = await ProductService.create(ProductCreateRequestDTO(**helmet_payload(name="Pump")), test_session)

        products = await ProductService.get_all(test_session)

        assert [p.id for p in products] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_delete_unreferenced_product(self, test_session):
        product = await ProductService.create(ProductCreateRequestDTO(**helmet_payload()), test_session)

        await ProductService.delete(product.id, test_session)

        assert await ProductRepository.get_by_id(product.id, test_session) is None

    @pytest.mark.asyncio
    async def test_delete_ordered_product_refused(self, test_session, seed_order):
        # Arrange
        _, product_ids = await seed_order()

        # Act
        with pytest.raises(ProductInUseException):
            await ProductService.delete(product_ids[0], test_session)

        # Assert
        assert await ProductRepository.get_by_id(product_ids[0], test_session) is not None


class TestProductEndpoints:

    @pytest.mark.asyncio
    async def test_admin_create_then_public_read(self, client):
        # Act
        created = await client.post("/api/admin/products", json=helmet_payload())
        product_id = created.json()["product"]["id"]
        listing = await client.get("/api/products")
        single = await client.get(f"/api/products/{product_id}")

        # Assert
        assert created.status_code == 201
        assert [p["id"] for p in listing.json()] == [product_id]
        assert single.status_code == 200
        assert single.json()["name"] == "Helmet"
        assert single.json()["stock"] == 8

    @pytest.mark.asyncio
    @pytest.mark.parametrize("overrides", [{"price": 0}, {"stock": -1}, {"name": "   "}])
    async def test_invalid_product_rejected(self, client, overrides):
        response = await client.post("/api/admin/products", json=helmet_payload(**overrides))

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_patch_updates_catalog_fields(self, client):
        product_id = (await client.post("/api/admin/products", json=helmet_payload())).json()["product"]["id"]

        response = await client.patch(f"/api/admin/products/{product_id}",
                                      json={"description": "Aero road helmet", "price": 2799.0})

        assert response.status_code == 200
        assert response.json()["product"]["description"] == "Aero road helmet"
        assert response.json()["product"]["price"] == 2799.0

    @pytest.mark.asyncio
    async def test_patch_cannot_change_stock(self, client):
        # Arrange
        product_id = (await client.post("/api/admin/products", json=helmet_payload())).json()["product"]["id"]

        # Act
        response = await client.patch(f"/api/admin/products/{product_id}", json={"stock": 100})

        # Assert
        assert response.status_code == 422
        assert (await client.get(f"/api/products/{product_id}")).json()["stock"] == 8

    @pytest.mark.asyncio
    async def test_unknown_product(self, client):
        assert (await client.get("/api/products/404")).status_code == 404
        assert (await client.patch("/api/admin/products/404", json={"price": 10.0})).status_code == 404
        assert (await client.delete("/api/admin/products/404")).status_code == 404

    @pytest.mark.asyncio
    async def test_delete_ordered_product_conflicts(self, client, seed_order):
        _, product_ids = await seed_order()

        response = await client.delete(f"/api/admin/products/{product_ids[0]}")

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_admin_endpoints_require_token(self, client):
        with patch('config.ADMIN_API_TOKEN', 'secret'):
            denied = await client.post("/api/admin/products", json=helmet_payload())
            public = await client.get("/api/products")

        assert denied.status_code == 401
        assert public.status_code == 200
