"""
Storefront Backend - Product Route Tests
==========================================

What:  CRUD on /product through the full app (routes, service, SQLite).

What we test:
    ✅ create: 201 + productId, required fields, negative price, duplicate name
    ✅ get / update / delete, including 404s
    ✅ update: partial fields, rename conflicts, null on required columns
    ✅ error envelope shape and X-Request-ID
"""

import pytest
from sqlalchemy import func, select

from app.models.product import Product


async def _create(client, payload):
    response = await client.post("/product", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["productId"]


class TestCreateProduct:
    @pytest.mark.asyncio
    async def test_create_returns_id(self, client, product_payload):
        response = await client.post("/product", json=product_payload())
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Product created successfully"
        assert body["productId"]

    @pytest.mark.asyncio
    async def test_missing_required_fields(self, client, product_payload):
        payload = product_payload()
        del payload["images"]
        response = await client.post("/product", json=payload)
        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "validation_error"
        assert body["message"] == "Name, category, price, stock and images are required"

    @pytest.mark.asyncio
    async def test_empty_images_rejected(self, client, product_payload):
        response = await client.post("/product", json=product_payload(images=[]))
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_zero_price_and_stock_allowed(self, client, product_payload):
        response = await client.post("/product", json=product_payload(price=0, stock=0))
        assert response.status_code == 201

    @pytest.mark.asyncio
    async def test_negative_price_rejected(self, client, product_payload):
        response = await client.post("/product", json=product_payload(price=-1))
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["details"][0]["field"] == "price"

    @pytest.mark.asyncio
    async def test_malformed_json_is_400(self, client):
        response = await client.post(
            "/product",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_duplicate_name_conflicts(self, client, db_session, product_payload):
        await _create(client, product_payload("Widget"))

        response = await client.post("/product", json=product_payload("Widget", price=1))

        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "conflict"
        assert body["message"] == "A product with this name already exists"
        count = await db_session.scalar(
            select(func.count()).select_from(Product).where(Product.name == "Widget")
        )
        assert count == 1


class TestReadProduct:
    @pytest.mark.asyncio
    async def test_get_product(self, client, product_payload):
        product_id = await _create(client, product_payload(sizes="S,M,L"))
        response = await client.get(f"/product/{product_id}")
        assert response.status_code == 200
        product = response.json()["product"]
        assert product["id"] == product_id
        assert product["name"] == "Widget"
        assert product["sizes"] == "S,M,L"
        assert product["tags"] == ["tools"]
        assert "createdAt" in product

    @pytest.mark.asyncio
    async def test_get_missing_product(self, client):
        response = await client.get("/product/does-not-exist")
        assert response.status_code == 404
        body = response.json()
        assert body["error"] == "not_found"
        assert body["message"] == "Product with ID does-not-exist not found"

    @pytest.mark.asyncio
    async def test_error_envelope_carries_request_id(self, client):
        response = await client.get(
            "/product/does-not-exist", headers={"X-Request-ID": "req-42"}
        )
        assert response.headers["X-Request-ID"] == "req-42"
        assert response.json()["request_id"] == "req-42"


class TestUpdateProduct:
    @pytest.mark.asyncio
    async def test_partial_update(self, client, product_payload):
        product_id = await _create(client, product_payload())
        response = await client.put(f"/product/{product_id}", json={"price": 12.5, "stock": 0})
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Product updated successfully"
        assert body["product"]["price"] == 12.5
        assert body["product"]["stock"] == 0
        assert body["product"]["name"] == "Widget"
        assert body["product"]["description"] == "A useful widget"

    @pytest.mark.asyncio
    async def test_keep_own_name(self, client, product_payload):
        product_id = await _create(client, product_payload())
        response = await client.put(f"/product/{product_id}", json={"name": "Widget"})
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_rename_to_taken_name(self, client, product_payload):
        await _create(client, product_payload("Widget"))
        other_id = await _create(client, product_payload("Gadget"))
        response = await client.put(f"/product/{other_id}", json={"name": "Widget"})
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_null_required_field(self, client, product_payload):
        product_id = await _create(client, product_payload())
        response = await client.put(f"/product/{product_id}", json={"price": None})
        assert response.status_code == 400
        assert response.json()["message"] == "price cannot be null"

    @pytest.mark.asyncio
    async def test_empty_required_fields(self, client, product_payload):
        product_id = await _create(client, product_payload())
        response = await client.put(f"/product/{product_id}", json={"name": "", "category": ""})
        assert response.status_code == 400
        assert response.json()["message"] == "name, category cannot be empty"

        stored = (await client.get(f"/product/{product_id}")).json()["product"]
        assert stored["name"] == "Widget"
        assert stored["category"] == "gadgets"

    @pytest.mark.asyncio
    async def test_clear_optional_field(self, client, product_payload):
        product_id = await _create(client, product_payload())
        response = await client.put(f"/product/{product_id}", json={"description": None})
        assert response.status_code == 200
        assert response.json()["product"]["description"] is None

    @pytest.mark.asyncio
    async def test_update_missing_product(self, client):
        response = await client.put("/product/nope", json={"price": 1})
        assert response.status_code == 404


class TestDeleteProduct:
    @pytest.mark.asyncio
    async def test_delete(self, client, product_payload):
        product_id = await _create(client, product_payload())
        response = await client.delete(f"/product/{product_id}")
        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": f"Product with ID {product_id} deleted successfully",
        }
        assert (await client.get(f"/product/{product_id}")).status_code == 404

    @pytest.mark.asyncio
    async def test_delete_missing_product(self, client):
        response = await client.delete("/product/nope")
        assert response.status_code == 404
        assert response.json()["success"] is False
