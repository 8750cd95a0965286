"""
Storefront Backend - Category Registry Tests
==============================================

What:  The JSON side file of category names and its HTTP surface.

What we test:
    ✅ missing / empty file reads as an empty registry
    ✅ merge deduplicates and keeps first-seen order
    ✅ concurrent merges lose nothing
    ✅ corrupt file raises FileStorageError
    ✅ newCategories on product create/update reach GET /product/categories
"""

import asyncio
import json

import pytest

from app.exceptions import FileStorageError
from app.services.category_registry import CategoryRegistry


class TestCategoryRegistry:
    @pytest.mark.asyncio
    async def test_missing_file_is_empty(self, tmp_path):
        registry = CategoryRegistry(tmp_path / "nope" / "categories.json")
        assert await registry.read() == []

    @pytest.mark.asyncio
    async def test_empty_file_is_empty(self, tmp_path):
        path = tmp_path / "categories.json"
        path.write_text("")
        assert await CategoryRegistry(path).read() == []

    @pytest.mark.asyncio
    async def test_merge_deduplicates(self, tmp_path):
        path = tmp_path / "categories.json"
        path.write_text(json.dumps({"categories": ["hats"]}))
        registry = CategoryRegistry(path)

        merged = await registry.merge(["shoes", "shoes", "hats"])

        assert merged == ["hats", "shoes"]
        assert json.loads(path.read_text()) == {"categories": ["hats", "shoes"]}

    @pytest.mark.asyncio
    async def test_merge_creates_file_and_directory(self, tmp_path):
        path = tmp_path / "data" / "categories.json"
        registry = CategoryRegistry(path)
        assert await registry.merge(["shirts"]) == ["shirts"]
        assert path.exists()
        # No temp files left beside the registry.
        assert [p.name for p in path.parent.iterdir()] == ["categories.json"]

    @pytest.mark.asyncio
    async def test_merge_ignores_empty_names(self, tmp_path):
        registry = CategoryRegistry(tmp_path / "categories.json")
        assert await registry.merge(["", "bags"]) == ["bags"]

    @pytest.mark.asyncio
    async def test_concurrent_merges_keep_every_name(self, tmp_path):
        registry = CategoryRegistry(tmp_path / "categories.json")
        names = [f"cat-{i}" for i in range(20)]

        await asyncio.gather(*(registry.merge([name]) for name in names))

        assert sorted(await registry.read()) == sorted(names)

    @pytest.mark.asyncio
    async def test_corrupt_file_raises(self, tmp_path):
        path = tmp_path / "categories.json"
        path.write_text("{not json")
        with pytest.raises(FileStorageError):
            await CategoryRegistry(path).read()

    @pytest.mark.asyncio
    async def test_non_object_json_raises(self, tmp_path):
        path = tmp_path / "categories.json"
        path.write_text(json.dumps(["hats"]))
        with pytest.raises(FileStorageError):
            await CategoryRegistry(path).read()


class TestCategoryRoutes:
    @pytest.mark.asyncio
    async def test_empty_registry(self, client):
        response = await client.get("/product/categories")
        assert response.status_code == 200
        assert response.json() == {"success": True, "categories": []}

    @pytest.mark.asyncio
    async def test_new_categories_from_create_and_update(self, client, product_payload):
        created = await client.post(
            "/product",
            json=product_payload(newCategories=["hats", "shoes", "hats"]),
        )
        assert created.status_code == 201
        product_id = created.json()["productId"]

        updated = await client.put(
            f"/product/{product_id}",
            json={"newCategories": ["bags", "shoes"]},
        )
        assert updated.status_code == 200

        body = (await client.get("/product/categories")).json()
        assert body["categories"] == ["hats", "shoes", "bags"]
