"""
Storefront Backend - Product Service
======================================

What:  Business rules for catalog products: create, list, fetch, partial
       update, delete, and category registry upkeep.
How:   Each method receives the request's AsyncSession, validates input,
       runs its queries, flushes, and returns a response schema. Commit or
       rollback is left to get_db_session.
Who:   Called by the /product(s) route handlers.

Uniqueness:
    Product names are checked with a lookup before writing so the client
    gets a precise message. The unique index on products.name catches the
    case where two requests pass the lookup at the same time; that
    IntegrityError is reported as the same 409.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import ConflictError, DatabaseError, NotFoundError, ValidationError
from app.models.product import Product
from app.schemas.product import (
    CategoriesResponse,
    ProductCreate,
    ProductCreatedResponse,
    ProductListResponse,
    ProductOut,
    ProductResponse,
    ProductUpdate,
    ProductUpdatedResponse,
)
from app.services.catalog_query import CatalogQuery
from app.services.category_registry import CategoryRegistry

logger = logging.getLogger(__name__)

DUPLICATE_NAME_MESSAGE = "A product with this name already exists"

# Columns that may never be set to null by an update.
_NON_NULLABLE_FIELDS = ("name", "category", "price", "stock", "images")


class ProductService:
    def __init__(self, categories: CategoryRegistry):
        self.categories = categories

    async def _get_or_404(self, db: AsyncSession, product_id: str) -> Product:
        product = await db.get(Product, product_id)
        if product is None:
            raise NotFoundError(resource="product", resource_id=product_id)
        return product

    async def _name_taken(
        self, db: AsyncSession, name: str, exclude_id: Optional[str] = None
    ) -> bool:
        stmt = select(Product.id).where(Product.name == name)
        if exclude_id is not None:
            stmt = stmt.where(Product.id != exclude_id)
        result = await db.execute(stmt.limit(1))
        return result.scalar_one_or_none() is not None

    async def _flush(self, db: AsyncSession, action: str) -> None:
        try:
            await db.flush()
        except IntegrityError:
            logger.warning("Product %s hit the unique name index", action)
            raise ConflictError(message=DUPLICATE_NAME_MESSAGE)

    async def create_product(
        self, db: AsyncSession, data: ProductCreate
    ) -> ProductCreatedResponse:
        """
        Insert a product, then register any `newCategories`.

        Raises:
            ValidationError: a required field is missing or images is empty.
            ConflictError: the name is already used.
        """
        if (
            not data.name
            or not data.category
            or data.price is None
            or data.stock is None
            or not data.images
        ):
            raise ValidationError(
                message="Name, category, price, stock and images are required",
            )

        try:
            if await self._name_taken(db, data.name):
                raise ConflictError(message=DUPLICATE_NAME_MESSAGE)

            product = Product(
                name=data.name,
                category=data.category,
                price=data.price,
                stock=data.stock,
                description=data.description,
                sizes=data.sizes,
                images=list(data.images),
                tags=list(data.tags) if data.tags is not None else None,
            )
            db.add(product)
            await self._flush(db, "create")
        except SQLAlchemyError as e:
            logger.error("Database error creating product: %s", str(e), exc_info=True)
            raise DatabaseError(message="Error creating product")

        logger.info("Product created: %s (%s)", product.id, product.name)

        if data.new_categories:
            await self.categories.merge(data.new_categories)

        return ProductCreatedResponse(product_id=product.id)

    async def list_products(
        self, db: AsyncSession, query: CatalogQuery
    ) -> ProductListResponse:
        """
        One page of products plus pagination metadata.

        Two round trips: the page itself and a count for the same filters.
        The search term narrows the page only.
        """
        try:
            result = await db.execute(query.page_statement())
            rows = query.apply_search(result.scalars().all())
            count_result = await db.execute(query.count_statement())
            total_count = count_result.scalar() or 0
        except SQLAlchemyError as e:
            logger.error("Database error listing products: %s", str(e), exc_info=True)
            raise DatabaseError(message="Error fetching products")

        return ProductListResponse(
            products=[ProductOut.model_validate(p) for p in rows],
            total_count=total_count,
            next_offset=query.next_offset(len(rows), total_count),
        )

    async def get_product(self, db: AsyncSession, product_id: str) -> ProductResponse:
        try:
            product = await self._get_or_404(db, product_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching product %s: %s", product_id, str(e))
            raise DatabaseError(message="Error fetching product")
        return ProductResponse(product=ProductOut.model_validate(product))

    async def update_product(
        self, db: AsyncSession, product_id: str, data: ProductUpdate
    ) -> ProductUpdatedResponse:
        """
        Apply only the fields present in the request body.

        Raises:
            NotFoundError: no product with this id.
            ValidationError: a required column was sent as null or empty.
            ConflictError: the new name belongs to another product.
        """
        changes: Dict[str, Any] = data.model_dump(exclude_unset=True)
        new_categories: List[str] = changes.pop("new_categories", None) or []

        nulled = [f for f in _NON_NULLABLE_FIELDS if f in changes and changes[f] is None]
        if nulled:
            raise ValidationError(
                message=f"{', '.join(nulled)} cannot be null",
                field=nulled[0],
            )
        emptied = [
            f for f in _NON_NULLABLE_FIELDS
            if isinstance(changes.get(f), (str, list)) and not changes[f]
        ]
        if emptied:
            raise ValidationError(
                message=f"{', '.join(emptied)} cannot be empty",
                field=emptied[0],
            )

        try:
            product = await self._get_or_404(db, product_id)

            new_name = changes.get("name")
            if new_name is not None and new_name != product.name:
                if await self._name_taken(db, new_name, exclude_id=product_id):
                    raise ConflictError(message=DUPLICATE_NAME_MESSAGE)

            for field, value in changes.items():
                setattr(product, field, value)
            await self._flush(db, "update")
            await db.refresh(product)
        except SQLAlchemyError as e:
            logger.error("Database error updating product %s: %s", product_id, str(e))
            raise DatabaseError(message="Error updating product")

        logger.info("Product %s updated: %s", product_id, sorted(changes))

        if new_categories:
            await self.categories.merge(new_categories)

        return ProductUpdatedResponse(product=ProductOut.model_validate(product))

    async def delete_product(self, db: AsyncSession, product_id: str) -> str:
        """Delete a product; returns the confirmation message."""
        try:
            product = await self._get_or_404(db, product_id)
            await db.delete(product)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting product %s: %s", product_id, str(e))
            raise DatabaseError(message="Error deleting product")

        logger.info("Product deleted: %s", product_id)
        return f"Product with ID {product_id} deleted successfully"

    async def list_categories(self) -> CategoriesResponse:
        return CategoriesResponse(categories=await self.categories.read())
