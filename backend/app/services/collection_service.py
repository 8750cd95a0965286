"""
Storefront Backend - Collection Service
=========================================

What:  Business rules for product collections: create, list, fetch with
       product details, partial update, delete.
How:   Same shape as ProductService: per-call AsyncSession, validate,
       query, flush, return a response schema.
Who:   Called by the /collection(s) route handlers.

Write-time rules (create and update):
    - name: required on create, at most 50 characters, unique
    - products: non-empty list, every id must exist in `products`
Ids that do not exist are reported back under `invalidProducts` and
nothing is written. Later product deletions are not propagated, so a
stored collection may reference ids that no longer exist; reads skip them
when building productDetails.
"""

import logging
from typing import Dict, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import (
    ConflictError,
    DatabaseError,
    InvalidReferenceError,
    NotFoundError,
    ValidationError,
)
from app.models.collection import MAX_COLLECTION_NAME_LENGTH, Collection
from app.models.product import Product
from app.schemas.collection import (
    CollectionCreate,
    CollectionDetail,
    CollectionListResponse,
    CollectionOut,
    CollectionResponse,
    CollectionUpdate,
    CollectionWriteResponse,
)
from app.schemas.product import ProductOut

logger = logging.getLogger(__name__)

DUPLICATE_NAME_MESSAGE = "A collection with this name already exists"
NAME_TOO_LONG_MESSAGE = (
    f"Collection name cannot exceed {MAX_COLLECTION_NAME_LENGTH} characters"
)


class CollectionService:
    # ── Shared checks ─────────────────────────────────────────────────────

    @staticmethod
    def _check_name_length(name: str) -> None:
        if len(name) > MAX_COLLECTION_NAME_LENGTH:
            raise ValidationError(message=NAME_TOO_LONG_MESSAGE, field="name")

    async def _check_name_free(
        self, db: AsyncSession, name: str, exclude_id: Optional[str] = None
    ) -> None:
        stmt = select(Collection.id).where(Collection.name == name)
        if exclude_id is not None:
            stmt = stmt.where(Collection.id != exclude_id)
        result = await db.execute(stmt.limit(1))
        if result.scalar_one_or_none() is not None:
            raise ConflictError(message=DUPLICATE_NAME_MESSAGE)

    async def _load_products(
        self, db: AsyncSession, product_ids: Sequence[str]
    ) -> Dict[str, Product]:
        if not product_ids:
            return {}
        result = await db.execute(
            select(Product).where(Product.id.in_(list(dict.fromkeys(product_ids))))
        )
        return {p.id: p for p in result.scalars().all()}

    async def _check_products_exist(
        self, db: AsyncSession, product_ids: List[str]
    ) -> None:
        found = await self._load_products(db, product_ids)
        missing = [pid for pid in product_ids if pid not in found]
        if missing:
            logger.info("Collection write rejected: %d unknown product ids", len(missing))
            raise InvalidReferenceError(missing)

    async def _get_or_404(self, db: AsyncSession, collection_id: str) -> Collection:
        collection = await db.get(Collection, collection_id)
        if collection is None:
            raise NotFoundError(resource="collection", resource_id=collection_id)
        return collection

    async def _flush(self, db: AsyncSession) -> None:
        try:
            await db.flush()
        except IntegrityError:
            raise ConflictError(message=DUPLICATE_NAME_MESSAGE)

    # ── Operations ────────────────────────────────────────────────────────

    async def create_collection(
        self, db: AsyncSession, data: CollectionCreate
    ) -> CollectionWriteResponse:
        """
        Validate and insert a collection.

        Check order: required fields, name length, name uniqueness,
        product references.
        """
        if not data.name or not data.products:
            raise ValidationError(message="Name and at least one product ID are required")
        self._check_name_length(data.name)

        try:
            await self._check_name_free(db, data.name)
            await self._check_products_exist(db, data.products)

            collection = Collection(
                name=data.name,
                description=data.description or "",
                products=list(data.products),
                images=list(data.images) if data.images is not None else None,
            )
            db.add(collection)
            await self._flush(db)
        except SQLAlchemyError as e:
            logger.error("Database error creating collection: %s", str(e), exc_info=True)
            raise DatabaseError(message="Error creating collection")

        logger.info(
            "Collection created: %s (%s, %d products)",
            collection.id,
            collection.name,
            len(collection.products),
        )
        return CollectionWriteResponse(
            message="Collection created successfully",
            collection=CollectionOut.model_validate(collection),
        )

    async def list_collections(self, db: AsyncSession) -> CollectionListResponse:
        try:
            result = await db.execute(
                select(Collection).order_by(Collection.created_at.asc())
            )
            collections = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing collections: %s", str(e))
            raise DatabaseError(message="Error fetching collections")
        return CollectionListResponse(
            collections=[CollectionOut.model_validate(c) for c in collections]
        )

    async def get_collection(
        self, db: AsyncSession, collection_id: str
    ) -> CollectionResponse:
        """Fetch a collection plus full records of its products that still exist."""
        try:
            collection = await self._get_or_404(db, collection_id)
            products = await self._load_products(db, collection.products or [])
        except SQLAlchemyError as e:
            logger.error("Database error fetching collection %s: %s", collection_id, str(e))
            raise DatabaseError(message="Error fetching collection")

        details = [
            ProductOut.model_validate(products[pid])
            for pid in collection.products or []
            if pid in products
        ]
        detail = CollectionDetail.model_validate(collection)
        detail.product_details = details
        return CollectionResponse(collection=detail)

    async def update_collection(
        self, db: AsyncSession, collection_id: str, data: CollectionUpdate
    ) -> CollectionWriteResponse:
        """
        Apply the supplied fields.

        The collection's current name never conflicts with itself.
        """
        changes = data.model_dump(exclude_unset=True)

        try:
            collection = await self._get_or_404(db, collection_id)

            if "name" in changes:
                name = changes["name"]
                if not name:
                    raise ValidationError(message="Collection name cannot be empty", field="name")
                self._check_name_length(name)
                await self._check_name_free(db, name, exclude_id=collection_id)

            if "products" in changes:
                products = changes["products"]
                if not products:
                    raise ValidationError(
                        message="Products must be an array with at least one product ID",
                        field="products",
                    )
                await self._check_products_exist(db, products)

            if "description" in changes and changes["description"] is None:
                changes["description"] = ""

            for field, value in changes.items():
                setattr(collection, field, value)
            await self._flush(db)
        except SQLAlchemyError as e:
            logger.error("Database error updating collection %s: %s", collection_id, str(e))
            raise DatabaseError(message="Error updating collection")

        logger.info("Collection %s updated: %s", collection_id, sorted(changes))
        return CollectionWriteResponse(
            message="Collection updated successfully",
            collection=CollectionOut.model_validate(collection),
        )

    async def delete_collection(self, db: AsyncSession, collection_id: str) -> str:
        try:
            collection = await self._get_or_404(db, collection_id)
            await db.delete(collection)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting collection %s: %s", collection_id, str(e))
            raise DatabaseError(message="Error deleting collection")

        logger.info("Collection deleted: %s", collection_id)
        return f"Collection with ID {collection_id} deleted successfully"
