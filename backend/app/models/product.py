"""
Storefront Backend - Product SQLAlchemy Model
===============================================

What:  ORM model representing the `products` table.
How:   Inherits from the shared DeclarativeBase; Alembic reads this for
       migrations.
Who:   Used by ProductService, CollectionService (reference checks) and
       CatalogQuery (filtered listing).

Table Design:
    - String UUID primary key, generated in Python.
    - name is unique: the service checks before writing and the index
      turns a lost race into an IntegrityError (reported as 409).
    - tags and images are JSON arrays of strings.
    - Index on category + name serves the default listing
      (WHERE category = :c ORDER BY name).
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import JSON, DateTime, Float, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Product(Base):
    """
    A catalog product.

    Lifecycle:
        1. Created by POST /product
        2. Partially updated by PUT /product/{id} (only supplied fields change)
        3. Hard-deleted by DELETE /product/{id}; collections that reference
           it keep the dangling id
    """

    __tablename__ = "products"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    sizes: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    tags: Mapped[Optional[List[str]]] = mapped_column(JSON, nullable=True)
    images: Mapped[List[str]] = mapped_column(JSON, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    __table_args__ = (
        Index("idx_products_category_name", "category", "name"),
    )

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name='{self.name}', category='{self.category}')>"
