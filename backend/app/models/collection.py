"""
Storefront Backend - Collection SQLAlchemy Model
==================================================

What:  ORM model representing the `collections` table: a named, ordered
       grouping of products.

`products` is a JSON array of product ids. Every id is checked against the
products table when the collection is written; nothing enforces it
afterwards, so deleting a product can leave a dangling id here.
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import JSON, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

# Longest collection name accepted by the API.
MAX_COLLECTION_NAME_LENGTH = 50


class Collection(Base):
    __tablename__ = "collections"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    name: Mapped[str] = mapped_column(
        String(MAX_COLLECTION_NAME_LENGTH),
        nullable=False,
        unique=True,
    )
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    products: Mapped[List[str]] = mapped_column(JSON, nullable=False)
    images: Mapped[Optional[List[str]]] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<Collection(id={self.id}, name='{self.name}', products={len(self.products or [])})>"
