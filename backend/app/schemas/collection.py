"""
Storefront Backend - Collection Schemas
=========================================

What:  Request bodies and response envelopes for the /collection(s) routes.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.common import Envelope
from app.schemas.product import ProductOut


class CollectionCreate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    products: Optional[List[str]] = None
    images: Optional[List[str]] = None


class CollectionUpdate(BaseModel):
    """Partial update; absent fields are left untouched."""

    name: Optional[str] = None
    description: Optional[str] = None
    products: Optional[List[str]] = None
    images: Optional[List[str]] = None


class CollectionOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: str
    name: str
    description: str = ""
    products: List[str]
    images: Optional[List[str]] = None
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")


class CollectionDetail(CollectionOut):
    """A collection with the full records of products that still exist."""

    product_details: List[ProductOut] = Field(default_factory=list, alias="productDetails")


class CollectionResponse(Envelope):
    collection: CollectionDetail


class CollectionWriteResponse(Envelope):
    message: str
    collection: CollectionOut


class CollectionListResponse(Envelope):
    collections: List[CollectionOut]
