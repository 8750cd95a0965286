"""
Storefront Backend - Product Schemas
======================================

What:  Request bodies and response envelopes for the /product(s) routes.

Create and update bodies type-check their fields here; the "which fields
are required" rules live in ProductService so the client gets the same
message whichever field is missing.
"""

from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.common import Envelope

NonNegativeFloat = Annotated[float, Field(ge=0)]
NonNegativeInt = Annotated[int, Field(ge=0)]
ImageList = Annotated[List[str], Field(min_length=1)]


class ProductCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    category: Optional[str] = None
    price: Optional[NonNegativeFloat] = None
    stock: Optional[NonNegativeInt] = None
    images: Optional[List[str]] = None
    description: Optional[str] = None
    sizes: Optional[str] = None
    tags: Optional[List[str]] = None
    new_categories: Optional[List[str]] = Field(
        default=None,
        alias="newCategories",
        description="Category names to add to the category registry",
    )


class ProductUpdate(BaseModel):
    """
    Partial update. Only fields present in the JSON body are applied
    (model_dump(exclude_unset=True)).
    """

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    category: Optional[str] = None
    price: Optional[NonNegativeFloat] = None
    stock: Optional[NonNegativeInt] = None
    images: Optional[ImageList] = None
    description: Optional[str] = None
    sizes: Optional[str] = None
    tags: Optional[List[str]] = None
    new_categories: Optional[List[str]] = Field(default=None, alias="newCategories")


class ProductOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: str
    name: str
    category: str
    price: float
    stock: int
    description: Optional[str] = None
    sizes: Optional[str] = None
    tags: Optional[List[str]] = None
    images: List[str]
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")


class ProductCreatedResponse(Envelope):
    message: str = "Product created successfully"
    product_id: str = Field(alias="productId")


class ProductResponse(Envelope):
    product: ProductOut


class ProductUpdatedResponse(Envelope):
    message: str = "Product updated successfully"
    product: ProductOut


class ProductListResponse(Envelope):
    """
    Page of products.

    totalCount ignores `search`; nextOffset is null on the last page.
    """

    products: List[ProductOut]
    total_count: int = Field(alias="totalCount")
    next_offset: Optional[int] = Field(default=None, alias="nextOffset")


class CategoriesResponse(Envelope):
    categories: List[str]
