"""
Storefront Backend - Product Route Handlers
=============================================

What:  CRUD for catalog products, the filtered listing, and the category list.
How:   Thin handlers: pull inputs from the request, call ProductService,
       return its response schema.
Who:   Storefront and admin frontends.

Routes:
    POST   /product              create (201)
    GET    /product/categories   registered category names
    GET    /products             filtered, paginated listing
    GET    /product/{id}         one product
    PUT    /product/{id}         partial update
    DELETE /product/{id}         delete

/product/categories is declared before /product/{id} so "categories" is
never taken for an id.
"""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_product_service
from app.schemas.common import ErrorResponse, MessageResponse
from app.schemas.product import (
    CategoriesResponse,
    ProductCreate,
    ProductCreatedResponse,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
    ProductUpdatedResponse,
)
from app.services.catalog_query import CatalogQuery
from app.services.product_service import ProductService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Products"])


@router.post(
    "/product",
    status_code=201,
    response_model=ProductCreatedResponse,
    responses={
        400: {"description": "Missing or invalid fields", "model": ErrorResponse},
        409: {"description": "Product name already used", "model": ErrorResponse},
    },
    summary="Create a product",
)
async def create_product(
    body: ProductCreate,
    db: AsyncSession = Depends(get_db_session),
    service: ProductService = Depends(get_product_service),
) -> ProductCreatedResponse:
    return await service.create_product(db, body)


@router.get(
    "/product/categories",
    response_model=CategoriesResponse,
    summary="List registered categories",
)
async def list_categories(
    service: ProductService = Depends(get_product_service),
) -> CategoriesResponse:
    return await service.list_categories()


@router.get(
    "/products",
    response_model=ProductListResponse,
    summary="List products with filters and pagination",
    description=(
        "Filters: category (exact), search (name/description/tags, current page "
        "only), minPrice, maxPrice, inStock. Sorted by name. totalCount ignores "
        "search. Malformed numbers fall back to defaults instead of failing."
    ),
)
async def list_products(
    category: str | None = Query(default=None),
    search: str | None = Query(default=None),
    min_price: str | None = Query(default=None, alias="minPrice"),
    max_price: str | None = Query(default=None, alias="maxPrice"),
    in_stock: str | None = Query(default=None, alias="inStock"),
    limit: str | None = Query(default=None, description="Page size, default 10, max 100"),
    offset: str | None = Query(default=None, description="Rows to skip, default 0"),
    db: AsyncSession = Depends(get_db_session),
    service: ProductService = Depends(get_product_service),
) -> ProductListResponse:
    # Raw strings: parsing is lenient and never answers 422.
    query = CatalogQuery.from_params(
        category=category,
        search=search,
        min_price=min_price,
        max_price=max_price,
        in_stock=in_stock,
        limit=limit,
        offset=offset,
    )
    return await service.list_products(db, query)


@router.get(
    "/product/{product_id}",
    response_model=ProductResponse,
    responses={404: {"description": "Product not found", "model": ErrorResponse}},
    summary="Get a product",
)
async def get_product(
    product_id: str,
    db: AsyncSession = Depends(get_db_session),
    service: ProductService = Depends(get_product_service),
) -> ProductResponse:
    return await service.get_product(db, product_id)


@router.put(
    "/product/{product_id}",
    response_model=ProductUpdatedResponse,
    responses={
        400: {"description": "Invalid fields", "model": ErrorResponse},
        404: {"description": "Product not found", "model": ErrorResponse},
        409: {"description": "Product name already used", "model": ErrorResponse},
    },
    summary="Update a product",
)
async def update_product(
    product_id: str,
    body: ProductUpdate,
    db: AsyncSession = Depends(get_db_session),
    service: ProductService = Depends(get_product_service),
) -> ProductUpdatedResponse:
    return await service.update_product(db, product_id, body)


@router.delete(
    "/product/{product_id}",
    response_model=MessageResponse,
    responses={404: {"description": "Product not found", "model": ErrorResponse}},
    summary="Delete a product",
)
async def delete_product(
    product_id: str,
    db: AsyncSession = Depends(get_db_session),
    service: ProductService = Depends(get_product_service),
) -> MessageResponse:
    message = await service.delete_product(db, product_id)
    return MessageResponse(message=message)
