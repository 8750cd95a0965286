"""
Storefront Backend - Collection Route Handlers
================================================

What:  CRUD for named product collections.
Who:   Storefront and admin frontends.

Routes:
    POST   /collection         create (201)
    GET    /collections        all collections, oldest first
    GET    /collection/{id}    one collection plus productDetails
    PUT    /collection/{id}    partial update
    DELETE /collection/{id}    delete
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_collection_service
from app.schemas.collection import (
    CollectionCreate,
    CollectionListResponse,
    CollectionResponse,
    CollectionUpdate,
    CollectionWriteResponse,
)
from app.schemas.common import ErrorResponse, MessageResponse
from app.services.collection_service import CollectionService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Collections"])


@router.post(
    "/collection",
    status_code=201,
    response_model=CollectionWriteResponse,
    responses={
        400: {"description": "Invalid fields or unknown product ids", "model": ErrorResponse},
        409: {"description": "Collection name already used", "model": ErrorResponse},
    },
    summary="Create a collection",
)
async def create_collection(
    body: CollectionCreate,
    db: AsyncSession = Depends(get_db_session),
    service: CollectionService = Depends(get_collection_service),
) -> CollectionWriteResponse:
    return await service.create_collection(db, body)


@router.get(
    "/collections",
    response_model=CollectionListResponse,
    summary="List collections",
)
async def list_collections(
    db: AsyncSession = Depends(get_db_session),
    service: CollectionService = Depends(get_collection_service),
) -> CollectionListResponse:
    return await service.list_collections(db)


@router.get(
    "/collection/{collection_id}",
    response_model=CollectionResponse,
    responses={404: {"description": "Collection not found", "model": ErrorResponse}},
    summary="Get a collection with its products",
)
async def get_collection(
    collection_id: str,
    db: AsyncSession = Depends(get_db_session),
    service: CollectionService = Depends(get_collection_service),
) -> CollectionResponse:
    return await service.get_collection(db, collection_id)


@router.put(
    "/collection/{collection_id}",
    response_model=CollectionWriteResponse,
    responses={
        400: {"description": "Invalid fields or unknown product ids", "model": ErrorResponse},
        404: {"description": "Collection not found", "model": ErrorResponse},
        409: {"description": "Collection name already used", "model": ErrorResponse},
    },
    summary="Update a collection",
)
async def update_collection(
    collection_id: str,
    body: CollectionUpdate,
    db: AsyncSession = Depends(get_db_session),
    service: CollectionService = Depends(get_collection_service),
) -> CollectionWriteResponse:
    return await service.update_collection(db, collection_id, body)


@router.delete(
    "/collection/{collection_id}",
    response_model=MessageResponse,
    responses={404: {"description": "Collection not found", "model": ErrorResponse}},
    summary="Delete a collection",
)
async def delete_collection(
    collection_id: str,
    db: AsyncSession = Depends(get_db_session),
    service: CollectionService = Depends(get_collection_service),
) -> MessageResponse:
    message = await service.delete_collection(db, collection_id)
    return MessageResponse(message=message)
