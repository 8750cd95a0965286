"""
Storefront Backend - Upload Route Handler
===========================================

What:  POST /upload/image, multipart field `image`.
How:   Reads the upload into memory (bounded by the size check), then hands
       it to UploadService: validate -> stage -> Cloudinary -> clean up.
Who:   Admin frontend, before creating or updating a product.

Error responses (handled by global exception handlers):
    HTTP 400: no file, wrong extension, empty, too large (ValidationError)
    HTTP 500: image host failure (ImageHostError), disk failure (FileStorageError)
"""

import logging

from fastapi import APIRouter, Depends, File, UploadFile

from app.dependencies import get_upload_service
from app.exceptions import ValidationError
from app.schemas.common import ErrorResponse
from app.schemas.upload import UploadResponse
from app.services.upload_service import UploadService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/upload", tags=["Upload"])


@router.post(
    "/image",
    response_model=UploadResponse,
    responses={
        400: {"description": "Missing, empty, oversized or non-image file", "model": ErrorResponse},
        500: {"description": "Image host failure", "model": ErrorResponse},
    },
    summary="Upload a product image",
    description="Accepts jpg, jpeg, png or gif up to 5MB and returns the hosted URL.",
)
async def upload_image(
    image: UploadFile | None = File(default=None, description="Image file"),
    service: UploadService = Depends(get_upload_service),
) -> UploadResponse:
    if image is None or not image.filename:
        raise ValidationError(message="No file uploaded", field="image")

    try:
        content = await image.read()
        logger.info(
            "Received upload: filename=%s, size=%d bytes",
            image.filename,
            len(content),
        )
        return await service.upload_image(
            filename=image.filename,
            content=content,
            content_length=image.size,
        )
    finally:
        await image.close()
