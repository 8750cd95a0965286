"""
Storefront Backend - Upload Service
=====================================

What:  Orchestrates POST /upload/image: validate -> stage -> upload -> clean up.
How:   Composes FileService (local staging) and ImageHostService (Cloudinary).
Who:   The /upload route handler.

    ┌──────────┐    ┌──────────────┐    ┌──────────────┐    ┌──────────┐
    │  Upload  │───▶│  Validate    │───▶│  Cloudinary  │───▶│ Cleanup  │
    │  (Route) │    │  & Stage     │    │  (signed)    │    │ (always) │
    └──────────┘    └──────────────┘    └──────────────┘    └──────────┘

Only the file staged by this call is removed; other uploads in flight keep
their staged files.
"""

import logging
from typing import Optional

from app.schemas.upload import UploadResponse
from app.services.file_service import FileService
from app.services.image_host import ImageHostService

logger = logging.getLogger(__name__)


class UploadService:
    def __init__(self, files: FileService, host: ImageHostService):
        self.files = files
        self.host = host

    async def upload_image(
        self,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> UploadResponse:
        staged = await self.files.validate_and_store(filename, content, content_length)
        try:
            result = await self.host.upload(staged)
        finally:
            await self.files.cleanup_file(staged)

        logger.info(
            "Uploaded image: filename=%s, public_id=%s, size=%s bytes",
            filename,
            result.get("public_id"),
            result.get("bytes"),
        )
        return UploadResponse(
            url=result.get("secure_url") or result.get("url"),
            public_id=result.get("public_id", staged.stem),
            format=result.get("format"),
            width=result.get("width"),
            height=result.get("height"),
            size=result.get("bytes"),
            original_filename=filename,
        )
