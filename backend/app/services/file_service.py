"""
Storefront Backend - Upload Staging Service
=============================================

What:  Validates uploaded images and stages them on local disk until they
       are forwarded to the image host.
How:   Extension and size checks, then an aiofiles write into the staging
       directory under a slugged, collision-free name.
Who:   UploadService, once per POST /upload/image.

Checks, cheapest first:
    1. Extension: .jpg .jpeg .png .gif (case-insensitive)
    2. Size: 1 byte up to max_upload_size (default 5 MB)

Staged names look like `summer-hat-3f2a9c1e.png`: the slug keeps the
original name recognisable on the image host, the uuid suffix keeps
concurrent uploads of the same name apart. No user input reaches the path
other than the slug, which is restricted to [a-z0-9-].
"""

import logging
import re
import uuid
from pathlib import Path
from typing import Optional, Union

import aiofiles
import aiofiles.os

from app.exceptions import FileStorageError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif"}

_SLUG_STRIP = re.compile(r"[^a-z0-9]+")


def slugify(stem: str, max_length: int = 40) -> str:
    slug = _SLUG_STRIP.sub("-", stem.lower()).strip("-")
    return slug[:max_length].rstrip("-") or "image"


class FileService:
    """
    Staging area for uploads.

    The directory is created on construction; each staged file belongs to
    the request that wrote it and is removed by that request.
    """

    def __init__(self, staging_dir: Union[str, Path], max_size: int):
        self.staging_dir = Path(staging_dir).resolve()
        self.max_size = max_size
        self.staging_dir.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with staging_dir=%s", self.staging_dir)

    @classmethod
    def from_settings(cls, settings) -> "FileService":
        return cls(settings.upload_tmp_dir, settings.max_upload_size)

    def validate_extension(self, filename: str) -> str:
        """Return the lowercase extension, or raise ValidationError."""
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message="Only image files are allowed (jpg, jpeg, png, gif)",
                field="image",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_size(self, actual_size: int, content_length: Optional[int] = None) -> None:
        """
        Reject empty or oversized files.

        content_length is the client-declared size when known; it is checked
        too since some clients declare more than they send.
        """
        max_mb = self.max_size / (1024 * 1024)
        if actual_size == 0:
            raise ValidationError(message="Uploaded file is empty", field="image")

        if (content_length and content_length > self.max_size) or actual_size > self.max_size:
            raise ValidationError(
                message=f"File size exceeds maximum of {max_mb:.0f}MB",
                field="image",
                context={
                    "max_size": self.max_size,
                    "actual_size": actual_size,
                    "reported_size": content_length,
                },
            )

    def staged_path(self, filename: str, extension: str) -> Path:
        stem = slugify(Path(filename).stem)
        return self.staging_dir / f"{stem}-{uuid.uuid4().hex[:8]}{extension}"

    async def store_file(self, content: bytes, filename: str, extension: str) -> Path:
        path = self.staged_path(filename, extension)
        try:
            async with aiofiles.open(path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to stage upload at %s: %s", path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded image",
                context={"path": str(path), "os_error": str(e)},
            )
        logger.info("File staged: %s (%d bytes)", path.name, len(content))
        return path

    async def validate_and_store(
        self,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> Path:
        ext = self.validate_extension(filename)
        self.validate_size(len(content), content_length)
        return await self.store_file(content, filename, ext)

    async def cleanup_file(self, file_path: Union[str, Path]) -> None:
        """
        Remove a staged file. Missing files are fine; other failures are
        logged, not raised, so cleanup never masks the request's outcome.
        """
        path = Path(file_path)
        try:
            if await aiofiles.os.path.exists(path):
                await aiofiles.os.remove(path)
                logger.info("Cleaned up staged file: %s", path.name)
            else:
                logger.debug("Cleanup: file already gone: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up staged file %s: %s", path, str(e))
