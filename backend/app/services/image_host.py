"""
Storefront Backend - Image Host Client
========================================

What:  Uploads a staged image to Cloudinary and returns the stored asset's
       metadata (secure URL, public id, format, dimensions, size).
How:   cloudinary.uploader.upload (the SDK signs the request) run in a
       worker thread, wrapped in tenacity retries with exponential backoff
       and jitter.
Who:   UploadService.

Upload options:
    folder=<cloudinary_folder>, public_id=<staged file stem>,
    resource_type="image", plus credentials and timeout from Settings.
    Credentials travel with each call; the SDK's global config is not
    touched.

Retry policy:
    Retried:     connection failures, unexpected status codes and
                 GeneralError (host-side failures)
    Not retried: everything else the SDK raises, and error bodies returned
                 by the host (bad request, auth, not allowed)
    Exhausted:   ImageHostError("Error uploading file")
"""

import asyncio
import logging
import time
from pathlib import Path
from typing import Any, Dict, Union

import cloudinary.exceptions
import cloudinary.uploader
from tenacity import (
    AsyncRetrying,
    RetryError,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from app.exceptions import ImageHostError

logger = logging.getLogger(__name__)

# Messages the SDK uses when the request never got a proper answer.
TRANSIENT_MESSAGE_PREFIXES = (
    "Unexpected error",
    "Socket error",
    "Server returned unexpected status code",
)


def is_transient(exc: BaseException) -> bool:
    """True for SDK errors worth another attempt."""
    if isinstance(exc, cloudinary.exceptions.GeneralError):
        return True
    return isinstance(exc, cloudinary.exceptions.Error) and str(exc).startswith(
        TRANSIENT_MESSAGE_PREFIXES
    )


class ImageHostService:
    """Cloudinary client."""

    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        folder: str = "products",
        upload_prefix: str = "https://api.cloudinary.com",
        timeout: float = 30.0,
        max_attempts: int = 3,
        min_wait: float = 1,
        max_wait: float = 10,
    ):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.folder = folder
        self.upload_prefix = upload_prefix.rstrip("/")
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.min_wait = min_wait
        self.max_wait = max_wait

    @classmethod
    def from_settings(cls, settings) -> "ImageHostService":
        return cls(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
            folder=settings.cloudinary_folder,
            upload_prefix=settings.cloudinary_upload_prefix,
            timeout=settings.image_host_timeout,
            max_attempts=settings.retry_max_attempts,
            min_wait=settings.retry_min_wait,
            max_wait=settings.retry_max_wait,
        )

    @property
    def configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    def upload_options(self, public_id: str) -> Dict[str, Any]:
        return {
            "folder": self.folder,
            "public_id": public_id,
            "resource_type": "image",
            "cloud_name": self.cloud_name,
            "api_key": self.api_key,
            "api_secret": self.api_secret,
            "upload_prefix": self.upload_prefix,
            "timeout": self.timeout,
        }

    async def upload(self, file_path: Union[str, Path]) -> Dict[str, Any]:
        """
        Upload one staged file; public_id is the file's stem.

        Returns the host's response.

        Raises:
            ImageHostError: not configured, rejected, or still failing after
                            all retry attempts.
        """
        if not self.configured:
            logger.error("Image upload attempted without Cloudinary credentials")
            raise ImageHostError(context={"reason": "image host not configured"})

        path = Path(file_path)
        try:
            return await self._upload_with_retry(path)
        except RetryError as e:
            cause = e.last_attempt.exception()
            logger.error(
                "Image upload of %s failed after %d attempts: %s",
                path.name,
                self.max_attempts,
                str(cause),
            )
            raise ImageHostError(
                context={"file": path.name, "attempts": self.max_attempts, "error": str(cause)}
            )
        except cloudinary.exceptions.Error as e:
            logger.error("Image host rejected %s: %s", path.name, str(e))
            raise ImageHostError(context={"file": path.name, "error": str(e)})

    async def _upload_with_retry(self, path: Path) -> Dict[str, Any]:
        retrying = AsyncRetrying(
            retry=retry_if_exception(is_transient),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential_jitter(initial=self.min_wait, max=self.max_wait),
            before_sleep=before_sleep_log(logger, logging.WARNING),
        )
        async for attempt in retrying:
            with attempt:
                return await self._send(path)

    async def _send(self, path: Path) -> Dict[str, Any]:
        start = time.monotonic()
        # The SDK uploader is blocking.
        result = await asyncio.to_thread(
            cloudinary.uploader.upload,
            str(path),
            **self.upload_options(path.stem),
        )

        if "error" in result:
            error = result["error"]
            logger.error(
                "Image host rejected %s: %s",
                path.name,
                error.get("message") if isinstance(error, dict) else error,
            )
            raise ImageHostError(context={"file": path.name, "error": error})

        logger.info(
            "Image uploaded: %s -> %s (%.0fms)",
            path.name,
            result.get("public_id"),
            (time.monotonic() - start) * 1000,
        )
        return result
