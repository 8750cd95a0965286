"""
Storefront Backend - Upload Schemas
=====================================

What:  Response for POST /upload/image, mirroring the fields the image host
       reports back for the stored asset.
"""

from typing import Optional

from pydantic import Field

from app.schemas.common import Envelope


class UploadResponse(Envelope):
    message: str = Field(default="File uploaded successfully")
    url: str = Field(description="HTTPS URL of the hosted image")
    public_id: str = Field(description="Image host identifier")
    format: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    size: Optional[int] = Field(default=None, description="Stored size in bytes")
    original_filename: Optional[str] = None
