"""
shared/utils/uploads.py
Image uploads to Cloudinary (event posters, payment QR code).
The file is checked locally first; nothing is sent unless it is an image
within MAX_IMAGE_UPLOAD_BYTES.
"""

import logging
from typing import Optional

import httpx
from fastapi import HTTPException, UploadFile, status

from config.settings import settings

logger = logging.getLogger(__name__)


def validate_image(content_type: Optional[str], size: int) -> None:
    if not (content_type or "").startswith("image/"):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Please upload an image file")
    if size > settings.MAX_IMAGE_UPLOAD_BYTES:
        limit_mb = settings.MAX_IMAGE_UPLOAD_BYTES // (1024 * 1024)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Image size should be less than {limit_mb}MB",
        )


async def post_to_cloudinary(filename: str, content: bytes, content_type: str, fields: dict) -> httpx.Response:
    async with httpx.AsyncClient() as client:
        return await client.post(
            settings.cloudinary_upload_url,
            data=fields,
            files={"file": (filename, content, content_type)},
        )


async def upload_image(file: UploadFile, folder: Optional[str] = None) -> str:
    """Validate and upload; returns the persisted asset URL."""
    content = await file.read()
    validate_image(file.content_type, len(content))

    fields = {"upload_preset": settings.CLOUDINARY_UPLOAD_PRESET}
    if folder:
        fields["folder"] = folder

    try:
        response = await post_to_cloudinary(
            file.filename or "upload", content, file.content_type, fields
        )
    except httpx.HTTPError as e:
        logger.error(f"Image upload failed: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to upload image")

    try:
        data = response.json()
    except ValueError:
        # HTML or plain-text error page from the provider or a proxy
        data = {}
    if not response.is_success:
        message = (data.get("error") or {}).get("message") or "Upload failed"
        logger.error(f"Cloudinary rejected upload: {message}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=message)

    secure_url = data.get("secure_url")
    if not secure_url:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="No secure URL returned")
    return secure_url
