import asyncio
import base64
import logging
import os
import time
from typing import Optional

import cloudinary
import cloudinary.uploader

from app.core.config import Settings
from app.core.errors import UploadError

logger = logging.getLogger(__name__)


def public_id_from_url(url: str) -> str:
    """ 'https://res.cloudinary.com/x/video/upload/v1/properties/videos/abc.mp4' -> 'abc' """
    return url.split("/")[-1].split(".")[0]


class MediaStorage:

    def __init__(self, settings: Settings):
        cloudinary.config(
            cloud_name=settings.CLOUDINARY_CLOUD_NAME,
            api_key=settings.CLOUDINARY_API_KEY,
            api_secret=settings.CLOUDINARY_API_SECRET,
            secure=True
        )
        self.configured = all([
            settings.CLOUDINARY_CLOUD_NAME,
            settings.CLOUDINARY_API_KEY,
            settings.CLOUDINARY_API_SECRET,
        ])
        if not self.configured:
            logger.warning("Cloudinary not configured; uploads will fail")

    async def upload(
        self,
        content: bytes,
        folder: str,
        content_type: str = "application/octet-stream",
        filename: Optional[str] = None,
        resource_type: str = "auto",
    ) -> str:
        """Upload a file buffer and return its secure URL."""
        if not self.configured:
            raise UploadError("Cloudinary not configured")

        data_uri = f"data:{content_type};base64,{base64.b64encode(content).decode('ascii')}"
        upload_options = {
            "folder": folder,
            "resource_type": resource_type,
        }
        if filename:
            stem = os.path.splitext(os.path.basename(filename))[0]
            upload_options["public_id"] = f"{int(time.time() * 1000)}-{stem}"

        try:
            result = await asyncio.to_thread(cloudinary.uploader.upload, data_uri, **upload_options)
        except Exception as e:
            logger.error("Cloudinary upload to %s failed: %s", folder, e)
            raise UploadError("Upload to Cloudinary failed") from e

        logger.info("Uploaded %s to Cloudinary: %s", filename or "file", result["secure_url"])
        return result["secure_url"]

    async def delete(self, public_id: str, resource_type: str = "image") -> bool:
        if not self.configured:
            return False

        try:
            result = await asyncio.to_thread(
                cloudinary.uploader.destroy, public_id, resource_type=resource_type
            )
            return result.get("result") == "ok"
        except Exception as e:
            logger.warning("Error deleting %s from Cloudinary: %s", public_id, e)
            return False
