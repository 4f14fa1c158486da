"""
Blob storage for original CV uploads (Cloudinary).
"""

import io
import logging
import time
from typing import Optional

import cloudinary.uploader

from smartcv.core.config import settings
from smartcv.core.errors import StorageFailure

logger = logging.getLogger("storage")
logger.setLevel(logging.INFO)

if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(
        '☁️ [STORAGE] %(message)s'
    ))
    logger.addHandler(handler)


def _file_format(filename: str) -> Optional[str]:
    if "." not in filename:
        return None
    return filename.rsplit(".", 1)[-1].lower() or None


class CloudinaryStorage:
    """Uploads file buffers to Cloudinary and returns their secure URL."""

    def __init__(
        self,
        cloud_name: str = settings.CLOUDINARY_CLOUD_NAME,
        api_key: str = settings.CLOUDINARY_API_KEY,
        api_secret: str = settings.CLOUDINARY_API_SECRET,
        folder: str = settings.CLOUDINARY_FOLDER,
    ):
        self._credentials = {
            "cloud_name": cloud_name,
            "api_key": api_key,
            "api_secret": api_secret,
        }
        self.folder = folder

    def upload(self, file_bytes: bytes, filename: str) -> str:
        """
        Persist the original bytes.

        Returns:
            The public https URL of the stored file

        Raises:
            StorageFailure: the upload was rejected or the service is unreachable
        """
        options = {
            "folder": self.folder,
            "resource_type": "auto",
            "public_id": f"cv-{int(time.time() * 1000)}",
            "secure": True,
            **self._credentials,
        }
        file_format = _file_format(filename)
        if file_format:
            options["format"] = file_format

        logger.info(f"Uploading '{filename}' ({len(file_bytes)} bytes) to Cloudinary...")
        try:
            result = cloudinary.uploader.upload(io.BytesIO(file_bytes), **options)
        except Exception as e:
            raise StorageFailure(f"Cloudinary upload failed: {e}") from e

        secure_url = result.get("secure_url")
        if not secure_url:
            raise StorageFailure("Cloudinary upload failed: response carried no secure_url")

        logger.info(f"Stored at {secure_url}")
        return secure_url
