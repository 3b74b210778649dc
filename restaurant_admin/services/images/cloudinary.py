"""
Cloudinary Image Host Implementation

Production implementation using Cloudinary's unsigned upload API.
Used when ENV_MODE=production or ENV_MODE=staging.

Requirements:
    - CLOUDINARY_CLOUD_NAME and CLOUDINARY_UPLOAD_PRESET must be set
    - The preset must allow unsigned uploads

API Documentation:
    https://cloudinary.com/documentation/image_upload_api_reference

Version: 1.0.0
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import httpx

from restaurant_admin.core.config import Settings
from restaurant_admin.services.images.base import (
    BaseImageHost,
    ImageUploadError,
    guess_content_type,
)

logger = logging.getLogger(__name__)


class CloudinaryImageHost(BaseImageHost):
    """
    Production Cloudinary image host.

    Uploads are multipart POSTs carrying the file, the upload preset and an
    optional destination folder. The whole upload is bounded by
    ``cloudinary_upload_timeout`` seconds.

    Example:
        >>> host = CloudinaryImageHost(settings)
        >>> url = await host.upload("file:///tmp/tea.png", folder="products")
        >>> url.startswith("https://res.cloudinary.com/")
        True
    """

    def __init__(self, settings: Settings, client: Optional[httpx.AsyncClient] = None):
        """
        Initialize the HTTP client.

        Args:
            settings: Application settings
            client: Pre-built client (tests pass one with a MockTransport)

        Raises:
            ValueError: If the cloud name or upload preset is not configured
        """
        if not settings.cloudinary_cloud_name or not settings.cloudinary_upload_preset:
            raise ValueError(
                "CLOUDINARY_CLOUD_NAME and CLOUDINARY_UPLOAD_PRESET are required "
                "for production mode. Set them in your .env file or environment variables."
            )

        self._upload_url = settings.cloudinary_upload_url
        self._upload_preset = settings.cloudinary_upload_preset
        self._timeout = settings.cloudinary_upload_timeout
        self._client = client or httpx.AsyncClient(timeout=self._timeout)

        logger.info(f"CloudinaryImageHost initialized (cloud={settings.cloudinary_cloud_name})")

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "cloudinary"

    async def _upload_file(self, path: Path, folder: Optional[str]) -> str:
        try:
            content = await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            raise ImageUploadError(f"Cannot read image file {path}: {e}", str(path)) from e

        content_type = guess_content_type(path.name)
        files = {"file": (path.name, content, content_type)}
        data = {"upload_preset": self._upload_preset}
        if folder:
            data["folder"] = folder

        logger.debug(f"Cloudinary: Uploading {path.name} ({content_type}, folder={folder})")

        try:
            response = await asyncio.wait_for(
                self._client.post(
                    self._upload_url,
                    data=data,
                    files=files,
                    headers={"Accept": "application/json"},
                ),
                timeout=self._timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            logger.error(f"Cloudinary: Upload of {path.name} timed out after {self._timeout:.0f}s")
            raise ImageUploadError(
                f"Upload timed out after {self._timeout:.0f}s", str(path)
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Cloudinary: Transport error - {e}")
            raise ImageUploadError(f"Unable to reach image host: {e}", str(path)) from e

        if response.is_error:
            logger.error(f"Cloudinary: Upload rejected ({response.status_code}) - {response.text[:200]}")
            raise ImageUploadError(
                f"Upload failed: {response.status_code} {response.reason_phrase}", str(path)
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise ImageUploadError("Image host response was not valid JSON", str(path)) from e

        secure_url = payload.get("secure_url") if isinstance(payload, dict) else None
        if not secure_url:
            raise ImageUploadError("Image host response has no secure_url", str(path))

        logger.info(f"Cloudinary: Uploaded {path.name} (public_id={payload.get('public_id')})")
        return secure_url

    async def health_check(self) -> bool:
        """
        Check that the upload endpoint is reachable.

        Any HTTP response counts; Cloudinary answers a bare GET with 4xx.
        """
        try:
            await self._client.get(self._upload_url, timeout=5.0)
            return True
        except httpx.HTTPError as e:
            logger.error(f"Cloudinary: Health check failed - {e}")
            return False

    async def close(self) -> None:
        await self._client.aclose()
