"""
Image Host Abstract Base Class

Defines the interface contract for image hosting implementations.
Both MockImageHost and CloudinaryImageHost must implement these methods.

Contract:
    - A reference that is already remote (http/https URL) is returned
      unchanged; nothing is uploaded
    - A local reference (``file://`` URI or filesystem path) is uploaded
      and the host's stable secure URL is returned
    - Failures and timeouts raise ImageUploadError; nothing is retried

Version: 1.0.0
"""

import mimetypes
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse


REMOTE_SCHEMES = ("http", "https")


class ImageUploadError(Exception):
    """An image could not be uploaded."""

    def __init__(self, message: str, reference: Optional[str] = None):
        super().__init__(message)
        self.reference = reference


def is_remote_reference(reference: str) -> bool:
    """Check whether an image reference already points at a hosted image."""
    return urlparse(reference).scheme.lower() in REMOTE_SCHEMES


def local_path(reference: str) -> Path:
    """Filesystem path for a local reference (``file://`` URI or plain path)."""
    parsed = urlparse(reference)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    return Path(reference)


def guess_content_type(filename: str) -> str:
    """MIME type from the file extension; JPEG when unknown."""
    content_type, _ = mimetypes.guess_type(filename)
    if content_type in ("image/png", "image/jpeg", "image/webp", "image/gif"):
        return content_type
    return "image/jpeg"


class BaseImageHost(ABC):
    """
    Abstract base class for image hosts.

    Example:
        >>> host = create_image_host(settings)
        >>> url = await host.upload("file:///tmp/pizza.jpg", folder="products")
        >>> await host.upload(url) == url
        True
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the name of the image host (e.g., "mock", "cloudinary")."""
        pass

    async def upload(self, reference: str, folder: Optional[str] = None) -> str:
        """
        Return a hosted URL for an image reference, uploading if needed.

        Args:
            reference: Local file reference or already-hosted URL
            folder: Destination folder on the host (e.g. "products")

        Returns:
            str: Secure URL of the hosted image

        Raises:
            ImageUploadError: If the reference is empty or the upload fails
        """
        if not reference:
            raise ImageUploadError("Image reference is required", reference)

        if is_remote_reference(reference):
            return reference

        return await self._upload_file(local_path(reference), folder)

    @abstractmethod
    async def _upload_file(self, path: Path, folder: Optional[str]) -> str:
        """Upload a local file and return its secure URL."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check whether the host is configured and reachable."""
        pass

    async def close(self) -> None:
        """Release network resources."""
        return None
