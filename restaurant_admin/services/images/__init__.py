"""
Image Host Factory

Builds the image host for the configured environment. Like the document
store, the instance is owned by the application entry point.

Usage:
    from restaurant_admin.services.images import create_image_host

    host = create_image_host(settings)
    url = await host.upload("file:///tmp/pizza.jpg", folder="products")

Version: 1.0.0
"""

import logging
from typing import Optional

from restaurant_admin.core.config import Settings, get_settings
from restaurant_admin.services.images.base import (
    BaseImageHost,
    ImageUploadError,
    is_remote_reference,
)
from restaurant_admin.services.images.mock import MockImageHost
from restaurant_admin.services.images.cloudinary import CloudinaryImageHost

logger = logging.getLogger(__name__)


def create_image_host(settings: Optional[Settings] = None) -> BaseImageHost:
    """
    Create the configured image host.

    Returns:
        BaseImageHost: MockImageHost or CloudinaryImageHost

    Raises:
        ValueError: If production mode but Cloudinary is not configured
    """
    settings = settings or get_settings()

    if settings.is_development:
        logger.info("Image Host: Using MockImageHost (development mode)")
        return MockImageHost(failure_rate=0.05, min_latency=0.1, max_latency=0.5)

    logger.info(f"Image Host: Using CloudinaryImageHost ({settings.env_mode.value} mode)")
    return CloudinaryImageHost(settings)


__all__ = [
    "create_image_host",
    "BaseImageHost",
    "ImageUploadError",
    "is_remote_reference",
    "MockImageHost",
    "CloudinaryImageHost",
]
