"""
Mock Image Host Implementation

Simulates Cloudinary uploads without network calls.
Used in development mode (ENV_MODE=development) and in tests.

Behavior:
    - Returns Cloudinary-shaped secure URLs under a "mock" cloud
    - Never reads the file, so any local reference "uploads"
    - Simulates latency and a random failure rate

Version: 1.0.0
"""

import asyncio
import random
import uuid
import logging
from pathlib import Path
from typing import Optional

from restaurant_admin.services.images.base import BaseImageHost, ImageUploadError

logger = logging.getLogger(__name__)


class MockImageHost(BaseImageHost):
    """
    Mock implementation of the image host.

    Attributes:
        failure_rate: Probability of a simulated upload failure (0.0-1.0)
        min_latency: Minimum response time in seconds
        max_latency: Maximum response time in seconds
        uploads: (local path, folder, secure URL) for every upload made
    """

    BASE_URL = "https://res.cloudinary.com/mock/image/upload"

    def __init__(
        self,
        failure_rate: float = 0.0,
        min_latency: float = 0.0,
        max_latency: float = 0.0,
    ):
        self.failure_rate = failure_rate
        self.min_latency = min_latency
        self.max_latency = max_latency
        self.uploads: list[tuple[Path, Optional[str], str]] = []

        logger.info(f"MockImageHost initialized (failure_rate={failure_rate:.0%})")

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "mock"

    async def _upload_file(self, path: Path, folder: Optional[str]) -> str:
        if self.max_latency > 0:
            await asyncio.sleep(random.uniform(self.min_latency, self.max_latency))

        if self.failure_rate and random.random() < self.failure_rate:
            logger.debug("Mock: Simulated upload failure")
            raise ImageUploadError("Image host temporarily unavailable", str(path))

        public_id = f"{folder}/{uuid.uuid4().hex[:20]}" if folder else uuid.uuid4().hex[:20]
        url = f"{self.BASE_URL}/{public_id}{path.suffix or '.jpg'}"
        self.uploads.append((path, folder, url))

        logger.info(f"Mock: Uploaded {path.name} -> {url}")
        return url

    async def health_check(self) -> bool:
        """Mock health check always returns True."""
        return True
