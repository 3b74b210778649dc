"""
Document Store Factory

Builds the document store for the configured environment. The instance is
not cached here: the application entry point creates one at startup,
passes it to the services that need it, and owns its lifetime.

Usage:
    from restaurant_admin.services.store import create_document_store

    store = create_document_store(settings)
    docs = await store.list_documents(("cuisines",))

Environment Switching:
    - ENV_MODE=development -> MockDocumentStore (in memory)
    - ENV_MODE=staging     -> FirestoreDocumentStore (staging project)
    - ENV_MODE=production  -> FirestoreDocumentStore

Version: 1.0.0
"""

import logging
from typing import Optional

from restaurant_admin.core.config import Settings, get_settings
from restaurant_admin.services.store.base import (
    BaseDocumentStore,
    DocumentNotFoundError,
    DocumentPath,
    Increment,
    QueryResult,
    RawDocument,
    StoreError,
    SERVER_TIMESTAMP,
)
from restaurant_admin.services.store.mock import MockDocumentStore
from restaurant_admin.services.store.firestore import FirestoreDocumentStore

logger = logging.getLogger(__name__)


def create_document_store(settings: Optional[Settings] = None) -> BaseDocumentStore:
    """
    Create the configured document store.

    Args:
        settings: Application settings (defaults to get_settings())

    Returns:
        BaseDocumentStore: MockDocumentStore or FirestoreDocumentStore

    Raises:
        ValueError: If production mode but FIRESTORE_PROJECT_ID is missing
    """
    settings = settings or get_settings()

    if settings.is_development:
        logger.info("Document Store: Using MockDocumentStore (development mode)")
        return MockDocumentStore(
            failure_rate=0.02,  # 2% simulated outages
            min_latency=0.05,
            max_latency=0.2,
        )

    logger.info(
        f"Document Store: Using FirestoreDocumentStore "
        f"({settings.env_mode.value} mode)"
    )
    return FirestoreDocumentStore(settings)


__all__ = [
    "create_document_store",
    "BaseDocumentStore",
    "DocumentNotFoundError",
    "DocumentPath",
    "Increment",
    "QueryResult",
    "RawDocument",
    "StoreError",
    "SERVER_TIMESTAMP",
    "MockDocumentStore",
    "FirestoreDocumentStore",
]
