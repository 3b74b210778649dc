"""
Mock Document Store Implementation

In-memory stand-in for Cloud Firestore. Used in development mode
(ENV_MODE=development) and by the test suite.

Behavior:
    - Stores documents in a dict keyed by path tuple
    - Resolves SERVER_TIMESTAMP and Increment sentinels like Firestore
    - Collection-group queries skip documents lacking the order_by field,
      as Firestore does
    - Simulates network latency and a random failure rate
    - Deterministic failure injection per path prefix for tests

Version: 1.0.0
"""

import asyncio
import copy
import random
import uuid
import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from restaurant_admin.coercion import coerce_timestamp
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

logger = logging.getLogger(__name__)


class MockDocumentStore(BaseDocumentStore):
    """
    Mock implementation of the document store.

    Attributes:
        failure_rate: Probability of a simulated outage per call (0.0-1.0)
        min_latency: Minimum response time in seconds
        max_latency: Maximum response time in seconds
        collection_group_enabled: When False, behaves like a backend
            without collection-group support
        failing_paths: Path prefixes whose reads and writes always fail

    Example:
        >>> store = MockDocumentStore(failure_rate=0.0, min_latency=0, max_latency=0)
        >>> store.seed(("users", "u1", "orders", "o1"), {"status": "pending"})
        >>> await store.get_document(("users", "u1", "orders", "o1"))
    """

    def __init__(
        self,
        failure_rate: float = 0.0,
        min_latency: float = 0.0,
        max_latency: float = 0.0,
        collection_group_enabled: bool = True,
        failing_paths: Optional[Iterable[DocumentPath]] = None,
    ):
        self.failure_rate = failure_rate
        self.min_latency = min_latency
        self.max_latency = max_latency
        self.collection_group_enabled = collection_group_enabled
        self.failing_paths: set[DocumentPath] = set(failing_paths or ())
        self._documents: dict[DocumentPath, dict[str, Any]] = {}

        logger.info(
            f"MockDocumentStore initialized "
            f"(failure_rate={failure_rate:.0%}, "
            f"collection_group={'on' if collection_group_enabled else 'off'})"
        )

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "mock"

    @property
    def supports_collection_group(self) -> bool:
        return self.collection_group_enabled

    # =========================================================================
    # TEST HELPERS
    # =========================================================================

    def seed(self, path: DocumentPath, data: dict[str, Any]) -> None:
        """Insert or replace a document without latency or failure simulation."""
        self._check_document_path(path)
        self._documents[tuple(path)] = copy.deepcopy(data)

    def peek(self, path: DocumentPath) -> Optional[dict[str, Any]]:
        """Return a copy of a stored document's data, or None."""
        data = self._documents.get(tuple(path))
        return copy.deepcopy(data) if data is not None else None

    def fail_path(self, path: DocumentPath) -> None:
        """Make every operation under ``path`` fail."""
        self.failing_paths.add(tuple(path))

    # =========================================================================
    # SIMULATION
    # =========================================================================

    async def _simulate(self, path: DocumentPath) -> None:
        if self.max_latency > 0:
            await asyncio.sleep(random.uniform(self.min_latency, self.max_latency))

        for prefix in self.failing_paths:
            if tuple(path[:len(prefix)]) == prefix:
                logger.debug(f"Mock: Injected failure for {'/'.join(path)}")
                raise StoreError(f"Simulated failure for {'/'.join(path)}", path)

        if self.failure_rate and random.random() < self.failure_rate:
            logger.debug("Mock: Simulated store outage")
            raise StoreError("Document store temporarily unavailable", path)

    @staticmethod
    def _check_document_path(path: DocumentPath) -> None:
        if len(path) == 0 or len(path) % 2 != 0:
            raise ValueError(f"Not a document path: {path!r}")

    def _children(self, collection: DocumentPath) -> list[RawDocument]:
        depth = len(collection) + 1
        return [
            RawDocument(id=path[-1], path=path, data=copy.deepcopy(data))
            for path, data in self._documents.items()
            if len(path) == depth and path[:-1] == tuple(collection)
        ]

    def _resolve(self, value: Any, current: Any = None) -> Any:
        if value is SERVER_TIMESTAMP:
            return datetime.now(timezone.utc)
        if isinstance(value, Increment):
            base = current if isinstance(current, (int, float)) and not isinstance(current, bool) else 0
            return base + value.amount
        if isinstance(value, dict):
            existing = current if isinstance(current, dict) else {}
            return {k: self._resolve(v, existing.get(k)) for k, v in value.items()}
        if isinstance(value, list):
            return [self._resolve(v) for v in value]
        return copy.deepcopy(value)

    # =========================================================================
    # READS
    # =========================================================================

    async def list_documents(self, collection: DocumentPath) -> list[RawDocument]:
        await self._simulate(collection)
        return self._children(collection)

    async def query_equal(
        self,
        collection: DocumentPath,
        field_name: str,
        value: Any,
    ) -> list[RawDocument]:
        await self._simulate(collection)
        return [doc for doc in self._children(collection) if doc.data.get(field_name) == value]

    async def get_document(self, path: DocumentPath) -> Optional[RawDocument]:
        self._check_document_path(path)
        await self._simulate(path)
        data = self._documents.get(tuple(path))
        if data is None:
            return None
        return RawDocument(id=path[-1], path=tuple(path), data=copy.deepcopy(data))

    async def collection_group_query(
        self,
        collection_id: str,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> QueryResult:
        if not self.collection_group_enabled:
            return QueryResult(
                success=False,
                error_message="Collection-group queries are not supported by this store",
                error_code="unsupported",
            )

        try:
            await self._simulate((collection_id,))
        except StoreError as e:
            return QueryResult(success=False, error_message=str(e), error_code="unavailable")

        documents = [
            RawDocument(id=path[-1], path=path, data=copy.deepcopy(data))
            for path, data in self._documents.items()
            if len(path) >= 2 and path[-2] == collection_id
        ]

        if order_by:
            def sort_value(doc: RawDocument) -> tuple[int, float]:
                # Unreadable values rank below every timestamp
                instant = coerce_timestamp(doc.data[order_by])
                return (1, instant.timestamp()) if instant is not None else (0, 0.0)

            documents = [doc for doc in documents if doc.data.get(order_by) is not None]
            documents.sort(key=sort_value, reverse=descending)

        return QueryResult(success=True, documents=documents)

    # =========================================================================
    # WRITES
    # =========================================================================

    async def create_document(
        self,
        collection: DocumentPath,
        data: dict[str, Any],
    ) -> str:
        await self._simulate(collection)
        document_id = uuid.uuid4().hex[:20]
        path = tuple(collection) + (document_id,)
        self._documents[path] = self._resolve(data)
        logger.debug(f"Mock: Created {'/'.join(path)}")
        return document_id

    async def update_document(
        self,
        path: DocumentPath,
        data: dict[str, Any],
    ) -> None:
        self._check_document_path(path)
        await self._simulate(path)
        key = tuple(path)
        if key not in self._documents:
            raise DocumentNotFoundError(f"No document at {'/'.join(path)}", key)
        current = self._documents[key]
        for field_name, value in data.items():
            current[field_name] = self._resolve(value, current.get(field_name))
        logger.debug(f"Mock: Updated {'/'.join(path)} fields={sorted(data)}")

    async def delete_document(self, path: DocumentPath) -> None:
        self._check_document_path(path)
        await self._simulate(path)
        self._documents.pop(tuple(path), None)
        logger.debug(f"Mock: Deleted {'/'.join(path)}")

    async def health_check(self) -> bool:
        """Mock health check always returns True."""
        return True
