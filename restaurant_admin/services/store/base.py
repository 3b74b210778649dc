"""
Document Store Abstract Base Class

Defines the interface contract for all document store implementations.
Both MockDocumentStore and FirestoreDocumentStore must implement these
methods, so the order and catalog services never touch a vendor SDK.

Documents are addressed by path tuples, alternating collection and
document ids:

    ("cuisines",)                          -> a top-level collection
    ("cuisines", "abc")                    -> a top-level document
    ("users", "u1", "orders")              -> a tenant's order sub-collection
    ("users", "u1", "orders", "o9")        -> one order

Reads return RawDocument, the loose, untyped payload as stored. Turning a
RawDocument into a domain record is the normalizer's job.

Version: 1.0.0
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional


DocumentPath = tuple[str, ...]


# =============================================================================
# ERRORS
# =============================================================================

class StoreError(Exception):
    """A read or write against the document store failed."""

    def __init__(self, message: str, path: Optional[DocumentPath] = None):
        super().__init__(message)
        self.path = path


class DocumentNotFoundError(StoreError):
    """The target of an update or delete does not exist."""


# =============================================================================
# WRITE SENTINELS
# =============================================================================

class _ServerTimestamp:
    """Placeholder replaced by the store's own clock at write time."""

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


@dataclass(frozen=True)
class Increment:
    """Atomically add ``amount`` to a numeric field (missing counts as 0)."""
    amount: int = 1


# =============================================================================
# RESULTS
# =============================================================================

@dataclass
class RawDocument:
    """
    A document exactly as the store returned it.

    Attributes:
        id: Document id (last path segment)
        path: Full path of the document
        data: Untyped field payload; any field may be missing or malformed
    """
    id: str
    path: DocumentPath
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def tenant_id(self) -> Optional[str]:
        """Id of the parent-of-parent document, if this is a sub-collection document."""
        if len(self.path) >= 4:
            return self.path[-3]
        return None


@dataclass
class QueryResult:
    """
    Outcome of a query that callers may want to recover from.

    Attributes:
        success: Whether the query ran
        documents: Documents returned (empty on failure)
        error_message: Error description if the query failed
        error_code: Machine-readable error code
    """
    success: bool
    documents: list[RawDocument] = field(default_factory=list)
    error_message: Optional[str] = None
    error_code: Optional[str] = None


# =============================================================================
# INTERFACE
# =============================================================================

class BaseDocumentStore(ABC):
    """
    Abstract base class for document stores.

    Read methods raise StoreError on failure; callers on read paths catch
    it and degrade. Write methods raise StoreError and callers let it
    propagate. ``collection_group_query`` is the one method that reports
    failure through its result instead of raising.

    Example:
        >>> store = create_document_store(settings)
        >>> docs = await store.query_equal(("products",), "cuisineId", "c1")
        >>> new_id = await store.create_document(("cuisines",), {"name": "Thai"})
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the name of the store provider (e.g., "mock", "firestore")."""
        pass

    @property
    def supports_collection_group(self) -> bool:
        """Whether cross-tenant collection-group queries are available."""
        return True

    @abstractmethod
    async def list_documents(self, collection: DocumentPath) -> list[RawDocument]:
        """Return every document in a collection."""
        pass

    @abstractmethod
    async def query_equal(
        self,
        collection: DocumentPath,
        field_name: str,
        value: Any,
    ) -> list[RawDocument]:
        """Return documents of a collection whose ``field_name`` equals ``value``."""
        pass

    @abstractmethod
    async def get_document(self, path: DocumentPath) -> Optional[RawDocument]:
        """Return one document, or None if it does not exist."""
        pass

    @abstractmethod
    async def create_document(
        self,
        collection: DocumentPath,
        data: dict[str, Any],
    ) -> str:
        """
        Create a document with a store-generated id.

        Returns:
            str: The new document id
        """
        pass

    @abstractmethod
    async def update_document(
        self,
        path: DocumentPath,
        data: dict[str, Any],
    ) -> None:
        """
        Apply a partial update; only the given fields change.

        Values may be SERVER_TIMESTAMP or Increment sentinels.

        Raises:
            DocumentNotFoundError: If the document does not exist
            StoreError: On any other write failure
        """
        pass

    @abstractmethod
    async def delete_document(self, path: DocumentPath) -> None:
        """Delete a document. Deleting a missing document is not an error."""
        pass

    @abstractmethod
    async def collection_group_query(
        self,
        collection_id: str,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> QueryResult:
        """
        Query every collection named ``collection_id`` at any depth.

        Never raises; failures (missing index, unsupported backend) come
        back as ``QueryResult(success=False)``.
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Verify connectivity to the store.

        Returns:
            bool: True if the store is reachable
        """
        pass
