"""
Cloud Firestore Document Store Implementation

Production implementation using the google-cloud-firestore async client.
Used when ENV_MODE=production or ENV_MODE=staging.

Requirements:
    - FIRESTORE_PROJECT_ID must be set in environment
    - Either GOOGLE_APPLICATION_CREDENTIALS points to a service account
      key file, or the runtime provides application default credentials
    - The cross-tenant order listing needs a collection-group index on
      ``orders.createdAt`` (descending); without it the query fails with
      FailedPrecondition and callers fall back to per-tenant reads

API Documentation:
    https://cloud.google.com/python/docs/reference/firestore/latest

Version: 1.0.0
"""

import logging
from typing import Any, Optional

from google.api_core import exceptions as gcp_exceptions
from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter
from google.oauth2 import service_account

from restaurant_admin.core.config import Settings
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


class FirestoreDocumentStore(BaseDocumentStore):
    """
    Production Cloud Firestore document store.

    Example:
        >>> store = FirestoreDocumentStore(settings)
        >>> doc = await store.get_document(("cuisines", "abc"))
        >>> print(doc.data["name"] if doc else "missing")
    """

    def __init__(self, settings: Settings, client: Optional[firestore.AsyncClient] = None):
        """
        Initialize the Firestore client.

        Args:
            settings: Application settings
            client: Pre-built client (tests, emulator setups)

        Raises:
            ValueError: If FIRESTORE_PROJECT_ID is not configured
        """
        self._settings = settings

        if client is not None:
            self._client = client
        else:
            if not settings.firestore_project_id:
                raise ValueError(
                    "FIRESTORE_PROJECT_ID is required for production mode. "
                    "Set it in your .env file or environment variables."
                )

            credentials = None
            if settings.google_application_credentials:
                credentials = service_account.Credentials.from_service_account_file(
                    settings.google_application_credentials
                )

            self._client = firestore.AsyncClient(
                project=settings.firestore_project_id,
                database=settings.firestore_database,
                credentials=credentials,
            )

        logger.info(
            f"FirestoreDocumentStore initialized "
            f"(project={settings.firestore_project_id}, database={settings.firestore_database})"
        )

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "firestore"

    # =========================================================================
    # HELPERS
    # =========================================================================

    @staticmethod
    def _to_raw(snapshot: Any) -> RawDocument:
        path = tuple(snapshot.reference.path.split("/"))
        return RawDocument(id=snapshot.id, path=path, data=snapshot.to_dict() or {})

    def _translate(self, value: Any) -> Any:
        """Replace store-neutral sentinels with Firestore transforms."""
        if value is SERVER_TIMESTAMP:
            return firestore.SERVER_TIMESTAMP
        if isinstance(value, Increment):
            return firestore.Increment(value.amount)
        if isinstance(value, dict):
            return {k: self._translate(v) for k, v in value.items()}
        if isinstance(value, list):
            return [self._translate(v) for v in value]
        return value

    async def _collect(self, query: Any) -> list[RawDocument]:
        return [self._to_raw(snapshot) async for snapshot in query.stream()]

    # =========================================================================
    # READS
    # =========================================================================

    async def list_documents(self, collection: DocumentPath) -> list[RawDocument]:
        try:
            return await self._collect(self._client.collection(*collection))
        except gcp_exceptions.GoogleAPIError as e:
            raise StoreError(f"Listing {'/'.join(collection)} failed: {e}", collection) from e

    async def query_equal(
        self,
        collection: DocumentPath,
        field_name: str,
        value: Any,
    ) -> list[RawDocument]:
        query = self._client.collection(*collection).where(
            filter=FieldFilter(field_name, "==", value)
        )
        try:
            return await self._collect(query)
        except gcp_exceptions.GoogleAPIError as e:
            raise StoreError(
                f"Query {'/'.join(collection)} where {field_name} == {value!r} failed: {e}",
                collection,
            ) from e

    async def get_document(self, path: DocumentPath) -> Optional[RawDocument]:
        try:
            snapshot = await self._client.document(*path).get()
        except gcp_exceptions.GoogleAPIError as e:
            raise StoreError(f"Reading {'/'.join(path)} failed: {e}", path) from e

        if not snapshot.exists:
            return None
        return self._to_raw(snapshot)

    async def collection_group_query(
        self,
        collection_id: str,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> QueryResult:
        query = self._client.collection_group(collection_id)
        if order_by:
            direction = firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
            query = query.order_by(order_by, direction=direction)

        try:
            documents = await self._collect(query)
        except gcp_exceptions.FailedPrecondition as e:
            logger.warning(f"Firestore: Collection-group query needs an index - {e}")
            return QueryResult(success=False, error_message=str(e), error_code="failed_precondition")
        except gcp_exceptions.GoogleAPIError as e:
            logger.error(f"Firestore: Collection-group query failed - {e}")
            return QueryResult(success=False, error_message=str(e), error_code="api_error")

        return QueryResult(success=True, documents=documents)

    # =========================================================================
    # WRITES
    # =========================================================================

    async def create_document(
        self,
        collection: DocumentPath,
        data: dict[str, Any],
    ) -> str:
        ref = self._client.collection(*collection).document()
        try:
            await ref.set(self._translate(data))
        except gcp_exceptions.GoogleAPIError as e:
            raise StoreError(f"Creating document in {'/'.join(collection)} failed: {e}", collection) from e
        return ref.id

    async def update_document(
        self,
        path: DocumentPath,
        data: dict[str, Any],
    ) -> None:
        try:
            await self._client.document(*path).update(self._translate(data))
        except gcp_exceptions.NotFound as e:
            raise DocumentNotFoundError(f"No document at {'/'.join(path)}", path) from e
        except gcp_exceptions.GoogleAPIError as e:
            raise StoreError(f"Updating {'/'.join(path)} failed: {e}", path) from e

    async def delete_document(self, path: DocumentPath) -> None:
        try:
            await self._client.document(*path).delete()
        except gcp_exceptions.GoogleAPIError as e:
            raise StoreError(f"Deleting {'/'.join(path)} failed: {e}", path) from e

    async def health_check(self) -> bool:
        """
        Verify Firestore connectivity.

        Reads at most one document from the users collection.
        """
        try:
            query = self._client.collection(self._settings.users_collection).limit(1)
            async for _ in query.stream():
                break
            logger.debug("Firestore: Health check passed")
            return True
        except gcp_exceptions.GoogleAPIError as e:
            logger.error(f"Firestore: Health check failed - {e}")
            return False
