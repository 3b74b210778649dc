"""
Order Aggregator

Produces every order across all tenants, newest first.

Strategies:
    1. Primary: one collection-group query over every ``orders``
       sub-collection, ordered by ``createdAt`` descending.
    2. Fallback: list tenants, read each tenant's ``orders``
       sub-collection concurrently, concatenate, sort.

The fallback runs when the store advertises no collection-group support,
when the primary query reports failure (typically a missing index), or
when it raises.
A tenant whose orders cannot be read contributes nothing; the rest of the
batch is unaffected.

Read failures never reach the caller: the worst case is an empty list
and a logged diagnostic.

Version: 1.0.0
"""

import asyncio
import logging
from typing import Optional

from restaurant_admin.core.config import Settings, get_settings
from restaurant_admin.normalizer import normalize_order, order_sort_key
from restaurant_admin.schemas import Order
from restaurant_admin.services.store.base import BaseDocumentStore, StoreError

logger = logging.getLogger(__name__)


class OrderAggregator:
    """
    Cross-tenant order reader.

    Example:
        >>> aggregator = OrderAggregator(store, settings)
        >>> orders = await aggregator.fetch_all_orders()
        >>> orders[0].created_at >= orders[-1].created_at
        True
    """

    def __init__(self, store: BaseDocumentStore, settings: Optional[Settings] = None):
        self.store = store
        self.settings = settings or get_settings()

    def orders_path(self, tenant_id: str) -> tuple[str, ...]:
        return (self.settings.users_collection, tenant_id, self.settings.orders_collection)

    # =========================================================================
    # ALL ORDERS
    # =========================================================================

    async def fetch_all_orders(self) -> list[Order]:
        """
        Fetch and normalize every order, most recent first.

        Returns:
            list[Order]: All orders; empty if nothing could be read
        """
        logger.info("Fetching orders across all tenants")

        try:
            orders = await self._fetch_with_collection_group()
        except Exception as e:
            logger.warning(
                f"Collection-group order read raised {type(e).__name__}: {e}. "
                f"Falling back to per-tenant reads"
            )
            orders = None

        strategy = "collection-group"
        if orders is None:
            strategy = "per-tenant"
            try:
                orders = await self._fetch_per_tenant()
            except Exception as e:
                logger.exception(f"Order aggregation failed: {e}")
                return []

        # Stable: the primary path's native order survives for equal timestamps
        orders.sort(key=order_sort_key, reverse=True)

        logger.info(f"Fetched {len(orders)} orders ({strategy})")
        return orders

    async def _fetch_with_collection_group(self) -> Optional[list[Order]]:
        """Primary strategy. Returns None when the caller should fall back."""
        if not self.store.supports_collection_group:
            logger.info(
                f"{self.store.provider_name} store has no collection-group support, "
                f"reading orders tenant by tenant"
            )
            return None

        result = await self.store.collection_group_query(
            self.settings.orders_collection,
            order_by="createdAt",
            descending=True,
        )

        if not result.success:
            logger.warning(
                f"Collection-group order query failed ({result.error_code}): "
                f"{result.error_message}. Falling back to per-tenant reads"
            )
            return None

        return [normalize_order(doc) for doc in result.documents]

    async def _fetch_per_tenant(self) -> list[Order]:
        """Fallback strategy: every tenant's sub-collection, concatenated in tenant order."""
        tenants = await self.store.list_documents((self.settings.users_collection,))
        logger.debug(f"Reading orders for {len(tenants)} tenants")

        batches = await asyncio.gather(
            *(self.fetch_tenant_orders(tenant.id) for tenant in tenants)
        )
        return [order for batch in batches for order in batch]

    # =========================================================================
    # SINGLE TENANT / SINGLE ORDER
    # =========================================================================

    async def fetch_tenant_orders(self, tenant_id: str) -> list[Order]:
        """
        Fetch one tenant's orders (store order, unsorted).

        Returns:
            list[Order]: The tenant's orders; empty if they could not be read
        """
        try:
            documents = await self.store.list_documents(self.orders_path(tenant_id))
        except Exception as e:
            logger.error(f"Could not read orders for tenant {tenant_id}: {e}")
            return []

        return [normalize_order(doc, tenant_id=tenant_id) for doc in documents]

    async def get_order(self, tenant_id: str, order_id: str) -> Optional[Order]:
        """
        Fetch one order.

        Returns:
            Optional[Order]: The order, or None if ids are missing, the
            order does not exist, or it could not be read
        """
        if not tenant_id or not order_id:
            logger.error("get_order called without tenant id or order id")
            return None

        try:
            raw = await self.store.get_document(self.orders_path(tenant_id) + (order_id,))
        except StoreError as e:
            logger.error(f"Could not read order {order_id} for tenant {tenant_id}: {e}")
            return None

        if raw is None:
            logger.warning(f"Order {order_id} not found for tenant {tenant_id}")
            return None

        return normalize_order(raw, tenant_id=tenant_id)
