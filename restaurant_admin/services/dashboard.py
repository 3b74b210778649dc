"""
Dashboard Statistics

Overview numbers for the admin landing page. Cuisines, categories, orders
and products are fetched concurrently; every one of those reads degrades
to an empty list on failure, so the dashboard always renders.
"""

import asyncio
import logging
from typing import Optional

from restaurant_admin.core.config import Settings, get_settings
from restaurant_admin.schemas import DashboardStats, OrderStatus
from restaurant_admin.services.catalog import CatalogService
from restaurant_admin.services.orders.aggregator import OrderAggregator

logger = logging.getLogger(__name__)


class DashboardService:

    def __init__(
        self,
        catalog: CatalogService,
        aggregator: OrderAggregator,
        settings: Optional[Settings] = None,
    ):
        self.catalog = catalog
        self.aggregator = aggregator
        self.settings = settings or get_settings()

    async def get_stats(self) -> DashboardStats:
        cuisines, categories, orders, products = await asyncio.gather(
            self.catalog.get_cuisines(),
            self.catalog.get_categories(),
            self.aggregator.fetch_all_orders(),
            self.catalog.get_products(),
        )

        stats = DashboardStats(
            total_orders=len(orders),
            pending_orders=sum(1 for o in orders if o.status is OrderStatus.PENDING),
            completed_orders=sum(1 for o in orders if o.status is OrderStatus.COMPLETED),
            total_cuisines=len(cuisines),
            total_categories=len(categories),
            total_products=len(products),
            # fetch_all_orders already returns newest first
            recent_orders=orders[: self.settings.recent_orders_limit],
        )

        logger.debug(
            f"Dashboard: {stats.total_orders} orders "
            f"({stats.pending_orders} pending, {stats.completed_orders} completed)"
        )
        return stats
