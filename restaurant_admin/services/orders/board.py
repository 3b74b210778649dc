"""
Order Board

Local, in-memory view of the order list for one admin session.

Refreshes are latest-wins: when several refreshes overlap, only the most
recently started one may replace the list, so a slow early response never
overwrites a newer one. After a successful status change the local copy
of that order is updated in place; on failure the list is left untouched.

Version: 1.0.0
"""

import logging
from collections import Counter
from datetime import datetime, timezone
from typing import Optional, Union

from restaurant_admin.schemas import DeliveryDetails, Order, OrderStatus
from restaurant_admin.services.orders.aggregator import OrderAggregator
from restaurant_admin.services.orders.status import (
    DeliveryInput,
    StatusTransitionManager,
    coerce_delivery,
)

logger = logging.getLogger(__name__)


class LatestRequestGuard:
    """Hands out increasing tokens; only the newest token is current."""

    def __init__(self) -> None:
        self._latest = 0

    def begin(self) -> int:
        self._latest += 1
        return self._latest

    def is_current(self, token: int) -> bool:
        return token == self._latest


class OrderBoard:
    """
    Order list state with latest-wins refresh and write reconciliation.

    Example:
        >>> board = OrderBoard(aggregator, transitions)
        >>> await board.refresh()
        True
        >>> await board.change_status(board.orders[0], OrderStatus.IN_PROGRESS, guarded=True)
    """

    def __init__(self, aggregator: OrderAggregator, transitions: StatusTransitionManager):
        self.aggregator = aggregator
        self.transitions = transitions
        self.orders: list[Order] = []
        self._guard = LatestRequestGuard()

    async def refresh(self) -> bool:
        """
        Reload every order.

        Returns:
            bool: False if a newer refresh started meanwhile and this
            result was discarded
        """
        token = self._guard.begin()
        orders = await self.aggregator.fetch_all_orders()

        if not self._guard.is_current(token):
            logger.debug(f"Discarding stale order refresh #{token}")
            return False

        self.orders = orders
        return True

    def find(self, tenant_id: str, order_id: str) -> Optional[Order]:
        for order in self.orders:
            if order.user_id == tenant_id and order.id == order_id:
                return order
        return None

    async def change_status(
        self,
        order: Order,
        status: Union[OrderStatus, str],
        delivery: Optional[DeliveryInput] = None,
        guarded: bool = False,
    ) -> Order:
        """
        Change an order's status in the store, then in the local list.

        Args:
            order: Order as currently shown
            status: New status
            delivery: Delivery payload for completions
            guarded: Use the workflow-enforcing transition instead of a force-set

        Returns:
            Order: The reconciled local order

        Raises:
            StoreError, InvalidStatusTransition, OrderNotFoundError: Propagated
            unchanged; the local list is not modified
        """
        status = OrderStatus(status)

        if guarded:
            await self.transitions.advance(order.user_id, order.id, status, delivery)
        else:
            await self.transitions.set_status(order.user_id, order.id, status, delivery)

        now = datetime.now(timezone.utc)
        changes = {"status": status, "updated_at": now}
        if status is OrderStatus.COMPLETED and delivery is not None:
            changes["delivery_details"] = DeliveryDetails(
                **coerce_delivery(delivery).model_dump(), delivered_at=now
            )

        updated = order.model_copy(update=changes)
        self.orders = [
            updated if (o.user_id, o.id) == (order.user_id, order.id) else o
            for o in self.orders
        ]
        return updated

    def counts_by_status(self) -> dict[OrderStatus, int]:
        counts = Counter(order.status for order in self.orders)
        return {status: counts.get(status, 0) for status in OrderStatus}
