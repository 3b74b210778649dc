"""
Order Status Transitions

Two ways to change an order's status:

    set_status  - admin override. Writes any of the four statuses.
    advance     - guarded. Only follows the delivery workflow:

                      pending -> in-progress -> completed
                         |            |
                         +------------+--> cancelled

Completing an order with a delivery payload also stores the payload on
the order (with a server-assigned ``deliveredAt``) and increments the
courier's ``deliveriesCompleted`` counter.

Unlike the read paths, every store failure here propagates to the caller:
a status change that silently failed would leave the caller believing the
order moved when it did not.

Version: 1.0.0
"""

import logging
from typing import Any, Mapping, Optional, Union

from restaurant_admin.core.config import Settings, get_settings
from restaurant_admin.normalizer import normalize_order
from restaurant_admin.schemas import DeliveryPayload, OrderStatus
from restaurant_admin.services.store.base import (
    BaseDocumentStore,
    Increment,
    StoreError,
    SERVER_TIMESTAMP,
)

logger = logging.getLogger(__name__)


ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.IN_PROGRESS, OrderStatus.CANCELLED}),
    OrderStatus.IN_PROGRESS: frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


class InvalidStatusTransition(ValueError):
    """The guarded workflow does not allow this status change."""

    def __init__(self, current: OrderStatus, requested: OrderStatus):
        super().__init__(
            f"Cannot move an order from {current.value} to {requested.value}"
        )
        self.current = current
        self.requested = requested


class OrderNotFoundError(LookupError):
    """The order addressed by (tenant id, order id) does not exist."""


class CourierCreditError(StoreError):
    """The order was written but the courier's delivery counter was not incremented."""

    def __init__(
        self,
        message: str,
        courier_id: str,
        order_id: str,
        path: Optional[tuple[str, ...]] = None,
    ):
        super().__init__(message, path)
        self.courier_id = courier_id
        self.order_id = order_id


DeliveryInput = Union[DeliveryPayload, Mapping[str, Any]]


def coerce_delivery(delivery: DeliveryInput) -> DeliveryPayload:
    """Validate a delivery payload given as a model or a camelCase/snake_case mapping."""
    if isinstance(delivery, DeliveryPayload):
        return delivery
    return DeliveryPayload.model_validate(dict(delivery))


class StatusTransitionManager:
    """
    Applies order status changes and their side effects.

    Example:
        >>> manager = StatusTransitionManager(store, settings)
        >>> await manager.advance("u1", "o1", OrderStatus.IN_PROGRESS)
        >>> await manager.advance(
        ...     "u1", "o1", OrderStatus.COMPLETED,
        ...     DeliveryPayload(delivered_by="courier-1", amount_collected=19.0),
        ... )
    """

    def __init__(self, store: BaseDocumentStore, settings: Optional[Settings] = None):
        self.store = store
        self.settings = settings or get_settings()

    @staticmethod
    def allowed_transitions(status: Union[OrderStatus, str]) -> frozenset[OrderStatus]:
        """Statuses the guarded workflow may move to from ``status``."""
        return ALLOWED_TRANSITIONS[OrderStatus(status)]

    def _order_path(self, tenant_id: str, order_id: str) -> tuple[str, ...]:
        if not tenant_id or not order_id:
            raise ValueError("Both tenant id and order id are required")
        return (
            self.settings.users_collection,
            tenant_id,
            self.settings.orders_collection,
            order_id,
        )

    # =========================================================================
    # FORCE-SET
    # =========================================================================

    async def set_status(
        self,
        tenant_id: str,
        order_id: str,
        status: Union[OrderStatus, str],
        delivery: Optional[DeliveryInput] = None,
    ) -> None:
        """
        Write a new status, whatever the current one is.

        Args:
            tenant_id: Owning tenant
            order_id: Order id within the tenant
            status: New status
            delivery: Delivery payload; only used when status is completed

        Raises:
            ValueError: If an id is missing or the status is not one of the four
            StoreError: If the order write fails
            CourierCreditError: If the order was written but the courier
                counter update failed
        """
        status = OrderStatus(status)
        path = self._order_path(tenant_id, order_id)

        payload: Optional[DeliveryPayload] = None
        if status is OrderStatus.COMPLETED and delivery is not None:
            payload = coerce_delivery(delivery)

        update: dict[str, Any] = {
            "status": status.value,
            "updatedAt": SERVER_TIMESTAMP,
        }
        if payload is not None:
            details = payload.model_dump(by_alias=True)
            details["deliveredAt"] = SERVER_TIMESTAMP
            update["deliveryDetails"] = details

        try:
            await self.store.update_document(path, update)
        except StoreError as e:
            logger.error(f"Failed to set order {order_id} (tenant {tenant_id}) to {status.value}: {e}")
            raise

        logger.info(f"Order {order_id} (tenant {tenant_id}) -> {status.value}")

        if payload is not None and payload.delivered_by:
            await self._credit_courier(payload.delivered_by, order_id)

    async def _credit_courier(self, courier_id: str, order_id: str) -> None:
        path = (self.settings.couriers_collection, courier_id)
        try:
            await self.store.update_document(
                path,
                {
                    "deliveriesCompleted": Increment(1),
                    "updatedAt": SERVER_TIMESTAMP,
                },
            )
        except StoreError as e:
            logger.error(
                f"Order {order_id} completed but courier {courier_id} "
                f"could not be credited: {e}"
            )
            raise CourierCreditError(
                f"Order {order_id} was completed but courier {courier_id} "
                f"could not be credited: {e}",
                courier_id=courier_id,
                order_id=order_id,
                path=path,
            ) from e

        logger.info(f"Courier {courier_id} credited with delivery of order {order_id}")

    # =========================================================================
    # GUARDED
    # =========================================================================

    async def advance(
        self,
        tenant_id: str,
        order_id: str,
        status: Union[OrderStatus, str],
        delivery: Optional[DeliveryInput] = None,
    ) -> OrderStatus:
        """
        Move an order along the delivery workflow.

        Returns:
            OrderStatus: The order's previous status

        Raises:
            OrderNotFoundError: If the order does not exist
            InvalidStatusTransition: If the workflow forbids the change
            StoreError: If the read or any write fails
        """
        status = OrderStatus(status)
        path = self._order_path(tenant_id, order_id)

        raw = await self.store.get_document(path)
        if raw is None:
            raise OrderNotFoundError(f"Order {order_id} not found for tenant {tenant_id}")

        current = normalize_order(raw, tenant_id=tenant_id).status
        if status not in ALLOWED_TRANSITIONS[current]:
            logger.warning(
                f"Rejected transition for order {order_id}: {current.value} -> {status.value}"
            )
            raise InvalidStatusTransition(current, status)

        await self.set_status(tenant_id, order_id, status, delivery)
        return current
