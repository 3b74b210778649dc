"""
Order workflow: cross-tenant aggregation, status transitions and the
session-local order board.
"""

from restaurant_admin.services.orders.aggregator import OrderAggregator
from restaurant_admin.services.orders.board import LatestRequestGuard, OrderBoard
from restaurant_admin.services.orders.status import (
    ALLOWED_TRANSITIONS,
    CourierCreditError,
    InvalidStatusTransition,
    OrderNotFoundError,
    StatusTransitionManager,
)

__all__ = [
    "OrderAggregator",
    "OrderBoard",
    "LatestRequestGuard",
    "StatusTransitionManager",
    "InvalidStatusTransition",
    "CourierCreditError",
    "OrderNotFoundError",
    "ALLOWED_TRANSITIONS",
]
