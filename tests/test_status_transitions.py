from datetime import datetime

import pytest

from restaurant_admin.schemas import DeliveryPayload, OrderStatus
from restaurant_admin.services.orders import (
    CourierCreditError,
    InvalidStatusTransition,
    OrderNotFoundError,
    StatusTransitionManager,
)
from restaurant_admin.services.store.base import DocumentNotFoundError, StoreError

from tests.conftest import at, seed_order

ORDER_PATH = ("users", "u1", "orders", "o1")
COURIER_PATH = ("deliverymen", "courier-1")


@pytest.fixture
def pizza_order(store):
    seed_order(
        store,
        "u1",
        "o1",
        status="pending",
        items=[{"name": "Pizza", "quantity": 2, "price": 9.5}],
        total=19.0,
        createdAt=at(0),
    )
    store.seed(COURIER_PATH, {"name": "Sam", "deliveriesCompleted": 4})


async def test_pizza_order_is_delivered(store, transitions, pizza_order):
    previous = await transitions.advance("u1", "o1", OrderStatus.IN_PROGRESS)
    assert previous is OrderStatus.PENDING

    await transitions.advance(
        "u1",
        "o1",
        "completed",
        DeliveryPayload(delivered_by="courier-1", amount_collected=19.0, received_by="Jane"),
    )

    order = store.peek(ORDER_PATH)
    assert order["status"] == "completed"
    assert order["deliveryDetails"]["amountCollected"] == 19.0
    assert order["deliveryDetails"]["deliveredBy"] == "courier-1"
    assert order["deliveryDetails"]["receivedBy"] == "Jane"
    assert isinstance(order["deliveryDetails"]["deliveredAt"], datetime)
    assert isinstance(order["updatedAt"], datetime)

    assert store.peek(COURIER_PATH)["deliveriesCompleted"] == 5


async def test_mapping_payload_is_accepted(store, transitions, pizza_order):
    await transitions.set_status(
        "u1", "o1", "completed", {"deliveredBy": "courier-1", "amountCollected": 12.5}
    )

    assert store.peek(ORDER_PATH)["deliveryDetails"]["amountCollected"] == 12.5
    assert store.peek(COURIER_PATH)["deliveriesCompleted"] == 5


async def test_counter_starts_from_zero(store, transitions, pizza_order):
    store.seed(("deliverymen", "courier-2"), {"name": "New"})

    await transitions.set_status("u1", "o1", "completed", DeliveryPayload(delivered_by="courier-2"))

    assert store.peek(("deliverymen", "courier-2"))["deliveriesCompleted"] == 1


@pytest.mark.parametrize("status", ["pending", "in-progress", "cancelled"])
async def test_non_completed_status_leaves_courier_alone(store, transitions, pizza_order, status):
    await transitions.set_status("u1", "o1", status, DeliveryPayload(delivered_by="courier-1"))

    assert store.peek(ORDER_PATH)["status"] == status
    assert "deliveryDetails" not in store.peek(ORDER_PATH)
    assert store.peek(COURIER_PATH)["deliveriesCompleted"] == 4


async def test_completed_without_payload_leaves_courier_alone(store, transitions, pizza_order):
    await transitions.set_status("u1", "o1", OrderStatus.COMPLETED)

    assert store.peek(ORDER_PATH)["status"] == "completed"
    assert "deliveryDetails" not in store.peek(ORDER_PATH)
    assert store.peek(COURIER_PATH)["deliveriesCompleted"] == 4


async def test_force_set_ignores_the_workflow(store, transitions, pizza_order):
    await transitions.set_status("u1", "o1", "completed")
    await transitions.set_status("u1", "o1", "pending")

    assert store.peek(ORDER_PATH)["status"] == "pending"


async def test_write_failure_propagates(store, transitions, pizza_order):
    store.fail_path(ORDER_PATH)

    with pytest.raises(StoreError):
        await transitions.set_status("u1", "o1", "cancelled")


async def test_missing_order_on_write(transitions):
    with pytest.raises(DocumentNotFoundError):
        await transitions.set_status("u1", "ghost", "cancelled")


async def test_missing_courier_after_order_write(store, transitions, pizza_order):
    with pytest.raises(CourierCreditError) as excinfo:
        await transitions.set_status(
            "u1", "o1", "completed", DeliveryPayload(delivered_by="nobody")
        )

    assert excinfo.value.courier_id == "nobody"
    assert excinfo.value.order_id == "o1"
    assert isinstance(excinfo.value.__cause__, DocumentNotFoundError)
    assert store.peek(ORDER_PATH)["status"] == "completed"


async def test_invalid_arguments(transitions, pizza_order):
    with pytest.raises(ValueError):
        await transitions.set_status("u1", "o1", "shipped")
    with pytest.raises(ValueError):
        await transitions.set_status("", "o1", "pending")


class TestAdvance:

    async def test_illegal_transition_is_rejected(self, store, transitions, pizza_order):
        with pytest.raises(InvalidStatusTransition) as excinfo:
            await transitions.advance("u1", "o1", "completed")

        assert excinfo.value.current is OrderStatus.PENDING
        assert excinfo.value.requested is OrderStatus.COMPLETED
        assert store.peek(ORDER_PATH)["status"] == "pending"

    async def test_terminal_states_are_final(self, store, transitions, pizza_order):
        await transitions.advance("u1", "o1", "cancelled")

        with pytest.raises(InvalidStatusTransition):
            await transitions.advance("u1", "o1", "in-progress")

    async def test_missing_order(self, transitions):
        with pytest.raises(OrderNotFoundError):
            await transitions.advance("u1", "ghost", "in-progress")

    def test_allowed_transitions(self):
        assert StatusTransitionManager.allowed_transitions("pending") == {
            OrderStatus.IN_PROGRESS,
            OrderStatus.CANCELLED,
        }
        assert StatusTransitionManager.allowed_transitions(OrderStatus.IN_PROGRESS) == {
            OrderStatus.COMPLETED,
            OrderStatus.CANCELLED,
        }
        assert StatusTransitionManager.allowed_transitions("completed") == frozenset()
