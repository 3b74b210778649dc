from restaurant_admin.services.orders import OrderAggregator
from restaurant_admin.services.store import MockDocumentStore
from restaurant_admin.services.store.base import QueryResult, StoreError

from tests.conftest import at, seed_order


def seed_three_tenants(store):
    seed_order(store, "u1", "a", createdAt=at(10), status="pending")
    seed_order(store, "u2", "b", createdAt=at(30).isoformat(), status="completed")
    seed_order(store, "u3", "c", createdAt=at(20).timestamp() * 1000, status="in-progress")


class BrokenIndexStore(MockDocumentStore):
    """Advertises collection-group support but the query always fails."""

    def __init__(self):
        super().__init__()
        self.primary_calls = 0

    async def collection_group_query(self, collection_id, order_by=None, descending=False):
        self.primary_calls += 1
        return QueryResult(
            success=False,
            error_message="The query requires an index",
            error_code="failed_precondition",
        )


class RaisingGroupStore(MockDocumentStore):
    """Collection-group query raises instead of reporting failure."""

    async def collection_group_query(self, collection_id, order_by=None, descending=False):
        raise StoreError("Connection reset during collection-group query", (collection_id,))


async def test_primary_strategy_returns_newest_first(store, aggregator):
    seed_three_tenants(store)

    orders = await aggregator.fetch_all_orders()

    assert [o.id for o in orders] == ["b", "c", "a"]
    assert [o.user_id for o in orders] == ["u2", "u3", "u1"]


async def test_falls_back_when_collection_group_is_unsupported(settings):
    store = MockDocumentStore(collection_group_enabled=False)
    seed_three_tenants(store)
    seed_order(store, "u4", "undated", status="pending")

    orders = await OrderAggregator(store, settings).fetch_all_orders()

    assert [o.id for o in orders] == ["b", "c", "a", "undated"]
    assert orders[-1].user_id == "u4"


async def test_falls_back_when_primary_query_fails(settings):
    store = BrokenIndexStore()
    seed_three_tenants(store)

    orders = await OrderAggregator(store, settings).fetch_all_orders()

    assert store.primary_calls == 1
    assert [o.id for o in orders] == ["b", "c", "a"]


async def test_store_outage_on_primary_path_uses_fallback(settings):
    store = MockDocumentStore(failing_paths=[("orders",)])
    seed_three_tenants(store)

    orders = await OrderAggregator(store, settings).fetch_all_orders()

    assert {o.id for o in orders} == {"a", "b", "c"}


async def test_one_failing_tenant_does_not_sink_the_batch(settings):
    store = MockDocumentStore(
        collection_group_enabled=False,
        failing_paths=[("users", "u2", "orders")],
    )
    seed_three_tenants(store)

    orders = await OrderAggregator(store, settings).fetch_all_orders()

    assert [o.id for o in orders] == ["c", "a"]


async def test_total_failure_yields_empty_list(settings):
    store = MockDocumentStore(collection_group_enabled=False, failing_paths=[("users",)])
    seed_three_tenants(store)

    assert await OrderAggregator(store, settings).fetch_all_orders() == []


async def test_no_orders_at_all(aggregator):
    assert await aggregator.fetch_all_orders() == []


async def test_fetch_tenant_orders(store, aggregator):
    seed_three_tenants(store)
    seed_order(store, "u1", "d", createdAt=at(40))

    orders = await aggregator.fetch_tenant_orders("u1")

    assert sorted(o.id for o in orders) == ["a", "d"]
    assert all(o.user_id == "u1" for o in orders)
    assert await aggregator.fetch_tenant_orders("nobody") == []


async def test_get_order(store, aggregator):
    seed_order(store, "u1", "a", status="in-progress", total=19.0)

    order = await aggregator.get_order("u1", "a")
    assert order.status.value == "in-progress"
    assert order.total == 19.0

    assert await aggregator.get_order("u1", "missing") is None
    assert await aggregator.get_order("", "a") is None


async def test_get_order_read_failure_is_none(store, aggregator):
    seed_order(store, "u1", "a")
    store.fail_path(("users", "u1"))

    assert await aggregator.get_order("u1", "a") is None


async def test_malformed_created_at_does_not_empty_the_listing(store, aggregator):
    seed_order(store, "u1", "a", createdAt=at(10))
    seed_order(store, "u2", "b", createdAt="not-a-date")
    seed_order(store, "u3", "c", createdAt={"seconds": "soon"})

    orders = await aggregator.fetch_all_orders()

    assert [o.id for o in orders][0] == "a"
    assert {o.id for o in orders} == {"a", "b", "c"}
    assert orders[1].created_at is None


async def test_raising_primary_query_uses_fallback(settings):
    store = RaisingGroupStore()
    seed_three_tenants(store)

    orders = await OrderAggregator(store, settings).fetch_all_orders()

    assert [o.id for o in orders] == ["b", "c", "a"]
