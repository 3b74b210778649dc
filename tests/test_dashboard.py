from restaurant_admin.services.dashboard import DashboardService

from tests.conftest import at, seed_order


async def test_recent_orders_are_capped(store, catalog, aggregator, settings):
    for minute in range(8):
        seed_order(store, f"u{minute}", f"o{minute}", createdAt=at(minute), status="pending")

    stats = await DashboardService(catalog, aggregator, settings).get_stats()

    assert stats.total_orders == 8
    assert stats.pending_orders == 8
    assert [o.id for o in stats.recent_orders] == ["o7", "o6", "o5", "o4", "o3"]


async def test_failing_reads_still_render(store, catalog, aggregator, settings):
    store.fail_path(("cuisines",))
    store.fail_path(("products",))
    store.seed(("categories", "pizza"), {"name": "Pizza"})

    stats = await DashboardService(catalog, aggregator, settings).get_stats()

    assert stats.total_cuisines == 0
    assert stats.total_products == 0
    assert stats.total_categories == 1
    assert stats.total_orders == 0
