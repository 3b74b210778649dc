from datetime import datetime

import pytest

from restaurant_admin.schemas import (
    CategoryCreate,
    CategoryUpdate,
    CuisineCreate,
    CuisineUpdate,
    ProductCreate,
    ProductUpdate,
)
from restaurant_admin.services.catalog import UnknownCategoryError
from restaurant_admin.services.images import ImageUploadError, MockImageHost
from restaurant_admin.services.catalog import CatalogService
from restaurant_admin.services.store.base import StoreError

HOSTED = "https://res.cloudinary.com/demo/image/upload/v1/pizza.jpg"


@pytest.fixture
def menu(store):
    store.seed(("cuisines", "italian"), {"name": "Italian", "restaurantCount": 3})
    store.seed(("cuisines", "indian"), {"name": "Indian"})
    store.seed(("categories", "pizza"), {"name": "Pizza", "cuisineId": "italian"})
    store.seed(("categories", "pasta"), {"name": "Pasta", "cuisineId": "italian"})
    store.seed(("categories", "orphan"), {"name": "Orphan"})
    store.seed(("categories", "lost"), {"name": "Lost", "cuisineId": "gone"})
    store.seed(
        ("products", "margherita"),
        {"name": "Margherita", "price": 9.5, "cuisineId": "italian", "categoryId": "pizza", "category": "Pizza"},
    )
    store.seed(
        ("products", "diavola"),
        {"name": "Diavola", "price": 11, "cuisineId": "italian", "category": "Pizza"},
    )
    store.seed(
        ("products", "carbonara"),
        {"name": "Carbonara", "price": 12, "cuisineId": "italian", "categoryId": "pasta", "category": "Pasta"},
    )
    store.seed(
        ("products", "naan-pizza"),
        {"name": "Naan Pizza", "price": 7, "cuisineId": "indian", "category": "Pizza"},
    )


class TestReads:

    async def test_lists(self, catalog, menu):
        assert {c.name for c in await catalog.get_cuisines()} == {"Italian", "Indian"}
        assert len(await catalog.get_categories()) == 4
        assert len(await catalog.get_products()) == 4

    async def test_single_documents(self, catalog, menu):
        assert (await catalog.get_cuisine("italian")).restaurant_count == 3
        assert (await catalog.get_category("pizza")).cuisine_id == "italian"
        assert (await catalog.get_product("margherita")).price == 9.5
        assert await catalog.get_product("missing") is None
        assert await catalog.get_cuisine("") is None

    async def test_cuisine_for_category(self, catalog, menu):
        assert (await catalog.get_cuisine_for_category("pizza")).name == "Italian"
        assert await catalog.get_cuisine_for_category("orphan") is None
        assert await catalog.get_cuisine_for_category("lost") is None
        assert await catalog.get_cuisine_for_category("missing") is None

    async def test_products_by_cuisine(self, catalog, menu):
        products = await catalog.get_products_by_cuisine("italian")
        assert {p.id for p in products} == {"margherita", "diavola", "carbonara"}
        assert await catalog.get_products_by_cuisine("thai") == []
        assert await catalog.get_products_by_cuisine(None) == []

    async def test_products_by_category_uses_id_then_name(self, catalog, menu):
        products = await catalog.get_products_by_category("pizza")
        # naan-pizza shares the name but belongs to another cuisine
        assert {p.id for p in products} == {"margherita", "diavola"}

        assert [p.id for p in await catalog.get_products_by_category("pasta")] == ["carbonara"]

    async def test_products_by_category_without_cuisine(self, catalog, menu):
        assert await catalog.get_products_by_category("orphan") == []
        assert await catalog.get_products_by_category("missing") == []

    async def test_read_failures_degrade(self, store, catalog, menu):
        store.fail_path(("products",))
        store.fail_path(("cuisines",))

        assert await catalog.get_products() == []
        assert await catalog.get_products_by_cuisine("italian") == []
        assert await catalog.get_products_by_category("pizza") == []
        assert await catalog.get_cuisine("italian") is None
        assert await catalog.get_cuisines() == []


class TestWrites:

    async def test_add_cuisine_uploads_local_image(self, store, image_host, catalog):
        cuisine_id = await catalog.add_cuisine(
            CuisineCreate(name="Thai", description="Spicy", image="file:///tmp/thai.png")
        )

        doc = store.peek(("cuisines", cuisine_id))
        assert doc["name"] == "Thai"
        assert doc["restaurantCount"] == 0
        assert doc["image"].startswith(MockImageHost.BASE_URL + "/cuisines/")
        assert isinstance(doc["createdAt"], datetime)
        assert image_host.uploads[0][1] == "cuisines"

    async def test_update_cuisine_writes_only_sent_fields(self, store, image_host, catalog, menu):
        await catalog.update_cuisine("italian", CuisineUpdate(description="Pasta and pizza"))

        doc = store.peek(("cuisines", "italian"))
        assert doc["description"] == "Pasta and pizza"
        assert doc["name"] == "Italian"
        assert doc["restaurantCount"] == 3
        assert isinstance(doc["updatedAt"], datetime)
        assert image_host.uploads == []

    async def test_delete_cuisine(self, store, catalog, menu):
        await catalog.delete_cuisine("indian")
        assert store.peek(("cuisines", "indian")) is None

    async def test_category_crud(self, store, catalog, menu):
        category_id = await catalog.add_category(
            CategoryCreate(name="Risotto", cuisine_id="italian", image=HOSTED)
        )
        doc = store.peek(("categories", category_id))
        assert doc["cuisineId"] == "italian"
        assert doc["image"] == HOSTED
        assert doc["itemCount"] == 0

        await catalog.update_category(category_id, CategoryUpdate(name="Risotti"))
        assert (await catalog.get_category(category_id)).name == "Risotti"

        await catalog.delete_category(category_id)
        assert await catalog.get_category(category_id) is None

    async def test_add_product_resolves_category_name(self, store, catalog, menu):
        product_id = await catalog.add_product(
            ProductCreate(
                name="Quattro Formaggi",
                price=12,
                image=HOSTED,
                category_id="pizza",
                cuisine_id="italian",
                is_veg=True,
            )
        )

        doc = store.peek(("products", product_id))
        assert doc["category"] == "Pizza"
        assert doc["categoryId"] == "pizza"
        assert doc["rating"] == 0
        assert doc["reviewCount"] == 0
        assert doc["isVeg"] is True
        assert product_id in {p.id for p in await catalog.get_products_by_category("pizza")}

    async def test_add_product_with_unknown_category(self, store, catalog, menu):
        with pytest.raises(UnknownCategoryError):
            await catalog.add_product(
                ProductCreate(name="X", image=HOSTED, category_id="nope", cuisine_id="italian")
            )
        assert len(await catalog.get_products()) == 4

    async def test_update_product(self, store, catalog, menu):
        await catalog.update_product(
            "diavola", ProductUpdate(category_id="pizza", price=10.5, image="/tmp/diavola.jpg")
        )

        doc = store.peek(("products", "diavola"))
        assert doc["categoryId"] == "pizza"
        assert doc["category"] == "Pizza"
        assert doc["price"] == 10.5
        assert doc["image"].startswith(MockImageHost.BASE_URL + "/products/")
        assert doc["name"] == "Diavola"

    async def test_delete_product(self, store, catalog, menu):
        await catalog.delete_product("naan-pizza")
        assert await catalog.get_product("naan-pizza") is None

    async def test_write_failure_propagates(self, store, catalog):
        store.fail_path(("cuisines",))
        with pytest.raises(StoreError):
            await catalog.add_cuisine(CuisineCreate(name="Thai"))

    async def test_image_failure_aborts_write(self, store, settings):
        catalog = CatalogService(store, MockImageHost(failure_rate=1.0), settings)

        with pytest.raises(ImageUploadError):
            await catalog.add_cuisine(CuisineCreate(name="Thai", image="/tmp/thai.png"))
        assert await catalog.get_cuisines() == []
