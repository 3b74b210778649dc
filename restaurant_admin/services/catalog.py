"""
Catalog Service

Cuisines, categories and products: reads, relationship lookups and
create/update/delete.

Relationships:
    Category.cuisine_id  -> Cuisine
    Product.cuisine_id   -> Cuisine
    Product.category_id  -> Category   (``category`` keeps the name)

Products written before ``categoryId`` existed only carry the category
name; lookups by category fall back to matching that name within the
category's cuisine.

Reads favor availability: a miss or a failed read returns None or an
empty list and logs. Writes and image uploads raise.

Version: 1.0.0
"""

import logging
from typing import Any, Optional

from restaurant_admin.core.config import Settings, get_settings
from restaurant_admin.normalizer import (
    normalize_category,
    normalize_cuisine,
    normalize_product,
)
from restaurant_admin.schemas import (
    Category,
    CategoryCreate,
    CategoryUpdate,
    Cuisine,
    CuisineCreate,
    CuisineUpdate,
    Product,
    ProductCreate,
    ProductUpdate,
)
from restaurant_admin.services.images.base import BaseImageHost
from restaurant_admin.services.store.base import (
    BaseDocumentStore,
    DocumentPath,
    RawDocument,
    StoreError,
    SERVER_TIMESTAMP,
)

logger = logging.getLogger(__name__)


class UnknownCategoryError(ValueError):
    """A product references a category that could not be found."""


class CatalogService:
    """
    Catalog reads, lookups and writes.

    Example:
        >>> catalog = CatalogService(store, image_host, settings)
        >>> cuisine_id = await catalog.add_cuisine(CuisineCreate(name="Italian"))
        >>> await catalog.get_products_by_cuisine(cuisine_id)
        []
    """

    def __init__(
        self,
        store: BaseDocumentStore,
        image_host: BaseImageHost,
        settings: Optional[Settings] = None,
    ):
        self.store = store
        self.image_host = image_host
        self.settings = settings or get_settings()

    @property
    def _cuisines(self) -> DocumentPath:
        return (self.settings.cuisines_collection,)

    @property
    def _categories(self) -> DocumentPath:
        return (self.settings.categories_collection,)

    @property
    def _products(self) -> DocumentPath:
        return (self.settings.products_collection,)

    # =========================================================================
    # READ HELPERS
    # =========================================================================

    async def _list(self, collection: DocumentPath) -> list[RawDocument]:
        try:
            documents = await self.store.list_documents(collection)
        except StoreError as e:
            logger.error(f"Could not list {'/'.join(collection)}: {e}")
            return []

        if not documents:
            logger.warning(f"No documents found in {'/'.join(collection)}")
        return documents

    async def _get(self, collection: DocumentPath, document_id: Optional[str]) -> Optional[RawDocument]:
        if not document_id:
            logger.error(f"Invalid id {document_id!r} for {'/'.join(collection)}")
            return None

        try:
            raw = await self.store.get_document(collection + (document_id,))
        except StoreError as e:
            logger.error(f"Could not read {'/'.join(collection)}/{document_id}: {e}")
            return None

        if raw is None:
            logger.info(f"No document {'/'.join(collection)}/{document_id}")
        return raw

    # =========================================================================
    # CUISINES
    # =========================================================================

    async def get_cuisines(self) -> list[Cuisine]:
        return [normalize_cuisine(doc) for doc in await self._list(self._cuisines)]

    async def get_cuisine(self, cuisine_id: Optional[str]) -> Optional[Cuisine]:
        raw = await self._get(self._cuisines, cuisine_id)
        return normalize_cuisine(raw) if raw else None

    async def add_cuisine(self, data: CuisineCreate) -> str:
        """
        Create a cuisine, uploading its image first if it is a local file.

        Returns:
            str: New cuisine id

        Raises:
            ImageUploadError: If the image upload fails
            StoreError: If the write fails
        """
        image = await self._hosted_image(data.image, "cuisines")
        cuisine_id = await self.store.create_document(
            self._cuisines,
            {
                "name": data.name,
                "description": data.description,
                "longDescription": data.long_description,
                "image": image,
                "restaurantCount": 0,
                "createdAt": SERVER_TIMESTAMP,
                "updatedAt": SERVER_TIMESTAMP,
            },
        )
        logger.info(f"Cuisine {cuisine_id} created ({data.name})")
        return cuisine_id

    async def update_cuisine(self, cuisine_id: str, data: CuisineUpdate) -> None:
        fields = await self._update_fields(data.to_update_fields(), "cuisines")
        await self.store.update_document(self._cuisines + (cuisine_id,), fields)
        logger.info(f"Cuisine {cuisine_id} updated ({sorted(fields)})")

    async def delete_cuisine(self, cuisine_id: str) -> None:
        await self.store.delete_document(self._cuisines + (cuisine_id,))
        logger.info(f"Cuisine {cuisine_id} deleted")

    # =========================================================================
    # CATEGORIES
    # =========================================================================

    async def get_categories(self) -> list[Category]:
        return [normalize_category(doc) for doc in await self._list(self._categories)]

    async def get_category(self, category_id: Optional[str]) -> Optional[Category]:
        raw = await self._get(self._categories, category_id)
        return normalize_category(raw) if raw else None

    async def get_cuisine_for_category(self, category_id: str) -> Optional[Cuisine]:
        """
        Resolve the cuisine that owns a category.

        Returns:
            Optional[Cuisine]: None if the category is missing, has no
            cuisine, or the cuisine is missing
        """
        category = await self.get_category(category_id)
        if category is None or not category.cuisine_id:
            logger.warning(f"Category {category_id} has no resolvable cuisine")
            return None

        return await self.get_cuisine(category.cuisine_id)

    async def add_category(self, data: CategoryCreate) -> str:
        image = await self._hosted_image(data.image, "categories")
        category_id = await self.store.create_document(
            self._categories,
            {
                "name": data.name,
                "description": data.description,
                "image": image,
                "cuisineId": data.cuisine_id,
                "itemCount": 0,
                "createdAt": SERVER_TIMESTAMP,
                "updatedAt": SERVER_TIMESTAMP,
            },
        )
        logger.info(f"Category {category_id} created ({data.name})")
        return category_id

    async def update_category(self, category_id: str, data: CategoryUpdate) -> None:
        fields = await self._update_fields(data.to_update_fields(), "categories")
        await self.store.update_document(self._categories + (category_id,), fields)
        logger.info(f"Category {category_id} updated ({sorted(fields)})")

    async def delete_category(self, category_id: str) -> None:
        await self.store.delete_document(self._categories + (category_id,))
        logger.info(f"Category {category_id} deleted")

    # =========================================================================
    # PRODUCTS
    # =========================================================================

    async def get_products(self) -> list[Product]:
        return [normalize_product(doc) for doc in await self._list(self._products)]

    async def get_product(self, product_id: Optional[str]) -> Optional[Product]:
        raw = await self._get(self._products, product_id)
        return normalize_product(raw) if raw else None

    async def get_products_by_cuisine(self, cuisine_id: Optional[str]) -> list[Product]:
        if not cuisine_id:
            logger.error("Invalid cuisine id supplied")
            return []

        try:
            documents = await self.store.query_equal(self._products, "cuisineId", cuisine_id)
        except StoreError as e:
            logger.error(f"Could not read products for cuisine {cuisine_id}: {e}")
            return []

        logger.debug(f"{len(documents)} products found for cuisine {cuisine_id}")
        return [normalize_product(doc) for doc in documents]

    async def get_products_by_category(self, category_id: str) -> list[Product]:
        """
        Products of a category, searched within the category's cuisine.

        Returns:
            list[Product]: Empty if the category or its cuisine cannot be resolved
        """
        category = await self.get_category(category_id)
        if category is None or not category.cuisine_id:
            logger.warning(f"Category {category_id} has no cuisine; no products")
            return []

        products = await self.get_products_by_cuisine(category.cuisine_id)
        return [product for product in products if _belongs_to(product, category)]

    async def add_product(self, data: ProductCreate) -> str:
        """
        Create a product.

        The image is uploaded first when it is a local file. When
        ``category_id`` is given the category name is looked up and stored
        alongside it.

        Raises:
            UnknownCategoryError: If category_id does not resolve
            ImageUploadError: If the image upload fails
            StoreError: If the write fails
        """
        category_name = data.category
        if data.category_id:
            category_name = await self._category_name(data.category_id)

        image = await self._hosted_image(data.image, "products")
        product_id = await self.store.create_document(
            self._products,
            {
                "name": data.name,
                "price": data.price,
                "discountPrice": data.discount_price,
                "description": data.description,
                "image": image,
                "rating": 0,
                "reviewCount": 0,
                "category": category_name,
                "categoryId": data.category_id,
                "subCategory": data.sub_category,
                "isVeg": data.is_veg,
                "isAvailable": data.is_available,
                "cuisineId": data.cuisine_id,
                "variations": [v.model_dump(by_alias=True) for v in data.variations],
                "addons": [a.model_dump(by_alias=True) for a in data.addons],
                "createdAt": SERVER_TIMESTAMP,
                "updatedAt": SERVER_TIMESTAMP,
            },
        )
        logger.info(f"Product {product_id} created ({data.name})")
        return product_id

    async def update_product(self, product_id: str, data: ProductUpdate) -> None:
        fields = data.to_update_fields()
        if fields.get("categoryId"):
            fields["category"] = await self._category_name(fields["categoryId"])

        fields = await self._update_fields(fields, "products")
        await self.store.update_document(self._products + (product_id,), fields)
        logger.info(f"Product {product_id} updated ({sorted(fields)})")

    async def delete_product(self, product_id: str) -> None:
        await self.store.delete_document(self._products + (product_id,))
        logger.info(f"Product {product_id} deleted")

    # =========================================================================
    # WRITE HELPERS
    # =========================================================================

    async def _hosted_image(self, reference: Optional[str], folder: str) -> str:
        if not reference:
            return ""
        return await self.image_host.upload(reference, folder=folder)

    async def _update_fields(self, fields: dict[str, Any], folder: str) -> dict[str, Any]:
        if fields.get("image"):
            fields["image"] = await self.image_host.upload(fields["image"], folder=folder)
        fields["updatedAt"] = SERVER_TIMESTAMP
        return fields

    async def _category_name(self, category_id: str) -> str:
        category = await self.get_category(category_id)
        if category is None:
            raise UnknownCategoryError(f"Category {category_id} not found")
        return category.name


def _belongs_to(product: Product, category: Category) -> bool:
    if product.category_id:
        return product.category_id == category.id
    return product.category == category.name
