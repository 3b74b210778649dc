"""
Record Normalizer

Turns loosely-typed RawDocument payloads into strict domain records.

Every function here is total: missing or malformed fields are replaced by
their defaults instead of raising.

    strings      -> ""
    numbers      -> 0
    booleans     -> False
    collections  -> []
    relations    -> None

Normalizing a record that was already normalized and dumped back with
``model_dump(by_alias=True)`` returns an equal record.

Version: 1.0.0
"""

import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from restaurant_admin.coercion import coerce_timestamp, finite_float, is_number
from restaurant_admin.schemas import (
    Category,
    Coordinates,
    Cuisine,
    DeliveryDetails,
    Order,
    OrderItem,
    OrderStatus,
    Product,
    ProductOption,
)
from restaurant_admin.services.store.base import RawDocument

logger = logging.getLogger(__name__)

UNKNOWN_TENANT = "unknown"

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


# =============================================================================
# SCALAR COERCION
# =============================================================================

def _number(value: Any, default: float = 0.0) -> float:
    number = finite_float(value)
    return default if number is None else number


def _integer(value: Any, default: int = 0) -> int:
    return int(value) if is_number(value) else default


def _string(value: Any) -> str:
    if isinstance(value, str):
        return value
    if is_number(value):
        try:
            return str(value)
        except ValueError:
            # int too long for str() under the interpreter's digit limit
            return ""
    return ""


def _optional_string(value: Any) -> Optional[str]:
    text = _string(value)
    return text or None


def _boolean(value: Any) -> bool:
    return value if isinstance(value, bool) else False


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def order_sort_key(order: Order) -> datetime:
    """Sort key for newest-first listings; undated orders sort last."""
    return order.created_at or _EPOCH


# =============================================================================
# ORDERS
# =============================================================================

def normalize_coordinates(value: Any) -> Coordinates:
    data = _mapping(value)
    latitude = finite_float(data.get("latitude"))
    longitude = finite_float(data.get("longitude"))
    if latitude is not None and longitude is not None:
        return Coordinates(latitude=latitude, longitude=longitude)
    return Coordinates()


def normalize_items(value: Any) -> list[OrderItem]:
    if not isinstance(value, (list, tuple)):
        return []

    items = []
    for entry in value:
        data = _mapping(entry)
        items.append(
            OrderItem(
                id=_optional_string(data.get("id")),
                name=_string(data.get("name")),
                quantity=_integer(data.get("quantity"), default=1),
                price=_number(data.get("price")),
            )
        )
    return items


def normalize_status(value: Any) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        if value is not None:
            logger.debug(f"Unknown order status {value!r}, treating as pending")
        return OrderStatus.PENDING


def normalize_delivery(value: Any) -> Optional[DeliveryDetails]:
    if not isinstance(value, Mapping):
        return None
    return DeliveryDetails(
        received_by=_string(value.get("receivedBy")),
        notes=_string(value.get("notes")),
        amount_collected=max(_number(value.get("amountCollected")), 0.0),
        signature_url=_optional_string(value.get("signatureUrl")),
        proof_of_delivery_url=_optional_string(value.get("proofOfDeliveryUrl")),
        delivered_at=coerce_timestamp(value.get("deliveredAt")),
        delivered_by=_string(value.get("deliveredBy")),
        deliveryman_name=_string(value.get("deliverymanName")),
    )


def resolve_tenant_id(raw: RawDocument) -> str:
    """Owning tenant: parent-of-parent id, then the ``userId`` field, then "unknown"."""
    return raw.tenant_id or _optional_string(raw.data.get("userId")) or UNKNOWN_TENANT


def normalize_order(raw: RawDocument, tenant_id: Optional[str] = None) -> Order:
    """
    Build an Order from a raw order document.

    Args:
        raw: Document read from a tenant's orders sub-collection
        tenant_id: Known owning tenant; derived from the document when omitted
    """
    data = _mapping(raw.data)
    created_at = coerce_timestamp(data.get("createdAt"))

    return Order(
        id=raw.id,
        user_id=tenant_id or resolve_tenant_id(raw),
        driver_id=_optional_string(data.get("driverId")),
        customer_name=_string(data.get("customerName")),
        customer_phone=_string(data.get("customerPhone")),
        address=_string(data.get("address")),
        coordinates=normalize_coordinates(data.get("coordinates")),
        status=normalize_status(data.get("status")),
        total=_number(data.get("total")),
        eta=_string(data.get("eta")),
        distance=_string(data.get("distance")),
        note=_string(data.get("note")),
        items=normalize_items(data.get("items")),
        created_at=created_at,
        updated_at=coerce_timestamp(data.get("updatedAt")) or created_at,
        delivery_details=normalize_delivery(data.get("deliveryDetails")),
    )


# =============================================================================
# CATALOG
# =============================================================================

def normalize_cuisine(raw: RawDocument) -> Cuisine:
    data = _mapping(raw.data)
    return Cuisine(
        id=raw.id,
        name=_string(data.get("name")),
        image=_string(data.get("image")),
        description=_string(data.get("description")),
        long_description=_string(data.get("longDescription")),
        restaurant_count=_integer(data.get("restaurantCount")),
    )


def normalize_category(raw: RawDocument) -> Category:
    data = _mapping(raw.data)
    return Category(
        id=raw.id,
        name=_string(data.get("name")),
        image=_string(data.get("image")),
        description=_string(data.get("description")),
        cuisine_id=_optional_string(data.get("cuisineId")),
        item_count=_integer(data.get("itemCount")),
    )


def normalize_options(value: Any) -> list[ProductOption]:
    if not isinstance(value, (list, tuple)):
        return []
    return [
        ProductOption(
            id=_string(entry.get("id")),
            name=_string(entry.get("name")),
            price=_number(entry.get("price")),
        )
        for entry in value
        if isinstance(entry, Mapping)
    ]


def normalize_product(raw: RawDocument) -> Product:
    data = _mapping(raw.data)
    discount = data.get("discountPrice")

    return Product(
        id=raw.id,
        name=_string(data.get("name")),
        price=_number(data.get("price")),
        discount_price=finite_float(discount) or None,
        description=_string(data.get("description")),
        image=_string(data.get("image")),
        rating=_number(data.get("rating")),
        review_count=_integer(data.get("reviewCount")),
        category=_string(data.get("category")),
        category_id=_optional_string(data.get("categoryId")),
        sub_category=_string(data.get("subCategory")),
        is_veg=_boolean(data.get("isVeg")),
        is_available=_boolean(data.get("isAvailable")),
        cuisine_id=_string(data.get("cuisineId")),
        variations=normalize_options(data.get("variations")),
        addons=normalize_options(data.get("addons")),
        created_at=coerce_timestamp(data.get("createdAt")),
        updated_at=coerce_timestamp(data.get("updatedAt")),
    )
