"""
Pydantic Schemas for Domain Records and Request/Response Validation

Domain records are the strict, fully-populated shapes produced by the
normalizer. Field names follow Python conventions; every model is aliased
to the camelCase names used by the document store, so
``model_dump(by_alias=True)`` yields a store-shaped payload and both
spellings are accepted on input.

Version: 1.0.0
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List
from datetime import datetime
from enum import Enum


class DocumentModel(BaseModel):
    """Base for every model that maps onto a store document."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# ENUMS
# =============================================================================

class OrderStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.COMPLETED, OrderStatus.CANCELLED)


# =============================================================================
# ORDER RECORDS
# =============================================================================

class Coordinates(DocumentModel):
    latitude: float = 0.0
    longitude: float = 0.0


class OrderItem(DocumentModel):
    """Single line item in an order."""
    id: Optional[str] = None
    name: str = ""
    quantity: int = 1
    price: float = 0.0

    @property
    def line_total(self) -> float:
        return round(self.quantity * self.price, 2)


class DeliveryPayload(DocumentModel):
    """Proof-of-delivery data supplied when an order is completed."""
    received_by: str = Field(default="", examples=["Jane Doe"])
    notes: str = ""
    amount_collected: float = Field(default=0.0, ge=0, examples=[19.0])
    signature_url: Optional[str] = None
    proof_of_delivery_url: Optional[str] = None
    delivered_by: str = Field(default="", examples=["courier-1"])
    deliveryman_name: str = Field(default="", examples=["Sam"])


class DeliveryDetails(DeliveryPayload):
    """Delivery record as stored on a completed order."""
    delivered_at: Optional[datetime] = None


class Order(DocumentModel):
    """
    A customer order, addressable by (user_id, id).

    ``user_id`` is the owning tenant. Orders whose tenant could not be
    determined carry the sentinel ``"unknown"``.
    """
    id: str
    user_id: str
    driver_id: Optional[str] = None
    customer_name: str = ""
    customer_phone: str = ""
    address: str = ""
    coordinates: Coordinates = Field(default_factory=Coordinates)
    status: OrderStatus = OrderStatus.PENDING
    total: float = 0.0
    eta: str = ""
    distance: str = ""
    note: str = ""
    items: List[OrderItem] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    delivery_details: Optional[DeliveryDetails] = None


# =============================================================================
# CATALOG RECORDS
# =============================================================================

class Cuisine(DocumentModel):
    id: str
    name: str = ""
    image: str = ""
    description: str = ""
    long_description: str = ""
    restaurant_count: int = 0


class Category(DocumentModel):
    id: str
    name: str = ""
    image: str = ""
    description: str = ""
    cuisine_id: Optional[str] = None
    item_count: int = 0


class ProductOption(DocumentModel):
    """Shape shared by product variations and addons."""
    id: str = ""
    name: str = ""
    price: float = 0.0


class Product(DocumentModel):
    """
    A sellable product.

    ``category`` is the denormalized category name kept for display and
    for documents written before ``category_id`` existed.
    """
    id: str
    name: str = ""
    price: float = 0.0
    discount_price: Optional[float] = None
    description: str = ""
    image: str = ""
    rating: float = 0.0
    review_count: int = 0
    category: str = ""
    category_id: Optional[str] = None
    sub_category: str = ""
    is_veg: bool = False
    is_available: bool = False
    cuisine_id: str = ""
    variations: List[ProductOption] = Field(default_factory=list)
    addons: List[ProductOption] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class UpdateModel(DocumentModel):
    """Partial update: only fields the caller actually sent are written."""

    def to_update_fields(self) -> dict:
        return self.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)


class CuisineCreate(DocumentModel):
    name: str = Field(..., min_length=1, max_length=100, examples=["Italian"])
    description: str = Field(default="", max_length=500)
    long_description: str = Field(default="", max_length=5000)
    image: Optional[str] = Field(None, examples=["file:///tmp/italian.jpg"])


class CuisineUpdate(UpdateModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    long_description: Optional[str] = Field(None, max_length=5000)
    image: Optional[str] = None


class CategoryCreate(DocumentModel):
    name: str = Field(..., min_length=1, max_length=100, examples=["Pizza"])
    description: str = Field(default="", max_length=500)
    image: Optional[str] = None
    cuisine_id: Optional[str] = None


class CategoryUpdate(UpdateModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    image: Optional[str] = None
    cuisine_id: Optional[str] = None


class ProductCreate(DocumentModel):
    name: str = Field(..., min_length=1, max_length=100, examples=["Pizza Margherita"])
    price: float = Field(default=0.0, ge=0, examples=[9.5])
    discount_price: Optional[float] = Field(None, ge=0)
    description: str = Field(default="", max_length=1000)
    image: str = Field(..., min_length=1)
    category_id: Optional[str] = None
    category: str = ""
    sub_category: str = ""
    is_veg: bool = False
    is_available: bool = False
    cuisine_id: str = Field(..., min_length=1)
    variations: List[ProductOption] = Field(default_factory=list)
    addons: List[ProductOption] = Field(default_factory=list)


class ProductUpdate(UpdateModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    price: Optional[float] = Field(None, ge=0)
    discount_price: Optional[float] = Field(None, ge=0)
    description: Optional[str] = Field(None, max_length=1000)
    image: Optional[str] = None
    category_id: Optional[str] = None
    category: Optional[str] = None
    sub_category: Optional[str] = None
    is_veg: Optional[bool] = None
    is_available: Optional[bool] = None
    cuisine_id: Optional[str] = None
    variations: Optional[List[ProductOption]] = None
    addons: Optional[List[ProductOption]] = None


class OrderStatusUpdate(DocumentModel):
    """Request body for status changes (forced or guarded)."""
    status: OrderStatus = Field(..., examples=["completed"])
    delivery: Optional[DeliveryPayload] = None


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class OrderListResponse(DocumentModel):
    total: int
    orders: List[Order]


class WriteResponse(DocumentModel):
    """Response after a successful create/update/delete."""
    success: bool = True
    message: str
    id: Optional[str] = None


class ErrorResponse(DocumentModel):
    """Standard error response."""
    success: bool = False
    error: str
    detail: Optional[str] = None


class HealthResponse(DocumentModel):
    status: str
    document_store: str
    image_host: str
    timestamp: datetime


class DashboardStats(DocumentModel):
    total_orders: int = 0
    pending_orders: int = 0
    completed_orders: int = 0
    total_cuisines: int = 0
    total_categories: int = 0
    total_products: int = 0
    recent_orders: List[Order] = Field(default_factory=list)
