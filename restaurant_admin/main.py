"""
FastAPI Application Entry Point

Restaurant Admin - catalog management and delivery-order workflow.
Supports both Mock collaborators (development) and Firestore/Cloudinary
(production).

Endpoints:
    - GET    /api/orders: All orders across tenants, newest first
    - GET    /api/orders/{tenant}/{order}: One order
    - PATCH  /api/orders/{tenant}/{order}/status: Force-set status
    - POST   /api/orders/{tenant}/{order}/advance: Guarded status change
    - /api/cuisines, /api/categories, /api/products: Catalog CRUD + lookups
    - GET    /api/dashboard-data: Overview statistics
    - GET    /health: System health check

The document store and image host are created in the lifespan handler,
handed to the services, and released on shutdown.

Version: 1.0.0
"""

import logging
from datetime import datetime, timezone
from typing import Optional
from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from restaurant_admin.core.config import Settings, get_settings, setup_logging
from restaurant_admin.schemas import (
    Category,
    CategoryCreate,
    CategoryUpdate,
    Cuisine,
    CuisineCreate,
    CuisineUpdate,
    DashboardStats,
    ErrorResponse,
    HealthResponse,
    Order,
    OrderListResponse,
    OrderStatus,
    OrderStatusUpdate,
    Product,
    ProductCreate,
    ProductUpdate,
    WriteResponse,
)
from restaurant_admin.services.catalog import CatalogService, UnknownCategoryError
from restaurant_admin.services.dashboard import DashboardService
from restaurant_admin.services.images import BaseImageHost, ImageUploadError, create_image_host
from restaurant_admin.services.orders import (
    CourierCreditError,
    InvalidStatusTransition,
    OrderAggregator,
    OrderNotFoundError,
    StatusTransitionManager,
)
from restaurant_admin.services.store import (
    BaseDocumentStore,
    DocumentNotFoundError,
    StoreError,
    create_document_store,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# DEPENDENCIES
# =============================================================================

def get_aggregator(request: Request) -> OrderAggregator:
    return request.app.state.aggregator


def get_transitions(request: Request) -> StatusTransitionManager:
    return request.app.state.transitions


def get_catalog(request: Request) -> CatalogService:
    return request.app.state.catalog


def get_dashboard(request: Request) -> DashboardService:
    return request.app.state.dashboard


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

@router.get("/", tags=["Root"])
async def root(request: Request) -> dict[str, str]:
    """API root with navigation links."""
    settings: Settings = request.app.state.settings
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "environment": settings.env_mode.value,
        "documentation": "/docs",
        "health": "/health",
    }


@router.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check(request: Request) -> HealthResponse:
    """Verify the document store and image host are operational."""
    store: BaseDocumentStore = request.app.state.store
    image_host: BaseImageHost = request.app.state.image_host

    store_status = "healthy" if await store.health_check() else "unhealthy"
    image_status = "healthy" if await image_host.health_check() else "unhealthy"

    overall = "operational" if store_status == image_status == "healthy" else "degraded"

    return HealthResponse(
        status=overall,
        document_store=f"{store.provider_name}: {store_status}",
        image_host=f"{image_host.provider_name}: {image_status}",
        timestamp=datetime.now(timezone.utc),
    )


# =============================================================================
# ORDER ENDPOINTS
# =============================================================================

@router.get(
    "/api/orders",
    response_model=OrderListResponse,
    tags=["Orders"],
    summary="List Orders",
)
async def list_orders(
    status: Optional[OrderStatus] = Query(None),
    aggregator: OrderAggregator = Depends(get_aggregator),
) -> OrderListResponse:
    """All orders across tenants, newest first, optionally filtered by status."""
    orders = await aggregator.fetch_all_orders()
    if status is not None:
        orders = [order for order in orders if order.status is status]
    return OrderListResponse(total=len(orders), orders=orders)


@router.get(
    "/api/orders/{tenant_id}/{order_id}",
    response_model=Order,
    responses={404: {"model": ErrorResponse}},
    tags=["Orders"],
)
async def get_order(
    tenant_id: str,
    order_id: str,
    aggregator: OrderAggregator = Depends(get_aggregator),
) -> Order:
    order = await aggregator.get_order(tenant_id, order_id)
    if order is None:
        raise HTTPException(status_code=404, detail=f"Order {order_id} not found")
    return order


@router.patch(
    "/api/orders/{tenant_id}/{order_id}/status",
    response_model=WriteResponse,
    responses={404: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
    tags=["Orders"],
    summary="Set Order Status (admin override)",
)
async def set_order_status(
    tenant_id: str,
    order_id: str,
    body: OrderStatusUpdate,
    transitions: StatusTransitionManager = Depends(get_transitions),
) -> WriteResponse:
    """Write any status. Completing with a delivery payload credits the courier."""
    await transitions.set_status(tenant_id, order_id, body.status, body.delivery)
    return WriteResponse(message=f"Order status updated to {body.status.value}", id=order_id)


@router.post(
    "/api/orders/{tenant_id}/{order_id}/advance",
    response_model=WriteResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    tags=["Orders"],
    summary="Advance Order Status (workflow-enforced)",
)
async def advance_order_status(
    tenant_id: str,
    order_id: str,
    body: OrderStatusUpdate,
    transitions: StatusTransitionManager = Depends(get_transitions),
) -> WriteResponse:
    """pending -> in-progress -> completed; cancel from pending or in-progress."""
    previous = await transitions.advance(tenant_id, order_id, body.status, body.delivery)
    return WriteResponse(
        message=f"Order status updated from {previous.value} to {body.status.value}",
        id=order_id,
    )


# =============================================================================
# CUISINE ENDPOINTS
# =============================================================================

@router.get("/api/cuisines", response_model=list[Cuisine], tags=["Cuisines"])
async def list_cuisines(catalog: CatalogService = Depends(get_catalog)) -> list[Cuisine]:
    return await catalog.get_cuisines()


@router.post("/api/cuisines", response_model=WriteResponse, status_code=201, tags=["Cuisines"])
async def create_cuisine(
    body: CuisineCreate,
    catalog: CatalogService = Depends(get_catalog),
) -> WriteResponse:
    cuisine_id = await catalog.add_cuisine(body)
    return WriteResponse(message="Cuisine added successfully", id=cuisine_id)


@router.get("/api/cuisines/{cuisine_id}", response_model=Cuisine, tags=["Cuisines"])
async def get_cuisine(cuisine_id: str, catalog: CatalogService = Depends(get_catalog)) -> Cuisine:
    cuisine = await catalog.get_cuisine(cuisine_id)
    if cuisine is None:
        raise HTTPException(status_code=404, detail=f"Cuisine {cuisine_id} not found")
    return cuisine


@router.patch("/api/cuisines/{cuisine_id}", response_model=WriteResponse, tags=["Cuisines"])
async def update_cuisine(
    cuisine_id: str,
    body: CuisineUpdate,
    catalog: CatalogService = Depends(get_catalog),
) -> WriteResponse:
    await catalog.update_cuisine(cuisine_id, body)
    return WriteResponse(message="Cuisine updated successfully", id=cuisine_id)


@router.delete("/api/cuisines/{cuisine_id}", response_model=WriteResponse, tags=["Cuisines"])
async def delete_cuisine(cuisine_id: str, catalog: CatalogService = Depends(get_catalog)) -> WriteResponse:
    await catalog.delete_cuisine(cuisine_id)
    return WriteResponse(message="Cuisine deleted", id=cuisine_id)


@router.get("/api/cuisines/{cuisine_id}/products", response_model=list[Product], tags=["Cuisines"])
async def list_cuisine_products(
    cuisine_id: str,
    catalog: CatalogService = Depends(get_catalog),
) -> list[Product]:
    return await catalog.get_products_by_cuisine(cuisine_id)


# =============================================================================
# CATEGORY ENDPOINTS
# =============================================================================

@router.get("/api/categories", response_model=list[Category], tags=["Categories"])
async def list_categories(catalog: CatalogService = Depends(get_catalog)) -> list[Category]:
    return await catalog.get_categories()


@router.post("/api/categories", response_model=WriteResponse, status_code=201, tags=["Categories"])
async def create_category(
    body: CategoryCreate,
    catalog: CatalogService = Depends(get_catalog),
) -> WriteResponse:
    category_id = await catalog.add_category(body)
    return WriteResponse(message="Category added successfully", id=category_id)


@router.get("/api/categories/{category_id}", response_model=Category, tags=["Categories"])
async def get_category(category_id: str, catalog: CatalogService = Depends(get_catalog)) -> Category:
    category = await catalog.get_category(category_id)
    if category is None:
        raise HTTPException(status_code=404, detail=f"Category {category_id} not found")
    return category


@router.patch("/api/categories/{category_id}", response_model=WriteResponse, tags=["Categories"])
async def update_category(
    category_id: str,
    body: CategoryUpdate,
    catalog: CatalogService = Depends(get_catalog),
) -> WriteResponse:
    await catalog.update_category(category_id, body)
    return WriteResponse(message="Category updated successfully", id=category_id)


@router.delete("/api/categories/{category_id}", response_model=WriteResponse, tags=["Categories"])
async def delete_category(category_id: str, catalog: CatalogService = Depends(get_catalog)) -> WriteResponse:
    await catalog.delete_category(category_id)
    return WriteResponse(message="Category deleted", id=category_id)


@router.get("/api/categories/{category_id}/cuisine", response_model=Cuisine, tags=["Categories"])
async def get_category_cuisine(
    category_id: str,
    catalog: CatalogService = Depends(get_catalog),
) -> Cuisine:
    cuisine = await catalog.get_cuisine_for_category(category_id)
    if cuisine is None:
        raise HTTPException(status_code=404, detail=f"No cuisine found for category {category_id}")
    return cuisine


@router.get("/api/categories/{category_id}/products", response_model=list[Product], tags=["Categories"])
async def list_category_products(
    category_id: str,
    catalog: CatalogService = Depends(get_catalog),
) -> list[Product]:
    return await catalog.get_products_by_category(category_id)


# =============================================================================
# PRODUCT ENDPOINTS
# =============================================================================

@router.post("/api/products", response_model=WriteResponse, status_code=201, tags=["Products"])
async def create_product(
    body: ProductCreate,
    catalog: CatalogService = Depends(get_catalog),
) -> WriteResponse:
    product_id = await catalog.add_product(body)
    return WriteResponse(message="Product added successfully", id=product_id)


@router.get("/api/products/{product_id}", response_model=Product, tags=["Products"])
async def get_product(product_id: str, catalog: CatalogService = Depends(get_catalog)) -> Product:
    product = await catalog.get_product(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail=f"Product {product_id} not found")
    return product


@router.patch("/api/products/{product_id}", response_model=WriteResponse, tags=["Products"])
async def update_product(
    product_id: str,
    body: ProductUpdate,
    catalog: CatalogService = Depends(get_catalog),
) -> WriteResponse:
    await catalog.update_product(product_id, body)
    return WriteResponse(message="Product updated successfully", id=product_id)


@router.delete("/api/products/{product_id}", response_model=WriteResponse, tags=["Products"])
async def delete_product(product_id: str, catalog: CatalogService = Depends(get_catalog)) -> WriteResponse:
    await catalog.delete_product(product_id)
    return WriteResponse(message="Product deleted", id=product_id)


# =============================================================================
# DASHBOARD ENDPOINTS
# =============================================================================

@router.get("/api/dashboard-data", response_model=DashboardStats, tags=["Dashboard"])
async def dashboard_data(dashboard: DashboardService = Depends(get_dashboard)) -> DashboardStats:
    """Get aggregated dashboard statistics."""
    return await dashboard.get_stats()


# =============================================================================
# ERROR HANDLERS
# =============================================================================

def _error(status_code: int, error: str, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, detail=str(exc)).model_dump(),
    )


async def document_not_found_handler(request: Request, exc: DocumentNotFoundError) -> JSONResponse:
    return _error(404, "Not Found", exc)


async def courier_credit_handler(request: Request, exc: CourierCreditError) -> JSONResponse:
    logger.error(f"Courier credit failed on {request.method} {request.url.path}: {exc}")
    return _error(502, "Courier Credit Failed", exc)


async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    logger.error(f"Store write failed on {request.method} {request.url.path}: {exc}")
    return _error(502, "Document Store Error", exc)


async def upload_error_handler(request: Request, exc: ImageUploadError) -> JSONResponse:
    logger.error(f"Image upload failed on {request.method} {request.url.path}: {exc}")
    return _error(502, "Image Upload Failed", exc)


async def invalid_transition_handler(request: Request, exc: InvalidStatusTransition) -> JSONResponse:
    return _error(409, "Invalid Status Transition", exc)


async def order_not_found_handler(request: Request, exc: OrderNotFoundError) -> JSONResponse:
    return _error(404, "Not Found", exc)


async def unknown_category_handler(request: Request, exc: UnknownCategoryError) -> JSONResponse:
    return _error(400, "Unknown Category", exc)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")
    settings: Settings = request.app.state.settings

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal Server Error",
            "detail": str(exc) if settings.debug else "An unexpected error occurred",
        },
    )


# =============================================================================
# APPLICATION FACTORY
# =============================================================================

def create_app(
    settings: Optional[Settings] = None,
    store: Optional[BaseDocumentStore] = None,
    image_host: Optional[BaseImageHost] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Application settings (defaults to get_settings())
        store: Document store to use instead of the configured one
        image_host: Image host to use instead of the configured one

    Returns:
        FastAPI: Application whose lifespan owns the collaborators
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("=" * 60)
        logger.info(f"🚀 Starting {settings.app_name}")
        logger.info(f"   Version: {settings.app_version}")
        logger.info(f"   Environment: {settings.env_mode.value}")
        logger.info(f"   Debug: {settings.debug}")
        logger.info("=" * 60)

        if settings.use_real_services:
            missing = settings.validate_production_config()
            if missing:
                logger.warning(f"⚠️ Missing production config: {missing}")

        app_store = store or create_document_store(settings)
        app_images = image_host or create_image_host(settings)
        aggregator = OrderAggregator(app_store, settings)
        catalog = CatalogService(app_store, app_images, settings)

        app.state.settings = settings
        app.state.store = app_store
        app.state.image_host = app_images
        app.state.aggregator = aggregator
        app.state.transitions = StatusTransitionManager(app_store, settings)
        app.state.catalog = catalog
        app.state.dashboard = DashboardService(catalog, aggregator, settings)

        logger.info(f"✅ Document Store: {app_store.provider_name}")
        logger.info(f"✅ Image Host: {app_images.provider_name}")
        logger.info("✅ Application ready!")

        yield

        logger.info("Shutting down...")
        await app_images.close()
        logger.info("✅ Cleanup complete")

    app = FastAPI(
        title=settings.app_name,
        description=(
            "Admin backend for restaurant catalog management and the "
            "delivery-order workflow."
        ),
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings

    # The admin frontend runs on its own origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)

    app.add_exception_handler(CourierCreditError, courier_credit_handler)
    app.add_exception_handler(DocumentNotFoundError, document_not_found_handler)
    app.add_exception_handler(StoreError, store_error_handler)
    app.add_exception_handler(ImageUploadError, upload_error_handler)
    app.add_exception_handler(InvalidStatusTransition, invalid_transition_handler)
    app.add_exception_handler(OrderNotFoundError, order_not_found_handler)
    app.add_exception_handler(UnknownCategoryError, unknown_category_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    return app


setup_logging()
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run("restaurant_admin.main:app", host=settings.api_host, port=settings.api_port)
