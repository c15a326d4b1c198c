"""FastAPI server implementation for the Order Service."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from . import views
from .catalog import CatalogService, customer_view, product_view
from .config import settings
from .database import SessionLocal, check_connection, engine, init_db
from .errors import NotFound, PersistenceFailure, ValidationFailure
from .logger import logger
from .orders import OrderEngine
from .schemas import (
    CustomerCreate,
    CustomerPage,
    CustomerView,
    OrderCreated,
    OrderCreateRequest,
    OrderDiscountsView,
    OrderPage,
    ProductCreate,
    ProductPage,
    ProductView,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    init_db(engine)
    yield
    # Shutdown
    engine.dispose()
    logger.info("Shutdown complete")


app = FastAPI(title=settings.app_name, lifespan=lifespan)
router = APIRouter()


def get_session_factory() -> sessionmaker:
    """Session factory used by every endpoint; overridden in tests."""
    return SessionLocal


def get_engine() -> Engine:
    return engine


def _page_size(page_size: Optional[int]) -> int:
    return settings.default_page_size if page_size is None else page_size


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    return JSONResponse(status_code=404, content={"detail": exc.reason})


@app.exception_handler(ValidationFailure)
async def validation_failure_handler(request: Request, exc: ValidationFailure):
    return JSONResponse(status_code=422, content={"detail": exc.reason})


@app.exception_handler(PersistenceFailure)
async def persistence_failure_handler(request: Request, exc: PersistenceFailure):
    logger.error(f"{request.method} {request.url.path} failed on the store: {exc.reason}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@router.get("/health")
def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy"}


@router.get("/health/ready")
def readiness_check(db_engine: Engine = Depends(get_engine)):
    """Check if the service is ready to accept traffic.

    Returns:
        dict: Service readiness status and database connection status.
    """
    db_ok = check_connection(db_engine)
    return {"status": "ready" if db_ok else "not_ready", "database": "connected" if db_ok else "disconnected"}


@router.post("/orders", response_model=OrderCreated, status_code=201)
def create_order(order: OrderCreateRequest, session_factory: sessionmaker = Depends(get_session_factory)):
    """Create an order, apply discounts and post revenue to the customer.

    Args:
        order (OrderCreateRequest): Customer and order lines.

    Returns:
        OrderCreated: The new order's id and totals.
    """
    logger.info(f"Received new order for customer {order.customer_id}")
    return OrderEngine(session_factory).create_order(order)


@router.get("/orders", response_model=OrderPage)
def list_orders(
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, alias="pageSize", ge=1),
    session_factory: sessionmaker = Depends(get_session_factory),
):
    """List orders with their items, one page at a time."""
    return views.list_orders(session_factory, page, _page_size(page_size), settings.max_page_size)


@router.delete("/orders/{order_id}")
def delete_order(order_id: int, session_factory: sessionmaker = Depends(get_session_factory)):
    """Delete an order with its items and discount ledger.

    Raises:
        HTTPException: If the order is not found
    """
    if not OrderEngine(session_factory).delete_order(order_id):
        raise HTTPException(status_code=404, detail="Order not found")
    return {"message": "Order deleted"}


@router.get("/discounted/{order_id}", response_model=OrderDiscountsView)
def get_order_discounts(order_id: int, session_factory: sessionmaker = Depends(get_session_factory)):
    """Return the discount ledger of an order."""
    return views.get_order_discounts(session_factory, order_id)


@router.post("/products", response_model=ProductView, status_code=201)
def create_product(product: ProductCreate, session_factory: sessionmaker = Depends(get_session_factory)):
    created = CatalogService(session_factory).create_product(product)
    return product_view(created)


@router.get("/products", response_model=ProductPage)
def list_products(
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, alias="pageSize", ge=1),
    session_factory: sessionmaker = Depends(get_session_factory),
):
    return CatalogService(session_factory, settings.max_page_size).list_products(page, _page_size(page_size))


@router.delete("/products/{product_id}")
def delete_product(product_id: int, session_factory: sessionmaker = Depends(get_session_factory)):
    if not CatalogService(session_factory).delete_product(product_id):
        raise HTTPException(status_code=404, detail="Product not found")
    return {"message": "Product deleted"}


@router.post("/customers", response_model=CustomerView, status_code=201)
def create_customer(customer: CustomerCreate, session_factory: sessionmaker = Depends(get_session_factory)):
    created = CatalogService(session_factory).create_customer(customer)
    return customer_view(created)


@router.get("/customers", response_model=CustomerPage)
def list_customers(
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, alias="pageSize", ge=1),
    session_factory: sessionmaker = Depends(get_session_factory),
):
    return CatalogService(session_factory, settings.max_page_size).list_customers(page, _page_size(page_size))


@router.delete("/customers/{customer_id}")
def delete_customer(customer_id: int, session_factory: sessionmaker = Depends(get_session_factory)):
    if not CatalogService(session_factory).delete_customer(customer_id):
        raise HTTPException(status_code=404, detail="Customer not found")
    return {"message": "Customer deleted"}


app.include_router(router)
logger.info("API router mounted.")
