"""FastAPI REST API for kirana."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Literal, Optional

import httpx
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from . import __version__
from .assistant import API_TIMEOUT
from .context import AppContext
from .errors import (
    DeleteError,
    KiranaError,
    NetworkError,
    OpenError,
    ReadError,
    RecordNotFoundError,
    ValidationError,
    VersionBlockedError,
    WriteError,
)
from .record_store import CUSTOMERS, ORDERS, PRODUCTS

logger = logging.getLogger(__name__)


# --- Pydantic Schemas ---


class CamelModel(BaseModel):
    """Schemas speak the same camelCase field names the records are stored with."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProductSchema(CamelModel):
    id: str
    name: str
    category: str
    current_stock: int
    min_stock: int
    unit: str
    cost_price: float
    selling_price: float
    last_updated: str
    stock_status: str = ""


class ProductCreateRequest(CamelModel):
    name: str = Field(..., min_length=1)
    category: str = ""
    current_stock: int = Field(default=0, ge=0)
    min_stock: int = Field(default=0, ge=0)
    unit: str = ""
    cost_price: float = Field(default=0, ge=0)
    selling_price: float = Field(default=0, ge=0)


class ProductListResponse(CamelModel):
    products: list[ProductSchema]
    count: int


class CustomerSchema(CamelModel):
    id: str
    name: str
    email: str
    phone: str
    address: str
    total_orders: int
    total_spent: float
    last_order: str
    join_date: str


class CustomerCreateRequest(CamelModel):
    name: str = Field(..., min_length=1)
    email: str = ""
    phone: str = ""
    address: str = ""


class CustomerListResponse(CamelModel):
    customers: list[CustomerSchema]
    count: int


class OrderItemSchema(CamelModel):
    product_id: str
    product_name: str
    quantity: int
    unit_price: float


class OrderSchema(CamelModel):
    id: str
    customer_id: str
    customer_name: str
    items: list[OrderItemSchema]
    total: float
    status: str
    date: str
    time: str


class OrderCreateRequest(CamelModel):
    customer_id: str
    product_id: str
    quantity: int = Field(default=1, ge=1)
    unit_price: Optional[float] = Field(
        default=None, ge=0, description="Defaults to the product's selling price"
    )


class OrderListResponse(CamelModel):
    orders: list[OrderSchema]
    count: int


class DashboardResponse(CamelModel):
    total_sales: float
    total_orders: int
    total_customers: int
    total_products: int
    low_stock: list[ProductSchema]
    out_of_stock: list[ProductSchema]


class SettingsSchema(CamelModel):
    theme: Literal["dark", "light"]
    api_key: str
    ai_enabled: bool


class SettingsUpdateRequest(CamelModel):
    theme: Optional[Literal["dark", "light"]] = None
    api_key: Optional[str] = None
    ai_enabled: Optional[bool] = None


class ChatRequest(BaseModel):
    message: str


class ChatResponse(BaseModel):
    reply: str


def _product_schema(product) -> ProductSchema:
    return ProductSchema(**product.to_dict(), stockStatus=product.stock_status)


# --- App factory ---


def create_app(
    data_dir: Path | None = None,
    http_client: httpx.Client | None = None,
) -> FastAPI:
    """
    Build the API application.

    The store is opened (and seeded) once when the app starts and closed on
    shutdown; every request shares that handle. If it cannot be opened the
    app still starts, and data routes answer 503 with the open error.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = http_client or httpx.Client(timeout=API_TIMEOUT)
        ctx = AppContext(data_dir=data_dir, http_client=client)
        app.state.ctx = ctx
        app.state.open_error = None
        try:
            ctx.open()
        except OpenError as e:
            # Keep serving so health reports the failure and routes answer 503
            app.state.open_error = e
            logger.error("Failed to open database", extra={"error": str(e)})
        logger.info("Application startup complete", extra={"db_path": str(ctx.store.path)})

        yield

        ctx.close()
        if http_client is None:
            client.close()
        logger.info("Application shutdown complete")

    app = FastAPI(
        title="Kirana Store API",
        description="Products, orders and customers for a small retail shop",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:5173",
            "http://localhost:3000",
            "http://127.0.0.1:5173",
            "http://127.0.0.1:3000",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(KiranaError)
    async def kirana_error_handler(request: Request, exc: KiranaError) -> JSONResponse:
        """Map KiranaError subclasses to appropriate HTTP responses."""
        status_code = ERROR_STATUS_CODES.get(type(exc), 500)
        logger.error(
            "Request failed",
            extra={"path": request.url.path, "error": str(exc), "error_type": type(exc).__name__},
        )
        return JSONResponse(
            status_code=status_code,
            content={"detail": str(exc), "error_type": type(exc).__name__},
        )

    _register_routes(app)
    return app


# Map exception types to HTTP status codes
ERROR_STATUS_CODES: dict[type, int] = {
    RecordNotFoundError: 404,
    ValidationError: 400,
    NetworkError: 502,
    OpenError: 503,
    VersionBlockedError: 503,
    ReadError: 500,
    WriteError: 500,
    DeleteError: 500,
}


def _ctx(request: Request) -> AppContext:
    error = request.app.state.open_error
    if error is not None:
        raise OpenError(error.path, error.reason)
    return request.app.state.ctx


def _register_routes(app: FastAPI) -> None:
    @app.get("/api/health")
    def health_check(request: Request):
        """Report whether the store is open, with per-partition record counts."""
        try:
            layout = _ctx(request).store.describe()
            return {
                "status": "ok",
                "version": layout["version"],
                "counts": {name: p["count"] for name, p in layout["partitions"].items()},
            }
        except KiranaError as e:
            return {"status": "error", "detail": str(e)}

    @app.get("/api/dashboard", response_model=DashboardResponse)
    def get_dashboard(request: Request):
        summary = _ctx(request).shop.dashboard()
        return DashboardResponse(
            total_sales=summary.total_sales,
            total_orders=summary.total_orders,
            total_customers=summary.total_customers,
            total_products=summary.total_products,
            low_stock=[_product_schema(p) for p in summary.low_stock],
            out_of_stock=[_product_schema(p) for p in summary.out_of_stock],
        )

    # --- Products ---

    @app.get("/api/products", response_model=ProductListResponse)
    def list_products(request: Request, category: Optional[str] = None):
        products = _ctx(request).shop.list_products()
        if category:
            products = [p for p in products if p.category == category]
        return ProductListResponse(
            products=[_product_schema(p) for p in products], count=len(products)
        )

    @app.post("/api/products", response_model=ProductSchema, status_code=201)
    def create_product(request: Request, body: ProductCreateRequest):
        product = _ctx(request).shop.add_product(
            name=body.name,
            category=body.category,
            current_stock=body.current_stock,
            min_stock=body.min_stock,
            unit=body.unit,
            cost_price=body.cost_price,
            selling_price=body.selling_price,
        )
        return _product_schema(product)

    @app.get("/api/products/{product_id}", response_model=ProductSchema)
    def get_product(request: Request, product_id: str):
        product = _ctx(request).shop.get_product(product_id)
        if product is None:
            raise RecordNotFoundError(PRODUCTS, product_id)
        return _product_schema(product)

    @app.delete("/api/products/{product_id}", status_code=204)
    def delete_product(request: Request, product_id: str):
        _ctx(request).shop.delete_product(product_id)
        return Response(status_code=204)

    # --- Customers ---

    @app.get("/api/customers", response_model=CustomerListResponse)
    def list_customers(request: Request):
        customers = _ctx(request).shop.list_customers()
        return CustomerListResponse(
            customers=[CustomerSchema(**c.to_dict()) for c in customers],
            count=len(customers),
        )

    @app.post("/api/customers", response_model=CustomerSchema, status_code=201)
    def create_customer(request: Request, body: CustomerCreateRequest):
        customer = _ctx(request).shop.add_customer(
            name=body.name, email=body.email, phone=body.phone, address=body.address
        )
        return CustomerSchema(**customer.to_dict())

    @app.get("/api/customers/{customer_id}", response_model=CustomerSchema)
    def get_customer(request: Request, customer_id: str):
        customer = _ctx(request).shop.get_customer(customer_id)
        if customer is None:
            raise RecordNotFoundError(CUSTOMERS, customer_id)
        return CustomerSchema(**customer.to_dict())

    @app.delete("/api/customers/{customer_id}", status_code=204)
    def delete_customer(request: Request, customer_id: str):
        _ctx(request).shop.delete_customer(customer_id)
        return Response(status_code=204)

    # --- Orders ---

    @app.get("/api/orders", response_model=OrderListResponse)
    def list_orders(request: Request, status: Optional[Literal["pending", "completed"]] = None):
        orders = _ctx(request).shop.list_orders()
        if status:
            orders = [o for o in orders if o.status == status]
        return OrderListResponse(
            orders=[OrderSchema(**o.to_dict()) for o in orders], count=len(orders)
        )

    @app.post("/api/orders", response_model=OrderSchema, status_code=201)
    def create_order(request: Request, body: OrderCreateRequest):
        order = _ctx(request).shop.add_order(
            customer_id=body.customer_id,
            product_id=body.product_id,
            quantity=body.quantity,
            unit_price=body.unit_price,
        )
        return OrderSchema(**order.to_dict())

    @app.get("/api/orders/{order_id}", response_model=OrderSchema)
    def get_order(request: Request, order_id: str):
        order = _ctx(request).shop.get_order(order_id)
        if order is None:
            raise RecordNotFoundError(ORDERS, order_id)
        return OrderSchema(**order.to_dict())

    @app.delete("/api/orders/{order_id}", status_code=204)
    def delete_order(request: Request, order_id: str):
        _ctx(request).shop.delete_order(order_id)
        return Response(status_code=204)

    # --- Settings & assistant ---

    @app.get("/api/settings", response_model=SettingsSchema)
    def get_settings(request: Request):
        return SettingsSchema(**_ctx(request).settings.all())

    @app.patch("/api/settings", response_model=SettingsSchema)
    def update_settings(request: Request, body: SettingsUpdateRequest):
        """Write only the keys present in the request."""
        settings = _ctx(request).settings
        for key, value in body.model_dump(exclude_unset=True, by_alias=True).items():
            settings.set(key, value)
        return SettingsSchema(**settings.all())

    @app.post("/api/settings/toggle-theme", response_model=SettingsSchema)
    def toggle_theme(request: Request):
        settings = _ctx(request).settings
        settings.toggle_theme()
        return SettingsSchema(**settings.all())

    @app.post("/api/assistant/chat", response_model=ChatResponse)
    def chat(request: Request, body: ChatRequest):
        """Answer with the hosted model when enabled, canned responses otherwise."""
        return ChatResponse(reply=_ctx(request).ask(body.message))


app = create_app()
