from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, File, Form, HTTPException, Response, UploadFile, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.ext.asyncio import AsyncEngine

from app.errors import (
    configuration_error_handler,
    domain_error_handler,
    generic_error_handler,
    request_validation_error_handler,
)
from app.schemas import (
    CreateOrderRequest,
    LoginRequest,
    LoginResponse,
    MenuItemResponse,
    MessageResponse,
    OrderResponse,
    PlaceOrderResponse,
    RegisterRequest,
    UpdateStatusRequest,
    UserSummary,
)
from app.security import get_token_issuer, require_staff
from application.auth import LoginCommand, LoginUseCase, RegisterUserCommand, RegisterUserUseCase
from application.menu import (
    CreateMenuItemCommand,
    CreateMenuItemUseCase,
    DeleteMenuItemUseCase,
    ImageUpload,
    UpdateMenuItemCommand,
    UpdateMenuItemUseCase,
)
from application.use_cases import (
    PlaceOrderCommand,
    PlaceOrderUseCase,
    UpdateOrderStatusCommand,
    UpdateOrderStatusUseCase,
)
from domain.errors import ConfigurationError, DomainError, NotFoundError
from domain.menu import parse_available
from infrastructure import db
from infrastructure.config import get_settings
from infrastructure.logging import get_logger
from infrastructure.metrics import metrics
from infrastructure.security import Argon2PasswordHasher
from infrastructure.storage import LocalImageStorage


logger = get_logger()

# Global engine (initialized at startup)
engine: AsyncEngine | None = None


def get_service_name() -> str:
    return get_settings().service_name


def require_engine() -> AsyncEngine:
    if not engine:
        raise HTTPException(status_code=500, detail="Database not initialized")
    return engine


def get_image_storage() -> LocalImageStorage:
    settings = get_settings()
    return LocalImageStorage(settings.upload_dir, settings.upload_url_prefix)


async def read_image(image: Optional[UploadFile]) -> ImageUpload | None:
    if image is None or not image.filename:
        return None
    return ImageUpload(content=await image.read(), content_type=image.content_type or "")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize the database and dispose of it on shutdown."""
    global engine

    engine = db.get_engine()

    async with engine.begin() as conn:
        await conn.run_sync(db.metadata.create_all)

    logger.info("Service started", service=get_service_name())

    yield

    if engine:
        await engine.dispose()
    logger.info("Service stopped", service=get_service_name())


app = FastAPI(title="Food Order Service", version="0.1.0", lifespan=lifespan)

# Register error handlers
app.add_exception_handler(DomainError, domain_error_handler)
app.add_exception_handler(ConfigurationError, configuration_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_error_handler)
app.add_exception_handler(Exception, generic_error_handler)

app.mount(
    get_settings().upload_url_prefix,
    StaticFiles(directory=get_settings().upload_dir, check_dir=False),
    name="uploads",
)


@app.get("/health")
async def health() -> dict:
    return {"service": get_service_name(), "status": "ok"}


@app.get("/metrics", response_class=PlainTextResponse)
async def get_metrics() -> str:
    return metrics.get_prometheus_text()


# Orders

@app.post("/orders", response_model=PlaceOrderResponse, status_code=status.HTTP_201_CREATED)
async def place_order(request: CreateOrderRequest) -> PlaceOrderResponse:
    """Place an order, attributing vendor-less items through the menu catalog."""
    current_engine = require_engine()

    command = PlaceOrderCommand(
        customer_name=request.full_name,
        phone=request.phone,
        address=request.address,
        delivery_type=request.delivery_type,
        items=[item.to_cart_item() for item in request.items],
        total=request.total,
    )
    use_case = PlaceOrderUseCase(
        db.SqlAlchemyUnitOfWork(current_engine),
        db.SqlCatalogLookup(current_engine),
    )
    order = await use_case.execute(command)

    return PlaceOrderResponse(message="Order placed", order=OrderResponse.from_domain(order))


@app.get("/orders", response_model=List[OrderResponse])
async def list_orders(vendor: Optional[str] = None, status: Optional[str] = None) -> List[OrderResponse]:
    """All orders, newest first, optionally narrowed to a vendor and/or status."""
    uow = db.SqlAlchemyUnitOfWork(require_engine())
    async with uow:
        if vendor:
            orders = await uow.orders.find_by_vendor(vendor, status=status)
        else:
            orders = await uow.orders.find_all(status=status)
    return [OrderResponse.from_domain(order) for order in orders]


@app.get("/orders/vendor/{vendor_id}", response_model=List[OrderResponse])
async def list_vendor_orders(vendor_id: str, status: Optional[str] = None) -> List[OrderResponse]:
    uow = db.SqlAlchemyUnitOfWork(require_engine())
    async with uow:
        orders = await uow.orders.find_by_vendor(vendor_id, status=status)
    return [OrderResponse.from_domain(order) for order in orders]


@app.get("/orders/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str) -> OrderResponse:
    uow = db.SqlAlchemyUnitOfWork(require_engine())
    async with uow:
        order = await uow.orders.get(order_id)

    if not order:
        raise NotFoundError(f"Order {order_id} not found")
    return OrderResponse.from_domain(order)


@app.patch(
    "/orders/{order_id}/status",
    response_model=OrderResponse,
    dependencies=[Depends(require_staff)],
)
async def update_order_status(order_id: str, request: UpdateStatusRequest) -> OrderResponse:
    use_case = UpdateOrderStatusUseCase(db.SqlAlchemyUnitOfWork(require_engine()))
    order = await use_case.execute(UpdateOrderStatusCommand(order_id=order_id, status=request.status))
    return OrderResponse.from_domain(order)


# Auth

@app.post("/auth/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest) -> MessageResponse:
    use_case = RegisterUserUseCase(db.SqlAlchemyUnitOfWork(require_engine()), Argon2PasswordHasher())
    await use_case.execute(
        RegisterUserCommand(
            name=request.name,
            email=request.email,
            password=request.password,
            role=request.role,
        )
    )
    return MessageResponse(message="Registration successful")


@app.post("/auth/login", response_model=LoginResponse)
async def login(request: LoginRequest) -> LoginResponse:
    issuer = get_token_issuer()
    use_case = LoginUseCase(db.SqlAlchemyUnitOfWork(require_engine()), Argon2PasswordHasher(), issuer)
    result = await use_case.execute(LoginCommand(email=request.email, password=request.password))
    return LoginResponse(token=result.token, user=UserSummary.from_domain(result.user))


# Menu

@app.get("/menu", response_model=List[MenuItemResponse])
async def list_menu(
    vendor: Optional[str] = None,
    category: Optional[str] = None,
    search: Optional[str] = None,
) -> List[MenuItemResponse]:
    uow = db.SqlAlchemyUnitOfWork(require_engine())
    async with uow:
        items = await uow.menu.find(vendor_id=vendor, category=category, search=search)
    return [MenuItemResponse.from_domain(item) for item in items]


@app.get("/menu/{item_id}", response_model=MenuItemResponse)
async def get_menu_item(item_id: str) -> MenuItemResponse:
    uow = db.SqlAlchemyUnitOfWork(require_engine())
    async with uow:
        item = await uow.menu.get(item_id)

    if not item:
        raise NotFoundError("Menu item not found")
    return MenuItemResponse.from_domain(item)


@app.post(
    "/menu",
    response_model=MenuItemResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_staff)],
)
async def create_menu_item(
    name: Optional[str] = Form(None),
    price: Optional[float] = Form(None),
    category: Optional[str] = Form(None),
    available: Optional[str] = Form(None),
    vendor_id: Optional[str] = Form(None, alias="vendorId"),
    image: Optional[UploadFile] = File(None),
) -> MenuItemResponse:
    settings = get_settings()
    use_case = CreateMenuItemUseCase(
        db.SqlAlchemyUnitOfWork(require_engine()),
        get_image_storage(),
        max_image_bytes=settings.max_image_bytes,
    )
    item = await use_case.execute(
        CreateMenuItemCommand(
            name=name,
            price=price,
            category=category,
            vendor_id=vendor_id,
            available=parse_available(available),
            image=await read_image(image),
        )
    )
    return MenuItemResponse.from_domain(item)


@app.put("/menu/{item_id}", response_model=MenuItemResponse, dependencies=[Depends(require_staff)])
async def update_menu_item(
    item_id: str,
    name: Optional[str] = Form(None),
    price: Optional[float] = Form(None),
    category: Optional[str] = Form(None),
    available: Optional[str] = Form(None),
    vendor_id: Optional[str] = Form(None, alias="vendorId"),
    image: Optional[UploadFile] = File(None),
) -> MenuItemResponse:
    settings = get_settings()
    use_case = UpdateMenuItemUseCase(
        db.SqlAlchemyUnitOfWork(require_engine()),
        get_image_storage(),
        max_image_bytes=settings.max_image_bytes,
    )
    item = await use_case.execute(
        UpdateMenuItemCommand(
            item_id=item_id,
            name=name,
            price=price,
            category=category,
            available=None if available is None else parse_available(available),
            vendor_id=vendor_id,
            image=await read_image(image),
        )
    )
    return MenuItemResponse.from_domain(item)


@app.delete(
    "/menu/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_staff)],
)
async def delete_menu_item(item_id: str) -> Response:
    await DeleteMenuItemUseCase(db.SqlAlchemyUnitOfWork(require_engine())).execute(item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
