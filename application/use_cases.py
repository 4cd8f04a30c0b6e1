from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional, Protocol

from application.normalizer import CatalogLookup, ItemNormalizer, build_line_items
from domain.errors import NotFoundError, ValidationError
from domain.menu import MenuItem
from domain.order import CartItem, DeliveryType, Order, is_legal_status, utcnow
from domain.user import User
from infrastructure.logging import get_logger
from infrastructure.metrics import metrics


logger = get_logger()

Clock = Callable[[], datetime]


class OrderRepository(Protocol):
    async def get(self, order_id: str) -> Order | None: ...
    async def add(self, order: Order) -> Order: ...
    async def update_status(self, order: Order) -> None: ...
    async def find_all(self, status: Optional[str] = None) -> List[Order]: ...
    async def find_by_vendor(self, vendor_id: str, status: Optional[str] = None) -> List[Order]: ...


class MenuRepository(Protocol):
    async def get(self, item_id: str) -> MenuItem | None: ...
    async def add(self, item: MenuItem) -> MenuItem: ...
    async def update(self, item: MenuItem) -> None: ...
    async def delete(self, item_id: str) -> None: ...


class UserRepository(Protocol):
    async def get_by_email(self, email: str) -> User | None: ...
    async def add(self, user: User) -> User: ...


class UnitOfWork(Protocol):
    async def __aenter__(self) -> "UnitOfWork": ...
    async def __aexit__(self, exc_type, exc, tb) -> None: ...
    async def commit(self) -> None: ...
    @property
    def orders(self) -> OrderRepository: ...
    @property
    def menu(self) -> MenuRepository: ...
    @property
    def users(self) -> UserRepository: ...


@dataclass
class PlaceOrderCommand:
    customer_name: str
    phone: str
    items: List[CartItem]
    total: float
    address: Optional[str] = None
    delivery_type: str = DeliveryType.DELIVERY.value


class PlaceOrderUseCase:
    def __init__(self, uow: UnitOfWork, catalog: CatalogLookup, clock: Clock | None = None):
        self.uow = uow
        self.normalizer = ItemNormalizer(catalog)
        self.clock = clock or utcnow

    async def execute(self, cmd: PlaceOrderCommand) -> Order:
        resolutions = await self.normalizer.normalize_all(cmd.items)
        line_items = build_line_items(resolutions)

        order = Order.create(
            customer_name=cmd.customer_name,
            phone=cmd.phone,
            items=line_items,
            total=cmd.total,
            address=cmd.address,
            delivery_type=cmd.delivery_type,
            now=self.clock(),
        )
        if abs(order.items_total - order.total) > 0.005:
            logger.warning(
                "Order total differs from item sum",
                submitted_total=order.total,
                items_total=order.items_total,
            )
            metrics.increment("order_total_mismatches_total")

        async with self.uow:
            await self.uow.orders.add(order)
            await self.uow.commit()

        metrics.increment("orders_placed_total")
        logger.info(
            "Order placed",
            order_id=order.order_id,
            vendors=sorted(order.vendor_ids),
            item_count=len(order.items),
        )
        return order


@dataclass
class UpdateOrderStatusCommand:
    order_id: str
    status: str


class UpdateOrderStatusUseCase:
    def __init__(self, uow: UnitOfWork, clock: Clock | None = None):
        self.uow = uow
        self.clock = clock or utcnow

    async def execute(self, cmd: UpdateOrderStatusCommand) -> Order:
        if not is_legal_status(cmd.status):
            raise ValidationError("Invalid status value.")

        async with self.uow:
            order = await self.uow.orders.get(cmd.order_id)
            if not order:
                raise NotFoundError(f"Order {cmd.order_id} not found")

            previous = order.status
            order.change_status(cmd.status, now=self.clock())
            await self.uow.orders.update_status(order)
            await self.uow.commit()

        metrics.increment("order_status_updates_total")
        logger.info(
            "Order status changed",
            order_id=order.order_id,
            previous=previous,
            status=order.status,
        )
        return order
