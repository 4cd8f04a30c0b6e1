from __future__ import annotations

import uuid
from collections import defaultdict
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    delete,
    insert,
    select,
    update,
)
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from domain.errors import DuplicateError, PersistenceError
from domain.menu import CatalogEntry, MenuItem
from domain.order import LineItem, Order
from domain.user import User
from infrastructure.config import get_settings

metadata = MetaData()

orders = Table(
    "orders",
    metadata,
    Column("order_id", String, primary_key=True),
    Column("customer_name", String, nullable=False),
    Column("phone", String, nullable=False),
    Column("address", String, nullable=True),
    Column("delivery_type", String, nullable=False),
    Column("total", Float, nullable=False),
    Column("status", String, nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
    Index("ix_orders_status_created_at", "status", "created_at"),
)

order_items = Table(
    "order_items",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("order_id", String, ForeignKey("orders.order_id"), nullable=False),
    Column("position", Integer, nullable=False),
    Column("name", String, nullable=False),
    Column("price", Float, nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("image_url", String, nullable=True),
    Column("vendor_id", String, nullable=False),
    Column("menu_item_id", String, nullable=True),
    Index("ix_order_items_vendor_id", "vendor_id"),
    Index("ix_order_items_order_id", "order_id"),
)

menu_items = Table(
    "menu_items",
    metadata,
    Column("item_id", String, primary_key=True),
    Column("vendor_id", String, nullable=False),
    Column("name", String, nullable=False),
    Column("price", Float, nullable=False),
    Column("category", String, nullable=False),
    Column("available", Boolean, nullable=False),
    Column("image_url", String, nullable=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
    Index("ix_menu_items_vendor_created_at", "vendor_id", "created_at"),
)

users = Table(
    "users",
    metadata,
    Column("user_id", String, primary_key=True),
    Column("name", String, nullable=False),
    Column("email", String, nullable=False, unique=True),
    Column("password_hash", String, nullable=False),
    Column("role", String, nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)


def new_id() -> str:
    return uuid.uuid4().hex


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes; every stored timestamp is UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def get_engine(dsn: Optional[str] = None) -> AsyncEngine:
    url = dsn or get_settings().db_dsn
    if not url:
        raise RuntimeError("APP__DB_DSN not set")
    return create_async_engine(url, future=True)


class OrderRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, order_id: str) -> Order | None:
        result = await self.session.execute(select(orders).where(orders.c.order_id == order_id))
        row = result.first()
        if not row:
            return None
        items = await self._load_items([order_id])
        return self._hydrate(row._mapping, items.get(order_id, []))

    async def find_all(self, status: Optional[str] = None) -> List[Order]:
        return await self._find(status=status)

    async def find_by_vendor(self, vendor_id: str, status: Optional[str] = None) -> List[Order]:
        """Orders with at least one item for the vendor, each with its full item list."""
        return await self._find(status=status, vendor_id=vendor_id)

    async def add(self, order: Order) -> Order:
        order.order_id = order.order_id or new_id()
        try:
            await self.session.execute(
                insert(orders).values(
                    order_id=order.order_id,
                    customer_name=order.customer_name,
                    phone=order.phone,
                    address=order.address,
                    delivery_type=order.delivery_type,
                    total=order.total,
                    status=order.status,
                    created_at=order.created_at,
                    updated_at=order.updated_at,
                )
            )
            await self.session.execute(
                insert(order_items),
                [
                    {
                        "order_id": order.order_id,
                        "position": position,
                        "name": item.name,
                        "price": item.price,
                        "quantity": item.quantity,
                        "image_url": item.image_url,
                        "vendor_id": item.vendor_id,
                        "menu_item_id": item.menu_item_id,
                    }
                    for position, item in enumerate(order.items)
                ],
            )
        except IntegrityError as exc:
            raise PersistenceError(f"Order {order.order_id} rejected by storage") from exc
        return order

    async def update_status(self, order: Order) -> None:
        await self.session.execute(
            update(orders)
            .where(orders.c.order_id == order.order_id)
            .values(status=order.status, updated_at=order.updated_at)
        )

    async def _find(self, status: Optional[str] = None, vendor_id: Optional[str] = None) -> List[Order]:
        stmt = select(orders)
        if status:
            stmt = stmt.where(orders.c.status == status)
        if vendor_id:
            contains_vendor = (
                select(order_items.c.id)
                .where(order_items.c.order_id == orders.c.order_id)
                .where(order_items.c.vendor_id == vendor_id)
                .exists()
            )
            stmt = stmt.where(contains_vendor)
        stmt = stmt.order_by(orders.c.created_at.desc())

        result = await self.session.execute(stmt)
        rows = result.fetchall()
        items = await self._load_items([row.order_id for row in rows])
        return [self._hydrate(row._mapping, items.get(row.order_id, [])) for row in rows]

    async def _load_items(self, order_ids: List[str]) -> Dict[str, List[LineItem]]:
        if not order_ids:
            return {}
        result = await self.session.execute(
            select(order_items)
            .where(order_items.c.order_id.in_(order_ids))
            .order_by(order_items.c.order_id, order_items.c.position)
        )
        grouped: Dict[str, List[LineItem]] = defaultdict(list)
        for row in result.fetchall():
            data = row._mapping
            grouped[data["order_id"]].append(
                LineItem(
                    name=data["name"],
                    price=data["price"],
                    quantity=data["quantity"],
                    vendor_id=data["vendor_id"],
                    image_url=data["image_url"],
                    menu_item_id=data["menu_item_id"],
                )
            )
        return grouped

    @staticmethod
    def _hydrate(data, items: List[LineItem]) -> Order:
        return Order(
            order_id=data["order_id"],
            customer_name=data["customer_name"],
            phone=data["phone"],
            items=items,
            total=data["total"],
            address=data["address"],
            delivery_type=data["delivery_type"],
            status=data["status"],
            created_at=as_utc(data["created_at"]),
            updated_at=as_utc(data["updated_at"]),
        )


class MenuRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, item_id: str) -> MenuItem | None:
        result = await self.session.execute(select(menu_items).where(menu_items.c.item_id == item_id))
        row = result.first()
        if not row:
            return None
        return self._hydrate(row._mapping)

    async def find(
        self,
        vendor_id: Optional[str] = None,
        category: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[MenuItem]:
        stmt = select(menu_items)
        if vendor_id:
            stmt = stmt.where(menu_items.c.vendor_id == vendor_id)
        if category:
            stmt = stmt.where(menu_items.c.category == category)
        if search:
            stmt = stmt.where(
                menu_items.c.name.icontains(search, autoescape=True)
                | menu_items.c.category.icontains(search, autoescape=True)
            )
        stmt = stmt.order_by(menu_items.c.created_at.desc())
        result = await self.session.execute(stmt)
        return [self._hydrate(row._mapping) for row in result.fetchall()]

    async def add(self, item: MenuItem) -> MenuItem:
        item.item_id = item.item_id or new_id()
        await self.session.execute(insert(menu_items).values(**self._values(item)))
        return item

    async def update(self, item: MenuItem) -> None:
        values = self._values(item)
        values.pop("item_id")
        values.pop("created_at")
        await self.session.execute(
            update(menu_items).where(menu_items.c.item_id == item.item_id).values(**values)
        )

    async def delete(self, item_id: str) -> None:
        await self.session.execute(delete(menu_items).where(menu_items.c.item_id == item_id))

    @staticmethod
    def _values(item: MenuItem) -> dict:
        return {
            "item_id": item.item_id,
            "vendor_id": item.vendor_id,
            "name": item.name,
            "price": item.price,
            "category": item.category,
            "available": item.available,
            "image_url": item.image_url,
            "created_at": item.created_at,
            "updated_at": item.updated_at,
        }

    @staticmethod
    def _hydrate(data) -> MenuItem:
        return MenuItem(
            item_id=data["item_id"],
            vendor_id=data["vendor_id"],
            name=data["name"],
            price=data["price"],
            category=data["category"],
            available=data["available"],
            image_url=data["image_url"],
            created_at=as_utc(data["created_at"]),
            updated_at=as_utc(data["updated_at"]),
        )


class UserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_email(self, email: str) -> User | None:
        result = await self.session.execute(select(users).where(users.c.email == email))
        row = result.first()
        if not row:
            return None
        data = row._mapping
        return User(
            user_id=data["user_id"],
            name=data["name"],
            email=data["email"],
            password_hash=data["password_hash"],
            role=data["role"],
            created_at=as_utc(data["created_at"]),
            updated_at=as_utc(data["updated_at"]),
        )

    async def add(self, user: User) -> User:
        user.user_id = user.user_id or new_id()
        try:
            await self.session.execute(
                insert(users).values(
                    user_id=user.user_id,
                    name=user.name,
                    email=user.email,
                    password_hash=user.password_hash,
                    role=user.role,
                    created_at=user.created_at,
                    updated_at=user.updated_at,
                )
            )
        except IntegrityError as exc:
            raise DuplicateError("Email already in use") from exc
        return user


class SqlCatalogLookup:
    """Reads vendor attribution for a menu item.

    Each lookup runs on its own pooled connection so that the lookups for one
    cart can be awaited concurrently.
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine

    async def get(self, item_id: str) -> CatalogEntry | None:
        async with self.engine.connect() as conn:
            result = await conn.execute(
                select(
                    menu_items.c.item_id,
                    menu_items.c.vendor_id,
                    menu_items.c.name,
                    menu_items.c.price,
                    menu_items.c.image_url,
                ).where(menu_items.c.item_id == item_id)
            )
            row = result.first()
        if not row:
            return None
        data = row._mapping
        return CatalogEntry(
            item_id=data["item_id"],
            vendor_id=data["vendor_id"],
            name=data["name"],
            price=data["price"],
            image_url=data["image_url"],
        )


class SqlAlchemyUnitOfWork:
    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.session_factory = async_sessionmaker(bind=self.engine, expire_on_commit=False)
        self.session: AsyncSession | None = None
        self._orders_repo: OrderRepository | None = None
        self._menu_repo: MenuRepository | None = None
        self._users_repo: UserRepository | None = None

    async def __aenter__(self):
        self.session = self.session_factory()
        await self.session.__aenter__()
        self._orders_repo = None
        self._menu_repo = None
        self._users_repo = None
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if self.session:
            await self.session.__aexit__(exc_type, exc, tb)
        self.session = None

    async def commit(self) -> None:
        if self.session:
            await self.session.commit()

    def _require_session(self) -> AsyncSession:
        if not self.session:
            raise RuntimeError("Session not initialized")
        return self.session

    @property
    def orders(self) -> OrderRepository:
        if not self._orders_repo:
            self._orders_repo = OrderRepository(self._require_session())
        return self._orders_repo

    @property
    def menu(self) -> MenuRepository:
        if not self._menu_repo:
            self._menu_repo = MenuRepository(self._require_session())
        return self._menu_repo

    @property
    def users(self) -> UserRepository:
        if not self._users_repo:
            self._users_repo = UserRepository(self._require_session())
        return self._users_repo
