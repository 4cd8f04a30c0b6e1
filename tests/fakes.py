"""In-memory collaborators for use-case tests."""
import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from domain.menu import CatalogEntry, MenuItem
from domain.order import Order
from domain.user import User


class InMemoryOrderRepo:
    def __init__(self):
        self.storage: Dict[str, Order] = {}
        self.status_updates: List[str] = []

    async def get(self, order_id: str) -> Order | None:
        return self.storage.get(order_id)

    async def add(self, order: Order) -> Order:
        order.order_id = order.order_id or f"ord-{len(self.storage) + 1}"
        self.storage[order.order_id] = order
        return order

    async def update_status(self, order: Order) -> None:
        self.status_updates.append(order.order_id)
        self.storage[order.order_id] = order

    async def find_all(self, status: Optional[str] = None) -> List[Order]:
        found = [o for o in self.storage.values() if not status or o.status == status]
        return sorted(found, key=lambda o: o.created_at, reverse=True)

    async def find_by_vendor(self, vendor_id: str, status: Optional[str] = None) -> List[Order]:
        return [o for o in await self.find_all(status) if vendor_id in o.vendor_ids]


class InMemoryMenuRepo:
    def __init__(self):
        self.storage: Dict[str, MenuItem] = {}

    async def get(self, item_id: str) -> MenuItem | None:
        return self.storage.get(item_id)

    async def add(self, item: MenuItem) -> MenuItem:
        item.item_id = item.item_id or f"menu-{len(self.storage) + 1}"
        self.storage[item.item_id] = item
        return item

    async def update(self, item: MenuItem) -> None:
        self.storage[item.item_id] = item

    async def delete(self, item_id: str) -> None:
        self.storage.pop(item_id, None)


class InMemoryUserRepo:
    def __init__(self):
        self.storage: Dict[str, User] = {}

    async def get_by_email(self, email: str) -> User | None:
        return self.storage.get(email)

    async def add(self, user: User) -> User:
        user.user_id = user.user_id or f"user-{len(self.storage) + 1}"
        self.storage[user.email] = user
        return user


@dataclass
class InMemoryUoW:
    orders: InMemoryOrderRepo = field(default_factory=InMemoryOrderRepo)
    menu: InMemoryMenuRepo = field(default_factory=InMemoryMenuRepo)
    users: InMemoryUserRepo = field(default_factory=InMemoryUserRepo)
    committed: bool = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if exc:
            self.committed = False
        return False

    async def commit(self) -> None:
        self.committed = True


class FakeCatalog:
    """Catalog lookup backed by a dict; keys in ``failing`` raise."""

    def __init__(self, entries: Optional[Dict[str, CatalogEntry]] = None, failing: tuple = (), delay: float = 0.0):
        self.entries = entries or {}
        self.failing = set(failing)
        self.delay = delay
        self.calls: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def get(self, item_id: str) -> CatalogEntry | None:
        self.calls.append(item_id)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if item_id in self.failing:
                raise ConnectionError("catalog unreachable")
            return self.entries.get(item_id)
        finally:
            self.in_flight -= 1


class FakeClock:
    def __init__(self, start: Optional[datetime] = None, step: timedelta = timedelta(seconds=1)):
        self.current = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
        self.step = step

    def __call__(self) -> datetime:
        now = self.current
        self.current = self.current + self.step
        return now


class PlainHasher:
    """Reversible stand-in for argon2 so use-case tests stay fast."""

    def hash(self, password: str) -> str:
        return f"hashed:{password}"

    def verify(self, password_hash: str, password: str) -> bool:
        return password_hash == f"hashed:{password}"


class StaticTokenIssuer:
    def issue(self, user_id: str, role: str) -> str:
        return f"token:{user_id}:{role}"


class RecordingImageStorage:
    def __init__(self):
        self.saved: List[tuple] = []

    async def save(self, content: bytes, content_type: str) -> str:
        self.saved.append((content, content_type))
        return f"/uploads/menu_items/img-{len(self.saved)}.png"


JWT_SECRET = "test-secret-with-at-least-32-bytes!!"

# PNG signature plus filler; uploads are checked by declared content type only
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
