from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Sequence

from domain.errors import ValidationError


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OrderStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class DeliveryType(str, Enum):
    DELIVERY = "delivery"
    PICKUP = "pickup"


ORDER_STATUSES = frozenset(s.value for s in OrderStatus)
DELIVERY_TYPES = frozenset(d.value for d in DeliveryType)


def is_legal_status(value: object) -> bool:
    """Flat membership check: any legal status may follow any other."""
    return isinstance(value, str) and value in ORDER_STATUSES


@dataclass(frozen=True)
class CartItem:
    """A line item as submitted by the client, before vendor attribution."""

    name: Optional[str] = None
    price: Optional[float] = None
    quantity: int = 1
    image_url: Optional[str] = None
    vendor_id: Optional[str] = None
    menu_item_id: Optional[str] = None
    item_id: Optional[str] = None


@dataclass(frozen=True)
class LineItem:
    name: str
    price: float
    quantity: int
    vendor_id: str
    image_url: Optional[str] = None
    menu_item_id: Optional[str] = None

    def total(self) -> float:
        return self.quantity * self.price

    @classmethod
    def from_cart(cls, item: CartItem, position: int) -> "LineItem":
        if not item.vendor_id:
            raise ValidationError(f"Item {position} has no vendorId")
        if not item.name:
            raise ValidationError(f"Item {position} requires a name")
        if item.price is None or not math.isfinite(item.price) or item.price < 0:
            raise ValidationError(f"Item {position} requires a non-negative price")
        if item.quantity < 1:
            raise ValidationError(f"Item {position} quantity must be positive")

        return cls(
            name=item.name,
            price=item.price,
            quantity=item.quantity,
            vendor_id=item.vendor_id,
            image_url=item.image_url,
            menu_item_id=item.menu_item_id,
        )


class Order:
    def __init__(
        self,
        order_id: Optional[str],
        customer_name: str,
        phone: str,
        items: Sequence[LineItem],
        total: float,
        address: Optional[str] = None,
        delivery_type: str = DeliveryType.DELIVERY.value,
        status: str = OrderStatus.PENDING.value,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):
        self.order_id = order_id
        self.customer_name = customer_name
        self.phone = phone
        self.address = address
        self.delivery_type = delivery_type
        self.items = tuple(items)
        self.total = total
        self.status = status
        self.created_at = created_at
        self.updated_at = updated_at

    @property
    def items_total(self) -> float:
        """Sum of price x quantity; informational, the stored total is the client's."""
        return round(sum(item.total() for item in self.items), 2)

    @property
    def vendor_ids(self) -> frozenset[str]:
        return frozenset(item.vendor_id for item in self.items)

    @classmethod
    def create(
        cls,
        customer_name: str,
        phone: str,
        items: Sequence[LineItem],
        total: float,
        address: Optional[str] = None,
        delivery_type: str = DeliveryType.DELIVERY.value,
        now: Optional[datetime] = None,
    ) -> "Order":
        if not isinstance(items, (list, tuple)) or not items:
            raise ValidationError("Order must contain at least one item.")
        if any(not isinstance(item, LineItem) for item in items):
            raise ValidationError("Order items must be normalized line items")
        if not customer_name or not phone:
            raise ValidationError("fullName and phone are required")
        if delivery_type not in DELIVERY_TYPES:
            raise ValidationError(f"Unknown delivery type: {delivery_type}")
        if total is None or not math.isfinite(total) or total < 0:
            raise ValidationError("Order total must be non-negative")

        now = now or utcnow()
        return cls(
            order_id=None,
            customer_name=customer_name,
            phone=phone,
            items=items,
            total=total,
            address=address,
            delivery_type=delivery_type,
            status=OrderStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )

    def change_status(self, new_status: str, now: Optional[datetime] = None) -> None:
        if not is_legal_status(new_status):
            raise ValidationError("Invalid status value.")
        self.status = OrderStatus(new_status).value
        self.updated_at = now or utcnow()
