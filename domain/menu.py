from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from domain.errors import ValidationError
from domain.order import utcnow


@dataclass(frozen=True)
class CatalogEntry:
    """The slice of a menu item that order intake reads for vendor attribution."""

    item_id: str
    vendor_id: Optional[str]
    name: Optional[str] = None
    price: Optional[float] = None
    image_url: Optional[str] = None


def parse_available(value: object, default: bool = True) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"true", "1"}


class MenuItem:
    def __init__(
        self,
        item_id: Optional[str],
        vendor_id: str,
        name: str,
        price: float,
        category: str,
        available: bool = True,
        image_url: Optional[str] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):
        self.item_id = item_id
        self.vendor_id = vendor_id
        self.name = name
        self.price = price
        self.category = category
        self.available = available
        self.image_url = image_url
        self.created_at = created_at
        self.updated_at = updated_at

    @staticmethod
    def check_required(
        name: Optional[str],
        price: Optional[float],
        category: Optional[str],
        vendor_id: Optional[str],
    ) -> None:
        if not name or price is None or not category:
            raise ValidationError("Name, price, and category are required.")
        if not vendor_id:
            raise ValidationError("vendorId is required.")
        if not math.isfinite(price) or price < 0:
            raise ValidationError("Price must be non-negative.")

    @classmethod
    def create(
        cls,
        name: str,
        price: float,
        category: str,
        vendor_id: str,
        available: bool = True,
        image_url: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> "MenuItem":
        cls.check_required(name, price, category, vendor_id)
        now = now or utcnow()
        return cls(
            item_id=None,
            vendor_id=vendor_id,
            name=name,
            price=price,
            category=category,
            available=available,
            image_url=image_url,
            created_at=now,
            updated_at=now,
        )

    def apply_update(
        self,
        name: Optional[str] = None,
        price: Optional[float] = None,
        category: Optional[str] = None,
        available: Optional[bool] = None,
        vendor_id: Optional[str] = None,
        image_url: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> None:
        """Partial update: only the arguments that are not None are applied."""
        if price is not None and (not math.isfinite(price) or price < 0):
            raise ValidationError("Price must be non-negative.")
        if name is not None:
            self.name = name
        if price is not None:
            self.price = price
        if category is not None:
            self.category = category
        if available is not None:
            self.available = available
        # an empty vendorId keeps the current owner
        if vendor_id:
            self.vendor_id = vendor_id
        if image_url is not None:
            self.image_url = image_url
        self.updated_at = now or utcnow()
