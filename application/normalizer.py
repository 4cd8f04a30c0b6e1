from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from typing import List, Optional, Protocol, Sequence

from domain.errors import ValidationError
from domain.menu import CatalogEntry
from domain.order import CartItem, LineItem
from infrastructure.logging import get_logger
from infrastructure.metrics import metrics


logger = get_logger()

NO_LOOKUP_KEY = "no_lookup_key"
NOT_FOUND = "not_found"
NO_VENDOR = "no_vendor"
LOOKUP_FAILED = "lookup_failed"


class CatalogLookup(Protocol):
    async def get(self, item_id: str) -> CatalogEntry | None: ...


@dataclass(frozen=True)
class ItemResolution:
    """Outcome of attributing one cart item to a vendor."""

    item: CartItem
    resolved: bool
    reason: Optional[str] = None


class ItemNormalizer:
    def __init__(self, catalog: CatalogLookup):
        self.catalog = catalog

    async def normalize(self, raw: CartItem) -> ItemResolution:
        if raw.vendor_id:
            return ItemResolution(item=raw, resolved=True)

        # cart lines sometimes reuse the menu item id as their own _id
        lookup_key = raw.menu_item_id or raw.item_id
        if not lookup_key:
            return ItemResolution(item=raw, resolved=False, reason=NO_LOOKUP_KEY)

        try:
            entry = await self.catalog.get(lookup_key)
        except Exception as exc:
            logger.warning("Catalog lookup failed", lookup_key=lookup_key, error=str(exc))
            metrics.increment("catalog_lookup_failures_total")
            return ItemResolution(item=raw, resolved=False, reason=LOOKUP_FAILED)

        if entry is None:
            return ItemResolution(item=raw, resolved=False, reason=NOT_FOUND)
        if not entry.vendor_id:
            return ItemResolution(item=raw, resolved=False, reason=NO_VENDOR)

        normalized = replace(
            raw,
            vendor_id=entry.vendor_id,
            image_url=raw.image_url or entry.image_url,
            name=raw.name or entry.name,
            price=raw.price if raw.price is not None else entry.price,
            menu_item_id=lookup_key,
        )
        return ItemResolution(item=normalized, resolved=True)

    async def normalize_all(self, items: Sequence[CartItem]) -> List[ItemResolution]:
        return list(await asyncio.gather(*(self.normalize(item) for item in items)))


def build_line_items(resolutions: Sequence[ItemResolution]) -> List[LineItem]:
    """Reject the cart if any item is unattributed, else convert to line items."""
    unresolved = [
        (position, resolution)
        for position, resolution in enumerate(resolutions, start=1)
        if not resolution.resolved
    ]
    if unresolved:
        metrics.increment("unresolved_items_total", len(unresolved))
        details = ", ".join(f"item {position} ({r.reason})" for position, r in unresolved)
        raise ValidationError(f"Could not resolve vendor for {details}")

    return [
        LineItem.from_cart(resolution.item, position)
        for position, resolution in enumerate(resolutions, start=1)
    ]
