from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Protocol

from application.use_cases import Clock, UnitOfWork
from domain.errors import NotFoundError, ValidationError
from domain.menu import MenuItem
from domain.order import utcnow
from infrastructure.config import DEFAULT_MAX_IMAGE_BYTES
from infrastructure.logging import get_logger
from infrastructure.metrics import metrics


logger = get_logger()

IMAGE_CONTENT_TYPE = re.compile(r"^image/(png|jpe?g|webp|gif)$", re.IGNORECASE)


class ImageStorage(Protocol):
    async def save(self, content: bytes, content_type: str) -> str: ...


@dataclass
class ImageUpload:
    content: bytes
    content_type: str


def check_image(image: ImageUpload, max_bytes: int = DEFAULT_MAX_IMAGE_BYTES) -> None:
    if not IMAGE_CONTENT_TYPE.match(image.content_type or ""):
        raise ValidationError("Only image files are allowed (png, jpg, jpeg, webp, gif).")
    if len(image.content) > max_bytes:
        raise ValidationError(f"Image exceeds the {max_bytes} byte limit.")


@dataclass
class CreateMenuItemCommand:
    name: Optional[str]
    price: Optional[float]
    category: Optional[str]
    vendor_id: Optional[str]
    available: bool = True
    image: Optional[ImageUpload] = None


class CreateMenuItemUseCase:
    def __init__(
        self,
        uow: UnitOfWork,
        storage: ImageStorage,
        max_image_bytes: int = DEFAULT_MAX_IMAGE_BYTES,
        clock: Clock | None = None,
    ):
        self.uow = uow
        self.storage = storage
        self.max_image_bytes = max_image_bytes
        self.clock = clock or utcnow

    async def execute(self, cmd: CreateMenuItemCommand) -> MenuItem:
        MenuItem.check_required(cmd.name, cmd.price, cmd.category, cmd.vendor_id)

        image_url = None
        if cmd.image is not None:
            check_image(cmd.image, self.max_image_bytes)
            image_url = await self.storage.save(cmd.image.content, cmd.image.content_type)

        item = MenuItem.create(
            name=cmd.name,
            price=cmd.price,
            category=cmd.category,
            vendor_id=cmd.vendor_id,
            available=cmd.available,
            image_url=image_url,
            now=self.clock(),
        )
        async with self.uow:
            await self.uow.menu.add(item)
            await self.uow.commit()

        metrics.increment("menu_items_created_total")
        logger.info("Menu item created", item_id=item.item_id, vendor_id=item.vendor_id)
        return item


@dataclass
class UpdateMenuItemCommand:
    item_id: str
    name: Optional[str] = None
    price: Optional[float] = None
    category: Optional[str] = None
    available: Optional[bool] = None
    vendor_id: Optional[str] = None
    image: Optional[ImageUpload] = None


class UpdateMenuItemUseCase:
    def __init__(
        self,
        uow: UnitOfWork,
        storage: ImageStorage,
        max_image_bytes: int = DEFAULT_MAX_IMAGE_BYTES,
        clock: Clock | None = None,
    ):
        self.uow = uow
        self.storage = storage
        self.max_image_bytes = max_image_bytes
        self.clock = clock or utcnow

    async def execute(self, cmd: UpdateMenuItemCommand) -> MenuItem:
        if cmd.image is not None:
            check_image(cmd.image, self.max_image_bytes)

        async with self.uow:
            item = await self.uow.menu.get(cmd.item_id)
            if not item:
                raise NotFoundError("Menu item not found")

            image_url = None
            if cmd.image is not None:
                image_url = await self.storage.save(cmd.image.content, cmd.image.content_type)

            item.apply_update(
                name=cmd.name,
                price=cmd.price,
                category=cmd.category,
                available=cmd.available,
                vendor_id=cmd.vendor_id,
                image_url=image_url,
                now=self.clock(),
            )
            await self.uow.menu.update(item)
            await self.uow.commit()
        return item


class DeleteMenuItemUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, item_id: str) -> None:
        async with self.uow:
            if not await self.uow.menu.get(item_id):
                raise NotFoundError("Menu item not found")
            await self.uow.menu.delete(item_id)
            await self.uow.commit()
        logger.info("Menu item deleted", item_id=item_id)
