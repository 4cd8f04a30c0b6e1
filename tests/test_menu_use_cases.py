import pytest

from application.menu import (
    CreateMenuItemCommand,
    CreateMenuItemUseCase,
    DeleteMenuItemUseCase,
    ImageUpload,
    UpdateMenuItemCommand,
    UpdateMenuItemUseCase,
)
from domain.errors import NotFoundError, ValidationError
from domain.menu import MenuItem

from fakes import InMemoryUoW, PNG_BYTES, RecordingImageStorage


def create_command(**overrides):
    fields = dict(name="Pizza", price=12.0, category="Mains", vendor_id="V1")
    fields.update(overrides)
    return CreateMenuItemCommand(**fields)


@pytest.mark.asyncio
async def test_create_menu_item_uploads_image():
    uow = InMemoryUoW()
    storage = RecordingImageStorage()

    item = await CreateMenuItemUseCase(uow, storage).execute(
        create_command(image=ImageUpload(content=PNG_BYTES, content_type="image/png"))
    )

    assert item.item_id in uow.menu.storage
    assert item.image_url == "/uploads/menu_items/img-1.png"
    assert item.available is True
    assert storage.saved == [(PNG_BYTES, "image/png")]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"name": None}, "Name, price, and category are required."),
        ({"price": None}, "Name, price, and category are required."),
        ({"category": ""}, "Name, price, and category are required."),
        ({"vendor_id": None}, "vendorId is required."),
    ],
)
async def test_create_menu_item_requires_fields(overrides, message):
    storage = RecordingImageStorage()

    with pytest.raises(ValidationError) as excinfo:
        await CreateMenuItemUseCase(InMemoryUoW(), storage).execute(
            create_command(image=ImageUpload(content=PNG_BYTES, content_type="image/png"), **overrides)
        )

    assert str(excinfo.value) == message
    assert storage.saved == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "image",
    [
        ImageUpload(content=b"%PDF-1.7", content_type="application/pdf"),
        ImageUpload(content=b"x" * 11, content_type="image/jpeg"),
    ],
)
async def test_create_menu_item_rejects_bad_images(image):
    storage = RecordingImageStorage()

    with pytest.raises(ValidationError):
        await CreateMenuItemUseCase(InMemoryUoW(), storage, max_image_bytes=10).execute(
            create_command(image=image)
        )

    assert storage.saved == []


@pytest.mark.asyncio
async def test_update_menu_item_applies_partial_changes():
    uow = InMemoryUoW()
    item = await CreateMenuItemUseCase(uow, RecordingImageStorage()).execute(create_command())

    updated = await UpdateMenuItemUseCase(uow, RecordingImageStorage()).execute(
        UpdateMenuItemCommand(item_id=item.item_id, price=14.5, available=False, vendor_id="")
    )

    assert updated.price == 14.5
    assert updated.available is False
    assert updated.name == "Pizza"
    assert updated.vendor_id == "V1"


@pytest.mark.asyncio
async def test_update_unknown_menu_item_raises_not_found():
    with pytest.raises(NotFoundError):
        await UpdateMenuItemUseCase(InMemoryUoW(), RecordingImageStorage()).execute(
            UpdateMenuItemCommand(item_id="missing", name="x")
        )


@pytest.mark.asyncio
async def test_delete_menu_item():
    uow = InMemoryUoW()
    item = await CreateMenuItemUseCase(uow, RecordingImageStorage()).execute(create_command())

    await DeleteMenuItemUseCase(uow).execute(item.item_id)

    assert uow.menu.storage == {}
    with pytest.raises(NotFoundError):
        await DeleteMenuItemUseCase(uow).execute(item.item_id)


def test_menu_item_rejects_non_finite_price():
    with pytest.raises(ValidationError, match="non-negative"):
        MenuItem.check_required("Tea", float("inf"), "Drinks", "V1")

    item = MenuItem.create(name="Tea", price=2.0, category="Drinks", vendor_id="V1")
    with pytest.raises(ValidationError):
        item.apply_update(price=float("nan"))
    assert item.price == 2.0
