"""Pydantic schemas for HTTP API requests and responses."""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from domain.menu import MenuItem
from domain.order import CartItem, LineItem, Order
from domain.user import User


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys while keeping snake_case attributes."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LineItemRequest(CamelModel):
    """Cart line as sent by the client; vendor attribution may be missing."""
    item_id: Optional[str] = Field(None, alias="_id")
    name: Optional[str] = None
    price: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    quantity: int = Field(1, gt=0)
    image_url: Optional[str] = None
    vendor_id: Optional[str] = None
    menu_item_id: Optional[str] = None

    def to_cart_item(self) -> CartItem:
        return CartItem(
            name=self.name,
            price=self.price,
            quantity=self.quantity,
            image_url=self.image_url,
            vendor_id=self.vendor_id,
            menu_item_id=self.menu_item_id,
            item_id=self.item_id,
        )


class CreateOrderRequest(CamelModel):
    """Request body for placing an order."""
    full_name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    address: Optional[str] = None
    delivery_type: Literal["delivery", "pickup"] = "delivery"
    items: List[LineItemRequest]
    total: float = Field(..., ge=0, allow_inf_nan=False)


class UpdateStatusRequest(BaseModel):
    status: str


class LineItemResponse(CamelModel):
    name: str
    price: float
    quantity: int
    image_url: Optional[str] = None
    vendor_id: str
    menu_item_id: Optional[str] = None

    @classmethod
    def from_domain(cls, item: LineItem) -> "LineItemResponse":
        return cls(
            name=item.name,
            price=item.price,
            quantity=item.quantity,
            image_url=item.image_url,
            vendor_id=item.vendor_id,
            menu_item_id=item.menu_item_id,
        )


class OrderResponse(CamelModel):
    """Response for order endpoints."""
    id: str = Field(..., alias="_id")
    full_name: str
    phone: str
    address: Optional[str] = None
    delivery_type: str
    items: List[LineItemResponse]
    total: float
    items_total: float
    status: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, order: Order) -> "OrderResponse":
        return cls(
            id=order.order_id,
            full_name=order.customer_name,
            phone=order.phone,
            address=order.address,
            delivery_type=order.delivery_type,
            items=[LineItemResponse.from_domain(item) for item in order.items],
            total=order.total,
            items_total=order.items_total,
            status=order.status,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class PlaceOrderResponse(BaseModel):
    message: str
    order: OrderResponse


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    role: str = "user"


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class MessageResponse(BaseModel):
    message: str


class UserSummary(BaseModel):
    id: str
    name: str
    email: str
    role: str

    @classmethod
    def from_domain(cls, user: User) -> "UserSummary":
        return cls(id=user.user_id, name=user.name, email=user.email, role=user.role)


class LoginResponse(BaseModel):
    token: str
    user: UserSummary


class MenuItemResponse(CamelModel):
    id: str = Field(..., alias="_id")
    name: str
    price: float
    category: str
    available: bool
    image_url: Optional[str] = None
    vendor_id: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, item: MenuItem) -> "MenuItemResponse":
        return cls(
            id=item.item_id,
            name=item.name,
            price=item.price,
            category=item.category,
            available=item.available,
            image_url=item.image_url,
            vendor_id=item.vendor_id,
            created_at=item.created_at,
            updated_at=item.updated_at,
        )
