# humidor/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict, EmailStr
from typing import Dict, List, Literal
from decimal import Decimal
from datetime import datetime

from humidor.domain.order_status import OrderStatus


class UserCreate(BaseModel):
    """Schema for creating a user."""

    id: int = Field(..., gt=0, description="User ID (must be > 0)")
    name: str = Field(..., min_length=1, max_length=100, description="Display name")
    email: EmailStr | None = None
    is_admin: bool = False


class UserRead(BaseModel):
    """Schema for a user (response)."""

    id: int
    name: str
    email: str | None = None
    is_admin: bool = False

    model_config = ConfigDict(from_attributes=True)


class AddressIn(BaseModel):
    """Schema for adding an address to a user's address book."""

    type: Literal["SHIPPING", "BILLING"]
    line1: str = Field(..., min_length=1, description="Address line 1 cannot be empty")
    line2: str | None = None
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    postal: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1)


class AddressOut(AddressIn):
    id: int
    user_id: int

    model_config = ConfigDict(from_attributes=True)


class ItemIn(BaseModel):
    """Schema for adding a variant to the cart."""

    variant_id: int = Field(..., gt=0, description="Variant ID (must be > 0)")
    quantity: int = Field(..., ge=1, description="Quantity (must be >= 1)")


class QuantityIn(BaseModel):
    quantity: int = Field(..., ge=1)


class MergeCartIn(BaseModel):
    """Guest cart kept in browser storage, merged after login."""

    items: List[ItemIn] = Field(..., min_length=1)


class CartItemOut(BaseModel):
    """Schema for a cart line (response). Prices are the variant's current price."""

    variant_id: int
    sku: str
    product_name: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal
    inventory: int


class CartOut(BaseModel):
    """Schema for a cart (response)."""

    cart_id: int | None
    user_id: int
    items: List[CartItemOut]
    total: Decimal
    version: int = 0


class CheckoutIn(BaseModel):
    """Schema for checkout: payment prime plus address book references."""

    payment_token: str = Field(..., min_length=1, description="Payment prime/token is required")
    shipping_address_id: int = Field(..., gt=0)
    billing_address_id: int | None = Field(None, gt=0)


class OrderItemOut(BaseModel):
    variant_id: int
    quantity: int
    price: Decimal

    model_config = ConfigDict(from_attributes=True)


class PaymentOut(BaseModel):
    status: str
    amount: Decimal
    provider: str
    transaction_id: str

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    """Schema for an order (response)."""

    id: int
    user_id: int
    status: OrderStatus
    shipping_addr_id: int
    billing_addr_id: int
    total: Decimal
    created_at: datetime
    items: List[OrderItemOut]
    payment: PaymentOut | None = None
    allowed_next_statuses: List[OrderStatus] = []


class StatusUpdateIn(BaseModel):
    status: OrderStatus


class StatusTransitionsOut(BaseModel):
    transitions: Dict[OrderStatus, List[OrderStatus]]


class AdminOrderOut(BaseModel):
    id: int
    user_id: int
    user_name: str | None = None
    user_email: str | None = None
    status: OrderStatus
    total: Decimal
    created_at: datetime


class Pagination(BaseModel):
    current_page: int
    total_pages: int
    total_orders: int
    page_size: int


class AdminOrderPage(BaseModel):
    orders: List[AdminOrderOut]
    pagination: Pagination
