"""
Pydantic schemas for request/response validation in the storefront service.

Field names are snake_case in Python and camelCase on the wire.
"""
from datetime import datetime
from decimal import Decimal
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, PlainSerializer
from pydantic.alias_generators import to_camel

OrderStatus = Literal["pending", "completed", "cancelled"]
ORDER_STATUSES = ("pending", "completed", "cancelled")


def _money_to_json(value: Decimal) -> Union[int, float]:
    # Whole amounts stay integers on the wire
    if value == value.to_integral_value():
        return int(value)
    return float(value)


# Decimal in Python, a JSON number on the wire
Money = Annotated[Decimal, PlainSerializer(_money_to_json, return_type=Union[int, float], when_used="json")]


class CamelModel(BaseModel):
    """Base schema serialising to camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Message(CamelModel):
    message: str
    user_id: Optional[str] = None


# Orders

class OrderItem(CamelModel):
    """A cart line: menu item snapshot plus quantity."""
    id: str = Field(..., description="Menu item identifier")
    name: str
    price: Money = Field(..., ge=0, description="Price per unit")
    quantity: int = Field(..., gt=0, description="Quantity ordered")
    description: Optional[str] = None
    category: Optional[str] = None


class PaymentMethod(CamelModel):
    """Bank transfer details, as reported by the buyer."""
    type: Literal["bank-account"] = "bank-account"
    bank_name: Optional[str] = None
    account_name: Optional[str] = None
    account_number: Optional[str] = None


class OrderCreate(CamelModel):
    """Schema for creating a new order. The total is computed by the client."""
    items: List[OrderItem] = Field(default_factory=list, description="Order line items")
    total: Money
    payment_method: PaymentMethod
    order_number: Optional[str] = None
    timestamp: Optional[datetime] = None


class Order(OrderCreate):
    """
    Stored order record.

    Attributes:
        user_id (str): Owner of the order
        user_email (str): Owner's email at creation time
        status (str): pending, completed or cancelled
        created_at (datetime): When the order was created
        updated_at (datetime): When the status last changed, if ever
    """
    user_id: str
    user_email: Optional[str] = None
    status: OrderStatus = "pending"
    created_at: datetime
    updated_at: Optional[datetime] = None


class OrderRecord(Order):
    """Order record together with its key, as returned by list endpoints."""
    order_id: str


class OrderCreated(CamelModel):
    message: str = "Order created successfully"
    order_id: str
    order: Order


class OrderList(CamelModel):
    orders: List[OrderRecord]


class OrderStatusUpdate(CamelModel):
    status: OrderStatus


class OrderUpdated(CamelModel):
    message: str = "Order updated successfully"
    order: Order


# Favorites

class FavoriteAdd(CamelModel):
    item_id: str


class Favorites(CamelModel):
    favorites: List[str]


# Accounts

class SignUp(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=6, description="Password must be at least 6 characters")
    name: str = Field(..., min_length=1)


class FixAccount(CamelModel):
    email: EmailStr


class Profile(CamelModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    created_at: Optional[datetime] = None
    access_token: str
    is_admin: bool = False


class ProfileResponse(CamelModel):
    profile: Profile


class PasswordResetRequest(CamelModel):
    email: EmailStr


class PasswordResetRequested(CamelModel):
    message: str
    reset_code: Optional[str] = None


class PasswordReset(CamelModel):
    email: EmailStr
    reset_code: str
    new_password: str = Field(..., min_length=6)


# Payment details

class PaymentDetails(CamelModel):
    """Shop bank account the buyer transfers to."""
    bank_name: str
    account_name: str
    account_number: str
    credit_card_name: Optional[str] = None
    credit_card_number: Optional[str] = None


class PaymentDetailsResponse(CamelModel):
    details: PaymentDetails


class PaymentDetailsUpdate(CamelModel):
    details: PaymentDetails


def order_number_for(timestamp_ms: int) -> str:
    """Human-readable order number derived from a creation timestamp."""
    return f"ORD-{str(timestamp_ms)[-8:]}"
