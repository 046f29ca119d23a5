from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class PatchModel(BaseModel):
    """Partial update; unknown fields are rejected instead of ignored."""
    model_config = ConfigDict(extra="forbid")


# Users

class UserCreate(BaseModel):
    email: str
    display_name: Optional[str] = None
    photo_url: Optional[str] = None


class UserUpdate(PatchModel):
    display_name: Optional[str] = None
    photo_url: Optional[str] = None


class UserRoleUpdate(PatchModel):
    role: Literal["user", "seller", "admin"]


class UserOut(ORMModel):
    id: str
    email: str
    display_name: Optional[str] = None
    photo_url: Optional[str] = None
    role: str
    created_at: Optional[datetime] = None


# Books

class BookCreate(BaseModel):
    title: str
    author: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    category: Optional[str] = None
    condition: Optional[str] = None
    price: float = Field(ge=0)
    quantity: int = Field(default=1, ge=0)
    status: str = "published"
    seller_email: Optional[str] = None
    seller_name: Optional[str] = None


class BookUpdate(PatchModel):
    title: Optional[str] = None
    author: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    category: Optional[str] = None
    condition: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    quantity: Optional[int] = Field(default=None, ge=0)
    status: Optional[str] = None

    @field_validator("title")
    @classmethod
    def title_not_null(cls, value):
        if value is None:
            raise ValueError("title cannot be null")
        return value


class BookOut(ORMModel):
    id: str
    title: str
    author: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    category: Optional[str] = None
    condition: Optional[str] = None
    price: Optional[float] = None
    quantity: Optional[int] = None
    status: Optional[str] = None
    seller_email: Optional[str] = None
    seller_name: Optional[str] = None
    created_at: Optional[datetime] = None


# Orders

class OrderCreate(BaseModel):
    email: str
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    address: Optional[str] = None
    book_id: str
    book_title: Optional[str] = None
    seller_email: Optional[str] = None
    price: float = Field(ge=0)
    quantity: int = Field(default=1, ge=1)
    order_date: Optional[datetime] = None


class OrderUpdate(PatchModel):
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    address: Optional[str] = None
    quantity: Optional[int] = Field(default=None, ge=1)
    status: Optional[str] = None


class OrderOut(ORMModel):
    id: str
    email: Optional[str] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    address: Optional[str] = None
    book_id: Optional[str] = None
    book_title: Optional[str] = None
    seller_email: Optional[str] = None
    price: Optional[float] = None
    quantity: Optional[int] = None
    status: Optional[str] = None
    payment_status: Optional[str] = None
    tracking_id: Optional[str] = None
    order_date: Optional[datetime] = None
    created_at: Optional[datetime] = None


# Payments

class CheckoutRequest(BaseModel):
    order_id: str
    book_id: Optional[str] = None
    book_title: str
    amount: float = Field(gt=0)                    # major units
    customer_email: str
    customer_phone: Optional[str] = None
    currency: Optional[str] = None


class PaymentOut(ORMModel):
    id: str
    amount: Optional[float] = None
    currency: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    order_id: Optional[str] = None
    book_id: Optional[str] = None
    book_title: Optional[str] = None
    transaction_id: str
    payment_status: Optional[str] = None
    tracking_id: Optional[str] = None
    payment_date: Optional[datetime] = None


class PaymentConfirmation(BaseModel):
    success: bool
    message: Optional[str] = None
    tracking_id: str
    transaction_id: str


# Sellers

class SellerCreate(BaseModel):
    email: str
    name: Optional[str] = None
    phone: Optional[str] = None
    shop_name: Optional[str] = None
    address: Optional[str] = None


class SellerUpdate(PatchModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    shop_name: Optional[str] = None
    address: Optional[str] = None
    status: Optional[str] = None


class SellerOut(ORMModel):
    id: str
    email: str
    name: Optional[str] = None
    phone: Optional[str] = None
    shop_name: Optional[str] = None
    address: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None


# Wishlist

class WishlistCreate(BaseModel):
    book_id: str
    book_title: Optional[str] = None


class WishlistOut(ORMModel):
    id: str
    email: str
    book_id: str
    book_title: Optional[str] = None
    created_at: Optional[datetime] = None
