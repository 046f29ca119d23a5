import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Integer, Float, Text, DateTime, UniqueConstraint
from bookcourier.database import Base


def new_id():
    return uuid.uuid4().hex


def utcnow():
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=new_id)
    email = Column(String, unique=True, index=True, nullable=False)
    display_name = Column(String)
    photo_url = Column(String)
    role = Column(String, default="user")          # user | seller | admin
    created_at = Column(DateTime, default=utcnow)


class Book(Base):
    __tablename__ = "books"

    id = Column(String, primary_key=True, default=new_id)
    title = Column(String, nullable=False)
    author = Column(String)
    description = Column(Text)
    image_url = Column(String)
    category = Column(String)
    condition = Column(String)
    price = Column(Float)
    quantity = Column(Integer, default=1)
    status = Column(String, default="published")
    seller_email = Column(String, index=True)
    seller_name = Column(String)
    created_at = Column(DateTime, default=utcnow)


class Order(Base):
    __tablename__ = "orders"

    id = Column(String, primary_key=True, default=new_id)
    email = Column(String, index=True)             # buyer
    customer_name = Column(String)
    customer_phone = Column(String)
    address = Column(Text)
    book_id = Column(String, index=True)
    book_title = Column(String)
    seller_email = Column(String, index=True)
    price = Column(Float)
    quantity = Column(Integer, default=1)
    status = Column(String, default="pending")     # pending | shipped | delivered | cancelled
    payment_status = Column(String, default="unpaid")  # unpaid | paid
    tracking_id = Column(String)
    order_date = Column(DateTime, default=utcnow)
    created_at = Column(DateTime, default=utcnow)


class Payment(Base):
    __tablename__ = "payments"

    id = Column(String, primary_key=True, default=new_id)
    amount = Column(Float)                         # major units (amount_total / 100)
    currency = Column(String)
    customer_email = Column(String, index=True)
    customer_phone = Column(String)
    order_id = Column(String, index=True)
    book_id = Column(String)
    book_title = Column(String)
    transaction_id = Column(String, unique=True, index=True)  # Stripe PaymentIntent ID
    payment_status = Column(String)
    tracking_id = Column(String)
    payment_date = Column(DateTime, default=utcnow)


class Seller(Base):
    __tablename__ = "sellers"

    id = Column(String, primary_key=True, default=new_id)
    email = Column(String, index=True, nullable=False)
    name = Column(String)
    phone = Column(String)
    shop_name = Column(String)
    address = Column(Text)
    status = Column(String, default="pending")     # pending | approved | rejected
    created_at = Column(DateTime, default=utcnow)


class WishlistItem(Base):
    __tablename__ = "wishlist"
    __table_args__ = (UniqueConstraint("email", "book_id"),)

    id = Column(String, primary_key=True, default=new_id)
    email = Column(String, index=True, nullable=False)
    book_id = Column(String, nullable=False)
    book_title = Column(String)
    created_at = Column(DateTime, default=utcnow)
