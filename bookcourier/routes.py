import logging
from typing import List, Optional

import stripe
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session

from bookcourier import config
from bookcourier.auth import verify_admin, verify_token
from bookcourier.checkout import PaymentNotCompleted, confirm_payment
from bookcourier.crud import delete_one, insert_one, paginate, update_one
from bookcourier.database import get_db
from bookcourier.models import Book, Order, Payment, Seller, User, WishlistItem
from bookcourier.schemas import (
    BookCreate, BookOut, BookUpdate,
    CheckoutRequest, PaymentConfirmation, PaymentOut,
    OrderCreate, OrderOut, OrderUpdate,
    SellerCreate, SellerOut, SellerUpdate,
    UserCreate, UserOut, UserRoleUpdate, UserUpdate,
    WishlistCreate, WishlistOut,
)
from bookcourier.stripe_service import create_checkout_session

logger = logging.getLogger(__name__)

router = APIRouter()


def get_or_404(db: Session, model, id: str):
    obj = db.get(model, id)
    if obj is None:
        raise HTTPException(status_code=404, detail=f"{model.__name__} not found")
    return obj


# ---------------------------------------------------------------- users

@router.get("/users", response_model=List[UserOut])
def list_users(
    search_text: Optional[str] = None,
    db: Session = Depends(get_db),
    admin=Depends(verify_admin),
):
    query = db.query(User)
    if search_text:
        query = query.filter(or_(
            User.display_name.icontains(search_text, autoescape=True),
            User.email.icontains(search_text, autoescape=True),
        ))
    return query.order_by(User.created_at.desc()).all()


@router.post("/users")
def create_user(user: UserCreate, db: Session = Depends(get_db)):
    existing = db.query(User).filter_by(email=user.email).first()
    if existing:
        return {"exists": True, "user_id": existing.id}

    return insert_one(db, User(**user.model_dump(), role="user"))


@router.get("/users/{user_id}", response_model=UserOut)
def get_user(user_id: str, db: Session = Depends(get_db)):
    return get_or_404(db, User, user_id)


@router.patch("/users/{user_id}")
def update_user(
    user_id: str,
    changes: UserUpdate,
    db: Session = Depends(get_db),
    email: str = Depends(verify_token),
):
    user = db.get(User, user_id)
    if user is not None and user.email != email:
        raise HTTPException(status_code=403, detail="Forbidden access")
    return update_one(db, User, changes.model_dump(exclude_unset=True), id=user_id)


@router.patch("/users/{user_id}/role")
def update_user_role(
    user_id: str,
    changes: UserRoleUpdate,
    db: Session = Depends(get_db),
    admin=Depends(verify_admin),
):
    result = update_one(db, User, {"role": changes.role}, id=user_id)
    logger.info("Set role of user %s to %s", user_id, changes.role)
    return result


@router.delete("/users/{user_id}")
def delete_user(user_id: str, db: Session = Depends(get_db)):
    return delete_one(db, User, id=user_id)


@router.get("/users/{email}/role")
def get_user_role(email: str, db: Session = Depends(get_db)):
    user = db.query(User).filter_by(email=email).first()
    return {"role": user.role if user and user.role else "user"}


# ---------------------------------------------------------------- books

@router.post("/books")
def create_book(book: BookCreate, db: Session = Depends(get_db)):
    return insert_one(db, Book(**book.model_dump()))


@router.get("/books", response_model=List[BookOut])
def list_books(
    seller_email: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=100),
    db: Session = Depends(get_db),
):
    query = db.query(Book)
    if seller_email:
        query = query.filter_by(seller_email=seller_email)
    query = query.order_by(Book.created_at.desc())
    return paginate(query, page, limit).all()


@router.get("/books/{book_id}", response_model=BookOut)
def get_book(book_id: str, db: Session = Depends(get_db)):
    return get_or_404(db, Book, book_id)


@router.patch("/books/{book_id}")
def update_book(book_id: str, changes: BookUpdate, db: Session = Depends(get_db)):
    return update_one(db, Book, changes.model_dump(exclude_unset=True), id=book_id)


@router.delete("/books/{book_id}")
def delete_book(book_id: str, db: Session = Depends(get_db)):
    return delete_one(db, Book, id=book_id)


# ---------------------------------------------------------------- orders

@router.post("/orders")
def create_order(order: OrderCreate, db: Session = Depends(get_db)):
    values = order.model_dump(exclude_none=True)
    return insert_one(db, Order(**values, status="pending", payment_status="unpaid"))


@router.get("/orders", response_model=List[OrderOut])
def list_orders(
    email: Optional[str] = None,
    db: Session = Depends(get_db),
    caller: str = Depends(verify_token),
):
    query = db.query(Order)
    if email:
        query = query.filter_by(email=email)
    return query.order_by(Order.order_date.desc()).all()


@router.get("/orders/{order_id}", response_model=OrderOut)
def get_order(order_id: str, db: Session = Depends(get_db)):
    return get_or_404(db, Order, order_id)


@router.patch("/orders/{order_id}")
def update_order(order_id: str, changes: OrderUpdate, db: Session = Depends(get_db)):
    return update_one(db, Order, changes.model_dump(exclude_unset=True), id=order_id)


@router.delete("/orders/{order_id}")
def delete_order(order_id: str, db: Session = Depends(get_db)):
    return delete_one(db, Order, id=order_id)


@router.get("/seller-orders", response_model=List[OrderOut])
def list_seller_orders(
    search: Optional[str] = None,
    status: Optional[str] = None,
    seller_email: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=100),
    db: Session = Depends(get_db),
):
    query = db.query(Order)
    if status and status != "all":
        query = query.filter(Order.status == status)
    else:
        query = query.filter(Order.status != "cancelled")
    if seller_email:
        query = query.filter_by(seller_email=seller_email)
    if search:
        query = query.filter(or_(
            Order.book_title.icontains(search, autoescape=True),
            Order.email.icontains(search, autoescape=True),
            Order.id.icontains(search, autoescape=True),
        ))
    query = query.order_by(Order.created_at.desc())
    return paginate(query, page, limit).all()


# ---------------------------------------------------------------- payments

@router.get("/payments", response_model=List[PaymentOut])
def list_payments(
    email: Optional[str] = None,
    db: Session = Depends(get_db),
    caller: str = Depends(verify_token),
):
    query = db.query(Payment)
    if email:
        if email != caller:
            raise HTTPException(status_code=403, detail="Forbidden access")
        query = query.filter_by(customer_email=email)
    return query.order_by(Payment.payment_date.desc()).all()


@router.post("/payment-checkout-session")
def create_checkout(request: CheckoutRequest):
    metadata = {
        "orderId": request.order_id,
        "bookId": request.book_id,
        "bookTitle": request.book_title,
        "customerPhone": request.customer_phone,
    }
    try:
        session = create_checkout_session(
            amount=round(request.amount * 100),
            currency=request.currency or config.CHECKOUT_CURRENCY,
            book_title=request.book_title,
            customer_email=request.customer_email,
            metadata={k: v for k, v in metadata.items() if v is not None},
        )
    except stripe.StripeError as exc:
        logger.error("Checkout session creation failed for order %s: %s", request.order_id, exc)
        raise HTTPException(status_code=502, detail="Payment processing error")

    logger.info("Created checkout session %s for order %s", session.id, request.order_id)
    return {"url": session.url}


@router.patch("/payment-success", response_model=PaymentConfirmation, response_model_exclude_none=True)
def payment_success(session_id: str, db: Session = Depends(get_db)):
    try:
        return confirm_payment(db, session_id)
    except PaymentNotCompleted:
        raise HTTPException(status_code=400, detail="Payment not completed")
    except stripe.StripeError as exc:
        logger.error("Could not retrieve checkout session %s: %s", session_id, exc)
        raise HTTPException(status_code=502, detail="Payment processing error")


# ---------------------------------------------------------------- sellers

@router.get("/sellers", response_model=List[SellerOut])
def list_sellers(
    status: Optional[str] = None,
    email: Optional[str] = None,
    db: Session = Depends(get_db),
    caller: str = Depends(verify_token),
):
    query = db.query(Seller)
    if status:
        query = query.filter_by(status=status)
    if email:
        query = query.filter_by(email=email)
    return query.all()


@router.post("/sellers")
def apply_as_seller(seller: SellerCreate, db: Session = Depends(get_db)):
    return insert_one(db, Seller(**seller.model_dump(), status="pending"))


@router.patch("/sellers/{seller_id}")
def update_seller(
    seller_id: str,
    changes: SellerUpdate,
    db: Session = Depends(get_db),
    admin=Depends(verify_admin),
):
    values = changes.model_dump(exclude_unset=True)
    result = update_one(db, Seller, values, id=seller_id)

    if result["matched_count"] and values.get("status") == "approved":
        seller = db.get(Seller, seller_id)
        update_one(db, User, {"role": "seller"}, email=seller.email)
        logger.info("Approved seller %s", seller.email)
    return result


# ---------------------------------------------------------------- wishlist

@router.get("/wishlist", response_model=List[WishlistOut])
def list_wishlist(
    email: Optional[str] = None,
    db: Session = Depends(get_db),
    caller: str = Depends(verify_token),
):
    if email and email != caller:
        raise HTTPException(status_code=403, detail="Forbidden access")
    return (
        db.query(WishlistItem)
        .filter_by(email=caller)
        .order_by(WishlistItem.created_at.desc())
        .all()
    )


@router.post("/wishlist")
def add_to_wishlist(
    item: WishlistCreate,
    db: Session = Depends(get_db),
    caller: str = Depends(verify_token),
):
    existing = db.query(WishlistItem).filter_by(email=caller, book_id=item.book_id).first()
    if existing:
        return {"exists": True, "inserted_id": existing.id}

    return insert_one(db, WishlistItem(email=caller, **item.model_dump()))


@router.delete("/wishlist/{item_id}")
def remove_from_wishlist(
    item_id: str,
    db: Session = Depends(get_db),
    caller: str = Depends(verify_token),
):
    return delete_one(db, WishlistItem, id=item_id, email=caller)
