"""Payment confirmation for Stripe Checkout sessions.

A confirmation records a paid session exactly once per transaction
(the session's PaymentIntent), marks the linked order as paid and hands
back a tracking id. Repeated confirmations of the same transaction
answer with the tracking id stored the first time.
"""
import logging
import secrets
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bookcourier.models import Order, Payment
from bookcourier.stripe_service import retrieve_checkout_session

logger = logging.getLogger(__name__)

TRACKING_PREFIX = "BC"


class PaymentNotCompleted(Exception):
    def __init__(self, session_id: str, payment_status: Optional[str]):
        super().__init__(f"Checkout session {session_id} is {payment_status!r}, not paid")
        self.session_id = session_id
        self.payment_status = payment_status


def generate_tracking_id(now: Optional[datetime] = None) -> str:
    """Return an id like ``BC-20240115-A1B2C3D4``."""
    now = now or datetime.now()
    return f"{TRACKING_PREFIX}-{now:%Y%m%d}-{secrets.token_hex(4).upper()}"


def _find_payment(db: Session, transaction_id: str) -> Optional[Payment]:
    return db.query(Payment).filter_by(transaction_id=transaction_id).first()


def _already_recorded(payment: Payment) -> dict:
    return {
        "success": True,
        "message": "Payment already recorded",
        "tracking_id": payment.tracking_id,
        "transaction_id": payment.transaction_id,
    }


def record_checkout_session(db: Session, session: dict) -> dict:
    """Record a checkout session (as a plain dict); raises PaymentNotCompleted if unpaid."""
    transaction_id = session["payment_intent"]

    existing = _find_payment(db, transaction_id)
    if existing:
        logger.info("Payment %s already recorded as %s", transaction_id, existing.tracking_id)
        return _already_recorded(existing)

    if session["payment_status"] != "paid":
        logger.info("Checkout session %s not paid (%s)", session["id"], session["payment_status"])
        raise PaymentNotCompleted(session["id"], session["payment_status"])

    metadata = session.get("metadata") or {}
    customer_details = session.get("customer_details") or {}
    order_id = metadata.get("orderId")
    amount_total = session.get("amount_total")
    tracking_id = generate_tracking_id()

    # Unknown order ids match nothing; the payment is still recorded.
    db.query(Order).filter_by(id=order_id).update(
        {"payment_status": "paid", "tracking_id": tracking_id}
    )
    db.add(Payment(
        amount=amount_total / 100 if amount_total is not None else None,
        currency=session.get("currency"),
        customer_email=session.get("customer_email") or customer_details.get("email"),
        customer_phone=metadata.get("customerPhone"),
        order_id=order_id,
        book_id=metadata.get("bookId"),
        book_title=metadata.get("bookTitle"),
        transaction_id=transaction_id,
        payment_status=session["payment_status"],
        tracking_id=tracking_id,
    ))

    try:
        db.commit()
    except IntegrityError:
        # A concurrent confirmation inserted this transaction first.
        db.rollback()
        winner = _find_payment(db, transaction_id)
        if winner is None:
            raise
        logger.warning("Lost race recording payment %s; using %s", transaction_id, winner.tracking_id)
        return _already_recorded(winner)

    logger.info("Recorded payment %s for order %s as %s", transaction_id, order_id, tracking_id)
    return {
        "success": True,
        "tracking_id": tracking_id,
        "transaction_id": transaction_id,
    }


def confirm_payment(db: Session, session_id: str) -> dict:
    session = retrieve_checkout_session(session_id)
    return record_checkout_session(db, session)
