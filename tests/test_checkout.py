import re
from datetime import datetime

import pytest
import stripe

from bookcourier.checkout import (
    PaymentNotCompleted,
    confirm_payment,
    generate_tracking_id,
    record_checkout_session,
)
from bookcourier.models import Order, Payment
from conftest import make_session, session_data

TRACKING_ID = re.compile(r"BC-\d{8}-[0-9A-F]{8}")


def test_tracking_id_format():
    tracking_id = generate_tracking_id(datetime(2024, 1, 15, 10, 30))

    assert TRACKING_ID.fullmatch(tracking_id)
    assert tracking_id.startswith("BC-20240115-")


def test_tracking_id_uses_today_by_default(mocker):
    clock = mocker.patch("bookcourier.checkout.datetime")
    clock.now.return_value = datetime(2024, 12, 31, 23, 59, 59)

    tracking_id = generate_tracking_id()

    assert TRACKING_ID.fullmatch(tracking_id)
    assert tracking_id.startswith("BC-20241231-")


def test_tracking_ids_differ():
    assert generate_tracking_id() != generate_tracking_id()


def test_paid_session_records_payment_and_marks_order(db, order, mocker):
    mocker.patch("stripe.checkout.Session.retrieve",
                 return_value=make_session(order.id))

    result = confirm_payment(db, "cs_test_123")

    assert result["success"] is True
    assert result["transaction_id"] == "pi_123"
    assert TRACKING_ID.fullmatch(result["tracking_id"])

    payments = db.query(Payment).filter_by(transaction_id="pi_123").all()
    assert len(payments) == 1
    assert payments[0].amount == 5
    assert payments[0].customer_email == "buyer@example.com"
    assert payments[0].order_id == order.id
    assert payments[0].customer_phone == "+8801700000000"
    assert payments[0].tracking_id == result["tracking_id"]

    db.refresh(order)
    assert order.payment_status == "paid"
    assert order.tracking_id == result["tracking_id"]


def test_confirming_twice_returns_same_tracking_id(db, order, mocker):
    retrieve = mocker.patch("stripe.checkout.Session.retrieve",
                            return_value=make_session(order.id))

    first = confirm_payment(db, "cs_test_123")
    second = confirm_payment(db, "cs_test_123")

    assert retrieve.call_count == 2
    assert second["success"] is True
    assert second["message"] == "Payment already recorded"
    assert second["tracking_id"] == first["tracking_id"]
    assert second["transaction_id"] == first["transaction_id"]
    assert db.query(Payment).filter_by(transaction_id="pi_123").count() == 1

    db.refresh(order)
    assert order.tracking_id == first["tracking_id"]


def test_unpaid_session_changes_nothing(db, order, mocker):
    mocker.patch("stripe.checkout.Session.retrieve",
                 return_value=make_session(order.id, payment_status="unpaid"))

    with pytest.raises(PaymentNotCompleted):
        confirm_payment(db, "cs_test_123")

    assert db.query(Payment).count() == 0
    db.refresh(order)
    assert order.payment_status == "unpaid"
    assert order.tracking_id is None


def test_recorded_transaction_short_circuits_even_if_session_unpaid(db, order):
    db.add(Payment(transaction_id="pi_123", tracking_id="BC-20240115-A1B2C3D4",
                   payment_status="paid", order_id=order.id))
    db.commit()

    result = record_checkout_session(db, session_data(order.id, payment_status="unpaid"))

    assert result["tracking_id"] == "BC-20240115-A1B2C3D4"


def test_unknown_order_still_records_payment(db, order):
    result = record_checkout_session(db, session_data("no-such-order"))

    assert result["success"] is True
    assert db.query(Payment).filter_by(order_id="no-such-order").count() == 1
    db.refresh(order)
    assert order.payment_status == "unpaid"


def test_concurrent_confirmation_keeps_first_record(db, order, mocker):
    db.add(Payment(transaction_id="pi_race", tracking_id="BC-20240115-AAAAAAAA",
                   payment_status="paid", order_id=order.id))
    db.commit()
    winner = db.query(Payment).filter_by(transaction_id="pi_race").one()

    # Both lookups race past each other: the first sees nothing yet.
    mocker.patch("bookcourier.checkout._find_payment", side_effect=[None, winner])

    result = record_checkout_session(db, session_data(order.id, transaction_id="pi_race"))

    assert result["tracking_id"] == "BC-20240115-AAAAAAAA"
    assert db.query(Payment).filter_by(transaction_id="pi_race").count() == 1
    # The losing order update was rolled back with the insert
    order = db.get(Order, order.id)
    assert order.tracking_id is None


def test_gateway_error_propagates(db, order, mocker):
    mocker.patch("stripe.checkout.Session.retrieve",
                 side_effect=stripe.InvalidRequestError("No such checkout.session", "id"))

    with pytest.raises(stripe.InvalidRequestError):
        confirm_payment(db, "cs_missing")

    assert db.query(Payment).count() == 0
