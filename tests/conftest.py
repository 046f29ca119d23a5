import pytest
import stripe
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from bookcourier.main import app as fastapi_app
from bookcourier.auth import verify_token
from bookcourier.database import Base, get_db
from bookcourier.models import Order, User

CALLER_EMAIL = "buyer@example.com"

# Setup test database
SQLALCHEMY_DATABASE_URL = "sqlite:///./test_temp.db"
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={
                       "check_same_thread": False})
TestingSessionLocal = sessionmaker(
    autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db():
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture
def client():
    fastapi_app.dependency_overrides[get_db] = override_get_db
    # Every request is made by CALLER_EMAIL
    fastapi_app.dependency_overrides[verify_token] = lambda: CALLER_EMAIL
    with TestClient(fastapi_app) as c:
        yield c
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def admin(db):
    user = User(email=CALLER_EMAIL, display_name="Admin", role="admin")
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def order(db):
    o = Order(email=CALLER_EMAIL, book_id="book-1", book_title="Dune",
              seller_email="seller@example.com", price=5.0)
    db.add(o)
    db.commit()
    db.refresh(o)
    return o


def session_data(order_id, transaction_id="pi_123", payment_status="paid",
                 session_id="cs_test_123", amount_total=500):
    """Checkout Session fields as a plain dict."""
    return {
        "object": "checkout.session",
        "id": session_id,
        "payment_intent": transaction_id,
        "payment_status": payment_status,
        "amount_total": amount_total,
        "currency": "bdt",
        "customer_email": CALLER_EMAIL,
        "customer_details": {"email": CALLER_EMAIL, "phone": None},
        "metadata": {
            "orderId": order_id,
            "bookId": "book-1",
            "bookTitle": "Dune",
            "customerPhone": "+8801700000000",
        },
    }


def make_session(order_id, **kwargs):
    """A Stripe Checkout Session object as returned by Session.retrieve."""
    return stripe.checkout.Session.construct_from(session_data(order_id, **kwargs), "sk_test")


def make_event(event_type, obj):
    return stripe.Event.construct_from(
        {"id": "evt_test", "object": "event", "type": event_type, "data": {"object": obj}},
        "sk_test",
    )
