import logging

import stripe
from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from bookcourier import config
from bookcourier.checkout import PaymentNotCompleted, record_checkout_session
from bookcourier.database import Base, engine, get_db
from bookcourier.routes import router
from bookcourier.stripe_service import construct_webhook_event

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

PAID_SESSION_EVENTS = (
    "checkout.session.completed",
    "checkout.session.async_payment_succeeded",
)

app = FastAPI(title="Book Courier API")

app.include_router(router)

Base.metadata.create_all(bind=engine)


@app.get("/", response_class=PlainTextResponse)
def root():
    return "Server Running Successfully"


@app.post("/webhook")
async def stripe_webhook(
    request: Request,
    stripe_signature: str = Header(None),
    db: Session = Depends(get_db),
):
    payload = await request.body()

    try:
        event = construct_webhook_event(payload, stripe_signature)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid payload")
    except stripe.SignatureVerificationError:
        raise HTTPException(status_code=400, detail="Invalid signature")

    logger.info("Received Stripe event %s", event["type"])

    if event["type"] in PAID_SESSION_EVENTS:
        session = event["data"]["object"].to_dict()
        try:
            record_checkout_session(db, session)
        except PaymentNotCompleted:
            # Delayed payment methods complete later via a second event.
            logger.info("Checkout session %s completed without payment", session["id"])

    return {"ok": True}
