import stripe

from bookcourier import config

stripe.api_key = config.STRIPE_SECRET_KEY


def create_checkout_session(amount: int, currency: str, book_title: str,
                            customer_email: str, metadata: dict):
    return stripe.checkout.Session.create(
        line_items=[
            {
                "price_data": {
                    "currency": currency,
                    "product_data": {"name": f"Order Payment for this book: {book_title}"},
                    "unit_amount": amount,
                },
                "quantity": 1,
            }
        ],
        customer_email=customer_email,
        mode="payment",
        metadata=metadata,
        success_url=f"{config.SITE_DOMAIN}/dashboard/payment-success?session_id={{CHECKOUT_SESSION_ID}}",
        cancel_url=f"{config.SITE_DOMAIN}/dashboard/payment-cancelled",
    )


def retrieve_checkout_session(session_id: str) -> dict:
    return stripe.checkout.Session.retrieve(session_id).to_dict()


def construct_webhook_event(payload: bytes, signature: str):
    return stripe.Webhook.construct_event(payload, signature, config.STRIPE_WEBHOOK_SECRET)
