"""
Stripe service for checkout, subscription status and webhook handling.
"""
import json
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional
import stripe
from sqlalchemy.orm import Session

from app.core.config import (
    STRIPE_SECRET_KEY,
    STRIPE_WEBHOOK_SECRET,
    STRIPE_API_VERSION,
    FRONTEND_URL,
)
from app.core.errors import PaymentConfigError, PaymentProviderError, WebhookVerificationError
from app.core.plan_limits import TIER_FREE, TIER_PREMIUM
from app.db.models.user import User
from app.db.models.payment import Payment
from app.services import billing_service
from app.services.currency_service import from_minor_units

logger = logging.getLogger(__name__)

# Initialize Stripe client
if STRIPE_SECRET_KEY:
    stripe.api_key = STRIPE_SECRET_KEY
    stripe.api_version = STRIPE_API_VERSION
else:
    logger.warning("STRIPE_SECRET_KEY not configured - Stripe features disabled")


def _require_stripe():
    if not stripe.api_key:
        raise PaymentConfigError("Stripe secret key not configured")


def _get(obj: Any, key: str, default: Any = None) -> Any:
    """Read a field from a Stripe object or a plain dict."""
    if obj is None:
        return default
    try:
        value = obj[key]
    except (KeyError, TypeError, IndexError):
        return default
    return default if value is None else value


def _first(collection: Any) -> Optional[Any]:
    data = _get(collection, "data", [])
    return data[0] if data else None


def find_customer_id(email: Optional[str]) -> Optional[str]:
    """Id of the Stripe customer with this email, if any."""
    if not email:
        return None
    customer = _first(stripe.Customer.list(email=email, limit=1))
    return _get(customer, "id")


def tier_for_unit_amount(unit_amount: Optional[int]) -> str:
    """Marketing tier name for a price, in minor units."""
    amount = unit_amount or 0
    if amount <= 999:
        return "basic"
    if amount <= 2999:
        return "premium"
    return "enterprise"


def create_checkout_session(
    db: Session,
    user: User,
    price_id: str,
    subscription_type: str,
    origin: Optional[str] = None,
) -> dict:
    """
    Create a Stripe Checkout session for the premium subscription.

    An existing Stripe customer with the user's email is reused; otherwise
    Stripe creates one from customer_email. A pending payment row keyed by
    the session id is recorded for the webhook to complete.

    Returns:
        Dictionary with 'url' and 'session_id'
    """
    _require_stripe()
    base_url = (origin or FRONTEND_URL).rstrip("/")

    try:
        customer_id = user.stripe_customer_id or find_customer_id(user.email)
        session = stripe.checkout.Session.create(
            customer=customer_id or None,
            customer_email=None if customer_id else user.email,
            line_items=[{
                "price": price_id,
                "quantity": 1,
            }],
            mode="subscription",
            success_url=f"{base_url}/dashboard?success=true",
            cancel_url=f"{base_url}/dashboard?canceled=true",
            metadata={
                "user_id": str(user.id),
                "subscription_type": subscription_type,
            },
        )
    except stripe.StripeError as e:
        logger.error(f"Stripe error creating checkout session: {e}")
        raise PaymentProviderError(f"Failed to create checkout session: {e}")

    session_id = _get(session, "id")
    logger.info(f"Created checkout session for user_id={user.id}, session_id={session_id}")

    if customer_id and not user.stripe_customer_id:
        user.stripe_customer_id = customer_id
        db.commit()

    # Amount is filled in by the webhook
    billing_service.record_payment(
        db,
        provider="stripe",
        user_id=user.id,
        stripe_session_id=session_id,
        amount=Decimal(0),
        currency="USD",
        status="pending",
        subscription_type=subscription_type,
    )
    return {"url": _get(session, "url"), "session_id": session_id}


def verify_webhook(request_body: bytes, signature: Optional[str]) -> Dict:
    """
    Verify a Stripe webhook and return the event as a plain dict.

    Raises:
        WebhookVerificationError: If the secret is missing, the header is
            absent, the payload is malformed or the signature is invalid
    """
    if not STRIPE_WEBHOOK_SECRET:
        raise WebhookVerificationError("STRIPE_WEBHOOK_SECRET not configured")
    if not signature:
        raise WebhookVerificationError("Missing Stripe-Signature header")

    try:
        stripe.Webhook.construct_event(request_body, signature, STRIPE_WEBHOOK_SECRET)
    except ValueError as e:
        logger.error(f"Invalid webhook payload: {e}")
        raise WebhookVerificationError(f"Invalid webhook payload: {e}")
    except stripe.SignatureVerificationError as e:
        logger.error(f"Webhook signature verification failed: {e}")
        raise WebhookVerificationError(f"Invalid signature: {e}")

    event = json.loads(request_body)
    logger.info(f"Verified webhook event: {event.get('type')}, id={event.get('id')}")
    return event


def handle_checkout_session_completed(db: Session, session: Dict) -> Optional[Payment]:
    """
    Complete the payment for a subscription checkout and upgrade its user.

    One-off payment sessions are ignored.
    """
    if session.get("mode") != "subscription":
        logger.info(f"Ignoring non-subscription checkout session: {session.get('id')}")
        return None

    metadata = session.get("metadata") or {}
    user_id = int(metadata["user_id"]) if metadata.get("user_id") else None

    amount = Decimal(0)
    currency = "USD"
    subscription_id = session.get("subscription")
    if subscription_id:
        try:
            subscription = stripe.Subscription.retrieve(subscription_id)
        except stripe.StripeError as e:
            logger.error(f"Stripe error retrieving subscription {subscription_id}: {e}")
            raise PaymentProviderError(f"Failed to retrieve subscription: {e}")
        price = _get(_first(_get(subscription, "items")), "price")
        currency = str(_get(subscription, "currency", "usd")).upper()
        amount = from_minor_units(_get(price, "unit_amount", 0), currency)

    payment = db.query(Payment).filter(Payment.stripe_session_id == session.get("id")).first()
    if payment is None:
        payment = Payment(provider="stripe", stripe_session_id=session.get("id"))
        db.add(payment)

    payment.user_id = payment.user_id or user_id
    payment.amount = amount
    payment.currency = currency
    payment.status = "completed"
    payment.subscription_type = metadata.get("subscription_type") or payment.subscription_type or "monthly"
    db.commit()
    db.refresh(payment)

    if payment.user_id:
        user = billing_service.upgrade_user_subscription(db, payment.user_id, TIER_PREMIUM)
        customer_id = session.get("customer")
        if customer_id and not user.stripe_customer_id:
            user.stripe_customer_id = customer_id
            db.commit()

    logger.info(f"Checkout completed: session_id={session.get('id')}, user_id={payment.user_id}, amount={amount} {currency}")
    return payment


def handle_subscription_deleted(db: Session, subscription: Dict) -> Optional[User]:
    """Downgrade the user behind a cancelled Stripe subscription."""
    customer_id = subscription.get("customer")
    user = None
    if customer_id:
        user = db.query(User).filter(User.stripe_customer_id == customer_id).first()
        if user is None:
            try:
                customer = stripe.Customer.retrieve(customer_id)
            except stripe.StripeError as e:
                logger.error(f"Stripe error retrieving customer {customer_id}: {e}")
                raise PaymentProviderError(f"Failed to retrieve customer: {e}")
            user = billing_service.find_user_by_email(db, _get(customer, "email"))

    if user is None:
        logger.warning(f"No user found for deleted subscription: subscription_id={subscription.get('id')}, customer_id={customer_id}")
        return None

    logger.info(f"Subscription deleted: subscription_id={subscription.get('id')}, user_id={user.id}")
    return billing_service.upgrade_user_subscription(db, user.id, TIER_FREE)


def handle_event(db: Session, event: Dict) -> None:
    event_type = event.get("type")
    obj = (event.get("data") or {}).get("object") or {}

    try:
        if event_type == "checkout.session.completed":
            handle_checkout_session_completed(db, obj)
        elif event_type == "customer.subscription.deleted":
            handle_subscription_deleted(db, obj)
        else:
            logger.info(f"Unhandled event type: {event_type}")
    except PaymentProviderError:
        logger.error(f"Stripe lookup failed while handling event: id={event.get('id')}, type={event_type}")
        raise


def check_subscription(db: Session, user: User) -> dict:
    """
    Ask Stripe whether the user has an active subscription and sync their tier.

    Returns:
        Dictionary with 'subscribed', 'subscription_tier' and 'subscription_end'
    """
    _require_stripe()

    try:
        customer_id = user.stripe_customer_id or find_customer_id(user.email)
        if not customer_id:
            return {"subscribed": False, "subscription_tier": None, "subscription_end": None}

        subscription = _first(stripe.Subscription.list(customer=customer_id, status="active", limit=1))
    except stripe.StripeError as e:
        logger.error(f"Stripe error checking subscription: {e}")
        raise PaymentProviderError(f"Failed to check subscription: {e}")

    if subscription is None:
        billing_service.upgrade_user_subscription(db, user.id, TIER_FREE)
        return {"subscribed": False, "subscription_tier": None, "subscription_end": None}

    item = _first(_get(subscription, "items"))
    # Newer API versions moved the period end onto the subscription item
    period_end = _get(subscription, "current_period_end") or _get(item, "current_period_end")
    subscription_end = (
        datetime.fromtimestamp(period_end, tz=timezone.utc).isoformat() if period_end else None
    )

    billing_service.upgrade_user_subscription(db, user.id, TIER_PREMIUM)
    return {
        "subscribed": True,
        "subscription_tier": tier_for_unit_amount(_get(_get(item, "price"), "unit_amount")),
        "subscription_end": subscription_end,
    }
