"""
Lemon Squeezy checkout creation and webhook processing.
"""
import hashlib
import hmac
import logging
from typing import Dict, Optional
from sqlalchemy.orm import Session

import httpx

from app.core.config import (
    LEMON_SQUEEZY_API_KEY,
    LEMON_SQUEEZY_STORE_ID,
    LEMON_SQUEEZY_WEBHOOK_SECRET,
    LEMON_SQUEEZY_API_URL,
    HTTP_TIMEOUT_SECONDS,
)
from app.core.errors import PaymentConfigError, PaymentProviderError, WebhookVerificationError
from app.core.logging_config import sanitize_log_data
from app.core.plan_limits import TIER_PREMIUM
from app.db.models.payment import Payment
from app.services import billing_service
from app.services.currency_service import from_minor_units

logger = logging.getLogger(__name__)

JSON_API = "application/vnd.api+json"


def build_checkout_payload(variant_id: str, custom_data: Optional[Dict] = None) -> Dict:
    """JSON:API document for POST /v1/checkouts."""
    return {
        "data": {
            "type": "checkouts",
            "attributes": {
                "custom_price": None,
                "product_options": {
                    "enabled_variants": [int(variant_id)] if str(variant_id).isdigit() else [variant_id],
                },
                "checkout_options": {
                    "embed": False,
                    "media": False,
                    "logo": True,
                },
                "checkout_data": {"custom": custom_data or {}},
                "expires_at": None,
            },
            "relationships": {
                "store": {
                    "data": {"type": "stores", "id": str(LEMON_SQUEEZY_STORE_ID)},
                },
                "variant": {
                    "data": {"type": "variants", "id": str(variant_id)},
                },
            },
        },
    }


def create_checkout(variant_id: str, custom_data: Optional[Dict] = None) -> Dict:
    """
    Create a hosted Lemon Squeezy checkout.

    Returns:
        The checkout resource ("data" member of the API response)

    Raises:
        PaymentConfigError: If the API key or store id is missing
        PaymentProviderError: If Lemon Squeezy rejects the request or is unreachable
    """
    if not LEMON_SQUEEZY_API_KEY or not LEMON_SQUEEZY_STORE_ID:
        logger.error("Lemon Squeezy API key or store id missing")
        raise PaymentConfigError("Lemon Squeezy API key not configured")

    payload = build_checkout_payload(variant_id, custom_data)
    logger.info(f"Creating Lemon Squeezy checkout: variant_id={variant_id}, custom_data={sanitize_log_data(custom_data or {})}")

    try:
        response = httpx.post(
            f"{LEMON_SQUEEZY_API_URL}/checkouts",
            json=payload,
            headers={
                "Authorization": f"Bearer {LEMON_SQUEEZY_API_KEY}",
                "Accept": JSON_API,
                "Content-Type": JSON_API,
            },
            timeout=HTTP_TIMEOUT_SECONDS,
        )
    except httpx.HTTPError as e:
        logger.error(f"Lemon Squeezy request failed: {e}")
        raise PaymentProviderError(f"Lemon Squeezy unreachable: {e}")

    if response.status_code >= 400:
        logger.error(f"Lemon Squeezy API error: {response.status_code} - {response.text}")
        raise PaymentProviderError(
            f"Lemon Squeezy API error: {response.status_code} - {response.text}",
            status_code=response.status_code,
        )

    checkout = response.json()["data"]
    logger.info(f"Created Lemon Squeezy checkout: checkout_id={checkout.get('id')}")
    return checkout


def verify_webhook_signature(body: bytes, signature: Optional[str]) -> None:
    """
    Check the X-Signature header: hex HMAC-SHA256 of the raw body.

    Raises:
        WebhookVerificationError: If the secret is missing or the signature does not match
    """
    if not LEMON_SQUEEZY_WEBHOOK_SECRET:
        raise WebhookVerificationError("Webhook secret not configured")

    expected = hmac.new(
        LEMON_SQUEEZY_WEBHOOK_SECRET.encode("utf-8"),
        body,
        hashlib.sha256,
    ).hexdigest()
    if not hmac.compare_digest(expected, signature or ""):
        logger.error("Invalid Lemon Squeezy webhook signature")
        raise WebhookVerificationError("Invalid signature")


def _custom_data(event: Dict) -> Dict:
    # custom checkout data is echoed back in meta.custom_data
    custom = (event.get("meta") or {}).get("custom_data")
    if custom:
        return custom
    attributes = (event.get("data") or {}).get("attributes") or {}
    first_item = attributes.get("first_order_item") or {}
    return (first_item.get("product_options") or {}).get("checkout_data") or {}


def handle_order_created(db: Session, event: Dict) -> Payment:
    """
    Record a paid order and upgrade its user.

    Redeliveries of the same order update the existing row instead of
    inserting another one.
    """
    order = event.get("data") or {}
    attributes = order.get("attributes") or {}
    custom = _custom_data(event)
    order_id = str(order.get("id"))

    user_id = int(custom["user_id"]) if custom.get("user_id") else None
    currency = (attributes.get("currency") or "USD").upper()
    logger.info(f"Processing order_created: order_id={order_id}, user_id={user_id}")

    payment = db.query(Payment).filter(Payment.lemon_squeezy_order_id == order_id).first()
    if payment is None:
        payment = Payment(provider="lemon_squeezy", lemon_squeezy_order_id=order_id)
        db.add(payment)
    else:
        logger.info(f"Order already recorded, updating: order_id={order_id}, payment_id={payment.id}")

    payment.user_id = payment.user_id or user_id
    payment.amount = from_minor_units(attributes.get("total"), currency)
    payment.currency = currency
    payment.status = "completed"
    payment.subscription_type = custom.get("subscription_type") or "monthly"
    db.commit()
    db.refresh(payment)

    if payment.user_id:
        billing_service.upgrade_user_subscription(db, payment.user_id, TIER_PREMIUM)
    return payment


def handle_event(db: Session, event: Dict) -> None:
    event_name = (event.get("meta") or {}).get("event_name")
    logger.info(f"Webhook event type: {event_name}")

    if event_name == "order_created":
        handle_order_created(db, event)
    else:
        logger.info(f"Unhandled event type: {event_name}")
