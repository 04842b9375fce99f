"""
Razorpay orders and payment signature verification.

Orders are created through the Razorpay REST API; the browser completes
payment in Razorpay Checkout and posts the returned ids and signature back
for verification.
"""
import hashlib
import hmac
import logging
import time
from decimal import Decimal
from sqlalchemy.orm import Session

import httpx

from app.core.config import (
    RAZORPAY_KEY_ID,
    RAZORPAY_KEY_SECRET,
    RAZORPAY_API_URL,
    HTTP_TIMEOUT_SECONDS,
)
from app.core.errors import PaymentConfigError, PaymentProviderError, WebhookVerificationError
from app.core.plan_limits import TIER_PREMIUM
from app.db.models.user import User
from app.db.models.payment import Payment
from app.services import billing_service
from app.services.currency_service import (
    CurrencyInfo,
    get_currency,
    get_razorpay_currency,
)

logger = logging.getLogger(__name__)


def _require_credentials():
    if not RAZORPAY_KEY_ID or not RAZORPAY_KEY_SECRET:
        logger.error(f"Razorpay credentials missing: key_id={bool(RAZORPAY_KEY_ID)}, key_secret={bool(RAZORPAY_KEY_SECRET)}")
        raise PaymentConfigError("Razorpay credentials not configured")


def to_smallest_unit(amount: Decimal) -> int:
    """Paise, cents, etc. Razorpay treats every supported currency as 2-decimal."""
    return int((Decimal(str(amount)) * 100).to_integral_value())


def charge_currency(currency: CurrencyInfo) -> CurrencyInfo:
    """Currency the order is actually charged in."""
    return get_currency(get_razorpay_currency(currency))


def create_order(amount: Decimal, currency: CurrencyInfo, subscription_type: str) -> dict:
    """
    Create a Razorpay order.

    Args:
        amount: Amount in major units of `currency`
        currency: Currency to charge in (must be Razorpay-supported)
        subscription_type: "monthly" or "yearly", stored in the order notes

    Returns:
        The order object as returned by Razorpay

    Raises:
        PaymentConfigError: If credentials are missing
        PaymentProviderError: If Razorpay rejects the request or is unreachable
    """
    _require_credentials()

    order_data = {
        "amount": to_smallest_unit(amount),
        "currency": currency.code,
        "receipt": f"receipt_{int(time.time() * 1000)}",
        "notes": {
            "subscription_type": subscription_type,
        },
    }
    logger.info(f"Creating Razorpay order: amount={order_data['amount']}, currency={currency.code}, subscription_type={subscription_type}")

    try:
        response = httpx.post(
            f"{RAZORPAY_API_URL}/orders",
            json=order_data,
            auth=(RAZORPAY_KEY_ID, RAZORPAY_KEY_SECRET),
            timeout=HTTP_TIMEOUT_SECONDS,
        )
    except httpx.HTTPError as e:
        logger.error(f"Razorpay request failed: {e}")
        raise PaymentProviderError(f"Razorpay unreachable: {e}")

    if response.status_code >= 400:
        logger.error(f"Razorpay API error: {response.status_code} - {response.text}")
        raise PaymentProviderError(
            f"Razorpay API error: {response.status_code} - {response.text}",
            status_code=response.status_code,
        )

    order = response.json()
    logger.info(f"Created Razorpay order: order_id={order.get('id')}")
    return order


def verify_payment_signature(order_id: str, payment_id: str, signature: str) -> bool:
    """
    Check the signature Razorpay Checkout returns to the browser.

    The expected value is the hex HMAC-SHA256 of "<order_id>|<payment_id>"
    keyed with the account's key secret.
    """
    _require_credentials()
    expected = hmac.new(
        RAZORPAY_KEY_SECRET.encode("utf-8"),
        f"{order_id}|{payment_id}".encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
    return hmac.compare_digest(expected, signature or "")


def verify_payment(
    db: Session,
    user: User,
    order_id: str,
    payment_id: str,
    signature: str,
    subscription_type: str,
    currency: CurrencyInfo,
) -> User:
    """
    Verify a completed Checkout payment, record it and upgrade the user.

    A payment id that is already recorded is not recorded again.

    Raises:
        WebhookVerificationError: If the signature does not match
    """
    if not verify_payment_signature(order_id, payment_id, signature):
        logger.warning(f"Razorpay signature mismatch: user_id={user.id}, order_id={order_id}")
        raise WebhookVerificationError("Invalid signature")

    existing = db.query(Payment).filter(Payment.razorpay_payment_id == payment_id).first()
    if existing:
        logger.info(f"Razorpay payment already recorded: payment_id={payment_id}, row_id={existing.id}")
        return billing_service.upgrade_user_subscription(db, user.id, TIER_PREMIUM)

    charged_in = charge_currency(currency)
    amount = billing_service.get_plan_price(subscription_type, charged_in)

    billing_service.record_payment(
        db,
        provider="razorpay",
        user_id=user.id,
        razorpay_order_id=order_id,
        razorpay_payment_id=payment_id,
        amount=amount,
        currency=charged_in.code,
        status="completed",
        subscription_type=subscription_type,
    )
    return billing_service.upgrade_user_subscription(db, user.id, TIER_PREMIUM)
