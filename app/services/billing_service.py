"""
Billing service: plan catalogue, payment records and tier changes.

upgrade_user_subscription() is the only place a user's tier is written.
Payment verification, webhooks, Stripe status checks and operator scripts
all go through it.
"""
import logging
from decimal import Decimal
from typing import Dict, List, Optional
from sqlalchemy.orm import Session

from app.db.models.user import User
from app.db.models.payment import Payment
from app.core.plan_limits import SUPPORTED_TIERS, TIER_FREE, PREMIUM_FEATURES
from app.services.currency_service import (
    CurrencyInfo,
    convert_subscription_price,
    format_price,
)

logger = logging.getLogger(__name__)

# Premium upgrade prices in USD
PLANS: Dict[str, Dict] = {
    "monthly": {"name": "Monthly", "price": Decimal("3"), "period": "month", "savings": None},
    "yearly": {"name": "Annual", "price": Decimal("30"), "period": "year", "savings": "Save $6"},
}


def get_plan_price(subscription_type: str, currency: CurrencyInfo) -> Decimal:
    """
    Price of an upgrade plan in the given currency.

    Raises:
        ValueError: If the plan does not exist
    """
    plan = PLANS.get(subscription_type)
    if plan is None:
        raise ValueError(f"Invalid subscription type: {subscription_type}. Must be 'monthly' or 'yearly'")
    return convert_subscription_price(plan["price"], currency)


def get_plans(currency: CurrencyInfo) -> dict:
    plans: List[dict] = []
    for subscription_type, plan in PLANS.items():
        price = get_plan_price(subscription_type, currency)
        plans.append({
            "subscription_type": subscription_type,
            "name": plan["name"],
            "period": plan["period"],
            "price": float(price),
            "formatted_price": format_price(price, currency),
            "currency": currency.code,
            "savings": plan["savings"],
        })
    return {"currency": currency.code, "plans": plans, "features": list(PREMIUM_FEATURES)}


def upgrade_user_subscription(db: Session, user_id: int, new_tier: str) -> User:
    """
    Set a user's tier.

    Args:
        db: Database session
        user_id: User ID
        new_tier: "free" or "premium"

    Returns:
        Updated user

    Raises:
        ValueError: If the tier is unknown or the user does not exist
    """
    new_tier = (new_tier or "").lower()
    if new_tier not in SUPPORTED_TIERS:
        raise ValueError(f"Invalid tier: {new_tier}. Must be one of: {', '.join(SUPPORTED_TIERS)}")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise ValueError(f"User not found: user_id={user_id}")

    previous = user.subscription_tier
    user.subscription_tier = new_tier
    user.is_premium = new_tier != TIER_FREE
    db.commit()
    db.refresh(user)

    if previous != new_tier:
        logger.info(f"User tier changed: user_id={user.id}, {previous} -> {new_tier}")
    return user


def find_user_by_email(db: Session, email: Optional[str]) -> Optional[User]:
    if not email:
        return None
    return db.query(User).filter(User.email == email.lower()).first()


def record_payment(db: Session, provider: str, **fields) -> Payment:
    """Insert a payment row. Fields map directly onto Payment columns."""
    payment = Payment(provider=provider, **fields)
    db.add(payment)
    db.commit()
    db.refresh(payment)

    logger.info(
        f"Payment recorded: provider={provider}, payment_id={payment.id}, "
        f"user_id={payment.user_id}, status={payment.status}"
    )
    return payment
