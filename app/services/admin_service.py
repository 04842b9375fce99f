"""
Aggregate statistics for the admin dashboard.
"""
import logging
from datetime import datetime, timezone
from decimal import Decimal
from sqlalchemy.orm import Session

from app.db.models.user import User
from app.db.models.subscription import Subscription
from app.db.models.payment import Payment
from app.core.plan_limits import TIER_FREE
from app.services.currency_service import CURRENCIES, USD, convert_price, round_money

logger = logging.getLogger(__name__)

RECENT_ACTIVITY_LIMIT = 10


def _month_start(now: datetime) -> datetime:
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0, tzinfo=None)


def revenue_usd(payments) -> Decimal:
    """Sum of payment amounts in USD. Currencies missing from the table are skipped."""
    total = Decimal(0)
    for payment in payments:
        currency = CURRENCIES.get((payment.currency or "").upper())
        if currency is None:
            logger.warning(f"Skipping payment in unsupported currency: payment_id={payment.id}, currency={payment.currency}")
            continue
        total += convert_price(payment.amount or 0, currency, USD)
    return round_money(total)


def get_admin_stats(db: Session, now: datetime = None) -> dict:
    now = now or datetime.now(timezone.utc)

    total_users = db.query(User).count()
    paid_users = db.query(User).filter(User.subscription_tier != TIER_FREE).count()
    total_subscriptions = db.query(Subscription).count()

    month_payments = db.query(Payment).filter(
        Payment.status == "completed",
        Payment.created_at >= _month_start(now),
    ).all()
    monthly_revenue = revenue_usd(month_payments)

    recent = (
        db.query(Payment, User.email)
        .outerjoin(User, User.id == Payment.user_id)
        .filter(Payment.status == "completed")
        .order_by(Payment.created_at.desc(), Payment.id.desc())
        .limit(RECENT_ACTIVITY_LIMIT)
        .all()
    )

    return {
        "total_users": total_users,
        "paid_users": paid_users,
        "conversion_rate": round(paid_users / total_users * 100, 1) if total_users else 0.0,
        "total_subscriptions": total_subscriptions,
        "avg_subscriptions_per_user": round(total_subscriptions / total_users, 1) if total_users else 0.0,
        "monthly_revenue_usd": float(monthly_revenue),
        "annual_revenue_usd": float(monthly_revenue * 12),
        "recent_activity": [
            {
                "user_email": email,
                "action": "Upgraded to Premium",
                "provider": payment.provider,
                "amount": float(payment.amount or 0),
                "currency": payment.currency,
                "created_at": payment.created_at,
            }
            for payment, email in recent
        ],
    }
