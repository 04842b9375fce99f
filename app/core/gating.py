"""
Tier gating for tracked subscriptions.

Free users may track a limited number of subscriptions; premium users are
unlimited.
"""
import logging
from fastapi import HTTPException, status
from app.db.models.user import User
from app.core.config import FRONTEND_URL
from app.core.errors import PlanLimitError
from app.core.plan_limits import normalize_tier

logger = logging.getLogger(__name__)


def get_user_tier(user: User) -> str:
    """Return "free" or "premium" for a user, defaulting to free."""
    return normalize_tier(user.subscription_tier)


def paywall_exception(error: PlanLimitError) -> HTTPException:
    """
    Build the 402 response for a user at their plan cap.

    The detail is structured so the frontend can render an upgrade prompt.
    """
    return HTTPException(
        status_code=status.HTTP_402_PAYMENT_REQUIRED,
        detail={
            "detail": f"{error}. Upgrade to Premium for unlimited access.",
            "code": "PAYWALL",
            "feature": "subscriptions",
            "upgrade_url": f"{FRONTEND_URL}/dashboard?upgrade=1",
            "limit": error.limit,
            "used": error.used,
        }
    )
