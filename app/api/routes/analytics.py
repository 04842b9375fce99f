"""
Spend analytics endpoints.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_db, get_current_user_obj
from app.core.gating import get_user_tier
from app.db.models.user import User
from app.schemas.analytics import SpendSummary
from app.services import subscription_service
from app.services.analytics_service import build_spend_summary
from app.services.currency_service import get_currency

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.get("/summary", response_model=SpendSummary)
def spend_summary(
    currency: str = Query("USD", description="Display currency"),
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db)
):
    """
    Monthly and yearly spend, category breakdown and upcoming renewals.

    Only active subscriptions count towards spend; yearly prices are
    divided by 12.
    """
    try:
        display_currency = get_currency(currency)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    subscriptions = subscription_service.list_subscriptions(db, user.id)
    summary = build_spend_summary(subscriptions, display_currency, get_user_tier(user))

    logger.debug(f"Spend summary requested: user_id={user.id}, currency={display_currency.code}")
    return summary
