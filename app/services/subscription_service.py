"""
CRUD for tracked subscriptions, always scoped to the owning user.
"""
import logging
from typing import List, Optional
from sqlalchemy.orm import Session

from app.db.models.user import User
from app.db.models.subscription import Subscription
from app.core.errors import PlanLimitError
from app.core.plan_limits import get_subscription_limit
from app.schemas.subscription import SubscriptionCreate, SubscriptionUpdate

logger = logging.getLogger(__name__)


def count_subscriptions(db: Session, user_id: int) -> int:
    return db.query(Subscription).filter(Subscription.user_id == user_id).count()


def list_subscriptions(db: Session, user_id: int) -> List[Subscription]:
    """All of a user's subscriptions, newest first."""
    return (
        db.query(Subscription)
        .filter(Subscription.user_id == user_id)
        .order_by(Subscription.created_at.desc(), Subscription.id.desc())
        .all()
    )


def get_subscription(db: Session, user_id: int, subscription_id: int) -> Optional[Subscription]:
    return db.query(Subscription).filter(
        Subscription.id == subscription_id,
        Subscription.user_id == user_id
    ).first()


def create_subscription(db: Session, user: User, data: SubscriptionCreate) -> Subscription:
    """
    Add a tracked subscription for a user.

    Raises:
        PlanLimitError: If the user's tier cap is already reached
    """
    limit = get_subscription_limit(user.subscription_tier)
    if limit is not None:
        used = count_subscriptions(db, user.id)
        if used >= limit:
            logger.warning(f"Subscription limit reached: user_id={user.id}, used={used}, limit={limit}")
            raise PlanLimitError(limit=limit, used=used)

    subscription = Subscription(user_id=user.id, **data.model_dump())
    db.add(subscription)
    db.commit()
    db.refresh(subscription)

    logger.info(f"Subscription added: user_id={user.id}, subscription_id={subscription.id}, name={subscription.name}")
    return subscription


def update_subscription(db: Session, subscription: Subscription, data: SubscriptionUpdate) -> Subscription:
    updates = data.model_dump(exclude_unset=True)
    for field, value in updates.items():
        # Explicit nulls would violate NOT NULL columns
        if value is not None:
            setattr(subscription, field, value)

    db.commit()
    db.refresh(subscription)

    logger.info(f"Subscription updated: subscription_id={subscription.id}, fields={sorted(updates)}")
    return subscription


def delete_subscription(db: Session, subscription: Subscription) -> None:
    subscription_id = subscription.id
    db.delete(subscription)
    db.commit()
    logger.info(f"Subscription deleted: subscription_id={subscription_id}")
