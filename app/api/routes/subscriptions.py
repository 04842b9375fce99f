"""
Tracked subscription CRUD endpoints.
"""
from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_db, get_current_user_obj
from app.core.errors import PlanLimitError
from app.core.gating import paywall_exception
from app.db.models.user import User
from app.schemas.subscription import (
    SUBSCRIPTION_CATEGORIES,
    SubscriptionCreate,
    SubscriptionUpdate,
    SubscriptionOut,
)
from app.services import subscription_service

router = APIRouter(prefix="/subscriptions", tags=["Subscriptions"])


def _get_owned_or_404(db: Session, user: User, subscription_id: int):
    subscription = subscription_service.get_subscription(db, user.id, subscription_id)
    if not subscription:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subscription not found")
    return subscription


@router.get("/categories", response_model=List[str])
def list_categories():
    return SUBSCRIPTION_CATEGORIES


@router.get("", response_model=List[SubscriptionOut])
def list_subscriptions(
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db)
):
    return subscription_service.list_subscriptions(db, user.id)


@router.post("", response_model=SubscriptionOut, status_code=status.HTTP_201_CREATED)
def create_subscription(
    payload: SubscriptionCreate,
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db)
):
    try:
        return subscription_service.create_subscription(db, user, payload)
    except PlanLimitError as e:
        raise paywall_exception(e)


@router.get("/{subscription_id}", response_model=SubscriptionOut)
def get_subscription(
    subscription_id: int,
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db)
):
    return _get_owned_or_404(db, user, subscription_id)


@router.patch("/{subscription_id}", response_model=SubscriptionOut)
def update_subscription(
    subscription_id: int,
    payload: SubscriptionUpdate,
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db)
):
    subscription = _get_owned_or_404(db, user, subscription_id)
    return subscription_service.update_subscription(db, subscription, payload)


@router.delete("/{subscription_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_subscription(
    subscription_id: int,
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db)
):
    subscription = _get_owned_or_404(db, user, subscription_id)
    subscription_service.delete_subscription(db, subscription)
