"""
Upgrade plans and checkout endpoints for Razorpay, Stripe and Lemon Squeezy.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_db, get_current_user_obj
from app.core.config import RAZORPAY_KEY_ID
from app.core.errors import PaymentConfigError, PaymentProviderError, WebhookVerificationError
from app.db.models.user import User
from app.schemas.billing import (
    PlansResponse,
    RazorpayOrderRequest,
    RazorpayOrderResponse,
    RazorpayVerifyRequest,
    PaymentVerifiedResponse,
    StripeCheckoutRequest,
    CheckoutUrlResponse,
    StripeSubscriptionStatus,
    LemonSqueezyCheckoutRequest,
    LemonSqueezyCheckoutResponse,
)
from app.services import billing_service, razorpay_service, stripe_service, lemon_squeezy_service
from app.services.currency_service import get_currency

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/billing", tags=["Billing"])


def billing_http_error(error: ValueError) -> HTTPException:
    """Map a billing failure onto an HTTP status."""
    if isinstance(error, PaymentConfigError):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(error))
    if isinstance(error, PaymentProviderError):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(error))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))


@router.get("/plans", response_model=PlansResponse)
def plans(currency: str = Query("USD")):
    try:
        return billing_service.get_plans(get_currency(currency))
    except ValueError as e:
        raise billing_http_error(e)


# ✅ RAZORPAY
@router.post("/razorpay/order", response_model=RazorpayOrderResponse)
def create_razorpay_order(
    payload: RazorpayOrderRequest,
    user: User = Depends(get_current_user_obj),
):
    try:
        currency = razorpay_service.charge_currency(get_currency(payload.currency))
        amount = billing_service.get_plan_price(payload.subscription_type, currency)
        order = razorpay_service.create_order(amount, currency, payload.subscription_type)
    except ValueError as e:
        logger.error(f"Error creating Razorpay order for user_id={user.id}: {e}")
        raise billing_http_error(e)

    return {"order": order, "key_id": RAZORPAY_KEY_ID}


@router.post("/razorpay/verify", response_model=PaymentVerifiedResponse)
def verify_razorpay_payment(
    payload: RazorpayVerifyRequest,
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db)
):
    try:
        upgraded = razorpay_service.verify_payment(
            db,
            user,
            order_id=payload.razorpay_order_id,
            payment_id=payload.razorpay_payment_id,
            signature=payload.razorpay_signature,
            subscription_type=payload.subscription_type,
            currency=get_currency(payload.currency),
        )
    except WebhookVerificationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ValueError as e:
        logger.error(f"Error verifying Razorpay payment for user_id={user.id}: {e}")
        raise billing_http_error(e)

    return {
        "success": True,
        "message": "Payment verified and subscription upgraded",
        "subscription_tier": upgraded.subscription_tier,
    }


# ✅ STRIPE
@router.post("/stripe/checkout", response_model=CheckoutUrlResponse)
def create_stripe_checkout(
    payload: StripeCheckoutRequest,
    request: Request,
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db)
):
    try:
        return stripe_service.create_checkout_session(
            db,
            user,
            price_id=payload.price_id,
            subscription_type=payload.subscription_type,
            origin=request.headers.get("origin"),
        )
    except ValueError as e:
        raise billing_http_error(e)


@router.get("/stripe/status", response_model=StripeSubscriptionStatus)
def stripe_subscription_status(
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db)
):
    """Check Stripe for an active subscription and sync the user's tier."""
    try:
        return stripe_service.check_subscription(db, user)
    except ValueError as e:
        raise billing_http_error(e)


# ✅ LEMON SQUEEZY
@router.post("/lemon-squeezy/checkout", response_model=LemonSqueezyCheckoutResponse)
def create_lemon_squeezy_checkout(
    payload: LemonSqueezyCheckoutRequest,
    user: User = Depends(get_current_user_obj),
):
    custom_data = {
        "user_id": str(user.id),
        "user_email": user.email,
        "subscription_type": payload.subscription_type,
    }
    try:
        checkout = lemon_squeezy_service.create_checkout(payload.variant_id, custom_data)
    except ValueError as e:
        raise billing_http_error(e)

    return {"checkout": checkout, "url": (checkout.get("attributes") or {}).get("url")}
