"""
Pydantic schemas for billing endpoints.
"""
from typing import Optional, Literal, List, Dict, Any
from pydantic import BaseModel, Field

SubscriptionType = Literal["monthly", "yearly"]


class PlanOut(BaseModel):
    """An upgrade plan priced in the requested currency."""
    subscription_type: SubscriptionType
    name: str
    period: str
    price: float
    formatted_price: str
    currency: str
    savings: Optional[str] = None


class PlansResponse(BaseModel):
    currency: str
    plans: List[PlanOut]
    features: List[str]


class RazorpayOrderRequest(BaseModel):
    """Request schema for creating a Razorpay order. Price comes from the plan catalogue."""
    subscription_type: SubscriptionType = Field(..., description="monthly or yearly")
    currency: str = Field("USD", min_length=3, max_length=3, description="ISO currency code")

    class Config:
        json_schema_extra = {
            "example": {
                "subscription_type": "monthly",
                "currency": "INR"
            }
        }


class RazorpayOrderResponse(BaseModel):
    order: Dict[str, Any] = Field(..., description="Order object as returned by Razorpay")
    key_id: Optional[str] = Field(None, description="Public key for the checkout widget")


class RazorpayVerifyRequest(BaseModel):
    """Fields returned to the browser by Razorpay Checkout."""
    razorpay_payment_id: str = Field(..., min_length=1)
    razorpay_order_id: str = Field(..., min_length=1)
    razorpay_signature: str = Field(..., min_length=1)
    subscription_type: SubscriptionType = "monthly"
    currency: str = Field("USD", min_length=3, max_length=3)


class PaymentVerifiedResponse(BaseModel):
    success: bool
    message: str
    subscription_tier: str


class StripeCheckoutRequest(BaseModel):
    price_id: str = Field(..., min_length=1, description="Stripe price ID")
    subscription_type: SubscriptionType = "monthly"


class CheckoutUrlResponse(BaseModel):
    url: str
    session_id: Optional[str] = None


class StripeSubscriptionStatus(BaseModel):
    subscribed: bool
    subscription_tier: Optional[str] = None
    subscription_end: Optional[str] = None


class LemonSqueezyCheckoutRequest(BaseModel):
    variant_id: str = Field(..., min_length=1, description="Lemon Squeezy variant ID")
    subscription_type: SubscriptionType = "monthly"


class LemonSqueezyCheckoutResponse(BaseModel):
    checkout: Dict[str, Any]
    url: Optional[str] = None

