"""
Pydantic schemas for cancellation guidance, feedback and admin endpoints.
"""
from datetime import datetime
from typing import Optional, List, Literal
from pydantic import BaseModel, EmailStr, Field


class CancellationScriptOut(BaseModel):
    service: str
    method: Literal["phone", "email", "chat"]
    script: str
    tips: List[str]


class FeedbackRequest(BaseModel):
    rating: int = Field(..., ge=1, le=5, description="Star rating 1-5")
    email: Optional[EmailStr] = None
    message: Optional[str] = Field(None, max_length=5000)


class FeedbackResponse(BaseModel):
    id: int
    rating: int
    label: str
    message: str


class ActivityItem(BaseModel):
    user_email: Optional[str] = None
    action: str
    provider: Optional[str] = None
    amount: Optional[float] = None
    currency: Optional[str] = None
    created_at: Optional[datetime] = None


class AdminStats(BaseModel):
    total_users: int
    paid_users: int
    conversion_rate: float
    total_subscriptions: int
    avg_subscriptions_per_user: float
    monthly_revenue_usd: float
    annual_revenue_usd: float
    recent_activity: List[ActivityItem]
