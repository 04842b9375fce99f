"""
Pydantic schemas for tracked subscription endpoints.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Literal, List
from pydantic import BaseModel, Field, field_validator

SUBSCRIPTION_CATEGORIES: List[str] = [
    "Entertainment",
    "Productivity",
    "Cloud Storage",
    "Music & Audio",
    "Video Streaming",
    "News & Media",
    "Health & Fitness",
    "Education",
    "Business",
    "Other",
]

BillingCycle = Literal["monthly", "yearly"]


def _validate_name(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("Name is required")
    return value


def _validate_category(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    for category in SUBSCRIPTION_CATEGORIES:
        if category.lower() == value.strip().lower():
            return category
    raise ValueError(f"Unknown category. Must be one of: {', '.join(SUBSCRIPTION_CATEGORIES)}")


class SubscriptionCreate(BaseModel):
    """Request schema for adding a tracked subscription. Price is in USD."""
    name: str = Field(..., min_length=1, max_length=200, description="Service name")
    price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2, description="Price per billing cycle (USD)")
    billing_cycle: BillingCycle = Field("monthly", description="monthly or yearly")
    renewal_date: date = Field(..., description="Next renewal date")
    category: str = Field(..., description="Subscription category")
    is_active: bool = Field(True, description="Whether the subscription is currently active")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return _validate_name(v)

    @field_validator("category")
    @classmethod
    def validate_category(cls, v: str) -> str:
        return _validate_category(v)

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Netflix",
                "price": 15.49,
                "billing_cycle": "monthly",
                "renewal_date": "2026-11-01",
                "category": "Video Streaming",
                "is_active": True
            }
        }


class SubscriptionUpdate(BaseModel):
    """Partial update; only fields that are sent are changed."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    price: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    billing_cycle: Optional[BillingCycle] = None
    renewal_date: Optional[date] = None
    category: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: Optional[str]) -> Optional[str]:
        return _validate_name(v)

    @field_validator("category")
    @classmethod
    def validate_category(cls, v: Optional[str]) -> Optional[str]:
        return _validate_category(v)


class SubscriptionOut(BaseModel):
    id: int
    name: str
    price: float
    billing_cycle: BillingCycle
    renewal_date: date
    category: str
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
