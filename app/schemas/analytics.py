"""
Pydantic schemas for spend analytics and currency endpoints.
"""
from datetime import date
from typing import Optional, List
from pydantic import BaseModel, Field


class CurrencyOut(BaseModel):
    code: str
    symbol: str
    name: str
    rate: float = Field(..., description="Units per 1 USD")


class ConversionResponse(BaseModel):
    amount: float
    from_currency: str
    to_currency: str
    converted: float
    formatted: str


class CategorySpend(BaseModel):
    category: str
    amount: float


class DueSoonItem(BaseModel):
    id: int
    name: str
    renewal_date: date
    days_until: int
    amount: float


class SpendSummary(BaseModel):
    """Response schema for GET /analytics/summary."""
    currency: CurrencyOut
    total_monthly: float
    total_yearly: float
    formatted_monthly: str
    formatted_yearly: str
    active_count: int
    total_count: int
    subscription_limit: Optional[int] = Field(None, description="None for unlimited")
    remaining_slots: Optional[int] = Field(None, description="None for unlimited")
    next_renewal: Optional[date] = None
    by_category: List[CategorySpend]
    due_soon: List[DueSoonItem]

    class Config:
        json_schema_extra = {
            "example": {
                "currency": {"code": "USD", "symbol": "$", "name": "US Dollar", "rate": 1},
                "total_monthly": 27.99,
                "total_yearly": 335.88,
                "formatted_monthly": "$27.99",
                "formatted_yearly": "$335.88",
                "active_count": 2,
                "total_count": 3,
                "subscription_limit": 3,
                "remaining_slots": 0,
                "next_renewal": "2026-11-01",
                "by_category": [{"category": "Video Streaming", "amount": 15.49}],
                "due_soon": []
            }
        }
