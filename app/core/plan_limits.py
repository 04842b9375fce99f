"""
Plan tiers and limits.

Single source of truth for what each tier allows.
None means unlimited.
"""
from typing import Dict, Optional, List

from app.core.config import FREE_PLAN_SUBSCRIPTION_LIMIT

TIER_FREE = "free"
TIER_PREMIUM = "premium"
SUPPORTED_TIERS: List[str] = [TIER_FREE, TIER_PREMIUM]

# Tracked subscription records per user
PLAN_LIMITS: Dict[str, Optional[int]] = {
    TIER_FREE: FREE_PLAN_SUBSCRIPTION_LIMIT,
    TIER_PREMIUM: None,
}

PREMIUM_FEATURES: List[str] = [
    "Unlimited subscriptions",
    "Advanced analytics",
    "Priority support",
    "Export data",
    "Custom categories",
    "Renewal reminders",
]


def normalize_tier(tier: Optional[str]) -> str:
    tier = (tier or TIER_FREE).lower()
    return tier if tier in SUPPORTED_TIERS else TIER_FREE


def get_subscription_limit(tier: Optional[str]) -> Optional[int]:
    """Maximum tracked subscriptions for a tier, or None for unlimited."""
    return PLAN_LIMITS[normalize_tier(tier)]


def remaining_slots(tier: Optional[str], used: int) -> Optional[int]:
    """Slots left before the tier's cap, or None for unlimited."""
    limit = get_subscription_limit(tier)
    if limit is None:
        return None
    return max(limit - used, 0)
