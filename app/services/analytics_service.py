"""
Spend analytics over a user's tracked subscriptions.

All reductions skip inactive rows and normalise yearly prices to a monthly
figure before summing.
"""
from collections import OrderedDict
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Dict, Optional

from app.db.models.subscription import Subscription
from app.core.plan_limits import get_subscription_limit, remaining_slots
from app.services.currency_service import (
    CurrencyInfo,
    USD,
    convert_subscription_price,
    format_price,
    round_money,
)

MONTHS_PER_YEAR = Decimal(12)
DUE_SOON_DAYS = 7


def monthly_amount(sub: Subscription) -> Decimal:
    """Price normalised to one month, in USD, unrounded."""
    price = Decimal(str(sub.price or 0))
    if sub.billing_cycle == "yearly":
        return price / MONTHS_PER_YEAR
    return price


def _active(subs: Iterable[Subscription]) -> List[Subscription]:
    return [sub for sub in subs if sub.is_active]


def total_monthly_spend(subs: Iterable[Subscription], currency: CurrencyInfo = USD) -> Decimal:
    total = sum((monthly_amount(sub) for sub in _active(subs)), Decimal(0))
    return convert_subscription_price(total, currency)


def spend_by_category(subs: Iterable[Subscription], currency: CurrencyInfo = USD) -> Dict[str, Decimal]:
    totals: Dict[str, Decimal] = OrderedDict()
    for sub in _active(subs):
        totals[sub.category] = totals.get(sub.category, Decimal(0)) + monthly_amount(sub)
    return OrderedDict(
        (category, convert_subscription_price(amount, currency))
        for category, amount in totals.items()
    )


def next_renewal(subs: Iterable[Subscription]) -> Optional[date]:
    dates = [sub.renewal_date for sub in _active(subs) if sub.renewal_date]
    return min(dates) if dates else None


def due_soon(subs: Iterable[Subscription], today: date = None, days: int = DUE_SOON_DAYS) -> List[Subscription]:
    """Active subscriptions renewing within `days` days. Overdue ones count as due."""
    today = today or date.today()
    due = [
        sub for sub in _active(subs)
        if sub.renewal_date and (sub.renewal_date - today).days <= days
    ]
    return sorted(due, key=lambda sub: sub.renewal_date)


def build_spend_summary(
    subs: List[Subscription],
    currency: CurrencyInfo,
    tier: str,
    today: date = None,
) -> dict:
    """Everything the dashboard overview cards and charts need, in one dict."""
    today = today or date.today()
    monthly = total_monthly_spend(subs, currency)
    yearly = round_money(monthly * MONTHS_PER_YEAR)

    return {
        "currency": {
            "code": currency.code,
            "symbol": currency.symbol,
            "name": currency.name,
            "rate": float(currency.rate),
        },
        "total_monthly": float(monthly),
        "total_yearly": float(yearly),
        "formatted_monthly": format_price(monthly, currency),
        "formatted_yearly": format_price(yearly, currency),
        "active_count": len(_active(subs)),
        "total_count": len(subs),
        "subscription_limit": get_subscription_limit(tier),
        "remaining_slots": remaining_slots(tier, len(subs)),
        "next_renewal": next_renewal(subs),
        "by_category": [
            {"category": category, "amount": float(amount)}
            for category, amount in spend_by_category(subs, currency).items()
        ],
        "due_soon": [
            {
                "id": sub.id,
                "name": sub.name,
                "renewal_date": sub.renewal_date,
                "days_until": (sub.renewal_date - today).days,
                "amount": float(convert_subscription_price(sub.price, currency)),
            }
            for sub in due_soon(subs, today)
        ],
    }
