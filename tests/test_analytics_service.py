"""
Unit tests for spend analytics plus the /analytics/summary endpoint.
"""
from datetime import date, timedelta
from decimal import Decimal

from app.db.models.subscription import Subscription
from app.services.analytics_service import (
    monthly_amount,
    total_monthly_spend,
    spend_by_category,
    next_renewal,
    due_soon,
    build_spend_summary,
)
from app.services.currency_service import USD, get_currency

TODAY = date(2026, 10, 19)


def _sub(id, name, price, cycle="monthly", category="Video Streaming", active=True, days=10):
    return Subscription(
        id=id,
        user_id=1,
        name=name,
        price=Decimal(price),
        billing_cycle=cycle,
        renewal_date=TODAY + timedelta(days=days),
        category=category,
        is_active=active,
    )


def _subs():
    return [
        _sub(1, "Netflix", "15.49", days=3),
        _sub(2, "Adobe", "239.88", cycle="yearly", category="Productivity", days=40),
        _sub(3, "Spotify", "9.99", category="Music & Audio", active=False, days=1),
    ]


def test_monthly_amount_divides_yearly_by_twelve():
    assert monthly_amount(_sub(1, "Adobe", "239.88", cycle="yearly")) == Decimal("19.99")
    assert monthly_amount(_sub(2, "Netflix", "15.49")) == Decimal("15.49")


def test_total_monthly_spend_skips_inactive():
    assert total_monthly_spend(_subs()) == Decimal("35.48")
    assert total_monthly_spend(_subs(), get_currency("EUR")) == Decimal("30.16")
    assert total_monthly_spend([]) == Decimal("0.00")


def test_spend_by_category():
    assert spend_by_category(_subs(), get_currency("EUR")) == {
        "Video Streaming": Decimal("13.17"),
        "Productivity": Decimal("16.99"),
    }


def test_next_renewal_ignores_inactive():
    assert next_renewal(_subs()) == TODAY + timedelta(days=3)
    assert next_renewal([]) is None


def test_due_soon_window_includes_overdue():
    subs = [
        _sub(1, "In a week", "1", days=7),
        _sub(2, "Later", "1", days=8),
        _sub(3, "Overdue", "1", days=-2),
        _sub(4, "Soon", "1", days=3),
        _sub(5, "Inactive", "1", days=1, active=False),
    ]

    assert [sub.name for sub in due_soon(subs, TODAY)] == ["Overdue", "Soon", "In a week"]


def test_build_spend_summary():
    summary = build_spend_summary(_subs(), USD, "free", today=TODAY)

    assert summary["total_monthly"] == 35.48
    assert summary["total_yearly"] == 425.76
    assert summary["formatted_monthly"] == "$35.48"
    assert summary["active_count"] == 2
    assert summary["total_count"] == 3
    assert summary["subscription_limit"] == 3
    assert summary["remaining_slots"] == 0
    assert summary["next_renewal"] == TODAY + timedelta(days=3)
    assert [item["name"] for item in summary["due_soon"]] == ["Netflix"]
    assert summary["due_soon"][0]["days_until"] == 3


def test_build_spend_summary_premium_is_unlimited():
    summary = build_spend_summary(_subs(), USD, "premium", today=TODAY)

    assert summary["subscription_limit"] is None
    assert summary["remaining_slots"] is None


def test_summary_endpoint(client, user_headers):
    client.post(
        "/subscriptions",
        json={
            "name": "Netflix",
            "price": 15.49,
            "billing_cycle": "monthly",
            "renewal_date": (date.today() + timedelta(days=2)).isoformat(),
            "category": "Video Streaming",
        },
        headers=user_headers
    )

    response = client.get("/analytics/summary", params={"currency": "INR"}, headers=user_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["currency"]["code"] == "INR"
    assert data["total_monthly"] == 1285.67
    assert data["remaining_slots"] == 2
    assert data["by_category"] == [{"category": "Video Streaming", "amount": 1285.67}]
    assert len(data["due_soon"]) == 1


def test_summary_endpoint_unknown_currency(client, user_headers):
    response = client.get("/analytics/summary", params={"currency": "XYZ"}, headers=user_headers)
    assert response.status_code == 400
