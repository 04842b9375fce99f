"""
Tests for the plan catalogue, tier changes and the Razorpay / Stripe /
Lemon Squeezy checkout endpoints. Provider HTTP calls are monkeypatched.
"""
import hashlib
import hmac
from decimal import Decimal

import pytest

from app.db.models.payment import Payment
from app.db.models.user import User
from app.services import billing_service, razorpay_service, lemon_squeezy_service, stripe_service
from app.services.currency_service import USD, get_currency

RAZORPAY_SECRET = "rzp_test_secret"


class _FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code
        self.text = str(payload)

    def json(self):
        return self._payload


@pytest.fixture
def razorpay_configured(monkeypatch):
    monkeypatch.setattr(razorpay_service, "RAZORPAY_KEY_ID", "rzp_test_key")
    monkeypatch.setattr(razorpay_service, "RAZORPAY_KEY_SECRET", RAZORPAY_SECRET)


def _razorpay_signature(order_id, payment_id, secret=RAZORPAY_SECRET):
    return hmac.new(
        secret.encode("utf-8"),
        f"{order_id}|{payment_id}".encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


# ✅ Plans

def test_plan_price_in_currency():
    assert billing_service.get_plan_price("monthly", USD) == Decimal("3.00")
    assert billing_service.get_plan_price("yearly", get_currency("INR")) == Decimal("2490.00")


def test_plan_price_invalid_type():
    with pytest.raises(ValueError, match="Invalid subscription type"):
        billing_service.get_plan_price("weekly", USD)


def test_plans_endpoint(client):
    response = client.get("/billing/plans", params={"currency": "EUR"})

    assert response.status_code == 200
    data = response.json()
    assert data["currency"] == "EUR"
    monthly, yearly = data["plans"]
    assert monthly["price"] == 2.55
    assert monthly["formatted_price"] == "€2.55"
    assert yearly["savings"] == "Save $6"
    assert "Unlimited subscriptions" in data["features"]


def test_plans_endpoint_unknown_currency(client):
    assert client.get("/billing/plans", params={"currency": "XYZ"}).status_code == 400


# ✅ Tier changes

def test_upgrade_and_downgrade(db_session, test_user):
    user = billing_service.upgrade_user_subscription(db_session, test_user.id, "PREMIUM")
    assert user.subscription_tier == "premium"
    assert user.is_premium is True

    user = billing_service.upgrade_user_subscription(db_session, test_user.id, "free")
    assert user.subscription_tier == "free"
    assert user.is_premium is False


def test_upgrade_rejects_unknown_tier(db_session, test_user):
    with pytest.raises(ValueError, match="Invalid tier"):
        billing_service.upgrade_user_subscription(db_session, test_user.id, "elite")


def test_upgrade_rejects_missing_user(db_session):
    with pytest.raises(ValueError, match="User not found"):
        billing_service.upgrade_user_subscription(db_session, 999, "premium")


# ✅ Razorpay

def test_razorpay_order(client, user_headers, razorpay_configured, monkeypatch):
    sent = {}

    def fake_post(url, json=None, auth=None, timeout=None):
        sent.update(url=url, json=json, auth=auth)
        return _FakeResponse({"id": "order_123", "amount": json["amount"], "currency": json["currency"]})

    monkeypatch.setattr(razorpay_service.httpx, "post", fake_post)

    response = client.post(
        "/billing/razorpay/order",
        json={"subscription_type": "monthly", "currency": "INR"},
        headers=user_headers
    )

    assert response.status_code == 200
    assert response.json()["order"]["id"] == "order_123"
    assert sent["url"].endswith("/orders")
    assert sent["json"]["amount"] == 24900
    assert sent["json"]["currency"] == "INR"
    assert sent["json"]["receipt"].startswith("receipt_")
    assert sent["auth"] == ("rzp_test_key", RAZORPAY_SECRET)


def test_razorpay_order_unsupported_currency_charged_in_usd(client, user_headers, razorpay_configured, monkeypatch):
    sent = {}

    def fake_post(url, json=None, auth=None, timeout=None):
        sent.update(json=json)
        return _FakeResponse({"id": "order_456"})

    monkeypatch.setattr(razorpay_service.httpx, "post", fake_post)

    response = client.post(
        "/billing/razorpay/order",
        json={"subscription_type": "yearly", "currency": "JPY"},
        headers=user_headers
    )

    assert response.status_code == 200
    assert sent["json"]["currency"] == "USD"
    assert sent["json"]["amount"] == 3000


def test_razorpay_order_without_credentials(client, user_headers, monkeypatch):
    monkeypatch.setattr(razorpay_service, "RAZORPAY_KEY_ID", None)
    monkeypatch.setattr(razorpay_service, "RAZORPAY_KEY_SECRET", None)

    response = client.post(
        "/billing/razorpay/order",
        json={"subscription_type": "monthly"},
        headers=user_headers
    )

    assert response.status_code == 503
    assert response.json()["detail"] == "Razorpay credentials not configured"


def test_razorpay_order_provider_error(client, user_headers, razorpay_configured, monkeypatch):
    monkeypatch.setattr(
        razorpay_service.httpx, "post",
        lambda url, json=None, auth=None, timeout=None: _FakeResponse({"error": "bad"}, status_code=400)
    )

    response = client.post(
        "/billing/razorpay/order",
        json={"subscription_type": "monthly"},
        headers=user_headers
    )
    assert response.status_code == 502


def test_razorpay_verify_upgrades_user(client, user_headers, test_user, db_session, razorpay_configured):
    response = client.post(
        "/billing/razorpay/verify",
        json={
            "razorpay_order_id": "order_123",
            "razorpay_payment_id": "pay_456",
            "razorpay_signature": _razorpay_signature("order_123", "pay_456"),
            "subscription_type": "monthly",
            "currency": "INR",
        },
        headers=user_headers
    )

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert response.json()["subscription_tier"] == "premium"

    db_session.expire_all()
    user = db_session.query(User).filter(User.id == test_user.id).first()
    assert user.subscription_tier == "premium"
    payment = db_session.query(Payment).one()
    assert payment.provider == "razorpay"
    assert payment.status == "completed"
    assert payment.amount == Decimal("249.00")
    assert payment.currency == "INR"


def test_razorpay_verify_bad_signature(client, user_headers, test_user, db_session, razorpay_configured):
    response = client.post(
        "/billing/razorpay/verify",
        json={
            "razorpay_order_id": "order_123",
            "razorpay_payment_id": "pay_456",
            "razorpay_signature": _razorpay_signature("order_123", "pay_456", secret="wrong"),
        },
        headers=user_headers
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid signature"
    assert db_session.query(Payment).count() == 0
    db_session.expire_all()
    assert db_session.query(User).filter(User.id == test_user.id).first().subscription_tier == "free"


# ✅ Stripe

def test_stripe_checkout_records_pending_payment(client, user_headers, test_user, db_session, monkeypatch):
    monkeypatch.setattr(stripe_service.stripe, "api_key", "sk_test_123")
    monkeypatch.setattr(stripe_service, "find_customer_id", lambda email: None)
    created = {}

    def fake_create(**kwargs):
        created.update(kwargs)
        return {"id": "cs_test_1", "url": "https://checkout.stripe.com/c/cs_test_1"}

    monkeypatch.setattr(stripe_service.stripe.checkout.Session, "create", fake_create)

    response = client.post(
        "/billing/stripe/checkout",
        json={"price_id": "price_123", "subscription_type": "yearly"},
        headers={**user_headers, "Origin": "https://app.example.com"}
    )

    assert response.status_code == 200
    assert response.json() == {"url": "https://checkout.stripe.com/c/cs_test_1", "session_id": "cs_test_1"}
    assert created["mode"] == "subscription"
    assert created["customer_email"] == test_user.email
    assert created["metadata"] == {"user_id": str(test_user.id), "subscription_type": "yearly"}
    assert created["success_url"] == "https://app.example.com/dashboard?success=true"

    payment = db_session.query(Payment).one()
    assert payment.stripe_session_id == "cs_test_1"
    assert payment.status == "pending"


def test_stripe_checkout_not_configured(client, user_headers, monkeypatch):
    monkeypatch.setattr(stripe_service.stripe, "api_key", None)

    response = client.post(
        "/billing/stripe/checkout",
        json={"price_id": "price_123"},
        headers=user_headers
    )
    assert response.status_code == 503


def test_stripe_status_syncs_tier(client, user_headers, test_user, db_session, monkeypatch):
    monkeypatch.setattr(stripe_service.stripe, "api_key", "sk_test_123")
    monkeypatch.setattr(stripe_service, "find_customer_id", lambda email: "cus_1")
    monkeypatch.setattr(
        stripe_service.stripe.Subscription, "list",
        lambda **kwargs: {"data": [{
            "id": "sub_1",
            "current_period_end": 1798761600,
            "items": {"data": [{"price": {"unit_amount": 300}}]},
        }]}
    )

    response = client.get("/billing/stripe/status", headers=user_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["subscribed"] is True
    assert data["subscription_tier"] == "basic"
    assert data["subscription_end"].startswith("2027-01-01")
    db_session.expire_all()
    assert db_session.query(User).filter(User.id == test_user.id).first().is_premium is True


def test_stripe_status_without_customer(client, user_headers, monkeypatch):
    monkeypatch.setattr(stripe_service.stripe, "api_key", "sk_test_123")
    monkeypatch.setattr(stripe_service, "find_customer_id", lambda email: None)

    response = client.get("/billing/stripe/status", headers=user_headers)

    assert response.status_code == 200
    assert response.json() == {"subscribed": False, "subscription_tier": None, "subscription_end": None}


def test_tier_for_unit_amount():
    assert stripe_service.tier_for_unit_amount(999) == "basic"
    assert stripe_service.tier_for_unit_amount(1000) == "premium"
    assert stripe_service.tier_for_unit_amount(2999) == "premium"
    assert stripe_service.tier_for_unit_amount(5000) == "enterprise"
    assert stripe_service.tier_for_unit_amount(None) == "basic"


# ✅ Lemon Squeezy

def test_lemon_squeezy_checkout(client, user_headers, test_user, monkeypatch):
    monkeypatch.setattr(lemon_squeezy_service, "LEMON_SQUEEZY_API_KEY", "ls_key")
    monkeypatch.setattr(lemon_squeezy_service, "LEMON_SQUEEZY_STORE_ID", "12345")
    sent = {}

    def fake_post(url, json=None, headers=None, timeout=None):
        sent.update(url=url, json=json, headers=headers)
        return _FakeResponse({"data": {"id": "chk_1", "attributes": {"url": "https://shop.lemonsqueezy.com/checkout/chk_1"}}})

    monkeypatch.setattr(lemon_squeezy_service.httpx, "post", fake_post)

    response = client.post(
        "/billing/lemon-squeezy/checkout",
        json={"variant_id": "678", "subscription_type": "monthly"},
        headers=user_headers
    )

    assert response.status_code == 200
    assert response.json()["url"] == "https://shop.lemonsqueezy.com/checkout/chk_1"
    assert sent["url"].endswith("/checkouts")
    assert sent["headers"]["Authorization"] == "Bearer ls_key"
    attributes = sent["json"]["data"]["attributes"]
    assert attributes["checkout_data"]["custom"]["user_id"] == str(test_user.id)
    assert sent["json"]["data"]["relationships"]["store"]["data"]["id"] == "12345"


def test_lemon_squeezy_checkout_not_configured(client, user_headers, monkeypatch):
    monkeypatch.setattr(lemon_squeezy_service, "LEMON_SQUEEZY_API_KEY", None)

    response = client.post(
        "/billing/lemon-squeezy/checkout",
        json={"variant_id": "678"},
        headers=user_headers
    )
    assert response.status_code == 503


def test_razorpay_verify_same_payment_twice_records_once(client, user_headers, db_session, razorpay_configured):
    payload = {
        "razorpay_order_id": "order_123",
        "razorpay_payment_id": "pay_456",
        "razorpay_signature": _razorpay_signature("order_123", "pay_456"),
        "subscription_type": "monthly",
    }

    for _ in range(3):
        response = client.post("/billing/razorpay/verify", json=payload, headers=user_headers)
        assert response.status_code == 200
        assert response.json()["subscription_tier"] == "premium"

    assert db_session.query(Payment).count() == 1


def test_stripe_status_without_active_subscription_downgrades(client, premium_user, premium_headers, db_session, monkeypatch):
    monkeypatch.setattr(stripe_service.stripe, "api_key", "sk_test_123")
    monkeypatch.setattr(stripe_service, "find_customer_id", lambda email: "cus_1")
    monkeypatch.setattr(stripe_service.stripe.Subscription, "list", lambda **kwargs: {"data": []})

    response = client.get("/billing/stripe/status", headers=premium_headers)

    assert response.status_code == 200
    assert response.json() == {"subscribed": False, "subscription_tier": None, "subscription_end": None}
    db_session.expire_all()
    user = db_session.query(User).filter(User.id == premium_user.id).first()
    assert user.subscription_tier == "free"
    assert user.is_premium is False
