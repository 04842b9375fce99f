"""
Unit tests for currency lookup, conversion, formatting and detection.
"""
from decimal import Decimal

import httpx
import pytest

from app.services import currency_service
from app.services.currency_service import (
    CURRENCIES,
    USD,
    get_currency,
    get_currency_by_country,
    convert_price,
    convert_subscription_price,
    format_price,
    round_money,
    get_razorpay_currency,
    detect_currency,
)


def test_get_currency_is_case_insensitive():
    assert get_currency("eur") is CURRENCIES["EUR"]
    assert get_currency(" GBP ").symbol == "£"


def test_get_currency_unknown_raises():
    with pytest.raises(ValueError, match="Unsupported currency"):
        get_currency("XYZ")


def test_get_currency_by_country_defaults_to_usd():
    assert get_currency_by_country("IN").code == "INR"
    assert get_currency_by_country("de").code == "EUR"
    assert get_currency_by_country("BR") is USD
    assert get_currency_by_country(None) is USD


def test_round_money_half_up():
    assert round_money(Decimal("2.345")) == Decimal("2.35")
    assert round_money(0.125) == Decimal("0.13")
    assert round_money(3) == Decimal("3.00")


def test_convert_from_usd():
    assert convert_subscription_price(3, get_currency("INR")) == Decimal("249.00")
    assert convert_subscription_price(30, get_currency("JPY")) == Decimal("4500.00")
    assert convert_subscription_price(Decimal("15.49"), USD) == Decimal("15.49")


def test_convert_between_non_usd_currencies_goes_through_usd():
    # 100 EUR -> 117.647... USD -> 92.94 GBP
    assert convert_price(100, get_currency("EUR"), get_currency("GBP")) == Decimal("92.94")


def test_format_price():
    assert format_price(Decimal("249"), get_currency("INR")) == "₹249.00"
    assert format_price(Decimal("2.5"), USD) == "$2.50"
    assert format_price(Decimal("4.041"), get_currency("CAD")) == "C$4.04"


def test_razorpay_currency_falls_back_to_usd():
    assert get_razorpay_currency(get_currency("INR")) == "INR"
    assert get_razorpay_currency(get_currency("EUR")) == "EUR"
    assert get_razorpay_currency(get_currency("JPY")) == "USD"


class _FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise httpx.HTTPStatusError("error", request=None, response=None)

    def json(self):
        return self._payload


def test_detect_currency_skips_local_addresses(monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("should not call out for local addresses")

    monkeypatch.setattr(currency_service.httpx, "get", fail)
    assert detect_currency("127.0.0.1") is USD
    assert detect_currency("testclient") is USD
    assert detect_currency(None) is USD


def test_detect_currency_from_country(monkeypatch):
    calls = []

    def fake_get(url, timeout=None):
        calls.append(url)
        return _FakeResponse({"country_code": "GB"})

    monkeypatch.setattr(currency_service.httpx, "get", fake_get)

    assert detect_currency("81.2.69.142").code == "GBP"
    assert calls == [f"{currency_service.IPAPI_URL}/81.2.69.142/json/"]


def test_detect_currency_falls_back_on_error(monkeypatch):
    def fake_get(url, timeout=None):
        raise httpx.ConnectError("boom")

    monkeypatch.setattr(currency_service.httpx, "get", fake_get)
    assert detect_currency("81.2.69.142") is USD


def test_detect_currency_falls_back_on_http_error(monkeypatch):
    monkeypatch.setattr(
        currency_service.httpx, "get",
        lambda url, timeout=None: _FakeResponse({}, status_code=429)
    )
    assert detect_currency("81.2.69.142") is USD


def test_currency_endpoints(client):
    response = client.get("/currencies")
    assert response.status_code == 200
    assert [c["code"] for c in response.json()] == ["USD", "EUR", "GBP", "INR", "CAD", "AUD", "JPY"]

    response = client.get("/currencies/convert", params={"amount": 10, "from": "USD", "to": "INR"})
    assert response.status_code == 200
    assert response.json()["converted"] == 830.0
    assert response.json()["formatted"] == "₹830.00"

    response = client.get("/currencies/convert", params={"amount": 10, "to": "XYZ"})
    assert response.status_code == 400


def test_detect_endpoint_uses_forwarded_for(client, monkeypatch):
    monkeypatch.setattr(
        currency_service.httpx, "get",
        lambda url, timeout=None: _FakeResponse({"country_code": "IN"})
    )

    response = client.get("/currencies/detect", headers={"X-Forwarded-For": "49.36.0.1, 10.0.0.1"})

    assert response.status_code == 200
    assert response.json()["code"] == "INR"


def test_from_minor_units_respects_zero_decimal_currencies():
    assert currency_service.from_minor_units(300, "usd") == Decimal("3")
    assert currency_service.from_minor_units(24900, "INR") == Decimal("249")
    assert currency_service.from_minor_units(450, "JPY") == Decimal("450")
    assert currency_service.from_minor_units(None, "USD") == Decimal("0")
