from decimal import Decimal
from typing import List
from fastapi import APIRouter, HTTPException, Query, Request

from app.schemas.analytics import CurrencyOut, ConversionResponse
from app.services.currency_service import (
    CurrencyInfo,
    list_currencies,
    get_currency,
    convert_price,
    format_price,
    detect_currency,
)

router = APIRouter(prefix="/currencies", tags=["Currency"])


def _currency_out(currency: CurrencyInfo) -> dict:
    return {
        "code": currency.code,
        "symbol": currency.symbol,
        "name": currency.name,
        "rate": float(currency.rate),
    }


def get_client_ip(request: Request) -> str:
    """Extract client IP address from request."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # Take the first IP in the chain
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "unknown"


@router.get("", response_model=List[CurrencyOut])
def currencies():
    return [_currency_out(currency) for currency in list_currencies()]


@router.get("/detect", response_model=CurrencyOut)
def detect(request: Request):
    """Best guess at the caller's currency from their IP; USD when unknown."""
    return _currency_out(detect_currency(get_client_ip(request)))


@router.get("/convert", response_model=ConversionResponse)
def convert(
    amount: Decimal = Query(..., ge=0),
    from_currency: str = Query("USD", alias="from"),
    to_currency: str = Query(..., alias="to"),
):
    try:
        source = get_currency(from_currency)
        target = get_currency(to_currency)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    converted = convert_price(amount, source, target)
    return {
        "amount": float(amount),
        "from_currency": source.code,
        "to_currency": target.code,
        "converted": float(converted),
        "formatted": format_price(converted, target),
    }
