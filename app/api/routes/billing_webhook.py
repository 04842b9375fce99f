import json
import logging
from fastapi import APIRouter, Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_db
from app.core.errors import PaymentProviderError, WebhookVerificationError
from app.services import stripe_service, lemon_squeezy_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["Billing Webhook"])


# ✅ STRIPE WEBHOOK
@router.post("/stripe")
async def stripe_webhook(
    request: Request,
    stripe_signature: str = Header(None),
    db: Session = Depends(get_db),
):
    payload = await request.body()
    logger.info(f"Webhook received: signature={bool(stripe_signature)}, body_length={len(payload)}")

    try:
        event = stripe_service.verify_webhook(payload, stripe_signature)
        stripe_service.handle_event(db, event)
    except WebhookVerificationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PaymentProviderError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except ValueError as e:
        logger.exception("Error processing Stripe webhook")
        raise HTTPException(status_code=400, detail=str(e))

    return {"received": True}


# ✅ LEMON SQUEEZY WEBHOOK
@router.post("/lemon-squeezy")
async def lemon_squeezy_webhook(
    request: Request,
    x_signature: str = Header(None),
    db: Session = Depends(get_db),
):
    body = await request.body()
    logger.info(f"Webhook received: signature={bool(x_signature)}, body_length={len(body)}")

    try:
        lemon_squeezy_service.verify_webhook_signature(body, x_signature)
        lemon_squeezy_service.handle_event(db, json.loads(body))
    except WebhookVerificationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ValueError as e:
        logger.exception("Error processing Lemon Squeezy webhook")
        raise HTTPException(status_code=400, detail=str(e))

    return {"success": True}
