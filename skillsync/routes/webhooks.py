import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from sqlmodel import Session

from skillsync.database import get_session
from skillsync.services.gateway import (
    PaymentGateway,
    WebhookVerificationError,
    get_payment_gateway,
)
from skillsync.services.reconciliation import handle_gateway_event

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/stripe")
async def stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None),
    session: Session = Depends(get_session),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    payload = await request.body()

    try:
        event = gateway.verify_event(payload, stripe_signature)
    except WebhookVerificationError as exc:
        logger.warning("Rejected webhook: %s", exc)
        raise HTTPException(400, f"Webhook Error: {exc}")

    try:
        await run_in_threadpool(handle_gateway_event, session, event)
    except Exception:
        # non-2xx makes the gateway redeliver
        session.rollback()
        logger.exception("Webhook processing failed for event %s", event.get("id"))
        raise HTTPException(500, "Webhook handler failed")

    return {"received": True}
