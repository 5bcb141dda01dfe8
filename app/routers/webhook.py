"""Stripe webhook endpoint.

Flow:
1. Read raw body (needed for HMAC verification)
2. Verify stripe-signature against the configured secret
3. Parse the event envelope
4. Acknowledge with 200 and dispatch in the background

Once a signature verifies, the provider always gets 200: side-effect failures
are logged by the dispatcher and never change the response.
"""

import json
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError

from app.errors import ApiError
from app.integrations import Integrations, get_integrations
from app.webhooks.dispatcher import WebhookEvent, dispatch_event
from app.webhooks.verification import verify_signature

router = APIRouter()
logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "stripe-signature"

PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": f"Content-Type, {SIGNATURE_HEADER}",
    "Access-Control-Max-Age": "86400",
}


@router.post("/webhook")
async def stripe_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    integrations: Integrations = Depends(get_integrations),
):
    """Receive Stripe webhooks (signature-verified)."""
    settings = integrations.settings
    payload = await request.body()
    signature = request.headers.get(SIGNATURE_HEADER)

    if not signature:
        raise ApiError(400, "No signature provided")

    if not settings.stripe_webhook_secret:
        logger.error("STRIPE_WEBHOOK_SECRET not configured")
        raise ApiError(500, "Webhook secret not configured")

    verified = verify_signature(
        payload,
        signature,
        settings.stripe_webhook_secret,
        tolerance=settings.webhook_tolerance_seconds,
    )
    if not verified:
        logger.warning("WEBHOOK status=signature_failed")
        raise ApiError(401, "Invalid signature")

    try:
        event = WebhookEvent.model_validate(json.loads(payload))
    except (ValueError, ValidationError):
        logger.exception("WEBHOOK status=invalid_payload")
        raise ApiError(500, "Webhook processing failed")

    logger.info("WEBHOOK event=%s id=%s status=received", event.type, event.id)
    background_tasks.add_task(dispatch_event, event, integrations)

    return JSONResponse({"received": True}, headers={"Access-Control-Allow-Origin": "*"})


@router.options("/webhook")
async def webhook_preflight():
    return Response(status_code=200, headers=PREFLIGHT_HEADERS)
