"""Webhook event dispatcher - routes a verified event to its handler.

The routing table is static: adding an event type means adding an entry to
EVENT_HANDLERS. Unknown types are logged and ignored so new provider events
degrade to a no-op.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

from pydantic import BaseModel, Field, field_validator

from app.effects import ActionResult
from app.integrations import Integrations
from app.webhooks import handlers

logger = logging.getLogger(__name__)

Handler = Callable[[dict, Integrations], Awaitable[list[ActionResult]]]


class EventData(BaseModel):
    object: dict[str, Any] = Field(default_factory=dict)

    @field_validator("object", mode="before")
    @classmethod
    def _null_object(cls, value):
        return {} if value is None else value


class WebhookEvent(BaseModel):
    """Stripe event envelope: `{id, type, data: {object}}`."""

    id: str = ""
    type: str = ""
    data: EventData = Field(default_factory=EventData)

    @field_validator("data", mode="before")
    @classmethod
    def _null_data(cls, value):
        return {} if value is None else value


EVENT_HANDLERS: dict[str, Handler] = {
    "checkout.session.completed": handlers.handle_checkout_completed,
    "customer.subscription.created": handlers.handle_subscription_created,
    "customer.subscription.updated": handlers.handle_subscription_updated,
    "customer.subscription.deleted": handlers.handle_subscription_deleted,
    "invoice.paid": handlers.handle_invoice_paid,
    "invoice.payment_failed": handlers.handle_invoice_payment_failed,
}


async def dispatch_event(event: WebhookEvent, integrations: Integrations) -> list[ActionResult]:
    """Invoke the handler for `event.type`. Never raises."""
    handler = EVENT_HANDLERS.get(event.type)
    if handler is None:
        logger.info("Unhandled event type: %s", event.type)
        return []

    try:
        results = await handler(event.data.object, integrations)
    except Exception:
        logger.exception("Handler for %s failed (event %s)", event.type, event.id)
        return []

    for result in results:
        logger.info(
            "WEBHOOK event=%s id=%s action=%s ok=%s%s",
            event.type,
            event.id,
            result.action,
            result.ok,
            f" error={result.error}" if result.error else "",
        )
    return results
