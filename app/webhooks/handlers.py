"""Per-event-type webhook handlers.

Every handler takes the event's `data.object` and the integrations bundle and
returns the ActionResults of whatever side effects it ran. Side effects are
optional (skipped when the integration is unconfigured) and independent.
"""

from __future__ import annotations

import logging
import math
import time

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.effects import ActionResult, run_actions
from app.integrations import Integrations
from app.providers import EmailMessage
from app.timeutil import epoch_to_iso, iso_timestamp, local_display_time

logger = logging.getLogger(__name__)

TRIAL_REMINDER_DAYS = 3
_SECONDS_PER_DAY = 86400


class SubscriptionRecord(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    session_id: str | None
    customer_id: str | None
    subscription_id: str | None
    customer_email: str | None
    plan_name: str
    plan_key: str
    is_holding_company: bool
    status: str = "active"
    timestamp: str


class SubscriptionCreatedRecord(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    subscription_id: str | None
    customer_id: str | None
    status: str | None
    trial_end: str | None
    current_period_end: str | None
    timestamp: str


def build_subscription_record(session: dict) -> SubscriptionRecord:
    metadata = session.get("metadata") or {}
    return SubscriptionRecord(
        session_id=session.get("id"),
        customer_id=session.get("customer"),
        subscription_id=session.get("subscription"),
        customer_email=session.get("customer_email"),
        plan_name=metadata.get("planName") or "Unknown Plan",
        plan_key=metadata.get("planKey") or "unknown",
        is_holding_company=metadata.get("isHoldingCompany") == "true",
        timestamp=iso_timestamp(),
    )


def trial_days_remaining(trial_end: int, now: float | None = None) -> int:
    """Whole days until trial end, rounded up."""
    current = time.time() if now is None else now
    return math.ceil((trial_end - current) / _SECONDS_PER_DAY)


def format_amount(minor_units: int | None, currency: str | None) -> str:
    amount = (minor_units or 0) / 100
    return f"{amount:.2f} {(currency or '').upper()}".strip()


def _admin_email(integrations: Integrations, subject: str, text: str) -> EmailMessage:
    settings = integrations.settings
    return EmailMessage(
        to=settings.admin_email,
        sender=settings.webhook_from_email,
        subject=subject,
        text=text,
    )


def _checkout_email_text(record: SubscriptionRecord, integrations: Integrations) -> str:
    settings = integrations.settings
    customer_type = (
        "Holding Company (60-day trial)"
        if record.is_holding_company
        else "Single Company (14-day trial)"
    )
    lines = [
        "New Subscription Received!",
        "",
        f"Customer Email: {record.customer_email}",
        f"Plan: {record.plan_name}",
        f"Plan Key: {record.plan_key}",
        f"Customer Type: {customer_type}",
        "",
        "Stripe Details:",
        f"- Customer ID: {record.customer_id}",
        f"- Subscription ID: {record.subscription_id}",
        f"- Session ID: {record.session_id}",
        "",
        "Action Required:",
        "Please set up this customer's account and send them login credentials.",
    ]
    if settings.onboarding_url:
        lines.append(settings.onboarding_url)
    lines += ["", f"Time: {local_display_time(settings.notification_timezone)}"]
    return "\n".join(lines)


async def handle_checkout_completed(session: dict, integrations: Integrations) -> list[ActionResult]:
    logger.info("Processing checkout completed: %s", session.get("id"))
    record = build_subscription_record(session)
    payload = record.model_dump(by_alias=True)

    actions = {}
    if integrations.backend:
        actions["forward"] = integrations.backend.process_subscription(payload)
    if integrations.email:
        actions["notify"] = integrations.email.send(
            _admin_email(
                integrations,
                f"New Subscription: {record.customer_email}",
                _checkout_email_text(record, integrations),
            )
        )
    if integrations.subscriptions:
        actions["store"] = integrations.subscriptions.put(
            f"subscription_{record.subscription_id}",
            payload,
            metadata={
                "customerEmail": record.customer_email or "",
                "planKey": record.plan_key,
                "status": "pending_setup",
            },
        )
    return await run_actions(actions)


async def handle_subscription_created(subscription: dict, integrations: Integrations) -> list[ActionResult]:
    logger.info("Subscription created: %s", subscription.get("id"))
    if not integrations.subscriptions:
        return []

    record = SubscriptionCreatedRecord(
        subscription_id=subscription.get("id"),
        customer_id=subscription.get("customer"),
        status=subscription.get("status"),
        trial_end=epoch_to_iso(subscription.get("trial_end")),
        current_period_end=epoch_to_iso(subscription.get("current_period_end")),
        timestamp=iso_timestamp(),
    )
    return await run_actions(
        {
            "store": integrations.subscriptions.put(
                f"subscription_created_{record.subscription_id}",
                record.model_dump(by_alias=True),
            )
        }
    )


async def handle_subscription_updated(subscription: dict, integrations: Integrations) -> list[ActionResult]:
    logger.info(
        "Subscription updated: %s status=%s", subscription.get("id"), subscription.get("status")
    )
    trial_end = subscription.get("trial_end")
    if not trial_end:
        return []

    days_left = trial_days_remaining(trial_end)
    if days_left == TRIAL_REMINDER_DAYS and integrations.email:
        # TODO: send the customer a trial-ending reminder once its template is agreed
        logger.info(
            "Trial ending in %d days for %s; reminder due", days_left, subscription.get("id")
        )
    return []


async def handle_subscription_deleted(subscription: dict, integrations: Integrations) -> list[ActionResult]:
    logger.info("Subscription cancelled: %s", subscription.get("id"))
    if not integrations.email:
        return []

    text = "\n".join(
        [
            "Subscription Cancelled",
            "",
            f"Subscription ID: {subscription.get('id')}",
            f"Customer ID: {subscription.get('customer')}",
            f"Cancelled At: {local_display_time(integrations.settings.notification_timezone)}",
            "",
            "Please follow up with this customer.",
        ]
    )
    message = _admin_email(integrations, f"Subscription Cancelled: {subscription.get('customer')}", text)
    return await run_actions({"notify": integrations.email.send(message)})


async def handle_invoice_paid(invoice: dict, integrations: Integrations) -> list[ActionResult]:
    logger.info("Invoice paid: %s", invoice.get("id"))
    if invoice.get("billing_reason") == "subscription_cycle":
        logger.info("First payment after trial for subscription: %s", invoice.get("subscription"))
    return []


async def handle_invoice_payment_failed(invoice: dict, integrations: Integrations) -> list[ActionResult]:
    logger.info("Payment failed for invoice: %s", invoice.get("id"))
    if not integrations.email:
        return []

    text = "\n".join(
        [
            "Payment Failed",
            "",
            f"Customer Email: {invoice.get('customer_email')}",
            f"Invoice ID: {invoice.get('id')}",
            f"Amount: {format_amount(invoice.get('amount_due'), invoice.get('currency'))}",
            f"Attempt Count: {invoice.get('attempt_count')}",
            "",
            "Action Required: Contact customer about payment issue.",
        ]
    )
    message = _admin_email(integrations, f"Payment Failed: {invoice.get('customer_email')}", text)
    return await run_actions({"notify": integrations.email.send(message)})
