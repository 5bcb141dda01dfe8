"""Stripe webhook receiver.

Each delivery is signature-verified, parsed into a WebhookEvent, acknowledged,
and then dispatched to the handler registered for its event type.
"""
