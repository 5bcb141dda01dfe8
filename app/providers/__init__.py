"""
Provider Clients

Outbound adapters for Stripe, the notification service, the backend relay
and the Redis key-value stores.
"""

from .backend import BackendRelay
from .base import BaseProvider, ProviderError
from .email import EmailMessage, EmailService
from .kv import KeyValueStore
from .stripe import StripeClient

__all__ = [
    "BaseProvider",
    "ProviderError",
    "BackendRelay",
    "EmailMessage",
    "EmailService",
    "KeyValueStore",
    "StripeClient",
]
