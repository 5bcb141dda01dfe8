"""Per-request bundle of configured outbound clients."""

from dataclasses import dataclass

from fastapi import Depends

from app.config import Settings, get_settings
from app.providers import BackendRelay, EmailService, KeyValueStore, StripeClient
from app.providers.kv import get_store


@dataclass
class Integrations:
    """Everything a handler may call out to. Unconfigured clients are None."""

    settings: Settings
    stripe: StripeClient | None = None
    email: EmailService | None = None
    backend: BackendRelay | None = None
    subscriptions: KeyValueStore | None = None
    contacts: KeyValueStore | None = None


def build_integrations(settings: Settings) -> Integrations:
    timeout = settings.http_timeout_seconds

    stripe = None
    if settings.stripe_secret_key:
        stripe = StripeClient(settings.stripe_secret_key, settings.stripe_api_base, timeout=timeout)

    email = None
    if settings.email_service_url and settings.email_api_key:
        email = EmailService(settings.email_service_url, settings.email_api_key, timeout=timeout)

    backend = None
    if settings.backend_api_url and settings.backend_api_key:
        backend = BackendRelay(settings.backend_api_url, settings.backend_api_key, timeout=timeout)

    return Integrations(
        settings=settings,
        stripe=stripe,
        email=email,
        backend=backend,
        subscriptions=get_store(settings.subscriptions_redis_url, "subscriptions"),
        contacts=get_store(settings.contacts_redis_url, "contacts"),
    )


def get_integrations(settings: Settings = Depends(get_settings)) -> Integrations:
    """FastAPI dependency building the bundle from the request's settings."""
    return build_integrations(settings)
