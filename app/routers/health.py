from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from app.config import APP_VERSION, Settings, get_settings


router = APIRouter(tags=["health"])

_startup_time = datetime.now(timezone.utc)


class EndpointInfo(BaseModel):
    path: str
    description: str
    provider: str | None = None


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float
    endpoints: list[EndpointInfo]


class IntegrationStatus(BaseModel):
    connected: bool
    status: str
    last_check: str | None = None


class IntegrationsResponse(BaseModel):
    stripe_catalog: IntegrationStatus
    stripe_webhooks: IntegrationStatus
    email_service: IntegrationStatus
    backend_relay: IntegrationStatus
    subscriptions_store: IntegrationStatus
    contacts_store: IntegrationStatus


ENDPOINTS = [
    EndpointInfo(path="/health", description="Service status and API directory"),
    EndpointInfo(path="/health/integrations", description="Integration configuration status"),
    EndpointInfo(path="/api/products", description="Pricing-page products and prices", provider="Stripe"),
    EndpointInfo(path="/api/webhook", description="Subscription lifecycle webhooks", provider="Stripe"),
    EndpointInfo(path="/api/contact", description="Contact form intake"),
]


def _status(configured: bool, missing: str) -> IntegrationStatus:
    if not configured:
        return IntegrationStatus(connected=False, status=missing)
    return IntegrationStatus(
        connected=True,
        status="ok",
        last_check=datetime.now(timezone.utc).isoformat(),
    )


@router.get("/health", response_model=HealthResponse)
async def health_check():
    uptime = (datetime.now(timezone.utc) - _startup_time).total_seconds()

    return HealthResponse(
        status="ok",
        version=APP_VERSION,
        uptime_seconds=round(uptime, 2),
        endpoints=ENDPOINTS,
    )


@router.get("/health/integrations", response_model=IntegrationsResponse)
async def get_integrations_status(settings: Settings = Depends(get_settings)):
    return IntegrationsResponse(
        stripe_catalog=_status(bool(settings.stripe_secret_key), "api key not configured"),
        stripe_webhooks=_status(bool(settings.stripe_webhook_secret), "webhook secret not configured"),
        email_service=_status(
            bool(settings.email_service_url and settings.email_api_key),
            "credentials not configured",
        ),
        backend_relay=_status(
            bool(settings.backend_api_url and settings.backend_api_key),
            "credentials not configured",
        ),
        subscriptions_store=_status(bool(settings.subscriptions_redis_url), "store not configured"),
        contacts_store=_status(bool(settings.contacts_redis_url), "store not configured"),
    )
