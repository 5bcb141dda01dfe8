"""Application configuration via pydantic-settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict

APP_VERSION = "0.1.0"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # App
    debug: bool = False
    log_level: str = "INFO"
    allowed_origins: list[str] = ["*"]
    http_timeout_seconds: float = 15.0

    # Stripe
    stripe_secret_key: str = ""
    stripe_webhook_secret: str = ""
    stripe_api_base: str = "https://api.stripe.com/v1"
    webhook_tolerance_seconds: int = 300  # replay window for signed payloads

    # Pricing page
    products_view: str = "tiered"  # "tiered" or "billing-periods"
    default_currency: str = "gbp"
    catalog_cache_seconds: int = 300

    # Backend relay (receives completed checkouts)
    backend_api_url: str = ""
    backend_api_key: str = ""

    # Notification (email) service
    email_service_url: str = ""
    email_api_key: str = ""
    admin_email: str = "support@example.com"
    contact_email: str = "contact@example.com"
    webhook_from_email: str = "webhooks@example.com"
    contact_from_email: str = "noreply@example.com"
    onboarding_url: str = ""
    notification_timezone: str = "Europe/London"

    # Key-value stores (Redis URLs; empty disables the store)
    subscriptions_redis_url: str = ""
    contacts_redis_url: str = ""

    # Contact form
    contact_rate_limit: str = "5/minute"
    client_ip_header: str = "cf-connecting-ip"


settings = Settings()


def get_settings() -> Settings:
    """FastAPI dependency returning the process settings (override in tests)."""
    return settings
