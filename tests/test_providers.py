"""Tests for outbound provider clients."""

from __future__ import annotations

import json

import fakeredis.aioredis
import httpx
import pytest

from app.config import Settings
from app.errors import parse_provider_error
from app.integrations import build_integrations
from app.providers import BackendRelay, EmailMessage, EmailService, KeyValueStore, ProviderError, StripeClient
from app.providers.kv import get_store


def _stripe_transport(prices_status: dict[str, int] | None = None, products_status: int = 200):
    """Mock Stripe API: two products, one price each."""
    prices_status = prices_status or {}
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path == "/v1/products":
            if products_status != 200:
                return httpx.Response(
                    products_status,
                    json={"error": {"type": "api_error", "message": "Something went wrong"}},
                )
            return httpx.Response(200, json={"data": [{"id": "prod_a"}, {"id": "prod_b"}]})
        if request.url.path == "/v1/prices":
            product = request.url.params["product"]
            status = prices_status.get(product, 200)
            if status != 200:
                return httpx.Response(status, text="nope")
            return httpx.Response(200, json={"data": [{"id": f"price_{product}", "unit_amount": 1000}]})
        return httpx.Response(404)

    return httpx.MockTransport(handler), seen


class TestStripeClient:

    @pytest.mark.asyncio
    async def test_fetch_catalog(self):
        transport, seen = _stripe_transport()
        client = StripeClient("sk_test", transport=transport)

        catalog = await client.fetch_catalog()

        assert [(p["id"], [x["id"] for x in prices]) for p, prices in catalog] == [
            ("prod_a", ["price_prod_a"]),
            ("prod_b", ["price_prod_b"]),
        ]
        assert seen[0].headers["authorization"] == "Bearer sk_test"
        assert seen[0].url.params["active"] == "true"
        assert seen[0].url.params["limit"] == "100"

    @pytest.mark.asyncio
    async def test_failed_price_fetch_degrades(self):
        transport, _ = _stripe_transport(prices_status={"prod_a": 500})
        catalog = await StripeClient("sk_test", transport=transport).fetch_catalog()

        assert catalog[0] == ({"id": "prod_a"}, [])
        assert catalog[1][1][0]["id"] == "price_prod_b"

    @pytest.mark.asyncio
    async def test_failed_product_listing_raises(self):
        transport, _ = _stripe_transport(products_status=500)
        with pytest.raises(ProviderError) as exc_info:
            await StripeClient("sk_test", transport=transport).fetch_catalog()
        assert exc_info.value.status_code == 500
        assert "api_error: Something went wrong" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_transport_error_raises_provider_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        client = StripeClient("sk_test", transport=httpx.MockTransport(handler))
        with pytest.raises(ProviderError):
            await client.list_products()


class TestEmailService:

    @pytest.mark.asyncio
    async def test_payload_shape(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["auth"] = request.headers["authorization"]
            captured["body"] = json.loads(request.content)
            return httpx.Response(202)

        service = EmailService("https://mail.test/send", "key", transport=httpx.MockTransport(handler))
        await service.send(EmailMessage(to="a@b.test", sender="c@d.test", subject="Hi", text="Body"))

        assert captured["auth"] == "Bearer key"
        assert captured["body"] == {"to": "a@b.test", "from": "c@d.test", "subject": "Hi", "text": "Body"}

    @pytest.mark.asyncio
    async def test_non_success_raises(self):
        service = EmailService(
            "https://mail.test/send",
            "key",
            transport=httpx.MockTransport(lambda r: httpx.Response(500, text="down")),
        )
        with pytest.raises(ProviderError):
            await service.send(EmailMessage(to="a@b.test", sender="c@d.test", subject="s", text="t"))


class TestBackendRelay:

    @pytest.mark.asyncio
    async def test_posts_to_process_subscription(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = str(request.url)
            return httpx.Response(200, json={})

        relay = BackendRelay("https://backend.test/", "key", transport=httpx.MockTransport(handler))
        await relay.process_subscription({"subscriptionId": "sub_1"})
        assert captured["url"] == "https://backend.test/api/functions/processSubscription"


class TestKeyValueStore:

    @pytest.mark.asyncio
    async def test_put_writes_record_and_metadata(self):
        redis = fakeredis.aioredis.FakeRedis(decode_responses=True)
        store = KeyValueStore(redis, "contacts")
        await store.put("contact_1", {"name": "Ada"}, metadata={"status": "new"})
        assert json.loads(await redis.get("contact_1")) == {"name": "Ada"}
        assert await redis.hgetall("contact_1:meta") == {"status": "new"}

    @pytest.mark.asyncio
    async def test_put_without_metadata(self):
        redis = fakeredis.aioredis.FakeRedis(decode_responses=True)
        await KeyValueStore(redis, "contacts").put("contact_2", {"name": "Grace"})
        assert await redis.exists("contact_2:meta") == 0

    def test_unconfigured_store(self):
        assert get_store("", "contacts") is None


class TestBuildIntegrations:

    def test_unconfigured(self):
        bundle = build_integrations(Settings(_env_file=None))
        assert bundle.stripe is None
        assert bundle.email is None
        assert bundle.backend is None
        assert bundle.subscriptions is None
        assert bundle.contacts is None

    def test_email_requires_url_and_key(self):
        bundle = build_integrations(Settings(_env_file=None, email_service_url="https://mail.test"))
        assert bundle.email is None


class TestParseProviderError:

    def test_structured(self):
        body = json.dumps({"error": {"type": "invalid_request_error", "message": "No such price"}})
        assert parse_provider_error(body) == "invalid_request_error: No such price"

    def test_custom_kind_key(self):
        body = json.dumps({"error": {"code": "RATE_LIMITED", "message": "Slow down"}})
        assert parse_provider_error(body, kind_key="code") == "RATE_LIMITED: Slow down"

    def test_plain_error_string(self):
        assert parse_provider_error(json.dumps({"error": "mailbox unavailable"})) == "mailbox unavailable"

    @pytest.mark.parametrize("text", ["Bad Gateway", "[]", json.dumps({"detail": "nope"})])
    def test_unrecognised_body_returned_raw(self, text):
        assert parse_provider_error(text) == text
