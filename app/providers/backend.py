"""Backend relay - forwards completed subscriptions to the account backend."""

from .base import BaseProvider

PROCESS_SUBSCRIPTION_PATH = "/api/functions/processSubscription"


class BackendRelay(BaseProvider):

    def __init__(self, base_url: str, api_key: str, **kwargs):
        super().__init__(api_key, **kwargs)
        self.base_url = base_url.rstrip("/")

    @property
    def provider_name(self) -> str:
        return "backend"

    async def process_subscription(self, record: dict) -> None:
        await self._request("POST", f"{self.base_url}{PROCESS_SUBSCRIPTION_PATH}", json=record)
