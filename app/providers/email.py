"""Notification service client - relays plain-text email over a JSON HTTP API."""

from pydantic import BaseModel, Field

from .base import BaseProvider


class EmailMessage(BaseModel):
    to: str
    sender: str = Field(..., serialization_alias="from")
    subject: str
    text: str
    reply_to: str | None = None


class EmailService(BaseProvider):
    """POSTs `{to, from, subject, text[, reply_to]}` to the configured endpoint."""

    def __init__(self, url: str, api_key: str, **kwargs):
        super().__init__(api_key, **kwargs)
        self.url = url

    @property
    def provider_name(self) -> str:
        return "email"

    async def send(self, message: EmailMessage) -> None:
        payload = message.model_dump(by_alias=True, exclude_none=True)
        await self._request("POST", self.url, json=payload)
