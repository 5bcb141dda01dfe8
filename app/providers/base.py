"""Base interface for outbound HTTP provider clients."""

from abc import ABC, abstractmethod

import httpx

from app.errors import parse_provider_error


class ProviderError(Exception):
    """An outbound provider call failed (transport error or non-2xx response)."""

    def __init__(self, provider: str, message: str, status_code: int | None = None):
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.message = message
        self.status_code = status_code


class BaseProvider(ABC):
    """Abstract base class for HTTP providers.

    Subclasses supply a name and auth headers; `_request` handles transport and
    status errors uniformly so callers only ever see `ProviderError`.
    """

    def __init__(
        self,
        api_key: str,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return provider identifier."""
        pass

    def _get_headers(self) -> dict:
        return {"Authorization": f"Bearer {self.api_key}"}

    def _error_message(self, response: httpx.Response) -> str:
        return parse_provider_error(response.text)

    def client(self) -> httpx.AsyncClient:
        """New AsyncClient for callers that want to share one across requests."""
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    async def _request(
        self,
        method: str,
        url: str,
        client: httpx.AsyncClient | None = None,
        **kwargs,
    ) -> httpx.Response:
        try:
            if client is not None:
                response = await client.request(method, url, headers=self._get_headers(), **kwargs)
            else:
                async with self.client() as own_client:
                    response = await own_client.request(
                        method, url, headers=self._get_headers(), **kwargs
                    )
        except httpx.TimeoutException:
            raise ProviderError(self.provider_name, "request timed out")
        except httpx.HTTPError as exc:
            raise ProviderError(self.provider_name, f"request failed: {exc}")

        if not response.is_success:
            raise ProviderError(
                self.provider_name,
                f"HTTP {response.status_code}: {self._error_message(response)}",
                status_code=response.status_code,
            )
        return response
