"""Shared error types and error-parsing utilities for external API integrations."""

import json
import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Raised by routes to produce a `{success: false, error}` response."""

    def __init__(self, status_code: int, error: str):
        super().__init__(error)
        self.status_code = status_code
        self.error = error


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(
        {"success": False, "error": exc.error},
        status_code=exc.status_code,
        headers={"Access-Control-Allow-Origin": "*"},
    )


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning("Rate limit hit on %s: %s", request.url.path, exc.detail)
    return JSONResponse(
        {"success": False, "error": "Too many requests"},
        status_code=429,
        headers={"Access-Control-Allow-Origin": "*"},
    )


def parse_provider_error(response_text: str, kind_key: str = "type") -> str:
    """Extract a readable message from a JSON error body.

    Understands `{"error": {"message": "...", <kind_key>: "..."}}` (Stripe)
    and `{"error": "..."}`. Returns "kind: message" when a kind is present,
    the raw text when the body is not a recognised error.
    """
    try:
        body = json.loads(response_text)
    except ValueError:
        return response_text
    err = body.get("error") if isinstance(body, dict) else None
    if isinstance(err, str) and err:
        return err
    if isinstance(err, dict) and err.get("message"):
        kind = err.get(kind_key)
        return f"{kind}: {err['message']}" if kind else err["message"]
    return response_text
