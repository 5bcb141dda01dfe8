"""Stripe webhook signature verification - constant-time HMAC-SHA256.

Security contract:
- Signed message is `{t}.{raw body}`; the body is never re-serialized
- Signatures older than the tolerance (300s default) are rejected
- Comparison uses hmac.compare_digest()
- Malformed headers and unexpected errors -> False (fail closed)
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import time

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE_SECONDS = 300


def parse_signature_header(signature_header: str) -> tuple[int | None, list[str]]:
    """Split `t=<timestamp>,v1=<sig>[,v1=<sig>...]` into (timestamp, v1 signatures).

    Timestamp is None when absent or not an integer.
    """
    timestamp = None
    signatures: list[str] = []
    for item in signature_header.split(","):
        kv = item.strip().split("=", 1)
        if len(kv) != 2:
            continue
        key, value = kv
        if key == "t":
            try:
                timestamp = int(value)
            except ValueError:
                timestamp = None
        elif key == "v1" and value:
            signatures.append(value)
    return timestamp, signatures


def compute_signature(timestamp: int, payload: bytes, secret: str) -> str:
    """Lowercase hex HMAC-SHA256 of `{timestamp}.{payload}`."""
    signed_payload = f"{timestamp}.".encode("utf-8") + payload
    return hmac.new(secret.encode("utf-8"), signed_payload, hashlib.sha256).hexdigest()


def verify_signature(
    payload: bytes,
    signature_header: str | None,
    secret: str,
    tolerance: int = DEFAULT_TOLERANCE_SECONDS,
    now: float | None = None,
) -> bool:
    """Verify a Stripe-Signature header against the raw request body.

    Args:
        payload: Raw request body bytes
        signature_header: Value of the stripe-signature header
        secret: Webhook signing secret
        tolerance: Maximum signature age in seconds
        now: Current unix time (defaults to time.time())

    Returns:
        True if a v1 signature matches and the timestamp is fresh
    """
    if not secret or not signature_header:
        return False

    try:
        timestamp, signatures = parse_signature_header(signature_header)
        if timestamp is None or not signatures:
            logger.warning("Malformed stripe-signature header")
            return False

        current = time.time() if now is None else now
        age = current - timestamp
        if age > tolerance:
            logger.warning("Webhook timestamp too old: %ds", age)
            return False

        expected = compute_signature(timestamp, payload, secret)
        return any(hmac.compare_digest(expected, sig) for sig in signatures)
    except Exception:
        logger.exception("Signature verification error")
        return False
