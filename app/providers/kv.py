"""Key-value record store backed by Redis."""

import json
import logging

import redis.asyncio as redis

logger = logging.getLogger(__name__)

# One connection pool per Redis URL, shared across requests
_clients: dict[str, redis.Redis] = {}


class KeyValueStore:
    """JSON records under string keys, with optional flat metadata.

    Metadata is kept in a hash at `{key}:meta` so it can be listed without
    decoding the record itself.
    """

    def __init__(self, client: redis.Redis, name: str):
        self.client = client
        self.name = name

    async def put(self, key: str, value: dict, metadata: dict[str, str] | None = None) -> None:
        await self.client.set(key, json.dumps(value))
        if metadata:
            await self.client.hset(f"{key}:meta", mapping=metadata)


def get_store(url: str, name: str) -> KeyValueStore | None:
    """Return a store for `url`, or None when the store is not configured."""
    if not url:
        return None
    client = _clients.get(url)
    if client is None:
        client = redis.from_url(url, encoding="utf-8", decode_responses=True)
        _clients[url] = client
        logger.info("Redis client created for %s store", name)
    return KeyValueStore(client, name)


async def close_stores() -> None:
    """Close every cached Redis connection pool."""
    while _clients:
        _, client = _clients.popitem()
        await client.aclose()
