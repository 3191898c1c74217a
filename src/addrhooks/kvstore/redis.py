"""Redis key/value backend."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from addrhooks.config.settings import StoreConfig

_SCAN_BATCH = 500


class RedisKV:
    """Redis-based key/value backend using redis-py with hiredis parser."""

    def __init__(self, config: StoreConfig) -> None:
        """Initialize Redis backend.

        Args:
            config: Store configuration with Redis connection details.
        """
        self._config = config
        self._redis = None

    async def connect(self) -> None:
        """Connect to Redis.

        Raises:
            ImportError: If redis package not installed.
            ConnectionError: If Redis connection fails.
        """
        try:
            from redis.asyncio import Redis
        except ImportError as e:
            msg = "redis package not installed. Install with: pip install redis[hiredis]"
            raise ImportError(msg) from e

        # Values are raw JSON bytes, so responses are not decoded.
        self._redis = Redis.from_url(
            self._config.url,
            max_connections=self._config.max_connections,
        )

        try:
            await self._redis.ping()
        except Exception as e:
            msg = f"Failed to connect to Redis at {self._config.url}"
            raise ConnectionError(msg) from e

    async def close(self) -> None:
        """Close the Redis connection."""
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None

    async def get(self, key: str) -> bytes | None:
        """Get a value from Redis."""
        assert self._redis is not None
        return await self._redis.get(key)

    async def set(self, key: str, value: bytes) -> None:
        """Set a value in Redis."""
        assert self._redis is not None
        await self._redis.set(key, value)

    async def delete(self, key: str) -> None:
        """Delete a key from Redis."""
        assert self._redis is not None
        await self._redis.delete(key)

    async def iterate(self, prefix: str = "") -> list[tuple[str, bytes]]:
        """Return entries whose key starts with *prefix*.

        Uses ``SCAN MATCH`` so large keyspaces are walked incrementally. Keys
        deleted between the scan and the read are skipped.
        """
        assert self._redis is not None
        entries: list[tuple[str, bytes]] = []
        pattern = _escape_glob(prefix) + "*"
        async for raw_key in self._redis.scan_iter(match=pattern, count=_SCAN_BATCH):
            value = await self._redis.get(raw_key)
            if value is None:
                continue
            key = raw_key.decode("utf-8") if isinstance(raw_key, bytes) else raw_key
            entries.append((key, value))
        return entries


def _escape_glob(text: str) -> str:
    """Escape Redis glob metacharacters in *text*."""
    for ch in ("\\", "*", "?", "[", "]"):
        text = text.replace(ch, "\\" + ch)
    return text
