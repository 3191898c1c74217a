"""In-memory key/value backend for development and testing."""

from __future__ import annotations


class MemoryKV:
    """Process-local key/value backend.

    Nothing survives a restart; use the ``sql`` or ``redis`` engine for a
    persisted registry.
    """

    def __init__(self) -> None:
        self._data: dict[str, bytes] = {}

    async def connect(self) -> None:  # noqa: ASYNC910
        """Connect (no-op for in-memory)."""

    async def close(self) -> None:  # noqa: ASYNC910
        """Close and clear the store."""
        self._data.clear()

    async def get(self, key: str) -> bytes | None:  # noqa: ASYNC910
        """Get a value, or None if not found."""
        return self._data.get(key)

    async def set(self, key: str, value: bytes) -> None:  # noqa: ASYNC910
        """Set a value."""
        self._data[key] = value

    async def delete(self, key: str) -> None:  # noqa: ASYNC910
        """Delete a key."""
        self._data.pop(key, None)

    async def iterate(self, prefix: str = "") -> list[tuple[str, bytes]]:  # noqa: ASYNC910
        """Return a snapshot of entries whose key starts with *prefix*."""
        return [(k, v) for k, v in self._data.items() if k.startswith(prefix)]
