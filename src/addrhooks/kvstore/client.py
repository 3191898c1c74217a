"""Key/value store abstraction with memory, Redis and SQL backends.

Callback registrations and seen-transaction records share one backend and are
kept apart by key prefix through :class:`KVNamespace`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from addrhooks.config.settings import StoreConfig


class KVBackend(Protocol):
    """Protocol for key/value backend implementations."""

    async def connect(self) -> None: ...
    async def close(self) -> None: ...
    async def get(self, key: str) -> bytes | None: ...
    async def set(self, key: str, value: bytes) -> None: ...
    async def delete(self, key: str) -> None: ...
    async def iterate(self, prefix: str = "") -> list[tuple[str, bytes]]: ...


class KVClient:
    """Store abstraction that delegates to a memory, Redis or SQL backend."""

    def __init__(self, config: StoreConfig) -> None:
        """Initialize the store client with configuration.

        Args:
            config: Store configuration with engine type and connection params.
        """
        self._config = config
        self._backend: KVBackend | None = None
        self._connected = False

    async def connect(self) -> None:
        """Connect to the configured backend.

        Raises:
            ValueError: If the store engine type is invalid.
        """
        from addrhooks.kvstore.memory import MemoryKV
        from addrhooks.kvstore.redis import RedisKV
        from addrhooks.kvstore.sql import SQLKV

        engine = self._config.engine.lower()

        if engine == "redis":
            self._backend = RedisKV(self._config)
        elif engine == "sql":
            self._backend = SQLKV(self._config)
        elif engine == "memory":
            self._backend = MemoryKV()
        else:
            msg = f"Unsupported store engine: {engine}"
            raise ValueError(msg)

        await self._backend.connect()
        self._connected = True

    async def close(self) -> None:
        """Close the backend connection (idempotent)."""
        if self._backend is not None:
            await self._backend.close()
            self._backend = None
        self._connected = False

    @property
    def is_connected(self) -> bool:
        """Check if the store is connected."""
        return self._connected and self._backend is not None

    @property
    def backend(self) -> KVBackend:
        """Return the connected backend.

        Raises:
            RuntimeError: If not connected.
        """
        if not self._connected or self._backend is None:
            msg = "Store not connected. Call connect() first."
            raise RuntimeError(msg)
        return self._backend

    def namespace(self, prefix: str) -> KVNamespace:
        """Return a view of the backend restricted to keys under *prefix*."""
        return KVNamespace(self.backend, prefix)


class KVNamespace:
    """Prefix-scoped view over a :class:`KVBackend`.

    Keys passed in and returned are un-prefixed, so two namespaces over the
    same backend never see each other's entries.
    """

    def __init__(self, backend: KVBackend, prefix: str) -> None:
        if not prefix:
            msg = "Namespace prefix must not be empty"
            raise ValueError(msg)
        self._backend = backend
        self._prefix = prefix

    @property
    def prefix(self) -> str:
        """Return the key prefix of this namespace."""
        return self._prefix

    async def get(self, key: str) -> bytes | None:
        """Return the stored value for *key*, or None if absent."""
        return await self._backend.get(self._prefix + key)

    async def set(self, key: str, value: bytes) -> None:
        """Store *value* under *key*."""
        await self._backend.set(self._prefix + key, value)

    async def delete(self, key: str) -> None:
        """Remove *key* (no-op if absent)."""
        await self._backend.delete(self._prefix + key)

    async def iterate(self) -> list[tuple[str, bytes]]:
        """Return a snapshot of all ``(key, value)`` pairs in this namespace."""
        entries = await self._backend.iterate(self._prefix)
        size = len(self._prefix)
        return [(key[size:], value) for key, value in entries]
