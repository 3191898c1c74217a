"""CallbackStore — persisted address → ordered callback URL set.

Each address maps to a JSON array of URLs in insertion order. An address
whose last URL is removed has its key deleted, so an empty registration is
never stored.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from addrhooks.callbacks.validator import is_url
from addrhooks.errors.definitions import (
    ErrBadAddress,
    ErrCallbackNotFound,
    ErrDuplicateURL,
    ErrInvalidURL,
    ErrNoCallbacks,
)
from addrhooks.errors.hook_errors import SerializationError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from addrhooks.kvstore.client import KVNamespace

logger = logging.getLogger(__name__)

MIN_ADDRESS_LENGTH = 42


@dataclass
class _AddressLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class CallbackStore:
    """Registry of callback URLs keyed by address.

    ``add`` and ``delete`` are read-modify-write sequences against the
    backing store; they hold a per-address lock so concurrent changes to
    the same address within this process never lose updates. A lock lives
    only while some call holds or awaits it.

    Usage::

        store = CallbackStore(kv.namespace("cb:"))
        await store.add(address, "https://example.com/hook")
        urls = await store.list(address)
    """

    def __init__(self, namespace: KVNamespace) -> None:
        self._ns = namespace
        self._locks: dict[str, _AddressLock] = {}

    async def add(self, address: str, url: str) -> bool:
        """Register *url* for *address*.

        Returns:
            True once the URL has been appended and persisted.

        Raises:
            HookError: ``ErrBadAddress``, ``ErrInvalidURL`` or ``ErrDuplicateURL``.
            SerializationError: If the stored registration is corrupt.
        """
        _check_address(address)
        if not is_url(url):
            raise ErrInvalidURL

        async with self._lock(address):
            urls = await self._load(address) or []
            if url in urls:
                raise ErrDuplicateURL
            urls.append(url)
            await self._save(address, urls)

        logger.info("Callback added for %s: %s", address, url)
        return True

    async def list(self, address: str) -> list[str]:
        """Return the callback URLs for *address* in the order they were added.

        An address without a registration yields an empty list.
        """
        _check_address(address)
        return await self._load(address) or []

    async def delete(self, address: str, url: str) -> None:
        """Remove *url* from the registration of *address*.

        Raises:
            HookError: ``ErrBadAddress``, ``ErrNoCallbacks`` or ``ErrCallbackNotFound``.
            SerializationError: If the stored registration is corrupt.
        """
        _check_address(address)

        async with self._lock(address):
            urls = await self._load(address)
            if urls is None:
                raise ErrNoCallbacks
            remaining = [u for u in urls if u != url]
            if len(remaining) == len(urls):
                raise ErrCallbackNotFound
            if remaining:
                await self._save(address, remaining)
            else:
                await self._ns.delete(address)

        logger.info("Callback removed for %s: %s", address, url)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @contextlib.asynccontextmanager
    async def _lock(self, address: str) -> AsyncIterator[None]:
        entry = self._locks.get(address)
        if entry is None:
            entry = self._locks[address] = _AddressLock()
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0:
                del self._locks[address]

    async def _load(self, address: str) -> list[str] | None:
        raw = await self._ns.get(address)
        if raw is None:
            return None
        try:
            urls = json.loads(raw)
        except ValueError as exc:
            msg = f"corrupt callback registration for {address}: {exc}"
            raise SerializationError(msg) from exc
        if not isinstance(urls, list) or not all(isinstance(u, str) for u in urls):
            msg = f"corrupt callback registration for {address}: expected a list of urls"
            raise SerializationError(msg)
        return urls

    async def _save(self, address: str, urls: list[str]) -> None:
        await self._ns.set(address, json.dumps(urls).encode("utf-8"))


def _check_address(address: str) -> None:
    if len(address) < MIN_ADDRESS_LENGTH:
        raise ErrBadAddress
