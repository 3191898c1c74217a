"""SeenTransactionStore — transaction id → first-seen Unix timestamp.

Records are stored as JSON ``{"unixtime": <seconds>}`` and purged by the
reaper once older than the TTL.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from addrhooks.errors.hook_errors import SerializationError

if TYPE_CHECKING:
    from addrhooks.kvstore.client import KVNamespace

logger = logging.getLogger(__name__)

# 48 hours
DEFAULT_TTL = 48 * 60 * 60


class SeenTransactionStore:
    """Dedup record of transactions the listener has already processed."""

    def __init__(self, namespace: KVNamespace) -> None:
        self._ns = namespace

    async def contains(self, tx_id: str) -> bool:
        """Whether *tx_id* has been recorded."""
        return await self._ns.get(tx_id) is not None

    async def record(self, tx_id: str, unixtime: int) -> None:
        """Record *tx_id* as first seen at *unixtime*."""
        await self._ns.set(tx_id, encode_record(unixtime))

    async def first_seen(self, tx_id: str) -> int | None:
        """Return the first-seen timestamp of *tx_id*, or None if unknown.

        Raises:
            SerializationError: If the stored record is corrupt.
        """
        raw = await self._ns.get(tx_id)
        return None if raw is None else decode_record(raw)

    async def purge_expired(self, now: int, ttl: int = DEFAULT_TTL) -> int:
        """Delete records older than *ttl* seconds; return how many were removed.

        Records that cannot be decoded carry no usable timestamp and are
        removed as well.
        """
        purged = 0
        for tx_id, raw in await self._ns.iterate():
            try:
                unixtime = decode_record(raw)
            except SerializationError:
                logger.warning("Purging unreadable seen-tx record %s", tx_id)
                await self._ns.delete(tx_id)
                purged += 1
                continue
            if now - unixtime > ttl:
                await self._ns.delete(tx_id)
                purged += 1
        return purged


def encode_record(unixtime: int) -> bytes:
    """Serialize a first-seen timestamp."""
    return json.dumps({"unixtime": int(unixtime)}).encode("utf-8")


def decode_record(raw: bytes) -> int:
    """Deserialize a first-seen timestamp.

    Raises:
        SerializationError: If *raw* is not a valid record.
    """
    try:
        data = json.loads(raw)
    except ValueError as exc:
        msg = f"corrupt seen-tx record: {exc}"
        raise SerializationError(msg) from exc
    unixtime = data.get("unixtime") if isinstance(data, dict) else None
    if not isinstance(unixtime, int) or isinstance(unixtime, bool):
        msg = "corrupt seen-tx record: missing unixtime"
        raise SerializationError(msg)
    return unixtime
