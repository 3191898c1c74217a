"""Tests for the seen-transaction store and its expiry rule."""

from __future__ import annotations

import pytest

from addrhooks.errors.hook_errors import SerializationError
from addrhooks.listener.seen import DEFAULT_TTL, decode_record, encode_record

NOW = 1_700_000_000


class TestRecordCodec:
    def test_encode(self) -> None:
        assert encode_record(NOW) == b'{"unixtime": 1700000000}'

    def test_decode(self) -> None:
        assert decode_record(encode_record(NOW)) == NOW

    @pytest.mark.parametrize(
        "raw",
        [b"", b"garbage", b"[]", b'{"unixtime": "soon"}', b'{"other": 1}', b'{"unixtime": true}'],
    )
    def test_decode_rejects(self, raw: bytes) -> None:
        with pytest.raises(SerializationError):
            decode_record(raw)


class TestSeenTransactionStore:
    async def test_record_and_contains(self, seen_store) -> None:
        assert not await seen_store.contains("tx1")
        await seen_store.record("tx1", NOW)
        assert await seen_store.contains("tx1")
        assert await seen_store.first_seen("tx1") == NOW

    async def test_first_seen_unknown(self, seen_store) -> None:
        assert await seen_store.first_seen("nope") is None


class TestPurgeExpired:
    async def test_keeps_fresh_records(self, seen_store) -> None:
        await seen_store.record("fresh", NOW - 60)
        assert await seen_store.purge_expired(NOW) == 0
        assert await seen_store.contains("fresh")

    async def test_purges_records_older_than_ttl(self, seen_store) -> None:
        await seen_store.record("old", NOW - DEFAULT_TTL - 1)
        await seen_store.record("fresh", NOW - 3600)
        assert await seen_store.purge_expired(NOW) == 1
        assert not await seen_store.contains("old")
        assert await seen_store.contains("fresh")

    async def test_record_exactly_at_ttl_is_kept(self, seen_store) -> None:
        await seen_store.record("edge", NOW - DEFAULT_TTL)
        assert await seen_store.purge_expired(NOW) == 0

    async def test_corrupt_records_are_purged(self, seen_store, kv_client) -> None:
        # Valid, expired records must be purged and corrupt ones must not linger.
        await kv_client.namespace("seen:").set("corrupt", b"not json")
        await seen_store.record("old", NOW - DEFAULT_TTL - 10)
        await seen_store.record("fresh", NOW)
        assert await seen_store.purge_expired(NOW) == 2
        assert not await seen_store.contains("corrupt")
        assert not await seen_store.contains("old")
        assert await seen_store.contains("fresh")

    async def test_custom_ttl(self, seen_store) -> None:
        await seen_store.record("tx", NOW - 120)
        assert await seen_store.purge_expired(NOW, ttl=60) == 1

    async def test_does_not_touch_callback_namespace(self, seen_store, kv_client) -> None:
        await kv_client.namespace("cb:").set("tx", b"not a timestamp")
        assert await seen_store.purge_expired(NOW) == 0
        assert await kv_client.namespace("cb:").get("tx") == b"not a timestamp"
