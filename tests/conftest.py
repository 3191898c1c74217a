"""Shared test fixtures for the addrhooks test suite."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from addrhooks.config.settings import StoreEngine

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


@pytest.fixture
def app_config():
    """Provide a test AppConfig with an in-memory store and fast retries."""
    from addrhooks.config.settings import AppConfig, DispatcherConfig, StoreConfig

    return AppConfig(
        store=StoreConfig(engine=StoreEngine.MEMORY),
        dispatcher=DispatcherConfig(workers=2, max_retries=1, retry_delay=0.0),
    )


@pytest.fixture
async def kv_client(app_config) -> AsyncIterator:
    """Provide a connected in-memory KVClient."""
    from addrhooks.kvstore.client import KVClient

    client = KVClient(app_config.store)
    await client.connect()
    yield client
    await client.close()


@pytest.fixture
def callback_store(kv_client):
    """Provide a CallbackStore over the ``cb:`` namespace."""
    from addrhooks.callbacks.store import CallbackStore

    return CallbackStore(kv_client.namespace("cb:"))


@pytest.fixture
def seen_store(kv_client):
    """Provide a SeenTransactionStore over the ``seen:`` namespace."""
    from addrhooks.listener.seen import SeenTransactionStore

    return SeenTransactionStore(kv_client.namespace("seen:"))


@pytest.fixture
def delivered() -> list:
    """Requests received by the mocked callback endpoint."""
    return []


@pytest.fixture
def test_client(app_config, delivered):
    """Provide a FastAPI TestClient with the engine started and callbacks mocked."""
    import httpx
    from fastapi.testclient import TestClient

    from addrhooks.api.app import create_app

    def handler(request: httpx.Request) -> httpx.Response:
        delivered.append(request)
        return httpx.Response(200, json={"ok": True})

    app = create_app(
        config=app_config,
        engine_options={"transport": httpx.MockTransport(handler)},
    )
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client
