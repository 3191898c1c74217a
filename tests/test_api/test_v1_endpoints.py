"""Tests for the V1 callback registration and transaction endpoints."""

from __future__ import annotations

import json
import time

import pytest

ADDRESS_A = "bm1q5p9d4gelfm4cc3zq3slj7vh2njx23ma2cf866j"
ADDRESS_B = "bm1qx7ylnhszg24995d5e0nftu9e87kt9vnxcn633r"
SHORT_ADDRESS = "bm1qshort"

URL1 = "https://example.com/hook1"
URL2 = "https://example.com/hook2"


def _add(client, address: str, url: str):
    return client.post("/api/v1/add-address-callback", json={"address": address, "url": url})


def _list(client, address: str):
    return client.post("/api/v1/list-address-callbacks", json={"address": address})


def _remove(client, address: str, url: str):
    return client.post("/api/v1/remove-address-callback", json={"address": address, "url": url})


def _wait_for_outcomes(client, count: int) -> dict:
    deadline = time.monotonic() + 5
    while True:
        data = client.get("/api/v1/deliveries").json()["data"]
        if len(data["outcomes"]) >= count or time.monotonic() > deadline:
            return data
        time.sleep(0.01)


# ---------------------------------------------------------------------------
# Callback registration
# ---------------------------------------------------------------------------


class TestAddressCallbacks:
    def test_add_and_list(self, test_client) -> None:
        response = _add(test_client, ADDRESS_A, URL1)
        assert response.status_code == 200
        assert response.json() == {"status": "success", "data": True}

        _add(test_client, ADDRESS_A, URL2)
        response = _list(test_client, ADDRESS_A)
        assert response.status_code == 200
        assert sorted(response.json()["data"]) == [URL1, URL2]

    def test_list_unknown_address_is_empty(self, test_client) -> None:
        response = _list(test_client, ADDRESS_B)
        assert response.status_code == 200
        assert response.json()["data"] == []

    def test_add_duplicate(self, test_client) -> None:
        _add(test_client, ADDRESS_A, URL1)
        response = _add(test_client, ADDRESS_A, URL1)
        assert response.status_code == 409
        assert response.json()["code"] == "duplicate-url"

    @pytest.mark.parametrize(
        ("address", "url", "status", "code"),
        [
            (SHORT_ADDRESS, URL1, 400, "invalid-address"),
            (ADDRESS_A, "not a url", 400, "invalid-url"),
        ],
    )
    def test_add_rejected(self, test_client, address, url, status, code) -> None:
        response = _add(test_client, address, url)
        assert response.status_code == status
        body = response.json()
        assert body["code"] == code
        assert body["message"]

    def test_remove(self, test_client) -> None:
        _add(test_client, ADDRESS_A, URL1)
        _add(test_client, ADDRESS_A, URL2)
        response = _remove(test_client, ADDRESS_A, URL1)
        assert response.status_code == 200
        assert response.json()["data"] is True
        assert _list(test_client, ADDRESS_A).json()["data"] == [URL2]

    def test_remove_no_callbacks(self, test_client) -> None:
        response = _remove(test_client, ADDRESS_B, URL1)
        assert response.status_code == 404
        assert response.json()["code"] == "no-callbacks"

    def test_remove_unknown_url(self, test_client) -> None:
        _add(test_client, ADDRESS_A, URL1)
        response = _remove(test_client, ADDRESS_A, URL2)
        assert response.status_code == 404
        assert response.json()["code"] == "callback-not-found"

    def test_missing_field_is_validation_error(self, test_client) -> None:
        response = test_client.post("/api/v1/add-address-callback", json={"address": ADDRESS_A})
        assert response.status_code == 422


# ---------------------------------------------------------------------------
# Transactions and deliveries
# ---------------------------------------------------------------------------


class TestTransactions:
    def test_transaction_triggers_callback(self, test_client, delivered) -> None:
        _add(test_client, ADDRESS_A, URL1)
        response = test_client.post(
            "/api/v1/transactions",
            json={
                "tx_id": "txid1",
                "inputs": [{"address": ADDRESS_B, "asset_id": "X", "amount": 150}],
                "outputs": [{"address": ADDRESS_A, "asset_id": "X", "amount": 100}],
            },
        )
        assert response.status_code == 202
        assert response.json()["data"] == {"accepted": True}

        data = _wait_for_outcomes(test_client, 1)
        (outcome,) = data["outcomes"]
        assert outcome["status"] == "delivered"
        assert outcome["url"] == URL1
        assert data["dead_letters"] == []

        (request,) = delivered
        assert str(request.url) == URL1
        assert json.loads(request.content) == {
            "asset_id": "X",
            "amount": 100,
            "address": ADDRESS_A,
            "tx_id": "txid1",
        }

    def test_every_registered_url_gets_the_payload(self, test_client, delivered) -> None:
        _add(test_client, ADDRESS_A, URL1)
        _add(test_client, ADDRESS_A, URL2)
        response = test_client.post(
            "/api/v1/transactions",
            json={
                "tx_id": "txid1",
                "inputs": [{"address": ADDRESS_B, "asset_id": "X", "amount": 150}],
                "outputs": [{"address": ADDRESS_A, "asset_id": "X", "amount": 100}],
            },
        )
        assert response.status_code == 202

        data = _wait_for_outcomes(test_client, 2)
        assert sorted(o["url"] for o in data["outcomes"]) == [URL1, URL2]
        assert all(o["status"] == "delivered" for o in data["outcomes"])

        assert sorted(str(r.url) for r in delivered) == [URL1, URL2]
        first, second = (json.loads(r.content) for r in delivered)
        assert first == second == {
            "asset_id": "X",
            "amount": 100,
            "address": ADDRESS_A,
            "tx_id": "txid1",
        }

    def test_duplicate_transaction_delivered_once(self, test_client, delivered) -> None:
        _add(test_client, ADDRESS_A, URL1)
        body = {
            "tx_id": "txid1",
            "outputs": [{"address": ADDRESS_A, "asset_id": "X", "amount": 1}],
        }
        test_client.post("/api/v1/transactions", json=body)
        test_client.post("/api/v1/transactions", json=body)
        _wait_for_outcomes(test_client, 1)
        time.sleep(0.05)
        assert len(delivered) == 1

    def test_negative_amount_rejected(self, test_client) -> None:
        response = test_client.post(
            "/api/v1/transactions",
            json={
                "tx_id": "txid1",
                "outputs": [{"address": ADDRESS_A, "asset_id": "X", "amount": -1}],
            },
        )
        assert response.status_code == 422

    def test_deliveries_limit_bounds(self, test_client) -> None:
        assert test_client.get("/api/v1/deliveries?limit=0").status_code == 422
        response = test_client.get("/api/v1/deliveries?limit=5")
        assert response.status_code == 200
        assert response.json()["data"] == {"pending": 0, "outcomes": [], "dead_letters": []}
