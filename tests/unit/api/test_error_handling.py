"""Tests for mapping exchange errors onto HTTP responses."""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from exchange.api.endpoints import get_exchange
from exchange.api.main import app
from exchange.engine import Exchange
from tests.helpers import ALICE, TOKEN1


@pytest.fixture
def client(exchange: Exchange) -> Iterator[TestClient]:
    app.dependency_overrides[get_exchange] = lambda: exchange
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestErrorMapping:
    def test_pool_not_found_is_404(self, client):
        response = client.get(f"/pools/{TOKEN1}")
        assert response.status_code == 404
        assert response.json()["error"] == "pool_not_found"

    def test_pool_already_exists_is_409(self, client):
        client.post("/pools", json={"asset": TOKEN1})
        response = client.post("/pools", json={"asset": TOKEN1})
        assert response.status_code == 409
        assert response.json()["error"] == "pool_already_exists"

    def test_base_asset_pool_is_400(self, client):
        response = client.post("/pools", json={"asset": "0x" + "00" * 20})
        assert response.status_code == 400
        assert response.json()["error"] == "invalid_asset_address"

    def test_empty_pool_quote_is_400(self, client):
        client.post("/pools", json={"asset": TOKEN1})
        response = client.get(
            f"/pools/{TOKEN1}/quote", params={"side": "base_to_asset", "amount": 10}
        )
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "invalid_reserves"
        assert "detail" in body

    def test_failed_transfer_is_400(self, client):
        client.post("/pools", json={"asset": TOKEN1})
        response = client.post(
            f"/pools/{TOKEN1}/liquidity",
            json={"provider": ALICE, "base_amount": "10", "desired_asset_amount": "10"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "ledger_transfer_failed"


class TestRequestValidation:
    def test_malformed_address_is_422(self, client):
        response = client.post("/pools", json={"asset": "0x1234"})
        assert response.status_code == 422

    def test_negative_amount_is_422(self, client):
        client.post("/pools", json={"asset": TOKEN1})
        response = client.post(
            f"/pools/{TOKEN1}/liquidity/remove",
            json={"provider": ALICE, "share_amount": "-1"},
        )
        assert response.status_code == 422

    def test_swap_needs_exactly_one_route(self, client):
        client.post("/pools", json={"asset": TOKEN1})
        response = client.post(
            f"/pools/{TOKEN1}/swap", json={"caller": ALICE, "amount_in": "1"}
        )
        assert response.status_code == 422

    def test_quote_amount_must_be_positive(self, client):
        client.post("/pools", json={"asset": TOKEN1})
        response = client.get(f"/pools/{TOKEN1}/quote", params={"side": "base_to_asset", "amount": 0})
        assert response.status_code == 422

    def test_balance_requires_valid_addresses(self, client):
        response = client.get(f"/accounts/0x1234/balances/{TOKEN1}")
        assert response.status_code == 422
