"""Integration tests for the pool API."""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient
from solders.pubkey import Pubkey

from cpdex.api.endpoints import get_program
from cpdex.api.main import app
from cpdex.program import DexProgram
from tests.helpers import EXPECTED_OUT, RESERVE, SWAP_IN


@pytest.fixture
def client(program: DexProgram) -> Iterator[TestClient]:
    """Create a test client bound to a fresh program."""
    app.dependency_overrides[get_program] = lambda: program
    yield TestClient(app)
    app.dependency_overrides.clear()


def create_mint(client: TestClient, decimals: int) -> str:
    response = client.post("/mints", json={"decimals": decimals})
    assert response.status_code == 201
    return response.json()["address"]


def create_account(client: TestClient, mint: str, owner: str, amount: int = 0) -> str:
    response = client.post("/token-accounts", json={"mint": mint, "owner": owner})
    assert response.status_code == 201
    address = response.json()["address"]
    if amount:
        response = client.post(f"/token-accounts/{address}/mint-to", json={"amount": amount})
        assert response.status_code == 200
    return address


@pytest.fixture
def funded_pool(client: TestClient) -> dict:
    """A 1000/1000 pool created over HTTP, plus a funded trader."""
    mint_x = create_mint(client, 6)
    mint_y = create_mint(client, 9)
    payer = str(Pubkey.new_unique())

    response = client.post("/pools", json={"mint_a": mint_y, "mint_b": mint_x, "payer": payer})
    assert response.status_code == 201
    pool = response.json()
    for vault in (pool["vault_a"], pool["vault_b"]):
        client.post(f"/token-accounts/{vault}/mint-to", json={"amount": RESERVE})

    user = str(Pubkey.new_unique())
    return {
        "pool": pool,
        "user": user,
        "user_a": create_account(client, pool["mint_a"], user, RESERVE),
        "user_b": create_account(client, pool["mint_b"], user, RESERVE),
    }


def swap_payload(funded_pool: dict, min_amount_out: int, **overrides) -> dict:
    payload = {
        "pool": funded_pool["pool"]["address"],
        "user": funded_pool["user"],
        "user_source": funded_pool["user_a"],
        "user_destination": funded_pool["user_b"],
        "amount_in": SWAP_IN,
        "min_amount_out": min_amount_out,
    }
    payload.update(overrides)
    return payload


class TestHealth:
    def test_health_check(self, client: TestClient) -> None:
        """Health endpoint returns ok."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"


class TestPools:
    """Tests for pool creation and lookup endpoints."""

    def test_pool_is_canonical(self, client: TestClient, funded_pool: dict) -> None:
        pool = funded_pool["pool"]
        assert bytes(Pubkey.from_string(pool["mint_a"])) < bytes(Pubkey.from_string(pool["mint_b"]))

    def test_get_pool_either_order(self, client: TestClient, funded_pool: dict) -> None:
        pool = funded_pool["pool"]
        forward = client.get(f"/pools/{pool['mint_a']}/{pool['mint_b']}").json()
        backward = client.get(f"/pools/{pool['mint_b']}/{pool['mint_a']}").json()

        assert forward == backward
        assert forward["address"] == pool["address"]
        assert (forward["reserve_a"], forward["reserve_b"]) == (RESERVE, RESERVE)

    def test_duplicate_pool(self, client: TestClient, funded_pool: dict) -> None:
        pool = funded_pool["pool"]
        response = client.post(
            "/pools",
            json={"mint_a": pool["mint_a"], "mint_b": pool["mint_b"], "payer": funded_pool["user"]},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "AccountAlreadyInitialized"

    def test_same_mint_twice(self, client: TestClient) -> None:
        mint = create_mint(client, 6)
        response = client.post("/pools", json={"mint_a": mint, "mint_b": mint, "payer": mint})
        assert response.status_code == 400
        assert response.json() == {
            "error": "InvalidMint",
            "code": 6000,
            "detail": f"Pool mints must differ, got {mint} twice",
        }

    def test_missing_pool(self, client: TestClient) -> None:
        mint_x, mint_y = create_mint(client, 6), create_mint(client, 6)
        response = client.get(f"/pools/{mint_x}/{mint_y}")
        assert response.status_code == 404
        assert response.json()["error"] == "PoolNotFound"

    def test_malformed_address(self, client: TestClient) -> None:
        response = client.get("/pools/not-a-key/also-not-a-key")
        assert response.status_code == 422

    def test_malformed_body(self, client: TestClient) -> None:
        response = client.post("/pools", json={"mint_a": "0x1234", "mint_b": "x", "payer": "y"})
        assert response.status_code == 422


class TestSwap:
    """Tests for the swap and quote endpoints."""

    def test_slippage_exceeded(self, client: TestClient, funded_pool: dict) -> None:
        response = client.post("/swap", json=swap_payload(funded_pool, EXPECTED_OUT + 1))

        assert response.status_code == 400
        body = response.json()
        assert (body["error"], body["code"]) == ("SlippageExceeded", 6004)

        pool = funded_pool["pool"]
        state = client.get(f"/pools/{pool['mint_a']}/{pool['mint_b']}").json()
        assert (state["reserve_a"], state["reserve_b"]) == (RESERVE, RESERVE)

    def test_swap(self, client: TestClient, funded_pool: dict) -> None:
        response = client.post("/swap", json=swap_payload(funded_pool, EXPECTED_OUT))

        assert response.status_code == 200
        body = response.json()
        assert body["amount_out"] == EXPECTED_OUT
        assert body["event"]["amount_in"] == SWAP_IN
        assert body["event"]["source_mint"] == funded_pool["pool"]["mint_a"]

        pool = funded_pool["pool"]
        state = client.get(f"/pools/{pool['mint_a']}/{pool['mint_b']}").json()
        assert (state["reserve_a"], state["reserve_b"]) == (1100, 909)

    def test_amounts_as_strings(self, client: TestClient, funded_pool: dict) -> None:
        payload = swap_payload(funded_pool, str(EXPECTED_OUT), amount_in=str(SWAP_IN))
        response = client.post("/swap", json=payload)
        assert response.status_code == 200

    def test_zero_amount(self, client: TestClient, funded_pool: dict) -> None:
        response = client.post("/swap", json=swap_payload(funded_pool, 0, amount_in=0))
        assert response.status_code == 400
        assert response.json()["error"] == "ZeroAmount"

    def test_negative_amount_rejected_by_schema(self, client: TestClient, funded_pool: dict) -> None:
        response = client.post("/swap", json=swap_payload(funded_pool, 0, amount_in=-5))
        assert response.status_code == 422

    def test_quote(self, client: TestClient, funded_pool: dict) -> None:
        response = client.post(
            "/quote",
            json={
                "pool": funded_pool["pool"]["address"],
                "source_mint": funded_pool["pool"]["mint_a"],
                "amount_in": SWAP_IN,
            },
        )
        assert response.status_code == 200
        body = response.json()
        assert body["amount_out"] == EXPECTED_OUT
        assert body["min_amount_out"] == 90
        assert body["price_impact_bps"] == 910


class TestTransactions:
    """Tests for the passthrough transfer endpoint."""

    def test_transfer(self, client: TestClient) -> None:
        mint = create_mint(client, 6)
        owner = str(Pubkey.new_unique())
        source = create_account(client, mint, owner, 50)
        destination = create_account(client, mint, str(Pubkey.new_unique()))

        response = client.post(
            "/transactions",
            json={
                "authority": owner,
                "source": source,
                "mint": mint,
                "destination": destination,
                "amount": 20,
            },
        )

        assert response.status_code == 200
        assert response.json() == {"sender": owner, "receiver": destination, "amount": 20}
        assert client.get(f"/token-accounts/{destination}").json()["amount"] == 20

    def test_wrong_authority(self, client: TestClient) -> None:
        mint = create_mint(client, 6)
        source = create_account(client, mint, str(Pubkey.new_unique()), 50)
        destination = create_account(client, mint, str(Pubkey.new_unique()))

        response = client.post(
            "/transactions",
            json={
                "authority": str(Pubkey.new_unique()),
                "source": source,
                "mint": mint,
                "destination": destination,
                "amount": 20,
            },
        )

        assert response.status_code == 400
        assert response.json()["error"] == "InvalidOwner"

    def test_missing_account(self, client: TestClient) -> None:
        response = client.get(f"/token-accounts/{Pubkey.new_unique()}")
        assert response.status_code == 404
        assert response.json()["error"] == "AccountNotFound"
