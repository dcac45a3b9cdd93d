"""Unit tests for the HTTP endpoints."""

import pytest
from fastapi.testclient import TestClient

from aggregator.api.endpoints import get_registry
from aggregator.api.main import app, status_for
from aggregator.constants import POSITION_MANAGER, UNIVERSAL_ROUTER
from aggregator.errors import (
    InsufficientLiquidityError,
    InvalidTokenError,
    NoRouteFoundError,
    PositionApprovalError,
    UpstreamProviderError,
)
from aggregator.pool_lookup import StaticPoolLookup
from tests.helpers import (
    OPERATOR,
    OTHER_WALLET,
    USDC,
    WALLET,
    WETH,
    FakeChainProvider,
    make_registry,
    make_token,
)

PREFIX = "/connectors/aerodrome"
POOL = "0x00000000000000000000000000000000000000aa"


class UnreachableProvider(FakeChainProvider):
    async def chain_id(self):
        raise UpstreamProviderError("eth_chainId", reason="connection refused")


@pytest.fixture
def provider():
    """Provider with a WETH/USDC pair and a position owned by WALLET."""
    provider = FakeChainProvider()
    provider.add_pair(make_token(WETH), make_token(USDC), 1000 * 10**18, 3_000_000 * 10**6)
    provider.set(POSITION_MANAGER, "ownerOf", WALLET)
    provider.set(POSITION_MANAGER, "getApproved", OPERATOR)
    provider.set(POSITION_MANAGER, "isApprovedForAll", False)
    return provider


@pytest.fixture
def client(provider):
    """Create a test client whose registry uses the fake provider."""
    lookup = StaticPoolLookup()
    lookup.register("aerodrome", "base", "amm", "WETH", "USDC", address=POOL)
    app.dependency_overrides[get_registry] = lambda: make_registry(provider, pool_lookup=lookup)
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestStatusMapping:
    """Tests for error class to HTTP status mapping."""

    def test_client_errors(self):
        assert status_for(InvalidTokenError("FOO")) == 400
        assert status_for(NoRouteFoundError()) == 404
        assert status_for(PositionApprovalError("1", OPERATOR)) == 403

    def test_unmapped_is_internal(self):
        assert status_for(InsufficientLiquidityError("empty")) == 500


class TestConnectorsEndpoint:
    """Tests for GET /config/connectors."""

    def test_lists_aerodrome(self, client):
        response = client.get("/config/connectors")

        assert response.status_code == 200
        connectors = {c["name"]: c for c in response.json()["connectors"]}
        assert connectors["aerodrome"]["networks"] == ["base"]
        assert connectors["aerodrome"]["chain"] == "ethereum"


class TestQuoteSwapEndpoint:
    """Tests for GET .../router/quote-swap."""

    def test_sell_quote(self, client):
        response = client.get(
            f"{PREFIX}/router/quote-swap",
            params={"baseToken": "WETH", "quoteToken": "USDC", "amount": 1, "side": "SELL"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["tokenIn"] == WETH
        assert data["tokenOut"] == USDC
        assert data["amountIn"] == 1.0
        assert 2990 < data["amountOut"] < 3000
        assert data["minAmountOut"] < data["amountOut"]
        assert data["routePath"] == "WETH -> USDC"
        assert data["protocol"] == "amm"
        assert data["to"] == UNIVERSAL_ROUTER
        assert data["value"] == "0x00"
        assert data["data"].startswith("0x3593564c")
        assert data["gasEstimate"] == 500_000
        assert data["quoteId"]

    def test_buy_quote(self, client):
        response = client.get(
            f"{PREFIX}/router/quote-swap",
            params={"baseToken": "WETH", "quoteToken": "USDC", "amount": 0.5, "side": "BUY"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["tokenOut"] == WETH
        assert data["amountOut"] == 0.5
        assert data["maxAmountIn"] > data["amountIn"]

    def test_wallet_gets_gas_estimate(self, client, provider):
        provider.gas = 190_000
        response = client.get(
            f"{PREFIX}/router/quote-swap",
            params={
                "baseToken": "WETH",
                "quoteToken": "USDC",
                "amount": 1,
                "side": "SELL",
                "walletAddress": WALLET,
            },
        )

        assert response.status_code == 200
        assert response.json()["gasEstimate"] == 190_000

    def test_unknown_token(self, client):
        response = client.get(
            f"{PREFIX}/router/quote-swap",
            params={"baseToken": "NOPE", "quoteToken": "USDC", "amount": 1, "side": "SELL"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "InvalidTokenError"

    def test_no_route(self, client):
        response = client.get(
            f"{PREFIX}/router/quote-swap",
            params={"baseToken": "AERO", "quoteToken": "DAI", "amount": 1, "side": "SELL"},
        )

        assert response.status_code == 404
        assert response.json()["error"] == "NoRouteFoundError"

    def test_invalid_side(self, client):
        response = client.get(
            f"{PREFIX}/router/quote-swap",
            params={"baseToken": "WETH", "quoteToken": "USDC", "amount": 1, "side": "HOLD"},
        )
        assert response.status_code == 422

    def test_non_positive_amount(self, client):
        response = client.get(
            f"{PREFIX}/router/quote-swap",
            params={"baseToken": "WETH", "quoteToken": "USDC", "amount": 0, "side": "SELL"},
        )
        assert response.status_code == 422

    def test_amount_below_precision(self, client):
        response = client.get(
            f"{PREFIX}/router/quote-swap",
            params={"baseToken": "USDC", "quoteToken": "WETH", "amount": 1e-9, "side": "SELL"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "ValueError"

    def test_unsupported_network(self, client):
        response = client.get(
            f"{PREFIX}/router/quote-swap",
            params={
                "network": "solana",
                "baseToken": "WETH",
                "quoteToken": "USDC",
                "amount": 1,
                "side": "SELL",
            },
        )
        assert response.status_code == 400
        assert response.json()["error"] == "UnsupportedNetworkError"


class TestPoolEndpoints:
    """Tests for pool info and default pool lookup."""

    def test_find_default_pool(self, client):
        pair = client.get(
            f"{PREFIX}/amm/find-default-pool", params={"baseToken": "WETH", "quoteToken": "USDC"}
        ).json()["poolAddress"]
        assert pair == POOL

    def test_pool_info_reads_pair(self, client, provider):
        pair = provider.add_pair(make_token(WETH), make_token(USDC), 10**21, 3 * 10**12)

        response = client.get(f"{PREFIX}/amm/pool-info", params={"poolAddress": pair})

        assert response.status_code == 200
        data = response.json()
        assert data["price"] == 3000.0
        assert data["baseTokenAddress"] == WETH
        assert data["feePct"] == 0.02

    def test_clmm_pool_info(self, client, provider):
        pool = provider.add_clmm_pool(make_token(WETH), make_token(USDC), 500, 10**17, -196_260)

        response = client.get(f"{PREFIX}/clmm/pool-info", params={"poolAddress": pool})

        assert response.status_code == 200
        data = response.json()
        assert data["tick"] == -196_260
        assert data["liquidity"] == str(10**17)
        assert 2900 < data["price"] < 3100

    def test_malformed_pool_address(self, client):
        response = client.get(f"{PREFIX}/amm/pool-info", params={"poolAddress": "0x1234"})
        assert response.status_code == 400
        assert response.json()["error"] == "InvalidPoolAddressError"

    def test_pool_not_found(self, client):
        response = client.get(f"{PREFIX}/clmm/pool-info", params={"poolAddress": "0x" + "ab" * 20})
        assert response.status_code == 404

    def test_default_pool_missing(self, client):
        response = client.get(
            f"{PREFIX}/amm/find-default-pool",
            params={"baseToken": "WETH", "quoteToken": "USDC", "poolType": "clmm"},
        )
        assert response.status_code == 200
        assert response.json()["poolAddress"] is None

    def test_invalid_pool_type(self, client):
        response = client.get(
            f"{PREFIX}/amm/find-default-pool",
            params={"baseToken": "WETH", "quoteToken": "USDC", "poolType": "orderbook"},
        )
        assert response.status_code == 422


class TestPositionEndpoints:
    """Tests for position ownership and approval checks."""

    def test_owner_authorized(self, client):
        response = client.get(
            f"{PREFIX}/clmm/position-ownership",
            params={"positionId": "12345", "walletAddress": WALLET},
        )

        assert response.status_code == 200
        assert response.json() == {"positionId": "12345", "authorized": True}

    def test_not_owner(self, client):
        response = client.get(
            f"{PREFIX}/clmm/position-ownership",
            params={"positionId": "12345", "walletAddress": OTHER_WALLET},
        )

        assert response.status_code == 403
        assert response.json()["error"] == "PositionOwnershipError"

    def test_invalid_position_id(self, client):
        response = client.get(
            f"{PREFIX}/clmm/position-ownership",
            params={"positionId": "abc", "walletAddress": WALLET},
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid position ID: abc"

    def test_operator_approved(self, client):
        response = client.get(
            f"{PREFIX}/clmm/position-approval",
            params={"positionId": "7", "walletAddress": WALLET, "operatorAddress": OPERATOR},
        )
        assert response.status_code == 200

    def test_operator_not_approved(self, client):
        response = client.get(
            f"{PREFIX}/clmm/position-approval",
            params={"positionId": "7", "walletAddress": WALLET, "operatorAddress": OTHER_WALLET},
        )
        assert response.status_code == 403


class TestInternalErrors:
    """Tests for failures that must not leak details."""

    def test_unreachable_node(self):
        app.dependency_overrides[get_registry] = lambda: make_registry(UnreachableProvider())
        try:
            response = TestClient(app).get(
                f"{PREFIX}/router/quote-swap",
                params={"baseToken": "WETH", "quoteToken": "USDC", "amount": 1, "side": "SELL"},
            )
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        assert response.json() == {"error": "InternalError", "message": "Internal server error"}
