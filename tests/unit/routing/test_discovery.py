"""Tests for route discovery across pool families."""

import pytest

from aggregator.amm.constant_product import get_amount_out
from aggregator.config import ConnectorConfig, NetworkContracts
from aggregator.errors import NoRouteFoundError
from aggregator.pools.reader import PoolStateReader
from aggregator.routing.discovery import RouteDiscoveryEngine
from aggregator.routing.handlers import AmmHandler, ClmmHandler
from aggregator.routing.types import (
    AttemptOutcome,
    DiscoveryResult,
    ProtocolFamily,
    TradeRequest,
    TradeType,
)


def make_engine(provider, config=None):
    return RouteDiscoveryEngine.for_network(
        PoolStateReader(provider), NetworkContracts(), config or ConnectorConfig()
    )


def sell(token_in, token_out, amount=10**18):
    return TradeRequest(token_in, token_out, amount, TradeType.EXACT_INPUT)


class TestHandlerOrder:
    """Tests for how the engine is assembled."""

    def test_clmm_before_amm(self, provider):
        engine = make_engine(provider)
        assert [type(h) for h in engine.handlers] == [ClmmHandler, AmmHandler]

    def test_config_flows_to_handlers(self, provider):
        engine = make_engine(provider, ConnectorConfig(amm_fee_bps=30, tick_window_spacings=10))
        clmm, amm = engine.handlers
        assert clmm.window_spacings == 10
        assert amm.fee_bps == 30


class TestDiscovery:
    """Tests for first-found route selection."""

    @pytest.mark.asyncio
    async def test_prefers_concentrated_liquidity(self, provider, weth, aero):
        """With both families available the CLMM pool wins, AMM is never read."""
        pool = provider.add_clmm_pool(weth, aero, 500, liquidity=10**24)
        pair = provider.add_pair(weth, aero, 10**24, 10**24)

        result = await make_engine(provider).discover(sell(weth, aero))

        assert result.found
        assert result.trade.family is ProtocolFamily.CLMM
        assert result.trade.pool.address == pool.lower()
        assert result.trade.pool.fee == 500
        assert not any(address == pair.lower() for address, _, _ in provider.calls)

    @pytest.mark.asyncio
    async def test_concentrated_wins_over_better_priced_pair(self, provider, weth, aero):
        """Family priority, not price, decides: a 1% CLMM pool beats a fee-free deep pair."""
        provider.add_clmm_pool(weth, aero, 10_000, liquidity=10**21)
        provider.add_pair(weth, aero, 10**27, 10**27)
        amm_out = get_amount_out(10**18, 10**27, 10**27)

        result = await make_engine(provider, ConnectorConfig(amm_fee_bps=0)).discover(
            sell(weth, aero)
        )

        assert result.trade.family is ProtocolFamily.CLMM
        assert result.trade.pool.fee == 10_000
        assert result.trade.amount_out < 99 * 10**16 < amm_out
        assert all(a.family is ProtocolFamily.CLMM for a in result.attempts)

    @pytest.mark.asyncio
    async def test_fee_tiers_tried_lowest_first(self, provider, weth, aero):
        """A missing 0.01% pool is recorded before the 0.05% pool is selected."""
        provider.add_clmm_pool(weth, aero, 500, liquidity=10**24)
        provider.add_clmm_pool(weth, aero, 3000, liquidity=10**24)

        result = await make_engine(provider).discover(sell(weth, aero))

        assert [(a.fee, a.outcome) for a in result.attempts] == [
            (100, AttemptOutcome.FAILED),
            (500, AttemptOutcome.SELECTED),
        ]

    @pytest.mark.asyncio
    async def test_zero_liquidity_tier_skipped(self, provider, weth, aero):
        provider.add_clmm_pool(weth, aero, 100, liquidity=0)
        provider.add_clmm_pool(weth, aero, 500, liquidity=10**24)

        result = await make_engine(provider).discover(sell(weth, aero))

        assert result.attempts[0].outcome is AttemptOutcome.SKIPPED
        assert result.attempts[0].reason == "zero liquidity"
        assert result.trade.pool.fee == 500

    @pytest.mark.asyncio
    async def test_falls_back_to_amm(self, provider, weth, usdc):
        """No CLMM tier answers, so the constant-product pair is used."""
        pair = provider.add_pair(weth, usdc, 1000 * 10**18, 3_000_000 * 10**6)

        result = await make_engine(provider).discover(sell(weth, usdc))

        assert result.trade.family is ProtocolFamily.AMM
        assert result.trade.pool.address == pair.lower()
        assert len(result.attempts) == 5
        assert result.attempts[-1].outcome is AttemptOutcome.SELECTED
        # ~2996 USDC after price impact and the 0.02% fee
        assert 2990 * 10**6 < result.trade.amount_out < 3000 * 10**6

    @pytest.mark.asyncio
    async def test_amm_empty_reserves_skipped(self, provider, weth, usdc):
        provider.add_pair(weth, usdc, 0, 0)

        result = await make_engine(provider).discover(sell(weth, usdc))

        assert not result.found
        assert result.attempts[-1].outcome is AttemptOutcome.SKIPPED

    @pytest.mark.asyncio
    async def test_exact_output_trade(self, provider, weth, aero):
        provider.add_clmm_pool(weth, aero, 3000, liquidity=10**24)
        request = TradeRequest(aero, weth, 10**18, TradeType.EXACT_OUTPUT)

        result = await make_engine(provider).discover(request)

        assert result.trade.amount_out == 10**18
        assert result.trade.amount_in > 10**18
        assert result.trade.token_in == aero

    @pytest.mark.asyncio
    async def test_unfillable_tier_falls_through(self, provider, weth, aero):
        """A tier too shallow for the amount is recorded as failed."""
        provider.add_clmm_pool(weth, aero, 100, liquidity=10**3)
        provider.add_clmm_pool(weth, aero, 500, liquidity=10**24)
        request = TradeRequest(aero, weth, 10**20, TradeType.EXACT_OUTPUT)

        result = await make_engine(provider).discover(request)

        assert result.attempts[0].outcome is AttemptOutcome.FAILED
        assert result.trade.pool.fee == 500


class TestNoRoute:
    """Tests for the no-route outcome."""

    @pytest.mark.asyncio
    async def test_discover_returns_attempts(self, provider, weth, usdc):
        result = await make_engine(provider).discover(sell(weth, usdc))

        assert isinstance(result, DiscoveryResult)
        assert result.trade is None
        assert len(result.attempts) == 5
        assert all(a.outcome is AttemptOutcome.FAILED for a in result.attempts)

    @pytest.mark.asyncio
    async def test_find_trade_raises(self, provider, weth, usdc):
        with pytest.raises(NoRouteFoundError) as exc_info:
            await make_engine(provider).find_trade(sell(weth, usdc))

        assert exc_info.value.token_in == "WETH"
        assert exc_info.value.token_out == "USDC"
        assert len(exc_info.value.attempts) == 5
        assert "WETH -> USDC" in exc_info.value.message
