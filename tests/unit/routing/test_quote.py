"""Tests for swap quote construction."""

from decimal import Decimal
from fractions import Fraction

import pytest

from aggregator.constants import UNIVERSAL_ROUTER
from aggregator.errors import NoRouteFoundError
from aggregator.routing.quote import (
    QuoteBuilder,
    maximum_amount_in,
    minimum_amount_out,
    price_impact_pct,
    round_significant,
    slippage_bps,
)
from aggregator.routing.types import ProtocolFamily, Route, Trade, TradeType
from tests.helpers import WALLET, make_amm_pool

NOW = 1_700_000_000


def make_trade(token_in, token_out, amount_in, amount_out, trade_type=TradeType.EXACT_INPUT):
    pool = make_amm_pool(token_in, token_out, 1000 * 10**18, 3_000_000 * 10**6)
    return Trade(
        route=Route(ProtocolFamily.AMM, pool, token_in, token_out),
        trade_type=trade_type,
        amount_in=amount_in,
        amount_out=amount_out,
        mid_price=pool.mid_price(token_in),
    )


class TestSlippageBounds:
    """Tests for slippage-derived amount limits."""

    def test_minimum_out_one_percent(self):
        assert minimum_amount_out(1000, 1.0) == 990

    def test_maximum_in_two_percent(self):
        assert maximum_amount_in(500, 2.0) == 510

    def test_minimum_out_rounds_down(self):
        assert minimum_amount_out(999, 1.0) == 989

    def test_maximum_in_rounds_up(self):
        assert maximum_amount_in(999, 1.0) == 1009

    def test_zero_slippage(self):
        assert minimum_amount_out(1000, 0) == 1000
        assert maximum_amount_in(1000, 0) == 1000

    def test_truncated_to_basis_points(self):
        assert slippage_bps(0.5) == 50
        assert slippage_bps(1.005) == 100
        assert slippage_bps(0.29) == 29

    def test_out_of_range(self):
        with pytest.raises(ValueError):
            slippage_bps(100.5)
        with pytest.raises(ValueError):
            slippage_bps(-1)


class TestPriceImpact:
    """Tests for price impact and rounding helpers."""

    def test_impact_percent(self):
        """Mid price 2, 100 in, 190 out: 5% short of the 200 quoted at mid."""
        assert price_impact_pct(Fraction(2), 100, 190) == 5.0

    def test_no_impact(self):
        assert price_impact_pct(Fraction(2), 100, 200) == 0.0

    def test_zero_mid_price(self):
        assert price_impact_pct(Fraction(0), 100, 0) == 0.0

    def test_significant_digits(self):
        assert round_significant(1.23456789) == 1.23457
        assert round_significant(0.000123456789) == 0.000123457
        assert round_significant(0) == 0.0


class TestQuoteBuilder:
    """Tests for QuoteBuilder.build."""

    def test_exact_input_quote(self, weth, usdc):
        trade = make_trade(weth, usdc, 10**18, 3000 * 10**6)
        quote = QuoteBuilder(UNIVERSAL_ROUTER).build(trade, 1.0, WALLET, now=NOW)

        assert quote.min_amount_out == 2970 * 10**6
        assert quote.max_amount_in == 10**18
        assert quote.price == Decimal(3000)
        assert quote.amount_in_human == Decimal(1)
        assert quote.min_amount_out_human == Decimal(2970)
        assert quote.route_path == "WETH -> USDC"
        assert quote.family is ProtocolFamily.AMM

    def test_exact_output_quote(self, weth, usdc):
        trade = make_trade(usdc, weth, 500 * 10**6, 10**17, TradeType.EXACT_OUTPUT)
        quote = QuoteBuilder(UNIVERSAL_ROUTER).build(trade, 2.0, WALLET, now=NOW)

        assert quote.max_amount_in == 510 * 10**6
        assert quote.min_amount_out == 10**17
        assert quote.max_amount_in_human == Decimal(510)

    def test_transaction_fields(self, weth, usdc):
        trade = make_trade(weth, usdc, 10**18, 3000 * 10**6)
        quote = QuoteBuilder(UNIVERSAL_ROUTER, deadline_seconds=600).build(
            trade, 1.0, WALLET, now=NOW
        )

        assert quote.to == UNIVERSAL_ROUTER
        assert quote.value == "0x00"
        assert quote.deadline == NOW + 600
        assert quote.calldata.startswith("0x3593564c")
        assert quote.gas_estimate is None

    def test_default_deadline(self, weth, usdc):
        trade = make_trade(weth, usdc, 10**18, 3000 * 10**6)
        quote = QuoteBuilder(UNIVERSAL_ROUTER).build(trade, 1.0, WALLET, now=NOW)
        assert quote.deadline == NOW + 1800

    def test_quote_ids_unique(self, weth, usdc):
        trade = make_trade(weth, usdc, 10**18, 3000 * 10**6)
        builder = QuoteBuilder(UNIVERSAL_ROUTER)
        assert builder.build(trade, 1.0, WALLET).quote_id != builder.build(
            trade, 1.0, WALLET
        ).quote_id

    def test_price_impact_from_pool(self, weth, usdc):
        """Mid price 3000 USDC/WETH; receiving 2970 is 1% impact."""
        trade = make_trade(weth, usdc, 10**18, 2970 * 10**6)
        quote = QuoteBuilder(UNIVERSAL_ROUTER).build(trade, 1.0, WALLET, now=NOW)
        assert quote.price_impact_pct == 1.0

    def test_no_trade(self):
        with pytest.raises(NoRouteFoundError):
            QuoteBuilder(UNIVERSAL_ROUTER).build(None, 1.0, WALLET)

    def test_bad_slippage(self, weth, usdc):
        trade = make_trade(weth, usdc, 10**18, 3000 * 10**6)
        with pytest.raises(ValueError):
            QuoteBuilder(UNIVERSAL_ROUTER).build(trade, 150.0, WALLET)
