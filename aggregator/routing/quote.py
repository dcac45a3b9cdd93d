"""Swap quote construction.

Turns a discovered trade into a ``SwapQuote``: slippage bounds, price impact,
Universal Router calldata and a deadline.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass
from decimal import ROUND_FLOOR, Decimal
from fractions import Fraction

import structlog

from aggregator.constants import DEADLINE_SECONDS
from aggregator.errors import NoRouteFoundError
from aggregator.models.token import Token
from aggregator.routing.encoding import encode_swap
from aggregator.routing.types import ProtocolFamily, Trade, TradeType

logger = structlog.get_logger()

_BPS = 10_000


@dataclass
class SwapQuote:
    """A priced, executable swap.

    Raw amounts are in smallest token units; ``*_human`` amounts and ``price``
    are in whole tokens. ``price`` is output tokens per input token.
    """

    quote_id: str
    token_in: Token
    token_out: Token
    trade_type: TradeType
    family: ProtocolFamily
    pool_address: str
    amount_in: int
    amount_out: int
    amount_in_human: Decimal
    amount_out_human: Decimal
    price: Decimal
    price_impact_pct: float
    min_amount_out: int
    max_amount_in: int
    calldata: str
    to: str
    value: str
    route_path: str
    deadline: int
    gas_estimate: int | None = None

    @property
    def min_amount_out_human(self) -> Decimal:
        return self.token_out.from_raw(self.min_amount_out)

    @property
    def max_amount_in_human(self) -> Decimal:
        return self.token_in.from_raw(self.max_amount_in)


def slippage_bps(slippage_pct: float) -> int:
    """Slippage percentage truncated to whole basis points.

    Raises:
        ValueError: If the percentage is outside [0, 100]
    """
    if not 0 <= slippage_pct <= 100:
        raise ValueError(f"Slippage must be within [0, 100], got {slippage_pct}")
    return int((Decimal(str(slippage_pct)) * 100).to_integral_value(ROUND_FLOOR))


def minimum_amount_out(amount_out: int, slippage_pct: float) -> int:
    """Smallest acceptable output for an exact-input trade (rounded down)."""
    return amount_out * (_BPS - slippage_bps(slippage_pct)) // _BPS


def maximum_amount_in(amount_in: int, slippage_pct: float) -> int:
    """Largest acceptable input for an exact-output trade (rounded up)."""
    return -(-amount_in * (_BPS + slippage_bps(slippage_pct)) // _BPS)


def round_significant(value: float, digits: int = 6) -> float:
    """Round to a number of significant digits."""
    if value == 0:
        return 0.0
    return float(f"{value:.{digits}g}")


def price_impact_pct(mid_price: Fraction, amount_in: int, amount_out: int) -> float:
    """Percentage shortfall of the output versus trading at the mid price.

    Args:
        mid_price: Pre-trade price, raw output per raw input
        amount_in: Raw input amount
        amount_out: Raw output amount

    Returns:
        Price impact in percent, to 6 significant digits
    """
    quoted_out = mid_price * amount_in
    if quoted_out == 0:
        return 0.0
    impact = (quoted_out - amount_out) / quoted_out * 100
    return round_significant(float(impact))


def route_path(trade: Trade) -> str:
    return f"{trade.token_in.label} -> {trade.token_out.label}"


class QuoteBuilder:
    """Builds quotes for trades routed through a Universal Router.

    Args:
        universal_router: Router contract the calldata targets
        deadline_seconds: Deadline offset from build time
    """

    def __init__(self, universal_router: str, deadline_seconds: int = DEADLINE_SECONDS):
        self.universal_router = universal_router
        self.deadline_seconds = deadline_seconds

    def build(
        self,
        trade: Trade | None,
        slippage_pct: float,
        recipient: str,
        now: int | None = None,
    ) -> SwapQuote:
        """Build a quote for a trade.

        Args:
            trade: The trade from discovery
            slippage_pct: Slippage tolerance in percent (0-100)
            recipient: Receiver of the output tokens
            now: Unix time to compute the deadline from (defaults to now)

        Returns:
            The quote, without a gas estimate

        Raises:
            NoRouteFoundError: If trade is None
            ValueError: If slippage is out of range
        """
        if trade is None:
            raise NoRouteFoundError()

        if trade.trade_type is TradeType.EXACT_INPUT:
            min_out = minimum_amount_out(trade.amount_out, slippage_pct)
            max_in = trade.amount_in
            amount_limit = min_out
        else:
            min_out = trade.amount_out
            max_in = maximum_amount_in(trade.amount_in, slippage_pct)
            amount_limit = max_in

        deadline = (int(time.time()) if now is None else now) + self.deadline_seconds
        calldata = encode_swap(trade, recipient, amount_limit, deadline)

        amount_in_human = trade.token_in.from_raw(trade.amount_in)
        amount_out_human = trade.token_out.from_raw(trade.amount_out)
        price = amount_out_human / amount_in_human if amount_in_human else Decimal(0)

        quote = SwapQuote(
            quote_id=str(uuid.uuid4()),
            token_in=trade.token_in,
            token_out=trade.token_out,
            trade_type=trade.trade_type,
            family=trade.family,
            pool_address=trade.pool.address,
            amount_in=trade.amount_in,
            amount_out=trade.amount_out,
            amount_in_human=amount_in_human,
            amount_out_human=amount_out_human,
            price=price,
            price_impact_pct=price_impact_pct(trade.mid_price, trade.amount_in, trade.amount_out),
            min_amount_out=min_out,
            max_amount_in=max_in,
            calldata=calldata,
            to=self.universal_router,
            value="0x00",
            route_path=route_path(trade),
            deadline=deadline,
        )
        logger.info(
            "quote_built",
            quote_id=quote.quote_id,
            family=quote.family.value,
            trade_type=quote.trade_type.value,
            amount_in=quote.amount_in,
            amount_out=quote.amount_out,
            min_amount_out=quote.min_amount_out,
            max_amount_in=quote.max_amount_in,
            price_impact_pct=quote.price_impact_pct,
        )
        return quote


__all__ = [
    "SwapQuote",
    "QuoteBuilder",
    "slippage_bps",
    "minimum_amount_out",
    "maximum_amount_in",
    "round_significant",
    "price_impact_pct",
    "route_path",
]
