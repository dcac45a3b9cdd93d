"""Type definitions for the routing module."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from fractions import Fraction

from aggregator.amm.concentrated.pool import ClmmPool
from aggregator.amm.constant_product import AmmPool
from aggregator.models.token import Token

AnyPool = AmmPool | ClmmPool


class ProtocolFamily(str, Enum):
    """Pool protocol family, in discovery priority order."""

    CLMM = "clmm"
    AMM = "amm"


class TradeType(str, Enum):
    """Which side of the trade is fixed."""

    EXACT_INPUT = "exact_input"
    EXACT_OUTPUT = "exact_output"


class Side(str, Enum):
    """Trade direction relative to the base token.

    SELL sells an exact amount of base for quote; BUY buys an exact amount
    of base with quote.
    """

    BUY = "BUY"
    SELL = "SELL"

    @property
    def trade_type(self) -> TradeType:
        return TradeType.EXACT_INPUT if self is Side.SELL else TradeType.EXACT_OUTPUT


class AttemptOutcome(str, Enum):
    SELECTED = "selected"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class TradeRequest:
    """What discovery is asked to route.

    ``amount`` is the input amount for exact-input trades and the output
    amount for exact-output trades, in smallest units.
    """

    token_in: Token
    token_out: Token
    amount: int
    trade_type: TradeType


@dataclass
class Route:
    """A single-pool path from one token to another."""

    family: ProtocolFamily
    pool: AnyPool
    token_in: Token
    token_out: Token


@dataclass
class Trade:
    """A priced trade through one route.

    Attributes:
        route: The pool path
        trade_type: Exact input or exact output
        amount_in: Input amount (smallest units)
        amount_out: Output amount (smallest units)
        mid_price: Pre-trade pool price, raw output units per raw input unit
    """

    route: Route
    trade_type: TradeType
    amount_in: int
    amount_out: int
    mid_price: Fraction

    @property
    def family(self) -> ProtocolFamily:
        return self.route.family

    @property
    def pool(self) -> AnyPool:
        return self.route.pool

    @property
    def token_in(self) -> Token:
        return self.route.token_in

    @property
    def token_out(self) -> Token:
        return self.route.token_out

    @property
    def execution_price(self) -> Fraction:
        """Realized price, raw output units per raw input unit."""
        return Fraction(self.amount_out, self.amount_in)


@dataclass
class DiscoveryAttempt:
    """One pool considered during discovery and what happened to it."""

    family: ProtocolFamily
    outcome: AttemptOutcome
    pool_address: str | None = None
    fee: int | None = None
    reason: str = ""


@dataclass
class DiscoveryResult:
    """Outcome of route discovery: the selected trade plus every attempt."""

    trade: Trade | None
    attempts: list[DiscoveryAttempt] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.trade is not None


__all__ = [
    "AnyPool",
    "ProtocolFamily",
    "TradeType",
    "Side",
    "AttemptOutcome",
    "TradeRequest",
    "Route",
    "Trade",
    "DiscoveryAttempt",
    "DiscoveryResult",
]
