"""Concentrated-liquidity pool simulation over a synthetic tick window.

Only the pool's current price and active liquidity are read from chain. The
initialized ticks around the price are not, so the pool is modelled with two
synthetic boundary ticks ``window_spacings`` tick spacings either side of the
current tick, each with zero net liquidity. Active liquidity is therefore
constant for the whole swap; quotes are an approximation for trades that move
the price far enough to cross real initialized ticks.
"""

from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction

import structlog

from aggregator.amm.concentrated.constants import (
    MAX_SQRT_RATIO,
    MAX_TICK,
    MIN_SQRT_RATIO,
    MIN_TICK,
    Q192,
    TICK_SPACINGS,
)
from aggregator.amm.concentrated.swap_math import compute_swap_step
from aggregator.amm.concentrated.tick_math import (
    get_sqrt_ratio_at_tick,
    get_tick_at_sqrt_ratio,
    nearest_usable_tick,
)
from aggregator.constants import TICK_WINDOW_SPACINGS
from aggregator.errors import InsufficientLiquidityError
from aggregator.models.token import Token

logger = structlog.get_logger()


@dataclass(frozen=True)
class Tick:
    """An initialized tick boundary."""

    index: int
    liquidity_net: int = 0
    liquidity_gross: int = 1


@dataclass(frozen=True)
class TickWindow:
    """Sorted initialized ticks around the current price."""

    ticks: tuple[Tick, ...]

    @classmethod
    def around(
        cls,
        current_tick: int,
        tick_spacing: int,
        window_spacings: int = TICK_WINDOW_SPACINGS,
    ) -> TickWindow:
        """Build the synthetic window centred on ``current_tick``.

        Bounds are clamped into the valid tick range before snapping to a
        usable tick.
        """
        span = window_spacings * tick_spacing
        lower = nearest_usable_tick(max(MIN_TICK, current_tick - span), tick_spacing)
        upper = nearest_usable_tick(min(MAX_TICK, current_tick + span), tick_spacing)
        indices = sorted({lower, upper})
        return cls(tuple(Tick(index) for index in indices))

    @property
    def lower(self) -> int:
        return self.ticks[0].index

    @property
    def upper(self) -> int:
        return self.ticks[-1].index

    def next_initialized_tick(self, tick: int, lte: bool) -> tuple[int, Tick | None]:
        """Next initialized tick in the swap direction.

        Args:
            tick: Current tick
            lte: Search at or below ``tick`` (price moving down) if True

        Returns:
            Tuple of (tick index, Tick) or (range bound, None) when the window
            has no tick in that direction
        """
        if lte:
            for candidate in reversed(self.ticks):
                if candidate.index <= tick:
                    return candidate.index, candidate
            return MIN_TICK, None
        for candidate in self.ticks:
            if candidate.index > tick:
                return candidate.index, candidate
        return MAX_TICK, None


@dataclass
class ClmmPool:
    """A concentrated-liquidity pool ready for local quoting.

    Attributes:
        address: Pool contract address
        token0: Lower-address token
        token1: Higher-address token
        fee: Fee tier in hundredths of a basis point
        sqrt_price_x96: Current sqrt price (Q64.96)
        liquidity: Active liquidity
        tick: Current tick
        tick_spacing: Tick spacing of the fee tier
        window: Initialized ticks used by the simulation
    """

    address: str
    token0: Token
    token1: Token
    fee: int
    sqrt_price_x96: int
    liquidity: int
    tick: int
    tick_spacing: int = 0
    window: TickWindow | None = None
    window_spacings: int = TICK_WINDOW_SPACINGS

    def __post_init__(self) -> None:
        if not self.tick_spacing:
            if self.fee not in TICK_SPACINGS:
                raise ValueError(f"Unknown fee tier: {self.fee}")
            self.tick_spacing = TICK_SPACINGS[self.fee]
        if self.window is None:
            self.window = TickWindow.around(self.tick, self.tick_spacing, self.window_spacings)

    def involves(self, token: Token) -> bool:
        return token == self.token0 or token == self.token1

    def zero_for_one(self, token_in: Token) -> bool:
        if token_in == self.token0:
            return True
        if token_in == self.token1:
            return False
        raise ValueError(f"Token {token_in.address} not in pool")

    def get_token_out(self, token_in: Token) -> Token:
        return self.token1 if self.zero_for_one(token_in) else self.token0

    def mid_price(self, token_in: Token) -> Fraction:
        """Spot price in raw output units per raw input unit."""
        price0 = Fraction(self.sqrt_price_x96**2, Q192)
        if price0 == 0:
            raise InsufficientLiquidityError("Pool price is zero", pool=self.address)
        return price0 if self.zero_for_one(token_in) else 1 / price0

    def quote_exact_input(self, token_in: Token, amount_in: int) -> int:
        """Output received for selling exactly ``amount_in`` of ``token_in``.

        Raises:
            InsufficientLiquidityError: If the pool cannot absorb the input
        """
        amount_used, amount_out = self._swap(self.zero_for_one(token_in), amount_in)
        if amount_used != amount_in or amount_out <= 0:
            raise InsufficientLiquidityError(
                "Pool cannot fill exact input", pool=self.address, amount_in=amount_in
            )
        return amount_out

    def quote_exact_output(self, token_in: Token, amount_out: int) -> int:
        """Input required to receive exactly ``amount_out`` of the other token.

        Raises:
            InsufficientLiquidityError: If the pool cannot supply the output
        """
        amount_in, amount_received = self._swap(self.zero_for_one(token_in), -amount_out)
        if amount_received != amount_out:
            raise InsufficientLiquidityError(
                "Pool cannot fill exact output", pool=self.address, amount_out=amount_out
            )
        return amount_in

    def _swap(self, zero_for_one: bool, amount_specified: int) -> tuple[int, int]:
        """Run the swap loop.

        Args:
            zero_for_one: Direction of the swap
            amount_specified: Positive for exact input, negative for exact output

        Returns:
            Tuple of (input consumed, output produced)
        """
        if amount_specified == 0:
            raise ValueError("Swap amount must be non-zero")
        if self.liquidity <= 0:
            raise InsufficientLiquidityError("Pool has no liquidity", pool=self.address)

        window = self.window or TickWindow.around(
            self.tick, self.tick_spacing, self.window_spacings
        )
        exact_input = amount_specified > 0
        price_limit = MIN_SQRT_RATIO + 1 if zero_for_one else MAX_SQRT_RATIO - 1

        remaining = amount_specified
        total_in = 0
        total_out = 0
        sqrt_price = self.sqrt_price_x96
        tick = self.tick
        liquidity = self.liquidity

        while remaining != 0 and sqrt_price != price_limit:
            step_start = sqrt_price
            tick_next, initialized = window.next_initialized_tick(tick, zero_for_one)
            tick_next = max(MIN_TICK, min(MAX_TICK, tick_next))
            sqrt_price_next = get_sqrt_ratio_at_tick(tick_next)

            if zero_for_one:
                target = max(sqrt_price_next, price_limit)
            else:
                target = min(sqrt_price_next, price_limit)

            sqrt_price, amount_in, amount_out, fee_amount = compute_swap_step(
                sqrt_price, target, liquidity, remaining, self.fee
            )

            if exact_input:
                remaining -= amount_in + fee_amount
            else:
                remaining += amount_out
            total_in += amount_in + fee_amount
            total_out += amount_out

            if sqrt_price == sqrt_price_next:
                if initialized is not None:
                    net = initialized.liquidity_net
                    liquidity += -net if zero_for_one else net
                tick = tick_next - 1 if zero_for_one else tick_next
            elif sqrt_price != step_start:
                tick = get_tick_at_sqrt_ratio(sqrt_price)

            if liquidity <= 0:
                break

        if remaining != 0:
            logger.debug(
                "clmm_swap_partial_fill",
                pool=self.address,
                amount_specified=amount_specified,
                remaining=remaining,
            )
        return total_in, total_out


__all__ = ["Tick", "TickWindow", "ClmmPool"]
