"""Constant-product (x * y = k) pool math.

Fees are taken from the input amount and expressed in basis points, so a
0.02% pool uses ``fee_bps=2`` and a fee multiplier of 9998.
"""

from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction

from aggregator.constants import BPS_DENOMINATOR
from aggregator.errors import InsufficientLiquidityError
from aggregator.models.token import Token


@dataclass
class AmmPool:
    """A constant-product pair as read from chain.

    Tokens are in on-chain order (token0 has the lower address).
    """

    address: str
    token0: Token
    token1: Token
    reserve0: int
    reserve1: int
    fee_bps: int = 2

    @property
    def fee_multiplier(self) -> int:
        """Fee multiplier for AMM math (10000 - fee_bps)."""
        return BPS_DENOMINATOR - self.fee_bps

    def involves(self, token: Token) -> bool:
        return token == self.token0 or token == self.token1

    def get_reserves(self, token_in: Token) -> tuple[int, int]:
        """Get reserves ordered as (reserve_in, reserve_out)."""
        if token_in == self.token0:
            return self.reserve0, self.reserve1
        if token_in == self.token1:
            return self.reserve1, self.reserve0
        raise ValueError(f"Token {token_in.address} not in pool")

    def get_token_out(self, token_in: Token) -> Token:
        """Get the output token for a given input token."""
        if token_in == self.token0:
            return self.token1
        if token_in == self.token1:
            return self.token0
        raise ValueError(f"Token {token_in.address} not in pool")

    def mid_price(self, token_in: Token) -> Fraction:
        """Spot price in raw output units per raw input unit."""
        reserve_in, reserve_out = self.get_reserves(token_in)
        if reserve_in == 0:
            raise InsufficientLiquidityError("Pool has no reserves", pool=self.address)
        return Fraction(reserve_out, reserve_in)

    def quote_exact_input(self, token_in: Token, amount_in: int) -> int:
        reserve_in, reserve_out = self.get_reserves(token_in)
        amount_out = get_amount_out(amount_in, reserve_in, reserve_out, self.fee_multiplier)
        if amount_out <= 0:
            raise InsufficientLiquidityError(
                "Input too small for any output", pool=self.address, amount_in=amount_in
            )
        return amount_out

    def quote_exact_output(self, token_in: Token, amount_out: int) -> int:
        reserve_in, reserve_out = self.get_reserves(token_in)
        return get_amount_in(amount_out, reserve_in, reserve_out, self.fee_multiplier)


def get_amount_out(
    amount_in: int,
    reserve_in: int,
    reserve_out: int,
    fee_multiplier: int = BPS_DENOMINATOR,
) -> int:
    """Calculate output amount using the constant product formula.

    Formula: amount_out = (in * fee * res_out) / (res_in * 10000 + in * fee)

    Args:
        amount_in: Input token amount
        reserve_in: Reserve of input token in pool
        reserve_out: Reserve of output token in pool
        fee_multiplier: 10000 - fee in basis points

    Returns:
        Output token amount (0 for empty input or reserves)
    """
    if amount_in <= 0:
        return 0
    if reserve_in <= 0 or reserve_out <= 0:
        return 0
    amount_in_with_fee = amount_in * fee_multiplier
    numerator = amount_in_with_fee * reserve_out
    denominator = reserve_in * BPS_DENOMINATOR + amount_in_with_fee
    return numerator // denominator


def get_amount_in(
    amount_out: int,
    reserve_in: int,
    reserve_out: int,
    fee_multiplier: int = BPS_DENOMINATOR,
) -> int:
    """Calculate required input for a desired output.

    Formula: amount_in = (res_in * out * 10000) / ((res_out - out) * fee) + 1

    Args:
        amount_out: Desired output token amount
        reserve_in: Reserve of input token in pool
        reserve_out: Reserve of output token in pool
        fee_multiplier: 10000 - fee in basis points

    Returns:
        Required input token amount

    Raises:
        InsufficientLiquidityError: If the reserves cannot supply amount_out
    """
    if amount_out <= 0:
        return 0
    if reserve_in <= 0 or reserve_out <= 0 or amount_out >= reserve_out:
        raise InsufficientLiquidityError(
            "Output exceeds pool reserve",
            amount_out=amount_out,
            reserve_out=reserve_out,
        )
    numerator = reserve_in * amount_out * BPS_DENOMINATOR
    denominator = (reserve_out - amount_out) * fee_multiplier
    return numerator // denominator + 1


__all__ = ["AmmPool", "get_amount_out", "get_amount_in"]
