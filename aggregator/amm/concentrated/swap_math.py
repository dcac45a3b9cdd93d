"""Integer swap math for concentrated-liquidity pools.

Mirrors the on-chain SqrtPriceMath and SwapMath libraries, including their
rounding directions, so simulated amounts match what the pool would return
for the same liquidity.
"""

from aggregator.amm.concentrated.constants import FEE_DENOMINATOR, Q96
from aggregator.errors import InsufficientLiquidityError

_UINT256_LIMIT = 2**256


def _div_rounding_up(a: int, b: int) -> int:
    return -(-a // b)


def mul_div_rounding_up(a: int, b: int, denominator: int) -> int:
    return _div_rounding_up(a * b, denominator)


def get_next_sqrt_price_from_amount0_rounding_up(
    sqrt_price_x96: int, liquidity: int, amount: int, add: bool
) -> int:
    if amount == 0:
        return sqrt_price_x96
    numerator1 = liquidity << 96
    product = amount * sqrt_price_x96

    if add:
        denominator = numerator1 + product
        if product < _UINT256_LIMIT and denominator < _UINT256_LIMIT:
            return mul_div_rounding_up(numerator1, sqrt_price_x96, denominator)
        return _div_rounding_up(numerator1, numerator1 // sqrt_price_x96 + amount)

    if numerator1 <= product:
        raise InsufficientLiquidityError("Output exceeds token0 liquidity", amount=amount)
    return mul_div_rounding_up(numerator1, sqrt_price_x96, numerator1 - product)


def get_next_sqrt_price_from_amount1_rounding_down(
    sqrt_price_x96: int, liquidity: int, amount: int, add: bool
) -> int:
    if add:
        return sqrt_price_x96 + (amount << 96) // liquidity

    quotient = _div_rounding_up(amount << 96, liquidity)
    if sqrt_price_x96 <= quotient:
        raise InsufficientLiquidityError("Output exceeds token1 liquidity", amount=amount)
    return sqrt_price_x96 - quotient


def get_next_sqrt_price_from_input(
    sqrt_price_x96: int, liquidity: int, amount_in: int, zero_for_one: bool
) -> int:
    if sqrt_price_x96 <= 0 or liquidity <= 0:
        raise InsufficientLiquidityError("Pool has no liquidity")
    if zero_for_one:
        return get_next_sqrt_price_from_amount0_rounding_up(
            sqrt_price_x96, liquidity, amount_in, True
        )
    return get_next_sqrt_price_from_amount1_rounding_down(sqrt_price_x96, liquidity, amount_in, True)


def get_next_sqrt_price_from_output(
    sqrt_price_x96: int, liquidity: int, amount_out: int, zero_for_one: bool
) -> int:
    if sqrt_price_x96 <= 0 or liquidity <= 0:
        raise InsufficientLiquidityError("Pool has no liquidity")
    if zero_for_one:
        return get_next_sqrt_price_from_amount1_rounding_down(
            sqrt_price_x96, liquidity, amount_out, False
        )
    return get_next_sqrt_price_from_amount0_rounding_up(
        sqrt_price_x96, liquidity, amount_out, False
    )


def get_amount0_delta(sqrt_a: int, sqrt_b: int, liquidity: int, round_up: bool) -> int:
    """Amount of token0 between two prices for the given liquidity."""
    if sqrt_a > sqrt_b:
        sqrt_a, sqrt_b = sqrt_b, sqrt_a
    numerator1 = liquidity << 96
    numerator2 = sqrt_b - sqrt_a
    if round_up:
        return _div_rounding_up(mul_div_rounding_up(numerator1, numerator2, sqrt_b), sqrt_a)
    return numerator1 * numerator2 // sqrt_b // sqrt_a


def get_amount1_delta(sqrt_a: int, sqrt_b: int, liquidity: int, round_up: bool) -> int:
    """Amount of token1 between two prices for the given liquidity."""
    if sqrt_a > sqrt_b:
        sqrt_a, sqrt_b = sqrt_b, sqrt_a
    if round_up:
        return mul_div_rounding_up(liquidity, sqrt_b - sqrt_a, Q96)
    return liquidity * (sqrt_b - sqrt_a) // Q96


def compute_swap_step(
    sqrt_price_current_x96: int,
    sqrt_price_target_x96: int,
    liquidity: int,
    amount_remaining: int,
    fee_pips: int,
) -> tuple[int, int, int, int]:
    """Compute one swap step within a single liquidity range.

    Args:
        sqrt_price_current_x96: Current pool sqrt price
        sqrt_price_target_x96: Price the step may not cross
        liquidity: Active liquidity for the range
        amount_remaining: Positive for exact input, negative for exact output
        fee_pips: Pool fee in hundredths of a basis point

    Returns:
        Tuple of (next sqrt price, amount in, amount out, fee amount)
    """
    zero_for_one = sqrt_price_current_x96 >= sqrt_price_target_x96
    exact_in = amount_remaining >= 0
    amount_in = 0
    amount_out = 0

    if exact_in:
        amount_remaining_less_fee = (
            amount_remaining * (FEE_DENOMINATOR - fee_pips) // FEE_DENOMINATOR
        )
        if zero_for_one:
            amount_in = get_amount0_delta(
                sqrt_price_target_x96, sqrt_price_current_x96, liquidity, True
            )
        else:
            amount_in = get_amount1_delta(
                sqrt_price_current_x96, sqrt_price_target_x96, liquidity, True
            )
        if amount_remaining_less_fee >= amount_in:
            sqrt_price_next_x96 = sqrt_price_target_x96
        else:
            sqrt_price_next_x96 = get_next_sqrt_price_from_input(
                sqrt_price_current_x96, liquidity, amount_remaining_less_fee, zero_for_one
            )
    else:
        if zero_for_one:
            amount_out = get_amount1_delta(
                sqrt_price_target_x96, sqrt_price_current_x96, liquidity, False
            )
        else:
            amount_out = get_amount0_delta(
                sqrt_price_current_x96, sqrt_price_target_x96, liquidity, False
            )
        if -amount_remaining >= amount_out:
            sqrt_price_next_x96 = sqrt_price_target_x96
        else:
            sqrt_price_next_x96 = get_next_sqrt_price_from_output(
                sqrt_price_current_x96, liquidity, -amount_remaining, zero_for_one
            )

    reached_target = sqrt_price_target_x96 == sqrt_price_next_x96

    if zero_for_one:
        if not (reached_target and exact_in):
            amount_in = get_amount0_delta(
                sqrt_price_next_x96, sqrt_price_current_x96, liquidity, True
            )
        if not (reached_target and not exact_in):
            amount_out = get_amount1_delta(
                sqrt_price_next_x96, sqrt_price_current_x96, liquidity, False
            )
    else:
        if not (reached_target and exact_in):
            amount_in = get_amount1_delta(
                sqrt_price_current_x96, sqrt_price_next_x96, liquidity, True
            )
        if not (reached_target and not exact_in):
            amount_out = get_amount0_delta(
                sqrt_price_current_x96, sqrt_price_next_x96, liquidity, False
            )

    # cap the output amount to not exceed the remaining output amount
    if not exact_in and amount_out > -amount_remaining:
        amount_out = -amount_remaining

    if exact_in and sqrt_price_next_x96 != sqrt_price_target_x96:
        # didn't reach the target, so take the remainder of the maximum input as fee
        fee_amount = amount_remaining - amount_in
    else:
        fee_amount = mul_div_rounding_up(amount_in, fee_pips, FEE_DENOMINATOR - fee_pips)

    return sqrt_price_next_x96, amount_in, amount_out, fee_amount


__all__ = [
    "mul_div_rounding_up",
    "get_next_sqrt_price_from_input",
    "get_next_sqrt_price_from_output",
    "get_amount0_delta",
    "get_amount1_delta",
    "compute_swap_step",
]
