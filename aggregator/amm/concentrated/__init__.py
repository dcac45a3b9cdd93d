"""Concentrated-liquidity pool math."""

from aggregator.amm.concentrated.constants import FEE_TIERS, TICK_SPACINGS
from aggregator.amm.concentrated.pool import ClmmPool, Tick, TickWindow
from aggregator.amm.concentrated.tick_math import (
    get_sqrt_ratio_at_tick,
    get_tick_at_sqrt_ratio,
    nearest_usable_tick,
)

__all__ = [
    "FEE_TIERS",
    "TICK_SPACINGS",
    "ClmmPool",
    "Tick",
    "TickWindow",
    "get_sqrt_ratio_at_tick",
    "get_tick_at_sqrt_ratio",
    "nearest_usable_tick",
]
