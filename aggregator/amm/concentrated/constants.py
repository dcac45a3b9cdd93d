"""Concentrated-liquidity constants: fee tiers and tick bounds."""

# Fee tiers in hundredths of a basis point (fee = units / 1,000,000)
FEE_LOWEST = 100  # 0.01%
FEE_LOW = 500  # 0.05%
FEE_MEDIUM = 3000  # 0.30%
FEE_HIGH = 10000  # 1.00%

# Discovery order: lowest fee first
FEE_TIERS = [FEE_LOWEST, FEE_LOW, FEE_MEDIUM, FEE_HIGH]

# Tick spacing per fee tier
TICK_SPACINGS = {
    FEE_LOWEST: 1,
    FEE_LOW: 10,
    FEE_MEDIUM: 60,
    FEE_HIGH: 200,
}

FEE_DENOMINATOR = 1_000_000

MIN_TICK = -887272
MAX_TICK = -MIN_TICK

# sqrt(1.0001^MIN_TICK) and sqrt(1.0001^MAX_TICK) as Q64.96
MIN_SQRT_RATIO = 4295128739
MAX_SQRT_RATIO = 1461446703485210103287273052203988822378723970342

Q96 = 2**96
Q192 = 2**192
MAX_UINT256 = 2**256 - 1

__all__ = [
    "FEE_LOWEST",
    "FEE_LOW",
    "FEE_MEDIUM",
    "FEE_HIGH",
    "FEE_TIERS",
    "TICK_SPACINGS",
    "FEE_DENOMINATOR",
    "MIN_TICK",
    "MAX_TICK",
    "MIN_SQRT_RATIO",
    "MAX_SQRT_RATIO",
    "Q96",
    "Q192",
    "MAX_UINT256",
]
