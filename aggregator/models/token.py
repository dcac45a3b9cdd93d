"""Token model and token references.

A ``TokenRef`` is what callers hand us (a symbol or an address); it is parsed
once at the boundary and resolved to a ``Token`` before any routing happens.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, localcontext

from aggregator.models.types import is_valid_address, normalize_address


@dataclass(frozen=True)
class Token:
    """An ERC-20 token on a specific chain.

    Equality and hashing use only the chain id and the lowercase address, so
    tokens loaded from different sources with different symbols or casing
    compare equal.
    """

    chain_id: int
    address: str
    decimals: int
    symbol: str = field(default="", compare=False)
    name: str = field(default="", compare=False)

    def __post_init__(self) -> None:
        if not is_valid_address(self.address):
            raise ValueError(f"Invalid token address: {self.address}")
        if not 0 <= self.decimals <= 255:
            raise ValueError(f"Invalid token decimals: {self.decimals}")
        object.__setattr__(self, "address", normalize_address(self.address))

    @property
    def label(self) -> str:
        """Symbol if known, otherwise the address."""
        return self.symbol or self.address

    def sorts_before(self, other: Token) -> bool:
        """Whether this token is token0 in a pool with ``other``."""
        return self.address < other.address

    def to_raw(self, amount: Decimal | float | str) -> int:
        """Convert a human amount to smallest units, rounding half up."""
        with localcontext() as ctx:
            ctx.prec = 100
            scaled = Decimal(str(amount)).scaleb(self.decimals)
            return int(scaled.quantize(Decimal(1), ROUND_HALF_UP))

    def from_raw(self, raw: int) -> Decimal:
        """Convert smallest units to a human amount."""
        return Decimal(raw).scaleb(-self.decimals)


@dataclass(frozen=True)
class BySymbol:
    """Token referenced by ticker symbol."""

    symbol: str


@dataclass(frozen=True)
class ByAddress:
    """Token referenced by contract address."""

    address: str


@dataclass(frozen=True)
class Resolved:
    """Token that has already been resolved."""

    token: Token


TokenRef = BySymbol | ByAddress | Resolved


def token_ref(value: str | Token | BySymbol | ByAddress | Resolved) -> TokenRef:
    """Parse a caller-supplied token identifier.

    Strings that look like addresses become ``ByAddress``; anything else is
    treated as a symbol.

    Args:
        value: Symbol, address, ``Token`` or an existing reference

    Returns:
        The matching ``TokenRef`` variant
    """
    if isinstance(value, BySymbol | ByAddress | Resolved):
        return value
    if isinstance(value, Token):
        return Resolved(value)
    if value.startswith("0x") and len(value) == 42:
        return ByAddress(value)
    return BySymbol(value)


__all__ = [
    "Token",
    "BySymbol",
    "ByAddress",
    "Resolved",
    "TokenRef",
    "token_ref",
]
