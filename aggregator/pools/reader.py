"""Concurrent on-chain pool state reads.

Independent reads of one pool are issued together with ``asyncio.gather`` and
joined before returning. Nothing is cached: every call hits the chain.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

import structlog

from aggregator.amm.constant_product import AmmPool
from aggregator.chain.abis import CL_POOL_ABI, PAIR_ABI
from aggregator.chain.provider import ChainProvider
from aggregator.errors import UpstreamProviderError
from aggregator.models.token import Token
from aggregator.models.types import is_valid_address, normalize_address

logger = structlog.get_logger()


@dataclass(frozen=True)
class ClmmState:
    """Live state of a concentrated-liquidity pool."""

    address: str
    liquidity: int
    sqrt_price_x96: int
    tick: int
    fee: int


class PoolStateReader:
    """Reads pool state through a ``ChainProvider``."""

    def __init__(self, provider: ChainProvider):
        self.provider = provider

    async def read_token0(self, pool_address: str) -> str:
        token0 = await self.provider.read_contract(pool_address, PAIR_ABI, "token0")
        return _as_address(token0, pool_address, "token0")

    async def read_pool_tokens(self, pool_address: str) -> tuple[str, str]:
        """Read ``token0()`` and ``token1()`` concurrently.

        Returns:
            Tuple of lowercase (token0, token1) addresses

        Raises:
            UpstreamProviderError: If either read fails
        """
        token0, token1 = await asyncio.gather(
            self.provider.read_contract(pool_address, PAIR_ABI, "token0"),
            self.provider.read_contract(pool_address, PAIR_ABI, "token1"),
        )
        return (
            _as_address(token0, pool_address, "token0"),
            _as_address(token1, pool_address, "token1"),
        )

    async def read_amm_pool(
        self,
        pair_address: str,
        token_a: Token,
        token_b: Token,
        fee_bps: int,
    ) -> AmmPool:
        """Read reserves and token order of a constant-product pair.

        Args:
            pair_address: Pair contract address
            token_a: One token of the pair
            token_b: The other token
            fee_bps: Pair fee in basis points

        Returns:
            The pair with tokens in on-chain order

        Raises:
            UpstreamProviderError: If a read fails or the pair holds other tokens
        """
        reserves, token0 = await asyncio.gather(
            self.provider.read_contract(pair_address, PAIR_ABI, "getReserves"),
            self.provider.read_contract(pair_address, PAIR_ABI, "token0"),
        )
        token0_address = _as_address(token0, pair_address, "token0")
        if not isinstance(reserves, list | tuple) or len(reserves) < 2:
            raise UpstreamProviderError(
                "getReserves", address=pair_address, reason=f"malformed result {reserves!r}"
            )

        if token0_address == token_a.address:
            first, second = token_a, token_b
        elif token0_address == token_b.address:
            first, second = token_b, token_a
        else:
            raise UpstreamProviderError(
                "token0",
                address=pair_address,
                reason=f"pair token0 {token0_address} is not part of the requested pair",
            )

        pool = AmmPool(
            address=normalize_address(pair_address),
            token0=first,
            token1=second,
            reserve0=_as_uint(reserves[0], pair_address, "getReserves"),
            reserve1=_as_uint(reserves[1], pair_address, "getReserves"),
            fee_bps=fee_bps,
        )
        logger.debug(
            "amm_pool_read",
            pool=pool.address,
            reserve0=pool.reserve0,
            reserve1=pool.reserve1,
        )
        return pool

    async def read_clmm_state(self, pool_address: str) -> ClmmState:
        """Read ``liquidity()``, ``slot0()`` and ``fee()`` concurrently.

        Raises:
            UpstreamProviderError: If a read fails or returns a malformed result
        """
        liquidity, slot0, fee = await asyncio.gather(
            self.provider.read_contract(pool_address, CL_POOL_ABI, "liquidity"),
            self.provider.read_contract(pool_address, CL_POOL_ABI, "slot0"),
            self.provider.read_contract(pool_address, CL_POOL_ABI, "fee"),
        )
        if not isinstance(slot0, list | tuple) or len(slot0) < 2:
            raise UpstreamProviderError(
                "slot0", address=pool_address, reason=f"malformed result {slot0!r}"
            )
        tick = slot0[1]
        if not isinstance(tick, int) or isinstance(tick, bool):
            raise UpstreamProviderError(
                "slot0", address=pool_address, reason=f"malformed tick {tick!r}"
            )
        return ClmmState(
            address=normalize_address(pool_address),
            liquidity=_as_uint(liquidity, pool_address, "liquidity"),
            sqrt_price_x96=_as_uint(slot0[0], pool_address, "slot0"),
            tick=tick,
            fee=_as_uint(fee, pool_address, "fee"),
        )


def _as_uint(value: Any, address: str, method: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise UpstreamProviderError(method, address=address, reason=f"malformed value {value!r}")
    return value


def _as_address(value: Any, address: str, method: str) -> str:
    if not isinstance(value, str) or not is_valid_address(value):
        raise UpstreamProviderError(method, address=address, reason=f"malformed address {value!r}")
    return normalize_address(value)


__all__ = ["ClmmState", "PoolStateReader"]
