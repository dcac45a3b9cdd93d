"""Concentrated-liquidity route handler."""

from __future__ import annotations

from collections.abc import Sequence

from aggregator.amm.concentrated.constants import FEE_TIERS, TICK_SPACINGS
from aggregator.amm.concentrated.pool import ClmmPool, TickWindow
from aggregator.constants import POOL_INIT_CODE_HASH, TICK_WINDOW_SPACINGS
from aggregator.errors import AggregatorError
from aggregator.pools.address import compute_pool_address
from aggregator.pools.reader import PoolStateReader
from aggregator.routing.handlers.base import BaseHandler, HandlerResult
from aggregator.routing.types import (
    AttemptOutcome,
    DiscoveryAttempt,
    ProtocolFamily,
    TradeRequest,
)


class ClmmHandler(BaseHandler):
    """Routes through concentrated-liquidity pools, one fee tier at a time.

    Tiers are tried lowest fee first. The first tier whose pool has non-zero
    active liquidity and can fill the amount wins; failures on a tier are
    recorded and the next tier is tried.
    """

    family = ProtocolFamily.CLMM

    def __init__(
        self,
        reader: PoolStateReader,
        factory: str,
        init_code_hash: str = POOL_INIT_CODE_HASH,
        fee_tiers: Sequence[int] = FEE_TIERS,
        window_spacings: int = TICK_WINDOW_SPACINGS,
    ) -> None:
        """Initialize the handler.

        Args:
            reader: Pool state reader bound to the network
            factory: Concentrated-liquidity pool factory address
            init_code_hash: Pool init code hash for address derivation
            fee_tiers: Fee tiers to try, in order
            window_spacings: Synthetic tick window half-width in spacings
        """
        self.reader = reader
        self.factory = factory
        self.init_code_hash = init_code_hash
        self.fee_tiers = list(fee_tiers)
        self.window_spacings = window_spacings

    async def find_trade(self, request: TradeRequest) -> HandlerResult:
        attempts: list[DiscoveryAttempt] = []
        for fee in self.fee_tiers:
            pool_address: str | None = None
            try:
                pool_address = compute_pool_address(
                    self.factory,
                    request.token_in.address,
                    request.token_out.address,
                    fee,
                    self.init_code_hash,
                )
                state = await self.reader.read_clmm_state(pool_address)
                if state.liquidity == 0:
                    attempts.append(
                        self._attempt(AttemptOutcome.SKIPPED, pool_address, "zero liquidity", fee)
                    )
                    continue

                tick_spacing = TICK_SPACINGS[fee]
                token0, token1 = (
                    (request.token_in, request.token_out)
                    if request.token_in.sorts_before(request.token_out)
                    else (request.token_out, request.token_in)
                )
                pool = ClmmPool(
                    address=state.address,
                    token0=token0,
                    token1=token1,
                    fee=fee,
                    sqrt_price_x96=state.sqrt_price_x96,
                    liquidity=state.liquidity,
                    tick=state.tick,
                    tick_spacing=tick_spacing,
                    window=TickWindow.around(state.tick, tick_spacing, self.window_spacings),
                )
                trade = self._price(pool, request)
            except (AggregatorError, ValueError, ZeroDivisionError) as e:
                reason = e.message if isinstance(e, AggregatorError) else str(e)
                attempts.append(self._attempt(AttemptOutcome.FAILED, pool_address, reason, fee))
                continue

            attempts.append(self._attempt(AttemptOutcome.SELECTED, pool_address, fee=fee))
            return trade, attempts
        return None, attempts


__all__ = ["ClmmHandler"]
