"""Constant-product route handler."""

from __future__ import annotations

from aggregator.constants import PAIR_INIT_CODE_HASH
from aggregator.errors import AggregatorError
from aggregator.pools.address import compute_pair_address
from aggregator.pools.reader import PoolStateReader
from aggregator.pools.validation import is_valid_pool_address
from aggregator.routing.handlers.base import BaseHandler, HandlerResult
from aggregator.routing.types import AttemptOutcome, ProtocolFamily, TradeRequest


class AmmHandler(BaseHandler):
    """Routes through the single constant-product pair of a token pair."""

    family = ProtocolFamily.AMM

    def __init__(
        self,
        reader: PoolStateReader,
        factory: str,
        init_code_hash: str = PAIR_INIT_CODE_HASH,
        fee_bps: int = 2,
    ) -> None:
        """Initialize the handler.

        Args:
            reader: Pool state reader bound to the network
            factory: Pair factory address
            init_code_hash: Pair init code hash for address derivation
            fee_bps: Pair fee in basis points
        """
        self.reader = reader
        self.factory = factory
        self.init_code_hash = init_code_hash
        self.fee_bps = fee_bps

    async def find_trade(self, request: TradeRequest) -> HandlerResult:
        pair_address: str | None = None
        try:
            pair_address = compute_pair_address(
                self.factory,
                request.token_in.address,
                request.token_out.address,
                self.init_code_hash,
            )
            if not is_valid_pool_address(pair_address):
                return None, [
                    self._attempt(AttemptOutcome.SKIPPED, pair_address, "invalid pair address")
                ]
            pool = await self.reader.read_amm_pool(
                pair_address, request.token_in, request.token_out, self.fee_bps
            )
            if pool.reserve0 == 0 or pool.reserve1 == 0:
                return None, [self._attempt(AttemptOutcome.SKIPPED, pair_address, "empty reserves")]
            trade = self._price(pool, request)
        except (AggregatorError, ValueError, ZeroDivisionError) as e:
            reason = e.message if isinstance(e, AggregatorError) else str(e)
            return None, [self._attempt(AttemptOutcome.FAILED, pair_address, reason)]

        return trade, [self._attempt(AttemptOutcome.SELECTED, pair_address)]


__all__ = ["AmmHandler"]
