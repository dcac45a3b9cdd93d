"""Route discovery across pool protocol families.

Handlers are consulted strictly in priority order (concentrated liquidity
first, then constant product) and the first family that yields a trade wins.
This is first-found, not best-price, selection.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from aggregator.config import ConnectorConfig, NetworkContracts
from aggregator.errors import NoRouteFoundError
from aggregator.pools.reader import PoolStateReader
from aggregator.routing.handlers import AmmHandler, ClmmHandler, RouteHandler
from aggregator.routing.types import DiscoveryAttempt, DiscoveryResult, Trade, TradeRequest

logger = structlog.get_logger()


class RouteDiscoveryEngine:
    """Finds a single-pool trade for a token pair."""

    def __init__(self, handlers: Sequence[RouteHandler]) -> None:
        """Initialize the engine.

        Args:
            handlers: Family handlers in priority order
        """
        self.handlers = list(handlers)

    @classmethod
    def for_network(
        cls,
        reader: PoolStateReader,
        contracts: NetworkContracts,
        config: ConnectorConfig,
    ) -> RouteDiscoveryEngine:
        """Build the engine with the standard handler order for a network."""
        return cls(
            [
                ClmmHandler(
                    reader,
                    contracts.cl_factory,
                    contracts.pool_init_code_hash,
                    window_spacings=config.tick_window_spacings,
                ),
                AmmHandler(
                    reader,
                    contracts.pool_factory,
                    contracts.pair_init_code_hash,
                    fee_bps=config.amm_fee_bps,
                ),
            ]
        )

    async def discover(self, request: TradeRequest) -> DiscoveryResult:
        """Try each family in order and return the first trade found.

        Args:
            request: Tokens, amount and trade type to route

        Returns:
            DiscoveryResult with the trade (or None) and every attempt made
        """
        attempts: list[DiscoveryAttempt] = []
        for handler in self.handlers:
            trade, handler_attempts = await handler.find_trade(request)
            attempts.extend(handler_attempts)
            if trade is not None:
                logger.info(
                    "route_found",
                    family=trade.family.value,
                    pool=trade.pool.address,
                    token_in=request.token_in.label,
                    token_out=request.token_out.label,
                    amount_in=trade.amount_in,
                    amount_out=trade.amount_out,
                )
                return DiscoveryResult(trade=trade, attempts=attempts)

        logger.info(
            "no_route_found",
            token_in=request.token_in.label,
            token_out=request.token_out.label,
            attempts=len(attempts),
        )
        return DiscoveryResult(trade=None, attempts=attempts)

    async def find_trade(self, request: TradeRequest) -> Trade:
        """Like ``discover`` but raises when nothing is found.

        Raises:
            NoRouteFoundError: If no family yields a trade
        """
        result = await self.discover(request)
        if result.trade is None:
            raise NoRouteFoundError(
                request.token_in.label, request.token_out.label, result.attempts
            )
        return result.trade


__all__ = ["RouteDiscoveryEngine"]
