"""Base class and protocol for pool-family route handlers."""

from __future__ import annotations

from typing import Protocol

import structlog

from aggregator.routing.types import (
    AnyPool,
    AttemptOutcome,
    DiscoveryAttempt,
    ProtocolFamily,
    Route,
    Trade,
    TradeRequest,
    TradeType,
)

logger = structlog.get_logger()

HandlerResult = tuple[Trade | None, list[DiscoveryAttempt]]


class RouteHandler(Protocol):
    """Protocol for pool-family route handlers.

    Each handler knows how to find and price a trade in one protocol family.
    Handlers never raise for a missing or unusable pool: they record why in
    the returned attempts and return no trade.
    """

    family: ProtocolFamily

    async def find_trade(self, request: TradeRequest) -> HandlerResult:
        """Find a trade for the request in this family.

        Args:
            request: Tokens, amount and trade type to route

        Returns:
            Tuple of (trade or None, attempts made)
        """
        ...


class BaseHandler:
    """Shared helpers for building trades and recording attempts."""

    family: ProtocolFamily

    def _attempt(
        self,
        outcome: AttemptOutcome,
        pool_address: str | None,
        reason: str = "",
        fee: int | None = None,
    ) -> DiscoveryAttempt:
        log = logger.info if outcome is AttemptOutcome.SELECTED else logger.debug
        log(
            f"{self.family.value}_pool_{outcome.value}",
            pool=pool_address,
            fee=fee,
            reason=reason or None,
        )
        return DiscoveryAttempt(
            family=self.family,
            outcome=outcome,
            pool_address=pool_address,
            fee=fee,
            reason=reason,
        )

    def _price(self, pool: AnyPool, request: TradeRequest) -> Trade:
        """Simulate the request against ``pool`` and wrap it as a trade.

        Raises:
            InsufficientLiquidityError: If the pool cannot fill the amount
        """
        mid_price = pool.mid_price(request.token_in)
        if request.trade_type is TradeType.EXACT_INPUT:
            amount_in = request.amount
            amount_out = pool.quote_exact_input(request.token_in, request.amount)
        else:
            amount_out = request.amount
            amount_in = pool.quote_exact_output(request.token_in, request.amount)
        route = Route(
            family=self.family,
            pool=pool,
            token_in=request.token_in,
            token_out=request.token_out,
        )
        return Trade(
            route=route,
            trade_type=request.trade_type,
            amount_in=amount_in,
            amount_out=amount_out,
            mid_price=mid_price,
        )


__all__ = ["HandlerResult", "RouteHandler", "BaseHandler"]
