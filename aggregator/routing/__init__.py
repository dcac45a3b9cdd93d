"""Route discovery and quoting."""

from aggregator.routing.discovery import RouteDiscoveryEngine
from aggregator.routing.quote import QuoteBuilder, SwapQuote
from aggregator.routing.types import (
    AttemptOutcome,
    DiscoveryAttempt,
    DiscoveryResult,
    ProtocolFamily,
    Route,
    Side,
    Trade,
    TradeRequest,
    TradeType,
)

__all__ = [
    "RouteDiscoveryEngine",
    "QuoteBuilder",
    "SwapQuote",
    "AttemptOutcome",
    "DiscoveryAttempt",
    "DiscoveryResult",
    "ProtocolFamily",
    "Route",
    "Side",
    "Trade",
    "TradeRequest",
    "TradeType",
]
