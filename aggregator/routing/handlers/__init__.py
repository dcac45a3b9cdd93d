"""Pool-family route handlers.

Handlers are listed here in discovery priority order.
"""

from aggregator.routing.handlers.amm import AmmHandler
from aggregator.routing.handlers.base import BaseHandler, HandlerResult, RouteHandler
from aggregator.routing.handlers.clmm import ClmmHandler

__all__ = ["ClmmHandler", "AmmHandler", "BaseHandler", "HandlerResult", "RouteHandler"]
