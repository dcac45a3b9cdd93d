"""Error taxonomy for the Aerodrome connector.

Every error carries a human-readable message plus a ``context`` dict with the
identifiers involved (tokens, pool, position), so callers and the HTTP layer
can report failures without parsing strings.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from aggregator.routing.types import DiscoveryAttempt


class AggregatorError(Exception):
    """Base class for all connector errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context


class InvalidTokenError(AggregatorError):
    """Token symbol or address could not be resolved or is malformed."""

    def __init__(self, token: str, reason: str = "token not found") -> None:
        super().__init__(f"Invalid token {token!r}: {reason}", token=token)
        self.token = token


class InvalidPoolAddressError(AggregatorError):
    """Pool address failed validation."""

    def __init__(self, address: str) -> None:
        super().__init__(f"Invalid pool address: {address}", pool_address=address)
        self.address = address


class PoolNotFoundError(AggregatorError):
    """No pool exists (or could be read) at the given address."""

    def __init__(self, address: str) -> None:
        super().__init__(f"Pool not found: {address}", pool_address=address)
        self.address = address


class NoRouteFoundError(AggregatorError):
    """Neither pool family yielded a usable trade for the pair.

    Attributes:
        token_in: Symbol or address of the input token
        token_out: Symbol or address of the output token
        attempts: Discovery attempts recorded while searching
    """

    def __init__(
        self,
        token_in: str = "",
        token_out: str = "",
        attempts: list[DiscoveryAttempt] | None = None,
    ) -> None:
        pair = f" for {token_in} -> {token_out}" if token_in and token_out else ""
        super().__init__(
            f"No route found{pair}",
            token_in=token_in,
            token_out=token_out,
        )
        self.token_in = token_in
        self.token_out = token_out
        self.attempts = attempts or []


class InvalidPositionError(AggregatorError):
    """Position id is malformed or does not exist."""

    def __init__(self, position_id: str) -> None:
        super().__init__(f"Invalid position ID: {position_id}", position_id=position_id)
        self.position_id = position_id


class PositionOwnershipError(AggregatorError):
    """Wallet does not own the position."""

    def __init__(self, position_id: str, wallet: str) -> None:
        super().__init__(
            f"Position {position_id} is not owned by {wallet}",
            position_id=position_id,
            wallet=wallet,
        )
        self.position_id = position_id
        self.wallet = wallet


class PositionApprovalError(AggregatorError):
    """Operator is not approved to manage the position."""

    def __init__(self, position_id: str, operator: str) -> None:
        super().__init__(
            f"Operator {operator} is not approved for position {position_id}",
            position_id=position_id,
            operator=operator,
        )
        self.position_id = position_id
        self.operator = operator


class UpstreamProviderError(AggregatorError):
    """A blockchain read or gas estimate failed.

    Attributes:
        method: Contract method (or RPC call) that failed
        address: Contract address the call targeted, if any
        revert_data: Hex-encoded revert payload, when the node returned one
    """

    def __init__(
        self,
        method: str,
        address: str | None = None,
        reason: str = "",
        revert_data: str | None = None,
    ) -> None:
        target = f" on {address}" if address else ""
        detail = f": {reason}" if reason else ""
        super().__init__(
            f"Provider call {method}{target} failed{detail}",
            method=method,
            address=address,
            revert_data=revert_data,
        )
        self.method = method
        self.address = address
        self.revert_data = revert_data


class UnsupportedNetworkError(AggregatorError):
    """Network is unknown or not enabled for this connector."""

    def __init__(self, network: str) -> None:
        super().__init__(f"Unsupported network: {network}", network=network)
        self.network = network


class ConnectorNotReadyError(AggregatorError):
    """Operation called on a connector that is not initialized or is closed."""


class InsufficientLiquidityError(AggregatorError):
    """Pool math could not fill the requested amount."""


__all__ = [
    "AggregatorError",
    "InvalidTokenError",
    "InvalidPoolAddressError",
    "PoolNotFoundError",
    "NoRouteFoundError",
    "InvalidPositionError",
    "PositionOwnershipError",
    "PositionApprovalError",
    "UpstreamProviderError",
    "UnsupportedNetworkError",
    "ConnectorNotReadyError",
    "InsufficientLiquidityError",
]
