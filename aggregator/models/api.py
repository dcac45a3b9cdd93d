"""Pydantic models for the HTTP request and response bodies.

Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from aggregator.models.types import Address


class ConnectorModel(BaseModel):
    """A connector and the networks it serves."""

    name: str
    trading_types: list[str]
    chain: str
    networks: list[str]


class ConnectorsResponse(BaseModel):
    connectors: list[ConnectorModel]


class PoolInfoResponse(BaseModel):
    """Constant-product pool summary."""

    address: Address
    base_token_address: Address = Field(alias="baseTokenAddress")
    quote_token_address: Address = Field(alias="quoteTokenAddress")
    fee_pct: float = Field(alias="feePct", description="Pool fee, percent")
    price: float = Field(description="Quote tokens per base token")
    base_token_amount: float = Field(alias="baseTokenAmount")
    quote_token_amount: float = Field(alias="quoteTokenAmount")

    model_config = {"populate_by_name": True}


class ClmmPoolInfoResponse(BaseModel):
    """Concentrated-liquidity pool summary."""

    address: Address
    base_token_address: Address = Field(alias="baseTokenAddress")
    quote_token_address: Address = Field(alias="quoteTokenAddress")
    fee_pct: float = Field(alias="feePct", description="Pool fee, percent")
    price: float = Field(description="Token1 per token0")
    sqrt_price_x96: str = Field(alias="sqrtPriceX96", description="Q64.96 sqrt price")
    tick: int
    liquidity: str = Field(description="Active liquidity as decimal string")

    model_config = {"populate_by_name": True}


class FindPoolResponse(BaseModel):
    pool_address: Address | None = Field(default=None, alias="poolAddress")

    model_config = {"populate_by_name": True}


class QuoteSwapResponse(BaseModel):
    """A swap quote with everything needed to submit it."""

    quote_id: str = Field(alias="quoteId")
    token_in: Address = Field(alias="tokenIn", description="Address of the token swapped from")
    token_out: Address = Field(alias="tokenOut", description="Address of the token swapped to")
    amount_in: float = Field(alias="amountIn")
    amount_out: float = Field(alias="amountOut")
    price: float = Field(description="tokenOut per tokenIn")
    price_impact_pct: float = Field(alias="priceImpactPct")
    min_amount_out: float = Field(alias="minAmountOut")
    max_amount_in: float = Field(alias="maxAmountIn")
    route_path: str | None = Field(default=None, alias="routePath")
    protocol: str = Field(description="Pool family the route uses (amm or clmm)")
    pool_address: Address = Field(alias="poolAddress")
    gas_estimate: int | None = Field(default=None, alias="gasEstimate")
    to: Address = Field(description="Universal Router address")
    data: str = Field(description="Hex calldata for Universal Router execute")
    value: str = Field(description="Native value (hex)")
    deadline: int = Field(description="Unix deadline encoded in the calldata")

    model_config = {"populate_by_name": True}


class PositionCheckResponse(BaseModel):
    position_id: str = Field(alias="positionId")
    authorized: bool = True

    model_config = {"populate_by_name": True}


class ErrorResponse(BaseModel):
    """Error body returned for connector errors."""

    error: str = Field(description="Error class name")
    message: str


__all__ = [
    "ConnectorModel",
    "ConnectorsResponse",
    "PoolInfoResponse",
    "ClmmPoolInfoResponse",
    "FindPoolResponse",
    "QuoteSwapResponse",
    "PositionCheckResponse",
    "ErrorResponse",
]
