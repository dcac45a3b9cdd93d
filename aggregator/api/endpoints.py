"""API endpoints for the Aerodrome connector."""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Query

from aggregator.config import list_connectors
from aggregator.connector import ClmmPoolInfo, PoolInfo
from aggregator.lifecycle import ConnectorRegistry, get_default_registry
from aggregator.models.api import (
    ClmmPoolInfoResponse,
    ConnectorModel,
    ConnectorsResponse,
    FindPoolResponse,
    PoolInfoResponse,
    PositionCheckResponse,
    QuoteSwapResponse,
)
from aggregator.models.types import ADDRESS_PATTERN
from aggregator.routing.quote import SwapQuote
from aggregator.routing.types import Side

logger = structlog.get_logger()

router = APIRouter()

PREFIX = "/connectors/aerodrome"

Network = Annotated[str, Query(description="Network name, e.g. base")]
PoolAddress = Annotated[str, Query(alias="poolAddress", description="Pool contract address")]
WalletAddress = Annotated[str, Query(alias="walletAddress", pattern=ADDRESS_PATTERN)]


def get_registry() -> ConnectorRegistry:
    """Dependency provider for the connector registry.

    Override this in tests to inject a registry with a fake provider:
        app.dependency_overrides[get_registry] = lambda: registry
    """
    return get_default_registry()


def _pool_info_response(info: PoolInfo) -> PoolInfoResponse:
    return PoolInfoResponse(
        address=info.address,
        base_token_address=info.base_token_address,
        quote_token_address=info.quote_token_address,
        fee_pct=info.fee_pct,
        price=info.price,
        base_token_amount=info.base_token_amount,
        quote_token_amount=info.quote_token_amount,
    )


def _clmm_pool_info_response(info: ClmmPoolInfo) -> ClmmPoolInfoResponse:
    return ClmmPoolInfoResponse(
        address=info.address,
        base_token_address=info.base_token_address,
        quote_token_address=info.quote_token_address,
        fee_pct=info.fee_pct,
        price=info.price,
        sqrt_price_x96=str(info.sqrt_price_x96),
        tick=info.tick,
        liquidity=str(info.liquidity),
    )


def _quote_response(quote: SwapQuote) -> QuoteSwapResponse:
    return QuoteSwapResponse(
        quote_id=quote.quote_id,
        token_in=quote.token_in.address,
        token_out=quote.token_out.address,
        amount_in=float(quote.amount_in_human),
        amount_out=float(quote.amount_out_human),
        price=float(quote.price),
        price_impact_pct=quote.price_impact_pct,
        min_amount_out=float(quote.min_amount_out_human),
        max_amount_in=float(quote.max_amount_in_human),
        route_path=quote.route_path,
        protocol=quote.family.value,
        pool_address=quote.pool_address,
        gas_estimate=quote.gas_estimate,
        to=quote.to,
        data=quote.calldata,
        value=quote.value,
        deadline=quote.deadline,
    )


@router.get("/config/connectors")
async def get_connectors(
    registry: ConnectorRegistry = Depends(get_registry),
) -> ConnectorsResponse:
    """List available DEX connectors and their networks."""
    logger.info("listing_connectors")
    return ConnectorsResponse(
        connectors=[
            ConnectorModel(
                name=info.name,
                trading_types=list(info.trading_types),
                chain=info.chain,
                networks=list(info.networks),
            )
            for info in list_connectors(registry.config)
        ]
    )


@router.get(f"{PREFIX}/amm/pool-info")
async def amm_pool_info(
    pool_address: PoolAddress,
    network: Network = "base",
    registry: ConnectorRegistry = Depends(get_registry),
) -> PoolInfoResponse:
    """Get constant-product pool reserves and price.

    Error Handling:
        - Malformed address: 400
        - No pool at the address: 404
    """
    connector = await registry.get(network)
    return _pool_info_response(await connector.get_pool_info(pool_address))


@router.get(f"{PREFIX}/clmm/pool-info")
async def clmm_pool_info(
    pool_address: PoolAddress,
    network: Network = "base",
    registry: ConnectorRegistry = Depends(get_registry),
) -> ClmmPoolInfoResponse:
    """Get concentrated-liquidity pool price, tick and liquidity."""
    connector = await registry.get(network)
    return _clmm_pool_info_response(await connector.get_clmm_pool_info(pool_address))


@router.get(f"{PREFIX}/amm/find-default-pool")
async def find_default_pool(
    base_token: Annotated[str, Query(alias="baseToken")],
    quote_token: Annotated[str, Query(alias="quoteToken")],
    network: Network = "base",
    pool_type: Annotated[str, Query(alias="poolType", pattern="^(amm|clmm)$")] = "amm",
    registry: ConnectorRegistry = Depends(get_registry),
) -> FindPoolResponse:
    """Look up the registered default pool for a pair (null if none)."""
    connector = await registry.get(network)
    address = await connector.find_default_pool(base_token, quote_token, pool_type)
    return FindPoolResponse(pool_address=address)


@router.get(f"{PREFIX}/router/quote-swap")
async def quote_swap(
    base_token: Annotated[str, Query(alias="baseToken", description="Token bought or sold")],
    quote_token: Annotated[str, Query(alias="quoteToken", description="Token paid or received")],
    amount: Annotated[float, Query(gt=0, description="Amount of base token")],
    side: Annotated[Side, Query(description="BUY buys base with quote; SELL sells base")],
    network: Network = "base",
    slippage_pct: Annotated[float | None, Query(alias="slippagePct", ge=0, le=100)] = None,
    wallet_address: Annotated[
        str | None, Query(alias="walletAddress", pattern=ADDRESS_PATTERN)
    ] = None,
    registry: ConnectorRegistry = Depends(get_registry),
) -> QuoteSwapResponse:
    """Quote a swap through the Universal Router.

    Error Handling:
        - Unknown token or identical tokens: 400
        - No pool can fill the trade: 404
        - Invalid query parameters: 422 (FastAPI validation)
    """
    connector = await registry.get(network)
    quote = await connector.get_swap_quote(
        base_token,
        quote_token,
        amount,
        side,
        slippage_pct=slippage_pct,
        wallet_address=wallet_address,
    )
    return _quote_response(quote)


@router.get(f"{PREFIX}/clmm/position-ownership")
async def position_ownership(
    position_id: Annotated[str, Query(alias="positionId")],
    wallet_address: WalletAddress,
    network: Network = "base",
    registry: ConnectorRegistry = Depends(get_registry),
) -> PositionCheckResponse:
    """Check that a wallet owns a position (403 if not)."""
    connector = await registry.get(network)
    await connector.check_position_ownership(position_id, wallet_address)
    return PositionCheckResponse(position_id=position_id)


@router.get(f"{PREFIX}/clmm/position-approval")
async def position_approval(
    position_id: Annotated[str, Query(alias="positionId")],
    wallet_address: WalletAddress,
    operator_address: Annotated[str, Query(alias="operatorAddress", pattern=ADDRESS_PATTERN)],
    network: Network = "base",
    registry: ConnectorRegistry = Depends(get_registry),
) -> PositionCheckResponse:
    """Check that an operator may manage a position (403 if not)."""
    connector = await registry.get(network)
    await connector.check_position_approval(position_id, wallet_address, operator_address)
    return PositionCheckResponse(position_id=position_id)


__all__ = ["router", "get_registry"]
