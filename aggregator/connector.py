"""Network-bound connector.

A ``Connector`` owns the chain provider and every component for one network
and exposes the boundary operations: swap quotes, pool info, default pool
lookup and position authorization checks.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from fractions import Fraction

import structlog

from aggregator.chain.provider import ChainProvider
from aggregator.config import ConnectorConfig, NetworkConfig
from aggregator.constants import CONNECTOR_NAME, MSG_SENDER
from aggregator.errors import (
    AggregatorError,
    ConnectorNotReadyError,
    InvalidPoolAddressError,
    InvalidTokenError,
    PoolNotFoundError,
    UpstreamProviderError,
)
from aggregator.gas import GasEstimator
from aggregator.models.token import Token, TokenRef, token_ref
from aggregator.models.types import is_valid_address, normalize_address
from aggregator.pool_lookup import PoolLookup
from aggregator.pools.reader import PoolStateReader
from aggregator.pools.validation import is_valid_pool_address, probe_pool
from aggregator.positions import PositionAuthorizationChecker
from aggregator.routing.discovery import RouteDiscoveryEngine
from aggregator.routing.quote import QuoteBuilder, SwapQuote
from aggregator.routing.types import Side, TradeRequest
from aggregator.tokens import TokenList

logger = structlog.get_logger()


class ConnectorState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    CLOSED = "closed"


@dataclass
class PoolInfo:
    """Constant-product pool summary in human units.

    Base is the pool's token0 and quote its token1; ``price`` is quote per base.
    """

    address: str
    base_token_address: str
    quote_token_address: str
    fee_pct: float
    price: float
    base_token_amount: float
    quote_token_amount: float


@dataclass
class ClmmPoolInfo:
    """Concentrated-liquidity pool summary; ``price`` is token1 per token0."""

    address: str
    base_token_address: str
    quote_token_address: str
    fee_pct: float
    price: float
    sqrt_price_x96: int
    tick: int
    liquidity: int


class Connector:
    """Aerodrome connector bound to one network.

    Created ``uninitialized``; ``init`` wires the components and moves it to
    ``ready``; ``close`` moves it to ``closed`` and releases the provider.
    Closed connectors are never reused.
    """

    tokens: TokenList

    def __init__(
        self,
        network: NetworkConfig,
        provider: ChainProvider,
        config: ConnectorConfig,
        tokens: TokenList | None = None,
        pool_lookup: PoolLookup | None = None,
        on_close: Callable[[Connector], None] | None = None,
    ) -> None:
        self.network = network
        self.provider = provider
        self.config = config
        self._configured_tokens = tokens
        self.pool_lookup = pool_lookup
        self._on_close = on_close
        self.state = ConnectorState.UNINITIALIZED

    @property
    def ready(self) -> bool:
        return self.state is ConnectorState.READY

    async def init(self) -> None:
        """Build the per-network components.

        Raises:
            UpstreamProviderError: If the node cannot be reached
        """
        if self.state is not ConnectorState.UNINITIALIZED:
            raise ConnectorNotReadyError(
                f"Cannot initialize connector in state {self.state.value}",
                network=self.network.name,
            )
        self.state = ConnectorState.INITIALIZING
        try:
            chain_id = await self.provider.chain_id()
        except UpstreamProviderError:
            self.state = ConnectorState.UNINITIALIZED
            raise
        if chain_id != self.network.chain_id:
            logger.warning(
                "chain_id_mismatch",
                network=self.network.name,
                expected=self.network.chain_id,
                actual=chain_id,
            )

        contracts = self.network.contracts
        if self._configured_tokens is not None:
            self.tokens = self._configured_tokens
        else:
            self.tokens = TokenList.load(self.network.chain_id, self.config.token_list_path)
        self.reader = PoolStateReader(self.provider)
        self.discovery = RouteDiscoveryEngine.for_network(self.reader, contracts, self.config)
        self.quote_builder = QuoteBuilder(contracts.universal_router, self.config.deadline_seconds)
        self.gas_estimator = GasEstimator(
            self.provider,
            default_estimate=self.config.default_gas_estimate,
            margin=self.config.gas_limit_margin,
        )
        self.positions = PositionAuthorizationChecker(self.provider, contracts.position_manager)
        self.state = ConnectorState.READY
        logger.info("connector_ready", connector=CONNECTOR_NAME, network=self.network.name)

    async def close(self) -> None:
        """Close the connector and drop it from its registry."""
        if self.state is ConnectorState.CLOSED:
            return
        self.state = ConnectorState.CLOSED
        try:
            await self.provider.close()
        finally:
            if self._on_close is not None:
                self._on_close(self)
            logger.info("connector_closed", connector=CONNECTOR_NAME, network=self.network.name)

    def _require_ready(self) -> None:
        if not self.ready:
            raise ConnectorNotReadyError(
                f"Connector for {self.network.name} is {self.state.value}",
                network=self.network.name,
            )

    def resolve_token(self, token: str | Token | TokenRef) -> Token:
        """Resolve a symbol, address or reference against the token list.

        Raises:
            InvalidTokenError: If the token is unknown or malformed
        """
        self._require_ready()
        return self.tokens.resolve(token_ref(token))

    async def get_swap_quote(
        self,
        base_token: str | Token | TokenRef,
        quote_token: str | Token | TokenRef,
        amount: float | Decimal | str,
        side: Side | str,
        slippage_pct: float | None = None,
        wallet_address: str | None = None,
    ) -> SwapQuote:
        """Quote a swap of ``amount`` base tokens.

        SELL sells exactly ``amount`` base for quote (exact input); BUY buys
        exactly ``amount`` base with quote (exact output).

        Args:
            base_token: Base token symbol, address or reference
            quote_token: Quote token symbol, address or reference
            amount: Base token amount in human units
            side: BUY or SELL
            slippage_pct: Slippage tolerance in percent; configured default if None
            wallet_address: Recipient and gas-estimation sender

        Returns:
            The quote, including a gas estimate

        Raises:
            InvalidTokenError: If a token is unknown, malformed, or both are the same
            NoRouteFoundError: If no pool family can fill the trade
            ValueError: If amount, slippage or wallet address is invalid
        """
        self._require_ready()
        side = Side(side)
        base = self.resolve_token(base_token)
        quote = self.resolve_token(quote_token)
        if base == quote:
            raise InvalidTokenError(base.label, "base and quote tokens must differ")

        slippage = self.config.slippage_pct if slippage_pct is None else slippage_pct
        if not 0 <= slippage <= 100:
            raise ValueError(f"Slippage must be within [0, 100], got {slippage}")

        wallet = wallet_address or self.config.default_wallet
        if wallet is not None and not is_valid_address(wallet):
            raise ValueError(f"Invalid wallet address: {wallet}")

        raw_amount = base.to_raw(amount)
        if raw_amount <= 0:
            raise ValueError(f"Amount must be positive in {base.label} units: {amount}")

        if side is Side.SELL:
            token_in, token_out = base, quote
        else:
            token_in, token_out = quote, base
        request = TradeRequest(
            token_in=token_in,
            token_out=token_out,
            amount=raw_amount,
            trade_type=side.trade_type,
        )
        logger.info(
            "quote_requested",
            network=self.network.name,
            base=base.label,
            quote=quote.label,
            side=side.value,
            amount=str(amount),
            slippage_pct=slippage,
        )

        trade = await self.discovery.find_trade(request)
        swap_quote = self.quote_builder.build(trade, slippage, wallet or MSG_SENDER)
        swap_quote.gas_estimate = await self.gas_estimator.estimate(
            swap_quote.calldata,
            swap_quote.value,
            wallet,
            swap_quote.to,
            self.config.gas_limit_hint,
        )
        return swap_quote

    async def _pool_tokens(self, pool_address: str) -> tuple[Token, Token]:
        if not is_valid_pool_address(pool_address):
            raise InvalidPoolAddressError(pool_address)
        if not await probe_pool(self.reader, pool_address):
            raise PoolNotFoundError(pool_address)
        try:
            token0_address, token1_address = await self.reader.read_pool_tokens(pool_address)
        except UpstreamProviderError as e:
            raise PoolNotFoundError(pool_address) from e

        token0 = self.tokens.by_address(token0_address)
        token1 = self.tokens.by_address(token1_address)
        if token0 is None:
            raise InvalidTokenError(token0_address, "pool token not in token list")
        if token1 is None:
            raise InvalidTokenError(token1_address, "pool token not in token list")
        return token0, token1

    async def get_pool_info(self, pool_address: str) -> PoolInfo:
        """Read a constant-product pool's reserves and price.

        Raises:
            InvalidPoolAddressError: If the address is malformed
            PoolNotFoundError: If no pair answers at the address
            InvalidTokenError: If a pool token is not in the token list
        """
        self._require_ready()
        token0, token1 = await self._pool_tokens(pool_address)
        try:
            pool = await self.reader.read_amm_pool(
                pool_address, token0, token1, self.config.amm_fee_bps
            )
        except UpstreamProviderError as e:
            raise PoolNotFoundError(pool_address) from e

        base_amount = token0.from_raw(pool.reserve0)
        quote_amount = token1.from_raw(pool.reserve1)
        price = quote_amount / base_amount if base_amount else Decimal(0)
        return PoolInfo(
            address=pool_address,
            base_token_address=token0.address,
            quote_token_address=token1.address,
            fee_pct=self.config.amm_fee_pct,
            price=float(price),
            base_token_amount=float(base_amount),
            quote_token_amount=float(quote_amount),
        )

    async def get_clmm_pool_info(self, pool_address: str) -> ClmmPoolInfo:
        """Read a concentrated-liquidity pool's price, tick and liquidity.

        Raises:
            InvalidPoolAddressError: If the address is malformed
            PoolNotFoundError: If no pool answers at the address
            InvalidTokenError: If a pool token is not in the token list
        """
        self._require_ready()
        token0, token1 = await self._pool_tokens(pool_address)
        try:
            state = await self.reader.read_clmm_state(pool_address)
        except UpstreamProviderError as e:
            raise PoolNotFoundError(pool_address) from e

        raw_price = Fraction(state.sqrt_price_x96**2, 2**192)
        price = raw_price * Fraction(10) ** (token0.decimals - token1.decimals)
        return ClmmPoolInfo(
            address=pool_address,
            base_token_address=token0.address,
            quote_token_address=token1.address,
            fee_pct=state.fee / 10_000,
            price=float(price),
            sqrt_price_x96=state.sqrt_price_x96,
            tick=state.tick,
            liquidity=state.liquidity,
        )

    async def check_position_ownership(self, position_id: str | int, wallet: str) -> None:
        """Raise unless ``wallet`` owns the position.

        Raises:
            InvalidPositionError: If the position id is malformed or unknown
            PositionOwnershipError: If the wallet is not the owner
        """
        self._require_ready()
        await self.positions.check_ownership(position_id, wallet)

    async def check_position_approval(
        self, position_id: str | int, wallet: str, operator: str
    ) -> None:
        """Raise unless ``operator`` is approved to manage the position.

        Raises:
            InvalidPositionError: If the position id is malformed or unknown
            PositionApprovalError: If the operator is not approved
        """
        self._require_ready()
        await self.positions.check_approval(position_id, wallet, operator)

    async def find_default_pool(
        self,
        base_token: str | Token | TokenRef,
        quote_token: str | Token | TokenRef,
        pool_type: str = "amm",
    ) -> str | None:
        """Look up the registered default pool for a pair.

        Returns:
            The pool address, or None when there is none or the lookup fails
        """
        self._require_ready()
        if self.pool_lookup is None:
            logger.debug("pool_lookup_not_configured", network=self.network.name)
            return None
        try:
            base = self.resolve_token(base_token)
            quote = self.resolve_token(quote_token)
            address = await self.pool_lookup.get_pool(
                CONNECTOR_NAME, self.network.name, pool_type, base.symbol, quote.symbol
            )
        except (AggregatorError, ValueError) as e:
            logger.error(
                "find_default_pool_failed",
                network=self.network.name,
                pool_type=pool_type,
                error=str(e),
            )
            return None
        return normalize_address(address) if address else None


__all__ = [
    "ConnectorState",
    "PoolInfo",
    "ClmmPoolInfo",
    "Connector",
]
