"""Connector configuration.

Defaults live in frozen dataclasses; ``from_env`` overlays ``AERODROME_*``
environment variables the same way the HTTP layer reads its host and port.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace

from aggregator.constants import (
    BASE_CHAIN_ID,
    CHAIN,
    CL_FACTORY,
    CONNECTOR_NAME,
    DEADLINE_SECONDS,
    DEFAULT_GAS_ESTIMATE,
    GAS_LIMIT_HINT,
    GAS_LIMIT_MARGIN,
    PAIR_INIT_CODE_HASH,
    POOL_FACTORY,
    POOL_INIT_CODE_HASH,
    POSITION_MANAGER,
    ROUTER,
    TICK_WINDOW_SPACINGS,
    TRADING_TYPES,
    UNIVERSAL_ROUTER,
)


@dataclass(frozen=True)
class ConnectorConfig:
    """Tunable parameters of the connector.

    Attributes:
        slippage_pct: Default slippage tolerance, percent (0-100)
        maximum_hops: Maximum route hops (routes are single-hop today)
        enabled_networks: Networks the connector accepts
        amm_fee_bps: Constant-product pool fee in basis points (2 = 0.02%)
        default_gas_estimate: Returned whenever gas estimation fails
        gas_limit_hint: Gas limit hint for estimation calls
        gas_limit_margin: Added on top of the hint when calling the node
        deadline_seconds: Swap deadline offset from quote time
        tick_window_spacings: Synthetic tick window half-width in spacings
        default_wallet: Wallet used as recipient when the caller gives none
        request_timeout: RPC HTTP timeout in seconds
        token_list_path: Optional JSON file extending the built-in token list
        pool_list_path: Optional JSON file of default pools for ``find_default_pool``
    """

    slippage_pct: float = 1.0
    maximum_hops: int = 4
    enabled_networks: tuple[str, ...] = ("base",)
    amm_fee_bps: int = 2
    default_gas_estimate: int = DEFAULT_GAS_ESTIMATE
    gas_limit_hint: int = GAS_LIMIT_HINT
    gas_limit_margin: int = GAS_LIMIT_MARGIN
    deadline_seconds: int = DEADLINE_SECONDS
    tick_window_spacings: int = TICK_WINDOW_SPACINGS
    default_wallet: str | None = None
    request_timeout: float = 30.0
    token_list_path: str | None = None
    pool_list_path: str | None = None

    def __post_init__(self) -> None:
        if not 0 <= self.slippage_pct <= 100:
            raise ValueError(f"slippage_pct must be within [0, 100], got {self.slippage_pct}")
        if not 0 <= self.amm_fee_bps < 10_000:
            raise ValueError(f"amm_fee_bps must be within [0, 10000), got {self.amm_fee_bps}")
        if self.maximum_hops < 1:
            raise ValueError(f"maximum_hops must be positive, got {self.maximum_hops}")

    @property
    def amm_fee_pct(self) -> float:
        """Constant-product fee expressed in percent."""
        return self.amm_fee_bps / 100

    @classmethod
    def from_env(cls) -> ConnectorConfig:
        """Build a config from ``AERODROME_*`` environment variables.

        Recognized variables: AERODROME_SLIPPAGE_PCT, AERODROME_MAXIMUM_HOPS,
        AERODROME_NETWORKS (comma-separated), AERODROME_AMM_FEE_BPS,
        AERODROME_DEFAULT_WALLET, AERODROME_REQUEST_TIMEOUT,
        AERODROME_TOKEN_LIST and AERODROME_POOL_LIST.
        """
        config = cls()
        env = os.environ
        networks = env.get("AERODROME_NETWORKS")
        return replace(
            config,
            slippage_pct=float(env.get("AERODROME_SLIPPAGE_PCT", config.slippage_pct)),
            maximum_hops=int(env.get("AERODROME_MAXIMUM_HOPS", config.maximum_hops)),
            enabled_networks=(
                tuple(n.strip() for n in networks.split(",") if n.strip())
                if networks
                else config.enabled_networks
            ),
            amm_fee_bps=int(env.get("AERODROME_AMM_FEE_BPS", config.amm_fee_bps)),
            default_wallet=env.get("AERODROME_DEFAULT_WALLET") or None,
            request_timeout=float(env.get("AERODROME_REQUEST_TIMEOUT", config.request_timeout)),
            token_list_path=env.get("AERODROME_TOKEN_LIST") or None,
            pool_list_path=env.get("AERODROME_POOL_LIST") or None,
        )


@dataclass(frozen=True)
class NetworkContracts:
    """Contract addresses and init code hashes bound to one network."""

    pool_factory: str = POOL_FACTORY
    cl_factory: str = CL_FACTORY
    position_manager: str = POSITION_MANAGER
    universal_router: str = UNIVERSAL_ROUTER
    router: str = ROUTER
    pair_init_code_hash: str = PAIR_INIT_CODE_HASH
    pool_init_code_hash: str = POOL_INIT_CODE_HASH


@dataclass(frozen=True)
class NetworkConfig:
    """A network the connector can bind to."""

    name: str
    chain_id: int
    rpc_url: str
    contracts: NetworkContracts = field(default_factory=NetworkContracts)


@dataclass(frozen=True)
class ConnectorInfo:
    """Descriptor returned by ``list_connectors``."""

    name: str
    trading_types: tuple[str, ...]
    chain: str
    networks: tuple[str, ...]


# Built-in networks; RPC URL overridable with AERODROME_RPC_URL_<NETWORK>
_BUILTIN_NETWORKS = {
    "base": NetworkConfig(name="base", chain_id=BASE_CHAIN_ID, rpc_url="https://mainnet.base.org"),
}

# Descriptors of the sibling connectors served alongside this one
SIBLING_CONNECTORS = (
    ConnectorInfo("jupiter", ("swap",), "solana", ("mainnet-beta", "devnet")),
    ConnectorInfo("meteora", ("clmm",), "solana", ("mainnet-beta", "devnet")),
    ConnectorInfo("raydium", ("amm", "clmm"), "solana", ("mainnet-beta", "devnet")),
    ConnectorInfo(
        "uniswap",
        ("amm", "clmm", "router"),
        "ethereum",
        ("mainnet", "arbitrum", "optimism", "base", "polygon"),
    ),
    ConnectorInfo("0x", ("router",), "ethereum", ("mainnet", "arbitrum", "base", "polygon")),
)


def get_network_config(name: str) -> NetworkConfig | None:
    """Look up a built-in network, applying any RPC URL override.

    Args:
        name: Network name (e.g. "base")

    Returns:
        The network config, or None if the network is unknown
    """
    network = _BUILTIN_NETWORKS.get(name)
    if network is None:
        return None
    rpc_url = os.environ.get(f"AERODROME_RPC_URL_{name.upper()}")
    if rpc_url:
        network = replace(network, rpc_url=rpc_url)
    return network


def list_connectors(config: ConnectorConfig | None = None) -> list[ConnectorInfo]:
    """List the available connectors and the networks each supports.

    Args:
        config: Connector config supplying the enabled networks

    Returns:
        Sibling connector descriptors followed by this connector's
    """
    config = config or DEFAULT_CONNECTOR_CONFIG
    own = ConnectorInfo(
        name=CONNECTOR_NAME,
        trading_types=TRADING_TYPES,
        chain=CHAIN,
        networks=tuple(n for n in config.enabled_networks if n in _BUILTIN_NETWORKS),
    )
    return [*SIBLING_CONNECTORS, own]


# Default configuration instance
DEFAULT_CONNECTOR_CONFIG = ConnectorConfig()

__all__ = [
    "ConnectorConfig",
    "NetworkContracts",
    "NetworkConfig",
    "ConnectorInfo",
    "SIBLING_CONNECTORS",
    "DEFAULT_CONNECTOR_CONFIG",
    "get_network_config",
    "list_connectors",
]
