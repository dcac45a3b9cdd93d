"""Connector lifecycle: one cached, initialized connector per network.

The registry is an explicit object rather than process-global state so tests
and embedding applications can hold their own. Concurrent first requests for
the same network are serialized by a per-network lock and initialize once.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable

import structlog

from aggregator.chain.provider import ChainProvider, Web3ChainProvider
from aggregator.config import ConnectorConfig, NetworkConfig, get_network_config
from aggregator.connector import Connector, ConnectorState
from aggregator.errors import UnsupportedNetworkError
from aggregator.pool_lookup import PoolLookup, StaticPoolLookup

logger = structlog.get_logger()

ProviderFactory = Callable[[NetworkConfig, ConnectorConfig], ChainProvider]
NetworkResolver = Callable[[str], NetworkConfig | None]


def web3_provider_factory(network: NetworkConfig, config: ConnectorConfig) -> ChainProvider:
    return Web3ChainProvider(network.rpc_url, request_timeout=config.request_timeout)


class ConnectorRegistry:
    """Creates, caches and closes per-network connectors.

    Args:
        config: Connector configuration shared by every network
        provider_factory: Builds the chain provider for a network
        pool_lookup: Pool registry used by ``find_default_pool``
        network_resolver: Maps a network name to its config
    """

    def __init__(
        self,
        config: ConnectorConfig | None = None,
        provider_factory: ProviderFactory = web3_provider_factory,
        pool_lookup: PoolLookup | None = None,
        network_resolver: NetworkResolver = get_network_config,
    ) -> None:
        self.config = config or ConnectorConfig()
        self.provider_factory = provider_factory
        self.pool_lookup = pool_lookup
        self.network_resolver = network_resolver
        self._connectors: dict[str, Connector] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def _resolve_network(self, network: str) -> NetworkConfig:
        if network not in self.config.enabled_networks:
            raise UnsupportedNetworkError(network)
        network_config = self.network_resolver(network)
        if network_config is None:
            raise UnsupportedNetworkError(network)
        return network_config

    def cached(self, network: str) -> Connector | None:
        """Return the cached ready connector for a network, if any."""
        connector = self._connectors.get(network)
        return connector if connector is not None and connector.ready else None

    def state(self, network: str) -> ConnectorState:
        connector = self._connectors.get(network)
        return connector.state if connector is not None else ConnectorState.UNINITIALIZED

    @property
    def networks(self) -> list[str]:
        """Networks with a live connector."""
        return sorted(self._connectors)

    async def get(self, network: str) -> Connector:
        """Return the ready connector for a network, creating it on first use.

        Raises:
            UnsupportedNetworkError: If the network is unknown or not enabled
            UpstreamProviderError: If the connector cannot reach its node
        """
        network_config = self._resolve_network(network)
        connector = self.cached(network)
        if connector is not None:
            return connector

        lock = self._locks.setdefault(network, asyncio.Lock())
        async with lock:
            connector = self.cached(network)
            if connector is not None:
                return connector

            logger.info("connector_initializing", network=network)
            connector = Connector(
                network_config,
                self.provider_factory(network_config, self.config),
                self.config,
                pool_lookup=self.pool_lookup,
                on_close=self._forget,
            )
            self._connectors[network] = connector
            try:
                await connector.init()
            except Exception:
                self._connectors.pop(network, None)
                await connector.provider.close()
                raise
            return connector

    def _forget(self, connector: Connector) -> None:
        name = connector.network.name
        if self._connectors.get(name) is connector:
            del self._connectors[name]

    async def close(self, network: str) -> None:
        """Close and evict a network's connector; the next ``get`` builds a new one."""
        connector = self._connectors.get(network)
        if connector is not None:
            await connector.close()

    async def close_all(self) -> None:
        for network in list(self._connectors):
            await self.close(network)


_default_registry: ConnectorRegistry | None = None


def get_default_registry() -> ConnectorRegistry:
    """Process-wide registry configured from the environment.

    Default pools come from the AERODROME_POOL_LIST file, if set.
    """
    global _default_registry
    if _default_registry is None:
        config = ConnectorConfig.from_env()
        _default_registry = ConnectorRegistry(
            config, pool_lookup=StaticPoolLookup.load(config.pool_list_path)
        )
    return _default_registry


async def close_default_registry() -> None:
    """Close every connector of the process-wide registry, if one was created."""
    if _default_registry is not None:
        await _default_registry.close_all()


__all__ = [
    "ConnectorRegistry",
    "ConnectorState",
    "ProviderFactory",
    "web3_provider_factory",
    "get_default_registry",
    "close_default_registry",
]
