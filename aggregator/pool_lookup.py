"""Pool registry collaborator used by ``find_default_pool``."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Protocol

import structlog
from pydantic import BaseModel, Field

from aggregator.constants import CONNECTOR_NAME
from aggregator.models.types import Address, normalize_address

logger = structlog.get_logger()


class PoolLookup(Protocol):
    """Protocol for the external pool registry.

    Maps a (connector, network, pool type, base symbol, quote symbol) tuple to
    a configured default pool address.
    """

    async def get_pool(
        self,
        connector: str,
        network: str,
        pool_type: str,
        base_symbol: str,
        quote_symbol: str,
    ) -> str | None:
        """Return the registered pool address, or None if there is none."""
        ...


class PoolListEntry(BaseModel):
    """One entry of a JSON pool list file."""

    model_config = {"populate_by_name": True}

    connector: str = CONNECTOR_NAME
    network: str
    pool_type: str = Field(alias="type", pattern="^(amm|clmm)$")
    base_symbol: str = Field(alias="baseSymbol")
    quote_symbol: str = Field(alias="quoteSymbol")
    address: Address


class PoolListFile(BaseModel):
    """JSON pool list file (``{"pools": [...]}``)."""

    pools: list[PoolListEntry]


class StaticPoolLookup:
    """In-memory pool registry.

    Pairs are stored order-sensitively, as the registry they model is keyed by
    base then quote symbol; symbols are matched case-insensitively.
    """

    def __init__(self, pools: dict[tuple[str, str, str, str, str], str] | None = None):
        self._pools: dict[tuple[str, str, str, str, str], str] = {}
        for key, address in (pools or {}).items():
            self.register(*key, address=address)

    def register(
        self,
        connector: str,
        network: str,
        pool_type: str,
        base_symbol: str,
        quote_symbol: str,
        *,
        address: str,
    ) -> None:
        key = (connector, network, pool_type, base_symbol.upper(), quote_symbol.upper())
        self._pools[key] = normalize_address(address, validate=True)

    async def get_pool(
        self,
        connector: str,
        network: str,
        pool_type: str,
        base_symbol: str,
        quote_symbol: str,
    ) -> str | None:
        key = (connector, network, pool_type, base_symbol.upper(), quote_symbol.upper())
        return self._pools.get(key)

    def __len__(self) -> int:
        return len(self._pools)

    @classmethod
    def load(cls, path: str | Path | None = None) -> StaticPoolLookup:
        """Build a lookup from a JSON pool list file.

        Args:
            path: Pool list file; an empty lookup is returned when None

        Returns:
            Lookup holding every pool in the file

        Raises:
            pydantic.ValidationError: If the file does not match ``PoolListFile``
        """
        lookup = cls()
        if path is None:
            return lookup
        with open(path) as f:
            data = PoolListFile.model_validate(json.load(f))
        for entry in data.pools:
            lookup.register(
                entry.connector,
                entry.network,
                entry.pool_type,
                entry.base_symbol,
                entry.quote_symbol,
                address=entry.address,
            )
        logger.info("pool_list_loaded", path=str(path), pools=len(lookup))
        return lookup


__all__ = ["PoolLookup", "PoolListEntry", "PoolListFile", "StaticPoolLookup"]
