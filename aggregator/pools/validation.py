"""Pool address validation."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from aggregator.errors import UpstreamProviderError
from aggregator.models.types import is_valid_address

if TYPE_CHECKING:
    from aggregator.pools.reader import PoolStateReader

logger = structlog.get_logger()


def is_valid_pool_address(address: str) -> bool:
    """Syntactic check: 42 characters, ``0x`` prefix, hex body.

    This does not prove a pool exists at the address; see ``probe_pool``.
    """
    return is_valid_address(address)


async def probe_pool(reader: PoolStateReader, address: str) -> bool:
    """Check that the address answers a pool ``token0()`` call.

    Args:
        reader: Pool state reader bound to the network
        address: Candidate pool address

    Returns:
        False if the address is malformed or the read fails
    """
    if not is_valid_pool_address(address):
        return False
    try:
        await reader.read_token0(address)
    except UpstreamProviderError as e:
        logger.debug("pool_probe_failed", pool=address, error=e.message)
        return False
    return True


__all__ = ["is_valid_pool_address", "probe_pool"]
