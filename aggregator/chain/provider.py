"""Chain provider protocol and its web3 implementation.

Components only talk to the chain through ``ChainProvider``; tests swap in an
in-memory provider, production uses ``Web3ChainProvider``.
"""

from __future__ import annotations

from typing import Any, Protocol

import structlog
from aiohttp import ClientTimeout
from web3 import AsyncWeb3

from aggregator.chain.abis import ABI
from aggregator.errors import UpstreamProviderError
from aggregator.models.types import is_valid_address

logger = structlog.get_logger()


class ChainProvider(Protocol):
    """Protocol for read-only chain access plus gas estimation."""

    async def chain_id(self) -> int:
        """Return the chain id of the connected node."""
        ...

    async def read_contract(
        self,
        address: str,
        abi: ABI,
        method: str,
        args: tuple[Any, ...] = (),
    ) -> Any:
        """Call a view method.

        Raises:
            UpstreamProviderError: If the call fails or reverts
        """
        ...

    async def estimate_gas(self, call_params: dict[str, Any]) -> int:
        """Estimate gas for a transaction.

        Raises:
            UpstreamProviderError: If the node rejects the estimate
        """
        ...

    async def close(self) -> None:
        """Release network resources."""
        ...


def extract_revert_data(exc: BaseException) -> str | None:
    """Pull the hex revert payload out of a web3/JSON-RPC error.

    web3 exposes it as ``exc.data`` on contract errors; raw JSON-RPC errors
    carry it in ``exc.args[0]["data"]`` (sometimes nested one level deeper).

    Args:
        exc: The exception raised by the node call

    Returns:
        The ``0x``-prefixed revert data, or None if none was returned
    """
    data = getattr(exc, "data", None)
    if data is None and exc.args and isinstance(exc.args[0], dict):
        data = exc.args[0].get("data")
    if isinstance(data, dict):
        data = data.get("data")
    if isinstance(data, bytes):
        data = "0x" + data.hex()
    if isinstance(data, str) and data.startswith("0x"):
        return data
    return None


def _checksum_if_address(value: Any) -> Any:
    if isinstance(value, str) and is_valid_address(value):
        return AsyncWeb3.to_checksum_address(value)
    return value


class Web3ChainProvider:
    """``ChainProvider`` backed by web3's ``AsyncWeb3`` over HTTP."""

    def __init__(self, rpc_url: str, request_timeout: float = 30.0):
        """Initialize provider.

        Args:
            rpc_url: HTTP RPC URL
            request_timeout: Per-request timeout in seconds
        """
        self.rpc_url = rpc_url
        self.w3 = AsyncWeb3(
            AsyncWeb3.AsyncHTTPProvider(
                rpc_url, request_kwargs={"timeout": ClientTimeout(total=request_timeout)}
            )
        )

    async def chain_id(self) -> int:
        try:
            return int(await self.w3.eth.chain_id)
        except Exception as e:
            raise UpstreamProviderError("eth_chainId", reason=str(e)) from e

    async def read_contract(
        self,
        address: str,
        abi: ABI,
        method: str,
        args: tuple[Any, ...] = (),
    ) -> Any:
        try:
            contract = self.w3.eth.contract(
                address=AsyncWeb3.to_checksum_address(address), abi=abi
            )
            call_args = tuple(_checksum_if_address(arg) for arg in args)
            return await getattr(contract.functions, method)(*call_args).call()
        except Exception as e:
            logger.debug("contract_read_failed", address=address, method=method, error=str(e))
            raise UpstreamProviderError(
                method,
                address=address,
                reason=str(e),
                revert_data=extract_revert_data(e),
            ) from e

    async def estimate_gas(self, call_params: dict[str, Any]) -> int:
        tx = dict(call_params)
        for key in ("from", "to"):
            if key in tx:
                tx[key] = AsyncWeb3.to_checksum_address(tx[key])
        try:
            return int(await self.w3.eth.estimate_gas(tx))  # type: ignore[arg-type]
        except Exception as e:
            raise UpstreamProviderError(
                "eth_estimateGas",
                address=call_params.get("to"),
                reason=str(e),
                revert_data=extract_revert_data(e),
            ) from e

    async def close(self) -> None:
        disconnect = getattr(self.w3.provider, "disconnect", None)
        if disconnect is not None:
            await disconnect()


__all__ = ["ChainProvider", "Web3ChainProvider", "extract_revert_data"]
