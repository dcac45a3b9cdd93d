"""In-memory chain provider for tests.

Usage:
    from tests.helpers.chain import FakeChainProvider

    provider = FakeChainProvider()
    pair = provider.add_pair(weth, usdc, 10**21, 3 * 10**12)
"""

from typing import Any

from aggregator.amm.concentrated.tick_math import get_sqrt_ratio_at_tick
from aggregator.constants import BASE_CHAIN_ID, CL_FACTORY, POOL_FACTORY
from aggregator.errors import UpstreamProviderError
from aggregator.models.token import Token
from aggregator.pools.address import compute_pair_address, compute_pool_address


class FakeChainProvider:
    """ChainProvider answering contract reads from a response table.

    Responses are keyed by (lowercase address, method). A response may be a
    plain value, an exception to raise, or a callable receiving the call
    arguments. Reads with no response raise UpstreamProviderError, like a
    call to an address with no code.
    """

    def __init__(self, chain_id: int = BASE_CHAIN_ID):
        self._chain_id = chain_id
        self.responses: dict[tuple[str, str], Any] = {}
        self.calls: list[tuple[str, str, tuple[Any, ...]]] = []
        self.gas: int | Exception = 150_000
        self.gas_calls: list[dict[str, Any]] = []
        self.chain_id_calls = 0
        self.closed = False

    def set(self, address: str, method: str, response: Any) -> None:
        self.responses[(address.lower(), method)] = response

    def add_pair(
        self,
        token_a: Token,
        token_b: Token,
        reserve_a: int,
        reserve_b: int,
        factory: str = POOL_FACTORY,
    ) -> str:
        """Register a constant-product pair at its derived address."""
        address = compute_pair_address(factory, token_a.address, token_b.address)
        if token_a.sorts_before(token_b):
            token0, token1, reserves = token_a, token_b, [reserve_a, reserve_b, 0]
        else:
            token0, token1, reserves = token_b, token_a, [reserve_b, reserve_a, 0]
        self.set(address, "getReserves", reserves)
        self.set(address, "token0", token0.address)
        self.set(address, "token1", token1.address)
        return address

    def add_clmm_pool(
        self,
        token_a: Token,
        token_b: Token,
        fee: int,
        liquidity: int,
        tick: int = 0,
        sqrt_price_x96: int | None = None,
        factory: str = CL_FACTORY,
    ) -> str:
        """Register a concentrated-liquidity pool at its derived address."""
        address = compute_pool_address(factory, token_a.address, token_b.address, fee)
        token0, token1 = sorted((token_a.address, token_b.address))
        sqrt_price = sqrt_price_x96 if sqrt_price_x96 is not None else get_sqrt_ratio_at_tick(tick)
        self.set(address, "liquidity", liquidity)
        self.set(address, "slot0", [sqrt_price, tick, 0, 1, 1, True])
        self.set(address, "fee", fee)
        self.set(address, "token0", token0)
        self.set(address, "token1", token1)
        return address

    def calls_to(self, method: str) -> list[tuple[str, str, tuple[Any, ...]]]:
        return [call for call in self.calls if call[1] == method]

    async def chain_id(self) -> int:
        self.chain_id_calls += 1
        return self._chain_id

    async def read_contract(
        self,
        address: str,
        abi: list[dict[str, Any]],
        method: str,
        args: tuple[Any, ...] = (),
    ) -> Any:
        self.calls.append((address.lower(), method, tuple(args)))
        key = (address.lower(), method)
        if key not in self.responses:
            raise UpstreamProviderError(method, address=address, reason="execution reverted")
        response = self.responses[key]
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(*args)
        return response

    async def estimate_gas(self, call_params: dict[str, Any]) -> int:
        self.gas_calls.append(call_params)
        if isinstance(self.gas, Exception):
            raise self.gas
        return self.gas

    async def close(self) -> None:
        self.closed = True


__all__ = ["FakeChainProvider"]
