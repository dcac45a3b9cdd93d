"""Tests for create2 pool address derivation."""

import pytest

from aggregator.errors import InvalidTokenError
from aggregator.pools.address import compute_pair_address, compute_pool_address, sort_tokens
from tests.helpers.constants import (
    MAINNET_USDC,
    MAINNET_WETH,
    UNISWAP_V2_FACTORY,
    UNISWAP_V2_INIT_CODE_HASH,
    UNISWAP_V3_FACTORY,
    UNISWAP_V3_INIT_CODE_HASH,
    USDC,
    V2_USDC_WETH_PAIR,
    V3_USDC_WETH_500,
    V3_USDC_WETH_3000,
    WETH,
)


class TestSortTokens:
    """Tests for canonical token ordering."""

    def test_lower_address_first(self):
        """token0 is the numerically lower address."""
        assert sort_tokens(USDC, WETH) == (WETH, USDC)
        assert sort_tokens(WETH, USDC) == (WETH, USDC)

    def test_mixed_case_normalized(self):
        """Checksummed input comes back lowercase."""
        token0, token1 = sort_tokens(MAINNET_WETH, MAINNET_USDC)
        assert token0 == MAINNET_USDC.lower()
        assert token1 == MAINNET_WETH.lower()

    def test_identical_tokens_rejected(self):
        """A token cannot pair with itself, whatever the casing."""
        with pytest.raises(InvalidTokenError):
            sort_tokens(MAINNET_WETH, MAINNET_WETH.lower())

    def test_malformed_address_rejected(self):
        with pytest.raises(InvalidTokenError):
            sort_tokens("0x1234", WETH)


class TestComputePairAddress:
    """Constant-product pair addresses against published deployments."""

    def test_known_pair(self):
        """USDC/WETH pair on the Uniswap V2 factory."""
        address = compute_pair_address(
            UNISWAP_V2_FACTORY, MAINNET_WETH, MAINNET_USDC, UNISWAP_V2_INIT_CODE_HASH
        )
        assert address == V2_USDC_WETH_PAIR

    def test_order_independent(self):
        """Swapping the token arguments gives the same pair."""
        forward = compute_pair_address(UNISWAP_V2_FACTORY, MAINNET_WETH, MAINNET_USDC)
        backward = compute_pair_address(UNISWAP_V2_FACTORY, MAINNET_USDC, MAINNET_WETH)
        assert forward == backward

    def test_checksummed_result(self):
        """Derived addresses are EIP-55 checksummed."""
        address = compute_pair_address(UNISWAP_V2_FACTORY, MAINNET_WETH, MAINNET_USDC)
        assert address != address.lower()
        assert len(address) == 42

    def test_different_factory_different_pair(self):
        a = compute_pair_address(UNISWAP_V2_FACTORY, WETH, USDC)
        b = compute_pair_address(UNISWAP_V3_FACTORY, WETH, USDC)
        assert a != b

    def test_bad_init_code_hash(self):
        with pytest.raises(ValueError, match="32 bytes"):
            compute_pair_address(UNISWAP_V2_FACTORY, WETH, USDC, "0x1234")


class TestComputePoolAddress:
    """Concentrated-liquidity pool addresses against published deployments."""

    def test_known_pool_low_fee(self):
        """USDC/WETH 0.05% pool on the Uniswap V3 factory."""
        address = compute_pool_address(
            UNISWAP_V3_FACTORY, MAINNET_USDC, MAINNET_WETH, 500, UNISWAP_V3_INIT_CODE_HASH
        )
        assert address == V3_USDC_WETH_500

    def test_known_pool_medium_fee(self):
        """USDC/WETH 0.3% pool on the Uniswap V3 factory."""
        address = compute_pool_address(
            UNISWAP_V3_FACTORY, MAINNET_WETH, MAINNET_USDC, 3000, UNISWAP_V3_INIT_CODE_HASH
        )
        assert address == V3_USDC_WETH_3000

    def test_fee_changes_address(self):
        addresses = {
            compute_pool_address(UNISWAP_V3_FACTORY, WETH, USDC, fee)
            for fee in (100, 500, 3000, 10000)
        }
        assert len(addresses) == 4

    def test_fee_must_fit_uint24(self):
        with pytest.raises(ValueError, match="uint24"):
            compute_pool_address(UNISWAP_V3_FACTORY, WETH, USDC, 2**24)

    def test_identical_tokens_rejected(self):
        with pytest.raises(InvalidTokenError):
            compute_pool_address(UNISWAP_V3_FACTORY, WETH, WETH, 500)
