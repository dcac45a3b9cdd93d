"""Test helpers module for shared test utilities.

This module consolidates common test utilities to reduce duplication:
- constants: Token addresses, wallets and known pool address vectors
- factories: Token, pool, connector and registry factory functions
- chain: In-memory chain provider
"""

from tests.helpers.chain import FakeChainProvider
from tests.helpers.constants import (
    AERO,
    DAI,
    OPERATOR,
    OTHER_WALLET,
    TOKEN_DECIMALS,
    UNKNOWN_TOKEN,
    USDC,
    WALLET,
    WETH,
)
from tests.helpers.factories import (
    TEST_NETWORK,
    make_amm_pool,
    make_clmm_pool,
    make_connector,
    make_registry,
    make_token,
)

__all__ = [
    # Constants
    "WETH",
    "USDC",
    "AERO",
    "DAI",
    "UNKNOWN_TOKEN",
    "TOKEN_DECIMALS",
    "WALLET",
    "OTHER_WALLET",
    "OPERATOR",
    # Factories
    "TEST_NETWORK",
    "make_token",
    "make_amm_pool",
    "make_clmm_pool",
    "make_connector",
    "make_registry",
    # Chain
    "FakeChainProvider",
]
