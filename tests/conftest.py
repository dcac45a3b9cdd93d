"""Pytest configuration and fixtures."""

import pytest

from aggregator.models.token import Token
from tests.helpers import AERO, USDC, WETH, FakeChainProvider, make_token


@pytest.fixture
def weth() -> Token:
    return make_token(WETH)


@pytest.fixture
def usdc() -> Token:
    return make_token(USDC)


@pytest.fixture
def aero() -> Token:
    return make_token(AERO)


@pytest.fixture
def provider() -> FakeChainProvider:
    """A chain provider with no pools registered."""
    return FakeChainProvider()
