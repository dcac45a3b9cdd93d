"""Tests for router gas estimation."""

import pytest
from structlog.testing import capture_logs

from aggregator.constants import UNIVERSAL_ROUTER
from aggregator.errors import UpstreamProviderError
from aggregator.gas import GasEstimator, is_permit2_allowance_error
from tests.helpers import WALLET

CALLDATA = "0x3593564c" + "00" * 96
PERMIT2_REVERT = "0xd81b2f2e" + "00" * 31 + "01"


class TestPermit2Detection:
    """Tests for recognising Permit2 AllowanceExpired reverts."""

    def test_allowance_expired(self):
        error = UpstreamProviderError("eth_estimateGas", revert_data=PERMIT2_REVERT)
        assert is_permit2_allowance_error(error)

    def test_uppercase_selector(self):
        error = UpstreamProviderError("eth_estimateGas", revert_data=PERMIT2_REVERT.upper())
        assert is_permit2_allowance_error(error)

    def test_other_revert(self):
        error = UpstreamProviderError("eth_estimateGas", revert_data="0x08c379a0")
        assert not is_permit2_allowance_error(error)

    def test_no_revert_data(self):
        assert not is_permit2_allowance_error(UpstreamProviderError("eth_estimateGas"))


class TestGasEstimator:
    """Tests for GasEstimator.estimate."""

    @pytest.mark.asyncio
    async def test_returns_node_estimate(self, provider):
        provider.gas = 180_000
        estimator = GasEstimator(provider)

        gas = await estimator.estimate(CALLDATA, "0x00", WALLET, UNIVERSAL_ROUTER)

        assert gas == 180_000

    @pytest.mark.asyncio
    async def test_call_params(self, provider):
        """Limit hint plus margin is sent as the gas cap; hex value becomes an int."""
        estimator = GasEstimator(provider, margin=100_000)

        await estimator.estimate(CALLDATA, "0x0a", WALLET, UNIVERSAL_ROUTER, 500_000)

        assert provider.gas_calls == [
            {
                "from": WALLET,
                "to": UNIVERSAL_ROUTER,
                "data": CALLDATA,
                "value": 10,
                "gas": 600_000,
            }
        ]

    @pytest.mark.asyncio
    async def test_permit2_revert_returns_default(self, provider):
        """Missing Permit2 approval is expected: default estimate, logged at info."""
        provider.gas = UpstreamProviderError("eth_estimateGas", revert_data=PERMIT2_REVERT)
        estimator = GasEstimator(provider, default_estimate=500_000)

        with capture_logs() as logs:
            gas = await estimator.estimate(CALLDATA, "0x00", WALLET, UNIVERSAL_ROUTER)

        assert gas == 500_000
        events = [(log["event"], log["log_level"]) for log in logs]
        assert ("gas_estimate_permit2_allowance_expired", "info") in events

    @pytest.mark.asyncio
    async def test_other_failure_returns_default(self, provider):
        provider.gas = UpstreamProviderError("eth_estimateGas", reason="out of gas")
        estimator = GasEstimator(provider, default_estimate=321_000)

        with capture_logs() as logs:
            gas = await estimator.estimate(CALLDATA, "0x00", WALLET, UNIVERSAL_ROUTER)

        assert gas == 321_000
        assert [log["log_level"] for log in logs if log["event"] == "gas_estimate_failed"] == [
            "error"
        ]

    @pytest.mark.asyncio
    async def test_no_sender(self, provider):
        """Without a sender nothing is sent to the node."""
        estimator = GasEstimator(provider, default_estimate=500_000)

        gas = await estimator.estimate(CALLDATA, "0x00", None, UNIVERSAL_ROUTER)

        assert gas == 500_000
        assert provider.gas_calls == []
