"""Gas estimation for router swaps.

Estimation never fails the quote: whatever goes wrong, the caller gets the
default estimate back.
"""

from __future__ import annotations

import structlog

from aggregator.chain.provider import ChainProvider
from aggregator.constants import (
    DEFAULT_GAS_ESTIMATE,
    GAS_LIMIT_HINT,
    GAS_LIMIT_MARGIN,
    PERMIT2_ALLOWANCE_EXPIRED_SELECTOR,
)
from aggregator.errors import AggregatorError, UpstreamProviderError

logger = structlog.get_logger()


def is_permit2_allowance_error(error: UpstreamProviderError) -> bool:
    """Whether the revert is Permit2's AllowanceExpired.

    This is the expected revert when the wallet has not yet approved the
    router through Permit2.
    """
    data = error.revert_data or ""
    return data.lower().startswith(PERMIT2_ALLOWANCE_EXPIRED_SELECTOR)


class GasEstimator:
    """Estimates gas for a Universal Router transaction.

    Args:
        provider: Chain provider used for ``eth_estimateGas``
        default_estimate: Value returned whenever estimation fails
        margin: Added to the gas limit hint sent with the estimate
    """

    def __init__(
        self,
        provider: ChainProvider,
        default_estimate: int = DEFAULT_GAS_ESTIMATE,
        margin: int = GAS_LIMIT_MARGIN,
    ):
        self.provider = provider
        self.default_estimate = default_estimate
        self.margin = margin

    async def estimate(
        self,
        calldata: str,
        value: str,
        sender: str | None,
        to: str,
        gas_limit_hint: int = GAS_LIMIT_HINT,
    ) -> int:
        """Estimate gas for a transaction.

        Args:
            calldata: Hex-encoded transaction data
            value: Hex-encoded native value
            sender: Transaction sender; without one nothing is estimated
            to: Target contract
            gas_limit_hint: Gas limit hint (the margin is added on top)

        Returns:
            The node's estimate, or the default estimate on any failure
        """
        if not sender:
            logger.debug("gas_estimate_skipped", reason="no sender", to=to)
            return self.default_estimate

        call_params = {
            "from": sender,
            "to": to,
            "data": calldata,
            "value": int(value, 16),
            "gas": gas_limit_hint + self.margin,
        }
        try:
            estimate = await self.provider.estimate_gas(call_params)
        except UpstreamProviderError as e:
            if is_permit2_allowance_error(e):
                logger.info(
                    "gas_estimate_permit2_allowance_expired",
                    sender=sender,
                    to=to,
                    default=self.default_estimate,
                )
            else:
                logger.error(
                    "gas_estimate_failed",
                    sender=sender,
                    to=to,
                    error=e.message,
                    default=self.default_estimate,
                )
            return self.default_estimate
        except (AggregatorError, ValueError) as e:
            logger.error("gas_estimate_failed", sender=sender, to=to, error=str(e))
            return self.default_estimate

        logger.debug("gas_estimated", sender=sender, to=to, gas=estimate)
        return estimate


__all__ = ["GasEstimator", "is_permit2_allowance_error"]
