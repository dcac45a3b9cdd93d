"""Position NFT ownership and approval checks.

Every check reads the position manager directly; results are never cached.
"""

from __future__ import annotations

import asyncio

import structlog

from aggregator.chain.abis import POSITION_MANAGER_ABI
from aggregator.chain.provider import ChainProvider
from aggregator.errors import (
    InvalidPositionError,
    PositionApprovalError,
    PositionOwnershipError,
    UpstreamProviderError,
)
from aggregator.models.types import UINT256_MAX, is_valid_address, same_address

logger = structlog.get_logger()


def parse_position_id(position_id: str | int) -> int:
    """Parse a position id (decimal string or int).

    Raises:
        InvalidPositionError: If the id is not a non-negative integer
    """
    if isinstance(position_id, bool):
        raise InvalidPositionError(str(position_id))
    if isinstance(position_id, int):
        value = position_id
    else:
        text = position_id.strip()
        if not text.isdigit():
            raise InvalidPositionError(position_id)
        value = int(text)
    if value < 0 or value > UINT256_MAX:
        raise InvalidPositionError(str(position_id))
    return value


class PositionAuthorizationChecker:
    """Checks who may manage a concentrated-liquidity position.

    Args:
        provider: Chain provider
        position_manager: Position manager (ERC-721) contract address
    """

    def __init__(self, provider: ChainProvider, position_manager: str):
        self.provider = provider
        self.position_manager = position_manager

    async def check_ownership(self, position_id: str | int, wallet: str) -> None:
        """Verify ``wallet`` owns the position (addresses compared case-insensitively).

        Raises:
            InvalidPositionError: If the id is malformed or the position doesn't exist
            PositionOwnershipError: If another address owns the position
        """
        token_id = parse_position_id(position_id)
        try:
            owner = await self.provider.read_contract(
                self.position_manager, POSITION_MANAGER_ABI, "ownerOf", (token_id,)
            )
        except UpstreamProviderError as e:
            logger.info("position_owner_lookup_failed", position_id=token_id, error=e.message)
            raise InvalidPositionError(str(position_id)) from e

        if not isinstance(owner, str) or not same_address(owner, wallet):
            logger.info("position_not_owned", position_id=token_id, owner=owner, wallet=wallet)
            raise PositionOwnershipError(str(position_id), wallet)

    async def check_approval(self, position_id: str | int, wallet: str, operator: str) -> None:
        """Verify ``operator`` may manage the position held by ``wallet``.

        Passes if the operator is the position's approved address or an
        approved operator for all of the wallet's positions. Both are read
        concurrently.

        Raises:
            InvalidPositionError: If the id is malformed or the position doesn't exist
            PositionApprovalError: If neither approval holds
        """
        token_id = parse_position_id(position_id)
        if not is_valid_address(wallet) or not is_valid_address(operator):
            raise PositionApprovalError(str(position_id), operator)
        try:
            approved, approved_for_all = await asyncio.gather(
                self.provider.read_contract(
                    self.position_manager, POSITION_MANAGER_ABI, "getApproved", (token_id,)
                ),
                self.provider.read_contract(
                    self.position_manager,
                    POSITION_MANAGER_ABI,
                    "isApprovedForAll",
                    (wallet, operator),
                ),
            )
        except UpstreamProviderError as e:
            logger.info("position_approval_lookup_failed", position_id=token_id, error=e.message)
            raise InvalidPositionError(str(position_id)) from e

        is_approved = isinstance(approved, str) and same_address(approved, operator)
        if not (is_approved or approved_for_all is True):
            logger.info(
                "position_not_approved",
                position_id=token_id,
                operator=operator,
                approved=approved,
            )
            raise PositionApprovalError(str(position_id), operator)


__all__ = ["PositionAuthorizationChecker", "parse_position_id"]
