"""Shared type definitions for connector models."""

import re
from typing import Annotated

from pydantic import Field

# Maximum uint256 value
UINT256_MAX = 2**256 - 1

ADDRESS_PATTERN = r"^0x[a-fA-F0-9]{40}$"

# Ethereum address (40 hex chars after 0x prefix)
Address = Annotated[str, Field(pattern=ADDRESS_PATTERN)]


def normalize_address(address: str, *, validate: bool = False) -> str:
    """Normalize an Ethereum address to lowercase.

    Args:
        address: An Ethereum address (with or without 0x prefix)
        validate: If True, raises ValueError for invalid addresses.

    Returns:
        Lowercase address with 0x prefix

    Raises:
        ValueError: If validate=True and address is not a valid Ethereum address
    """
    addr = address.lower()
    if not addr.startswith("0x"):
        addr = "0x" + addr

    if validate and not is_valid_address(addr):
        raise ValueError(f"Invalid address: {address}")

    return addr


def is_valid_address(address: str) -> bool:
    """Check if a string is a valid Ethereum address.

    Args:
        address: String to validate

    Returns:
        True if valid Ethereum address format
    """
    if not isinstance(address, str):
        return False
    return re.fullmatch(ADDRESS_PATTERN, address) is not None


def same_address(a: str, b: str) -> bool:
    """Compare two addresses case-insensitively."""
    return a.lower() == b.lower()


__all__ = [
    "UINT256_MAX",
    "ADDRESS_PATTERN",
    "Address",
    "normalize_address",
    "is_valid_address",
    "same_address",
]
