"""Connector data models."""

from aggregator.models.token import (
    ByAddress,
    BySymbol,
    Resolved,
    Token,
    TokenRef,
    token_ref,
)
from aggregator.models.types import is_valid_address, normalize_address

__all__ = [
    "ByAddress",
    "BySymbol",
    "Resolved",
    "Token",
    "TokenRef",
    "token_ref",
    "is_valid_address",
    "normalize_address",
]
