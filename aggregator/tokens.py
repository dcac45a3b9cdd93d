"""Token list used to resolve symbols and addresses into ``Token`` objects."""

from __future__ import annotations

import json
from pathlib import Path

import structlog
from pydantic import BaseModel, Field

from aggregator.constants import BASE_CHAIN_ID
from aggregator.errors import InvalidTokenError
from aggregator.models.token import ByAddress, BySymbol, Resolved, Token, TokenRef
from aggregator.models.types import Address, is_valid_address, normalize_address

logger = structlog.get_logger()

# Tokens known on Base without any external list
BASE_TOKENS = (
    Token(BASE_CHAIN_ID, "0x4200000000000000000000000000000000000006", 18, "WETH", "Wrapped Ether"),
    Token(BASE_CHAIN_ID, "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913", 6, "USDC", "USD Coin"),
    Token(BASE_CHAIN_ID, "0x940181a94A35A4569E4529A3CDfB74e38FD98631", 18, "AERO", "Aerodrome"),
    Token(BASE_CHAIN_ID, "0x50c5725949A6F0c72E6C4a641F24049A917DB0Cb", 18, "DAI", "Dai Stablecoin"),
)


class TokenListEntry(BaseModel):
    """One entry of a JSON token list file."""

    model_config = {"populate_by_name": True}

    chain_id: int = Field(alias="chainId")
    address: Address
    decimals: int = Field(ge=0, le=255)
    symbol: str
    name: str = ""


class TokenListFile(BaseModel):
    """JSON token list file (``{"tokens": [...]}``)."""

    tokens: list[TokenListEntry]


class TokenList:
    """Symbol and address index over the tokens of one chain.

    Symbol lookups are case-insensitive. When two tokens share a symbol the
    first one registered wins.
    """

    def __init__(self, chain_id: int, tokens: list[Token] | tuple[Token, ...] = ()):
        self.chain_id = chain_id
        self._by_address: dict[str, Token] = {}
        self._by_symbol: dict[str, Token] = {}
        for token in tokens:
            self.add(token)

    def __len__(self) -> int:
        return len(self._by_address)

    def add(self, token: Token) -> None:
        """Register a token; tokens from other chains are ignored."""
        if token.chain_id != self.chain_id:
            return
        self._by_address.setdefault(token.address, token)
        if token.symbol:
            self._by_symbol.setdefault(token.symbol.upper(), token)

    def by_symbol(self, symbol: str) -> Token | None:
        return self._by_symbol.get(symbol.upper())

    def by_address(self, address: str) -> Token | None:
        return self._by_address.get(normalize_address(address))

    def resolve(self, ref: TokenRef) -> Token:
        """Resolve a token reference against this list.

        Args:
            ref: Symbol, address or already-resolved reference

        Returns:
            The matching token

        Raises:
            InvalidTokenError: If the reference is malformed or unknown
        """
        if isinstance(ref, Resolved):
            if ref.token.chain_id != self.chain_id:
                raise InvalidTokenError(ref.token.label, f"token is not on chain {self.chain_id}")
            return ref.token
        if isinstance(ref, ByAddress):
            if not is_valid_address(ref.address):
                raise InvalidTokenError(ref.address, "malformed address")
            token = self.by_address(ref.address)
            if token is None:
                raise InvalidTokenError(ref.address)
            return token
        if isinstance(ref, BySymbol):
            token = self.by_symbol(ref.symbol)
            if token is None:
                raise InvalidTokenError(ref.symbol)
            return token
        raise InvalidTokenError(str(ref), "unsupported token reference")

    @classmethod
    def load(cls, chain_id: int, path: str | Path | None = None) -> TokenList:
        """Build the list for a chain from the built-ins and an optional file.

        Args:
            chain_id: Chain the list is for
            path: JSON token list file to merge in after the built-ins

        Returns:
            Populated token list
        """
        tokens = TokenList(chain_id, BASE_TOKENS)
        if path is None:
            return tokens
        with open(path) as f:
            data = TokenListFile.model_validate(json.load(f))
        for entry in data.tokens:
            tokens.add(
                Token(entry.chain_id, entry.address, entry.decimals, entry.symbol, entry.name)
            )
        logger.info("token_list_loaded", path=str(path), chain_id=chain_id, tokens=len(tokens))
        return tokens


__all__ = ["BASE_TOKENS", "TokenListEntry", "TokenListFile", "TokenList"]
