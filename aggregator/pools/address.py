"""Deterministic (create2) pool address derivation.

Pool contracts are deployed by their factory with ``CREATE2``, so a pool's
address is a pure function of the factory, the token pair, the fee tier (for
concentrated pools) and the pool's init code hash. No chain access needed.
"""

from eth_abi import encode  # type: ignore[attr-defined]
from eth_utils import keccak, to_checksum_address

from aggregator.constants import PAIR_INIT_CODE_HASH, POOL_INIT_CODE_HASH
from aggregator.errors import InvalidTokenError
from aggregator.models.types import is_valid_address, normalize_address


def sort_tokens(token_a: str, token_b: str) -> tuple[str, str]:
    """Order two token addresses canonically (lower address first).

    Args:
        token_a: First token address
        token_b: Second token address

    Returns:
        Tuple of (token0, token1), lowercase

    Raises:
        InvalidTokenError: If either address is malformed or both are the same
    """
    for token in (token_a, token_b):
        if not is_valid_address(token):
            raise InvalidTokenError(token, "malformed address")
    a = normalize_address(token_a)
    b = normalize_address(token_b)
    if a == b:
        raise InvalidTokenError(token_a, "pool tokens must differ")
    return (a, b) if a < b else (b, a)


def _hex_bytes(value: str) -> bytes:
    return bytes.fromhex(value[2:] if value.startswith("0x") else value)


def _create2_address(factory: str, salt: bytes, init_code_hash: str) -> str:
    if not is_valid_address(factory):
        raise ValueError(f"Invalid factory address: {factory}")
    code_hash = _hex_bytes(init_code_hash)
    if len(code_hash) != 32:
        raise ValueError(f"Init code hash must be 32 bytes: {init_code_hash}")
    packed = b"\xff" + _hex_bytes(factory) + salt + code_hash
    return to_checksum_address(keccak(packed)[12:])


def compute_pair_address(
    factory: str,
    token_a: str,
    token_b: str,
    init_code_hash: str = PAIR_INIT_CODE_HASH,
) -> str:
    """Derive a constant-product pair address.

    Salt is ``keccak256(token0 ++ token1)`` over the packed addresses.

    Args:
        factory: Pair factory address
        token_a: One token of the pair (any order)
        token_b: The other token
        init_code_hash: Pair init code hash

    Returns:
        Checksummed pair address
    """
    token0, token1 = sort_tokens(token_a, token_b)
    salt = keccak(_hex_bytes(token0) + _hex_bytes(token1))
    return _create2_address(factory, salt, init_code_hash)


def compute_pool_address(
    factory: str,
    token_a: str,
    token_b: str,
    fee: int,
    init_code_hash: str = POOL_INIT_CODE_HASH,
) -> str:
    """Derive a concentrated-liquidity pool address.

    Salt is ``keccak256(abi.encode(token0, token1, uint24 fee))``.

    Args:
        factory: Pool factory address
        token_a: One token of the pair (any order)
        token_b: The other token
        fee: Fee tier in hundredths of a basis point
        init_code_hash: Pool init code hash

    Returns:
        Checksummed pool address
    """
    if not 0 <= fee < 2**24:
        raise ValueError(f"Fee must fit in uint24: {fee}")
    token0, token1 = sort_tokens(token_a, token_b)
    salt = keccak(encode(["address", "address", "uint24"], [token0, token1, fee]))
    return _create2_address(factory, salt, init_code_hash)


__all__ = ["sort_tokens", "compute_pair_address", "compute_pool_address"]
