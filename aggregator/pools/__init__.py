"""Pool address derivation, validation and state reads."""

from aggregator.pools.address import compute_pair_address, compute_pool_address, sort_tokens
from aggregator.pools.reader import ClmmState, PoolStateReader
from aggregator.pools.validation import is_valid_pool_address, probe_pool

__all__ = [
    "compute_pair_address",
    "compute_pool_address",
    "sort_tokens",
    "ClmmState",
    "PoolStateReader",
    "is_valid_pool_address",
    "probe_pool",
]
