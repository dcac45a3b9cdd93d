"""Minimal contract ABIs for the calls the connector makes."""

from typing import Any

ABI = list[dict[str, Any]]


def _view(name: str, inputs: list[tuple[str, str]], outputs: list[tuple[str, str]]) -> dict[str, Any]:
    return {
        "name": name,
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": n, "type": t} for n, t in inputs],
        "outputs": [{"name": n, "type": t} for n, t in outputs],
    }


# Constant-product pair (getReserves/token0/token1)
PAIR_ABI: ABI = [
    _view(
        "getReserves",
        [],
        [("_reserve0", "uint256"), ("_reserve1", "uint256"), ("_blockTimestampLast", "uint256")],
    ),
    _view("token0", [], [("", "address")]),
    _view("token1", [], [("", "address")]),
]

# Concentrated-liquidity pool
CL_POOL_ABI: ABI = [
    _view("liquidity", [], [("", "uint128")]),
    _view(
        "slot0",
        [],
        [
            ("sqrtPriceX96", "uint160"),
            ("tick", "int24"),
            ("observationIndex", "uint16"),
            ("observationCardinality", "uint16"),
            ("observationCardinalityNext", "uint16"),
            ("unlocked", "bool"),
        ],
    ),
    _view("fee", [], [("", "uint24")]),
    _view("tickSpacing", [], [("", "int24")]),
    _view("token0", [], [("", "address")]),
    _view("token1", [], [("", "address")]),
]

# NonfungiblePositionManager (ERC-721 subset)
POSITION_MANAGER_ABI: ABI = [
    _view("ownerOf", [("tokenId", "uint256")], [("", "address")]),
    _view("getApproved", [("tokenId", "uint256")], [("", "address")]),
    _view(
        "isApprovedForAll",
        [("owner", "address"), ("operator", "address")],
        [("", "bool")],
    ),
]

__all__ = ["ABI", "PAIR_ABI", "CL_POOL_ABI", "POSITION_MANAGER_ABI"]
