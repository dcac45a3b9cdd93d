"""Universal Router calldata encoding for single-pool swaps.

A swap is one ``execute(bytes commands, bytes[] inputs, uint256 deadline)``
call carrying a single command byte and its ABI-encoded input.
"""

from __future__ import annotations

from eth_abi import encode  # type: ignore[attr-defined]

from aggregator.constants import EXECUTE_SELECTOR
from aggregator.models.types import normalize_address
from aggregator.routing.types import ProtocolFamily, Trade, TradeType

# Universal Router command bytes
V3_SWAP_EXACT_IN = 0x00
V3_SWAP_EXACT_OUT = 0x01
V2_SWAP_EXACT_IN = 0x08
V2_SWAP_EXACT_OUT = 0x09


def encode_v3_path(tokens: list[str], fees: list[int]) -> bytes:
    """Pack a concentrated-liquidity path: token (20) ++ fee (3) ++ token (20) ...

    Raises:
        ValueError: If the token and fee counts don't line up
    """
    if len(tokens) != len(fees) + 1:
        raise ValueError(f"Path needs {len(fees) + 1} tokens for {len(fees)} fees")
    path = bytes.fromhex(normalize_address(tokens[0])[2:])
    for fee, token in zip(fees, tokens[1:], strict=True):
        path += fee.to_bytes(3, "big") + bytes.fromhex(normalize_address(token)[2:])
    return path


def encode_swap_command(
    trade: Trade,
    recipient: str,
    amount_limit: int,
    payer_is_user: bool = True,
) -> tuple[int, bytes]:
    """Encode the router command and input for a trade.

    Args:
        trade: The trade to encode
        recipient: Receiver of the output tokens
        amount_limit: Minimum output (exact input) or maximum input (exact output)
        payer_is_user: Pull input from the caller via Permit2

    Returns:
        Tuple of (command byte, encoded input)
    """
    token_in = trade.token_in.address
    token_out = trade.token_out.address
    exact_in = trade.trade_type is TradeType.EXACT_INPUT
    amount = trade.amount_in if exact_in else trade.amount_out

    if trade.family is ProtocolFamily.CLMM:
        fee = trade.pool.fee  # type: ignore[union-attr]
        if exact_in:
            command = V3_SWAP_EXACT_IN
            path = encode_v3_path([token_in, token_out], [fee])
        else:
            # exact-output paths are encoded output first
            command = V3_SWAP_EXACT_OUT
            path = encode_v3_path([token_out, token_in], [fee])
        data = encode(
            ["address", "uint256", "uint256", "bytes", "bool"],
            [recipient, amount, amount_limit, path, payer_is_user],
        )
    else:
        command = V2_SWAP_EXACT_IN if exact_in else V2_SWAP_EXACT_OUT
        data = encode(
            ["address", "uint256", "uint256", "address[]", "bool"],
            [recipient, amount, amount_limit, [token_in, token_out], payer_is_user],
        )
    return command, data


def encode_execute(commands: bytes, inputs: list[bytes], deadline: int) -> str:
    """Encode a Universal Router ``execute`` call.

    Returns:
        Hex calldata with 0x prefix
    """
    args = encode(["bytes", "bytes[]", "uint256"], [commands, inputs, deadline])
    return "0x" + (EXECUTE_SELECTOR + args).hex()


def encode_swap(trade: Trade, recipient: str, amount_limit: int, deadline: int) -> str:
    """Encode the full ``execute`` calldata for a single-pool trade."""
    command, data = encode_swap_command(trade, normalize_address(recipient), amount_limit)
    return encode_execute(bytes([command]), [data], deadline)


__all__ = [
    "V3_SWAP_EXACT_IN",
    "V3_SWAP_EXACT_OUT",
    "V2_SWAP_EXACT_IN",
    "V2_SWAP_EXACT_OUT",
    "encode_v3_path",
    "encode_swap_command",
    "encode_execute",
    "encode_swap",
]
