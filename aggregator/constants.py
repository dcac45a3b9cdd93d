"""Protocol constants for the Aerodrome connector.

Centralizes well-known contract addresses and protocol parameters for Base.
"""

from aggregator.models.types import is_valid_address

CONNECTOR_NAME = "aerodrome"
CHAIN = "ethereum"
TRADING_TYPES = ("amm", "clmm", "router")


def _validate_contract_address(name: str, address: str) -> str:
    """Validate and return a contract address.

    Args:
        name: Name of the contract (for error messages)
        address: The address to validate

    Returns:
        The validated address

    Raises:
        ValueError: If the address is invalid
    """
    if not is_valid_address(address):
        raise ValueError(f"Invalid {name} address: {address} (must be 0x + 40 hex chars)")
    return address


# Base mainnet deployments
BASE_CHAIN_ID = 8453
POOL_FACTORY = _validate_contract_address(
    "PoolFactory", "0x420DD381b31aEf6683db6B902084cB0FFECe40Da"
)
CL_FACTORY = _validate_contract_address(
    "CLFactory", "0x5e7BB104d84c7CB9B682AaC2F3d509f5F406809A"
)
POSITION_MANAGER = _validate_contract_address(
    "NonfungiblePositionManager", "0x827922686190790b37229fd06084350E74485b72"
)
UNIVERSAL_ROUTER = _validate_contract_address(
    "UniversalRouter", "0x6Cb442acF35158D5eDa88fe602221b67B400Be3E"
)
ROUTER = _validate_contract_address("Router", "0xcF77a3Ba9A5CA399B7c97c74d54e5b1Beb874E43")

# Init code hashes used for create2 address derivation
PAIR_INIT_CODE_HASH = "0x96e8ac4277198ff8b6f785478aa9a39f403cb768dd02cbee326c3e7da348845f"
POOL_INIT_CODE_HASH = "0xe34f199b19b2b4f47f68442619d555527d244f78a3297ea89325f843f87b8b54"

# Universal Router sentinel: "send output to msg.sender"
MSG_SENDER = "0x0000000000000000000000000000000000000001"

# Universal Router execute(bytes,bytes[],uint256)
EXECUTE_SELECTOR = bytes.fromhex("3593564c")

# Permit2 AllowanceExpired(uint256) revert selector
PERMIT2_ALLOWANCE_EXPIRED_SELECTOR = "0xd81b2f2e"

# Gas defaults
DEFAULT_GAS_ESTIMATE = 500_000
GAS_LIMIT_HINT = 500_000
GAS_LIMIT_MARGIN = 100_000

# Quote deadline offset from build time
DEADLINE_SECONDS = 30 * 60

# Synthetic tick window half-width, in tick spacings
TICK_WINDOW_SPACINGS = 300

# Fee denominator for constant-product pools (basis points)
BPS_DENOMINATOR = 10_000

__all__ = [
    "CONNECTOR_NAME",
    "CHAIN",
    "TRADING_TYPES",
    "BASE_CHAIN_ID",
    "POOL_FACTORY",
    "CL_FACTORY",
    "POSITION_MANAGER",
    "UNIVERSAL_ROUTER",
    "ROUTER",
    "PAIR_INIT_CODE_HASH",
    "POOL_INIT_CODE_HASH",
    "MSG_SENDER",
    "EXECUTE_SELECTOR",
    "PERMIT2_ALLOWANCE_EXPIRED_SELECTOR",
    "DEFAULT_GAS_ESTIMATE",
    "GAS_LIMIT_HINT",
    "GAS_LIMIT_MARGIN",
    "DEADLINE_SECONDS",
    "TICK_WINDOW_SPACINGS",
    "BPS_DENOMINATOR",
]
