"""
Configuration module for the commitment benchmark.
Single source of truth for settlement limits, network & cost constants.
"""
import os
import typing as t

# Operators
MNEMONIC: str = os.environ.get(
    "COMMITBENCH_MNEMONIC",
    "myth like bonus scare over problem client lizard pioneer submit female collect",
)
OPERATOR_KEYS: t.List[str] = [
    k.strip() for k in os.environ.get("COMMITBENCH_OPERATOR_KEYS", "").split(",") if k.strip()
]
PRODUCER_ACCOUNT_INDEX: int = 0
NUM_ACCOUNTS: int = 10

# Network
RPC_URL: t.Optional[str] = os.environ.get("COMMITBENCH_RPC_URL") or None
BACKEND: str = os.environ.get("COMMITBENCH_BACKEND", "web3")  # "web3" | "memory"
LOG_LEVEL: str = os.environ.get("COMMITBENCH_LOG_LEVEL", "INFO")
LOCAL_NODE_PORT: int = 8545
LOCAL_NODE_CMD: str = "ganache"
LOCAL_NODE_DATA_DIR: str = os.path.join("logs", "chain_data")
ACCOUNT_BALANCE_ETH: int = 1000
BLOCK_TIME: int = 0  # 0 = instamine on the local node
DEV_CHAIN_IDS: t.Tuple[int, ...] = (1337, 31337)

# Transaction overrides
GAS_LIMIT: int = 6_000_000
NODE_BLOCK_GAS_LIMIT: int = 30_000_000
CONFIRMATION_TIMEOUT: float = 300.0  # seconds
POLL_INTERVAL: float = 0.5  # seconds

# Settlement contract
ARTIFACT_PATH: str = os.environ.get("COMMITBENCH_ARTIFACT", os.path.join("builds", "Settlement.json"))
ERC20_ARTIFACT_PATH: str = os.path.join("builds", "ERC20.json")
BOND_SIZE_ETH: str = "0.01"
FINALIZATION_DELAY: int = 20  # settlement blocks
SUBMISSION_DELAY: int = 20
PENALTY_DELAY: int = 20
CONTRACT_NAME: str = "Fuel"
CONTRACT_VERSION: str = "1.0.0"
MAX_ROOTS_PER_BLOCK: int = 128
FIRST_BLOCK_INDEX: int = 1

# Anchor the block commitments this many settlement blocks back on public
# networks; development chains anchor at the tip.
ANCHOR_BLOCK_LAG: int = 7

# Cost model
SETTLEMENT_BLOCK_GAS: int = 8_000_000
USD_PER_BLOCK_HIGH: int = 100
USD_PER_BLOCK_LOW: int = 50

# In-memory backend (no chain)
MEMORY_MAX_ROOT_SIZE: int = 57_600
MEMORY_BOND_SIZE: int = 10 ** 16


def anchor_lag_for(chain_id: int) -> int:
    """
    Number of blocks to step back from the tip when anchoring block commitments.
    """
    if chain_id in DEV_CHAIN_IDS:
        return 0
    return ANCHOR_BLOCK_LAG
