"""
Shared experiment setup: logging, backend selection, node lifecycle & contract deployment.
"""
import contextlib
import logging
import typing as t

import structlog
from web3 import Web3

from config import (
    ARTIFACT_PATH,
    BACKEND,
    BOND_SIZE_ETH,
    LOG_LEVEL,
    MEMORY_BOND_SIZE,
    MEMORY_MAX_ROOT_SIZE,
    MNEMONIC,
    OPERATOR_KEYS,
    PRODUCER_ACCOUNT_INDEX,
    RPC_URL,
)
from commitbench.deployer import ContractDeployer, default_constructor_args
from commitbench.identity import UserManager
from commitbench.injector import TransactionInjector
from commitbench.network import ConnectionManager, GanacheManager
from commitbench.settlement import InMemorySettlementLayer, SettlementLayer, Web3SettlementLayer


class Environment(t.NamedTuple):
    settlement: SettlementLayer
    producer: t.Any  # eth_account LocalAccount
    deployer: t.Optional[ContractDeployer]


def configure_logging(level: str = LOG_LEVEL) -> None:
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level.upper(), logging.INFO)),
    )


@contextlib.contextmanager
def settlement_environment(
    backend: str = BACKEND,
    rpc_url: t.Optional[str] = RPC_URL,
    tokens: t.Iterable[int] = (0,),
) -> t.Iterator[Environment]:
    """
    Yield a ready settlement layer for the chosen backend.

    "memory" needs no chain. "web3" connects to `rpc_url`, or starts a local
    development chain when none is given (stopped on exit), then deploys the
    settlement contract from ARTIFACT_PATH.
    """
    identity = UserManager(MNEMONIC, OPERATOR_KEYS)
    producer = identity.get_user(PRODUCER_ACCOUNT_INDEX)

    if backend == "memory":
        print("\n1. Using in-memory settlement layer (no chain)")
        settlement = InMemorySettlementLayer(MEMORY_MAX_ROOT_SIZE, MEMORY_BOND_SIZE, producer.address, tokens)
        yield Environment(settlement, producer, None)
        return

    node = None
    if rpc_url is None:
        print("\n1. Starting local development chain...")
        node = GanacheManager()
        rpc_url = node.start()
    else:
        print(f"\n1. Benchmarking on network: {rpc_url}")

    try:
        web3 = ConnectionManager(rpc_url).wait_until_ready()
        injector = TransactionInjector(web3, producer, identity.nonce_manager)
        deployer = ContractDeployer(injector)

        print("\n2. Deploying settlement contract...")
        artifact = deployer.load_artifact(ARTIFACT_PATH)
        contract = deployer.deploy(
            artifact,
            default_constructor_args(producer.address, Web3.to_wei(BOND_SIZE_ETH, "ether"), web3.eth.chain_id),
        )
        print(f"   Settlement contract: {contract.address}")
        yield Environment(Web3SettlementLayer(web3, contract, injector), producer, deployer)
    finally:
        if node is not None:
            print("\nStopping local development chain...")
            node.stop()
