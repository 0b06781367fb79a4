"""
Contract deployment for the commitment benchmark.
Loads (or compiles) contract artifacts and deploys them to the settlement node.
"""
import json
import typing as t
from pathlib import Path

import solcx
import structlog
from web3 import Web3
from web3.contract import Contract

from config import (
    CONTRACT_NAME,
    CONTRACT_VERSION,
    FINALIZATION_DELAY,
    PENALTY_DELAY,
    SUBMISSION_DELAY,
)
from .injector import TransactionInjector

logger = structlog.get_logger()


def default_constructor_args(producer: str, bond_size: int, chain_id: int = 0) -> t.List[t.Any]:
    """
    Constructor arguments for the settlement contract: operator, delays
    (in settlement blocks), bond size, name, version, chain id and an empty genesis.
    """
    return [
        producer,
        FINALIZATION_DELAY,
        SUBMISSION_DELAY,
        PENALTY_DELAY,
        bond_size,
        CONTRACT_NAME,
        CONTRACT_VERSION,
        chain_id,
        b"\x00" * 32,
    ]


class ContractDeployer:
    """
    Manages compilation and deployment of the benchmark contracts.
    """

    SOLC_VERSION = "0.6.12"

    def __init__(self, injector: TransactionInjector) -> None:
        self.injector = injector
        self.web3: Web3 = injector.web3

    def compile_source(self, source: Path, contract_name: t.Optional[str] = None) -> t.Dict[str, t.Any]:
        """
        Compile a Solidity source and return the ABI/bytecode of `contract_name`
        (the file's stem by default).
        """
        installed = [str(v) for v in solcx.get_installed_solc_versions()]
        if self.SOLC_VERSION not in installed:
            solcx.install_solc(self.SOLC_VERSION)
        compiled = solcx.compile_files(
            [str(source)],
            output_values=["abi", "bin"],
            solc_version=self.SOLC_VERSION,
        )
        wanted = contract_name or source.stem
        for qualified_name, data in compiled.items():
            # qualified_name format: "path/to/file.sol:ContractName"
            if qualified_name.split(":")[-1] == wanted:
                return {"abi": data["abi"], "bytecode": data["bin"]}
        raise ValueError(f"Contract {wanted} not found in {source}")

    def load_artifact(self, path: t.Union[str, Path]) -> t.Dict[str, t.Any]:
        """
        Read a build artifact. JSON artifacts must carry `abi` and `bytecode`;
        `.sol` files are compiled.
        """
        path = Path(path)
        if path.suffix == ".sol":
            return self.compile_source(path)
        with open(path, "r", encoding="utf-8") as f:
            artifact = json.load(f)
        missing = {"abi", "bytecode"} - set(artifact)
        if missing:
            raise ValueError(f"Artifact {path} is missing {sorted(missing)}")
        return artifact

    def deploy(self, artifact: t.Dict[str, t.Any], constructor_args: t.Sequence[t.Any] = ()) -> Contract:
        """
        Deploy a contract and wait for its receipt.

        Returns:
            Contract bound to the deployed address.
        """
        factory = self.web3.eth.contract(abi=artifact["abi"], bytecode=artifact["bytecode"])
        confirmation = self.injector.send_and_wait(factory.constructor(*constructor_args), label="deploy")
        receipt = self.web3.eth.get_transaction_receipt(confirmation.tx_hash)
        logger.info("contract_deployed", address=receipt.contractAddress, gas_used=confirmation.gas_used)
        return self.web3.eth.contract(address=receipt.contractAddress, abi=artifact["abi"])
