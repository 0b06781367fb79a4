"""
Settlement layer bindings for the commitment benchmark.
The capability interface the pipeline consumes, a web3.py binding over the
deployed contract, and a deterministic in-memory double.
"""
import typing as t

import requests
import structlog
from web3 import Web3
from web3.contract import Contract
from web3.exceptions import ContractLogicError, Web3RPCError

from config import MAX_ROOTS_PER_BLOCK
from .encoding import keccak
from .errors import SubmissionError, TransportError
from .injector import Confirmation, TransactionInjector

logger = structlog.get_logger()


class SettlementLayer(t.Protocol):
    """What the pipeline needs from the settlement chain."""

    def chain_id(self) -> int: ...

    def max_root_size(self) -> int: ...

    def bond_size(self) -> int: ...

    def commit_root(self, merkle_root: bytes, token_id: int, fee: int, payload: bytes) -> Confirmation: ...

    def commit_block(
        self,
        anchor_number: int,
        anchor_hash: bytes,
        block_index: int,
        root_hashes: t.Sequence[bytes],
        bond: int,
    ) -> Confirmation: ...

    def current_block_number(self) -> int: ...

    def block_hash(self, number: int) -> bytes: ...

    def register_address(self, address: str) -> int: ...


class Web3SettlementLayer:
    """
    Binding over a deployed settlement contract.

    MAX_ROOT_SIZE and BOND_SIZE are read once and cached for the run.
    """

    def __init__(self, web3: Web3, contract: Contract, injector: TransactionInjector) -> None:
        self.web3 = web3
        self.contract = contract
        self.injector = injector
        self._max_root_size: t.Optional[int] = None
        self._bond_size: t.Optional[int] = None

    def _call(self, name: str, *args) -> t.Any:
        try:
            return getattr(self.contract.functions, name)(*args).call()
        except (ContractLogicError, Web3RPCError) as e:
            raise SubmissionError(f"{name}() reverted", reason=str(e)) from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"{name}(): settlement node unreachable: {e}") from e

    def chain_id(self) -> int:
        return self.web3.eth.chain_id

    def max_root_size(self) -> int:
        if self._max_root_size is None:
            self._max_root_size = int(self._call("MAX_ROOT_SIZE"))
        return self._max_root_size

    def bond_size(self) -> int:
        if self._bond_size is None:
            self._bond_size = int(self._call("BOND_SIZE"))
        return self._bond_size

    def commit_root(self, merkle_root: bytes, token_id: int, fee: int, payload: bytes) -> Confirmation:
        fn = self.contract.functions.commitRoot(merkle_root, token_id, fee, payload)
        return self.injector.send_and_wait(fn, label="commit_root")

    def commit_block(
        self,
        anchor_number: int,
        anchor_hash: bytes,
        block_index: int,
        root_hashes: t.Sequence[bytes],
        bond: int,
    ) -> Confirmation:
        fn = self.contract.functions.commitBlock(anchor_number, anchor_hash, block_index, list(root_hashes))
        return self.injector.send_and_wait(fn, value=bond, label="commit_block")

    def current_block_number(self) -> int:
        return self.web3.eth.block_number

    def block_hash(self, number: int) -> bytes:
        return bytes(self.web3.eth.get_block(number)["hash"])

    def register_address(self, address: str) -> int:
        """Commit `address` to the contract's address registry and return its id."""
        self.injector.send_and_wait(self.contract.functions.commitAddress(address), label="commit_address")
        owner_id = int(self._call("addressId", address))
        logger.info("address_registered", address=address, owner_id=owner_id)
        return owner_id

    def deposit_token(self, token: Contract, owner: str, amount: int) -> None:
        """
        Move `amount` of an ERC20 into the owner's deposit funnel and register
        the deposit, which assigns the token its settlement id.
        """
        funnel = self._call("funnel", owner)
        self.injector.send_and_wait(token.functions.transfer(funnel, amount), label="erc20_transfer")
        self.injector.send_and_wait(
            self.contract.functions.deposit(owner, token.address), label="deposit"
        )
        logger.info("token_deposited", token=token.address, owner=owner, amount=amount)


class InMemorySettlementLayer:
    """
    Deterministic settlement double for tests and dry runs.

    Gas is a fixed base cost plus a per-byte cost for roots and a per-hash
    cost for blocks. Each confirmed call mines one fake settlement block.
    """

    ROOT_BASE_GAS: int = 50_000
    ROOT_GAS_PER_BYTE: int = 16
    BLOCK_BASE_GAS: int = 60_000
    BLOCK_GAS_PER_ROOT: int = 5_000
    ADDRESS_GAS: int = 45_000
    GENESIS_HEIGHT: int = 1

    def __init__(
        self,
        max_root_size: int,
        bond_size: int,
        producer: str,
        tokens: t.Iterable[int] = (0,),
        chain_id: int = 1337,
        anchor_window: int = 256,
    ) -> None:
        self._max_root_size = max_root_size
        self._bond_size = bond_size
        self._chain_id = chain_id
        self.producer = producer
        self.tokens: t.Set[int] = set(tokens)
        self.anchor_window = anchor_window
        self.roots: t.Dict[bytes, t.Tuple[bytes, int, int, int]] = {}
        self.blocks: t.Dict[int, t.List[bytes]] = {}
        self.addresses: t.Dict[str, int] = {}
        self._chain: t.List[bytes] = [keccak(b"genesis")] * (self.GENESIS_HEIGHT + 1)
        self._scripted_failures: t.Dict[int, str] = {}
        self.root_calls = 0
        self.block_calls = 0

    def fail_root(self, call_number: int, reason: str = "root rejected") -> None:
        """Reject the `call_number`-th commit_root call (0-based)."""
        self._scripted_failures[call_number] = reason

    def _mine(self, gas_used: int) -> Confirmation:
        number = len(self._chain)
        block_hash = keccak(self._chain[-1] + number.to_bytes(32, "big"))
        self._chain.append(block_hash)
        return Confirmation(tx_hash=Web3.to_hex(keccak(block_hash)), gas_used=gas_used, block_number=number)

    def chain_id(self) -> int:
        return self._chain_id

    def max_root_size(self) -> int:
        return self._max_root_size

    def bond_size(self) -> int:
        return self._bond_size

    def commit_root(self, merkle_root: bytes, token_id: int, fee: int, payload: bytes) -> Confirmation:
        call = self.root_calls
        self.root_calls += 1
        if call in self._scripted_failures:
            raise SubmissionError("commit_root reverted", reason=self._scripted_failures[call])
        if not payload:
            raise SubmissionError("commit_root reverted", reason="root-size-underflow")
        if len(payload) > self._max_root_size:
            raise SubmissionError("commit_root reverted", reason="root-size-overflow")
        if token_id not in self.tokens:
            raise SubmissionError("commit_root reverted", reason="invalid-token")

        root_hash = self._root_hash(merkle_root, payload, token_id, fee)
        self.roots[root_hash] = (merkle_root, token_id, fee, len(payload))
        return self._mine(self.ROOT_BASE_GAS + self.ROOT_GAS_PER_BYTE * len(payload))

    def _root_hash(self, merkle_root: bytes, payload: bytes, token_id: int, fee: int) -> bytes:
        return bytes(Web3.solidity_keccak(
            ["address", "bytes32", "bytes32", "uint256", "uint256", "uint256"],
            [Web3.to_checksum_address(self.producer), merkle_root, keccak(payload), len(payload), token_id, fee],
        ))

    def commit_block(
        self,
        anchor_number: int,
        anchor_hash: bytes,
        block_index: int,
        root_hashes: t.Sequence[bytes],
        bond: int,
    ) -> Confirmation:
        self.block_calls += 1
        if bond < self._bond_size:
            raise SubmissionError("commit_block reverted", block_index=block_index, reason="bond-value")
        if not root_hashes or len(root_hashes) > MAX_ROOTS_PER_BLOCK:
            raise SubmissionError("commit_block reverted", block_index=block_index, reason="roots-length")
        tip = len(self._chain) - 1
        if anchor_number > tip or tip - anchor_number > self.anchor_window:
            raise SubmissionError("commit_block reverted", block_index=block_index, reason="block-number")
        if self._chain[anchor_number] != anchor_hash:
            raise SubmissionError("commit_block reverted", block_index=block_index, reason="block-hash")
        if block_index != len(self.blocks) + 1:
            raise SubmissionError("commit_block reverted", block_index=block_index, reason="block-height")
        for root_hash in root_hashes:
            if root_hash not in self.roots:
                raise SubmissionError("commit_block reverted", block_index=block_index, reason="root-not-committed")

        self.blocks[block_index] = list(root_hashes)
        return self._mine(self.BLOCK_BASE_GAS + self.BLOCK_GAS_PER_ROOT * len(root_hashes))

    def current_block_number(self) -> int:
        return len(self._chain) - 1

    def block_hash(self, number: int) -> bytes:
        if not 0 <= number < len(self._chain):
            raise TransportError(f"Unknown settlement block {number}")
        return self._chain[number]

    def register_address(self, address: str) -> int:
        if address not in self.addresses:
            self.addresses[address] = len(self.addresses) + 1
            self._mine(self.ADDRESS_GAS)
        return self.addresses[address]
