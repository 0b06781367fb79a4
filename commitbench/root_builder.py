"""
Root builder for the commitment benchmark.
Derives a root header from one chunk; pure and deterministic.
"""
import typing as t
from dataclasses import dataclass, field

from web3 import Web3

from .encoding import keccak, merkle_root_of
from .partitioner import Chunk

ROOT_HEADER_TYPES: t.List[str] = ["address", "bytes32", "bytes32", "uint256", "uint256", "uint256"]


@dataclass(frozen=True)
class Root:
    """
    Root header for one chunk.

    `fee` is the chunk's starting offset in the transaction stream; `payload`
    is the packed chunk submitted alongside the header.
    """
    producer: str
    merkle_root: bytes
    commitment_hash: bytes
    length: int
    fee: int
    fee_token: int
    payload: bytes = field(repr=False)

    def packed_hash(self) -> bytes:
        """
        Root commitment hash: keccak over the tightly packed header.
        This is the value block commitments reference.
        """
        return bytes(Web3.solidity_keccak(
            ROOT_HEADER_TYPES,
            [
                Web3.to_checksum_address(self.producer),
                self.merkle_root,
                self.commitment_hash,
                self.length,
                self.fee_token,
                self.fee,
            ],
        ))


def build_root(chunk: Chunk, producer: str, start_offset: int, token_id: int) -> Root:
    """
    Build the root header for `chunk`.

    Args:
        chunk: Transactions committed by this root.
        producer: Address of the root producer.
        start_offset: Fee marker; the chunk's offset in the overall stream.
        token_id: Settlement token id used for fee accounting.
    """
    payload = chunk.payload
    return Root(
        producer=producer,
        merkle_root=merkle_root_of([keccak(e) for e in chunk.encodings]),
        commitment_hash=keccak(payload),
        length=len(payload),
        fee=start_offset,
        fee_token=token_id,
        payload=payload,
    )
