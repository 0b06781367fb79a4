"""
Transaction codec for the commitment benchmark.
Deterministic packed encoding, signing and Merkle roots for transfer transactions.
"""
import functools
import typing as t
from dataclasses import dataclass, field

from eth_abi.packed import encode_packed
from eth_account.messages import encode_defunct
from web3 import Web3

OUTPUT_TRANSFER: int = 0
INPUT_UTXO: int = 0
WITNESS_SIGNATURE: int = 0
SIGNATURE_LENGTH: int = 65
EMPTY_UTXO: bytes = b"\x00" * 32


def keccak(data: bytes) -> bytes:
    return bytes(Web3.keccak(primitive=data))


@dataclass(frozen=True)
class Output:
    """A transfer output: `amount` of `token` to `owner` (address or owner id bytes)."""
    amount: int
    token: int
    owner: bytes


@dataclass(frozen=True)
class Input:
    kind: int = INPUT_UTXO
    witness_reference: int = 0


@dataclass(frozen=True)
class Metadata:
    """Position of the spent output in the commitment structure."""
    block_height: int = 0
    root_index: int = 0
    transaction_index: int = 0
    output_index: int = 0


@dataclass(frozen=True)
class Transaction:
    """
    Signed transfer. Immutable once built; `data` holds the UTXO hashes the
    inputs reference.
    """
    witnesses: t.Tuple[bytes, ...]
    metadata: t.Tuple[Metadata, ...]
    inputs: t.Tuple[Input, ...]
    outputs: t.Tuple[Output, ...]
    data: t.Tuple[bytes, ...] = field(default=(EMPTY_UTXO,))


def _minimal(value: int) -> bytes:
    """Shortest big-endian representation of a non-negative integer (at least one byte)."""
    if value < 0:
        raise ValueError(f"Negative value cannot be encoded: {value}")
    return value.to_bytes(max(1, (value.bit_length() + 7) // 8), "big")


def _encode_output(output: Output) -> bytes:
    token = _minimal(output.token)
    amount = _minimal(output.amount)
    return encode_packed(
        ["uint8", "uint8", "bytes", "uint8", "bytes", "uint8", "bytes"],
        [OUTPUT_TRANSFER, len(output.owner), output.owner, len(token), token, len(amount), amount],
    )


def _encode_metadata(metadata: Metadata) -> bytes:
    return encode_packed(
        ["uint32", "uint8", "uint16", "uint8"],
        [metadata.block_height, metadata.root_index, metadata.transaction_index, metadata.output_index],
    )


def _encode_body(
    inputs: t.Sequence[Input],
    outputs: t.Sequence[Output],
    data: t.Sequence[bytes],
) -> bytes:
    """Unsigned part of the transaction; this is what witnesses sign."""
    encoded_inputs = b"".join(
        encode_packed(["uint8", "uint8"], [i.kind, i.witness_reference]) for i in inputs
    )
    encoded_outputs = b"".join(_encode_output(o) for o in outputs)
    for utxo in data:
        if len(utxo) != 32:
            raise ValueError(f"UTXO hash must be 32 bytes, got {len(utxo)}")
    return encode_packed(
        ["uint16", "bytes", "uint16", "bytes", "uint8", "bytes"],
        [len(encoded_inputs), encoded_inputs, len(encoded_outputs), encoded_outputs, len(data), b"".join(data)],
    )


@functools.lru_cache(maxsize=4096)
def encode(transaction: Transaction) -> bytes:
    """
    Packed encoding of a transaction, prefixed with its own length.

    Deterministic: used both for root size accounting and for the commitment hash.
    """
    witnesses = b""
    for witness in transaction.witnesses:
        if len(witness) != SIGNATURE_LENGTH:
            raise ValueError(f"Witness must be a {SIGNATURE_LENGTH}-byte signature, got {len(witness)}")
        witnesses += encode_packed(["uint8", "bytes"], [WITNESS_SIGNATURE, witness])
    metadata = b"".join(_encode_metadata(m) for m in transaction.metadata)
    body = _encode_body(transaction.inputs, transaction.outputs, transaction.data)
    inner = encode_packed(
        ["uint16", "bytes", "uint16", "bytes", "bytes"],
        [len(metadata), metadata, len(witnesses), witnesses, body],
    )
    return encode_packed(["uint16", "bytes"], [len(inner), inner])


def combine(transactions: t.Iterable[Transaction]) -> bytes:
    """Raw concatenation of the transactions' encodings, in order."""
    return b"".join(encode(tx) for tx in transactions)


def merkle_root_of(leaves: t.Sequence[bytes]) -> bytes:
    """
    Keccak binary Merkle root over ordered leaves.
    Odd levels pair the last node with itself; no leaves hashes the empty string.
    """
    if not leaves:
        return keccak(b"")
    level = list(leaves)
    while len(level) > 1:
        next_level: t.List[bytes] = []
        for i in range(0, len(level), 2):
            left = level[i]
            right = level[i + 1] if i + 1 < len(level) else left
            next_level.append(keccak(left + right))
        level = next_level
    return level[0]


def merkle_root(transactions: t.Sequence[Transaction]) -> bytes:
    """Merkle root over `keccak(encode(tx))` leaves, order preserved."""
    return merkle_root_of([keccak(encode(tx)) for tx in transactions])


def build_transfer(
    signer,
    outputs: t.Sequence[Output],
    utxo: bytes = EMPTY_UTXO,
) -> Transaction:
    """
    Build a single-input transfer and sign its body with `signer` (an eth_account account).
    """
    inputs = (Input(),)
    data = (utxo,)
    body = _encode_body(inputs, outputs, data)
    signed = signer.sign_message(encode_defunct(primitive=keccak(body)))
    return Transaction(
        witnesses=(bytes(signed.signature),),
        metadata=(Metadata(),),
        inputs=inputs,
        outputs=tuple(outputs),
        data=data,
    )
