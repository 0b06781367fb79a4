"""
Partitioner for the commitment benchmark.
Splits an ordered transaction stream into maximal chunks under the root size cap,
and pages root hashes into block-sized groups.
"""
import typing as t
from dataclasses import dataclass, field

import structlog

from .encoding import Transaction, encode
from .errors import ConfigurationError

logger = structlog.get_logger()


@dataclass(frozen=True)
class Chunk:
    """
    Contiguous run of transactions committed as one root.

    `offset` is the position of the first transaction in the overall stream.
    """
    index: int
    offset: int
    transactions: t.Tuple[Transaction, ...]
    encodings: t.Tuple[bytes, ...] = field(repr=False)

    @property
    def payload(self) -> bytes:
        return b"".join(self.encodings)

    @property
    def length(self) -> int:
        return sum(len(e) for e in self.encodings)

    def __len__(self) -> int:
        return len(self.transactions)


def estimate_chunk_size(max_root_size: int, sample_length: int) -> int:
    """
    Transactions per root assuming every transaction encodes to `sample_length` bytes.
    """
    if sample_length <= 0:
        raise ValueError("sample_length must be positive")
    return max_root_size // sample_length


def partition(
    transactions: t.Sequence[Transaction],
    max_root_size: int,
    encode_fn: t.Callable[[Transaction], bytes] = encode,
) -> t.List[Chunk]:
    """
    Greedily pack transactions, in order, into chunks whose true encoded length
    never exceeds `max_root_size`.

    Raises:
        ConfigurationError: a single transaction is larger than `max_root_size`.
    """
    if max_root_size <= 0:
        raise ConfigurationError(f"Root size budget must be positive, got {max_root_size}")

    chunks: t.List[Chunk] = []
    current: t.List[Transaction] = []
    current_encodings: t.List[bytes] = []
    current_length = 0
    offset = 0

    for position, tx in enumerate(transactions):
        encoded = encode_fn(tx)
        if len(encoded) > max_root_size:
            raise ConfigurationError(
                f"Transaction {position} encodes to {len(encoded)} bytes, "
                f"above the root size budget of {max_root_size}"
            )
        if current and current_length + len(encoded) > max_root_size:
            chunks.append(Chunk(len(chunks), offset, tuple(current), tuple(current_encodings)))
            offset = position
            current, current_encodings, current_length = [], [], 0
        current.append(tx)
        current_encodings.append(encoded)
        current_length += len(encoded)

    if current:
        chunks.append(Chunk(len(chunks), offset, tuple(current), tuple(current_encodings)))

    logger.info("partitioned", transactions=len(transactions), chunks=len(chunks), max_root_size=max_root_size)
    return chunks


def paginate(root_hashes: t.Sequence[bytes], page_size: int) -> t.List[t.List[bytes]]:
    """
    Group root hashes into consecutive pages of at most `page_size`, preserving order.
    """
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    pages = [list(root_hashes[i:i + page_size]) for i in range(0, len(root_hashes), page_size)]
    return pages
