"""
Commitment submission for the commitment benchmark.
Commits roots and blocks to the settlement layer, one confirmed call at a time.
"""
import typing as t

import structlog

from config import MAX_ROOTS_PER_BLOCK
from .errors import SubmissionError
from .injector import Confirmation
from .root_builder import Root
from .settlement import SettlementLayer

logger = structlog.get_logger()


class CommitmentSubmitter:
    """
    Submits root and block commitments.

    Performs no deduplication or retry: the caller tracks what was confirmed
    and resubmits explicitly.
    """

    def __init__(self, settlement: SettlementLayer, max_roots_per_block: int = MAX_ROOTS_PER_BLOCK) -> None:
        self.settlement = settlement
        self.max_roots_per_block = max_roots_per_block

    def submit_root(self, root: Root, chunk_index: int) -> t.Tuple[bytes, int]:
        """
        Commit one root and wait for its confirmation.

        Returns:
            (root commitment hash, gas used)

        Raises:
            SubmissionError: the settlement layer rejected the root.
        """
        try:
            confirmation = self.settlement.commit_root(root.merkle_root, root.fee_token, root.fee, root.payload)
        except SubmissionError as e:
            logger.error("root_rejected", chunk=chunk_index, reason=e.reason)
            raise SubmissionError(
                f"Root for chunk {chunk_index} rejected", chunk_index=chunk_index, reason=e.reason
            ) from e

        root_hash = root.packed_hash()
        logger.info(
            "root_committed",
            chunk=chunk_index,
            length=root.length,
            gas_used=confirmation.gas_used,
            tx_hash=confirmation.tx_hash,
        )
        return root_hash, confirmation.gas_used

    def submit_block(
        self,
        root_hash_page: t.Sequence[bytes],
        block_index: int,
        anchor_block_number: int,
        anchor_block_hash: bytes,
        bond: int,
    ) -> t.Tuple[Confirmation, int]:
        """
        Commit a block over an ordered page of already-committed root hashes,
        posting `bond` as attached value.

        Returns:
            (confirmation, gas used)

        Raises:
            ValueError: the page is empty or larger than the block limit.
            SubmissionError: the settlement layer rejected the block.
        """
        if not root_hash_page or len(root_hash_page) > self.max_roots_per_block:
            raise ValueError(
                f"Block {block_index} page holds {len(root_hash_page)} roots, "
                f"expected 1..{self.max_roots_per_block}"
            )

        try:
            confirmation = self.settlement.commit_block(
                anchor_block_number, anchor_block_hash, block_index, list(root_hash_page), bond
            )
        except SubmissionError as e:
            logger.error("block_rejected", block=block_index, reason=e.reason)
            raise SubmissionError(
                f"Block {block_index} rejected", block_index=block_index, reason=e.reason
            ) from e

        logger.info(
            "block_committed",
            block=block_index,
            roots=len(root_hash_page),
            gas_used=confirmation.gas_used,
            tx_hash=confirmation.tx_hash,
        )
        return confirmation, confirmation.gas_used
