"""
Benchmark driver for the commitment benchmark.
Sequences partition -> roots -> pagination -> blocks -> report over one workload.
"""
import contextlib
import typing as t
from enum import Enum

import structlog
from tqdm import tqdm

from config import FIRST_BLOCK_INDEX, MAX_ROOTS_PER_BLOCK, SETTLEMENT_BLOCK_GAS
from .accumulator import GasAccumulator
from .encoding import Transaction
from .errors import PipelineStateError
from .partitioner import Chunk, paginate, partition
from .report import BenchmarkReport
from .root_builder import build_root
from .settlement import SettlementLayer
from .submitter import CommitmentSubmitter

logger = structlog.get_logger()


class Stage(Enum):
    CREATED = "created"
    CHUNKED = "chunked"
    ROOTS_SUBMITTED = "roots_submitted"
    PAGINATED = "paginated"
    BLOCKS_SUBMITTED = "blocks_submitted"
    REPORTED = "reported"
    FAILED = "failed"


_NEXT: t.Dict[Stage, Stage] = {
    Stage.CREATED: Stage.CHUNKED,
    Stage.CHUNKED: Stage.ROOTS_SUBMITTED,
    Stage.ROOTS_SUBMITTED: Stage.PAGINATED,
    Stage.PAGINATED: Stage.BLOCKS_SUBMITTED,
    Stage.BLOCKS_SUBMITTED: Stage.REPORTED,
}


class BenchmarkDriver:
    """
    Runs one benchmark over a transaction workload.

    Every stage completes before the next begins and every submission is
    confirmed before the next is sent. Any error aborts the run; commitments
    already confirmed stay on the settlement layer.

    Usage:
        driver = BenchmarkDriver(settlement, producer, token_id=0)
        report = driver.run(transactions)
        report.print()
    """

    def __init__(
        self,
        settlement: SettlementLayer,
        producer: str,
        token_id: int = 0,
        anchor_lag: int = 0,
        first_block_index: int = FIRST_BLOCK_INDEX,
        max_roots_per_block: int = MAX_ROOTS_PER_BLOCK,
        per_block_capacity: int = SETTLEMENT_BLOCK_GAS,
    ) -> None:
        self.settlement = settlement
        self.producer = producer
        self.token_id = token_id
        self.anchor_lag = anchor_lag
        self.first_block_index = first_block_index
        self.max_roots_per_block = max_roots_per_block
        self.submitter = CommitmentSubmitter(settlement, max_roots_per_block)
        self.accumulator = GasAccumulator(per_block_capacity)
        self.stage = Stage.CREATED
        self.chunks: t.List[Chunk] = []
        self.root_hashes: t.List[bytes] = []
        self.pages: t.List[t.List[bytes]] = []
        self.block_confirmations: t.List[t.Any] = []

    @contextlib.contextmanager
    def _stage(self, target: Stage) -> t.Iterator[None]:
        """
        Enter `target` only from its predecessor. The stage is recorded once its
        work completes; any error leaves the driver FAILED for good.
        """
        if _NEXT.get(self.stage) is not target:
            raise PipelineStateError(f"Cannot enter {target.value} from {self.stage.value}")
        try:
            yield
        except Exception:
            logger.error("stage_failed", stage=target.value, previous=self.stage.value)
            self.stage = Stage.FAILED
            raise
        self.stage = target
        logger.debug("stage", stage=target.value)

    def chunk(self, transactions: t.Sequence[Transaction]) -> t.List[Chunk]:
        with self._stage(Stage.CHUNKED):
            self.chunks = partition(transactions, self.settlement.max_root_size())
        return self.chunks

    def submit_roots(self) -> t.List[bytes]:
        """Build and commit every chunk's root in order, collecting root hashes."""
        with self._stage(Stage.ROOTS_SUBMITTED):
            with tqdm(total=len(self.chunks), unit="root", desc="Roots") as pbar:
                for chunk in self.chunks:
                    root = build_root(chunk, self.producer, chunk.offset, self.token_id)
                    root_hash, gas_used = self.submitter.submit_root(root, chunk.index)
                    self.root_hashes.append(root_hash)
                    self.accumulator.record_root(gas_used)
                    pbar.update(1)
        return self.root_hashes

    def paginate(self) -> t.List[t.List[bytes]]:
        with self._stage(Stage.PAGINATED):
            self.pages = paginate(self.root_hashes, self.max_roots_per_block)
        return self.pages

    def submit_blocks(self) -> None:
        """
        Commit each page as a block, all anchored to the same settlement block
        captured once before the first commitment.
        """
        with self._stage(Stage.BLOCKS_SUBMITTED):
            bond = self.settlement.bond_size()
            anchor_number = max(0, self.settlement.current_block_number() - self.anchor_lag)
            anchor_hash = self.settlement.block_hash(anchor_number)
            logger.info("anchor", block_number=anchor_number, block_hash=anchor_hash.hex(), lag=self.anchor_lag)

            with tqdm(total=len(self.pages), unit="block", desc="Blocks") as pbar:
                for offset, page in enumerate(self.pages):
                    confirmation, gas_used = self.submitter.submit_block(
                        page, self.first_block_index + offset, anchor_number, anchor_hash, bond
                    )
                    self.block_confirmations.append(confirmation)
                    self.accumulator.record_block(gas_used)
                    pbar.update(1)

    def report(self, transactions: int, claims: t.Optional[int] = None) -> BenchmarkReport:
        with self._stage(Stage.REPORTED):
            report = BenchmarkReport.from_accumulator(
                self.accumulator, transactions, root_hashes=self.root_hashes, claims=claims
            )
        return report

    def run(
        self,
        transactions: t.Sequence[Transaction],
        claims_per_transaction: t.Optional[int] = None,
    ) -> BenchmarkReport:
        """
        Run the whole pipeline.

        Args:
            transactions: Ordered workload.
            claims_per_transaction: When set, the report also counts claims
                (outputs) processed.

        Raises:
            ConfigurationError: a transaction cannot fit in a root; nothing submitted.
            SubmissionError: a root or block was rejected.
            TransportError: the settlement node failed.
        """
        self.chunk(transactions)
        self.submit_roots()
        self.paginate()
        self.submit_blocks()
        claims = None
        if claims_per_transaction is not None:
            claims = len(transactions) * claims_per_transaction
        report = self.report(len(transactions), claims)
        logger.info(
            "benchmark_complete",
            transactions=report.transactions,
            roots=report.roots,
            blocks=report.blocks,
            gas=report.cumulative_gas,
        )
        return report
