"""
Benchmark report for the commitment benchmark.
Human-readable console output only; nothing is written to disk.
"""
import typing as t
from dataclasses import dataclass, field

from config import USD_PER_BLOCK_HIGH, USD_PER_BLOCK_LOW
from .accumulator import GasAccumulator


@dataclass(frozen=True)
class BenchmarkReport:
    transactions: int
    roots: int
    blocks: int
    cumulative_gas: int
    gas_per_transaction: float
    settlement_blocks: int
    cost_estimates: t.Dict[int, int] = field(default_factory=dict)  # USD per block -> USD total
    claims: t.Optional[int] = None
    root_hashes: t.Tuple[bytes, ...] = field(default=(), repr=False)

    @classmethod
    def from_accumulator(
        cls,
        accumulator: GasAccumulator,
        transactions: int,
        root_hashes: t.Sequence[bytes] = (),
        claims: t.Optional[int] = None,
        prices: t.Sequence[int] = (USD_PER_BLOCK_HIGH, USD_PER_BLOCK_LOW),
    ) -> "BenchmarkReport":
        return cls(
            transactions=transactions,
            roots=accumulator.roots_committed,
            blocks=accumulator.blocks_committed,
            cumulative_gas=accumulator.total,
            gas_per_transaction=accumulator.gas_per_transaction(transactions),
            settlement_blocks=accumulator.blocks_of_capacity(),
            cost_estimates={price: accumulator.estimate_cost(price) for price in prices},
            claims=claims,
            root_hashes=tuple(root_hashes),
        )

    def lines(self) -> t.List[str]:
        out = []
        if self.claims is not None:
            out.append(f"Claims Processed: {self.claims}")
        out += [
            f"Transactions Submitted: {self.transactions}",
            f"Roots committed: {self.roots}",
            f"Blocks committed: {self.blocks}",
            f"Cumulative gas used: {self.cumulative_gas}",
            f"Gas per transaction: {self.gas_per_transaction:.2f}",
            f"Ethereum blocks used: {self.settlement_blocks}",
        ]
        for price, usd in self.cost_estimates.items():
            out.append(f"@${price} USD per Block: ${usd} USD")
        return out

    def print(self) -> None:
        print("\n" + "=" * 60)
        print("Benchmark Summary")
        print("=" * 60)
        for line in self.lines():
            print(f"  {line}")
