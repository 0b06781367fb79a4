"""
Gas & cost accounting for the commitment benchmark.
"""
import typing as t

from config import SETTLEMENT_BLOCK_GAS


class GasAccumulator:
    """
    Running totals for one benchmark run: gas consumed, roots and blocks committed.

    Owned by the driver and passed explicitly; nothing is persisted.
    """

    def __init__(self, per_block_capacity: int = SETTLEMENT_BLOCK_GAS) -> None:
        if per_block_capacity <= 0:
            raise ValueError("per_block_capacity must be positive")
        self.per_block_capacity = per_block_capacity
        self.total = 0
        self.roots_committed = 0
        self.blocks_committed = 0

    def add(self, gas_used: int) -> int:
        """Add gas to the running total and return the new total."""
        if gas_used < 0:
            raise ValueError(f"Gas used cannot be negative: {gas_used}")
        self.total += gas_used
        return self.total

    def record_root(self, gas_used: int) -> None:
        self.add(gas_used)
        self.roots_committed += 1

    def record_block(self, gas_used: int) -> None:
        self.add(gas_used)
        self.blocks_committed += 1

    def blocks_of_capacity(self, per_block_capacity: t.Optional[int] = None) -> int:
        """Whole settlement blocks' worth of gas consumed (floor)."""
        if per_block_capacity is None:
            per_block_capacity = self.per_block_capacity
        if per_block_capacity <= 0:
            raise ValueError("per_block_capacity must be positive")
        return self.total // per_block_capacity

    def estimate_cost(self, usd_per_capacity_unit: int) -> int:
        """USD cost at `usd_per_capacity_unit` per settlement block consumed."""
        return self.blocks_of_capacity() * usd_per_capacity_unit

    def gas_per_transaction(self, transactions: int) -> float:
        if transactions <= 0:
            return 0.0
        return self.total / transactions
