"""Tests for gas and cost accounting."""

import pytest

from commitbench.accumulator import GasAccumulator


class TestGasAccumulator:
    def test_additive(self) -> None:
        split = GasAccumulator()
        split.add(120_000)
        split.add(80_000)
        single = GasAccumulator()
        single.add(200_000)
        assert split.total == single.total == 200_000

    def test_monotonic(self) -> None:
        acc = GasAccumulator()
        totals = [acc.add(g) for g in (5, 0, 10, 3)]
        assert totals == sorted(totals)
        assert totals[-1] == 18

    def test_negative_gas_rejected(self) -> None:
        acc = GasAccumulator()
        with pytest.raises(ValueError):
            acc.add(-1)

    def test_counts(self) -> None:
        acc = GasAccumulator()
        acc.record_root(100)
        acc.record_root(100)
        acc.record_block(50)
        assert acc.roots_committed == 2
        assert acc.blocks_committed == 1
        assert acc.total == 250

    def test_blocks_of_capacity_floors(self) -> None:
        acc = GasAccumulator(per_block_capacity=8_000_000)
        acc.add(15_999_999)
        assert acc.blocks_of_capacity() == 1
        assert acc.blocks_of_capacity(1_000_000) == 15

    def test_estimate_cost(self) -> None:
        acc = GasAccumulator(per_block_capacity=8_000_000)
        acc.add(24_500_000)
        assert acc.estimate_cost(100) == 300
        assert acc.estimate_cost(50) == 150

    def test_gas_per_transaction(self) -> None:
        acc = GasAccumulator()
        acc.add(1_000)
        assert acc.gas_per_transaction(4) == 250.0
        assert acc.gas_per_transaction(0) == 0.0

    def test_rejects_zero_capacity(self) -> None:
        with pytest.raises(ValueError):
            GasAccumulator(per_block_capacity=0)

    def test_explicit_zero_capacity_is_rejected(self) -> None:
        acc = GasAccumulator(per_block_capacity=8_000_000)
        acc.add(16_000_000)
        with pytest.raises(ValueError):
            acc.blocks_of_capacity(0)
        with pytest.raises(ValueError):
            acc.blocks_of_capacity(-1)
