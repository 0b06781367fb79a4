"""End-to-end pipeline tests against the in-memory settlement layer."""

import math

import pytest

from commitbench.driver import BenchmarkDriver, Stage
from commitbench.encoding import Output, build_transfer
from commitbench.errors import ConfigurationError, PipelineStateError, SubmissionError, TransportError


class TestEndToEnd:
    def test_single_chunk(self, producer, transfer, tx_length, make_settlement) -> None:
        settlement = make_settlement(tx_length * 8)
        driver = BenchmarkDriver(settlement, producer.address)
        report = driver.run([transfer] * 8)
        assert len(driver.chunks) == 1
        assert report.roots == 1
        assert len(driver.root_hashes) == 1
        assert report.blocks == 1
        assert settlement.blocks[1] == driver.root_hashes

    def test_25k_transactions(self, producer, transfer, tx_length, make_settlement) -> None:
        k = 100
        settlement = make_settlement(tx_length * k)
        driver = BenchmarkDriver(settlement, producer.address, token_id=1)
        report = driver.run([transfer] * 25_000)

        expected_roots = math.ceil(25_000 / k)
        assert report.roots == expected_roots
        assert len(driver.root_hashes) == expected_roots
        assert report.blocks == math.ceil(expected_roots / 128)
        assert [c.offset for c in driver.chunks] == list(range(0, 25_000, k))
        # Pagination preserves submission order
        assert settlement.blocks[1] == driver.root_hashes[:128]
        assert settlement.blocks[2] == driver.root_hashes[128:]
        assert report.transactions == 25_000

    def test_rejected_root_aborts_run(self, producer, transfer, tx_length, make_settlement) -> None:
        settlement = make_settlement(tx_length * 4)
        settlement.fail_root(2, "malformed")
        driver = BenchmarkDriver(settlement, producer.address)
        with pytest.raises(SubmissionError) as exc:
            driver.run([transfer] * 40)
        assert exc.value.chunk_index == 2
        assert settlement.root_calls == 3
        assert driver.accumulator.roots_committed == 2
        assert settlement.block_calls == 0
        assert driver.stage is Stage.FAILED

    def test_oversized_transaction_before_any_submission(self, producer, transfer, tx_length, make_settlement) -> None:
        settlement = make_settlement(tx_length * 4)
        big = build_transfer(producer, [Output(amount=10 ** 18, token=0, owner=b"\x01" * 20)] * 40)
        driver = BenchmarkDriver(settlement, producer.address)
        with pytest.raises(ConfigurationError):
            driver.run([transfer] * 5 + [big])
        assert settlement.root_calls == 0
        assert settlement.block_calls == 0


class TestBlocks:
    def test_sequential_block_indices(self, producer, transfer, tx_length, make_settlement) -> None:
        settlement = make_settlement(tx_length)
        driver = BenchmarkDriver(settlement, producer.address)
        driver.run([transfer] * 300)
        assert sorted(settlement.blocks) == [1, 2, 3]
        assert [len(settlement.blocks[i]) for i in (1, 2, 3)] == [128, 128, 44]

    def test_anchor_lag(self, producer, transfer, tx_length, make_settlement) -> None:
        settlement = make_settlement(tx_length * 2)
        driver = BenchmarkDriver(settlement, producer.address, anchor_lag=7)
        report = driver.run([transfer] * 40)
        assert report.blocks == 1

    def test_anchor_outside_window_rejected(self, producer, transfer, tx_length, make_settlement) -> None:
        settlement = make_settlement(tx_length * 2, anchor_window=3)
        driver = BenchmarkDriver(settlement, producer.address, anchor_lag=7)
        with pytest.raises(SubmissionError) as exc:
            driver.run([transfer] * 40)
        assert exc.value.block_index == 1

    def test_gas_accumulates_roots_and_blocks(self, producer, transfer, tx_length, make_settlement) -> None:
        settlement = make_settlement(tx_length * 10)
        driver = BenchmarkDriver(settlement, producer.address)
        report = driver.run([transfer] * 50)
        root_gas = 5 * (settlement.ROOT_BASE_GAS + settlement.ROOT_GAS_PER_BYTE * tx_length * 10)
        block_gas = settlement.BLOCK_BASE_GAS + settlement.BLOCK_GAS_PER_ROOT * 5
        assert report.cumulative_gas == root_gas + block_gas


class TestStages:
    def test_out_of_order_stage(self, producer, make_settlement) -> None:
        driver = BenchmarkDriver(make_settlement(1000), producer.address)
        with pytest.raises(PipelineStateError):
            driver.paginate()
        with pytest.raises(PipelineStateError):
            driver.submit_roots()

    def test_blocks_require_pagination(self, producer, transfer, tx_length, make_settlement) -> None:
        driver = BenchmarkDriver(make_settlement(tx_length * 2), producer.address)
        driver.chunk([transfer] * 4)
        driver.submit_roots()
        with pytest.raises(PipelineStateError):
            driver.submit_blocks()

    def test_run_is_single_use(self, producer, transfer, tx_length, make_settlement) -> None:
        driver = BenchmarkDriver(make_settlement(tx_length * 2), producer.address)
        driver.run([transfer] * 4)
        assert driver.stage is Stage.REPORTED
        with pytest.raises(PipelineStateError):
            driver.run([transfer] * 4)


class TestReport:
    def test_lines(self, producer, transfer, tx_length, make_settlement) -> None:
        settlement = make_settlement(tx_length * 4)
        report = BenchmarkDriver(settlement, producer.address).run([transfer] * 8, claims_per_transaction=2)
        lines = report.lines()
        assert lines[0] == "Claims Processed: 16"
        assert "Transactions Submitted: 8" in lines
        assert "Roots committed: 2" in lines
        assert "Blocks committed: 1" in lines
        assert f"Cumulative gas used: {report.cumulative_gas}" in lines
        assert any(line.startswith("@$100 USD per Block") for line in lines)
        assert any(line.startswith("@$50 USD per Block") for line in lines)

    def test_cost_estimates(self, producer, transfer, tx_length, make_settlement) -> None:
        settlement = make_settlement(tx_length)
        report = BenchmarkDriver(settlement, producer.address, per_block_capacity=100_000).run([transfer] * 20)
        assert report.settlement_blocks == report.cumulative_gas // 100_000
        assert report.cost_estimates == {100: report.settlement_blocks * 100, 50: report.settlement_blocks * 50}
        assert report.claims is None


class TestFailedRuns:
    def test_failed_partition_cannot_be_reported(self, producer, transfer, tx_length, make_settlement) -> None:
        settlement = make_settlement(tx_length * 4)
        big = build_transfer(producer, [Output(amount=10 ** 18, token=0, owner=b"\x01" * 20)] * 40)
        driver = BenchmarkDriver(settlement, producer.address)
        with pytest.raises(ConfigurationError):
            driver.chunk([transfer, big])
        assert driver.stage is Stage.FAILED
        for stage in (driver.submit_roots, driver.paginate, driver.submit_blocks):
            with pytest.raises(PipelineStateError):
                stage()
        with pytest.raises(PipelineStateError):
            driver.report(2)
        assert settlement.root_calls == 0

    def test_failed_roots_cannot_be_resubmitted(self, producer, transfer, tx_length, make_settlement) -> None:
        settlement = make_settlement(tx_length)
        settlement.fail_root(2, "malformed")
        driver = BenchmarkDriver(settlement, producer.address)
        driver.chunk([transfer] * 5)
        with pytest.raises(SubmissionError):
            driver.submit_roots()
        with pytest.raises(PipelineStateError):
            driver.submit_roots()
        assert len(driver.root_hashes) == 2
        assert driver.accumulator.roots_committed == 2
        assert settlement.root_calls == 3

    def test_block_rejection_keeps_confirmed_roots(self, producer, transfer, tx_length, make_settlement) -> None:
        settlement = make_settlement(tx_length * 2, anchor_window=3)
        driver = BenchmarkDriver(settlement, producer.address, anchor_lag=7)
        with pytest.raises(SubmissionError) as exc:
            driver.run([transfer] * 40)
        assert exc.value.block_index == 1
        assert driver.stage is Stage.FAILED
        assert len(settlement.roots) == 20
        assert set(driver.root_hashes) <= set(settlement.roots)
        assert settlement.blocks == {}
        assert driver.accumulator.blocks_committed == 0
        with pytest.raises(PipelineStateError):
            driver.report(40)

    def test_anchor_lookup_failure_aborts_blocks(self, producer, transfer, tx_length, make_settlement, monkeypatch) -> None:
        settlement = make_settlement(tx_length * 2)

        def unreachable(number):
            raise TransportError(f"block {number} unavailable")

        monkeypatch.setattr(settlement, "block_hash", unreachable)
        driver = BenchmarkDriver(settlement, producer.address)
        with pytest.raises(TransportError):
            driver.run([transfer] * 8)
        assert driver.stage is Stage.FAILED
        assert len(settlement.roots) == 4
        assert settlement.block_calls == 0
        with pytest.raises(PipelineStateError):
            driver.report(8)
