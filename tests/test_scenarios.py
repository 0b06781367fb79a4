"""End-to-end runs of both benchmarks against the in-memory settlement layer."""

import math

import pytest

import config
from config import MAX_ROOTS_PER_BLOCK, anchor_lag_for
from config_claims import CLAIM_USERS
from config_subscriptions import SUBSCRIPTION_TRANSACTIONS
from scenarios import exp_claims, exp_subscriptions


class TestAnchorLag:
    @pytest.mark.parametrize("chain_id", config.DEV_CHAIN_IDS)
    def test_dev_chains_anchor_at_tip(self, chain_id) -> None:
        assert anchor_lag_for(chain_id) == 0

    def test_public_networks_step_back(self) -> None:
        assert anchor_lag_for(1) == config.ANCHOR_BLOCK_LAG == 7


class TestScenarios:
    def test_claims(self, capsys) -> None:
        report = exp_claims.run(backend="memory")
        assert report.claims == CLAIM_USERS
        assert report.transactions == CLAIM_USERS // 8
        assert report.blocks == math.ceil(report.roots / MAX_ROOTS_PER_BLOCK) == 1
        assert "Claims Processed: 100000" in capsys.readouterr().out

    def test_subscriptions(self, capsys) -> None:
        report = exp_subscriptions.run(backend="memory")
        assert report.transactions == SUBSCRIPTION_TRANSACTIONS
        assert report.claims is None
        assert report.blocks == math.ceil(report.roots / MAX_ROOTS_PER_BLOCK)
        assert report.cumulative_gas > 0
        assert "Transactions Submitted: 25000" in capsys.readouterr().out
