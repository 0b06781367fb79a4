"""Tests for the synthetic workloads and operator identities."""

import pytest
from eth_account import Account
from web3 import Web3

from config import MNEMONIC
from commitbench.encoding import encode
from commitbench.identity import NonceManager, UserManager
from commitbench.workload import claims_workload, owner_id_bytes, subscription_workload
from conftest import PRODUCER_KEY


class TestWorkloads:
    def test_owner_id_bytes(self) -> None:
        assert owner_id_bytes(0) == b"\x00"
        assert owner_id_bytes(3) == b"\x03"
        assert owner_id_bytes(256) == b"\x01\x00"

    def test_subscription_outputs(self, producer) -> None:
        txs = subscription_workload(producer, owner_id=3, token_id=1, count=10)
        assert len(txs) == 10
        outputs = txs[0].outputs
        assert [o.amount for o in outputs] == [Web3.to_wei(1, "ether"), Web3.to_wei(5, "ether")]
        assert all(o.token == 1 and o.owner == b"\x03" for o in outputs)

    def test_repeated_transactions_encode_identically(self, producer) -> None:
        txs = subscription_workload(producer, owner_id=1, token_id=1, count=3)
        assert encode(txs[0]) == encode(txs[2])

    def test_claims_volume(self, producer) -> None:
        txs = claims_workload(producer, producer.address)
        assert len(txs) == 12_500
        assert len(txs[0].outputs) == 8
        assert txs[0].outputs[0].owner == bytes.fromhex(producer.address[2:])

    def test_claims_must_divide_evenly(self, producer) -> None:
        with pytest.raises(ValueError, match="divide"):
            claims_workload(producer, producer.address, users=10, outputs_per_tx=8)


class TestNonceManager:
    def test_sequence(self) -> None:
        nonces = NonceManager()
        nonces.seed("0xa", 4)
        assert nonces.get_and_increment("0xa") == 4
        assert nonces.get_and_increment("0xa") == 5
        assert nonces.get_and_increment("0xa") == 6

    def test_unseeded(self) -> None:
        with pytest.raises(KeyError):
            NonceManager().get_and_increment("0xa")

    def test_reset(self) -> None:
        nonces = NonceManager()
        nonces.seed("0xa", 1)
        nonces.seed("0xb", 1)
        nonces.reset("0xa")
        assert not nonces.is_seeded("0xa")
        assert nonces.is_seeded("0xb")
        nonces.reset()
        assert not nonces.is_seeded("0xb")

    def test_instances_are_independent(self) -> None:
        first, second = NonceManager(), NonceManager()
        first.seed("0xa", 9)
        assert not second.is_seeded("0xa")


class TestUserManager:
    def test_explicit_keys(self) -> None:
        users = UserManager.from_keys([PRODUCER_KEY])
        assert users.get_user(0).address == Account.from_key(PRODUCER_KEY).address

    def test_mnemonic_derivation(self) -> None:
        users = UserManager(MNEMONIC)
        assert users.get_user(0).address == users.get_user(0).address
        assert users.get_user(0).address != users.get_user(1).address

    def test_requires_a_source(self) -> None:
        with pytest.raises(ValueError):
            UserManager()
