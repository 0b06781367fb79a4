"""Shared fixtures: a deterministic producer account, transfers and an in-memory settlement layer."""

import pytest
from eth_account import Account

from commitbench.encoding import Output, build_transfer, encode
from commitbench.settlement import InMemorySettlementLayer

PRODUCER_KEY = "0x" + "11" * 32
BOND = 10 ** 16


@pytest.fixture
def producer():
    return Account.from_key(PRODUCER_KEY)


@pytest.fixture
def transfer(producer):
    return build_transfer(producer, [
        Output(amount=10 ** 18, token=0, owner=b"\x01"),
        Output(amount=5 * 10 ** 18, token=0, owner=b"\x01"),
    ])


@pytest.fixture
def tx_length(transfer) -> int:
    return len(encode(transfer))


@pytest.fixture
def make_transfer(producer):
    """Transfers of varying size: `n_outputs` outputs of `amount` to owner id 1."""
    def _make(n_outputs: int = 1, amount: int = 1):
        return build_transfer(producer, [
            Output(amount=amount + i, token=0, owner=b"\x01") for i in range(n_outputs)
        ])
    return _make


@pytest.fixture
def make_settlement(producer):
    def _make(max_root_size: int, **kwargs) -> InMemorySettlementLayer:
        kwargs.setdefault("tokens", (0, 1))
        return InMemorySettlementLayer(max_root_size, BOND, producer.address, **kwargs)
    return _make
