"""
Synthetic workloads for the commitment benchmark.
One signed transfer, repeated to the requested volume.
"""
import typing as t

from web3 import Web3

from .encoding import Output, Transaction, build_transfer


def owner_id_bytes(owner_id: int) -> bytes:
    """Registry ids are encoded in the fewest bytes that hold them."""
    return owner_id.to_bytes(max(1, (owner_id.bit_length() + 7) // 8), "big")


def repeat(transaction: Transaction, count: int) -> t.List[Transaction]:
    return [transaction] * count


def subscription_workload(
    signer,
    owner_id: int,
    token_id: int,
    count: int = 25_000,
) -> t.List[Transaction]:
    """
    Subscription payments: two transfers (1.0 and 5.0 tokens) to a registered owner id.
    """
    owner = owner_id_bytes(owner_id)
    tx = build_transfer(signer, [
        Output(amount=Web3.to_wei(1, "ether"), token=token_id, owner=owner),
        Output(amount=Web3.to_wei(5, "ether"), token=token_id, owner=owner),
    ])
    return repeat(tx, count)


def claims_workload(
    signer,
    owner: str,
    token_id: int = 0,
    users: int = 100_000,
    outputs_per_tx: int = 8,
) -> t.List[Transaction]:
    """
    One-off points claims: each transaction disperses 5.0 tokens to
    `outputs_per_tx` users, so `users / outputs_per_tx` transactions.
    """
    if users % outputs_per_tx:
        raise ValueError(f"{users} users do not divide into {outputs_per_tx} outputs per transaction")
    owner_bytes = bytes(Web3.to_bytes(hexstr=owner))
    tx = build_transfer(signer, [
        Output(amount=Web3.to_wei(5, "ether"), token=token_id, owner=owner_bytes)
        for _ in range(outputs_per_tx)
    ])
    return repeat(tx, users // outputs_per_tx)
