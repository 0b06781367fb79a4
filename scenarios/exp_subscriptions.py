"""
25k Subscription Transactions experiment.
Commit 25,000 two-output transfers of a deposited ERC20 and project the settlement cost.
"""
from config import anchor_lag_for
from config_subscriptions import (
    DEPOSIT_AMOUNT,
    ERC20_ARTIFACT_PATH,
    ERC20_TOTAL_SUPPLY,
    SUBSCRIPTION_TOKEN_ID,
    SUBSCRIPTION_TRANSACTIONS,
)
from commitbench.driver import BenchmarkDriver
from commitbench.encoding import encode
from commitbench.partitioner import estimate_chunk_size
from commitbench.report import BenchmarkReport
from commitbench.workload import subscription_workload
from scenarios.environment import configure_logging, settlement_environment


def run(backend=None, rpc_url=None) -> BenchmarkReport:
    print("=== 25k Subscription Transactions ===")
    configure_logging()

    kwargs = {}
    if backend is not None:
        kwargs["backend"] = backend
    if rpc_url is not None:
        kwargs["rpc_url"] = rpc_url

    with settlement_environment(tokens=(0, SUBSCRIPTION_TOKEN_ID), **kwargs) as env:
        settlement, producer = env.settlement, env.producer

        # Token and owner registration
        if env.deployer is not None:
            print("\n3. Depositing ERC20 through the funnel...")
            erc20 = env.deployer.deploy(
                env.deployer.load_artifact(ERC20_ARTIFACT_PATH),
                [producer.address, ERC20_TOTAL_SUPPLY],
            )
            settlement.deposit_token(erc20, producer.address, DEPOSIT_AMOUNT)
        owner_id = settlement.register_address(producer.address)
        print(f"   Producer {producer.address} registered as owner id {owner_id}")

        transactions = subscription_workload(producer, owner_id, SUBSCRIPTION_TOKEN_ID, SUBSCRIPTION_TRANSACTIONS)
        chunk_size = estimate_chunk_size(settlement.max_root_size(), len(encode(transactions[0])))
        print(f"\n4. Committing roots of ~{chunk_size} transactions, this might take up to 10 minutes..")

        driver = BenchmarkDriver(
            settlement,
            producer.address,
            token_id=SUBSCRIPTION_TOKEN_ID,
            anchor_lag=anchor_lag_for(settlement.chain_id()),
        )
        report = driver.run(transactions)

    report.print()
    return report
