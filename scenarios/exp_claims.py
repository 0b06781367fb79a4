"""
100k Points Claims experiment.
One-off points dispersal: 100,000 users paid by eight-output transactions.
"""
from config import anchor_lag_for
from config_claims import CLAIM_USERS, CLAIMS_TOKEN_ID, OUTPUTS_PER_DISPERSAL_TX
from commitbench.driver import BenchmarkDriver
from commitbench.encoding import encode
from commitbench.partitioner import estimate_chunk_size
from commitbench.report import BenchmarkReport
from commitbench.workload import claims_workload
from scenarios.environment import configure_logging, settlement_environment


def run(backend=None, rpc_url=None) -> BenchmarkReport:
    print("=== 100k Points Claims ===")
    configure_logging()

    kwargs = {}
    if backend is not None:
        kwargs["backend"] = backend
    if rpc_url is not None:
        kwargs["rpc_url"] = rpc_url

    with settlement_environment(tokens=(CLAIMS_TOKEN_ID,), **kwargs) as env:
        settlement, producer = env.settlement, env.producer

        transactions = claims_workload(
            producer,
            producer.address,
            token_id=CLAIMS_TOKEN_ID,
            users=CLAIM_USERS,
            outputs_per_tx=OUTPUTS_PER_DISPERSAL_TX,
        )
        chunk_size = estimate_chunk_size(settlement.max_root_size(), len(encode(transactions[0])))
        print(f"\n3. {len(transactions)} dispersal transactions, ~{chunk_size} per root")

        driver = BenchmarkDriver(
            settlement,
            producer.address,
            token_id=CLAIMS_TOKEN_ID,
            anchor_lag=anchor_lag_for(settlement.chain_id()),
        )
        report = driver.run(transactions, claims_per_transaction=OUTPUTS_PER_DISPERSAL_TX)

    report.print()
    return report
