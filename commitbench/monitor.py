"""
Confirmation tracking for the commitment benchmark.
Polls a settlement node until a submitted transaction is mined or times out.
"""
import time
import typing as t
from dataclasses import dataclass
from enum import Enum

import structlog
from web3 import Web3
from web3.exceptions import TransactionNotFound
from web3.types import TxReceipt

from config import CONFIRMATION_TIMEOUT, POLL_INTERVAL
from .errors import TransportError

logger = structlog.get_logger()


class TxStatus(Enum):
    PENDING = "pending"
    MINED = "mined"
    FAILED = "failed"


@dataclass
class SubmissionRecord:
    tx_hash: str
    start_time: float
    end_time: t.Optional[float] = None
    status: TxStatus = TxStatus.PENDING
    block_number: t.Optional[int] = None
    gas_used: t.Optional[int] = None

    @property
    def latency(self) -> t.Optional[float]:
        if self.end_time is None:
            return None
        return self.end_time - self.start_time


class ReceiptWaiter:
    """
    Blocks until a transaction has one confirmation.

    Usage:
        waiter = ReceiptWaiter(web3)
        record = waiter.wait("0xabc...")
    """

    def __init__(
        self,
        web3: Web3,
        timeout: float = CONFIRMATION_TIMEOUT,
        interval: float = POLL_INTERVAL,
    ) -> None:
        self.web3 = web3
        self.timeout = timeout
        self.interval = interval

    def wait(self, tx_hash: str, submission_time: t.Optional[float] = None) -> SubmissionRecord:
        """
        Poll until `tx_hash` is mined or failed.

        Raises:
            TransportError: no receipt within `timeout` seconds.
        """
        record = SubmissionRecord(tx_hash=tx_hash, start_time=submission_time or time.time())
        deadline = record.start_time + self.timeout
        last_debug = 0.0
        while True:
            status, receipt = self._check_transaction(tx_hash)
            if status is not TxStatus.PENDING:
                record.status = status
                record.end_time = time.time()
                record.block_number = receipt.get("blockNumber")
                record.gas_used = receipt.get("gasUsed")
                return record

            now = time.time()
            if now >= deadline:
                raise TransportError(f"Transaction {tx_hash} not mined within {self.timeout:.0f}s")
            if now - last_debug >= 5.0:
                logger.debug("awaiting_confirmation", tx_hash=tx_hash[:10])
                last_debug = now
            time.sleep(self.interval)

    def _check_transaction(self, tx_hash: str) -> t.Tuple[TxStatus, t.Optional[TxReceipt]]:
        """
        Returns:
            (status, receipt) where receipt is non-None only for mined/failed txs.
        """
        try:
            receipt = self.web3.eth.get_transaction_receipt(tx_hash)
        except TransactionNotFound:
            return TxStatus.PENDING, None
        if receipt is None:
            return TxStatus.PENDING, None
        if receipt.get("status") == 1:
            return TxStatus.MINED, receipt
        return TxStatus.FAILED, receipt
