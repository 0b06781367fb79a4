"""
Transaction injection for the commitment benchmark.
Local signing with tracked nonces; each submission is awaited before the next.
"""
import time
import typing as t

import requests
import structlog
from web3 import Web3
from web3.exceptions import ContractLogicError, Web3RPCError

from config import GAS_LIMIT
from .errors import SubmissionError, TransportError
from .identity import NonceManager
from .monitor import ReceiptWaiter, TxStatus

logger = structlog.get_logger()


class Confirmation(t.NamedTuple):
    tx_hash: str
    gas_used: int
    block_number: int


class TransactionInjector:
    """
    Sends contract calls from a single operator account.

    No retries: a failed call surfaces to the caller, which decides whether
    to resubmit.
    """

    def __init__(
        self,
        web3: Web3,
        account,
        nonce_manager: t.Optional[NonceManager] = None,
        gas_limit: int = GAS_LIMIT,
        gas_price: t.Optional[int] = None,
        waiter: t.Optional[ReceiptWaiter] = None,
    ) -> None:
        """
        Args:
            web3: Connection to the settlement node.
            account: eth_account LocalAccount that signs every call.
            nonce_manager: Local nonce counter; seeded from the node on first use.
            gas_limit: Gas limit override applied to every call.
            gas_price: Gas price override; the node's current price when None.
            waiter: Confirmation waiter; defaults to one polling `web3`.
        """
        self.web3 = web3
        self.account = account
        self.nonce_manager = nonce_manager or NonceManager()
        self.gas_limit = gas_limit
        self._gas_price = gas_price
        self.waiter = waiter or ReceiptWaiter(web3)
        self._chain_id: t.Optional[int] = None

    @property
    def address(self) -> str:
        return self.account.address

    def overrides(self, value: int = 0) -> t.Dict[str, t.Any]:
        """Transaction overrides shared by every call of the run."""
        if self._gas_price is None:
            self._gas_price = self.web3.eth.gas_price
        if self._chain_id is None:
            self._chain_id = self.web3.eth.chain_id
        if not self.nonce_manager.is_seeded(self.address):
            self.nonce_manager.seed(
                self.address, self.web3.eth.get_transaction_count(self.address, "pending")
            )
        return {
            "from": self.address,
            "gas": self.gas_limit,
            "gasPrice": self._gas_price,
            "nonce": self.nonce_manager.get_and_increment(self.address),
            "chainId": self._chain_id,
            "value": value,
        }

    def send_and_wait(self, contract_function, value: int = 0, label: str = "call") -> Confirmation:
        """
        Build, sign and send a contract call, then block until it is confirmed.

        Raises:
            SubmissionError: the call reverted (at estimation or in the receipt) or
                the node rejected the signed transaction.
            TransportError: the node is unreachable or the receipt never arrived.
        """
        try:
            tx = contract_function.build_transaction(self.overrides(value))
            signed = self.account.sign_transaction(tx)
            submitted_at = time.time()
            tx_hash = Web3.to_hex(self.web3.eth.send_raw_transaction(signed.raw_transaction))
            record = self.waiter.wait(tx_hash, submission_time=submitted_at)
        except (ContractLogicError, Web3RPCError) as e:
            self.nonce_manager.reset(self.address)
            raise SubmissionError(f"{label} rejected", reason=str(e)) from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"{label}: settlement node unreachable: {e}") from e

        if record.status is TxStatus.FAILED:
            raise SubmissionError(f"{label} failed in block {record.block_number}", reason=f"tx {tx_hash}")
        logger.debug(label, tx_hash=tx_hash, gas_used=record.gas_used, latency=record.latency)
        return Confirmation(tx_hash=tx_hash, gas_used=record.gas_used, block_number=record.block_number)
