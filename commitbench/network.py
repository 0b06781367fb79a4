"""
Network management for the commitment benchmark.
Local development chain lifecycle & Web3 connection management.
"""
import os
import shutil
import socket
import subprocess
import sys
import time
import typing as t

import requests
import structlog
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
from web3 import Web3
from web3.providers import HTTPProvider

from config import (
    ACCOUNT_BALANCE_ETH,
    BLOCK_TIME,
    LOCAL_NODE_CMD,
    LOCAL_NODE_DATA_DIR,
    LOCAL_NODE_PORT,
    MNEMONIC,
    NODE_BLOCK_GAS_LIMIT,
    NUM_ACCOUNTS,
)
from .errors import TransportError

logger = structlog.get_logger()


class GanacheManager:
    """
    Manages a local development chain process for runs without a remote RPC.
    """

    def __init__(self, port: int = LOCAL_NODE_PORT, command: str = LOCAL_NODE_CMD) -> None:
        self.port = port
        if sys.platform == "win32" and not command.endswith(".cmd"):
            command = f"{command}.cmd"
        self.command = command
        self.process: t.Optional[subprocess.Popen] = None
        self._log_file = None

    @property
    def rpc_url(self) -> str:
        return f"http://127.0.0.1:{self.port}"

    def _is_port_available(self) -> bool:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            try:
                s.bind(("127.0.0.1", self.port))
                return True
            except OSError:
                return False

    def build_command(self, db_path: str) -> t.List[str]:
        cmd = [
            self.command,
            f"--server.port={self.port}",
            "--server.host=127.0.0.1",
            f"--wallet.mnemonic={MNEMONIC}",
            f"--wallet.totalAccounts={NUM_ACCOUNTS}",
            f"--wallet.defaultBalance={ACCOUNT_BALANCE_ETH}",
            f"--miner.blockGasLimit={NODE_BLOCK_GAS_LIMIT}",
            "--chain.allowUnlimitedContractSize",
            f"--database.dbPath={db_path}",
        ]
        if BLOCK_TIME:
            cmd.append(f"--miner.blockTime={BLOCK_TIME}")
        return cmd

    def start(self) -> str:
        """
        Launch the node and return its RPC URL.

        Raises:
            TransportError: the port is taken or the process died on startup.
        """
        if not self._is_port_available():
            raise TransportError(f"Port {self.port} for the local node is already in use.")

        os.makedirs("logs", exist_ok=True)
        log_path = os.path.join("logs", f"node_{self.port}.log")
        self._log_file = open(log_path, "w", encoding="utf-8")

        # Fresh state for every run
        db_path = os.path.join(LOCAL_NODE_DATA_DIR, str(self.port))
        if os.path.exists(db_path):
            shutil.rmtree(db_path)
        os.makedirs(db_path, exist_ok=True)

        cmd = self.build_command(db_path)
        logger.info("node_starting", cmd=" ".join(cmd))
        try:
            self.process = subprocess.Popen(cmd, stdout=self._log_file, stderr=subprocess.STDOUT, text=True)
        except FileNotFoundError as e:
            self._log_file.close()
            raise TransportError(f"Local node executable '{self.command}' not found in PATH") from e

        # Wait for process to start and check if it crashed
        time.sleep(2)
        if self.process.poll() is not None:
            self._log_file.close()
            with open(log_path, "r", encoding="utf-8") as f:
                error_log = f.read()
            raise TransportError(f"Local node failed to start! Logs:\n{error_log}")

        logger.info("node_started", port=self.port, pid=self.process.pid)
        return self.rpc_url

    def stop(self) -> None:
        """
        Terminates the node process gracefully.
        """
        if self.process is not None and self.process.poll() is None:
            self.process.terminate()
            self.process.wait()
            logger.info("node_stopped", port=self.port)
        self.process = None
        if self._log_file is not None:
            self._log_file.close()
            self._log_file = None


class ConnectionManager:
    """
    Web3 connection to one settlement node over a pooled, retrying HTTP session.
    """

    def __init__(self, rpc_url: str, timeout: int = 120) -> None:
        self.rpc_url = rpc_url
        self.timeout = timeout
        self._session = self._create_session()
        self._web3: t.Optional[Web3] = None

    def _create_session(self) -> requests.Session:
        """
        HTTP session with connection pooling and retries on transient server errors.
        """
        session = requests.Session()
        adapter = HTTPAdapter(
            pool_connections=10,
            pool_maxsize=10,
            max_retries=Retry(
                total=5,
                backoff_factor=1.0,
                status_forcelist=[500, 502, 503, 504],
                allowed_methods=None,  # JSON-RPC is POST
            ),
        )
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        return session

    def get_web3(self) -> Web3:
        """
        Returns the cached Web3 instance bound to the shared session.
        """
        if self._web3 is None:
            provider = HTTPProvider(
                self.rpc_url,
                session=self._session,
                request_kwargs={"timeout": self.timeout},
            )
            self._web3 = Web3(provider)
        return self._web3

    def wait_until_ready(self, attempts: int = 30, interval: float = 1.0) -> Web3:
        """
        Block until the node answers.

        Raises:
            TransportError: still unreachable after `attempts` tries.
        """
        web3 = self.get_web3()
        for _ in range(attempts):
            try:
                if web3.is_connected():
                    logger.info("node_ready", rpc_url=self.rpc_url, chain_id=web3.eth.chain_id)
                    return web3
            except requests.exceptions.RequestException:
                pass
            time.sleep(interval)
        raise TransportError(f"Settlement node {self.rpc_url} unreachable after {attempts} attempts")
