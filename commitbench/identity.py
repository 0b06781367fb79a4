"""
Identity management for the commitment benchmark.
Deterministic operator accounts & local nonce tracking.
"""
import typing as t

from eth_account import Account

Account.enable_unaudited_hdwallet_features()


class NonceManager:
    """
    Local nonce counter per address.

    One instance per run; seeded from the node's pending transaction count
    the first time an address is used.
    """

    def __init__(self) -> None:
        self._nonces: t.Dict[str, int] = {}

    def is_seeded(self, address: str) -> bool:
        return address in self._nonces

    def seed(self, address: str, nonce: int) -> None:
        self._nonces[address] = nonce

    def get_and_increment(self, address: str) -> int:
        """
        Return the current nonce for address, then increment it.
        """
        if address not in self._nonces:
            raise KeyError(f"Nonce for {address} was never seeded")
        nonce = self._nonces[address]
        self._nonces[address] = nonce + 1
        return nonce

    def reset(self, address: t.Optional[str] = None) -> None:
        """
        Forget nonce(s) so the next use re-reads the node.
        """
        if address is None:
            self._nonces.clear()
        else:
            self._nonces.pop(address, None)


class UserManager:
    """
    Operator accounts, derived from a mnemonic or given as explicit private keys.
    """

    def __init__(self, mnemonic: t.Optional[str] = None, keys: t.Sequence[str] = ()) -> None:
        if mnemonic is None and not keys:
            raise ValueError("Either a mnemonic or operator keys are required")
        self.mnemonic = mnemonic
        self._keyed = [Account.from_key(k) for k in keys]
        self.nonce_manager = NonceManager()

    @classmethod
    def from_keys(cls, keys: t.Sequence[str]) -> "UserManager":
        return cls(keys=keys)

    def get_user(self, index: int):
        """
        Explicit keys take precedence; otherwise derive m/44'/60'/0'/0/{index}.
        """
        if self._keyed:
            return self._keyed[index]
        path = f"m/44'/60'/0'/0/{index}"
        return Account.from_mnemonic(self.mnemonic, account_path=path)
