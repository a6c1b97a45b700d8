"""
The operations the orchestrators need from a chain client and artifact factory.

Implementations block inside `wait_confirmed` until the transaction is confirmed and
raise `TransactionFailed` when it is rejected, reverted or never confirmed.
"""

from abc import ABC, abstractmethod
from typing import Any, NamedTuple, Optional

from eth_typing import ChecksumAddress


class Receipt(NamedTuple):
    txn_hash: str
    block_number: int
    sender: ChecksumAddress


class PendingTransaction(ABC):
    @abstractmethod
    def wait_confirmed(self) -> Receipt:
        raise NotImplementedError


class ContractHandle(ABC):
    """A contract type bound to a signer, either being deployed or attached at an address."""

    def __init__(self, contract_type: str, address: Optional[ChecksumAddress] = None):
        self.contract_type = contract_type
        self.address = address
        self.receipt: Optional[Receipt] = None  # of the deployment, if deployed here

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.contract_type})"

    @abstractmethod
    def wait_confirmed(self) -> ChecksumAddress:
        """Blocks until the contract is deployed and returns its address."""
        raise NotImplementedError

    @abstractmethod
    def call(self, method: str, *args) -> PendingTransaction:
        raise NotImplementedError

    @abstractmethod
    def read(self, method: str, *args) -> Any:
        raise NotImplementedError


class ChainClient(ABC):
    @property
    @abstractmethod
    def sender(self) -> ChecksumAddress:
        raise NotImplementedError

    @property
    @abstractmethod
    def chain_id(self) -> int:
        raise NotImplementedError

    @property
    def network_name(self) -> Optional[str]:
        return None

    def set_autosign(self, autosign: bool) -> None:
        """Lets the signer sign without prompting, where it would otherwise ask."""
        pass

    @abstractmethod
    def deploy(self, contract_type: str) -> ContractHandle:
        raise NotImplementedError

    @abstractmethod
    def attach(self, contract_type: str, address: str) -> ContractHandle:
        raise NotImplementedError

    @abstractmethod
    def implementation_of(self, proxy_address: str) -> ChecksumAddress:
        """Returns the implementation stored in the EIP1967 slot of a proxy."""
        raise NotImplementedError
