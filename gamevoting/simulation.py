"""
An in-memory chain for dry runs and tests.

Contracts live in a `Ledger` shared by every `SimulatedChain` connected to it, so
several signers can act on the same admin. Each GameVotingAdmin deployed here is
backed by a `ProxyAdmin` state machine; reverts of that machine surface as
`TransactionFailed`, as they would from a real node.
"""

from collections import defaultdict
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Tuple

from eth_typing import ChecksumAddress
from eth_utils import encode_hex, keccak, to_canonical_address, to_checksum_address

from gamevoting.admin import ProxyAdmin
from gamevoting.chain import ChainClient, ContractHandle, PendingTransaction, Receipt
from gamevoting.constants import (
    ADMIN_CONTRACT,
    CREATE_PROXY_METHOD,
    IMPLEMENTATION_CONTRACT,
    OWNER_GETTER,
    PROXY_CONTRACT,
    PROXY_GETTER,
    UPGRADE_METHOD,
)
from gamevoting.errors import ConfigurationError, ProxyAdminError, TransactionFailed

DEFAULT_SENDER = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
DEFAULT_CHAIN_ID = 1337


class SimulatedContract(NamedTuple):
    contract_type: str
    address: ChecksumAddress
    deployer: ChecksumAddress
    admin: Optional[ProxyAdmin] = None


class SimulatedTransaction(NamedTuple):
    txn_hash: str
    sender: ChecksumAddress
    contract_type: str
    method: Optional[str]  # None for deployments
    args: Tuple
    success: bool


class Ledger:
    def __init__(self, contract_types: Iterable[str] = (IMPLEMENTATION_CONTRACT, ADMIN_CONTRACT)):
        self.contract_types = set(contract_types)
        self.contracts: Dict[ChecksumAddress, SimulatedContract] = dict()
        self.transactions: List[SimulatedTransaction] = list()
        self.block_number = 0
        self._nonces = defaultdict(int)
        self._rejections: List[Tuple[str, Optional[str], str]] = list()

    def reject(self, contract_type: str, method: Optional[str] = None, reason: str = "") -> None:
        """Makes the next matching deployment (method=None), call or view fail."""
        reason = reason or f"{contract_type}.{method or 'constructor'} rejected"
        self._rejections.append((contract_type, method, reason))

    def admin_at(self, address: str) -> ProxyAdmin:
        contract = self.contracts.get(to_checksum_address(address))
        if contract is None or contract.admin is None:
            raise ValueError(f"No {ADMIN_CONTRACT} at {address}")
        return contract.admin

    def contracts_of_type(self, contract_type: str) -> List[SimulatedContract]:
        return [c for c in self.contracts.values() if c.contract_type == contract_type]

    def next_address(self, creator: str, commit: bool = True) -> ChecksumAddress:
        """CREATE-style address derived from the creator and its nonce."""
        nonce = self._nonces[creator]
        if commit:
            self._nonces[creator] += 1
        digest = keccak(to_canonical_address(creator) + nonce.to_bytes(32, "big"))
        return to_checksum_address(digest[12:])

    def _pop_rejection(self, contract_type: str, method: Optional[str]) -> Optional[str]:
        for index, (rejected_type, rejected_method, reason) in enumerate(self._rejections):
            if rejected_type == contract_type and rejected_method == method:
                del self._rejections[index]
                return reason
        return None

    def _record(self, sender, contract_type, method, args, success) -> Receipt:
        txn_hash = encode_hex(
            keccak(text=f"{sender}:{len(self.transactions)}:{contract_type}:{method}")
        )
        self.transactions.append(
            SimulatedTransaction(
                txn_hash=txn_hash,
                sender=sender,
                contract_type=contract_type,
                method=method,
                args=tuple(args),
                success=success,
            )
        )
        self.block_number += 1
        return Receipt(txn_hash=txn_hash, block_number=self.block_number, sender=sender)

    def _is_implementation(self, address: ChecksumAddress) -> bool:
        contract = self.contracts.get(address)
        return contract is not None and contract.contract_type not in (
            ADMIN_CONTRACT,
            PROXY_CONTRACT,
        )


class SimulatedTransactionResult(PendingTransaction):
    def __init__(self, receipt: Receipt, error: Optional[Exception] = None):
        self.receipt = receipt
        self.error = error

    def wait_confirmed(self) -> Receipt:
        if self.error is not None:
            raise self.error
        return self.receipt


class SimulatedContractHandle(ContractHandle):
    def __init__(
        self,
        chain: "SimulatedChain",
        contract_type: str,
        address: Optional[ChecksumAddress] = None,
        error: Optional[Exception] = None,
    ):
        super().__init__(contract_type, address=address)
        self._chain = chain
        self._error = error

    def wait_confirmed(self) -> ChecksumAddress:
        if self._error is not None:
            raise self._error
        return self.address

    def _contract(self) -> SimulatedContract:
        if self.address is None:
            raise TransactionFailed(f"{self.contract_type} was never deployed")
        return self._chain.ledger.contracts[self.address]

    def call(self, method: str, *args) -> PendingTransaction:
        contract = self._contract()
        ledger, sender = self._chain.ledger, self._chain.sender
        if contract.admin is None or method not in (CREATE_PROXY_METHOD, UPGRADE_METHOD):
            raise AttributeError(f"{self.contract_type} has no method '{method}'")

        reason = ledger._pop_rejection(self.contract_type, method)
        if reason:
            receipt = ledger._record(sender, self.contract_type, method, args, success=False)
            return SimulatedTransactionResult(receipt, TransactionFailed(reason))

        try:
            if method == CREATE_PROXY_METHOD:
                (implementation,) = args
                proxy = ledger.next_address(contract.address, commit=False)
                contract.admin.create(implementation, proxy=proxy, sender=sender)
                ledger.next_address(contract.address)
                ledger.contracts[proxy] = SimulatedContract(
                    contract_type=PROXY_CONTRACT, address=proxy, deployer=contract.address
                )
            else:
                (implementation,) = args
                contract.admin.upgrade(implementation, sender=sender)
        except (ProxyAdminError, ValueError) as e:
            receipt = ledger._record(sender, self.contract_type, method, args, success=False)
            error = TransactionFailed(f"{self.contract_type}.{method} reverted: {e}")
            error.__cause__ = e
            return SimulatedTransactionResult(receipt, error)

        receipt = ledger._record(sender, self.contract_type, method, args, success=True)
        return SimulatedTransactionResult(receipt)

    def read(self, method: str, *args) -> Any:
        contract = self._contract()
        reason = self._chain.ledger._pop_rejection(self.contract_type, method)
        if reason:
            raise TransactionFailed(reason)
        if contract.admin is not None:
            if method == PROXY_GETTER:
                return contract.admin.proxy
            if method == OWNER_GETTER:
                return contract.admin.owner
        raise AttributeError(f"{self.contract_type} has no view '{method}'")


class SimulatedChain(ChainClient):
    def __init__(
        self,
        sender: str = DEFAULT_SENDER,
        chain_id: int = DEFAULT_CHAIN_ID,
        ledger: Optional[Ledger] = None,
    ):
        self._sender = to_checksum_address(sender)
        self._chain_id = chain_id
        self.ledger = ledger or Ledger()
        self.autosign = False

    def connect(self, sender: str) -> "SimulatedChain":
        """Returns a client for another signer on the same ledger."""
        return SimulatedChain(sender=sender, chain_id=self._chain_id, ledger=self.ledger)

    @property
    def sender(self) -> ChecksumAddress:
        return self._sender

    @property
    def chain_id(self) -> int:
        return self._chain_id

    @property
    def network_name(self) -> str:
        return "simulated"

    def set_autosign(self, autosign: bool) -> None:
        self.autosign = autosign

    def deploy(self, contract_type: str) -> SimulatedContractHandle:
        ledger = self.ledger
        if contract_type not in ledger.contract_types:
            raise ValueError(f"No contract found with name '{contract_type}'.")

        reason = ledger._pop_rejection(contract_type, None)
        if reason:
            ledger._record(self._sender, contract_type, None, (), success=False)
            return SimulatedContractHandle(self, contract_type, error=TransactionFailed(reason))

        address = ledger.next_address(self._sender)
        admin = None
        if contract_type == ADMIN_CONTRACT:
            admin = ProxyAdmin(
                address=address, owner=self._sender, is_implementation=ledger._is_implementation
            )
        ledger.contracts[address] = SimulatedContract(
            contract_type=contract_type, address=address, deployer=self._sender, admin=admin
        )
        handle = SimulatedContractHandle(self, contract_type, address=address)
        handle.receipt = ledger._record(self._sender, contract_type, None, (), success=True)
        return handle

    def attach(self, contract_type: str, address: str) -> SimulatedContractHandle:
        address = to_checksum_address(address)
        contract = self.ledger.contracts.get(address)
        if contract is None:
            raise ConfigurationError(f"No contract deployed at {address}")
        if contract.contract_type != contract_type:
            raise ConfigurationError(
                f"Contract at {address} is a {contract.contract_type}, not a {contract_type}"
            )
        return SimulatedContractHandle(self, contract_type, address=address)

    def implementation_of(self, proxy_address: str) -> ChecksumAddress:
        proxy_address = to_checksum_address(proxy_address)
        proxy = self.ledger.contracts.get(proxy_address)
        if proxy is None or proxy.contract_type != PROXY_CONTRACT:
            raise ValueError(
                f"Implementation slot for contract at {proxy_address} is empty. "
                "Are you sure this is an EIP1967-compatible proxy?"
            )
        return self.ledger.admin_at(proxy.deployer).implementation
