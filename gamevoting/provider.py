"""Chain client backed by the ape project, accounts and provider."""

from typing import Any, Optional, Union

from ape import accounts, chain, networks, project
from ape.api import AccountAPI, ReceiptAPI
from ape.contracts import ContractContainer, ContractInstance
from ape.exceptions import ApeException
from ape.utils import EMPTY_BYTES32
from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address

from gamevoting.chain import ChainClient, ContractHandle, PendingTransaction, Receipt
from gamevoting.config import DeploymentConfig, UpgradeConfig
from gamevoting.constants import EIP1967_IMPLEMENTATION_SLOT, LOCAL_NETWORKS
from gamevoting.errors import ConfigurationError, TransactionFailed


def is_local_network() -> bool:
    return networks.provider.network.name in LOCAL_NETWORKS


def get_account(alias: Optional[str]) -> AccountAPI:
    if is_local_network():
        return accounts.test_accounts[0]
    if not alias:
        raise ConfigurationError("Must specify account alias when deploying to live networks")
    try:
        return accounts.load(alias)
    except (ApeException, IndexError, KeyError) as e:
        raise ConfigurationError(f"Unable to load account '{alias}': {e}") from e


def get_contract_container(contract: str) -> ContractContainer:
    try:
        return getattr(project, contract)
    except AttributeError:
        raise ValueError(f"No contract found with name '{contract}'.")


def _to_receipt(receipt: ReceiptAPI) -> Receipt:
    return Receipt(
        txn_hash=receipt.txn_hash,
        block_number=receipt.block_number,
        sender=to_checksum_address(receipt.sender),
    )


class ApeTransaction(PendingTransaction):
    def __init__(self, receipt: ReceiptAPI):
        self.receipt = receipt

    def wait_confirmed(self) -> Receipt:
        try:
            self.receipt.await_confirmations()
            self.receipt.raise_for_status()
        except ApeException as e:
            raise TransactionFailed(str(e)) from e
        return _to_receipt(self.receipt)


class ApeContract(ContractHandle):
    def __init__(self, instance: ContractInstance, account: AccountAPI):
        super().__init__(instance.contract_type.name, address=instance.address)
        self.instance = instance
        self._account = account

    def wait_confirmed(self) -> ChecksumAddress:
        # ape only returns deployed instances once their receipt is in
        return self.address

    def call(self, method: str, *args) -> PendingTransaction:
        handler = getattr(self.instance, method)
        try:
            receipt = handler(*args, sender=self._account)
        except ApeException as e:
            raise TransactionFailed(str(e)) from e
        return ApeTransaction(receipt)

    def read(self, method: str, *args) -> Any:
        handler = getattr(self.instance, method)
        try:
            return handler(*args)
        except ApeException as e:
            raise TransactionFailed(f"{self.contract_type}.{method} call failed: {e}") from e


class ApeChainClient(ChainClient):
    def __init__(self, account: AccountAPI):
        self._account = account

    @classmethod
    def from_config(cls, config: Union[DeploymentConfig, UpgradeConfig]) -> "ApeChainClient":
        return cls(account=get_account(config.account))

    @property
    def sender(self) -> ChecksumAddress:
        return to_checksum_address(self._account.address)

    @property
    def chain_id(self) -> int:
        return networks.provider.chain_id

    @property
    def network_name(self) -> str:
        return networks.provider.network.name

    def set_autosign(self, autosign: bool) -> None:
        # test accounts never prompt and have no such setting
        if hasattr(self._account, "set_autosign"):
            self._account.set_autosign(autosign)

    def deploy(self, contract_type: str) -> ApeContract:
        container = get_contract_container(contract_type)
        try:
            instance = self._account.deploy(container)
            receipt = _to_receipt(instance.receipt)
        except ApeException as e:
            raise TransactionFailed(str(e)) from e
        handle = ApeContract(instance, self._account)
        handle.receipt = receipt
        return handle

    def attach(self, contract_type: str, address: str) -> ApeContract:
        container = get_contract_container(contract_type)
        try:
            instance = container.at(address)
        except ApeException as e:
            raise ConfigurationError(f"No {contract_type} at {address}: {e}") from e
        return ApeContract(instance, self._account)

    def implementation_of(self, proxy_address: str) -> ChecksumAddress:
        implementation_slot = chain.provider.get_storage_at(
            address=proxy_address, slot=EIP1967_IMPLEMENTATION_SLOT
        )
        if implementation_slot == EMPTY_BYTES32:
            raise ValueError(
                f"Implementation slot for contract at {proxy_address} is empty. "
                "Are you sure this is an EIP1967-compatible proxy?"
            )
        return to_checksum_address(implementation_slot[-20:])
