from typing import Dict, Optional

import click
from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address

from gamevoting import registry
from gamevoting.chain import ChainClient, ContractHandle, Receipt
from gamevoting.config import DeploymentConfig, UpgradeConfig
from gamevoting.confirm import _confirm_deployment, _continue
from gamevoting.constants import (
    ADMIN_CONTRACT,
    CREATE_PROXY_METHOD,
    IMPLEMENTATION_CONTRACT,
    PROXY_CONTRACT,
    PROXY_GETTER,
    UPGRADE_METHOD,
    ZERO_ADDRESS,
)
from gamevoting.errors import InvariantViolation, ProxyAlreadyCreated, ProxyNotCreated
from gamevoting.manifest import DeploymentManifest, UpgradeReport


class Transactor:
    """
    Represents a chain client plus annotated, confirmed execution.

    Every deployment and transaction blocks until it is confirmed; nothing is retried.
    """

    def __init__(self, client: ChainClient, autosign: bool = False):
        self.client = client
        if autosign:
            click.echo("WARNING: Autosign is enabled. Transactions will be signed automatically.")
        self._autosign = autosign
        self.client.set_autosign(autosign)
        self.receipts: Dict[str, Optional[Receipt]] = dict()

    def deploy(self, contract_type: str) -> ContractHandle:
        if not self._autosign:
            _confirm_deployment(contract_type)
        click.echo(f"Deploying {contract_type}...")
        handle = self.client.deploy(contract_type)
        address = handle.wait_confirmed()
        self.receipts[contract_type] = handle.receipt
        click.echo(f"{contract_type} deployed to: {address}")
        return handle

    def transact(self, handle: ContractHandle, method: str, *args) -> Receipt:
        base_message = f"\nTransacting {handle.contract_type}[{handle.address[:10]}].{method}"
        if args:
            pretty_args = "\n\t".join(str(arg) for arg in args)
            message = f"{base_message} with arguments:\n\t{pretty_args}"
        else:
            message = f"{base_message} with no arguments"
        click.echo(message)
        if not self._autosign:
            _continue()

        receipt = handle.call(method, *args).wait_confirmed()
        click.echo(f"Confirmed {method} in block {receipt.block_number} ({receipt.txn_hash})")
        return receipt

    def _read_address(self, handle: ContractHandle, method: str) -> ChecksumAddress:
        return to_checksum_address(handle.read(method))

    def _print_info(self, network: Optional[str], registry_filepath) -> None:
        click.echo(
            "\n".join(
                (
                    f"Account: {self.client.sender}",
                    f"Network: {network or self.client.network_name}",
                    f"Chain ID: {self.client.chain_id}",
                    f"Registry: {registry_filepath}",
                )
            )
        )


class Deployer(Transactor):
    """Deploys a GameVoting implementation, its admin, and the proxy bound through it."""

    def __init__(self, client: ChainClient, config: DeploymentConfig):
        super().__init__(client, autosign=config.autosign)
        self.config = config

    def run(self) -> DeploymentManifest:
        click.echo("Starting deployment...")
        self._print_info(self.config.network, self.config.registry_filepath)

        click.echo(f"\n[1/3] Deploying {IMPLEMENTATION_CONTRACT} implementation...")
        implementation = self.deploy(IMPLEMENTATION_CONTRACT).address

        click.echo(f"\n[2/3] Deploying {ADMIN_CONTRACT}...")
        admin = self.deploy(ADMIN_CONTRACT)

        click.echo(f"\n[3/3] Deploying proxy through {ADMIN_CONTRACT}...")
        existing_proxy = self._read_address(admin, PROXY_GETTER)
        if existing_proxy != ZERO_ADDRESS:
            raise ProxyAlreadyCreated(
                f"{ADMIN_CONTRACT} at {admin.address} already administers proxy {existing_proxy}"
            )
        self.receipts[PROXY_CONTRACT] = self.transact(admin, CREATE_PROXY_METHOD, implementation)

        proxy = self._read_address(admin, PROXY_GETTER)
        if proxy == ZERO_ADDRESS:
            raise InvariantViolation(f"{ADMIN_CONTRACT} at {admin.address} reports no proxy")
        bound_implementation = self.client.implementation_of(proxy)
        if bound_implementation != implementation:
            raise InvariantViolation(
                f"Proxy {proxy} forwards to {bound_implementation}, expected {implementation}"
            )
        click.echo(f"Proxy deployed to: {proxy}")

        return DeploymentManifest(implementation=implementation, admin=admin.address, proxy=proxy)

    def finalize(self, manifest: DeploymentManifest) -> None:
        if self.config.registry_filepath:
            registry.registry_from_manifest(
                manifest=manifest,
                chain_id=self.client.chain_id,
                deployer=self.client.sender,
                output_filepath=self.config.registry_filepath,
                receipts=self.receipts,
            )


class Upgrader(Transactor):
    """Repoints the proxy of an existing GameVotingAdmin at a freshly deployed implementation."""

    def __init__(self, client: ChainClient, config: UpgradeConfig):
        # checked before the client is ever asked to submit anything
        self.config = config.validate()
        super().__init__(client, autosign=config.autosign)

    def run(self) -> UpgradeReport:
        click.echo("Starting upgrade process...")
        self._print_info(self.config.network, self.config.registry_filepath)

        admin = self.client.attach(ADMIN_CONTRACT, self.config.admin_address)
        proxy = self._read_address(admin, PROXY_GETTER)
        if proxy == ZERO_ADDRESS:
            raise ProxyNotCreated(
                f"{ADMIN_CONTRACT} at {admin.address} has no proxy; deploy before upgrading"
            )
        previous_implementation = self.client.implementation_of(proxy)
        click.echo(f"Proxy {proxy} currently forwards to {previous_implementation}")

        click.echo(f"\n[1/2] Deploying new {IMPLEMENTATION_CONTRACT} implementation...")
        new_implementation = self.deploy(IMPLEMENTATION_CONTRACT).address

        click.echo("\n[2/2] Upgrading proxy to new implementation...")
        self.transact(admin, UPGRADE_METHOD, new_implementation)

        proxy_after = self._read_address(admin, PROXY_GETTER)
        if proxy_after != proxy:
            raise InvariantViolation(f"Proxy address changed from {proxy} to {proxy_after}")
        current_implementation = self.client.implementation_of(proxy_after)
        if current_implementation != new_implementation:
            raise InvariantViolation(
                f"Proxy {proxy} forwards to {current_implementation}, "
                f"expected {new_implementation}"
            )

        return UpgradeReport(
            admin=admin.address,
            proxy=proxy,
            previous_implementation=previous_implementation,
            new_implementation=new_implementation,
        )

    def finalize(self, report: UpgradeReport) -> None:
        filepath = self.config.registry_filepath
        if not filepath:
            return
        receipt = self.receipts.get(IMPLEMENTATION_CONTRACT)
        if filepath.exists():
            registry.update_implementation(
                filepath=filepath,
                chain_id=self.client.chain_id,
                implementation=report.new_implementation,
                deployer=self.client.sender,
                receipt=receipt,
            )
        else:
            registry.write_registry(
                entries=[
                    registry.RegistryEntry.from_receipt(
                        chain_id=self.client.chain_id,
                        name=IMPLEMENTATION_CONTRACT,
                        address=report.new_implementation,
                        deployer=self.client.sender,
                        receipt=receipt,
                    )
                ],
                filepath=filepath,
            )
