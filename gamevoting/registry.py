import json
from collections import defaultdict
from pathlib import Path
from typing import Dict, List, NamedTuple, Optional

import click
from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address

from gamevoting.chain import Receipt
from gamevoting.constants import ADMIN_CONTRACT, IMPLEMENTATION_CONTRACT, PROXY_CONTRACT
from gamevoting.manifest import DeploymentManifest

ChainId = int
ContractName = str


STANDARD_REGISTRY_JSON_FORMAT = {"indent": 4, "separators": (",", ": ")}


class RegistryEntry(NamedTuple):
    """Represents a single deployed contract in a registry file."""

    chain_id: ChainId
    name: ContractName
    address: ChecksumAddress
    deployer: str
    tx_hash: Optional[str] = None
    block_number: Optional[int] = None

    @classmethod
    def from_receipt(
        cls,
        chain_id: ChainId,
        name: ContractName,
        address: ChecksumAddress,
        deployer: str,
        receipt: Optional[Receipt] = None,
    ) -> "RegistryEntry":
        # the receipt is unknown for contracts this run did not deploy itself
        if receipt is None:
            return cls(chain_id, name, address, deployer)
        return cls(
            chain_id=chain_id,
            name=name,
            address=address,
            deployer=deployer,
            tx_hash=receipt.txn_hash,
            block_number=receipt.block_number,
        )


def _load_json(filepath: Path) -> dict:
    with open(filepath, "r") as file:
        return json.load(file)


def _dump(data: dict, filepath: Path) -> None:
    with open(filepath, "w") as file:
        json.dump(data, file, **STANDARD_REGISTRY_JSON_FORMAT)


def _to_data(entries: List[RegistryEntry]) -> dict:
    # common order, so registries diff cleanly
    entries = sorted(entries, key=lambda entry: (str(entry.chain_id), entry.name))
    data = defaultdict(dict)
    for entry in entries:
        data[str(entry.chain_id)][entry.name] = {
            "address": entry.address,
            "tx_hash": entry.tx_hash,
            "block_number": entry.block_number,
            "deployer": entry.deployer,
        }
    return dict(data)


def read_registry(filepath: Path) -> List[RegistryEntry]:
    data = _load_json(filepath)
    registry_entries = list()
    for chain_id, entries in data.items():
        for contract_name, artifacts in entries.items():
            registry_entry = RegistryEntry(
                chain_id=int(chain_id),
                name=contract_name,
                address=to_checksum_address(artifacts["address"]),
                deployer=artifacts["deployer"],
                tx_hash=artifacts["tx_hash"],
                block_number=artifacts["block_number"],
            )
            registry_entries.append(registry_entry)
    return registry_entries


def write_registry(entries: List[RegistryEntry], filepath: Path, silent: bool = False) -> Path:
    """Writes a registry file, never overwriting entries of a chain already recorded there."""
    if not entries:
        if not silent:
            click.echo("No entries provided.")
        return filepath

    data = _to_data(entries)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    if filepath.exists():
        if not silent:
            click.echo(f"Updating existing registry at {filepath}.")
        existing_data = _load_json(filepath)

        if any(chain_id in existing_data for chain_id in data):
            filepath = filepath.with_suffix(".unmerged.json")
            if not silent:
                click.echo(
                    "Cannot merge registries with overlapping chain IDs.\n"
                    f"Writing to {filepath} to avoid overwriting existing data."
                )
        else:
            existing_data.update(data)
            data = existing_data
    elif not silent:
        click.echo(f"Creating new registry at {filepath}.")

    _dump(data, filepath)
    return filepath


def registry_from_manifest(
    manifest: DeploymentManifest,
    chain_id: ChainId,
    deployer: str,
    output_filepath: Path,
    receipts: Optional[Dict[ContractName, Optional[Receipt]]] = None,
) -> Path:
    """
    Records the three contracts of a deployment. `receipts` maps contract names to the
    transaction that created them; the proxy's is the admin's proxy creation call.
    """
    receipts = receipts or dict()
    entries = [
        RegistryEntry.from_receipt(chain_id, name, address, deployer, receipts.get(name))
        for name, address in (
            (IMPLEMENTATION_CONTRACT, manifest.implementation),
            (ADMIN_CONTRACT, manifest.admin),
            (PROXY_CONTRACT, manifest.proxy),
        )
    ]
    output_filepath = write_registry(entries=entries, filepath=output_filepath)
    click.echo(f"(i) Registry written to {output_filepath}!")
    return output_filepath


def update_implementation(
    filepath: Path,
    chain_id: ChainId,
    implementation: ChecksumAddress,
    deployer: str,
    receipt: Optional[Receipt] = None,
) -> Path:
    """Points the registry's implementation entry for `chain_id` at a new address."""
    entries = [
        entry
        for entry in read_registry(filepath)
        if not (entry.chain_id == chain_id and entry.name == IMPLEMENTATION_CONTRACT)
    ]
    entries.append(
        RegistryEntry.from_receipt(chain_id, IMPLEMENTATION_CONTRACT, implementation, deployer, receipt)
    )
    _dump(_to_data(entries), filepath)
    click.echo(f"(i) Registry at {filepath} updated with {IMPLEMENTATION_CONTRACT} {implementation}")
    return filepath
