from typing import NamedTuple

import click
from eth_typing import ChecksumAddress


class DeploymentManifest(NamedTuple):
    implementation: ChecksumAddress
    admin: ChecksumAddress
    proxy: ChecksumAddress


class UpgradeReport(NamedTuple):
    admin: ChecksumAddress
    proxy: ChecksumAddress
    previous_implementation: ChecksumAddress
    new_implementation: ChecksumAddress


def echo_manifest(manifest: DeploymentManifest) -> None:
    click.echo(
        "\nDeployment Summary:\n"
        "-------------------\n"
        f"Implementation: {manifest.implementation}\n"
        f"Admin: {manifest.admin}\n"
        f"Proxy: {manifest.proxy}\n"
        "\nTo interact with the contract, use the proxy address with the GameVoting ABI"
    )


def echo_upgrade_report(report: UpgradeReport) -> None:
    click.echo(
        "\nUpgrade Summary:\n"
        "----------------\n"
        f"Previous Implementation: {report.previous_implementation}\n"
        f"New Implementation: {report.new_implementation}\n"
        f"Admin Contract: {report.admin}\n"
        f"Proxy Address: {report.proxy} (unchanged)\n"
        "\nUpgrade completed successfully!"
    )
