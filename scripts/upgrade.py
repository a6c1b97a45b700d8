#!/usr/bin/python3

import click
from ape.cli import ConnectedProviderCommand, network_option

from gamevoting.cli import abort_on_failure, build_config, connect, upgrade_game_voting
from gamevoting.config import UpgradeConfig
from gamevoting.options import (
    account_alias_option,
    admin_address_option,
    autosign_option,
    config_filepath_option,
    registry_filepath_option,
)


@click.command(cls=ConnectedProviderCommand, name="upgrade")
@network_option(required=True)
@account_alias_option
@admin_address_option
@config_filepath_option
@registry_filepath_option
@autosign_option
def cli(network, account, admin_address, config_filepath, registry_filepath, auto):
    """
    Upgrade the GameVoting proxy behind an existing GameVotingAdmin.

    ADMIN_CONTRACT_ADDRESS=0x... ape run upgrade --network ethereum:sepolia:node
    """
    click.echo(f"Connected to {network.name} network.")
    config = build_config(
        UpgradeConfig,
        config_filepath,
        account=account,
        network=network.name,
        admin_address=admin_address,
        registry_filepath=registry_filepath,
        autosign=auto,
    )
    # nothing is signed or submitted for a request that cannot succeed
    with abort_on_failure():
        config = config.validate()
    client = connect(config)
    upgrade_game_voting(client=client, config=config)


if __name__ == "__main__":
    cli()
