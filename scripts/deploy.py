#!/usr/bin/python3

import click
from ape.cli import ConnectedProviderCommand, network_option

from gamevoting.cli import build_config, connect, deploy_game_voting
from gamevoting.config import DeploymentConfig
from gamevoting.options import (
    account_alias_option,
    autosign_option,
    config_filepath_option,
    registry_filepath_option,
)


@click.command(cls=ConnectedProviderCommand, name="deploy")
@network_option(required=True)
@account_alias_option
@config_filepath_option
@registry_filepath_option
@autosign_option
def cli(network, account, config_filepath, registry_filepath, auto):
    """
    Deploy GameVoting behind a proxy administered by a new GameVotingAdmin.

    ape run deploy --network ethereum:sepolia:node --account deployer
    """
    click.echo(f"Connected to {network.name} network.")
    config = build_config(
        DeploymentConfig,
        config_filepath,
        account=account,
        network=network.name,
        registry_filepath=registry_filepath,
        autosign=auto,
    )
    client = connect(config)
    deploy_game_voting(client=client, config=config)


if __name__ == "__main__":
    cli()
