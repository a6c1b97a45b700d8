from pathlib import Path

import click

from gamevoting.types import ChecksumAddress

# Environment fallbacks are resolved by the config layer, below the YAML file.

account_alias_option = click.option(
    "--account",
    "account",
    help="Alias of the ape account that signs transactions; ignored on local networks. "
    "Falls back to the config file, then DEPLOYER_ACCOUNT.",
    type=str,
    required=False,
)

admin_address_option = click.option(
    "--admin-address",
    "-a",
    help="The ethereum address of the GameVotingAdmin contract to upgrade through. "
    "Falls back to the config file, then ADMIN_CONTRACT_ADDRESS.",
    type=ChecksumAddress(),
    required=False,
)

config_filepath_option = click.option(
    "--config-filepath",
    "-c",
    help="YAML file with account, network, admin_address, autosign and registry settings.",
    type=click.Path(dir_okay=False, exists=True, path_type=Path),
    required=False,
)

registry_filepath_option = click.option(
    "--registry-filepath",
    "-f",
    help="Registry file to record the deployed addresses in.",
    type=click.Path(dir_okay=False, path_type=Path),
    required=False,
)

autosign_option = click.option(
    "--auto",
    help="Automatically sign transactions.",
    is_flag=True,
)
