from contextlib import contextmanager
from pathlib import Path
from typing import Optional, Type, TypeVar, Union

import click

from gamevoting.chain import ChainClient
from gamevoting.config import DeploymentConfig, UpgradeConfig
from gamevoting.deployer import Deployer, Upgrader
from gamevoting.errors import GameVotingError
from gamevoting.manifest import (
    DeploymentManifest,
    UpgradeReport,
    echo_manifest,
    echo_upgrade_report,
)

Config = TypeVar("Config", DeploymentConfig, UpgradeConfig)


@contextmanager
def abort_on_failure():
    """Surfaces any deployment failure verbatim and exits non-zero."""
    try:
        yield
    except (GameVotingError, ValueError) as e:
        raise click.ClickException(str(e)) from e


def build_config(
    config_class: Type[Config], config_filepath: Optional[Path] = None, **overrides
) -> Config:
    """Command line values win over the YAML file, which wins over the environment."""
    if config_filepath:
        config = config_class.from_yaml(config_filepath)
    else:
        config = config_class.from_env()
    overrides = {name: value for name, value in overrides.items() if value}
    return config._replace(**overrides)


def deploy_game_voting(client: ChainClient, config: DeploymentConfig) -> DeploymentManifest:
    with abort_on_failure():
        deployer = Deployer(client=client, config=config)
        manifest = deployer.run()
        deployer.finalize(manifest)
    echo_manifest(manifest)
    return manifest


def upgrade_game_voting(client: ChainClient, config: UpgradeConfig) -> UpgradeReport:
    with abort_on_failure():
        upgrader = Upgrader(client=client, config=config)
        report = upgrader.run()
        upgrader.finalize(report)
    echo_upgrade_report(report)
    return report


def connect(config: Union[DeploymentConfig, UpgradeConfig]) -> ChainClient:
    from gamevoting.provider import ApeChainClient

    with abort_on_failure():
        return ApeChainClient.from_config(config)
