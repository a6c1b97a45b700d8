from pathlib import Path

import pytest

from gamevoting.config import DeploymentConfig, UpgradeConfig, validate_admin_address
from gamevoting.constants import ZERO_ADDRESS
from gamevoting.errors import ConfigurationError

ADMIN = "0x5FbDB2315678afecb367f032d93F642f64180aa3"


def test_validate_admin_address():
    assert validate_admin_address(ADMIN.lower()) == ADMIN
    assert validate_admin_address(f"  {ADMIN}\n") == ADMIN

    for value in (None, "", "  "):
        with pytest.raises(ConfigurationError, match="ADMIN_CONTRACT_ADDRESS"):
            validate_admin_address(value)
    with pytest.raises(ConfigurationError, match="Invalid"):
        validate_admin_address("0x1234")
    with pytest.raises(ConfigurationError, match="zero address"):
        validate_admin_address(ZERO_ADDRESS)


def test_configuration_error_is_value_error():
    with pytest.raises(ValueError):
        validate_admin_address(None)


def test_from_env():
    environ = {
        "DEPLOYER_ACCOUNT": "deployer",
        "NETWORK": "ethereum:sepolia:node",
        "ADMIN_CONTRACT_ADDRESS": ADMIN,
    }
    config = UpgradeConfig.from_env(environ)
    assert config.account == "deployer"
    assert config.network == "ethereum:sepolia:node"
    assert config.admin_address == ADMIN
    assert config.autosign is False
    assert config.registry_filepath is None

    deployment_config = DeploymentConfig.from_env(environ)
    assert deployment_config == DeploymentConfig(
        account="deployer", network="ethereum:sepolia:node"
    )


def test_from_env_without_admin_address():
    config = UpgradeConfig.from_env({})
    assert config.admin_address is None
    with pytest.raises(ConfigurationError):
        config.validate()


def test_from_yaml(tmp_path):
    filepath = tmp_path / "upgrade.yml"
    filepath.write_text(
        "account: operator\n"
        f"admin_address: '{ADMIN.lower()}'\n"
        "autosign: true\n"
        "registry: artifacts/sepolia.json\n"
    )
    environ = {"NETWORK": "ethereum:sepolia:node", "DEPLOYER_ACCOUNT": "ignored"}
    config = UpgradeConfig.from_yaml(filepath, environ=environ)

    assert config.account == "operator"
    assert config.network == "ethereum:sepolia:node"
    assert config.autosign is True
    assert config.registry_filepath == Path("artifacts/sepolia.json")
    assert config.validate().admin_address == ADMIN


def test_deployment_config_from_empty_yaml(tmp_path):
    filepath = tmp_path / "empty.yml"
    filepath.write_text("")
    assert DeploymentConfig.from_yaml(filepath, environ={}) == DeploymentConfig()
