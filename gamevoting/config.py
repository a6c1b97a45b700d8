import os
from pathlib import Path
from typing import Any, Dict, Mapping, NamedTuple, Optional

import yaml
from eth_typing import ChecksumAddress
from eth_utils import is_address, to_checksum_address

from gamevoting.constants import (
    ACCOUNT_ENVVAR,
    ADMIN_ADDRESS_ENVVAR,
    NETWORK_ENVVAR,
    ZERO_ADDRESS,
)
from gamevoting.errors import ConfigurationError


def _load_yaml(filepath: Path) -> dict:
    """Loads a YAML file."""
    with open(filepath, "r") as file:
        return yaml.safe_load(file) or dict()


def validate_admin_address(value: Optional[str]) -> ChecksumAddress:
    """Returns the checksummed admin address or raises before anything is submitted."""
    if value is None or not str(value).strip():
        raise ConfigurationError(
            f"Admin contract address is not set; please set {ADMIN_ADDRESS_ENVVAR} "
            "or pass --admin-address."
        )
    value = str(value).strip()
    if not is_address(value):
        raise ConfigurationError(f"Invalid admin contract address: {value}")
    address = to_checksum_address(value)
    if address == ZERO_ADDRESS:
        raise ConfigurationError("Admin contract address cannot be the zero address.")
    return address


def _settings(
    config: Optional[Dict[str, Any]] = None, environ: Optional[Mapping[str, str]] = None
) -> Dict[str, Any]:
    """File values win over environment values."""
    config = config or dict()
    environ = os.environ if environ is None else environ
    registry = config.get("registry")
    return {
        "account": config.get("account") or environ.get(ACCOUNT_ENVVAR),
        "network": config.get("network") or environ.get(NETWORK_ENVVAR),
        "admin_address": config.get("admin_address") or environ.get(ADMIN_ADDRESS_ENVVAR),
        "autosign": bool(config.get("autosign", False)),
        "registry_filepath": Path(registry) if registry else None,
    }


class DeploymentConfig(NamedTuple):
    """Everything a deployment run needs besides the chain client itself."""

    account: Optional[str] = None  # ape account alias used to sign
    network: Optional[str] = None
    autosign: bool = False
    registry_filepath: Optional[Path] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "DeploymentConfig":
        settings = _settings(environ=environ)
        settings.pop("admin_address")
        return cls(**settings)

    @classmethod
    def from_yaml(
        cls, filepath: Path, environ: Optional[Mapping[str, str]] = None
    ) -> "DeploymentConfig":
        settings = _settings(_load_yaml(filepath), environ=environ)
        settings.pop("admin_address")
        return cls(**settings)


class UpgradeConfig(NamedTuple):
    account: Optional[str] = None
    network: Optional[str] = None
    admin_address: Optional[str] = None
    autosign: bool = False
    registry_filepath: Optional[Path] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "UpgradeConfig":
        return cls(**_settings(environ=environ))

    @classmethod
    def from_yaml(
        cls, filepath: Path, environ: Optional[Mapping[str, str]] = None
    ) -> "UpgradeConfig":
        return cls(**_settings(_load_yaml(filepath), environ=environ))

    def validate(self) -> "UpgradeConfig":
        return self._replace(admin_address=validate_admin_address(self.admin_address))
