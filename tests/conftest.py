import pytest

from gamevoting.config import DeploymentConfig, UpgradeConfig
from gamevoting.deployer import Deployer
from gamevoting.simulation import SimulatedChain

# Common constants
DEPLOYER = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
STRANGER = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"


# Fixtures
@pytest.fixture
def chain():
    return SimulatedChain(sender=DEPLOYER)


@pytest.fixture
def ledger(chain):
    return chain.ledger


@pytest.fixture
def stranger_chain(chain):
    return chain.connect(STRANGER)


@pytest.fixture
def deployment_config():
    return DeploymentConfig(network="simulated", autosign=True)


@pytest.fixture
def deployed(chain, deployment_config):
    """Manifest of a completed deployment."""
    return Deployer(client=chain, config=deployment_config).run()


@pytest.fixture
def upgrade_config(deployed):
    return UpgradeConfig(network="simulated", admin_address=deployed.admin, autosign=True)
