import pytest

from gamevoting.constants import (
    ADMIN_CONTRACT,
    CREATE_PROXY_METHOD,
    IMPLEMENTATION_CONTRACT,
    OWNER_GETTER,
    PROXY_GETTER,
    ZERO_ADDRESS,
)
from gamevoting.errors import ConfigurationError, TransactionFailed
from tests.conftest import DEPLOYER


def test_unknown_contract_type(chain):
    with pytest.raises(ValueError, match="No contract found"):
        chain.deploy("Ballot")


def test_attach_checks_contract_type(chain):
    implementation = chain.deploy(IMPLEMENTATION_CONTRACT).wait_confirmed()
    with pytest.raises(ConfigurationError, match="not a GameVotingAdmin"):
        chain.attach(ADMIN_CONTRACT, implementation)


def test_admin_views(chain):
    admin = chain.deploy(ADMIN_CONTRACT)
    assert admin.read(OWNER_GETTER) == DEPLOYER
    assert admin.read(PROXY_GETTER) == ZERO_ADDRESS
    with pytest.raises(AttributeError):
        admin.read("votes")
    with pytest.raises(AttributeError):
        admin.call("vote", 1)


def test_create_proxy_for_non_implementation(chain, ledger):
    admin = chain.deploy(ADMIN_CONTRACT)
    pending = admin.call(CREATE_PROXY_METHOD, admin.address)

    with pytest.raises(TransactionFailed, match="No implementation deployed"):
        pending.wait_confirmed()
    assert ledger.admin_at(admin.address).proxy == ZERO_ADDRESS
    assert ledger.transactions[-1].success is False


def test_implementation_of_non_proxy(chain):
    implementation = chain.deploy(IMPLEMENTATION_CONTRACT).wait_confirmed()
    with pytest.raises(ValueError, match="EIP1967"):
        chain.implementation_of(implementation)


def test_proxy_address_is_not_reused(chain, ledger):
    implementation = chain.deploy(IMPLEMENTATION_CONTRACT).wait_confirmed()
    first_admin = chain.deploy(ADMIN_CONTRACT)
    second_admin = chain.deploy(ADMIN_CONTRACT)

    # A reverted creation does not consume the admin's address space
    first_admin.call(CREATE_PROXY_METHOD, ZERO_ADDRESS)
    first_admin.call(CREATE_PROXY_METHOD, implementation).wait_confirmed()
    second_admin.call(CREATE_PROXY_METHOD, implementation).wait_confirmed()

    first_proxy = first_admin.read(PROXY_GETTER)
    second_proxy = second_admin.read(PROXY_GETTER)
    assert first_proxy != second_proxy
    assert ledger.next_address(first_admin.address, commit=False) != first_proxy


def test_rejected_view(chain):
    admin = chain.deploy(ADMIN_CONTRACT)
    chain.ledger.reject(ADMIN_CONTRACT, PROXY_GETTER, reason="execution reverted")

    with pytest.raises(TransactionFailed, match="execution reverted"):
        admin.read(PROXY_GETTER)

    # Only the next read fails
    assert admin.read(PROXY_GETTER) == ZERO_ADDRESS


def test_deployment_receipt(chain, ledger):
    handle = chain.deploy(IMPLEMENTATION_CONTRACT)

    assert handle.receipt.txn_hash == ledger.transactions[-1].txn_hash
    assert handle.receipt.block_number == ledger.block_number
    assert handle.receipt.sender == DEPLOYER
    assert chain.attach(IMPLEMENTATION_CONTRACT, handle.address).receipt is None
