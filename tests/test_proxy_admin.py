import pytest

from gamevoting.admin import AdminState, ProxyAdmin, ProxyBinding
from gamevoting.constants import ZERO_ADDRESS
from gamevoting.errors import (
    InvalidImplementation,
    InvariantViolation,
    ProxyAlreadyCreated,
    ProxyNotCreated,
    Unauthorized,
)
from tests.conftest import DEPLOYER, STRANGER

ADMIN = "0x00000000000000000000000000000000000000bb"
PROXY = "0x00000000000000000000000000000000000000cc"
IMPLEMENTATION_1 = "0x00000000000000000000000000000000000000aa"
IMPLEMENTATION_2 = "0x00000000000000000000000000000000000000dd"


@pytest.fixture
def admin():
    return ProxyAdmin(address=ADMIN, owner=DEPLOYER)


def test_fresh_admin_is_unbound(admin):
    assert admin.state == AdminState.UNBOUND
    assert admin.binding is None
    assert admin.proxy == ZERO_ADDRESS
    assert admin.implementation == ZERO_ADDRESS
    assert admin.history == []


def test_create_binds_proxy(admin):
    binding = admin.create(IMPLEMENTATION_1, proxy=PROXY, sender=DEPLOYER)

    assert binding == ProxyBinding(proxy=admin.proxy, implementation=admin.implementation)
    assert admin.state == AdminState.BOUND
    assert admin.proxy.lower() == PROXY
    assert admin.implementation.lower() == IMPLEMENTATION_1

    # Reading twice without a transition yields the same value
    assert admin.proxy == admin.proxy


def test_upgrade_keeps_proxy_address(admin):
    admin.create(IMPLEMENTATION_1, proxy=PROXY, sender=DEPLOYER)
    proxy = admin.proxy

    admin.upgrade(IMPLEMENTATION_2, sender=DEPLOYER)
    assert admin.state == AdminState.BOUND
    assert admin.proxy == proxy
    assert admin.implementation.lower() == IMPLEMENTATION_2

    # Repointing back is also an upgrade
    admin.upgrade(IMPLEMENTATION_1, sender=DEPLOYER)
    assert admin.proxy == proxy
    assert [a.lower() for a in admin.history] == [
        IMPLEMENTATION_1,
        IMPLEMENTATION_2,
        IMPLEMENTATION_1,
    ]


def test_second_create_fails(admin):
    admin.create(IMPLEMENTATION_1, proxy=PROXY, sender=DEPLOYER)
    binding = admin.binding

    other_proxy = "0x00000000000000000000000000000000000000ee"
    with pytest.raises(ProxyAlreadyCreated):
        admin.create(IMPLEMENTATION_2, proxy=other_proxy, sender=DEPLOYER)

    assert admin.binding == binding
    assert len(admin.history) == 1


def test_upgrade_before_create_fails(admin):
    with pytest.raises(ProxyNotCreated):
        admin.upgrade(IMPLEMENTATION_2, sender=DEPLOYER)

    assert admin.state == AdminState.UNBOUND
    assert admin.proxy == ZERO_ADDRESS
    assert admin.history == []


def test_only_owner_can_transition(admin):
    with pytest.raises(Unauthorized):
        admin.create(IMPLEMENTATION_1, proxy=PROXY, sender=STRANGER)
    assert admin.state == AdminState.UNBOUND

    admin.create(IMPLEMENTATION_1, proxy=PROXY, sender=DEPLOYER)
    with pytest.raises(Unauthorized):
        admin.upgrade(IMPLEMENTATION_2, sender=STRANGER)
    assert admin.implementation.lower() == IMPLEMENTATION_1


def test_owner_is_checked_before_state(admin):
    # A stranger learns nothing about the binding from the error
    with pytest.raises(Unauthorized):
        admin.upgrade(IMPLEMENTATION_2, sender=STRANGER)


def test_invalid_implementations(admin):
    with pytest.raises(InvalidImplementation):
        admin.create(ZERO_ADDRESS, proxy=PROXY, sender=DEPLOYER)
    assert admin.state == AdminState.UNBOUND

    admin.create(IMPLEMENTATION_1, proxy=PROXY, sender=DEPLOYER)
    with pytest.raises(InvalidImplementation):
        admin.upgrade(ZERO_ADDRESS, sender=DEPLOYER)
    assert admin.implementation.lower() == IMPLEMENTATION_1


def test_implementation_check_hook():
    deployed = {IMPLEMENTATION_1}
    admin = ProxyAdmin(
        address=ADMIN,
        owner=DEPLOYER,
        is_implementation=lambda address: address.lower() in deployed,
    )
    with pytest.raises(InvalidImplementation):
        admin.create(IMPLEMENTATION_2, proxy=PROXY, sender=DEPLOYER)

    admin.create(IMPLEMENTATION_1, proxy=PROXY, sender=DEPLOYER)
    with pytest.raises(InvalidImplementation):
        admin.upgrade(IMPLEMENTATION_2, sender=DEPLOYER)


def test_admin_errors_are_invariant_violations():
    for error in (ProxyAlreadyCreated, ProxyNotCreated, Unauthorized, InvalidImplementation):
        assert issubclass(error, InvariantViolation)
