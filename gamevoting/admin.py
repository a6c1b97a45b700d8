from enum import Enum
from typing import Callable, List, NamedTuple, Optional

from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address

from gamevoting.constants import ZERO_ADDRESS
from gamevoting.errors import (
    InvalidImplementation,
    ProxyAlreadyCreated,
    ProxyNotCreated,
    Unauthorized,
)


class AdminState(Enum):
    UNBOUND = "unbound"
    BOUND = "bound"


class ProxyBinding(NamedTuple):
    """The proxy owned by an admin and the implementation it currently forwards to."""

    proxy: ChecksumAddress
    implementation: ChecksumAddress


class ProxyAdmin:
    """
    State machine of a GameVotingAdmin.

    An admin starts UNBOUND. The first `create` binds it to a proxy for life; every
    `upgrade` after that repoints the same proxy at another implementation. Both
    transitions are restricted to the owner and leave the state untouched on failure.
    """

    def __init__(
        self,
        address: ChecksumAddress,
        owner: ChecksumAddress,
        is_implementation: Optional[Callable[[ChecksumAddress], bool]] = None,
    ):
        self.address = to_checksum_address(address)
        self.owner = to_checksum_address(owner)
        self._is_implementation = is_implementation
        self._binding: Optional[ProxyBinding] = None
        self._history: List[ChecksumAddress] = list()

    def __repr__(self) -> str:
        return f"ProxyAdmin(address={self.address}, state={self.state.value})"

    @property
    def state(self) -> AdminState:
        return AdminState.UNBOUND if self._binding is None else AdminState.BOUND

    @property
    def binding(self) -> Optional[ProxyBinding]:
        return self._binding

    @property
    def proxy(self) -> ChecksumAddress:
        """The bound proxy, or the zero address while unbound (as the solidity getter)."""
        if self._binding is None:
            return ZERO_ADDRESS
        return self._binding.proxy

    @property
    def implementation(self) -> ChecksumAddress:
        if self._binding is None:
            return ZERO_ADDRESS
        return self._binding.implementation

    @property
    def history(self) -> List[ChecksumAddress]:
        """Every implementation this admin has ever pointed its proxy at, oldest first."""
        return list(self._history)

    def create(self, implementation: str, proxy: str, sender: str) -> ProxyBinding:
        """UNBOUND -> BOUND(implementation). The proxy address is fixed from here on."""
        self._check_owner(sender)
        if self._binding is not None:
            raise ProxyAlreadyCreated(
                f"{self.address} already administers proxy {self._binding.proxy}"
            )
        implementation = self._check_implementation(implementation)
        proxy = to_checksum_address(proxy)
        if proxy == ZERO_ADDRESS:
            raise ValueError("Proxy address cannot be the zero address.")

        self._binding = ProxyBinding(proxy=proxy, implementation=implementation)
        self._history.append(implementation)
        return self._binding

    def upgrade(self, implementation: str, sender: str) -> ProxyBinding:
        """BOUND(_) -> BOUND(implementation)."""
        self._check_owner(sender)
        if self._binding is None:
            raise ProxyNotCreated(f"{self.address} has no proxy to upgrade")
        implementation = self._check_implementation(implementation)

        self._binding = self._binding._replace(implementation=implementation)
        self._history.append(implementation)
        return self._binding

    def _check_owner(self, sender: str) -> None:
        if to_checksum_address(sender) != self.owner:
            raise Unauthorized(f"{sender} is not the owner of {self.address}")

    def _check_implementation(self, implementation: str) -> ChecksumAddress:
        implementation = to_checksum_address(implementation)
        if implementation == ZERO_ADDRESS:
            raise InvalidImplementation("Implementation cannot be the zero address")
        if self._is_implementation and not self._is_implementation(implementation):
            raise InvalidImplementation(f"No implementation deployed at {implementation}")
        return implementation
