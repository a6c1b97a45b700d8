class GameVotingError(Exception):
    """Base class for deployment and upgrade failures."""


class ConfigurationError(GameVotingError, ValueError):
    """Raised when a required setting (account, admin address) is missing or malformed."""


class TransactionFailed(GameVotingError):
    """Raised when a transaction is rejected, reverted or never confirmed."""


class InvariantViolation(GameVotingError):
    """Raised when an observed on-chain binding contradicts the expected one."""


class ProxyAdminError(InvariantViolation):
    """Illegal transition of a GameVotingAdmin."""


class Unauthorized(ProxyAdminError):
    pass


class ProxyAlreadyCreated(ProxyAdminError):
    pass


class ProxyNotCreated(ProxyAdminError):
    pass


class InvalidImplementation(ProxyAdminError):
    pass
