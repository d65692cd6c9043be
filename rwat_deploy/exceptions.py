"""Exception types raised by the deployment tooling."""


class RWATDeployError(Exception):
    """Base class for all rwat_deploy errors."""


class ConfigurationError(RWATDeployError):
    """A network profile is unknown, incomplete or unreachable."""


class DeploymentError(RWATDeployError):
    """A contract could not be deployed or upgraded."""


class TransactionFailed(DeploymentError):
    """A mined transaction reported a failing status."""

    def __init__(self, tx_hash, receipt=None):
        self.tx_hash = tx_hash
        self.receipt = receipt
        super().__init__(f"Transaction {tx_hash} reverted")


class ContractSizeError(DeploymentError):
    """Runtime bytecode exceeds the EIP-170 limit on a size-limited network."""


class VerificationError(RWATDeployError):
    """The block explorer rejected a source verification request."""
