"""
Deployer Exceptions
Error hierarchy for deployment and verification failures
"""


class DeployerError(Exception):
    """Base exception for deployment-related errors."""

    pass


class ConfigurationError(DeployerError, ValueError):
    """Raised when the environment cannot provide what a deployment needs."""

    pass


class ArtifactNotFoundError(ConfigurationError, FileNotFoundError):
    """Raised when a compiled contract artifact cannot be located."""

    pass


class NetworkError(DeployerError):
    """Raised when a transaction cannot be broadcast or confirmed."""

    pass


class VerificationError(DeployerError):
    """Raised when the block explorer rejects or fails a verification request."""

    pass
