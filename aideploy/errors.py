"""
Exception hierarchy for a deployment run.

Every fatal condition raised by a step derives from DeploymentError so the CLI can
report it with a single handler and exit with status 1.
"""
from typing import Optional


class DeploymentError(RuntimeError):
    """Base class for every fatal deployment failure."""


class ConfigError(DeploymentError):
    """Invalid configuration or a resource name Azure would reject."""


class NotAuthenticatedError(DeploymentError):
    """No authenticated Azure session is available."""


class ProviderRegistrationTimeout(DeploymentError):
    """A resource provider namespace never reached the Registered state."""

    def __init__(self, namespace: str, attempts: int):
        self.namespace = namespace
        self.attempts = attempts
        super().__init__(f"Failed to register {namespace} within timeout ({attempts} checks)")


class ResourceCreationError(DeploymentError):
    """A resource group, vault or AI account could not be created."""


class SecretRetrievalError(DeploymentError):
    """The AI account key or endpoint could not be read."""


class SecretStoreError(DeploymentError):
    """A secret could not be written into the vault."""


class ControlPlaneError(RuntimeError):
    """
    Raw failure reported by a control-plane backend.

    Steps catch this and re-raise the matching DeploymentError, so it never reaches
    the CLI on its own.
    """


class AzureCliError(ControlPlaneError):
    """The az executable exited non-zero."""

    def __init__(self, cmd: list, returncode: int, stderr: Optional[str] = None):
        self.cmd = cmd
        self.returncode = returncode
        self.stderr = (stderr or "").strip()
        detail = f": {self.stderr}" if self.stderr else ""
        super().__init__(f"'{' '.join(cmd[:4])} ...' exited with {returncode}{detail}")
