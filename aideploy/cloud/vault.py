import logging
from typing import TYPE_CHECKING, Tuple

from aideploy.cloud.controlplane import ControlPlane
from aideploy.errors import ControlPlaneError, SecretRetrievalError, SecretStoreError

if TYPE_CHECKING:
    from aideploy.cloud.provision import DeploymentContext

logger = logging.getLogger(__name__)


class AiCredentials:
    """
    Reads the connection details of the AI account created for this run.
    """

    @staticmethod
    def fetch(ctx: "DeploymentContext", plane: ControlPlane) -> Tuple[str, str]:
        """
        Returns:
            tuple: (primary key, endpoint URL)

        Raises:
            SecretRetrievalError: If either value cannot be read.
        """
        name, rg = ctx.names.ai_service, ctx.names.resource_group
        try:
            key = plane.ai_account_key(name, rg)
        except ControlPlaneError as e:
            raise SecretRetrievalError(f"Failed to read the primary key of {name}: {e}") from e
        try:
            endpoint = plane.ai_account_endpoint(name, rg)
        except ControlPlaneError as e:
            raise SecretRetrievalError(f"Failed to read the endpoint of {name}: {e}") from e

        logger.info(f"[AiCredentials] Retrieved key and endpoint for {name} ({endpoint})")
        return key, endpoint


class VaultSecrets:
    """
    Writes secrets into the run's Key Vault.
    """

    @staticmethod
    def store(ctx: "DeploymentContext", plane: ControlPlane, name: str, value: str) -> None:
        """
        Persist one secret. Overwrites any existing secret with the same name.

        Raises:
            SecretStoreError: The write failed. The value is never part of the message.
        """
        vault = ctx.names.key_vault
        try:
            plane.set_secret(vault, name, value)
        except ControlPlaneError as e:
            raise SecretStoreError(f"Failed to store secret '{name}' in {vault}: {e}") from e
        logger.info(f"[VaultSecrets] Stored secret '{name}' in {vault}")
