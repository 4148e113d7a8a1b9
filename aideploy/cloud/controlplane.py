"""
The seam between the deployment steps and Azure.

Steps only ever talk to a ControlPlane. Two implementations ship with the package
(`AzureSdkControlPlane` and `AzureCliControlPlane`); tests substitute a fake.
"""
from dataclasses import dataclass
from typing import Dict, Optional, Protocol


@dataclass(frozen=True)
class AzureSession:
    """The signed-in identity as reported by the control plane."""
    subscription_id: str
    tenant_id: Optional[str] = None
    user: Optional[str] = None


class ControlPlane(Protocol):
    """
    Operations a deployment run needs from Azure.

    Every method raises aideploy.errors.ControlPlaneError (or a subclass) on failure.
    """

    def account_show(self) -> Optional[AzureSession]:
        """Return the active session, or None if nobody is signed in."""
        ...

    def provider_state(self, namespace: str) -> str:
        """Return the registration state of a resource provider namespace."""
        ...

    def register_provider(self, namespace: str) -> None:
        """Request registration without waiting for it to complete."""
        ...

    def create_resource_group(self, name: str, location: str, tags: Dict[str, str]) -> None:
        ...

    def create_key_vault(
            self,
            name: str,
            resource_group: str,
            location: str,
            sku: str,
            enable_rbac_authorization: bool,
            tags: Dict[str, str],
    ) -> None:
        ...

    def create_ai_account(
            self,
            name: str,
            resource_group: str,
            location: str,
            kind: str,
            sku: str,
            tags: Dict[str, str],
    ) -> None:
        """Create a Cognitive Services account, acknowledging the service terms."""
        ...

    def ai_account_key(self, name: str, resource_group: str) -> str:
        """Return the account's primary access key."""
        ...

    def ai_account_endpoint(self, name: str, resource_group: str) -> str:
        ...

    def set_secret(self, vault_name: str, name: str, value: str) -> None:
        """Write a secret, replacing any existing value of the same name."""
        ...
