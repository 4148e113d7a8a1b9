import base64
import json
import logging
import os
from functools import wraps
from typing import Any, Callable, Dict, Optional

from azure.core.exceptions import AzureError, ClientAuthenticationError
from azure.identity import DefaultAzureCredential
from azure.keyvault.secrets import SecretClient
from azure.mgmt.cognitiveservices import CognitiveServicesManagementClient
from azure.mgmt.cognitiveservices.models import Account, AccountProperties, Sku as CognitiveServicesSku
from azure.mgmt.keyvault import KeyVaultManagementClient
from azure.mgmt.keyvault.models import (
    AccessPolicyEntry,
    Permissions,
    Sku as VaultSku,
    VaultCreateOrUpdateParameters,
    VaultProperties,
)
from azure.mgmt.resource.resources import ResourceManagementClient
from azure.mgmt.resource.resources.models import ResourceGroup
from azure.mgmt.subscription import SubscriptionClient

from aideploy.cloud import run
from aideploy.cloud.controlplane import AzureSession
from aideploy.errors import ControlPlaneError

logger = logging.getLogger(__name__)

ARM_SCOPE = "https://management.azure.com/.default"
SECRET_PERMISSIONS = ["get", "list", "set", "delete"]


def _wrap_azure_errors(fn: Callable) -> Callable:
    """Re-raise any Azure SDK exception as ControlPlaneError."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except AzureError as e:
            raise ControlPlaneError(f"{fn.__name__} failed: {e}") from e
    return wrapper


def token_claims(token: str) -> Dict[str, Any]:
    """
    Decode the payload of a JWT access token without verifying it.
    Only used to learn the caller's tenant and object id.
    """
    try:
        payload = token.split(".")[1]
        payload += "=" * (-len(payload) % 4)
        return json.loads(base64.urlsafe_b64decode(payload))
    except (IndexError, ValueError) as e:
        logger.debug(f"[AzureSdkControlPlane] Could not decode token claims: {e}")
        return {}


class AzureSdkControlPlane:
    """
    ControlPlane backed by the Azure management SDKs.

    Authenticates with DefaultAzureCredential, which also accepts an `az login` session.
    The subscription comes from the constructor, AZURE_SUBSCRIPTION_ID, the az CLI
    default, or the only enabled subscription visible to the credential. Clients may be
    injected for testing.
    """

    def __init__(
            self,
            credential=None,
            subscription_id: Optional[str] = None,
            *,
            resource_client: Optional[ResourceManagementClient] = None,
            keyvault_client: Optional[KeyVaultManagementClient] = None,
            cognitive_client: Optional[CognitiveServicesManagementClient] = None,
            secret_client_factory: Optional[Callable[[str], SecretClient]] = None,
            subscription_client: Optional[SubscriptionClient] = None,
    ):
        self.credential = credential or DefaultAzureCredential()
        self.subscription_id = subscription_id or os.getenv("AZURE_SUBSCRIPTION_ID")
        self._resource_client = resource_client
        self._keyvault_client = keyvault_client
        self._cognitive_client = cognitive_client
        self._secret_client_factory = secret_client_factory
        self._subscription_client = subscription_client
        self._claims: Dict[str, Any] = {}
        self._vault_uris: Dict[str, str] = {}

    # ─── Clients ──────────────────────────────────────────────────────────────

    def _require_subscription(self) -> str:
        if not self.subscription_id:
            raise ControlPlaneError("No subscription selected; call account_show() first or set AZURE_SUBSCRIPTION_ID")
        return self.subscription_id

    @property
    def resource_client(self) -> ResourceManagementClient:
        if self._resource_client is None:
            self._resource_client = ResourceManagementClient(self.credential, self._require_subscription())
        return self._resource_client

    @property
    def keyvault_client(self) -> KeyVaultManagementClient:
        if self._keyvault_client is None:
            self._keyvault_client = KeyVaultManagementClient(self.credential, self._require_subscription())
        return self._keyvault_client

    @property
    def cognitive_client(self) -> CognitiveServicesManagementClient:
        if self._cognitive_client is None:
            self._cognitive_client = CognitiveServicesManagementClient(self.credential, self._require_subscription())
        return self._cognitive_client

    def _secret_client(self, vault_name: str) -> SecretClient:
        vault_url = self._vault_uris.get(vault_name) or f"https://{vault_name}.vault.azure.net/"
        if self._secret_client_factory is not None:
            return self._secret_client_factory(vault_url)
        return SecretClient(vault_url=vault_url, credential=self.credential)

    @property
    def subscription_client(self) -> SubscriptionClient:
        if self._subscription_client is None:
            self._subscription_client = SubscriptionClient(self.credential)
        return self._subscription_client

    @staticmethod
    def _cli_default_subscription() -> Optional[str]:
        """The subscription the `az login` session has selected, if the CLI is usable."""
        try:
            return run.query(["az", "account", "show"], "id") or None
        except ControlPlaneError as e:
            logger.debug(f"[AzureSdkControlPlane] No az CLI default subscription: {e}")
            return None

    def _default_subscription(self) -> Optional[str]:
        """
        Pick the subscription to deploy into when none was given.

        The az CLI default wins. Without it, a single enabled subscription is used;
        several enabled subscriptions are ambiguous and raise ControlPlaneError.
        """
        default = self._cli_default_subscription()
        if default:
            return default

        enabled = [
            sub.subscription_id
            for sub in self.subscription_client.subscriptions.list()
            if sub.state in (None, "Enabled")
        ]
        if len(enabled) > 1:
            raise ControlPlaneError(
                f"{len(enabled)} enabled subscriptions and no az CLI default; "
                "set AZURE_SUBSCRIPTION_ID or run 'az account set --subscription <id>'"
            )
        return enabled[0] if enabled else None

    # ─── ControlPlane ─────────────────────────────────────────────────────────

    def account_show(self) -> Optional[AzureSession]:
        try:
            token = self.credential.get_token(ARM_SCOPE)
        except ClientAuthenticationError as e:
            logger.debug(f"[AzureSdkControlPlane] No usable credential: {e}")
            return None

        self._claims = token_claims(token.token)
        if not self.subscription_id:
            try:
                self.subscription_id = self._default_subscription()
            except AzureError as e:
                raise ControlPlaneError(f"Could not list subscriptions: {e}") from e
        if not self.subscription_id:
            logger.debug("[AzureSdkControlPlane] Signed in, but no enabled subscription is visible")
            return None

        return AzureSession(
            subscription_id=self.subscription_id,
            tenant_id=self._claims.get("tid"),
            user=self._claims.get("upn") or self._claims.get("unique_name") or self._claims.get("appid"),
        )

    @_wrap_azure_errors
    def provider_state(self, namespace: str) -> str:
        provider = self.resource_client.providers.get(namespace)
        return provider.registration_state or "NotRegistered"

    @_wrap_azure_errors
    def register_provider(self, namespace: str) -> None:
        self.resource_client.providers.register(namespace)

    @_wrap_azure_errors
    def create_resource_group(self, name: str, location: str, tags: Dict[str, str]) -> None:
        self.resource_client.resource_groups.create_or_update(
            name,
            ResourceGroup(location=location, tags=dict(tags)),
        )

    @_wrap_azure_errors
    def create_key_vault(
            self,
            name: str,
            resource_group: str,
            location: str,
            sku: str,
            enable_rbac_authorization: bool,
            tags: Dict[str, str],
    ) -> None:
        tenant_id = self._claims.get("tid")
        object_id = self._claims.get("oid")
        if not tenant_id:
            raise ControlPlaneError("Tenant id unknown; call account_show() before creating a vault")

        access_policies = []
        if not enable_rbac_authorization and object_id:
            # Same default the CLI applies: the creator may manage secrets.
            access_policies.append(AccessPolicyEntry(
                tenant_id=tenant_id,
                object_id=object_id,
                permissions=Permissions(secrets=SECRET_PERMISSIONS),
            ))

        params = VaultCreateOrUpdateParameters(
            location=location,
            tags=dict(tags),
            properties=VaultProperties(
                tenant_id=tenant_id,
                sku=VaultSku(family="A", name=sku),
                enable_rbac_authorization=enable_rbac_authorization,
                access_policies=access_policies,
            ),
        )
        vault = self.keyvault_client.vaults.begin_create_or_update(resource_group, name, params).result()
        vault_uri = getattr(getattr(vault, "properties", None), "vault_uri", None)
        if vault_uri:
            self._vault_uris[name] = vault_uri

    @_wrap_azure_errors
    def create_ai_account(
            self,
            name: str,
            resource_group: str,
            location: str,
            kind: str,
            sku: str,
            tags: Dict[str, str],
    ) -> None:
        account = Account(
            location=location,
            kind=kind,
            sku=CognitiveServicesSku(name=sku),
            tags=dict(tags),
            properties=AccountProperties(custom_sub_domain_name=name),
        )
        self.cognitive_client.accounts.begin_create(resource_group, name, account).result()

    @_wrap_azure_errors
    def ai_account_key(self, name: str, resource_group: str) -> str:
        keys = self.cognitive_client.accounts.list_keys(resource_group, name)
        if not keys.key1:
            raise ControlPlaneError(f"No primary key returned for {name}")
        return keys.key1

    @_wrap_azure_errors
    def ai_account_endpoint(self, name: str, resource_group: str) -> str:
        account = self.cognitive_client.accounts.get(resource_group, name)
        endpoint = account.properties.endpoint if account.properties else None
        if not endpoint:
            raise ControlPlaneError(f"No endpoint returned for {name}")
        return endpoint

    @_wrap_azure_errors
    def set_secret(self, vault_name: str, name: str, value: str) -> None:
        self._secret_client(vault_name).set_secret(name, value)
