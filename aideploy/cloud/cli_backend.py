import logging
from typing import Dict, List, Optional

from aideploy.cloud import run
from aideploy.cloud.controlplane import AzureSession
from aideploy.errors import AzureCliError, ControlPlaneError

logger = logging.getLogger(__name__)


def _tag_args(tags: Dict[str, str]) -> List[str]:
    return ["--tags"] + [f"{k}={v}" for k, v in tags.items()] if tags else []


class AzureCliControlPlane:
    """
    ControlPlane backed by the `az` command line. Relies on an existing `az login` session.
    """

    def account_show(self) -> Optional[AzureSession]:
        try:
            acct = run.run_az(["az", "account", "show"])
        except AzureCliError as e:
            logger.debug(f"[AzureCliControlPlane] az account show failed: {e}")
            return None

        if not isinstance(acct, dict) or not acct.get("id"):
            return None
        return AzureSession(
            subscription_id=acct["id"],
            tenant_id=acct.get("tenantId"),
            user=(acct.get("user") or {}).get("name"),
        )

    def provider_state(self, namespace: str) -> str:
        state = run.query(["az", "provider", "show", "--namespace", namespace], "registrationState")
        if not state:
            raise ControlPlaneError(f"Empty registration state for {namespace}")
        return state

    def register_provider(self, namespace: str) -> None:
        run.run_quiet(["az", "provider", "register", "--namespace", namespace])

    def create_resource_group(self, name: str, location: str, tags: Dict[str, str]) -> None:
        run.run_quiet(
            ["az", "group", "create", "--name", name, "--location", location] + _tag_args(tags)
        )

    def create_key_vault(
            self,
            name: str,
            resource_group: str,
            location: str,
            sku: str,
            enable_rbac_authorization: bool,
            tags: Dict[str, str],
    ) -> None:
        run.run_quiet(
            [
                "az", "keyvault", "create",
                "--name", name,
                "--resource-group", resource_group,
                "--location", location,
                "--enable-rbac-authorization", str(enable_rbac_authorization).lower(),
                "--sku", sku,
            ] + _tag_args(tags)
        )

    def create_ai_account(
            self,
            name: str,
            resource_group: str,
            location: str,
            kind: str,
            sku: str,
            tags: Dict[str, str],
    ) -> None:
        run.run_quiet(
            [
                "az", "cognitiveservices", "account", "create",
                "--name", name,
                "--resource-group", resource_group,
                "--location", location,
                "--kind", kind,
                "--sku", sku,
                "--yes",
            ] + _tag_args(tags)
        )

    def ai_account_key(self, name: str, resource_group: str) -> str:
        key = run.query(
            ["az", "cognitiveservices", "account", "keys", "list",
             "--name", name, "--resource-group", resource_group],
            "key1",
        )
        if not key:
            raise ControlPlaneError(f"No primary key returned for {name}")
        return key

    def ai_account_endpoint(self, name: str, resource_group: str) -> str:
        endpoint = run.query(
            ["az", "cognitiveservices", "account", "show",
             "--name", name, "--resource-group", resource_group],
            "properties.endpoint",
        )
        if not endpoint:
            raise ControlPlaneError(f"No endpoint returned for {name}")
        return endpoint

    def set_secret(self, vault_name: str, name: str, value: str) -> None:
        run.run_quiet(
            ["az", "keyvault", "secret", "set",
             "--vault-name", vault_name, "--name", name, "--value", value],
            redact=[value],
        )
