import logging
import secrets
import time
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from aideploy.cloud.controlplane import AzureSession, ControlPlane
from aideploy.cloud.naming import RandomBytes, ResourceNames
from aideploy.cloud.providers import ProviderRegistration
from aideploy.cloud.summary import render_summary
from aideploy.cloud.tenant import AzureAccount
from aideploy.cloud.vault import AiCredentials, VaultSecrets
from aideploy.context.config import AiServiceTier, DeploymentConfig
from aideploy.context.logger import Console, log_func
from aideploy.errors import ControlPlaneError, ResourceCreationError
from aideploy.util.error_handling import fallback

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeploymentContext:
    """What every step needs: the run's config, its resource names and the signed-in session."""
    config: DeploymentConfig
    names: ResourceNames
    session: AzureSession


@dataclass(frozen=True)
class DeploymentResult:
    names: ResourceNames
    endpoint: str
    tier: AiServiceTier
    secret_names: Tuple[str, ...]
    subscription_id: str


class Provision:
    """
    Creates the Azure resources of one deployment run. Every create is attempted once;
    only the AI account gets a single fallback to a cheaper tier.
    """

    class ResourceGroup:
        @staticmethod
        def create(ctx: DeploymentContext, plane: ControlPlane) -> str:
            """
            Create the resource group in the configured location.

            Raises:
                ResourceCreationError: The group could not be created.
            """
            name = ctx.names.resource_group
            try:
                plane.create_resource_group(name, ctx.config.location, ctx.config.tags)
            except ControlPlaneError as e:
                raise ResourceCreationError(f"Failed to create resource group {name}: {e}") from e
            return name

    class KeyVault:
        @staticmethod
        def create(ctx: DeploymentContext, plane: ControlPlane) -> str:
            """
            Create the Key Vault with access-policy authorization (RBAC off by default).

            Raises:
                ResourceCreationError: The vault could not be created, including a name collision.
            """
            cfg = ctx.config
            name = ctx.names.key_vault
            try:
                plane.create_key_vault(
                    name,
                    ctx.names.resource_group,
                    cfg.location,
                    cfg.vault_sku,
                    cfg.vault_rbac_authorization,
                    cfg.tags,
                )
            except ControlPlaneError as e:
                raise ResourceCreationError(f"Failed to create Key Vault {name}: {e}") from e
            return name

    class AiService:
        @staticmethod
        def _attempt(ctx: DeploymentContext, plane: ControlPlane, tier: AiServiceTier) -> AiServiceTier:
            plane.create_ai_account(
                ctx.names.ai_service,
                ctx.names.resource_group,
                ctx.config.location,
                tier.kind,
                tier.sku,
                ctx.config.tags,
            )
            return tier

        @staticmethod
        def create(
                ctx: DeploymentContext,
                plane: ControlPlane,
                console: Optional[Console] = None,
        ) -> AiServiceTier:
            """
            Create the AI account on the primary tier, falling back once to the secondary tier.

            Returns:
                AiServiceTier: The tier that was actually created.

            Raises:
                ResourceCreationError: Both attempts failed (or the primary failed with no fallback configured).
            """
            console = console or Console()
            primary, secondary = ctx.config.primary_tier, ctx.config.fallback_tier
            name = ctx.names.ai_service
            attempt = Provision.AiService._attempt

            if secondary is None:
                try:
                    return attempt(ctx, plane, primary)
                except ControlPlaneError as e:
                    raise ResourceCreationError(f"Failed to create AI service {name} ({primary}): {e}") from e

            def alternate() -> AiServiceTier:
                console.info(f"{primary.kind} creation failed, trying simpler AI service...")
                try:
                    return attempt(ctx, plane, secondary)
                except ControlPlaneError as e:
                    raise ResourceCreationError(f"Failed to create AI service {name} ({secondary}): {e}") from e

            tier, used_alternate = fallback(
                lambda: attempt(ctx, plane, primary),
                alternate,
                handled=(ControlPlaneError,),
                label=f"create {name}",
            )
            if used_alternate:
                logger.warning(f"[Provision.AiService] {name} created on fallback tier {tier}")
            return tier


def deploy(
        config: DeploymentConfig,
        plane: ControlPlane,
        *,
        console: Optional[Console] = None,
        sleep: Callable[[float], None] = time.sleep,
        random_bytes: RandomBytes = secrets.token_bytes,
        suffix: Optional[str] = None,
) -> DeploymentResult:
    """
    Run a full deployment: session check, naming, provider registration, resource group,
    Key Vault, AI account, secrets, summary.

    Steps run strictly in order and the first failure aborts the run. Resources created
    before the failure are left in place.

    Raises:
        DeploymentError: Any fatal step failure.
    """
    console = console or Console()

    with log_func("deploy"):
        console.info("Starting deployment...")

        with log_func("session"):
            session = AzureAccount.require_session(plane)
            console.ok(f"Using subscription: {session.subscription_id}")

        names = ResourceNames.generate(config, suffix=suffix, random_bytes=random_bytes)
        logger.info(f"[deploy] Names for this run: {names}")
        ctx = DeploymentContext(config=config, names=names, session=session)

        if config.register_providers:
            with log_func("providers"):
                ProviderRegistration(plane, config.poll, sleep=sleep, console=console).ensure_all(
                    config.provider_namespaces
                )

        with log_func("resource_group"):
            console.info(f"Creating Resource Group: {names.resource_group}")
            Provision.ResourceGroup.create(ctx, plane)
            console.ok(f"Resource Group created: {names.resource_group}")

        with log_func("key_vault"):
            console.info(f"Creating Key Vault: {names.key_vault}")
            Provision.KeyVault.create(ctx, plane)
            console.ok(f"Key Vault created: {names.key_vault}")

        with log_func("ai_service"):
            console.info(f"Creating AI Service: {names.ai_service}")
            tier = Provision.AiService.create(ctx, plane, console=console)
            console.ok(f"AI Service created: {names.ai_service} ({tier})")

        with log_func("secrets"):
            console.info("Retrieving AI service credentials...")
            key, endpoint = AiCredentials.fetch(ctx, plane)
            console.info("Storing secrets in Key Vault...")
            VaultSecrets.store(ctx, plane, config.secret_key_name, key)
            VaultSecrets.store(ctx, plane, config.secret_endpoint_name, endpoint)
            console.ok("Secrets stored in Key Vault")

        result = DeploymentResult(
            names=names,
            endpoint=endpoint,
            tier=tier,
            secret_names=config.secret_names,
            subscription_id=session.subscription_id,
        )

        console.echo()
        console.echo(render_summary(result))
        console.ok("Deployment completed successfully!")
        return result
