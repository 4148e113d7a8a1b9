from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from aideploy.cloud.provision import DeploymentResult

RULE = "=" * 42


def render_summary(result: "DeploymentResult") -> str:
    """Human-readable report of a finished run. Lists secret names, never their values."""
    names = result.names
    lines = [
        RULE,
        "           DEPLOYMENT COMPLETE",
        RULE,
        f"Resource Group:     {names.resource_group}",
        f"Key Vault:          {names.key_vault}",
        f"AI Service:         {names.ai_service}",
        f"AI Endpoint:        {result.endpoint}",
        f"Secrets stored in:  {names.key_vault}",
    ]
    lines += [f"  - {secret}" for secret in result.secret_names]
    lines.append(RULE)
    return "\n".join(lines)
