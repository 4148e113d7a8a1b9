"""
Azure side of a deployment run: control-plane backends and the deployment steps.
"""

from aideploy.cloud.controlplane import AzureSession, ControlPlane
from aideploy.cloud.naming import ResourceNames, generate_suffix
from aideploy.cloud.provision import DeploymentContext, DeploymentResult, Provision, deploy
from aideploy.cloud.summary import render_summary

__all__ = [
    "AzureSession",
    "ControlPlane",
    "ResourceNames",
    "generate_suffix",
    "DeploymentContext",
    "DeploymentResult",
    "Provision",
    "deploy",
    "render_summary",
]
