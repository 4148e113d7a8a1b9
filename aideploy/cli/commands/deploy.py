import secrets
import time
from pathlib import Path

import click

from aideploy.cli.common import init_logging, plane_for, runtime_options
from aideploy.cloud.provision import deploy
from aideploy.context.config import Config
from aideploy.context.logger import Console
from aideploy.errors import DeploymentError


@click.command()
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="TOML, JSON or YAML file with deployment settings.")
@click.option("--project", help="Project identifier used in every resource name.")
@click.option("--environment", help="Environment identifier, e.g. dev or prod.")
@click.option("--location", help="Azure region for all resources.")
@click.option("--skip-provider-registration", is_flag=True, help="Assume the resource providers are registered.")
@click.option("--poll-attempts", type=click.IntRange(min=1), help="State checks per provider before giving up.")
@click.option("--poll-interval", type=click.FloatRange(min=0), help="Seconds between state checks.")
@runtime_options
@click.pass_context
def run(ctx, config_path, project, environment, location, skip_provider_registration,
        poll_attempts, poll_interval, backend, log_dir, verbose):
    """Provision a resource group, Key Vault and AI service, and store the AI credentials as secrets."""
    console = ctx.obj.get("console") or Console()

    try:
        init_logging(log_dir, verbose)
        config = Config.load(
            config_path,
            project=project,
            environment=environment,
            location=location,
            register_providers=False if skip_provider_registration else None,
            poll_attempts=poll_attempts,
            poll_interval=poll_interval,
        )
        deploy(
            config,
            plane_for(ctx, backend),
            console=console,
            sleep=ctx.obj.get("sleep", time.sleep),
            random_bytes=ctx.obj.get("random_bytes", secrets.token_bytes),
        )
    except DeploymentError as e:
        console.fail(str(e))
        ctx.exit(1)
