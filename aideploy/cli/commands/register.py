import time

import click

from aideploy.cli.common import init_logging, plane_for, runtime_options
from aideploy.cloud.providers import ProviderRegistration
from aideploy.context.config import Config
from aideploy.context.logger import Console
from aideploy.errors import DeploymentError


@click.command()
@click.argument("namespaces", nargs=-1, required=True)
@click.option("--poll-attempts", type=click.IntRange(min=1), help="State checks per provider before giving up.")
@click.option("--poll-interval", type=click.FloatRange(min=0), help="Seconds between state checks.")
@runtime_options
@click.pass_context
def run(ctx, namespaces, poll_attempts, poll_interval, backend, log_dir, verbose):
    """Register resource provider namespaces and wait until Azure reports them Registered."""
    console = ctx.obj.get("console") or Console()

    try:
        init_logging(log_dir, verbose)
        config = Config.load(poll_attempts=poll_attempts, poll_interval=poll_interval)
        registration = ProviderRegistration(
            plane_for(ctx, backend), config.poll, console=console, sleep=ctx.obj.get("sleep", time.sleep)
        )
        registration.ensure_all(namespaces)
    except DeploymentError as e:
        console.fail(str(e))
        ctx.exit(1)
