# aideploy/cli/main.py
import click

from aideploy import __version__
from aideploy.cli.commands import deploy as deploy_cmd
from aideploy.cli.commands import register as register_cmd


@click.group()
@click.version_option(__version__, prog_name="aideploy")
@click.pass_context
def cli(ctx):
    """Provision Azure AI services and keep their credentials in Key Vault."""
    ctx.ensure_object(dict)


cli.add_command(cmd=deploy_cmd.run, name="deploy")
cli.add_command(cmd=register_cmd.run, name="register")
