import logging
from pathlib import Path

import click

import aideploy.context._globals as _globals
from aideploy.cloud.controlplane import ControlPlane
from aideploy.context.logger import Logger
from aideploy.errors import ConfigError

logger = logging.getLogger(__name__)


def make_plane(backend: str) -> ControlPlane:
    """Build the control plane for `backend` ("sdk" or "cli")."""
    if backend == "cli":
        from aideploy.cloud.cli_backend import AzureCliControlPlane
        return AzureCliControlPlane()
    if backend == "sdk":
        from aideploy.cloud.sdk_backend import AzureSdkControlPlane
        return AzureSdkControlPlane()
    raise click.BadParameter(f"Unknown backend: {backend}", param_hint="--backend")


def init_logging(log_dir: Path, verbose: bool) -> None:
    """
    Raises:
        ConfigError: The log directory or file cannot be created.
    """
    try:
        Logger.init_logger(
            log_dir=log_dir,
            pretty_console=verbose,
            level="DEBUG" if verbose else "INFO",
        )
    except OSError as e:
        Logger.reset()
        raise ConfigError(f"Cannot write logs to {log_dir}: {e}") from e
    logger.debug(f"[cli] Logging to {Logger.log_path()}")


def runtime_options(fn):
    """Options shared by every command: backend choice, log location and verbosity."""
    fn = click.option("--verbose", is_flag=True, help="Debug logging, also echoed to stderr.")(fn)
    fn = click.option("--log-dir", type=click.Path(file_okay=False, path_type=Path),
                      default=_globals.GLOBAL_LOG_DIR, show_default=True, help="Directory for the run's log file.")(fn)
    fn = click.option("--backend", type=click.Choice(_globals.BACKENDS), default=_globals.DEFAULT_BACKEND,
                      show_default=True, help="Control-plane implementation to talk to Azure with.")(fn)
    return fn


def plane_for(ctx: click.Context, backend: str) -> ControlPlane:
    factory = ctx.obj.get("plane_factory", make_plane)
    return factory(backend)
