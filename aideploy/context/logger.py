# ─── Hierarchical Call Stack Tracking ─────────────────────────────────────────
import contextvars
import logging
import sys
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from types import SimpleNamespace
from typing import Optional

import click
from loguru import logger as _loguru

import aideploy.context._globals as _globals

# A context variable holding the current call-stack as a list of step names
_call_stack = contextvars.ContextVar("_call_stack", default=[])


@contextmanager
def log_func(name: str):
    """
    Context manager to push/pop a step name onto the call stack.
    """
    stack = _call_stack.get()
    token = _call_stack.set(stack + [name])
    try:
        yield
    finally:
        _call_stack.reset(token)


def _enrich_record(record):
    """
    Loguru patch function: injects extra['func'] = dot-joined call stack.
    """
    stack = _call_stack.get()
    record["extra"]["func"] = ".".join(stack) if stack else ""
    return record


class InterceptHandler(logging.Handler):
    """
    A logging.Handler that re-emits stdlib records through loguru, so modules can keep
    using logging.getLogger(__name__).
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = _loguru.level(record.levelname).name
        except ValueError:
            level = record.levelno

        Logger.get_loguru().opt(depth=6, exception=record.exc_info).log(level, record.getMessage())


# ─── Logger Utility ───────────────────────────────────────────────────────────

class Logger:
    """
    Logger utility using loguru with UUID-tagged session identity.
    Adds a patch to include hierarchical step names in every record.
    """

    _configured = False
    _uuid = None
    _logger = None
    _log_path = None
    _handler_ids = SimpleNamespace(file=None, console=None)
    _orig_log_handlers = None
    _orig_log_level = None

    @staticmethod
    def init_logger(
            log_dir: Optional[Path] = _globals.GLOBAL_LOG_DIR,
            label: str = None,
            serialize: bool = False,
            pretty_console: bool = False,
            level: str = "INFO",
    ):
        """
        Initialize the loguru logger with optional file and console output.

        Args:
            log_dir (Path, optional): Directory for the run's log file. None disables file output.
            label (str): Suffix for the log file name; defaults to the session UUID.
            serialize (bool): Write JSON records instead of formatted lines.
            pretty_console (bool): Also write coloured records to stderr.
            level (str): Minimum level for every handler.
        """
        if Logger._configured:
            return Logger._logger

        if log_dir is not None:
            log_dir = Path(log_dir)
            log_dir.mkdir(parents=True, exist_ok=True)

        Logger._uuid = str(uuid.uuid4())
        Logger._configured = True

        _loguru.remove()
        log = _loguru.patch(_enrich_record)

        # Format: time | LEVEL | step.hierarchy | message
        fmt = (
            "<green>{time:HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{extra[func]}</cyan> | "
            "{message}"
        )

        if pretty_console:
            Logger._handler_ids.console = log.add(
                sys.stderr, level=level, colorize=True, enqueue=True, format=fmt
            )

        if log_dir is not None:
            timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d_%H-%M-%S")
            suffix = f"__{label}" if label else f"__{Logger._uuid}"
            log_file = log_dir / f"{timestamp}{suffix}.log"
            Logger._log_path = log_file
            Logger._handler_ids.file = log.add(
                str(log_file), level=level, serialize=serialize, enqueue=True, format=fmt
            )

        Logger._logger = log

        # Route stdlib logging into loguru
        Logger._orig_log_handlers = logging.root.handlers.copy()
        Logger._orig_log_level = logging.root.level
        logging.root.handlers = [InterceptHandler()]
        logging.root.setLevel(logging.NOTSET)

        log.debug("[Logger Init] UUID={} -> {}", Logger._uuid, Logger._log_path)
        return log

    @staticmethod
    def get_loguru():
        if not Logger._configured:
            return _loguru
        return Logger._logger

    @staticmethod
    def log_path() -> Optional[Path]:
        return Logger._log_path

    @staticmethod
    def reset():
        if Logger._configured:
            _loguru.remove()
            if Logger._orig_log_handlers is not None:
                logging.root.handlers = Logger._orig_log_handlers
                logging.root.setLevel(Logger._orig_log_level)
        Logger._configured = False
        Logger._uuid = None
        Logger._logger = None
        Logger._log_path = None
        Logger._orig_log_handlers = None
        Logger._orig_log_level = None
        Logger._handler_ids = SimpleNamespace(file=None, console=None)


# ─── Operator Console ─────────────────────────────────────────────────────────

class Console:
    """
    Operator-facing output: informational, success and fatal messages, each with its
    own marker and colour. Every message is mirrored into the log.
    """

    INFO = "ℹ️ "
    OK = "✅"
    FAIL = "❌"

    def __init__(self, color: Optional[bool] = None):
        self.color = color
        self._log = logging.getLogger("aideploy.console")

    def info(self, message: str) -> None:
        self._log.info(message)
        click.secho(f"{self.INFO} {message}", fg="yellow", color=self.color)

    def ok(self, message: str) -> None:
        self._log.info(message)
        click.secho(f"{self.OK} {message}", fg="green", color=self.color)

    def fail(self, message: str) -> None:
        self._log.error(message)
        click.secho(f"{self.FAIL} {message}", fg="red", err=True, color=self.color)

    def echo(self, text: str = "") -> None:
        click.echo(text, color=self.color)
