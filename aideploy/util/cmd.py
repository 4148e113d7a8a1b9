# cmd.py

import logging
import platform
import shlex
import subprocess
from pathlib import Path
from shutil import which as std_which
from typing import Union, List, Optional, Dict, Iterable

logger = logging.getLogger(__name__)

REDACTED = "***"


class CMD:
    @staticmethod
    def redact(cmd: List[str], secrets: Iterable[str] = ()) -> List[str]:
        """Return a copy of `cmd` with every secret value replaced, for logging."""
        hidden = {s for s in secrets if s}
        return [REDACTED if part in hidden else part for part in cmd]

    @staticmethod
    def run(
            cmd: Union[str, List[str]],
            *,
            shell: bool = False,
            capture_output: bool = True,
            check: bool = True,
            text: bool = True,
            env: Optional[Dict[str, str]] = None,
            cwd: Optional[Union[str, Path]] = None,
            redact: Iterable[str] = (),
    ) -> subprocess.CompletedProcess:
        """
        Runs a subprocess command.

        - If `cmd` is a string and shell=False, splits with shlex.
        - Values listed in `redact` never appear in log output.
        """
        if not isinstance(cmd, (str, list)):
            raise TypeError(f"[CMD.run] 'cmd' must be a str or list, got {type(cmd).__name__}")
        if env is not None and not isinstance(env, dict):
            raise TypeError(f"[CMD.run] 'env' must be a dict or None, got {type(env).__name__}")
        if cwd is not None and not isinstance(cwd, (str, Path)):
            raise TypeError(f"[CMD.run] 'cwd' must be str, pathlib.Path, or None, got {type(cwd).__name__}")

        cwd_str = str(cwd) if isinstance(cwd, Path) else cwd

        if isinstance(cmd, str) and not shell:
            cmd = shlex.split(cmd)

        redact = list(redact)
        shown = CMD.redact(cmd, redact) if isinstance(cmd, list) else REDACTED
        logger.debug("Running command: %r (cwd=%r)", shown, cwd_str)

        try:
            result = subprocess.run(
                cmd,
                shell=shell,
                capture_output=capture_output,
                check=check,
                text=text,
                env=env,
                cwd=cwd_str,
            )
        except subprocess.CalledProcessError as exc:
            stderr_text = exc.stderr if exc.stderr else ""
            logger.debug(
                "Command failed (returncode=%d). cmd=%r%s",
                exc.returncode,
                shown,
                f", stderr={stderr_text!r}" if stderr_text else ""
            )
            raise

        if result.returncode == 0:
            logger.debug("Command succeeded (returncode=0)")
        else:
            logger.warning("Command completed with non-zero exit (returncode=%d)", result.returncode)

        return result

    @staticmethod
    def which(binary: str) -> Optional[str]:
        """
        Return the full path to a binary if found in PATH,
        or check common Azure CLI install locations on Windows.
        """
        path = std_which(binary)
        if path:
            return path

        if binary.lower() == "az" and platform.system() == "Windows":
            fallback_paths = [
                r"C:\Program Files (x86)\Microsoft SDKs\Azure\CLI2\wbin\az.cmd",
                r"C:\Program Files\Microsoft SDKs\Azure\CLI2\wbin\az.cmd",
            ]
            for fb in fallback_paths:
                fb_path = Path(fb)
                if fb_path.exists():
                    logger.debug(f"[CMD.which] Fallback found for {binary}: {fb_path}")
                    return str(fb_path)

        return None
