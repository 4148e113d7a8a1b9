import json
import logging
import subprocess
from typing import Iterable, List, Optional, Union

from aideploy.errors import AzureCliError, ControlPlaneError
from aideploy.util.cmd import CMD

logger = logging.getLogger(__name__)

JsonValue = Union[dict, list, str, int, float, bool, None]


def _resolve_command_path(original_cmd: List[str]) -> List[str]:
    """
    Resolve the actual path to the 'az' executable. If found, replace original_cmd[0].

    Raises:
        ControlPlaneError: If the Azure CLI is not installed.
    """
    resolved = CMD.which(original_cmd[0])
    if not resolved:
        raise ControlPlaneError(
            f"{original_cmd[0]!r} not found on PATH. Install the Azure CLI: https://aka.ms/azcli"
        )
    return [resolved] + original_cmd[1:]


def _has_output_flag(cmd: List[str]) -> bool:
    return "--output" in cmd or "-o" in cmd


def _process_success(raw_stdout: str, expect_json: bool) -> JsonValue:
    """
    Process the subprocess output on success. Parse JSON if expected.
    Empty stdout (e.g. `--output none`) yields None.
    """
    text = (raw_stdout or "").strip()
    if not text:
        return None
    if not expect_json:
        return text
    try:
        return json.loads(text)
    except json.JSONDecodeError as jde:
        raise ControlPlaneError(f"Azure CLI returned invalid JSON: {jde}") from jde


def run_az(
        cmd: List[str],
        *,
        expect_json: bool = True,
        redact: Iterable[str] = (),
) -> JsonValue:
    """
    Run an Azure CLI command and return its parsed output.

    Args:
        cmd: Full command, starting with "az".
        expect_json: Append '--output json' (unless the caller set an output format) and parse stdout.
        redact: Values (such as secrets) that must not appear in logs.

    Returns:
        Parsed JSON, plain text for non-JSON output, or None when stdout is empty.

    Raises:
        AzureCliError: Non-zero exit.
        ControlPlaneError: az missing, or unparseable JSON.
    """
    resolved_cmd = _resolve_command_path(cmd)
    if expect_json and not _has_output_flag(resolved_cmd):
        full_cmd = resolved_cmd + ["--output", "json"]
    else:
        full_cmd = resolved_cmd

    redact = list(redact)
    logger.info(f"[run_az] Running: {' '.join(CMD.redact(cmd, redact))}")

    try:
        completed = CMD.run(full_cmd, capture_output=True, check=True, text=True, redact=redact)
    except subprocess.CalledProcessError as ex:
        raise AzureCliError(CMD.redact(cmd, redact), ex.returncode, ex.stderr) from ex
    except OSError as ex:
        raise ControlPlaneError(f"Could not start Azure CLI: {ex}") from ex

    return _process_success(completed.stdout, expect_json)


# ─────────────────────────────────────────────────────────────────────────────
# CONVENIENCE FUNCTIONS
# ─────────────────────────────────────────────────────────────────────────────

def query(cmd: List[str], jmespath: str) -> Optional[str]:
    """
    Run `cmd` with `--query <jmespath> --output tsv` and return the stripped scalar.
    """
    out = run_az(cmd + ["--query", jmespath, "--output", "tsv"], expect_json=False)
    return out.strip() if isinstance(out, str) else out


def run_quiet(cmd: List[str], *, redact: Iterable[str] = ()) -> None:
    """
    Run a mutating command whose output is not needed (`--output none`).
    """
    run_az(cmd + ["--output", "none"], expect_json=False, redact=redact)
