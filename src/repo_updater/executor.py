"""Run external commands inside a repository working tree."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

from repo_updater.errors import CommandFailedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecOutput:
    """Captured output of a command that exited with code 0."""

    stdout: str
    stderr: str


Executor = Callable[[Sequence[str], Path], ExecOutput]


def run(
    cmd: Sequence[str], cwd: Path | None = None, timeout: float | None = None
) -> tuple[int | None, str, str]:
    """Run a command and return (returncode, stdout, stderr).

    Uses stdin=DEVNULL so a command that prompts for input fails instead of
    hanging. The returncode is None when the process could not be spawned or
    was killed after the timeout; stderr then holds the reason.
    """
    try:
        result = subprocess.run(
            list(cmd),
            capture_output=True,
            text=True,
            cwd=cwd,
            timeout=timeout,
            stdin=subprocess.DEVNULL,
        )
        return result.returncode, result.stdout.strip(), result.stderr.strip()
    except subprocess.TimeoutExpired:
        return None, "", f"Command timed out after {timeout}s"
    except OSError as e:
        return None, "", str(e)


def execute(
    command: Sequence[str], cwd: Path | str, timeout: float | None = None
) -> ExecOutput:
    """Run ``command`` in ``cwd`` once and return its trimmed output.

    Raises:
        CommandFailedError: The command exited non-zero, timed out, or could
            not be started. The error carries the command text and stderr.
    """
    command_text = " ".join(command)
    logger.debug("$ %s (cwd=%s)", command_text, cwd)

    code, stdout, stderr = run(command, cwd=Path(cwd), timeout=timeout)
    if code != 0:
        exit_label = "unknown" if code is None else str(code)
        raise CommandFailedError(
            message=f"Command failed: {command_text} (exit {exit_label})",
            command=command_text,
            stderr=stderr,
            exit_code=code,
        )
    return ExecOutput(stdout=stdout, stderr=stderr)


def make_executor(timeout: float | None = None) -> Executor:
    """Return an executor bound to a per-command timeout."""

    def _execute(command: Sequence[str], cwd: Path) -> ExecOutput:
        return execute(command, cwd, timeout=timeout)

    return _execute
