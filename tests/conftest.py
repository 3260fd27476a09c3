"""Pytest configuration for repo-updater tests."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

import pytest

from repo_updater.errors import CommandFailedError
from repo_updater.executor import ExecOutput


class ScriptedExecutor:
    """Stand-in for the process executor.

    Records every command and answers by command prefix: ``responses`` maps a
    prefix to the stdout to return, ``failures`` lists prefixes that raise
    CommandFailedError. Unscripted commands succeed with empty output.
    """

    def __init__(
        self,
        responses: dict[str, str] | None = None,
        failures: Sequence[str] = (),
    ):
        self.responses = {"git symbolic-ref": "refs/remotes/origin/main"}
        self.responses.update(responses or {})
        self.failures = list(failures)
        self.calls: list[list[str]] = []
        self.cwds: list[Path] = []

    def __call__(self, command: Sequence[str], cwd: Path) -> ExecOutput:
        cmd = list(command)
        self.calls.append(cmd)
        self.cwds.append(Path(cwd))
        text = " ".join(cmd)

        for prefix in self.failures:
            if text.startswith(prefix):
                raise CommandFailedError(
                    message=f"Command failed: {text} (exit 1)",
                    command=text,
                    stderr=f"error: {cmd[0]} failed",
                    exit_code=1,
                )

        for prefix, stdout in self.responses.items():
            if text.startswith(prefix):
                return ExecOutput(stdout=stdout, stderr="")

        return ExecOutput(stdout="", stderr="")

    @property
    def commands(self) -> list[str]:
        return [" ".join(cmd) for cmd in self.calls]

    def ran(self, prefix: str) -> bool:
        return any(c.startswith(prefix) for c in self.commands)


@pytest.fixture
def scripted_executor():
    """Factory for ScriptedExecutor instances."""
    return ScriptedExecutor


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """An empty directory that looks like a git working tree."""
    repo = tmp_path / "my-app"
    (repo / ".git").mkdir(parents=True)
    return repo


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo the handler the CLI installs so caplog sees records in every test."""
    yield
    logger = logging.getLogger("repo_updater")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
