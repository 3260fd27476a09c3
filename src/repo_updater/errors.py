"""Error kinds raised by repo-updater.

Every error carries a ``kind`` tag so callers can branch on it without
caring about the class hierarchy, and a human-readable ``message``.
"""

from __future__ import annotations

from pathlib import Path


class RepoUpdaterError(Exception):
    """Base class for all repo-updater errors."""

    kind = "RepoUpdaterError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DirectoryNotFoundError(RepoUpdaterError):
    """A supplied repository path does not exist."""

    kind = "DirectoryNotFound"

    def __init__(self, path: str | Path):
        super().__init__(f"Directory not found: {path}")
        self.path = str(path)


class NotAGitRepositoryError(RepoUpdaterError):
    """A supplied repository path exists but has no .git entry."""

    kind = "NotAGitRepository"

    def __init__(self, path: str | Path):
        super().__init__(f"Not a git repository: {path}")
        self.path = str(path)


class CommandFailedError(RepoUpdaterError):
    """An external command exited non-zero or could not be spawned."""

    kind = "CommandFailed"

    def __init__(
        self,
        message: str,
        command: str,
        stderr: str = "",
        exit_code: int | None = None,
    ):
        super().__init__(message)
        self.command = command
        self.stderr = stderr
        self.exit_code = exit_code


class ConfigNotFoundError(RepoUpdaterError):
    """No config file was found in any search location."""

    kind = "ConfigNotFound"

    def __init__(self, searched: list[Path]):
        paths = ", ".join(str(p) for p in searched)
        super().__init__(f"Config file not found. Searched: {paths}")
        self.searched = list(searched)


class ConfigParseError(RepoUpdaterError):
    """The config file exists but is not valid JSON or lacks a usable ``repos`` list."""

    kind = "ConfigParse"

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Failed to parse {path}: {reason}")
        self.path = path
        self.reason = reason
