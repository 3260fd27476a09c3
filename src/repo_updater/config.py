"""Repository list configuration.

Loads the JSON repo list from ./repo-updater.config.json or
~/.config/repo-updater/config.json (respecting XDG_CONFIG_HOME).

Config file example:
    {
      "repos": ["/path/to/repo-one", "/path/to/repo-two"]
    }
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from repo_updater.errors import (
    ConfigNotFoundError,
    ConfigParseError,
    DirectoryNotFoundError,
    NotAGitRepositoryError,
)

CONFIG_FILENAME = "repo-updater.config.json"

EXAMPLE_CONFIG: dict[str, Any] = {
    "repos": ["/path/to/repo-one", "/path/to/repo-two"],
}


@dataclass
class Config:
    """Parsed repo-updater configuration."""

    repos: list[str]
    path: Path | None = field(default=None, compare=False)


@dataclass
class RepoValidation:
    """Repository paths split by whether the pipeline can run on them."""

    valid: list[str] = field(default_factory=list)
    missing: list[DirectoryNotFoundError] = field(default_factory=list)
    not_git: list[NotAGitRepositoryError] = field(default_factory=list)


def _user_config_path() -> Path:
    """Get the per-user config file path, respecting XDG_CONFIG_HOME."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        base = Path(xdg_config)
    else:
        base = Path.home() / ".config"
    return base / "repo-updater" / "config.json"


def config_search_paths(config_path: str | Path | None = None) -> list[Path]:
    """Return the candidate config files, in the order they are tried."""
    if config_path:
        return [Path(config_path).expanduser()]
    return [Path.cwd() / CONFIG_FILENAME, _user_config_path()]


def parse_config(data: Any, path: Path) -> Config:
    """Validate decoded JSON and build a Config."""
    if not isinstance(data, dict):
        raise ConfigParseError(path, "Config must be a JSON object")
    repos = data.get("repos")
    if not isinstance(repos, list) or not all(isinstance(r, str) for r in repos):
        raise ConfigParseError(path, "Config must contain a 'repos' array of strings")
    return Config(repos=list(repos), path=path)


def load_config(config_path: str | Path | None = None) -> Config:
    """Find and load the repo list.

    Args:
        config_path: Explicit config file. When given, no other location is searched.

    Raises:
        ConfigNotFoundError: None of the candidate files exists.
        ConfigParseError: The file is not valid JSON or has no usable ``repos`` list.
    """
    candidates = config_search_paths(config_path)
    found = next((p for p in candidates if p.is_file()), None)
    if found is None:
        raise ConfigNotFoundError(candidates)

    try:
        data = json.loads(found.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ConfigParseError(found, str(e)) from e

    return parse_config(data, found)


def validate_repos(repos: list[str]) -> RepoValidation:
    """Sort repo paths into valid, missing and non-git directories."""
    result = RepoValidation()
    for repo in repos:
        path = Path(repo).expanduser()
        if not path.exists():
            result.missing.append(DirectoryNotFoundError(repo))
        elif not (path / ".git").exists():
            result.not_git.append(NotAGitRepositoryError(repo))
        else:
            result.valid.append(str(path))
    return result
