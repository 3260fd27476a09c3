"""Package manager detection from lockfiles."""

from __future__ import annotations

from enum import Enum
from pathlib import Path


class PackageManager(Enum):
    """JavaScript package managers repo-updater knows how to drive."""

    NPM = "npm"
    PNPM = "pnpm"
    YARN = "yarn"
    BUN = "bun"


# Checked in order; npm wins even when a stale bun.lock sits next to it.
LOCKFILES: tuple[tuple[str, PackageManager], ...] = (
    ("package-lock.json", PackageManager.NPM),
    ("pnpm-lock.yaml", PackageManager.PNPM),
    ("yarn.lock", PackageManager.YARN),
    ("bun.lock", PackageManager.BUN),
)

DEFAULT_PACKAGE_MANAGER = PackageManager.NPM

UPDATE_COMMANDS: dict[PackageManager, tuple[str, ...]] = {
    PackageManager.NPM: ("npm", "update"),
    PackageManager.PNPM: ("pnpm", "update", "--latest"),
    PackageManager.YARN: ("yarn", "upgrade"),
    PackageManager.BUN: ("bun", "update", "--latest"),
}

INSTALL_COMMANDS: dict[PackageManager, tuple[str, ...]] = {
    PackageManager.NPM: ("npm", "install"),
    PackageManager.PNPM: ("pnpm", "install"),
    PackageManager.YARN: ("yarn", "install"),
    PackageManager.BUN: ("bun", "install"),
}


def detect_package_manager(repo_path: Path | str) -> PackageManager:
    """Return the package manager whose lockfile is present in ``repo_path``.

    Falls back to npm when no known lockfile exists.
    """
    repo = Path(repo_path)
    for filename, manager in LOCKFILES:
        if (repo / filename).exists():
            return manager
    return DEFAULT_PACKAGE_MANAGER


def update_command_for(manager: PackageManager) -> list[str]:
    """Command that bumps dependencies for ``manager``."""
    return list(UPDATE_COMMANDS[manager])


def install_command_for(manager: PackageManager) -> list[str]:
    """Command that installs dependencies for ``manager``."""
    return list(INSTALL_COMMANDS[manager])
