"""repo-updater: batch dependency updates and pull requests across local repositories."""

from repo_updater.version import VERSION

__version__ = VERSION
__all__ = ["__version__", "VERSION"]
