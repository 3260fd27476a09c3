"""Version information for repo-updater."""

__all__ = ["VERSION"]

VERSION = "0.1.0"
