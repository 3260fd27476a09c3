"""Open pull request URLs in the user's browser."""

from __future__ import annotations

import logging
import subprocess
import sys
from collections.abc import Callable, Iterable
from typing import Any

logger = logging.getLogger(__name__)


def browser_command(url: str, platform: str = sys.platform) -> list[str]:
    """Command that opens ``url`` with the platform's default handler."""
    if platform == "win32":
        return ["cmd", "/c", "start", "", url]
    if platform == "darwin":
        return ["open", url]
    return ["xdg-open", url]


def open_urls(
    urls: Iterable[str],
    platform: str = sys.platform,
    launcher: Callable[..., Any] = subprocess.Popen,
) -> None:
    """Launch one browser process per URL without waiting for it."""
    for url in urls:
        cmd = browser_command(url, platform)
        try:
            launcher(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as e:
            logger.warning("Could not open %s: %s", url, e)
