"""Open view URLs with the operating system's default handler."""

import logging
import subprocess
import sys
from typing import Optional

from .errors import UnsupportedPlatformError

log = logging.getLogger(__name__)


def browser_command(url: str, platform: Optional[str] = None) -> list[str]:
    """Command line that opens ``url`` on ``platform`` (default: this one)."""
    platform = platform or sys.platform
    if platform.startswith("linux") or platform.startswith("openbsd"):
        return ["xdg-open", url]
    if platform == "darwin":
        return ["open", url]
    if platform in ("win32", "cygwin"):
        return ["rundll32", "url.dll,FileProtocolHandler", url]
    raise UnsupportedPlatformError(platform)


def view_in_browser(url: str, platform: Optional[str] = None) -> subprocess.Popen:
    """
    Start the browser for ``url`` without waiting for it to exit.

    Raises:
        UnsupportedPlatformError: no known browser command for the platform
        OSError: the command could not be started
    """
    command = browser_command(url, platform)
    log.info("Opening %s", url[:80] + ("..." if len(url) > 80 else ""))
    return subprocess.Popen(command, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
