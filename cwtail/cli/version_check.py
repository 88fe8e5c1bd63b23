"""Background check for a newer published release."""

import os
import threading
from typing import Optional

import httpx

from ..config.config import Config
from ..io.logger import get_logger

logger = get_logger("version_check")

DISABLE_ENV = "CWTAIL_NO_UPDATE_CHECK"


class VersionCheck:
    """Fetches the latest version from the package index on a daemon thread.

    The request starts when the command starts; ``latest()`` only waits a
    short moment for it at the end so a slow index never delays exit.
    """

    def __init__(
        self, current: str, url: str, timeout: float = 2.0, enabled: bool = True
    ):
        self.current = current
        self.url = url
        self.timeout = timeout
        self.enabled = enabled and not os.environ.get(DISABLE_ENV)
        self._latest: Optional[str] = None
        self._thread: Optional[threading.Thread] = None

    @classmethod
    def from_config(cls, config: Config, current: str) -> "VersionCheck":
        return cls(
            current=current,
            url=config.get("update_check.url"),
            timeout=config.get("update_check.timeout", 2.0),
            enabled=config.get("update_check.enabled", True),
        )

    def start(self) -> None:
        if not self.enabled or self._thread is not None:
            return
        self._thread = threading.Thread(target=self._fetch, daemon=True)
        self._thread.start()

    def _fetch(self) -> None:
        try:
            response = httpx.get(self.url, timeout=self.timeout, follow_redirects=True)
            if response.status_code == 200:
                self._latest = response.json()["info"]["version"]
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
            logger.debug(f"Version check failed: {e}")

    def latest(self, wait: float = 0.5) -> Optional[str]:
        """Latest published version, if known within ``wait`` seconds."""
        if self._thread is None:
            return None
        self._thread.join(wait)
        return self._latest

    def newer_version(self, wait: float = 0.5) -> Optional[str]:
        latest = self.latest(wait)
        if latest and latest != self.current:
            return latest
        return None
