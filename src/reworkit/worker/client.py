"""
HTTP client for the ReworkIt ingest server.
"""

import logging
import time
from typing import Callable, Optional

import requests

from reworkit.config import PUSH_RETRIES

logger = logging.getLogger(__name__)

USER_AGENT = "reworkit"


class PushError(RuntimeError):
    """Raised when a build result could not be delivered to the server."""


class ResultClient:
    """
    Pushes build results to the server.

    Args:
        url: Server base URL, e.g. http://builder.example:3000
        token: Shared secret sent in the SECRET header
        retries: Attempts per push before giving up
        retry_delay: Seconds to wait between failed attempts
    """

    def __init__(
        self,
        url: str,
        token: str,
        retries: int = PUSH_RETRIES,
        retry_delay: float = 10.0,
        timeout: float = 60.0,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if "://" not in url:
            url = f"http://{url}"
        self.url = url.rstrip("/")
        self.token = token
        self.retries = max(1, retries)
        self.retry_delay = retry_delay
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers["User-Agent"] = USER_AGENT
        self._sleep = sleep

    def _push_once(self, package: str, arch: str, success: bool, compressed_log: bytes) -> None:
        response = self.session.post(
            f"{self.url}/push_log",
            headers={"SECRET": self.token},
            data={
                "package": package,
                "arch": arch,
                "success": "true" if success else "false",
            },
            files={"log": (f"{package}.log", compressed_log, "application/gzip")},
            timeout=self.timeout,
        )
        response.raise_for_status()

    def push_log(self, package: str, arch: str, success: bool, compressed_log: bytes) -> None:
        """
        Push one build result, retrying on network and HTTP errors.
        Raises PushError once every attempt failed.
        """
        last_error: Optional[Exception] = None
        for attempt in range(1, self.retries + 1):
            try:
                self._push_once(package, arch, success, compressed_log)
                return
            except requests.RequestException as e:
                last_error = e
                logger.error("(%d/%d) Push LOG got error: %s", attempt, self.retries, e)
                if attempt < self.retries:
                    self._sleep(self.retry_delay)

        raise PushError(f"Giving up on pushing {package} ({arch}): {last_error}")
