"""
HTTP session cache keyed by base URL.

Clients talking to the same CAKE domain share one ``requests.Session`` so
keep-alive connections are reused across client instances. The cache is
an explicit object: whoever builds clients decides its lifetime. The
module-level ``default_session_cache`` lives for the whole process and is
what clients use unless handed another cache.
"""

import logging
import threading
from typing import Dict, Optional

import requests


logger = logging.getLogger(__name__)


class PoolClosed(Exception):
    """Session cache has been closed."""


class SessionCache:
    """
    Thread-safe mapping of base URL to ``requests.Session``.

    Example:
        ```python
        cache = SessionCache()
        client = Client(domain="cake.example.com", api_key="...", session_cache=cache)
        ...
        cache.close()
        ```
    """

    def __init__(self):
        self._sessions: Dict[str, requests.Session] = {}
        self._lock = threading.Lock()
        self.closed = False

    def get(self, base_url: str) -> requests.Session:
        """
        Get the session for a base URL, creating it on first use.

        Raises:
            PoolClosed: If the cache has been closed
        """
        with self._lock:
            if self.closed:
                raise PoolClosed("Session cache has been closed")
            session = self._sessions.get(base_url)
            if session is None:
                session = requests.Session()
                self._sessions[base_url] = session
                logger.debug(f"Created HTTP session for {base_url}")
            return session

    def discard(self, base_url: str) -> Optional[requests.Session]:
        """Close and forget the session for a base URL, if any."""
        with self._lock:
            session = self._sessions.pop(base_url, None)
        if session is not None:
            session.close()
        return session

    def close(self) -> None:
        """Close every cached session. The cache cannot be used afterwards."""
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
            self.closed = True
        for session in sessions:
            session.close()
        logger.debug(f"Closed {len(sessions)} HTTP session(s)")

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, base_url: str) -> bool:
        return base_url in self._sessions

    def __enter__(self) -> "SessionCache":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


# Process-lifetime cache shared by clients that are not given their own
default_session_cache = SessionCache()


__all__ = ["SessionCache", "PoolClosed", "default_session_cache"]
