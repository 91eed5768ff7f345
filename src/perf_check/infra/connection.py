#!/usr/bin/env python3
"""
Connection module for the PerfCheck benchmark target controller.

TargetConnection is the handle given to profiling callbacks. It wraps a
requests.Session bound to the target server's base URL and enforces the
configured timeouts on every request.
"""

import logging
from typing import Optional

import requests

logger = logging.getLogger(__name__)


class TargetConnection:
    """
    HTTP connection to the target server.

    The underlying session is released on the first call to close(); later
    calls do nothing, so a callback may close the connection itself without
    the profiler closing it a second time.
    """

    def __init__(self, host: str, port: int, connect_timeout: float = 5.0, read_timeout: float = 1000.0):
        self.host = host
        self.port = port
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout
        self._session: Optional[requests.Session] = None
        self._closed = False

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @property
    def closed(self) -> bool:
        return self._closed

    def open(self) -> "TargetConnection":
        """Create the HTTP session. Returns self for chaining."""
        if self._closed:
            raise RuntimeError("Connection already closed")
        if self._session is None:
            self._session = requests.Session()
            logger.debug("Opened connection to %s", self.base_url)
        return self

    def request(self, method: str, path: str, **kwargs) -> requests.Response:
        """
        Send a request to the target server.

        Args:
            method: HTTP method
            path: Path relative to the server root (e.g. "/users?page=2")
            **kwargs: Passed to requests.Session.request (headers, data, ...)

        Returns:
            The requests.Response
        """
        if self._session is None or self._closed:
            raise RuntimeError("Connection is not open")
        kwargs.setdefault("timeout", (self.connect_timeout, self.read_timeout))
        kwargs.setdefault("allow_redirects", False)
        return self._session.request(method, self.base_url + path, **kwargs)

    def get(self, path: str, **kwargs) -> requests.Response:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs) -> requests.Response:
        return self.request("POST", path, **kwargs)

    def close(self) -> None:
        """Release the HTTP session."""
        if self._closed:
            return
        self._closed = True
        if self._session is not None:
            self._session.close()
            logger.debug("Closed connection to %s", self.base_url)

    def __enter__(self) -> "TargetConnection":
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __str__(self) -> str:
        state = "closed" if self._closed else "open" if self._session else "new"
        return f"TargetConnection({self.base_url}, {state})"
