#!/usr/bin/env python3
"""
Profiler module for the PerfCheck benchmark target controller.

A profiling round-trip clears stale profiler artifacts, hands an open
connection to a caller-supplied callback that issues the actual request, and
turns the instrumented response into a ProfileResult.
"""

import logging
from pathlib import Path
from typing import Any, Callable, Optional

import requests
from requests.structures import CaseInsensitiveDict

from ..exceptions import PerfCheckError, ResponseFormatError, ServerConnectionError
from ..infra.artifacts import ArtifactLocator
from ..infra.connection import TargetConnection
from ..models.context import EnvironmentContext
from ..models.profile import ProfileOutcome, ProfileResult
from .server import ServerController

logger = logging.getLogger(__name__)

RUNTIME_HEADER = "X-Runtime"
QUERY_COUNT_HEADER = "X-PerfCheck-Query-Count"
STACK_TRACE_HEADER = "X-PerfCheck-StackTrace"

# Raised by callbacks when the server is down, refusing or hung
CONNECTION_FAILURES = (
    ConnectionRefusedError,
    requests.exceptions.ConnectionError,
    requests.exceptions.Timeout,
)

RequestFn = Callable[[TargetConnection], Any]


def _header(headers: CaseInsensitiveDict, name: str, convert):
    value = headers.get(name)
    if value is None:
        raise ResponseFormatError(f"Response is missing the {name} header")
    try:
        return convert(value)
    except (TypeError, ValueError) as e:
        raise ResponseFormatError(f"Invalid {name} header: {value!r}") from e


def _read_backtrace(path: str):
    try:
        return tuple(Path(path).read_text(encoding="utf-8").splitlines())
    except (OSError, UnicodeDecodeError) as e:
        raise ResponseFormatError(f"Cannot read stack trace file {path}: {e}") from e


class ProfilingClient:
    """Runs instrumented requests against the server managed by a ServerController."""

    def __init__(self, server: ServerController, locator: Optional[ArtifactLocator] = None):
        self.server = server
        self.locator = locator or ArtifactLocator(server.app_root)

    def connect(self) -> TargetConnection:
        config = self.server.config
        return TargetConnection(
            self.server.host,
            self.server.port,
            connect_timeout=config.connect_timeout,
            read_timeout=config.read_timeout,
        )

    def profile(self, request_fn: RequestFn, context: Optional[EnvironmentContext] = None) -> ProfileResult:
        """
        Profile one request.

        Args:
            request_fn: Called with an open TargetConnection; issues the request
                and returns the response (headers, status_code, text)
            context: Options used to start the server if it is not running yet

        Returns:
            ProfileResult for the request

        Raises:
            ServerConnectionError: If the server could not be reached
            ResponseFormatError: If the profiling headers are missing or malformed
            ArtifactLookupError: If the request left no profiler artifact
            NotRunningError: If the server's PID file is missing
            ServerLookupError: If the server process has disappeared
        """
        self.locator.prepare_to_profile()
        if not self.server.running():
            self.server.start(context)

        connection = self.connect()
        try:
            connection.open()
            response = request_fn(connection)
        except CONNECTION_FAILURES as e:
            raise ServerConnectionError(
                f"Couldn't connect to the server on {self.server.base_url}: "
                "it either failed to boot or crashed"
            ) from e
        finally:
            connection.close()

        result = self._build_result(response)
        logger.info("Profiled request: %s", result)
        return result

    def try_profile(self, request_fn: RequestFn, context: Optional[EnvironmentContext] = None) -> ProfileOutcome:
        """Like profile(), but controller errors are returned instead of raised."""
        try:
            return ProfileOutcome(result=self.profile(request_fn, context))
        except PerfCheckError as e:
            logger.warning("Profiling failed: %s", e)
            return ProfileOutcome(error=e)

    def _build_result(self, response) -> ProfileResult:
        headers = CaseInsensitiveDict(response.headers or {})

        latency_ms = 1000 * _header(headers, RUNTIME_HEADER, float)
        query_count = _header(headers, QUERY_COUNT_HEADER, int)
        try:
            response_code = int(response.status_code)
        except (TypeError, ValueError) as e:
            raise ResponseFormatError(f"Invalid status code: {response.status_code!r}") from e

        backtrace = None
        trace_path = headers.get(STACK_TRACE_HEADER)
        if trace_path:
            backtrace = _read_backtrace(trace_path)

        profile_url = self.locator.latest_profiler_url()
        server_memory_kb = self.server.mem(self.server.pid())

        return ProfileResult(
            latency_ms=latency_ms,
            query_count=query_count,
            profile_url=profile_url,
            response_code=response_code,
            response_body=response.text,
            server_memory_kb=server_memory_kb,
            backtrace=backtrace,
        )
