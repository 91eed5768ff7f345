#!/usr/bin/env python3
"""
Profile module for the PerfCheck benchmark target controller.

Holds the record produced by one profiling round-trip, the result wrapper
returned by ProfilingClient.try_profile, and a minimal response container
request callbacks may return instead of a requests.Response.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from ..exceptions import PerfCheckError


@dataclass(frozen=True)
class ProfileResult:
    """
    Measurements taken from a single request against the target server.

    ``backtrace`` is only set when the server reported a stack trace for the
    request; it is None otherwise.
    """

    latency_ms: float
    query_count: int
    profile_url: str
    response_code: int
    response_body: str
    server_memory_kb: int
    backtrace: Optional[Tuple[str, ...]] = None

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the result to a dictionary.

        Returns:
            Dictionary representation of the result
        """
        return {
            "latency_ms": self.latency_ms,
            "query_count": self.query_count,
            "profile_url": self.profile_url,
            "response_code": self.response_code,
            "response_body": self.response_body,
            "server_memory_kb": self.server_memory_kb,
            "backtrace": list(self.backtrace) if self.backtrace is not None else None,
        }

    def __str__(self) -> str:
        return (
            f"ProfileResult({self.response_code}, {self.latency_ms:.1f}ms, "
            f"{self.query_count} queries, {self.server_memory_kb}KB)"
        )


@dataclass
class ProfileOutcome:
    """Result of ProfilingClient.try_profile: either a result or the error that prevented it."""

    result: Optional[ProfileResult] = None
    error: Optional[PerfCheckError] = None

    @property
    def success(self) -> bool:
        """Check if the profiling round-trip produced a result."""
        return self.error is None

    def unwrap(self) -> ProfileResult:
        """Return the result, raising the stored error if there is one."""
        if self.error is not None:
            raise self.error
        return self.result

    def __str__(self) -> str:
        status = "SUCCESS" if self.success else f"FAILED ({type(self.error).__name__}: {self.error})"
        return f"ProfileOutcome({status})"


@dataclass
class RawResponse:
    """The status, headers and body of a response, shaped like requests.Response."""

    status_code: int
    headers: Mapping[str, str] = field(default_factory=dict)
    text: str = ""
