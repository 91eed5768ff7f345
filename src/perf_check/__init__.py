"""
PerfCheck benchmark target controller

Starts, stops and profiles a locally spawned application server so that a
"reference" build and a "branch" build can be compared request by request.

Package structure:
- core/: Server lifecycle and profiling round-trips
- models/: Data models (environment context, profile results)
- infra/: Infrastructure (configuration, HTTP connection, profiler artifacts)
- exceptions: Error kinds raised by the controller
"""

import logging

from .exceptions import (
    PerfCheckError,
    ServerConnectionError,
    NotRunningError,
    ServerLookupError,
    ArtifactLookupError,
    ResponseFormatError,
    LaunchError,
    ConfigError,
)
from .models import EnvironmentContext, ProfileResult, ProfileOutcome, RawResponse
from .core import ServerController, ProfilingClient

__version__ = "1.0.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())
