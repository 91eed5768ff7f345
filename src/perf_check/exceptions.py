#!/usr/bin/env python3
"""
Exceptions module for the PerfCheck benchmark target controller.

Every error raised by the controller derives from PerfCheckError so callers can
catch the whole family at once, while still telling an unreachable server apart
from a server that answered with an unexpected response.
"""


class PerfCheckError(Exception):
    """Base class for all controller errors."""


class ServerConnectionError(PerfCheckError):
    """The target server refused, dropped or timed out a profiling request."""


class NotRunningError(PerfCheckError):
    """No usable PID file was found for the target server."""


class ServerLookupError(PerfCheckError, LookupError):
    """The PID does not belong to a live process."""


class ArtifactLookupError(PerfCheckError):
    """The request did not leave a profiler artifact behind."""


class ResponseFormatError(PerfCheckError):
    """A profiling header is missing or cannot be parsed."""


class LaunchError(PerfCheckError):
    """The server launch command could not be run or exited with an error."""


class ConfigError(PerfCheckError):
    """The configuration file or one of its values is invalid."""
