"""
Core logic for the PerfCheck controller.

Contains:
- server: Target server lifecycle (start, exit, restart, pid, memory)
- profiler: Instrumented requests producing ProfileResults
"""

from .server import ServerController
from .profiler import ProfilingClient
