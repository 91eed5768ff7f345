"""
Infrastructure and I/O for the PerfCheck controller.

Contains:
- config: Server settings and YAML config loading
- connection: HTTP connection handle passed to request callbacks
- artifacts: Profiler artifact cleanup and lookup
"""

from .config import ServerConfig, load_config
from .connection import TargetConnection
from .artifacts import ArtifactLocator
