"""
Data models for the PerfCheck controller.

Contains:
- context: EnvironmentContext and the environment overlay derived from it
- profile: ProfileResult, ProfileOutcome and RawResponse
"""

from .context import EnvironmentContext, environment_overlay
from .profile import ProfileResult, ProfileOutcome, RawResponse
