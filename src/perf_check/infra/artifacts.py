#!/usr/bin/env python3
"""
Artifacts module for the PerfCheck benchmark target controller.

The instrumented target server writes one MiniProfiler timer file per request
into tmp/perf_check/miniprofiler under the application root. The directory is
wiped before each request so the newest file always belongs to the request
just made; that file is then moved into tmp/miniprofiler, where the profiler
serves results from, so later cleanups do not delete it.
"""

import logging
import re
import shutil
from pathlib import Path

from ..exceptions import ArtifactLookupError

logger = logging.getLogger(__name__)

ARTIFACT_PATTERN = "mp_timers_*"
ARTIFACT_ID_RE = re.compile(r"mp_timers_(\w+)")
RESULTS_PATH = "/mini-profiler-resources/results?id={id}"


class ArtifactLocator:
    """Clears and resolves profiler artifacts for one application root."""

    def __init__(self, app_root):
        self.app_root = Path(app_root)
        self.artifact_dir = self.app_root / "tmp" / "perf_check" / "miniprofiler"
        self.archive_dir = self.app_root / "tmp" / "miniprofiler"

    def prepare_to_profile(self) -> None:
        """Delete all profiler artifacts left over from previous requests."""
        if self.artifact_dir.exists():
            shutil.rmtree(self.artifact_dir)
            logger.debug("Cleared %s", self.artifact_dir)

    def latest_profiler_url(self) -> str:
        """
        Resolve the profiler URL for the most recent request.

        Returns:
            Path of the profiler results page on the target server

        Raises:
            ArtifactLookupError: If no artifact was written for the request
        """
        candidates = []
        if self.artifact_dir.is_dir():
            candidates = [p for p in self.artifact_dir.glob(ARTIFACT_PATTERN) if p.is_file()]
        if not candidates:
            raise ArtifactLookupError(f"No profiler artifact found in {self.artifact_dir}")

        latest = max(candidates, key=lambda p: p.stat().st_mtime)
        match = ARTIFACT_ID_RE.match(latest.name)
        if not match:
            raise ArtifactLookupError(f"Cannot read profiler id from {latest.name}")

        self.archive_dir.mkdir(parents=True, exist_ok=True)
        shutil.move(str(latest), str(self.archive_dir / latest.name))

        return RESULTS_PATH.format(id=match.group(1))
