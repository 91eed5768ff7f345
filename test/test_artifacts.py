"""
Unit tests for ArtifactLocator using a temporary application root.
"""

import os

import pytest

from perf_check.exceptions import ArtifactLookupError
from perf_check.infra.artifacts import ArtifactLocator


@pytest.fixture
def locator(app_root):
    return ArtifactLocator(app_root)


def write_artifact(locator, name, mtime):
    locator.artifact_dir.mkdir(parents=True, exist_ok=True)
    path = locator.artifact_dir / name
    path.write_text("{}")
    os.utime(path, (mtime, mtime))
    return path


class TestPrepareToProfile:

    def test_clears_miniprofiler_dir(self, locator, app_root):
        write_artifact(locator, "mp_timers_old", 1000)
        nested = locator.artifact_dir / "nested"
        nested.mkdir()
        (nested / "file").write_text("x")

        locator.prepare_to_profile()
        assert locator.artifact_dir == app_root / "tmp" / "perf_check" / "miniprofiler"
        assert not locator.artifact_dir.exists()

    def test_missing_dir_is_fine(self, locator):
        locator.prepare_to_profile()
        assert not locator.artifact_dir.exists()


class TestLatestProfilerUrl:

    def test_url_for_newest_artifact(self, locator):
        write_artifact(locator, "mp_timers_older", 1000)
        write_artifact(locator, "mp_timers_abcxyz", 2000)

        assert locator.latest_profiler_url() == "/mini-profiler-resources/results?id=abcxyz"

    def test_moves_artifact_to_archive(self, locator):
        write_artifact(locator, "mp_timers_abcxyz", 2000)
        locator.latest_profiler_url()

        assert (locator.archive_dir / "mp_timers_abcxyz").exists()
        assert not (locator.artifact_dir / "mp_timers_abcxyz").exists()

    def test_ignores_other_files(self, locator):
        write_artifact(locator, "mp_timers_abc", 1000)
        write_artifact(locator, "unrelated.log", 5000)
        assert locator.latest_profiler_url().endswith("id=abc")

    def test_no_artifact_raises(self, locator):
        with pytest.raises(ArtifactLookupError):
            locator.latest_profiler_url()

    def test_empty_dir_raises(self, locator):
        locator.artifact_dir.mkdir(parents=True)
        with pytest.raises(ArtifactLookupError):
            locator.latest_profiler_url()

    def test_prepare_then_lookup_raises(self, locator):
        write_artifact(locator, "mp_timers_stale", 1000)
        locator.prepare_to_profile()
        with pytest.raises(ArtifactLookupError):
            locator.latest_profiler_url()
