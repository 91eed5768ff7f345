"""Shared fixtures for the PerfCheck controller tests."""

import sys
from pathlib import Path
from unittest.mock import patch

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from perf_check.infra.config import ServerConfig
from perf_check.core.server import ServerController


@pytest.fixture
def app_root(tmp_path):
    root = tmp_path / "app"
    root.mkdir()
    return root


@pytest.fixture
def config(app_root):
    return ServerConfig(app_root=app_root)


@pytest.fixture
def server(config):
    return ServerController(config)


@pytest.fixture
def no_sleep():
    with patch("perf_check.core.server.time.sleep") as mock_sleep:
        yield mock_sleep


@pytest.fixture
def launch(no_sleep):
    """Patch subprocess.run so starts succeed without spawning anything."""
    with patch("perf_check.core.server.subprocess.run") as mock_run:
        mock_run.return_value.returncode = 0
        mock_run.return_value.stderr = b""
        yield mock_run


def write_pid_file(app_root, content="12345\n"):
    pid_dir = Path(app_root) / "tmp" / "pids"
    pid_dir.mkdir(parents=True, exist_ok=True)
    (pid_dir / "server.pid").write_text(content)
