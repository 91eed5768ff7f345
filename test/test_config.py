"""
Unit tests for ServerConfig and YAML config loading.
"""

from pathlib import Path

import pytest

from perf_check.exceptions import ConfigError
from perf_check.infra.config import ServerConfig, load_config

CONFIG_YAML = """
server:
  app_root: /srv/app
  port: 4000
  launch_command: bin/rails server
  start_grace: 3
options:
  verify_no_diff: true
  caching: false
  branch_envs:
    FEATURE: "on"
  reference_envs:
    FEATURE: "off"
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("BENCHMARK_TARGET_HOST", "BENCHMARK_TARGET_PORT", "BENCHMARK_TARGET_APP_ROOT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "perf_check.yml"
    path.write_text(CONFIG_YAML)
    return path


class TestServerConfig:

    def test_defaults(self):
        config = ServerConfig(app_root="app")
        assert config.host == "127.0.0.1"
        assert config.port == 3031
        assert config.launch_command == ("bundle", "exec", "rails", "server")
        assert config.pid_file == Path("app/tmp/pids/server.pid")
        assert config.base_url == "http://127.0.0.1:3031"

    def test_from_dict_requires_app_root(self):
        with pytest.raises(ConfigError):
            ServerConfig.from_dict({"port": 3000})

    def test_from_dict_launch_timeout(self):
        config = ServerConfig.from_dict({"app_root": "app", "launch_timeout": "30"})
        assert config.launch_timeout == 30.0
        assert ServerConfig(app_root="app").launch_timeout == 60.0

    def test_from_dict_rejects_bad_port(self):
        with pytest.raises(ConfigError):
            ServerConfig.from_dict({"app_root": "app", "port": "eighty"})

    def test_from_dict_rejects_unknown_keys(self):
        with pytest.raises(ConfigError, match="prot"):
            ServerConfig.from_dict({"app_root": "app", "prot": 3000})


class TestLoadConfig:

    def test_loads_server_and_options(self, config_file):
        config, context = load_config(str(config_file))

        assert config.app_root == Path("/srv/app")
        assert config.port == 4000
        assert config.launch_command == ("bin/rails", "server")
        assert config.start_grace == 3.0
        assert context.verify_no_diff is True
        assert context.caching_enabled is False
        assert context.branch_env_vars == {"FEATURE": "on"}
        assert context.for_reference().selected_env_vars == {"FEATURE": "off"}

    def test_env_overrides(self, config_file, monkeypatch):
        monkeypatch.setenv("BENCHMARK_TARGET_HOST", "0.0.0.0")
        monkeypatch.setenv("BENCHMARK_TARGET_PORT", "5005")
        monkeypatch.setenv("BENCHMARK_TARGET_APP_ROOT", "/tmp/other")

        config, _ = load_config(str(config_file))
        assert config.host == "0.0.0.0"
        assert config.port == 5005
        assert config.app_root == Path("/tmp/other")

    def test_env_only(self, monkeypatch):
        monkeypatch.setenv("BENCHMARK_TARGET_APP_ROOT", "/srv/app")
        config, context = load_config()
        assert config.app_root == Path("/srv/app")
        assert context.is_reference is False

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(str(tmp_path / "missing.yml"))

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yml"
        path.write_text("server: [unclosed")
        with pytest.raises(ConfigError):
            load_config(str(path))

    def test_non_mapping_file(self, tmp_path):
        path = tmp_path / "list.yml"
        path.write_text("- one\n- two\n")
        with pytest.raises(ConfigError):
            load_config(str(path))
