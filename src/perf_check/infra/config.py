#!/usr/bin/env python3
"""
Configuration module for the PerfCheck benchmark target controller.

Settings come from a YAML file with two sections::

    server:
      app_root: ../my_app
      host: 127.0.0.1
      port: 3031
      launch_command: [bundle, exec, rails, server]
    options:
      verify_no_diff: false
      caching: true
      branch_envs: {FEATURE_X: "on"}
      reference_envs: {FEATURE_X: "off"}

The host, port and app root can be overridden via environment variables, which
is convenient when the default port is already in use.
"""

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from ..exceptions import ConfigError
from ..models.context import EnvironmentContext

logger = logging.getLogger(__name__)

# Environment variable overrides (applied after the config file)
HOST_ENV_VAR = "BENCHMARK_TARGET_HOST"
PORT_ENV_VAR = "BENCHMARK_TARGET_PORT"
APP_ROOT_ENV_VAR = "BENCHMARK_TARGET_APP_ROOT"

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3031
DEFAULT_LAUNCH_COMMAND = ("bundle", "exec", "rails", "server")


@dataclass
class ServerConfig:
    """
    Where the target application lives and how to launch and reach it.

    Grace periods and timeouts are in seconds.
    """

    app_root: Path
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    launch_command: Tuple[str, ...] = DEFAULT_LAUNCH_COMMAND
    start_grace: float = 1.5
    stop_grace: float = 1.5
    launch_timeout: float = 60.0
    connect_timeout: float = 5.0
    read_timeout: float = 1000.0

    def __post_init__(self):
        self.app_root = Path(self.app_root)
        self.launch_command = tuple(self.launch_command)

    @property
    def pid_file(self) -> Path:
        return self.app_root / "tmp" / "pids" / "server.pid"

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ServerConfig":
        """
        Create a ServerConfig from the ``server`` section of a config file.

        Raises:
            ConfigError: If app_root is missing, a key is unknown or a value has the wrong type
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown server settings: {', '.join(sorted(unknown))}")
        if not data.get("app_root"):
            raise ConfigError("Server setting 'app_root' is required")

        values = dict(data)
        try:
            if "port" in values:
                values["port"] = int(values["port"])
            for key in ("start_grace", "stop_grace", "launch_timeout", "connect_timeout", "read_timeout"):
                if key in values:
                    values[key] = float(values[key])
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid server setting: {e}") from e

        command = values.get("launch_command")
        if isinstance(command, str):
            values["launch_command"] = tuple(command.split())
        elif command is not None and not isinstance(command, (list, tuple)):
            raise ConfigError("Server setting 'launch_command' must be a string or a list")

        return cls(**values)


def _apply_env_overrides(server: Dict[str, Any]) -> Dict[str, Any]:
    overrides = {
        "host": os.environ.get(HOST_ENV_VAR),
        "port": os.environ.get(PORT_ENV_VAR),
        "app_root": os.environ.get(APP_ROOT_ENV_VAR),
    }
    for key, value in overrides.items():
        if value:
            logger.debug("Overriding server setting %s from environment", key)
            server[key] = value
    return server


def load_config(path: Optional[str] = None) -> Tuple[ServerConfig, EnvironmentContext]:
    """
    Load server settings and run options from a YAML file.

    Args:
        path: Path to the YAML file; when None only environment variables are used

    Returns:
        Tuple of (ServerConfig, EnvironmentContext)

    Raises:
        ConfigError: If the file cannot be read or parsed, or holds invalid values
    """
    data: Dict[str, Any] = {}
    if path is not None:
        try:
            with open(path, "r") as file:
                data = yaml.safe_load(file) or {}
        except OSError as e:
            raise ConfigError(f"Cannot read config file {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    server = data.get("server") or {}
    options = data.get("options") or {}
    if not isinstance(server, dict) or not isinstance(options, dict):
        raise ConfigError("Config sections 'server' and 'options' must be mappings")

    config = ServerConfig.from_dict(_apply_env_overrides(dict(server)))
    context = EnvironmentContext.from_dict(options)
    logger.info("Loaded config for %s (app root %s)", config.base_url, config.app_root)
    return config, context
