#!/usr/bin/env python3
"""
Server module for the PerfCheck benchmark target controller.

The ServerController owns the lifecycle of the application server under test:
1. Build the environment overlay for the run
2. Launch the server daemonized from the application root
3. Wait for it to bind its socket and write its PID file
4. Signal it to quit when the run is over
"""

import logging
import os
import signal
import subprocess
import time
from typing import Dict, Optional

import psutil

from ..exceptions import LaunchError, NotRunningError, ServerLookupError
from ..infra.config import ServerConfig
from ..models.context import EnvironmentContext, environment_overlay

logger = logging.getLogger(__name__)


class ServerController:
    """
    Starts, stops and inspects one target server bound to host:port.

    The controller does not pool processes: a second start while the server
    is running does nothing, and callers wanting fresh options must restart.
    Shutdown is a best-effort SIGQUIT with no forced kill afterwards.
    """

    def __init__(self, config: ServerConfig):
        """
        Initialize the ServerController.

        Args:
            config: Application root, bind address, launch command and grace periods
        """
        self.config = config
        self._running = False
        self._environment: Dict[str, str] = {}

    @property
    def app_root(self):
        return self.config.app_root

    @property
    def host(self) -> str:
        return self.config.host

    @property
    def port(self) -> int:
        return self.config.port

    @property
    def base_url(self) -> str:
        return self.config.base_url

    @property
    def environment(self) -> Dict[str, str]:
        """The overlay applied on the last launch."""
        return dict(self._environment)

    def launch_command(self):
        return list(self.config.launch_command) + ["-b", self.host, "-p", str(self.port), "-d"]

    def start(self, context: Optional[EnvironmentContext] = None) -> None:
        """
        Launch the target server with the environment for ``context``.

        Args:
            context: Run options; defaults to a branch run with no extra variables

        Raises:
            LaunchError: If the launch command cannot be run, times out or exits non-zero
        """
        if self._running:
            logger.warning("Server on %s already running; restart to apply new options", self.base_url)
            return

        context = context or EnvironmentContext()
        overlay = environment_overlay(context)
        env = os.environ.copy()
        env.update(overlay)

        command = self.launch_command()
        mode = "reference" if context.is_reference else "branch"
        logger.info("Starting %s server on %s from %s", mode, self.base_url, self.app_root)

        try:
            result = subprocess.run(
                command,
                cwd=str(self.app_root),
                env=env,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                timeout=self.config.launch_timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise LaunchError(
                f"Server launch did not return within {self.config.launch_timeout}s: {' '.join(command)}"
            ) from e
        except OSError as e:
            raise LaunchError(f"Cannot run {' '.join(command)}: {e}") from e

        if result.returncode != 0:
            stderr = (result.stderr or b"").decode("utf-8", errors="replace").strip()
            raise LaunchError(f"Server launch exited with code {result.returncode}: {stderr}")

        self._environment = overlay
        time.sleep(self.config.start_grace)
        self._running = True

    def exit(self) -> None:
        """Ask the target server to quit. Does nothing if it was not started by this controller."""
        if not self._running:
            logger.debug("Server on %s not started; nothing to stop", self.base_url)
            return

        try:
            pid = self.pid()
        except NotRunningError:
            logger.debug("No server PID for %s; nothing to stop", self.base_url)
            self._running = False
            return

        logger.info("Sending SIGQUIT to server pid %d", pid)
        try:
            os.kill(pid, signal.SIGQUIT)
        except ProcessLookupError:
            logger.warning("Server pid %d already gone", pid)
        else:
            time.sleep(self.config.stop_grace)
        self._running = False

    def restart(self, context: Optional[EnvironmentContext] = None) -> None:
        """Stop the server if it is running, then start it with ``context``."""
        if self.running():
            self.exit()
        self.start(context)

    def running(self) -> bool:
        return self._running

    def pid(self) -> int:
        """
        Read the PID written by the target server.

        Returns:
            The server's process ID

        Raises:
            NotRunningError: If the PID file is missing or does not hold a positive integer
        """
        pid_file = self.config.pid_file
        try:
            pid = int(pid_file.read_text().strip())
        except FileNotFoundError as e:
            raise NotRunningError(f"No PID file at {pid_file}") from e
        except ValueError as e:
            raise NotRunningError(f"Unreadable PID file at {pid_file}") from e
        # 0 and negative values address process groups in os.kill
        if pid <= 0:
            raise NotRunningError(f"Invalid PID {pid} in {pid_file}")
        return pid

    def mem(self, pid: int) -> int:
        """
        Get the resident set size of a process.

        Args:
            pid: Process ID

        Returns:
            RSS in kilobytes

        Raises:
            ServerLookupError: If no process with this PID exists or it cannot be inspected
        """
        try:
            return psutil.Process(pid).memory_info().rss // 1024
        except psutil.NoSuchProcess as e:
            raise ServerLookupError(f"No process with pid {pid}") from e
        except psutil.AccessDenied as e:
            raise ServerLookupError(f"Access denied reading memory of pid {pid}") from e

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.exit()
        return False

    def __str__(self) -> str:
        state = "running" if self._running else "stopped"
        return f"ServerController({self.base_url}, {state})"
