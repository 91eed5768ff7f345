#!/usr/bin/env python3
"""
Environment context module for the PerfCheck benchmark target controller.

An EnvironmentContext describes the options for one start of the target
server: which feature toggles are on and whether the server should run with
the reference or the branch environment variables. The overlay built from it
is handed to the launched process only; the controller's own environment is
never modified.
"""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Dict, Mapping

from ..exceptions import ConfigError


def _frozen(values: Mapping[str, Any]) -> Mapping[str, str]:
    return MappingProxyType({str(k): str(v) for k, v in dict(values).items()})


@dataclass(frozen=True)
class EnvironmentContext:
    """
    Immutable run options for one start or restart of the target server.

    Attributes:
        is_reference: True for the baseline run, False for the candidate
        verify_no_diff: Ask the server to verify responses are unchanged
        caching_enabled: Leave application caching on
        branch_env_vars: Extra variables applied for branch runs
        reference_env_vars: Extra variables applied for reference runs
    """

    is_reference: bool = False
    verify_no_diff: bool = False
    caching_enabled: bool = True
    branch_env_vars: Mapping[str, str] = field(default_factory=dict)
    reference_env_vars: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        # frozen dataclass: bypass __setattr__ to store read-only copies
        object.__setattr__(self, "branch_env_vars", _frozen(self.branch_env_vars))
        object.__setattr__(self, "reference_env_vars", _frozen(self.reference_env_vars))

    def __hash__(self):
        return hash((
            self.is_reference,
            self.verify_no_diff,
            self.caching_enabled,
            frozenset(self.branch_env_vars.items()),
            frozenset(self.reference_env_vars.items()),
        ))

    @property
    def selected_env_vars(self) -> Mapping[str, str]:
        """The user variables for the current mode."""
        if self.is_reference:
            return self.reference_env_vars
        return self.branch_env_vars

    def for_reference(self) -> "EnvironmentContext":
        return replace(self, is_reference=True)

    def for_branch(self) -> "EnvironmentContext":
        return replace(self, is_reference=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EnvironmentContext":
        """
        Create an EnvironmentContext from the ``options`` section of a config file.

        Recognized keys are ``verify_no_diff``, ``caching``, ``branch_envs``,
        ``reference_envs`` and ``reference``.

        Raises:
            ConfigError: On unknown keys or env maps that are not mappings
        """
        known = {"verify_no_diff", "caching", "branch_envs", "reference_envs", "reference"}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown options: {', '.join(sorted(unknown))}")

        for key in ("branch_envs", "reference_envs"):
            value = data.get(key)
            if value is not None and not isinstance(value, Mapping):
                raise ConfigError(f"Option '{key}' must be a mapping of variable names to values")

        return cls(
            is_reference=bool(data.get("reference", False)),
            verify_no_diff=bool(data.get("verify_no_diff", False)),
            caching_enabled=bool(data.get("caching", True)),
            branch_env_vars=data.get("branch_envs") or {},
            reference_env_vars=data.get("reference_envs") or {},
        )


def environment_overlay(context: EnvironmentContext) -> Dict[str, str]:
    """
    Build the variables to set in the target server's environment.

    The fixed PERF_CHECK flags come first; the user variables for the selected
    mode are applied on top and win on key collisions.

    Args:
        context: Run options for this start

    Returns:
        Dictionary of environment variables to overlay on the inherited environment
    """
    overlay = {
        "PERF_CHECK": "1",
        "PERF_CHECK_VERIFICATION": "1" if context.verify_no_diff else "0",
        "PERF_CHECK_NOCACHING": "0" if context.caching_enabled else "1",
    }
    overlay.update(context.selected_env_vars)
    return overlay
