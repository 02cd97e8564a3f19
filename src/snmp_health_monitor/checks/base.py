"""Base check interface."""

import re
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, Sequence

from snmp_health_monitor.config import EffectiveConfig, PatternSet
from snmp_health_monitor.models import CheckResult, Node
from snmp_health_monitor.session import ProbeSession

WINDOWS_SYSTEM = re.compile(r"windows\s+", re.IGNORECASE)


class EvaluationFault(ValueError):
    """A value returned by the agent could not be interpreted."""


def is_windows(system: str | None) -> bool:
    """True if the system description belongs to a Windows agent."""
    return bool(system) and WINDOWS_SYSTEM.search(system) is not None


def to_float(value: Any, what: str) -> float:
    """Convert an agent value to float.

    Raises:
        EvaluationFault: If the value is missing or not numeric.
    """
    if value is None:
        raise EvaluationFault(f"No value for {what}")
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise EvaluationFault(f"Malformed value for {what}: {value!r}") from e


def threshold(config: EffectiveConfig, key: str, default: float | None, path: str | None = None) -> float | None:
    """The narrowest usable numeric setting for key.

    A mapping holds per-path values and only applies when path is given;
    a mapping without an entry for path falls through to the next layer,
    as does any mapping when path is None.

    Raises:
        EvaluationFault: If the chosen value is not numeric.
    """
    for value in config.candidates(key):
        if isinstance(value, Mapping):
            value = value.get(path) if path is not None else None
            if value is None:
                continue
        return to_float(value, key)
    return None if default is None else float(default)


def column(rows: list[tuple[str, Any]]) -> list[Any]:
    """Values of a walk, in row order."""
    return [value for _, value in rows]


def at(values: Sequence[Any], idx: int) -> Any:
    """Positional lookup that yields None past the end of a short walk."""
    return values[idx] if idx < len(values) else None


class BaseCheck(ABC):
    """Abstract base class for SNMP check modes.

    A check collects a metric record over an open session and evaluates
    that record against the host's effective config. Subclasses set
    ``name``, ``DEFAULTS`` and, for settings holding regular expressions,
    ``pattern_keys``.
    """

    name: str = ""
    DEFAULTS: dict[str, Any] = {}
    pattern_keys: tuple[str, ...] = ()

    def __init__(self, overrides: dict[str, Any] | None = None) -> None:
        """Initialize check with optional overrides of its defaults.

        Raises:
            ConfigError: If a default pattern does not compile.
        """
        self.defaults = {**self.DEFAULTS, **(overrides or {})}
        for key in self.pattern_keys:
            if self.defaults.get(key) is not None:
                PatternSet.compile(self.defaults[key])

    @abstractmethod
    def collect(self, session: ProbeSession, config: EffectiveConfig, system: str | None) -> dict[str, Any]:
        """Fetch and shape the metrics for this check.

        Args:
            session: Open session against the host.
            config: Effective config for the host.
            system: The host's system description.

        Returns:
            The metric record.
        """
        ...

    @abstractmethod
    def evaluate(self, metrics: dict[str, Any], config: EffectiveConfig) -> CheckResult:
        """Apply thresholds to a metric record."""
        ...

    def carry_over(self, metrics: dict[str, Any], node: Node) -> dict[str, Any]:
        """Fold state the caller reported for node into a fresh record."""
        return metrics

    def check(self, session: ProbeSession, node: Node, config: EffectiveConfig, system: str | None) -> CheckResult:
        """Collect and evaluate in one go."""
        metrics = self.collect(session, config, system)
        metrics = self.carry_over(metrics, node)
        return self.evaluate(metrics, config)
