"""Running process checks.

Only running userland processes from the hrSWRun table are considered.
Each configured pattern is a regular expression that must match at least
one command line.
"""

import logging
from typing import Any

from snmp_health_monitor import oids
from snmp_health_monitor.checks.base import BaseCheck, is_windows
from snmp_health_monitor.config import EffectiveConfig, PatternSet
from snmp_health_monitor.models import CheckResult
from snmp_health_monitor.session import ProbeSession

logger = logging.getLogger(__name__)


class ProcessCheck(BaseCheck):
    name = "process"
    DEFAULTS: dict[str, Any] = {
        "processes": [],  # Default list of processes to check for
    }
    pattern_keys = ("processes",)

    def collect(self, session: ProbeSession, config: EffectiveConfig, system: str | None) -> dict[str, Any]:
        if is_windows(system):
            procs = self._windows_processes(session)
        else:
            procs = self._processes(session)

        logger.debug(f"Running processes for host: {config.host}: {procs}")
        return {"count": len(procs), "processes": procs}

    def evaluate(self, metrics: dict[str, Any], config: EffectiveConfig) -> CheckResult:
        patterns: PatternSet | None = config.get("processes")
        running = metrics["processes"]

        errors = []
        for source, pattern in patterns or ():
            if not any(pattern.search(proc) for proc in running):
                errors.append(f"'{source}' is not running")

        return CheckResult(metrics=metrics, error=", ".join(errors) or None)

    @staticmethod
    def _processes(session: ProbeSession) -> list[str]:
        """Command lines as binary path plus arguments."""
        table = oids.PROCESS_NET_SNMP
        procs = []
        for _, (path, args) in session.walk([table["path"], table["args"]]):
            if not path:
                continue
            process = str(path)
            if args:
                process += f" {args}"
            procs.append(process)
        return procs

    @staticmethod
    def _windows_processes(session: ProbeSession) -> list[str]:
        """Windows splits the binary into a directory and a name column."""
        table = oids.PROCESS_WINDOWS
        procs = []
        for _, (path, name, args) in session.walk([table["path"], table["name"], table["args"]]):
            if not path:
                continue
            process = f"{path}{name or ''}"
            if args:
                process += f" {args}"
            procs.append(process)
        return procs
