"""Memory and swap utilization checks.

Sets ``usage`` (percent in use) and ``available`` (megabytes) for both
``memory`` and ``swap``.

By default only swap usage warns, since that is the better sign of a
problem. Set ``physical_warn_at`` to also warn on ram usage, e.g. for
embedded systems without virtual memory.
"""

import logging
import re
from typing import Any

from snmp_health_monitor import oids
from snmp_health_monitor.checks.base import BaseCheck, is_windows, threshold, to_float
from snmp_health_monitor.config import EffectiveConfig
from snmp_health_monitor.models import CheckResult
from snmp_health_monitor.session import ProbeSession

logger = logging.getLogger(__name__)

PHYSICAL_MEMORY = re.compile(r"physical memory", re.IGNORECASE)
VIRTUAL_MEMORY = re.compile(r"virtual memory", re.IGNORECASE)

SWAP_WARN_AT = 60


def usage_percent(total: float, available: float) -> float:
    """Percentage in use; a zero total counts as unused."""
    if total <= 0:
        return 0.0
    return round((total - available) / total * 100, 2)


class MemoryCheck(BaseCheck):
    name = "memory"
    DEFAULTS = {
        "physical_warn_at": None,
        "swap_warn_at": SWAP_WARN_AT,
    }

    def collect(self, session: ProbeSession, config: EffectiveConfig, system: str | None) -> dict[str, Any]:
        if is_windows(system):
            info = self._windows_memory(session)
        else:
            info = {
                "memory": self._calc_memory(session, oids.MEMORY),
                "swap": self._calc_memory(session, oids.SWAP),
            }
        logger.debug(f"Memory data on {config.host}: {info}")
        return info

    def evaluate(self, metrics: dict[str, Any], config: EffectiveConfig) -> CheckResult:
        physical_warn_at = threshold(config, "physical_warn_at", None)
        swap_warn_at = threshold(config, "swap_warn_at", SWAP_WARN_AT)

        warnings = []
        memusage = metrics["memory"]["usage"]
        if physical_warn_at is not None and memusage >= physical_warn_at:
            warnings.append(
                f"{memusage:0.1f} memory utilization exceeds {physical_warn_at:0.1f} percent"
            )

        swapusage = metrics["swap"]["usage"]
        if swap_warn_at is not None and swapusage >= swap_warn_at:
            warnings.append(
                f"{swapusage:0.1f} swap utilization exceeds {swap_warn_at:0.1f} percent"
            )

        return CheckResult(metrics=metrics, warning=", ".join(warnings) or None)

    @staticmethod
    def _calc_memory(session: ProbeSession, scalars: dict[str, str]) -> dict[str, float]:
        """Usage and available megabytes from a pair of kB scalars."""
        avail = to_float(session.get(scalars["avail"]), scalars["avail"])
        total = to_float(session.get(scalars["total"]), scalars["total"])

        return {
            "usage": usage_percent(total, avail),
            "available": round(avail / 1024, 2),
        }

    def _windows_memory(self, session: ProbeSession) -> dict[str, Any]:
        """Find the physical and virtual memory rows of hrStorage.

        Windows appends them to the storage table rather than exposing
        dedicated objects.
        """
        mem_idx = swap_idx = None
        for index, label in session.walk(oids.STORAGE_WINDOWS["path"]):
            label = str(label or "")
            if PHYSICAL_MEMORY.search(label):
                mem_idx = index
            elif VIRTUAL_MEMORY.search(label):
                swap_idx = index

        return {
            "memory": self._calc_windows_memory(session, mem_idx),
            "swap": self._calc_windows_memory(session, swap_idx),
        }

    @staticmethod
    def _calc_windows_memory(session: ProbeSession, idx: str | None) -> dict[str, float]:
        info = {"usage": 0.0, "available": 0.0}
        if idx is None:
            return info

        units = to_float(session.get(f"{oids.STORAGE_WINDOWS['units']}.{idx}"), "hrStorageAllocationUnits")
        total = to_float(session.get(f"{oids.STORAGE_WINDOWS['total']}.{idx}"), "hrStorageSize") * units
        used = to_float(session.get(f"{oids.STORAGE_WINDOWS['used']}.{idx}"), "hrStorageUsed") * units

        info["usage"] = usage_percent(total, total - used)
        info["available"] = round((total - used) / 1024 / 1024, 2)
        return info
