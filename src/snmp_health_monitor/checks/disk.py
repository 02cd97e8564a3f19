"""Disk capacity checks.

Reports every included mount with its current usage percentage under
``mounts``. Mounts the caller reported in an earlier cycle but that are
missing now are kept with a None value so their removal is visible.
"""

import logging
from collections.abc import Mapping
from typing import Any

from snmp_health_monitor import oids
from snmp_health_monitor.checks.base import BaseCheck, at, column, is_windows, threshold, to_float
from snmp_health_monitor.config import EffectiveConfig, PatternSet
from snmp_health_monitor.models import CheckResult, Node
from snmp_health_monitor.session import ProbeSession

logger = logging.getLogger(__name__)

# The fallback warning capacity.
WARN_AT = 90


class DiskCheck(BaseCheck):
    """Warn on full mounts, error on completely full or read-only ones."""

    name = "disk"
    DEFAULTS = {
        "warn_at": WARN_AT,
        "alert_readonly": False,  # Don't alert if a mount is read-only
        "include": None,  # If set, only these paths are checked
        "exclude": ["^/dev(/.+)?$", "/dev$", "^/net(/.+)?$", "/proc$", "^/run$", "^/sys/", "/sys$"],
    }
    pattern_keys = ("include", "exclude")

    def collect(self, session: ProbeSession, config: EffectiveConfig, system: str | None) -> dict[str, Any]:
        if is_windows(system):
            mounts = self._windows_disks(session)
        else:
            mounts = self._unix_disks(session)

        includes: PatternSet | None = config.get("include")
        excludes: PatternSet | None = config.get("exclude")

        current = {
            path: data
            for path, data in mounts.items()
            if not self._filtered(path, includes, excludes)
        }
        return {"mounts": current}

    def carry_over(self, metrics: dict[str, Any], node: Node) -> dict[str, Any]:
        """Report previously seen mounts as None unless they are still present."""
        previous = node.properties.get("mounts") or {}
        mounts: dict[str, Any] = {path: None for path in previous}
        mounts.update(metrics["mounts"])
        return {**metrics, "mounts": mounts}

    def evaluate(self, metrics: dict[str, Any], config: EffectiveConfig) -> CheckResult:
        alert_readonly = config.get("alert_readonly")

        errors = []
        warnings = []
        for path, data in metrics["mounts"].items():
            if data is None:
                continue

            capacity = data["capacity"]
            warn = threshold(config, "warn_at", WARN_AT, path=path)
            logger.debug(f"{config.host}:{path} -> {data}, warn at {warn}")

            if capacity >= warn:
                if capacity >= 100:
                    errors.append(f"{path} at {int(capacity)}% capacity")
                else:
                    warnings.append(f"{path} at {int(capacity)}% capacity")

            if isinstance(alert_readonly, Mapping):
                readonly = alert_readonly.get(path)
            else:
                readonly = alert_readonly

            if readonly and data.get("accessmode") == oids.ACCESS_READONLY:
                errors.append(f"{path} is mounted read-only.")

        return CheckResult(
            metrics=metrics,
            warning=", ".join(warnings) or None,
            error=", ".join(errors) or None,
        )

    @staticmethod
    def _filtered(path: str, includes: PatternSet | None, excludes: PatternSet | None) -> bool:
        if excludes is not None and excludes.search(path):
            return True
        return includes is not None and not includes.search(path)

    def _windows_disks(self, session: ProbeSession) -> dict[str, dict[str, Any]]:
        """Fetch hrStorage rows that are local or removable disks."""
        paths = column(session.walk(oids.STORAGE_WINDOWS["path"]))
        types = column(session.walk(oids.STORAGE_WINDOWS["type"]))
        totals = column(session.walk(oids.STORAGE_WINDOWS["total"]))
        used = column(session.walk(oids.STORAGE_WINDOWS["used"]))

        disks = {}
        for idx, path in enumerate(paths):
            total, in_use = at(totals, idx), at(used, idx)
            if path is None or total is None or in_use is None:
                continue
            if at(types, idx) not in oids.WINDOWS_DEVICES:
                continue

            total = to_float(total, f"hrStorageSize of {path}")
            if total == 0:
                continue

            capacity = round(to_float(in_use, f"hrStorageUsed of {path}") / total * 100, 1)
            disks[str(path)] = {"capacity": capacity, "accessmode": None}

        return disks

    def _unix_disks(self, session: ProbeSession) -> dict[str, dict[str, Any]]:
        """Fetch mounts from the net-snmp dskTable."""
        paths = column(session.walk(oids.STORAGE_NET_SNMP["path"]))
        capacities = column(session.walk(oids.STORAGE_NET_SNMP["percent"]))
        accessmodes = column(session.walk(oids.STORAGE_NET_SNMP["access"]))

        disks = {}
        for idx, path in enumerate(paths):
            capacity = at(capacities, idx)
            if path is None or capacity is None:
                continue

            disks[str(path)] = {
                "capacity": int(to_float(capacity, f"dskPercent of {path}")),
                "accessmode": at(accessmodes, idx),
            }

        return disks
