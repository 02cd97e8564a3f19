"""SNMP check modes."""

from typing import Any

from snmp_health_monitor.checks.base import BaseCheck, EvaluationFault
from snmp_health_monitor.checks.battery import BatteryCheck
from snmp_health_monitor.checks.cpu import CPUCheck
from snmp_health_monitor.checks.disk import DiskCheck
from snmp_health_monitor.checks.load import LoadCheck
from snmp_health_monitor.checks.memory import MemoryCheck
from snmp_health_monitor.checks.process import ProcessCheck
from snmp_health_monitor.checks.swap import SwapCheck
from snmp_health_monitor.config import ConfigError

CHECKS: dict[str, type[BaseCheck]] = {
    check.name: check
    for check in (CPUCheck, LoadCheck, DiskCheck, MemoryCheck, SwapCheck, ProcessCheck, BatteryCheck)
}


def get_check(mode: str, overrides: dict[str, Any] | None = None) -> BaseCheck:
    """Create the check for a mode name.

    Raises:
        ConfigError: If the mode is unknown or its defaults are invalid.
    """
    try:
        check_class = CHECKS[mode]
    except KeyError:
        raise ConfigError(f"Unknown check mode: {mode} (choose from {', '.join(CHECKS)})") from None
    return check_class(overrides)


__all__ = [
    "BaseCheck",
    "BatteryCheck",
    "CHECKS",
    "CPUCheck",
    "DiskCheck",
    "EvaluationFault",
    "LoadCheck",
    "MemoryCheck",
    "ProcessCheck",
    "SwapCheck",
    "get_check",
]
