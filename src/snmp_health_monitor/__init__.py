"""
SNMP Health Monitor - batched SNMP health checks with per-host thresholds.

Polls hosts over SNMP in fixed-size concurrent batches, evaluates disk, cpu,
load, memory, swap, process and UPS battery metrics against configurable
thresholds, and returns one verdict per host.
"""

__version__ = "1.0.0"

from snmp_health_monitor.checks import get_check
from snmp_health_monitor.config import Config, ConfigError, ConfigResolver, SNMPDefaults
from snmp_health_monitor.models import CheckResult, HealthStatus, Node
from snmp_health_monitor.monitor import SNMPMonitor

__all__ = [
    "CheckResult",
    "Config",
    "ConfigError",
    "ConfigResolver",
    "HealthStatus",
    "Node",
    "SNMPDefaults",
    "SNMPMonitor",
    "get_check",
]
