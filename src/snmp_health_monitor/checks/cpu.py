"""Machine load/cpu checks.

Sets the current 1, 5 and 15 minute loads under ``load`` and warns on cpu
overutilization.
"""

from typing import Any

from snmp_health_monitor import oids
from snmp_health_monitor.checks.base import BaseCheck, EvaluationFault, column, is_windows, threshold, to_float
from snmp_health_monitor.config import EffectiveConfig
from snmp_health_monitor.models import CheckResult
from snmp_health_monitor.session import ProbeSession

# Default overutilization percentage.
WARN_AT = 80

# Row position in the laLoad walk -> label.
LOADKEYS = {
    1: "load1",
    2: "load5",
    3: "load15",
}


class CPUCheck(BaseCheck):
    """Warn when the cpu is overutilized."""

    name = "cpu"
    DEFAULTS = {
        "warn_at": WARN_AT,  # Overutilization percentage that qualifies as a warning
    }

    def collect(self, session: ProbeSession, config: EffectiveConfig, system: str | None) -> dict[str, Any]:
        cpus = column(session.walk(oids.PROCESSOR_LOAD))
        info: dict[str, Any] = {"cpu": {"count": len(cpus)}, "load": {}}

        # Windows agents have no load average, only the current cpu usage.
        if is_windows(system):
            info["platform"] = "windows"
            loads = [to_float(v, "hrProcessorLoad") for v in cpus if v is not None]
            info["cpu"]["usage"] = sum(loads) / len(loads) if loads else 0.0
            return info

        info["platform"] = "net-snmp"
        for idx, (_, value) in enumerate(session.walk(oids.LOAD_TABLE)):
            key = LOADKEYS.get(idx + 1)
            if key is None or value is None:
                continue
            info["load"][key] = to_float(value, f"laLoad.{idx + 1}")

        return info

    def evaluate(self, metrics: dict[str, Any], config: EffectiveConfig) -> CheckResult:
        cpu = dict(metrics["cpu"])
        info = {**metrics, "cpu": cpu}

        if metrics.get("platform") == "windows":
            usage = cpu.get("usage", 0.0)
            info["message"] = f"System is {usage:0.1f}% in use."

        # The 5 minute average avoids state changes on transient spikes.
        else:
            load5 = metrics["load"].get("load5")
            if load5 is None:
                raise EvaluationFault("No 5 minute load average reported")

            percentage = round((load5 / max(cpu["count"], 1) - 1) * 100, 1)
            if percentage < 0:
                info["message"] = f"System is {abs(percentage):0.1f}% idle."
                usage = round(percentage + 100, 1)
            else:
                info["message"] = f"System is {percentage:0.1f}% overloaded."
                usage = percentage

        cpu["usage"] = usage

        warn_at = threshold(config, "warn_at", WARN_AT)
        warning = None
        if usage >= warn_at:
            warning = f"{usage:0.1f} utilization exceeds {warn_at:0.1f} percent"

        return CheckResult(metrics=info, warning=warning)
