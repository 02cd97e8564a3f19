"""Checks for UPS battery health.

Checks the remaining battery charge, whether the UPS is running on battery,
the battery status and the battery temperature. Any combination can fire;
all messages end up in a single warning.
"""

from typing import Any

from snmp_health_monitor import oids
from snmp_health_monitor.checks.base import BaseCheck, threshold, to_float
from snmp_health_monitor.config import EffectiveConfig
from snmp_health_monitor.models import CheckResult
from snmp_health_monitor.session import ProbeSession

# upsBatteryStatus value that needs no warning.
STATUS_NORMAL = 2

# Default warning levels: remaining charge in percent, temperature in C.
CAPACITY_WARN_AT = 60
TEMPERATURE_WARN_AT = 50

# Human-readable translations for upsBatteryStatus.
BATTERY_STATUS = {
    1: "Battery status is Unknown.",
    2: "Battery is OK.",
    3: "Battery is Low.",
    4: "Battery is Depleted.",
}


class BatteryCheck(BaseCheck):
    name = "battery"
    DEFAULTS = {
        "capacity_warn_at": CAPACITY_WARN_AT,  # Battery percentage that qualifies as a warning
        "temperature_warn_at": TEMPERATURE_WARN_AT,  # Battery temperature that qualifies as a warning, in C
    }

    def collect(self, session: ProbeSession, config: EffectiveConfig, system: str | None) -> dict[str, Any]:
        def required(key: str) -> int:
            return int(to_float(session.get(oids.UPS_BATTERY[key]), key))

        info: dict[str, Any] = {
            "status": required("battery_status"),
            "capacity": required("est_charge_remaining"),
            "temperature": required("battery_temperature"),
            "minutes_remaining": required("est_minutes_remaining"),
        }

        # Voltage and current are in tenths, and not every UPS reports them.
        voltage = session.get(oids.UPS_BATTERY["battery_voltage"])
        if voltage is not None:
            info["voltage"] = to_float(voltage, "battery_voltage") / 10

        current = session.get(oids.UPS_BATTERY["battery_current"])
        if current is not None:
            info["current"] = to_float(current, "battery_current") / 10

        seconds = session.get(oids.UPS_BATTERY["seconds_on_battery"])
        info["seconds_on_battery"] = int(to_float(seconds, "seconds_on_battery")) if seconds is not None else 0
        info["in_use"] = info["seconds_on_battery"] != 0

        return {"battery": info}

    def evaluate(self, metrics: dict[str, Any], config: EffectiveConfig) -> CheckResult:
        battery = metrics["battery"]
        cap_warn = threshold(config, "capacity_warn_at", CAPACITY_WARN_AT)
        temp_warn = threshold(config, "temperature_warn_at", TEMPERATURE_WARN_AT)

        warnings = []
        if battery["in_use"]:
            warnings.append(f"UPS on battery - {battery['minutes_remaining']} minute(s) remaining.")

        status = battery["status"]
        if status != STATUS_NORMAL:
            warnings.append(BATTERY_STATUS.get(status, f"Battery status is {status}."))

        capacity = battery["capacity"]
        if capacity <= cap_warn:
            warnings.append(f"Battery remaining capacity {capacity:0.1f}% less than {cap_warn:0.1f} percent")

        temperature = battery["temperature"]
        if temperature >= temp_warn:
            warnings.append(f"Battery temperature {temperature:0.0f}C greater than {temp_warn:0.0f}C")

        return CheckResult(metrics=metrics, warning="\n".join(warnings) or None)
