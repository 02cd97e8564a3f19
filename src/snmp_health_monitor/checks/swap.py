"""Swap usage checks. Reports swap used as ``swap_in_use``."""

import logging
from typing import Any

from snmp_health_monitor import oids
from snmp_health_monitor.checks.base import BaseCheck, threshold, to_float
from snmp_health_monitor.checks.memory import usage_percent
from snmp_health_monitor.config import EffectiveConfig
from snmp_health_monitor.models import CheckResult
from snmp_health_monitor.session import ProbeSession

logger = logging.getLogger(__name__)

ERROR_AT = 95  # in percent full


class SwapCheck(BaseCheck):
    name = "swap"
    DEFAULTS = {
        "error_at": ERROR_AT,
    }

    def collect(self, session: ProbeSession, config: EffectiveConfig, system: str | None) -> dict[str, Any]:
        logger.debug(f"Getting used swap for: {config.host}")
        total = to_float(session.get(oids.SWAP["total"]), "memTotalSwap")
        avail = to_float(session.get(oids.SWAP["avail"]), "memAvailSwap")

        swap_in_use = usage_percent(total, avail)
        logger.debug(f"  Swap in use on {config.host}: {swap_in_use:0.1f}%")
        return {"swap_in_use": swap_in_use}

    def evaluate(self, metrics: dict[str, Any], config: EffectiveConfig) -> CheckResult:
        swap_in_use = metrics["swap_in_use"]
        if swap_in_use >= threshold(config, "error_at", ERROR_AT):
            return CheckResult(metrics=metrics, error=f"{swap_in_use:0.1f}% swap in use")
        return CheckResult(metrics=metrics)
