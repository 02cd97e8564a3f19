"""5 minute load checks. Sets the current 5 minute load as ``load5``."""

import logging
from typing import Any

from snmp_health_monitor import oids
from snmp_health_monitor.checks.base import BaseCheck, threshold, to_float
from snmp_health_monitor.config import EffectiveConfig
from snmp_health_monitor.models import CheckResult
from snmp_health_monitor.session import ProbeSession

logger = logging.getLogger(__name__)

ERROR_AT = 7


class LoadCheck(BaseCheck):
    name = "load"
    DEFAULTS = {
        "error_at": ERROR_AT,
    }

    def collect(self, session: ProbeSession, config: EffectiveConfig, system: str | None) -> dict[str, Any]:
        logger.debug(f"Getting system load for: {config.host}")
        load5 = to_float(session.get(oids.LOAD_FIVE_MINUTE), "laLoad.2")
        logger.debug(f"  Load on {config.host}: {load5:0.2f}")
        return {"load5": load5}

    def evaluate(self, metrics: dict[str, Any], config: EffectiveConfig) -> CheckResult:
        error_at = threshold(config, "error_at", ERROR_AT)
        if metrics["load5"] >= error_at:
            return CheckResult(
                metrics=metrics,
                error=f"Load has exceeded {error_at:0.2f} over a 5 minute average",
            )
        return CheckResult(metrics=metrics)
