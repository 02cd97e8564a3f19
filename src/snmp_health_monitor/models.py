"""Data models for SNMP health checks."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class HealthStatus(str, Enum):
    """Verdict levels for a single check."""

    OK = "ok"
    WARNING = "warning"
    ERROR = "error"

    @classmethod
    def of(cls, result: dict[str, Any]) -> "HealthStatus":
        """Classify a flattened result record."""
        if result.get("error"):
            return cls.ERROR
        elif result.get("warning"):
            return cls.WARNING
        return cls.OK


@dataclass(frozen=True)
class Node:
    """A host to poll, as supplied by the caller for one cycle."""

    identifier: str
    address: str
    config: dict[str, Any] = field(default_factory=dict)
    properties: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_properties(cls, identifier: str, props: dict[str, Any]) -> "Node | None":
        """Create from caller node properties.

        Only the first address is used. Returns None if the node has no
        address to poll.
        """
        addresses = props.get("addresses")
        if not addresses:
            return None

        if isinstance(addresses, str):
            address = addresses
        else:
            address = list(addresses)[0]

        return cls(
            identifier=identifier,
            address=str(address),
            config=dict(props.get("config") or {}),
            properties={k: v for k, v in props.items() if k not in ("addresses", "config")},
        )


@dataclass(frozen=True)
class CheckResult:
    """Verdict of one check mode for one host."""

    metrics: dict[str, Any] = field(default_factory=dict)
    warning: str | None = None
    error: str | None = None

    @property
    def status(self) -> HealthStatus:
        if self.error:
            return HealthStatus.ERROR
        elif self.warning:
            return HealthStatus.WARNING
        return HealthStatus.OK

    @classmethod
    def failed(cls, message: str) -> "CheckResult":
        """A result for a host that could not be checked at all."""
        return cls(error=message)

    def to_dict(self) -> dict[str, Any]:
        """Flatten into the record handed back to the caller."""
        data = dict(self.metrics)
        if self.warning:
            data["warning"] = self.warning
        if self.error:
            data["error"] = self.error
        return data
