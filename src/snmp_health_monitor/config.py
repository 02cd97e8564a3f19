"""Configuration management for SNMP Health Monitor."""

import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

# Built-in fallbacks used when no configuration layer sets a value.
DEFAULT_PORT = 161
DEFAULT_TIMEOUT = 2
DEFAULT_RETRIES = 1
DEFAULT_COMMUNITY = "public"
DEFAULT_VERSION = "2c"
DEFAULT_BATCHSIZE = 25


class ConfigError(ValueError):
    """Raised for configuration that cannot be used."""


@dataclass
class SNMPDefaults:
    """Global defaults applied to every polled host."""

    timeout: float = DEFAULT_TIMEOUT
    retries: int = DEFAULT_RETRIES
    community: str = DEFAULT_COMMUNITY
    version: str = DEFAULT_VERSION
    port: int = DEFAULT_PORT
    batchsize: int = DEFAULT_BATCHSIZE  # How many hosts to check simultaneously
    extra: dict[str, Any] = field(default_factory=dict)  # Global defaults for check settings

    FIELDS = ("timeout", "retries", "community", "version", "port", "batchsize")

    def __post_init__(self) -> None:
        if self.batchsize < 1:
            raise ConfigError(f"batchsize must be at least 1, got {self.batchsize}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SNMPDefaults":
        """Create from dictionary. Unknown keys become global check defaults."""
        return cls(
            timeout=data.get("timeout", DEFAULT_TIMEOUT),
            retries=data.get("retries", DEFAULT_RETRIES),
            community=data.get("community", DEFAULT_COMMUNITY),
            version=str(data.get("version", DEFAULT_VERSION)),
            port=data.get("port", DEFAULT_PORT),
            batchsize=data.get("batchsize", DEFAULT_BATCHSIZE),
            extra={k: v for k, v in data.items() if k not in cls.FIELDS},
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.extra,
            "timeout": self.timeout,
            "retries": self.retries,
            "community": self.community,
            "version": self.version,
            "port": self.port,
            "batchsize": self.batchsize,
        }


@dataclass(frozen=True)
class ConnectionSettings:
    """Everything needed to open a session against one host."""

    host: str
    port: int = DEFAULT_PORT
    community: str = DEFAULT_COMMUNITY
    version: str = DEFAULT_VERSION
    timeout: float = DEFAULT_TIMEOUT
    retries: int = DEFAULT_RETRIES


@dataclass(frozen=True)
class PatternSet:
    """A list of user-supplied regular expressions, compiled once."""

    sources: tuple[str, ...]
    compiled: tuple[re.Pattern, ...]

    @classmethod
    def compile(cls, value: Any) -> "PatternSet":
        """Compile a pattern or list of patterns.

        Raises:
            ConfigError: If any pattern is not a valid regular expression.
        """
        if isinstance(value, PatternSet):
            return value
        if isinstance(value, str):
            value = [value]

        sources = tuple(str(v) for v in value)
        compiled = []
        for source in sources:
            try:
                compiled.append(re.compile(source))
            except re.error as e:
                raise ConfigError(f"Invalid pattern {source!r}: {e}") from e

        return cls(sources=sources, compiled=tuple(compiled))

    def search(self, text: str) -> bool:
        """True if any pattern matches somewhere in text."""
        return any(p.search(text) for p in self.compiled)

    def __iter__(self) -> Iterator[tuple[str, re.Pattern]]:
        return iter(zip(self.sources, self.compiled))

    def __len__(self) -> int:
        return len(self.sources)


class EffectiveConfig(Mapping):
    """Read-only, fully resolved settings for a single host."""

    def __init__(
        self,
        host: str,
        values: Mapping[str, Any],
        layers: Mapping[str, tuple[Any, ...]] | None = None,
    ) -> None:
        self.host = host
        self._values = MappingProxyType(dict(values))
        self._layers = MappingProxyType(dict(layers or {}))

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"EffectiveConfig({self.host!r}, {dict(self._values)!r})"

    def candidates(self, key: str) -> tuple[Any, ...]:
        """Every value set for key, narrowest layer first."""
        if key in self._layers:
            return self._layers[key]
        value = self._values.get(key)
        return () if value is None else (value,)

    @property
    def connection(self) -> ConnectionSettings:
        """Connection parameters for this host."""
        return ConnectionSettings(
            host=self.host,
            port=int(self["port"]),
            community=str(self["community"]),
            version=str(self["version"]),
            timeout=float(self["timeout"]),
            retries=int(self["retries"]),
        )


class ConfigResolver:
    """Merge global, check-mode and per-node settings into one view.

    Precedence, narrowest wins: node config, then the check's defaults,
    then the global SNMP defaults, then the built-in fallbacks. A key whose
    value is None falls through to the next layer.
    Values hidden by a narrower layer stay reachable through
    EffectiveConfig.candidates.
    """

    BUILTIN = SNMPDefaults().to_dict()

    def __init__(self, defaults: SNMPDefaults | None = None) -> None:
        self.defaults = defaults or SNMPDefaults()

    def resolve(self, node: Any, check: Any) -> EffectiveConfig:
        """Build the effective config for node under check.

        Args:
            node: A Node; its address and config are used.
            check: The check mode; supplies defaults and pattern_keys.

        Raises:
            ConfigError: If a pattern setting does not compile.
        """
        layers = [
            self.BUILTIN,
            self.defaults.to_dict(),
            check.defaults,
            node.config or {},
        ]

        values: dict[str, Any] = {}
        shadowed: dict[str, tuple[Any, ...]] = {}
        for layer in layers:
            for key, value in layer.items():
                if value is not None:
                    values[key] = value
                    shadowed[key] = (value,) + shadowed.get(key, ())

        for key in check.pattern_keys:
            if values.get(key) is not None:
                values[key] = PatternSet.compile(values[key])
            else:
                values.setdefault(key, None)

        return EffectiveConfig(node.address, values, shadowed)


@dataclass
class Config:
    """Main configuration for SNMP Health Monitor."""

    snmp: SNMPDefaults = field(default_factory=SNMPDefaults)
    checks: dict[str, dict[str, Any]] = field(default_factory=dict)  # Per-mode overrides
    nodes: dict[str, dict[str, Any]] = field(default_factory=dict)
    log_level: str = "INFO"

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Config":
        """Load configuration from YAML file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f)

        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        """Create configuration from dictionary."""
        nodes = {}
        for name, node_data in (data.get("nodes") or {}).items():
            nodes[str(name)] = dict(node_data or {})

        return cls(
            snmp=SNMPDefaults.from_dict(data.get("snmp") or {}),
            checks={str(k): dict(v or {}) for k, v in (data.get("checks") or {}).items()},
            nodes=nodes,
            log_level=data.get("log_level", "INFO"),
        )

    def check_overrides(self, mode: str) -> dict[str, Any]:
        """Get configured defaults for a check mode."""
        return dict(self.checks.get(mode, {}))

    def node_properties(self) -> dict[str, dict[str, Any]]:
        """Nodes in the shape SNMPMonitor.run expects."""
        return {name: dict(props) for name, props in self.nodes.items()}

    def to_yaml(self, path: str | Path) -> None:
        """Save configuration to YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            yaml.dump(self._to_dict(), f, default_flow_style=False, sort_keys=False)

    def _to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "snmp": self.snmp.to_dict(),
            "checks": self.checks,
            "nodes": self.nodes,
            "log_level": self.log_level,
        }


def create_example_config() -> Config:
    """Create an example configuration for documentation."""
    return Config(
        snmp=SNMPDefaults(timeout=2, retries=1, community="public", batchsize=25),
        checks={
            "disk": {"warn_at": 90, "exclude": ["^/dev(/.+)?$", "^/run$", "^/sys/"]},
            "process": {"processes": ["sshd"]},
            "cpu": {"warn_at": 80},
        },
        nodes={
            "web-server-1": {
                "addresses": ["192.168.1.10"],
                "config": {"processes": ["sshd", "nginx"]},
            },
            "db-server-1": {
                "addresses": ["192.168.1.20"],
                "config": {"warn_at": {"/var/lib/postgresql": 80}},
            },
            "windows-server": {
                "addresses": ["192.168.1.40"],
                "config": {"community": "monitoring", "timeout": 5},
            },
            "ups-1": {
                "addresses": ["192.168.1.50"],
                "config": {"capacity_warn_at": 50, "temperature_warn_at": 45},
            },
        },
    )
