"""Tests for configuration module."""

import tempfile
from pathlib import Path

import pytest

from snmp_health_monitor.checks import DiskCheck, LoadCheck, ProcessCheck
from snmp_health_monitor.config import (
    Config,
    ConfigError,
    ConfigResolver,
    ConnectionSettings,
    EffectiveConfig,
    PatternSet,
    SNMPDefaults,
    create_example_config,
)
from snmp_health_monitor.models import Node


class TestSNMPDefaults:
    """Tests for global SNMP defaults."""

    def test_default_values(self):
        d = SNMPDefaults()
        assert d.timeout == 2
        assert d.retries == 1
        assert d.community == "public"
        assert d.version == "2c"
        assert d.port == 161
        assert d.batchsize == 25
        assert d.extra == {}

    def test_from_dict(self):
        d = SNMPDefaults.from_dict({"community": "secret", "version": 1, "batchsize": 10})
        assert d.community == "secret"
        assert d.version == "1"
        assert d.batchsize == 10
        # Defaults for missing values
        assert d.port == 161

    def test_unknown_keys_become_extra(self):
        d = SNMPDefaults.from_dict({"timeout": 5, "warn_at": 70})
        assert d.extra == {"warn_at": 70}
        assert d.to_dict()["warn_at"] == 70
        assert d.to_dict()["timeout"] == 5

    def test_invalid_batchsize(self):
        with pytest.raises(ConfigError):
            SNMPDefaults(batchsize=0)


class TestPatternSet:
    def test_single_pattern(self):
        patterns = PatternSet.compile("^/var")
        assert patterns.sources == ("^/var",)
        assert patterns.search("/var/log")
        assert not patterns.search("/home")

    def test_list_of_patterns(self):
        patterns = PatternSet.compile(["sshd", "cron"])
        assert len(patterns) == 2
        assert [source for source, _ in patterns] == ["sshd", "cron"]

    def test_already_compiled(self):
        patterns = PatternSet.compile("x")
        assert PatternSet.compile(patterns) is patterns

    def test_invalid_pattern(self):
        with pytest.raises(ConfigError, match="Invalid pattern"):
            PatternSet.compile(["ok", "(unclosed"])


class TestConfigResolver:
    """Tests for layering of settings."""

    def test_builtin_connection(self):
        config = ConfigResolver().resolve(Node("a", "10.0.0.1"), LoadCheck())
        assert config.connection == ConnectionSettings(host="10.0.0.1")
        assert config["error_at"] == 7

    def test_global_defaults(self):
        defaults = SNMPDefaults(community="secret", port=1161)
        config = ConfigResolver(defaults).resolve(Node("a", "10.0.0.1"), LoadCheck())
        assert config.connection.community == "secret"
        assert config.connection.port == 1161

    def test_global_check_setting(self):
        defaults = SNMPDefaults.from_dict({"error_at": 3})
        config = ConfigResolver(defaults).resolve(Node("a", "10.0.0.1"), LoadCheck())
        # The check default is narrower than the global one.
        assert config["error_at"] == 7

        defaults = SNMPDefaults.from_dict({"swap_warn_at": 30})
        config = ConfigResolver(defaults).resolve(Node("a", "10.0.0.1"), LoadCheck())
        assert config["swap_warn_at"] == 30

    def test_precedence(self):
        resolver = ConfigResolver(SNMPDefaults.from_dict({"warn_at": 70, "timeout": 3}))
        check = DiskCheck({"warn_at": 80})

        plain = resolver.resolve(Node("a", "10.0.0.1"), check)
        assert plain["warn_at"] == 80
        assert plain.connection.timeout == 3.0

        node = Node("b", "10.0.0.2", config={"warn_at": 85, "timeout": 10, "community": "n"})
        tuned = resolver.resolve(node, check)
        assert tuned["warn_at"] == 85
        assert tuned.connection.timeout == 10.0
        assert tuned.connection.community == "n"

    def test_none_falls_through(self):
        node = Node("a", "10.0.0.1", config={"warn_at": None, "port": None})
        config = ConfigResolver().resolve(node, DiskCheck())
        assert config["warn_at"] == 90
        assert config.connection.port == 161

    def test_candidates_narrowest_first(self):
        resolver = ConfigResolver(SNMPDefaults.from_dict({"warn_at": 70}))
        node = Node("a", "10.0.0.1", config={"warn_at": {"/": 95}})
        config = resolver.resolve(node, DiskCheck({"warn_at": 80}))

        assert config.candidates("warn_at") == ({"/": 95}, 80, 70)
        assert config.candidates("port") == (161,)
        assert config.candidates("missing") == ()

    def test_patterns_compiled(self):
        config = ConfigResolver().resolve(Node("a", "10.0.0.1"), DiskCheck())
        assert isinstance(config["exclude"], PatternSet)
        assert config["include"] is None

    def test_missing_pattern_key_present(self):
        config = ConfigResolver().resolve(Node("a", "10.0.0.1"), ProcessCheck())
        assert "processes" in config

    def test_inputs_not_mutated(self):
        node_config = {"processes": ["sshd"]}
        check = ProcessCheck()
        ConfigResolver().resolve(Node("a", "10.0.0.1", config=node_config), check)
        assert node_config == {"processes": ["sshd"]}
        assert check.defaults == {"processes": []}

    def test_read_only(self):
        config = ConfigResolver().resolve(Node("a", "10.0.0.1"), LoadCheck())
        assert isinstance(config, EffectiveConfig)
        with pytest.raises(TypeError):
            config["error_at"] = 1  # type: ignore[index]

    def test_invalid_node_pattern(self):
        node = Node("a", "10.0.0.1", config={"exclude": "[a-"})
        with pytest.raises(ConfigError):
            ConfigResolver().resolve(node, DiskCheck())


class TestConfig:
    """Tests for main configuration."""

    def test_from_dict(self):
        data = {
            "snmp": {"community": "secret", "batchsize": 5},
            "checks": {"disk": {"warn_at": 80}},
            "nodes": {
                "server1": {"addresses": ["10.0.0.1"], "config": {"warn_at": 95}},
                "server2": {"addresses": ["10.0.0.2"]},
            },
            "log_level": "DEBUG",
        }
        config = Config.from_dict(data)
        assert config.snmp.community == "secret"
        assert config.snmp.batchsize == 5
        assert config.check_overrides("disk") == {"warn_at": 80}
        assert config.check_overrides("cpu") == {}
        assert len(config.nodes) == 2
        assert config.log_level == "DEBUG"

    def test_empty(self):
        config = Config.from_dict({})
        assert config.nodes == {}
        assert config.snmp == SNMPDefaults()

    def test_node_properties_are_copies(self):
        config = Config.from_dict({"nodes": {"a": {"addresses": ["10.0.0.1"]}}})
        props = config.node_properties()
        props["a"]["addresses"] = []
        assert config.nodes["a"]["addresses"] == ["10.0.0.1"]

    def test_from_yaml(self):
        yaml_content = """
snmp:
  community: monitoring
  timeout: 5

checks:
  process:
    processes:
      - sshd

nodes:
  web-server:
    addresses:
      - 192.168.1.10
    config:
      processes:
        - nginx
"""
        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            f.write(yaml_content)
            f.flush()

            config = Config.from_yaml(f.name)
            assert config.snmp.community == "monitoring"
            assert config.snmp.timeout == 5
            assert config.nodes["web-server"]["config"] == {"processes": ["nginx"]}
            assert config.check_overrides("process") == {"processes": ["sshd"]}

            Path(f.name).unlink()

    def test_missing_file(self):
        with pytest.raises(FileNotFoundError):
            Config.from_yaml("/nonexistent/shm.yaml")

    def test_to_yaml(self):
        config = create_example_config()

        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "test-config.yaml"
            config.to_yaml(path)

            assert path.exists()

            # Reload and verify
            loaded = Config.from_yaml(path)
            assert loaded.nodes == config.nodes
            assert loaded.checks == config.checks
            assert loaded.snmp == config.snmp


class TestExampleConfig:
    def test_create_example_config(self):
        config = create_example_config()
        assert len(config.nodes) > 0

        for name, props in config.nodes.items():
            node = Node.from_properties(name, props)
            assert node is not None

    def test_example_patterns_compile(self):
        config = create_example_config()
        for mode, overrides in config.checks.items():
            if mode == "disk":
                DiskCheck(overrides)
            elif mode == "process":
                ProcessCheck(overrides)
