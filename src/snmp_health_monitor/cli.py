"""Command-line interface for SNMP Health Monitor."""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from snmp_health_monitor import __version__
from snmp_health_monitor.checks import CHECKS, get_check
from snmp_health_monitor.config import Config, ConfigError, SNMPDefaults, create_example_config
from snmp_health_monitor.models import HealthStatus
from snmp_health_monitor.monitor import SNMPMonitor

console = Console()

DEFAULT_CONFIG_PATHS = ["shm.yaml", "shm.yml", "config.yaml", "~/.config/shm/config.yaml"]


def setup_logging(level: str) -> None:
    """Configure logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def status_color(status: HealthStatus) -> str:
    """Get Rich color for health status."""
    colors = {
        HealthStatus.OK: "green",
        HealthStatus.WARNING: "yellow",
        HealthStatus.ERROR: "red",
    }
    return colors.get(status, "white")


def summarize(mode: str, result: dict[str, Any]) -> str:
    """One-line summary of the metrics in a result record."""
    try:
        if mode == "disk":
            mounts = result["mounts"]
            return ", ".join(f"{path} {data['capacity']}%" for path, data in mounts.items() if data) or "-"
        elif mode == "cpu":
            return result["message"]
        elif mode == "load":
            return f"load5 {result['load5']:.2f}"
        elif mode == "memory":
            return f"memory {result['memory']['usage']:.1f}%, swap {result['swap']['usage']:.1f}%"
        elif mode == "swap":
            return f"{result['swap_in_use']:.1f}% swap in use"
        elif mode == "process":
            return f"{result['count']} processes"
        elif mode == "battery":
            battery = result["battery"]
            return f"{battery['capacity']}% charge, {battery['temperature']}C"
    except KeyError:
        pass
    return "-"


def create_results_table(mode: str, results: dict[str, dict[str, Any]]) -> Table:
    """Create a Rich table displaying check results."""
    table = Table(title=f"SNMP {mode} check", show_header=True, header_style="bold")

    table.add_column("Node", style="cyan", no_wrap=True)
    table.add_column("Status", justify="center")
    table.add_column("Metrics")
    table.add_column("Message")

    for identifier in sorted(results):
        result = results[identifier]
        status = HealthStatus.of(result)
        message = result.get("error") or result.get("warning") or ""

        table.add_row(
            identifier,
            Text(status.value.upper(), style=status_color(status)),
            summarize(mode, result),
            Text(message, style=status_color(status)),
        )

    return table


def create_summary_panel(mode: str, results: dict[str, dict[str, Any]]) -> Panel:
    """Create a summary panel."""
    statuses = [HealthStatus.of(r) for r in results.values()]

    summary_parts = [
        f"[bold]Check:[/bold] {mode}",
        f"[bold]Nodes:[/bold] {len(results)} total, "
        f"[green]{statuses.count(HealthStatus.OK)}[/] ok, "
        f"[yellow]{statuses.count(HealthStatus.WARNING)}[/] warning, "
        f"[red]{statuses.count(HealthStatus.ERROR)}[/] error",
    ]

    return Panel(
        "\n".join(summary_parts),
        title="SNMP Health Summary",
        border_style="cyan",
    )


def exit_code(results: dict[str, dict[str, Any]]) -> int:
    """1 if any node has an error, 2 if any has a warning, else 0."""
    statuses = {HealthStatus.of(r) for r in results.values()}
    if HealthStatus.ERROR in statuses:
        return 1
    elif HealthStatus.WARNING in statuses:
        return 2
    return 0


def load_config(config: Optional[str]) -> Config:
    if config:
        return Config.from_yaml(config)

    for default_path in DEFAULT_CONFIG_PATHS:
        path = Path(default_path).expanduser()
        if path.exists():
            return Config.from_yaml(path)

    console.print("[red]No configuration file found.[/]")
    console.print("Create one with: [cyan]shm init[/]")
    sys.exit(1)


def report(mode: str, results: dict[str, dict[str, Any]], output_json: bool) -> None:
    if output_json:
        click.echo(json.dumps(results, indent=2, default=str))
    else:
        console.print(create_summary_panel(mode, results))
        console.print(create_results_table(mode, results))


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """SNMP Health Monitor - batched SNMP health checks."""
    pass


@main.command()
@click.option(
    "-c", "--config",
    type=click.Path(exists=True),
    help="Path to configuration file",
)
@click.option(
    "-m", "--mode",
    required=True,
    type=click.Choice(sorted(CHECKS)),
    help="Check mode to run",
)
@click.option(
    "--json", "output_json",
    is_flag=True,
    help="Output in JSON format",
)
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Logging level (default: from config)",
)
def check(
    config: Optional[str],
    mode: str,
    output_json: bool,
    log_level: Optional[str],
) -> None:
    """Run one check mode against all configured nodes."""
    cfg = load_config(config)
    setup_logging(log_level or cfg.log_level)

    try:
        monitor = SNMPMonitor(get_check(mode, cfg.check_overrides(mode)), cfg.snmp)
    except ConfigError as e:
        console.print(f"[red]Invalid configuration: {e}[/]")
        sys.exit(1)

    results = monitor.run(cfg.node_properties())
    report(mode, results, output_json)
    sys.exit(exit_code(results))


@main.command()
@click.argument("host")
@click.option("-m", "--mode", required=True, type=click.Choice(sorted(CHECKS)), help="Check mode to run")
@click.option("-C", "--community", default="public", help="SNMP community")
@click.option("-p", "--port", default=161, type=int, help="SNMP port")
@click.option("-v", "--version", "snmp_version", default="2c", type=click.Choice(["1", "2c"]), help="SNMP version")
@click.option("-t", "--timeout", default=2.0, type=float, help="Timeout in seconds")
@click.option("--json", "output_json", is_flag=True, help="Output JSON")
def quick(
    host: str,
    mode: str,
    community: str,
    port: int,
    snmp_version: str,
    timeout: float,
    output_json: bool,
) -> None:
    """Quick check of a single host."""
    setup_logging("WARNING")

    if not output_json:
        console.print(f"[dim]Checking {host} ({mode})...[/]")

    defaults = SNMPDefaults(community=community, port=port, version=snmp_version, timeout=timeout)
    monitor = SNMPMonitor(get_check(mode), defaults)
    results = monitor.run({host: {"addresses": [host]}})

    report(mode, results, output_json)
    sys.exit(exit_code(results))


@main.command()
def modes() -> None:
    """List check modes and their default settings."""
    table = Table(title="Check modes", show_header=True, header_style="bold")
    table.add_column("Mode", style="cyan", no_wrap=True)
    table.add_column("Defaults")

    for name in sorted(CHECKS):
        defaults = CHECKS[name].DEFAULTS
        table.add_row(name, ", ".join(f"{k}={v!r}" for k, v in defaults.items()))

    console.print(table)


@main.command()
@click.option(
    "-o", "--output",
    default="shm.yaml",
    help="Output file path",
)
@click.option(
    "--force", "-f",
    is_flag=True,
    help="Overwrite existing file",
)
def init(output: str, force: bool) -> None:
    """Create an example configuration file."""
    path = Path(output)

    if path.exists() and not force:
        console.print(f"[red]File already exists: {path}[/]")
        console.print("Use --force to overwrite")
        sys.exit(1)

    example = create_example_config()
    example.to_yaml(path)

    console.print(f"[green]Created example configuration: {path}[/]")
    console.print("Edit this file to add your nodes and settings.")


if __name__ == "__main__":
    main()
