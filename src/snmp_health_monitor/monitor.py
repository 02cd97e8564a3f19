"""Core polling logic: batched, concurrent SNMP checks."""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, Mapping

from snmp_health_monitor import oids
from snmp_health_monitor.checks import BaseCheck
from snmp_health_monitor.config import ConfigResolver, SNMPDefaults
from snmp_health_monitor.models import CheckResult, Node
from snmp_health_monitor.session import PysnmpSession, SessionFactory, TransportError

logger = logging.getLogger(__name__)


@dataclass
class BatchRun:
    """State of one polling cycle, keyed by node identifier."""

    nodes: dict[str, Node] = field(default_factory=dict)
    results: dict[str, CheckResult] = field(default_factory=dict)
    lock: threading.Lock = field(default_factory=threading.Lock)

    @classmethod
    def from_nodes(cls, nodes: Mapping[str, Mapping[str, Any]]) -> "BatchRun":
        """Collect the pollable nodes, skipping nodes without an address."""
        run = cls()
        for identifier, props in nodes.items():
            node = Node.from_properties(identifier, props)
            if node is None:
                logger.debug(f"Skipping node without an address: {identifier}")
                continue
            run.nodes[identifier] = node
        return run

    def store(self, identifier: str, result: CheckResult) -> None:
        with self.lock:
            self.results[identifier] = result

    def drain(self) -> dict[str, dict[str, Any]]:
        """Flattened results for the nodes of this run."""
        return {
            identifier: result.to_dict()
            for identifier, result in self.results.items()
            if identifier in self.nodes
        }


class SNMPMonitor:
    """Poll nodes in batches and evaluate one check mode against them."""

    def __init__(
        self,
        check: BaseCheck,
        defaults: SNMPDefaults | None = None,
        session_factory: SessionFactory = PysnmpSession.open,
    ) -> None:
        """Initialize the monitor.

        Args:
            check: The check mode applied to every node.
            defaults: Global SNMP defaults, including the batch size.
            session_factory: Opens a ProbeSession from connection settings.
        """
        self.check = check
        self.defaults = defaults or SNMPDefaults()
        self.resolver = ConfigResolver(self.defaults)
        self.session_factory = session_factory

    def partition(self, identifiers: list[str]) -> list[list[str]]:
        """Split nodes into batches of at most batchsize hosts."""
        size = self.defaults.batchsize
        return [identifiers[i:i + size] for i in range(0, len(identifiers), size)]

    def run(self, nodes: Mapping[str, Mapping[str, Any]]) -> dict[str, dict[str, Any]]:
        """Check all nodes.

        Hosts within a batch are checked in parallel; the next batch only
        starts once every host of the current one has finished.

        Args:
            nodes: Node identifier -> properties with ``addresses`` and an
                optional ``config`` of overrides.

        Returns:
            Node identifier -> flattened result record.
        """
        batch_run = BatchRun.from_nodes(nodes)
        batches = self.partition(list(batch_run.nodes))

        mainstart = time.monotonic()
        logger.debug(f"Starting SNMP {self.check.name} run for {len(nodes)} nodes")

        for number, batch in enumerate(batches, start=1):
            slicestart = time.monotonic()
            logger.debug(f"  {len(batch)} hosts (batch {number} of {len(batches)})")

            with ThreadPoolExecutor(max_workers=len(batch)) as executor:
                futures = {
                    executor.submit(self._worker, batch_run, batch_run.nodes[identifier]): identifier
                    for identifier in batch
                }

                for future in as_completed(futures):
                    identifier = futures[future]
                    try:
                        future.result()
                    except Exception as e:
                        logger.error(f"Failed to check node {identifier}: {e}")
                        batch_run.store(
                            identifier,
                            CheckResult.failed(f"Uncaught exception. ({type(e).__name__}: {e})"),
                        )

            logger.debug(f"  finished after {time.monotonic() - slicestart:0.1f} seconds.")

        logger.debug(
            f"Completed SNMP run for {len(nodes)} nodes "
            f"after {time.monotonic() - mainstart:0.1f} seconds."
        )
        return batch_run.drain()

    def check_node(self, node: Node) -> CheckResult:
        """Check a single node, converting any failure into an error result."""
        try:
            config = self.resolver.resolve(node, self.check)
            with self.session_factory(config.connection) as session:
                system = session.get(oids.SYSTEM_DESCRIPTION)
                return self.check.check(session, node, config, system)

        except TransportError as e:
            logger.error(f"{node.address}: {e}")
            return CheckResult.failed(str(e))
        except Exception as e:
            logger.error(f"{node.address}: uncaught exception during {self.check.name} check: {e}")
            return CheckResult.failed(f"Uncaught exception. ({type(e).__name__}: {e})")

    def _worker(self, batch_run: BatchRun, node: Node) -> None:
        batch_run.store(node.identifier, self.check_node(node))
