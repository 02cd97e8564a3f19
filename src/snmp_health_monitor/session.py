"""SNMP probe sessions.

The checks only talk to a ProbeSession: scalar get(), table walk() and a
deterministic close(). PysnmpSession implements it on top of the pysnmp
asyncio API, driving its own event loop so it can be used from a worker
thread.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Sequence

from pyasn1.type import univ
from pysnmp.error import PySnmpError
from pysnmp.hlapi.v3arch.asyncio import (
    CommunityData,
    ContextData,
    ObjectIdentity,
    ObjectType,
    SnmpEngine,
    UdpTransportTarget,
    get_cmd,
    walk_cmd,
)
from pysnmp.proto import errind, rfc1905

from snmp_health_monitor.config import ConfigError, ConnectionSettings

logger = logging.getLogger(__name__)

# Message processing model per SNMP version.
MP_MODELS = {
    "1": 0,
    "2c": 1,
}

# PDU error-status value for a missing object.
NO_SUCH_NAME = 2


class TransportError(ConnectionError):
    """The session failed: unreachable host, malformed response, agent error."""


class ConnectionTimeout(TransportError):
    """The host did not answer within timeout x retries."""


class ProbeSession(ABC):
    """An open session against one host."""

    @abstractmethod
    def get(self, oid: str) -> Any:
        """Fetch a scalar value.

        Returns:
            The value, or None if the agent has no such object.
        """
        ...

    @abstractmethod
    def walk_column(self, oid: str) -> list[tuple[str, Any]]:
        """Walk one table column.

        Returns:
            Ordered (row index, value) pairs below oid.
        """
        ...

    @abstractmethod
    def close(self) -> None:
        ...

    def walk(self, oids: str | Sequence[str]) -> list[tuple[str, Any]]:
        """Walk one column, or several columns of the same table.

        With a list of OIDs each row is (index, [values]), aligned on the
        row indexes of the first column. A column lacking a row yields None.
        """
        if isinstance(oids, str):
            return self.walk_column(oids)

        columns = [self.walk_column(oid) for oid in oids]
        if not columns:
            return []

        lookups = [dict(column) for column in columns[1:]]
        rows = []
        for index, value in columns[0]:
            rows.append((index, [value] + [lookup.get(index) for lookup in lookups]))
        return rows

    def __enter__(self) -> "ProbeSession":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


SessionFactory = Callable[[ConnectionSettings], ProbeSession]


def to_python(value: Any) -> Any:
    """Convert a pysnmp value into a plain Python value."""
    if isinstance(value, (rfc1905.NoSuchObject, rfc1905.NoSuchInstance, rfc1905.EndOfMibView)):
        return None
    if isinstance(value, univ.Integer):
        return int(value)
    if isinstance(value, univ.OctetString):
        return value.asOctets().decode("utf-8", errors="replace")
    if isinstance(value, univ.ObjectIdentifier):
        return ".".join(str(x) for x in value.asTuple())
    if isinstance(value, univ.Null):
        return None
    if hasattr(value, "prettyPrint"):
        return value.prettyPrint()
    return value


def split_oid(oid: str) -> tuple[int, ...]:
    return tuple(int(part) for part in oid.strip(".").split("."))


def row_index(base: str, name: Any) -> str:
    """Return the row index of name below the column base."""
    parts = name.asTuple() if hasattr(name, "asTuple") else tuple(int(x) for x in name)
    return ".".join(str(x) for x in parts[len(split_oid(base)):])


def is_no_such_name(error_indication: Any, error_status: Any) -> bool:
    """True for the SNMPv1 way of saying an object does not exist."""
    return not error_indication and bool(error_status) and int(error_status) == NO_SUCH_NAME


def raise_for_error(
    host: str,
    error_indication: Any,
    error_status: Any,
    error_index: Any,
    oid: str,
) -> None:
    """Turn a pysnmp error tuple into an exception.

    Raises:
        ConnectionTimeout: If the request timed out.
        TransportError: For any other error indication or error status.
    """
    if error_indication:
        if isinstance(error_indication, errind.RequestTimedOut):
            raise ConnectionTimeout(f"{host}: {error_indication}")
        raise TransportError(f"{host}: {error_indication}")

    if error_status and int(error_status):
        status = error_status.prettyPrint() if hasattr(error_status, "prettyPrint") else error_status
        raise TransportError(f"{host}: {status} at {oid} (index {error_index})")


class PysnmpSession(ProbeSession):
    """A ProbeSession backed by the pysnmp asyncio high-level API."""

    def __init__(self, settings: ConnectionSettings) -> None:
        if settings.version not in MP_MODELS:
            raise ConfigError(f"Unsupported SNMP version: {settings.version}")

        self.settings = settings
        self._loop = asyncio.new_event_loop()
        self._engine: SnmpEngine | None = None
        self._transport: UdpTransportTarget | None = None
        self._auth = CommunityData(settings.community, mpModel=MP_MODELS[settings.version])

    @classmethod
    def open(cls, settings: ConnectionSettings) -> "PysnmpSession":
        """Open a session against settings.host.

        Raises:
            TransportError: If the transport cannot be set up.
        """
        session = cls(settings)
        try:
            session._run(session._connect())
        except PySnmpError as e:
            session.close()
            raise TransportError(f"{settings.host}: {e}") from e
        except Exception:
            session.close()
            raise
        return session

    def _run(self, coro: Any) -> Any:
        asyncio.set_event_loop(self._loop)
        return self._loop.run_until_complete(coro)

    async def _connect(self) -> None:
        self._engine = SnmpEngine()
        self._transport = await UdpTransportTarget.create(
            (self.settings.host, self.settings.port),
            timeout=self.settings.timeout,
            retries=self.settings.retries,
        )

    async def _get(self, oid: str) -> Any:
        error_indication, error_status, error_index, var_binds = await get_cmd(
            self._engine,
            self._auth,
            self._transport,
            ContextData(),
            ObjectType(ObjectIdentity(oid.strip("."))),
            lookupMib=False,
        )
        if is_no_such_name(error_indication, error_status):
            # SNMPv1 signals a missing object through the error status.
            return None
        raise_for_error(self.settings.host, error_indication, error_status, error_index, oid)

        _, value = var_binds[0]
        return to_python(value)

    async def _walk(self, oid: str) -> list[tuple[str, Any]]:
        rows = []
        async for error_indication, error_status, error_index, var_binds in walk_cmd(
            self._engine,
            self._auth,
            self._transport,
            ContextData(),
            ObjectType(ObjectIdentity(oid.strip("."))),
            lexicographicMode=False,
            lookupMib=False,
        ):
            if is_no_such_name(error_indication, error_status):
                break
            raise_for_error(self.settings.host, error_indication, error_status, error_index, oid)

            for name, value in var_binds:
                if isinstance(value, rfc1905.EndOfMibView):
                    continue
                rows.append((row_index(oid, name), to_python(value)))
        return rows

    def get(self, oid: str) -> Any:
        return self._run(self._get(oid))

    def walk_column(self, oid: str) -> list[tuple[str, Any]]:
        return self._run(self._walk(oid))

    def close(self) -> None:
        """Release the transport and the event loop."""
        if self._loop.is_closed():
            return
        try:
            if self._engine is not None:
                self._engine.close_dispatcher()
                # Let the transport finish closing before the loop goes away.
                self._loop.run_until_complete(asyncio.sleep(0))
        except PySnmpError as e:
            logger.debug(f"Error closing session to {self.settings.host}: {e}")
        finally:
            self._engine = None
            self._transport = None
            self._loop.close()
            asyncio.set_event_loop(None)
