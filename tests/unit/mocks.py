"""
Mock implementations for proxy tests.

Fake redis nodes and masters run as real asyncio servers on the loopback
interface. Probers, loggers and notifiers are in-memory stand-ins that
record what they were asked to do.
"""

import asyncio
import socket
from dataclasses import dataclass, field
from typing import Callable

from gotomaster.discovery import MasterAddress, ProbeResponse, ProbeStatus
from gotomaster.exceptions import NotifyError
from gotomaster.logging import Entry


MASTER_REPLY = b"$60\r\n# Replication\r\nrole:master\r\nconnected_slaves:1\r\n\r\n"
SLAVE_REPLY = b"$60\r\n# Replication\r\nrole:slave\r\nmaster_link_status:up\r\n\r\n"
NOAUTH_REPLY = b"-NOAUTH Authentication required.\r\n"


def unused_port(host: str = "127.0.0.1") -> int:
    """Return a port nothing is listening on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as probe_socket:
        probe_socket.bind((host, 0))
        return probe_socket.getsockname()[1]


def unused_ports(count: int, host: str = "127.0.0.1") -> tuple[int, ...]:
    """Return distinct ports nothing is listening on."""
    sockets = [socket.socket(socket.AF_INET, socket.SOCK_STREAM) for _ in range(count)]

    try:
        for probe_socket in sockets:
            probe_socket.bind((host, 0))

        return tuple(probe_socket.getsockname()[1] for probe_socket in sockets)

    finally:
        for probe_socket in sockets:
            probe_socket.close()


async def wait_until(
    predicate: Callable[[], bool],
    timeout: float = 2.0,
) -> None:
    async def _wait():
        while not predicate():
            await asyncio.sleep(0.01)

    await asyncio.wait_for(_wait(), timeout=timeout)


@dataclass
class RecordingLogger:
    """Logger stand-in that keeps every entry in memory."""

    entries: list[Entry] = field(default_factory=list)
    closed: bool = False

    async def log(
        self,
        entry: Entry,
        name: str | None = None,
        template: str | None = None,
        filter: Callable[[Entry], bool] | None = None,
    ) -> None:
        self.entries.append(entry)

    async def close(self) -> None:
        self.closed = True

    def of_type(self, entry_type: type) -> list[Entry]:
        return [entry for entry in self.entries if isinstance(entry, entry_type)]

    def messages(self) -> list[str]:
        return [entry.message for entry in self.entries]


@dataclass
class ProbeCall:
    node: str
    port: int
    timeout: float


class ScriptedProber:
    """
    Prober stand-in answering from a per-node script.

    Each node maps to a ProbeStatus, or to a list of statuses consumed one
    per probe (the last one repeats). Master responses carry the address
    registered for the node, defaulting to ``<node>:<port>``. Nodes listed in
    ``errors`` raise the given exception instead of answering.
    """

    def __init__(
        self,
        script: dict[str, ProbeStatus | list[ProbeStatus]],
        addresses: dict[str, MasterAddress] | None = None,
        errors: dict[str, Exception] | None = None,
    ) -> None:
        self.script = {
            node: list(statuses) if isinstance(statuses, list) else [statuses]
            for node, statuses in script.items()
        }
        self.addresses = addresses or {}
        self.errors = errors or {}
        self.calls: list[ProbeCall] = []

    def set(self, node: str, status: ProbeStatus | list[ProbeStatus]) -> None:
        self.script[node] = list(status) if isinstance(status, list) else [status]

    async def probe(
        self,
        node: str,
        port: int,
        timeout: float,
    ) -> ProbeResponse:
        self.calls.append(ProbeCall(node=node, port=port, timeout=timeout))

        if node in self.errors:
            raise self.errors[node]

        statuses = self.script.get(node, [ProbeStatus.CONNECT_FAILED])
        status = statuses.pop(0) if len(statuses) > 1 else statuses[0]

        address = None
        if status == ProbeStatus.MASTER:
            address = self.addresses.get(node, MasterAddress(node, port))

        return ProbeResponse(
            status=status,
            node=node,
            port=port,
            address=address,
            message=status.value,
        )

    def probed_nodes(self) -> list[str]:
        return [call.node for call in self.calls]

    def timeouts(self) -> list[float]:
        return [call.timeout for call in self.calls]


class FakeRedisNode:
    """
    Loopback server that answers role queries like a redis node.

    Any request containing ``info replication`` gets ``reply``. Other
    traffic is echoed back prefixed with ``tag`` so tests can tell which
    node a proxied session reached. A ``reply`` of None closes the
    connection without answering; ``silent`` holds it open without
    answering.
    """

    def __init__(
        self,
        reply: bytes | None = MASTER_REPLY,
        tag: bytes = b"",
        silent: bool = False,
    ) -> None:
        self.reply = reply
        self.tag = tag
        self.silent = silent
        self.requests: list[bytes] = []
        self.connections = 0
        self.open_connections = 0
        self.host: str | None = None
        self.port: int | None = None
        self._server: asyncio.Server | None = None
        self._writers: set[asyncio.StreamWriter] = set()

    @property
    def address(self) -> MasterAddress:
        return MasterAddress(self.host, self.port)

    async def start(self, host: str = "127.0.0.1", port: int = 0) -> "FakeRedisNode":
        self._server = await asyncio.start_server(
            self._handle,
            host=host,
            port=port,
        )

        self.host, self.port = self._server.sockets[0].getsockname()[:2]
        return self

    async def _handle(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ) -> None:
        self.connections += 1
        self.open_connections += 1
        self._writers.add(writer)

        try:
            while True:
                data = await reader.read(65536)
                if not data:
                    break

                self.requests.append(data)

                if self.silent:
                    continue

                if b"info replication" in data:
                    if self.reply is None:
                        break

                    writer.write(self.reply)

                else:
                    writer.write(self.tag + data)

                await writer.drain()

        except (OSError, asyncio.CancelledError):
            pass

        finally:
            self.open_connections -= 1
            self._writers.discard(writer)
            writer.close()

    async def close(self) -> None:
        if self._server is None:
            return

        self._server.close()
        for writer in list(self._writers):
            writer.close()

        await self._server.wait_closed()
        self._server = None


@dataclass
class RecordingNotifier:
    """Supervisor notifier stand-in."""

    enabled: bool = True
    fail: bool = False
    ready_calls: int = 0
    statuses: list[str] = field(default_factory=list)

    async def ready(self) -> None:
        if self.fail:
            raise NotifyError("Failed to notify READY to systemd: no socket")

        self.ready_calls += 1

    async def status(self, text: str) -> None:
        if self.fail:
            raise NotifyError("Failed to notify STATUS to systemd: no socket")

        self.statuses.append(text)


class FakeClock:
    def __init__(self, now: float = 100.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
