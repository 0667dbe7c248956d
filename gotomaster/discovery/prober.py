"""
Master health probe.

One probe opens a TCP connection to a candidate node on the port being
served, asks the node for its replication role, and classifies the bare
text reply. The reply is read exactly once into a bounded buffer, so a
misbehaving node can neither stall a probe past its timeout nor make it
buffer an unbounded reply.

Wire format:
- without a credential: ``info replication\\r\\n``
- with a credential:    ``AUTH <credential>\\r\\ninfo replication\\r\\n``

Classification:
- ``role:master`` anywhere in the reply: the node is the master
- ``-NOAUTH`` anywhere in the reply: the credential is missing or wrong
- anything else: the node is not the master
"""

import asyncio
import time
from dataclasses import dataclass, field
from enum import Enum

from .master_address import MasterAddress


MASTER_MARKER = b"role:master"
NOAUTH_MARKER = b"-NOAUTH"
ROLE_QUERY = b"info replication\r\n"
DEFAULT_PROBE_BUFFER_SIZE = 4096


class ProbeStatus(Enum):
    """Outcome of a single master probe."""

    MASTER = "master"
    NOT_MASTER = "not_master"
    AUTH_REQUIRED = "auth_required"
    CONNECT_FAILED = "connect_failed"
    READ_FAILED = "read_failed"


@dataclass(slots=True)
class ProbeResponse:
    """Response from a master probe."""

    status: ProbeStatus
    node: str
    port: int
    address: MasterAddress | None = None
    message: str = ""
    latency_ms: float = 0.0
    timestamp: float = field(default_factory=time.monotonic)

    @property
    def is_master(self) -> bool:
        return self.status == ProbeStatus.MASTER and self.address is not None


def build_probe_command(auth: str | None = None) -> bytes:
    if auth:
        return f"AUTH {auth}\r\n".encode() + ROLE_QUERY

    return ROLE_QUERY


def classify_reply(reply: bytes) -> ProbeStatus:
    if MASTER_MARKER in reply:
        return ProbeStatus.MASTER

    if NOAUTH_MARKER in reply:
        return ProbeStatus.AUTH_REQUIRED

    return ProbeStatus.NOT_MASTER


class HealthProber:
    """
    Probes candidate nodes for the master role.

    Example usage:
        prober = HealthProber(auth="secret")
        response = await prober.probe("redis-1", 6379, timeout=1.0)
        if response.is_master:
            print(f"Master is {response.address}")

    A probe never raises for network conditions. Connect failures and
    timeouts, including unresolvable or malformed hostnames, report
    CONNECT_FAILED; write, read and read-timeout failures
    (including the node closing before replying) report READ_FAILED.
    """

    def __init__(
        self,
        auth: str | None = None,
        buffer_size: int = DEFAULT_PROBE_BUFFER_SIZE,
    ) -> None:
        self._command = build_probe_command(auth)
        self._buffer_size = buffer_size

    async def probe(
        self,
        node: str,
        port: int,
        timeout: float,
    ) -> ProbeResponse:
        start_time = time.monotonic()

        try:
            reader, writer = await asyncio.wait_for(
                asyncio.open_connection(node, port),
                timeout=timeout,
            )

        except asyncio.TimeoutError:
            return ProbeResponse(
                status=ProbeStatus.CONNECT_FAILED,
                node=node,
                port=port,
                message=f"Connect timed out after {timeout}s",
                latency_ms=(time.monotonic() - start_time) * 1000,
            )

        except (OSError, ValueError) as err:
            # Malformed hostnames fail IDNA encoding with UnicodeError.
            return ProbeResponse(
                status=ProbeStatus.CONNECT_FAILED,
                node=node,
                port=port,
                message=str(err),
                latency_ms=(time.monotonic() - start_time) * 1000,
            )

        try:
            address = MasterAddress.from_peername(
                writer.get_extra_info("peername")
            )

            writer.write(self._command)
            await asyncio.wait_for(writer.drain(), timeout=timeout)

            reply = await asyncio.wait_for(
                reader.read(self._buffer_size),
                timeout=timeout,
            )

        except asyncio.TimeoutError:
            return ProbeResponse(
                status=ProbeStatus.READ_FAILED,
                node=node,
                port=port,
                message=f"Read timed out after {timeout}s",
                latency_ms=(time.monotonic() - start_time) * 1000,
            )

        except OSError as err:
            return ProbeResponse(
                status=ProbeStatus.READ_FAILED,
                node=node,
                port=port,
                message=str(err),
                latency_ms=(time.monotonic() - start_time) * 1000,
            )

        finally:
            await self._close(writer)

        latency_ms = (time.monotonic() - start_time) * 1000

        if address is None:
            return ProbeResponse(
                status=ProbeStatus.READ_FAILED,
                node=node,
                port=port,
                message="Peer address unavailable",
                latency_ms=latency_ms,
            )

        if len(reply) == 0:
            return ProbeResponse(
                status=ProbeStatus.READ_FAILED,
                node=node,
                port=port,
                message="Connection closed before reply",
                latency_ms=latency_ms,
            )

        status = classify_reply(reply)

        return ProbeResponse(
            status=status,
            node=node,
            port=port,
            address=address if status == ProbeStatus.MASTER else None,
            message=status.value,
            latency_ms=latency_ms,
        )

    async def _close(self, writer: asyncio.StreamWriter) -> None:
        writer.close()

        try:
            await writer.wait_closed()

        except OSError:
            pass
