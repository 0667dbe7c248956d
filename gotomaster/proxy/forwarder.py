"""
Byte-transparent forwarding of client connections to the current master.

Each accepted connection is checked against the port's binding. Without a
master the connection is closed at once and never counted. With a master
the connection becomes a session: the master is dialed, keep-alive is
enabled on both sockets, and two pipes copy bytes in each direction until
either side ends.

A session stays with the master it dialed for its whole life. Only
connections accepted after an election change reach the new master.
"""

import asyncio

from gotomaster.discovery.master_address import MasterAddress
from gotomaster.logging import Logger
from gotomaster.logging.go_to_master_logging_models import (
    SessionDebug,
    SessionWarning,
)

from .keepalive import enable_keepalive
from .port_binding import PortBinding
from .stats import ProxyStats


class ConnectionForwarder:
    def __init__(
        self,
        binding: PortBinding,
        stats: ProxyStats,
        logger: Logger,
        dial_timeout: float = 3.0,
        keepalive_period: float = 5.0,
        buffer_size: int = 65536,
    ) -> None:
        self._binding = binding
        self._stats = stats
        self._logger = logger
        self._dial_timeout = dial_timeout
        self._keepalive_period = keepalive_period
        self._buffer_size = buffer_size
        self._sessions: set[asyncio.Task] = set()

    @property
    def port(self) -> int:
        return self._binding.port

    @property
    def sessions(self) -> set[asyncio.Task]:
        return self._sessions

    async def handle_connection(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ) -> None:
        master = await self._binding.snapshot()

        if master is None:
            await self._close(writer)
            return

        self._stats.record_proxied()

        session = asyncio.create_task(
            self.proxy(reader, writer, master),
        )

        self._sessions.add(session)
        session.add_done_callback(self._sessions.discard)

    async def proxy(
        self,
        client_reader: asyncio.StreamReader,
        client_writer: asyncio.StreamWriter,
        master: MasterAddress,
    ) -> None:
        try:
            master_reader, master_writer = await asyncio.wait_for(
                asyncio.open_connection(master.host, master.port),
                timeout=self._dial_timeout,
            )

        except asyncio.TimeoutError:
            await self._dial_failed(
                client_writer,
                master,
                f"timed out after {self._dial_timeout}s",
            )
            return

        except OSError as err:
            await self._dial_failed(client_writer, master, str(err))
            return

        enable_keepalive(client_writer, self._keepalive_period)
        enable_keepalive(master_writer, self._keepalive_period)

        await asyncio.gather(
            self.pipe(client_reader, client_writer, master_writer, master),
            self.pipe(master_reader, master_writer, client_writer, master),
        )

    async def pipe(
        self,
        source: asyncio.StreamReader,
        source_writer: asyncio.StreamWriter,
        sink: asyncio.StreamWriter,
        master: MasterAddress,
    ) -> None:
        """
        Copy bytes from ``source`` to ``sink`` until EOF or error.

        Both sockets are closed on exit, which ends the paired pipe too.
        """
        self._stats.pipe_opened()

        try:
            while True:
                data = await source.read(self._buffer_size)
                if not data:
                    break

                sink.write(data)
                await sink.drain()

        except OSError as err:
            await self._logger.log(
                SessionDebug(
                    message=f"Session on port {self.port} to {master} ended: {err}",
                    port=self.port,
                    master_host=master.host,
                    master_port=master.port,
                )
            )

        finally:
            try:
                await self._close(source_writer)
                await self._close(sink)

            finally:
                self._stats.pipe_closed()

    async def close(self) -> None:
        sessions = list(self._sessions)
        for session in sessions:
            session.cancel()

        await asyncio.gather(*sessions, return_exceptions=True)

    async def _dial_failed(
        self,
        client_writer: asyncio.StreamWriter,
        master: MasterAddress,
        reason: str,
    ) -> None:
        await self._logger.log(
            SessionWarning(
                message=f"Can't dial master {master} for port {self.port}: {reason}",
                port=self.port,
                master_host=master.host,
                master_port=master.port,
            )
        )

        await self._close(client_writer)

    async def _close(self, writer: asyncio.StreamWriter) -> None:
        if not writer.is_closing():
            writer.close()

        try:
            await writer.wait_closed()

        except OSError:
            pass
