import asyncio

from gotomaster.discovery import HealthProber, MasterElector, MasterProber
from gotomaster.env.proxy_config import ProxyConfig
from gotomaster.exceptions import PortBindError
from gotomaster.logging import Logger
from gotomaster.proxy import ConnectionForwarder, PortBinding, ProxyStats


class PortSupervisor:
    """
    Serves one listening port.

    Owns the port's binding and wires the elector that writes it to the
    forwarder that reads it. Ports share nothing but the global stats.
    """

    def __init__(
        self,
        port: int,
        config: ProxyConfig,
        stats: ProxyStats,
        logger: Logger,
        prober: MasterProber | None = None,
    ) -> None:
        if prober is None:
            prober = HealthProber(
                auth=config.auth,
                buffer_size=config.probe_buffer_size,
            )

        self.binding = PortBinding(port)
        self.elector = MasterElector(
            self.binding,
            config.nodes,
            prober,
            logger,
            attempts=config.election_attempts,
            base_timeout=config.probe_timeout_seconds,
            poll_interval=config.poll_interval_seconds,
        )
        self.forwarder = ConnectionForwarder(
            self.binding,
            stats,
            logger,
            dial_timeout=config.dial_timeout_seconds,
            keepalive_period=config.keepalive_period_seconds,
            buffer_size=config.pipe_buffer_size,
        )

        self._listen_host = config.listen_host
        self._server: asyncio.Server | None = None
        self._elector_task: asyncio.Task | None = None

    @property
    def port(self) -> int:
        return self.binding.port

    @property
    def serving(self) -> bool:
        return self._server is not None and self._server.is_serving()

    async def start(self) -> None:
        """
        Start following the master, then bind the listening socket.

        Raises PortBindError if the port cannot be bound.
        """
        self._elector_task = asyncio.create_task(self.elector.follow_master())

        try:
            self._server = await asyncio.start_server(
                self.forwarder.handle_connection,
                host=self._listen_host,
                port=self.port,
                reuse_address=True,
            )

        except OSError as err:
            await self.close()
            raise PortBindError(self.port, str(err)) from err

    async def close(self) -> None:
        if self._elector_task:
            self._elector_task.cancel()
            try:
                await self._elector_task

            except asyncio.CancelledError:
                pass

            self._elector_task = None

        if self._server:
            self._server.close()

        await self.forwarder.close()

        if self._server:
            await self._server.wait_closed()
            self._server = None
