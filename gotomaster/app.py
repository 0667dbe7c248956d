"""
The go-to-master process.

Runs one PortSupervisor per configured port on a single event loop, signals
readiness once every port is bound, and reports forwarding status until
cancelled. Only configuration and bind failures stop the process.
"""

import asyncio

from gotomaster.env.proxy_config import ProxyConfig
from gotomaster.exceptions import NotifyError, PortBindError
from gotomaster.logging import Logger
from gotomaster.logging.go_to_master_logging_models import (
    ServerFatal,
    ServerInfo,
    ServerWarning,
)
from gotomaster.proxy import ProxyStats
from gotomaster.supervisor import (
    PortSupervisor,
    StatusReporter,
    SupervisorNotifier,
    default_notifier,
)


SUPERVISED_TEMPLATE = "{level} - {message}"


class GoToMaster:
    def __init__(
        self,
        config: ProxyConfig,
        logger: Logger | None = None,
        notifier: SupervisorNotifier | None = None,
        stats: ProxyStats | None = None,
    ) -> None:
        if notifier is None:
            notifier = default_notifier()

        self._owns_logger = logger is None
        if logger is None:
            logger = Logger()

            # The journal stamps every line itself.
            if notifier.enabled:
                logger.configure(template=SUPERVISED_TEMPLATE)

        if stats is None:
            stats = ProxyStats()

        self.config = config
        self.stats = stats
        self._logger = logger
        self._notifier = notifier

        self.supervisors = [
            PortSupervisor(
                port,
                config,
                stats,
                logger,
            )
            for port in config.ports
        ]

        self._status_reporter = StatusReporter(
            stats,
            logger,
            notifier=notifier,
            interval=config.status_interval_seconds,
        )

    async def start(self) -> None:
        ports = list(self.config.ports)

        await self._logger.log(
            ServerInfo(
                message=f"Watching the following redis servers: {', '.join(self.config.nodes)}",
                ports=ports,
            )
        )

        await self._logger.log(
            ServerInfo(
                message=f"Serving the following ports: {', '.join(str(port) for port in ports)}",
                ports=ports,
            )
        )

        try:
            for supervisor in self.supervisors:
                await supervisor.start()

        except PortBindError as err:
            await self._logger.log(
                ServerFatal(
                    message=str(err),
                    ports=[err.port],
                )
            )

            await self.close()
            raise

        try:
            await self._notifier.ready()

        except NotifyError as err:
            await self._logger.log(
                ServerWarning(
                    message=str(err),
                    ports=ports,
                )
            )

    async def run(self) -> None:
        await self.start()

        try:
            await self._status_reporter.run()

        finally:
            await self.close()

    async def close(self) -> None:
        await asyncio.gather(*[
            supervisor.close() for supervisor in self.supervisors
        ])

        if self._owns_logger:
            await self._logger.close()
