"""
Per-port master election.

The elector polls every candidate node in configured order and publishes
the first node that reports the master role to the port's binding. A
determination makes up to ``attempts`` passes over the candidates with an
escalating per-attempt timeout before declaring the port unserved.

States:
- SEARCHING: no master known, new client connections are refused
- LOCKED: a master is known and new client connections are forwarded to it
"""

import asyncio
from enum import Enum
from typing import TYPE_CHECKING, Protocol, Sequence

from gotomaster.logging import Logger
from gotomaster.logging.go_to_master_logging_models import (
    ElectionInfo,
    ElectionWarning,
    ProbeDebug,
    ProbeWarning,
)

from .master_address import MasterAddress
from .prober import ProbeResponse, ProbeStatus
from .timeout_strategy import attempt_timeout

if TYPE_CHECKING:
    from gotomaster.proxy.port_binding import PortBinding


class MasterProber(Protocol):
    """Protocol for master probes."""

    async def probe(
        self,
        node: str,
        port: int,
        timeout: float,
    ) -> ProbeResponse: ...


class ElectorState(Enum):
    SEARCHING = "searching"
    LOCKED = "locked"


class MasterElector:
    def __init__(
        self,
        binding: "PortBinding",
        nodes: Sequence[str],
        prober: MasterProber,
        logger: Logger,
        attempts: int = 3,
        base_timeout: float = 1.0,
        poll_interval: float = 1.0,
    ) -> None:
        self._binding = binding
        self._nodes = tuple(nodes)
        self._prober = prober
        self._logger = logger
        self._attempts = attempts
        self._base_timeout = base_timeout
        self._poll_interval = poll_interval
        self._state = ElectorState.SEARCHING

    @property
    def port(self) -> int:
        return self._binding.port

    @property
    def state(self) -> ElectorState:
        return self._state

    async def follow_master(self) -> None:
        """Poll for the master until cancelled."""
        while True:
            try:
                await self.poll()

            except Exception as err:
                await self._logger.log(
                    ElectionWarning(
                        message=f"Master election for port {self.port} failed: {err}",
                        port=self.port,
                        attempts=self._attempts,
                    )
                )

            await asyncio.sleep(self._poll_interval)

    async def poll(self) -> MasterAddress | None:
        """Run one determination and publish its result to the binding."""
        master = await self.determine_master()
        changed = await self._binding.publish(master)

        if master is None:
            self._state = ElectorState.SEARCHING
            await self._logger.log(
                ElectionWarning(
                    message=f"No masters found for port {self.port}! Will not serve new connections until master is found...",
                    port=self.port,
                    attempts=self._attempts,
                )
            )

            return None

        self._state = ElectorState.LOCKED

        if changed:
            await self._logger.log(
                ElectionInfo(
                    message=f"Changing master for port {self.port} to {master}",
                    port=self.port,
                    master_host=master.host,
                    master_port=master.port,
                )
            )

        return master

    async def determine_master(self) -> MasterAddress | None:
        for attempt in range(1, self._attempts + 1):
            master = await self.run_cycle(
                attempt_timeout(attempt, self._base_timeout),
            )

            if master is not None:
                return master

        return None

    async def run_cycle(self, timeout: float) -> MasterAddress | None:
        """Probe candidates in order and return the first master found."""
        for node in self._nodes:
            try:
                response = await self._prober.probe(node, self.port, timeout)

            except Exception as err:
                await self._logger.log(
                    ProbeWarning(
                        message=f"Can't check {node}:{self.port}: {err!r}",
                        node=node,
                        port=self.port,
                        status="error",
                    )
                )

                continue

            if response.is_master:
                return response.address

            await self._log_probe(response)

        return None

    async def _log_probe(self, response: ProbeResponse) -> None:
        if response.status == ProbeStatus.AUTH_REQUIRED:
            await self._logger.log(
                ProbeWarning(
                    message=f"{response.node}:{response.port}: NOAUTH Authentication required",
                    node=response.node,
                    port=response.port,
                    status=response.status.value,
                )
            )

        elif response.status == ProbeStatus.CONNECT_FAILED:
            await self._logger.log(
                ProbeWarning(
                    message=f"Can't connect to {response.node}:{response.port}: {response.message}",
                    node=response.node,
                    port=response.port,
                    status=response.status.value,
                )
            )

        elif response.status == ProbeStatus.READ_FAILED:
            await self._logger.log(
                ProbeWarning(
                    message=f"Can't read from {response.node}:{response.port}: {response.message}",
                    node=response.node,
                    port=response.port,
                    status=response.status.value,
                )
            )

        else:
            await self._logger.log(
                ProbeDebug(
                    message=f"{response.node}:{response.port} is not master",
                    node=response.node,
                    port=response.port,
                    status=response.status.value,
                )
            )
