import asyncio
import time
from dataclasses import dataclass
from typing import Callable

from gotomaster.exceptions import NotifyError
from gotomaster.logging import Logger
from gotomaster.logging.go_to_master_logging_models import (
    ServerWarning,
    StatusInfo,
)
from gotomaster.proxy.stats import ProxyStats

from .notifier import NoopNotifier, SupervisorNotifier


@dataclass(slots=True)
class StatusSample:
    active_sessions: int
    connections_proxied: int
    rate_per_second: float

    def to_status(self) -> str:
        return (
            f"Active connections: {self.active_sessions}, "
            f"proxied: {self.connections_proxied}, "
            f"rate: {self.rate_per_second:.1f}/sec"
        )


class StatusReporter:
    """
    Samples the forwarding counters on a fixed interval.

    The status line goes to the supervisor when one is attached, otherwise
    to the log.
    """

    def __init__(
        self,
        stats: ProxyStats,
        logger: Logger,
        notifier: SupervisorNotifier | None = None,
        interval: float = 5.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if notifier is None:
            notifier = NoopNotifier()

        self._stats = stats
        self._logger = logger
        self._notifier = notifier
        self._interval = interval
        self._clock = clock

        self._period_start = clock()
        self._period_proxied = stats.connections_proxied

    def sample(self) -> StatusSample:
        now = self._clock()
        snapshot = self._stats.snapshot()

        elapsed = now - self._period_start
        delta = snapshot.connections_proxied - self._period_proxied

        rate = delta / elapsed if elapsed > 0 else 0.0

        self._period_start = now
        self._period_proxied = snapshot.connections_proxied

        return StatusSample(
            active_sessions=snapshot.active_sessions,
            connections_proxied=snapshot.connections_proxied,
            rate_per_second=rate,
        )

    async def report(self) -> StatusSample:
        sample = self.sample()
        status = sample.to_status()

        if self._notifier.enabled:
            try:
                await self._notifier.status(status)

            except NotifyError as err:
                await self._logger.log(
                    ServerWarning(message=str(err))
                )

        else:
            await self._logger.log(
                StatusInfo(
                    message=status,
                    active_sessions=sample.active_sessions,
                    connections_proxied=sample.connections_proxied,
                    rate_per_second=sample.rate_per_second,
                )
            )

        return sample

    async def run(self) -> None:
        self._period_start = self._clock()
        self._period_proxied = self._stats.connections_proxied

        while True:
            await asyncio.sleep(self._interval)
            await self.report()
