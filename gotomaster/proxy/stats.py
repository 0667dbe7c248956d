from dataclasses import dataclass


@dataclass(slots=True)
class StatsSnapshot:
    connections_proxied: int
    pipes_active: int

    @property
    def active_sessions(self) -> int:
        return self.pipes_active // 2


class ProxyStats:
    """
    Process-wide forwarding counters.

    Shared by every port's forwarder. All updates happen on the event loop
    thread as single statements, so readers may sample without locking and
    at worst see a value one update stale.
    """

    def __init__(self) -> None:
        self.connections_proxied = 0
        self.pipes_active = 0

    @property
    def active_sessions(self) -> int:
        return self.pipes_active // 2

    def record_proxied(self) -> None:
        self.connections_proxied += 1

    def pipe_opened(self) -> None:
        self.pipes_active += 1

    def pipe_closed(self) -> None:
        self.pipes_active -= 1

    def snapshot(self) -> StatsSnapshot:
        return StatsSnapshot(
            connections_proxied=self.connections_proxied,
            pipes_active=self.pipes_active,
        )
