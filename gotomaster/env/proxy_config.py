"""
Runtime configuration for the proxy.

Turns the loosely typed environment settings into the immutable values the
electors, forwarders and status reporter run with, and rejects settings the
process cannot start with.
"""

from dataclasses import dataclass

from gotomaster.exceptions import ConfigurationError

from .env import Env
from .time_parser import TimeParser


def split_list(value: str | None) -> list[str]:
    if value is None:
        return []

    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass(frozen=True, slots=True)
class ProxyConfig:
    """
    Immutable configuration shared by every port supervisor.

    Node order is significant: when more than one node reports itself as
    master, the first one listed wins.
    """

    nodes: tuple[str, ...]
    ports: tuple[int, ...]
    auth: str | None = None
    listen_host: str | None = None

    probe_timeout_seconds: float = 1.0
    election_attempts: int = 3
    poll_interval_seconds: float = 1.0
    probe_buffer_size: int = 4096

    dial_timeout_seconds: float = 3.0
    keepalive_period_seconds: float = 5.0
    pipe_buffer_size: int = 65536
    status_interval_seconds: float = 5.0

    def __post_init__(self) -> None:
        if len(self.ports) == 0:
            raise ConfigurationError("Must specify at least one listening port!")

        if len(self.nodes) == 0:
            raise ConfigurationError("Must specify at least one redis node!")

        if len(set(self.ports)) != len(self.ports):
            raise ConfigurationError(
                f"Listening ports must be unique, got: {', '.join(str(port) for port in self.ports)}"
            )

        for port in self.ports:
            if port < 1 or port > 65535:
                raise ConfigurationError(f"Invalid listening port: {port}")

        if self.election_attempts < 1:
            raise ConfigurationError("Election attempts must be at least 1")

        for name in (
            "probe_timeout_seconds",
            "poll_interval_seconds",
            "dial_timeout_seconds",
            "keepalive_period_seconds",
            "status_interval_seconds",
        ):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"Setting {name} must be greater than zero")

        for name in ("probe_buffer_size", "pipe_buffer_size"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"Setting {name} must be greater than zero")

    @classmethod
    def from_env(cls, env: Env) -> "ProxyConfig":
        ports: list[int] = []
        for port in split_list(env.GO_TO_MASTER_PORTS):
            try:
                ports.append(int(port))

            except ValueError:
                raise ConfigurationError(f"Invalid listening port: {port}")

        try:
            return cls(
                nodes=tuple(split_list(env.GO_TO_MASTER_NODES)),
                ports=tuple(ports),
                auth=env.GO_TO_MASTER_AUTH or None,
                listen_host=env.GO_TO_MASTER_LISTEN_HOST or None,
                probe_timeout_seconds=TimeParser(env.GO_TO_MASTER_PROBE_TIMEOUT).time,
                election_attempts=env.GO_TO_MASTER_ELECTION_ATTEMPTS,
                poll_interval_seconds=TimeParser(env.GO_TO_MASTER_POLL_INTERVAL).time,
                probe_buffer_size=env.GO_TO_MASTER_PROBE_BUFFER_SIZE,
                dial_timeout_seconds=TimeParser(env.GO_TO_MASTER_DIAL_TIMEOUT).time,
                keepalive_period_seconds=TimeParser(
                    env.GO_TO_MASTER_KEEPALIVE_PERIOD
                ).time,
                pipe_buffer_size=env.GO_TO_MASTER_PIPE_BUFFER_SIZE,
                status_interval_seconds=TimeParser(
                    env.GO_TO_MASTER_STATUS_INTERVAL
                ).time,
            )

        except ValueError as err:
            raise ConfigurationError(str(err))
