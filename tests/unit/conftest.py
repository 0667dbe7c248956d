"""
Shared fixtures for proxy unit tests.
"""

import pytest

from gotomaster.env import ProxyConfig
from gotomaster.proxy import PortBinding, ProxyStats

from tests.unit.mocks import FakeRedisNode, RecordingLogger, RecordingNotifier


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def recording_notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def stats() -> ProxyStats:
    return ProxyStats()


@pytest.fixture
def binding() -> PortBinding:
    return PortBinding(6379)


@pytest.fixture
def fast_config():
    """Build a ProxyConfig with timings short enough for tests."""

    def _config(nodes: tuple[str, ...], ports: tuple[int, ...], **overrides) -> ProxyConfig:
        settings = {
            "listen_host": "127.0.0.1",
            "probe_timeout_seconds": 0.2,
            "poll_interval_seconds": 0.05,
            "dial_timeout_seconds": 0.5,
            "keepalive_period_seconds": 1.0,
            "status_interval_seconds": 60.0,
        }
        settings.update(overrides)

        return ProxyConfig(nodes=nodes, ports=ports, **settings)

    return _config


@pytest.fixture
async def fake_nodes():
    """Start FakeRedisNode servers on demand and close them after the test."""
    nodes: list[FakeRedisNode] = []

    async def _start(host: str = "127.0.0.1", port: int = 0, **kwargs) -> FakeRedisNode:
        node = FakeRedisNode(**kwargs)
        await node.start(host=host, port=port)
        nodes.append(node)
        return node

    yield _start

    for node in nodes:
        await node.close()
