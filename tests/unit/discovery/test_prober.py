"""
Tests for the master health probe.

Probes run against FakeRedisNode servers on the loopback interface.
"""

import pytest

from gotomaster.discovery import (
    HealthProber,
    MasterAddress,
    ProbeStatus,
    build_probe_command,
    classify_reply,
)

from tests.unit.mocks import (
    MASTER_REPLY,
    NOAUTH_REPLY,
    SLAVE_REPLY,
    unused_port,
)


# =============================================================================
# Wire format
# =============================================================================


class TestProbeCommand:
    def test_without_credential(self):
        assert build_probe_command() == b"info replication\r\n"
        assert build_probe_command("") == b"info replication\r\n"

    def test_with_credential(self):
        assert build_probe_command("secret") == b"AUTH secret\r\ninfo replication\r\n"


class TestClassifyReply:
    def test_master(self):
        assert classify_reply(MASTER_REPLY) == ProbeStatus.MASTER

    def test_replica(self):
        assert classify_reply(SLAVE_REPLY) == ProbeStatus.NOT_MASTER

    def test_noauth(self):
        assert classify_reply(NOAUTH_REPLY) == ProbeStatus.AUTH_REQUIRED

    def test_master_marker_wins_over_noauth(self):
        assert classify_reply(b"-NOAUTH\r\nrole:master\r\n") == ProbeStatus.MASTER

    def test_marker_is_case_sensitive(self):
        assert classify_reply(b"ROLE:MASTER") == ProbeStatus.NOT_MASTER


# =============================================================================
# Probing
# =============================================================================


class TestHealthProber:
    @pytest.mark.asyncio
    async def test_master_reports_peer_address(self, fake_nodes):
        node = await fake_nodes(reply=MASTER_REPLY)

        response = await HealthProber().probe("127.0.0.1", node.port, timeout=1.0)

        assert response.status == ProbeStatus.MASTER
        assert response.is_master
        assert response.address == MasterAddress("127.0.0.1", node.port)
        assert response.node == "127.0.0.1"
        assert response.port == node.port
        assert node.requests == [b"info replication\r\n"]

    @pytest.mark.asyncio
    async def test_sends_credential_before_query(self, fake_nodes):
        node = await fake_nodes(reply=MASTER_REPLY)

        response = await HealthProber(auth="secret").probe(
            "127.0.0.1", node.port, timeout=1.0
        )

        assert response.is_master
        assert b"".join(node.requests) == b"AUTH secret\r\ninfo replication\r\n"

    @pytest.mark.asyncio
    async def test_replica_is_not_master(self, fake_nodes):
        node = await fake_nodes(reply=SLAVE_REPLY)

        response = await HealthProber().probe("127.0.0.1", node.port, timeout=1.0)

        assert response.status == ProbeStatus.NOT_MASTER
        assert not response.is_master
        assert response.address is None

    @pytest.mark.asyncio
    async def test_noauth_reply(self, fake_nodes):
        node = await fake_nodes(reply=NOAUTH_REPLY)

        response = await HealthProber().probe("127.0.0.1", node.port, timeout=1.0)

        assert response.status == ProbeStatus.AUTH_REQUIRED
        assert not response.is_master

    @pytest.mark.asyncio
    async def test_connection_refused(self):
        response = await HealthProber().probe("127.0.0.1", unused_port(), timeout=1.0)

        assert response.status == ProbeStatus.CONNECT_FAILED
        assert not response.is_master

    @pytest.mark.asyncio
    async def test_malformed_hostname_is_connect_failure(self):
        response = await HealthProber().probe("redis..local", 6379, timeout=1.0)

        assert response.status == ProbeStatus.CONNECT_FAILED
        assert response.node == "redis..local"
        assert not response.is_master

    @pytest.mark.asyncio
    async def test_silent_node_times_out_reading(self, fake_nodes):
        node = await fake_nodes(silent=True)

        response = await HealthProber().probe("127.0.0.1", node.port, timeout=0.2)

        assert response.status == ProbeStatus.READ_FAILED
        assert response.message == "Read timed out after 0.2s"

    @pytest.mark.asyncio
    async def test_node_closing_before_reply(self, fake_nodes):
        node = await fake_nodes(reply=None)

        response = await HealthProber().probe("127.0.0.1", node.port, timeout=1.0)

        assert response.status == ProbeStatus.READ_FAILED
        assert response.message == "Connection closed before reply"

    @pytest.mark.asyncio
    async def test_reads_reply_once_into_bounded_buffer(self, fake_nodes):
        node = await fake_nodes(reply=b"x" * 5000 + b"role:master\r\n")

        response = await HealthProber(buffer_size=4096).probe(
            "127.0.0.1", node.port, timeout=1.0
        )

        assert response.status == ProbeStatus.NOT_MASTER

    @pytest.mark.asyncio
    async def test_probe_closes_its_connection(self, fake_nodes):
        node = await fake_nodes(reply=MASTER_REPLY)
        prober = HealthProber()

        for _ in range(3):
            await prober.probe("127.0.0.1", node.port, timeout=1.0)

        assert node.connections == 3
