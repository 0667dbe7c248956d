"""
Logging models for the proxy.

Each model carries the contextual fields an operator needs to act on the
line without reading surrounding output: the listening port being served,
the candidate node being probed, or the master a session was dialing.
"""

import msgspec

from .models import Entry, LogLevel


# =============================================================================
# Process Lifecycle Logging Models
# =============================================================================

class ServerInfo(Entry, kw_only=True):
    ports: list[int] = msgspec.field(default_factory=list)
    level: LogLevel = LogLevel.INFO


class ServerWarning(Entry, kw_only=True):
    ports: list[int] = msgspec.field(default_factory=list)
    level: LogLevel = LogLevel.WARN


class ServerFatal(Entry, kw_only=True):
    ports: list[int] = msgspec.field(default_factory=list)
    level: LogLevel = LogLevel.FATAL


# =============================================================================
# Master Election Logging Models
# =============================================================================

class ElectionInfo(Entry, kw_only=True):
    """A port changed master."""
    port: int
    master_host: str
    master_port: int
    level: LogLevel = LogLevel.INFO


class ElectionWarning(Entry, kw_only=True):
    """A port has no master and is not serving new connections."""
    port: int
    attempts: int
    level: LogLevel = LogLevel.WARN


# =============================================================================
# Health Probe Logging Models
# =============================================================================

class ProbeDebug(Entry, kw_only=True):
    node: str
    port: int
    status: str
    level: LogLevel = LogLevel.DEBUG


class ProbeWarning(Entry, kw_only=True):
    node: str
    port: int
    status: str
    level: LogLevel = LogLevel.WARN


# =============================================================================
# Proxied Session Logging Models
# =============================================================================

class SessionDebug(Entry, kw_only=True):
    port: int
    master_host: str
    master_port: int
    level: LogLevel = LogLevel.DEBUG


class SessionWarning(Entry, kw_only=True):
    port: int
    master_host: str
    master_port: int
    level: LogLevel = LogLevel.WARN


# =============================================================================
# Status Logging Models
# =============================================================================

class StatusInfo(Entry, kw_only=True):
    active_sessions: int
    connections_proxied: int
    rate_per_second: float
    level: LogLevel = LogLevel.INFO
