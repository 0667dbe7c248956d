from gotomaster.proxy.read_write_lock import ReadWriteLock as ReadWriteLock
from gotomaster.proxy.port_binding import PortBinding as PortBinding
from gotomaster.proxy.stats import (
    ProxyStats as ProxyStats,
    StatsSnapshot as StatsSnapshot,
)
from gotomaster.proxy.keepalive import enable_keepalive as enable_keepalive
from gotomaster.proxy.forwarder import ConnectionForwarder as ConnectionForwarder
