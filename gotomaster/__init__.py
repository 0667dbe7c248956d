"""
Go-to-master: a failover TCP proxy for replicated redis clusters.

Each configured port is served by a PortSupervisor which pairs:
- MasterElector: polls candidate nodes with ``info replication`` and
  publishes the first node reporting ``role:master``
- ConnectionForwarder: forwards accepted client connections to the
  currently published master

Usage:
    # Import components from their submodules, e.g.
    from gotomaster.discovery import HealthProber, MasterElector
    from gotomaster.proxy import ConnectionForwarder, PortBinding
"""
