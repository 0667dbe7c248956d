"""
Master discovery for replicated store clusters.

This module provides:
- HealthProber: probes one candidate node for the master role
- MasterElector: polls all candidates for one port and publishes the master
- attempt_timeout: escalating per-attempt probe timeout
"""

from gotomaster.discovery.master_address import MasterAddress as MasterAddress
from gotomaster.discovery.prober import (
    HealthProber as HealthProber,
    ProbeResponse as ProbeResponse,
    ProbeStatus as ProbeStatus,
    build_probe_command as build_probe_command,
    classify_reply as classify_reply,
)
from gotomaster.discovery.timeout_strategy import attempt_timeout as attempt_timeout
from gotomaster.discovery.elector import (
    ElectorState as ElectorState,
    MasterElector as MasterElector,
    MasterProber as MasterProber,
)
