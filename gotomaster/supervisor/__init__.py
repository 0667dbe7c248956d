from gotomaster.supervisor.notifier import (
    NoopNotifier as NoopNotifier,
    SupervisorNotifier as SupervisorNotifier,
    SystemdNotifier as SystemdNotifier,
    default_notifier as default_notifier,
)
from gotomaster.supervisor.status_reporter import (
    StatusReporter as StatusReporter,
    StatusSample as StatusSample,
)
from gotomaster.supervisor.port_supervisor import PortSupervisor as PortSupervisor
