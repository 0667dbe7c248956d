from gotomaster.discovery.master_address import MasterAddress

from .read_write_lock import ReadWriteLock


class PortBinding:
    """
    The current master for one listening port.

    Written only by that port's elector and read by its forwarder on every
    accepted connection. A non-empty master is always an address that most
    recently passed the master probe for this port.
    """

    def __init__(self, port: int) -> None:
        self.port = port
        self._master: MasterAddress | None = None
        self._lock = ReadWriteLock()

    @property
    def lock(self) -> ReadWriteLock:
        return self._lock

    async def snapshot(self) -> MasterAddress | None:
        async with self._lock.reading():
            return self._master

    async def publish(self, master: MasterAddress | None) -> bool:
        """
        Replace the current master, clearing it when ``master`` is None.

        Returns True when a new master was locked that differs from the
        previous one, including after a period with no master.
        """
        async with self._lock.writing():
            changed = master is not None and not master.same_as(self._master)
            self._master = master

        return changed
