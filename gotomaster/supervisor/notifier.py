"""
Readiness and status notifications to a process supervisor.

Notifications are best-effort. Implementations raise NotifyError when a
message cannot be delivered and callers log it and carry on.
"""

import asyncio
import os
import socket
from typing import Protocol

from gotomaster.exceptions import NotifyError


class SupervisorNotifier(Protocol):
    """Protocol for process supervisor notifiers."""

    @property
    def enabled(self) -> bool: ...

    async def ready(self) -> None: ...

    async def status(self, text: str) -> None: ...


class NoopNotifier:
    """Notifier used when no supervisor is watching the process."""

    @property
    def enabled(self) -> bool:
        return False

    async def ready(self) -> None:
        return None

    async def status(self, text: str) -> None:
        return None


class SystemdNotifier:
    """
    sd_notify over the datagram socket named by ``NOTIFY_SOCKET``.

    Socket names starting with ``@`` live in the abstract namespace.
    """

    def __init__(self, socket_path: str | None = None) -> None:
        if socket_path is None:
            socket_path = os.getenv("NOTIFY_SOCKET")

        self._socket_path = socket_path

    @property
    def enabled(self) -> bool:
        return bool(self._socket_path)

    async def ready(self) -> None:
        await self._send("READY=1")

    async def status(self, text: str) -> None:
        await self._send(f"STATUS={text}")

    async def _send(self, state: str) -> None:
        if not self.enabled:
            raise NotifyError("NOTIFY_SOCKET is not set")

        address = self._socket_path
        if address.startswith("@"):
            address = "\0" + address[1:]

        loop = asyncio.get_running_loop()

        try:
            await loop.run_in_executor(
                None,
                self._send_datagram,
                address,
                state.encode(),
            )

        except OSError as err:
            raise NotifyError(
                f"Failed to notify {state.split('=', maxsplit=1)[0]} to systemd: {err}"
            ) from err

    def _send_datagram(self, address: str, payload: bytes) -> None:
        with socket.socket(socket.AF_UNIX, socket.SOCK_DGRAM) as notify_socket:
            notify_socket.connect(address)
            notify_socket.sendall(payload)


def default_notifier() -> SupervisorNotifier:
    if os.getenv("NOTIFY_SOCKET"):
        return SystemdNotifier()

    return NoopNotifier()
