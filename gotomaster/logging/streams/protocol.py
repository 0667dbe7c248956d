import asyncio


class LoggerProtocol(asyncio.streams.FlowControlMixin):
    """Write-only pipe protocol so log lines can be drained like any stream."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        super().__init__(loop=loop)
