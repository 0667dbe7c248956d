import asyncio
import contextlib
from typing import AsyncIterator


class ReadWriteLock:
    """
    asyncio reader/writer lock that prefers waiting writers.

    Any number of readers may hold the lock together. A writer holds it
    alone, and once a writer is waiting no new reader is admitted, so a
    burst of readers cannot starve an infrequent writer.

    Usage:
        lock = ReadWriteLock()

        async with lock.reading():
            value = shared_value

        async with lock.writing():
            shared_value = new_value
    """

    def __init__(self) -> None:
        self._condition = asyncio.Condition()
        self._readers = 0
        self._writer_active = False
        self._writers_waiting = 0

    @property
    def readers(self) -> int:
        return self._readers

    @property
    def writer_active(self) -> bool:
        return self._writer_active

    @contextlib.asynccontextmanager
    async def reading(self) -> AsyncIterator[None]:
        async with self._condition:
            await self._condition.wait_for(
                lambda: not self._writer_active and self._writers_waiting == 0
            )
            self._readers += 1

        try:
            yield

        finally:
            async with self._condition:
                self._readers -= 1
                if self._readers == 0:
                    self._condition.notify_all()

    @contextlib.asynccontextmanager
    async def writing(self) -> AsyncIterator[None]:
        async with self._condition:
            self._writers_waiting += 1

            try:
                await self._condition.wait_for(
                    lambda: not self._writer_active and self._readers == 0
                )

            finally:
                self._writers_waiting -= 1
                # A cancelled writer may have been the only thing holding
                # readers back.
                self._condition.notify_all()

            self._writer_active = True

        try:
            yield

        finally:
            async with self._condition:
                self._writer_active = False
                self._condition.notify_all()
