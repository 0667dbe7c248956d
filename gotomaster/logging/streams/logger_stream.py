import asyncio
import functools
import io
import os
import pathlib
import sys
from collections import defaultdict
from typing import (
    Callable,
    Dict,
    TypeVar,
)

import msgspec

from gotomaster.logging.config.logging_config import LoggingConfig
from gotomaster.logging.config.stream_type import StreamType
from gotomaster.logging.models import Entry, Log

from .protocol import LoggerProtocol

T = TypeVar('T', bound=Entry)


DEFAULT_TEMPLATE = "{timestamp} - {level} - {message}"
DEFAULT_LOGFILE = "go_to_master.json"


class LoggerStream:
    def __init__(
        self,
        name: str | None = None,
        template: str | None = None,
        filename: str | None = None,
        directory: str | None = None,
    ) -> None:
        if name is None:
            name = "default"

        self._name = name
        self._default_template = template
        self._default_logfile = filename
        self._default_log_directory = directory

        self._init_lock = asyncio.Lock()
        self._stream_writers: Dict[StreamType, asyncio.StreamWriter | None] = {}
        self._loop: asyncio.AbstractEventLoop | None = None

        self._files: Dict[str, io.BufferedRandom] = {}
        self._file_locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

        self._config = LoggingConfig()
        self._initialized: bool = False

    @property
    def name(self):
        return self._name

    async def initialize(self):

        async with self._init_lock:

            if self._initialized:
                return

            if self._loop is None:
                self._loop = asyncio.get_running_loop()

            for stream_type in StreamType:
                if self._stream_writers.get(stream_type) is None:
                    self._stream_writers[stream_type] = await self._connect_stream(
                        stream_type,
                    )

            self._initialized = True

    async def _connect_stream(
        self,
        stream_type: StreamType,
    ) -> asyncio.StreamWriter | None:
        # Redirected or captured streams (regular files, in-memory buffers)
        # cannot back a pipe transport, so those are written from the executor.
        try:
            pipe = await self._dup_stream(stream_type)

        except (OSError, ValueError):
            return None

        try:
            transport, protocol = await self._loop.connect_write_pipe(
                lambda: LoggerProtocol(), pipe
            )

        except (OSError, ValueError):
            pipe.close()
            return None

        return asyncio.StreamWriter(
            transport,
            protocol,
            None,
            self._loop,
        )

    async def _dup_stream(self, stream_type: StreamType):
        stream = sys.stdout if stream_type == StreamType.STDOUT else sys.stderr

        stream_fileno = await self._loop.run_in_executor(
            None,
            stream.fileno
        )

        stream_dup = await self._loop.run_in_executor(
            None,
            os.dup,
            stream_fileno,
        )

        return await self._loop.run_in_executor(
            None,
            functools.partial(
                os.fdopen,
                stream_dup,
                mode="wb",
            )
        )

    async def open_file(
        self,
        logfile_path: str,
    ):
        if self._loop is None:
            self._loop = asyncio.get_running_loop()

        async with self._file_locks[logfile_path]:
            await self._loop.run_in_executor(
                None,
                self._open_file,
                logfile_path,
            )

    def _open_file(
        self,
        logfile_path: str,
    ):
        resolved_path = pathlib.Path(logfile_path).absolute().resolve()
        logfile_directory = str(resolved_path.parent)
        path = str(resolved_path)

        if not os.path.exists(logfile_directory):
            os.makedirs(logfile_directory)

        if not os.path.exists(path):
            resolved_path.touch()

        self._files[logfile_path] = open(path, "ab+")

    async def close(self):
        for stream_type, writer in list(self._stream_writers.items()):
            if writer is not None and not writer.is_closing():
                await writer.drain()
                writer.close()

            self._stream_writers[stream_type] = None

        await asyncio.gather(
            *[self._close_file(logfile_path) for logfile_path in list(self._files)]
        )

        self._initialized = False

    async def _close_file(self, logfile_path: str):
        async with self._file_locks[logfile_path]:
            await self._loop.run_in_executor(
                None,
                self._close_file_at_path,
                logfile_path,
            )

    def _close_file_at_path(self, logfile_path: str):
        if (
            logfile := self._files.get(logfile_path)
        ) and logfile.closed is False:
            logfile.close()

    def _to_logfile_path(self) -> str | None:
        directory = self._default_log_directory
        if directory is None:
            directory = self._config.directory

        if directory is None:
            return None

        filename = self._default_logfile
        if filename is None:
            filename = DEFAULT_LOGFILE

        if pathlib.Path(filename).suffix != ".json":
            raise ValueError("Err. - file must be JSON file for logs.")

        return os.path.join(directory, filename)

    async def log(
        self,
        entry: T | Log,
        template: str | None = None,
        filter: Callable[[T], bool] | None=None,
    ):
        if template is None:
            template = self._default_template

        if template is None:
            template = DEFAULT_TEMPLATE

        if isinstance(entry, Log):
            log = entry

        else:
            log_file, line_number, function_name = self._find_caller()
            log = Log(
                entry=entry,
                filename=log_file,
                function_name=function_name,
                line_number=line_number,
            )

        if self._config.enabled(log.entry.level) is False:
            return

        if filter and filter(log.entry) is False:
            return

        if (logfile_path := self._to_logfile_path()):
            await self._log_to_file(log, logfile_path)

        await self._log(log, template)

    async def _log(
        self,
        log: Log,
        template: str,
    ):
        if self._initialized is False:
            await self.initialize()

        line = log.entry.to_template(
            template,
            context={
                "filename": log.filename,
                "function_name": log.function_name,
                "line_number": log.line_number,
                "thread_id": log.thread_id,
                "timestamp": log.timestamp,
            },
        ) + "\n"

        output = self._config.output
        stream_writer = self._stream_writers.get(output)

        try:
            if stream_writer is None or stream_writer.is_closing():
                await self._loop.run_in_executor(
                    None,
                    self._write_to_stream,
                    output,
                    line,
                )

            else:
                stream_writer.write(line.encode())
                await stream_writer.drain()

        except OSError as err:
            # The output stream went away (closed pipe, full disk); report
            # the failure on stderr rather than losing it silently.
            sys.__stderr__.write(
                f"{log.timestamp} - {log.entry.level.value} - log write failed - {err}\n"
            )

    def _write_to_stream(self, output: StreamType, line: str):
        stream = sys.stdout if output == StreamType.STDOUT else sys.stderr
        stream.write(line)
        stream.flush()

    async def _log_to_file(
        self,
        log: Log,
        logfile_path: str,
    ):
        if self._files.get(logfile_path) is None or self._files[logfile_path].closed:
            await self.open_file(logfile_path)

        async with self._file_locks[logfile_path]:
            await self._loop.run_in_executor(
                None,
                self._write_to_file,
                log,
                logfile_path,
            )

    def _write_to_file(
        self,
        log: Log,
        logfile_path: str,
    ):
        if (
            logfile := self._files.get(logfile_path)
        ) and (
            logfile.closed is False
        ):
            logfile.write(msgspec.json.encode(log) + b"\n")
            logfile.flush()

    def _find_caller(self):
        """
        Find the stack frame of the caller so that we can note the source
        file name, line number and function name.
        """
        frame = sys._getframe(2)
        code = frame.f_code

        return (
            code.co_filename,
            frame.f_lineno,
            code.co_name,
        )
