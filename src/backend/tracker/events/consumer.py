"""
Event consumers that write incoming events as JSON lines.

Each authorized token gets its own writer; events are serialized and written
on a background thread so request handlers never block on disk I/O.
"""

import json
import queue
import threading
from collections.abc import Mapping
from typing import Any, Protocol

from tracker.core.exceptions import ResourceCloseException
from tracker.core.logging import LoggerMixin, get_logger

logger = get_logger(__name__)

_STOP = object()


class Writer(Protocol):
    def write(self, line: str) -> None: ...

    def close(self) -> None: ...


class Consumer(Protocol):
    """Accepts events on behalf of a client token."""

    def consume(self, event: Mapping[str, Any], token: str) -> None: ...

    def close(self) -> None: ...


class AsyncLogger(LoggerMixin):
    """
    Queue-backed writer.

    ``consume`` serializes on the caller's thread and returns immediately;
    a single worker thread drains the queue into the writer. ``close``
    flushes everything still queued before closing the writer.
    """

    def __init__(self, writer: Writer, name: str = "events") -> None:
        self.writer = writer
        self.name = name
        self._queue: queue.Queue = queue.Queue()
        self._closed = False
        self._worker = threading.Thread(
            target=self._run,
            name=f"async-logger-{name}",
            daemon=True,
        )
        self._worker.start()

    def consume(self, event: Mapping[str, Any]) -> None:
        if self._closed:
            self.logger.warning("Event dropped, logger closed", logger_name=self.name)
            return
        self._queue.put(json.dumps(event, default=str, ensure_ascii=False))

    def _run(self) -> None:
        while True:
            line = self._queue.get()
            if line is _STOP:
                return
            try:
                self.writer.write(line)
            except Exception as e:
                self.logger.error(
                    "Failed to write event",
                    logger_name=self.name,
                    error=str(e),
                )

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put(_STOP)
        self._worker.join()
        self.writer.close()


class MultipleAsyncLogger:
    """Routes every event to the AsyncLogger of the token it arrived with."""

    def __init__(self, writers: Mapping[str, Writer]) -> None:
        self.loggers: dict[str, AsyncLogger] = {
            token: AsyncLogger(writer, name=f"event-{token}")
            for token, writer in sorted(writers.items())
        }

    def consume(self, event: Mapping[str, Any], token: str) -> None:
        async_logger = self.loggers.get(token)
        if async_logger is None:
            logger.error("No event logger for token, event dropped")
            return
        async_logger.consume(event)

    def close(self) -> None:
        """
        Close every per-token logger, continuing past failures.

        Raises:
            ResourceCloseException: one or more loggers failed to close
        """
        failures: dict[str, str] = {}
        for async_logger in self.loggers.values():
            try:
                async_logger.close()
            except Exception as e:
                failures[async_logger.name] = str(e)
        if failures:
            raise ResourceCloseException(failures)

    def __repr__(self) -> str:
        return f"MultipleAsyncLogger(tokens={len(self.loggers)})"
