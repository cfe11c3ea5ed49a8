"""
Time-rotating line writers for event logs.
"""

import logging
import os
import threading
from logging.handlers import TimedRotatingFileHandler


class _RaisingTimedRotatingFileHandler(TimedRotatingFileHandler):
    """Propagates I/O errors instead of printing them to stderr."""

    def handleError(self, record: logging.LogRecord) -> None:
        raise


class RotatingWriter:
    """Appends lines to a file that rolls over every ``rotation_min`` minutes."""

    def __init__(self, filename: str, rotation_min: int, max_backups: int = 0) -> None:
        self.filename = filename
        self._handler = _RaisingTimedRotatingFileHandler(
            filename,
            when="M",
            interval=rotation_min,
            backupCount=max_backups,
            encoding="utf-8",
        )
        self._handler.setFormatter(logging.Formatter("%(message)s"))
        self._lock = threading.Lock()
        self._closed = False

    def write(self, line: str) -> None:
        # The handler rolls the file over before emitting when the interval passed
        record = logging.makeLogRecord({"msg": line.rstrip("\n")})
        with self._lock:
            if self._closed:
                raise ValueError(f"write to closed writer {self.filename}")
            self._handler.emit(record)

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._handler.close()

    def __repr__(self) -> str:
        return f"RotatingWriter({self.filename!r})"


def create_rotating_writer(
    name: str,
    directory: str,
    rotation_min: int,
    *,
    server_name: str = "",
    max_backups: int = 0,
) -> RotatingWriter:
    """
    Open a rotating writer named ``name`` inside ``directory``.

    The file is ``<server_name>-<name>.log`` so several hosts can share a
    log volume. The directory is created when missing.

    Raises:
        ValueError: the file name would leave ``directory``
        OSError: the directory or the file cannot be created
    """
    basename = f"{server_name}-{name}.log" if server_name else f"{name}.log"
    filename = os.path.join(directory, basename)
    if os.path.dirname(os.path.abspath(filename)) != os.path.abspath(directory):
        raise ValueError(f"log name {basename!r} escapes {directory!r}")

    os.makedirs(directory, exist_ok=True)
    return RotatingWriter(
        filename,
        rotation_min=rotation_min,
        max_backups=max_backups,
    )
