"""
Event log writers and consumers.
"""

from tracker.events.consumer import AsyncLogger, Consumer, MultipleAsyncLogger
from tracker.events.writer import RotatingWriter, create_rotating_writer

__all__ = [
    "AsyncLogger",
    "Consumer",
    "MultipleAsyncLogger",
    "RotatingWriter",
    "create_rotating_writer",
]
