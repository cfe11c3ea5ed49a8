"""
Ordered shutdown of process resources.

Resources scheduled for closing are released in registration order when
the process stops. A failing release never stops the remaining ones.
"""

import threading
from typing import Protocol

from tracker.core.logging import get_logger

logger = get_logger(__name__)


class Closable(Protocol):
    def close(self) -> None: ...


class LifecycleRegistry:
    """
    Append-only list of resources owned by the process.

    ``register`` may be called from any thread once the process is running;
    ``close_all`` is meant to run once, from the shutdown path.
    """

    def __init__(self) -> None:
        self._resources: list[Closable] = []
        self._lock = threading.Lock()

    def register(self, resource: Closable) -> None:
        with self._lock:
            self._resources.append(resource)

    def close_all(self) -> list[Exception]:
        """
        Close every registered resource in registration order.

        Release errors are logged and swallowed.

        Returns:
            list[Exception]: errors raised by individual releases
        """
        with self._lock:
            resources = list(self._resources)

        errors: list[Exception] = []
        for resource in resources:
            try:
                resource.close()
            except Exception as e:
                errors.append(e)
                logger.error(
                    "Failed to close resource",
                    resource=repr(resource),
                    error=str(e),
                )

        logger.info(
            "Resources closed",
            total=len(resources),
            failed=len(errors),
        )
        return errors

    def __len__(self) -> int:
        with self._lock:
            return len(self._resources)
