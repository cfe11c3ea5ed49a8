"""
Core module containing configuration, logging, errors and resource lifecycle.
"""

from tracker.core.config import get_settings, Settings
from tracker.core.lifecycle import LifecycleRegistry
from tracker.core.logging import get_logger, setup_logging

__all__ = ["get_settings", "Settings", "LifecycleRegistry", "get_logger", "setup_logging"]
