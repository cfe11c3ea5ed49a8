"""Pytest configuration and fixtures for the tracker bootstrap.

Every test runs in an empty temporary directory with tracker env vars
removed, so no .env or tracker.yaml from the developer machine leaks in.
"""

import os

import pytest
import structlog

from fakes import FakeWriterFactory
from tracker.core.config import Settings, get_settings

_TRACKER_ENV_PREFIXES = ("PORT", "SERVER__", "GEO__", "LOG__", "LOG_", "TRACKER_")


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    for key in list(os.environ):
        if key.upper().startswith(_TRACKER_ENV_PREFIXES):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pointing every file location into the test directory."""
    return Settings(
        server={"auth": ["t1", "t2"]},
        geo={"maxmind_path": str(tmp_path / "geo-missing")},
        log={"path": str(tmp_path / "events"), "rotation_min": 5},
    )


@pytest.fixture
def writer_factory() -> FakeWriterFactory:
    return FakeWriterFactory()
