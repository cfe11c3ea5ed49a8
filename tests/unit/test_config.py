"""Tests for Settings sources, defaults and parsing."""

import pytest
from pydantic import ValidationError

from tracker.core.config import Settings, get_settings


class TestDefaults:
    def test_documented_defaults(self) -> None:
        settings = Settings()
        assert settings.port is None
        assert settings.server.port == "8001"
        assert settings.server.auth == []
        assert settings.server.public_url == ""
        assert settings.server.log.path == ""
        assert settings.geo.maxmind_path == "/home/tracker/app/res/"
        assert settings.log.path == "/home/tracker/logs/events"
        assert settings.log.rotation_min == 5
        assert settings.authority == "0.0.0.0:8001"


class TestEnvironment:
    def test_nested_keys(self, monkeypatch) -> None:
        monkeypatch.setenv("SERVER__PORT", "7000")
        monkeypatch.setenv("SERVER__LOG__PATH", "/var/log/tracker")
        monkeypatch.setenv("LOG__ROTATION_MIN", "15")
        settings = Settings()
        assert settings.server.port == "7000"
        assert settings.server.log.path == "/var/log/tracker"
        assert settings.log.rotation_min == 15

    def test_auth_comma_separated(self, monkeypatch) -> None:
        monkeypatch.setenv("SERVER__AUTH", "t1, t2 ,t1")
        assert Settings().server.auth == ["t1", " t2 ", "t1"]

    def test_port_override_wins(self, monkeypatch) -> None:
        monkeypatch.setenv("SERVER__PORT", "7000")
        monkeypatch.setenv("PORT", "9000")
        assert Settings().authority == "0.0.0.0:9000"

    def test_empty_port_override_ignored(self, monkeypatch) -> None:
        monkeypatch.setenv("PORT", "")
        assert Settings().authority == "0.0.0.0:8001"

    def test_invalid_rotation(self, monkeypatch) -> None:
        monkeypatch.setenv("LOG__ROTATION_MIN", "often")
        with pytest.raises(ValidationError):
            Settings()

    def test_get_settings_cached(self) -> None:
        assert get_settings() is get_settings()


class TestYamlFile:
    def test_default_file_name(self, tmp_path) -> None:
        (tmp_path / "tracker.yaml").write_text(
            "server:\n"
            "  auth:\n"
            "    - alpha\n"
            "    - beta\n"
            "geo:\n"
            "  maxmind_path: /data/geo\n"
        )
        settings = Settings()
        assert settings.server.auth == ["alpha", "beta"]
        assert settings.geo.maxmind_path == "/data/geo"

    def test_file_from_env(self, tmp_path, monkeypatch) -> None:
        config = tmp_path / "custom.yaml"
        config.write_text("server:\n  port: '8500'\n")
        monkeypatch.setenv("TRACKER_CONFIG_FILE", str(config))
        assert Settings().server.port == "8500"

    def test_unquoted_numbers(self, tmp_path) -> None:
        (tmp_path / "tracker.yaml").write_text(
            "port: 9100\n"
            "server:\n"
            "  port: 8500\n"
            "  auth:\n"
            "    - 12345\n"
        )
        settings = Settings()
        assert settings.server.port == "8500"
        assert settings.port == "9100"
        assert settings.server.auth == ["12345"]
        assert settings.authority == "0.0.0.0:9100"

    def test_environment_beats_file(self, tmp_path, monkeypatch) -> None:
        (tmp_path / "tracker.yaml").write_text("server:\n  port: '8500'\n")
        monkeypatch.setenv("SERVER__PORT", "8600")
        assert Settings().server.port == "8600"
