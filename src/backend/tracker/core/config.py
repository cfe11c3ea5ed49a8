"""
Application configuration management.

Loads settings from environment variables, an optional .env file and an
optional YAML config file. Nested keys (``server.log.path``) map to
environment variables joined with ``__`` (``SERVER__LOG__PATH``).
"""

import os
from functools import lru_cache
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import (
    BaseSettings,
    NoDecode,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

CONFIG_FILE_ENV = "TRACKER_CONFIG_FILE"
DEFAULT_CONFIG_FILE = "tracker.yaml"


class ServerLogSettings(BaseModel):
    """Process log output. An empty path keeps logs on stdout only."""

    path: str = ""
    rotation_min: int = Field(default=1440, ge=1, description="Rotation interval in minutes")
    max_backups: int = Field(default=0, ge=0, description="Rotated files to keep (0 keeps all)")


class ServerSettings(BaseModel):
    # YAML gives unquoted ports as ints
    model_config = ConfigDict(coerce_numbers_to_str=True)

    port: str = "8001"
    public_url: str = Field(
        default="",
        description="Public URL shown at startup; empty means taken from Host header",
    )
    auth: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        description="Authorized client tokens (list or comma-separated string)",
    )
    log: ServerLogSettings = Field(default_factory=ServerLogSettings)

    @field_validator("auth", mode="before")
    @classmethod
    def split_tokens(cls, v: Any) -> Any:
        """Accept ``"t1, t2"`` from env vars as well as real lists from YAML."""
        if v is None:
            return []
        if isinstance(v, str):
            return v.split(",")
        return v


class GeoSettings(BaseModel):
    maxmind_path: str = "/home/tracker/app/res/"


class EventLogSettings(BaseModel):
    """Per-token event log files."""

    path: str = "/home/tracker/logs/events"
    rotation_min: int = Field(default=5, ge=1, description="Rotation interval in minutes")


class Settings(BaseSettings):
    """
    Application settings.

    Priority: init kwargs, environment, .env file, YAML config file, defaults.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        coerce_numbers_to_str=True,
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Event Tracker"
    app_version: str = "1.0.0"

    # Explicit port override, wins over server.port
    port: str | None = None

    server: ServerSettings = Field(default_factory=ServerSettings)
    geo: GeoSettings = Field(default_factory=GeoSettings)
    log: EventLogSettings = Field(default_factory=EventLogSettings)

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    @field_validator("port", mode="before")
    @classmethod
    def empty_port_is_unset(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        yaml_file = os.environ.get(CONFIG_FILE_ENV, DEFAULT_CONFIG_FILE)
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=yaml_file),
            file_secret_settings,
        )

    def resolve_port(self) -> str:
        """Explicit ``port`` override first, configured ``server.port`` otherwise."""
        return self.port or self.server.port

    @property
    def authority(self) -> str:
        """Bind address; always all interfaces."""
        return f"0.0.0.0:{self.resolve_port()}"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
