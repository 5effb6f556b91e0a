"""Configuration management for Spyglass.

Settings come from a TOML file, with ``SPYGLASS_*`` environment variables
taking precedence over it. Validation is done by pydantic-settings.
"""

from __future__ import annotations

import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict


class _Section(BaseSettings):
    """A config file section. Environment variables beat file values."""

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return env_settings, init_settings, dotenv_settings, file_secret_settings


class GeneralSettings(_Section):
    """Logging settings."""

    model_config = SettingsConfigDict(env_prefix="SPYGLASS_")

    log_level: str = Field(default="WARNING", description="Log level")
    json_logs: bool = Field(default=False, description="Emit logs as JSON lines")


class ReportSettings(_Section):
    """Report generation settings."""

    model_config = SettingsConfigDict(env_prefix="SPYGLASS_REPORT_")

    root_type: str = Field(default="VipsOperation", description="Root operation type to walk")
    include_builtin: bool = Field(default=True, description="Load the builtin operation catalog")
    catalogs: list[str] = Field(default=[], description="Extra catalog files to load, in order")


class TracingSettings(_Section):
    """OpenTelemetry tracing settings."""

    model_config = SettingsConfigDict(env_prefix="SPYGLASS_TRACING_")

    enabled: bool = Field(default=False, description="Record spans")
    otlp_endpoint: str = Field(default="", description="OTLP endpoint; console export if empty")
    service_name: str = Field(default="spyglass", description="Service name")


class Settings(BaseSettings):
    """All Spyglass settings.

    Precedence, lowest first: field defaults, the config file, then
    environment variables (``SPYGLASS_``, ``SPYGLASS_REPORT_`` and
    ``SPYGLASS_TRACING_`` prefixes).
    """

    model_config = SettingsConfigDict(env_prefix="SPYGLASS_")

    general: GeneralSettings = Field(default_factory=GeneralSettings)
    report: ReportSettings = Field(default_factory=ReportSettings)
    tracing: TracingSettings = Field(default_factory=TracingSettings)

    @classmethod
    def from_toml(cls, path: Path | str) -> Settings:
        """Read settings from a TOML file.

        Relative catalog paths are resolved against the file's directory.

        Raises:
            FileNotFoundError: If the file doesn't exist.
        """
        path = Path(path)
        with path.open("rb") as f:
            data = tomllib.load(f)

        report = dict(data.get("report", {}))
        if "catalogs" in report:
            report["catalogs"] = [str(path.parent / c) for c in report["catalogs"]]
        data["report"] = report

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> Settings:
        return cls(
            general=GeneralSettings(**data.get("general", {})),
            report=ReportSettings(**data.get("report", {})),
            tracing=TracingSettings(**data.get("tracing", {})),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "general": self.general.model_dump(),
            "report": self.report.model_dump(),
            "tracing": self.tracing.model_dump(),
        }


CONFIG_SEARCH_PATHS = (
    Path("config.toml"),
    Path("spyglass.toml"),
    Path("~/.config/spyglass/config.toml"),
    Path("/etc/spyglass/config.toml"),
)


def _find_config_file() -> Path | None:
    """Return the first existing file of ``CONFIG_SEARCH_PATHS``."""
    for candidate in CONFIG_SEARCH_PATHS:
        path = candidate.expanduser()
        if path.exists():
            return path
    return None


@lru_cache
def get_settings(config_path: str | None = None) -> Settings:
    """Resolve settings once per config path.

    ``config_path`` wins over the search paths. With no file, defaults and
    environment variables apply.
    """
    path = Path(config_path) if config_path else _find_config_file()
    if path and path.exists():
        return Settings.from_toml(path)
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache. Useful for testing."""
    get_settings.cache_clear()
