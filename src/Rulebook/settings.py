# === NAVMAP v1 ===
# {
#   "module": "Rulebook.settings",
#   "purpose": "Environment-driven settings for rulebook rendering",
#   "sections": [
#     {"id": "enums", "name": "Validated Choices", "anchor": "ENM", "kind": "api"},
#     {"id": "settings", "name": "RulebookSettings", "anchor": "class-rulebooksettings", "kind": "class"},
#     {"id": "get-settings", "name": "get_settings", "anchor": "function-get-settings", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Environment-driven settings for rulebook rendering.

Values come from ``RULEBOOK_*`` environment variables and may be overridden
by explicit keyword arguments (the CLI passes its options this way).
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigError

__all__ = ["LogFormat", "LogLevel", "OutputFormat", "RulebookSettings", "get_settings"]


# ============================================================================
# Validated choices
# ============================================================================


class OutputFormat(str, Enum):
    """Presentation policies of the HTML generator."""

    CARD = "card"
    PROSE = "prose"
    APP = "app"


class LogLevel(str, Enum):
    """Supported logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class LogFormat(str, Enum):
    """Supported log output formats."""

    CONSOLE = "console"
    JSON = "json"


# ============================================================================
# Settings
# ============================================================================


class RulebookSettings(BaseSettings):
    """Settings shared by the loader, generator, and CLI."""

    model_config = SettingsConfigDict(
        env_prefix="RULEBOOK_",
        case_sensitive=False,
        extra="ignore",
    )

    format: OutputFormat = Field(OutputFormat.CARD, description="Output format of the generator")
    indent: int = Field(4, ge=0, le=16, description="Spaces per nesting level of body markup")
    base_level: int = Field(2, ge=0, le=32, description="Nesting depth of the body inside the template")
    index_name: str = Field("INDEX.yaml", description="File name of the index document")
    aspect_glob: str = Field("*.yaml", description="Glob selecting aspect documents")
    log_level: LogLevel = Field(LogLevel.WARNING, description="Root logging level")
    log_format: LogFormat = Field(LogFormat.CONSOLE, description="Pretty console or structured JSON")
    color: bool = Field(True, description="Colourise diagnostics when writing to a terminal")

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.upper()
        return value

    @field_validator("index_name")
    @classmethod
    def _plain_name(cls, value: str) -> str:
        if not value or "/" in value or "\\" in value:
            raise ValueError("index_name must be a plain file name")
        return value


def get_settings(**overrides: Any) -> RulebookSettings:
    """Build validated settings; ``None`` overrides fall back to the environment.

    Raises:
        ConfigError: If a value fails validation.
    """

    values = {key: value for key, value in overrides.items() if value is not None}
    try:
        return RulebookSettings(**values)
    except ValidationError as exc:
        raise ConfigError(f"invalid rulebook settings: {exc}") from exc
