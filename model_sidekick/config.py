from __future__ import annotations

from typing import Any

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()

# Default location written by `model-sidekick publish-config`; read back on load.
PUBLISHED_CONFIG_PATH = "config/sidekick.env"


class Settings(BaseSettings):
    # Attribute names used for timestamps when a model does not declare
    # __created_at__ / __updated_at__ itself.
    CREATED_AT_COLUMN: str = "created_at"
    UPDATED_AT_COLUMN: str = "updated_at"
    # What a SensitiveValue renders as in str()/repr()/JSON.
    REDACTION_MASK: str = "********"
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True
    model_config = SettingsConfigDict(
        env_prefix="SIDEKICK_",
        env_file=(".env", PUBLISHED_CONFIG_PATH),
        extra="ignore",
    )


settings = Settings()


def get_settings() -> Settings:
    return settings


def configure(**overrides: Any) -> Settings:
    """Replace the active settings, layering ``overrides`` over the current values."""
    global settings
    merged = {**settings.model_dump(), **overrides}
    settings = Settings(**merged)
    return settings


def reload_settings() -> Settings:
    """Re-read settings from the environment (used by tests after monkeypatching env)."""
    global settings
    settings = Settings()
    return settings


def render_env_file(current: Settings | None = None) -> str:
    prefix = Settings.model_config.get("env_prefix", "")
    values = (current or Settings.model_construct()).model_dump()
    lines = ["# model-sidekick settings"]
    for name in Settings.model_fields:
        value = values[name]
        if isinstance(value, bool):
            value = "true" if value else "false"
        lines.append(f"{prefix}{name}={value}")
    return "\n".join(lines) + "\n"
