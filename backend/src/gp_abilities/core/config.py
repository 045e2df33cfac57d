"""Configuration management for the GeneratePress abilities service.

Uses Pydantic Settings for type-safe, environment-based configuration.
"""

from pathlib import Path
from typing import Annotated

from dotenv import load_dotenv
from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

# .env values override the process environment
load_dotenv(override=True)

_CHOICES: dict[str, tuple[str, ...]] = {
    "log_level": ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"),
    "log_format": ("text", "json"),
    "environment": ("development", "staging", "production"),
    "store_backend": ("memory", "wp-cli"),
}


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # App configuration
    app_name: str = Field("GP Abilities", alias="GP_ABILITIES_APP_NAME")
    debug: bool = Field(False, alias="GP_ABILITIES_DEBUG")
    version: str = Field("1.0.0", alias="GP_ABILITIES_APP_VERSION")
    environment: str = Field("development", alias="GP_ABILITIES_ENVIRONMENT")

    # API configuration
    api_prefix: str = Field("/wp-json/wp-abilities/v1", alias="GP_ABILITIES_API_PREFIX")
    api_host: str = Field("127.0.0.1", alias="GP_ABILITIES_API_HOST")
    api_port: int = Field(8000, alias="GP_ABILITIES_API_PORT")
    # When set, every request must carry it in the X-API-Key header
    api_key: str | None = Field(None, alias="GP_ABILITIES_API_KEY")

    # Caller identity. The service sits behind the site's own auth, so the
    # capabilities granted to agents are configured rather than looked up.
    caller_user_id: str = Field("agent", alias="GP_ABILITIES_CALLER_USER_ID")
    caller_capabilities: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["edit_theme_options", "manage_options"],
        alias="GP_ABILITIES_CALLER_CAPABILITIES",
    )

    # Logging configuration
    log_level: str = Field("INFO", alias="GP_ABILITIES_LOG_LEVEL")
    log_format: str = Field("text", alias="GP_ABILITIES_LOG_FORMAT")
    # Console-only when unset
    log_dir: str | None = Field(None, alias="GP_ABILITIES_LOG_DIR")

    # Ability providers live in <plugins_root>/plugins/<provider>/manifest.py
    plugins_root: str = Field(".", alias="GP_ABILITIES_PLUGINS_ROOT")

    # Store configuration
    store_backend: str = Field("memory", alias="GP_ABILITIES_STORE_BACKEND")
    wp_path: str | None = Field(None, alias="GP_ABILITIES_WP_PATH")
    wp_cli_path: str = Field("wp", alias="GP_ABILITIES_WP_CLI_PATH")
    wp_cli_timeout: float = Field(60.0, alias="GP_ABILITIES_WP_CLI_TIMEOUT")
    wp_cli_user: str | None = Field(None, alias="GP_ABILITIES_WP_CLI_USER")
    # Uploads directory used by the in-memory store
    memory_uploads_dir: str | None = Field(None, alias="GP_ABILITIES_MEMORY_UPLOADS_DIR")

    @staticmethod
    def _repo_root_from_this_file() -> Path:
        here = Path(__file__).resolve()
        src_dir = here.parents[2]  # .../src
        candidate_parent = src_dir.parent  # repo or backend
        return candidate_parent.parent if candidate_parent.name == "backend" else candidate_parent

    @field_validator("plugins_root", mode="before")
    @classmethod
    def _resolve_plugins_root(cls, v: str) -> str:
        """Normalize plugins_root to the *parent* of the ``plugins/`` directory.

        A path ending in ``plugins`` is stripped to its parent. Relative paths
        are resolved against the repository root.
        """
        p = Path(v)
        if p.name == "plugins":
            p = p.parent
        if p.is_absolute():
            return str(p)
        return str((cls._repo_root_from_this_file() / p).resolve())

    @field_validator("caller_capabilities", mode="before")
    @classmethod
    def _split_capabilities(cls, v):
        # Accept a comma-separated string from the environment
        if isinstance(v, str):
            return [c.strip() for c in v.split(",") if c.strip()]
        return v

    @field_validator("log_level", "log_format", "environment", "store_backend")
    @classmethod
    def _one_of(cls, v: str, info: ValidationInfo) -> str:
        choices = _CHOICES[info.field_name]
        # Log levels are upper-case, everything else lower-case
        v = v.upper() if info.field_name == "log_level" else v.lower()
        if v not in choices:
            label = info.field_name.replace("_", " ").capitalize()
            raise ValueError(f"{label} must be one of: {list(choices)}")
        return v

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        populate_by_name=True,
    )


def get_settings() -> Settings:
    """Build a fresh settings instance."""
    return Settings()  # type: ignore[call-arg]


# Global settings instance - will be created when first accessed
settings = None


def get_settings_instance() -> Settings:
    """Get the global settings instance, creating it if necessary."""
    global settings  # noqa: PLW0603
    if settings is None:
        settings = get_settings()
    return settings


def reset_settings_instance() -> None:
    """Drop the cached settings so the next access re-reads the environment."""
    global settings  # noqa: PLW0603
    settings = None
