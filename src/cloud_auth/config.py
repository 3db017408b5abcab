"""Configuration management using Pydantic Settings."""

import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

# Config file location
CONFIG_PATH = Path.home() / ".config" / "cloud-auth" / "config.yaml"


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Custom settings source that loads from YAML config file."""

    def get_field_value(
        self, field: Any, field_name: str
    ) -> tuple[Any, str, bool]:
        """Get field value from YAML config."""
        config = self._load_config()
        if field_name in config:
            return config[field_name], field_name, False
        return None, field_name, False

    def _load_config(self) -> dict:
        """Load config from YAML file."""
        if not CONFIG_PATH.exists():
            return {}
        try:
            with open(CONFIG_PATH) as f:
                return yaml.safe_load(f) or {}
        except yaml.YAMLError:
            return {}

    def __call__(self) -> dict[str, Any]:
        """Return all config values."""
        return self._load_config()


def validate_app_id(app_id: str | None) -> str:
    """Validate the app ID used in API payloads and storage labels.

    Args:
        app_id: App ID to validate

    Returns:
        The app ID, stripped of surrounding whitespace

    Raises:
        ValueError: If the app ID is missing or malformed
    """
    if not app_id or not app_id.strip():
        raise ValueError("App ID cannot be empty")

    app_id = app_id.strip()

    # Storage labels are built from the app ID, keep it to a safe charset
    if not re.match(r"^[a-zA-Z0-9_-]+$", app_id):
        raise ValueError(f"Invalid app ID format: {app_id}")

    if len(app_id) > 64:
        raise ValueError("App ID too long (max 64 characters)")

    return app_id


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CLOUD_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    app_id: str | None = Field(
        default=None,
        description="App ID registered with the cloud backend",
    )
    api_url: str = Field(
        default="https://api.ionic.io",
        description="Base URL of the cloud API",
    )
    web_url: str = Field(
        default="https://web.ionic.io",
        description="Base URL of the cloud web dashboard",
    )
    auth_host: str = Field(
        default="auth.ionic.io",
        description="Host the provider redirects to once a social login completes",
    )
    callback_url: str = Field(
        default="http://localhost/",
        description="Return location announced to the backend for redirect logins",
    )
    timeout: int = Field(default=30, ge=5, le=120, description="HTTP timeout in seconds")
    headless: bool = Field(default=False, description="Run the login browser in headless mode")
    cache_dir: Path = Field(
        default=Path.home() / ".config" / "cloud-auth",
        description="Directory for local app data and browser profiles",
    )

    @field_validator("cache_dir", mode="after")
    @classmethod
    def ensure_cache_dir_exists(cls, v: Path) -> Path:
        """Create cache directory if it doesn't exist."""
        v.mkdir(parents=True, exist_ok=True)
        return v

    @field_validator("api_url", "web_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs so paths can be appended."""
        return v.rstrip("/")

    @property
    def local_storage_file(self) -> Path:
        """Path to the JSON file backing local app storage."""
        return self.cache_dir / "local_storage.json"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources - priority: env > yaml > defaults."""
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
        )

    def require_app_id(self) -> str:
        """Return the validated app ID, raising if it is not configured."""
        return validate_app_id(self.app_id)


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (useful for testing)."""
    global _settings
    _settings = None


def load_config() -> dict[str, Any]:
    """Load config from YAML file.

    Returns:
        Dictionary of config values, empty dict if file doesn't exist or is invalid.
    """
    if not CONFIG_PATH.exists():
        return {}
    try:
        with open(CONFIG_PATH) as f:
            return yaml.safe_load(f) or {}
    except yaml.YAMLError:
        return {}


def save_config(config: dict[str, Any]) -> None:
    """Save config to YAML file.

    Args:
        config: Dictionary of config values to save.
    """
    CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
    with open(CONFIG_PATH, "w") as f:
        yaml.dump(config, f, default_flow_style=False, allow_unicode=True)
