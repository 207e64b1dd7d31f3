"""Configuration settings using Pydantic Settings.

Provides typed configuration with environment variable support for the store
and its middleware.

Usage:
    from storelite.config import DevtoolsSettings, PersistSettings, StoreSettings

    # Load from environment variables (STORELITE_*, STORELITE_PERSIST_*, ...)
    devtools_settings = DevtoolsSettings()

    # Or override with explicit values
    persist_settings = PersistSettings(storage_dir=".state")
"""

from __future__ import annotations

try:
    from pydantic_settings import BaseSettings, SettingsConfigDict
except ImportError as e:
    raise ImportError(
        "pydantic-settings is required for config module. "
        "Install with: pip install storelite"
    ) from e


class StoreSettings(BaseSettings):  # type: ignore[misc]
    """Configuration for the store core.

    Attributes:
        raise_listener_errors: Re-raise listener failures to the caller of
            `set_state` once the notification pass has finished, instead of
            logging them.

    Environment Variables:
        STORELITE_RAISE_LISTENER_ERRORS
    """

    model_config = SettingsConfigDict(
        env_prefix="STORELITE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    raise_listener_errors: bool = False


class PersistSettings(BaseSettings):  # type: ignore[misc]
    """Configuration for the persist middleware.

    Attributes:
        storage_dir: Directory for the default file-backed storage. None keeps
            records in a process-wide in-memory backend.
        default_version: Record version used when a store does not set one.

    Environment Variables:
        STORELITE_PERSIST_STORAGE_DIR
        STORELITE_PERSIST_DEFAULT_VERSION
    """

    model_config = SettingsConfigDict(
        env_prefix="STORELITE_PERSIST_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    storage_dir: str | None = None
    default_version: int = 0


class DevtoolsSettings(BaseSettings):  # type: ignore[misc]
    """Configuration for the devtools middleware.

    Attributes:
        environment: Deployment environment name; "production" disables devtools.
        enabled: Explicit switch that overrides the environment check.

    Environment Variables:
        STORELITE_DEVTOOLS_ENVIRONMENT
        STORELITE_DEVTOOLS_ENABLED
    """

    model_config = SettingsConfigDict(
        env_prefix="STORELITE_DEVTOOLS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: str = "development"
    enabled: bool | None = None

    @property
    def is_enabled(self) -> bool:
        if self.enabled is not None:
            return self.enabled
        return self.environment.strip().lower() != "production"
