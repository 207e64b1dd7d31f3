"""Configuration module using Pydantic Settings.

Provides typed configuration for the store and middleware with environment
variable support.

Usage:
    from storelite.config import DevtoolsSettings, PersistSettings, StoreSettings

    settings = StoreSettings(raise_listener_errors=True)
    devtools = DevtoolsSettings(environment="production")
"""

from storelite.config.settings import DevtoolsSettings, PersistSettings, StoreSettings

__all__ = [
    "StoreSettings",
    "PersistSettings",
    "DevtoolsSettings",
]
