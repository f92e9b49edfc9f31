"""Configuration module using Pydantic Settings.

Usage:
    from multistore.config import StoreSettings

    settings = StoreSettings(singleton_timeout_ms=500)
"""

from multistore.config.settings import StoreSettings

__all__ = [
    "StoreSettings",
]
