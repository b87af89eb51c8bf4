"""
Configuration module.

Exports:
    settings: Application settings instance
    get_settings: Function to get settings (for dependency injection)
    get_content_store: Shared GitHub content store client
    check_store: Health check function
"""

from config.settings import settings, get_settings, Settings
from config.store import (
    get_content_store,
    check_store,
    close_content_store,
    reset_content_store,
)

__all__ = [
    # Settings
    "settings",
    "get_settings",
    "Settings",

    # Content store
    "get_content_store",
    "check_store",
    "close_content_store",
    "reset_content_store",
]
