"""
Core module initialization.
Exports configuration and logging utilities.
"""

from qrmenu.core.config import (
    ConfigurationError,
    EnvironmentMode,
    Settings,
    get_settings,
    setup_logging,
)

__all__ = [
    "get_settings",
    "setup_logging",
    "Settings",
    "EnvironmentMode",
    "ConfigurationError",
]
