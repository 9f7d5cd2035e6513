"""
Configuration Module
====================

Centralized configuration management using Pydantic Settings.
Loads from environment variables with type validation and defaults.

Usage:
    from privaccess.config import settings

    print(settings.environment)
    print(settings.geofence.precision)
"""

from privaccess.config.settings import (
    AccessSettings,
    EngineSettings,
    Environment,
    GeofenceSettings,
    GroupSettings,
    LocationSettings,
    LogLevel,
    Settings,
    get_settings,
)


# Global settings instance (singleton)
settings = get_settings()

__all__ = [
    "Settings",
    "get_settings",
    "settings",
    "Environment",
    "LogLevel",
    "GroupSettings",
    "GeofenceSettings",
    "EngineSettings",
    "LocationSettings",
    "AccessSettings",
]
