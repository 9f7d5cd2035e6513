"""
Geolocation Source
==================

Device location acquisition with a bounded wait.

A timeout or a refusal from the source ends the attempt; the caller decides
whether to start a new one.

Version: 0.1.0
"""

import asyncio
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, Field

from privaccess.errors import LocationTimeoutError, LocationUnavailableError
from privaccess.logging import get_logger


logger = get_logger(__name__)


class Coordinates(BaseModel):
    """A position fix reported by a geolocation source."""

    model_config = {"frozen": True}

    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)
    accuracy_m: float | None = Field(default=None, ge=0.0, description="Accuracy radius in metres")


@runtime_checkable
class LocationSource(Protocol):
    """Anything that can report the device position."""

    async def current_position(self) -> Coordinates: ...


class StaticLocationSource:
    """Location source pinned to a fixed position (kiosks, tests)."""

    def __init__(self, latitude: float, longitude: float, accuracy_m: float | None = None) -> None:
        self._position = Coordinates(latitude=latitude, longitude=longitude, accuracy_m=accuracy_m)

    async def current_position(self) -> Coordinates:
        return self._position


async def acquire_location(source: LocationSource, timeout: float = 5.0) -> Coordinates:
    """
    Read the current position, waiting at most ``timeout`` seconds.

    Args:
        source: Geolocation source to query
        timeout: Upper bound on the wait in seconds

    Returns:
        Coordinates reported by the source

    Raises:
        LocationTimeoutError: If the source did not answer in time
        LocationUnavailableError: If the source refused or failed
    """
    try:
        position = await asyncio.wait_for(source.current_position(), timeout=timeout)
    except asyncio.TimeoutError as e:
        logger.warning("location_timeout", timeout_seconds=timeout)
        raise LocationTimeoutError(f"Location not acquired within {timeout}s") from e
    except PermissionError as e:
        logger.warning("location_permission_denied")
        raise LocationUnavailableError("Location permission denied") from e
    except OSError as e:
        logger.warning("location_source_failed", error_type=type(e).__name__)
        raise LocationUnavailableError("Location source failed") from e

    logger.debug("location_acquired", accuracy_m=position.accuracy_m)
    return position
