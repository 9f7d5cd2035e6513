"""
Geolocation
===========

Geohash fingerprints and device location acquisition.

Usage:
    from privaccess.geo import acquire_location, encode

    position = await acquire_location(source, timeout=5.0)
    fingerprint = encode(position.latitude, position.longitude, 7)
"""

from privaccess.geo.geohash import (
    BASE32,
    BoundingBox,
    char_codes,
    decode,
    decode_bbox,
    encode,
    is_valid,
)
from privaccess.geo.location import (
    Coordinates,
    LocationSource,
    StaticLocationSource,
    acquire_location,
)


__all__ = [
    # Geohash
    "BASE32",
    "BoundingBox",
    "encode",
    "decode",
    "decode_bbox",
    "is_valid",
    "char_codes",
    # Location
    "Coordinates",
    "LocationSource",
    "StaticLocationSource",
    "acquire_location",
]
