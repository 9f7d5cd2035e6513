"""
Geohash Encoding
================

Converts latitude/longitude into a base-32 spatial fingerprint by
iterative binary subdivision, longitude bit first.

Every added character subdivides the previous cell, so
``encode(lat, lon, k) == encode(lat, lon, n)[:k]`` for any k <= n. That
prefix stability is what makes prefix matching usable as a geofence test.

Version: 0.1.0
"""

import math
from dataclasses import dataclass

from privaccess.errors import InvalidInputError


BASE32 = "0123456789bcdefghjkmnpqrstuvwxyz"
_DECODE_MAP = {ch: i for i, ch in enumerate(BASE32)}

BITS_PER_CHAR = 5


@dataclass(frozen=True)
class BoundingBox:
    """Cell covered by a geohash."""

    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    @property
    def center(self) -> tuple[float, float]:
        return (
            (self.min_lat + self.max_lat) / 2,
            (self.min_lon + self.max_lon) / 2,
        )

    def contains(self, lat: float, lon: float) -> bool:
        return self.min_lat <= lat <= self.max_lat and self.min_lon <= lon <= self.max_lon


def _validate_coordinates(lat: float, lon: float) -> None:
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise InvalidInputError("Coordinates must be finite numbers")
    if not -90.0 <= lat <= 90.0:
        raise InvalidInputError("Latitude must be within [-90, 90]")
    if not -180.0 <= lon <= 180.0:
        raise InvalidInputError("Longitude must be within [-180, 180]")


def encode(lat: float, lon: float, precision: int = 7) -> str:
    """
    Encode a coordinate as a geohash.

    Args:
        lat: Latitude in [-90, 90]
        lon: Longitude in [-180, 180]
        precision: Number of output characters (positive)

    Returns:
        Geohash string of length ``precision``

    Raises:
        InvalidInputError: If coordinates or precision are out of range
    """
    if isinstance(precision, bool) or not isinstance(precision, int) or precision < 1:
        raise InvalidInputError("Precision must be a positive integer")
    _validate_coordinates(lat, lon)

    lat_lo, lat_hi = -90.0, 90.0
    lon_lo, lon_hi = -180.0, 180.0
    chars: list[str] = []
    bit = 0
    ch = 0
    even = True

    while len(chars) < precision:
        if even:
            mid = (lon_lo + lon_hi) / 2
            if lon >= mid:
                ch |= 1 << (4 - bit)
                lon_lo = mid
            else:
                lon_hi = mid
        else:
            mid = (lat_lo + lat_hi) / 2
            if lat >= mid:
                ch |= 1 << (4 - bit)
                lat_lo = mid
            else:
                lat_hi = mid
        even = not even

        if bit < BITS_PER_CHAR - 1:
            bit += 1
        else:
            chars.append(BASE32[ch])
            bit = 0
            ch = 0

    return "".join(chars)


def decode_bbox(fingerprint: str) -> BoundingBox:
    """
    Return the cell covered by a geohash.

    Raises:
        InvalidInputError: If the fingerprint is empty or contains
            characters outside the geohash alphabet
    """
    if not fingerprint:
        raise InvalidInputError("Geohash must not be empty")

    lat_lo, lat_hi = -90.0, 90.0
    lon_lo, lon_hi = -180.0, 180.0
    even = True

    for char in fingerprint.lower():
        try:
            value = _DECODE_MAP[char]
        except KeyError:
            raise InvalidInputError("Geohash contains an invalid character") from None
        for shift in range(BITS_PER_CHAR - 1, -1, -1):
            bit_set = (value >> shift) & 1
            if even:
                mid = (lon_lo + lon_hi) / 2
                if bit_set:
                    lon_lo = mid
                else:
                    lon_hi = mid
            else:
                mid = (lat_lo + lat_hi) / 2
                if bit_set:
                    lat_lo = mid
                else:
                    lat_hi = mid
            even = not even

    return BoundingBox(min_lat=lat_lo, max_lat=lat_hi, min_lon=lon_lo, max_lon=lon_hi)


def decode(fingerprint: str) -> tuple[float, float]:
    """Center (lat, lon) of the geohash cell."""
    return decode_bbox(fingerprint).center


def is_valid(fingerprint: str) -> bool:
    """True if every character belongs to the geohash alphabet."""
    return bool(fingerprint) and all(c in _DECODE_MAP for c in fingerprint)


def char_codes(fingerprint: str) -> list[int]:
    """Numeric (ASCII) encoding of each character, as fed to the circuit."""
    return [ord(c) for c in fingerprint]
