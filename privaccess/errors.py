"""
Error Taxonomy
==============

Exceptions raised across the PrivAccess core.

Messages never carry private keys, nonces, or raw geohash fingerprints.

Version: 0.1.0
"""


class PrivAccessError(Exception):
    """Base class for all PrivAccess errors."""


class InvalidInputError(PrivAccessError, ValueError):
    """Malformed coordinates, fingerprints, or out-of-range group elements."""


class MalformedProofError(InvalidInputError):
    """A proof whose fields fall outside their required ranges."""


class EngineFailureError(PrivAccessError):
    """The external proving/verification engine errored or was unreachable."""


class InvalidProofError(PrivAccessError):
    """Proof verification failed. Fatal to the attempt; never retried."""


class LocationTimeoutError(PrivAccessError, TimeoutError):
    """Location acquisition exceeded its time bound."""


class LocationUnavailableError(PrivAccessError):
    """The geolocation source refused or failed to report a position."""
