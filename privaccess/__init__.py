"""
PrivAccess
==========

Privacy-preserving physical access control: a user proves they stand
inside a door's geofence and hold a role credential without revealing
their location or their secret key.

Modules:
    - config: Configuration management with Pydantic Settings
    - logging: Structured logging with structlog
    - crypto: Modular arithmetic and the safe-prime Schnorr group
    - geo: Geohash fingerprints and location acquisition
    - zk: Schnorr proofs, the geofence circuit and the SNARK engine adapter
    - access: Role registry and access decisions
    - orchestrator: One authentication attempt end to end

Version: 0.1.0
"""

__version__ = "0.1.0"
__author__ = "PrivAccess Team"

from privaccess.access import AccessController, RoleRegistry
from privaccess.config import settings
from privaccess.crypto import GroupParameters, default_group_parameters
from privaccess.logging import get_logger, setup_logging
from privaccess.orchestrator import ProofOrchestrator
from privaccess.zk import KeyPair, SchnorrProver, SchnorrVerifier, SnarkjsEngine

__all__ = [
    "settings",
    "get_logger",
    "setup_logging",
    "GroupParameters",
    "default_group_parameters",
    "KeyPair",
    "SchnorrProver",
    "SchnorrVerifier",
    "SnarkjsEngine",
    "AccessController",
    "RoleRegistry",
    "ProofOrchestrator",
    "__version__",
]
