"""
Access Controller
=================

Access-decision collaborator: combines the geofence proof, the Schnorr
identity proof and the role registry into one grant/deny decision.

Decision pipeline:
1. Door lookup
2. Geofence proof (real SNARK, or demonstration payload when enabled)
3. Schnorr proof bound to the door's geofence prefix
4. Role lookup by public key

Every failure yields a denial; nothing is retried.

Version: 0.1.0
"""

from collections.abc import Mapping
from typing import Protocol
from uuid import uuid4

from privaccess.access.models import (
    DEFAULT_DOORS,
    AccessDecision,
    AccessLogEntry,
    AccessRequest,
    Door,
)
from privaccess.access.roles import RoleRegistry
from privaccess.config import get_settings
from privaccess.crypto.group import GroupParameters
from privaccess.errors import EngineFailureError, InvalidInputError
from privaccess.logging import get_logger
from privaccess.zk.circuit import GeofenceCircuit
from privaccess.zk.engine import ProvingEngine
from privaccess.zk.models import DemonstrationProof, GeofenceProof, RealProof
from privaccess.zk.schnorr import SchnorrVerifier


logger = get_logger(__name__)


class AccessDecider(Protocol):
    """Anything that turns an access request into a decision."""

    async def decide(self, request: AccessRequest) -> AccessDecision: ...


class AccessController:
    """
    Verifies proof bundles for doors and records each decision.

    Usage:
        controller = AccessController(params, roles, engine=SnarkjsEngine())
        decision = await controller.decide(request)
    """

    def __init__(
        self,
        params: GroupParameters,
        roles: RoleRegistry,
        doors: Mapping[str, Door] | None = None,
        engine: ProvingEngine | None = None,
        circuit: GeofenceCircuit | None = None,
        allow_demo_proofs: bool | None = None,
    ) -> None:
        settings = get_settings()
        self.params = params
        self.roles = roles
        self.doors = dict(doors if doors is not None else DEFAULT_DOORS)
        self.engine = engine
        self.circuit = circuit or GeofenceCircuit()
        for door in self.doors.values():
            if len(door.geohash_prefix) != self.circuit.prefix_length:
                raise InvalidInputError(
                    f"Door {door.door_id} prefix must be exactly {self.circuit.prefix_length} characters"
                )
        if allow_demo_proofs is None:
            allow_demo_proofs = settings.demo_proofs_enabled
        # Production never honours demonstration payloads, whatever the caller asks
        self.allow_demo_proofs = allow_demo_proofs and not settings.is_production
        self.verifier = SchnorrVerifier(params)
        self._access_log: list[AccessLogEntry] = []

    @property
    def access_log(self) -> list[AccessLogEntry]:
        return self._access_log.copy()

    def _record(
        self,
        door_id: str,
        granted: bool,
        message: str,
        role: str | None = None,
        demonstration: bool = False,
    ) -> AccessDecision:
        self._access_log.append(
            AccessLogEntry(
                id=f"LOG-{uuid4().hex[:8].upper()}",
                door_id=door_id,
                role=role,
                granted=granted,
                message=message,
                demonstration=demonstration,
            )
        )
        log = logger.info if granted else logger.warning
        log("access_decision", door_id=door_id, granted=granted, role=role, reason=message)
        return AccessDecision(access_granted=granted, role=role, message=message, door_id=door_id)

    async def _check_geofence(self, door: Door, proof: GeofenceProof | None) -> str | None:
        """Return a denial message, or None if the geofence proof holds."""
        if proof is None:
            return "Access Denied: Missing geofence proof"

        # Doors added after construction bypass the check in __init__
        if len(door.geohash_prefix) != self.circuit.prefix_length:
            logger.error("door_prefix_length_mismatch", door_id=door.door_id)
            return "Access Denied: Geofence verification unavailable"

        if isinstance(proof, DemonstrationProof):
            if not self.allow_demo_proofs:
                return "Access Denied: Demonstration proofs are not accepted"
            if proof.allowed_prefix != door.geohash_prefix:
                return "Access Denied: Geohash tampering detected"
            if proof.user_hash.startswith(door.geohash_prefix):
                return None
            return "Access Denied: User is outside the door proximity"

        if not isinstance(proof, RealProof):
            return "Access Denied: Unrecognized geofence proof"

        signals = proof.public_signals
        if signals.validity != "1":
            return "Access Denied: User is outside the door proximity"
        if signals.public_inputs != self.circuit.expected_public_inputs(door.geohash_prefix):
            return "Access Denied: Geohash tampering detected"

        if self.engine is None:
            logger.error("geofence_verification_engine_missing", door_id=door.door_id)
            return "Access Denied: Geofence verification unavailable"
        try:
            verified = await self.engine.verify(proof.proof, signals)
        except EngineFailureError as e:
            logger.error("geofence_verification_failed", door_id=door.door_id, error=str(e))
            return "Access Denied: Geofence verification unavailable"

        return None if verified else "Access Denied: Invalid Proof or Location"

    async def decide(self, request: AccessRequest) -> AccessDecision:
        """
        Decide an access request.

        Args:
            request: Door id plus the geofence and Schnorr proofs

        Returns:
            AccessDecision with the granted role on success
        """
        door_id = request.door_id.strip()
        door = self.doors.get(door_id)
        if door is None:
            return self._record(door_id, False, "Access Denied: Door Not Found")

        demonstration = isinstance(request.geofence_proof, DemonstrationProof)

        denial = await self._check_geofence(door, request.geofence_proof)
        if denial is not None:
            return self._record(door_id, False, denial, demonstration=demonstration)

        if request.schnorr_proof is None:
            return self._record(door_id, False, "Access Denied: Missing identity proof", demonstration=demonstration)

        result = self.verifier.verify(request.schnorr_proof, expected_context=door.geohash_prefix)
        if not result.valid:
            return self._record(
                door_id, False, "Access Denied: Invalid Zero-Knowledge Proof", demonstration=demonstration
            )

        role = self.roles.role_for(request.schnorr_proof.public_key)
        if role is None:
            return self._record(door_id, False, "Access Denied: Unauthorized Identity", demonstration=demonstration)

        message = f"Access Granted to {role}"
        if demonstration:
            message += " (Demo Mode)"
        return self._record(door_id, True, message, role=role, demonstration=demonstration)
