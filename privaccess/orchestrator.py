"""
Proof Orchestrator
==================

Runs one authentication attempt end to end:

1. acquire coordinates (bounded wait)
2. geohash fingerprint at the configured precision
3. geofence proof from the proving engine, or a demonstration proof when
   the engine fails and fallback is allowed
4. Schnorr proof bound to the door's geofence prefix
5. hand the bundle to the access-decision collaborator

Attempts share only the immutable group parameters; nothing from a failed
or cancelled attempt is kept.

Version: 0.1.0
"""

from uuid import uuid4

from privaccess.access.controller import AccessDecider
from privaccess.access.models import AccessDecision, AccessRequest
from privaccess.config import get_settings
from privaccess.crypto.group import GroupParameters
from privaccess.errors import EngineFailureError, InvalidInputError
from privaccess.geo import geohash
from privaccess.geo.location import LocationSource, acquire_location
from privaccess.logging import get_logger, log_context
from privaccess.zk.circuit import GeofenceCircuit
from privaccess.zk.engine import ProvingEngine
from privaccess.zk.models import DemonstrationProof, GeofenceProof, SchnorrProof
from privaccess.zk.schnorr import KeyPair, SchnorrProver


logger = get_logger(__name__)


class ProofOrchestrator:
    """
    Client side of an access attempt.

    Usage:
        orchestrator = ProofOrchestrator(params, key_pair, source, controller, engine=SnarkjsEngine())
        decision = await orchestrator.authenticate("101", "t1q7hk")
    """

    def __init__(
        self,
        params: GroupParameters,
        key_pair: KeyPair,
        location_source: LocationSource,
        decider: AccessDecider,
        engine: ProvingEngine | None = None,
        circuit: GeofenceCircuit | None = None,
        precision: int | None = None,
        location_timeout: float | None = None,
        allow_demo_fallback: bool | None = None,
    ) -> None:
        settings = get_settings()
        self.params = params
        self.prover = SchnorrProver(params, key_pair)
        self.location_source = location_source
        self.decider = decider
        self.engine = engine
        self.circuit = circuit or GeofenceCircuit()
        if precision is None:
            precision = settings.geofence.precision
        if location_timeout is None:
            location_timeout = settings.location.timeout_seconds
        if precision < 1:
            raise InvalidInputError("Precision must be a positive integer")
        if precision < self.circuit.prefix_length:
            raise InvalidInputError(
                f"Precision {precision} is shorter than the circuit prefix length {self.circuit.prefix_length}"
            )
        if location_timeout <= 0:
            raise InvalidInputError("Location timeout must be positive")
        self.precision = precision
        self.location_timeout = location_timeout
        if allow_demo_fallback is None:
            allow_demo_fallback = settings.demo_proofs_enabled
        self.allow_demo_fallback = allow_demo_fallback

    async def build_geofence_proof(self, fingerprint: str, allowed_prefix: str) -> GeofenceProof:
        """
        Prove that ``fingerprint`` starts with ``allowed_prefix``.

        Raises:
            InvalidInputError: If the prefix length is wrong or either string is not a usable geohash
            EngineFailureError: If the engine fails and fallback is disabled
        """
        inputs = self.circuit.build_inputs(fingerprint, allowed_prefix)
        if not self.circuit.compute_witness(inputs).is_valid:
            # The engine still proves it; the verifier sees valid = 0 and denies
            logger.warning("geofence_precheck_failed", circuit=self.circuit.name)

        try:
            if self.engine is None:
                raise EngineFailureError("No proving engine configured")
            return await self.engine.full_prove(inputs)
        except EngineFailureError as e:
            if not self.allow_demo_fallback:
                raise
            logger.warning("geofence_demo_fallback", reason=str(e))
            return DemonstrationProof(
                user_hash=fingerprint,
                allowed_prefix=allowed_prefix,
                reason=str(e),
            )

    def prove_identity(self, context: bytes | str) -> SchnorrProof:
        """Schnorr proof of the role credential, bound to ``context``."""
        return self.prover.prove(context)

    async def prepare(self, door_id: str, allowed_prefix: str) -> AccessRequest:
        """
        Gather location and build both proofs for ``door_id``.

        Raises:
            LocationTimeoutError: If no position arrives in time
            LocationUnavailableError: If the location source refuses
            EngineFailureError: If proving fails without fallback
        """
        position = await acquire_location(self.location_source, timeout=self.location_timeout)
        fingerprint = geohash.encode(position.latitude, position.longitude, self.precision)

        geofence_proof = await self.build_geofence_proof(fingerprint, allowed_prefix)
        schnorr_proof = self.prove_identity(allowed_prefix)

        return AccessRequest(
            door_id=door_id,
            schnorr_proof=schnorr_proof,
            geofence_proof=geofence_proof,
        )

    async def authenticate(self, door_id: str, allowed_prefix: str) -> AccessDecision:
        """Run a full attempt and return the collaborator's decision."""
        with log_context(attempt_id=uuid4().hex, door_id=door_id):
            logger.info("access_attempt_started")
            request = await self.prepare(door_id, allowed_prefix)
            decision = await self.decider.decide(request)
            logger.info("access_attempt_finished", granted=decision.access_granted)
            return decision
