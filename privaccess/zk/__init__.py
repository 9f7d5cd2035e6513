"""
Zero-Knowledge Protocols
========================

Schnorr proofs of knowledge, the geofence constraint circuit, and the
adapter to the external SNARK engine.

Usage:
    from privaccess.zk import KeyPair, SchnorrProver, SchnorrVerifier

    key_pair = KeyPair.generate(params)
    proof = SchnorrProver(params, key_pair).prove(context=b"t1q7hk")
    result = SchnorrVerifier(params).verify(proof, expected_context=b"t1q7hk")

Version: 0.1.0
"""

from privaccess.zk.circuit import (
    BN254_SCALAR_FIELD,
    KNOWN_LIMITATION,
    GeofenceCircuit,
    GeofenceWitness,
)
from privaccess.zk.engine import ProvingEngine, SnarkjsEngine
from privaccess.zk.models import (
    DemonstrationProof,
    GeofenceProof,
    PublicSignals,
    RealProof,
    SchnorrProof,
    VerificationResult,
    ZKProof,
)
from privaccess.zk.schnorr import (
    CHALLENGE_DOMAIN,
    KeyPair,
    SchnorrProver,
    SchnorrVerifier,
    challenge_input,
    create_schnorr_proof,
    derive_challenge,
    generate_key_pair,
    verify_schnorr_proof,
)


__all__ = [
    # Schnorr
    "KeyPair",
    "SchnorrProver",
    "SchnorrVerifier",
    "generate_key_pair",
    "create_schnorr_proof",
    "verify_schnorr_proof",
    "challenge_input",
    "derive_challenge",
    "CHALLENGE_DOMAIN",
    # Circuit
    "GeofenceCircuit",
    "GeofenceWitness",
    "BN254_SCALAR_FIELD",
    "KNOWN_LIMITATION",
    # Engine
    "ProvingEngine",
    "SnarkjsEngine",
    # Models
    "ZKProof",
    "PublicSignals",
    "SchnorrProof",
    "RealProof",
    "DemonstrationProof",
    "GeofenceProof",
    "VerificationResult",
]
