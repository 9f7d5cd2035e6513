"""
Unit Tests for ZK Data Models
=============================

Tests for proof artifacts and their wire format.
"""

import json

import pytest
from pydantic import TypeAdapter, ValidationError

from privaccess.access import AccessRequest
from privaccess.zk import (
    DemonstrationProof,
    GeofenceProof,
    KeyPair,
    PublicSignals,
    RealProof,
    SchnorrProof,
    VerificationResult,
    ZKProof,
    create_schnorr_proof,
    verify_schnorr_proof,
)


def _zkproof() -> ZKProof:
    return ZKProof(
        pi_a=["123", "456", "1"],
        pi_b=[["789", "101"], ["112", "131"], ["1", "0"]],
        pi_c=["415", "161", "1"],
    )


class TestZKProof:
    """Tests for SNARK proof artifacts."""

    def test_defaults(self):
        proof = _zkproof()
        assert proof.protocol == "groth16"
        assert proof.curve == "bn128"

    def test_hex_transport(self):
        original = _zkproof()
        restored = ZKProof.from_hex(original.to_hex())
        assert restored == original


class TestPublicSignals:
    """Tests for public signal accessors."""

    def test_accessors(self):
        signals = PublicSignals(signals=["1", "116", "49"])

        assert signals.validity == "1"
        assert signals.public_inputs == ["116", "49"]
        assert signals.to_int_list() == [1, 116, 49]

    def test_empty(self):
        signals = PublicSignals(signals=[])
        assert signals.validity == "0"
        assert signals.public_inputs == []


class TestSchnorrProofModel:
    """Tests for the Schnorr proof wire format."""

    def test_parses_decimal_strings(self):
        proof = SchnorrProof(commitment="8", response=" 5 ", public_key="18", context="t1q7hk")

        assert proof.commitment == 8
        assert proof.response == 5
        assert proof.public_key == 18
        assert proof.context == b"t1q7hk"

    def test_hex_looking_context_is_text(self, small_group):
        """A prefix of hex digits means the same bytes the prover hashed."""
        issued = create_schnorr_proof(small_group, KeyPair.from_private_key(small_group, 6), "9b0d")
        rebuilt = SchnorrProof(
            commitment=issued.commitment,
            response=issued.response,
            public_key=issued.public_key,
            context="9b0d",
        )

        assert rebuilt.context == b"9b0d"
        assert rebuilt == issued
        assert verify_schnorr_proof(small_group, rebuilt, expected_context="9b0d")

    def test_json_context_is_hex(self):
        payload = '{"commitment": "8", "response": "3", "public_key": "18", "context": "39623064"}'
        assert SchnorrProof.model_validate_json(payload).context == b"9b0d"

    def test_json_context_rejects_non_hex(self):
        payload = '{"commitment": "8", "response": "3", "public_key": "18", "context": "t1q7hk"}'
        with pytest.raises(ValidationError):
            SchnorrProof.model_validate_json(payload)

    @pytest.mark.parametrize("value", ["-5", "0x10", "1e3", "", "abc"])
    def test_rejects_non_decimal(self, value):
        with pytest.raises(ValidationError):
            SchnorrProof(commitment=value, response=1, public_key=18)

    def test_json_uses_decimal_strings(self):
        big = 2**2047 + 12345
        proof = SchnorrProof(commitment=big, response=3, public_key=18, context=b"t1q7hk")
        data = json.loads(proof.model_dump_json())

        assert data == {
            "commitment": str(big),
            "response": "3",
            "public_key": "18",
            "context": b"t1q7hk".hex(),
        }
        assert SchnorrProof.model_validate_json(proof.model_dump_json()) == proof

    def test_immutable(self):
        proof = SchnorrProof(commitment=8, response=3, public_key=18)
        with pytest.raises(ValidationError):
            proof.response = 4


class TestGeofenceProofVariants:
    """Tests for the tagged real/demonstration union."""

    def test_real_proof_discriminated(self):
        adapter = TypeAdapter(GeofenceProof)
        real = RealProof(proof=_zkproof(), public_signals=PublicSignals(signals=["1"]))

        parsed = adapter.validate_python(json.loads(real.model_dump_json()))

        assert isinstance(parsed, RealProof)
        assert parsed.kind == "snark"

    def test_demonstration_discriminated(self):
        request = AccessRequest.model_validate(
            {
                "door_id": "101",
                "geofence_proof": {
                    "kind": "demonstration",
                    "user_hash": "t1q7hkf",
                    "allowed_prefix": "t1q7hk",
                },
            }
        )
        assert isinstance(request.geofence_proof, DemonstrationProof)
        assert request.geofence_proof.cryptographic is False

    def test_demonstration_cannot_claim_cryptographic(self):
        with pytest.raises(ValidationError):
            DemonstrationProof(user_hash="t1q7hkf", allowed_prefix="t1q7hk", cryptographic=True)

    def test_demonstration_not_shape_compatible_with_real(self):
        adapter = TypeAdapter(GeofenceProof)
        with pytest.raises(ValidationError):
            adapter.validate_python({"kind": "snark", "user_hash": "t1q7hkf", "allowed_prefix": "t1q7hk"})

    def test_demonstration_repr_hides_fingerprint(self):
        proof = DemonstrationProof(user_hash="t1q7hkf", allowed_prefix="t1q7hk")
        assert "t1q7hkf" not in repr(proof)


class TestVerificationResult:
    """Tests for VerificationResult model."""

    def test_valid(self):
        result = VerificationResult(valid=True, verification_time_ms=50)

        assert result.valid is True
        assert result.error is None
        assert result.verified_at.tzinfo is not None

    def test_invalid(self):
        result = VerificationResult(valid=False, error="Proof verification failed")

        assert result.valid is False
        assert result.error == "Proof verification failed"
