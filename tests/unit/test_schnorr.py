"""
Unit Tests for Schnorr Proofs
=============================

Tests for key generation, proving, verification and the challenge
transcript.
"""

import pytest

from privaccess.crypto.arithmetic import mod_inverse
from privaccess.errors import InvalidInputError, InvalidProofError, MalformedProofError
from privaccess.zk import (
    CHALLENGE_DOMAIN,
    KeyPair,
    SchnorrProof,
    SchnorrProver,
    SchnorrVerifier,
    challenge_input,
    create_schnorr_proof,
    derive_challenge,
    generate_key_pair,
    verify_schnorr_proof,
)


DOOR_PREFIX = "t1q7hk"


class TestKeyPair:
    """Tests for key pair derivation."""

    def test_from_private_key(self, small_group):
        key_pair = KeyPair.from_private_key(small_group, 6)
        assert key_pair.public_key == 18

    @pytest.mark.parametrize("x", [0, 11, -1, 12])
    def test_private_key_out_of_range(self, small_group, x):
        with pytest.raises(InvalidInputError, match="Private key"):
            KeyPair.from_private_key(small_group, x)

    def test_generate(self, group):
        key_pair = generate_key_pair(group)
        assert 1 <= key_pair.private_key <= group.order - 1
        assert key_pair.public_key == group.exp(key_pair.private_key)

    def test_private_key_not_in_repr(self, small_group):
        key_pair = KeyPair.from_private_key(small_group, 6)
        assert "private_key" not in repr(key_pair)


class TestSmallGroupScenario:
    """P = 23, Q = 11, G = 2, x = 6, fixed nonce r = 3."""

    @pytest.fixture
    def proof(self, small_group):
        prover = SchnorrProver(small_group, KeyPair.from_private_key(small_group, 6))
        return prover.prove(DOOR_PREFIX, nonce=3)

    def test_commitment_and_response(self, small_group, proof):
        c = derive_challenge(small_group, 8, 18, DOOR_PREFIX)

        assert proof.commitment == 8
        assert proof.public_key == 18
        assert proof.response == (3 + c * 6) % 11
        assert proof.context == b"t1q7hk"

    def test_accepted(self, small_group, proof):
        assert verify_schnorr_proof(small_group, proof)
        assert verify_schnorr_proof(small_group, proof, expected_context=DOOR_PREFIX)

    def test_modified_response_rejected(self, small_group, proof):
        tampered = proof.model_copy(update={"response": (proof.response + 1) % 11})

        assert not verify_schnorr_proof(small_group, tampered)
        with pytest.raises(InvalidProofError, match="equation"):
            SchnorrVerifier(small_group).require_valid(tampered)

    def test_challenge_input_bytes(self, small_group):
        """One-byte elements with 4-byte length prefixes."""
        expected = (
            CHALLENGE_DOMAIN
            + b"\x00\x00\x00\x01\x08"
            + b"\x00\x00\x00\x01\x12"
            + b"\x00\x00\x00\x06t1q7hk"
        )
        assert challenge_input(small_group, 8, 18, DOOR_PREFIX) == expected
        assert challenge_input(small_group, 8, 18, b"t1q7hk") == expected

    def test_challenge_in_range(self, small_group):
        for context in ["", "a", "t1q7hk", "101"]:
            assert 0 <= derive_challenge(small_group, 8, 18, context) < 11


class TestProver:
    """Tests for SchnorrProver."""

    def test_nonce_out_of_range(self, small_group):
        prover = SchnorrProver(small_group, KeyPair.from_private_key(small_group, 6))
        for nonce in (0, 11):
            with pytest.raises(InvalidInputError, match="Nonce"):
                prover.prove(DOOR_PREFIX, nonce=nonce)

    def test_public_key_outside_subgroup(self, small_group):
        with pytest.raises(InvalidInputError, match="subgroup"):
            SchnorrProver(small_group, KeyPair(private_key=1, public_key=5))

    def test_nonces_never_repeat(self, group):
        key_pair = generate_key_pair(group)
        prover = SchnorrProver(group, key_pair)
        commitments = {prover.prove(DOOR_PREFIX).commitment for _ in range(64)}
        assert len(commitments) == 64

    def test_nonce_reuse_reveals_private_key(self, group):
        """Two proofs sharing a nonce leak x = (s1 - s2) / (c1 - c2)."""
        key_pair = generate_key_pair(group)
        prover = SchnorrProver(group, key_pair)
        nonce = group.random_exponent()
        p1 = prover.prove("t1q7hk", nonce=nonce)
        p2 = prover.prove("9q8yyk", nonce=nonce)

        q = group.order
        c1 = derive_challenge(group, p1.commitment, p1.public_key, p1.context)
        c2 = derive_challenge(group, p2.commitment, p2.public_key, p2.context)
        recovered = ((p1.response - p2.response) * mod_inverse(c1 - c2, q)) % q

        assert recovered == key_pair.private_key


class TestVerifier:
    """Tests for SchnorrVerifier."""

    def test_completeness(self, group):
        for _ in range(10):
            key_pair = generate_key_pair(group)
            proof = create_schnorr_proof(group, key_pair, DOOR_PREFIX)
            assert verify_schnorr_proof(group, proof, expected_context=DOOR_PREFIX)

    def test_verify_result(self, group):
        proof = create_schnorr_proof(group, generate_key_pair(group), DOOR_PREFIX)
        result = SchnorrVerifier(group).verify(proof)

        assert result.valid is True
        assert result.error is None

    def test_context_mismatch(self, group):
        proof = create_schnorr_proof(group, generate_key_pair(group), DOOR_PREFIX)
        verifier = SchnorrVerifier(group)

        with pytest.raises(InvalidProofError, match="different context"):
            verifier.require_valid(proof, expected_context="t1q7hm")
        assert not verifier.verify(proof, expected_context="t1q7hm").valid

    def test_rebound_context_rejected(self, group):
        """Swapping the context without re-proving changes the challenge."""
        proof = create_schnorr_proof(group, generate_key_pair(group), DOOR_PREFIX)
        rebound = proof.model_copy(update={"context": b"t1q7hm"})
        assert not verify_schnorr_proof(group, rebound, expected_context="t1q7hm")

    def test_substituted_public_key_rejected(self, group):
        proof = create_schnorr_proof(group, generate_key_pair(group), DOOR_PREFIX)
        other = generate_key_pair(group)
        forged = proof.model_copy(update={"public_key": other.public_key})
        assert not verify_schnorr_proof(group, forged)

    @pytest.mark.parametrize(
        "fields,message",
        [
            ({"commitment": 0}, "Commitment"),
            ({"commitment": 23}, "Commitment"),
            ({"public_key": 0}, "Public key"),
            ({"public_key": 23}, "Public key"),
            ({"response": 11}, "Response"),
            ({"public_key": 5}, "subgroup"),
        ],
    )
    def test_range_checks(self, small_group, fields, message):
        values = {"commitment": 8, "response": 1, "public_key": 18, "context": b"t1q7hk"}
        values.update(fields)
        proof = SchnorrProof(**values)
        verifier = SchnorrVerifier(small_group)

        with pytest.raises(MalformedProofError, match=message):
            verifier.require_valid(proof)

        result = verifier.verify(proof)
        assert result.valid is False
        assert message in result.error

    def test_soundness_without_private_key(self, soundness_group):
        """Random (R, s) pairs for a fixed key are accepted about 1/Q of the time."""
        params = soundness_group
        key_pair = generate_key_pair(params)
        trials = 2000
        accepted = 0
        for _ in range(trials):
            proof = SchnorrProof(
                commitment=params.exp(params.random_exponent()),
                response=params.random_exponent(),
                public_key=key_pair.public_key,
                context=b"t1q7hk",
            )
            if verify_schnorr_proof(params, proof):
                accepted += 1

        # Expected about trials / Q = 2; P(more than 8) is below 1e-3
        assert accepted <= 8

    def test_soundness_with_wrong_private_key(self, soundness_group):
        """Honestly formed proofs under a wrong x are accepted only when c = 0 mod Q."""
        params = soundness_group
        registered = generate_key_pair(params)
        trials = 2000
        accepted = 0
        for _ in range(trials):
            wrong_x = params.random_exponent()
            while wrong_x == registered.private_key:
                wrong_x = params.random_exponent()
            impostor = KeyPair(private_key=wrong_x, public_key=registered.public_key)
            proof = SchnorrProver(params, impostor).prove(DOOR_PREFIX)
            if verify_schnorr_proof(params, proof):
                accepted += 1

        assert accepted <= 8

    def test_soundness_of_context_binding(self, soundness_group):
        """A proof moved to another context survives only on a challenge collision mod Q."""
        params = soundness_group
        key_pair = generate_key_pair(params)
        prover = SchnorrProver(params, key_pair)
        trials = 2000
        accepted = 0
        for i in range(trials):
            proof = prover.prove(f"door-{i}")
            target = f"door-{i}-other"
            rebound = proof.model_copy(update={"context": target.encode()})
            if verify_schnorr_proof(params, rebound, expected_context=target):
                accepted += 1
            assert not verify_schnorr_proof(params, proof, expected_context=target)

        assert accepted <= 8
