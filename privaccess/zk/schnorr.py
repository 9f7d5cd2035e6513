"""
Schnorr Proof of Knowledge
==========================

Non-interactive Schnorr identification over the order-Q subgroup of
Z*_P, made non-interactive with the Fiat-Shamir transform.

Prover (one pass per attempt):
    1. sample nonce r uniformly from [1, Q - 1]
    2. commit       R = G^r mod P
    3. challenge    c = H(R || y || C) mod Q
    4. respond      s = (r + c * x) mod Q
    -> SchnorrProof{R, s, y, C}

Verifier (pure):
    recompute c from the proof's own R, y, C and accept iff
    G^s == R * y^c (mod P)

Both roles derive the challenge through ``challenge_input``:

    DOMAIN || len32(R) || R || len32(y) || y || len32(C) || C

with integers big-endian and padded to the byte length of P, and len32 a
4-byte big-endian length prefix.

Version: 0.1.0
"""

import hashlib
import time
from dataclasses import dataclass, field

from privaccess.crypto.arithmetic import int_to_bytes, power_mod
from privaccess.crypto.group import GroupParameters
from privaccess.errors import InvalidInputError, InvalidProofError, MalformedProofError
from privaccess.logging import get_logger
from privaccess.zk.models import SchnorrProof, VerificationResult


logger = get_logger(__name__)

CHALLENGE_DOMAIN = b"privaccess/schnorr/v1"


def _as_context(context: bytes | str) -> bytes:
    if isinstance(context, str):
        return context.encode("utf-8")
    return bytes(context)


def _length_prefixed(data: bytes) -> bytes:
    return len(data).to_bytes(4, "big") + data


def challenge_input(
    params: GroupParameters,
    commitment: int,
    public_key: int,
    context: bytes | str,
) -> bytes:
    """Canonical transcript bytes hashed into the Fiat-Shamir challenge."""
    size = params.element_size
    return b"".join(
        [
            CHALLENGE_DOMAIN,
            _length_prefixed(int_to_bytes(commitment, size)),
            _length_prefixed(int_to_bytes(public_key, size)),
            _length_prefixed(_as_context(context)),
        ]
    )


def derive_challenge(
    params: GroupParameters,
    commitment: int,
    public_key: int,
    context: bytes | str,
) -> int:
    """c = SHA-256(transcript) mod Q."""
    digest = hashlib.sha256(challenge_input(params, commitment, public_key, context)).digest()
    return int.from_bytes(digest, "big") % params.order


@dataclass(frozen=True)
class KeyPair:
    """
    Schnorr credential: private exponent x and public key y = G^x mod P.

    The private key is excluded from repr and never serialized.
    """

    private_key: int = field(repr=False)
    public_key: int

    @classmethod
    def from_private_key(cls, params: GroupParameters, private_key: int) -> "KeyPair":
        """
        Derive the public key for an existing private key.

        Raises:
            InvalidInputError: If the private key is outside [1, Q - 1]
        """
        if not 1 <= private_key <= params.order - 1:
            raise InvalidInputError("Private key must lie in [1, Q - 1]")
        return cls(private_key=private_key, public_key=params.exp(private_key))

    @classmethod
    def generate(cls, params: GroupParameters) -> "KeyPair":
        """Fresh key pair with x drawn from the OS CSPRNG."""
        return cls.from_private_key(params, params.random_exponent())


def generate_key_pair(params: GroupParameters) -> KeyPair:
    """Generate a new Schnorr key pair."""
    return KeyPair.generate(params)


class SchnorrProver:
    """
    Produces Schnorr proofs for one key pair.

    The prover holds no per-proof state, so a single instance may serve
    concurrent attempts.

    Usage:
        prover = SchnorrProver(params, key_pair)
        proof = prover.prove(context=b"t1q7hk")
    """

    def __init__(self, params: GroupParameters, key_pair: KeyPair) -> None:
        if not params.is_subgroup_element(key_pair.public_key):
            raise InvalidInputError("Public key is not an element of the order-Q subgroup")
        self.params = params
        self.key_pair = key_pair

    @property
    def public_key(self) -> int:
        return self.key_pair.public_key

    def prove(self, context: bytes | str, *, nonce: int | None = None) -> SchnorrProof:
        """
        Generate a proof of knowledge bound to ``context``.

        Args:
            context: Bytes bound into the challenge (e.g. the geofence prefix)
            nonce: Fixed nonce for reproducible test vectors only. Reusing a
                nonce with the same key reveals the private key.

        Returns:
            SchnorrProof carrying R, s, y and the context
        """
        params = self.params
        bound_context = _as_context(context)

        if nonce is None:
            r = params.random_exponent()
        elif 1 <= nonce <= params.order - 1:
            r = nonce
        else:
            raise InvalidInputError("Nonce must lie in [1, Q - 1]")

        commitment = power_mod(params.generator, r, params.modulus)
        challenge = derive_challenge(params, commitment, self.public_key, bound_context)
        response = (r + challenge * self.key_pair.private_key) % params.order

        logger.debug("schnorr_proof_generated", group_bits=params.bits)

        return SchnorrProof(
            commitment=commitment,
            response=response,
            public_key=self.public_key,
            context=bound_context,
        )


class SchnorrVerifier:
    """
    Stateless Schnorr proof verifier.

    ``require_valid`` raises on rejection; ``verify`` reports the outcome
    as a VerificationResult.
    """

    def __init__(self, params: GroupParameters) -> None:
        self.params = params

    def _check_ranges(self, proof: SchnorrProof) -> None:
        params = self.params
        if not params.is_element(proof.commitment):
            raise MalformedProofError("Commitment outside [1, P - 1]")
        if not params.is_element(proof.public_key):
            raise MalformedProofError("Public key outside [1, P - 1]")
        if not params.is_exponent(proof.response):
            raise MalformedProofError("Response outside [0, Q - 1]")
        if not params.is_subgroup_element(proof.public_key):
            raise MalformedProofError("Public key is not an element of the order-Q subgroup")

    def require_valid(
        self,
        proof: SchnorrProof,
        expected_context: bytes | str | None = None,
    ) -> None:
        """
        Verify a proof, raising on rejection.

        Args:
            proof: Proof to verify
            expected_context: Context the proof must be bound to; when
                omitted, the proof's own context is used

        Raises:
            MalformedProofError: If R, s or y are out of range
            InvalidProofError: If the context differs or the equation fails
        """
        self._check_ranges(proof)

        if expected_context is not None and _as_context(expected_context) != proof.context:
            raise InvalidProofError("Proof is bound to a different context")

        params = self.params
        challenge = derive_challenge(params, proof.commitment, proof.public_key, proof.context)

        lhs = power_mod(params.generator, proof.response, params.modulus)
        rhs = (proof.commitment * power_mod(proof.public_key, challenge, params.modulus)) % params.modulus

        if lhs != rhs:
            raise InvalidProofError("Schnorr verification equation does not hold")

    def verify(
        self,
        proof: SchnorrProof,
        expected_context: bytes | str | None = None,
    ) -> VerificationResult:
        """Verify a proof and report the outcome without raising."""
        start_time = time.time()
        error: str | None = None
        try:
            self.require_valid(proof, expected_context)
        except (MalformedProofError, InvalidProofError) as e:
            error = str(e)

        verification_time_ms = int((time.time() - start_time) * 1000)
        logger.info(
            "schnorr_proof_verified",
            valid=error is None,
            verification_time_ms=verification_time_ms,
        )
        return VerificationResult(
            valid=error is None,
            verification_time_ms=verification_time_ms,
            error=error,
        )


# Convenience functions

def create_schnorr_proof(
    params: GroupParameters,
    key_pair: KeyPair,
    context: bytes | str,
) -> SchnorrProof:
    """Generate a Schnorr proof bound to ``context``."""
    return SchnorrProver(params, key_pair).prove(context)


def verify_schnorr_proof(
    params: GroupParameters,
    proof: SchnorrProof,
    expected_context: bytes | str | None = None,
) -> bool:
    """Return True if the proof verifies (against ``expected_context`` when given)."""
    return SchnorrVerifier(params).verify(proof, expected_context).valid
