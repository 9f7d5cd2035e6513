"""
Geofence Constraint Circuit
===========================

Arithmetic circuit proving that the first n characters of a private geohash
fingerprint F match a public authorized prefix A.

Signals (over the BN254 scalar field):
    diff[i]    = F[i] - A[i]
    matched[i] = 1 - diff[i]^2
    product[i] = product[i-1] * matched[i]      (product[0] = matched[0])
    valid      = IsEqual(product[n-1], 1)

Public input: A. Private input: F. Public output: valid, checked against 1
by the verifier. The Python evaluation mirrors the Circom source produced by
``render_circom`` and is used to pre-check witnesses before they reach the
external proving engine.

Version: 0.1.0
"""

from dataclasses import dataclass, field
from string import Template
from typing import Any

from privaccess.config import get_settings
from privaccess.crypto.arithmetic import mod_inverse
from privaccess.errors import InvalidInputError
from privaccess.geo import geohash
from privaccess.zk.models import PublicSignals


# BN254 scalar field order
BN254_SCALAR_FIELD = 21888242871839275222246405745257275088548364400416034343698204186575808495617

KNOWN_LIMITATION = (
    "The equality gadget matched[i] = 1 - (F[i] - A[i])^2 is exact only while "
    "F[i] - A[i] lies in {-1, 0, 1}. Private inputs are not range-constrained, "
    "so a prover may pick field elements whose per-position terms multiply to 1 "
    "and obtain valid = 1 without matching the prefix. Honest geohash inputs "
    "never trigger this; the gadget is kept as-is pending a decision on input "
    "range constraints."
)

CIRCOM_TEMPLATE = Template(
    """pragma circom 2.0.0;

include "circomlib/circuits/comparators.circom";

// $limitation
template GeohashPrefix(n) {
    signal input userHash[n];
    signal input allowedPrefix[n];
    signal output valid;

    signal diff[n];
    signal matched[n];
    signal product[n];

    for (var i = 0; i < n; i++) {
        diff[i] <== userHash[i] - allowedPrefix[i];
        matched[i] <== 1 - diff[i] * diff[i];
    }

    product[0] <== matched[0];
    for (var i = 1; i < n; i++) {
        product[i] <== product[i - 1] * matched[i];
    }

    component isOne = IsEqual();
    isOne.in[0] <== product[n - 1];
    isOne.in[1] <== 1;
    valid <== isOne.out;
}

component main {public [allowedPrefix]} = GeohashPrefix($n);
"""
)


@dataclass(frozen=True)
class GeofenceWitness:
    """Full assignment of every circuit signal."""

    user_hash: tuple[int, ...] = field(repr=False)
    allowed_prefix: tuple[int, ...]
    diff: tuple[int, ...] = field(repr=False)
    matched: tuple[int, ...] = field(repr=False)
    product: tuple[int, ...] = field(repr=False)
    # IsZero helper: inverse of (product[n-1] - 1), or 0
    inv: int = field(repr=False)
    valid: int

    @property
    def is_valid(self) -> bool:
        return self.valid == 1


class GeofenceCircuit:
    """
    Geohash-prefix circuit description and reference evaluator.

    Usage:
        circuit = GeofenceCircuit(prefix_length=6)
        inputs = circuit.build_inputs("t1q7hkf", "t1q7hk")
        witness = circuit.compute_witness(inputs)
        assert circuit.is_satisfied(witness) and witness.is_valid
    """

    KNOWN_LIMITATION = KNOWN_LIMITATION

    def __init__(
        self,
        prefix_length: int | None = None,
        field_modulus: int = BN254_SCALAR_FIELD,
        name: str = "geohash_prefix",
    ) -> None:
        if prefix_length is None:
            prefix_length = get_settings().geofence.prefix_length
        if prefix_length < 1:
            raise InvalidInputError("Prefix length must be positive")
        self.prefix_length = prefix_length
        self.field_modulus = field_modulus
        self.name = name

    def check_prefix(self, allowed_prefix: str) -> None:
        """
        Reject an authorized prefix the circuit cannot bind in full.

        Raises:
            InvalidInputError: If the prefix length differs from ``prefix_length``
        """
        n = self.prefix_length
        if len(allowed_prefix) != n:
            raise InvalidInputError(f"Authorized prefix must be exactly {n} characters, got {len(allowed_prefix)}")

    def build_inputs(self, fingerprint: str, allowed_prefix: str) -> dict[str, list[int]]:
        """
        Encode a fingerprint and an authorized prefix as circuit inputs.

        The fingerprint may be longer than ``prefix_length``; only its leading
        characters are compared. The prefix must have exactly that length.

        Raises:
            InvalidInputError: If the prefix length is wrong, the fingerprint is
                too short, or either string is not a geohash
        """
        n = self.prefix_length
        self.check_prefix(allowed_prefix)
        if len(fingerprint) < n:
            raise InvalidInputError(f"Fingerprint needs at least {n} characters")
        if not geohash.is_valid(fingerprint) or not geohash.is_valid(allowed_prefix):
            raise InvalidInputError("Fingerprint and prefix must be geohash strings")

        return {
            "userHash": geohash.char_codes(fingerprint[:n]),
            "allowedPrefix": geohash.char_codes(allowed_prefix),
        }

    def compute_witness(self, inputs: dict[str, Any]) -> GeofenceWitness:
        """
        Assign every signal from the input signals.

        Inputs are arbitrary field elements; they are reduced modulo the
        field order exactly as the proving engine would.
        """
        n = self.prefix_length
        fr = self.field_modulus
        try:
            user_hash = tuple(int(v) % fr for v in inputs["userHash"])
            allowed = tuple(int(v) % fr for v in inputs["allowedPrefix"])
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidInputError("Inputs require integer userHash and allowedPrefix arrays") from e
        if len(user_hash) != n or len(allowed) != n:
            raise InvalidInputError(f"Circuit expects exactly {n} signals per input")

        diff = tuple((f - a) % fr for f, a in zip(user_hash, allowed))
        matched = tuple((1 - d * d) % fr for d in diff)

        product: list[int] = [matched[0]]
        for m in matched[1:]:
            product.append((product[-1] * m) % fr)

        delta = (product[-1] - 1) % fr
        inv = mod_inverse(delta, fr) if delta else 0
        valid = (1 - delta * inv) % fr

        return GeofenceWitness(
            user_hash=user_hash,
            allowed_prefix=allowed,
            diff=diff,
            matched=matched,
            product=tuple(product),
            inv=inv,
            valid=valid,
        )

    def constraints(self, witness: GeofenceWitness) -> list[tuple[str, int, int]]:
        """Every constraint as (label, lhs, rhs), reduced modulo the field."""
        fr = self.field_modulus
        w = witness
        result: list[tuple[str, int, int]] = []

        for i in range(self.prefix_length):
            result.append((f"diff[{i}]", w.diff[i], (w.user_hash[i] - w.allowed_prefix[i]) % fr))
            result.append((f"matched[{i}]", w.matched[i], (1 - w.diff[i] * w.diff[i]) % fr))
            expected = w.matched[0] if i == 0 else (w.product[i - 1] * w.matched[i]) % fr
            result.append((f"product[{i}]", w.product[i], expected))

        delta = (w.product[-1] - 1) % fr
        result.append(("valid", w.valid, (1 - delta * w.inv) % fr))
        result.append(("valid_is_zero", (delta * w.valid) % fr, 0))
        return result

    def is_satisfied(self, witness: GeofenceWitness) -> bool:
        """True if the witness satisfies every constraint exactly."""
        return all(lhs == rhs for _, lhs, rhs in self.constraints(witness))

    def public_signals(self, witness: GeofenceWitness) -> PublicSignals:
        """Public signals in snarkjs order: output first, then public inputs."""
        return PublicSignals(signals=[str(witness.valid), *(str(a) for a in witness.allowed_prefix)])

    def expected_public_inputs(self, allowed_prefix: str) -> list[str]:
        """Decimal public inputs a proof for ``allowed_prefix`` must carry."""
        self.check_prefix(allowed_prefix)
        return [str(c) for c in geohash.char_codes(allowed_prefix)]

    def evaluate(self, fingerprint: str, allowed_prefix: str) -> bool:
        """Evaluate the circuit on a fingerprint and prefix."""
        return self.compute_witness(self.build_inputs(fingerprint, allowed_prefix)).is_valid

    def render_circom(self) -> str:
        """Circom source for the external compile and trusted-setup step."""
        return CIRCOM_TEMPLATE.substitute(n=self.prefix_length, limitation=KNOWN_LIMITATION)
