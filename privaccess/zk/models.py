"""
ZK Proof Data Models
====================

Pydantic models for Schnorr proofs, SNARK artifacts and the tagged
geofence proof variants.

Large integers travel as decimal strings on the wire.

Version: 0.1.0
"""

import json
from datetime import UTC, datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_serializer, field_validator


class ZKProof(BaseModel):
    """
    A SNARK proof artifact.

    Compatible with snarkjs Groth16 proof format. The core never inspects
    the points; it only passes them to the verification engine.
    """

    # Proof points (G1 and G2 elements)
    pi_a: list[str] = Field(..., description="Proof point A (G1)")
    pi_b: list[list[str]] = Field(..., description="Proof point B (G2)")
    pi_c: list[str] = Field(..., description="Proof point C (G1)")

    # Protocol info
    protocol: str = Field(default="groth16")
    curve: str = Field(default="bn128")

    def to_hex(self) -> str:
        """Convert to hex string for transport."""
        return json.dumps(self.model_dump()).encode().hex()

    @classmethod
    def from_hex(cls, hex_str: str) -> "ZKProof":
        """Create from hex string."""
        data = json.loads(bytes.fromhex(hex_str).decode())
        return cls(**data)


class PublicSignals(BaseModel):
    """Public outputs and inputs of a geofence proof, in snarkjs order."""

    signals: list[str] = Field(..., description="Public signals as decimal strings")

    @property
    def validity(self) -> str:
        """The circuit's output signal (first signal)."""
        return self.signals[0] if self.signals else "0"

    @property
    def public_inputs(self) -> list[str]:
        """Signals following the output: the authorized prefix codes."""
        return self.signals[1:]

    def to_int_list(self) -> list[int]:
        """Convert to list of integers."""
        return [int(s) for s in self.signals]


class SchnorrProof(BaseModel):
    """
    Non-interactive Schnorr proof of knowledge of a discrete log.

    Immutable once produced. ``context`` is bound into the challenge so the
    proof cannot be replayed against another resource.
    """

    model_config = ConfigDict(frozen=True)

    commitment: int = Field(..., description="R = G^r mod P")
    response: int = Field(..., description="s = (r + c*x) mod Q")
    public_key: int = Field(..., description="y = G^x mod P")
    context: bytes = Field(default=b"", description="Bound context C")

    @field_validator("commitment", "response", "public_key", mode="before")
    @classmethod
    def parse_decimal(cls, v: int | str) -> int:
        if isinstance(v, str):
            v = v.strip()
            if not v.isdigit():
                raise ValueError("expected a non-negative decimal integer")
            return int(v)
        return v

    @field_validator("context", mode="before")
    @classmethod
    def parse_context(cls, v: bytes | str, info: ValidationInfo) -> bytes:
        # Hex on the wire; a Python str is UTF-8 text
        if isinstance(v, str):
            return bytes.fromhex(v) if info.mode == "json" else v.encode("utf-8")
        return v

    @field_serializer("commitment", "response", "public_key", when_used="json")
    def serialize_decimal(self, v: int) -> str:
        return str(v)

    @field_serializer("context", when_used="json")
    def serialize_context(self, v: bytes) -> str:
        return v.hex()


class RealProof(BaseModel):
    """A geofence proof produced by the proving engine."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["snark"] = "snark"
    proof: ZKProof
    public_signals: PublicSignals
    circuit_name: str = "geohash_prefix"
    proving_time_ms: int = Field(default=0, ge=0)


class DemonstrationProof(BaseModel):
    """
    Non-cryptographic stand-in used when the proving engine is unavailable.

    It reveals the fingerprint to the verifier and proves nothing. Verifiers
    configured for production reject it outright.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["demonstration"] = "demonstration"
    cryptographic: Literal[False] = False
    user_hash: str = Field(..., repr=False)
    allowed_prefix: str
    reason: str | None = None


GeofenceProof = Annotated[Union[RealProof, DemonstrationProof], Field(discriminator="kind")]


class VerificationResult(BaseModel):
    """Result of proof verification."""

    valid: bool
    verified_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    verification_time_ms: int = Field(default=0, ge=0)

    # Error info
    error: str | None = None
