"""
Access Models
=============

Doors, access requests and access decisions.

Version: 0.1.0
"""

from datetime import UTC, datetime

from pydantic import BaseModel, Field, field_validator

from privaccess.geo import geohash
from privaccess.zk.models import GeofenceProof, SchnorrProof


class Door(BaseModel):
    """A protected resource anchored to a geofence."""

    model_config = {"frozen": True}

    door_id: str
    name: str
    geohash_prefix: str = Field(..., min_length=1, description="Authorized geofence prefix")

    @field_validator("geohash_prefix")
    @classmethod
    def prefix_must_be_geohash(cls, v: str) -> str:
        if not geohash.is_valid(v):
            raise ValueError("geohash_prefix must use the geohash alphabet")
        return v


class AccessRequest(BaseModel):
    """Proof bundle submitted for an access decision."""

    door_id: str
    schnorr_proof: SchnorrProof | None = None
    geofence_proof: GeofenceProof | None = None


class AccessDecision(BaseModel):
    """Outcome of an access request."""

    access_granted: bool
    role: str | None = None
    message: str
    door_id: str | None = None


class AccessLogEntry(BaseModel):
    """Access log entry."""

    id: str
    door_id: str
    role: str | None
    granted: bool
    message: str
    demonstration: bool = False
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


DEFAULT_DOORS: dict[str, Door] = {
    "101": Door(door_id="101", name="Computer Lab A", geohash_prefix="t1q7hk"),
}
