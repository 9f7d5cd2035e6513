"""
Test Configuration
==================

Pytest fixtures for PrivAccess tests.
"""

import asyncio
import json
import os

import pytest

# Set test environment
os.environ["ENVIRONMENT"] = "testing"

from privaccess.access import AccessController, RoleRegistry  # noqa: E402
from privaccess.crypto import GroupParameters, default_group_parameters  # noqa: E402
from privaccess.errors import EngineFailureError  # noqa: E402
from privaccess.geo import Coordinates, StaticLocationSource, geohash  # noqa: E402
from privaccess.zk import GeofenceCircuit, ProvingEngine, PublicSignals, ZKProof  # noqa: E402


DOOR_PREFIX = "t1q7hk"
INSIDE_FINGERPRINT = "t1q7hkf"
OUTSIDE_FINGERPRINT = "t1q7hmf"


class FakeEngine(ProvingEngine):
    """In-process engine that evaluates the circuit instead of running snarkjs."""

    def __init__(self, circuit: GeofenceCircuit | None = None) -> None:
        self.circuit = circuit or GeofenceCircuit(prefix_length=6)
        self.issued: list[tuple[ZKProof, PublicSignals]] = []
        self.verify_calls = 0

    async def compute_witness(self, inputs: dict[str, list[int]]) -> bytes:
        witness = self.circuit.compute_witness(inputs)
        return json.dumps(self.circuit.public_signals(witness).signals).encode()

    async def prove(self, witness: bytes) -> tuple[ZKProof, PublicSignals]:
        signals = PublicSignals(signals=json.loads(witness))
        proof = ZKProof(
            pi_a=[str(len(self.issued) + 1), "2", "1"],
            pi_b=[["3", "4"], ["5", "6"], ["1", "0"]],
            pi_c=["7", "8", "1"],
        )
        self.issued.append((proof, signals))
        return proof, signals

    async def verify(self, proof: ZKProof, public_signals: PublicSignals) -> bool:
        self.verify_calls += 1
        return (proof, public_signals) in self.issued


class FailingEngine(ProvingEngine):
    """Engine whose every call fails, as when snarkjs is not installed."""

    async def compute_witness(self, inputs: dict[str, list[int]]) -> bytes:
        raise EngineFailureError("snarkjs could not be started")

    async def prove(self, witness: bytes) -> tuple[ZKProof, PublicSignals]:
        raise EngineFailureError("snarkjs could not be started")

    async def verify(self, proof: ZKProof, public_signals: PublicSignals) -> bool:
        raise EngineFailureError("snarkjs could not be started")


class SlowLocationSource:
    """Location source that never answers in time."""

    async def current_position(self) -> Coordinates:
        await asyncio.sleep(10)
        return Coordinates(latitude=0.0, longitude=0.0)


class FailingLocationSource:
    """Location source that raises the given exception."""

    def __init__(self, error: Exception) -> None:
        self.error = error

    async def current_position(self) -> Coordinates:
        raise self.error


@pytest.fixture
def small_group() -> GroupParameters:
    """P = 23, Q = 11, G = 2 (2 generates the order-11 subgroup)."""
    return GroupParameters.from_safe_prime(23, 2)


@pytest.fixture
def soundness_group() -> GroupParameters:
    """P = 2039, Q = 1019, G = 4; small enough to sample forgeries."""
    return GroupParameters.from_safe_prime(2039, 4)


@pytest.fixture
def group() -> GroupParameters:
    """RFC 3526 2048-bit group from settings."""
    return default_group_parameters()


@pytest.fixture
def circuit() -> GeofenceCircuit:
    return GeofenceCircuit(prefix_length=6)


@pytest.fixture
def fake_engine(circuit: GeofenceCircuit) -> FakeEngine:
    return FakeEngine(circuit)


@pytest.fixture
def failing_engine() -> FailingEngine:
    return FailingEngine()


@pytest.fixture
def inside_source() -> StaticLocationSource:
    """Positioned at the center of the t1q7hkf cell, inside door 101."""
    lat, lon = geohash.decode(INSIDE_FINGERPRINT)
    return StaticLocationSource(lat, lon, accuracy_m=5.0)


@pytest.fixture
def outside_source() -> StaticLocationSource:
    """Positioned in a neighbouring cell outside door 101."""
    lat, lon = geohash.decode(OUTSIDE_FINGERPRINT)
    return StaticLocationSource(lat, lon, accuracy_m=5.0)


@pytest.fixture
def roles(group: GroupParameters) -> RoleRegistry:
    return RoleRegistry(group)


@pytest.fixture
def controller(group: GroupParameters, roles: RoleRegistry, fake_engine: FakeEngine, circuit: GeofenceCircuit) -> AccessController:
    return AccessController(group, roles, engine=fake_engine, circuit=circuit, allow_demo_proofs=True)


@pytest.fixture
def slow_source() -> SlowLocationSource:
    return SlowLocationSource()


@pytest.fixture
def failing_source_factory():
    """Build a location source that raises ``error``."""
    return FailingLocationSource
