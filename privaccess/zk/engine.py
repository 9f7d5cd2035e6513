"""
Proving Engine Adapter
======================

Black-box contract for the external SNARK proving/verification engine and
its snarkjs implementation.

snarkjs runs as a subprocess off the event loop. Every call works in its
own temporary directory, so concurrent attempts never share files.

Version: 0.1.0
"""

import asyncio
import json
import subprocess
import tempfile
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from privaccess.config import get_settings
from privaccess.errors import EngineFailureError
from privaccess.logging import get_logger
from privaccess.zk.models import PublicSignals, RealProof, ZKProof


logger = get_logger(__name__)


class ProvingEngine(ABC):
    """
    Abstract base class for proving engines.

    The core hands over circuit inputs and treats every result as opaque.
    """

    circuit_name: str = "geohash_prefix"

    @abstractmethod
    async def compute_witness(self, inputs: dict[str, list[int]]) -> bytes:
        """
        Compute the circuit witness for the given inputs.

        Raises:
            EngineFailureError: If the inputs do not satisfy the circuit or
                the engine is unavailable
        """
        ...

    @abstractmethod
    async def prove(self, witness: bytes) -> tuple[ZKProof, PublicSignals]:
        """
        Produce a proof and its public signals from a witness.

        Raises:
            EngineFailureError: If proving fails
        """
        ...

    @abstractmethod
    async def verify(self, proof: ZKProof, public_signals: PublicSignals) -> bool:
        """
        Check a proof against its public signals.

        Raises:
            EngineFailureError: If the engine cannot be run
        """
        ...

    async def full_prove(self, inputs: dict[str, list[int]]) -> RealProof:
        """Witness computation followed by proving."""
        start_time = time.time()
        witness = await self.compute_witness(inputs)
        proof, public_signals = await self.prove(witness)
        proving_time_ms = int((time.time() - start_time) * 1000)

        logger.info(
            "zk_proof_generated",
            circuit=self.circuit_name,
            proving_time_ms=proving_time_ms,
        )

        return RealProof(
            proof=proof,
            public_signals=public_signals,
            circuit_name=self.circuit_name,
            proving_time_ms=proving_time_ms,
        )


class SnarkjsEngine(ProvingEngine):
    """
    Groth16 engine backed by the snarkjs CLI.

    Expects the compiled circuit layout:
        <build_dir>/<circuit>_js/<circuit>.wasm
        <build_dir>/<circuit>_final.zkey
        <build_dir>/verification_key.json
    """

    def __init__(
        self,
        build_dir: str | Path | None = None,
        circuit_name: str | None = None,
        command: list[str] | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        """
        Initialize the engine.

        Args:
            build_dir: Circuit build directory. Defaults to ENGINE_BUILD_DIR
            circuit_name: Circuit name. Defaults to ENGINE_CIRCUIT_NAME
            command: snarkjs invocation, e.g. ["npx", "snarkjs"]
            timeout_seconds: Upper bound for each snarkjs call
        """
        engine_settings = get_settings().engine
        self.build_dir = Path(build_dir) if build_dir else engine_settings.build_dir
        self.circuit_name = circuit_name or engine_settings.circuit_name
        self.command = command or engine_settings.command
        self.timeout_seconds = timeout_seconds or engine_settings.timeout_seconds

        if not self.build_dir.exists():
            logger.warning(
                "zk_circuit_build_dir_not_found",
                path=str(self.build_dir),
            )

    @property
    def wasm_path(self) -> Path:
        return self.build_dir / f"{self.circuit_name}_js" / f"{self.circuit_name}.wasm"

    @property
    def zkey_path(self) -> Path:
        return self.build_dir / f"{self.circuit_name}_final.zkey"

    @property
    def vkey_path(self) -> Path:
        return self.build_dir / "verification_key.json"

    @staticmethod
    def _require(path: Path, what: str) -> None:
        if not path.exists():
            raise EngineFailureError(f"{what} not found: {path}")

    async def _run_snarkjs(self, *args: str) -> subprocess.CompletedProcess:
        """Run one snarkjs subcommand in a worker thread."""
        try:
            return await asyncio.to_thread(
                subprocess.run,
                [*self.command, *args],
                capture_output=True,
                text=True,
                timeout=self.timeout_seconds,
            )
        except subprocess.TimeoutExpired as e:
            logger.error("snarkjs_timeout", subcommand=args[0], timeout_seconds=self.timeout_seconds)
            raise EngineFailureError(f"snarkjs {args[0]} timed out") from e
        except OSError as e:
            logger.error("snarkjs_unavailable", error=str(e))
            raise EngineFailureError("snarkjs could not be started") from e

    async def compute_witness(self, inputs: dict[str, list[int]]) -> bytes:
        self._require(self.wasm_path, "Circuit WASM")

        with tempfile.TemporaryDirectory(prefix="privaccess-wtns-") as tmp:
            input_file = Path(tmp) / "input.json"
            witness_file = Path(tmp) / "witness.wtns"
            input_file.write_text(json.dumps({k: [str(v) for v in vs] for k, vs in inputs.items()}))

            result = await self._run_snarkjs(
                "wtns", "calculate", str(self.wasm_path), str(input_file), str(witness_file)
            )
            if result.returncode != 0 or not witness_file.exists():
                logger.error(
                    "snarkjs_witness_failed",
                    circuit=self.circuit_name,
                    returncode=result.returncode,
                )
                raise EngineFailureError("Witness computation failed")

            return witness_file.read_bytes()

    async def prove(self, witness: bytes) -> tuple[ZKProof, PublicSignals]:
        self._require(self.zkey_path, "Proving key")

        with tempfile.TemporaryDirectory(prefix="privaccess-prove-") as tmp:
            witness_file = Path(tmp) / "witness.wtns"
            proof_file = Path(tmp) / "proof.json"
            public_file = Path(tmp) / "public.json"
            witness_file.write_bytes(witness)

            result = await self._run_snarkjs(
                "groth16", "prove", str(self.zkey_path), str(witness_file), str(proof_file), str(public_file)
            )
            if result.returncode != 0:
                logger.error(
                    "snarkjs_proof_generation_failed",
                    stderr=result.stderr,
                    circuit=self.circuit_name,
                )
                raise EngineFailureError(f"Proof generation failed: {result.stderr}")

            try:
                proof_json: dict[str, Any] = json.loads(proof_file.read_text())
                public_signals: list[str] = json.loads(public_file.read_text())
            except (OSError, ValueError) as e:
                raise EngineFailureError("snarkjs produced unreadable proof output") from e

        return ZKProof(**proof_json), PublicSignals(signals=[str(s) for s in public_signals])

    async def verify(self, proof: ZKProof, public_signals: PublicSignals) -> bool:
        self._require(self.vkey_path, "Verification key")

        with tempfile.TemporaryDirectory(prefix="privaccess-verify-") as tmp:
            proof_file = Path(tmp) / "proof.json"
            public_file = Path(tmp) / "public.json"
            proof_file.write_text(json.dumps(proof.model_dump()))
            public_file.write_text(json.dumps(public_signals.signals))

            start_time = time.time()
            result = await self._run_snarkjs(
                "groth16", "verify", str(self.vkey_path), str(public_file), str(proof_file)
            )
            verification_time_ms = int((time.time() - start_time) * 1000)

        is_valid = result.returncode == 0 and "OK" in result.stdout

        logger.info(
            "zk_proof_verified",
            circuit=self.circuit_name,
            valid=is_valid,
            verification_time_ms=verification_time_ms,
        )
        return is_valid
