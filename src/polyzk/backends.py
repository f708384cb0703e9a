"""
ZKP backend implementations.

This module provides the Groth16 backend over BN254 and a transparent mock
backend for testing and development.
"""

import hashlib
import json
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, List, Sequence

from .circuits import ZKCircuit
from .constraint_system import (
    KeypairAssembly,
    ProvingAssignment,
    SatisfactionChecker,
    SparseRow,
)
from .core import (
    Keypair,
    StructuralMismatch,
    ZKPBackend,
    ZKPConfig,
    ZKPError,
    ZKPStatus,
    ZKPType,
)
from .field import FR
from .generation import Proof, ProvingKey, VerificationKey, create_proof, generate_parameters
from .verification import (
    PreparedVerifyingKey,
    prepare_verifying_key,
    validate_public_inputs,
    verify_proof,
)

logger = logging.getLogger(__name__)


def check_witness(circuit: ZKCircuit) -> None:
    """Raise if the circuit's assignment leaves a constraint unsatisfied."""
    checker = SatisfactionChecker()
    circuit.synthesize(checker)
    unsatisfied = checker.which_is_unsatisfied()
    if unsatisfied is not None:
        raise ZKPError(
            f"Witness does not satisfy constraint '{unsatisfied}'",
            ZKPStatus.UNSATISFIED_CONSTRAINT,
            {"constraint": unsatisfied, "circuit_id": circuit.circuit_id},
        )


class Groth16Backend(ZKPBackend):
    """Backend for Groth16 zk-SNARK proofs over BN254."""

    zkp_type = ZKPType.GROTH16

    def __init__(self, config: ZKPConfig):
        super().__init__(config)
        self._prepared: "OrderedDict[str, PreparedVerifyingKey]" = OrderedDict()

    def compile(self, circuit: ZKCircuit, rng) -> Keypair:
        self.validate_circuit(circuit)
        return generate_parameters(circuit, rng)

    def prove(self, circuit: ZKCircuit, proving_key: ProvingKey, rng) -> Proof:
        if not isinstance(proving_key, ProvingKey):
            raise StructuralMismatch(
                f"Expected a Groth16 proving key, got {type(proving_key).__name__}"
            )
        if self.config.check_witness:
            check_witness(circuit)
        return create_proof(circuit, proving_key, rng)

    def verify(self, verification_key: VerificationKey, public_inputs: Sequence[Any],
               proof: Proof) -> bool:
        if not isinstance(verification_key, VerificationKey):
            raise StructuralMismatch(
                f"Expected a Groth16 verification key, got {type(verification_key).__name__}"
            )
        if not isinstance(proof, Proof):
            raise StructuralMismatch(f"Expected a Groth16 proof, got {type(proof).__name__}")
        if proof.circuit_id and proof.circuit_id != verification_key.circuit_id:
            raise StructuralMismatch(
                f"Proof for circuit {proof.circuit_id} cannot be checked against "
                f"a key for {verification_key.circuit_id}"
            )

        return verify_proof(self._prepare(verification_key), proof, public_inputs)

    def _prepare(self, vk: VerificationKey) -> PreparedVerifyingKey:
        key_hash = vk.get_hash()
        if key_hash in self._prepared:
            self._prepared.move_to_end(key_hash)
            return self._prepared[key_hash]

        logger.debug(f"Preparing verification key {key_hash[:16]}")
        prepared = prepare_verifying_key(vk)
        # Evict least recently used keys
        while len(self._prepared) >= self.config.cache_size:
            self._prepared.popitem(last=False)
        self._prepared[key_hash] = prepared
        return prepared

    def cleanup(self) -> None:
        """Drop prepared verification keys."""
        self._prepared.clear()


def _sparse_rows(rows: List[SparseRow]) -> List[List[List[str]]]:
    return [[[str(col), str(int(coeff))] for col, coeff in sorted(row.items())] for row in rows]


@dataclass
class MockVerificationKey:
    """Transparent verification key: the constraint matrices themselves."""

    rows_a: List[SparseRow]
    rows_b: List[SparseRow]
    rows_c: List[SparseRow]
    num_inputs: int
    num_aux: int
    circuit_id: str
    fingerprint: str

    @property
    def num_public_inputs(self) -> int:
        return self.num_inputs - 1

    def to_bytes(self) -> bytes:
        data = {
            "a": _sparse_rows(self.rows_a),
            "b": _sparse_rows(self.rows_b),
            "c": _sparse_rows(self.rows_c),
            "num_inputs": self.num_inputs,
            "num_aux": self.num_aux,
            "circuit_id": self.circuit_id,
            "fingerprint": self.fingerprint,
        }
        return json.dumps(data, sort_keys=True).encode("utf-8")

    def get_hash(self) -> str:
        return hashlib.sha256(self.to_bytes()).hexdigest()


@dataclass
class MockProvingKey:
    vk: MockVerificationKey

    @property
    def fingerprint(self) -> str:
        return self.vk.fingerprint


@dataclass
class MockProof:
    """The prover's full private assignment. Not zero-knowledge."""

    aux_assignment: List[FR]
    circuit_id: str = ""

    def to_bytes(self) -> bytes:
        data = {
            "aux": [str(int(value)) for value in self.aux_assignment],
            "circuit_id": self.circuit_id,
        }
        return json.dumps(data, sort_keys=True).encode("utf-8")

    def get_hash(self) -> str:
        return hashlib.sha256(self.to_bytes()).hexdigest()


def _evaluate_row(row: SparseRow, assignment: List[FR]) -> FR:
    total = FR(0)
    for col, coeff in row.items():
        total = total + coeff * assignment[col]
    return total


class MockZKPBackend(ZKPBackend):
    """Mock ZKP backend for testing and development.

    Compiles a circuit to its bare constraint matrices, "proves" by handing
    over the private assignment and verifies by re-evaluating every
    constraint. Error semantics match the Groth16 backend.
    """

    zkp_type = ZKPType.MOCK

    def compile(self, circuit: ZKCircuit, rng) -> Keypair:
        start_time = time.time()
        self.validate_circuit(circuit)

        assembly = KeypairAssembly()
        circuit.synthesize(assembly)
        rows_a, rows_b, rows_c = assembly.to_matrices()

        vk = MockVerificationKey(
            rows_a=rows_a,
            rows_b=rows_b,
            rows_c=rows_c,
            num_inputs=assembly.num_inputs,
            num_aux=assembly.num_aux,
            circuit_id=circuit.circuit_id,
            fingerprint=assembly.fingerprint(),
        )
        elapsed = time.time() - start_time
        logger.info(f"Compiled mock keys for {circuit.circuit_id} in {elapsed:.3f}s")

        return Keypair(
            proving_key=MockProvingKey(vk=vk),
            verification_key=vk,
            parameters={
                "constraint_count": assembly.num_constraints,
                "input_count": assembly.num_inputs,
                "aux_count": assembly.num_aux,
                "fingerprint": vk.fingerprint,
                "setup_time": elapsed,
            },
        )

    def prove(self, circuit: ZKCircuit, proving_key: MockProvingKey, rng) -> MockProof:
        if not isinstance(proving_key, MockProvingKey):
            raise StructuralMismatch(
                f"Expected a mock proving key, got {type(proving_key).__name__}"
            )
        if self.config.check_witness:
            check_witness(circuit)

        prover = ProvingAssignment()
        circuit.synthesize(prover)
        if prover.fingerprint() != proving_key.fingerprint:
            raise StructuralMismatch(
                "Circuit topology does not match the proving key",
                {"expected": proving_key.fingerprint},
            )

        logger.info(f"Created mock proof for {circuit.circuit_id}")
        return MockProof(aux_assignment=list(prover.aux_assignment),
                         circuit_id=circuit.circuit_id)

    def verify(self, verification_key: MockVerificationKey, public_inputs: Sequence[Any],
               proof: MockProof) -> bool:
        if not isinstance(verification_key, MockVerificationKey):
            raise StructuralMismatch(
                f"Expected a mock verification key, got {type(verification_key).__name__}"
            )
        if not isinstance(proof, MockProof):
            raise StructuralMismatch(f"Expected a mock proof, got {type(proof).__name__}")

        inputs = validate_public_inputs(public_inputs, verification_key.num_public_inputs)
        if len(proof.aux_assignment) != verification_key.num_aux:
            raise StructuralMismatch(
                f"Proof carries {len(proof.aux_assignment)} private values, "
                f"expected {verification_key.num_aux}"
            )

        assignment = [FR(1)] + inputs + list(proof.aux_assignment)
        rows = zip(verification_key.rows_a, verification_key.rows_b, verification_key.rows_c)
        is_valid = all(
            _evaluate_row(a, assignment) * _evaluate_row(b, assignment)
            == _evaluate_row(c, assignment)
            for a, b, c in rows
        )

        logger.info(f"Verified mock proof for {verification_key.circuit_id}: valid={is_valid}")
        return is_valid


def create_backend(config: ZKPConfig) -> ZKPBackend:
    """Create backend based on configuration."""
    if config.backend_type == ZKPType.GROTH16:
        return Groth16Backend(config)
    elif config.backend_type == ZKPType.MOCK:
        return MockZKPBackend(config)
    else:
        raise ValueError(f"Unsupported backend type: {config.backend_type}")
