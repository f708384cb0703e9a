"""
Groth16 parameter and proof generation.

This module provides the key and proof types together with key generation
and proving over BN254, using py_ecc for the group arithmetic.
"""

import hashlib
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List

from py_ecc.optimized_bn128 import Z1, Z2, add, neg

from .circuits import ZKCircuit
from .constraint_system import (
    KeypairAssembly,
    LinearCombination,
    ProvingAssignment,
    R1CSRecorder,
    Variable,
    VariableKind,
)
from .core import Keypair, StructuralMismatch
from .curve import (
    decode_g1,
    decode_g2,
    encode_g1,
    encode_g2,
    g1,
    g2,
    multi_scalar_mul,
    scalar_mul,
)
from .field import FR, random_field_element
from .polynomial import (
    div_polys,
    domain,
    eval_poly,
    interpolate,
    lagrange_basis_at,
    multiply_polys,
    subtract_polys,
    trim,
    vanishing_poly,
)

logger = logging.getLogger(__name__)


def _load_json(data: bytes, what: str) -> Dict[str, Any]:
    try:
        parsed = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise StructuralMismatch(f"Invalid {what} data: {e}")
    if not isinstance(parsed, dict):
        raise StructuralMismatch(f"Invalid {what} data: expected an object")
    return parsed


@dataclass
class VerificationKey:
    """Verification key for verifying proofs."""

    alpha_g1: Any
    beta_g2: Any
    gamma_g2: Any
    delta_g2: Any
    ic: List[Any]
    circuit_id: str
    fingerprint: str

    @property
    def num_public_inputs(self) -> int:
        """Public inputs expected by the verifier, excluding the constant one."""
        return len(self.ic) - 1

    def to_bytes(self) -> bytes:
        """Serialize verification key to bytes."""
        data = {
            "alpha_g1": encode_g1(self.alpha_g1),
            "beta_g2": encode_g2(self.beta_g2),
            "gamma_g2": encode_g2(self.gamma_g2),
            "delta_g2": encode_g2(self.delta_g2),
            "ic": [encode_g1(p) for p in self.ic],
            "circuit_id": self.circuit_id,
            "fingerprint": self.fingerprint,
        }
        return json.dumps(data, sort_keys=True).encode("utf-8")

    @classmethod
    def from_bytes(cls, data: bytes) -> "VerificationKey":
        """Deserialize verification key from bytes."""
        parsed = _load_json(data, "verification key")
        try:
            ic = parsed["ic"]
            if not isinstance(ic, list) or not ic:
                raise StructuralMismatch("Verification key has no IC points")
            return cls(
                alpha_g1=decode_g1(parsed["alpha_g1"], "alpha_g1"),
                beta_g2=decode_g2(parsed["beta_g2"], "beta_g2", subgroup=True),
                gamma_g2=decode_g2(parsed["gamma_g2"], "gamma_g2", subgroup=True),
                delta_g2=decode_g2(parsed["delta_g2"], "delta_g2", subgroup=True),
                ic=[decode_g1(p, f"ic[{i}]") for i, p in enumerate(ic)],
                circuit_id=str(parsed["circuit_id"]),
                fingerprint=str(parsed["fingerprint"]),
            )
        except KeyError as e:
            raise StructuralMismatch(f"Verification key is missing field {e}")

    def get_hash(self) -> str:
        """Get hash of the verification key."""
        return hashlib.sha256(self.to_bytes()).hexdigest()


@dataclass
class ProvingKey:
    """Proving key for generating proofs."""

    vk: VerificationKey
    beta_g1: Any
    delta_g1: Any
    a_query: List[Any]
    b_g1_query: List[Any]
    b_g2_query: List[Any]
    h_query: List[Any]
    l_query: List[Any]
    num_inputs: int
    num_aux: int
    num_constraints: int

    @property
    def fingerprint(self) -> str:
        return self.vk.fingerprint


@dataclass
class Proof:
    """Groth16 proof: ``A`` and ``C`` in G1, ``B`` in G2."""

    a: Any
    b: Any
    c: Any
    circuit_id: str = ""

    def to_bytes(self) -> bytes:
        """Serialize proof to bytes."""
        data = {
            "a": encode_g1(self.a),
            "b": encode_g2(self.b),
            "c": encode_g1(self.c),
            "circuit_id": self.circuit_id,
        }
        return json.dumps(data, sort_keys=True).encode("utf-8")

    @classmethod
    def from_bytes(cls, data: bytes) -> "Proof":
        """Deserialize proof from bytes, rejecting off-curve points."""
        parsed = _load_json(data, "proof")
        try:
            return cls(
                a=decode_g1(parsed["a"], "proof.a"),
                b=decode_g2(parsed["b"], "proof.b", subgroup=True),
                c=decode_g1(parsed["c"], "proof.c"),
                circuit_id=str(parsed.get("circuit_id", "")),
            )
        except KeyError as e:
            raise StructuralMismatch(f"Proof is missing field {e}")

    def get_hash(self) -> str:
        """Get a unique hash for this proof."""
        return hashlib.sha256(self.to_bytes()).hexdigest()


def synthesize_with_input_constraints(circuit: ZKCircuit, cs: R1CSRecorder) -> None:
    """Synthesize ``circuit`` and append ``input * 0 = 0`` for every input.

    The extra constraints keep the input polynomials linearly independent,
    so a proof cannot be replayed against different public inputs.
    """
    circuit.synthesize(cs)
    zero = LinearCombination.zero()
    for index in range(cs.num_inputs):
        cs.enforce(
            f"input constraint {index}",
            zero + Variable(index, VariableKind.INPUT),
            zero,
            zero,
        )


def _sample_tau(rng, points: List[FR]) -> FR:
    while True:
        tau = random_field_element(rng)
        if all(tau != p for p in points):
            return tau


def generate_parameters(circuit: ZKCircuit, rng) -> Keypair:
    """Run the circuit-specific Groth16 setup."""
    start_time = time.time()

    assembly = KeypairAssembly()
    synthesize_with_input_constraints(circuit, assembly)

    num_inputs = assembly.num_inputs
    num_aux = assembly.num_aux
    m = assembly.num_constraints
    n = assembly.num_variables
    rows_a, rows_b, rows_c = assembly.to_matrices()
    fingerprint = assembly.fingerprint()

    logger.debug(
        f"Compiling {circuit.circuit_id}: {m} constraints, "
        f"{num_inputs} inputs, {num_aux} aux variables"
    )

    points = domain(m)
    tau = _sample_tau(rng, points)
    alpha = random_field_element(rng)
    beta = random_field_element(rng)
    gamma = random_field_element(rng)
    delta = random_field_element(rng)
    gamma_inv = FR(1) / gamma
    delta_inv = FR(1) / delta

    # Evaluate every QAP column polynomial at tau.
    basis = lagrange_basis_at(points, tau)
    u = [FR(0)] * n
    v = [FR(0)] * n
    w = [FR(0)] * n
    for j in range(m):
        for col, coeff in rows_a[j].items():
            u[col] = u[col] + coeff * basis[j]
        for col, coeff in rows_b[j].items():
            v[col] = v[col] + coeff * basis[j]
        for col, coeff in rows_c[j].items():
            w[col] = w[col] + coeff * basis[j]
    z_tau = eval_poly(vanishing_poly(points), tau)

    combined = [beta * u[i] + alpha * v[i] + w[i] for i in range(n)]

    vk = VerificationKey(
        alpha_g1=g1(alpha),
        beta_g2=g2(beta),
        gamma_g2=g2(gamma),
        delta_g2=g2(delta),
        ic=[g1(combined[i] * gamma_inv) for i in range(num_inputs)],
        circuit_id=circuit.circuit_id,
        fingerprint=fingerprint,
    )

    pk = ProvingKey(
        vk=vk,
        beta_g1=g1(beta),
        delta_g1=g1(delta),
        a_query=[g1(value) for value in u],
        b_g1_query=[g1(value) for value in v],
        b_g2_query=[g2(value) for value in v],
        h_query=[g1(tau ** k * z_tau * delta_inv) for k in range(m - 1)],
        l_query=[g1(combined[i] * delta_inv) for i in range(num_inputs, n)],
        num_inputs=num_inputs,
        num_aux=num_aux,
        num_constraints=m,
    )

    elapsed = time.time() - start_time
    logger.info(f"Generated Groth16 parameters for {circuit.circuit_id} in {elapsed:.3f}s")

    return Keypair(
        proving_key=pk,
        verification_key=vk,
        parameters={
            "constraint_count": m,
            "input_count": num_inputs,
            "aux_count": num_aux,
            "fingerprint": fingerprint,
            "setup_time": elapsed,
        },
    )


def _check_shape(prover: ProvingAssignment, pk: ProvingKey) -> None:
    expected = (pk.num_inputs, pk.num_aux, pk.num_constraints)
    actual = (prover.num_inputs, prover.num_aux, prover.num_constraints)
    if expected != actual:
        raise StructuralMismatch(
            "Circuit shape does not match the proving key",
            {"expected": expected, "actual": actual},
        )
    if prover.fingerprint() != pk.fingerprint:
        raise StructuralMismatch(
            "Circuit topology does not match the proving key",
            {"expected": pk.fingerprint},
        )


def compute_h(prover: ProvingAssignment) -> List[FR]:
    """Coefficients of ``H = (A*B - C) / Z`` for the prover's assignment.

    The remainder is discarded, so an unsatisfying assignment yields an
    invalid proof rather than an error.
    """
    m = prover.num_constraints
    points = domain(m)
    evaluations = prover.evaluate_constraints()

    a_poly = interpolate(points, [a for a, _, _ in evaluations])
    b_poly = interpolate(points, [b for _, b, _ in evaluations])
    c_poly = interpolate(points, [c for _, _, c in evaluations])

    numerator = subtract_polys(multiply_polys(a_poly, b_poly), c_poly)
    h, remainder = div_polys(numerator, vanishing_poly(points))
    if trim(remainder):
        logger.warning("Assignment does not satisfy the constraint system; proof will not verify")

    return h + [FR(0)] * (m - 1 - len(h))


def create_proof(circuit: ZKCircuit, pk: ProvingKey, rng) -> Proof:
    """Create a randomized Groth16 proof for a populated circuit."""
    start_time = time.time()

    prover = ProvingAssignment()
    synthesize_with_input_constraints(circuit, prover)
    _check_shape(prover, pk)

    h = compute_h(prover)
    assignment = prover.full_assignment
    r = random_field_element(rng)
    s = random_field_element(rng)
    vk = pk.vk

    proof_a = add(add(vk.alpha_g1, multi_scalar_mul(pk.a_query, assignment, Z1)),
                  scalar_mul(pk.delta_g1, r))
    proof_b = add(add(vk.beta_g2, multi_scalar_mul(pk.b_g2_query, assignment, Z2)),
                  scalar_mul(vk.delta_g2, s))
    b_g1 = add(add(pk.beta_g1, multi_scalar_mul(pk.b_g1_query, assignment, Z1)),
               scalar_mul(pk.delta_g1, s))

    proof_c = multi_scalar_mul(pk.l_query, prover.aux_assignment, Z1)
    proof_c = add(proof_c, multi_scalar_mul(pk.h_query, h, Z1))
    proof_c = add(proof_c, scalar_mul(proof_a, s))
    proof_c = add(proof_c, scalar_mul(b_g1, r))
    proof_c = add(proof_c, neg(scalar_mul(pk.delta_g1, r * s)))

    logger.info(f"Created proof for {circuit.circuit_id} in {time.time() - start_time:.3f}s")

    return Proof(a=proof_a, b=proof_b, c=proof_c, circuit_id=circuit.circuit_id)
