"""
Groth16 proof verification.

This module provides verifying-key preparation, public input validation
and the pairing check.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, List, Sequence

from py_ecc.optimized_bn128 import FQ12, Z1, add, curve_order, final_exponentiate, neg, pairing

from .core import StructuralMismatch
from .curve import check_g1, check_g2, multi_scalar_mul
from .field import FR
from .generation import Proof, VerificationKey

logger = logging.getLogger(__name__)


@dataclass
class PreparedVerifyingKey:
    """Verification key with the fixed pairing precomputed."""

    alpha_beta: FQ12
    neg_gamma_g2: Any
    neg_delta_g2: Any
    ic: List[Any]
    circuit_id: str

    @property
    def num_public_inputs(self) -> int:
        return len(self.ic) - 1


def prepare_verifying_key(vk: VerificationKey) -> PreparedVerifyingKey:
    """Validate a verification key and precompute ``e(alpha, beta)``."""
    if not vk.ic:
        raise StructuralMismatch("Verification key has no IC points")
    check_g1(vk.alpha_g1, "alpha_g1")
    check_g2(vk.beta_g2, "beta_g2", subgroup=True)
    check_g2(vk.gamma_g2, "gamma_g2", subgroup=True)
    check_g2(vk.delta_g2, "delta_g2", subgroup=True)
    for i, point in enumerate(vk.ic):
        check_g1(point, f"ic[{i}]")

    return PreparedVerifyingKey(
        alpha_beta=pairing(vk.beta_g2, vk.alpha_g1),
        neg_gamma_g2=neg(vk.gamma_g2),
        neg_delta_g2=neg(vk.delta_g2),
        ic=list(vk.ic),
        circuit_id=vk.circuit_id,
    )


def validate_public_inputs(public_inputs: Sequence[Any], expected: int) -> List[FR]:
    """Check arity and convert public inputs to field elements."""
    if isinstance(public_inputs, (str, bytes)) or not hasattr(public_inputs, "__len__"):
        raise StructuralMismatch("Public inputs must be a sequence of field elements")
    if len(public_inputs) != expected:
        raise StructuralMismatch(
            f"Expected {expected} public inputs, got {len(public_inputs)}",
            {"expected": expected, "actual": len(public_inputs)},
        )

    inputs = []
    for i, value in enumerate(public_inputs):
        if isinstance(value, FR):
            inputs.append(value)
        elif isinstance(value, int) and not isinstance(value, bool) and 0 <= value < curve_order:
            inputs.append(FR(value))
        else:
            raise StructuralMismatch(f"Public input {i} is not a field element")
    return inputs


def verify_proof(pvk: PreparedVerifyingKey, proof: Proof, public_inputs: Sequence[Any]) -> bool:
    """Check ``e(A, B) = e(alpha, beta) * e(IC(x), gamma) * e(C, delta)``."""
    start_time = time.time()

    inputs = validate_public_inputs(public_inputs, pvk.num_public_inputs)
    check_g1(proof.a, "proof.a")
    check_g2(proof.b, "proof.b", subgroup=True)
    check_g1(proof.c, "proof.c")

    acc = add(pvk.ic[0], multi_scalar_mul(pvk.ic[1:], inputs, Z1))

    product = (
        pairing(proof.b, proof.a, final_exponentiate=False)
        * pairing(pvk.neg_gamma_g2, acc, final_exponentiate=False)
        * pairing(pvk.neg_delta_g2, proof.c, final_exponentiate=False)
    )
    is_valid = final_exponentiate(product) == pvk.alpha_beta

    logger.info(
        f"Verified proof for {pvk.circuit_id}: valid={is_valid} "
        f"in {time.time() - start_time:.3f}s"
    )
    return is_valid
