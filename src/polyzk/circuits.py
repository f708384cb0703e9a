"""
ZKP circuit definitions.

This module provides the circuit abstraction and the quartic polynomial
circuit, which proves knowledge of ``w`` such that
``x = w^4 + a*w^3 + b*w^2 + c*w + d`` for public ``a, b, c, d, x``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from .constraint_system import ConstraintSystem, KeypairAssembly, LinearCombination, Variable
from .core import AssignmentMissing
from .field import FR


@dataclass(frozen=True)
class SetupOnly:
    """Phase marker: topology only, no values."""


@dataclass(frozen=True)
class ProverFull:
    """Phase marker: the prover holds both the public value and the witness."""

    public_value: FR
    witness: FR


@dataclass(frozen=True)
class VerifierPublicOnly:
    """Phase marker: only the public value is known."""

    public_value: FR


CircuitPhase = Union[SetupOnly, ProverFull, VerifierPublicOnly]


class ZKCircuit(ABC):
    """Abstract base class for zero-knowledge circuits."""

    def __init__(self, circuit_id: str):
        if not circuit_id:
            raise ValueError("circuit_id cannot be empty")
        self.circuit_id = circuit_id

    @abstractmethod
    def synthesize(self, cs: ConstraintSystem) -> None:
        """Allocate variables and emit constraints into ``cs``."""
        pass

    def skeleton(self) -> "ZKCircuit":
        """Circuit with the same topology and no private data."""
        return self

    def get_circuit_info(self) -> Dict[str, Any]:
        """Get information about the circuit topology."""
        assembly = KeypairAssembly()
        self.synthesize(assembly)

        return {
            "circuit_id": self.circuit_id,
            "constraint_count": assembly.num_constraints,
            "input_count": assembly.num_inputs,
            "aux_count": assembly.num_aux,
            "public_variables": assembly.input_names[1:],
            "private_variables": list(assembly.aux_names),
            "constraints": [c.name for c in assembly.constraints],
            "fingerprint": assembly.fingerprint(),
        }


@dataclass(frozen=True)
class PolynomialCoefficients:
    """Public coefficients of ``w^4 + a*w^3 + b*w^2 + c*w + d``."""

    a: FR
    b: FR
    c: FR
    d: FR

    @classmethod
    def from_ints(cls, a: int, b: int, c: int, d: int) -> "PolynomialCoefficients":
        return cls(FR(a), FR(b), FR(c), FR(d))

    def evaluate(self, w: FR) -> FR:
        """Evaluate the polynomial at ``w`` (Horner form)."""
        return (((w + self.a) * w + self.b) * w + self.c) * w + self.d


@dataclass(frozen=True)
class PowerHints:
    """Off-circuit witness computation: the powers of ``w``."""

    w: FR
    w_sq: FR
    w_cu: FR
    w_qu: FR


class PolynomialCircuit(ZKCircuit):
    """Quartic polynomial relation circuit."""

    def __init__(self, coefficients: PolynomialCoefficients,
                 phase: Optional[CircuitPhase] = None,
                 circuit_id: str = "quartic_polynomial"):
        super().__init__(circuit_id)
        self.coefficients = coefficients
        self.phase: CircuitPhase = phase if phase is not None else SetupOnly()

    @classmethod
    def for_setup(cls, coefficients: PolynomialCoefficients) -> "PolynomialCircuit":
        return cls(coefficients, SetupOnly())

    @classmethod
    def for_prover(cls, coefficients: PolynomialCoefficients, public_value: FR,
                   witness: FR) -> "PolynomialCircuit":
        return cls(coefficients, ProverFull(public_value, witness))

    @classmethod
    def for_verifier(cls, coefficients: PolynomialCoefficients,
                     public_value: FR) -> "PolynomialCircuit":
        return cls(coefficients, VerifierPublicOnly(public_value))

    @property
    def public_value(self) -> Optional[FR]:
        if isinstance(self.phase, (ProverFull, VerifierPublicOnly)):
            return self.phase.public_value
        return None

    @property
    def witness(self) -> Optional[FR]:
        if isinstance(self.phase, ProverFull):
            return self.phase.witness
        return None

    def skeleton(self) -> "PolynomialCircuit":
        return PolynomialCircuit(self.coefficients, SetupOnly(), self.circuit_id)

    def compute_witness(self) -> PowerHints:
        """Compute the powers of the witness outside the constraint system."""
        w = self.witness
        if w is None:
            raise AssignmentMissing("Witness w was not supplied", {"variable": "w"})

        w_sq = w * w
        w_cu = w_sq * w
        w_qu = w_cu * w
        return PowerHints(w=w, w_sq=w_sq, w_cu=w_cu, w_qu=w_qu)

    def synthesize(self, cs: ConstraintSystem) -> None:
        x = cs.alloc_input("x", self._public_value_provider)

        hints = self.compute_witness() if self.witness is not None else None

        def hint(name: str):
            def value() -> FR:
                if hints is None:
                    raise AssignmentMissing(f"Witness value {name} was not supplied",
                                            {"variable": name})
                return getattr(hints, name)
            return value

        w = cs.alloc("w", hint("w"))
        w_sq = cs.alloc("w_sq", hint("w_sq"))
        w_cu = cs.alloc("w_cu", hint("w_cu"))
        w_qu = cs.alloc("w_qu", hint("w_qu"))

        self._enforce_powers(cs, w, w_sq, w_cu, w_qu)
        self._enforce_relation(cs, x, w, w_sq, w_cu, w_qu)

    def _public_value_provider(self) -> FR:
        if self.public_value is None:
            raise AssignmentMissing("Public value x was not supplied", {"variable": "x"})
        return self.public_value

    @staticmethod
    def _enforce_powers(cs: ConstraintSystem, w: Variable, w_sq: Variable,
                        w_cu: Variable, w_qu: Variable) -> None:
        zero = LinearCombination.zero()
        cs.enforce("w_sq = w * w", zero + w, zero + w, zero + w_sq)
        cs.enforce("w_cu = w_sq * w", zero + w_sq, zero + w, zero + w_cu)
        cs.enforce("w_qu = w_cu * w", zero + w_cu, zero + w, zero + w_qu)

    def _enforce_relation(self, cs: ConstraintSystem, x: Variable, w: Variable,
                          w_sq: Variable, w_cu: Variable, w_qu: Variable) -> None:
        # Degree-one terms fold into a single linear combination against ONE.
        coeffs = self.coefficients
        polynomial = (
            LinearCombination.zero()
            + w_qu
            + (coeffs.a, w_cu)
            + (coeffs.b, w_sq)
            + (coeffs.c, w)
            + (coeffs.d, cs.one())
        )
        cs.enforce(
            "polynomial equation",
            polynomial,
            LinearCombination.zero() + cs.one(),
            LinearCombination.zero() + x,
        )
