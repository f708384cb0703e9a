"""
Zero-knowledge proofs of a quartic polynomial relation.

This package proves knowledge of a secret ``w`` satisfying
``x = w^4 + a*w^3 + b*w^2 + c*w + d`` for public ``a, b, c, d, x``.
It encodes the relation as a rank-1 constraint system and drives it
through a setup / prove / verify workflow behind a pluggable backend.

Key Features:
- Phase-typed circuit instances (setup, prover, verifier)
- Groth16 backend over BN254 built on py_ecc
- Transparent mock backend for testing and development
- Structural errors kept separate from invalid proofs
"""

from .backends import Groth16Backend, MockZKPBackend, create_backend
from .circuits import (
    PolynomialCircuit,
    PolynomialCoefficients,
    PowerHints,
    ProverFull,
    SetupOnly,
    VerifierPublicOnly,
    ZKCircuit,
)
from .constraint_system import (
    ConstraintSystem,
    KeypairAssembly,
    LinearCombination,
    ProvingAssignment,
    SatisfactionChecker,
    Variable,
)
from .core import (
    AssignmentMissing,
    Keypair,
    StructuralMismatch,
    WorkflowResult,
    ZKPBackend,
    ZKPConfig,
    ZKPError,
    ZKPStatus,
    ZKPType,
)
from .field import FR, parse_field_element
from .generation import Proof, ProvingKey, VerificationKey
from .verification import PreparedVerifyingKey, prepare_verifying_key, verify_proof
from .workflow import ProofWorkflow

__all__ = [
    # Core types
    "ZKPBackend",
    "ZKPConfig",
    "ZKPError",
    "ZKPStatus",
    "ZKPType",
    "AssignmentMissing",
    "StructuralMismatch",
    "Keypair",
    "WorkflowResult",
    # Field
    "FR",
    "parse_field_element",
    # Constraint systems
    "ConstraintSystem",
    "KeypairAssembly",
    "ProvingAssignment",
    "SatisfactionChecker",
    "LinearCombination",
    "Variable",
    # Circuits
    "ZKCircuit",
    "PolynomialCircuit",
    "PolynomialCoefficients",
    "PowerHints",
    "SetupOnly",
    "ProverFull",
    "VerifierPublicOnly",
    # Groth16 artifacts
    "Proof",
    "ProvingKey",
    "VerificationKey",
    "PreparedVerifyingKey",
    "prepare_verifying_key",
    "verify_proof",
    # Backends
    "Groth16Backend",
    "MockZKPBackend",
    "create_backend",
    # Workflow
    "ProofWorkflow",
]

__version__ = "0.1.0"
