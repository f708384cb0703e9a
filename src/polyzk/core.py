"""
Core ZKP types and interfaces.

This module defines the fundamental types for the proof system, including
the backend abstraction, configuration, errors and workflow results.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

if TYPE_CHECKING:
    from .circuits import ZKCircuit
    from .field import FR


class ZKPType(Enum):
    """Proof system backends supported."""
    GROTH16 = "groth16"
    MOCK = "mock"  # For testing


class ZKPStatus(IntEnum):
    """Status codes for ZKP operations."""
    INVALID_INPUT = 1
    ASSIGNMENT_MISSING = 2
    STRUCTURAL_MISMATCH = 3
    UNSATISFIED_CONSTRAINT = 4
    BACKEND_ERROR = 5


@dataclass
class ZKPConfig:
    """Configuration for ZKP operations."""
    # Backend configuration
    backend_type: ZKPType = ZKPType.GROTH16
    cache_size: int = 16  # Prepared verification keys kept per backend

    # Lifecycle settings
    setup_from_skeleton: bool = True  # Compile keys from the witness-free circuit
    check_witness: bool = False  # Refuse to prove unsatisfying witnesses

    # Circuit settings
    max_constraints: int = 1000000
    max_public_inputs: int = 100

    def validate(self) -> None:
        """Validate configuration parameters."""
        if not isinstance(self.backend_type, ZKPType):
            raise ValueError(f"Unsupported backend type: {self.backend_type}")
        if self.max_constraints <= 0:
            raise ValueError("max_constraints must be positive")
        if self.max_public_inputs <= 0:
            raise ValueError("max_public_inputs must be positive")
        if self.cache_size <= 0:
            raise ValueError("cache_size must be positive")


class ZKPError(Exception):
    """Base exception for ZKP operations."""

    def __init__(self, message: str, status: ZKPStatus = ZKPStatus.BACKEND_ERROR,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.status = status
        self.details = details or {}


class AssignmentMissing(ZKPError):
    """A value required by synthesis was not supplied."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ZKPStatus.ASSIGNMENT_MISSING, details)


class StructuralMismatch(ZKPError):
    """Inputs, keys or proofs do not have the shape the other side expects."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ZKPStatus.STRUCTURAL_MISMATCH, details)


@dataclass
class Keypair:
    """Proving and verification keys from one setup."""
    proving_key: Any
    verification_key: Any
    parameters: Dict[str, Any] = field(default_factory=dict)


@dataclass
class WorkflowResult:
    """Result of a full setup / prove / verify run."""
    is_valid: bool
    proof: Any
    public_inputs: List["FR"]
    setup_time: float = 0.0
    proving_time: float = 0.0
    verification_time: float = 0.0
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def total_time(self) -> float:
        return self.setup_time + self.proving_time + self.verification_time


class ZKPBackend(ABC):
    """Abstract base class for proof system backends.

    A backend compiles a circuit's constraint topology into keys, proves a
    populated circuit against a proving key and checks a proof against
    public inputs. ``rng`` is any object exposing ``randrange``.
    """

    zkp_type: ZKPType

    def __init__(self, config: ZKPConfig):
        self.config = config
        self.config.validate()

    @abstractmethod
    def compile(self, circuit: "ZKCircuit", rng) -> Any:
        """Compile a circuit into a keypair."""
        pass

    @abstractmethod
    def prove(self, circuit: "ZKCircuit", proving_key: Any, rng) -> Any:
        """Produce a proof for a populated circuit."""
        pass

    @abstractmethod
    def verify(self, verification_key: Any, public_inputs: Sequence["FR"],
               proof: Any) -> bool:
        """Verify a proof. Returns False for a well-formed but invalid proof."""
        pass

    def validate_constraint_count(self, count: int) -> None:
        """Reject constraint systems larger than the configured limit."""
        if count > self.config.max_constraints:
            raise ZKPError(
                f"Circuit has {count} constraints, limit is {self.config.max_constraints}",
                ZKPStatus.INVALID_INPUT,
                {"constraint_count": count},
            )

    def validate_circuit(self, circuit: "ZKCircuit") -> Dict[str, Any]:
        """Check a circuit against the configured limits and return its info."""
        info = self.get_circuit_info(circuit)
        self.validate_constraint_count(info["constraint_count"])

        public_count = len(info["public_variables"])
        if public_count > self.config.max_public_inputs:
            raise ZKPError(
                f"Circuit has {public_count} public inputs, "
                f"limit is {self.config.max_public_inputs}",
                ZKPStatus.INVALID_INPUT,
                {"public_input_count": public_count},
            )
        return info

    def get_circuit_info(self, circuit: "ZKCircuit") -> Dict[str, Any]:
        """Get information about a circuit as this backend sees it."""
        info = circuit.get_circuit_info()
        info["backend"] = self.zkp_type.value
        return info

    def cleanup(self) -> None:
        """Release cached state."""
        pass
