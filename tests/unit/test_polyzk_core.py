"""
Unit tests for core types: configuration, errors and results.
"""

import pytest

from polyzk.circuits import PolynomialCircuit, PolynomialCoefficients
from polyzk.core import (
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
from polyzk.backends import MockZKPBackend


class TestZKPConfig:
    """Test ZKP configuration."""

    def test_default_config(self):
        """Test default configuration values."""
        config = ZKPConfig()

        assert config.backend_type == ZKPType.GROTH16
        assert config.cache_size == 16
        assert config.setup_from_skeleton is True
        assert config.check_witness is False
        assert config.max_constraints == 1000000
        assert config.max_public_inputs == 100

    def test_config_validation(self):
        """Test configuration validation."""
        config = ZKPConfig()
        config.validate()  # Should not raise

        config.max_constraints = 0
        with pytest.raises(ValueError, match="max_constraints must be positive"):
            config.validate()

        config = ZKPConfig()
        config.max_public_inputs = -1
        with pytest.raises(ValueError, match="max_public_inputs must be positive"):
            config.validate()

        config = ZKPConfig()
        config.cache_size = 0
        with pytest.raises(ValueError, match="cache_size must be positive"):
            config.validate()

        config = ZKPConfig()
        config.backend_type = "groth16"
        with pytest.raises(ValueError, match="Unsupported backend type"):
            config.validate()

    def test_backend_validates_config(self):
        """Test that backends refuse invalid configuration."""
        with pytest.raises(ValueError):
            MockZKPBackend(ZKPConfig(backend_type=ZKPType.MOCK, max_constraints=0))


class TestErrors:
    """Test the error hierarchy."""

    def test_zkp_error_defaults(self):
        """Test default status and details."""
        error = ZKPError("boom")
        assert str(error) == "boom"
        assert error.status == ZKPStatus.BACKEND_ERROR
        assert error.details == {}

    def test_assignment_missing(self):
        """Test the missing-assignment error."""
        error = AssignmentMissing("no w", {"variable": "w"})
        assert isinstance(error, ZKPError)
        assert error.status == ZKPStatus.ASSIGNMENT_MISSING
        assert error.details["variable"] == "w"

    def test_structural_mismatch(self):
        """Test the structural mismatch error."""
        error = StructuralMismatch("bad arity")
        assert isinstance(error, ZKPError)
        assert error.status == ZKPStatus.STRUCTURAL_MISMATCH


class TestResults:
    """Test result containers."""

    def test_workflow_result_total_time(self):
        """Test the aggregated timing."""
        result = WorkflowResult(
            is_valid=True,
            proof=None,
            public_inputs=[],
            setup_time=1.0,
            proving_time=2.0,
            verification_time=0.5,
        )
        assert result.total_time == 3.5
        assert result.metadata == {}

    def test_keypair_parameters_default(self):
        """Test that keypair parameters default to an empty dict."""
        keypair = Keypair(proving_key="pk", verification_key="vk")
        assert keypair.parameters == {}


class TestZKPBackendInterface:
    """Test the backend abstraction."""

    def test_abstract(self):
        """Test that ZKPBackend cannot be instantiated."""
        with pytest.raises(TypeError):
            ZKPBackend(ZKPConfig())

    def test_constraint_limit(self):
        """Test that oversized circuits are rejected."""
        backend = MockZKPBackend(ZKPConfig(backend_type=ZKPType.MOCK, max_constraints=3))
        circuit = PolynomialCircuit(PolynomialCoefficients.from_ints(2, 3, 4, 5))

        with pytest.raises(ZKPError) as exc_info:
            backend.validate_circuit(circuit)
        assert exc_info.value.status == ZKPStatus.INVALID_INPUT
        assert exc_info.value.details == {"constraint_count": 4}

    def test_circuit_info_names_backend(self):
        """Test that circuit info is tagged with the backend."""
        backend = MockZKPBackend(ZKPConfig(backend_type=ZKPType.MOCK))
        circuit = PolynomialCircuit(PolynomialCoefficients.from_ints(2, 3, 4, 5))
        info = backend.get_circuit_info(circuit)
        assert info["backend"] == "mock"
        assert info["constraint_count"] == 4

    def test_validate_circuit_returns_backend_info(self):
        """Test that limit checks report the backend's view of the circuit."""
        backend = MockZKPBackend(ZKPConfig(backend_type=ZKPType.MOCK))
        circuit = PolynomialCircuit(PolynomialCoefficients.from_ints(2, 3, 4, 5))
        info = backend.validate_circuit(circuit)
        assert info["backend"] == "mock"
        assert info["public_variables"] == ["x"]

    def test_public_input_limit(self):
        """Test that circuits with too many public inputs are rejected."""
        backend = MockZKPBackend(ZKPConfig(backend_type=ZKPType.MOCK, max_public_inputs=1))
        circuit = PolynomialCircuit(PolynomialCoefficients.from_ints(2, 3, 4, 5))
        backend.validate_circuit(circuit)  # exactly at the limit

    def test_status_codes(self):
        """Test the status codes exposed to callers."""
        assert [s.name for s in ZKPStatus] == [
            "INVALID_INPUT",
            "ASSIGNMENT_MISSING",
            "STRUCTURAL_MISMATCH",
            "UNSATISFIED_CONSTRAINT",
            "BACKEND_ERROR",
        ]
