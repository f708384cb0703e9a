"""
Unit tests for Groth16 key generation, proving and verification.

Keypairs are expensive to build, so one keypair is shared per module.
"""

import random

import pytest
from py_ecc.optimized_bn128 import curve_order, eq

from polyzk.circuits import PolynomialCircuit, PolynomialCoefficients
from polyzk.constraint_system import KeypairAssembly, ProvingAssignment
from polyzk.core import Keypair, StructuralMismatch
from polyzk.field import FR
from polyzk.generation import (
    Proof,
    VerificationKey,
    compute_h,
    create_proof,
    generate_parameters,
    synthesize_with_input_constraints,
)
from polyzk.verification import (
    prepare_verifying_key,
    validate_public_inputs,
    verify_proof,
)

COEFFS = PolynomialCoefficients.from_ints(2, 3, 4, 5)


@pytest.fixture(scope="module")
def keypair():
    return generate_parameters(PolynomialCircuit.for_setup(COEFFS), random.Random(1234))


@pytest.fixture(scope="module")
def pvk(keypair):
    return prepare_verifying_key(keypair.verification_key)


@pytest.fixture(scope="module")
def valid_proof(keypair):
    circuit = PolynomialCircuit.for_prover(COEFFS, FR(15), FR(1))
    return create_proof(circuit, keypair.proving_key, random.Random(99))


class TestInputConstraints:
    """Test the per-input constraints appended before compilation."""

    def test_one_constraint_per_input(self):
        """Test that ONE and x each get an input constraint."""
        cs = KeypairAssembly()
        synthesize_with_input_constraints(PolynomialCircuit(COEFFS), cs)

        assert cs.num_constraints == 6
        names = [c.name for c in cs.constraints]
        assert names[-2:] == ["input constraint 0", "input constraint 1"]

        rows_a, rows_b, rows_c = cs.to_matrices()
        assert rows_a[-2:] == [{0: FR(1)}, {1: FR(1)}]
        assert rows_b[-2:] == [{}, {}]
        assert rows_c[-2:] == [{}, {}]


class TestGenerateParameters:
    """Test circuit-specific setup."""

    def test_keypair_shape(self, keypair):
        """Test query lengths against the constraint system size."""
        assert isinstance(keypair, Keypair)
        pk = keypair.proving_key
        vk = keypair.verification_key

        assert keypair.parameters["constraint_count"] == 6
        assert keypair.parameters["input_count"] == 2
        assert keypair.parameters["aux_count"] == 4
        assert vk.num_public_inputs == 1
        assert len(pk.a_query) == 6
        assert len(pk.b_g1_query) == 6
        assert len(pk.b_g2_query) == 6
        assert len(pk.h_query) == 5
        assert len(pk.l_query) == 4
        assert pk.vk is vk

    def test_fingerprint_matches_circuit(self, keypair):
        """Test that keys are bound to the compiled topology."""
        cs = KeypairAssembly()
        synthesize_with_input_constraints(PolynomialCircuit(COEFFS), cs)
        assert keypair.verification_key.fingerprint == cs.fingerprint()
        assert keypair.proving_key.fingerprint == cs.fingerprint()
        assert keypair.parameters["fingerprint"] == cs.fingerprint()

    def test_deterministic_with_seeded_rng(self, keypair):
        """Test that the same seed reproduces the same keys."""
        again = generate_parameters(PolynomialCircuit(COEFFS), random.Random(1234))
        assert again.verification_key.get_hash() == keypair.verification_key.get_hash()

    def test_setup_from_populated_circuit(self, keypair):
        """Test that compiling a populated circuit gives the same topology."""
        populated = PolynomialCircuit.for_prover(COEFFS, FR(15), FR(1))
        again = generate_parameters(populated, random.Random(1234))
        assert again.verification_key.get_hash() == keypair.verification_key.get_hash()


class TestComputeH:
    """Test the quotient polynomial."""

    def test_length(self):
        """Test that H is padded to m - 1 coefficients."""
        prover = ProvingAssignment()
        synthesize_with_input_constraints(
            PolynomialCircuit.for_prover(COEFFS, FR(15), FR(1)), prover
        )
        assert len(compute_h(prover)) == prover.num_constraints - 1

    def test_unsatisfied_assignment_warns(self, caplog):
        """Test that an unsatisfying witness is logged, not raised."""
        prover = ProvingAssignment()
        synthesize_with_input_constraints(
            PolynomialCircuit.for_prover(COEFFS, FR(15), FR(2)), prover
        )
        with caplog.at_level("WARNING", logger="polyzk.generation"):
            h = compute_h(prover)
        assert len(h) == prover.num_constraints - 1
        assert "does not satisfy" in caplog.text


class TestCreateProof:
    """Test proof creation."""

    def test_valid_proof_verifies(self, pvk, valid_proof):
        """Test completeness for w=1, x=15."""
        assert valid_proof.circuit_id == "quartic_polynomial"
        assert verify_proof(pvk, valid_proof, [FR(15)]) is True

    def test_wrong_public_input_fails(self, pvk, valid_proof):
        """Test that a proof does not transfer to another public value."""
        assert verify_proof(pvk, valid_proof, [FR(16)]) is False

    def test_invalid_witness_fails(self, keypair, pvk):
        """Test soundness for w=2, x=15."""
        circuit = PolynomialCircuit.for_prover(COEFFS, FR(15), FR(2))
        proof = create_proof(circuit, keypair.proving_key, random.Random(5))
        assert verify_proof(pvk, proof, [FR(15)]) is False

    def test_proofs_are_randomized(self, keypair, valid_proof):
        """Test that different randomness gives a different proof."""
        circuit = PolynomialCircuit.for_prover(COEFFS, FR(15), FR(1))
        other = create_proof(circuit, keypair.proving_key, random.Random(100))
        assert not eq(other.a, valid_proof.a)

    def test_missing_witness(self, keypair):
        """Test that proving without a witness propagates AssignmentMissing."""
        from polyzk.core import AssignmentMissing

        circuit = PolynomialCircuit.for_verifier(COEFFS, FR(15))
        with pytest.raises(AssignmentMissing):
            create_proof(circuit, keypair.proving_key, random.Random(5))

    def test_mismatched_coefficients(self, keypair):
        """Test that a key for other coefficients is rejected."""
        other = PolynomialCoefficients.from_ints(1, 1, 1, 1)
        circuit = PolynomialCircuit.for_prover(other, FR(5), FR(1))
        with pytest.raises(StructuralMismatch, match="topology"):
            create_proof(circuit, keypair.proving_key, random.Random(5))


class TestSerialization:
    """Test JSON encoding of keys and proofs."""

    def test_verification_key_roundtrip(self, keypair):
        """Test that a decoded key hashes identically."""
        vk = keypair.verification_key
        decoded = VerificationKey.from_bytes(vk.to_bytes())
        assert decoded.get_hash() == vk.get_hash()
        assert decoded.num_public_inputs == 1
        assert decoded.circuit_id == vk.circuit_id

    def test_decoded_proof_verifies(self, pvk, valid_proof):
        """Test that a proof survives encoding."""
        decoded = Proof.from_bytes(valid_proof.to_bytes())
        assert decoded.get_hash() == valid_proof.get_hash()
        assert verify_proof(pvk, decoded, [FR(15)]) is True

    def test_encoding_is_canonical_json(self, valid_proof):
        """Test that the encoding sorts keys."""
        data = valid_proof.to_bytes()
        assert data.startswith(b'{"a": ')
        assert b'"circuit_id": "quartic_polynomial"' in data


class TestValidatePublicInputs:
    """Test public input validation."""

    def test_accepts_field_elements_and_ints(self):
        """Test accepted input types."""
        assert validate_public_inputs([FR(15)], 1) == [FR(15)]
        assert validate_public_inputs([15], 1) == [FR(15)]

    @pytest.mark.parametrize("inputs", [[], [FR(1), FR(2)]])
    def test_wrong_arity(self, inputs):
        """Test that arity is enforced."""
        with pytest.raises(StructuralMismatch, match="Expected 1 public inputs"):
            validate_public_inputs(inputs, 1)

    @pytest.mark.parametrize("value", [-1, curve_order, "15", 1.0, True, None])
    def test_rejects_non_field_values(self, value):
        """Test that values outside the field are rejected."""
        with pytest.raises(StructuralMismatch, match="not a field element"):
            validate_public_inputs([value], 1)

    def test_rejects_non_sequence(self):
        """Test that a bare string is not a sequence of inputs."""
        with pytest.raises(StructuralMismatch):
            validate_public_inputs("15", 1)
