"""
Setup, prove and verify sequencing.

``ProofWorkflow`` owns one randomness source per session and drives a
backend through the three lifecycle steps of a proof.
"""

import logging
import secrets
import time
from typing import Any, Optional, Sequence

from .backends import create_backend
from .circuits import ZKCircuit
from .core import AssignmentMissing, Keypair, WorkflowResult, ZKPBackend, ZKPConfig

logger = logging.getLogger(__name__)


class ProofWorkflow:
    """Drives a backend through setup -> prove -> verify."""

    def __init__(self, config: Optional[ZKPConfig] = None,
                 backend: Optional[ZKPBackend] = None, rng=None):
        self.config = config or ZKPConfig()
        self.config.validate()
        self.backend = backend or create_backend(self.config)
        self.rng = rng if rng is not None else secrets.SystemRandom()

    def setup(self, circuit: ZKCircuit) -> Keypair:
        """Compile a keypair for the circuit's topology."""
        target = circuit.skeleton() if self.config.setup_from_skeleton else circuit
        return self.backend.compile(target, self.rng)

    def prove(self, circuit: ZKCircuit, proving_key: Any) -> Any:
        return self.backend.prove(circuit, proving_key, self.rng)

    def verify(self, verification_key: Any, public_inputs: Sequence[Any], proof: Any) -> bool:
        return self.backend.verify(verification_key, public_inputs, proof)

    def run(self, circuit: ZKCircuit,
            public_inputs: Optional[Sequence[Any]] = None) -> WorkflowResult:
        """Run the full lifecycle for one circuit instance.

        Public inputs default to the circuit's own public value.
        """
        if public_inputs is None:
            public_value = getattr(circuit, "public_value", None)
            if public_value is None:
                raise AssignmentMissing("Public value x was not supplied", {"variable": "x"})
            public_inputs = [public_value]

        start_time = time.time()
        keypair = self.setup(circuit)
        setup_time = time.time() - start_time

        start_time = time.time()
        proof = self.prove(circuit, keypair.proving_key)
        proving_time = time.time() - start_time

        start_time = time.time()
        is_valid = self.verify(keypair.verification_key, public_inputs, proof)
        verification_time = time.time() - start_time

        logger.info(
            f"Workflow for {circuit.circuit_id} finished: valid={is_valid}, "
            f"setup={setup_time:.3f}s prove={proving_time:.3f}s "
            f"verify={verification_time:.3f}s"
        )

        return WorkflowResult(
            is_valid=is_valid,
            proof=proof,
            public_inputs=list(public_inputs),
            setup_time=setup_time,
            proving_time=proving_time,
            verification_time=verification_time,
            metadata={
                "backend": self.backend.zkp_type.value,
                "circuit_id": circuit.circuit_id,
                **keypair.parameters,
            },
        )
