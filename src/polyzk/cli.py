"""
Command-line entry point.

Runs the quartic polynomial proof end to end and reports whether the proof
verified. Exit codes: 0 valid, 1 invalid, 2 error.
"""

import argparse
import logging
import random
import sys
from typing import List, Optional

from .circuits import PolynomialCircuit, PolynomialCoefficients
from .core import ZKPConfig, ZKPError, ZKPType
from .field import parse_field_element
from .workflow import ProofWorkflow

logger = logging.getLogger(__name__)

EXIT_VALID = 0
EXIT_INVALID = 1
EXIT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="polyzk",
        description="Prove knowledge of w with x = w^4 + a*w^3 + b*w^2 + c*w + d",
    )
    parser.add_argument("--a", default="2", help="Coefficient of w^3")
    parser.add_argument("--b", default="3", help="Coefficient of w^2")
    parser.add_argument("--c", default="4", help="Coefficient of w")
    parser.add_argument("--d", default="5", help="Constant term")
    parser.add_argument("--x", default="15", help="Public value")
    parser.add_argument("--w", default="1", help="Secret witness")
    parser.add_argument(
        "--backend",
        choices=[t.value for t in ZKPType],
        default=ZKPType.GROTH16.value,
        help="Proof system backend",
    )
    parser.add_argument(
        "--setup-from-populated",
        action="store_true",
        help="Compile keys from the populated circuit instead of the skeleton",
    )
    parser.add_argument("--seed", type=int, help="Seed a deterministic RNG (testing only)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    try:
        coefficients = PolynomialCoefficients(
            a=parse_field_element(args.a),
            b=parse_field_element(args.b),
            c=parse_field_element(args.c),
            d=parse_field_element(args.d),
        )
        x = parse_field_element(args.x)
        w = parse_field_element(args.w)

        config = ZKPConfig(
            backend_type=ZKPType(args.backend),
            setup_from_skeleton=not args.setup_from_populated,
        )
        rng = random.Random(args.seed) if args.seed is not None else None
        workflow = ProofWorkflow(config, rng=rng)

        result = workflow.run(PolynomialCircuit.for_prover(coefficients, x, w))
    except (ValueError, ZKPError) as e:
        logger.debug("Proof run failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    if result.is_valid:
        print("Proof is valid. Alice knows a valid 'w'.")
        return EXIT_VALID
    print("Proof is invalid.")
    return EXIT_INVALID


if __name__ == "__main__":
    sys.exit(main())
