"""
Unit tests for the command-line entry point.
"""

import pytest

from polyzk.cli import EXIT_ERROR, EXIT_INVALID, EXIT_VALID, build_parser, main


class TestParser:
    """Test argument parsing."""

    def test_defaults(self):
        """Test that defaults reproduce the reference scenario."""
        args = build_parser().parse_args([])
        assert (args.a, args.b, args.c, args.d) == ("2", "3", "4", "5")
        assert args.x == "15"
        assert args.w == "1"
        assert args.backend == "groth16"
        assert args.setup_from_populated is False
        assert args.seed is None

    def test_unknown_backend(self):
        """Test that argparse rejects unknown backends."""
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--backend", "plonk"])


class TestMain:
    """Test end-to-end CLI runs on the mock backend."""

    def test_valid(self, capsys):
        """Test the valid witness message and exit code."""
        assert main(["--backend", "mock"]) == EXIT_VALID
        assert "Proof is valid. Alice knows a valid 'w'." in capsys.readouterr().out

    def test_invalid(self, capsys):
        """Test the invalid witness message and exit code."""
        assert main(["--backend", "mock", "--w", "2"]) == EXIT_INVALID
        assert "Proof is invalid." in capsys.readouterr().out

    def test_hex_and_negative_literals(self, capsys):
        """Test literal parsing for a non-default relation."""
        # w = -1: 1 - a + b - c + d = 1 - 16 + 3 - 4 + 5 = -11
        args = ["--backend", "mock", "--a", "0x10", "--w", "-1", "--x", "-11"]
        assert main(args) == EXIT_VALID

    def test_setup_from_populated(self):
        """Test populated-circuit compilation."""
        assert main(["--backend", "mock", "--setup-from-populated"]) == EXIT_VALID

    def test_bad_literal(self, capsys):
        """Test that malformed literals exit with the error code."""
        assert main(["--backend", "mock", "--x", "fifteen"]) == EXIT_ERROR
        assert "Error:" in capsys.readouterr().err

    @pytest.mark.slow
    def test_groth16_seeded(self, capsys):
        """Test the default backend with a deterministic seed."""
        assert main(["--seed", "7"]) == EXIT_VALID
        assert "Proof is valid." in capsys.readouterr().out
