"""
Scalar field of the BN254 curve.

Field arithmetic is provided by py_ecc; this module only pins the modulus
to the curve order and parses numeric literals into field elements.
"""

from typing import Union

from py_ecc.fields import optimized_bn128_FQ as FQ
from py_ecc.optimized_bn128 import curve_order


class FR(FQ):
    """Element of the BN254 scalar field."""

    field_modulus = curve_order


def parse_field_element(literal: Union[str, int]) -> FR:
    """Parse a decimal or 0x-prefixed hex literal into a field element.

    Negative literals are reduced modulo the field order.
    """
    if isinstance(literal, bool):
        raise ValueError(f"Invalid field element literal: {literal!r}")
    if isinstance(literal, int):
        return FR(literal)

    text = literal.strip().replace("_", "")
    if not text:
        raise ValueError("Field element literal cannot be empty")

    try:
        negative = text.startswith("-")
        digits = text[1:] if text[0] in "+-" else text
        if not digits or digits[0] in "+-":
            raise ValueError("expected a single optional sign followed by digits")
        # int() also accepts other scripts' digits and inner whitespace
        if not digits.isascii() or digits != digits.strip():
            raise ValueError("only ASCII digits are allowed")
        if digits.lower().startswith("0x"):
            value = int(digits, 16)
        else:
            value = int(digits, 10)
    except ValueError as e:
        raise ValueError(f"Invalid field element literal {literal!r}: {e}")

    return FR(-value if negative else value)


def random_field_element(rng, nonzero: bool = True) -> FR:
    """Sample a field element from ``rng`` (anything with ``randrange``)."""
    low = 1 if nonzero else 0
    return FR(rng.randrange(low, curve_order))
