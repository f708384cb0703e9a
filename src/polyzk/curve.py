"""
BN254 group helpers on top of py_ecc.

Points are py_ecc projective triples. The point at infinity is encoded
as ``None`` in serialized form.
"""

from typing import List, Optional, Sequence

from py_ecc.optimized_bn128 import (
    FQ,
    FQ2,
    G1,
    G2,
    Z1,
    Z2,
    add,
    b,
    b2,
    curve_order,
    eq,
    field_modulus,
    is_inf,
    is_on_curve,
    multiply,
    neg,
    normalize,
)

from .core import StructuralMismatch
from .field import FR

__all__ = [
    "G1",
    "G2",
    "Z1",
    "Z2",
    "add",
    "neg",
    "eq",
    "g1",
    "g2",
    "scalar_mul",
    "multi_scalar_mul",
    "encode_g1",
    "decode_g1",
    "encode_g2",
    "decode_g2",
    "check_g1",
    "check_g2",
]

COORDINATE_BYTES = 32


def g1(scalar: FR):
    """``scalar * G1``."""
    return multiply(G1, int(scalar))


def g2(scalar: FR):
    """``scalar * G2``."""
    return multiply(G2, int(scalar))


def scalar_mul(point, scalar: FR):
    return multiply(point, int(scalar) % curve_order)


def multi_scalar_mul(points: Sequence, scalars: Sequence[FR], zero):
    """``sum(s_i * P_i)``; zero scalars are skipped."""
    if len(points) != len(scalars):
        raise StructuralMismatch(
            f"Expected {len(points)} scalars, got {len(scalars)}",
            {"expected": len(points), "actual": len(scalars)},
        )
    acc = zero
    for point, scalar in zip(points, scalars):
        if scalar == 0 or is_inf(point):
            continue
        acc = add(acc, scalar_mul(point, scalar))
    return acc


def check_g1(point, label: str = "point") -> None:
    if not is_on_curve(point, b):
        raise StructuralMismatch(f"{label} is not on the G1 curve")


def check_g2(point, label: str = "point", subgroup: bool = False) -> None:
    if not is_on_curve(point, b2):
        raise StructuralMismatch(f"{label} is not on the G2 curve")
    if subgroup and not is_inf(multiply(point, curve_order)):
        raise StructuralMismatch(f"{label} is not in the G2 subgroup")


def _encode_int(value: int) -> str:
    return int(value).to_bytes(COORDINATE_BYTES, "big").hex()


def _decode_int(text, label: str) -> int:
    if not isinstance(text, str) or len(text) != 2 * COORDINATE_BYTES:
        raise StructuralMismatch(f"{label} has an invalid coordinate encoding")
    try:
        value = int(text, 16)
    except ValueError:
        raise StructuralMismatch(f"{label} has a non-hex coordinate")
    if value >= field_modulus:
        raise StructuralMismatch(f"{label} coordinate exceeds the field modulus")
    return value


def encode_g1(point) -> Optional[List[str]]:
    if is_inf(point):
        return None
    x, y = normalize(point)
    return [_encode_int(x), _encode_int(y)]


def decode_g1(data, label: str = "G1 point"):
    if data is None:
        return Z1
    if not isinstance(data, list) or len(data) != 2:
        raise StructuralMismatch(f"{label} must be a pair of coordinates")
    point = (FQ(_decode_int(data[0], label)), FQ(_decode_int(data[1], label)), FQ.one())
    check_g1(point, label)
    return point


def encode_g2(point) -> Optional[List[List[str]]]:
    if is_inf(point):
        return None
    x, y = normalize(point)
    return [[_encode_int(c) for c in x.coeffs], [_encode_int(c) for c in y.coeffs]]


def decode_g2(data, label: str = "G2 point", subgroup: bool = False):
    if data is None:
        return Z2
    if (not isinstance(data, list) or len(data) != 2
            or not all(isinstance(part, list) and len(part) == 2 for part in data)):
        raise StructuralMismatch(f"{label} must be a pair of FQ2 coordinates")
    x = FQ2([_decode_int(c, label) for c in data[0]])
    y = FQ2([_decode_int(c, label) for c in data[1]])
    point = (x, y, FQ2.one())
    check_g2(point, label, subgroup=subgroup)
    return point
