"""
Dense polynomial arithmetic over the scalar field.

Polynomials are coefficient lists, lowest degree first. The evaluation
domain for a system of ``m`` constraints is the points ``1, 2, ..., m``.
"""

from typing import List, Sequence, Tuple

from .field import FR

Poly = List[FR]


def trim(poly: Sequence[FR]) -> Poly:
    """Drop trailing zero coefficients."""
    out = list(poly)
    while out and out[-1] == 0:
        out.pop()
    return out


def add_polys(a: Sequence[FR], b: Sequence[FR]) -> Poly:
    out = [FR(0)] * max(len(a), len(b))
    for i, coeff in enumerate(a):
        out[i] = out[i] + coeff
    for i, coeff in enumerate(b):
        out[i] = out[i] + coeff
    return out


def subtract_polys(a: Sequence[FR], b: Sequence[FR]) -> Poly:
    return add_polys(a, [-coeff for coeff in b])


def scale_poly(poly: Sequence[FR], scalar: FR) -> Poly:
    return [coeff * scalar for coeff in poly]


def multiply_polys(a: Sequence[FR], b: Sequence[FR]) -> Poly:
    if not a or not b:
        return []
    out = [FR(0)] * (len(a) + len(b) - 1)
    for i, x in enumerate(a):
        if x == 0:
            continue
        for j, y in enumerate(b):
            out[i + j] = out[i + j] + x * y
    return out


def div_polys(a: Sequence[FR], b: Sequence[FR]) -> Tuple[Poly, Poly]:
    """Divide ``a`` by ``b``; returns ``(quotient, remainder)``."""
    divisor = trim(b)
    if not divisor:
        raise ZeroDivisionError("Polynomial division by zero")

    remainder = trim(a)
    if len(remainder) < len(divisor):
        return [], remainder

    quotient = [FR(0)] * (len(remainder) - len(divisor) + 1)
    lead_inv = FR(1) / divisor[-1]
    while len(remainder) >= len(divisor):
        factor = remainder[-1] * lead_inv
        shift = len(remainder) - len(divisor)
        quotient[shift] = factor
        for i, coeff in enumerate(divisor):
            remainder[shift + i] = remainder[shift + i] - factor * coeff
        remainder.pop()
        remainder = trim(remainder)
    return quotient, remainder


def eval_poly(poly: Sequence[FR], x: FR) -> FR:
    result = FR(0)
    for coeff in reversed(poly):
        result = result * x + coeff
    return result


def domain(size: int) -> List[FR]:
    return [FR(i) for i in range(1, size + 1)]


def vanishing_poly(points: Sequence[FR]) -> Poly:
    """``Z(X) = (X - p_1) * ... * (X - p_m)``."""
    poly: Poly = [FR(1)]
    for p in points:
        poly = multiply_polys(poly, [-p, FR(1)])
    return poly


def lagrange_basis_at(points: Sequence[FR], x: FR) -> List[FR]:
    """Values ``L_j(x)`` of every Lagrange basis polynomial over ``points``."""
    basis = []
    for j, pj in enumerate(points):
        numerator = FR(1)
        denominator = FR(1)
        for k, pk in enumerate(points):
            if k == j:
                continue
            numerator = numerator * (x - pk)
            denominator = denominator * (pj - pk)
        basis.append(numerator / denominator)
    return basis


def interpolate(points: Sequence[FR], values: Sequence[FR]) -> Poly:
    """Coefficients of the unique polynomial of degree < m through the points."""
    if len(points) != len(values):
        raise ValueError("points and values must have the same length")

    result: Poly = [FR(0)] * len(points)
    for j, (pj, value) in enumerate(zip(points, values)):
        if value == 0:
            continue
        basis: Poly = [FR(1)]
        denominator = FR(1)
        for k, pk in enumerate(points):
            if k == j:
                continue
            basis = multiply_polys(basis, [-pk, FR(1)])
            denominator = denominator * (pj - pk)
        result = add_polys(result, scale_poly(basis, value / denominator))
    return result
