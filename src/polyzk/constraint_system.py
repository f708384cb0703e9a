"""
Rank-1 constraint systems.

This module provides variable handles, linear combinations and the
constraint-system builders a circuit synthesizes into. Every constraint has
the form ``<a, z> * <b, z> = <c, z>`` where ``z`` is the full assignment
``[1, inputs..., aux...]``.
"""

import hashlib
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Set, Tuple, Union

from .core import AssignmentMissing
from .field import FR

logger = logging.getLogger(__name__)

ValueProvider = Callable[[], FR]


class VariableKind(Enum):
    """Which half of the assignment a variable lives in."""

    INPUT = "input"
    AUX = "aux"


@dataclass(frozen=True)
class Variable:
    """Handle to a slot in a constraint system. Carries no value."""

    index: int
    kind: VariableKind

    @staticmethod
    def one() -> "Variable":
        """The constant-one input variable."""
        return Variable(0, VariableKind.INPUT)


def _as_field(value: Union[FR, int]) -> FR:
    if isinstance(value, FR):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return FR(value)
    raise TypeError(f"Expected a field element or int, got {type(value).__name__}")


class LinearCombination:
    """Ordered sum of ``coefficient * variable`` terms."""

    def __init__(self, terms: Optional[Sequence[Tuple[FR, Variable]]] = None):
        self.terms: List[Tuple[FR, Variable]] = list(terms or [])

    @classmethod
    def zero(cls) -> "LinearCombination":
        return cls()

    def _term(self, other) -> List[Tuple[FR, Variable]]:
        if isinstance(other, Variable):
            return [(FR(1), other)]
        if isinstance(other, tuple) and len(other) == 2 and isinstance(other[1], Variable):
            return [(_as_field(other[0]), other[1])]
        if isinstance(other, LinearCombination):
            return list(other.terms)
        raise TypeError(f"Cannot combine {type(other).__name__} with a linear combination")

    def __add__(self, other) -> "LinearCombination":
        return LinearCombination(self.terms + self._term(other))

    def __sub__(self, other) -> "LinearCombination":
        negated = [(-coeff, var) for coeff, var in self._term(other)]
        return LinearCombination(self.terms + negated)

    def __iter__(self) -> Iterator[Tuple[FR, Variable]]:
        return iter(self.terms)

    def __len__(self) -> int:
        return len(self.terms)

    def __repr__(self) -> str:
        parts = [f"{int(coeff)}*{var.kind.value}[{var.index}]" for coeff, var in self.terms]
        return "LinearCombination(" + " + ".join(parts) + ")"

    def compact(self) -> Dict[Variable, FR]:
        """Merge repeated variables and drop zero coefficients."""
        merged: Dict[Variable, FR] = {}
        for coeff, var in self.terms:
            merged[var] = merged.get(var, FR(0)) + coeff
        return {var: coeff for var, coeff in merged.items() if coeff != 0}

    def evaluate(self, inputs: Sequence[FR], aux: Sequence[FR]) -> FR:
        """Evaluate against an assignment."""
        total = FR(0)
        for coeff, var in self.terms:
            if var.kind is VariableKind.INPUT:
                total = total + coeff * inputs[var.index]
            else:
                total = total + coeff * aux[var.index]
        return total


def as_linear_combination(value: Union[LinearCombination, Variable]) -> LinearCombination:
    if isinstance(value, LinearCombination):
        return value
    return LinearCombination.zero() + value


@dataclass
class Constraint:
    """Named multiplication constraint ``a * b = c``."""

    name: str
    a: LinearCombination
    b: LinearCombination
    c: LinearCombination


SparseRow = Dict[int, FR]


class ConstraintSystem(ABC):
    """Builder interface a circuit synthesizes into."""

    @staticmethod
    def one() -> Variable:
        return Variable.one()

    @abstractmethod
    def alloc_input(self, name: str, value_fn: ValueProvider) -> Variable:
        """Allocate a public input variable."""
        pass

    @abstractmethod
    def alloc(self, name: str, value_fn: ValueProvider) -> Variable:
        """Allocate a private (auxiliary) variable."""
        pass

    @abstractmethod
    def enforce(self, name: str, a, b, c) -> None:
        """Register the constraint ``a * b = c``."""
        pass


class R1CSRecorder(ConstraintSystem):
    """Records constraint topology; subclasses decide what to do with values."""

    def __init__(self):
        self.input_names: List[str] = ["ONE"]
        self.aux_names: List[str] = []
        self.constraints: List[Constraint] = []
        self._names: Set[str] = {"ONE"}

    @property
    def num_inputs(self) -> int:
        """Number of input variables, including the constant one."""
        return len(self.input_names)

    @property
    def num_aux(self) -> int:
        return len(self.aux_names)

    @property
    def num_variables(self) -> int:
        return self.num_inputs + self.num_aux

    @property
    def num_constraints(self) -> int:
        return len(self.constraints)

    def _claim(self, name: str) -> None:
        if not name:
            raise ValueError("name cannot be empty")
        if name in self._names:
            raise ValueError(f"Name {name} already exists in constraint system")
        self._names.add(name)

    def _assign_input(self, name: str, value_fn: ValueProvider) -> None:
        pass

    def _assign_aux(self, name: str, value_fn: ValueProvider) -> None:
        pass

    def alloc_input(self, name: str, value_fn: ValueProvider) -> Variable:
        self._claim(name)
        self._assign_input(name, value_fn)
        self.input_names.append(name)
        return Variable(len(self.input_names) - 1, VariableKind.INPUT)

    def alloc(self, name: str, value_fn: ValueProvider) -> Variable:
        self._claim(name)
        self._assign_aux(name, value_fn)
        self.aux_names.append(name)
        return Variable(len(self.aux_names) - 1, VariableKind.AUX)

    def enforce(self, name: str, a, b, c) -> None:
        self._claim(name)
        constraint = Constraint(
            name=name,
            a=as_linear_combination(a),
            b=as_linear_combination(b),
            c=as_linear_combination(c),
        )
        for lc in (constraint.a, constraint.b, constraint.c):
            for _, var in lc:
                self._check_variable(var)
        self.constraints.append(constraint)

    def _check_variable(self, var: Variable) -> None:
        limit = self.num_inputs if var.kind is VariableKind.INPUT else self.num_aux
        if not 0 <= var.index < limit:
            raise ValueError(f"Variable {var} not allocated in constraint system")

    def column(self, var: Variable) -> int:
        """Position of a variable in the full assignment vector."""
        if var.kind is VariableKind.INPUT:
            return var.index
        return self.num_inputs + var.index

    def to_matrices(self) -> Tuple[List[SparseRow], List[SparseRow], List[SparseRow]]:
        """Sparse A, B, C rows indexed by assignment column."""
        rows_a, rows_b, rows_c = [], [], []
        for constraint in self.constraints:
            rows_a.append({self.column(v): k for v, k in constraint.a.compact().items()})
            rows_b.append({self.column(v): k for v, k in constraint.b.compact().items()})
            rows_c.append({self.column(v): k for v, k in constraint.c.compact().items()})
        return rows_a, rows_b, rows_c

    def fingerprint(self) -> str:
        """SHA-256 over the canonical topology, coefficients included."""
        rows_a, rows_b, rows_c = self.to_matrices()

        def encode(rows: List[SparseRow]) -> List[List[List[str]]]:
            return [
                [[str(col), str(int(coeff))] for col, coeff in sorted(row.items())]
                for row in rows
            ]

        data = {
            "num_inputs": self.num_inputs,
            "num_aux": self.num_aux,
            "a": encode(rows_a),
            "b": encode(rows_b),
            "c": encode(rows_c),
        }
        return hashlib.sha256(json.dumps(data, sort_keys=True).encode("utf-8")).hexdigest()


class KeypairAssembly(R1CSRecorder):
    """Collects topology for key generation. Value providers are never called."""


class ProvingAssignment(R1CSRecorder):
    """Collects topology and evaluates every value provider."""

    def __init__(self):
        super().__init__()
        self.input_assignment: List[FR] = [FR(1)]
        self.aux_assignment: List[FR] = []

    @staticmethod
    def _evaluate(name: str, value_fn: ValueProvider) -> FR:
        value = value_fn()
        if value is None:
            raise AssignmentMissing(f"No value supplied for {name}", {"variable": name})
        return _as_field(value)

    def _assign_input(self, name: str, value_fn: ValueProvider) -> None:
        self.input_assignment.append(self._evaluate(name, value_fn))

    def _assign_aux(self, name: str, value_fn: ValueProvider) -> None:
        self.aux_assignment.append(self._evaluate(name, value_fn))

    @property
    def full_assignment(self) -> List[FR]:
        return self.input_assignment + self.aux_assignment

    def evaluate_constraints(self) -> List[Tuple[FR, FR, FR]]:
        """Values of ``<a,z>``, ``<b,z>``, ``<c,z>`` for every constraint."""
        inputs, aux = self.input_assignment, self.aux_assignment
        return [
            (c.a.evaluate(inputs, aux), c.b.evaluate(inputs, aux), c.c.evaluate(inputs, aux))
            for c in self.constraints
        ]


class SatisfactionChecker(ProvingAssignment):
    """Proving assignment that can report unsatisfied constraints."""

    def which_is_unsatisfied(self) -> Optional[str]:
        """Name of the first unsatisfied constraint, or None."""
        for constraint, (a, b, c) in zip(self.constraints, self.evaluate_constraints()):
            if a * b != c:
                logger.debug(f"Constraint '{constraint.name}' is unsatisfied")
                return constraint.name
        return None

    def is_satisfied(self) -> bool:
        return self.which_is_unsatisfied() is None
