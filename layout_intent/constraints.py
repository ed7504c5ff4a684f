"""Constraint values that define a box's geometry.

A constraint is either a leaf (a plain number, a :class:`Length` or an
:class:`UnknownLength`) or a :class:`DependentOperand`, an operation over
other constraints.  Dependencies are tracked by object identity: two
expressions with the same operands are still distinct graph nodes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional, Sequence, Tuple, Union

from .errors import ConstraintError
from .ids import DEFAULT_IDS, IdGenerator

Number = Union[int, float]


def _next_id(ids: Optional[IdGenerator]) -> int:
    return (ids or DEFAULT_IDS)()


class Unit(Enum):
    PX = "px"
    PCT = "%"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, eq=False)
class Length:
    """Immutable length leaf, e.g. ``200px`` or ``50%``."""

    value: float
    unit: Unit
    id: int = field(default_factory=DEFAULT_IDS)

    @classmethod
    def px(cls, value: float, *, ids: Optional[IdGenerator] = None) -> "Length":
        return cls(value, Unit.PX, id=_next_id(ids))

    @classmethod
    def pct(cls, value: float, *, ids: Optional[IdGenerator] = None) -> "Length":
        return cls(value, Unit.PCT, id=_next_id(ids))

    def clone(self, ids: Optional[IdGenerator] = None) -> "Length":
        return Length(self.value, self.unit, id=_next_id(ids))

    def __str__(self) -> str:
        value = self.value
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        return f"{value}{self.unit}"


# Unknowns in an HTML layout: text size, image size, containers sized by
# such children, and the screen itself.
@dataclass(frozen=True, eq=False)
class UnknownLength:
    """Opaque measurement that is never computed."""

    id: int = field(default_factory=DEFAULT_IDS)

    def clone(self, ids: Optional[IdGenerator] = None) -> "UnknownLength":
        raise ConstraintError(f"cannot clone unresolved length #{self.id}")

    def __str__(self) -> str:
        return "unknown"


class Operation(Enum):
    EQUALS = (",", "eq")
    ADD = ("+", None)
    SUBTRACT = ("-", None)
    MULTIPLY = ("*", None)
    DIVIDE = ("/", None)
    MAX = (",", "max")
    MIN = (",", "min")

    @property
    def operator(self) -> str:
        return self.value[0]

    @property
    def prefix(self) -> Optional[str]:
        return self.value[1]


@dataclass(frozen=True, eq=False)
class DependentOperand:
    """Derived constraint: ``operation`` applied to ordered ``operands``."""

    operation: Operation
    operands: Tuple["Constraint", ...]
    id: int = field(default_factory=DEFAULT_IDS)

    def __post_init__(self) -> None:
        object.__setattr__(self, "operands", tuple(self.operands))

    @classmethod
    def of(
        cls,
        operation: Operation,
        operands: Iterable["Constraint"],
        *,
        ids: Optional[IdGenerator] = None,
    ) -> "DependentOperand":
        return cls(operation, tuple(operands), id=_next_id(ids))

    def clone(self, ids: Optional[IdGenerator] = None) -> "DependentOperand":
        # Operands are shared, so existing dependency edges survive the clone.
        return DependentOperand(self.operation, self.operands, id=_next_id(ids))

    def clone_and_replace_operands(
        self,
        replacements: Iterable[Tuple["Constraint", "Constraint"]],
        ids: Optional[IdGenerator] = None,
    ) -> "DependentOperand":
        operands = list(self.operands)
        for old, new in replacements:
            hits = [idx for idx, operand in enumerate(operands) if operand is old]
            if not hits:
                raise ConstraintError(
                    f"operand {constraint_to_string(old)} not found in {self}"
                )
            for idx in hits:
                operands[idx] = new
        return DependentOperand(self.operation, tuple(operands), id=_next_id(ids))

    def clone_and_replace_operand(
        self,
        old: "Constraint",
        new: "Constraint",
        ids: Optional[IdGenerator] = None,
    ) -> "DependentOperand":
        return self.clone_and_replace_operands([(old, new)], ids=ids)

    def __str__(self) -> str:
        rendered = self.operation.operator.join(
            _render_operand(operand) for operand in self.operands
        )
        if self.operation.prefix:
            rendered = f"{self.operation.prefix}({rendered})"
        return rendered


# There must be no circular dependency between DependentOperands.
Constraint = Union[int, float, Length, UnknownLength, DependentOperand]

LEAF_TYPES = (int, float, Length, UnknownLength)


def _render_operand(operand: "Constraint") -> str:
    if isinstance(operand, DependentOperand) and operand.operation.prefix is None:
        return f"({operand})"
    return str(operand)


def is_leaf(constraint: Constraint) -> bool:
    if isinstance(constraint, bool):
        raise ConstraintError("booleans are not constraints")
    if isinstance(constraint, LEAF_TYPES):
        return True
    if isinstance(constraint, DependentOperand):
        return False
    raise ConstraintError(f"not a constraint: {constraint!r}")


def clone_constraint(constraint: Constraint, ids: Optional[IdGenerator] = None) -> Constraint:
    if isinstance(constraint, (int, float)):
        # immutable
        return constraint
    if isinstance(constraint, (Length, UnknownLength, DependentOperand)):
        return constraint.clone(ids)
    raise ConstraintError(f"not a constraint: {constraint!r}")


def _contains(operands: Sequence[Constraint], target: Constraint) -> bool:
    return any(operand is target for operand in operands)


def constraint_directly_depends_on(constraint: Constraint, dependency: Constraint) -> bool:
    # Nothing depends on itself.
    if constraint is dependency:
        return False
    if is_leaf(constraint):
        return False
    return _contains(constraint.operands, dependency)


def constraint_depends_on(constraint: Constraint, dependency: Constraint) -> bool:
    """Transitive closure of :func:`constraint_directly_depends_on`."""

    if constraint is dependency or is_leaf(constraint):
        return False
    # Shared sub-expressions are walked once.
    seen = {id(constraint)}
    stack = [constraint]
    while stack:
        node = stack.pop()
        for operand in node.operands:
            if operand is dependency:
                return True
            if isinstance(operand, DependentOperand) and id(operand) not in seen:
                seen.add(id(operand))
                stack.append(operand)
    return False


def constraint_to_string(constraint: Optional[Constraint]) -> str:
    if constraint is None:
        return "null"
    return str(constraint)


__all__ = [
    "Number",
    "Unit",
    "Length",
    "UnknownLength",
    "Operation",
    "DependentOperand",
    "Constraint",
    "LEAF_TYPES",
    "is_leaf",
    "clone_constraint",
    "constraint_directly_depends_on",
    "constraint_depends_on",
    "constraint_to_string",
]
