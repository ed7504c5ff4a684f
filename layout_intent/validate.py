from typing import List, Set, Tuple

from .constraints import DependentOperand, Length, UnknownLength
from .errors import LayoutError
from .graph import find_dependency_cycle
from .layout import Layout


class ValidationError(LayoutError):
    def __init__(self, problems: List[str]):
        super().__init__("; ".join(problems))
        self.problems = problems


def _check_operands(layout: Layout, problems: List[str]) -> None:
    for prop in layout.properties():
        constraint = prop.constraint
        if not isinstance(constraint, DependentOperand):
            continue
        where = f"{prop.box.label}.{prop.slot.value}"
        for operand in constraint.operands:
            if isinstance(operand, (int, float)):
                continue
            if layout.get_property_for_constraint(operand) is not None:
                continue
            if layout.is_retired(operand):
                problems.append(f"{where} references removed constraint #{operand.id}")
            elif isinstance(operand, DependentOperand):
                # Dependency queries only look one level down, so an unbound
                # sub-expression would hide what it references.
                problems.append(f"{where} has unbound sub-expression {operand}")
            elif not isinstance(operand, (Length, UnknownLength)):
                problems.append(f"{where} has non-constraint operand {operand!r}")


def validate_layout(layout: Layout) -> None:
    problems: List[str] = []
    slots: Set[Tuple[int, str]] = set()

    for prop in layout.properties():
        if not layout.has_box(prop.box):
            problems.append(f"property {prop} belongs to a box outside the layout")
        key = (id(prop.box), prop.slot.value)
        if key in slots:
            problems.append(f"{prop.box.label} has more than one {prop.slot.value} binding")
        slots.add(key)

    _check_operands(layout, problems)

    cycle = find_dependency_cycle(layout)
    if cycle:
        # str() would recurse forever on a cycle.
        problems.append("circular dependency: " + " -> ".join(f"#{node.id}" for node in cycle))

    if problems:
        raise ValidationError(problems)
