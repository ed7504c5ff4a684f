"""Boxes and the layout graph that owns their geometric properties.

The :class:`Layout` is the only owner of boxes and properties.  A
:class:`Box` keeps a weak reference back to its layout and resolves its
``x``/``y``/``w``/``h`` through the layout's property table, so the box
itself never holds a constraint once it is bound.
"""

from __future__ import annotations

import logging
import weakref
from collections import defaultdict
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Iterable, List, Optional, Set, Tuple

import networkx as nx

from .constraints import (
    Constraint,
    DependentOperand,
    constraint_depends_on,
    constraint_directly_depends_on,
    constraint_to_string,
    is_leaf,
)
from .errors import (
    BoxNotInLayoutError,
    ConstraintError,
    DanglingDependentError,
    DuplicateBoxError,
    DuplicateConstraintError,
    LayoutError,
    ReplacementError,
)
from .ids import DEFAULT_IDS, IdGenerator
from .logging_utils import debug_log_call
from .printer import Repr

logger = logging.getLogger(__name__)


class Slot(Enum):
    X = "x"
    Y = "y"
    W = "w"
    H = "h"


SLOTS: Tuple[Slot, ...] = (Slot.X, Slot.Y, Slot.W, Slot.H)


@dataclass
class Style:
    """Non-geometric flags read by patterns only."""

    background: Optional[str] = None
    image: Optional[str] = None
    font_size: Optional[str] = None


@dataclass(frozen=True, eq=False)
class Property:
    box: "Box"
    slot: Slot
    constraint: Constraint

    def with_constraint(self, constraint: Constraint) -> "Property":
        return replace(self, constraint=constraint)

    def __str__(self) -> str:
        return f"{self.box.label}.{self.slot.value} = {constraint_to_string(self.constraint)}"


class Box:
    kind = "box"

    def __init__(self, style: Optional[Style] = None, *, ids: Optional[IdGenerator] = None):
        self.id = (ids or DEFAULT_IDS)()
        self.style = style if style is not None else Style()
        self._layout_ref: Optional["weakref.ReferenceType[Layout]"] = None
        # Constraints set before the box joins a layout.
        self._pending: Dict[Slot, Constraint] = {}

    @property
    def label(self) -> str:
        return f"{self.kind}#{self.id}"

    @property
    def layout(self) -> "Layout":
        layout = self._layout_ref() if self._layout_ref is not None else None
        if layout is None:
            raise BoxNotInLayoutError(f"{self.label} is not in a layout")
        return layout

    @property
    def is_bound(self) -> bool:
        return self._layout_ref is not None and self._layout_ref() is not None

    # Only Layout calls these two.
    def _attach(self, layout: "Layout") -> Dict[Slot, Constraint]:
        if self.is_bound:
            raise LayoutError(f"{self.label} already belongs to another layout")
        self._layout_ref = weakref.ref(layout)
        pending, self._pending = self._pending, {}
        return pending

    def _detach(self) -> None:
        self._layout_ref = None

    def get(self, slot: Slot) -> Optional[Constraint]:
        if not self.is_bound:
            return self._pending.get(slot)
        return self.layout.get_constraint(self, slot)

    def set(self, slot: Slot, constraint: Optional[Constraint]) -> "Box":
        if not self.is_bound:
            if constraint is None:
                self._pending.pop(slot, None)
            else:
                self._pending[slot] = constraint
            return self
        self.layout.set_constraint(self, slot, constraint)
        return self

    def get_x(self) -> Optional[Constraint]:
        return self.get(Slot.X)

    def get_y(self) -> Optional[Constraint]:
        return self.get(Slot.Y)

    def get_w(self) -> Optional[Constraint]:
        return self.get(Slot.W)

    def get_h(self) -> Optional[Constraint]:
        return self.get(Slot.H)

    def set_x(self, constraint: Optional[Constraint]) -> "Box":
        return self.set(Slot.X, constraint)

    def set_y(self, constraint: Optional[Constraint]) -> "Box":
        return self.set(Slot.Y, constraint)

    def set_w(self, constraint: Optional[Constraint]) -> "Box":
        return self.set(Slot.W, constraint)

    def set_h(self, constraint: Optional[Constraint]) -> "Box":
        return self.set(Slot.H, constraint)

    def constraints(self) -> List[Constraint]:
        found: List[Constraint] = []
        for slot in SLOTS:
            constraint = self.get(slot)
            if constraint is not None:
                found.append(constraint)
        return found

    def constraints_to_string(self) -> str:
        parts = []
        for slot in SLOTS:
            constraint = self.get(slot)
            if constraint is not None and self.is_bound:
                rendered = self.layout.describe_constraint(constraint)
            else:
                rendered = constraint_to_string(constraint)
            parts.append(f"{slot.value}: {rendered}")
        return ", ".join(parts)

    def to_repr(self) -> Repr:
        return Repr(str(self))

    def __str__(self) -> str:
        return f"{self.label} ({self.constraints_to_string()})"

    def __repr__(self) -> str:
        return f"<{type(self).__name__} #{self.id}>"


class Layout:
    """Arena of boxes plus the table of their property bindings."""

    def __init__(self, ids: Optional[IdGenerator] = None):
        self.ids = ids or DEFAULT_IDS
        self._boxes: Dict[int, Box] = {}
        # Insertion ordered; keyed by the identity of the bound constraint.
        self._properties: Dict[int, Property] = {}
        # Current binding per (box, slot).
        self._slots: Dict[Tuple[int, Slot], Property] = {}
        self._retired: "weakref.WeakSet[Constraint]" = weakref.WeakSet()

    # ------------------------------------------------------------------
    # boxes

    def get_boxes(self) -> List[Box]:
        return list(self._boxes.values())

    def has_box(self, box: Box) -> bool:
        return self._boxes.get(id(box)) is box

    def add_box(self, box: Box) -> None:
        if self.has_box(box):
            raise DuplicateBoxError(f"{box.label} is already in the layout")
        for constraint in box._pending.values():
            self._check_bindable(constraint)
        pending = box._attach(self)
        self._boxes[id(box)] = box
        for slot in SLOTS:
            if slot in pending:
                self._add_property(Property(box, slot, pending[slot]))
        logger.debug("Added %s with %d constraint(s)", box.label, len(pending))

    @debug_log_call(logger, log_result=False)
    def remove_box(self, box: Box) -> None:
        self._require_box(box)
        props = self.get_properties_for_box(box)
        for prop in props:
            for dependent in self.get_properties_directly_dependent_on(prop.constraint):
                if dependent.box is not box:
                    raise DanglingDependentError(
                        box,
                        prop.constraint,
                        f"{dependent.box.label}.{dependent.slot.value} depends on "
                        f"{box.label}.{prop.slot.value}",
                    )
        for prop in props:
            self._drop_property(prop)
        del self._boxes[id(box)]
        box._detach()
        logger.debug("Removed %s and %d propert(ies)", box.label, len(props))

    # ------------------------------------------------------------------
    # lookups

    def properties(self) -> List[Property]:
        return list(self._properties.values())

    def get_properties_for_box(self, box: Box) -> List[Property]:
        return [prop for prop in self._properties.values() if prop.box is box]

    def get_property_for_constraint(self, constraint: Constraint) -> Optional[Property]:
        prop = self._properties.get(id(constraint))
        if prop is None or prop.constraint is not constraint:
            return None
        return prop

    def get_box_for_constraint(self, constraint: Constraint) -> Optional[Box]:
        prop = self.get_property_for_constraint(constraint)
        return prop.box if prop is not None else None

    def get_constraint(self, box: Box, slot: Slot) -> Optional[Constraint]:
        prop = self._slots.get((id(box), slot))
        return prop.constraint if prop is not None else None

    def get_properties_directly_dependent_on(self, constraint: Constraint) -> List[Property]:
        return [
            prop
            for prop in self._properties.values()
            if constraint_directly_depends_on(prop.constraint, constraint)
        ]

    def is_retired(self, constraint: Constraint) -> bool:
        return constraint in self._retired and self.get_property_for_constraint(constraint) is None

    # ------------------------------------------------------------------
    # mutation

    def set_constraint(self, box: Box, slot: Slot, constraint: Optional[Constraint]) -> None:
        self._require_box(box)
        current = self.get_constraint(box, slot)
        if current is constraint:
            return
        if current is not None:
            self.replace_constraint(current, constraint)
        elif constraint is not None:
            self._add_property(Property(box, slot, constraint))

    @debug_log_call(logger, log_result=False)
    def replace_constraint(self, old: Constraint, new: Optional[Constraint]) -> int:
        """Rebind ``old`` to ``new`` and path-copy every expression above it.

        Each live expression that transitively references ``old`` is cloned
        once, with its rewritten operands in place.  ``new=None`` drops the
        binding and is only legal when nothing depends on ``old``.  Returns
        the number of expressions cloned.
        """

        return self.replace_constraints([(old, new)])

    @debug_log_call(logger, log_result=False)
    def replace_constraints(
        self, replacements: Iterable[Tuple[Constraint, Optional[Constraint]]]
    ) -> int:
        """Apply several rebindings in one pass.

        Affected expressions are rewritten in dependency order, operands
        first, and each original gets exactly one clone.  Every new binding
        is inserted before any old one is dropped.  Nothing is mutated when
        a check fails.
        """

        pairs = list(replacements)
        users = self._users()
        replaced = {id(old) for old, _ in pairs}

        seeds: Dict[int, Tuple[Property, Optional[Constraint]]] = {}
        bound_new: Set[int] = set()
        for old, new in pairs:
            if new is None:
                blocking = [
                    user for user in users.get(id(old), ()) if id(user.constraint) not in replaced
                ]
                if blocking:
                    raise ReplacementError(
                        f"cannot drop {constraint_to_string(old)}: "
                        f"{len(blocking)} dependent(s) still reference it"
                    )
            old_prop = self.get_property_for_constraint(old)
            if old_prop is None:
                raise LayoutError(f"{constraint_to_string(old)} is not bound in this layout")
            if id(old) in seeds:
                raise LayoutError(f"{constraint_to_string(old)} is replaced twice")
            if new is not None:
                self._check_bindable(new)
                if id(new) in bound_new:
                    raise DuplicateConstraintError(
                        f"{constraint_to_string(new)} replaces more than one constraint"
                    )
                bound_new.add(id(new))
                if constraint_depends_on(new, old):
                    raise ConstraintError(
                        f"replacement {new} may not depend on the constraint it replaces"
                    )
            seeds[id(old)] = (old_prop, new)

        # Edges run operand -> dependent, so a topological order rewrites
        # operands before the expressions that read them.
        graph = nx.DiGraph()
        affected: Dict[int, Property] = {}
        stack = []
        for key, (prop, _) in seeds.items():
            graph.add_node(key)
            affected[key] = prop
            stack.append(key)
        while stack:
            key = stack.pop()
            for user in users.get(key, ()):
                user_key = id(user.constraint)
                graph.add_edge(key, user_key)
                if user_key not in affected:
                    affected[user_key] = user
                    stack.append(user_key)
        for key, (_, new) in seeds.items():
            if isinstance(new, DependentOperand):
                for operand in new.operands:
                    prop = affected.get(id(operand))
                    if prop is not None and prop.constraint is operand:
                        graph.add_edge(id(operand), key)
        try:
            order = list(nx.topological_sort(graph))
        except nx.NetworkXUnfeasible as exc:
            raise ConstraintError("dependency cycle among rewritten constraints") from exc

        rewritten: Dict[int, Optional[Constraint]] = {}
        cloned = 0
        for key in order:
            prop = affected[key]
            base = seeds[key][1] if key in seeds else prop.constraint
            if base is None:
                rewritten[key] = None
                continue
            substitutions = self._substitutions(base, rewritten, affected)
            if substitutions:
                for operand, replacement in substitutions:
                    logger.debug(
                        "Cascading %s -> %s into %s",
                        constraint_to_string(operand),
                        constraint_to_string(replacement),
                        base,
                    )
                base = base.clone_and_replace_operands(substitutions, ids=self.ids)
                cloned += 1
            rewritten[key] = base

        for key in order:
            value = rewritten[key]
            if value is not None:
                self._insert(affected[key].with_constraint(value))
        for key in order:
            self._drop_property(affected[key])
        return cloned

    # ------------------------------------------------------------------
    # internals

    def _users(self) -> Dict[int, List[Property]]:
        """Map each bound operand's identity to the properties reading it."""

        users: Dict[int, List[Property]] = defaultdict(list)
        for prop in self._properties.values():
            constraint = prop.constraint
            if not isinstance(constraint, DependentOperand):
                continue
            seen: Set[int] = set()
            for operand in constraint.operands:
                if isinstance(operand, (int, float)) or id(operand) in seen:
                    continue
                seen.add(id(operand))
                users[id(operand)].append(prop)
        return users

    def _substitutions(
        self,
        constraint: Constraint,
        rewritten: Dict[int, Optional[Constraint]],
        affected: Dict[int, Property],
    ) -> List[Tuple[Constraint, Constraint]]:
        if not isinstance(constraint, DependentOperand):
            return []
        substitutions: List[Tuple[Constraint, Constraint]] = []
        seen: Set[int] = set()
        for operand in constraint.operands:
            key = id(operand)
            if key in seen or key not in rewritten or affected[key].constraint is not operand:
                continue
            seen.add(key)
            replacement = rewritten[key]
            if replacement is None:
                raise ReplacementError(
                    f"{constraint} still references dropped {constraint_to_string(operand)}"
                )
            substitutions.append((operand, replacement))
        return substitutions

    def _require_box(self, box: Box) -> None:
        if not self.has_box(box):
            raise BoxNotInLayoutError(f"{box.label} is not in the layout")

    def _check_bindable(self, constraint: Constraint) -> None:
        if isinstance(constraint, (int, float)):
            raise LayoutError(
                f"numeric literal {constraint!r} cannot be bound to a property; use a Length"
            )
        is_leaf(constraint)  # rejects anything that is not a constraint
        if self.get_property_for_constraint(constraint) is not None:
            raise DuplicateConstraintError(
                f"{constraint_to_string(constraint)} is already bound in the layout"
            )

    def _add_property(self, prop: Property) -> None:
        self._require_box(prop.box)
        self._check_bindable(prop.constraint)
        if (id(prop.box), prop.slot) in self._slots:
            raise DuplicateConstraintError(
                f"{prop.box.label} already has a {prop.slot.value} constraint"
            )
        self._insert(prop)

    def _insert(self, prop: Property) -> None:
        self._properties[id(prop.constraint)] = prop
        self._slots[(id(prop.box), prop.slot)] = prop
        self._retired.discard(prop.constraint)

    def _drop_property(self, prop: Property) -> None:
        del self._properties[id(prop.constraint)]
        key = (id(prop.box), prop.slot)
        if self._slots.get(key) is prop:
            del self._slots[key]
        self._retired.add(prop.constraint)

    # ------------------------------------------------------------------
    # diagnostics

    def describe_constraint(self, constraint: Constraint) -> str:
        """Render ``constraint`` with bound operands shown as ``box#N.slot``."""

        if not isinstance(constraint, DependentOperand):
            return constraint_to_string(constraint)
        rendered = constraint.operation.operator.join(
            self._describe_operand(operand) for operand in constraint.operands
        )
        if constraint.operation.prefix:
            rendered = f"{constraint.operation.prefix}({rendered})"
        return rendered

    def _describe_operand(self, operand: Constraint) -> str:
        if not isinstance(operand, (int, float)):
            prop = self.get_property_for_constraint(operand)
            if prop is not None:
                return f"{prop.box.label}.{prop.slot.value}"
        if isinstance(operand, DependentOperand) and operand.operation.prefix is None:
            return f"({self.describe_constraint(operand)})"
        return self.describe_constraint(operand)

    def to_repr(self) -> Repr:
        return Repr(None, [box.to_repr() for box in self._boxes.values()])

    def __str__(self) -> str:
        return "\n".join(str(box) for box in self._boxes.values())

    def __repr__(self) -> str:
        return f"<Layout boxes={len(self._boxes)} properties={len(self._properties)}>"
