from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, Optional, Sequence, Tuple

from .constraints import Constraint, DependentOperand, clone_constraint
from .errors import ConstraintError, ReplacementError, UnsupportedReplacementError
from .ids import IdGenerator
from .layout import SLOTS, Box, Layout, Slot, Style
from .printer import Repr

logger = logging.getLogger(__name__)


class Component(Box):
    """A box produced by a pattern.

    It owns clones of the constraints of the box it stands in for and can
    rewrite expressions that referenced that box so they reference the
    component instead.  Its own nested layout is exposed as
    :attr:`children_layout`.
    """

    kind = "component"

    def __init__(
        self,
        style: Optional[Style] = None,
        *,
        ids: Optional[IdGenerator] = None,
        source_box_ids: Sequence[int] = (),
    ):
        super().__init__(style, ids=ids)
        # Holds the boxes this component is built from.
        self.children_layout = Layout(ids=ids)
        self.source_box_ids: Tuple[int, ...] = tuple(source_box_ids)

    def get_replacement_constraint(
        self, constraint: Constraint, boxes_to_replace: Sequence[Box]
    ) -> DependentOperand:
        # Only direct operands are swapped.  A dependency on a box hidden
        # among several replaced boxes is not handled.
        if len(boxes_to_replace) != 1:
            raise UnsupportedReplacementError(
                f"{self.label} cannot rewrite across {len(boxes_to_replace)} replaced boxes"
            )
        box = boxes_to_replace[0]

        if not isinstance(constraint, DependentOperand):
            raise ConstraintError(
                f"{constraint} is a leaf; it cannot depend on {box.label}"
            )

        substitutions: Dict[int, Tuple[Constraint, Constraint]] = {}
        for operand in constraint.operands:
            slot = _slot_of(box, operand)
            if slot is None or id(operand) in substitutions:
                continue
            own = self.get(slot)
            if own is None:
                raise ReplacementError(
                    f"{self.label} has no {slot.value} to stand in for {box.label}.{slot.value}"
                )
            substitutions[id(operand)] = (operand, own)

        if not substitutions:
            raise ReplacementError(f"{constraint} does not reference {box.label}")
        return constraint.clone_and_replace_operands(
            substitutions.values(), ids=self.layout.ids
        )

    @classmethod
    def clone_from_box(cls, box: Box) -> "Component":
        layout = box.layout
        component = cls(replace(box.style), ids=layout.ids, source_box_ids=(box.id,))
        # Clone everything before joining the layout so a failed clone
        # leaves the layout untouched.
        for slot in SLOTS:
            constraint = box.get(slot)
            if constraint is not None:
                component.set(slot, clone_constraint(constraint, ids=layout.ids))
        layout.add_box(component)
        logger.debug("Cloned %s from %s", component.label, box.label)
        return component

    def to_repr(self) -> Repr:
        replaced = ", ".join(f"box#{box_id}" for box_id in self.source_box_ids)
        children = [Repr(f"replaces {replaced}")] if replaced else []
        children.append(self.children_layout.to_repr())
        return Repr(str(self), children)


def _slot_of(box: Box, operand: Constraint) -> Optional[Slot]:
    for slot in SLOTS:
        if box.get(slot) is operand:
            return slot
    return None
