"""Fixpoint driver that reduces a layout to components."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, List, Optional, Sequence, Tuple, Union

from .component import Component
from .config import DriverConfig, get_driver_config
from .errors import LayoutError
from .layout import Box, Layout, Property
from .logging_utils import debug_log_call
from .patterns import ComponentReplacement, Pattern, PatternRegistry
from .validate import validate_layout

logger = logging.getLogger(__name__)

StepObserver = Callable[[Layout, int], None]


class DriverState(Enum):
    SCANNING = "scanning"
    APPLYING = "applying"
    DONE = "done"
    STUCK = "stuck"


@dataclass
class AppliedReplacement:
    step: int
    pattern_name: str
    box_ids: Tuple[int, ...]
    component_id: Optional[int]
    rewritten: int


class IterativeComponentReplacement:
    """Apply patterns one replacement at a time until the layout is reduced.

    ``run`` returns ``True`` once every box is a :class:`Component` and
    ``False`` when no registered pattern matches any remaining box.  Each
    replacement removes at least one plain box, so the loop always halts.
    """

    def __init__(
        self,
        layout: Layout,
        patterns: Union[PatternRegistry, Iterable[Pattern], None] = None,
        *,
        on_step: Optional[StepObserver] = None,
        config: Optional[DriverConfig] = None,
    ):
        self._layout = layout
        if isinstance(patterns, PatternRegistry):
            self._registry = patterns
        else:
            self._registry = PatternRegistry(patterns)
        self._on_step = on_step
        self._config = config if config is not None else get_driver_config()
        self.state = DriverState.SCANNING
        self.history: List[AppliedReplacement] = []

    @property
    def layout(self) -> Layout:
        return self._layout

    @property
    def registry(self) -> PatternRegistry:
        return self._registry

    @property
    def steps(self) -> int:
        return len(self.history)

    def run(self) -> bool:
        self.state = DriverState.SCANNING
        applied = 0
        while True:
            self._notify()
            if self._is_done():
                self.state = DriverState.DONE
                logger.info(
                    "Layout reduced after %d replacement(s): %d component(s)",
                    applied,
                    len(self._layout.get_boxes()),
                )
                self._notify()
                return True

            # Before matching: a match may already have added a component.
            max_steps = self._config.max_steps
            if max_steps is not None and applied >= max_steps:
                raise LayoutError(f"replacement did not finish within {max_steps} step(s)")

            plain = self._plain_boxes()
            match = self._registry.find_match(plain)
            if match is None:
                self.state = DriverState.STUCK
                logger.info(
                    "No pattern applies; %d plain box(es) remain: %s",
                    len(plain),
                    ", ".join(box.label for box in plain),
                )
                return False

            self.state = DriverState.APPLYING
            replacement = match.replacement
            rewritten = self._replace(replacement)
            applied += 1
            component = replacement.component
            self.history.append(
                AppliedReplacement(
                    step=self.steps + 1,
                    pattern_name=match.pattern_name,
                    box_ids=tuple(box.id for box in replacement.boxes_to_replace),
                    component_id=component.id if component is not None else None,
                    rewritten=rewritten,
                )
            )
            logger.info(
                "Step %d: %s replaced %s with %s (%d dependent(s) rewritten)",
                self.steps,
                match.pattern_name,
                ", ".join(box.label for box in replacement.boxes_to_replace),
                component.label if component is not None else "nothing",
                rewritten,
            )
            if self._config.check_invariants:
                validate_layout(self._layout)
            self.state = DriverState.SCANNING

    def _notify(self) -> None:
        if self._on_step is not None:
            self._on_step(self._layout, self.steps)

    def _plain_boxes(self) -> List[Box]:
        return [box for box in self._layout.get_boxes() if not isinstance(box, Component)]

    def _is_done(self) -> bool:
        return not self._plain_boxes()

    def _outside_dependents(self, boxes: Sequence[Box]) -> List[Property]:
        found: List[Property] = []
        seen = set()
        for box in boxes:
            for constraint in box.constraints():
                for prop in self._layout.get_properties_directly_dependent_on(constraint):
                    if any(prop.box is replaced for replaced in boxes):
                        continue
                    if id(prop.constraint) in seen:
                        continue
                    seen.add(id(prop.constraint))
                    found.append(prop)
        return found

    @debug_log_call(logger)
    def _replace(self, replacement: ComponentReplacement) -> int:
        boxes = replacement.boxes_to_replace
        component = replacement.component
        rewrites = []
        for prop in self._outside_dependents(boxes):
            constraint = prop.constraint
            if component is None:
                new = None
            else:
                new = component.get_replacement_constraint(constraint, boxes)
            rewrites.append((constraint, new))
        # One pass, so a dependent reached through several replaced
        # constraints is cloned once.
        self._layout.replace_constraints(rewrites)

        for box in boxes:
            self._layout.remove_box(box)
        return len(rewrites)
