"""Patterns that promote a box to a component or delete it.

A pattern takes a box and returns a :class:`ComponentReplacement` when it
applies, otherwise ``None``.  Patterns are tried in registration order and
the first box that the first applicable pattern accepts wins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Sequence

from .component import Component
from .errors import ReplacementError
from .layout import Box

logger = logging.getLogger(__name__)


@dataclass
class ComponentReplacement:
    component: Optional[Component]
    boxes_to_replace: List[Box] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.boxes_to_replace = list(self.boxes_to_replace)
        if not self.boxes_to_replace:
            raise ReplacementError("a replacement must name at least one box")


Pattern = Callable[[Box], Optional[ComponentReplacement]]


@dataclass
class PatternMatch:
    pattern_name: str
    box: Box
    replacement: ComponentReplacement


def has_background(box: Box) -> Optional[ComponentReplacement]:
    if box.style.background is None:
        return None
    return ComponentReplacement(Component.clone_from_box(box), [box])


def is_image(box: Box) -> Optional[ComponentReplacement]:
    if box.style.image is None:
        return None
    return ComponentReplacement(Component.clone_from_box(box), [box])


def useless_box(box: Box) -> Optional[ComponentReplacement]:
    """Match a box nothing else depends on; it is deleted without a successor."""

    layout = box.layout
    for prop in layout.get_properties_for_box(box):
        for dependent in layout.get_properties_directly_dependent_on(prop.constraint):
            if dependent.box is not box:
                return None
    return ComponentReplacement(None, [box])


DEFAULT_PATTERNS: Sequence[Pattern] = (has_background, is_image, useless_box)


def pattern_name(pattern: Pattern) -> str:
    return getattr(pattern, "__name__", repr(pattern))


class PatternRegistry:
    def __init__(self, patterns: Optional[Iterable[Pattern]] = None):
        self._patterns: List[Pattern] = list(DEFAULT_PATTERNS if patterns is None else patterns)

    @property
    def patterns(self) -> List[Pattern]:
        return list(self._patterns)

    def register(self, pattern: Pattern, index: Optional[int] = None) -> None:
        if index is None:
            self._patterns.append(pattern)
        else:
            self._patterns.insert(index, pattern)

    def find_match(self, boxes: Sequence[Box]) -> Optional[PatternMatch]:
        for pattern in self._patterns:
            for box in list(boxes):
                replacement = pattern(box)
                if replacement is not None:
                    logger.debug("Pattern %s matched %s", pattern_name(pattern), box.label)
                    return PatternMatch(pattern_name(pattern), box, replacement)
        return None

    def __len__(self) -> int:
        return len(self._patterns)
