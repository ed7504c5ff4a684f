from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Tuple

if TYPE_CHECKING:  # pragma: no cover
    from .layout import Layout


@dataclass
class Repr:
    """Diagnostic tree node: a label plus nested children."""

    self_label: Optional[str] = None
    children: List["Repr"] = field(default_factory=list)


def _flatten(node: Repr) -> List[Tuple[str, int]]:
    flattened: List[Tuple[str, int]] = []
    if node.self_label:
        flattened.append((node.self_label, 0))
    for child in node.children:
        for text, level in _flatten(child):
            # Unlabelled nodes collapse into the parent's level.
            flattened.append((text, level + 1 if node.self_label else level))
    return flattened


def repr_to_string(node: Repr) -> str:
    return "\n".join(f"{'-' * (level + 1)} {text}" for text, level in _flatten(node))


def print_layout(layout: "Layout") -> str:
    return repr_to_string(layout.to_repr())
