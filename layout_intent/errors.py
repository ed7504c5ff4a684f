"""Fatal consistency violations raised by the layout graph and the driver."""

from __future__ import annotations

from typing import Any, Optional


class LayoutError(RuntimeError):
    """Base class for invariant violations; never a normal outcome."""


class DuplicateBoxError(LayoutError):
    pass


class BoxNotInLayoutError(LayoutError):
    pass


class DuplicateConstraintError(LayoutError):
    pass


class DanglingDependentError(LayoutError):
    """Raised when removing a box whose properties still have dependents."""

    def __init__(self, box: Any, constraint: Any, message: Optional[str] = None):
        super().__init__(
            message or f"other properties depend on {box!r} ({constraint})"
        )
        self.box = box
        self.constraint = constraint


class ConstraintError(LayoutError):
    pass


class ReplacementError(LayoutError):
    pass


class UnsupportedReplacementError(ReplacementError, NotImplementedError):
    """Rewriting a dependent across more than one replaced box."""
