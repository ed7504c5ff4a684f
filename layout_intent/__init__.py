from .ids import IdGenerator, DEFAULT_IDS
from .errors import (
    LayoutError,
    DuplicateBoxError,
    BoxNotInLayoutError,
    DuplicateConstraintError,
    DanglingDependentError,
    ConstraintError,
    ReplacementError,
    UnsupportedReplacementError,
)
from .constraints import (
    Unit,
    Length,
    UnknownLength,
    Operation,
    DependentOperand,
    Constraint,
    is_leaf,
    clone_constraint,
    constraint_directly_depends_on,
    constraint_depends_on,
    constraint_to_string,
)
from .layout import Slot, SLOTS, Style, Property, Box, Layout
from .component import Component
from .patterns import (
    ComponentReplacement,
    Pattern,
    PatternMatch,
    PatternRegistry,
    DEFAULT_PATTERNS,
    has_background,
    is_image,
    useless_box,
)
from .engine import IterativeComponentReplacement, DriverState, AppliedReplacement
from .config import DriverConfig, get_driver_config, set_driver_config
from .validate import validate_layout, ValidationError
from .graph import dependency_graph, find_dependency_cycle, transitive_dependents
from .printer import Repr, repr_to_string, print_layout

__all__ = [
    'IdGenerator',
    'DEFAULT_IDS',
    'LayoutError',
    'DuplicateBoxError',
    'BoxNotInLayoutError',
    'DuplicateConstraintError',
    'DanglingDependentError',
    'ConstraintError',
    'ReplacementError',
    'UnsupportedReplacementError',
    'Unit',
    'Length',
    'UnknownLength',
    'Operation',
    'DependentOperand',
    'Constraint',
    'is_leaf',
    'clone_constraint',
    'constraint_directly_depends_on',
    'constraint_depends_on',
    'constraint_to_string',
    'Slot',
    'SLOTS',
    'Style',
    'Property',
    'Box',
    'Layout',
    'Component',
    'ComponentReplacement',
    'Pattern',
    'PatternMatch',
    'PatternRegistry',
    'DEFAULT_PATTERNS',
    'has_background',
    'is_image',
    'useless_box',
    'IterativeComponentReplacement',
    'DriverState',
    'AppliedReplacement',
    'DriverConfig',
    'get_driver_config',
    'set_driver_config',
    'validate_layout',
    'ValidationError',
    'dependency_graph',
    'find_dependency_cycle',
    'transitive_dependents',
    'Repr',
    'repr_to_string',
    'print_layout',
]
