"""Configuration helpers for the replacement driver."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Optional


@dataclass
class DriverConfig:
    """Options for :class:`~layout_intent.engine.IterativeComponentReplacement`."""

    check_invariants: bool = False
    max_steps: Optional[int] = None


_DRIVER_CONFIG = DriverConfig()


def get_driver_config() -> DriverConfig:
    return copy.deepcopy(_DRIVER_CONFIG)


def set_driver_config(config: DriverConfig) -> None:
    global _DRIVER_CONFIG
    _DRIVER_CONFIG = copy.deepcopy(config)
