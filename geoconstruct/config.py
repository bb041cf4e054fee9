"""Numerical tolerances and fixed construction constants for the kernel."""

from __future__ import annotations

import copy
from dataclasses import dataclass


@dataclass
class KernelConfig:
    """Tolerances shared by the geometry engine and its collaborators."""

    # |denominator| below this means the two lines are parallel or coincident.
    parallel_lines_tolerance: float = 1e-10
    # Two locations closer than this on both axes are the same point.
    point_location_tolerance: float = 1e-6
    point_selection_tolerance: float = 20.0
    snap_distance: float = 15.0
    tangency_tolerance: float = 1e-10
    collinearity_tolerance: float = 1e-10
    # Distance of the helper point placed by perpendicular/parallel constructions.
    construction_offset: float = 100.0


_KERNEL_CONFIG = KernelConfig()


def get_kernel_config() -> KernelConfig:
    return copy.deepcopy(_KERNEL_CONFIG)


def set_kernel_config(config: KernelConfig) -> None:
    global _KERNEL_CONFIG
    _KERNEL_CONFIG = copy.deepcopy(config)
