"""Pure intersection mathematics over live lines and circles.

Nothing here creates or stores objects: results are plain ``(x, y)`` pairs
that the engine turns into points (or matches against existing ones).
"""

from __future__ import annotations

import logging
from math import sqrt
from typing import List, Optional, Sequence

from .config import KernelConfig, get_kernel_config
from .errors import (
    IntersectionCalculationError,
    InvalidConstructionError,
    InvalidGeometricObjectError,
)
from .logging_utils import apply_debug_logging
from .objects import Circle, GeometricObject, Line
from .vectors import Coord, circumcenter, is_finite

logger = logging.getLogger(__name__)

_PARALLEL_EPS = 1e-10
_TANGENT_EPS = 1e-10


def _checked_radius(circle: Circle) -> float:
    radius = circle.radius
    if not is_finite(radius):
        raise InvalidGeometricObjectError(f"Circle {circle} has invalid radius: {radius}")
    if radius <= 0:
        raise InvalidGeometricObjectError(
            f"Circle {circle} must have positive radius for intersection calculation"
        )
    return radius


def line_line(line1: Line, line2: Line, *, tolerance: float = _PARALLEL_EPS) -> Optional[Coord]:
    """Intersect two lines, honouring each line's variant.

    Returns ``None`` for parallel or coincident supports, and when the
    mathematical crossing lies outside either ray or segment.
    """

    p1, p2 = line1.defining_points
    p3, p4 = line2.defining_points

    denom = (p1.x - p2.x) * (p3.y - p4.y) - (p1.y - p2.y) * (p3.x - p4.x)
    if abs(denom) < tolerance:
        return None
    if not is_finite(denom):
        raise IntersectionCalculationError(
            "Invalid line parameters resulted in non-finite denominator"
        )

    t1 = ((p1.x - p3.x) * (p3.y - p4.y) - (p1.y - p3.y) * (p3.x - p4.x)) / denom
    t2 = -((p1.x - p2.x) * (p1.y - p3.y) - (p1.y - p2.y) * (p1.x - p3.x)) / denom

    if not line1.accepts_parameter(t1) or not line2.accepts_parameter(t2):
        return None
    return p1.x + t1 * (p2.x - p1.x), p1.y + t1 * (p2.y - p1.y)


def line_circle(line: Line, circle: Circle, *, tangency_tolerance: float = _TANGENT_EPS) -> List[Coord]:
    """Intersect a line with a circle.

    Candidates are ordered by their parameter along the line and filtered
    independently by the line's variant, so a ray may keep one of two roots.
    """

    p1, p2 = line.defining_points
    radius = _checked_radius(circle)

    dx = p2.x - p1.x
    dy = p2.y - p1.y
    length = sqrt(dx * dx + dy * dy)
    if length == 0:
        raise InvalidConstructionError("Line points are identical - cannot calculate direction")
    ux = dx / length
    uy = dy / length

    center = circle.center
    t = (center.x - p1.x) * ux + (center.y - p1.y) * uy
    foot_x = p1.x + t * ux
    foot_y = p1.y + t * uy
    dist = sqrt((center.x - foot_x) ** 2 + (center.y - foot_y) ** 2)

    if dist > radius + tangency_tolerance:
        return []
    if abs(dist - radius) <= tangency_tolerance:
        if line.accepts_parameter(t / length):
            return [(foot_x, foot_y)]
        return []

    discriminant = radius * radius - dist * dist
    if discriminant < 0:
        raise IntersectionCalculationError("Negative discriminant in intersection calculation")
    half_chord = sqrt(discriminant)

    result: List[Coord] = []
    for sign in (-1.0, 1.0):
        if line.accepts_parameter((t + sign * half_chord) / length):
            result.append((foot_x + sign * half_chord * ux, foot_y + sign * half_chord * uy))
    return result


def circle_circle(
    circle1: Circle,
    circle2: Circle,
    *,
    tangency_tolerance: float = _TANGENT_EPS,
) -> List[Coord]:
    """Intersect two circles with the lens construction.

    Separate, nested and concentric circles give ``[]``; tangent circles give a
    single point.  Identical circles have infinitely many common points and
    raise :class:`IntersectionCalculationError`.
    """

    r1 = _checked_radius(circle1)
    r2 = _checked_radius(circle2)
    c1 = circle1.center
    c2 = circle2.center

    dx = c2.x - c1.x
    dy = c2.y - c1.y
    d = sqrt(dx * dx + dy * dy)

    if d > r1 + r2 + tangency_tolerance:
        return []
    if d < abs(r1 - r2) - tangency_tolerance:
        return []
    if d <= tangency_tolerance:
        if abs(r1 - r2) <= tangency_tolerance:
            raise IntersectionCalculationError("Circles are identical - infinite intersections")
        return []

    a = (r1 * r1 - r2 * r2 + d * d) / (2 * d)
    h = sqrt(max(r1 * r1 - a * a, 0.0))
    px = c1.x + a * dx / d
    py = c1.y + a * dy / d

    if h < tangency_tolerance:
        return [(px, py)]
    return [
        (px + h * dy / d, py - h * dx / d),
        (px - h * dy / d, py + h * dx / d),
    ]


class IntersectionCalculator:
    """Intersection functions bound to one set of kernel tolerances."""

    def __init__(self, config: Optional[KernelConfig] = None):
        self.config = config or get_kernel_config()

    def line_line(self, line1: Line, line2: Line) -> Optional[Coord]:
        return line_line(line1, line2, tolerance=self.config.parallel_lines_tolerance)

    def line_circle(self, line: Line, circle: Circle) -> List[Coord]:
        return line_circle(line, circle, tangency_tolerance=self.config.tangency_tolerance)

    def circle_circle(self, circle1: Circle, circle2: Circle) -> List[Coord]:
        return circle_circle(circle1, circle2, tangency_tolerance=self.config.tangency_tolerance)

    def circumcenter(self, a: Sequence[float], b: Sequence[float], c: Sequence[float]) -> Optional[Coord]:
        return circumcenter(a, b, c, tolerance=self.config.collinearity_tolerance)

    def intersect(self, first: GeometricObject, second: GeometricObject) -> List[Coord]:
        """Dispatch on the curve pair; points and unknown pairs give ``[]``."""

        if isinstance(first, Line) and isinstance(second, Line):
            found = self.line_line(first, second)
            return [] if found is None else [found]
        if isinstance(first, Line) and isinstance(second, Circle):
            return self.line_circle(first, second)
        if isinstance(first, Circle) and isinstance(second, Line):
            return self.line_circle(second, first)
        if isinstance(first, Circle) and isinstance(second, Circle):
            return self.circle_circle(first, second)
        return []


apply_debug_logging(globals(), logger=logger)


__all__ = [
    "IntersectionCalculator",
    "circle_circle",
    "circumcenter",
    "line_circle",
    "line_line",
]
