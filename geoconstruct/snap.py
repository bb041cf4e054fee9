"""Pointer snapping and hover selection.

Resolution is tiered: an existing point beats an intersection of nearby
curves, which beats the closest spot on a nearby curve.  Nothing in this
module raises for geometry reasons; "nothing close enough" is ``None``.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from .config import KernelConfig, get_kernel_config
from .errors import GeometryError
from .intersections import IntersectionCalculator
from .objects import Circle, GeometricObject, Line, Point
from .vectors import Coord, distance

logger = logging.getLogger(__name__)

Curve = Union[Line, Circle]


class SnapKind(Enum):
    POINT = "point"
    INTERSECTION = "intersection"
    ON_CURVE = "on_curve"


@dataclass(frozen=True)
class SnapResult:
    """Resolved pointer location.

    ``target`` is the existing point (``POINT``) or curve (``ON_CURVE``) the
    pointer snapped to; ``sources`` lists the curves that produced the
    location (two for ``INTERSECTION``, one for ``ON_CURVE``).
    """

    x: float
    y: float
    kind: SnapKind
    target: Optional[GeometricObject] = None
    sources: Tuple[GeometricObject, ...] = ()

    @property
    def coords(self) -> Coord:
        return self.x, self.y


class SnapResolver:
    def __init__(
        self,
        config: Optional[KernelConfig] = None,
        calculator: Optional[IntersectionCalculator] = None,
    ):
        self.config = config or get_kernel_config()
        self.calculator = calculator or IntersectionCalculator(self.config)

    @property
    def radius(self) -> float:
        return self.config.snap_distance

    def _nearby(self, x: float, y: float, objects: Iterable[GeometricObject]) -> List[GeometricObject]:
        return [
            obj
            for obj in objects
            if obj.should_draw() and obj.distance_to((x, y)) <= self.radius
        ]

    def _snap_to_point(self, x: float, y: float, nearby: Sequence[GeometricObject]) -> Optional[SnapResult]:
        points = [obj for obj in nearby if isinstance(obj, Point)]
        if not points:
            return None
        best = min(points, key=lambda p: p.distance_to((x, y)))
        return SnapResult(best.x, best.y, SnapKind.POINT, target=best)

    def _snap_to_intersection(
        self, x: float, y: float, curves: Sequence[Curve]
    ) -> Optional[SnapResult]:
        best: Optional[SnapResult] = None
        best_distance = float("inf")
        for first, second in itertools.combinations(curves, 2):
            try:
                candidates = self.calculator.intersect(first, second)
            except GeometryError as exc:
                logger.debug("Skipping %s x %s while snapping: %s", first, second, exc)
                continue
            for candidate in candidates:
                dist = distance(candidate, (x, y))
                if dist <= self.radius and dist < best_distance:
                    best_distance = dist
                    best = SnapResult(
                        candidate[0],
                        candidate[1],
                        SnapKind.INTERSECTION,
                        sources=(first, second),
                    )
        return best

    def _snap_to_curve(self, x: float, y: float, curves: Sequence[Curve]) -> Optional[SnapResult]:
        if not curves:
            return None
        best = min(curves, key=lambda c: c.distance_to((x, y)))
        cx, cy = best.closest_point((x, y))
        return SnapResult(cx, cy, SnapKind.ON_CURVE, target=best, sources=(best,))

    def resolve(self, x: float, y: float, objects: Iterable[GeometricObject]) -> Optional[SnapResult]:
        nearby = self._nearby(x, y, objects)
        if not nearby:
            return None
        snapped = self._snap_to_point(x, y, nearby)
        if snapped is not None:
            return snapped
        curves = [obj for obj in nearby if isinstance(obj, (Line, Circle))]
        snapped = self._snap_to_intersection(x, y, curves)
        if snapped is not None:
            return snapped
        return self._snap_to_curve(x, y, curves)

    def highlighted_object(
        self, x: float, y: float, objects: Iterable[GeometricObject]
    ) -> Optional[GeometricObject]:
        """Return the object itself for hover feedback, using the same tiers.

        For an intersection the closer of the two crossing curves is returned.
        """

        snapped = self.resolve(x, y, objects)
        if snapped is None:
            return None
        if snapped.kind is SnapKind.INTERSECTION:
            return min(snapped.sources, key=lambda obj: obj.distance_to((x, y)))
        return snapped.target

    def select_object(
        self, x: float, y: float, objects: Iterable[GeometricObject]
    ) -> Union[SnapResult, Coord]:
        snapped = self.resolve(x, y, objects)
        if snapped is None:
            return float(x), float(y)
        return snapped


__all__ = ["Curve", "SnapKind", "SnapResolver", "SnapResult"]
