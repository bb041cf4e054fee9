"""Geometric object model: points, the three line variants and circles.

Objects are mutable entities compared by identity.  Coordinates change in
place while dragging; ids and names never change once assigned by the
factory.  Every object answers the same geometric queries:
``closest_point``, ``distance_to`` and ``contains_point``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, List, Optional, Sequence, Tuple, Union

from . import vectors
from .vectors import Coord

_RADIUS_EPS = 1e-10
_CONTAINS_TOLERANCE = 1e-6


class ObjectType(Enum):
    POINT = "point"
    LINE = "line"
    CIRCLE = "circle"


class LineKind(Enum):
    STANDARD = "standard"
    RADICAL_AXIS = "radical_axis"


class LineVariant(Enum):
    INFINITE = "infinite"
    RAY = "ray"
    SEGMENT = "segment"


class CircleKind(Enum):
    POINT_BASED = "point_based"
    RADIUS = "radius"
    SPECIAL = "special"
    THREE_POINT = "three_point"


@dataclass
class Param:
    """One scalar coordinate tagged with its solver parameter index."""

    index: int
    value: float
    is_static: bool = False

    def set_static(self) -> None:
        self.is_static = True


Location = Union["Point", Sequence[float]]


def _xy(value: Location) -> Coord:
    if isinstance(value, Point):
        return value.coords
    return vectors.as_coord(value)


class GeometricObject:
    """Shared identity and display metadata."""

    object_type: ClassVar[ObjectType]

    def __init__(self, id: int, name: Optional[str] = None):
        self.id = id
        self.name = name
        self.color = 0
        self.visible = True

    def should_draw(self) -> bool:
        return self.visible

    def closest_point(self, query: Location) -> Coord:
        raise NotImplementedError

    def distance_to(self, query: Location) -> float:
        return vectors.distance(self.closest_point(query), _xy(query))

    def contains_point(self, query: Location, tolerance: float = _CONTAINS_TOLERANCE) -> bool:
        return self.distance_to(query) <= tolerance

    @property
    def label(self) -> str:
        return self.name or f"{self.object_type.value}#{self.id}"


class Point(GeometricObject):
    object_type = ObjectType.POINT

    def __init__(
        self,
        id: int,
        x_param: Param,
        y_param: Param,
        *,
        frozen: bool = False,
        name: Optional[str] = None,
    ):
        super().__init__(id, name)
        self.x_param = x_param
        self.y_param = y_param
        self.frozen = frozen

    @property
    def x(self) -> float:
        return self.x_param.value

    @property
    def y(self) -> float:
        return self.y_param.value

    @property
    def coords(self) -> Coord:
        return self.x_param.value, self.y_param.value

    def set_xy(self, x: float, y: float) -> None:
        self.x_param.value = float(x)
        self.y_param.value = float(y)

    def is_same_location(self, x: float, y: float, tolerance: float = _CONTAINS_TOLERANCE) -> bool:
        return abs(self.x - x) < tolerance and abs(self.y - y) < tolerance

    def closest_point(self, query: Location) -> Coord:
        return self.coords

    def distance_to(self, query: Location) -> float:
        return vectors.distance(self.coords, _xy(query))

    @property
    def label(self) -> str:
        return str(self)

    def __str__(self) -> str:
        return self.name or f"P{self.id}"

    def __repr__(self) -> str:
        return f"Point(id={self.id}, name={self.name!r}, x={self.x!r}, y={self.y!r})"


class Line(GeometricObject):
    """Line through its first two points.

    Points appended later (intersections, points placed on the line) are
    annotations and never redefine the geometry.  Subclasses only change
    which parameters along ``p0 + t * (p1 - p0)`` belong to the object.
    """

    object_type = ObjectType.LINE
    variant: ClassVar[LineVariant] = LineVariant.INFINITE
    _clamp: ClassVar[Optional[str]] = None

    def __init__(
        self,
        id: int,
        p1: Point,
        p2: Point,
        *,
        kind: LineKind = LineKind.STANDARD,
        name: Optional[str] = None,
    ):
        super().__init__(id, name)
        self.kind = kind
        self.points: List[Point] = [p1, p2]

    @property
    def defining_points(self) -> Tuple[Point, Point]:
        return self.points[0], self.points[1]

    @property
    def direction(self) -> Coord:
        p1, p2 = self.defining_points
        return p2.x - p1.x, p2.y - p1.y

    def is_degenerate(self, tolerance: float = _CONTAINS_TOLERANCE) -> bool:
        p1, p2 = self.defining_points
        return p1 is p2 or p1.is_same_location(p2.x, p2.y, tolerance)

    def add_point(self, point: Point) -> None:
        if not any(existing is point for existing in self.points):
            self.points.append(point)

    def contains_both_points(self, p1: Point, p2: Point) -> bool:
        return any(p is p1 for p in self.points) and any(p is p2 for p in self.points)

    def accepts_parameter(self, t: float) -> bool:
        return True

    def clamp_parameter(self, t: float) -> float:
        return vectors.clamp_parameter(t, self._clamp)

    def closest_point(self, query: Location) -> Coord:
        return vectors.project_point_to_line(
            _xy(query), self.points[0].coords, self.direction, clamp=self._clamp
        )

    def parameter_of(self, query: Location) -> Optional[float]:
        return vectors.project_parameter(_xy(query), self.points[0].coords, self.direction)

    def drawing_endpoints(
        self,
        width: float,
        height: float,
        translation_x: float = 0.0,
        translation_y: float = 0.0,
    ) -> List[Coord]:
        """Return two endpoints that cover the visible part of the viewport."""

        anchor = self.points[0].coords
        direction = self.direction
        if vectors.unit(direction) is None:
            return [anchor, anchor]
        bounds = (-translation_x, -translation_y, -translation_x + width, -translation_y + height)
        span = _viewport_parameter_range(anchor, direction, bounds)
        if span is None:
            return _covering_span(anchor, direction, bounds)
        t_lo, t_hi = span
        return [vectors.point_at(anchor, direction, t_lo), vectors.point_at(anchor, direction, t_hi)]

    def description(self) -> str:
        if len(self.points) >= 2:
            return f"Line {self.points[0]}{self.points[1]}"
        return f"Line {self.id}"

    def __str__(self) -> str:
        return self.name or self.description()

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(id={self.id}, name={self.name!r}, "
            f"points={[str(p) for p in self.points]})"
        )


class InfiniteLine(Line):
    variant = LineVariant.INFINITE


class Ray(Line):
    """Half-line starting at its first point and passing through the second."""

    variant = LineVariant.RAY
    _clamp = "ray"

    def accepts_parameter(self, t: float) -> bool:
        return t >= 0.0

    def drawing_endpoints(
        self,
        width: float,
        height: float,
        translation_x: float = 0.0,
        translation_y: float = 0.0,
    ) -> List[Coord]:
        origin = self.points[0].coords
        direction = self.direction
        if vectors.unit(direction) is None:
            return [origin, origin]
        bounds = (-translation_x, -translation_y, -translation_x + width, -translation_y + height)
        span = _viewport_parameter_range(origin, direction, bounds)
        if span is None or span[1] <= 0.0:
            return [origin, origin]
        return [origin, vectors.point_at(origin, direction, span[1])]

    def description(self) -> str:
        return f"Ray {self.points[0]}{self.points[1]}"


class Segment(Line):
    variant = LineVariant.SEGMENT
    _clamp = "segment"

    def accepts_parameter(self, t: float) -> bool:
        return 0.0 <= t <= 1.0

    @property
    def length(self) -> float:
        p1, p2 = self.defining_points
        return p1.distance_to(p2)

    def drawing_endpoints(
        self,
        width: float,
        height: float,
        translation_x: float = 0.0,
        translation_y: float = 0.0,
    ) -> List[Coord]:
        return [self.points[0].coords, self.points[1].coords]

    def description(self) -> str:
        return f"Segment {self.points[0]}{self.points[1]}"


LINE_CLASSES = {
    LineVariant.INFINITE: InfiniteLine,
    LineVariant.RAY: Ray,
    LineVariant.SEGMENT: Segment,
}


class Circle(GeometricObject):
    """Circle owning its centre by reference.

    The first ``defining_count`` entries of ``points`` define the circle
    (one point on the circumference, or three for a three-point circle);
    later entries are incident points such as intersections.  The radius is
    always derived from the live centre and first point.
    """

    object_type = ObjectType.CIRCLE

    def __init__(
        self,
        id: int,
        center: Point,
        points: Sequence[Point] = (),
        *,
        kind: CircleKind = CircleKind.POINT_BASED,
        name: Optional[str] = None,
    ):
        if center is None:
            raise ValueError("circle centre is required")
        super().__init__(id, name)
        self.center = center
        self.kind = kind
        self.points: List[Point] = list(points)
        self.defining_count = len(self.points)

    @property
    def defining_points(self) -> List[Point]:
        return self.points[: self.defining_count]

    @property
    def radius(self) -> float:
        if not self.points:
            return 0.0
        return self.center.distance_to(self.points[0])

    def add_point(self, point: Point) -> None:
        if not any(existing is point for existing in self.points):
            self.points.append(point)

    def is_point_on_circle(self, point: Point) -> bool:
        return any(existing is point for existing in self.points)

    def closest_point(self, query: Location) -> Coord:
        radius = self.radius
        if radius <= _RADIUS_EPS:
            return self.center.coords
        fallback = self.points[0].coords if self.points else None
        return vectors.project_point_to_circle(_xy(query), self.center.coords, radius, fallback=fallback)

    def description(self) -> str:
        return f"Circle {self.center}"

    def __str__(self) -> str:
        return self.name or self.description()

    def __repr__(self) -> str:
        return (
            f"Circle(id={self.id}, name={self.name!r}, kind={self.kind.value}, "
            f"center={self.center}, points={[str(p) for p in self.points]})"
        )


def _viewport_parameter_range(
    anchor: Coord, direction: Coord, bounds: Tuple[float, float, float, float]
) -> Optional[Tuple[float, float]]:
    min_x, min_y, max_x, max_y = bounds
    t_lo = -math.inf
    t_hi = math.inf
    for delta, start, lo, hi in (
        (direction[0], anchor[0], min_x, max_x),
        (direction[1], anchor[1], min_y, max_y),
    ):
        if abs(delta) <= 1e-12:
            if start < lo or start > hi:
                return None
            continue
        t1 = (lo - start) / delta
        t2 = (hi - start) / delta
        if t1 > t2:
            t1, t2 = t2, t1
        t_lo = max(t_lo, t1)
        t_hi = min(t_hi, t2)
    if t_lo > t_hi:
        return None
    return t_lo, t_hi


def _covering_span(
    anchor: Coord, direction: Coord, bounds: Tuple[float, float, float, float]
) -> List[Coord]:
    # Line misses the viewport: span the viewport diagonal around the foot of its centre.
    min_x, min_y, max_x, max_y = bounds
    center = ((min_x + max_x) / 2.0, (min_y + max_y) / 2.0)
    half_diagonal = math.hypot(max_x - min_x, max_y - min_y) / 2.0
    foot = vectors.project_point_to_line(center, anchor, direction)
    u = vectors.unit(direction) or (1.0, 0.0)
    return [
        (foot[0] - u[0] * half_diagonal, foot[1] - u[1] * half_diagonal),
        (foot[0] + u[0] * half_diagonal, foot[1] + u[1] * half_diagonal),
    ]


__all__ = [
    "Circle",
    "CircleKind",
    "GeometricObject",
    "InfiniteLine",
    "LINE_CLASSES",
    "Line",
    "LineKind",
    "LineVariant",
    "Location",
    "ObjectType",
    "Param",
    "Point",
    "Ray",
    "Segment",
]
