"""Canonical storage for the objects and constraints of one session."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Tuple, TypeVar

from .constraints import ON_CURVE_KINDS, Constraint
from .errors import InvalidConstructionError
from .objects import Circle, GeometricObject, Line, LineVariant, Point

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=GeometricObject)


def _nearest_within(objects: Iterable[T], x: float, y: float, tolerance: float) -> Optional[T]:
    best: Optional[T] = None
    best_distance = float("inf")
    for obj in objects:
        dist = obj.distance_to((x, y))
        if dist <= tolerance and dist < best_distance:
            best = obj
            best_distance = dist
    return best


class GeometryRepository:
    """Id-keyed, insertion-ordered stores.

    Membership is by identity: a distinct point at the same location as a
    stored one is a different entry.  Collections are exposed as tuples so
    only the engine mutates them.
    """

    def __init__(self) -> None:
        self._points: Dict[int, Point] = {}
        self._lines: Dict[int, Line] = {}
        self._circles: Dict[int, Circle] = {}
        self._constraints: List[Constraint] = []

    @property
    def points(self) -> Tuple[Point, ...]:
        return tuple(self._points.values())

    @property
    def lines(self) -> Tuple[Line, ...]:
        return tuple(self._lines.values())

    @property
    def circles(self) -> Tuple[Circle, ...]:
        return tuple(self._circles.values())

    @property
    def constraints(self) -> Tuple[Constraint, ...]:
        return tuple(self._constraints)

    def _store_for(self, obj: GeometricObject) -> Dict[int, GeometricObject]:
        if isinstance(obj, Point):
            return self._points  # type: ignore[return-value]
        if isinstance(obj, Line):
            return self._lines  # type: ignore[return-value]
        if isinstance(obj, Circle):
            return self._circles  # type: ignore[return-value]
        raise TypeError(f"unsupported object type: {type(obj).__name__}")

    def _add(self, obj: GeometricObject) -> bool:
        store = self._store_for(obj)
        existing = store.get(obj.id)
        if existing is obj:
            return False
        if existing is not None:
            raise ValueError(f"id {obj.id} already used by {existing.label}")
        store[obj.id] = obj
        return True

    def add_point(self, point: Point) -> bool:
        return self._add(point)

    def add_line(self, line: Line) -> bool:
        return self._add(line)

    def add_circle(self, circle: Circle) -> bool:
        return self._add(circle)

    def add_constraint(self, constraint: Constraint) -> Constraint:
        """Store ``constraint`` unless an identical one is already registered.

        A point can be owned by at most one on-line/on-circle relation;
        registering a second one with different determiners raises
        :class:`InvalidConstructionError`.
        """

        for existing in self._constraints:
            if existing.same_as(constraint):
                return existing
        if constraint.kind in ON_CURVE_KINDS:
            dependent = constraint.dependent
            for existing in self._constraints:
                if existing.kind in ON_CURVE_KINDS and existing.dependent is dependent:
                    raise InvalidConstructionError(
                        f"Point {dependent} is already constrained by {existing.description()}"
                    )
        self._constraints.append(constraint)
        return constraint

    def contains(self, obj: GeometricObject) -> bool:
        try:
            store = self._store_for(obj)
        except TypeError:
            return False
        return store.get(obj.id) is obj

    def get(self, object_id: int) -> Optional[GeometricObject]:
        for store in (self._points, self._lines, self._circles):
            found = store.get(object_id)
            if found is not None:
                return found
        return None

    def find_line(
        self, p1: Point, p2: Point, variant: Optional[LineVariant] = None
    ) -> Optional[Line]:
        for line in self._lines.values():
            if variant is not None and line.variant is not variant:
                continue
            if line.contains_both_points(p1, p2):
                return line
        return None

    def find_point_at(self, x: float, y: float, tolerance: float) -> Optional[Point]:
        for point in self._points.values():
            if point.is_same_location(x, y, tolerance):
                return point
        return None

    def nearest_point(self, x: float, y: float, tolerance: float) -> Optional[Point]:
        return _nearest_within(self._points.values(), x, y, tolerance)

    def nearest_line(self, x: float, y: float, tolerance: float) -> Optional[Line]:
        return _nearest_within(self._lines.values(), x, y, tolerance)

    def nearest_circle(self, x: float, y: float, tolerance: float) -> Optional[Circle]:
        return _nearest_within(self._circles.values(), x, y, tolerance)

    def constraints_for(self, obj: GeometricObject) -> List[Constraint]:
        return [c for c in self._constraints if c.dependent is obj]

    def all_objects(self) -> List[GeometricObject]:
        objects: List[GeometricObject] = []
        objects.extend(self._points.values())
        objects.extend(self._lines.values())
        objects.extend(self._circles.values())
        return objects

    def replace_contents(
        self,
        points: Iterable[Point],
        lines: Iterable[Line],
        circles: Iterable[Circle],
        constraints: Iterable[Constraint],
    ) -> None:
        self.clear()
        for point in points:
            self._points[point.id] = point
        for line in lines:
            self._lines[line.id] = line
        for circle in circles:
            self._circles[circle.id] = circle
        self._constraints.extend(constraints)

    def clear(self) -> None:
        logger.debug(
            "Clearing repository (%d points, %d lines, %d circles, %d constraints)",
            len(self._points),
            len(self._lines),
            len(self._circles),
            len(self._constraints),
        )
        self._points.clear()
        self._lines.clear()
        self._circles.clear()
        self._constraints.clear()


__all__ = ["GeometryRepository"]
