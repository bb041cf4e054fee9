"""Engine: the single entry point for constructing, querying and dragging.

Every construction validates all of its preconditions before touching the
repository, so a failed call leaves the scene exactly as it was.
"""

from __future__ import annotations

import copy
import logging
from collections import deque
from typing import Iterable, List, Optional, Sequence, Set, Tuple, Union

from .config import KernelConfig, get_kernel_config
from .constraints import ON_CURVE_KINDS, Constraint, ConstraintKind
from .errors import (
    GeometryError,
    IntersectionCalculationError,
    InvalidConstructionError,
    InvalidGeometricObjectError,
)
from .factory import GeometryFactory
from .intersections import IntersectionCalculator
from .naming import SessionContext
from .objects import Circle, GeometricObject, Line, LineVariant, Point
from .repository import GeometryRepository
from .snap import SnapKind, SnapResolver, SnapResult
from .snapshot import GeometryStateSnapshot
from .solver import ConstraintSolver, DependencyGraph, DragMode, circle_dependencies, line_dependencies
from .vectors import Coord, cross, is_finite, rotate90, unit

logger = logging.getLogger(__name__)

Curve = Union[Line, Circle]


def _curve_points(curve: GeometricObject) -> Set[int]:
    if isinstance(curve, Line):
        return line_dependencies(curve)
    if isinstance(curve, Circle):
        return circle_dependencies(curve)
    if isinstance(curve, Point):
        return {curve.id}
    return set()


class GeometryEngine:
    def __init__(
        self,
        config: Optional[KernelConfig] = None,
        context: Optional[SessionContext] = None,
    ):
        self.config = copy.deepcopy(config) if config is not None else get_kernel_config()
        self.context = context or SessionContext()
        self.factory = GeometryFactory(self.context)
        self.repository = GeometryRepository()
        self.calculator = IntersectionCalculator(self.config)
        self.solver = ConstraintSolver(self.config, self.calculator)
        self.snapper = SnapResolver(self.config, self.calculator)

    # ------------------------------------------------------------------
    # Collection views

    @property
    def points(self) -> Tuple[Point, ...]:
        return self.repository.points

    @property
    def lines(self) -> Tuple[Line, ...]:
        return self.repository.lines

    @property
    def circles(self) -> Tuple[Circle, ...]:
        return self.repository.circles

    @property
    def constraints(self) -> Tuple[Constraint, ...]:
        return self.repository.constraints

    # ------------------------------------------------------------------
    # Validation helpers

    @staticmethod
    def _require_finite(*values: float) -> None:
        if not is_finite(*values):
            raise InvalidGeometricObjectError(
                "Coordinates must be finite numbers: (" + ", ".join(repr(v) for v in values) + ")"
            )

    def _require_distinct(self, p1: Point, p2: Point, what: str) -> None:
        if p1 is p2:
            raise InvalidConstructionError(f"Cannot create {what} with identical points")
        if p1.is_same_location(p2.x, p2.y, self.config.point_location_tolerance):
            raise InvalidConstructionError(
                f"Cannot create {what} between points at same location: {p1} and {p2}"
            )

    def _store_points(self, *points: Point) -> None:
        for point in points:
            self.repository.add_point(point)

    def _register(self, kind: ConstraintKind, elements: Sequence[GeometricObject]) -> Constraint:
        return self.repository.add_constraint(self.factory.create_constraint(kind, elements))

    # ------------------------------------------------------------------
    # Points

    def create_free_point(
        self, x: float, y: float, *, name: Optional[str] = None, frozen: bool = False
    ) -> Point:
        self._require_finite(x, y)
        point = self.factory.create_point(x, y, name=name, frozen=frozen)
        self.repository.add_point(point)
        logger.info("Created free point %s at (%.6g, %.6g)", point, point.x, point.y)
        return point

    def create_point_on_line(self, line: Line, x: float, y: float) -> Point:
        self._require_finite(x, y)
        if line.is_degenerate(self.config.point_location_tolerance):
            raise InvalidGeometricObjectError(f"{line.description()} has no direction")
        px, py = line.closest_point((x, y))
        point = self.factory.create_point(px, py)
        line.add_point(point)
        self.repository.add_point(point)
        self._register(ConstraintKind.ON_LINE, [point, line])
        logger.info("Created point %s on %s at (%.6g, %.6g)", point, line, px, py)
        return point

    def create_point_on_circle(self, circle: Circle, x: float, y: float) -> Point:
        self._require_finite(x, y)
        radius = circle.radius
        if not is_finite(radius) or radius <= self.config.point_location_tolerance:
            raise InvalidGeometricObjectError(f"Circle {circle} has invalid radius: {radius}")
        px, py = circle.closest_point((x, y))
        point = self.factory.create_point(px, py)
        circle.add_point(point)
        self.repository.add_point(point)
        self._register(ConstraintKind.ON_CIRCLE, [point, circle])
        logger.info("Created point %s on %s at (%.6g, %.6g)", point, circle, px, py)
        return point

    def create_midpoint(self, p1: Point, p2: Point) -> Point:
        self._require_distinct(p1, p2, "midpoint")
        mx = (p1.x + p2.x) / 2
        my = (p1.y + p2.y) / 2
        point = self.repository.find_point_at(mx, my, self.config.point_location_tolerance)
        if point is not None and self._is_upstream(point, (p1, p2)):
            logger.info("Existing point %s at the midpoint of %s and %s feeds them, not reusing it", point, p1, p2)
            point = None
        if point is None:
            point = self.factory.create_point(mx, my)
            self.repository.add_point(point)
            logger.info("Created midpoint %s of %s and %s", point, p1, p2)
        else:
            logger.info("Midpoint of %s and %s coincides with existing point %s", p1, p2, point)
        self._store_points(p1, p2)
        self._register(ConstraintKind.MIDPOINT, [point, p1, p2])
        return point

    def create_point_at(self, x: float, y: float) -> Point:
        """Create (or reuse) the point a click at ``(x, y)`` designates.

        The snap result decides: an existing point is returned as is, an
        intersection snap builds that intersection, a curve snap builds a
        point on the curve and anything else is a free point.
        """

        self._require_finite(x, y)
        snapped = self.snap(x, y)
        if snapped is None:
            return self.create_free_point(x, y)
        if snapped.kind is SnapKind.POINT and isinstance(snapped.target, Point):
            return snapped.target
        if snapped.kind is SnapKind.ON_CURVE:
            if isinstance(snapped.target, Line):
                return self.create_point_on_line(snapped.target, snapped.x, snapped.y)
            if isinstance(snapped.target, Circle):
                return self.create_point_on_circle(snapped.target, snapped.x, snapped.y)
        if snapped.kind is SnapKind.INTERSECTION and len(snapped.sources) == 2:
            created = self._intersect_pair(snapped.sources[0], snapped.sources[1])
            if created:
                return min(created, key=lambda p: p.distance_to(snapped.coords))
        return self.create_free_point(snapped.x, snapped.y)

    # ------------------------------------------------------------------
    # Lines

    def _create_line(self, p1: Point, p2: Point, variant: LineVariant) -> Line:
        self._require_distinct(p1, p2, variant.value)
        if variant is LineVariant.INFINITE:
            existing = self.repository.find_line(p1, p2, LineVariant.INFINITE)
            if existing is not None:
                logger.info("Reusing %s through %s and %s", existing, p1, p2)
                return existing
        line = self.factory.create_line(p1, p2, variant)
        self._store_points(p1, p2)
        self.repository.add_line(line)
        logger.info("Created %s %s through %s and %s", variant.value, line.name, p1, p2)
        return line

    def create_infinite_line(self, p1: Point, p2: Point) -> Line:
        return self._create_line(p1, p2, LineVariant.INFINITE)

    def create_ray(self, p1: Point, p2: Point) -> Line:
        return self._create_line(p1, p2, LineVariant.RAY)

    def create_segment(self, p1: Point, p2: Point) -> Line:
        return self._create_line(p1, p2, LineVariant.SEGMENT)

    def _create_directed_line(self, point: Point, reference: Line, kind: ConstraintKind) -> Line:
        if reference.is_degenerate(self.config.point_location_tolerance):
            raise InvalidConstructionError(
                f"Cannot create {kind.value} line to degenerate {reference.description()}"
            )
        direction = reference.direction
        if kind is ConstraintKind.PERPENDICULAR:
            direction = rotate90(direction)
        u = unit(direction)
        if u is None:
            raise InvalidConstructionError(f"{reference.description()} has no direction")
        offset = self.config.construction_offset
        helper = self.factory.create_point(point.x + u[0] * offset, point.y + u[1] * offset)
        line = self.factory.create_line(point, helper, LineVariant.INFINITE)
        self._store_points(point, helper)
        self.repository.add_line(line)
        self._register(kind, [line, reference])
        logger.info("Created %s line %s through %s to %s", kind.value, line.name, point, reference)
        return line

    def create_perpendicular_line(self, point: Point, line: Line) -> Line:
        return self._create_directed_line(point, line, ConstraintKind.PERPENDICULAR)

    def create_parallel_line(self, point: Point, line: Line) -> Line:
        return self._create_directed_line(point, line, ConstraintKind.PARALLEL)

    # ------------------------------------------------------------------
    # Circles

    def create_circle(self, center: Point, point_on_circle: Point) -> Circle:
        if center is point_on_circle:
            raise InvalidConstructionError(
                "Cannot create circle with center and point on circle being the same point"
            )
        if center.is_same_location(point_on_circle.x, point_on_circle.y, self.config.point_location_tolerance):
            raise InvalidConstructionError(
                f"Cannot create circle with zero radius: center {center} and point "
                f"{point_on_circle} are at same location"
            )
        circle = self.factory.create_circle(center, point_on_circle)
        self._store_points(center, point_on_circle)
        self.repository.add_circle(circle)
        logger.info("Created circle %s with center %s through %s", circle.name, center, point_on_circle)
        return circle

    def create_three_point_circle(self, p1: Point, p2: Point, p3: Point) -> Circle:
        self._require_distinct(p1, p2, "three-point circle")
        self._require_distinct(p2, p3, "three-point circle")
        self._require_distinct(p1, p3, "three-point circle")
        edge1 = (p2.x - p1.x, p2.y - p1.y)
        edge2 = (p3.x - p1.x, p3.y - p1.y)
        if abs(cross(edge1, edge2)) < self.config.collinearity_tolerance:
            raise InvalidConstructionError(
                f"Cannot create circle through collinear points {p1}, {p2}, {p3}"
            )
        cx, cy = self.solver.circumcenter_or_fallback(p1.coords, p2.coords, p3.coords)
        center = self.factory.create_point(cx, cy)
        circle = self.factory.create_three_point_circle(center, (p1, p2, p3))
        self._store_points(p1, p2, p3, center)
        self.repository.add_circle(circle)
        logger.info(
            "Created three-point circle %s through %s, %s, %s (center %s)",
            circle.name,
            p1,
            p2,
            p3,
            center,
        )
        return circle

    # ------------------------------------------------------------------
    # Intersections

    def _is_upstream(self, point: Point, curves: Iterable[GeometricObject]) -> bool:
        """True when ``point`` already determines one of ``curves`` (lines, circles
        or points), directly or not."""

        graph = self.build_dependency_graph()
        seen: Set[int] = set()
        queue = deque()
        for curve in curves:
            queue.extend(_curve_points(curve))
        while queue:
            current = queue.popleft()
            if current == point.id:
                return True
            if current in seen:
                continue
            seen.add(current)
            entry = graph.get(current)
            if entry is not None:
                queue.extend(entry.determiners)
        return False

    def _attach_intersection(
        self, coord: Coord, curves: Tuple[Curve, Curve], kind: ConstraintKind
    ) -> Point:
        x, y = coord
        point = self.repository.find_point_at(x, y, self.config.point_location_tolerance)
        if point is None:
            point = self.factory.create_point(x, y)
            self.repository.add_point(point)
            self._register(kind, [point, curves[0], curves[1]])
            logger.info(
                "Created intersection %s of %s and %s at (%.6g, %.6g)", point, curves[0], curves[1], x, y
            )
        elif self._is_upstream(point, curves):
            logger.info("Intersection of %s and %s is their defining point %s", curves[0], curves[1], point)
        else:
            self._register(kind, [point, curves[0], curves[1]])
            logger.info("Intersection of %s and %s reuses existing point %s", curves[0], curves[1], point)
        for curve in curves:
            curve.add_point(point)
        return point

    def _compute(self, label: str, compute):
        try:
            return compute()
        except GeometryError:
            raise
        except Exception as exc:
            raise IntersectionCalculationError(f"Unexpected error during {label} intersection", exc) from exc

    def create_line_line_intersection(self, line1: Line, line2: Line) -> Optional[Point]:
        if line1 is line2:
            raise InvalidConstructionError("Cannot intersect line with itself")
        coord = self._compute("line-line", lambda: self.calculator.line_line(line1, line2))
        if coord is None:
            logger.info("%s and %s do not intersect", line1, line2)
            return None
        return self._attach_intersection(coord, (line1, line2), ConstraintKind.LINE_LINE_INTERSECTION)

    def create_line_circle_intersection(self, line: Line, circle: Circle) -> List[Point]:
        coords = self._compute("line-circle", lambda: self.calculator.line_circle(line, circle))
        return [
            self._attach_intersection(coord, (line, circle), ConstraintKind.LINE_CIRCLE_INTERSECTION)
            for coord in coords
        ]

    def create_circle_circle_intersection(self, circle1: Circle, circle2: Circle) -> List[Point]:
        coords = self._compute("circle-circle", lambda: self.calculator.circle_circle(circle1, circle2))
        return [
            self._attach_intersection(coord, (circle1, circle2), ConstraintKind.CIRCLE_CIRCLE_INTERSECTION)
            for coord in coords
        ]

    def _intersect_pair(self, first: GeometricObject, second: GeometricObject) -> List[Point]:
        if isinstance(first, Line) and isinstance(second, Line):
            found = self.create_line_line_intersection(first, second)
            return [] if found is None else [found]
        if isinstance(first, Line) and isinstance(second, Circle):
            return self.create_line_circle_intersection(first, second)
        if isinstance(first, Circle) and isinstance(second, Line):
            return self.create_line_circle_intersection(second, first)
        if isinstance(first, Circle) and isinstance(second, Circle):
            return self.create_circle_circle_intersection(first, second)
        raise InvalidConstructionError(f"Cannot intersect {first.label} with {second.label}")

    # ------------------------------------------------------------------
    # Queries

    def select_point_at(self, x: float, y: float, tolerance: Optional[float] = None) -> Optional[Point]:
        tol = self.config.point_selection_tolerance if tolerance is None else tolerance
        return self.repository.nearest_point(x, y, tol)

    def select_line_at(self, x: float, y: float, tolerance: Optional[float] = None) -> Optional[Line]:
        tol = self.config.point_selection_tolerance if tolerance is None else tolerance
        return self.repository.nearest_line(x, y, tol)

    def select_circle_at(self, x: float, y: float, tolerance: Optional[float] = None) -> Optional[Circle]:
        tol = self.config.point_selection_tolerance if tolerance is None else tolerance
        return self.repository.nearest_circle(x, y, tol)

    def get_all_objects(self) -> List[GeometricObject]:
        return self.repository.all_objects()

    def snap(self, x: float, y: float) -> Optional[SnapResult]:
        return self.snapper.resolve(x, y, self.get_all_objects())

    def highlighted_object(self, x: float, y: float) -> Optional[GeometricObject]:
        return self.snapper.highlighted_object(x, y, self.get_all_objects())

    # ------------------------------------------------------------------
    # Drag support

    def build_dependency_graph(self) -> DependencyGraph:
        return self.solver.build_dependency_graph(self.constraints, self.circles)

    def find_transitive_dependents(
        self, changed_ids: Iterable[int], graph: Optional[DependencyGraph] = None
    ) -> Set[int]:
        if graph is None:
            graph = self.build_dependency_graph()
        return self.solver.find_transitive_dependents(changed_ids, graph)

    def can_drag_free(self, obj: GeometricObject, graph: Optional[DependencyGraph] = None) -> bool:
        if graph is None:
            graph = self.build_dependency_graph()
        return self.solver.can_drag_free(obj.id, graph)

    def can_drag_constrained(self, obj: GeometricObject) -> bool:
        return self.solver.can_drag_constrained(obj.id, self.constraints)

    def drag_mode(self, obj: GeometricObject, graph: Optional[DependencyGraph] = None) -> DragMode:
        if isinstance(obj, Point) and obj.frozen:
            return DragMode.LOCKED
        if graph is None:
            graph = self.build_dependency_graph()
        return self.solver.classify(obj.id, graph, self.constraints)

    def update_constraints(self, affected_ids: Iterable[int]) -> None:
        self.solver.update_constraints(
            affected_ids, self.constraints, self.points, self.lines, self.circles
        )

    def _move(
        self,
        point: Point,
        x: float,
        y: float,
        graph: DependencyGraph,
        carried_by: Optional[Circle] = None,
    ) -> bool:
        mode = self.drag_mode(point, graph)
        if mode is DragMode.FREE:
            point.set_xy(x, y)
            return True
        if mode is DragMode.CONSTRAINED:
            for constraint in self.constraints:
                if constraint.kind in ON_CURVE_KINDS and constraint.dependent is point:
                    if carried_by is not None and constraint.element(1) is carried_by:
                        point.set_xy(x, y)
                    else:
                        point.set_xy(*constraint.element(1).closest_point((x, y)))
                    return True
        return False

    def _propagate(self, moved: Iterable[Point], graph: DependencyGraph) -> None:
        ids = {p.id for p in moved}
        affected = set(ids)
        affected.update(self.solver.find_transitive_dependents(ids, graph))
        self.update_constraints(affected)

    def drag_point(self, point: Point, x: float, y: float) -> bool:
        """Move ``point`` toward ``(x, y)`` and propagate.

        Returns ``False`` (and changes nothing) when the point is locked.
        """

        self._require_finite(x, y)
        graph = self.build_dependency_graph()
        if not self._move(point, x, y, graph):
            logger.warning("Cannot drag constrained object: %s", point)
            return False
        logger.debug("Dragged %s to (%.6g, %.6g)", point, point.x, point.y)
        self._propagate([point], graph)
        return True

    def _translate(self, points: Sequence[Point], dx: float, dy: float, carried_by: Optional[Circle] = None) -> bool:
        self._require_finite(dx, dy)
        graph = self.build_dependency_graph()
        moved: List[Point] = []
        seen: Set[int] = set()
        for point in points:
            if point.id in seen:
                continue
            seen.add(point.id)
            if self._move(point, point.x + dx, point.y + dy, graph, carried_by):
                moved.append(point)
        if not moved:
            return False
        self._propagate(moved, graph)
        return True

    def drag_line(self, line: Line, dx: float, dy: float) -> bool:
        """Translate every draggable point of ``line`` by ``(dx, dy)``."""

        return self._translate(list(line.points), dx, dy)

    def drag_circle(self, circle: Circle, dx: float, dy: float) -> bool:
        """Translate the centre and points of ``circle``; its own on-circle points ride along."""

        return self._translate([circle.center, *circle.points], dx, dy, carried_by=circle)

    # ------------------------------------------------------------------
    # Lifecycle

    def save_state(self) -> GeometryStateSnapshot:
        return GeometryStateSnapshot.capture(self.repository, self.context)

    def restore_state(self, snapshot: GeometryStateSnapshot) -> None:
        snapshot.restore(self.repository, self.context)

    def clear(self) -> None:
        self.repository.clear()
        self.factory.reset()
        logger.info("Cleared geometry engine")


__all__ = ["GeometryEngine"]
