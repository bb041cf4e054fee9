"""Dependency graph, drag classification and ordered constraint propagation.

The graph maps a dependent object id to the constraint that owns it and the
ids of the free points it is ultimately computed from.  Lines expand to their
two defining points, circles to their centre plus defining points, so the
transitive closure only ever walks point ids (and the ids of lines that are
themselves constrained, such as perpendicular helpers).
"""

from __future__ import annotations

import logging
from collections import defaultdict, deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set

from .config import KernelConfig, get_kernel_config
from .constraints import (
    DIRECTION_KINDS,
    ON_CURVE_KINDS,
    Constraint,
    ConstraintKind,
)
from .errors import GeometryError
from .intersections import IntersectionCalculator
from .logging_utils import apply_debug_logging
from .objects import Circle, CircleKind, GeometricObject, Line, Point
from .vectors import Coord, distance, midpoint, nearest, rotate90, unit

logger = logging.getLogger(__name__)

_SETTLE_EPS = 1e-12

_PRIORITY: Dict[ConstraintKind, int] = {
    ConstraintKind.MIDPOINT: 0,
    ConstraintKind.LINE_LINE_INTERSECTION: 1,
    ConstraintKind.LINE_CIRCLE_INTERSECTION: 2,
    ConstraintKind.CIRCLE_CIRCLE_INTERSECTION: 3,
    ConstraintKind.ON_LINE: 4,
    ConstraintKind.ON_CIRCLE: 4,
    ConstraintKind.PERPENDICULAR: 5,
    ConstraintKind.PARALLEL: 5,
}
_FALLBACK_PRIORITY = 6


@dataclass
class DependencyEntry:
    """Owner of a dependent id.

    ``constraint`` is ``None`` for derived entries (three-point circle
    centres), which have determiners but no constraint of their own.
    """

    constraint: Optional[Constraint]
    determiners: Set[int] = field(default_factory=set)

    @property
    def kind(self) -> Optional[ConstraintKind]:
        return None if self.constraint is None else self.constraint.kind


DependencyGraph = Dict[int, DependencyEntry]


class DragMode(Enum):
    FREE = "free"
    CONSTRAINED = "constrained"
    LOCKED = "locked"


def line_dependencies(line: Line) -> Set[int]:
    return {p.id for p in line.defining_points}


def circle_dependencies(circle: Circle) -> Set[int]:
    deps = {circle.center.id}
    deps.update(p.id for p in circle.defining_points)
    return deps


def _curve_dependencies(obj: GeometricObject) -> Set[int]:
    if isinstance(obj, Line):
        return line_dependencies(obj)
    if isinstance(obj, Circle):
        return circle_dependencies(obj)
    if isinstance(obj, Point):
        return {obj.id}
    return set()


def _ownership_rank(constraint: Optional[Constraint]) -> int:
    """Midpoints and intersections fix a point outright, on-curve constraints
    leave one degree of freedom, direction constraints leave the point free."""

    if constraint is None or constraint.kind in DIRECTION_KINDS:
        return 0
    if constraint.kind in ON_CURVE_KINDS:
        return 1
    return 2


def _merge_entry(
    graph: DependencyGraph, object_id: int, constraint: Optional[Constraint], determiners: Set[int]
) -> None:
    # The strongest owner wins; determiners are unioned either way.
    entry = graph.get(object_id)
    if entry is None:
        graph[object_id] = DependencyEntry(constraint, set(determiners) - {object_id})
        return
    entry.determiners.update(determiners - {object_id})
    if constraint is not None and _ownership_rank(constraint) > _ownership_rank(entry.constraint):
        entry.constraint = constraint


class ConstraintSolver:
    def __init__(
        self,
        config: Optional[KernelConfig] = None,
        calculator: Optional[IntersectionCalculator] = None,
    ):
        self.config = config or get_kernel_config()
        self.calculator = calculator or IntersectionCalculator(self.config)

    # ------------------------------------------------------------------
    # Graph construction

    def build_dependency_graph(
        self, constraints: Iterable[Constraint], circles: Iterable[Circle] = ()
    ) -> DependencyGraph:
        graph: DependencyGraph = {}

        for circle in circles:
            if circle.kind is CircleKind.THREE_POINT:
                graph[circle.center.id] = DependencyEntry(
                    None, {p.id for p in circle.defining_points}
                )

        for constraint in constraints:
            kind = constraint.kind
            if kind is ConstraintKind.EQUAL_DISTANCE:
                continue
            dependent = constraint.dependent
            if kind in DIRECTION_KINDS:
                if len(constraint.elements) < 2:
                    continue
                reference_deps = _curve_dependencies(constraint.element(1))
                if isinstance(dependent, Line):
                    anchor, helper = dependent.defining_points
                    _merge_entry(graph, dependent.id, constraint, reference_deps | {anchor.id})
                    _merge_entry(graph, anchor.id, constraint, reference_deps)
                    # The helper is re-placed from the anchor.
                    _merge_entry(graph, helper.id, constraint, reference_deps | {anchor.id})
                else:
                    _merge_entry(graph, dependent.id, constraint, reference_deps)
                continue
            deps: Set[int] = set()
            for determiner in constraint.determiners:
                deps.update(_curve_dependencies(determiner))
            _merge_entry(graph, dependent.id, constraint, deps)

        logger.debug("Built dependency graph with %d entries", len(graph))
        return graph

    def find_transitive_dependents(
        self, changed_ids: Iterable[int], graph: Mapping[int, DependencyEntry]
    ) -> Set[int]:
        """Return every id reachable from ``changed_ids`` along determiner edges.

        Ids of the input set are only included when a cycle leads back to them.
        """

        reverse: Dict[int, List[int]] = defaultdict(list)
        for dependent_id, entry in graph.items():
            for determiner_id in entry.determiners:
                reverse[determiner_id].append(dependent_id)

        found: Set[int] = set()
        queue = deque(changed_ids)
        while queue:
            current = queue.popleft()
            for dependent_id in reverse.get(current, ()):
                if dependent_id not in found:
                    found.add(dependent_id)
                    queue.append(dependent_id)
        return found

    # ------------------------------------------------------------------
    # Classification

    def can_drag_free(self, object_id: int, graph: Mapping[int, DependencyEntry]) -> bool:
        entry = graph.get(object_id)
        if entry is None:
            return True
        return entry.kind in DIRECTION_KINDS

    def can_drag_constrained(self, object_id: int, constraints: Iterable[Constraint]) -> bool:
        owner: Optional[Constraint] = None
        for constraint in constraints:
            if constraint.dependent.id == object_id and _ownership_rank(constraint) > _ownership_rank(owner):
                owner = constraint
        return owner is not None and owner.kind in ON_CURVE_KINDS

    def classify(
        self,
        object_id: int,
        graph: Mapping[int, DependencyEntry],
        constraints: Sequence[Constraint] = (),
    ) -> DragMode:
        """Drag mode of ``object_id`` according to the owner recorded in ``graph``."""

        if self.can_drag_free(object_id, graph):
            return DragMode.FREE
        if graph[object_id].kind in ON_CURVE_KINDS:
            return DragMode.CONSTRAINED
        return DragMode.LOCKED

    def project_onto_constraint(
        self, point: Point, x: float, y: float, constraints: Iterable[Constraint]
    ) -> Optional[Coord]:
        """Return where a constrained drag of ``point`` to ``(x, y)`` lands."""

        for constraint in constraints:
            if constraint.kind in ON_CURVE_KINDS and constraint.dependent is point:
                return constraint.element(1).closest_point((x, y))
        return None

    # ------------------------------------------------------------------
    # Propagation

    def order_constraints(self, constraints: Iterable[Constraint]) -> List[Constraint]:
        return sorted(constraints, key=lambda c: _PRIORITY.get(c.kind, _FALLBACK_PRIORITY))

    def update_constraints(
        self,
        affected_ids: Iterable[int],
        constraints: Sequence[Constraint],
        points: Sequence[Point],
        lines: Sequence[Line] = (),
        circles: Sequence[Circle] = (),
    ) -> None:
        """Re-evaluate every constraint touching ``affected_ids``.

        Three-point circle centres are refreshed first, then constraints run
        in priority order (midpoints, intersections, on-curve projections,
        perpendicular/parallel, the rest).  The ordered pass repeats until no
        point moves so that chains feeding back into an earlier category
        settle within the same call.
        """

        affected = set(affected_ids)
        ordered = self.order_constraints(constraints)
        max_passes = len(ordered) + 1

        for pass_index in range(max_passes):
            before = [p.coords for p in points]
            self._refresh_three_point_centres(affected, circles)
            for constraint in ordered:
                if self._touches(constraint, affected):
                    self._apply(constraint)
            moved = any(
                distance(old, p.coords) > _SETTLE_EPS for old, p in zip(before, points)
            )
            if not moved:
                break
        logger.debug(
            "Propagated %d affected ids through %d constraints in %d pass(es)",
            len(affected),
            len(ordered),
            pass_index + 1,
        )

    def _touches(self, constraint: Constraint, affected: Set[int]) -> bool:
        if any(element.id in affected for element in constraint.elements):
            return True
        if constraint.kind in DIRECTION_KINDS:
            dependent = constraint.dependent
            if isinstance(dependent, Line):
                return any(p.id in affected for p in dependent.defining_points)
        return False

    def _refresh_three_point_centres(self, affected: Set[int], circles: Sequence[Circle]) -> None:
        for circle in circles:
            if circle.kind is not CircleKind.THREE_POINT or circle.defining_count < 3:
                continue
            defining = circle.defining_points
            if not any(p.id in affected for p in defining):
                continue
            centre = self.circumcenter_or_fallback(*(p.coords for p in defining[:3]))
            circle.center.set_xy(*centre)
            affected.add(circle.center.id)

    def circumcenter_or_fallback(self, a: Coord, b: Coord, c: Coord) -> Coord:
        """Circumcentre of ``abc``; midpoint of ``ab`` when the points are collinear."""

        centre = self.calculator.circumcenter(a, b, c)
        if centre is None:
            logger.debug("Collinear three-point circle, falling back to midpoint of first two points")
            return midpoint(a, b)
        return centre

    def _apply(self, constraint: Constraint) -> None:
        kind = constraint.kind
        if kind is ConstraintKind.MIDPOINT:
            target, p1, p2 = constraint.elements[:3]
            target.set_xy(*midpoint(p1.coords, p2.coords))
        elif kind in (
            ConstraintKind.LINE_LINE_INTERSECTION,
            ConstraintKind.LINE_CIRCLE_INTERSECTION,
            ConstraintKind.CIRCLE_CIRCLE_INTERSECTION,
        ):
            self._apply_intersection(constraint)
        elif kind in ON_CURVE_KINDS:
            point, curve = constraint.elements[:2]
            point.set_xy(*curve.closest_point(point))
        elif kind in DIRECTION_KINDS:
            self._apply_direction(constraint)

    def _apply_intersection(self, constraint: Constraint) -> None:
        point, first, second = constraint.elements[:3]
        try:
            candidates = self.calculator.intersect(first, second)
        except GeometryError as exc:
            logger.debug("Keeping %s in place: %s", point, exc)
            return
        if not candidates:
            logger.debug("No intersection for %s, keeping current position", point)
            return
        best = nearest(candidates, point.coords)
        point.set_xy(*candidates[best])

    def _apply_direction(self, constraint: Constraint) -> None:
        line, reference = constraint.elements[:2]
        if not isinstance(line, Line) or not isinstance(reference, Line):
            return
        direction = reference.direction
        if constraint.kind is ConstraintKind.PERPENDICULAR:
            direction = rotate90(direction)
        u = unit(direction)
        if u is None:
            logger.debug("Reference %s is degenerate, leaving %s unchanged", reference, line)
            return
        anchor, other = line.defining_points
        length = anchor.distance_to(other)
        other.set_xy(anchor.x + u[0] * length, anchor.y + u[1] * length)


apply_debug_logging(globals(), logger=logger)


__all__ = [
    "ConstraintSolver",
    "DependencyEntry",
    "DependencyGraph",
    "DragMode",
    "circle_dependencies",
    "line_dependencies",
]
