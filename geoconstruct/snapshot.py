"""Whole-scene snapshots and the undo/redo history built on them.

Objects are mutated in place while dragging, so a snapshot keeps the
structural references *and* value copies of everything that can change:
point coordinates, the point lists of lines and circles, circle centres and
the session counters.  Restoring writes those values back into the very same
instances, which keeps identity-based references held by callers valid.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Tuple

from .constraints import Constraint
from .naming import SessionContext, SessionState
from .objects import Circle, Line, Point
from .repository import GeometryRepository
from .vectors import Coord

if TYPE_CHECKING:
    from .engine import GeometryEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _CircleState:
    center: Point
    points: Tuple[Point, ...]
    defining_count: int


@dataclass(frozen=True)
class GeometryStateSnapshot:
    points: Tuple[Point, ...]
    lines: Tuple[Line, ...]
    circles: Tuple[Circle, ...]
    constraints: Tuple[Constraint, ...]
    coordinates: Dict[int, Coord]
    line_points: Dict[int, Tuple[Point, ...]]
    circle_states: Dict[int, _CircleState]
    session: SessionState

    @classmethod
    def capture(cls, repository: GeometryRepository, context: SessionContext) -> "GeometryStateSnapshot":
        points = repository.points
        lines = repository.lines
        circles = repository.circles
        coordinates = {p.id: p.coords for p in points}
        # Centres and incident points are usually stored points already; this
        # covers any that are not.
        for line in lines:
            for p in line.points:
                coordinates.setdefault(p.id, p.coords)
        for circle in circles:
            coordinates.setdefault(circle.center.id, circle.center.coords)
            for p in circle.points:
                coordinates.setdefault(p.id, p.coords)
        return cls(
            points=points,
            lines=lines,
            circles=circles,
            constraints=repository.constraints,
            coordinates=coordinates,
            line_points={line.id: tuple(line.points) for line in lines},
            circle_states={
                circle.id: _CircleState(circle.center, tuple(circle.points), circle.defining_count)
                for circle in circles
            },
            session=context.state(),
        )

    def _all_points(self) -> Dict[int, Point]:
        found: Dict[int, Point] = {p.id: p for p in self.points}
        for pts in self.line_points.values():
            for p in pts:
                found.setdefault(p.id, p)
        for state in self.circle_states.values():
            found.setdefault(state.center.id, state.center)
            for p in state.points:
                found.setdefault(p.id, p)
        return found

    def restore(self, repository: GeometryRepository, context: SessionContext) -> None:
        repository.replace_contents(self.points, self.lines, self.circles, self.constraints)
        for point_id, point in self._all_points().items():
            saved = self.coordinates.get(point_id)
            if saved is not None:
                point.set_xy(*saved)
        for line in self.lines:
            line.points = list(self.line_points[line.id])
        for circle in self.circles:
            state = self.circle_states[circle.id]
            circle.center = state.center
            circle.points = list(state.points)
            circle.defining_count = state.defining_count
        context.restore(self.session)
        logger.info(
            "Restored snapshot: %d points, %d lines, %d circles, %d constraints",
            len(self.points),
            len(self.lines),
            len(self.circles),
            len(self.constraints),
        )


class UndoHistory:
    """Undo/redo stacks of snapshots taken before each user action."""

    def __init__(self, engine: "GeometryEngine", limit: int = 100):
        self.engine = engine
        self.limit = limit
        self._undo: List[GeometryStateSnapshot] = []
        self._redo: List[GeometryStateSnapshot] = []

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def checkpoint(self) -> None:
        """Record the current state; call before mutating the scene."""

        self._undo.append(self.engine.save_state())
        if len(self._undo) > self.limit:
            del self._undo[0]
        self._redo.clear()

    def undo(self) -> bool:
        if not self._undo:
            return False
        snapshot = self._undo.pop()
        self._redo.append(self.engine.save_state())
        self.engine.restore_state(snapshot)
        return True

    def redo(self) -> bool:
        if not self._redo:
            return False
        snapshot = self._redo.pop()
        self._undo.append(self.engine.save_state())
        self.engine.restore_state(snapshot)
        return True

    def clear(self) -> None:
        self._undo.clear()
        self._redo.clear()


__all__ = ["GeometryStateSnapshot", "UndoHistory"]
