"""Object factory: the single place where ids and names are handed out."""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from .constraints import Constraint, ConstraintKind
from .objects import (
    LINE_CLASSES,
    Circle,
    CircleKind,
    GeometricObject,
    Line,
    LineKind,
    LineVariant,
    Param,
    Point,
)
from .naming import SessionContext

logger = logging.getLogger(__name__)


class GeometryFactory:
    def __init__(self, context: Optional[SessionContext] = None):
        self.context = context or SessionContext()

    def _param(self, value: float) -> Param:
        return Param(self.context.next_param_index(), float(value))

    def create_point(
        self,
        x: float,
        y: float,
        *,
        name: Optional[str] = None,
        frozen: bool = False,
    ) -> Point:
        object_id = self.context.next_id()
        x_param = self._param(x)
        y_param = self._param(y)
        if frozen:
            x_param.set_static()
            y_param.set_static()
        point = Point(
            object_id,
            x_param,
            y_param,
            frozen=frozen,
            name=name if name is not None else self.context.names.point_name(),
        )
        logger.debug("Created point %s at (%.6g, %.6g)", point, point.x, point.y)
        return point

    def create_line(
        self,
        p1: Point,
        p2: Point,
        variant: LineVariant = LineVariant.INFINITE,
        kind: LineKind = LineKind.STANDARD,
        *,
        name: Optional[str] = None,
    ) -> Line:
        line_cls = LINE_CLASSES[variant]
        line = line_cls(
            self.context.next_id(),
            p1,
            p2,
            kind=kind,
            name=name if name is not None else self.context.names.line_name(),
        )
        logger.debug("Created %s %s through %s and %s", variant.value, line.name, p1, p2)
        return line

    def create_circle(
        self,
        center: Point,
        point_on_circle: Optional[Point] = None,
        kind: CircleKind = CircleKind.POINT_BASED,
        *,
        name: Optional[str] = None,
    ) -> Circle:
        points = () if point_on_circle is None else (point_on_circle,)
        circle = Circle(
            self.context.next_id(),
            center,
            points,
            kind=kind,
            name=name if name is not None else self.context.names.circle_name(),
        )
        logger.debug("Created circle %s centred at %s", circle.name, center)
        return circle

    def create_three_point_circle(
        self,
        center: Point,
        points: Sequence[Point],
        *,
        name: Optional[str] = None,
    ) -> Circle:
        if len(points) != 3:
            raise ValueError("three-point circle needs exactly three defining points")
        circle = Circle(
            self.context.next_id(),
            center,
            points,
            kind=CircleKind.THREE_POINT,
            name=name if name is not None else self.context.names.circle_name(),
        )
        logger.debug(
            "Created three-point circle %s through %s",
            circle.name,
            ", ".join(str(p) for p in points),
        )
        return circle

    def create_constraint(
        self, kind: ConstraintKind, elements: Iterable[GeometricObject]
    ) -> Constraint:
        return Constraint(kind, list(elements))

    def reset(self) -> None:
        self.context.reset()


__all__ = ["GeometryFactory"]
