"""Typed constraints: the only record of why an object is not free."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple

from .objects import GeometricObject


class ConstraintKind(Enum):
    LINE_LINE_INTERSECTION = "line_line_intersection"
    LINE_CIRCLE_INTERSECTION = "line_circle_intersection"
    CIRCLE_CIRCLE_INTERSECTION = "circle_circle_intersection"
    MIDPOINT = "midpoint"
    PERPENDICULAR = "perpendicular"
    PARALLEL = "parallel"
    EQUAL_DISTANCE = "equal_distance"
    ON_CIRCLE = "on_circle"
    ON_LINE = "on_line"


INTERSECTION_KINDS = frozenset(
    {
        ConstraintKind.LINE_LINE_INTERSECTION,
        ConstraintKind.LINE_CIRCLE_INTERSECTION,
        ConstraintKind.CIRCLE_CIRCLE_INTERSECTION,
    }
)
ON_CURVE_KINDS = frozenset({ConstraintKind.ON_LINE, ConstraintKind.ON_CIRCLE})
DIRECTION_KINDS = frozenset({ConstraintKind.PERPENDICULAR, ConstraintKind.PARALLEL})


@dataclass(eq=False)
class Constraint:
    """Constraint over ``elements``.

    ``elements[0]`` is the dependent object; the remaining elements are its
    determiners, in the order the constraint kind expects:

    * intersections: point, curve, curve
    * midpoint: point, endpoint, endpoint
    * perpendicular / parallel: dependent line, reference line
    * on-line / on-circle: point, curve
    """

    kind: ConstraintKind
    elements: List[GeometricObject] = field(default_factory=list)
    proportion: float = 0.0

    def __post_init__(self) -> None:
        if not self.elements:
            raise ValueError(f"{self.kind.value} constraint needs at least one element")
        self.elements = list(self.elements)

    @property
    def dependent(self) -> GeometricObject:
        return self.elements[0]

    @property
    def determiners(self) -> Tuple[GeometricObject, ...]:
        return tuple(self.elements[1:])

    def element(self, index: int) -> GeometricObject:
        return self.elements[index]

    def references(self, object_id: int) -> bool:
        return any(element.id == object_id for element in self.elements)

    def same_as(self, other: "Constraint") -> bool:
        return (
            self.kind is other.kind
            and len(self.elements) == len(other.elements)
            and all(a is b for a, b in zip(self.elements, other.elements))
        )

    def description(self) -> str:
        names = ", ".join(str(element) for element in self.elements)
        return f"{self.kind.value}({names})"

    def __str__(self) -> str:
        return self.description()


__all__ = [
    "Constraint",
    "ConstraintKind",
    "DIRECTION_KINDS",
    "INTERSECTION_KINDS",
    "ON_CURVE_KINDS",
]
