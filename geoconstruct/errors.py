"""Exception hierarchy raised by the construction kernel."""

from __future__ import annotations

from typing import Optional


class GeometryError(Exception):
    """Base class for all geometry-related failures."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message} (caused by: {self.cause!r})"
        return self.message


class InvalidGeometricObjectError(GeometryError):
    """A numeric value is non-finite or an object's defining data is degenerate."""


class InvalidConstructionError(GeometryError):
    """The geometric preconditions of a construction do not hold."""


class IntersectionCalculationError(GeometryError):
    """An intersection could not be derived (e.g. identical circles)."""


__all__ = [
    "GeometryError",
    "InvalidGeometricObjectError",
    "InvalidConstructionError",
    "IntersectionCalculationError",
]
