"""Vector helpers shared by the object model and the intersection calculator.

All functions accept anything that looks like a length-2 sequence of numbers
and return plain ``(x, y)`` float tuples so callers never leak numpy scalars
into the object model.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence, Tuple

import numpy as np

Coord = Tuple[float, float]

_EPS = 1e-12


def as_array(value: Sequence[float]) -> np.ndarray:
    arr = np.asarray(value, dtype=float)
    if arr.shape != (2,):
        raise ValueError("coordinate must be length-2")
    return arr


def as_coord(value: Sequence[float]) -> Coord:
    return float(value[0]), float(value[1])


def is_finite(*values: float) -> bool:
    return all(math.isfinite(v) for v in values)


def distance(a: Sequence[float], b: Sequence[float]) -> float:
    return math.hypot(float(b[0]) - float(a[0]), float(b[1]) - float(a[1]))


def midpoint(a: Sequence[float], b: Sequence[float]) -> Coord:
    return (float(a[0]) + float(b[0])) / 2.0, (float(a[1]) + float(b[1])) / 2.0


def cross(a: Sequence[float], b: Sequence[float]) -> float:
    return float(a[0]) * float(b[1]) - float(a[1]) * float(b[0])


def rotate90(vec: Sequence[float]) -> Coord:
    return -float(vec[1]), float(vec[0])


def unit(vec: Sequence[float]) -> Optional[Coord]:
    arr = as_array(vec)
    norm = float(np.linalg.norm(arr))
    if norm <= _EPS:
        return None
    return as_coord(arr / norm)


def project_parameter(
    point: Sequence[float], anchor: Sequence[float], direction: Sequence[float]
) -> Optional[float]:
    """Return ``t`` such that ``anchor + t * direction`` is the foot of ``point``."""

    dir_vec = as_array(direction)
    denom = float(np.dot(dir_vec, dir_vec))
    if denom <= _EPS:
        return None
    rel = as_array(point) - as_array(anchor)
    return float(np.dot(rel, dir_vec) / denom)


def clamp_parameter(t: float, clamp: Optional[str]) -> float:
    if clamp == "segment":
        return min(max(t, 0.0), 1.0)
    if clamp == "ray":
        return max(t, 0.0)
    return t


def point_at(anchor: Sequence[float], direction: Sequence[float], t: float) -> Coord:
    return as_coord(as_array(anchor) + as_array(direction) * t)


def project_point_to_line(
    point: Sequence[float],
    anchor: Sequence[float],
    direction: Sequence[float],
    *,
    clamp: Optional[str] = None,
) -> Coord:
    """Project ``point`` onto the parametric line ``anchor + t * direction``.

    ``clamp`` restricts the parameter to ``[0, 1]`` (``"segment"``) or
    ``[0, inf)`` (``"ray"``). A collapsed direction projects onto ``anchor``.
    """

    t = project_parameter(point, anchor, direction)
    if t is None:
        return as_coord(anchor)
    return point_at(anchor, direction, clamp_parameter(t, clamp))


def project_point_to_circle(
    point: Sequence[float],
    center: Sequence[float],
    radius: float,
    *,
    fallback: Optional[Sequence[float]] = None,
) -> Coord:
    """Scale the centre-to-point vector onto the circle of ``radius``.

    When ``point`` coincides with the centre, ``fallback`` (a location whose
    direction from the centre is used) or the positive x axis decides.
    """

    center_arr = as_array(center)
    vec = as_array(point) - center_arr
    norm = float(np.linalg.norm(vec))
    if norm <= _EPS:
        if fallback is not None:
            fb = as_array(fallback) - center_arr
            fb_norm = float(np.linalg.norm(fb))
            if fb_norm > _EPS:
                return as_coord(center_arr + fb * (radius / fb_norm))
        return as_coord(center_arr + np.array([radius, 0.0]))
    return as_coord(center_arr + vec * (radius / norm))


def circumcenter(
    a: Sequence[float], b: Sequence[float], c: Sequence[float], *, tolerance: float = 1e-10
) -> Optional[Coord]:
    """Return the circumcentre of ``abc`` or ``None`` when the points are collinear."""

    ax, ay = as_coord(a)
    bx, by = as_coord(b)
    cx, cy = as_coord(c)
    d = 2.0 * (ax * (by - cy) + bx * (cy - ay) + cx * (ay - by))
    if abs(d) < tolerance:
        return None
    sq_a = ax * ax + ay * ay
    sq_b = bx * bx + by * by
    sq_c = cx * cx + cy * cy
    ux = sq_a * (by - cy) + sq_b * (cy - ay) + sq_c * (ay - by)
    uy = sq_a * (cx - bx) + sq_b * (ax - cx) + sq_c * (bx - ax)
    return ux / d, uy / d


def nearest(candidates: Sequence[Sequence[float]], target: Sequence[float]) -> Optional[int]:
    """Return the index of the candidate closest to ``target``."""

    if not candidates:
        return None
    pts = np.asarray(candidates, dtype=float).reshape(-1, 2)
    dists = np.linalg.norm(pts - as_array(target), axis=1)
    return int(np.argmin(dists))


__all__ = [
    "Coord",
    "as_array",
    "as_coord",
    "circumcenter",
    "clamp_parameter",
    "cross",
    "distance",
    "is_finite",
    "midpoint",
    "nearest",
    "point_at",
    "project_parameter",
    "project_point_to_circle",
    "project_point_to_line",
    "rotate90",
    "unit",
]
