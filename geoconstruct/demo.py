from typing import Dict, List, Optional, Tuple

from .engine import GeometryEngine
from .objects import Circle, GeometricObject, Line, Point


def build_two_circle_scene(engine: Optional[GeometryEngine] = None) -> Tuple[GeometryEngine, Dict[str, GeometricObject]]:
    """Two radius-5 circles centred 8 apart, their crossings and the common chord."""

    engine = engine or GeometryEngine()
    a = engine.create_free_point(0.0, 0.0)
    b = engine.create_free_point(5.0, 0.0)
    c = engine.create_free_point(8.0, 0.0)
    d = engine.create_free_point(13.0, 0.0)
    c1 = engine.create_circle(a, b)
    c2 = engine.create_circle(c, d)
    crossings = engine.create_circle_circle_intersection(c1, c2)
    chord = engine.create_segment(crossings[0], crossings[1])
    mid = engine.create_midpoint(crossings[0], crossings[1])
    scene: Dict[str, GeometricObject] = {
        "center1": a,
        "rim1": b,
        "center2": c,
        "rim2": d,
        "circle1": c1,
        "circle2": c2,
        "chord": chord,
        "chord_mid": mid,
    }
    for idx, point in enumerate(crossings):
        scene[f"crossing{idx}"] = point
    return engine, scene


def describe(engine: GeometryEngine) -> List[str]:
    rows: List[str] = []
    for obj in engine.get_all_objects():
        if isinstance(obj, Point):
            rows.append(f"{obj}: ({obj.x:.6f}, {obj.y:.6f}) [{engine.drag_mode(obj).value}]")
        elif isinstance(obj, Line):
            rows.append(f"{obj.name}: {obj.description()}")
        elif isinstance(obj, Circle):
            rows.append(f"{obj.name}: {obj.description()} r={obj.radius:.6f}")
    return rows


def run():
    engine, scene = build_two_circle_scene()
    print("Scene:")
    for row in describe(engine):
        print(f"  {row}")

    engine.drag_point(scene["center2"], 6.0, 0.0)
    print("After dragging the second centre to (6, 0):")
    for row in describe(engine):
        print(f"  {row}")


if __name__ == "__main__":
    run()
