"""Example: foot of a perpendicular that follows its reference line while dragging."""

from geoconstruct import GeometryEngine


def main() -> None:
    engine = GeometryEngine()
    a = engine.create_free_point(0.0, 0.0)
    b = engine.create_free_point(10.0, 0.0)
    p = engine.create_free_point(3.0, 4.0)
    ab = engine.create_infinite_line(a, b)
    perpendicular = engine.create_perpendicular_line(p, ab)
    foot = engine.create_line_line_intersection(perpendicular, ab)

    print(f"Foot {foot}: ({foot.x:.6f}, {foot.y:.6f}) [{engine.drag_mode(foot).value}]")
    for x, y in [(10.0, 5.0), (10.0, 10.0), (0.0, 10.0)]:
        engine.drag_point(b, x, y)
        print(f"B at ({x:g}, {y:g}) -> {foot}: ({foot.x:.6f}, {foot.y:.6f})")


if __name__ == "__main__":
    main()
