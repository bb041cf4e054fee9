"""Example: snapshot-based undo and redo around drags and constructions."""

from geoconstruct import GeometryEngine, UndoHistory


def main() -> None:
    engine = GeometryEngine()
    history = UndoHistory(engine)
    center = engine.create_free_point(0.0, 0.0)
    rim = engine.create_free_point(5.0, 0.0)
    circle = engine.create_circle(center, rim)

    history.checkpoint()
    marker = engine.create_point_on_circle(circle, 3.0, 3.0)
    print(f"{marker} placed at ({marker.x:.6f}, {marker.y:.6f})")

    history.checkpoint()
    engine.drag_circle(circle, 4.0, -2.0)
    print(f"After moving {circle}: {marker} at ({marker.x:.6f}, {marker.y:.6f})")

    history.undo()
    print(f"Undo drag: {marker} at ({marker.x:.6f}, {marker.y:.6f})")
    history.undo()
    print(f"Undo placement: {len(engine.points)} point(s) left")
    history.redo()
    print(f"Redo placement: {len(engine.points)} point(s)")


if __name__ == "__main__":
    main()
