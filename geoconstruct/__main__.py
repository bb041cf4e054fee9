import argparse
import logging
import sys
from typing import Optional, Sequence

from geoconstruct import GeometryEngine, Point
from geoconstruct.demo import build_two_circle_scene, describe

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s:%(name)s:%(message)s",
    )


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Build and drag the two-circle demonstration scene")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--drag",
        default="center2",
        help="Scene object to drag (default: center2)",
    )
    parser.add_argument("--drag-x", type=float, help="Target x coordinate for the dragged point")
    parser.add_argument("--drag-y", type=float, help="Target y coordinate for the dragged point")
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    engine: GeometryEngine
    engine, scene = build_two_circle_scene()
    logger.info("Built demonstration scene with %d object(s)", len(engine.get_all_objects()))

    print("Objects:")
    for row in describe(engine):
        print(f"  {row}")

    if args.drag_x is None and args.drag_y is None:
        return

    target = scene.get(args.drag)
    if not isinstance(target, Point):
        logger.error("Unknown point %r; choose one of %s", args.drag, ", ".join(
            name for name, obj in scene.items() if isinstance(obj, Point)
        ))
        raise SystemExit(2)

    x = target.x if args.drag_x is None else args.drag_x
    y = target.y if args.drag_y is None else args.drag_y
    if not engine.drag_point(target, x, y):
        logger.error("%s is locked and cannot be dragged", target)
        raise SystemExit(1)

    print(f"After dragging {target} to ({x:.6f}, {y:.6f}):")
    for row in describe(engine):
        print(f"  {row}")


if __name__ == "__main__":
    main(sys.argv[1:])
