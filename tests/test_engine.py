import math

import pytest

from geoconstruct import (
    ConstraintKind,
    DragMode,
    GeometryEngine,
    IntersectionCalculationError,
    InvalidConstructionError,
    InvalidGeometricObjectError,
    KernelConfig,
    LineVariant,
)


@pytest.fixture
def engine():
    return GeometryEngine()


def test_free_points_are_named_and_stored(engine):
    a = engine.create_free_point(0.0, 0.0)
    b = engine.create_free_point(1.0, 2.0, name="Q")

    assert [p.name for p in engine.points] == ["A", "Q"]
    assert engine.drag_mode(a) is DragMode.FREE
    assert b.coords == (1.0, 2.0)


@pytest.mark.parametrize("x, y", [(math.nan, 0.0), (0.0, math.inf)])
def test_non_finite_coordinates_are_rejected(engine, x, y):
    with pytest.raises(InvalidGeometricObjectError):
        engine.create_free_point(x, y)
    assert engine.points == ()


def test_line_preconditions_and_reuse(engine):
    a = engine.create_free_point(0.0, 0.0)
    b = engine.create_free_point(10.0, 0.0)
    twin = engine.create_free_point(10.0, 0.0)

    with pytest.raises(InvalidConstructionError):
        engine.create_infinite_line(a, a)
    with pytest.raises(InvalidConstructionError):
        engine.create_segment(b, twin)

    line = engine.create_infinite_line(a, b)
    assert engine.create_infinite_line(b, a) is line
    segment = engine.create_segment(a, b)
    ray = engine.create_ray(a, b)

    assert segment is not line and ray is not line
    assert ray.variant is LineVariant.RAY
    assert [l.name for l in engine.lines] == ["l1", "l2", "l3"]


def test_point_on_line_projects_and_follows(engine):
    a = engine.create_free_point(0.0, 0.0)
    b = engine.create_free_point(10.0, 0.0)
    line = engine.create_infinite_line(a, b)

    p = engine.create_point_on_line(line, 3.0, 4.0)

    assert p.coords == pytest.approx((3.0, 0.0))
    assert p in line.points
    assert engine.drag_mode(p) is DragMode.CONSTRAINED
    assert engine.can_drag_constrained(p)
    assert not engine.can_drag_free(p)

    assert engine.drag_point(p, 7.0, 9.0)
    assert p.coords == pytest.approx((7.0, 0.0))

    assert engine.drag_point(a, 0.0, 10.0)
    assert p.coords == pytest.approx((8.5, 1.5))


def test_point_on_collapsed_line_is_rejected(engine):
    a = engine.create_free_point(0.0, 0.0)
    b = engine.create_free_point(10.0, 0.0)
    line = engine.create_segment(a, b)
    engine.drag_point(b, 0.0, 0.0)

    with pytest.raises(InvalidGeometricObjectError):
        engine.create_point_on_line(line, 1.0, 1.0)


def test_point_on_circle_rides_with_dragged_circle(engine):
    centre = engine.create_free_point(0.0, 0.0)
    rim = engine.create_free_point(5.0, 0.0)
    circle = engine.create_circle(centre, rim)
    p = engine.create_point_on_circle(circle, 0.0, 10.0)

    assert p.coords == pytest.approx((0.0, 5.0))
    assert engine.drag_mode(p) is DragMode.CONSTRAINED

    assert engine.drag_circle(circle, 10.0, 0.0)

    assert centre.coords == (10.0, 0.0)
    assert rim.coords == (15.0, 0.0)
    assert p.coords == pytest.approx((10.0, 5.0))
    assert circle.radius == pytest.approx(5.0)


def test_circle_preconditions(engine):
    centre = engine.create_free_point(0.0, 0.0)
    twin = engine.create_free_point(0.0, 0.0)

    with pytest.raises(InvalidConstructionError):
        engine.create_circle(centre, centre)
    with pytest.raises(InvalidConstructionError):
        engine.create_circle(centre, twin)
    assert engine.circles == ()


def test_midpoint_is_locked_and_follows_endpoints(engine):
    a = engine.create_free_point(0.0, 0.0)
    b = engine.create_free_point(4.0, 2.0)

    m = engine.create_midpoint(a, b)

    assert m.coords == (2.0, 1.0)
    assert engine.drag_mode(m) is DragMode.LOCKED
    assert not engine.drag_point(m, 50.0, 50.0)
    assert m.coords == (2.0, 1.0)

    engine.drag_point(b, 8.0, 0.0)
    assert m.coords == (4.0, 0.0)

    with pytest.raises(InvalidConstructionError):
        engine.create_midpoint(a, a)


def test_midpoint_reuses_point_at_location(engine):
    a = engine.create_free_point(0.0, 0.0)
    b = engine.create_free_point(4.0, 0.0)
    existing = engine.create_free_point(2.0, 0.0)

    m = engine.create_midpoint(a, b)

    assert m is existing
    assert len(engine.points) == 3
    assert engine.drag_mode(existing) is DragMode.LOCKED


def test_midpoint_does_not_reuse_point_it_is_built_from(engine):
    a = engine.create_free_point(0.0, 0.0)
    b = engine.create_free_point(4.0, 0.0)
    c = engine.create_midpoint(a, b)
    d = engine.create_free_point(-2.0, 0.0)
    count = len(engine.points)

    m = engine.create_midpoint(c, d)

    assert m is not a
    assert m.coords == pytest.approx((0.0, 0.0))
    assert len(engine.points) == count + 1
    assert engine.drag_mode(a) is DragMode.FREE
    assert engine.drag_mode(m) is DragMode.LOCKED

    assert engine.drag_point(a, 2.0, 2.0)
    assert c.coords == pytest.approx((3.0, 1.0))
    assert m.coords == pytest.approx((0.5, 0.5))


def test_perpendicular_foot_tracks_reference(engine):
    a = engine.create_free_point(0.0, 0.0)
    b = engine.create_free_point(10.0, 0.0)
    p = engine.create_free_point(3.0, 4.0)
    ab = engine.create_infinite_line(a, b)

    perpendicular = engine.create_perpendicular_line(p, ab)
    helper = perpendicular.points[1]
    foot = engine.create_line_line_intersection(perpendicular, ab)

    assert helper.coords == pytest.approx((3.0, 104.0))
    assert foot.coords == pytest.approx((3.0, 0.0))
    assert engine.drag_mode(foot) is DragMode.LOCKED
    assert engine.drag_mode(p) is DragMode.FREE

    engine.drag_point(b, 10.0, 10.0)

    assert foot.coords == pytest.approx((3.5, 3.5))
    assert p.coords == (3.0, 4.0)


def test_parallel_line_follows_through_point(engine):
    a = engine.create_free_point(0.0, 0.0)
    b = engine.create_free_point(10.0, 0.0)
    p = engine.create_free_point(0.0, 5.0)
    ab = engine.create_infinite_line(a, b)

    parallel = engine.create_parallel_line(p, ab)
    helper = parallel.points[1]

    assert helper.coords == pytest.approx((100.0, 5.0))
    assert [c.kind for c in engine.constraints] == [ConstraintKind.PARALLEL]

    engine.drag_point(b, 0.0, 10.0)
    assert helper.coords == pytest.approx((0.0, 105.0))


def test_parallel_helper_stretches_with_each_anchor_drag(engine):
    a = engine.create_free_point(0.0, 0.0)
    b = engine.create_free_point(10.0, 0.0)
    p = engine.create_free_point(0.0, 5.0)
    helper = engine.create_parallel_line(p, engine.create_infinite_line(a, b)).points[1]

    engine.drag_point(p, 0.0, 20.0)
    assert helper.coords == pytest.approx((math.hypot(100.0, 15.0), 20.0))

    engine.drag_point(p, 0.0, 5.0)
    assert helper.coords == pytest.approx((math.sqrt(100.0**2 + 2 * 15.0**2), 5.0))


def test_construction_on_perpendicular_helper_follows_anchor(engine):
    a = engine.create_free_point(0.0, 0.0)
    b = engine.create_free_point(10.0, 0.0)
    p = engine.create_free_point(5.0, 5.0)
    perpendicular = engine.create_perpendicular_line(p, engine.create_infinite_line(a, b))
    helper = perpendicular.points[1]
    z = engine.create_free_point(50.0, 50.0)
    m = engine.create_midpoint(helper, z)

    assert helper.coords == pytest.approx((5.0, 105.0))
    assert m.coords == pytest.approx((27.5, 77.5))
    assert engine.find_transitive_dependents({p.id}) == {perpendicular.id, helper.id, m.id}

    assert engine.drag_point(p, 25.0, 5.0)

    reach = 5.0 + math.hypot(20.0, 100.0)
    assert helper.coords == pytest.approx((25.0, reach))
    assert m.coords == pytest.approx((37.5, (reach + 50.0) / 2))


def test_intersection_locks_point_already_on_line(engine):
    l1 = engine.create_infinite_line(
        engine.create_free_point(0.0, 0.0), engine.create_free_point(10.0, 0.0)
    )
    q = engine.create_point_on_line(l1, 5.0, 3.0)
    l2 = engine.create_infinite_line(
        engine.create_free_point(5.0, -5.0), engine.create_free_point(5.0, 5.0)
    )
    assert engine.drag_mode(q) is DragMode.CONSTRAINED

    assert engine.create_line_line_intersection(l1, l2) is q

    assert engine.drag_mode(q) is DragMode.LOCKED
    assert not engine.can_drag_constrained(q)
    assert not engine.drag_point(q, 7.0, 0.0)
    assert q.coords == pytest.approx((5.0, 0.0))


def test_line_line_intersection_reuses_existing_point(engine):
    shared = engine.create_free_point(5.0, 5.0)
    horizontal = engine.create_infinite_line(
        engine.create_free_point(0.0, 5.0), engine.create_free_point(10.0, 5.0)
    )
    vertical = engine.create_infinite_line(
        engine.create_free_point(5.0, 0.0), engine.create_free_point(5.0, 10.0)
    )
    count = len(engine.points)

    found = engine.create_line_line_intersection(horizontal, vertical)

    assert found is shared
    assert len(engine.points) == count
    assert shared in horizontal.points and shared in vertical.points
    assert engine.drag_mode(shared) is DragMode.LOCKED


def test_intersection_at_shared_defining_point_adds_no_constraint(engine):
    a = engine.create_free_point(0.0, 0.0)
    b = engine.create_free_point(10.0, 0.0)
    c = engine.create_free_point(0.0, 10.0)
    ab = engine.create_infinite_line(a, b)
    ac = engine.create_infinite_line(a, c)

    found = engine.create_line_line_intersection(ab, ac)

    assert found is a
    assert engine.constraints == ()
    assert engine.drag_mode(a) is DragMode.FREE


def test_line_line_intersection_edge_cases(engine):
    a = engine.create_free_point(0.0, 0.0)
    b = engine.create_free_point(10.0, 0.0)
    ab = engine.create_infinite_line(a, b)
    parallel = engine.create_infinite_line(
        engine.create_free_point(0.0, 1.0), engine.create_free_point(10.0, 1.0)
    )

    assert engine.create_line_line_intersection(ab, parallel) is None
    with pytest.raises(InvalidConstructionError):
        engine.create_line_line_intersection(ab, ab)


def test_unexpected_calculation_failures_are_wrapped(engine, monkeypatch):
    ab = engine.create_infinite_line(
        engine.create_free_point(0.0, 0.0), engine.create_free_point(10.0, 0.0)
    )
    cd = engine.create_infinite_line(
        engine.create_free_point(5.0, -5.0), engine.create_free_point(5.0, 5.0)
    )

    def _boom(line1, line2):
        raise ZeroDivisionError("division by zero")

    monkeypatch.setattr(engine.calculator, "line_line", _boom)

    with pytest.raises(IntersectionCalculationError) as excinfo:
        engine.create_line_line_intersection(ab, cd)
    assert isinstance(excinfo.value.cause, ZeroDivisionError)


def test_circle_circle_intersections_follow_centre(engine):
    a = engine.create_free_point(0.0, 0.0)
    c1 = engine.create_circle(a, engine.create_free_point(5.0, 0.0))
    c = engine.create_free_point(8.0, 0.0)
    c2 = engine.create_circle(c, engine.create_free_point(13.0, 0.0))

    low, high = engine.create_circle_circle_intersection(c1, c2)

    assert low.coords == pytest.approx((4.0, -3.0))
    assert high.coords == pytest.approx((4.0, 3.0))
    assert engine.drag_mode(low) is DragMode.LOCKED

    # The rim point stays at (13, 0), so the second radius grows to 7.
    engine.drag_point(c, 6.0, 0.0)
    assert low.coords == pytest.approx((1.0, -math.sqrt(24.0)))
    assert high.coords == pytest.approx((1.0, math.sqrt(24.0)))


def test_identical_circles_cannot_be_intersected(engine):
    centre = engine.create_free_point(0.0, 0.0)
    first = engine.create_circle(centre, engine.create_free_point(5.0, 0.0))
    second = engine.create_circle(centre, engine.create_free_point(0.0, 5.0))

    with pytest.raises(IntersectionCalculationError):
        engine.create_circle_circle_intersection(first, second)


def test_line_circle_intersection_respects_ray(engine):
    origin = engine.create_free_point(0.0, 0.0)
    ray = engine.create_ray(origin, engine.create_free_point(10.0, 0.0))
    circle = engine.create_circle(
        engine.create_free_point(0.0, 1.0), engine.create_free_point(0.0, 6.0)
    )

    (found,) = engine.create_line_circle_intersection(ray, circle)

    assert found.coords == pytest.approx((math.sqrt(24.0), 0.0))
    assert found in ray.points and found in circle.points


def test_three_point_circle_centre_is_derived(engine):
    p1 = engine.create_free_point(0.0, 0.0)
    p2 = engine.create_free_point(4.0, 0.0)
    p3 = engine.create_free_point(0.0, 4.0)

    circle = engine.create_three_point_circle(p1, p2, p3)

    assert circle.center.coords == pytest.approx((2.0, 2.0))
    assert circle.radius == pytest.approx(math.sqrt(8.0))
    assert engine.drag_mode(circle.center) is DragMode.LOCKED

    engine.drag_point(p3, 0.0, 8.0)
    assert circle.center.coords == pytest.approx((2.0, 4.0))


def test_three_point_circle_rejects_collinear_points(engine):
    p1 = engine.create_free_point(0.0, 0.0)
    p2 = engine.create_free_point(1.0, 1.0)
    p3 = engine.create_free_point(2.0, 2.0)

    with pytest.raises(InvalidConstructionError):
        engine.create_three_point_circle(p1, p2, p3)
    assert engine.circles == ()


def test_selection_queries(engine):
    a = engine.create_free_point(0.0, 0.0)
    b = engine.create_free_point(100.0, 0.0)
    line = engine.create_segment(a, b)
    circle = engine.create_circle(a, b)

    assert engine.select_point_at(5.0, 5.0) is a
    assert engine.select_point_at(50.0, 50.0) is None
    assert engine.select_line_at(50.0, 10.0) is line
    assert engine.select_line_at(50.0, 10.0, tolerance=5.0) is None
    assert engine.select_circle_at(0.0, 95.0) is circle
    assert engine.get_all_objects() == [a, b, line, circle]


def test_create_point_at_uses_snap_tiers(engine):
    a = engine.create_free_point(0.0, 0.0)
    horizontal = engine.create_infinite_line(a, engine.create_free_point(100.0, 0.0))
    engine.create_infinite_line(
        engine.create_free_point(50.0, -100.0), engine.create_free_point(50.0, 100.0)
    )

    assert engine.create_point_at(3.0, 4.0) is a

    crossing = engine.create_point_at(53.0, 6.0)
    assert crossing.coords == pytest.approx((50.0, 0.0))
    assert engine.drag_mode(crossing) is DragMode.LOCKED

    on_line = engine.create_point_at(80.0, 5.0)
    assert on_line.coords == pytest.approx((80.0, 0.0))
    assert on_line in horizontal.points
    assert engine.drag_mode(on_line) is DragMode.CONSTRAINED

    free = engine.create_point_at(500.0, 500.0)
    assert free.coords == (500.0, 500.0)
    assert engine.drag_mode(free) is DragMode.FREE


def test_snap_and_highlight_delegate_to_scene(engine):
    a = engine.create_free_point(0.0, 0.0)
    line = engine.create_infinite_line(a, engine.create_free_point(100.0, 0.0))

    assert engine.snap(2.0, 2.0).target is a
    assert engine.highlighted_object(60.0, 3.0) is line
    assert engine.snap(60.0, 300.0) is None


def test_drag_line_translates_its_points(engine):
    a = engine.create_free_point(0.0, 0.0)
    b = engine.create_free_point(10.0, 0.0)
    line = engine.create_infinite_line(a, b)
    p = engine.create_point_on_line(line, 4.0, 0.0)

    assert engine.drag_line(line, 1.0, 2.0)

    assert a.coords == (1.0, 2.0)
    assert b.coords == (11.0, 2.0)
    assert p.coords == pytest.approx((5.0, 2.0))


def test_frozen_points_are_locked(engine):
    anchor = engine.create_free_point(1.0, 1.0, frozen=True)

    assert engine.drag_mode(anchor) is DragMode.LOCKED
    assert not engine.drag_point(anchor, 5.0, 5.0)
    assert anchor.coords == (1.0, 1.0)


def test_drag_rejects_non_finite_target(engine):
    a = engine.create_free_point(0.0, 0.0)

    with pytest.raises(InvalidGeometricObjectError):
        engine.drag_point(a, math.nan, 0.0)
    assert a.coords == (0.0, 0.0)


def test_transitive_dependents_of_dragged_point(engine):
    a = engine.create_free_point(0.0, 0.0)
    b = engine.create_free_point(4.0, 0.0)
    c = engine.create_free_point(0.0, 4.0)
    m = engine.create_midpoint(a, b)
    n = engine.create_midpoint(m, c)

    assert engine.find_transitive_dependents({a.id}) == {m.id, n.id}
    assert engine.find_transitive_dependents({c.id}) == {n.id}

    engine.drag_point(a, -4.0, 0.0)
    assert m.coords == (0.0, 0.0)
    assert n.coords == (0.0, 2.0)


def test_config_is_copied_per_engine():
    config = KernelConfig(construction_offset=10.0)
    engine = GeometryEngine(config)
    config.construction_offset = 1000.0

    a = engine.create_free_point(0.0, 0.0)
    b = engine.create_free_point(1.0, 0.0)
    p = engine.create_free_point(0.0, 5.0)
    line = engine.create_parallel_line(p, engine.create_infinite_line(a, b))

    assert line.points[1].coords == pytest.approx((10.0, 5.0))


def test_clear_resets_scene_and_names(engine):
    a = engine.create_free_point(0.0, 0.0)
    engine.create_midpoint(a, engine.create_free_point(2.0, 0.0))

    engine.clear()

    assert engine.get_all_objects() == []
    assert engine.constraints == ()
    fresh = engine.create_free_point(0.0, 0.0)
    assert (fresh.id, fresh.name) == (1, "A")


def test_engines_do_not_share_sessions():
    first = GeometryEngine()
    second = GeometryEngine()

    first.create_free_point(0.0, 0.0)
    point = second.create_free_point(0.0, 0.0)

    assert point.name == "A"
