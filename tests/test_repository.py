import pytest

from geoconstruct.constraints import Constraint, ConstraintKind
from geoconstruct.errors import InvalidConstructionError
from geoconstruct.factory import GeometryFactory
from geoconstruct.naming import SessionContext
from geoconstruct.objects import LineVariant
from geoconstruct.repository import GeometryRepository


@pytest.fixture
def factory():
    return GeometryFactory(SessionContext())


def test_add_is_idempotent_and_ordered(factory):
    repo = GeometryRepository()
    a = factory.create_point(0.0, 0.0)
    b = factory.create_point(1.0, 0.0)

    assert repo.add_point(a)
    assert repo.add_point(b)
    assert not repo.add_point(a)
    assert repo.points == (a, b)
    assert repo.contains(a)


def test_id_collision_with_other_object_raises(factory):
    repo = GeometryRepository()
    a = factory.create_point(0.0, 0.0)
    impostor = GeometryFactory(SessionContext()).create_point(5.0, 5.0)

    repo.add_point(a)
    with pytest.raises(ValueError):
        repo.add_point(impostor)
    assert not repo.contains(impostor)


def test_get_and_all_objects(factory):
    repo = GeometryRepository()
    a = factory.create_point(0.0, 0.0)
    b = factory.create_point(3.0, 4.0)
    line = factory.create_line(a, b)
    circle = factory.create_circle(a, b)
    for point in (a, b):
        repo.add_point(point)
    repo.add_line(line)
    repo.add_circle(circle)

    assert repo.get(line.id) is line
    assert repo.get(circle.id) is circle
    assert repo.get(999) is None
    assert repo.all_objects() == [a, b, line, circle]


def test_find_line_by_points_and_variant(factory):
    repo = GeometryRepository()
    a = factory.create_point(0.0, 0.0)
    b = factory.create_point(1.0, 0.0)
    c = factory.create_point(2.0, 0.0)
    segment = factory.create_line(a, b, LineVariant.SEGMENT)
    repo.add_line(segment)

    assert repo.find_line(b, a) is segment
    assert repo.find_line(a, b, LineVariant.SEGMENT) is segment
    assert repo.find_line(a, b, LineVariant.INFINITE) is None
    assert repo.find_line(a, c) is None


def test_location_and_proximity_queries(factory):
    repo = GeometryRepository()
    a = factory.create_point(0.0, 0.0)
    b = factory.create_point(10.0, 0.0)
    line = factory.create_line(a, b)
    circle = factory.create_circle(a, b)
    for point in (a, b):
        repo.add_point(point)
    repo.add_line(line)
    repo.add_circle(circle)

    assert repo.find_point_at(10.0 + 1e-7, 0.0, 1e-6) is b
    assert repo.find_point_at(10.1, 0.0, 1e-6) is None
    assert repo.nearest_point(8.0, 1.0, 5.0) is b
    assert repo.nearest_point(50.0, 50.0, 5.0) is None
    assert repo.nearest_line(-30.0, 2.0, 5.0) is line
    assert repo.nearest_circle(0.0, 11.0, 5.0) is circle


def test_identical_constraint_is_registered_once(factory):
    repo = GeometryRepository()
    a = factory.create_point(0.0, 0.0)
    b = factory.create_point(2.0, 0.0)
    m = factory.create_point(1.0, 0.0)

    first = repo.add_constraint(Constraint(ConstraintKind.MIDPOINT, [m, a, b]))
    second = repo.add_constraint(Constraint(ConstraintKind.MIDPOINT, [m, a, b]))

    assert second is first
    assert repo.constraints == (first,)
    assert repo.constraints_for(m) == [first]
    assert repo.constraints_for(a) == []


def test_point_has_single_curve_owner(factory):
    repo = GeometryRepository()
    a = factory.create_point(0.0, 0.0)
    b = factory.create_point(10.0, 0.0)
    p = factory.create_point(5.0, 0.0)
    line = factory.create_line(a, b)
    circle = factory.create_circle(a, b)

    repo.add_constraint(Constraint(ConstraintKind.ON_LINE, [p, line]))
    with pytest.raises(InvalidConstructionError):
        repo.add_constraint(Constraint(ConstraintKind.ON_CIRCLE, [p, circle]))


def test_replace_contents_and_clear(factory):
    repo = GeometryRepository()
    a = factory.create_point(0.0, 0.0)
    b = factory.create_point(1.0, 0.0)
    repo.add_point(a)

    line = factory.create_line(a, b)
    on_line = Constraint(ConstraintKind.ON_LINE, [b, line])
    repo.replace_contents([a, b], [line], [], [on_line])

    assert repo.points == (a, b)
    assert repo.lines == (line,)
    assert repo.constraints == (on_line,)

    repo.clear()
    assert repo.all_objects() == []
    assert repo.constraints == ()
