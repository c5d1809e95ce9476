import math
import random

import pytest

from backdrop.shapes import SHAPE_KINDS, Shape, advance_shape, shape_outline, spawn_shape, spawn_shapes


def _shape(kind="square", x=100.0, y=100.0, size=60.0, rotation=0.0, **kwargs):
    values = dict(rotation_speed=0.0, speed_x=0.0, speed_y=0.0, opacity=0.2)
    values.update(kwargs)
    return Shape(x=x, y=y, size=size, rotation=rotation, kind=kind, **values)


def test_spawn_shape_ranges():
    rng = random.Random(5)
    kinds = set()
    for _ in range(300):
        s = spawn_shape(800, 600, rng)
        kinds.add(s.kind)
        assert 50 <= s.size < 150
        assert 0 <= s.rotation < 2 * math.pi
        assert abs(s.rotation_speed) <= 0.005
        assert abs(s.speed_x) <= 0.25 and abs(s.speed_y) <= 0.25
        assert 0.1 <= s.opacity < 0.4
    assert kinds == set(SHAPE_KINDS)
    assert len(spawn_shapes(8, 800, 600, rng)) == 8


def test_advance_moves_and_rotates():
    s = _shape(speed_x=0.3, speed_y=-0.2, rotation_speed=0.004)
    advance_shape(s, 800, 600)
    assert (s.x, s.y) == pytest.approx((100.3, 99.8))
    assert s.rotation == pytest.approx(0.004)


def test_shapes_wrap_instead_of_reflecting():
    s = _shape(x=-60.5, y=300.0, size=60.0, speed_x=-0.5)
    advance_shape(s, 800, 600)
    assert s.x == 860.0
    assert s.speed_x == -0.5

    s = _shape(x=860.0, y=660.2, size=60.0, speed_x=0.5, speed_y=0.5)
    advance_shape(s, 800, 600)
    assert s.x == -60.0
    assert s.y == -60.0


def test_shape_stays_when_partly_visible():
    s = _shape(x=-30.0, y=-30.0, size=60.0, speed_x=-0.1, speed_y=-0.1)
    advance_shape(s, 800, 600)
    assert s.x == pytest.approx(-30.1)
    assert s.y == pytest.approx(-30.1)


def test_outlines():
    triangle = shape_outline(_shape("triangle", x=0.0, y=0.0, size=10.0))
    flat = [value for point in triangle for value in point]
    assert flat == pytest.approx([0.0, -5.0, 5.0, 5.0, -5.0, 5.0])

    square = shape_outline(_shape("square", x=10.0, y=20.0, size=10.0))
    assert len(square) == 4
    assert square[0] == pytest.approx((5.0, 15.0))

    hexagon = shape_outline(_shape("hexagon", x=0.0, y=0.0, size=10.0))
    assert len(hexagon) == 6
    assert all(math.hypot(x, y) == pytest.approx(5.0) for x, y in hexagon)


def test_outline_rotation():
    rotated = shape_outline(_shape("triangle", x=0.0, y=0.0, size=10.0, rotation=math.pi / 2))
    assert rotated[0] == pytest.approx((5.0, 0.0), abs=1e-9)


def test_unknown_kind_rejected():
    with pytest.raises(ValueError):
        shape_outline(_shape("circle"))
