import pytest

from formcoach.counter.pose_core import angle_3pt, combine_angles


def test_right_angle():
    assert angle_3pt((1, 0), (0, 0), (0, 1)) == pytest.approx(90.0)


def test_straight_line_is_180():
    assert angle_3pt((-1, 0), (0, 0), (1, 0)) == pytest.approx(180.0)


def test_reflex_angle_is_folded():
    # raw difference is 270 degrees
    a = (0, -1)
    c = (-1, 0)
    assert angle_3pt(a, (0, 0), c) == pytest.approx(90.0)


def test_order_of_rays_does_not_matter():
    a, b, c = (0.3, 0.2), (0.5, 0.5), (0.9, 0.4)
    assert angle_3pt(a, b, c) == pytest.approx(angle_3pt(c, b, a))


def test_coincident_points_give_zero():
    assert angle_3pt((0.5, 0.5), (0.5, 0.5), (0.5, 0.5)) == 0.0


def test_malformed_point_gives_zero():
    assert angle_3pt(None, (0, 0), (1, 1)) == 0.0


def test_combine_angles():
    assert combine_angles([120.0, 40.0], "min") == 40.0
    assert combine_angles([120.0, 40.0], "max") == 120.0
    assert combine_angles([75.0]) == 75.0
    assert combine_angles([]) == 0.0
