import itertools

import numpy as np

from mzgeom.box3 import Box3


def _box():
    return Box3((0.0, -1.0, 2.0), (2.0, 3.0, 5.0))


def test_default_is_empty():
    assert Box3().is_empty() is True


def test_clear_makes_empty():
    b = _box()
    assert b.is_empty() is False
    b.clear()
    assert b.is_empty() is True


def test_add_point_to_empty_box():
    b = Box3()
    b.add_point((1.0, 2.0, 3.0))
    assert np.array_equal(b.p0, (1.0, 2.0, 3.0))
    assert np.array_equal(b.p1, (1.0, 2.0, 3.0))


def test_add_point_grows():
    b = Box3()
    pts = [(1.0, 2.0, 3.0), (-1.0, 5.0, 0.0), (0.5, 0.0, 4.0)]
    for p in pts:
        b.add_point(p)
    for p in pts:
        assert b.contains(p)
    assert np.array_equal(b.p0, np.min(pts, axis=0))
    assert np.array_equal(b.p1, np.max(pts, axis=0))


def test_corners_cover_all_combinations():
    b = _box()
    corners = {tuple(b.corner(i)) for i in range(8)}
    expected = set(itertools.product(*zip(b.p0, b.p1)))
    assert corners == expected


def test_corner_zero_is_low_corner():
    b = _box()
    assert np.array_equal(b.corner(0), b.p0)


def test_consecutive_corners_differ_in_one_axis():
    b = _box()
    for i in range(7):
        diff = b.corner(i) != b.corner(i + 1)
        assert int(np.sum(diff)) == 1


def test_center_is_midpoint_lerp():
    b = _box()
    assert np.allclose(b.center(), b.lerp((0.5, 0.5, 0.5)))
    assert b.contains(b.center())


def test_contains_rejects_outside():
    b = _box()
    assert not b.contains(b.p1 + 1.0)
    assert not b.contains(b.p0 - 0.1)


def test_dilate_moves_faces():
    b = _box()
    p0, p1 = b.p0.copy(), b.p1.copy()
    b.dilate(0.5)
    assert np.allclose(b.p0, p0 - 0.5)
    assert np.allclose(b.p1, p1 + 0.5)
    assert b.contains(p1 + 0.25)


def test_intersects_and_intersect():
    a = Box3((0.0, 0.0, 0.0), (2.0, 2.0, 2.0))
    b = Box3((1.0, 1.0, 1.0), (3.0, 3.0, 3.0))
    assert a.intersects(b) and b.intersects(a)
    overlap = a.intersect(b)
    assert np.array_equal(overlap.p0, b.p0)
    assert np.array_equal(overlap.p1, a.p1)


def test_disjoint_boxes():
    a = Box3((0.0, 0.0, 0.0), (1.0, 1.0, 1.0))
    b = Box3((2.0, 0.0, 0.0), (3.0, 1.0, 1.0))
    assert not a.intersects(b)
    assert a.intersect(b).is_empty()


def test_empty_box_never_intersects():
    assert not Box3().intersects(_box())


def test_unite_holds_both():
    a = Box3((0.0, 0.0, 0.0), (1.0, 1.0, 1.0))
    b = Box3((2.0, -1.0, 0.5), (3.0, 0.5, 4.0))
    u = a.unite(b)
    for box in (a, b):
        for i in range(8):
            assert u.contains(box.corner(i))


def test_unite_with_empty_returns_other():
    a = _box()
    assert Box3().unite(a) == a
    assert a.unite(Box3()) == a


def test_closest_clamps():
    b = _box()
    inside = b.center()
    assert np.array_equal(b.closest(inside), inside)
    outside = b.p1 + np.array([1.0, 2.0, 3.0])
    assert np.array_equal(b.closest(outside), b.p1)


def test_clip_line_through_box():
    b = Box3((-1.0, -1.0, -1.0), (1.0, 1.0, 1.0))
    result = b.clip_line((-2.0, 0.0, 0.0), (2.0, 0.0, 0.0))
    assert result is not None
    assert result.u0 == 0.25
    assert result.u1 == 0.75
    assert np.allclose(result.start, (-1.0, 0.0, 0.0))
    assert np.allclose(result.end, (1.0, 0.0, 0.0))


def test_clip_line_inside_unchanged():
    b = _box()
    v0, v1 = b.lerp((0.2, 0.3, 0.4)), b.lerp((0.8, 0.6, 0.1))
    result = b.clip_line(v0, v1)
    assert result is not None
    assert (result.u0, result.u1) == (0.0, 1.0)
    assert np.allclose(result.start, v0)
    assert np.allclose(result.end, v1)


def test_clip_line_miss():
    b = Box3((-1.0, -1.0, -1.0), (1.0, 1.0, 1.0))
    assert b.clip_line((-2.0, 5.0, 0.0), (2.0, 5.0, 0.0)) is None