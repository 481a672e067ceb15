import numpy as np
import pytest

from mzgeom.grid import Grid


def _grid():
    g = Grid(3)
    g.resize((4, 5, 6), 0.5, (-1.0, 0.0, 1.0))
    return g


def _linear(p):
    return 1.0 + 2.0 * p[0] - 3.0 * p[1] + 0.5 * p[2]


def _linear_data(g):
    return np.array([_linear(g.cell_center(i)) for i in range(g.size())])


def _interior_points(g, count=40, seed=3):
    rng = np.random.default_rng(seed)
    lo = g.cell_center((0, 0, 0))
    hi = g.cell_center(tuple(d - 1 for d in g.dims))
    return [lo + rng.random(3) * (hi - lo) for _ in range(count)]


def test_size_and_layout():
    g = Grid(3)
    g.resize((2, 3, 4), 1.0, 0.0)
    assert g.size() == 24
    assert g.sub2ind((1, 0, 0)) == 1
    assert g.sub2ind((0, 1, 0)) == 2


def test_rprod_last_is_size():
    g = _grid()
    assert g.rprod[-1] == g.size()
    assert g.dims == (4, 5, 6)


def test_ind2sub_round_trip():
    g = _grid()
    for idx in range(g.size()):
        assert g.sub2ind(g.ind2sub(idx)) == idx


def test_nearest_cell_of_cell_center():
    g = _grid()
    for idx in range(g.size()):
        s = g.ind2sub(idx)
        assert g.nearest_cell(g.cell_center(s)) == s
        assert np.allclose(g.cell_center(idx), g.cell_center(s))


def test_floor_nearest_ceil_order():
    g = _grid()
    for p in _interior_points(g):
        f, n, c = g.floor_cell(p), g.nearest_cell(p), g.ceil_cell(p)
        assert all(a <= b <= d for a, b, d in zip(f, n, c))


def test_cells_clamped_to_grid():
    g = _grid()
    far = g.max() + 100.0
    assert g.nearest_cell(far) == tuple(d - 1 for d in g.dims)
    assert g.floor_cell(g.origin - 100.0) == (0, 0, 0)


def test_center_is_midpoint_of_bounds():
    g = _grid()
    assert np.allclose(g.center(), 0.5 * (g.origin + g.max()))


def test_empty_grid():
    g = Grid(2)
    assert g.is_empty()
    g.resize((3, 0), 1.0, 0.0)
    assert g.is_empty()
    with pytest.raises(ValueError):
        g.nearest_cell((0.0, 0.0))


def test_resize_wrong_rank():
    with pytest.raises(ValueError):
        Grid(3).resize((2, 2), 1.0, 0.0)


def test_resize_bounds_covers_range():
    g = Grid(3)
    lower = np.array([-1.0, 0.0, 2.0])
    upper = np.array([1.3, 0.7, 2.9])
    g.resize_bounds(lower, upper, 0.25)
    assert not g.is_empty()
    assert np.all(g.origin <= lower)
    assert np.all(g.max() >= upper)
    assert np.allclose(g.center(), 0.5 * (lower + upper))


def test_resize_bounds_inverted_is_empty():
    g = Grid(3)
    g.resize_bounds((1.0, 0.0, 0.0), (0.0, 1.0, 1.0), 0.5)
    assert g.is_empty()


def test_sample_at_cell_centers_returns_data():
    g = _grid()
    data = _linear_data(g)
    for idx in range(0, g.size(), 7):
        assert g.sample(g.cell_center(idx), data) == pytest.approx(data[idx])


def test_sample_exact_for_linear_field():
    g = _grid()
    data = _linear_data(g)
    for p in _interior_points(g):
        assert g.sample(p, data) == pytest.approx(_linear(p))


def test_frac_cell_in_unit_range():
    g = _grid()
    for p in _interior_points(g):
        s, u = g.frac_cell(p)
        assert s == g.floor_cell(p)
        assert np.all(u >= 0.0) and np.all(u < 1.0)


def test_simplex_coeffs_are_barycentric():
    g = _grid()
    for p in _interior_points(g):
        points, coeffs = g.simplex_coeffs(p)
        assert len(points) == len(coeffs) == 4
        assert sum(coeffs) == pytest.approx(1.0)
        assert all(c >= -1e-12 for c in coeffs)


def test_sample_simplex_exact_for_linear_field():
    g = _grid()
    data = _linear_data(g)
    for p in _interior_points(g, seed=11):
        assert g.sample_simplex(p, data) == pytest.approx(_linear(p))


def test_sample_vector_values():
    g = Grid(2)
    g.resize((3, 3), 1.0, 0.0)
    data = [np.array([g.cell_center(i)[0], 2.0]) for i in range(g.size())]
    p = (1.2, 1.7)
    assert np.allclose(g.sample(p, data), (p[0], 2.0))