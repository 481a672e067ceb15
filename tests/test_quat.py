import math

import numpy as np
import pytest

from mzgeom.quat import Quat


SAMPLES = [
    Quat.from_axis_angle((1, 2, 3), 0.7),
    Quat.from_axis_angle((0, 0, 1), math.pi),
    Quat.from_axis_angle((1, 0, 0), math.pi),
    Quat.from_axis_angle((0, 1, 0), math.pi),
    Quat.from_axis_angle((-1, 0.5, 0.2), 2.5),
    Quat(),
]


def test_default_is_identity():
    q = Quat()
    assert q.as_array().tolist() == [0.0, 0.0, 0.0, 1.0]
    assert np.allclose(q.to_mat3(), np.eye(3))


def test_product_with_inverse_is_identity():
    q = Quat(0.3, -1.2, 0.5, 2.0)
    r = q * q.inverse()
    assert np.allclose(r.as_array(), Quat().as_array())


@pytest.mark.parametrize("q", SAMPLES)
def test_mat3_is_rotation(q):
    m = q.to_mat3()
    assert np.allclose(m @ m.T, np.eye(3))
    assert math.isclose(np.linalg.det(m), 1.0)


@pytest.mark.parametrize("q", SAMPLES)
def test_mat3_round_trip(q):
    back = Quat.from_mat3(q.to_mat3())
    assert np.allclose(back.to_mat3(), q.to_mat3())


@pytest.mark.parametrize("q", SAMPLES)
def test_matrix_round_trip(q):
    m = q.to_matrix()
    assert np.allclose(m[3], [0, 0, 0, 1])
    assert np.allclose(m[:3, 3], 0)
    assert np.allclose(Quat.from_matrix(m).to_mat3(), q.to_mat3())


def test_rotation_matches_matrix_product():
    a = Quat.from_axis_angle((1, 1, 0), 0.4)
    b = Quat.from_axis_angle((0, 1, 2), -1.1)
    assert np.allclose((a * b).to_mat3(), a.to_mat3() @ b.to_mat3())


def test_axis_angle_keeps_axis_and_angle():
    axis = np.array([1.0, -2.0, 0.5])
    q = Quat.from_axis_angle(axis, 1.3)
    assert np.allclose(q.rotate(axis), axis)
    assert math.isclose(q.angle(), 1.3)
    assert math.isclose(q.norm(), 1.0)


def test_axis_angle_rejects_zero_axis():
    with pytest.raises(ValueError):
        Quat.from_axis_angle((0, 0, 0), 1.0)


def test_from_omega():
    assert Quat.from_omega((1e-8, 0, 0)) == Quat()
    omega = np.array([0.3, -0.4, 1.2])
    q = Quat.from_omega(omega)
    expected = Quat.from_axis_angle(omega, float(np.linalg.norm(omega)))
    assert np.allclose(q.as_array(), expected.as_array())


@pytest.mark.parametrize("axis1,axis2", [(2, 1), (0, 1), (1, 2), (2, 0)])
def test_from_two_vectors(axis1, axis2):
    v1 = np.array([1.0, 2.0, -0.5])
    v2 = np.array([0.0, 1.0, 3.0])
    q = Quat.from_two_vectors(v1, axis1, v2, axis2)
    m = q.to_mat3()
    assert np.allclose(m[:, axis1], v1 / np.linalg.norm(v1))
    assert np.allclose(m @ m.T, np.eye(3))
    # the second axis stays in the plane of v1 and v2
    normal = np.cross(v1, v2)
    assert abs(np.dot(m[:, axis2], normal)) < 1e-9


def test_from_two_vectors_rejects_same_axis():
    with pytest.raises(ValueError):
        Quat.from_two_vectors((1, 0, 0), 1, (0, 1, 0), 1)
    with pytest.raises(ValueError):
        Quat.from_two_vectors((1, 0, 0), 3, (0, 1, 0), 1)


@pytest.mark.parametrize("axis", [0, 1, 2])
def test_from_one_vector(axis):
    v = np.array([0.2, -3.0, 1.5])
    q = Quat.from_one_vector(v, axis)
    e = np.zeros(3)
    e[axis] = 1
    assert np.allclose(q.rotate(e), v / np.linalg.norm(v))


def test_euler_round_trip():
    e = np.array([0.3, -0.6, 1.1])
    q = Quat.from_euler(e)
    assert np.allclose(q.to_euler(), e)
    assert np.allclose(Quat.from_euler_axes((0, 1, 2), e).to_mat3(), q.to_mat3())


@pytest.mark.parametrize(
    "axes,angles",
    [
        ((2, 1, 0), (0.4, -0.3, 1.2)),
        ((0, 1, 2), (-1.0, 0.5, 0.25)),
        ((0, 1, 0), (0.3, 0.7, -0.5)),
        ((2, 0, 2), (1.1, 1.4, -2.0)),
        ((1, 2, 0), (0.2, 0.9, 0.1)),
    ],
)
def test_euler_axes_round_trip(axes, angles):
    q = Quat.from_euler_axes(axes, angles)
    u, v = q.to_euler_axes(axes)
    assert np.allclose(Quat.from_euler_axes(axes, u).to_mat3(), q.to_mat3())
    assert np.allclose(Quat.from_euler_axes(axes, v).to_mat3(), q.to_mat3())
    assert abs(u[0]) <= abs(v[0])


def test_euler_axes_singular():
    q = Quat.from_axis_angle((1, 0, 0), 0.4)
    u, v = q.to_euler_axes((0, 1, 0))
    assert np.allclose(u, [0.4, 0.0, 0.0])
    assert np.allclose(Quat.from_euler_axes((0, 1, 0), v).to_mat3(), q.to_mat3())


def test_euler_axes_invalid():
    with pytest.raises(ValueError):
        Quat().to_euler_axes((0, 0, 1))


def test_conj_is_inverse_for_unit():
    q = Quat.from_axis_angle((2, 1, -1), 0.9)
    assert np.allclose(q.conj().as_array(), q.inverse().as_array())


def test_distances():
    a = Quat.from_axis_angle((1, 0, 0), 0.8)
    b = Quat()
    assert math.isclose(a.dist(b), 0.8)
    assert math.isclose(b.dist(a), a.dist(b))
    assert math.isclose(a.fast_dist(b), 0.8)
    assert a.dist(-a) == pytest.approx(0.0, abs=1e-6)
    assert (a * 3.0).dist(b) == pytest.approx(0.8)


def test_log_exp_round_trip():
    q = Quat.from_axis_angle((1, -1, 2), 1.7)
    lg = q.log()
    assert lg.w == 0.0
    assert np.allclose(lg.exp().as_array(), q.as_array())


def test_pow():
    q = Quat.from_axis_angle((0, 1, 1), 1.2)
    half = q.pow(0.5)
    assert np.allclose((half * half).as_array(), q.as_array())
    assert np.allclose(q.pow(1.0).as_array(), q.as_array())


def test_slerp():
    u = Quat.from_axis_angle((0, 0, 1), 0.2)
    v = Quat.from_axis_angle((1, 1, 0), 1.4)
    assert np.allclose(Quat.slerp(u, v, 0.0).as_array(), u.as_array())
    assert np.allclose(Quat.slerp(u, v, 1.0).to_mat3(), v.to_mat3())
    mid = Quat.slerp(u, v, 0.5)
    assert math.isclose(mid.dist(u), mid.dist(v))
    assert Quat.slerp(u, -u, 0.3) == u


def test_slerp_about_one_axis():
    r = Quat.from_axis_angle((0, 1, 0), 1.0)
    mid = Quat.slerp(Quat(), r, 0.5)
    expected = Quat.from_axis_angle((0, 1, 0), 0.5)
    assert np.allclose(mid.to_mat3(), expected.to_mat3())
    assert mid.angle() == pytest.approx(0.5)


def test_omega_recovers_rotation():
    u = Quat.from_axis_angle((1, 2, 3), 0.5)
    v = Quat.from_axis_angle((-1, 0, 1), 1.0)
    w = Quat.omega(u, v)
    recovered = Quat.from_omega(w) * u
    assert np.allclose(recovered.to_mat3(), v.to_mat3())


def test_squad_endpoints():
    p = Quat.from_axis_angle((1, 0, 0), 0.3)
    a = Quat.from_axis_angle((0, 1, 0), 0.6)
    b = Quat.from_axis_angle((0, 0, 1), 0.9)
    q = Quat.from_axis_angle((1, 1, 1), 1.2)
    assert np.allclose(Quat.squad(p, a, b, q, 0.0).as_array(), p.as_array())
    assert np.allclose(Quat.squad(p, a, b, q, 1.0).to_mat3(), q.to_mat3())


def test_spline():
    q = Quat.from_axis_angle((1, 0, 1), 0.7)
    assert np.allclose(Quat.spline_t(q, q, q).to_mat3(), q.to_mat3())
    qs = [Quat.from_axis_angle((0, 0, 1), k * 0.3) for k in range(4)]
    assert np.allclose(Quat.spline(*qs, 0.0).to_mat3(), qs[1].to_mat3())


def test_scalar_arithmetic():
    q = Quat(1, 2, 3, 4)
    assert (2 * q) == (q * 2) == q + q
    assert (q / 2) * 2 == q
    assert (q - q) == Quat(0, 0, 0, 0)
    assert list(-q) == [-1.0, -2.0, -3.0, -4.0]