"""Unit quaternions for 3D rotations, with conversions and interpolation."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Iterator, Sequence

import numpy as np
from numpy.typing import ArrayLike

_ANGLE_TOL = 1e-5
_NEXT_AXIS = (1, 2, 0)

_SGN = (
    (0.0, 1.0, -1.0),
    (-1.0, 0.0, 1.0),
    (1.0, -1.0, 0.0),
)

_OTHER = (
    (-1, 2, 1),
    (2, -1, 0),
    (1, 0, -1),
)

# Each entry yields (s0, c0, s1, c1, s2, c2) from (q0, q1, q2, q3) = (w, x, y, z).
_EulerTerms = Callable[[float, float, float, float], tuple[float, float, float, float, float, float]]


def _terms_xyx(q0, q1, q2, q3):
    return (2*q1*q2 + 2*q0*q3, -2*q1*q3 + 2*q0*q2,
            0.0, q1*q1 + q0*q0 - q3*q3 - q2*q2,
            2*q1*q2 - 2*q0*q3, 2*q1*q3 + 2*q0*q2)


def _terms_zyx(q0, q1, q2, q3):
    return (2*q1*q2 + 2*q0*q3, q1*q1 + q0*q0 - q3*q3 - q2*q2,
            -(2*q1*q3 - 2*q0*q2), 0.0,
            2*q2*q3 + 2*q0*q1, q3*q3 - q2*q2 - q1*q1 + q0*q0)


def _terms_xzx(q0, q1, q2, q3):
    return (2*q1*q3 - 2*q0*q2, 2*q1*q2 + 2*q0*q3,
            0.0, q1*q1 + q0*q0 - q3*q3 - q2*q2,
            2*q1*q3 + 2*q0*q2, -2*q1*q2 + 2*q0*q3)


def _terms_yzx(q0, q1, q2, q3):
    return (-2*q1*q3 + 2*q0*q2, q1*q1 + q0*q0 - q3*q3 - q2*q2,
            2*q1*q2 + 2*q0*q3, 0.0,
            -2*q2*q3 + 2*q0*q1, q2*q2 - q3*q3 + q0*q0 - q1*q1)


def _terms_yxy(q0, q1, q2, q3):
    return (2*q1*q2 - 2*q0*q3, 2*q2*q3 + 2*q0*q1,
            0.0, q2*q2 - q3*q3 + q0*q0 - q1*q1,
            2*q1*q2 + 2*q0*q3, -2*q2*q3 + 2*q0*q1)


def _terms_zxy(q0, q1, q2, q3):
    return (-2*q1*q2 + 2*q0*q3, q2*q2 - q3*q3 + q0*q0 - q1*q1,
            2*q2*q3 + 2*q0*q1, 0.0,
            -2*q1*q3 + 2*q0*q2, q3*q3 - q2*q2 - q1*q1 + q0*q0)


def _terms_xzy(q0, q1, q2, q3):
    return (2*q2*q3 + 2*q0*q1, q2*q2 - q3*q3 + q0*q0 - q1*q1,
            -(2*q1*q2 - 2*q0*q3), 0.0,
            2*q1*q3 + 2*q0*q2, q1*q1 + q0*q0 - q3*q3 - q2*q2)


def _terms_yzy(q0, q1, q2, q3):
    return (2*q2*q3 + 2*q0*q1, -2*q1*q2 + 2*q0*q3,
            0.0, q2*q2 - q3*q3 + q0*q0 - q1*q1,
            2*q2*q3 - 2*q0*q1, 2*q1*q2 + 2*q0*q3)


def _terms_yxz(q0, q1, q2, q3):
    return (2*q1*q3 + 2*q0*q2, q3*q3 - q2*q2 - q1*q1 + q0*q0,
            -(2*q2*q3 - 2*q0*q1), 0.0,
            2*q1*q2 + 2*q0*q3, q2*q2 - q3*q3 + q0*q0 - q1*q1)


def _terms_zxz(q0, q1, q2, q3):
    return (2*q1*q3 + 2*q0*q2, -2*q2*q3 + 2*q0*q1,
            0.0, q3*q3 - q2*q2 - q1*q1 + q0*q0,
            2*q1*q3 - 2*q0*q2, 2*q2*q3 + 2*q0*q1)


def _terms_xyz(q0, q1, q2, q3):
    return (-2*q2*q3 + 2*q0*q1, q3*q3 - q2*q2 - q1*q1 + q0*q0,
            2*q1*q3 + 2*q0*q2, 0.0,
            -2*q1*q2 + 2*q0*q3, q1*q1 + q0*q0 - q3*q3 - q2*q2)


def _terms_zyz(q0, q1, q2, q3):
    return (2*q2*q3 - 2*q0*q1, 2*q1*q3 + 2*q0*q2,
            0.0, q3*q3 - q2*q2 - q1*q1 + q0*q0,
            2*q2*q3 + 2*q0*q1, -2*q1*q3 + 2*q0*q2)


_EULER_TERMS: dict[tuple[int, int, int], _EulerTerms] = {
    (0, 1, 0): _terms_xyx,
    (2, 1, 0): _terms_zyx,
    (0, 2, 0): _terms_xzx,
    (1, 2, 0): _terms_yzx,
    (1, 0, 1): _terms_yxy,
    (2, 0, 1): _terms_zxy,
    (0, 2, 1): _terms_xzy,
    (1, 2, 1): _terms_yzy,
    (1, 0, 2): _terms_yxz,
    (2, 0, 2): _terms_zxz,
    (0, 1, 2): _terms_xyz,
    (2, 1, 2): _terms_zyz,
}


def _vec3(v: ArrayLike) -> np.ndarray:
    arr = np.asarray(v, dtype=float)
    if arr.shape != (3,):
        raise ValueError(f"expected a 3-vector, got shape {arr.shape}")
    return arr


def _is_scalar(value: object) -> bool:
    return isinstance(value, (int, float, np.integer, np.floating)) and not isinstance(value, bool)


@dataclass(frozen=True)
class Quat:
    """A quaternion ``x i + y j + z k + w``; the default is the identity rotation."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 1.0

    def __post_init__(self) -> None:
        for name in ("x", "y", "z", "w"):
            object.__setattr__(self, name, float(getattr(self, name)))

    # -- sequence protocol -------------------------------------------------

    def __iter__(self) -> Iterator[float]:
        return iter((self.x, self.y, self.z, self.w))

    def __getitem__(self, i: int) -> float:
        return (self.x, self.y, self.z, self.w)[i]

    def __len__(self) -> int:
        return 4

    def as_array(self) -> np.ndarray:
        """Return ``[x, y, z, w]`` as an array."""
        return np.array([self.x, self.y, self.z, self.w])

    # -- arithmetic --------------------------------------------------------

    def __mul__(self, other: object) -> Quat:
        if isinstance(other, Quat):
            u, v = self, other
            return Quat(
                u.w*v.x + u.x*v.w + u.y*v.z - u.z*v.y,
                u.w*v.y - u.x*v.z + u.y*v.w + u.z*v.x,
                u.w*v.z + u.x*v.y - u.y*v.x + u.z*v.w,
                u.w*v.w - u.x*v.x - u.y*v.y - u.z*v.z,
            )
        if _is_scalar(other):
            s = float(other)
            return Quat(self.x*s, self.y*s, self.z*s, self.w*s)
        return NotImplemented

    def __rmul__(self, other: object) -> Quat:
        if _is_scalar(other):
            return self * other
        return NotImplemented

    def __truediv__(self, other: object) -> Quat:
        if _is_scalar(other):
            s = float(other)
            return Quat(self.x/s, self.y/s, self.z/s, self.w/s)
        return NotImplemented

    def __neg__(self) -> Quat:
        return Quat(-self.x, -self.y, -self.z, -self.w)

    def __add__(self, other: object) -> Quat:
        if isinstance(other, Quat):
            return Quat(self.x + other.x, self.y + other.y, self.z + other.z, self.w + other.w)
        return NotImplemented

    def __sub__(self, other: object) -> Quat:
        if isinstance(other, Quat):
            return Quat(self.x - other.x, self.y - other.y, self.z - other.z, self.w - other.w)
        return NotImplemented

    def dot(self, other: Quat) -> float:
        return self.x*other.x + self.y*other.y + self.z*other.z + self.w*other.w

    def norm(self) -> float:
        return math.sqrt(self.dot(self))

    # -- construction ------------------------------------------------------

    @classmethod
    def from_axis_angle(cls, axis: ArrayLike, angle: float) -> Quat:
        """Rotation of ``angle`` radians about ``axis`` (need not be unit length)."""
        a = _vec3(axis)
        length = float(np.linalg.norm(a))
        if length == 0.0:
            raise ValueError("rotation axis must not be zero")
        ca = math.cos(angle * 0.5)
        sa = math.sin(angle * 0.5)
        return cls(sa*a[0]/length, sa*a[1]/length, sa*a[2]/length, ca)

    @classmethod
    def from_omega(cls, omega: ArrayLike) -> Quat:
        """Rotation whose axis is ``omega`` and whose angle is its length."""
        o = _vec3(omega)
        angle = float(np.linalg.norm(o))
        if angle < 1e-6:
            return cls()
        return cls.from_axis_angle(o / angle, angle)

    @classmethod
    def _from_rotation(cls, m: np.ndarray) -> Quat:
        # Element names follow the transposed matrix.
        r11, r12, r13 = m[0, 0], m[1, 0], m[2, 0]
        r21, r22, r23 = m[0, 1], m[1, 1], m[2, 1]
        r31, r32, r33 = m[0, 2], m[1, 2], m[2, 2]
        eps = 1e-1

        trace = 1 + r11 + r22 + r33
        if trace > eps:
            n = math.sqrt(trace)
            qw, qx, qy, qz = n, (r23 - r32)/n, (r31 - r13)/n, (r12 - r21)/n
        else:
            trace = 1 + r11 - r22 - r33
            if trace > eps:
                n = math.sqrt(trace)
                qw, qx, qy, qz = (r23 - r32)/n, n, (r12 + r21)/n, (r31 + r13)/n
            else:
                trace = 1 - r11 + r22 - r33
                if trace > eps:
                    n = math.sqrt(trace)
                    qw, qx, qy, qz = (r31 - r13)/n, (r12 + r21)/n, n, (r23 + r32)/n
                else:
                    trace = 1 - r11 - r22 + r33
                    n = math.sqrt(trace)
                    qw, qx, qy, qz = (r12 - r21)/n, (r31 + r13)/n, (r23 + r32)/n, n
        return cls(0.5*qx, 0.5*qy, 0.5*qz, 0.5*qw)

    @classmethod
    def from_matrix(cls, m: ArrayLike) -> Quat:
        """Rotation held in the upper-left block of a 4x4 matrix."""
        mat = np.asarray(m, dtype=float)
        if mat.shape != (4, 4):
            raise ValueError(f"expected a 4x4 matrix, got shape {mat.shape}")
        return cls._from_rotation(mat)

    @classmethod
    def from_mat3(cls, m: ArrayLike) -> Quat:
        """Rotation held in a 3x3 rotation matrix."""
        mat = np.asarray(m, dtype=float)
        if mat.shape != (3, 3):
            raise ValueError(f"expected a 3x3 matrix, got shape {mat.shape}")
        return cls._from_rotation(mat)

    @classmethod
    def from_one_vector(cls, v: ArrayLike, axis: int) -> Quat:
        """A rotation taking unit vector ``axis`` onto the direction of ``v``."""
        vec = _vec3(v)
        maxaxis = 0
        if abs(vec[1]) > abs(vec[maxaxis]):
            maxaxis = 1
        if abs(vec[2]) > abs(vec[maxaxis]):
            maxaxis = 2
        v2 = np.zeros(3)
        v2[(maxaxis + 1) % 3] = 1.0
        return cls.from_two_vectors(vec, axis, v2, (axis + 1) % 3)

    @classmethod
    def from_two_vectors(cls, v1: ArrayLike, axis1: int, v2: ArrayLike, axis2: int) -> Quat:
        """Rotation taking ``axis1`` onto ``v1`` and ``axis2`` into the plane of ``v1`` and ``v2``."""
        if axis1 == axis2:
            raise ValueError("the two axes must differ")
        if not (0 <= axis1 < 3 and 0 <= axis2 < 3):
            raise ValueError("axes must be 0, 1 or 2")
        a = _vec3(v1)
        b = _vec3(v2)
        c1 = a / np.linalg.norm(a)
        c3 = _SGN[axis1][axis2] * np.cross(a, b)
        c3 = c3 / np.linalg.norm(c3)
        axis3 = _OTHER[axis1][axis2]
        c2 = _SGN[axis1][axis3] * np.cross(c1, c3)
        r = np.empty((3, 3))
        r[:, axis1] = c1
        r[:, axis2] = c2
        r[:, axis3] = c3
        return cls.from_mat3(r)

    @classmethod
    def from_euler(cls, e: ArrayLike) -> Quat:
        """Rotation about x by ``e[0]``, then y by ``e[1]``, then z by ``e[2]`` (intrinsic)."""
        ang = _vec3(e)
        c1, c2, c3 = (math.cos(0.5 * a) for a in ang)
        s1, s2, s3 = (math.sin(0.5 * a) for a in ang)
        w = c1*c2*c3 - s1*s2*s3
        z = c1*c2*s3 + s1*c3*s2
        y = c1*c3*s2 - s1*c2*s3
        x = c1*s2*s3 + c2*c3*s1
        return cls(x, y, z, w)

    @classmethod
    def from_euler_axes(cls, axes: Sequence[int], e: ArrayLike) -> Quat:
        """Product of rotations about ``axes[i]`` by ``e[i]``, in order."""
        ang = _vec3(e)
        if len(axes) != 3:
            raise ValueError("expected three axes")
        r = cls()
        for axis, angle in zip(axes, ang):
            v = np.zeros(3)
            v[axis] = 1.0
            r = r * cls.from_axis_angle(v, float(angle))
        return r

    # -- conversion --------------------------------------------------------

    def to_euler_axes(self, axes: Sequence[int]) -> tuple[np.ndarray, np.ndarray]:
        """Return the two Euler-angle solutions for ``axes``.

        Both satisfy ``from_euler_axes(axes, angles)`` equal to this rotation;
        the one with the smaller first angle comes first.
        """
        key = tuple(int(a) for a in axes)
        terms = _EULER_TERMS.get(key)  # type: ignore[arg-type]
        if terms is None:
            raise ValueError("invalid axis mapping")
        ax0, _, ax2 = key
        s0, c0, s1, c1, s2, c2 = terms(self.w, self.x, self.y, self.z)

        u = np.zeros(3)
        v = np.zeros(3)
        if ax0 == ax2:
            if abs(c1) > 1 - _ANGLE_TOL:
                if c1 < 0:
                    other = 3 - (ax0 + ax2)
                    s = self[ax2]
                    c = self[other]
                    if ax2 == _NEXT_AXIS[ax0]:
                        u[0] = -2*math.atan2(s, c) + math.pi
                    else:
                        u[0] = 2*math.atan2(s, c) - math.pi
                    u[1] = math.pi
                else:
                    u[0] = 2*math.atan2(self[ax0], self.w)
            else:
                u[0] = math.atan2(s0, c0)
                u[1] = math.acos(c1)
                u[2] = math.atan2(s2, c2)
            shift = -math.pi if u[0] > math.pi / 2 else math.pi
            v[0] = u[0] + shift
            v[1] = -u[1]
            v[2] = u[2] + shift
        else:
            if abs(s1) > 1 - _ANGLE_TOL:
                u[0] = 2*math.atan2(self[ax0], self.w)
                u[1] = math.pi / 2 if s1 > 0 else -math.pi / 2
            else:
                u[0] = math.atan2(s0, c0)
                u[1] = math.asin(s1)
                u[2] = math.atan2(s2, c2)
            shift = -math.pi if u[0] > math.pi / 2 else math.pi
            v[0] = u[0] + shift
            v[1] = math.pi - u[1]
            v[2] = u[2] + shift

        if abs(u[0]) > abs(v[0]):
            u, v = v, u
        return u, v

    def to_euler(self) -> np.ndarray:
        """Inverse of ``from_euler``."""
        qw, qx, qy, qz = self.w, self.x, self.y, self.z
        qw2, qx2, qy2, qz2 = qw*qw, qx*qx, qy*qy, qz*qz
        return np.array([
            math.atan2(-2*qz*qy + 2*qw*qx, qz2 + qw2 - qx2 - qy2),
            math.asin(max(-1.0, min(1.0, 2*qz*qx + 2*qw*qy))),
            math.atan2(-2*qy*qx + 2*qw*qz, qx2 - qy2 - qz2 + qw2),
        ])

    def to_mat3(self) -> np.ndarray:
        """Rotation matrix; the quaternion need not be normalized."""
        qw, qx, qy, qz = self.w, self.x, self.y, self.z
        sqw, sqx, sqy, sqz = qw*qw, qx*qx, qy*qy, qz*qz
        invs = 1.0 / (sqx + sqy + sqz + sqw)
        m = np.empty((3, 3))
        m[0, 0] = (sqx - sqy - sqz + sqw) * invs
        m[1, 1] = (-sqx + sqy - sqz + sqw) * invs
        m[2, 2] = (-sqx - sqy + sqz + sqw) * invs
        t1, t2 = qx*qy, qz*qw
        m[1, 0] = 2.0 * (t1 + t2) * invs
        m[0, 1] = 2.0 * (t1 - t2) * invs
        t1, t2 = qx*qz, qy*qw
        m[2, 0] = 2.0 * (t1 - t2) * invs
        m[0, 2] = 2.0 * (t1 + t2) * invs
        t1, t2 = qy*qz, qx*qw
        m[2, 1] = 2.0 * (t1 + t2) * invs
        m[1, 2] = 2.0 * (t1 - t2) * invs
        return m

    def to_matrix(self) -> np.ndarray:
        """4x4 homogeneous rotation matrix."""
        m = np.eye(4)
        m[:3, :3] = self.to_mat3()
        return m

    def rotate(self, v: ArrayLike) -> np.ndarray:
        """Apply the rotation to a 3-vector."""
        return self.to_mat3() @ _vec3(v)

    # -- measures ----------------------------------------------------------

    def angle(self) -> float:
        """Rotation angle in radians, in ``[0, pi]``."""
        return 2 * math.acos(min(1.0, abs(self.w) / self.norm()))

    def dist(self, other: Quat) -> float:
        """Angle of the rotation between two quaternions of any length."""
        duv = abs(self.dot(other))
        d = abs(duv / (self.norm() * other.norm()))
        if d > 1.0:
            return 0.0
        return 2 * math.acos(d)

    def fast_dist(self, other: Quat) -> float:
        """Like ``dist`` but assumes both quaternions are unit length."""
        d = max(0.0, min(abs(self.dot(other)), 1.0))
        return 2 * math.acos(d)

    def conj(self) -> Quat:
        return Quat(-self.x, -self.y, -self.z, self.w)

    def inverse(self) -> Quat:
        n2 = self.dot(self)
        return Quat(-self.x/n2, -self.y/n2, -self.z/n2, self.w/n2)

    # -- exponential map ---------------------------------------------------

    def log(self) -> Quat:
        """Logarithm of a unit quaternion, as a pure quaternion."""
        w = max(-1.0, min(1.0, self.w))
        theta = math.acos(w)
        sin_theta = math.sin(theta)
        if abs(sin_theta) > 1e-7:
            k = theta / sin_theta
            return Quat(self.x * k, self.y * k, self.z * k, 0.0)
        return Quat(self.x, self.y, self.z, 0.0)

    def exp(self) -> Quat:
        """Exponential of the vector part; the scalar part is ignored."""
        a = math.sqrt(self.x*self.x + self.y*self.y + self.z*self.z)
        if a >= 1e-7:
            k = math.sin(a) / a
            return Quat(self.x * k, self.y * k, self.z * k, math.cos(a))
        return Quat(0.0, 0.0, 0.0, math.cos(a))

    def pow(self, p: float) -> Quat:
        return (self.log() * p).exp()

    # -- interpolation -----------------------------------------------------

    @classmethod
    def slerp(cls, u: Quat, v: Quat, t: float) -> Quat:
        """Spherical linear interpolation along the shorter arc."""
        cosom = u.dot(v)
        if cosom < 0.0:
            cosom = -cosom
            v = -v
        if cosom > 1.0:
            cosom = 1.0
        if abs(cosom - 1.0) < 1e-5:
            return u
        omega = math.acos(cosom)
        sinom = math.sin(omega)
        scl0 = math.sin((1 - t) * omega) / sinom
        scl1 = math.sin(t * omega) / sinom
        return cls(
            scl0*u.x + scl1*v.x,
            scl0*u.y + scl1*v.y,
            scl0*u.z + scl1*v.z,
            scl0*u.w + scl1*v.w,
        )

    @classmethod
    def omega(cls, u: Quat, v: Quat) -> np.ndarray:
        """Rotation vector taking ``u`` to ``v`` (applied on the left)."""
        if u.dot(v) < 0:
            v = -v
        p = (v * u.inverse()).log()
        return 2 * np.array([p.x, p.y, p.z])

    @classmethod
    def squad(cls, p: Quat, a: Quat, b: Quat, q: Quat, t: float) -> Quat:
        """Spherical quadrangle interpolation from ``p`` to ``q`` with controls ``a``, ``b``."""
        return cls.slerp(cls.slerp(p, q, t), cls.slerp(a, b, t), 2 * t * (1 - t))

    @classmethod
    def spline_t(cls, q0: Quat, q1: Quat, q2: Quat) -> Quat:
        """Control point at ``q1`` for a spline through ``q0``, ``q1``, ``q2``."""
        inv = q1.inverse()
        t1 = (inv * q2).log()
        t2 = (inv * q0).log()
        t3 = (-(t1 + t2) / 4).exp()
        return q1 * t3

    @classmethod
    def spline(cls, q0: Quat, q1: Quat, q2: Quat, q3: Quat, t: float) -> Quat:
        """Spline segment starting at ``q1``, shaped by its neighbours."""
        a1 = cls.spline_t(q0, q1, q2)
        a2 = cls.spline_t(q1, q2, q3)
        return cls.squad(q1, a1, a2, q3, t)