"""An interactive 3D viewing camera: projection, aiming and mouse navigation."""

from __future__ import annotations

import copy
import enum
import math
from dataclasses import dataclass, field
from typing import Optional

import numpy as np
from numpy.typing import ArrayLike

from mzgeom.quat import Quat


def _vec3(v: ArrayLike) -> np.ndarray:
    arr = np.asarray(v, dtype=float)
    if arr.shape != (3,):
        raise ValueError(f"expected a 3-vector, got shape {arr.shape}")
    return arr.copy()


class CameraType(enum.Enum):
    PERSPECTIVE = "perspective"
    ORTHO = "ortho"


class RotateType(enum.Enum):
    TRACKBALL = "trackball"
    TWO_AXIS = "two_axis"


class MouseMode(enum.Enum):
    NONE = "none"
    ROTATE = "rotate"
    PAN_XY = "pan_xy"
    PAN_Z = "pan_z"
    ZOOM = "zoom"


class MatrixType(enum.Enum):
    MODELVIEW = "modelview"
    PROJECTION = "projection"
    MODELVIEW_INVERSE = "modelview_inverse"
    PROJECTION_INVERSE = "projection_inverse"


class MouseFlags(enum.IntFlag):
    """Which mouse interactions the camera accepts."""

    NONE = 0
    ALLOW_PAN = 1
    ALLOW_ROTATE = 2
    ALLOW_ZOOM = 4
    ALLOW_ALL = ALLOW_PAN | ALLOW_ROTATE | ALLOW_ZOOM


@dataclass(frozen=True)
class _Rigid:
    """A rotation followed by a translation."""

    rotation: Quat
    translation: np.ndarray

    def rot_matrix(self) -> np.ndarray:
        return self.rotation.to_mat3()

    def inverse(self) -> _Rigid:
        qi = self.rotation.inverse()
        return _Rigid(qi, -qi.rotate(self.translation))

    def matrix(self) -> np.ndarray:
        m = np.eye(4)
        m[:3, :3] = self.rot_matrix()
        m[:3, 3] = self.translation
        return m


@dataclass(frozen=True)
class PerspectiveInfo:
    """Vertical field of view in degrees and the near and far clip distances."""

    fovy: float = 45.0
    near: float = 0.001
    far: float = 100.0


@dataclass
class AimInfo:
    """Where the camera sits, what it looks at and which way is up."""

    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    target: np.ndarray = field(default_factory=lambda: np.array([0.0, 0.0, -1.0]))
    up: np.ndarray = field(default_factory=lambda: np.array([0.0, 1.0, 0.0]))

    def __post_init__(self) -> None:
        self.position = _vec3(self.position)
        self.target = _vec3(self.target)
        self.up = _vec3(self.up)

    def _rigid(self) -> _Rigid:
        q = Quat.from_two_vectors(self.position - self.target, 2, self.up, 1)
        return _Rigid(q, self.position.copy()).inverse()

    def xform(self) -> np.ndarray:
        """World-to-camera transform as a 4x4 matrix."""
        return self._rigid().matrix()

    def translate(self, v: ArrayLike) -> None:
        """Move position and target together by ``v`` given in camera axes."""
        vt = self._rigid().rot_matrix().T @ _vec3(v)
        self.position = self.position + vt
        self.target = self.target + vt

    def rotate(self, q: Quat) -> None:
        """Orbit the position about the target by the camera-frame rotation ``q``."""
        d = float(np.linalg.norm(self.position - self.target))
        told = self._rigid()
        r_new = (q * told.rotation).to_mat3()
        self.position = self.target + r_new[2, :] * d
        self.up = r_new[1, :].copy()


@dataclass
class _Pose:
    aim: AimInfo = field(default_factory=AimInfo)
    xrot: float = 0.0
    yrot: float = 0.0
    ortho_view_dims: np.ndarray = field(default_factory=lambda: np.array([1.0, 1.0, 100.0]))

    def copy(self) -> _Pose:
        return copy.deepcopy(self)


class Camera:
    """A camera with perspective or orthographic projection and mouse navigation."""

    def __init__(self) -> None:
        self._camera_type = CameraType.PERSPECTIVE
        self._rotate_type = RotateType.TRACKBALL
        self._pinfo = PerspectiveInfo()
        self._current = _Pose()
        self._home = _Pose()
        self._minsz, self._maxsz = 1.0, 0.0
        self._minxrot, self._maxxrot = 1.0, 0.0
        self._minyrot, self._maxyrot = 1.0, 0.0
        self.mouse_flags = MouseFlags.ALLOW_ALL
        self._mouse_down = False
        self._mouse_mode = MouseMode.NONE
        self._mouse_orig_pose = _Pose()
        self._mouse_x = 0
        self._mouse_y = 0
        self._mouse_winsz = 0.0
        self._mouse_hemi = np.zeros(3)
        self._winsz = 0.0
        self._aspect = 1.0
        self._viewport = (0, 0, 100, 100)
        self._projection = np.eye(4)
        self._projection_inv = np.eye(4)
        self._cxform = _Rigid(Quat(), np.zeros(3))
        self._modelview = np.eye(4)
        self._modelview_inv = np.eye(4)
        self.set_viewport(0, 0, 100, 100)
        self._update_modelview()

    # -- state ----------------------------------------------------------------

    @property
    def camera_type(self) -> CameraType:
        return self._camera_type

    @camera_type.setter
    def camera_type(self, t: CameraType) -> None:
        self._camera_type = t
        self._update_projection()
        self._update_modelview()

    @property
    def rotate_type(self) -> RotateType:
        return self._rotate_type

    @rotate_type.setter
    def rotate_type(self, t: RotateType) -> None:
        self._rotate_type = t
        self._update_modelview()

    @property
    def viewport(self) -> tuple[int, int, int, int]:
        return self._viewport

    @property
    def perspective_info(self) -> PerspectiveInfo:
        return self._pinfo

    @property
    def aim_info(self) -> AimInfo:
        return copy.deepcopy(self._current.aim)

    @property
    def ortho_view_dims(self) -> np.ndarray:
        return self._current.ortho_view_dims.copy()

    @property
    def two_axis_angles(self) -> tuple[float, float]:
        return self._current.xrot, self._current.yrot

    @property
    def mouse_mode(self) -> MouseMode:
        return self._mouse_mode

    @property
    def projection(self) -> np.ndarray:
        return self._projection.copy()

    @property
    def projection_inverse(self) -> np.ndarray:
        return self._projection_inv.copy()

    @property
    def modelview(self) -> np.ndarray:
        return self._modelview.copy()

    @property
    def modelview_inverse(self) -> np.ndarray:
        return self._modelview_inv.copy()

    def get_matrix(self, which: MatrixType) -> np.ndarray:
        if which is MatrixType.PROJECTION_INVERSE:
            return self.projection_inverse
        if which is MatrixType.MODELVIEW_INVERSE:
            return self.modelview_inverse
        if which is MatrixType.PROJECTION:
            return self.projection
        return self.modelview

    # -- configuration ---------------------------------------------------------

    def set_zoom_range(self, z0: float, z1: float) -> None:
        """Limit the visible window height; ignored unless ``z0 < z1``."""
        self._minsz, self._maxsz = float(z0), float(z1)

    def set_xrot_range(self, x0: float, x1: float) -> None:
        self._minxrot, self._maxxrot = float(x0), float(x1)

    def set_yrot_range(self, y0: float, y1: float) -> None:
        self._minyrot, self._maxyrot = float(y0), float(y1)

    def set_viewport(self, x: int, y: int, w: int, h: int) -> None:
        self._viewport = (int(x), int(y), int(w), int(h))
        self._update_projection()

    def set_ortho(self, view_dims: ArrayLike) -> None:
        """Switch to orthographic projection of the given width, height and depth."""
        self._camera_type = CameraType.ORTHO
        self._current.ortho_view_dims = _vec3(view_dims)
        self._update_projection()

    def set_perspective(self, fovy: float = 45.0, near: float = 0.001, far: float = 100.0) -> None:
        self._camera_type = CameraType.PERSPECTIVE
        self._pinfo = PerspectiveInfo(float(fovy), float(near), float(far))
        self._update_projection()

    def aim(self, position: ArrayLike, target: ArrayLike, up: ArrayLike) -> None:
        self._current.aim = AimInfo(position, target, up)
        self._update_modelview()

    def set_two_axis_angles(self, xr: float, yr: float) -> None:
        """Set the two-axis rotation in degrees, clamped to any ranges set."""
        xr, yr = float(xr), float(yr)
        if self._minyrot < self._maxyrot:
            yr = min(max(yr, self._minyrot), self._maxyrot)
        if self._minxrot < self._maxxrot:
            xr = min(max(xr, self._minxrot), self._maxxrot)
        self._current.xrot = xr
        self._current.yrot = yr
        self._update_modelview()

    # -- navigation ------------------------------------------------------------

    def _half_fov_tan(self) -> float:
        return math.tan(0.5 * self._pinfo.fovy * math.pi / 180.0)

    def zoom(self, factor: float) -> None:
        """Scale the visible window height by ``factor``, within the zoom range."""
        newsz = self._winsz * factor
        if self._minsz < self._maxsz:
            newsz = min(max(newsz, self._minsz), self._maxsz)
        dims = self._current.ortho_view_dims
        self._current.ortho_view_dims = dims * (newsz / dims[1])
        self._update_projection()

        aim = self._current.aim
        diff = aim.position - aim.target
        diff = diff / np.linalg.norm(diff)
        d = 0.5 * newsz / self._half_fov_tan()
        aim.position = aim.target + diff * d
        self._update_modelview()

    def pan(self, p: ArrayLike, autoscale: bool = False) -> None:
        """Shift position and target by ``p`` in camera axes.

        With ``autoscale`` the offset is in pixels rather than world units.
        """
        s = 1.0
        if autoscale:
            s = self._winsz / min(self._viewport[2], self._viewport[3])
        offs = self._cxform.rot_matrix().T @ (s * _vec3(p))
        aim = self._current.aim
        aim.position = aim.position + offs
        aim.target = aim.target + offs
        self._update_modelview()

    def _hemi_coords(self, x: int, y: int) -> np.ndarray:
        vx, vy, vw, vh = self._viewport
        xc = x - vx - 0.5 * vw
        yc = y - vy - 0.5 * vh
        scl = 0.5 * min(vw, vh)
        ux = xc / scl
        uy = -yc / scl
        d2 = ux * ux + uy * uy
        uz = 0.0
        if d2 < 1:
            uz = math.sqrt(1 - d2)
        else:
            d = math.sqrt(d2)
            ux /= d
            uy /= d
        return np.array([ux, uy, uz])

    def _allowed(self, mode: MouseMode) -> bool:
        if mode in (MouseMode.PAN_XY, MouseMode.PAN_Z):
            return bool(self.mouse_flags & MouseFlags.ALLOW_PAN)
        if mode is MouseMode.ROTATE:
            return bool(self.mouse_flags & MouseFlags.ALLOW_ROTATE)
        if mode is MouseMode.ZOOM:
            return bool(self.mouse_flags & MouseFlags.ALLOW_ZOOM)
        return False

    def mouse_press(self, x: int, y: int, mode: MouseMode) -> None:
        """Start a drag; a disallowed mode or a second press cancels any drag."""
        if self._mouse_down or not self._allowed(mode):
            self.mouse_reset()
            return
        self._mouse_down = True
        self._mouse_mode = mode
        self._mouse_orig_pose = self._current.copy()
        self._mouse_x = x
        self._mouse_y = y
        self._mouse_winsz = self._winsz
        self._mouse_hemi = self._hemi_coords(x, y)

    def mouse_move(self, x: int, y: int, mode: MouseMode) -> None:
        """Update the camera for the drag started by ``mouse_press``."""
        if not self._mouse_down or mode is not self._mouse_mode:
            self.mouse_reset()
            return
        dx = x - self._mouse_x
        dy = y - self._mouse_y

        if mode is MouseMode.ZOOM:
            self._winsz = self._mouse_winsz
            self._current = self._mouse_orig_pose.copy()
            self.zoom(1.05 ** dy)
        elif mode is MouseMode.ROTATE:
            if self._rotate_type is RotateType.TWO_AXIS:
                self._current = self._mouse_orig_pose.copy()
                self.set_two_axis_angles(self._current.xrot + dy, self._current.yrot + dx)
            else:
                h1 = self._hemi_coords(x, y)
                axis = np.cross(self._mouse_hemi, h1)
                st = float(np.linalg.norm(axis))
                ct = float(np.dot(self._mouse_hemi, h1))
                if st > 1e-5:
                    axis = axis / st
                    angle = math.acos(min(1.0, max(ct, -1.0)))
                    self._current = self._mouse_orig_pose.copy()
                    self._current.aim.rotate(Quat.from_axis_angle(axis, angle))
                    self._update_modelview()
        else:
            self._current = self._mouse_orig_pose.copy()
            scl = self._winsz / min(self._viewport[2], self._viewport[3])
            if mode is MouseMode.PAN_Z:
                self.pan((0.0, 0.0, 4 * dy * scl))
            else:
                self.pan((-dx * scl, dy * scl, 0.0))

    def mouse_release(self, x: int, y: int, mode: MouseMode) -> None:
        """Finish a drag, keeping its result."""
        if not self._mouse_down or mode is not self._mouse_mode:
            self.mouse_reset()
            return
        self.mouse_move(x, y, mode)
        self._mouse_down = False

    def mouse_reset(self) -> None:
        """Cancel any drag, restoring the pose it started from."""
        if self._mouse_down:
            self._mouse_down = False
            self._current = self._mouse_orig_pose.copy()
            self._update_modelview()
        self._mouse_mode = MouseMode.NONE

    def set_home_position(self) -> None:
        self._home = self._current.copy()

    def recall_home_position(self) -> None:
        self._current = self._home.copy()
        self._update_modelview()
        self._update_projection()

    # -- unprojection ----------------------------------------------------------

    def unproject(self, wincoords: ArrayLike) -> np.ndarray:
        """Map window coordinates (x, y, depth in [0, 1]) back to world space."""
        wx, wy, wz = _vec3(wincoords)
        vx, vy, vw, vh = self._viewport
        ndc = np.array([2 * (wx - vx) / vw - 1, 2 * (wy - vy) / vh - 1, 2 * wz - 1, 1.0])
        out = np.linalg.inv(self._projection @ self._modelview) @ ndc
        if out[3] == 0:
            raise ValueError("window point does not map to a finite world point")
        return out[:3] / out[3]

    def unproject_pixel(self, x: int, y: int, z: float) -> np.ndarray:
        """Like ``unproject`` for a pixel counted from the top of the viewport."""
        return self.unproject((x, self._viewport[3] - y - 1, z))

    # -- internals -------------------------------------------------------------

    def _update_projection(self) -> None:
        w, h = self._viewport[2], self._viewport[3]
        if not h:
            h += 1
        self._aspect = float(w) / float(h)

        proj = np.eye(4)
        inv = np.eye(4)
        if self._camera_type is CameraType.PERSPECTIVE:
            f = 1.0 / self._half_fov_tan()
            zn, zf = self._pinfo.near, self._pinfo.far
            a = (zf + zn) / (zn - zf)
            b = (2 * zf * zn) / (zn - zf)
            proj[0, 0] = f / self._aspect
            proj[1, 1] = f
            proj[2, 2] = a
            proj[2, 3] = b
            proj[3, 2] = -1
            proj[3, 3] = 0
            inv[0, 0] = self._aspect / f
            inv[1, 1] = 1 / f
            inv[2, 2] = 0
            inv[2, 3] = -1
            inv[3, 2] = 1 / b
            inv[3, 3] = a / b
        else:
            rw, rh, rd = self._current.ortho_view_dims
            ra = rw / rh
            va = self._aspect
            if ra > va:
                vw, vh = rw, rh * ra / va
            else:
                vw, vh = rw * va / ra, rh
            proj[0, 0] = 2 / vw
            proj[1, 1] = 2 / vh
            proj[2, 2] = -2 / rd
            proj[2, 3] = -0.5
            inv[0, 0] = 0.5 * vw
            inv[1, 1] = 0.5 * vh
            inv[2, 2] = -0.5 * rd
            inv[2, 3] = -0.25 * rd
        self._projection = proj
        self._projection_inv = inv

    def _update_modelview(self) -> None:
        aim = self._current.aim
        if self._camera_type is CameraType.PERSPECTIVE:
            d = float(np.linalg.norm(aim.position - aim.target))
            self._winsz = 2 * d * self._half_fov_tan()
        else:
            self._winsz = float(self._current.ortho_view_dims[1])

        if self._rotate_type is RotateType.TWO_AXIS:
            tmp = copy.deepcopy(aim)
            rx = Quat.from_axis_angle((1.0, 0.0, 0.0), self._current.xrot * math.pi / 180)
            ry = Quat.from_axis_angle((0.0, 1.0, 0.0), self._current.yrot * math.pi / 180)
            tmp.rotate(rx * ry)
            self._cxform = tmp._rigid()
        else:
            self._cxform = aim._rigid()

        self._modelview = self._cxform.matrix()
        self._modelview_inv = self._cxform.inverse().matrix()


def _distance(aim: AimInfo) -> float:
    return float(np.linalg.norm(aim.position - aim.target))


__all__: Optional[list] = None