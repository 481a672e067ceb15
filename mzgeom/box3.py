"""Axis-aligned 3D bounding boxes."""

from __future__ import annotations

from typing import NamedTuple, Optional

import numpy as np
from numpy.typing import ArrayLike


def _vec3(v: ArrayLike) -> np.ndarray:
    arr = np.broadcast_to(np.asarray(v, dtype=float), (3,)).copy()
    return arr


def _gray(i: int) -> int:
    return i ^ (i >> 1)


class ClipResult(NamedTuple):
    """Parameters and endpoints of a segment clipped to a box."""

    u0: float
    u1: float
    start: np.ndarray
    end: np.ndarray


def _clip_test(p: float, q: float, u0: float, u1: float) -> Optional[tuple[float, float]]:
    if p == 0 and q < 0:
        return None
    if p < 0:
        u = q / p
        if u > u1:
            return None
        if u > u0:
            u0 = u
    elif p > 0:
        u = q / p
        if u < u0:
            return None
        if u < u1:
            u1 = u
    return u0, u1


class Box3:
    """A box spanning ``p0`` (low corner) to ``p1`` (high corner).

    A box with any low coordinate above the matching high coordinate is empty;
    the default box is empty.
    """

    def __init__(self, p0: ArrayLike = 1.0, p1: ArrayLike = -1.0) -> None:
        self.p0 = _vec3(p0)
        self.p1 = _vec3(p1)

    def __repr__(self) -> str:
        return f"Box3({self.p0.tolist()}, {self.p1.tolist()})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Box3):
            return NotImplemented
        return bool(np.array_equal(self.p0, other.p0) and np.array_equal(self.p1, other.p1))

    def copy(self) -> Box3:
        return Box3(self.p0, self.p1)

    def lerp(self, p: ArrayLike) -> np.ndarray:
        """Interpolate between the corners with per-axis fractions ``p``."""
        return self.p0 + _vec3(p) * (self.p1 - self.p0)

    def corner(self, i: int) -> np.ndarray:
        """Return corner ``i`` (0-7); consecutive corners share a face edge."""
        g = _gray(i)
        return self.lerp((g & 1, (g >> 1) & 1, (g >> 2) & 1))

    def is_empty(self) -> bool:
        return bool(np.any(self.p0 > self.p1))

    def center(self) -> np.ndarray:
        return 0.5 * (self.p0 + self.p1)

    def contains(self, v: ArrayLike) -> bool:
        vec = _vec3(v)
        return bool(np.all(vec >= self.p0) and np.all(vec <= self.p1))

    def add_point(self, v: ArrayLike) -> None:
        """Grow the box to include ``v``."""
        vec = _vec3(v)
        if self.is_empty():
            self.p0 = vec.copy()
            self.p1 = vec.copy()
        else:
            self.p0 = np.minimum(self.p0, vec)
            self.p1 = np.maximum(self.p1, vec)

    def dilate(self, d: float) -> None:
        """Move every face outward by ``d``."""
        self.p0 = self.p0 - d
        self.p1 = self.p1 + d

    def clear(self) -> None:
        """Make the box empty."""
        self.p0 = _vec3(1.0)
        self.p1 = _vec3(-1.0)

    def intersects(self, other: Box3) -> bool:
        if self.is_empty() or other.is_empty():
            return False
        return not bool(np.any(self.p0 > other.p1) or np.any(self.p1 < other.p0))

    def unite(self, other: Box3) -> Box3:
        """Return the smallest box holding both boxes."""
        if self.is_empty():
            return other.copy()
        if other.is_empty():
            return self.copy()
        return Box3(np.minimum(self.p0, other.p0), np.maximum(self.p1, other.p1))

    def intersect(self, other: Box3) -> Box3:
        """Return the overlap of both boxes, which may be empty."""
        if self.is_empty():
            return self.copy()
        if other.is_empty():
            return other.copy()
        return Box3(np.maximum(self.p0, other.p0), np.minimum(self.p1, other.p1))

    def closest(self, v: ArrayLike) -> np.ndarray:
        """Return the point of the box nearest to ``v``."""
        return np.minimum(np.maximum(_vec3(v), self.p0), self.p1)

    def clip_line(self, v0: ArrayLike, v1: ArrayLike) -> Optional[ClipResult]:
        """Clip the segment ``v0``-``v1`` to the box.

        Returns None when the segment misses the box, otherwise the segment
        parameters of the clipped part and its endpoints.
        """
        a = _vec3(v0)
        b = _vec3(v1)
        delta = b - a
        u0, u1 = 0.0, 1.0
        for i in range(3):
            for p, q in ((-delta[i], a[i] - self.p0[i]), (delta[i], self.p1[i] - a[i])):
                result = _clip_test(float(p), float(q), u0, u1)
                if result is None:
                    return None
                u0, u1 = result
        return ClipResult(u0, u1, a + delta * u0, a + delta * u1)