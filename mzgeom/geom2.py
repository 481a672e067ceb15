"""Planar geometry: homogeneous lines, convex hulls, polygon clipping and offsets.

Points are given as sequences or arrays of length 2 (x, y) or 3 (x, y, z).
Only x and y take part in the geometry; where new vertices are made on an
edge of a polygon of 3D points, z is interpolated linearly along that edge.
Polygons are returned as arrays of shape ``(n, 2)`` or ``(n, 3)``.
"""

from __future__ import annotations

import warnings
from typing import Optional

import numpy as np
from numpy.typing import ArrayLike

_INSIDE_TOL = 1e-6
_PARALLEL_TOL = 1e-9


def _vec2(p: ArrayLike) -> np.ndarray:
    arr = np.asarray(p, dtype=float)
    if arr.ndim != 1 or arr.shape[0] < 2:
        raise ValueError(f"expected a point with at least 2 coordinates, got shape {arr.shape}")
    return arr[:2].copy()


def _point(p: ArrayLike) -> np.ndarray:
    arr = np.asarray(p, dtype=float)
    if arr.ndim != 1 or arr.shape[0] not in (2, 3):
        raise ValueError(f"expected a 2D or 3D point, got shape {arr.shape}")
    return arr.copy()


def _line(line: ArrayLike) -> np.ndarray:
    arr = np.asarray(line, dtype=float)
    if arr.shape != (3,):
        raise ValueError(f"expected homogeneous line coefficients (a, b, c), got shape {arr.shape}")
    return arr


def _points(points: ArrayLike) -> np.ndarray:
    arr = np.asarray(points, dtype=float)
    if arr.size == 0:
        dim = arr.shape[1] if arr.ndim == 2 and arr.shape[1] in (2, 3) else 2
        return np.zeros((0, dim))
    if arr.ndim != 2 or arr.shape[1] not in (2, 3):
        raise ValueError(f"expected an array of 2D or 3D points, got shape {arr.shape}")
    return arr


def turn(p: ArrayLike, q: ArrayLike, r: ArrayLike) -> float:
    """Positive if the angle p-q-r turns counter-clockwise, negative if clockwise."""
    a, b, c = _vec2(p), _vec2(q), _vec2(r)
    return float((b[0] - a[0]) * (c[1] - a[1]) - (c[0] - a[0]) * (b[1] - a[1]))


def line_from_points(p0: ArrayLike, p1: ArrayLike, normalize: bool = False) -> np.ndarray:
    """Homogeneous coefficients (a, b, c) of the line through ``p0`` and ``p1``.

    When normalized, a^2 + b^2 = 1, so ``point_line_dist`` gives true signed
    distances, positive to the left of the direction ``p0`` to ``p1``.
    """
    line = np.cross(np.append(_vec2(p0), 1.0), np.append(_vec2(p1), 1.0))
    if normalize:
        line = line / np.linalg.norm(line[:2])
    return line


def line_intersect(l0: ArrayLike, l1: ArrayLike) -> np.ndarray:
    """Homogeneous intersection of two lines; divide by the last entry to get x, y."""
    return np.cross(_line(l0), _line(l1))


def point_line_dist(p: ArrayLike, line: ArrayLike, normalize: bool = False) -> float:
    """Signed distance from ``p`` to ``line``, scaled unless normalized or already unit."""
    ln = _line(line)
    dp = float(np.dot(np.append(_vec2(p), 1.0), ln))
    if normalize:
        dp /= float(np.linalg.norm(ln[:2]))
    return dp


def point_segment_closest(p: ArrayLike, l0: ArrayLike, l1: ArrayLike) -> np.ndarray:
    """Point of the segment ``l0``-``l1`` nearest to ``p``."""
    a, b, pt = _vec2(l0), _vec2(l1), _vec2(p)
    dl = b - a
    denom = float(np.dot(dl, dl))
    if denom == 0.0:
        return a
    u = float(np.dot(pt - a, dl)) / denom
    u = max(0.0, min(u, 1.0))
    return a + u * dl


def _edge_point(a: np.ndarray, b: np.ndarray, xy: np.ndarray) -> np.ndarray:
    """Build a vertex at ``xy`` on the edge a-b, interpolating z for 3D points."""
    if a.shape[0] == 2:
        return xy.copy()
    dl = b[:2] - a[:2]
    dp = xy - a[:2]
    idx = 0 if abs(dl[0]) > abs(dl[1]) else 1
    u = dp[idx] / dl[idx]
    return np.array([xy[0], xy[1], a[2] + u * (b[2] - a[2])])


def is_convex_ccw(points: ArrayLike) -> bool:
    """True if ``points`` form a convex polygon wound counter-clockwise."""
    pts = _points(points)
    n = len(pts)
    if n <= 2:
        return True
    return all(turn(pts[i], pts[(i + 1) % n], pts[(i + 2) % n]) > 0 for i in range(n))


def convex_hull(points: ArrayLike) -> np.ndarray:
    """Counter-clockwise convex hull in O(n log n), starting at the lowest-x point.

    With fewer than three distinct points, the distinct points are returned
    sorted by x, then y.
    """
    pts = _points(points)
    if len(pts) == 0:
        return pts.copy()

    order = np.lexsort((pts[:, 1], pts[:, 0]))
    ordered = pts[order]
    unique = [ordered[0]]
    for p in ordered[1:]:
        if p[0] != unique[-1][0] or p[1] != unique[-1][1]:
            unique.append(p)

    if len(unique) < 3:
        return np.array(unique)

    def chain(seq):
        out: list[np.ndarray] = []
        for p in seq:
            while len(out) >= 2 and turn(out[-2], out[-1], p) <= 0:
                out.pop()
            out.append(p)
        return out

    lower = chain(unique)
    upper = chain(reversed(unique))
    return np.array(lower + upper[1:-1])


def box_polygon(lower: ArrayLike, upper: ArrayLike) -> np.ndarray:
    """Counter-clockwise outline of the box ``lower``-``upper``; empty if the box is."""
    lo, hi = _vec2(lower), _vec2(upper)
    if np.any(lo > hi):
        return np.zeros((0, 2))
    return np.array([
        [lo[0], lo[1]],
        [hi[0], lo[1]],
        [hi[0], hi[1]],
        [lo[0], hi[1]],
    ])


def area(points: ArrayLike) -> float:
    """Signed area of a simple polygon: positive if counter-clockwise."""
    pts = _points(points)
    if len(pts) < 3:
        return 0.0
    nxt = np.roll(pts, -1, axis=0)
    t = pts[:, 0] * nxt[:, 1] - nxt[:, 0] * pts[:, 1]
    return 0.5 * float(t.sum())


def centroid(points: ArrayLike) -> np.ndarray:
    """Area centroid of a simple polygon.

    With fewer than three points the mean of the points is returned, and the
    origin for no points.
    """
    pts = _points(points)
    if len(pts) == 0:
        return np.zeros(pts.shape[1])
    if len(pts) < 3:
        return pts.mean(axis=0)
    nxt = np.roll(pts, -1, axis=0)
    t = pts[:, 0] * nxt[:, 1] - nxt[:, 0] * pts[:, 1]
    a = 0.5 * float(t.sum())
    total = ((pts + nxt) * t[:, None]).sum(axis=0)
    return total * (1.0 / (6.0 * a))


def compute_bbox(points: ArrayLike) -> Optional[tuple[np.ndarray, np.ndarray]]:
    """Lower and upper corners of the x-y bounding box, or None for no points."""
    pts = _points(points)
    if len(pts) == 0:
        return None
    xy = pts[:, :2]
    return xy.min(axis=0), xy.max(axis=0)


def clip_polygon(points: ArrayLike, line: ArrayLike) -> np.ndarray:
    """Keep the part of the polygon with positive signed distance to ``line``."""
    pts = _points(points)
    ln = _line(line)
    n = len(pts)
    result: list[np.ndarray] = []
    if n == 0:
        return pts.copy()

    was_inside = False
    for i in range(n + 1):
        p1 = pts[i % n]
        is_inside = point_line_dist(p1, ln, True) > _INSIDE_TOL
        if i and is_inside != was_inside:
            p0 = pts[i - 1]
            edge = line_from_points(p0, p1)
            h = line_intersect(ln, edge)
            if abs(h[2]) <= _PARALLEL_TOL:
                warnings.warn("cannot clip against an edge parallel to the line", RuntimeWarning)
                return np.zeros((0, pts.shape[1]))
            result.append(_edge_point(p0, p1, h[:2] / h[2]))
        if is_inside and i < n:
            result.append(p1.copy())
        was_inside = is_inside

    if not result:
        return np.zeros((0, pts.shape[1]))
    return np.array(result)


def offset_convex_polygon(points: ArrayLike, offset: float) -> np.ndarray:
    """Grow (positive ``offset``) or shrink (negative) a counter-clockwise convex polygon.

    Polygons of fewer than three points give an empty result.
    """
    pts = _points(points)
    n = len(pts)
    dim = pts.shape[1]
    if n < 3:
        return np.zeros((0, dim))
    if offset == 0:
        return pts.copy()

    if offset < 0:
        if n <= 4 or dim == 3:
            dst = pts.copy()
        else:
            lo, hi = compute_bbox(pts)  # type: ignore[misc]
            dst = box_polygon(lo + 2 * offset, hi - 2 * offset)
        for i0 in range(n):
            if len(dst) == 0:
                break
            i1 = (i0 + 1) % n
            ln = line_from_points(pts[i0], pts[i1], True)
            ln[2] += offset
            dst = clip_polygon(dst, ln)
        return dst

    result = []
    for i0 in range(n):
        i1 = (i0 + 1) % n
        i2 = (i0 + 2) % n
        l0 = line_from_points(pts[i0], pts[i1], True)
        l1 = line_from_points(pts[i1], pts[i2], True)
        l0[2] += offset
        l1[2] += offset
        h = line_intersect(l0, l1)
        if abs(h[2]) <= _PARALLEL_TOL:
            raise ValueError("adjacent polygon edges are parallel")
        result.append(_edge_point(pts[i0], pts[i1], h[:2] / h[2]))
    return np.array(result)


def convex_polygon_dist(p: ArrayLike, points: ArrayLike) -> tuple[float, np.ndarray]:
    """Signed distance from ``p`` to a convex counter-clockwise polygon, and a normal.

    The distance is positive outside and negative inside. The normal is a unit
    vector along which moving ``p`` increases the distance; it has as many
    coordinates as ``p``, with z set to zero.
    """
    pt = _point(p)
    pts = _points(points)
    if len(pts) == 0:
        raise ValueError("polygon has no points")

    p2 = pt[:2]

    def make_normal(v: np.ndarray) -> np.ndarray:
        out = np.zeros(pt.shape[0])
        out[:2] = v
        return out

    with np.errstate(divide="ignore", invalid="ignore"):
        if len(pts) in (1, 2):
            if len(pts) == 1:
                closest = pts[0, :2]
            else:
                closest = point_segment_closest(p2, pts[0], pts[1])
            diff = p2 - closest
            d = float(np.linalg.norm(diff))
            return d, make_normal(diff / d)

        inside = True
        dmin = float("inf")
        normal = make_normal(np.zeros(2))
        n = len(pts)
        for j0 in range(n):
            a, b = pts[j0], pts[(j0 + 1) % n]
            sd = point_line_dist(p2, line_from_points(a, b))
            if sd <= 0:
                inside = False
            diff = p2 - point_segment_closest(p2, a, b)
            d = float(np.linalg.norm(diff))
            if d < dmin:
                dmin = d
                normal = make_normal(diff / (-d if sd > 0 else d))

    if inside:
        dmin = -dmin
    return dmin, normal