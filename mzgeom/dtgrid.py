"""Signed Euclidean distance fields sampled on a regular 3D grid."""

from __future__ import annotations

import enum
import sys
from typing import Sequence, Union

import numpy as np
from numpy.typing import ArrayLike

from mzgeom.grid import Grid, Subscript

DT_INF = sys.float_info.max
"""Value standing for "infinitely far" in distance data."""

_NEAR_FRACTION = 0.87
_NORMAL_TOL = 1e-12

CellRef = Union[int, Sequence[int]]


class Axis(enum.IntEnum):
    """World axis used as the vertical (reference) axis of a grid."""

    X = 0
    Y = 1
    Z = 2


def distance_transform_1d(f: ArrayLike) -> np.ndarray:
    """Squared 1D distance transform: ``min over p of (q - p)**2 + f[p]`` for each q.

    Entries of ``f`` that are infinite are treated as ``DT_INF``.
    """
    arr = np.minimum(np.asarray(f, dtype=float).ravel(), DT_INF)
    vals = arr.tolist()
    n = len(vals)
    if n == 0:
        return np.zeros(0)

    v = [0] * n
    z = [0.0] * (n + 1)
    k = 0
    z[0] = -DT_INF
    z[1] = DT_INF

    for q in range(1, n):
        while True:
            p = v[k]
            s = ((vals[q] + q * q) - (vals[p] + p * p)) / (2 * q - 2 * p)
            if s > z[k]:
                break
            k -= 1
        k += 1
        v[k] = q
        z[k] = s
        z[k + 1] = DT_INF

    out = np.empty(n)
    k = 0
    for q in range(n):
        while z[k + 1] < q:
            k += 1
        p = v[k]
        out[q] = (q - p) ** 2 + vals[p]
    return out


def _safe_normalize(v: np.ndarray) -> np.ndarray:
    vn = float(np.linalg.norm(v))
    if vn > _NORMAL_TOL:
        return v / vn
    return np.zeros(3)


class DtGrid:
    """A 3D grid of cubic cells holding signed distances (negative inside)."""

    def __init__(self) -> None:
        self._grid = Grid(3)
        self._cell_size = 0.0
        self._axes: tuple[int, int, int] = (0, 1, 2)
        self._data = np.zeros(0)
        self._gdata: np.ndarray | None = None
        self._min_dist = DT_INF
        self._max_dist = -DT_INF

    # -- layout ----------------------------------------------------------------

    def clear(self) -> None:
        """Empty the grid and forget all distances."""
        self._grid = Grid(3)
        self._cell_size = 0.0
        self._axes = (0, 1, 2)
        self._data = np.zeros(0)
        self._gdata = None
        self._min_dist = DT_INF
        self._max_dist = -DT_INF

    def resize(
        self,
        nx: int,
        ny: int,
        nz: int,
        reference_axis: Axis = Axis.Z,
        cell_size: float = 1.0,
        origin: ArrayLike = (0.0, 0.0, 0.0),
    ) -> None:
        """Set the cell counts, cell size and origin; every cell becomes ``DT_INF``."""
        self.clear()
        self._grid.resize((nx, ny, nz), float(cell_size), origin)
        if self._grid.is_empty():
            return
        self._cell_size = float(cell_size)
        a = int(reference_axis)
        self._axes = ((a + 1) % 3, (a + 2) % 3, a)
        self._data = np.full(self._grid.size(), DT_INF)

    @property
    def dims(self) -> Subscript:
        return self._grid.dims

    @property
    def nx(self) -> int:
        return self._grid.dims[0]

    @property
    def ny(self) -> int:
        return self._grid.dims[1]

    @property
    def nz(self) -> int:
        return self._grid.dims[2]

    @property
    def size(self) -> int:
        return self._grid.size()

    def __len__(self) -> int:
        return self._grid.size()

    def is_empty(self) -> bool:
        return self._grid.is_empty()

    @property
    def cell_size(self) -> float:
        return self._cell_size

    @property
    def origin(self) -> np.ndarray:
        return self._grid.origin

    @property
    def reference_axis(self) -> Axis:
        return Axis(self._axes[2])

    @property
    def reference_axes(self) -> tuple[int, int, int]:
        """The two horizontal axes followed by the reference axis."""
        return self._axes

    @property
    def min_dist(self) -> float:
        return self._min_dist

    @property
    def max_dist(self) -> float:
        return self._max_dist

    @property
    def data(self) -> np.ndarray:
        """Flat distance array, x varying fastest; edits write into the grid."""
        return self._data

    def sub2ind(self, s: Sequence[int]) -> int:
        return self._grid.sub2ind(s)

    def ind2sub(self, idx: int) -> Subscript:
        return self._grid.ind2sub(idx)

    def cell_center(self, s: CellRef) -> np.ndarray:
        return self._grid.cell_center(s)

    def floor_cell(self, pos: ArrayLike) -> Subscript:
        return self._grid.floor_cell(pos)

    def nearest_cell(self, pos: ArrayLike) -> Subscript:
        return self._grid.nearest_cell(pos)

    def _subscript(self, s: CellRef) -> Subscript:
        if isinstance(s, (int, np.integer)):
            idx = int(s)
            if not 0 <= idx < self.size:
                raise IndexError(f"cell index {idx} out of range")
            return self._grid.ind2sub(idx)
        sub = tuple(int(c) for c in s)
        if len(sub) != 3 or any(not 0 <= c < d for c, d in zip(sub, self.dims)):
            raise IndexError(f"cell {sub} out of range for dims {self.dims}")
        return sub

    def _index(self, s: CellRef) -> int:
        return self._grid.sub2ind(self._subscript(s))

    def __getitem__(self, s: CellRef) -> float:
        return float(self._data[self._index(s)])

    def __setitem__(self, s: CellRef, value: float) -> None:
        self._data[self._index(s)] = value

    # -- distance computation --------------------------------------------------

    def _compute_edt(self) -> None:
        nx, ny, nz = self.dims
        arr = self._data.reshape(nz, ny, nx)
        if np.any(arr < 0):
            raise ValueError("distance transform input must not be negative")
        arr = np.apply_along_axis(distance_transform_1d, 0, arr)
        arr = np.apply_along_axis(distance_transform_1d, 1, arr)
        arr = np.apply_along_axis(distance_transform_1d, 2, arr)
        self._data = (np.sqrt(arr) * self._cell_size).reshape(-1)

    def compute_dists(self, store_gradients: bool = False) -> None:
        """Turn sparse surface distances into a full signed distance field.

        Cells hold a signed distance to the surface (negative inside) or
        ``DT_INF``; those closer than about one cell are kept as they are and
        all others are filled in by a Euclidean distance transform.
        """
        if self.is_empty():
            return
        data = self._data
        inside = data < 0
        data = np.where(inside, -data, data)
        finite = data != DT_INF
        near = finite & (data < _NEAR_FRACTION * self._cell_size)
        near_vals = data[near].copy()
        data = np.where(near, 0.0, np.where(finite, DT_INF, data))
        data = np.minimum(data, DT_INF)
        self._data = data
        self._compute_edt()

        self._data[near] = near_vals
        self._data[inside] = -self._data[inside]
        self._min_dist = float(self._data.min())
        self._max_dist = float(self._data.max())

        self._gdata = None
        if store_gradients:
            self._create_gradients()

    def compute_dists_from_binary(self, store_gradients: bool = False) -> None:
        """Treat cells ``<= 0`` as occupied and the rest as free, then fill in signed distances."""
        if self.is_empty():
            return
        occupied = self._data <= 0

        self._data = np.where(occupied, 0.0, DT_INF)
        self._compute_edt()
        outside = self._data.copy()

        self._data = np.where(occupied, DT_INF, 0.0)
        self._compute_edt()

        half = 0.5 * self._cell_size
        d1 = np.maximum(outside - half, 0.0)
        d2 = np.maximum(self._data - half, 0.0)
        self._data = d1 - d2
        self._min_dist = float(self._data.min())
        self._max_dist = float(self._data.max())

        self._gdata = None
        if store_gradients:
            self._create_gradients()

    def recompute_extents(self) -> None:
        """Widen the stored minimum and maximum distances to cover the current data."""
        if self._data.size:
            self._min_dist = min(self._min_dist, float(self._data.min()))
            self._max_dist = max(self._max_dist, float(self._data.max()))

    # -- gradients -------------------------------------------------------------

    def _create_gradients(self) -> None:
        nx, ny, nz = self.dims
        arr = self._data.reshape(nz, ny, nx)
        g = np.zeros((nz, ny, nx, 3))
        for d in range(3):
            if self.dims[d] > 1:
                g[..., d] = np.gradient(arr, axis=2 - d) / self._cell_size
        self._gdata = g.reshape(-1, 3)

    def gradient(self, s: CellRef) -> np.ndarray:
        """Finite-difference gradient of the distance at a cell."""
        if self.is_empty():
            return np.zeros(3)
        sub = list(self._subscript(s))
        if self._gdata is not None:
            return self._gdata[self._grid.sub2ind(sub)].copy()

        data = self._data
        vcur = data[self._grid.sub2ind(sub)]
        inv_cs = 1.0 / self._cell_size
        g = np.zeros(3)
        for d in range(3):
            n = self.dims[d]
            if n == 1:
                continue
            prev_sub = list(sub)
            next_sub = list(sub)
            prev_sub[d] -= 1
            next_sub[d] += 1
            if sub[d] > 0:
                vprev = data[self._grid.sub2ind(prev_sub)]
                if sub[d] + 1 < n:
                    vnext = data[self._grid.sub2ind(next_sub)]
                    g[d] = (vnext - vprev) * inv_cs * 0.5
                else:
                    g[d] = (vcur - vprev) * inv_cs
            else:
                vnext = data[self._grid.sub2ind(next_sub)]
                g[d] = (vnext - vcur) * inv_cs
        return g

    def normal(self, s: CellRef) -> np.ndarray:
        """Unit gradient at a cell, or zero where the gradient vanishes."""
        return _safe_normalize(self.gradient(s))

    # -- sampling --------------------------------------------------------------

    def _sample(self, pos: ArrayLike, want_gradient: bool) -> tuple[float, np.ndarray]:
        if self.is_empty():
            raise ValueError("grid is empty")
        v = np.broadcast_to(np.asarray(pos, dtype=float), (3,))
        fs = self._grid.floor_cell(v)
        fv = self._grid.cell_center(fs)
        cs = self._cell_size

        alpha = np.zeros((2, 3))
        for j in range(3):
            diff = v[j] - fv[j]
            if v[j] < fv[j] or diff >= cs or fs[j] + 1 >= self.dims[j]:
                alpha[0, j] = 1.0
                alpha[1, j] = 0.0
            else:
                u = diff / cs
                alpha[0, j] = 1.0 - u
                alpha[1, j] = u

        f = 0.0
        g = np.zeros(3)
        for dx in (0, 1):
            for dy in (0, 1):
                for dz in (0, 1):
                    coeff = alpha[dx, 0] * alpha[dy, 1] * alpha[dz, 2]
                    if not coeff:
                        continue
                    s = (fs[0] + dx, fs[1] + dy, fs[2] + dz)
                    f += coeff * self._data[self._grid.sub2ind(s)]
                    if want_gradient:
                        g += coeff * self.gradient(s)
        return float(f), g

    def sample(self, pos: ArrayLike) -> float:
        """Trilinearly interpolated distance at a world position."""
        return self._sample(pos, False)[0]

    def sample_with_gradient(self, pos: ArrayLike) -> tuple[float, np.ndarray]:
        """Interpolated distance and gradient at a world position."""
        return self._sample(pos, True)