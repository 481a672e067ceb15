"""Regular n-dimensional grids of cells with interpolated sampling."""

from __future__ import annotations

import itertools
import math
import operator
from typing import Any, Sequence, Union

import numpy as np
from numpy.typing import ArrayLike

Subscript = tuple[int, ...]


class Grid:
    """A regular grid of cells in ``ndims`` dimensions.

    Cells are stored with the first axis varying fastest. Positions are given
    in world units; cell ``s`` covers ``origin + s * cell_sizes`` to
    ``origin + (s + 1) * cell_sizes``.
    """

    def __init__(self, ndims: int = 3) -> None:
        if ndims < 1:
            raise ValueError("a grid needs at least one dimension")
        self._ndims = ndims
        self._clear()

    def _clear(self) -> None:
        n = self._ndims
        self._dims: Subscript = (0,) * n
        self._rprod: Subscript = (0,) * n
        self._origin = np.zeros(n)
        self._cell_sizes = np.zeros(n)

    def _vector(self, v: ArrayLike) -> np.ndarray:
        return np.broadcast_to(np.asarray(v, dtype=float), (self._ndims,)).copy()

    @property
    def ndims(self) -> int:
        return self._ndims

    @property
    def dims(self) -> Subscript:
        return self._dims

    @property
    def rprod(self) -> Subscript:
        """Running products of the dimensions."""
        return self._rprod

    @property
    def origin(self) -> np.ndarray:
        return self._origin.copy()

    @property
    def cell_sizes(self) -> np.ndarray:
        return self._cell_sizes.copy()

    def resize(self, dims: Sequence[int], cell_sizes: ArrayLike, origin: ArrayLike) -> None:
        """Set the cell counts, cell sizes and origin; a zero count empties the grid."""
        if len(dims) != self._ndims:
            raise ValueError(f"expected {self._ndims} dimensions, got {len(dims)}")
        if any(d < 0 for d in dims):
            raise ValueError("dimensions must not be negative")
        self._clear()
        self._rprod = tuple(itertools.accumulate((int(d) for d in dims), operator.mul))
        if not self.size():
            return
        self._dims = tuple(int(d) for d in dims)
        self._cell_sizes = self._vector(cell_sizes)
        self._origin = self._vector(origin)

    def resize_bounds(self, lower: ArrayLike, upper: ArrayLike, cell_sizes: ArrayLike) -> None:
        """Size the grid to cover ``lower``-``upper``, centred on their midpoint.

        If any upper bound is below its lower bound the grid is left empty.
        """
        self._clear()
        lo = self._vector(lower)
        hi = self._vector(upper)
        cs = self._vector(cell_sizes)
        center = 0.5 * (hi + lo)
        dims = []
        origin = np.zeros(self._ndims)
        for i in range(self._ndims):
            f = (hi[i] - lo[i]) / cs[i]
            if f < 0:
                return
            dims.append(int(math.ceil(f)))
            origin[i] = center[i] - 0.5 * cs[i] * dims[i]
        self.resize(dims, cs, origin)

    def size(self) -> int:
        return self._rprod[-1]

    def is_empty(self) -> bool:
        return not self.size()

    def _vec2sub(self, pos: ArrayLike, delta: float) -> Subscript:
        if self.is_empty():
            raise ValueError("grid is empty")
        v = (self._vector(pos) - self._origin) / self._cell_sizes
        return tuple(
            min(int(max(v[i] + delta, 0.0)), self._dims[i] - 1)
            for i in range(self._ndims)
        )

    def floor_cell(self, pos: ArrayLike) -> Subscript:
        """Cell whose centre is at or below ``pos`` on every axis, clamped to the grid."""
        return self._vec2sub(pos, -0.5)

    def ceil_cell(self, pos: ArrayLike) -> Subscript:
        """Cell whose centre is at or above ``pos`` on every axis, clamped to the grid."""
        return self._vec2sub(pos, 0.5)

    def nearest_cell(self, pos: ArrayLike) -> Subscript:
        """Cell that contains ``pos``, clamped to the grid."""
        return self._vec2sub(pos, 0.0)

    def center(self) -> np.ndarray:
        return self._origin + np.asarray(self._dims, dtype=float) * 0.5 * self._cell_sizes

    def max(self) -> np.ndarray:
        """Upper corner of the grid."""
        return self._origin + np.asarray(self._dims, dtype=float) * self._cell_sizes

    def cell_center(self, s: Union[int, Sequence[int]]) -> np.ndarray:
        """Centre of a cell given by subscript or by flat index."""
        if isinstance(s, (int, np.integer)):
            s = self.ind2sub(int(s))
        return self._origin + (np.asarray(s, dtype=float) + 0.5) * self._cell_sizes

    def sub2ind(self, s: Sequence[int]) -> int:
        idx = int(s[0])
        for i in range(1, self._ndims):
            idx += int(s[i]) * self._rprod[i - 1]
        return idx

    def ind2sub(self, idx: int) -> Subscript:
        if self.is_empty():
            raise ValueError("grid is empty")
        sub = [0] * self._ndims
        for i in reversed(range(self._ndims)):
            stride = self._rprod[i - 1] if i > 0 else 1
            sub[i], idx = divmod(idx, stride)
        return tuple(sub)

    def frac_cell(self, p: ArrayLike) -> tuple[Subscript, np.ndarray]:
        """Return the floor cell of ``p`` and the fractional offset toward the next cell."""
        s = self.floor_cell(p)
        c = self.cell_center(s)
        pos = self._vector(p)
        u = np.zeros(self._ndims)
        for i in range(self._ndims):
            di = pos[i] - c[i]
            if di < 0 or di >= self._cell_sizes[i] or s[i] + 1 >= self._dims[i]:
                u[i] = 0.0
            else:
                u[i] = di / self._cell_sizes[i]
        return s, u

    def _sample_at(self, s: Subscript, u: np.ndarray, data: Sequence[Any]) -> Any:
        f: Any = 0.0
        for n in range(1 << self._ndims):
            w = 1.0
            sn = []
            for i in range(self._ndims):
                di = (n >> i) & 1
                sn.append(s[i] + di)
                w *= u[i] if di else 1.0 - u[i]
                if not w:
                    break
            if w:
                f = f + w * data[self.sub2ind(sn)]
        return f

    def sample(self, pos: ArrayLike, data: Sequence[Any]) -> Any:
        """Multilinear interpolation of per-cell ``data`` (indexed by flat index) at ``pos``."""
        s, u = self.frac_cell(pos)
        return self._sample_at(s, u, data)

    def simplex_coeffs(self, pos: ArrayLike) -> tuple[list[Subscript], list[float]]:
        """Return the ``ndims + 1`` cells and barycentric weights of the simplex holding ``pos``."""
        s, u = self.frac_cell(pos)
        base = list(s)
        flip = [False] * self._ndims
        for i in range(self._ndims):
            if base[i] % 2:
                flip[i] = True
                u[i] = 1.0 - u[i]
                base[i] += 1
        order = sorted(range(self._ndims), key=lambda i: -u[i])

        points = [tuple(base)]
        coeffs = [1.0]
        current = base
        for k, axis in enumerate(order):
            current = list(current)
            current[axis] += -1 if flip[axis] else 1
            points.append(tuple(current))
            if k + 1 < self._ndims:
                c = float(u[axis] - u[order[k + 1]])
            else:
                c = float(u[axis])
            coeffs.append(c)
            coeffs[0] -= c
        return points, coeffs

    def sample_simplex(self, pos: ArrayLike, data: Sequence[Any]) -> Any:
        """Piecewise-linear interpolation of ``data`` over a simplex split of the cells."""
        points, coeffs = self.simplex_coeffs(pos)
        f: Any = 0.0
        for point, c in zip(points, coeffs):
            if c:
                f = f + c * data[self.sub2ind(point)]
        return f