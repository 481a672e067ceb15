"""Helpers for 4-by-4 homogeneous transform matrices stored as numpy arrays."""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike


def _matrix(m: ArrayLike) -> np.ndarray:
    mat = np.asarray(m, dtype=float)
    if mat.shape != (4, 4):
        raise ValueError(f"expected a 4x4 matrix, got shape {mat.shape}")
    return mat


def _vector(v: ArrayLike, n: int) -> np.ndarray:
    vec = np.asarray(v, dtype=float)
    if vec.shape != (n,):
        raise ValueError(f"expected a vector of length {n}, got shape {vec.shape}")
    return vec


def identity() -> np.ndarray:
    """Return the 4x4 identity matrix."""
    return np.eye(4)


def mult3d(m: ArrayLike, v: ArrayLike) -> np.ndarray:
    """Transform a 3D point by ``m``, treating w as 1 and ignoring the last row."""
    mat = _matrix(m)
    vec = _vector(v, 3)
    return mat[:3, :3] @ vec + mat[:3, 3]


def inv3d(m: ArrayLike, v: ArrayLike) -> np.ndarray:
    """Undo ``mult3d`` for a rigid transform by applying the transposed rotation."""
    mat = _matrix(m)
    vec = _vector(v, 3)
    return mat[:3, :3].T @ (vec - mat[:3, 3])


def proj3d(m: ArrayLike, v: ArrayLike) -> np.ndarray:
    """Transform a 3D point by ``m`` and divide through by the resulting w."""
    mat = _matrix(m)
    vec = _vector(v, 3)
    h = mat @ np.append(vec, 1.0)
    return h[:3] / h[3]


def outer(a: ArrayLike, b: ArrayLike) -> np.ndarray:
    """Return the 4x4 outer product of two 4-vectors."""
    return np.outer(_vector(a, 4), _vector(b, 4))