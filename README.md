# mzgeom

A small toolkit of geometry and timing helpers for robotics and graphics
work. Vectors and matrices are plain NumPy arrays; matrices are row-major.

## Modules

- `mzgeom.timeutil`: `TimeStamp` (unsigned nanoseconds since the Unix epoch,
  with an invalid marker from `TimeStamp.invalid()`) and `Duration` (signed
  nanoseconds). Supports arithmetic between them, `TimeStamp.now()`,
  `TimeStamp.mtime(path)`, `from_seconds` / `to_seconds`, and whole-interval
  division (`//`) and remainder (`%`) of durations.
- `mzgeom.mat4`: functions on 4x4 homogeneous matrices: `identity`,
  `mult3d`, `inv3d`, `proj3d` and `outer`.
- `mzgeom.box3`: `Box3`, an axis-aligned box with `contains`, `add_point`,
  `dilate`, `unite`, `intersect`, `closest`, `corner` and `clip_line`
  (which returns a `ClipResult` or `None`).
- `mzgeom.grid`: `Grid`, a regular grid in any number of dimensions with
  cell lookup (`floor_cell`, `ceil_cell`, `nearest_cell`), index conversion
  (`sub2ind`, `ind2sub`), multilinear `sample` and simplex-based
  `sample_simplex` of per-cell data.
- `mzgeom.quat`: `Quat`, a quaternion with construction from axis-angle,
  rotation vectors, matrices, direction vectors and Euler angles; conversion
  to matrices and Euler angles (`to_euler`, `to_euler_axes`); `rotate`,
  `log`, `exp`, `pow`, `slerp`, `squad`, `spline` and angular distances.
- `mzgeom.geom2`: planar geometry on 2D or 3D points: homogeneous lines
  (`line_from_points`, `line_intersect`, `point_line_dist`),
  `point_segment_closest`, `turn`, `convex_hull`, `is_convex_ccw`, `area`,
  `centroid`, `compute_bbox`, `box_polygon`, `clip_polygon`,
  `offset_convex_polygon` and `convex_polygon_dist`.
- `mzgeom.camera`: `Camera`, a viewing camera with perspective or
  orthographic projection, `aim`, `zoom`, `pan`, trackball or two-axis
  rotation driven by `mouse_press` / `mouse_move` / `mouse_release`, a home
  position, and `unproject` from window coordinates to world space. Its
  matrices are read through `modelview`, `projection`, their inverses, or
  `get_matrix(MatrixType...)`.
- `mzgeom.dtgrid`: `DtGrid`, a 3D grid of signed distances (negative
  inside) filled in by an exact Euclidean distance transform
  (`compute_dists`, `compute_dists_from_binary`), with trilinear `sample`,
  `sample_with_gradient`, per-cell `gradient` and `normal`. The 1D transform
  is available on its own as `distance_transform_1d`.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Examples

```python
import numpy as np
from mzgeom.quat import Quat
from mzgeom.geom2 import convex_hull, area

q = Quat.from_axis_angle(np.array([0.0, 0.0, 1.0]), np.pi / 2)
print(q.rotate(np.array([1.0, 0.0, 0.0])))  # approximately [0, 1, 0]

hull = convex_hull([(0, 0), (1, 0), (1, 1), (0, 1), (0.5, 0.5)])
print(area(hull))  # 1.0
```

```python
from mzgeom.timeutil import Duration

print((Duration.second() * 3) // Duration.millisecond())  # 3000
```

```python
from mzgeom.dtgrid import DtGrid

grid = DtGrid()
grid.resize(5, 5, 5, cell_size=1.0)
grid[2, 2, 2] = 0.0            # one occupied cell; all others are free
grid.compute_dists_from_binary()
print(grid[2, 2, 2])           # -0.5: inside, half a cell from the surface
print(grid.sample((0.5, 0.5, 0.5)))
```

## What it does not do

The package only does the arithmetic. `Camera` computes matrices but does
not open a window or draw anything, and nothing here renders shapes or
writes images. `DtGrid` has no file storage, height maps or conversion of
triangle meshes; its distances come from values you place in the grid.