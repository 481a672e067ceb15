"""Time values, 4x4 matrices, boxes, grids, quaternions, planar geometry, a viewing camera and 3D distance fields."""

__version__ = "0.1.0"
__all__ = ["timeutil", "mat4", "box3", "grid", "quat", "geom2", "camera", "dtgrid"]