"""Point cloud file IO (Open3D)."""
from __future__ import annotations

from typing import Tuple

import numpy as np


def read_colored_point_cloud(path: str) -> Tuple[np.ndarray, np.ndarray]:
    """Read a coloured point cloud from disk using Open3D.

    Supported formats include PCD/PLY depending on Open3D compilation.
    Returns (positions (N,3), colors (N,3) in byte range [0, 255]).

    Raises:
        ValueError: If the file has points but no colours.
    """
    import open3d as o3d

    pcd = o3d.io.read_point_cloud(path)
    points = np.asarray(pcd.points, dtype=np.float64)
    colors = np.asarray(pcd.colors, dtype=np.float64)
    if points.shape[0] > 0 and colors.shape[0] != points.shape[0]:
        raise ValueError(f"Point cloud has no per-point colours: {path}")
    return points.reshape(-1, 3), colors.reshape(-1, 3) * 255.0


def write_colored_point_cloud(path: str, points: np.ndarray, colors: np.ndarray) -> None:
    """Write a point cloud with byte-range colours to disk using Open3D.

    Args:
        path: Output file path (e.g., .pcd, .ply). Extension determines format.
        points: Array of shape (N, 3) with XYZ coordinates.
        colors: Array of shape (N, 3) with RGB in [0, 255].

    Raises:
        ValueError: If input shapes are invalid or sizes mismatch.
        RuntimeError: If the point cloud cannot be written.
    """
    import open3d as o3d

    if points.ndim != 2 or points.shape[1] != 3:
        raise ValueError("points must have shape (N, 3)")
    if colors.ndim != 2 or colors.shape[1] != 3:
        raise ValueError("colors must have shape (N, 3)")
    if colors.shape[0] != points.shape[0]:
        raise ValueError("colors and points must have the same number of rows (N)")

    pc = o3d.geometry.PointCloud()
    pc.points = o3d.utility.Vector3dVector(np.asarray(points, dtype=np.float64))
    pc.colors = o3d.utility.Vector3dVector(np.asarray(colors, dtype=np.float64) / 255.0)

    ok = o3d.io.write_point_cloud(path, pc, print_progress=False)
    if not ok:
        raise RuntimeError(f"Failed to write point cloud to {path}")
