"""SpatialIndex adapters: scikit-learn KDTree and Open3D KDTreeFlann."""
from __future__ import annotations

from typing import Callable

import numpy as np

from exceptions.exceptions import ConfigurationError
from hsv_segmentation.ports import SpatialIndex

SPATIAL_BACKENDS = ("sklearn", "open3d")


class SklearnSpatialIndex(SpatialIndex):
    """Radius queries through sklearn's KDTree (distance <= radius)."""

    def __init__(self, positions: np.ndarray, leaf_size: int = 40):
        from sklearn.neighbors import KDTree

        self.positions = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
        self._tree = KDTree(self.positions, leaf_size=leaf_size) if len(self.positions) else None

    def find_within(self, position: np.ndarray, radius: float) -> np.ndarray:
        if self._tree is None:
            return np.empty((0,), dtype=np.int64)
        q = np.asarray(position, dtype=np.float64).reshape(1, -1)
        return self._tree.query_radius(q, r=radius, return_distance=False)[0]


class Open3dSpatialIndex(SpatialIndex):
    """Radius queries through Open3D's KDTreeFlann."""

    def __init__(self, positions: np.ndarray):
        import open3d as o3d

        self.positions = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
        pcd = o3d.geometry.PointCloud()
        pcd.points = o3d.utility.Vector3dVector(self.positions)
        self._tree = o3d.geometry.KDTreeFlann(pcd) if len(self.positions) else None

    def find_within(self, position: np.ndarray, radius: float) -> np.ndarray:
        if self._tree is None:
            return np.empty((0,), dtype=np.int64)
        q = np.asarray(position, dtype=np.float64).reshape(3, 1)
        _, idx, _ = self._tree.search_radius_vector_3d(q, radius)
        return np.asarray(idx, dtype=np.int64)


def spatial_index_factory(backend: str = "sklearn") -> Callable[[np.ndarray], SpatialIndex]:
    """Return a constructor building a SpatialIndex over a positions array."""
    if backend == "sklearn":
        return SklearnSpatialIndex
    if backend == "open3d":
        return Open3dSpatialIndex
    raise ConfigurationError(
        f"Unknown spatial backend '{backend}' (expected one of {', '.join(SPATIAL_BACKENDS)})",
        context="spatial_backend",
    )
