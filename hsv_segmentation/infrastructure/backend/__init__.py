"""Low-level point cloud IO utilities (Open3D)."""
from hsv_segmentation.infrastructure.backend._io import (
    read_colored_point_cloud,
    write_colored_point_cloud,
)

__all__ = [
    "read_colored_point_cloud",
    "write_colored_point_cloud",
]
