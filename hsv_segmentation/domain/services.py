"""Domain services for HSV segmentation."""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Tuple

from exceptions.exceptions import DegenerateNeighborhood
from hsv_segmentation.domain.model import PointCloudData

if TYPE_CHECKING:
    from hsv_segmentation.ports import SpatialIndex


@dataclass(frozen=True)
class NeighborhoodAverager:
    """Mean colour of the sphere of radius `radius` around a point.

    The spatial index is expected to return the query point itself, so an
    empty neighbourhood means the index or the radius is broken.
    """

    spatial_index: SpatialIndex
    radius: float

    def average_color(self, cloud: PointCloudData, index: int) -> Tuple[float, float, float]:
        neighbors = self.spatial_index.find_within(cloud.positions[index], self.radius)
        n = len(neighbors)
        if n == 0:
            raise DegenerateNeighborhood(
                f"No neighbours within radius {self.radius} of point {index} in cloud '{cloud.name}'",
                context=cloud.name,
            )
        sums = cloud.colors[neighbors].sum(axis=0)
        return (
            float(sums[0]) / n / 255.0,
            float(sums[1]) / n / 255.0,
            float(sums[2]) / n / 255.0,
        )
