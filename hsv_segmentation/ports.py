"""Ports (Protocol interfaces) for HSV segmentation.

These define the contracts that infrastructure adapters must implement.
The domain layer depends on these abstractions, not concrete implementations.
"""
from __future__ import annotations

from typing import Any, List, Optional, Protocol

import numpy as np

from hsv_segmentation.domain.model import CloudNode, PointCloudData


# ---------------------------------------------------------------------------
# Spatial Index Port
# ---------------------------------------------------------------------------


class SpatialIndex(Protocol):
    """Port: fixed-radius neighbour queries over one cloud's positions."""

    def find_within(self, position: np.ndarray, radius: float) -> np.ndarray:
        """Indices of all points within `radius` of `position` (inclusive)."""
        ...


# ---------------------------------------------------------------------------
# Layer Writer Port
# ---------------------------------------------------------------------------


class LayerWriter(Protocol):
    """Port: named per-point scalar layers attached to one cloud."""

    def find_layer(self, name: str) -> Optional[Any]:
        """Return the handle of an existing layer, or None."""
        ...

    def create_layer(self, name: str) -> Any:
        """Create a zero-filled layer and return its handle."""
        ...

    def write_values(self, handle: Any, values: np.ndarray) -> None:
        """Overwrite a layer. `values` must have one entry per point."""
        ...


# ---------------------------------------------------------------------------
# Cloud Source Port
# ---------------------------------------------------------------------------


class CloudHandle(Protocol):
    """Port: one cloud reachable from a node."""

    name: str

    def load(self) -> PointCloudData:
        """Load positions and colours."""
        ...

    def layer_writer(self, *, point_count: int) -> LayerWriter:
        """Layer storage bound to this cloud."""
        ...


class CloudSource(Protocol):
    """Port: resolve a node identifier and enumerate its clouds."""

    def resolve(self, *, node_id: str) -> CloudNode:
        """Resolve a node; raises ConfigurationError when it does not exist."""
        ...

    def clouds(self, *, node: CloudNode) -> List[CloudHandle]:
        """All clouds reachable within the node, in a stable order."""
        ...


# ---------------------------------------------------------------------------
# Progress Port
# ---------------------------------------------------------------------------


class ProgressReporter(Protocol):
    """Port: progress and cooperative cancellation channel."""

    def update(self, fraction: float, *, label: str = "") -> bool:
        """Report progress in [0, 1]; returning False requests cancellation."""
        ...
