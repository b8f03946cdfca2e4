"""In-memory adapters for programmatic use: nodes map to lists of loaded clouds."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

import numpy as np

from exceptions.exceptions import ConfigurationError
from hsv_segmentation.domain.model import CloudNode, PointCloudData
from hsv_segmentation.infrastructure.layers import InMemoryLayerStore
from hsv_segmentation.ports import CloudHandle, CloudSource, LayerWriter


@dataclass
class InMemoryCloudHandle(CloudHandle):
    cloud: PointCloudData
    store: InMemoryLayerStore | None = None

    @property
    def name(self) -> str:
        return self.cloud.name

    def load(self) -> PointCloudData:
        return self.cloud

    def layer_writer(self, *, point_count: int) -> LayerWriter:
        # one store per cloud, kept across runs so re-runs overwrite in place
        if self.store is None:
            self.store = InMemoryLayerStore(point_count=point_count)
        return self.store


@dataclass
class InMemoryCloudSource(CloudSource):
    nodes: Dict[str, List[PointCloudData]] = field(default_factory=dict)
    _handles: Dict[str, List[InMemoryCloudHandle]] = field(default_factory=dict, init=False, repr=False)

    def add(self, node_id: str, *clouds: PointCloudData) -> "InMemoryCloudSource":
        self.nodes.setdefault(node_id, []).extend(clouds)
        self._handles.pop(node_id, None)
        return self

    def resolve(self, *, node_id: str) -> CloudNode:
        if node_id not in self.nodes:
            raise ConfigurationError(f"Node not found: {node_id}", context="resolve", code="NODE_NOT_FOUND")
        return CloudNode(node_id=node_id)

    def clouds(self, *, node: CloudNode) -> List[CloudHandle]:
        if node.node_id not in self._handles:
            self._handles[node.node_id] = [InMemoryCloudHandle(cloud=c) for c in self.nodes[node.node_id]]
        return list(self._handles[node.node_id])

    def layers_for(self, node_id: str, cloud_name: str) -> Dict[str, np.ndarray]:
        """Layers written for a cloud ({} when nothing was written)."""
        for handle in self._handles.get(node_id, []):
            if handle.name == cloud_name:
                return dict(handle.store.layers) if handle.store is not None else {}
        return {}
