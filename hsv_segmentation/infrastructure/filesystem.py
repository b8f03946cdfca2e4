"""Filesystem adapters: a node is a directory (or a single cloud file)."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple

from exceptions.exceptions import ConfigurationError, HsvSegmentationError
from hsv_segmentation.domain.model import CloudNode, PointCloudData
from hsv_segmentation.infrastructure.layers import NpyLayerStore
from hsv_segmentation.ports import CloudHandle, CloudSource, LayerWriter


# ---------------------------------------------------------------------------
# CloudHandle Adapter
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FileCloudHandle(CloudHandle):
    """A `.pcd` / `.ply` file; layers go to `<stem><suffix>/` next to it."""

    path: Path
    layers_dir_suffix: str = "_layers"

    @property
    def name(self) -> str:
        return str(self.path)

    @property
    def layers_dir(self) -> Path:
        return self.path.with_name(self.path.stem + self.layers_dir_suffix)

    def load(self) -> PointCloudData:
        from hsv_segmentation.infrastructure.backend import read_colored_point_cloud

        try:
            positions, colors = read_colored_point_cloud(str(self.path))
        except ValueError as e:
            raise HsvSegmentationError("MISSING_COLORS", str(e), context=str(self.path)) from e
        return PointCloudData(name=self.name, positions=positions, colors=colors)

    def layer_writer(self, *, point_count: int) -> LayerWriter:
        return NpyLayerStore(directory=str(self.layers_dir), point_count=point_count)


# ---------------------------------------------------------------------------
# CloudSource Adapter
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FilesystemCloudSource(CloudSource):
    """Enumerate cloud files under a directory tree with `os.walk`."""

    extensions: Tuple[str, ...] = (".pcd", ".ply")
    layers_dir_suffix: str = "_layers"

    def resolve(self, *, node_id: str) -> CloudNode:
        if not node_id:
            raise ConfigurationError("You must define node_id", context="resolve", code="NODE_NOT_FOUND")
        path = Path(node_id)
        if not path.exists():
            raise ConfigurationError(f"Node not found: {node_id}", context="resolve", code="NODE_NOT_FOUND")
        return CloudNode(node_id=node_id, location=path)

    def clouds(self, *, node: CloudNode) -> List[CloudHandle]:
        root = Path(node.location)
        if root.is_file():
            return [self._handle(root)] if self._is_cloud_file(root) else []

        handles: List[CloudHandle] = []
        for dirpath, dirnames, filenames in os.walk(root):
            # layer directories never hold clouds
            dirnames[:] = sorted(d for d in dirnames if not d.endswith(self.layers_dir_suffix))
            for fname in sorted(filenames):
                p = Path(dirpath) / fname
                if self._is_cloud_file(p):
                    handles.append(self._handle(p))
        return handles

    def _is_cloud_file(self, path: Path) -> bool:
        return path.suffix.lower() in self.extensions

    def _handle(self, path: Path) -> FileCloudHandle:
        return FileCloudHandle(path=path, layers_dir_suffix=self.layers_dir_suffix)
