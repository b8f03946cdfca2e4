"""LayerWriter adapters: in-memory and one `.npy` file per layer."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, Optional

import numpy as np

from hsv_segmentation.ports import LayerWriter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LayerHandle:
    name: str


def _check_length(name: str, values: np.ndarray, point_count: int) -> np.ndarray:
    values = np.asarray(values).reshape(-1)
    if values.shape[0] != point_count:
        raise ValueError(
            f"Layer '{name}' needs {point_count} values, got {values.shape[0]}"
        )
    return values


@dataclass
class InMemoryLayerStore(LayerWriter):
    """Layers kept in a dict; values are copied on write."""

    point_count: int
    layers: Dict[str, np.ndarray] = field(default_factory=dict)

    def find_layer(self, name: str) -> Optional[LayerHandle]:
        return LayerHandle(name) if name in self.layers else None

    def create_layer(self, name: str) -> LayerHandle:
        self.layers[name] = np.zeros((self.point_count,), dtype=np.float64)
        return LayerHandle(name)

    def write_values(self, handle: LayerHandle, values: np.ndarray) -> None:
        values = _check_length(handle.name, values, self.point_count)
        self.layers[handle.name] = np.array(values, copy=True)


@dataclass(frozen=True)
class NpyLayerStore(LayerWriter):
    """Layers persisted as `<directory>/<name>.npy` (float32, one value per point)."""

    directory: str
    point_count: int

    def _path(self, name: str) -> str:
        return os.path.join(self.directory, f"{name}.npy")

    def find_layer(self, name: str) -> Optional[LayerHandle]:
        return LayerHandle(name) if os.path.isfile(self._path(name)) else None

    def _save(self, name: str, values: np.ndarray) -> None:
        # write beside the target, then swap it in; a failed write keeps the old file
        path = self._path(name)
        tmp = path + ".tmp"
        try:
            with open(tmp, "wb") as f:
                np.save(f, values)
            os.replace(tmp, path)
        except BaseException:
            if os.path.exists(tmp):
                os.remove(tmp)
            raise

    def create_layer(self, name: str) -> LayerHandle:
        os.makedirs(self.directory, exist_ok=True)
        self._save(name, np.zeros((self.point_count,), dtype=np.float32))
        logger.debug("Created layer %s", self._path(name))
        return LayerHandle(name)

    def write_values(self, handle: LayerHandle, values: np.ndarray) -> None:
        values = _check_length(handle.name, values, self.point_count)
        self._save(handle.name, values.astype(np.float32))

    def read_values(self, name: str) -> np.ndarray:
        return np.load(self._path(name))
