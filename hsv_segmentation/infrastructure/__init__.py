"""Infrastructure layer: adapters for HSV segmentation."""

from .filesystem import FileCloudHandle, FilesystemCloudSource
from .layers import InMemoryLayerStore, LayerHandle, NpyLayerStore
from .memory import InMemoryCloudHandle, InMemoryCloudSource
from .progress import CallbackProgressReporter, LoggingProgressReporter
from .spatial import Open3dSpatialIndex, SklearnSpatialIndex, spatial_index_factory

__all__ = [
    "FileCloudHandle",
    "FilesystemCloudSource",
    "InMemoryLayerStore",
    "LayerHandle",
    "NpyLayerStore",
    "InMemoryCloudHandle",
    "InMemoryCloudSource",
    "CallbackProgressReporter",
    "LoggingProgressReporter",
    "Open3dSpatialIndex",
    "SklearnSpatialIndex",
    "spatial_index_factory",
]
