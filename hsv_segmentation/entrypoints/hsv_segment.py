"""Entrypoint: hsv_segment function for orchestrators/CLIs."""
from __future__ import annotations

from typing import List, Optional, Tuple

from hsv_segmentation.application.use_case import SegmentCloudsUseCase
from hsv_segmentation.domain.model import CloudOutcome, SegmentationConfig
from hsv_segmentation.infrastructure.filesystem import FilesystemCloudSource
from hsv_segmentation.infrastructure.progress import LoggingProgressReporter
from hsv_segmentation.infrastructure.spatial import spatial_index_factory
from hsv_segmentation.ports import CloudSource, ProgressReporter


def hsv_segment(
    *,
    node_id: str,
    config: SegmentationConfig = SegmentationConfig(),
    cloud_source: Optional[CloudSource] = None,
    progress: Optional[ProgressReporter] = None,
    spatial_backend: str = "sklearn",
    extensions: Tuple[str, ...] = (".pcd", ".ply"),
    layers_dir_suffix: str = "_layers",
) -> List[CloudOutcome]:
    """Entrypoint to compute HSV layers for every cloud under a node.

    This is the composition root for the HSV segmentation context.
    It wires up all dependencies and runs the use case.

    Args:
        node_id: Directory (or single cloud file) for the default filesystem
            source, or a node key understood by `cloud_source`.
        config: Radius, cluster counts, progress cadence and worker count.
        cloud_source: Optional custom source; defaults to the filesystem.
        progress: Optional progress/cancellation channel; defaults to logging.
        spatial_backend: "sklearn" or "open3d" radius-query backend.
        extensions: Cloud file extensions for the filesystem source.
        layers_dir_suffix: Suffix of the per-cloud layer directory.

    Returns:
        One CloudOutcome per cloud, in enumeration order.

    Raises:
        ConfigurationError: Invalid parameters or unresolved node.
        Cancelled: The progress channel requested a stop.
    """
    # Infrastructure: cloud source
    source = cloud_source
    if source is None:
        source = FilesystemCloudSource(extensions=extensions, layers_dir_suffix=layers_dir_suffix)

    # Application: use case
    use_case = SegmentCloudsUseCase(
        cloud_source=source,
        spatial_index_factory=spatial_index_factory(spatial_backend),
        progress=progress if progress is not None else LoggingProgressReporter(),
        config=config,
    )

    return use_case.run(node_id=node_id)
