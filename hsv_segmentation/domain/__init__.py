"""Domain layer: value objects, pure conversions and per-cloud passes for HSV segmentation."""

from .model import (
    OUTPUT_LAYERS,
    Channel,
    HsvSample,
    ChannelRange,
    HsvRanges,
    ClusterCounts,
    SegmentationConfig,
    CloudNode,
    PointCloudData,
    Pass1Result,
    CloudLayers,
    CloudStatus,
    CloudOutcome,
)
from .color import rgb_to_hsv
from .quantization import RangeTracker, bucket, quantize
from .services import NeighborhoodAverager
from .pipeline import first_pass, second_pass, write_layers

__all__ = [
    # Value Objects
    "OUTPUT_LAYERS",
    "Channel",
    "HsvSample",
    "ChannelRange",
    "HsvRanges",
    "ClusterCounts",
    "SegmentationConfig",
    "CloudNode",
    "PointCloudData",
    "Pass1Result",
    "CloudLayers",
    "CloudStatus",
    "CloudOutcome",
    # Pure functions
    "rgb_to_hsv",
    "bucket",
    "quantize",
    # Domain Services
    "RangeTracker",
    "NeighborhoodAverager",
    "first_pass",
    "second_pass",
    "write_layers",
]
