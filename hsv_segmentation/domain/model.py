from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

import numpy as np

from exceptions.exceptions import ConfigurationError


LAYER_HUE = "HUE"
LAYER_SATURATION = "SATURATION"
LAYER_VALUE = "VALUE"
LAYER_SEGMENTATION_H = "segmentation_H"
LAYER_SEGMENTATION_S = "segmentation_S"
LAYER_SEGMENTATION_V = "segmentation_V"

OUTPUT_LAYERS: Tuple[str, ...] = (
    LAYER_HUE,
    LAYER_SATURATION,
    LAYER_VALUE,
    LAYER_SEGMENTATION_H,
    LAYER_SEGMENTATION_S,
    LAYER_SEGMENTATION_V,
)

RADIUS_MIN = 0.1
RADIUS_MAX = 3.0
CLUSTERS_MIN = 1
CLUSTERS_MAX = 20


class Channel(str, Enum):
    R = "R"
    G = "G"
    B = "B"


@dataclass(frozen=True)
class HsvSample:
    h: float
    s: float
    v: float


@dataclass(frozen=True)
class ChannelRange:
    """Final (min, max) of one HSV channel over a whole cloud."""

    minimum: float
    maximum: float

    @property
    def span(self) -> float:
        return self.maximum - self.minimum

    @property
    def is_degenerate(self) -> bool:
        return self.maximum == self.minimum


@dataclass(frozen=True)
class HsvRanges:
    h: ChannelRange
    s: ChannelRange
    v: ChannelRange


@dataclass(frozen=True)
class ClusterCounts:
    h: int = 4
    s: int = 4
    v: int = 4


@dataclass(frozen=True)
class SegmentationConfig:
    """Immutable per-run parameters handed to every cloud task."""

    radius: float = 0.6
    clusters: ClusterCounts = ClusterCounts()
    progress_step: int = 10_000
    workers: Optional[int] = None

    def validate(self) -> "SegmentationConfig":
        if not (isinstance(self.radius, (int, float)) and math.isfinite(self.radius)):
            raise ConfigurationError(f"radius must be a finite number, got {self.radius!r}", context="radius")
        if not RADIUS_MIN <= self.radius <= RADIUS_MAX:
            raise ConfigurationError(
                f"radius must be in [{RADIUS_MIN}, {RADIUS_MAX}], got {self.radius}", context="radius"
            )
        for name in ("h", "s", "v"):
            count = getattr(self.clusters, name)
            if isinstance(count, bool) or not isinstance(count, int):
                raise ConfigurationError(f"clusters_{name} must be an integer, got {count!r}", context=f"clusters_{name}")
            if not CLUSTERS_MIN <= count <= CLUSTERS_MAX:
                raise ConfigurationError(
                    f"clusters_{name} must be in [{CLUSTERS_MIN}, {CLUSTERS_MAX}], got {count}",
                    context=f"clusters_{name}",
                )
        if self.progress_step < 1:
            raise ConfigurationError(f"progress_step must be >= 1, got {self.progress_step}", context="progress_step")
        if self.workers is not None and self.workers < 1:
            raise ConfigurationError(f"workers must be >= 1, got {self.workers}", context="workers")
        return self


@dataclass(frozen=True)
class CloudNode:
    """Resolved root of a subtree of clouds."""

    node_id: str
    location: Any = None


@dataclass(frozen=True, eq=False)
class PointCloudData:
    """Index-stable cloud: positions (N,3) and RGB colours (N,3) in byte range [0, 255]."""

    name: str
    positions: np.ndarray
    colors: np.ndarray

    def __post_init__(self) -> None:
        positions = np.asarray(self.positions, dtype=np.float64).reshape(-1, 3)
        colors = np.asarray(self.colors, dtype=np.float64).reshape(-1, 3)
        if positions.shape[0] != colors.shape[0]:
            raise ValueError(
                f"positions and colors must have the same number of rows ({positions.shape[0]} != {colors.shape[0]})"
            )
        object.__setattr__(self, "positions", positions)
        object.__setattr__(self, "colors", colors)

    @property
    def point_count(self) -> int:
        return int(self.positions.shape[0])


@dataclass(frozen=True, eq=False)
class Pass1Result:
    """Buffered per-point HSV values plus the finalized ranges.

    Only a completed first pass produces one of these, so holding it is the
    guarantee that quantization sees full-cloud ranges.
    """

    hue: np.ndarray
    saturation: np.ndarray
    value: np.ndarray
    ranges: HsvRanges

    @property
    def point_count(self) -> int:
        return int(self.hue.shape[0])


@dataclass(frozen=True, eq=False)
class CloudLayers:
    hue: np.ndarray
    saturation: np.ndarray
    value: np.ndarray
    segmentation_h: np.ndarray
    segmentation_s: np.ndarray
    segmentation_v: np.ndarray

    def as_dict(self) -> Dict[str, np.ndarray]:
        return {
            LAYER_HUE: self.hue,
            LAYER_SATURATION: self.saturation,
            LAYER_VALUE: self.value,
            LAYER_SEGMENTATION_H: self.segmentation_h,
            LAYER_SEGMENTATION_S: self.segmentation_s,
            LAYER_SEGMENTATION_V: self.segmentation_v,
        }


class CloudStatus(str, Enum):
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class CloudOutcome:
    cloud_name: str
    status: CloudStatus
    point_count: int = 0
    ranges: Optional[HsvRanges] = None
    histograms: Dict[str, Tuple[int, ...]] = field(default_factory=dict)
    error_code: Optional[str] = None
    message: str = ""
