"""Two-pass per-cloud pipeline: averaging + conversion + range tracking, then quantization.

The passes are deliberately separate functions. `second_pass` only accepts a
`Pass1Result`, which only `first_pass` produces after visiting every point.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Optional

import numpy as np

from hsv_segmentation.domain.color import rgb_to_hsv
from hsv_segmentation.domain.model import (
    CloudLayers,
    ClusterCounts,
    Pass1Result,
    PointCloudData,
)
from hsv_segmentation.domain.quantization import RangeTracker, quantize
from hsv_segmentation.domain.services import NeighborhoodAverager

if TYPE_CHECKING:
    from hsv_segmentation.ports import LayerWriter

logger = logging.getLogger(__name__)


def first_pass(
    cloud: PointCloudData,
    averager: NeighborhoodAverager,
    *,
    progress_step: int = 10_000,
    on_progress: Optional[Callable[[float], None]] = None,
) -> Pass1Result:
    """Average, convert and track ranges for every point of `cloud`.

    `on_progress` is called with processed/total every `progress_step`
    points and once with 1.0 when the last point is done; it aborts the pass
    by raising.
    """
    n = cloud.point_count
    hue = np.empty(n, dtype=np.float64)
    saturation = np.empty(n, dtype=np.float64)
    value = np.empty(n, dtype=np.float64)
    tracker = RangeTracker()

    for i in range(n):
        sample = rgb_to_hsv(*averager.average_color(cloud, i))
        tracker.update(sample)
        hue[i] = sample.h
        saturation[i] = sample.s
        value[i] = sample.v

        processed = i + 1
        if on_progress is not None and processed % progress_step == 0:
            on_progress(processed / n)

    if on_progress is not None and n and n % progress_step != 0:
        on_progress(1.0)

    ranges = tracker.finalize()
    logger.debug(
        "Cloud %s pass 1 done: H[%.3f, %.3f] S[%.3f, %.3f] V[%.3f, %.3f]",
        cloud.name,
        ranges.h.minimum, ranges.h.maximum,
        ranges.s.minimum, ranges.s.maximum,
        ranges.v.minimum, ranges.v.maximum,
    )
    return Pass1Result(hue=hue, saturation=saturation, value=value, ranges=ranges)


def second_pass(result: Pass1Result, clusters: ClusterCounts) -> CloudLayers:
    """Quantize the buffered samples against the finalized ranges."""
    return CloudLayers(
        hue=result.hue,
        saturation=result.saturation,
        value=result.value,
        segmentation_h=quantize(result.hue, result.ranges.h, clusters.h),
        segmentation_s=quantize(result.saturation, result.ranges.s, clusters.s),
        segmentation_v=quantize(result.value, result.ranges.v, clusters.v),
    )


def write_layers(writer: LayerWriter, layers: CloudLayers) -> None:
    """Persist all six layers, reusing existing layers of the same name."""
    for name, values in layers.as_dict().items():
        handle = writer.find_layer(name)
        if handle is None:
            handle = writer.create_layer(name)
        writer.write_values(handle, values)
