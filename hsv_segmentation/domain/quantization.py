"""Global-range tracking and bucket quantization of HSV channels."""
from __future__ import annotations

import math

import numpy as np

from hsv_segmentation.domain.model import ChannelRange, HsvRanges, HsvSample


class RangeTracker:
    """Running per-channel min/max over one full pass of a cloud.

    `finalize()` freezes the tracker; ranges are only meaningful once every
    point of the cloud has been fed through `update()`.
    """

    def __init__(self) -> None:
        self._min = [math.inf, math.inf, math.inf]
        self._max = [-math.inf, -math.inf, -math.inf]
        self._count = 0
        self._final: HsvRanges | None = None

    @property
    def count(self) -> int:
        return self._count

    @property
    def finalized(self) -> bool:
        return self._final is not None

    def update(self, sample: HsvSample) -> None:
        if self._final is not None:
            raise RuntimeError("RangeTracker is finalized; no further samples accepted")
        for i, v in enumerate((sample.h, sample.s, sample.v)):
            if v < self._min[i]:
                self._min[i] = v
            if v > self._max[i]:
                self._max[i] = v
        self._count += 1

    def finalize(self) -> HsvRanges:
        if self._final is None:
            if self._count == 0:
                # empty cloud: nothing to normalize against
                channels = [ChannelRange(0.0, 0.0) for _ in range(3)]
            else:
                channels = [ChannelRange(lo, hi) for lo, hi in zip(self._min, self._max)]
            self._final = HsvRanges(h=channels[0], s=channels[1], v=channels[2])
        return self._final


def quantize(values: np.ndarray, channel_range: ChannelRange, cluster_count: int) -> np.ndarray:
    """Map channel values to bucket indices in [0, cluster_count).

    bucket = floor(value / (max - min) * cluster_count), clamped so that the
    channel maximum lands in the last bucket. A degenerate range (max == min)
    puts every point in bucket 0.
    """
    values = np.asarray(values, dtype=np.float64)
    if channel_range.is_degenerate:
        return np.zeros(values.shape, dtype=np.int32)
    buckets = np.floor(values / channel_range.span * cluster_count)
    return np.clip(buckets, 0, cluster_count - 1).astype(np.int32)


def bucket(value: float, channel_range: ChannelRange, cluster_count: int) -> int:
    """Scalar form of `quantize`."""
    return int(quantize(np.asarray([value]), channel_range, cluster_count)[0])
