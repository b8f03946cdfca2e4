"""Synthetic coloured clouds for tests.

Deterministic generators for clouds whose neighbourhoods and colours are
known in advance, so HSV layers can be asserted exactly.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

import numpy as np

from hsv_segmentation.domain.model import PointCloudData


def _rng(seed: Optional[int] = None) -> np.random.Generator:
    return np.random.default_rng(None if seed is None else int(seed))


def isolated_points_cloud(
    colors: Sequence[Tuple[float, float, float]],
    *,
    spacing: float = 10.0,
    name: str = "isolated",
) -> PointCloudData:
    """One point per colour on the X axis, `spacing` apart.

    With any radius below `spacing` every point is its own sole neighbour.
    """
    colors_arr = np.asarray(colors, dtype=np.float64).reshape(-1, 3)
    n = colors_arr.shape[0]
    positions = np.column_stack([np.arange(n, dtype=np.float64) * spacing, np.zeros(n), np.zeros(n)])
    return PointCloudData(name=name, positions=positions, colors=colors_arr)


def uniform_color_cloud(
    n_points: int = 100,
    color: Tuple[float, float, float] = (128.0, 128.0, 128.0),
    *,
    extent: float = 1.0,
    seed: Optional[int] = 0,
    name: str = "uniform",
) -> PointCloudData:
    """Random positions in a cube, every point the same colour."""
    g = _rng(seed)
    positions = g.uniform(0.0, extent, size=(n_points, 3))
    colors = np.tile(np.asarray(color, dtype=np.float64), (n_points, 1))
    return PointCloudData(name=name, positions=positions, colors=colors)


def random_color_cloud(
    n_points: int = 500,
    *,
    extent: float = 2.0,
    seed: Optional[int] = 0,
    integral: bool = True,
    name: str = "random",
) -> PointCloudData:
    """Random positions in a cube with random byte-range colours."""
    g = _rng(seed)
    positions = g.uniform(0.0, extent, size=(n_points, 3))
    if integral:
        colors = g.integers(0, 256, size=(n_points, 3)).astype(np.float64)
    else:
        colors = g.uniform(0.0, 255.0, size=(n_points, 3))
    return PointCloudData(name=name, positions=positions, colors=colors)


def line_cloud(
    n_points: int,
    *,
    spacing: float = 1.0,
    color: Tuple[float, float, float] = (200.0, 50.0, 50.0),
    name: str = "line",
) -> PointCloudData:
    """Points on the X axis; with radius < spacing each is its own neighbourhood."""
    positions = np.column_stack([
        np.arange(n_points, dtype=np.float64) * spacing,
        np.zeros(n_points),
        np.zeros(n_points),
    ])
    colors = np.tile(np.asarray(color, dtype=np.float64), (n_points, 1))
    return PointCloudData(name=name, positions=positions, colors=colors)
