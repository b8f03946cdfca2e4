"""RGB -> HSV conversion for normalized colours."""
from __future__ import annotations

from hsv_segmentation.domain.model import Channel, HsvSample


def dominant_channel(r: float, g: float, b: float) -> Channel:
    """Channel holding the maximum; ties resolve R over G over B."""
    max_c = max(r, g, b)
    if max_c == r:
        return Channel.R
    if max_c == g:
        return Channel.G
    return Channel.B


def rgb_to_hsv(r: float, g: float, b: float) -> HsvSample:
    """Convert a normalized RGB triple ([0, 1] each) to HSV.

    Returns H in degrees [0, 360), S and V in percent [0, 100]. Black and
    grey colours have no hue and map to H = 0.
    """
    max_c = max(r, g, b)
    min_c = min(r, g, b)
    delta = max_c - min_c

    if max_c == 0 and min_c == 0:
        hue = 0.0
    elif delta == 0:
        hue = 0.0
    else:
        match dominant_channel(r, g, b):
            case Channel.R:
                hue = 60.0 * ((g - b) / delta)
            case Channel.G:
                hue = 60.0 * (((b - r) / delta) + 2.0)
            case Channel.B:
                hue = 60.0 * (((r - g) / delta) + 4.0)

    if hue < 0:
        hue += 360.0
        # a tiny negative hue rounds up to exactly 360
        if hue >= 360.0:
            hue = 0.0

    saturation = 0.0 if max_c == 0 else (delta / max_c) * 100.0
    value = max_c * 100.0
    return HsvSample(h=float(hue), s=float(saturation), v=float(value))
