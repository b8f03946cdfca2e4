"""Application layer: use cases for HSV segmentation."""

from .use_case import SegmentCloudsUseCase

__all__ = ["SegmentCloudsUseCase"]
