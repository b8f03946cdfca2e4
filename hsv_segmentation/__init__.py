"""HSV neighbourhood segmentation bounded context (DDD layered package).

This package intentionally keeps `__init__` **side-effect free**: importing the
package should not import heavy numeric libraries or IO backends.

Use explicit imports for entrypoints:
`from hsv_segmentation.entrypoints.hsv_segment import hsv_segment`
"""

__all__: list[str] = []
