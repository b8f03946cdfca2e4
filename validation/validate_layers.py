from typing import List

import numpy as np

from hsv_segmentation.domain.model import (
    OUTPUT_LAYERS,
    LAYER_SEGMENTATION_H,
    LAYER_SEGMENTATION_S,
    LAYER_SEGMENTATION_V,
    CloudLayers,
    ClusterCounts,
)
from validation.validation_helpers import ValidationIssue


def validate_cloud_layers(cloud_name: str, layers: CloudLayers, point_count: int,
                          clusters: ClusterCounts) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    by_name = layers.as_dict()

    for name in OUTPUT_LAYERS:
        values = by_name.get(name)
        if values is None:
            issues.append(ValidationIssue(
                cloud_name,
                "MISSING_LAYER",
                "error",
                f"Layer {name} was not produced"))
            continue
        if len(values) != point_count:
            issues.append(ValidationIssue(
                cloud_name,
                "LAYER_LENGTH_MISMATCH",
                "error",
                f"Layer {name}: {len(values)} != {point_count}"))
        elif point_count and not np.all(np.isfinite(values)):
            issues.append(ValidationIssue(
                cloud_name,
                "NON_FINITE_VALUES",
                "error",
                f"Layer {name} contains non-finite values"))

    for name, count in ((LAYER_SEGMENTATION_H, clusters.h),
                        (LAYER_SEGMENTATION_S, clusters.s),
                        (LAYER_SEGMENTATION_V, clusters.v)):
        labels = by_name.get(name)
        if labels is None or len(labels) == 0:
            continue
        if labels.min() < 0 or labels.max() >= count:
            issues.append(ValidationIssue(
                cloud_name,
                "LABEL_OUT_OF_RANGE",
                "error",
                f"Layer {name} labels outside [0, {count})"))
    return issues
