"""Application layer: segment every cloud under a node."""
from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, List, Optional

import numpy as np

from exceptions.exceptions import Cancelled, HsvSegmentationError
from hsv_segmentation.domain.model import (
    CloudLayers,
    CloudOutcome,
    CloudStatus,
    SegmentationConfig,
)
from hsv_segmentation.domain.pipeline import first_pass, second_pass, write_layers
from hsv_segmentation.domain.services import NeighborhoodAverager
from hsv_segmentation.ports import CloudHandle, CloudSource, ProgressReporter, SpatialIndex
from validation.validate_layers import validate_cloud_layers
from validation.validation_helpers import log_issues

logger = logging.getLogger(__name__)


def resolve_worker_count(workers: Optional[int], n_clouds: int) -> int:
    """Pool size: configured value, else the machine's CPU count, never more than the clouds."""
    if workers is None:
        workers = os.cpu_count() or 1
    return max(1, min(workers, n_clouds))


def _histograms(layers: CloudLayers, config: SegmentationConfig) -> dict:
    clusters = config.clusters
    return {
        "H": tuple(int(c) for c in np.bincount(layers.segmentation_h, minlength=clusters.h)),
        "S": tuple(int(c) for c in np.bincount(layers.segmentation_s, minlength=clusters.s)),
        "V": tuple(int(c) for c in np.bincount(layers.segmentation_v, minlength=clusters.v)),
    }


@dataclass(frozen=True)
class SegmentCloudsUseCase:
    """Use case: HSV features and segmentation labels for all clouds of a node.

    This is an application service that orchestrates:
    - Node resolution and cloud enumeration (via CloudSource port)
    - One task per cloud on a thread pool; each task runs both passes
      (domain pipeline) and writes layers (via LayerWriter port)
    - Progress and cancellation (via ProgressReporter port)

    A failing cloud is reported as FAILED without affecting the others.
    A cancellation stops every cloud and raises `Cancelled` once all tasks
    have returned.
    """

    cloud_source: CloudSource
    spatial_index_factory: Callable[[np.ndarray], SpatialIndex]
    progress: ProgressReporter
    config: SegmentationConfig = SegmentationConfig()

    def run(self, *, node_id: str, cancel: Optional[threading.Event] = None) -> List[CloudOutcome]:
        """Segment every cloud under `node_id`.

        `cancel` may be shared with the caller; setting it stops the run like a
        progress report answered with False.
        """
        self.config.validate()
        node = self.cloud_source.resolve(node_id=node_id)
        handles = self.cloud_source.clouds(node=node)
        logger.info("Initialization succeeded: %d cloud(s) under node %s", len(handles), node_id)

        if cancel is None:
            cancel = threading.Event()
        workers = resolve_worker_count(self.config.workers, len(handles))

        if workers <= 1:
            outcomes = [self._run_task(h, cancel) for h in handles]
        else:
            logger.debug("Processing %d clouds on %d workers", len(handles), workers)
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="hsv-cloud") as executor:
                futures = [executor.submit(self._run_task, h, cancel) for h in handles]
                outcomes = [f.result() for f in futures]

        if cancel.is_set():
            err = Cancelled(f"Run on node {node_id} cancelled", context=node_id)
            err.outcomes = outcomes
            raise err
        return outcomes

    def _run_task(self, handle: CloudHandle, cancel: threading.Event) -> CloudOutcome:
        try:
            return self.process_cloud(handle, cancel)
        except Cancelled:
            cancel.set()
            logger.info("Cloud %s cancelled", handle.name)
            return CloudOutcome(cloud_name=handle.name, status=CloudStatus.CANCELLED, error_code="CANCELLED")

    def process_cloud(self, handle: CloudHandle, cancel: threading.Event) -> CloudOutcome:
        """Init -> pass 1 -> pass 2 -> writeback for a single cloud.

        Raises `Cancelled`; every other error becomes a FAILED outcome. Layers
        are only written after both passes finished and validated.
        """
        if cancel.is_set():
            raise Cancelled(context=handle.name)

        try:
            cloud = handle.load()
            logger.info("Cloud %s: %d points", cloud.name, cloud.point_count)

            averager = NeighborhoodAverager(
                spatial_index=self.spatial_index_factory(cloud.positions),
                radius=self.config.radius,
            )

            def checkpoint(fraction: float) -> None:
                if cancel.is_set():
                    raise Cancelled(context=cloud.name)
                if not self.progress.update(fraction, label=cloud.name):
                    cancel.set()
                    raise Cancelled(context=cloud.name)

            first = first_pass(
                cloud,
                averager,
                progress_step=self.config.progress_step,
                on_progress=checkpoint,
            )
            layers = second_pass(first, self.config.clusters)
            if cancel.is_set():
                raise Cancelled(context=cloud.name)

            issues = validate_cloud_layers(cloud.name, layers, cloud.point_count, self.config.clusters)
            if log_issues(issues, "error"):
                return CloudOutcome(
                    cloud_name=cloud.name,
                    status=CloudStatus.FAILED,
                    point_count=cloud.point_count,
                    error_code=issues[0].code,
                    message=issues[0].message,
                )

            writer = handle.layer_writer(point_count=cloud.point_count)
            if cancel.is_set():
                raise Cancelled(context=cloud.name)
            write_layers(writer, layers)
        except Cancelled:
            raise
        except HsvSegmentationError as e:
            logger.error("Cloud %s failed: %s: %s", handle.name, e.code, e)
            return CloudOutcome(cloud_name=handle.name, status=CloudStatus.FAILED, error_code=e.code, message=str(e))
        except Exception as e:
            logger.exception("Cloud %s failed", handle.name)
            return CloudOutcome(
                cloud_name=handle.name,
                status=CloudStatus.FAILED,
                error_code="CLOUD_PROCESSING_FAILED",
                message=str(e),
            )

        return CloudOutcome(
            cloud_name=cloud.name,
            status=CloudStatus.DONE,
            point_count=cloud.point_count,
            ranges=first.ranges,
            histograms=_histograms(layers, self.config),
        )
