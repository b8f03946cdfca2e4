#!/usr/bin/env python3

import threading
import unittest

import numpy as np

from exceptions.exceptions import Cancelled, ConfigurationError
from hsv_segmentation.application.use_case import SegmentCloudsUseCase, resolve_worker_count
from hsv_segmentation.domain.model import (
    OUTPUT_LAYERS,
    CloudStatus,
    ClusterCounts,
    SegmentationConfig,
)
from hsv_segmentation.entrypoints.hsv_segment import hsv_segment
from hsv_segmentation.infrastructure.memory import InMemoryCloudHandle, InMemoryCloudSource
from hsv_segmentation.infrastructure.progress import CallbackProgressReporter, LoggingProgressReporter
from hsv_segmentation.infrastructure.spatial import SklearnSpatialIndex
from test_utilities.synthetic import isolated_points_cloud, line_cloud, random_color_cloud, uniform_color_cloud


class _RecordingProgress:
    def __init__(self, answer=True):
        self.answer = answer
        self.calls = []
        self._lock = threading.Lock()

    def update(self, fraction, *, label=""):
        with self._lock:
            self.calls.append((label, fraction))
        return self.answer


class _EmptyIndex:
    def __init__(self, positions):
        pass

    def find_within(self, position, radius):
        return np.empty((0,), dtype=np.int64)


class _CancelOnLabel:
    """Answers False for one cloud, True for every other."""

    def __init__(self, label):
        self.label = label

    def update(self, fraction, *, label=""):
        return label != self.label


class _HoldLastQuery:
    """Blocks the final radius query until `gate` is set (or a timeout passes)."""

    def __init__(self, index, n_points, gate):
        self._index = index
        self._remaining = n_points
        self._gate = gate

    def find_within(self, position, radius):
        self._remaining -= 1
        if self._remaining == 0:
            self._gate.wait(timeout=5.0)
        return self._index.find_within(position, radius)


class _CancelAtWriteback:
    """Cloud handle that sets `cancel` when its layer writer is requested."""

    def __init__(self, inner, cancel):
        self.inner = inner
        self.cancel = cancel
        self.name = inner.name

    def load(self):
        return self.inner.load()

    def layer_writer(self, *, point_count):
        writer = self.inner.layer_writer(point_count=point_count)
        self.cancel.set()
        return writer


def _use_case(source, config=SegmentationConfig(), progress=None, index_factory=SklearnSpatialIndex):
    return SegmentCloudsUseCase(
        cloud_source=source,
        spatial_index_factory=index_factory,
        progress=progress if progress is not None else LoggingProgressReporter(),
        config=config,
    )


class TestSegmentClouds(unittest.TestCase):
    def test_three_far_apart_points_end_to_end(self):
        cloud = isolated_points_cloud([(255, 0, 0), (0, 255, 0), (0, 0, 255)], name="rgb")
        source = InMemoryCloudSource().add("node", cloud)

        outcomes = _use_case(source, SegmentationConfig(clusters=ClusterCounts(4, 4, 4))).run(node_id="node")

        self.assertEqual(len(outcomes), 1)
        self.assertEqual(outcomes[0].status, CloudStatus.DONE)
        layers = source.layers_for("node", "rgb")
        np.testing.assert_array_equal(layers["HUE"], [0.0, 120.0, 240.0])
        np.testing.assert_array_equal(layers["SATURATION"], [100.0, 100.0, 100.0])
        np.testing.assert_array_equal(layers["VALUE"], [100.0, 100.0, 100.0])
        np.testing.assert_array_equal(layers["segmentation_H"], [0, 2, 3])
        np.testing.assert_array_equal(layers["segmentation_S"], [0, 0, 0])
        np.testing.assert_array_equal(layers["segmentation_V"], [0, 0, 0])
        self.assertEqual(outcomes[0].histograms["H"], (1, 0, 1, 1))
        self.assertEqual(outcomes[0].ranges.h.maximum, 240.0)

    def test_every_cloud_gets_six_full_length_layers(self):
        clouds = [
            random_color_cloud(120, seed=1, name="a"),
            random_color_cloud(75, seed=2, integral=False, name="b"),
            uniform_color_cloud(40, name="c"),
        ]
        source = InMemoryCloudSource().add("node", *clouds)
        for counts in (ClusterCounts(1, 1, 1), ClusterCounts(20, 3, 9)):
            config = SegmentationConfig(radius=0.4, clusters=counts, workers=3)
            outcomes = _use_case(source, config).run(node_id="node")
            self.assertEqual([o.status for o in outcomes], [CloudStatus.DONE] * 3)
            for cloud in clouds:
                layers = source.layers_for("node", cloud.name)
                self.assertEqual(sorted(layers), sorted(OUTPUT_LAYERS))
                for values in layers.values():
                    self.assertEqual(len(values), cloud.point_count)

    def test_uniform_cloud_is_one_cluster(self):
        source = InMemoryCloudSource().add("node", uniform_color_cloud(50, color=(10.0, 200.0, 30.0), name="u"))
        _use_case(source).run(node_id="node")
        layers = source.layers_for("node", "u")
        for name in ("segmentation_H", "segmentation_S", "segmentation_V"):
            np.testing.assert_array_equal(layers[name], np.zeros(50))

    def test_rerun_is_bit_identical(self):
        cloud = random_color_cloud(200, seed=7, name="r")
        source = InMemoryCloudSource().add("node", cloud)
        use_case = _use_case(source, SegmentationConfig(radius=0.5))

        use_case.run(node_id="node")
        first = {k: v.copy() for k, v in source.layers_for("node", "r").items()}
        use_case.run(node_id="node")
        second = source.layers_for("node", "r")

        for name in OUTPUT_LAYERS:
            self.assertEqual(first[name].tobytes(), second[name].tobytes(), name)

    def test_parallel_matches_serial(self):
        clouds = [random_color_cloud(80, seed=s, name=f"c{s}") for s in range(4)]
        serial = InMemoryCloudSource().add("node", *clouds)
        parallel = InMemoryCloudSource().add("node", *clouds)
        _use_case(serial, SegmentationConfig(workers=1)).run(node_id="node")
        _use_case(parallel, SegmentationConfig(workers=4)).run(node_id="node")
        for cloud in clouds:
            a = serial.layers_for("node", cloud.name)
            b = parallel.layers_for("node", cloud.name)
            for name in OUTPUT_LAYERS:
                np.testing.assert_array_equal(a[name], b[name])

    def test_outcomes_keep_enumeration_order(self):
        clouds = [uniform_color_cloud(10, name=n) for n in ("z", "a", "m")]
        source = InMemoryCloudSource().add("node", *clouds)
        outcomes = _use_case(source, SegmentationConfig(workers=3)).run(node_id="node")
        self.assertEqual([o.cloud_name for o in outcomes], ["z", "a", "m"])

    def test_progress_reported_per_cloud(self):
        source = InMemoryCloudSource().add("node", line_cloud(25, name="line"))
        progress = _RecordingProgress()
        _use_case(source, SegmentationConfig(progress_step=10), progress).run(node_id="node")
        self.assertEqual(progress.calls, [("line", 0.4), ("line", 0.8), ("line", 1.0)])


class TestSegmentCloudsErrors(unittest.TestCase):
    def test_unknown_node_is_configuration_error(self):
        with self.assertRaises(ConfigurationError) as ctx:
            _use_case(InMemoryCloudSource()).run(node_id="missing")
        self.assertEqual(ctx.exception.code, "NODE_NOT_FOUND")

    def test_invalid_parameters_fail_before_processing(self):
        source = InMemoryCloudSource().add("node", uniform_color_cloud(5, name="u"))
        for config in (
            SegmentationConfig(radius=0.05),
            SegmentationConfig(radius=3.5),
            SegmentationConfig(clusters=ClusterCounts(h=0)),
            SegmentationConfig(clusters=ClusterCounts(v=21)),
            SegmentationConfig(progress_step=0),
            SegmentationConfig(workers=0),
        ):
            with self.assertRaises(ConfigurationError):
                _use_case(source, config).run(node_id="node")
        self.assertEqual(source.layers_for("node", "u"), {})

    def test_degenerate_neighbourhood_fails_only_that_cloud(self):
        good = InMemoryCloudSource().add("node", uniform_color_cloud(5, name="u"))
        outcomes = _use_case(good, index_factory=_EmptyIndex).run(node_id="node")
        self.assertEqual(outcomes[0].status, CloudStatus.FAILED)
        self.assertEqual(outcomes[0].error_code, "DEGENERATE_NEIGHBORHOOD")
        self.assertEqual(good.layers_for("node", "u"), {})

    def test_failing_cloud_does_not_affect_others(self):
        calls = {"n": 0}

        def flaky_factory(positions):
            calls["n"] += 1
            if len(positions) == 7:
                return _EmptyIndex(positions)
            return SklearnSpatialIndex(positions)

        source = InMemoryCloudSource().add(
            "node",
            uniform_color_cloud(7, name="bad"),
            uniform_color_cloud(9, name="ok"),
        )
        outcomes = _use_case(source, SegmentationConfig(workers=2), index_factory=flaky_factory).run(node_id="node")
        by_name = {o.cloud_name: o for o in outcomes}
        self.assertEqual(by_name["bad"].status, CloudStatus.FAILED)
        self.assertEqual(by_name["ok"].status, CloudStatus.DONE)
        self.assertEqual(source.layers_for("node", "bad"), {})
        self.assertEqual(len(source.layers_for("node", "ok")), len(OUTPUT_LAYERS))
        self.assertEqual(calls["n"], 2)

    def test_cancel_aborts_run_without_layer_writes(self):
        source = InMemoryCloudSource().add("node", line_cloud(30, name="line"))
        progress = _RecordingProgress(answer=False)
        with self.assertRaises(Cancelled) as ctx:
            _use_case(source, SegmentationConfig(progress_step=10), progress).run(node_id="node")
        self.assertEqual(ctx.exception.code, "CANCELLED")
        self.assertEqual(len(progress.calls), 1)
        self.assertEqual(source.layers_for("node", "line"), {})
        self.assertEqual([o.status for o in ctx.exception.outcomes], [CloudStatus.CANCELLED])

    def test_cancel_stops_every_cloud(self):
        clouds = [line_cloud(50, name=f"l{i}") for i in range(4)]
        for workers in (1, 4):
            source = InMemoryCloudSource().add("node", *clouds)
            progress = CallbackProgressReporter(lambda fraction: False)
            with self.assertRaises(Cancelled) as ctx:
                _use_case(source, SegmentationConfig(progress_step=10, workers=workers), progress).run(node_id="node")
            self.assertTrue(all(o.status is CloudStatus.CANCELLED for o in ctx.exception.outcomes))
            for cloud in clouds:
                self.assertEqual(source.layers_for("node", cloud.name), {})

    def test_cloud_past_its_last_checkpoint_is_not_written(self):
        # "a" has fewer points than progress_step; its last query waits for "b" to cancel
        cancel = threading.Event()
        source = InMemoryCloudSource().add("node", line_cloud(9, name="a"), line_cloud(30, name="b"))

        def factory(positions):
            index = SklearnSpatialIndex(positions)
            if len(positions) == 9:
                return _HoldLastQuery(index, 9, cancel)
            return index

        use_case = _use_case(
            source, SegmentationConfig(progress_step=10, workers=2), _CancelOnLabel("b"), index_factory=factory
        )
        with self.assertRaises(Cancelled) as ctx:
            use_case.run(node_id="node", cancel=cancel)
        statuses = {o.cloud_name: o.status for o in ctx.exception.outcomes}
        self.assertEqual(statuses, {"a": CloudStatus.CANCELLED, "b": CloudStatus.CANCELLED})
        self.assertEqual(source.layers_for("node", "a"), {})
        self.assertEqual(source.layers_for("node", "b"), {})

    def test_cancel_between_second_pass_and_writeback(self):
        cancel = threading.Event()
        inner = InMemoryCloudHandle(uniform_color_cloud(5, name="u"))
        use_case = _use_case(InMemoryCloudSource())
        with self.assertRaises(Cancelled):
            use_case.process_cloud(_CancelAtWriteback(inner, cancel), cancel)
        self.assertEqual(inner.store.layers, {})

    def test_preset_cancel_event_stops_run(self):
        cancel = threading.Event()
        cancel.set()
        source = InMemoryCloudSource().add("node", uniform_color_cloud(5, name="u"))
        with self.assertRaises(Cancelled) as ctx:
            _use_case(source).run(node_id="node", cancel=cancel)
        self.assertEqual([o.status for o in ctx.exception.outcomes], [CloudStatus.CANCELLED])
        self.assertEqual(source.layers_for("node", "u"), {})

    def test_logging_reporter_cancels_on_request(self):
        progress = LoggingProgressReporter()
        self.assertTrue(progress.update(0.5, label="x"))
        progress.request_cancel()
        self.assertTrue(progress.cancel_requested)
        self.assertFalse(progress.update(0.6, label="x"))

    def test_logging_reporter_logs_completion(self):
        progress = LoggingProgressReporter()
        with self.assertLogs("hsv_segmentation.infrastructure.progress", level="INFO") as logs:
            self.assertTrue(progress.update(1.0, label="cloud.pcd"))
        self.assertEqual(logs.output, ["INFO:hsv_segmentation.infrastructure.progress:cloud.pcd: done"])


class TestWorkerCount(unittest.TestCase):
    def test_bounds(self):
        self.assertEqual(resolve_worker_count(8, 3), 3)
        self.assertEqual(resolve_worker_count(2, 10), 2)
        self.assertEqual(resolve_worker_count(4, 0), 1)
        self.assertGreaterEqual(resolve_worker_count(None, 100), 1)


class TestEntrypoint(unittest.TestCase):
    def test_hsv_segment_with_custom_source(self):
        source = InMemoryCloudSource().add("node", isolated_points_cloud([(255, 255, 255), (0, 0, 0)], name="bw"))
        outcomes = hsv_segment(node_id="node", cloud_source=source)
        self.assertEqual(outcomes[0].status, CloudStatus.DONE)
        layers = source.layers_for("node", "bw")
        np.testing.assert_array_equal(layers["VALUE"], [100.0, 0.0])
        np.testing.assert_array_equal(layers["segmentation_V"], [3, 0])

    def test_unknown_backend(self):
        with self.assertRaises(ConfigurationError):
            hsv_segment(node_id="node", cloud_source=InMemoryCloudSource(), spatial_backend="octree")


if __name__ == "__main__":
    unittest.main()
