#!/usr/bin/env python3
"""run_hsv_segmentation

Purpose:
- Compute neighbourhood-averaged HSV features and per-channel segmentation
  labels for every coloured point cloud under a node (directory or file).

Inputs (CLI):
- --node-id: Directory to scan for clouds, or a single cloud file (required).
- --radius: Neighbourhood sphere radius in [0.1, 3.0].
- --clusters-h / --clusters-s / --clusters-v: Cluster counts in [1, 20].
- --workers: Thread pool size (defaults to the CPU count).
- --spatial-backend: ``sklearn`` or ``open3d``.
- --config: Optional YAML config; explicit flags win over config values.
- --log-level: Logging level.

Outputs:
- For each cloud ``<stem>.pcd`` a sibling ``<stem>_layers/`` directory with
  ``HUE.npy``, ``SATURATION.npy``, ``VALUE.npy``, ``segmentation_H.npy``,
  ``segmentation_S.npy`` and ``segmentation_V.npy``; overwritten on re-run.

Exit codes:
- 0 all clouds done, 1 at least one cloud failed, 2 configuration error,
  130 cancelled (Ctrl+C).

Usage:
    python orchestration/run_hsv_segmentation.py \
        --node-id /path/to/clouds \
        --radius 0.6 \
        --clusters-h 4 --clusters-s 4 --clusters-v 4 \
        --log-level INFO
"""
from __future__ import annotations

import argparse
import logging
import signal
import threading
from typing import List, Optional

from common.cli import add_config_arg, add_log_level_arg, add_node_arg, setup_logging, parse_args_with_config
from common.logging import CountingHandler
from exceptions.exceptions import Cancelled, ConfigurationError
from hsv_segmentation.domain.model import CloudStatus, ClusterCounts, SegmentationConfig
from hsv_segmentation.entrypoints.hsv_segment import hsv_segment
from hsv_segmentation.infrastructure.progress import LoggingProgressReporter
from hsv_segmentation.infrastructure.spatial import SPATIAL_BACKENDS
from hsv_segmentation.presenters import print_run_summary

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG = 2
EXIT_CANCELLED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Average point colour in a neighbourhood, convert RGB to HSV and segment")
    add_config_arg(parser); add_log_level_arg(parser); add_node_arg(parser)
    parser.add_argument("--radius", type=float, help="Neighbourhood sphere radius [0.1, 3.0]")
    parser.add_argument("--clusters-h", type=int, help="Number of H clusters [1, 20]")
    parser.add_argument("--clusters-s", type=int, help="Number of S clusters [1, 20]")
    parser.add_argument("--clusters-v", type=int, help="Number of V clusters [1, 20]")
    parser.add_argument("--progress-step", type=int, help="Report progress every N points")
    parser.add_argument("--workers", type=int, help="Number of clouds processed in parallel")
    parser.add_argument("--spatial-backend", choices=SPATIAL_BACKENDS, help="Radius query backend")
    parser.add_argument("--layers-dir-suffix", help="Suffix of the per-cloud layer directory")
    return parser


def _install_sigint(progress: LoggingProgressReporter):
    """Route Ctrl+C to the progress channel; returns the previous handler."""
    if threading.current_thread() is not threading.main_thread():
        return None

    def _handler(signum, frame):
        logging.warning("Interrupt received, cancelling after the current progress step")
        progress.request_cancel()

    return signal.signal(signal.SIGINT, _handler)


def main(argv: Optional[List[str]] = None) -> int:
    try:
        args, cfg = parse_args_with_config(
            build_parser,
            lambda cfg: {
                "node_id": cfg.paths.node_id,
                "layers_dir_suffix": cfg.paths.layers_dir_suffix,
                "log_level": cfg.logging.level,
                "radius": cfg.segmentation.radius,
                "clusters_h": cfg.segmentation.clusters_h,
                "clusters_s": cfg.segmentation.clusters_s,
                "clusters_v": cfg.segmentation.clusters_v,
                "progress_step": cfg.segmentation.progress_step,
                "workers": cfg.segmentation.workers,
                "spatial_backend": cfg.segmentation.spatial_backend,
            },
            argv,
        )
    except ConfigurationError as e:
        setup_logging("INFO")
        logging.error("%s: %s", e.code, e)
        return EXIT_CONFIG

    setup_logging(args.log_level)
    counter = CountingHandler()
    logging.getLogger().addHandler(counter)

    config = SegmentationConfig(
        radius=args.radius,
        clusters=ClusterCounts(h=args.clusters_h, s=args.clusters_s, v=args.clusters_v),
        progress_step=args.progress_step,
        workers=args.workers,
    )
    progress = LoggingProgressReporter()
    previous_sigint = _install_sigint(progress)

    try:
        outcomes = hsv_segment(
            node_id=args.node_id,
            config=config,
            progress=progress,
            spatial_backend=args.spatial_backend,
            extensions=cfg.paths.cloud_extensions,
            layers_dir_suffix=args.layers_dir_suffix,
        )
    except ConfigurationError as e:
        logging.error("%s: %s", e.code, e)
        return EXIT_CONFIG
    except Cancelled as e:
        logging.warning("❌ %s", e)
        print_run_summary(e.outcomes)
        return EXIT_CANCELLED
    finally:
        logging.getLogger().removeHandler(counter)
        if previous_sigint is not None:
            signal.signal(signal.SIGINT, previous_sigint)

    print_run_summary(outcomes)
    logging.info(counter.summary())

    if any(o.status is CloudStatus.FAILED for o in outcomes):
        logging.info("❌ Some clouds failed, see errors above")
        return EXIT_FAILED
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
