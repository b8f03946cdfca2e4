"""Output presentation helpers for segmentation results.

Separates printing/formatting logic from the use case.
"""
from __future__ import annotations

from typing import List

from hsv_segmentation.domain.model import ChannelRange, CloudOutcome, CloudStatus


def _fmt_range(r: ChannelRange) -> str:
    return f"[{r.minimum:.3f}, {r.maximum:.3f}]"


def print_cloud_summary(outcome: CloudOutcome) -> None:
    """Print formatted summary for a single cloud."""
    print(f"\n  {outcome.cloud_name}: {outcome.status.value}")
    if outcome.status is not CloudStatus.DONE:
        if outcome.error_code:
            print(f"    Error: {outcome.error_code} {outcome.message}".rstrip())
        return
    print(f"    Points: {outcome.point_count}")
    if outcome.ranges is not None:
        print("    Channel ranges:")
        print(f"      H: {_fmt_range(outcome.ranges.h)} deg")
        print(f"      S: {_fmt_range(outcome.ranges.s)} %")
        print(f"      V: {_fmt_range(outcome.ranges.v)} %")
    if outcome.histograms:
        print("    Points per cluster:")
        for channel, counts in outcome.histograms.items():
            print(f"      {channel}: {list(counts)}")


def print_run_summary(outcomes: List[CloudOutcome]) -> None:
    """Print counts per status across all clouds."""
    print("\nHSV Segmentation Results")
    for outcome in outcomes:
        print_cloud_summary(outcome)
    done = sum(1 for o in outcomes if o.status is CloudStatus.DONE)
    failed = sum(1 for o in outcomes if o.status is CloudStatus.FAILED)
    cancelled = sum(1 for o in outcomes if o.status is CloudStatus.CANCELLED)
    print(f"\nClouds: {len(outcomes)}, done: {done}, failed: {failed}, cancelled: {cancelled}")
