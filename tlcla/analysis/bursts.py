"""Local burst-window detection.

Bursts are short windows where smoothed DPS clearly exceeds a rolling-median
baseline of the same pull, so a strong pull does not hide the bursts of a weak
one. Per time-contiguous segment:

1. smoothed = short centered moving average of raw DPS
2. baseline = long centered rolling median of smoothed
3. ratio = smoothed / max(baseline, floor); ratio_stable = ratio smoothed again
4. intensity ramps 0-100% between the end and start ratios of ratio_stable
5. a hysteresis state machine on ratio finds burst runs (start at the start
   ratio after a refractory period, end at the end ratio, minimum length)

Runs of a segment separated by a small gap are merged and only the strongest
windows, by area above baseline, are kept.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from ..config import DEFAULT_ANALYSIS_SETTINGS, AnalysisSettings
from ..models import BurstAnalysis, BurstWindow, SeriesPoint
from ..summary import round_half_up
from .series import moving_average_centered, rolling_median_centered, split_segments


logger = logging.getLogger(__name__)


class BurstState(Enum):
    IDLE = "idle"
    IN_BURST = "in_burst"


@dataclass
class BurstCandidate:
    """A burst run before merging and ranking."""
    x1: float
    x2: float
    peak_x: float
    peak: float
    score: float
    segment_id: int

    def to_window(self) -> BurstWindow:
        return BurstWindow(x1=self.x1, x2=self.x2, peak_x=self.peak_x, peak=self.peak, score=self.score)


def intensity_ramp(ratio: float, end_ratio: float, start_ratio: float) -> float:
    """Map a stabilized ratio to a 0-100 intensity.

    Args:
        ratio: Stabilized smoothed/baseline ratio
        end_ratio: Ratio at or below which intensity is 0
        start_ratio: Ratio at or above which intensity is 100

    Returns:
        Intensity percentage
    """
    if ratio <= end_ratio:
        return 0.0
    if ratio >= start_ratio:
        return 100.0
    return (ratio - end_ratio) / (start_ratio - end_ratio) * 100


def find_burst_runs(ratios: Sequence[float], settings: AnalysisSettings) -> List[Tuple[int, int]]:
    """Run the hysteresis state machine over one segment.

    A run opens when the ratio reaches ``burst_start_ratio`` and more than
    ``burst_refractory_seconds`` samples have passed since the last run ended;
    it closes on the sample before the ratio falls to ``burst_end_ratio``. Runs
    shorter than ``burst_min_length_seconds`` are dropped but still start the
    refractory period.

    Args:
        ratios: Smoothed/baseline ratio per sample
        settings: Analysis settings

    Returns:
        Inclusive ``(start, end)`` index pairs of the kept runs
    """
    runs: List[Tuple[int, int]] = []
    state = BurstState.IDLE
    run_start = -1
    last_end = -1_000_000

    def emit(start: int, end: int) -> None:
        if end - start + 1 >= settings.burst_min_length_seconds:
            runs.append((start, end))

    for i, ratio in enumerate(ratios):
        if state is BurstState.IDLE:
            if ratio >= settings.burst_start_ratio and i - last_end > settings.burst_refractory_seconds:
                state = BurstState.IN_BURST
                run_start = i
        elif ratio <= settings.burst_end_ratio:
            emit(run_start, i - 1)
            state = BurstState.IDLE
            last_end = i - 1

    if state is BurstState.IN_BURST:
        emit(run_start, len(ratios) - 1)
    return runs


def merge_candidates(candidates: List[BurstCandidate], merge_gap: float) -> List[BurstCandidate]:
    """Merge chronologically adjacent candidates of the same segment.

    Args:
        candidates: Burst candidates in any order
        merge_gap: Largest gap in seconds bridged by a merge

    Returns:
        Merged candidates in chronological order
    """
    merged: List[BurstCandidate] = []
    for current in sorted(candidates, key=lambda c: c.x1):
        last = merged[-1] if merged else None
        if last is not None and current.segment_id == last.segment_id and current.x1 <= last.x2 + merge_gap:
            last.x2 = max(last.x2, current.x2)
            last.score += current.score
            if current.peak > last.peak:
                last.peak = current.peak
                last.peak_x = current.peak_x
            continue
        merged.append(current)
    return merged


def detect_bursts(
    points: Sequence[SeriesPoint],
    settings: Optional[AnalysisSettings] = None,
) -> BurstAnalysis:
    """Detect burst windows and the per-sample intensity signal.

    Segments shorter than ``min_segment_seconds`` contribute neither windows
    nor intensity values.

    Args:
        points: Per-second DPS samples of the selected scope
        settings: Analysis settings

    Returns:
        BurstAnalysis with at most ``max_burst_windows`` windows in
        chronological order and intensities keyed by timeline bucket index
    """
    settings = settings or DEFAULT_ANALYSIS_SETTINGS
    intensity_by_idx = {}
    candidates: List[BurstCandidate] = []

    segments = split_segments(points, settings.segment_gap_seconds)
    for segment_id, (start, end) in enumerate(segments):
        length = end - start + 1
        if length < settings.min_segment_seconds:
            logger.debug("Segment %d-%d too short for burst detection", start, end)
            continue

        raw = [max(0.0, points[start + i].value) for i in range(length)]
        smoothed = moving_average_centered(raw, settings.smooth_seconds)
        baseline = rolling_median_centered(smoothed, settings.baseline_seconds)
        ratios = [s / max(b, settings.baseline_floor) for s, b in zip(smoothed, baseline)]
        ratios_stable = moving_average_centered(ratios, settings.smooth_seconds)

        intensity_raw = [
            intensity_ramp(r, settings.burst_end_ratio, settings.burst_start_ratio) for r in ratios_stable
        ]
        intensity_stable = moving_average_centered(intensity_raw, settings.smooth_seconds)
        for i in range(length):
            pct = round_half_up(intensity_stable[i])
            intensity_by_idx[points[start + i].idx] = min(100, max(0, pct))

        for run_start, run_end in find_burst_runs(ratios, settings):
            peak_idx = run_start
            score = 0.0
            for i in range(run_start, run_end + 1):
                if raw[i] > raw[peak_idx] or (raw[i] == raw[peak_idx] and ratios_stable[i] > ratios_stable[peak_idx]):
                    peak_idx = i
                score += max(0.0, smoothed[i] - baseline[i])

            candidates.append(BurstCandidate(
                x1=points[start + run_start].x,
                x2=points[start + run_end].x,
                peak_x=points[start + peak_idx].x,
                peak=raw[peak_idx],
                score=score,
                segment_id=segment_id,
            ))

    merged = merge_candidates(candidates, settings.burst_merge_gap_seconds)
    strongest = sorted(merged, key=lambda c: (-c.score, -c.peak))[:settings.max_burst_windows]
    windows = [c.to_window() for c in sorted(strongest, key=lambda c: c.x1)]
    return BurstAnalysis(windows=windows, intensity_by_idx=intensity_by_idx)
