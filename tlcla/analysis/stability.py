"""Rotation-consistency (stability) index.

For every sample, a centered rolling window of DPS values gives a coefficient
of variation, mapped to ``1 / (1 + cv)``: 1.0 for perfectly even output, 0.5
at cv=1, 0.25 at cv=3. Windows never span a pull boundary.
"""

import logging
import math
from typing import List, Optional, Sequence

from ..config import DEFAULT_ANALYSIS_SETTINGS, AnalysisSettings
from ..models import SeriesPoint, StabilityPoint, StabilitySeries
from .series import split_segments


logger = logging.getLogger(__name__)


def stability_index(values: Sequence[float]) -> float:
    """Stability of one window of DPS samples.

    Args:
        values: Samples of the window

    Returns:
        Index in (0, 1]
    """
    count = len(values)
    mean = sum(values) / count if count > 0 else 0.0
    if count > 1:
        std = math.sqrt(sum((v - mean) ** 2 for v in values) / (count - 1))
    else:
        std = 0.0
    cv = std / mean if mean > 0 else 0.0
    return 1 / (1 + max(0.0, cv))


def analyze_stability(
    points: Sequence[SeriesPoint],
    settings: Optional[AnalysisSettings] = None,
) -> StabilitySeries:
    """Compute the rolling stability index over a DPS series.

    Segments shorter than ``min_segment_seconds`` yield no points.

    Args:
        points: Per-second DPS samples of the selected scope
        settings: Analysis settings

    Returns:
        StabilitySeries with per-sample points, overall and per-segment averages
    """
    settings = settings or DEFAULT_ANALYSIS_SETTINGS
    half = settings.stability_window // 2

    result: List[StabilityPoint] = []
    segment_averages: List[float] = []
    for seg_start, seg_end in split_segments(points, settings.segment_gap_seconds):
        if seg_end - seg_start + 1 < settings.min_segment_seconds:
            logger.debug("Segment %d-%d too short for stability", seg_start, seg_end)
            continue

        segment_points = []
        for index in range(seg_start, seg_end + 1):
            start = max(seg_start, index - half)
            end = min(seg_end, index + half)
            stability = stability_index([points[j].value for j in range(start, end + 1)])
            segment_points.append(StabilityPoint(x=points[index].x, idx=points[index].idx, stability=stability))

        segment_averages.append(sum(p.stability for p in segment_points) / len(segment_points))
        result.extend(segment_points)

    average = sum(p.stability for p in result) / len(result) if result else None
    return StabilitySeries(points=result, average=average, segment_averages=segment_averages)
