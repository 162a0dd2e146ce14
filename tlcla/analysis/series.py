"""Per-second DPS series and the rolling-window helpers shared by the analyzers."""

import math
import statistics
from typing import List, Optional, Sequence, Tuple

from ..config import DEFAULT_ANALYSIS_SETTINGS, AnalysisSettings
from ..models import DpsSeries, ParsedLogSummary, SeriesPoint, TargetSessionSummary


def _window(values: Sequence[float], index: int, half: int) -> Sequence[float]:
    start = max(0, index - half)
    end = min(len(values) - 1, index + half)
    return values[start:end + 1]


def moving_average_centered(values: Sequence[float], window_size: int) -> List[float]:
    """Centered moving average, truncated at the edges.

    Args:
        values: Input samples
        window_size: Nominal window width; ``window_size // 2`` samples are taken on each side

    Returns:
        List of averages, same length as ``values``
    """
    half = max(0, window_size // 2)
    out = []
    for i in range(len(values)):
        chunk = _window(values, i, half)
        out.append(sum(chunk) / max(1, len(chunk)))
    return out


def rolling_median_centered(values: Sequence[float], window_size: int) -> List[float]:
    """Centered rolling median, truncated at the edges."""
    half = max(0, window_size // 2)
    return [statistics.median(_window(values, i, half)) for i in range(len(values))]


def split_segments(points: Sequence[SeriesPoint], max_gap: float) -> List[Tuple[int, int]]:
    """Split a series wherever adjacent x positions are more than ``max_gap`` apart.

    Args:
        points: Series samples ordered by x
        max_gap: Largest x step still considered contiguous

    Returns:
        Inclusive ``(start, end)`` index pairs, one per contiguous segment
    """
    segments: List[Tuple[int, int]] = []
    if not points:
        return segments

    seg_start = 0
    for i in range(1, len(points) + 1):
        is_boundary = (
            i == len(points)
            or (
                math.isfinite(points[i].x)
                and math.isfinite(points[i - 1].x)
                and points[i].x - points[i - 1].x > max_gap
            )
        )
        if is_boundary:
            segments.append((seg_start, i - 1))
            seg_start = i
    return segments


def _find_session(sessions: List[TargetSessionSummary], session_id: int) -> TargetSessionSummary:
    for session in sessions:
        if session.session_id == session_id:
            return session
    raise ValueError(f"Unknown session: {session_id}")


def _compress_pulls(
    base: List[Tuple[int, float, float]],
    sessions: List[TargetSessionSummary],
    gap_seconds: int,
) -> DpsSeries:
    pulls = sorted(
        ((math.floor(s.start_elapsed), math.ceil(s.end_elapsed)) for s in sessions),
        key=lambda p: p[0],
    )

    segments = []
    breaks: List[float] = []
    offset = 0
    for i, (start, end) in enumerate(pulls):
        duration = max(0, end - start)
        segments.append((start, end, offset))
        if i < len(pulls) - 1:
            breaks.append(offset + duration + gap_seconds / 2)
        offset += duration + gap_seconds

    points: List[SeriesPoint] = []
    seg_index = 0
    for idx, t_abs, value in base:
        while seg_index < len(segments) and t_abs > segments[seg_index][1]:
            seg_index += 1
        if seg_index >= len(segments):
            break
        start, _end, seg_offset = segments[seg_index]
        if t_abs < start:
            continue
        points.append(SeriesPoint(x=t_abs - start + seg_offset, value=value, idx=idx, t_abs=t_abs))

    return DpsSeries(points=points, session_break_xs=breaks)


def build_dps_series(
    summary: ParsedLogSummary,
    target_name: Optional[str] = None,
    session_id: Optional[int] = None,
    settings: Optional[AnalysisSettings] = None,
) -> DpsSeries:
    """Build the per-second DPS series for a scope.

    Overall scope uses the whole timeline at absolute elapsed seconds. A
    target scope uses that target's damage: windowed to the selected pull (or
    its only pull) with x relative to the pull start, or, when it has several
    pulls and none is selected, with the pulls laid side by side and idle time
    trimmed.

    Args:
        summary: Finalized log summary
        target_name: Target to restrict to, or None for the overall scope
        session_id: Pull of ``target_name`` to restrict to
        settings: Analysis settings (pull spacer width)

    Returns:
        DpsSeries with the samples and, for laid-out pulls, the break positions

    Raises:
        ValueError: If a session is requested without a target, or is unknown
    """
    settings = settings or DEFAULT_ANALYSIS_SETTINGS
    if session_id is not None and target_name is None:
        raise ValueError("A session can only be selected together with a target")
    if not summary.timeline:
        return DpsSeries()

    base = []
    for idx, bucket in enumerate(summary.timeline):
        value = bucket.per_target.get(target_name, 0) if target_name else bucket.total_damage
        base.append((idx, float(round(bucket.elapsed_seconds)), float(value)))

    window: Optional[Tuple[int, int]] = None
    sessions = summary.per_target_sessions.get(target_name, []) if target_name else []
    if session_id is not None:
        active = _find_session(sessions, session_id)
        window = (math.floor(active.start_elapsed), math.ceil(active.end_elapsed))
    elif len(sessions) == 1:
        window = (math.floor(sessions[0].start_elapsed), math.ceil(sessions[0].end_elapsed))
    elif len(sessions) > 1:
        return _compress_pulls(base, sessions, settings.pull_gap_seconds)

    if window is not None:
        base = [b for b in base if window[0] <= b[1] <= window[1]]

    x_zero = 0.0
    if target_name:
        if window is not None:
            x_zero = window[0]
        elif base:
            x_zero = base[0][1]

    points = [SeriesPoint(x=t_abs - x_zero, value=value, idx=idx, t_abs=t_abs) for idx, t_abs, value in base]
    return DpsSeries(points=points)
