"""Tunable heuristics for the combat log analyzer.

Gap and burst thresholds are domain heuristics rather than protocol constants,
so they are grouped here as frozen dataclasses that every entry point accepts
as an optional override.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ParserSettings:
    """Settings used during the aggregation pass.

    Attributes:
        session_gap_ms: Idle time after which the next hit on a target opens a new pull
    """
    session_gap_ms: int = 8000

    def __post_init__(self) -> None:
        if self.session_gap_ms <= 0:
            raise ValueError(f"Invalid session gap: {self.session_gap_ms}")


@dataclass(frozen=True)
class AnalysisSettings:
    """Settings for the stability and burst passes.

    All durations are in seconds of the 1 Hz timeline, so they double as
    sample counts.
    """
    stability_window: int = 12
    segment_gap_seconds: float = 1.5
    min_segment_seconds: int = 4
    smooth_seconds: int = 3
    baseline_seconds: int = 25
    burst_start_ratio: float = 1.4
    burst_end_ratio: float = 1.2
    burst_min_length_seconds: int = 4
    burst_merge_gap_seconds: float = 2
    burst_refractory_seconds: int = 6
    max_burst_windows: int = 4
    baseline_floor: float = 1.0
    # Spacer inserted between pulls when a target's pulls are laid side by side
    pull_gap_seconds: int = 4

    def __post_init__(self) -> None:
        positive = {
            'stability_window': self.stability_window,
            'segment_gap_seconds': self.segment_gap_seconds,
            'min_segment_seconds': self.min_segment_seconds,
            'smooth_seconds': self.smooth_seconds,
            'baseline_seconds': self.baseline_seconds,
            'burst_min_length_seconds': self.burst_min_length_seconds,
            'max_burst_windows': self.max_burst_windows,
            'baseline_floor': self.baseline_floor,
        }
        for name, value in positive.items():
            if value <= 0:
                raise ValueError(f"Invalid {name}: {value}")

        if self.burst_end_ratio >= self.burst_start_ratio:
            raise ValueError(
                f"burst_end_ratio ({self.burst_end_ratio}) must be below "
                f"burst_start_ratio ({self.burst_start_ratio})"
            )
        if self.burst_merge_gap_seconds < 0 or self.burst_refractory_seconds < 0:
            raise ValueError("Burst merge gap and refractory period cannot be negative")
        if self.pull_gap_seconds < 0:
            raise ValueError(f"Invalid pull_gap_seconds: {self.pull_gap_seconds}")


DEFAULT_PARSER_SETTINGS = ParserSettings()
DEFAULT_ANALYSIS_SETTINGS = AnalysisSettings()
