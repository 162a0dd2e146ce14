"""Signal-processing passes over the finalized per-second DPS timeline.

Contains the scope-restricted series builder, the rotation-consistency
(stability) analyzer and the local burst-window detector.
"""

from .series import build_dps_series, split_segments
from .stability import analyze_stability
from .bursts import detect_bursts

__all__ = [
    'build_dps_series',
    'split_segments',
    'analyze_stability',
    'detect_bursts',
]
