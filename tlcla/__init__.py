"""TL Combat Log Analyzer - a damage analysis engine for TL combat logs.

This package parses CSV combat logs into per-skill, per-target and per-pull
damage summaries with a gap-free per-second timeline, and derives rotation
stability and burst-window overlays from that timeline.

Main modules:
    - models: Data model classes (DamageEvent, accumulators, summary records)
    - config: Tunable parser and analysis settings
    - parser: LogParser for record normalization, timestamps and heavy attacks
    - aggregator: CombatAggregator for the single-pass aggregation
    - sessions: SessionSegmenter for gap-based pull detection
    - summary: Summary finalizer and timeline builder
    - analysis: Stability analyzer and burst detector
    - services: Background parsing and scope selection
    - utils: File-level parsing entry points
"""

__version__ = "1.0.0"

from .config import AnalysisSettings, ParserSettings
from .models import DamageEvent, ParsedLogSummary
from .parser import LogParser
from .aggregator import CombatAggregator
from .sessions import SessionSegmenter
from .summary import finalize_summary
from .utils import LogParseError, parse_and_summarize_file, parse_log_file_summary

__all__ = [
    'AnalysisSettings',
    'ParserSettings',
    'DamageEvent',
    'ParsedLogSummary',
    'LogParser',
    'CombatAggregator',
    'SessionSegmenter',
    'finalize_summary',
    'LogParseError',
    'parse_and_summarize_file',
    'parse_log_file_summary',
]
