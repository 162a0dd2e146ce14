"""File-level parsing entry points for the TL combat log analyzer.

This module ties the record parser, the aggregator and the summary finalizer
together over one closed log file. It does not depend on any UI, making it
testable in isolation and safe to call from a worker thread.
"""

import csv
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from .aggregator import CombatAggregator
from .config import ParserSettings
from .models import ParsedLogSummary
from .parser import LogParser
from .summary import finalize_summary


logger = logging.getLogger(__name__)


class LogParseError(Exception):
    """Raised when a log file cannot be read as a whole."""

    def __init__(self, file_path: str, message: str) -> None:
        super().__init__(f"{file_path}: {message}")
        self.file_path = file_path


def summarize_rows(
    rows: Iterable[List[str]],
    file_path: str,
    parser: Optional[LogParser] = None,
    settings: Optional[ParserSettings] = None,
    progress_callback: Optional[Callable[[int], None]] = None,
    progress_interval: int = 5000,
) -> Dict[str, Any]:
    """Aggregate already-split records into a summary.

    A leading ``CombatLogVersion`` row is ignored; blank records are skipped.

    Args:
        rows: Iterable of records, each a list of column strings
        file_path: Path reported in the summary
        parser: LogParser instance, a fresh one when omitted
        settings: Parser settings for the aggregation pass
        progress_callback: Optional callback called with the number of records processed
        progress_interval: How often to call progress_callback (every N records)

    Returns:
        dict with keys: 'summary' (ParsedLogSummary), 'rows_processed' (int),
        'rows_skipped' (int)
    """
    parser = parser or LogParser()
    aggregator = CombatAggregator(settings)

    rows_processed = 0
    rows_skipped = 0
    saw_data_row = False

    for cells in rows:
        if not cells or all(not str(c).strip() for c in cells):
            continue

        if not saw_data_row and parser.is_header_row(cells):
            continue
        saw_data_row = True

        rows_processed += 1
        if progress_callback and rows_processed % progress_interval == 0:
            progress_callback(rows_processed)

        event = parser.parse_row(cells)
        if event is None:
            rows_skipped += 1
            continue
        aggregator.add_event(event)

    return {
        'summary': finalize_summary(aggregator, file_path),
        'rows_processed': rows_processed,
        'rows_skipped': rows_skipped,
    }


def parse_log_file_summary(
    file_path: str,
    parser: Optional[LogParser] = None,
    settings: Optional[ParserSettings] = None,
    progress_callback: Optional[Callable[[int], None]] = None,
) -> ParsedLogSummary:
    """Parse one combat log file into a summary.

    Args:
        file_path: Path to the CSV combat log
        parser: LogParser instance, a fresh one when omitted
        settings: Parser settings for the aggregation pass
        progress_callback: Optional callback called periodically with records processed

    Returns:
        ParsedLogSummary for the whole file

    Raises:
        LogParseError: If the file cannot be opened or read
    """
    try:
        with open(file_path, 'r', encoding='utf-8-sig', errors='ignore', newline='', buffering=65536) as f:
            result = summarize_rows(
                csv.reader(f),
                str(file_path),
                parser=parser,
                settings=settings,
                progress_callback=progress_callback,
            )
    except (OSError, csv.Error) as e:
        logger.error("Failed to read combat log %s: %s", file_path, e)
        raise LogParseError(str(file_path), str(e)) from e

    summary = result['summary']
    logger.info(
        "Parsed %s: %d record(s), %d skipped, %d damage event(s)",
        summary.file_name, result['rows_processed'], result['rows_skipped'], summary.total_events,
    )
    return summary


def parse_and_summarize_file(
    file_path: str,
    parser: Optional[LogParser] = None,
    settings: Optional[ParserSettings] = None,
    progress_callback: Optional[Callable[[int], None]] = None,
) -> Dict[str, Any]:
    """Parse a log file, reporting failure as data instead of raising.

    Args:
        file_path: Path to the CSV combat log
        parser: LogParser instance, a fresh one when omitted
        settings: Parser settings for the aggregation pass
        progress_callback: Optional callback called periodically with records processed

    Returns:
        dict with keys: 'success' (bool), 'summary' (ParsedLogSummary or None),
        'error' (str or None)
    """
    try:
        summary = parse_log_file_summary(file_path, parser, settings, progress_callback)
    except LogParseError as e:
        return {
            'success': False,
            'summary': None,
            'error': str(e),
        }
    return {
        'success': True,
        'summary': summary,
        'error': None,
    }
