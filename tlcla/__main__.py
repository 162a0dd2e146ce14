"""Command-line entry point for the TL combat log analyzer."""

import argparse
import json
import logging
import sys
from typing import List, Optional

from .config import AnalysisSettings, ParserSettings
from .formatters import format_report
from .services import ScopeService
from .utils import LogParseError, parse_log_file_summary


logger = logging.getLogger("tlcla")


def setup_logging(verbose: bool = False) -> None:
    """Attach a console handler to the package logger."""
    level = logging.DEBUG if verbose else logging.INFO
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter('%(asctime)s [%(levelname)s] %(message)s'))
        logger.addHandler(handler)


def build_arg_parser() -> argparse.ArgumentParser:
    arg_parser = argparse.ArgumentParser(
        prog="tlcla",
        description="Summarize a TL combat log: skills, targets, pulls, stability and burst windows.",
    )
    arg_parser.add_argument("log_file", help="Path to the CSV combat log")
    arg_parser.add_argument("--target", help="Restrict the analysis to one target")
    arg_parser.add_argument("--session", type=int, help="Restrict the analysis to one pull of --target")
    arg_parser.add_argument("--json", action="store_true", help="Print the summary and analysis as JSON")
    arg_parser.add_argument("--session-gap-ms", type=int, default=ParserSettings.session_gap_ms,
                            help="Idle gap that splits pulls (default: %(default)s)")
    arg_parser.add_argument("--burst-start-ratio", type=float, default=AnalysisSettings.burst_start_ratio)
    arg_parser.add_argument("--burst-end-ratio", type=float, default=AnalysisSettings.burst_end_ratio)
    arg_parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return arg_parser


def main(argv: Optional[List[str]] = None) -> int:
    """Run the analyzer on one log file.

    Returns:
        Process exit code
    """
    args = build_arg_parser().parse_args(argv)
    setup_logging(args.verbose)

    try:
        parser_settings = ParserSettings(session_gap_ms=args.session_gap_ms)
        analysis_settings = AnalysisSettings(
            burst_start_ratio=args.burst_start_ratio,
            burst_end_ratio=args.burst_end_ratio,
        )
    except ValueError as e:
        logger.error("Invalid settings: %s", e)
        return 2

    try:
        summary = parse_log_file_summary(args.log_file, settings=parser_settings)
    except LogParseError as e:
        logger.error("Could not parse log, please retry: %s", e)
        return 1

    scope = ScopeService(summary, analysis_settings)
    try:
        scope.select_target(args.target)
        scope.select_session(args.session)
    except ValueError as e:
        logger.error("%s", e)
        return 2

    stats = scope.get_scope_stats()
    stability = scope.get_stability()
    bursts = scope.get_bursts()

    if args.json:
        payload = {
            'summary': summary.to_dict(),
            'scope': {
                'target': scope.selected_target,
                'session': scope.selected_session_id,
                'dps': stats['dps'],
                'crit_rate': stats['crit_rate'],
            },
            'stability': stability.to_dict(),
            'bursts': bursts.to_dict(),
        }
        print(json.dumps(payload, indent=2))
        return 0

    if args.target is None:
        label = "overall"
    elif args.session is None:
        label = f"{args.target} (all pulls)"
    else:
        label = f"{args.target} (pull {args.session})"
    print(format_report(summary, label, stats, stability, bursts))
    return 0


if __name__ == "__main__":
    sys.exit(main())
