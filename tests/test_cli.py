"""Tests for the command-line entry point."""

import json
import logging
from pathlib import Path

from tlcla.__main__ import build_arg_parser, main


class TestArgParser:

    def test_defaults(self) -> None:
        args = build_arg_parser().parse_args(["CombatLog.txt"])
        assert args.log_file == "CombatLog.txt"
        assert args.target is None
        assert args.session is None
        assert args.session_gap_ms == 8000
        assert args.burst_start_ratio == 1.4
        assert args.burst_end_ratio == 1.2
        assert args.json is False


class TestMain:
    """Test suite for main()."""

    def test_text_report(self, sample_combat_log: Path, capsys) -> None:
        assert main([str(sample_combat_log)]) == 0

        out = capsys.readouterr().out
        assert "Scope:      overall" in out
        assert "1,350" in out

    def test_target_session_label(self, sample_combat_log: Path, capsys) -> None:
        assert main([str(sample_combat_log), "--target", "Dummy", "--session", "2"]) == 0
        assert "Dummy (pull 2)" in capsys.readouterr().out

    def test_json_output(self, sample_combat_log: Path, capsys) -> None:
        assert main([str(sample_combat_log), "--json", "--target", "Dummy"]) == 0

        payload = json.loads(capsys.readouterr().out)
        assert set(payload) == {'summary', 'scope', 'stability', 'bursts'}
        assert payload['summary']['total_damage'] == 1350
        assert payload['scope']['target'] == "Dummy"
        assert payload['scope']['session'] is None
        assert len(payload['summary']['per_target_sessions']['Dummy']) == 2

    def test_missing_file(self, temp_log_dir: Path, caplog) -> None:
        with caplog.at_level(logging.ERROR, logger="tlcla"):
            assert main([str(temp_log_dir / "missing.txt")]) == 1
        assert "missing.txt" in caplog.text

    def test_unknown_target(self, sample_combat_log: Path) -> None:
        assert main([str(sample_combat_log), "--target", "Nobody"]) == 2

    def test_session_without_target(self, sample_combat_log: Path) -> None:
        assert main([str(sample_combat_log), "--session", "1"]) == 2

    def test_invalid_ratios(self, sample_combat_log: Path) -> None:
        assert main([str(sample_combat_log), "--burst-start-ratio", "1.1"]) == 2

    def test_invalid_session_gap(self, sample_combat_log: Path) -> None:
        assert main([str(sample_combat_log), "--session-gap-ms", "0"]) == 2
