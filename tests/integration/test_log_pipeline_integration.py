"""Integration tests for the file -> parser -> aggregator -> summary pipeline.

Parses a small but complete combat log and checks every section of the
resulting summary together with the invariants that tie them to each other.
"""

import json
from pathlib import Path

import pytest

from tlcla import ParserSettings, parse_log_file_summary
from tlcla.analysis import analyze_stability, build_dps_series, detect_bursts
from tlcla.config import DEFAULT_PARSER_SETTINGS

from conftest import make_row


def assert_summary_invariants(summary, session_gap_ms: int = DEFAULT_PARSER_SETTINGS.session_gap_ms) -> None:
    """Check the properties that tie the groupings of a summary together."""
    assert sum(s.total_damage for s in summary.skills) == summary.total_damage
    assert sum(t.total_damage for t in summary.targets) == summary.total_damage
    assert sum(s.total_hits for s in summary.skills) == summary.total_events
    assert sum(b.total_damage for b in summary.timeline) == summary.total_damage

    for skill in summary.skills:
        assert skill.crit_hits + skill.normal_hits == skill.total_hits
    damages = [s.total_damage for s in summary.skills]
    assert damages == sorted(damages, reverse=True)

    if summary.timeline:
        span_ms = summary.timeline[-1].timestamp_ms - summary.timeline[0].timestamp_ms
        assert len(summary.timeline) == span_ms // 1000 + 1

    for target in summary.targets:
        name = target.target_name
        assert sum(s.total_damage for s in summary.per_target_skills[name]) == target.total_damage
        assert sum(s.total_hits for s in summary.per_target_skills[name]) == target.total_hits
        assert sum(b.per_target.get(name, 0) for b in summary.timeline) == target.total_damage

        sessions = summary.per_target_sessions.get(name, [])
        assert [s.session_id for s in sessions] == list(range(1, len(sessions) + 1))
        for earlier, later in zip(sessions, sessions[1:]):
            assert later.start_ms - earlier.end_ms > session_gap_ms


@pytest.fixture
def summary(sample_combat_log: Path):
    return parse_log_file_summary(str(sample_combat_log))


class TestSampleLogSummary:
    """End-to-end checks against the shared sample log."""

    def test_totals(self, summary) -> None:
        assert summary.total_events == 7
        assert summary.total_damage == 1350
        assert summary.duration_seconds == 14.9
        assert summary.dps == 90.6
        assert summary.crit_rate == 28.6
        assert summary.character_name == "Hero"
        assert summary.start_time == "2025-12-04T18:29:00.100Z"
        assert summary.end_time == "2025-12-04T18:29:15.000Z"

    def test_skills(self, summary) -> None:
        fireball, slash = summary.skills
        assert fireball.skill_name == "Fireball"
        assert fireball.total_damage == 700
        assert fireball.heavy_hits == 2
        assert fireball.heavy_rate == 100.0
        assert fireball.crit_hits == 1
        assert slash.skill_name == "Slash"
        assert slash.total_damage == 650
        assert slash.total_hits == 5
        assert slash.min_hit == 80
        assert slash.max_hit == 200

    def test_targets(self, summary) -> None:
        assert [(t.target_name, t.total_damage, t.total_hits) for t in summary.targets] == [
            ("Dummy", 1270, 6),
            ("Goblin", 80, 1),
        ]
        dummy_skills = summary.per_target_skills["Dummy"]
        assert [s.skill_name for s in dummy_skills] == ["Fireball", "Slash"]
        assert dummy_skills[1].total_damage == 570

    def test_sessions(self, summary) -> None:
        first, second = summary.per_target_sessions["Dummy"]
        assert (first.session_id, first.start_elapsed, first.end_elapsed) == (1, 0.0, 2.4)
        assert (first.total_damage, first.total_events) == (750, 4)
        assert second.session_id == 2
        assert second.start_elapsed == pytest.approx(13.9)
        assert second.duration_seconds == 1.0
        assert second.total_damage == 520
        assert len(summary.per_target_sessions["Goblin"]) == 1

    def test_timeline(self, summary) -> None:
        assert [b.total_damage for b in summary.timeline] == [100, 350, 300, 80] + [0] * 10 + [400, 120]
        assert summary.timeline[3].per_target == {"Goblin": 80}

    def test_invariants(self, summary) -> None:
        """Test the groupings of one summary agree with each other."""
        assert_summary_invariants(summary)

    def test_json_serializable_and_stable(self, summary) -> None:
        first = json.dumps(summary.to_dict(), sort_keys=True)
        second = json.dumps(summary.to_dict(), sort_keys=True)
        assert first == second
        assert json.loads(first)['file_name'] == "CombatLog.txt"


class TestPipelineEdgeCases:

    def test_header_only_file(self, write_log) -> None:
        summary = parse_log_file_summary(str(write_log([])))
        assert summary.is_empty
        assert summary.dps is None
        assert summary.per_target_sessions == {}

    def test_same_log_parses_identically(self, sample_combat_log: Path) -> None:
        a = parse_log_file_summary(str(sample_combat_log))
        b = parse_log_file_summary(str(sample_combat_log))
        assert a == b

    def test_interleaved_targets_with_late_rows(self, write_log) -> None:
        """Test several targets hit in alternation, with rows logged out of order."""
        rows = [
            make_row(0.0, 100, skill="Slash", target="Dummy"),
            make_row(0.4, 60, skill="Bolt", target="Goblin"),
            make_row(1.1, 120, skill="Bolt", target="Dummy", crit="1"),
            make_row(0.8, 40, skill="Slash", target="Orc", caster="Ally"),
            make_row(5.0, 90, skill="Slash", target="Dummy"),
            make_row(3.0, 70, skill="Slash", target="Dummy"),
            make_row(4.2, 55, skill="Bolt", target="Goblin", double="1"),
            make_row(12.5, 200, skill="Bolt", target="Dummy"),
            make_row(13.0, 0, skill="Slash", target="Goblin"),
            make_row(14.0, 80, skill="Slash", target="Goblin"),
            make_row(24.0, 150, skill="Slash", target="Dummy", crit="1"),
            make_row(23.5, 35, skill="Slash", target="Orc", caster="Ally"),
        ]
        summary = parse_log_file_summary(str(write_log(rows)))

        assert summary.total_events == 11
        assert summary.total_damage == 1000
        assert [t.target_name for t in summary.targets] == ["Dummy", "Goblin", "Orc"]
        assert [s.session_id for s in summary.per_target_sessions["Dummy"]] == [1, 2]
        assert summary.per_target_sessions["Dummy"][0].total_events == 5
        assert len(summary.per_target_sessions["Goblin"]) == 2
        assert len(summary.per_target_sessions["Orc"]) == 2
        assert len(summary.timeline) == 25
        assert_summary_invariants(summary)

    def test_custom_session_gap(self, sample_combat_log: Path) -> None:
        summary = parse_log_file_summary(str(sample_combat_log), settings=ParserSettings(session_gap_ms=20000))
        assert len(summary.per_target_sessions["Dummy"]) == 1

    def test_analysis_over_long_fight(self, write_log) -> None:
        """Test a steady fight with a closing burst through the whole stack."""
        rows = [make_row(float(s), 100) for s in range(40)]
        rows += [make_row(float(s), 500) for s in range(40, 46)]
        summary = parse_log_file_summary(str(write_log(rows)))

        series = build_dps_series(summary, "Dummy")
        stability = analyze_stability(series.points)
        bursts = detect_bursts(series.points)

        assert len(series.points) == 46
        assert stability.average is not None
        assert len(bursts.windows) == 1
        assert bursts.windows[0].peak == 500
