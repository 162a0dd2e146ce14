"""Unit tests for data models.

Tests accumulator updates and the helpers on output records.
"""

import pytest

from tlcla.models import (
    BucketAccumulator,
    BurstAnalysis,
    BurstWindow,
    DamageEvent,
    ParsedLogSummary,
    SessionAccumulator,
    SeriesPoint,
    StabilitySeries,
    StatAccumulator,
    TargetAccumulator,
    TargetBreakdown,
)

from conftest import make_event


class TestStatAccumulator:
    """Test suite for StatAccumulator model."""

    def test_initialization(self) -> None:
        """Test extrema start absent rather than at a sentinel."""
        acc = StatAccumulator(skill_name="Slash")
        assert acc.hits == 0
        assert acc.min_hit is None
        assert acc.max_hit is None
        assert acc.crit_min is None
        assert acc.normal_min is None
        assert acc.heavy_min is None

    def test_crit_normal_partition(self) -> None:
        """Test three hits of which one crit: 100, 200 (crit), 150."""
        acc = StatAccumulator(skill_name="Slash")
        acc.record(100, is_crit=False, is_heavy=False)
        acc.record(200, is_crit=True, is_heavy=False)
        acc.record(150, is_crit=False, is_heavy=False)

        assert acc.hits == 3
        assert acc.total_damage == 450
        assert acc.crit_hits == 1
        assert acc.crit_damage == 200
        assert acc.normal_hits == 2
        assert acc.normal_damage == 250
        assert acc.max_hit == 200
        assert acc.min_hit == 100
        assert acc.normal_min == 100
        assert acc.normal_max == 150
        assert acc.hits == acc.crit_hits + acc.normal_hits

    def test_heavy_overlaps_crit(self) -> None:
        """Test a heavy crit counts in both dimensions."""
        acc = StatAccumulator(skill_name="Smash")
        acc.record(500, is_crit=True, is_heavy=True)
        acc.record(100, is_crit=False, is_heavy=False)

        assert acc.heavy_hits == 1
        assert acc.heavy_damage == 500
        assert acc.heavy_min == 500
        assert acc.heavy_max == 500
        assert acc.crit_hits == 1
        assert acc.hits == 2

    def test_unused_class_extrema_stay_absent(self) -> None:
        acc = StatAccumulator(skill_name="Slash")
        acc.record(100, is_crit=False, is_heavy=False)
        assert acc.crit_min is None
        assert acc.crit_max is None
        assert acc.heavy_min is None


class TestTargetAccumulator:
    """Test suite for TargetAccumulator model."""

    def test_record(self) -> None:
        acc = TargetAccumulator(target_name="Dummy")
        acc.record(100, is_crit=True)
        acc.record(300, is_crit=False)
        assert acc.hits == 2
        assert acc.total_damage == 400
        assert acc.max_hit == 300
        assert acc.crit_hits == 1


class TestBucketAccumulator:
    """Test suite for BucketAccumulator model."""

    def test_record_groups_by_target_and_skill(self) -> None:
        bucket = BucketAccumulator()
        bucket.record(make_event(0, 100, skill="Slash", target="Dummy", crit=True))
        bucket.record(make_event(0, 50, skill="Slash", target="Dummy", heavy=True))
        bucket.record(make_event(0, 30, skill="Bolt", target="Goblin"))

        assert bucket.total_damage == 180
        assert bucket.per_target == {"Dummy": 150, "Goblin": 30}
        slash = bucket.per_target_skills[("Dummy", "Slash")]
        assert slash.damage == 150
        assert slash.hits == 2
        assert slash.crit_hits == 1
        assert slash.heavy_hits == 1


class TestSessionAccumulator:
    """Test suite for SessionAccumulator model."""

    def test_record(self) -> None:
        session = SessionAccumulator(id=1, start_ms=0, end_ms=0)
        session.record(make_event(0, 100, crit=True))
        session.record(make_event(1, 200, skill="Bolt"))

        assert session.total_damage == 300
        assert session.total_events == 2
        assert session.crit_hits == 1
        assert list(session.skills) == ["Slash", "Bolt"]
        assert session.skills["Bolt"].order == 1


class TestDamageEvent:
    """Test suite for DamageEvent model."""

    def test_defaults(self) -> None:
        event = DamageEvent(skill_name="Slash", target_name="Dummy", damage=10)
        assert event.caster_name == ""
        assert event.is_crit is False
        assert event.is_heavy is False
        assert event.timestamp_ms is None

    def test_immutable(self) -> None:
        event = DamageEvent(skill_name="Slash", target_name="Dummy", damage=10)
        with pytest.raises(AttributeError):
            event.damage = 20


class TestOutputRecords:
    """Test suite for output record helpers."""

    def test_summary_is_empty(self) -> None:
        summary = ParsedLogSummary(file_path="/tmp/a.txt", file_name="a.txt")
        assert summary.is_empty is True
        assert summary.to_dict()['timeline'] == []

    def test_summary_get_target(self) -> None:
        target = TargetBreakdown(
            target_name="Dummy", total_hits=1, total_damage=10, max_hit=10,
            avg_hit=10.0, crit_hits=0, crit_rate=0.0,
        )
        summary = ParsedLogSummary(file_path="a", file_name="a", total_events=1, targets=[target])
        assert summary.get_target("Dummy") is target
        assert summary.get_target("Nobody") is None

    def test_stability_availability(self) -> None:
        assert StabilitySeries().is_available is False

    def test_burst_display_intensity(self) -> None:
        """Test samples inside a window read 100%, others their intensity."""
        analysis = BurstAnalysis(
            windows=[BurstWindow(x1=10, x2=15, peak_x=12, peak=500)],
            intensity_by_idx={3: 40, 12: 80},
        )
        assert analysis.display_intensity(SeriesPoint(x=12, value=0, idx=12, t_abs=12)) == 100
        assert analysis.display_intensity(SeriesPoint(x=3, value=0, idx=3, t_abs=3)) == 40
        assert analysis.display_intensity(SeriesPoint(x=30, value=0, idx=30, t_abs=30)) == 0
