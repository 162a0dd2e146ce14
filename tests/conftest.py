"""Pytest configuration and shared fixtures for the TL combat log analyzer tests."""

import csv
import tempfile
from pathlib import Path
from typing import Callable, List, Optional

import pytest

from tlcla.aggregator import CombatAggregator
from tlcla.config import AnalysisSettings, ParserSettings
from tlcla.models import DamageEvent, SeriesPoint
from tlcla.parser import LogParser


HEADER_ROW = ["CombatLogVersion", "4"]


def pytest_configure(config):
    """Make the row and event builders importable as `conftest` from test modules."""
    import sys
    sys.modules["conftest"] = sys.modules[__name__]


class LogMessageCapture:
    """Helper class to capture log messages from service callbacks."""

    def __init__(self):
        self.messages = []

    def __call__(self, message: str, msg_type: str):
        """Callback function to capture messages."""
        self.messages.append({'message': message, 'type': msg_type})

    def get_by_type(self, msg_type: str) -> list:
        """Get all messages of a specific type."""
        return [m for m in self.messages if m.get('type') == msg_type]

    def get_all(self) -> list:
        """Get all captured messages."""
        return self.messages

    def clear(self):
        """Clear all captured messages."""
        self.messages.clear()


def make_timestamp(seconds: float, base_minute: int = 29) -> str:
    """Build a log timestamp ``seconds`` after 2025-12-04 18:<base_minute>:00.000."""
    total_ms = int(round(seconds * 1000))
    minute = base_minute + total_ms // 60000
    sec = (total_ms // 1000) % 60
    ms = total_ms % 1000
    return f"20251204-18:{minute:02d}:{sec:02d}:{ms:03d}"


def make_row(
    seconds: Optional[float] = 0,
    damage="100",
    skill: str = "Slash",
    target: str = "Dummy",
    caster: str = "Hero",
    crit: str = "0",
    double: str = "0",
    hit_type: str = "",
    log_type: str = "DamageDone",
    skill_id: str = "1001",
    timestamp: Optional[str] = None,
) -> List[str]:
    """Build one positional combat log record."""
    if timestamp is None:
        timestamp = make_timestamp(seconds) if seconds is not None else ""
    return [timestamp, log_type, skill, skill_id, str(damage), crit, double, hit_type, caster, target]


def make_event(
    seconds: Optional[float] = 0,
    damage: float = 100,
    skill: str = "Slash",
    target: str = "Dummy",
    caster: str = "Hero",
    crit: bool = False,
    heavy: bool = False,
) -> DamageEvent:
    """Build a DamageEvent ``seconds`` after an arbitrary epoch origin."""
    return DamageEvent(
        skill_name=skill,
        target_name=target,
        damage=damage,
        caster_name=caster,
        is_crit=crit,
        is_heavy=heavy,
        timestamp_ms=None if seconds is None else 1_700_000_000_000 + int(round(seconds * 1000)),
    )


def make_series(values: List[float], start_x: float = 0) -> List[SeriesPoint]:
    """Build a 1 Hz DPS series from plain values."""
    return [SeriesPoint(x=start_x + i, value=v, idx=i, t_abs=start_x + i) for i, v in enumerate(values)]


@pytest.fixture
def log_capture():
    """Create a LogMessageCapture instance for tests."""
    return LogMessageCapture()


@pytest.fixture
def parser() -> LogParser:
    """Create a LogParser instance for testing."""
    return LogParser()


@pytest.fixture
def aggregator() -> CombatAggregator:
    """Create a CombatAggregator with default settings."""
    return CombatAggregator()


@pytest.fixture
def parser_settings() -> ParserSettings:
    return ParserSettings()


@pytest.fixture
def analysis_settings() -> AnalysisSettings:
    return AnalysisSettings()


@pytest.fixture
def temp_log_dir():
    """Create a temporary directory for log file testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def write_log(temp_log_dir: Path) -> Callable[..., Path]:
    """Return a helper writing rows as a CSV combat log file."""

    def _write(rows: List[List[str]], name: str = "CombatLog.txt", header: bool = True) -> Path:
        log_file = temp_log_dir / name
        with open(log_file, 'w', encoding='utf-8', newline='') as f:
            writer = csv.writer(f)
            if header:
                writer.writerow(HEADER_ROW)
            writer.writerows(rows)
        return log_file

    return _write


@pytest.fixture
def sample_combat_log(write_log) -> Path:
    """Create a combat log with two targets and two pulls on the first one."""
    rows = [
        make_row(0.1, 100, skill="Slash", target="Dummy"),
        make_row(1.2, 200, skill="Slash", target="Dummy", crit="1"),
        make_row(1.9, 150, skill="Slash", target="Dummy"),
        make_row(2.5, 300, skill="Fireball", target="Dummy", hit_type="HeavyAttack"),
        make_row(3.0, 80, skill="Slash", target="Goblin", caster="Ally"),
        make_row(14.0, 400, skill="Fireball", target="Dummy", crit="1", double="1"),
        make_row(15.0, 120, skill="Slash", target="Dummy"),
        make_row(15.5, 0, skill="Slash", target="Dummy"),
        make_row(16.0, 50, skill="Heal", target="Hero", log_type="HealDone"),
    ]
    return write_log(rows)
