"""Data models for the TL combat log analyzer.

This module contains dataclasses for the normalized damage event, the running
accumulators mutated during a parse pass, and the immutable records handed to
callers once a summary has been finalized.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Tuple


UNKNOWN_SKILL = "Unknown skill"
UNKNOWN_TARGET = "Unknown target"


def _merge_min(current: Optional[float], value: float) -> float:
    return value if current is None else min(current, value)


def _merge_max(current: Optional[float], value: float) -> float:
    return value if current is None else max(current, value)


@dataclass(frozen=True, slots=True)
class DamageEvent:
    """Represents a single normalized DamageDone record."""
    skill_name: str
    target_name: str
    damage: float
    caster_name: str = ""
    is_crit: bool = False
    is_heavy: bool = False
    timestamp_ms: Optional[int] = None


@dataclass(slots=True)
class StatAccumulator:
    """Running hit statistics for one skill.

    Shared by the global skill table, the per-target skill tables and the
    per-session skill tables. Crit and normal hits partition ``hits``; heavy
    hits overlap with both.
    """
    skill_name: str
    order: int = 0
    hits: int = 0
    total_damage: float = 0.0
    sum_hit: float = 0.0
    min_hit: Optional[float] = None
    max_hit: Optional[float] = None
    crit_hits: int = 0
    crit_damage: float = 0.0
    crit_min: Optional[float] = None
    crit_max: Optional[float] = None
    normal_hits: int = 0
    normal_damage: float = 0.0
    normal_min: Optional[float] = None
    normal_max: Optional[float] = None
    heavy_hits: int = 0
    heavy_damage: float = 0.0
    heavy_min: Optional[float] = None
    heavy_max: Optional[float] = None

    def record(self, damage: float, is_crit: bool, is_heavy: bool) -> None:
        """Fold one hit into the accumulator.

        Args:
            damage: Damage dealt by the hit
            is_crit: Whether the hit was a critical hit
            is_heavy: Whether the hit was classified as a heavy attack
        """
        self.hits += 1
        self.total_damage += damage
        self.sum_hit += damage
        self.min_hit = _merge_min(self.min_hit, damage)
        self.max_hit = _merge_max(self.max_hit, damage)

        if is_crit:
            self.crit_hits += 1
            self.crit_damage += damage
            self.crit_min = _merge_min(self.crit_min, damage)
            self.crit_max = _merge_max(self.crit_max, damage)
        else:
            self.normal_hits += 1
            self.normal_damage += damage
            self.normal_min = _merge_min(self.normal_min, damage)
            self.normal_max = _merge_max(self.normal_max, damage)

        if is_heavy:
            self.heavy_hits += 1
            self.heavy_damage += damage
            self.heavy_min = _merge_min(self.heavy_min, damage)
            self.heavy_max = _merge_max(self.heavy_max, damage)


@dataclass(slots=True)
class TargetAccumulator:
    """Coarse running totals keyed only by target name."""
    target_name: str
    order: int = 0
    hits: int = 0
    total_damage: float = 0.0
    sum_hit: float = 0.0
    max_hit: Optional[float] = None
    crit_hits: int = 0

    def record(self, damage: float, is_crit: bool) -> None:
        self.hits += 1
        self.total_damage += damage
        self.sum_hit += damage
        self.max_hit = _merge_max(self.max_hit, damage)
        if is_crit:
            self.crit_hits += 1


@dataclass(slots=True)
class TimelineSkillAccumulator:
    """Per-skill contribution to one target inside one timeline second."""
    skill_name: str
    damage: float = 0.0
    hits: int = 0
    crit_hits: int = 0
    heavy_hits: int = 0


@dataclass(slots=True)
class BucketAccumulator:
    """Damage accumulated inside one 1-second timeline bucket."""
    total_damage: float = 0.0
    per_target: Dict[str, float] = field(default_factory=dict)
    # (target, skill) -> contribution
    per_target_skills: Dict[Tuple[str, str], TimelineSkillAccumulator] = field(default_factory=dict)

    def record(self, event: DamageEvent) -> None:
        """Fold one timestamped event into the bucket."""
        target = event.target_name
        self.total_damage += event.damage
        self.per_target[target] = self.per_target.get(target, 0.0) + event.damage

        key = (target, event.skill_name)
        contribution = self.per_target_skills.get(key)
        if contribution is None:
            contribution = TimelineSkillAccumulator(skill_name=event.skill_name)
            self.per_target_skills[key] = contribution
        contribution.damage += event.damage
        contribution.hits += 1
        if event.is_crit:
            contribution.crit_hits += 1
        if event.is_heavy:
            contribution.heavy_hits += 1


@dataclass(slots=True)
class SessionAccumulator:
    """One pull against a single target."""
    id: int
    start_ms: int
    end_ms: int
    total_damage: float = 0.0
    total_events: int = 0
    crit_hits: int = 0
    skills: Dict[str, StatAccumulator] = field(default_factory=dict)

    def record(self, event: DamageEvent) -> None:
        self.total_damage += event.damage
        self.total_events += 1
        if event.is_crit:
            self.crit_hits += 1

        skill = self.skills.get(event.skill_name)
        if skill is None:
            skill = StatAccumulator(skill_name=event.skill_name, order=len(self.skills))
            self.skills[event.skill_name] = skill
        skill.record(event.damage, event.is_crit, event.is_heavy)


class _Record:
    """Mixin giving output records a plain-data view."""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SkillBreakdown(_Record):
    """Finalized, presentation-ready statistics for one skill."""
    skill_name: str
    total_hits: int
    total_damage: int
    max_hit: Optional[int]
    min_hit: Optional[int]
    avg_hit: float
    crit_hits: int
    crit_rate: float
    heavy_hits: int
    heavy_damage: int
    heavy_rate: float
    normal_hits: int
    normal_damage: Optional[int]
    normal_min_hit: Optional[int]
    normal_max_hit: Optional[int]
    normal_avg_hit: Optional[float]
    crit_damage: Optional[int]
    crit_min_hit: Optional[int]
    crit_max_hit: Optional[int]
    crit_avg_hit: Optional[float]
    heavy_min_hit: Optional[int]
    heavy_max_hit: Optional[int]
    heavy_avg_hit: Optional[float]


@dataclass(frozen=True)
class TargetBreakdown(_Record):
    """Finalized statistics for one target."""
    target_name: str
    total_hits: int
    total_damage: int
    max_hit: Optional[int]
    avg_hit: float
    crit_hits: int
    crit_rate: float


@dataclass(frozen=True)
class TimelineSkillContribution(_Record):
    skill_name: str
    damage: int
    hits: int
    crit_hits: int
    heavy_hits: int


@dataclass(frozen=True)
class DamageTimelineBucket(_Record):
    """One second of the gap-free damage timeline."""
    timestamp_ms: int
    elapsed_seconds: float
    total_damage: int
    per_target: Dict[str, int] = field(default_factory=dict)
    skills: Optional[Dict[str, List[TimelineSkillContribution]]] = None


@dataclass(frozen=True)
class TargetSessionSummary(_Record):
    """Finalized statistics for one pull."""
    session_id: int
    start_ms: int
    end_ms: int
    start_elapsed: float
    end_elapsed: float
    duration_seconds: float
    total_damage: int
    total_events: int
    crit_hits: int
    crit_rate: float
    skills: List[SkillBreakdown] = field(default_factory=list)


@dataclass(frozen=True)
class ParsedLogSummary(_Record):
    """Terminal output of one parse invocation."""
    file_path: str
    file_name: str
    character_name: Optional[str] = None
    total_events: int = 0
    duration_seconds: Optional[float] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    total_damage: int = 0
    dps: Optional[float] = None
    crit_rate: Optional[float] = None
    skills: List[SkillBreakdown] = field(default_factory=list)
    targets: List[TargetBreakdown] = field(default_factory=list)
    per_target_skills: Dict[str, List[SkillBreakdown]] = field(default_factory=dict)
    per_target_sessions: Dict[str, List[TargetSessionSummary]] = field(default_factory=dict)
    timeline: List[DamageTimelineBucket] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """True when the log contained no usable damage rows."""
        return self.total_events == 0

    def get_target(self, target_name: str) -> Optional[TargetBreakdown]:
        for target in self.targets:
            if target.target_name == target_name:
                return target
        return None


@dataclass(frozen=True, slots=True)
class SeriesPoint:
    """One sample of a per-second DPS series.

    ``x`` is the display position in seconds, ``idx`` the index of the
    originating timeline bucket and ``t_abs`` its elapsed second.
    """
    x: float
    value: float
    idx: int
    t_abs: float


@dataclass(frozen=True)
class DpsSeries:
    points: List[SeriesPoint] = field(default_factory=list)
    session_break_xs: List[float] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class StabilityPoint:
    x: float
    idx: int
    stability: float


@dataclass(frozen=True)
class StabilitySeries(_Record):
    """Rotation-consistency index over a DPS series."""
    points: List[StabilityPoint] = field(default_factory=list)
    average: Optional[float] = None
    segment_averages: List[float] = field(default_factory=list)

    @property
    def is_available(self) -> bool:
        return bool(self.points)


@dataclass(frozen=True, slots=True)
class BurstWindow:
    """A detected high-intensity window in display seconds."""
    x1: float
    x2: float
    peak_x: float
    peak: float
    score: float = 0.0


@dataclass(frozen=True)
class BurstAnalysis(_Record):
    """Burst windows plus the continuous intensity signal keyed by bucket index."""
    windows: List[BurstWindow] = field(default_factory=list)
    intensity_by_idx: Dict[int, int] = field(default_factory=dict)

    def is_in_burst(self, x: float) -> bool:
        return any(w.x1 <= x <= w.x2 for w in self.windows)

    def display_intensity(self, point: SeriesPoint) -> int:
        """Return the intensity percentage to show for a sample.

        Samples inside a retained burst window always read 100%.

        Args:
            point: Sample of the analysed series

        Returns:
            Integer percentage in [0, 100]
        """
        if self.is_in_burst(point.x):
            return 100
        return self.intensity_by_idx.get(point.idx, 0)
