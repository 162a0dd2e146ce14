"""Online aggregation of damage events.

This module provides the CombatAggregator class that consumes normalized
events once, in file order, and keeps every grouping the summary needs:
skills, targets, per-target skills, 1-second timeline buckets, pulls and
caster totals.
"""

from typing import Dict, Iterable, Optional, Tuple

from .config import DEFAULT_PARSER_SETTINGS, ParserSettings
from .models import (
    BucketAccumulator,
    DamageEvent,
    StatAccumulator,
    TargetAccumulator,
)
from .sessions import SessionSegmenter


BUCKET_MS = 1000


class CombatAggregator:
    """Single-pass accumulator for one log file.

    Every container is created empty and only grows while events are added;
    results are read once by the summary finalizer. Instances are never
    shared between parses.
    """

    def __init__(self, settings: Optional[ParserSettings] = None) -> None:
        """Initialize the aggregator.

        Args:
            settings: Parser settings (session gap), defaults when omitted
        """
        self.settings = settings or DEFAULT_PARSER_SETTINGS

        self.total_events = 0
        self.total_damage = 0.0
        self.crit_hits = 0
        self.first_timestamp: Optional[int] = None
        self.last_timestamp: Optional[int] = None

        self.skills: Dict[str, StatAccumulator] = {}
        self.targets: Dict[str, TargetAccumulator] = {}
        # (target, skill) -> accumulator
        self.target_skills: Dict[Tuple[str, str], StatAccumulator] = {}
        # floor-to-second epoch ms -> bucket
        self.buckets: Dict[int, BucketAccumulator] = {}
        self.first_bucket_ts: Optional[int] = None
        self.last_bucket_ts: Optional[int] = None
        self.segmenter = SessionSegmenter(self.settings.session_gap_ms)
        self.caster_damage: Dict[str, float] = {}

    def add_event(self, event: DamageEvent) -> None:
        """Fold one event into every accumulator group.

        Args:
            event: Normalized damage event
        """
        damage = event.damage
        self.total_events += 1
        self.total_damage += damage
        if event.is_crit:
            self.crit_hits += 1

        skill = self.skills.get(event.skill_name)
        if skill is None:
            skill = StatAccumulator(skill_name=event.skill_name, order=len(self.skills))
            self.skills[event.skill_name] = skill
        skill.record(damage, event.is_crit, event.is_heavy)

        target = self.targets.get(event.target_name)
        if target is None:
            target = TargetAccumulator(target_name=event.target_name, order=len(self.targets))
            self.targets[event.target_name] = target
        target.record(damage, event.is_crit)

        key = (event.target_name, event.skill_name)
        target_skill = self.target_skills.get(key)
        if target_skill is None:
            target_skill = StatAccumulator(skill_name=event.skill_name, order=len(self.target_skills))
            self.target_skills[key] = target_skill
        target_skill.record(damage, event.is_crit, event.is_heavy)

        if event.timestamp_ms is not None:
            self._record_timestamped(event)

        if event.caster_name:
            self.caster_damage[event.caster_name] = self.caster_damage.get(event.caster_name, 0.0) + damage

    def add_events(self, events: Iterable[DamageEvent]) -> None:
        for event in events:
            self.add_event(event)

    def _record_timestamped(self, event: DamageEvent) -> None:
        ts = event.timestamp_ms
        if self.first_timestamp is None or ts < self.first_timestamp:
            self.first_timestamp = ts
        if self.last_timestamp is None or ts > self.last_timestamp:
            self.last_timestamp = ts

        bucket_key = (ts // BUCKET_MS) * BUCKET_MS
        bucket = self.buckets.get(bucket_key)
        if bucket is None:
            bucket = BucketAccumulator()
            self.buckets[bucket_key] = bucket
        bucket.record(event)

        if self.first_bucket_ts is None or bucket_key < self.first_bucket_ts:
            self.first_bucket_ts = bucket_key
        if self.last_bucket_ts is None or bucket_key > self.last_bucket_ts:
            self.last_bucket_ts = bucket_key

        self.segmenter.record(event)

    def get_character_name(self) -> Optional[str]:
        """Infer the active character as the caster with the most damage.

        Ties go to the caster seen first.

        Returns:
            Caster name, or None if no caster names were observed
        """
        best_name: Optional[str] = None
        best_damage = -float('inf')
        for name, total in self.caster_damage.items():
            if total > best_damage:
                best_damage = total
                best_name = name
        return best_name

    def get_duration_seconds(self) -> Optional[float]:
        """Elapsed time between the first and last timestamped event.

        Returns:
            Duration in seconds, or None when it is not positive
        """
        if self.first_timestamp is None or self.last_timestamp is None:
            return None
        if self.last_timestamp <= self.first_timestamp:
            return None
        return (self.last_timestamp - self.first_timestamp) / 1000
