"""Summary finalization and timeline building.

Converts the accumulators of a finished CombatAggregator into the immutable,
rounded records of a ParsedLogSummary. Rounding follows the presentation
convention of the log viewer: totals and extrema to whole numbers, averages and
rates to one decimal place, half values rounded up.
"""

import math
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .aggregator import BUCKET_MS, CombatAggregator
from .models import (
    BucketAccumulator,
    DamageTimelineBucket,
    ParsedLogSummary,
    SkillBreakdown,
    StatAccumulator,
    TargetAccumulator,
    TargetBreakdown,
    TargetSessionSummary,
    TimelineSkillAccumulator,
    TimelineSkillContribution,
)
from .sessions import SessionSegmenter


_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from negative infinity."""
    return int(math.floor(value + 0.5))


def round_1(value: float) -> float:
    """Round to one decimal place, halves up."""
    return math.floor(value * 10 + 0.5) / 10


def round_optional(value: Optional[float]) -> Optional[int]:
    return None if value is None else round_half_up(value)


def _average(total: float, count: int) -> Optional[float]:
    return round_1(total / count) if count > 0 else None


def _rate(part: int, count: int) -> float:
    return round_1(part / count * 100) if count > 0 else 0.0


def iso_timestamp(timestamp_ms: Optional[int]) -> Optional[str]:
    """Format epoch milliseconds as an ISO-8601 UTC string with a ``Z`` suffix."""
    if timestamp_ms is None:
        return None
    moment = _EPOCH + timedelta(milliseconds=timestamp_ms)
    return f"{moment.strftime('%Y-%m-%dT%H:%M:%S')}.{timestamp_ms % 1000:03d}Z"


def to_skill_breakdown(acc: StatAccumulator) -> SkillBreakdown:
    """Convert a skill accumulator into its presentation record.

    Extrema and averages of an empty crit/normal/heavy class are reported as
    None rather than leaking an unset value.

    Args:
        acc: Finished skill accumulator

    Returns:
        SkillBreakdown record
    """
    return SkillBreakdown(
        skill_name=acc.skill_name,
        total_hits=acc.hits,
        total_damage=round_half_up(acc.total_damage),
        max_hit=round_optional(acc.max_hit),
        min_hit=round_optional(acc.min_hit),
        avg_hit=_average(acc.sum_hit, acc.hits) or 0.0,
        crit_hits=acc.crit_hits,
        crit_rate=_rate(acc.crit_hits, acc.hits),
        heavy_hits=acc.heavy_hits,
        heavy_damage=round_half_up(acc.heavy_damage),
        heavy_rate=_rate(acc.heavy_hits, acc.hits),
        normal_hits=acc.normal_hits,
        normal_damage=round_half_up(acc.normal_damage) if acc.normal_hits > 0 else None,
        normal_min_hit=round_optional(acc.normal_min),
        normal_max_hit=round_optional(acc.normal_max),
        normal_avg_hit=_average(acc.normal_damage, acc.normal_hits),
        crit_damage=round_half_up(acc.crit_damage) if acc.crit_hits > 0 else None,
        crit_min_hit=round_optional(acc.crit_min),
        crit_max_hit=round_optional(acc.crit_max),
        crit_avg_hit=_average(acc.crit_damage, acc.crit_hits),
        heavy_min_hit=round_optional(acc.heavy_min),
        heavy_max_hit=round_optional(acc.heavy_max),
        heavy_avg_hit=_average(acc.heavy_damage, acc.heavy_hits),
    )


def to_target_breakdown(acc: TargetAccumulator) -> TargetBreakdown:
    return TargetBreakdown(
        target_name=acc.target_name,
        total_hits=acc.hits,
        total_damage=round_half_up(acc.total_damage),
        max_hit=round_optional(acc.max_hit),
        avg_hit=_average(acc.sum_hit, acc.hits) or 0.0,
        crit_hits=acc.crit_hits,
        crit_rate=_rate(acc.crit_hits, acc.hits),
    )


def build_skill_list(accumulators: List[StatAccumulator]) -> List[SkillBreakdown]:
    """Finalize skills sorted by damage descending, first-seen order on ties."""
    ranked = sorted(accumulators, key=lambda a: (-round_half_up(a.total_damage), a.order))
    return [to_skill_breakdown(a) for a in ranked]


def build_target_list(accumulators: List[TargetAccumulator]) -> List[TargetBreakdown]:
    ranked = sorted(accumulators, key=lambda a: (-round_half_up(a.total_damage), a.order))
    return [to_target_breakdown(a) for a in ranked]


def build_per_target_skills(
    target_skills: Dict[Tuple[str, str], StatAccumulator],
) -> Dict[str, List[SkillBreakdown]]:
    grouped: Dict[str, List[StatAccumulator]] = {}
    for (target_name, _skill_name), acc in target_skills.items():
        grouped.setdefault(target_name, []).append(acc)
    return {target: build_skill_list(accs) for target, accs in grouped.items()}


def build_sessions(
    segmenter: SessionSegmenter, session_base_ms: Optional[int]
) -> Dict[str, List[TargetSessionSummary]]:
    """Finalize every target's pulls.

    Args:
        segmenter: Segmenter holding the per-target pull state
        session_base_ms: First timestamp of the log, origin of elapsed times

    Returns:
        Mapping of target name to its surfaced pulls; targets without any are omitted
    """
    result: Dict[str, List[TargetSessionSummary]] = {}
    if session_base_ms is None:
        return result

    for target_name in segmenter.targets():
        summaries = []
        for s in segmenter.get_sessions(target_name):
            duration = (s.end_ms - s.start_ms) / 1000 if s.end_ms > s.start_ms else 0.0
            summaries.append(TargetSessionSummary(
                session_id=s.id,
                start_ms=s.start_ms,
                end_ms=s.end_ms,
                start_elapsed=(s.start_ms - session_base_ms) / 1000,
                end_elapsed=(s.end_ms - session_base_ms) / 1000,
                duration_seconds=duration,
                total_damage=round_half_up(s.total_damage),
                total_events=s.total_events,
                crit_hits=s.crit_hits,
                crit_rate=_rate(s.crit_hits, s.total_events),
                skills=build_skill_list(list(s.skills.values())),
            ))
        if summaries:
            result[target_name] = summaries
    return result


def _finalize_bucket_skills(
    per_target_skills: Dict[Tuple[str, str], TimelineSkillAccumulator],
) -> Optional[Dict[str, List[TimelineSkillContribution]]]:
    grouped: Dict[str, List[TimelineSkillAccumulator]] = {}
    for (target_name, _skill_name), contribution in per_target_skills.items():
        grouped.setdefault(target_name, []).append(contribution)

    skills = {}
    for target_name, contributions in grouped.items():
        contributions.sort(key=lambda c: c.damage, reverse=True)
        skills[target_name] = [
            TimelineSkillContribution(
                skill_name=c.skill_name,
                damage=round_half_up(c.damage),
                hits=c.hits,
                crit_hits=c.crit_hits,
                heavy_hits=c.heavy_hits,
            )
            for c in contributions
        ]
    return skills or None


def build_timeline(
    buckets: Dict[int, BucketAccumulator],
    first_bucket_ts: Optional[int],
    last_bucket_ts: Optional[int],
) -> List[DamageTimelineBucket]:
    """Expand sparse per-second buckets into a gap-free 1 Hz series.

    Args:
        buckets: Sparse mapping of bucket start (epoch ms) to accumulated damage
        first_bucket_ts: Earliest bucket start observed
        last_bucket_ts: Latest bucket start observed

    Returns:
        One bucket per second in ``[first_bucket_ts, last_bucket_ts]``
    """
    timeline: List[DamageTimelineBucket] = []
    if first_bucket_ts is None or last_bucket_ts is None:
        return timeline

    for ts in range(first_bucket_ts, last_bucket_ts + 1, BUCKET_MS):
        bucket = buckets.get(ts)
        if bucket is None:
            timeline.append(DamageTimelineBucket(
                timestamp_ms=ts,
                elapsed_seconds=(ts - first_bucket_ts) / 1000,
                total_damage=0,
            ))
            continue

        timeline.append(DamageTimelineBucket(
            timestamp_ms=ts,
            elapsed_seconds=(ts - first_bucket_ts) / 1000,
            total_damage=round_half_up(bucket.total_damage),
            per_target={name: round_half_up(value) for name, value in bucket.per_target.items()},
            skills=_finalize_bucket_skills(bucket.per_target_skills),
        ))
    return timeline


def empty_summary(file_path: str) -> ParsedLogSummary:
    """Summary of a log that held no usable damage rows."""
    return ParsedLogSummary(file_path=file_path, file_name=Path(file_path).name)


def finalize_summary(aggregator: CombatAggregator, file_path: str) -> ParsedLogSummary:
    """Build the terminal summary of a parse pass.

    Args:
        aggregator: Aggregator that has consumed every event of the file
        file_path: Path of the parsed log

    Returns:
        Immutable ParsedLogSummary
    """
    if aggregator.total_events == 0:
        return empty_summary(file_path)

    duration = aggregator.get_duration_seconds()
    dps = round_1(aggregator.total_damage / duration) if duration else None

    return ParsedLogSummary(
        file_path=file_path,
        file_name=Path(file_path).name,
        character_name=aggregator.get_character_name(),
        total_events=aggregator.total_events,
        duration_seconds=round_1(duration) if duration is not None else None,
        start_time=iso_timestamp(aggregator.first_timestamp),
        end_time=iso_timestamp(aggregator.last_timestamp),
        total_damage=round_half_up(aggregator.total_damage),
        dps=dps,
        crit_rate=_rate(aggregator.crit_hits, aggregator.total_events),
        skills=build_skill_list(list(aggregator.skills.values())),
        targets=build_target_list(list(aggregator.targets.values())),
        per_target_skills=build_per_target_skills(aggregator.target_skills),
        per_target_sessions=build_sessions(aggregator.segmenter, aggregator.first_timestamp),
        timeline=build_timeline(aggregator.buckets, aggregator.first_bucket_ts, aggregator.last_bucket_ts),
    )
