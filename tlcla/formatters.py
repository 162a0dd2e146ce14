"""Text formatting utilities for the TL combat log analyzer.

This module contains the formatting helpers used by the command-line report.
"""

from datetime import timedelta
from typing import Any, Dict, List, Optional

from .models import BurstAnalysis, ParsedLogSummary, SkillBreakdown, StabilitySeries


def format_time(time_delta) -> str:
    """Format a duration to MM:SS, or H:MM:SS past one hour.

    Args:
        time_delta: timedelta object or total seconds as float/int

    Returns:
        Formatted time string
    """
    if time_delta is None:
        return "-"
    if isinstance(time_delta, timedelta):
        total_seconds = int(time_delta.total_seconds())
    else:
        total_seconds = int(max(0, time_delta))

    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    seconds = total_seconds % 60

    if hours:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes:02d}:{seconds:02d}"


def format_integer(value: Optional[float]) -> str:
    """Format a number with thousands separators, '-' when absent."""
    if value is None:
        return "-"
    return f"{int(round(value)):,}"


def format_rate(value: Optional[float]) -> str:
    if value is None:
        return "-"
    return f"{value:.1f}%"


def format_skill_rows(skills: List[SkillBreakdown], limit: int = 10) -> List[str]:
    """Render the top skills as aligned text rows.

    Args:
        skills: Skill breakdowns sorted by damage
        limit: Maximum number of rows

    Returns:
        List of text lines
    """
    lines = [f"  {'Skill':<28} {'Damage':>12} {'Hits':>6} {'Avg':>9} {'Max':>9} {'Crit':>7} {'Heavy':>7}"]
    for skill in skills[:limit]:
        lines.append(
            f"  {skill.skill_name[:28]:<28} {format_integer(skill.total_damage):>12} "
            f"{skill.total_hits:>6} {skill.avg_hit:>9.1f} {format_integer(skill.max_hit):>9} "
            f"{format_rate(skill.crit_rate):>7} {format_rate(skill.heavy_rate):>7}"
        )
    return lines


def format_report(
    summary: ParsedLogSummary,
    scope_label: str,
    scope_stats: Dict[str, Any],
    stability: StabilitySeries,
    bursts: BurstAnalysis,
) -> str:
    """Render a plain-text report for one scope of a parsed log.

    Args:
        summary: Finalized summary
        scope_label: Human-readable scope name
        scope_stats: Stats returned by ScopeService.get_scope_stats
        stability: Stability series for the scope
        bursts: Burst analysis for the scope

    Returns:
        Multi-line report
    """
    if summary.is_empty:
        return f"{summary.file_name}: no damage events found"

    lines = [
        f"{summary.file_name}",
        f"  Character:  {summary.character_name or '-'}",
        f"  Scope:      {scope_label}",
        f"  Damage:     {format_integer(scope_stats['total_damage'])} over {scope_stats['total_events']} hit(s)",
        f"  Duration:   {format_time(scope_stats['duration_seconds'])}",
        f"  DPS:        {format_integer(scope_stats['dps'])}",
        f"  Crit rate:  {format_rate(scope_stats['crit_rate'])}",
    ]

    if stability.is_available:
        lines.append(f"  Rotation consistency: {stability.average * 100:.0f}%")
    else:
        lines.append("  Rotation consistency: unavailable")

    if bursts.windows:
        lines.append("  Burst windows:")
        for window in bursts.windows:
            lines.append(
                f"    {format_time(window.x1)} - {format_time(window.x2)}"
                f"  peak {format_integer(window.peak)} at {format_time(window.peak_x)}"
            )
    else:
        lines.append("  Burst windows: none")

    lines.append("")
    lines.extend(format_skill_rows(scope_stats['skills']))

    if summary.targets:
        lines.append("")
        lines.append(f"  {'Target':<28} {'Damage':>12} {'Hits':>6} {'Pulls':>6}")
        for target in summary.targets:
            pulls = len(summary.per_target_sessions.get(target.target_name, []))
            lines.append(
                f"  {target.target_name[:28]:<28} {format_integer(target.total_damage):>12} "
                f"{target.total_hits:>6} {pulls:>6}"
            )

    return "\n".join(lines)
