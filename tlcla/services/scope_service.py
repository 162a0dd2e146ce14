"""Scope selection service.

This module resolves the statistics and analytics of the currently selected
scope of a parsed log: the whole log, one target, or one pull of a target.
"""

from typing import Any, Dict, List, Optional

from ..analysis import analyze_stability, build_dps_series, detect_bursts
from ..config import AnalysisSettings, DEFAULT_ANALYSIS_SETTINGS
from ..models import (
    BurstAnalysis,
    DpsSeries,
    ParsedLogSummary,
    StabilitySeries,
    TargetSessionSummary,
)


class ScopeService:
    """Compute scope-restricted stats, DPS series, stability and bursts.

    Scopes:
    - overall: no target selected
    - target: all pulls of one target
    - session: one pull of the selected target

    This service is pure Python with no UI dependencies and is fully testable.
    """

    def __init__(self, summary: ParsedLogSummary, settings: Optional[AnalysisSettings] = None) -> None:
        """Initialize the scope service.

        Args:
            summary: Finalized log summary
            settings: Analysis settings for the stability and burst passes
        """
        self.summary = summary
        self.settings = settings or DEFAULT_ANALYSIS_SETTINGS
        self.selected_target: Optional[str] = None
        self.selected_session_id: Optional[int] = None

    def select_target(self, target_name: Optional[str]) -> None:
        """Select a target, or None for the overall scope.

        Clears any selected pull.

        Args:
            target_name: Target name present in the summary

        Raises:
            ValueError: If the target is not in the summary
        """
        if target_name is not None and self.summary.get_target(target_name) is None:
            raise ValueError(f"Unknown target: {target_name}")
        self.selected_target = target_name
        self.selected_session_id = None

    def select_session(self, session_id: Optional[int]) -> None:
        """Select a pull of the selected target, or None for all pulls.

        Args:
            session_id: Pull id of the selected target

        Raises:
            ValueError: If no target is selected or the pull does not exist
        """
        if session_id is None:
            self.selected_session_id = None
            return
        if self.selected_target is None:
            raise ValueError("Select a target before selecting a session")
        if not any(s.session_id == session_id for s in self.get_target_sessions()):
            raise ValueError(f"Unknown session {session_id} for target {self.selected_target}")
        self.selected_session_id = session_id

    def get_target_sessions(self) -> List[TargetSessionSummary]:
        if self.selected_target is None:
            return []
        return self.summary.per_target_sessions.get(self.selected_target, [])

    def get_active_session(self) -> Optional[TargetSessionSummary]:
        for session in self.get_target_sessions():
            if session.session_id == self.selected_session_id:
                return session
        return None

    def get_scope_stats(self) -> Dict[str, Any]:
        """Get totals for the selected scope.

        Returns:
            Dict with keys:
            - total_damage: Damage in scope
            - total_events: Hits in scope
            - duration_seconds: Duration used for DPS (None if unknown)
            - dps: Damage per second (None when duration is not positive)
            - crit_rate: Crit percentage (None when unknown)
            - skills: SkillBreakdown list for the scope
        """
        summary = self.summary
        if self.selected_target is None:
            return {
                'total_damage': summary.total_damage,
                'total_events': summary.total_events,
                'duration_seconds': summary.duration_seconds,
                'dps': summary.dps,
                'crit_rate': summary.crit_rate,
                'skills': summary.skills,
            }

        active = self.get_active_session()
        if active is not None:
            dps = active.total_damage / active.duration_seconds if active.duration_seconds > 0 else None
            return {
                'total_damage': active.total_damage,
                'total_events': active.total_events,
                'duration_seconds': active.duration_seconds,
                'dps': dps,
                'crit_rate': active.crit_rate,
                'skills': active.skills,
            }

        target = summary.get_target(self.selected_target)
        skills = summary.per_target_skills.get(self.selected_target, [])
        sessions = self.get_target_sessions()
        if sessions:
            # Target totals stay authoritative; pulls only provide the active time
            session_damage = sum(s.total_damage for s in sessions)
            session_events = sum(s.total_events for s in sessions)
            session_duration = sum(s.duration_seconds for s in sessions)
            session_crits = sum(s.crit_hits for s in sessions)

            total_damage = target.total_damage if target else session_damage
            total_events = target.total_hits if target else session_events
            duration = session_duration if session_duration > 0 else summary.duration_seconds
            if total_events > 0:
                crit_rate = session_crits / total_events * 100
            else:
                crit_rate = target.crit_rate if target else None
        else:
            total_damage = target.total_damage if target else 0
            total_events = target.total_hits if target else 0
            duration = summary.duration_seconds
            crit_rate = target.crit_rate if target else None

        return {
            'total_damage': total_damage,
            'total_events': total_events,
            'duration_seconds': duration,
            'dps': total_damage / duration if duration and duration > 0 else None,
            'crit_rate': crit_rate,
            'skills': skills,
        }

    def get_dps_series(self) -> DpsSeries:
        """Get the per-second DPS series of the selected scope."""
        return build_dps_series(
            self.summary,
            target_name=self.selected_target,
            session_id=self.selected_session_id,
            settings=self.settings,
        )

    def get_stability(self) -> StabilitySeries:
        return analyze_stability(self.get_dps_series().points, self.settings)

    def get_bursts(self) -> BurstAnalysis:
        return detect_bursts(self.get_dps_series().points, self.settings)
