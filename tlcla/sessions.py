"""Gap-based pull segmentation.

Each target carries an independent two-state machine (no session / in
session). The machine is driven purely by event arrival: a hit opens a new
pull when the target has none yet or when the time since the latest hit of
its current pull exceeds the session gap.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .config import DEFAULT_PARSER_SETTINGS
from .models import DamageEvent, SessionAccumulator


@dataclass(slots=True)
class TargetSessionsState:
    """Segmentation state for a single target."""
    sessions: List[SessionAccumulator] = field(default_factory=list)
    current: Optional[SessionAccumulator] = None

    @property
    def in_session(self) -> bool:
        return self.current is not None


class SessionSegmenter:
    """Partitions each target's timestamped events into pulls."""

    def __init__(self, session_gap_ms: int = DEFAULT_PARSER_SETTINGS.session_gap_ms) -> None:
        """Initialize the segmenter.

        Args:
            session_gap_ms: Gap (exclusive) after which a new pull is opened
        """
        self.session_gap_ms = session_gap_ms
        self.states: Dict[str, TargetSessionsState] = {}

    def record(self, event: DamageEvent) -> Optional[SessionAccumulator]:
        """Route a timestamped event into its target's current pull.

        Args:
            event: Damage event; events without a timestamp are ignored

        Returns:
            The session the event was counted in, or None if it had no timestamp
        """
        ts = event.timestamp_ms
        if ts is None:
            return None

        state = self.states.get(event.target_name)
        if state is None:
            state = TargetSessionsState()
            self.states[event.target_name] = state

        current = state.current
        # Measured from the latest hit of the pull, not the previous row
        if current is None or ts - current.end_ms > self.session_gap_ms:
            current = SessionAccumulator(id=len(state.sessions) + 1, start_ms=ts, end_ms=ts)
            state.sessions.append(current)
            state.current = current
        else:
            # Out-of-order rows never shrink a pull
            current.end_ms = max(current.end_ms, ts)

        current.record(event)
        return current

    def get_sessions(self, target_name: str) -> List[SessionAccumulator]:
        """Return the surfaced pulls for a target.

        Pulls without damage or events are dropped.

        Args:
            target_name: Target to look up

        Returns:
            Time-ordered list of pulls (may be empty)
        """
        state = self.states.get(target_name)
        if state is None:
            return []
        return [s for s in state.sessions if s.total_damage > 0 and s.total_events > 0]

    def targets(self) -> List[str]:
        """Targets with segmentation state, in first-seen order."""
        return list(self.states.keys())
