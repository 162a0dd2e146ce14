"""Record parsing logic for TL combat logs.

This module turns one positional CSV record of a combat log into a
normalized DamageEvent, decoding the log's fixed-width timestamp and deriving
the heavy-attack flag along the way.
"""

import logging
import math
import re
from datetime import datetime, timezone
from typing import Optional, Sequence

from .models import UNKNOWN_SKILL, UNKNOWN_TARGET, DamageEvent


logger = logging.getLogger(__name__)

# Positional columns of a combat log record
COL_TIMESTAMP = 0
COL_LOG_TYPE = 1
COL_SKILL_NAME = 2
COL_SKILL_ID = 3
COL_DAMAGE = 4
COL_HIT_CRITICAL = 5
COL_HIT_DOUBLE = 6
COL_HIT_TYPE = 7
COL_CASTER_NAME = 8
COL_TARGET_NAME = 9
RECORD_COLUMNS = 10

DAMAGE_LOG_TYPE = "DamageDone"
HEADER_PREFIX = "CombatLogVersion"
FLAG_SET = "1"

HEAVY_KEYWORDS = frozenset({"heavy", "heavyattack", "heavy_attack"})
# HitType can be emitted as a bitmask; heavy attacks carry the 0b100 flag.
# Only confirmed against the logs seen so far.
HEAVY_BIT = 1 << 2

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class LogParser:
    """Normalizes raw combat log records into damage events."""

    def __init__(self) -> None:
        """Initialize the parser."""
        self.patterns = {
            # Typical format: 20251204-18:29:39:714
            'timestamp': re.compile(
                r'^(\d{4})(\d{2})(\d{2})-(\d{2}):(\d{2}):(\d{2}):(\d{3})$'
            ),
            'hit_type_separator': re.compile(r'[\s|,;]+'),
        }
        self.rows_accepted = 0
        self.rows_rejected = 0

    def parse_timestamp(self, value: Optional[str]) -> Optional[int]:
        """Decode a log timestamp into epoch milliseconds.

        Timestamps carry no zone information and are read as UTC.

        Args:
            value: Timestamp string in ``YYYYMMDD-HH:MM:SS:mmm`` format

        Returns:
            Epoch milliseconds, or None if the string is malformed or names an
            impossible date
        """
        if not value:
            return None

        match = self.patterns['timestamp'].fullmatch(value)
        if not match:
            return None

        year, month, day, hour, minute, second, millis = (int(g) for g in match.groups())
        try:
            moment = datetime(year, month, day, hour, minute, second, millis * 1000, tzinfo=timezone.utc)
        except ValueError:
            return None

        delta = moment - _EPOCH
        return delta.days * 86_400_000 + delta.seconds * 1000 + delta.microseconds // 1000

    def is_heavy_attack(self, hit_type: Optional[str], hit_double: Optional[str]) -> bool:
        """Classify a hit as a heavy attack.

        The double-hit flag wins, then keyword matching on the hit type, then
        the hit type read as a numeric bitmask.

        Args:
            hit_type: Raw HitType field (free text or a number)
            hit_double: Raw HitDouble flag field

        Returns:
            True if the hit is a heavy attack
        """
        if (hit_double or "").strip() == FLAG_SET:
            return True

        normalized = (hit_type or "").strip().lower()
        if not normalized:
            return False

        tokens = [t for t in self.patterns['hit_type_separator'].split(normalized) if t]
        if any(token in HEAVY_KEYWORDS for token in tokens):
            return True
        if "heavy" in normalized:
            return True

        try:
            numeric = float(normalized)
        except ValueError:
            return False
        if not math.isfinite(numeric):
            return False
        return (int(numeric) & HEAVY_BIT) == HEAVY_BIT

    @staticmethod
    def is_header_row(cells: Sequence[str]) -> bool:
        """Check whether a record is the leading ``CombatLogVersion`` row."""
        return bool(cells) and str(cells[0]).strip().startswith(HEADER_PREFIX)

    @staticmethod
    def parse_damage(value: Optional[str]) -> Optional[float]:
        """Parse the damage column, rejecting empty, non-finite and zero values."""
        text = (value or "").strip()
        if not text:
            return None
        try:
            damage = float(text)
        except ValueError:
            return None
        if not math.isfinite(damage) or damage == 0:
            return None
        return damage

    def parse_row(self, cells: Sequence[str]) -> Optional[DamageEvent]:
        """Parse a single positional record into a damage event.

        Args:
            cells: Fields of one CSV record

        Returns:
            DamageEvent, or None if the record is not a usable damage row
        """
        if len(cells) < RECORD_COLUMNS:
            self.rows_rejected += 1
            logger.debug("Skipping record with %d column(s)", len(cells))
            return None

        if (cells[COL_LOG_TYPE] or "").strip() != DAMAGE_LOG_TYPE:
            self.rows_rejected += 1
            return None

        damage = self.parse_damage(cells[COL_DAMAGE])
        if damage is None:
            self.rows_rejected += 1
            logger.debug("Skipping damage row with unusable damage %r", cells[COL_DAMAGE])
            return None

        self.rows_accepted += 1
        return DamageEvent(
            skill_name=(cells[COL_SKILL_NAME] or "").strip() or UNKNOWN_SKILL,
            target_name=(cells[COL_TARGET_NAME] or "").strip() or UNKNOWN_TARGET,
            damage=damage,
            caster_name=(cells[COL_CASTER_NAME] or "").strip(),
            is_crit=(cells[COL_HIT_CRITICAL] or "").strip() == FLAG_SET,
            is_heavy=self.is_heavy_attack(cells[COL_HIT_TYPE], cells[COL_HIT_DOUBLE]),
            timestamp_ms=self.parse_timestamp(cells[COL_TIMESTAMP]),
        )
