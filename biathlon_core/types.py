"""Type definitions for race events, competitors and pluggable capabilities."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import List, Optional, Protocol


class EventKind(IntEnum):
    """Event identifiers as they appear in the feed (second field of a line)."""

    REGISTRATION = 1
    START_TIME_SET = 2
    ON_START_LINE = 3
    STARTED = 4
    ON_FIRING_RANGE = 5
    SHOT = 6
    LEFT_FIRING_RANGE = 7
    ENTERED_PENALTY = 8
    LEFT_PENALTY = 9
    LAP_COMPLETED = 10
    CANNOT_CONTINUE = 11

    # Synthesized by the race system, never accepted as input
    DISQUALIFIED = 32
    FINISHED = 33


OUTBOUND_KINDS = frozenset({EventKind.DISQUALIFIED, EventKind.FINISHED})
INBOUND_KINDS = frozenset(EventKind) - OUTBOUND_KINDS


@dataclass
class Competitor:
    """Mutable per-competitor race state, created on first reference."""

    id: int
    registered: bool = False
    finished: bool = False
    disqualified: bool = False
    scheduled_start: Optional[datetime] = None
    actual_start: Optional[datetime] = None
    laps_completed: int = 0
    penalty_laps: int = 0
    # lap -> firing line -> one bool per shot (True = hit)
    shooting_stats: List[List[List[bool]]] = field(default_factory=list)
    first_event: Optional[datetime] = None
    last_event: Optional[datetime] = None
    events_count: int = 0
    finished_at: Optional[datetime] = None
    disqualified_reason: Optional[str] = None

    @property
    def terminal(self) -> bool:
        return self.finished or self.disqualified

    def hits(self) -> int:
        return sum(shot for lap in self.shooting_stats for line in lap for shot in line)

    def shots(self) -> int:
        return sum(len(line) for lap in self.shooting_stats for line in lap)


@dataclass(frozen=True)
class EventRecord:
    """One decoded feed line."""

    timestamp: str
    kind: int | str
    competitor_id: int
    parameter: str = ""


@dataclass(frozen=True)
class ShotContext:
    competitor_id: int
    lap: int
    firing_line: int
    # 0-based position of this shot within the line for the lap
    shot_index: int
    target: str


class EventSink(Protocol):
    def log_event(self, timestamp: str, message: str) -> None:
        ...


class HitPolicy(Protocol):
    def __call__(self, context: ShotContext) -> bool:
        ...


def always_hit(context: ShotContext) -> bool:
    """Default hit policy: every shot is recorded as a hit."""
    return True
