"""Exceptions raised by the race core.

Every per-event failure is a ``RaceError`` subclass. The feed reader catches
these, reports them and moves on to the next line; nothing here is fatal for
a replay. ``ConfigError`` is the only error meant to abort a run.
"""
from __future__ import annotations


class RaceError(ValueError):
    """Base class for rejected events."""

    kind = "race_error"

    def __init__(self, message: str, *, competitor_id: int | None = None):
        super().__init__(message)
        self.message = message
        self.competitor_id = competitor_id


class InvalidTimestamp(RaceError):
    kind = "invalid_timestamp"


class UnknownEventKind(RaceError):
    kind = "unknown_event_kind"


class AlreadyRegistered(RaceError):
    kind = "already_registered"


class InvalidRangeNumber(RaceError):
    kind = "invalid_range_number"


class InvalidLapIndex(RaceError):
    kind = "invalid_lap_index"


class NoPenaltyOwed(RaceError):
    kind = "no_penalty_owed"


class ConfigError(Exception):
    """Race configuration could not be read or validated."""
