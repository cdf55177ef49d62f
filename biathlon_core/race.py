"""Race state machine: replays timed events against per-competitor state.

This module implements the decision logic for biathlon-style races: start
windows, shooting penalties, lap completion, finish and disqualification.
It performs no file or network I/O; observable output goes through an injected
event sink.

Architecture:
- RaceSystem owns the competitor registry (id -> Competitor) and the race-wide
  current lap
- process_event() is the single entry point; it parses the timestamp, looks up
  or creates the competitor and dispatches on the event kind
- Handlers validate first and mutate second, so a raised RaceError leaves the
  competitor untouched
- Finished (33) and Disqualified (32) are synthesized here and rendered through
  the same sink as echoed events

Key concepts:
- shooting_stats: lap -> firing line -> list of hit/miss booleans
- Five shots per range visit is a fixed rule; LeftFiringRange charges one
  penalty lap per shot not recorded as a hit
- lap_tracking: "competitor" indexes shooting by the competitor's own completed
  laps, "race" by the furthest lap completed by anyone (legacy feed behaviour)
- An empty lap entry in shooting_stats means the range was not visited on that
  lap; it only pads the list so later laps keep their index
- Terminal competitors (finished/disqualified) still accept events

Event kinds:
- 1 Registration, 2 StartTimeSet, 3 OnStartLine, 4 Started
- 5 OnFiringRange, 6 Shot, 7 LeftFiringRange
- 8 EnteredPenalty, 9 LeftPenalty
- 10 LapCompleted, 11 CannotContinue
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, List, Literal

from .errors import (
    AlreadyRegistered,
    InvalidLapIndex,
    InvalidRangeNumber,
    NoPenaltyOwed,
    UnknownEventKind,
)
from .sinks import ConsoleSink
from .types import (
    OUTBOUND_KINDS,
    Competitor,
    EventKind,
    EventSink,
    HitPolicy,
    ShotContext,
    always_hit,
)
from .validation import RaceConfig, format_clock, parse_clock

logger = logging.getLogger(__name__)

SHOTS_PER_RANGE = 5

LapTracking = Literal["competitor", "race"]


class RaceSystem:
    """Sequential race state machine for one feed."""

    def __init__(
        self,
        config: RaceConfig,
        sink: EventSink | None = None,
        hit_policy: HitPolicy = always_hit,
        lap_tracking: LapTracking = "competitor",
    ):
        if lap_tracking not in ("competitor", "race"):
            raise ValueError(f"lap_tracking must be 'competitor' or 'race', got {lap_tracking!r}")
        self.config = config
        self.sink: EventSink = sink if sink is not None else ConsoleSink()
        self.hit_policy = hit_policy
        self.lap_tracking = lap_tracking
        self.competitors: Dict[int, Competitor] = {}
        # Furthest lap completed by any competitor so far
        self.current_lap = 0

    # ------------------------------------------------------------------ #
    # Entry point
    # ------------------------------------------------------------------ #

    def process_event(
        self,
        timestamp: str,
        kind: int | str | EventKind,
        competitor_id: int,
        parameter: str = "",
    ) -> None:
        """Apply one feed event.

        Args:
            timestamp: Event time as hh:mm:ss.mmm
            kind: Inbound event kind (1-11)
            competitor_id: Competitor the event refers to
            parameter: Kind-dependent extra text (start time, range, target, reason)

        Raises:
            InvalidTimestamp: timestamp (or StartTimeSet parameter) is malformed
            UnknownEventKind: kind is not one of the inbound kinds
            AlreadyRegistered, InvalidRangeNumber, InvalidLapIndex, NoPenaltyOwed:
                the event breaks a race rule; state is left unchanged
        """
        t = parse_clock(timestamp)
        timestamp = format_clock(t)
        comp = self.get_competitor(competitor_id)

        try:
            event_kind = EventKind(kind)
        except ValueError:
            event_kind = None
        if event_kind is None or event_kind in OUTBOUND_KINDS:
            raise UnknownEventKind(
                f"unknown event kind: {kind}", competitor_id=competitor_id
            )

        if comp.terminal:
            logger.debug(
                f"Competitor {comp.id} is already "
                f"{'finished' if comp.finished else 'disqualified'}; "
                f"accepting {event_kind.name} anyway"
            )

        parameter = (parameter or "").strip()

        if event_kind == EventKind.REGISTRATION:
            self._handle_registration(comp, timestamp)
        elif event_kind == EventKind.START_TIME_SET:
            self._handle_start_time_set(comp, parameter, timestamp)
        elif event_kind == EventKind.ON_START_LINE:
            pass
        elif event_kind == EventKind.STARTED:
            self._handle_start(comp, t, timestamp)
        elif event_kind == EventKind.ON_FIRING_RANGE:
            self._handle_firing_range_entry(comp, parameter, timestamp)
        elif event_kind == EventKind.SHOT:
            self._handle_shot(comp, parameter, timestamp)
        elif event_kind == EventKind.LEFT_FIRING_RANGE:
            self._handle_range_exit(comp, timestamp)
        elif event_kind == EventKind.ENTERED_PENALTY:
            self._handle_penalty_entry(comp, timestamp)
        elif event_kind == EventKind.LEFT_PENALTY:
            self._handle_penalty_exit(comp, timestamp)
        elif event_kind == EventKind.LAP_COMPLETED:
            self._handle_lap_completion(comp, t, timestamp)
        elif event_kind == EventKind.CANNOT_CONTINUE:
            self.disqualify(comp, f"NotFinished: {parameter}", timestamp)

        if comp.first_event is None:
            comp.first_event = t
        comp.last_event = t
        comp.events_count += 1

    def get_competitor(self, competitor_id: int) -> Competitor:
        """Return the competitor record, creating it on first reference."""
        comp = self.competitors.get(competitor_id)
        if comp is None:
            comp = Competitor(id=competitor_id)
            self.competitors[competitor_id] = comp
        return comp

    # ------------------------------------------------------------------ #
    # Registration & start
    # ------------------------------------------------------------------ #

    def _handle_registration(self, comp: Competitor, timestamp: str) -> None:
        if comp.registered:
            raise AlreadyRegistered(
                f"The competitor({comp.id}) is already registered", competitor_id=comp.id
            )
        comp.registered = True
        self._emit(timestamp, f"The competitor({comp.id}) registered")

    def _handle_start_time_set(self, comp: Competitor, parameter: str, timestamp: str) -> None:
        scheduled = parse_clock(parameter)
        comp.scheduled_start = scheduled
        self._emit(
            timestamp,
            f"The start time for the competitor({comp.id}) was set by a draw to "
            f"{format_clock(scheduled)}",
        )

    def _handle_start(self, comp: Competitor, t: datetime, timestamp: str) -> None:
        comp.actual_start = t
        self._emit(timestamp, f"The competitor({comp.id}) has started")

        # Without a draw the official race start is the reference
        scheduled = comp.scheduled_start or self.config.official_start
        max_allowed_start = scheduled + self.config.max_start_delta
        if t > max_allowed_start:
            self.disqualify(
                comp,
                f"late start (allowed until {format_clock(max_allowed_start)})",
                timestamp,
            )

    # ------------------------------------------------------------------ #
    # Shooting & range
    # ------------------------------------------------------------------ #

    def shooting_lap(self, comp: Competitor) -> int:
        """Lap index used to file the competitor's shots."""
        if self.lap_tracking == "race":
            return self.current_lap
        return comp.laps_completed

    def _handle_firing_range_entry(self, comp: Competitor, parameter: str, timestamp: str) -> None:
        try:
            range_num = int(parameter, 10)
        except ValueError:
            raise InvalidRangeNumber(
                f"invalid firing range number: {parameter!r}", competitor_id=comp.id
            )
        if range_num < 1 or range_num > self.config.firing_lines:
            raise InvalidRangeNumber(
                f"invalid firing range number: {range_num}", competitor_id=comp.id
            )

        lap = self.shooting_lap(comp)
        # Laps without a range visit stay as empty entries
        while len(comp.shooting_stats) < lap:
            comp.shooting_stats.append([])
        if len(comp.shooting_stats) == lap:
            comp.shooting_stats.append([[] for _ in range(self.config.firing_lines)])
        elif not comp.shooting_stats[lap]:
            comp.shooting_stats[lap] = [[] for _ in range(self.config.firing_lines)]
        self._emit(timestamp, f"The competitor({comp.id}) is on the firing range({range_num})")

    def _current_range_line(self, comp: Competitor) -> List[bool] | None:
        lap = self.shooting_lap(comp)
        if lap >= len(comp.shooting_stats):
            return None
        lines = comp.shooting_stats[lap]
        if not lines:
            return None
        # Shots are filed on the first line of the lap regardless of range number
        return lines[0]

    def _handle_shot(self, comp: Competitor, target: str, timestamp: str) -> None:
        lap = self.shooting_lap(comp)
        shots = self._current_range_line(comp)
        if shots is None:
            raise InvalidLapIndex(f"no firing range entry for lap {lap}", competitor_id=comp.id)

        hit = bool(
            self.hit_policy(
                ShotContext(
                    competitor_id=comp.id,
                    lap=lap,
                    firing_line=0,
                    shot_index=len(shots),
                    target=target,
                )
            )
        )
        shots.append(hit)

        if hit:
            self._emit(timestamp, f"The target({target}) has been hit by competitor({comp.id})")
        else:
            comp.penalty_laps += 1
            logger.debug(f"Competitor {comp.id} missed target {target} on lap {lap}")

    def _handle_range_exit(self, comp: Competitor, timestamp: str) -> None:
        shots = self._current_range_line(comp)
        if shots is None:
            raise InvalidRangeNumber(
                f"no firing range entry for lap {self.shooting_lap(comp)}",
                competitor_id=comp.id,
            )

        misses = SHOTS_PER_RANGE - sum(1 for hit in shots if hit)
        if misses > 0:
            comp.penalty_laps += misses
            self._emit(timestamp, f"The competitor({comp.id}) left the firing range")

    # ------------------------------------------------------------------ #
    # Penalty loop
    # ------------------------------------------------------------------ #

    def _handle_penalty_entry(self, comp: Competitor, timestamp: str) -> None:
        if comp.penalty_laps <= 0:
            raise NoPenaltyOwed(
                f"The competitor({comp.id}) has no penalty laps", competitor_id=comp.id
            )
        self._emit(timestamp, f"The competitor({comp.id}) entered the penalty laps")

    def _handle_penalty_exit(self, comp: Competitor, timestamp: str) -> None:
        if comp.penalty_laps <= 0:
            raise NoPenaltyOwed(
                f"The competitor({comp.id}) has no penalty laps", competitor_id=comp.id
            )
        comp.penalty_laps -= 1
        self._emit(timestamp, f"The competitor({comp.id}) left the penalty laps")

    # ------------------------------------------------------------------ #
    # Laps, finish, disqualification
    # ------------------------------------------------------------------ #

    def _handle_lap_completion(self, comp: Competitor, t: datetime, timestamp: str) -> None:
        comp.laps_completed += 1
        if comp.laps_completed > self.current_lap:
            self.current_lap = comp.laps_completed

        self._emit(timestamp, f"The competitor({comp.id}) ended the main lap")

        if comp.laps_completed >= self.config.laps and comp.penalty_laps == 0:
            self._finish(comp, t, timestamp)

    def _finish(self, comp: Competitor, t: datetime, timestamp: str) -> None:
        comp.finished = True
        comp.finished_at = t
        self._emit_outcome(timestamp, EventKind.FINISHED, comp.id)

    def disqualify(self, comp: Competitor, reason: str, timestamp: str) -> None:
        """Mark the competitor disqualified and emit the Disqualified event."""
        comp.disqualified = True
        comp.disqualified_reason = reason
        self._emit_outcome(timestamp, EventKind.DISQUALIFIED, comp.id, reason)

    # ------------------------------------------------------------------ #
    # Sink
    # ------------------------------------------------------------------ #

    def _emit_outcome(
        self, timestamp: str, kind: EventKind, competitor_id: int, reason: str = ""
    ) -> None:
        message = f"{int(kind)} {competitor_id}"
        if reason:
            message += f" {reason}"
        self._emit(timestamp, message)

    def _emit(self, timestamp: str, message: str) -> None:
        try:
            self.sink.log_event(timestamp, message)
        except Exception:
            logger.exception(f"Event sink failed for [{timestamp}] {message}")
