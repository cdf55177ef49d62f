"""Per-competitor race outcome summary.

Status precedence: Disqualified > Finished > NotStarted > NotFinished.
Rows are ordered by competitor id; no ranking is applied.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Literal

from .race import RaceSystem
from .types import Competitor


ResultStatus = Literal["Finished", "Disqualified", "NotStarted", "NotFinished"]


@dataclass(frozen=True)
class CompetitorResult:
    competitor_id: int
    status: ResultStatus
    # Finish time minus scheduled start; None unless finished
    total_time: timedelta | None
    laps_completed: int
    penalty_laps: int
    hits: int
    shots: int
    reason: str | None = None


def _status(comp: Competitor) -> ResultStatus:
    if comp.disqualified:
        return "Disqualified"
    if comp.finished:
        return "Finished"
    if comp.actual_start is None:
        return "NotStarted"
    return "NotFinished"


def _total_time(comp: Competitor) -> timedelta | None:
    if not comp.finished or comp.finished_at is None:
        return None
    reference = comp.scheduled_start or comp.actual_start
    if reference is None:
        return None
    return comp.finished_at - reference


def competitor_result(comp: Competitor) -> CompetitorResult:
    return CompetitorResult(
        competitor_id=comp.id,
        status=_status(comp),
        total_time=_total_time(comp),
        laps_completed=comp.laps_completed,
        penalty_laps=comp.penalty_laps,
        hits=comp.hits(),
        shots=comp.shots(),
        reason=comp.disqualified_reason,
    )


def summarize(system: RaceSystem) -> tuple[CompetitorResult, ...]:
    return tuple(
        competitor_result(system.competitors[cid]) for cid in sorted(system.competitors)
    )
