"""Event feed reader.

Decodes ``[hh:mm:ss.mmm] <eventKind> <competitorId> [parameter...]`` lines and
replays them, in order, through a RaceSystem. Malformed lines are skipped;
rejected events are logged and collected, never fatal.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List

from .errors import RaceError
from .race import RaceSystem
from .types import EventRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeedError:
    line_number: int
    record: EventRecord
    error: RaceError


@dataclass
class FeedReport:
    """Outcome of replaying a feed."""

    processed: int = 0
    skipped: int = 0
    errors: List[FeedError] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.errors)


def _parse_int(text: str) -> int | None:
    try:
        return int(text, 10)
    except ValueError:
        return None


def parse_event_line(line: str) -> EventRecord | None:
    """Split a feed line into an EventRecord.

    Returns None for lines without a bracketed timestamp or with fewer than two
    fields after it. A non-numeric competitor id also skips the line rather
    than being read as competitor 0, so garbage never lands on a real record.
    A non-numeric event kind is kept as text so that processing reports it as
    unknown.
    """
    line = line.strip()
    head, sep, data = line.partition("] ")
    if not sep or not head.startswith("["):
        return None

    parts = data.split()
    if len(parts) < 2:
        return None

    competitor_id = _parse_int(parts[1])
    if competitor_id is None:
        logger.debug(f"Skipping line with non-numeric competitor id: {line!r}")
        return None

    raw_kind = parts[0]
    kind = _parse_int(raw_kind)
    return EventRecord(
        timestamp=head[1:],
        kind=kind if kind is not None else raw_kind,
        competitor_id=competitor_id,
        parameter=" ".join(parts[2:]),
    )


def replay(system: RaceSystem, lines: Iterable[str]) -> FeedReport:
    """Feed every decodable line to ``system.process_event`` in order."""
    report = FeedReport()
    for line_number, line in enumerate(lines, start=1):
        record = parse_event_line(line)
        if record is None:
            report.skipped += 1
            continue
        try:
            system.process_event(
                record.timestamp, record.kind, record.competitor_id, record.parameter
            )
        except RaceError as exc:
            logger.warning(f"Error processing event on line {line_number}: {exc}")
            report.errors.append(FeedError(line_number=line_number, record=record, error=exc))
            continue
        report.processed += 1
    return report


def replay_file(system: RaceSystem, path: str | Path) -> FeedReport:
    """Replay an events file. Open/read failures propagate as OSError."""
    with open(path, encoding="utf-8") as fh:
        report = replay(system, fh)
    logger.info(
        f"Replayed {path}: {report.processed} processed, "
        f"{report.failed} rejected, {report.skipped} skipped"
    )
    return report
