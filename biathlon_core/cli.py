"""Command-line entry point: replay an events file against a race config."""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from .errors import ConfigError
from .feed import replay_file
from .race import RaceSystem
from .results import CompetitorResult, summarize
from .sinks import ConsoleSink, LoggingSink
from .validation import load_config

logger = logging.getLogger("biathlon_core")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="biathlon-race",
        description="Replay a biathlon race event feed and print the race log.",
    )
    ap.add_argument("config", help="Race configuration JSON file")
    ap.add_argument("events", help="Events file, one [hh:mm:ss.mmm] line per event")
    ap.add_argument(
        "--lap-tracking",
        choices=("competitor", "race"),
        default="competitor",
        help="Lap used to file shots: the competitor's own, or the race's furthest",
    )
    ap.add_argument(
        "--log-events",
        action="store_true",
        help="Route the race log through logging instead of stdout",
    )
    ap.add_argument("--summary", action="store_true", help="Print per-competitor outcome")
    ap.add_argument("--log-level", default="WARNING", help="Diagnostics log level")
    return ap


def summary_line(row: CompetitorResult) -> str:
    total = "" if row.total_time is None else f" {row.total_time}"
    reason = f" ({row.reason})" if row.reason else ""
    return (
        f"{row.competitor_id} {row.status}{total} laps={row.laps_completed} "
        f"hits={row.hits}/{row.shots} penalty={row.penalty_laps}{reason}"
    )


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config)
    except ConfigError as e:
        logger.error(f"Race system init failed: {e}")
        return 1

    sink = LoggingSink() if args.log_events else ConsoleSink()
    system = RaceSystem(config, sink=sink, lap_tracking=args.lap_tracking)
    try:
        report = replay_file(system, args.events)
    except OSError as e:
        logger.error(f"Cannot process events file {args.events}: {e}")
        return 1

    for failure in report.errors:
        print(f"Error processing event: {failure.error}", file=sys.stderr)

    if args.summary:
        for row in summarize(system):
            print(summary_line(row))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
