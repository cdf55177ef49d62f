from .errors import (
    AlreadyRegistered,
    ConfigError,
    InvalidLapIndex,
    InvalidRangeNumber,
    InvalidTimestamp,
    NoPenaltyOwed,
    RaceError,
    UnknownEventKind,
)
from .feed import FeedError, FeedReport, parse_event_line, replay, replay_file
from .race import SHOTS_PER_RANGE, RaceSystem
from .results import CompetitorResult, competitor_result, summarize
from .sinks import BufferSink, ConsoleSink, LoggingSink
from .types import (
    Competitor,
    EventKind,
    EventRecord,
    EventSink,
    HitPolicy,
    ShotContext,
    always_hit,
)
from .validation import RaceConfig, format_clock, load_config, parse_clock, parse_duration

__all__ = [
    "AlreadyRegistered",
    "ConfigError",
    "InvalidLapIndex",
    "InvalidRangeNumber",
    "InvalidTimestamp",
    "NoPenaltyOwed",
    "RaceError",
    "UnknownEventKind",
    "FeedError",
    "FeedReport",
    "parse_event_line",
    "replay",
    "replay_file",
    "SHOTS_PER_RANGE",
    "RaceSystem",
    "CompetitorResult",
    "competitor_result",
    "summarize",
    "BufferSink",
    "ConsoleSink",
    "LoggingSink",
    "Competitor",
    "EventKind",
    "EventRecord",
    "EventSink",
    "HitPolicy",
    "ShotContext",
    "always_hit",
    "RaceConfig",
    "format_clock",
    "load_config",
    "parse_clock",
    "parse_duration",
]
