"""
Race configuration schema using Pydantic v2
Validates race parameters and clock/duration text used by the feed
"""

import logging
import re
from datetime import datetime, timedelta
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigError, InvalidTimestamp

logger = logging.getLogger(__name__)

# ==================== CLOCK HELPERS ====================

# Clock values carry no date; every parsed time lands on this day so that
# start windows can be computed with plain datetime arithmetic.
CLOCK_EPOCH = datetime(1900, 1, 1)

_CLOCK_RE = re.compile(r"^(\d{1,2}):(\d{2}):(\d{2})\.(\d{3})$")
_DURATION_RE = re.compile(r"^(\d{1,2}):(\d{2}):(\d{2})(?:\.(\d{3}))?$")


def parse_clock(text: str) -> datetime:
    """Parse ``hh:mm:ss.mmm`` into a datetime on ``CLOCK_EPOCH``.

    Raises:
        InvalidTimestamp: if the text is not a valid time of day
    """
    match = _CLOCK_RE.match((text or "").strip())
    if not match:
        raise InvalidTimestamp(f"invalid time format: {text!r}")
    hours, minutes, seconds, millis = (int(part) for part in match.groups())
    try:
        return CLOCK_EPOCH.replace(
            hour=hours, minute=minutes, second=seconds, microsecond=millis * 1000
        )
    except ValueError:
        raise InvalidTimestamp(f"invalid time of day: {text!r}")


def format_clock(value: datetime) -> str:
    """Render a clock value as ``hh:mm:ss.mmm``."""
    return f"{value:%H:%M:%S}.{value.microsecond // 1000:03d}"


def parse_duration(text: str) -> timedelta:
    """Parse ``hh:mm:ss`` (optionally ``.mmm``) into a timedelta."""
    match = _DURATION_RE.match((text or "").strip())
    if not match:
        raise ValueError(f"duration must be hh:mm:ss, got {text!r}")
    hours, minutes, seconds = (int(part) for part in match.groups()[:3])
    millis = int(match.group(4) or 0)
    if hours > 23 or minutes > 59 or seconds > 59:
        raise ValueError(f"duration out of range: {text!r}")
    return timedelta(hours=hours, minutes=minutes, seconds=seconds, milliseconds=millis)


# ==================== CONFIG SCHEMA ====================


class RaceConfig(BaseModel):
    """Immutable race parameters, loaded once before any event is processed"""

    laps: int = Field(..., ge=0, description="Number of main laps")
    lap_length: int = Field(0, alias="lapLen", ge=0, description="Main lap length (m)")
    penalty_length: int = Field(
        0, alias="penaltyLen", ge=0, description="Penalty loop length (m)"
    )
    firing_lines: int = Field(
        0, alias="firingLines", ge=0, description="Number of firing lines"
    )
    start: str = Field(..., description="Official start time (hh:mm:ss.mmm)")
    start_delta: str = Field(
        ..., alias="startDelta", description="Maximum start delay (hh:mm:ss)"
    )

    @field_validator("start")
    @classmethod
    def validate_start(cls, v: str) -> str:
        """Validate the official start and normalize it to hh:mm:ss.mmm"""
        try:
            return format_clock(parse_clock(v))
        except InvalidTimestamp as exc:
            raise ValueError(f"start must be hh:mm:ss.mmm ({exc.message})")

    @field_validator("start_delta")
    @classmethod
    def validate_start_delta(cls, v: str) -> str:
        """Validate start window format (hh:mm:ss)"""
        v = v.strip()
        parse_duration(v)
        return v

    @property
    def official_start(self) -> datetime:
        return parse_clock(self.start)

    @property
    def max_start_delta(self) -> timedelta:
        return parse_duration(self.start_delta)

    model_config = ConfigDict(populate_by_name=True, frozen=True)


def load_config(path: str | Path) -> RaceConfig:
    """
    Read and validate a JSON race configuration file

    Returns:
        RaceConfig: Validated configuration

    Raises:
        ConfigError: If the file cannot be read or fails validation
    """
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        logger.warning(f"Cannot read race config {path}: {e}")
        raise ConfigError(f"cannot read config {path}: {e}") from e

    try:
        config = RaceConfig.model_validate_json(raw)
    except ValidationError as e:
        logger.warning(f"Race config validation failed: {e}")
        raise ConfigError(f"invalid config {path}: {e}") from e

    logger.debug(
        f"Loaded race config: {config.laps} laps, {config.firing_lines} firing lines, "
        f"start {config.start} +{config.start_delta}"
    )
    return config


# ==================== EXPORT ====================

__all__ = [
    "CLOCK_EPOCH",
    "RaceConfig",
    "format_clock",
    "load_config",
    "parse_clock",
    "parse_duration",
]
