"""
Timing Classifier
Classifies a taken dose as on time, late or early against its scheduled time
"""

import math
import re
from dataclasses import dataclass
from datetime import datetime, time
from typing import Any, Dict, Tuple, Union

from config import policy
from models import TimingStatus
from errors import InvalidScheduledTimeError


_TIME_OF_DAY_RE = re.compile(policy.TIME_OF_DAY_PATTERN)


@dataclass(frozen=True)
class TimingResult:
    """Classification of one taken dose"""
    status: TimingStatus
    minutes: int  # positive when late, negative when early

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "minutes": self.minutes
        }


def parse_time_of_day(value: str) -> Tuple[int, int]:
    """
    Parse an "HH:MM" scheduled time.

    Raises:
        InvalidScheduledTimeError: if the value is not a 24h time of day
    """
    if not isinstance(value, str):
        raise InvalidScheduledTimeError(value)

    match = _TIME_OF_DAY_RE.match(value.strip())
    if not match:
        raise InvalidScheduledTimeError(value)

    return int(match.group(1)), int(match.group(2))


def format_time_of_day(hour: int, minute: int) -> str:
    return f"{hour:02d}:{minute:02d}"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def classify_timing(
    scheduled: Union[str, time, Tuple[int, int]],
    taken_at: datetime,
    window_minutes: int = policy.ON_TIME_WINDOW_MINUTES
) -> TimingResult:
    """
    Compare a taken timestamp to the scheduled time of day on the same date.

    The offset is rounded to the nearest minute. Offsets beyond the window
    are late (positive) or early (negative); the window edges are on time.
    """
    if isinstance(scheduled, str):
        hour, minute = parse_time_of_day(scheduled)
    elif isinstance(scheduled, time):
        hour, minute = scheduled.hour, scheduled.minute
    else:
        hour, minute = scheduled

    scheduled_at = taken_at.replace(hour=hour, minute=minute, second=0, microsecond=0)
    minutes = _round_half_up((taken_at - scheduled_at).total_seconds() / 60)

    if minutes > window_minutes:
        status = TimingStatus.LATE
    elif minutes < -window_minutes:
        status = TimingStatus.EARLY
    else:
        status = TimingStatus.ON_TIME

    return TimingResult(status=status, minutes=minutes)


def describe_timing(result: TimingResult) -> str:
    """Short text used in the taken confirmation"""
    if result.status == TimingStatus.LATE:
        return f"taken {result.minutes} min late"
    if result.status == TimingStatus.EARLY:
        return f"taken {abs(result.minutes)} min early"
    return "taken on time"
